"""이벤트 유형 상수

각 서비스/컴포넌트가 발행하는 이벤트 이름을 한 곳에 모은다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # dialogue
    DIALOGUE_STARTED = "dialogue_started"
    DIALOGUE_NODE_ENTERED = "dialogue_node_entered"
    DIALOGUE_ENDED = "dialogue_ended"

    # quest
    QUEST_STARTED = "quest_started"
    QUEST_STAGE_CHANGED = "quest_stage_changed"
    QUEST_COMPLETED = "quest_completed"

    # inventory / unlock
    ITEM_GIVEN = "item_given"
    FEATURE_UNLOCKED = "feature_unlocked"

    # friendship
    FRIENDSHIP_CHANGED = "friendship_changed"
    FRIENDSHIP_TIER_CHANGED = "friendship_tier_changed"

    # npc
    NPC_STATE_CHANGED = "npc_state_changed"

    # interaction / presenter
    INTERACTION_EXECUTED = "interaction_executed"
    MENU_OPENED = "menu_opened"
    MENU_CLOSED = "menu_closed"

    # shared world
    GLOBAL_EVENT_RECORDED = "global_event_recorded"
