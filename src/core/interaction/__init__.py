"""상호작용 Core 패키지

공개 API:
- 모델: Interaction, InteractionType, InteractionCallbacks, InteractionRequest
- 공급원: InteractionSource와 도메인별 구현
- 집계기: InteractionAggregator
- 프레젠터: InteractionPresenter, RadialMenuController
"""

from src.core.interaction.models import (
    DEFAULT_TOOL,
    NPC_INTERACTION_TYPES,
    FarmActionResult,
    ForageResult,
    Interaction,
    InteractionCallbacks,
    InteractionRequest,
    InteractionType,
    PlacedItemAction,
    RadialMenuOption,
    ResourceResult,
    ScreenPoint,
    TransitionResult,
)
from src.core.interaction.sources import (
    NPC_INTERACT_EVENT,
    CobwebOverlay,
    CobwebSource,
    DailyResourceLedger,
    FarmAction,
    FarmPlots,
    FarmSource,
    Forageable,
    ForageSource,
    ForageTable,
    InteractionSource,
    MapTransition,
    NPCInteractionSource,
    NPCLocator,
    PlacedItem,
    PlacedItemProvider,
    PlacedItemSource,
    PlotState,
    TransitionSource,
    TransitionTable,
    WaterSource,
    WaterSources,
    farm_action_for,
)
from src.core.interaction.aggregator import InteractionAggregator
from src.core.interaction.presenter import (
    NOT_BLOCKED,
    ClickOutcome,
    InteractionPresenter,
    MenuKind,
    MenuView,
    PresenterState,
    ProximityOutcome,
    RadialMenuController,
    UIBlockers,
    project_to_screen,
)

__all__ = [
    # models
    "DEFAULT_TOOL",
    "NPC_INTERACTION_TYPES",
    "FarmActionResult",
    "ForageResult",
    "Interaction",
    "InteractionCallbacks",
    "InteractionRequest",
    "InteractionType",
    "PlacedItemAction",
    "RadialMenuOption",
    "ResourceResult",
    "ScreenPoint",
    "TransitionResult",
    # sources
    "NPC_INTERACT_EVENT",
    "CobwebOverlay",
    "CobwebSource",
    "DailyResourceLedger",
    "FarmAction",
    "FarmPlots",
    "FarmSource",
    "Forageable",
    "ForageSource",
    "ForageTable",
    "InteractionSource",
    "MapTransition",
    "NPCInteractionSource",
    "NPCLocator",
    "PlacedItem",
    "PlacedItemProvider",
    "PlacedItemSource",
    "PlotState",
    "TransitionSource",
    "TransitionTable",
    "WaterSource",
    "WaterSources",
    "farm_action_for",
    # aggregator
    "InteractionAggregator",
    # presenter
    "NOT_BLOCKED",
    "ClickOutcome",
    "InteractionPresenter",
    "MenuKind",
    "MenuView",
    "PresenterState",
    "ProximityOutcome",
    "RadialMenuController",
    "UIBlockers",
    "project_to_screen",
]
