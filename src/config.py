"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # 상호작용 거리 (타일 단위)
    INTERACTION_RANGE: float = 2.0
    DEFAULT_INTERACTION_RADIUS: float = 1.5

    # NPC 팩토리 기본값
    DEFAULT_NPC_SCALE: float = 3.0
    NPC_FRAME_MS: int = 280
    PROXIMITY_RECOVERY_MARGIN: float = 1.5

    # 라디얼 메뉴 타이밍 (ms)
    HOVER_SELECT_DELAY_MS: int = 700
    HOVER_CONFIRM_DELAY_MS: int = 150
    CLICK_CONFIRM_DELAY_MS: int = 100

    # 화면 투영
    TILE_SIZE: int = 64
    VIEWPORT_WIDTH: int = 1280
    VIEWPORT_HEIGHT: int = 720
    NPC_MENU_OFFSET_Y: int = 50

    DIALOGUE_ENTRY_NODE: str = "greeting"

    # 시작 시 로드할 NPC 콘텐츠 (비우면 로드 안 함)
    NPC_DATA_PATH: str = "src/data/npcs.json"
    START_MAP_ID: str = "farm"


settings = Settings()
