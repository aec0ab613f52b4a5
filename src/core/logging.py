import logging
from typing import Any, Hashable, Set

_warned_keys: Set[Hashable] = set()


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def warn_once(logger: logging.Logger, key: Hashable, msg: str, *args: Any) -> bool:
    """같은 key로는 한 번만 경고. 실제로 기록했으면 True."""
    if key in _warned_keys:
        return False
    _warned_keys.add(key)
    logger.warning(msg, *args)
    return True


def reset_warnings() -> None:
    """warn_once 기록 초기화 (테스트용)"""
    _warned_keys.clear()
