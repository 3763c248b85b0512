"""
유틸리티 모듈

- keyed_lock: 키별 비동기 락
- timezone: 현지 시각 / 타임존 헬퍼
"""

from core.utils.keyed_lock import KeyedLock
from core.utils.timezone import get_zone, now_local, now_utc, to_local_naive

__all__ = [
    "KeyedLock",
    "get_zone",
    "now_local",
    "now_utc",
    "to_local_naive",
]
