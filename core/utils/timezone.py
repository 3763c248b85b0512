"""
타임존 유틸리티

내부 저장: 날짜(date)는 원장 현지 기준 | 로그/갱신 시각: UTC 원칙 준수를 위한 헬퍼 함수
유통기한 판정은 원장 현지 시각(naive)으로 비교한다.
"""

from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def get_zone(name: str) -> tzinfo:
    """IANA 타임존 이름 → tzinfo

    Args:
        name: 타임존 이름 (예: Asia/Kolkata)

    Returns:
        tzinfo

    Raises:
        ValueError: 알 수 없는 타임존
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"알 수 없는 타임존입니다: {name}") from e


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.
    """
    return datetime.now(timezone.utc)


def now_local(zone: tzinfo) -> datetime:
    """현재 현지 시각 (naive)

    유통기한 임계 시각(naive)과 직접 비교하기 위해 tzinfo 제거.

    Example:
        >>> now_local(get_zone("Asia/Kolkata")).tzinfo is None
        True
    """
    return datetime.now(zone).replace(tzinfo=None)


def to_local_naive(dt: datetime, zone: tzinfo) -> datetime:
    """임의 datetime → 현지 naive datetime

    naive 입력은 이미 현지 시각으로 간주.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(zone).replace(tzinfo=None)
