"""
core/utils/timezone.py 테스트
"""

from datetime import datetime, timezone

import pytest

from core.utils.timezone import get_zone, now_local, now_utc, to_local_naive


class TestTimezone:
    """타임존 유틸리티 테스트"""

    def test_get_zone(self) -> None:
        zone = get_zone("Asia/Kolkata")

        assert datetime(2026, 1, 1, tzinfo=zone).utcoffset().total_seconds() == 5.5 * 3600

    def test_get_zone_unknown(self) -> None:
        with pytest.raises(ValueError):
            get_zone("Mars/Olympus_Mons")

    def test_now_utc_aware(self) -> None:
        assert now_utc().tzinfo is not None

    def test_now_local_naive(self) -> None:
        assert now_local(get_zone("Asia/Kolkata")).tzinfo is None

    def test_to_local_naive(self) -> None:
        """UTC 18:31 → IST 다음날 00:01"""
        utc = datetime(2026, 1, 31, 18, 31, tzinfo=timezone.utc)

        local = to_local_naive(utc, get_zone("Asia/Kolkata"))

        assert local == datetime(2026, 2, 1, 0, 1)
        assert local.tzinfo is None

    def test_to_local_naive_passthrough(self) -> None:
        """naive 입력은 그대로"""
        naive = datetime(2026, 1, 1, 12, 0)

        assert to_local_naive(naive, get_zone("Asia/Kolkata")) is naive
