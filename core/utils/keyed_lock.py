"""
키별 비동기 락

같은 키에 대한 작업은 순차 실행, 다른 키는 동시 실행.
원장에서는 (theater_id, product_id) 단위 직렬화에 사용.

주의: 단일 프로세스(이벤트 루프) 내에서만 유효. 다중 프로세스 배포 시에는
DB 트랜잭션 경계 또는 단일 워커로 직렬화해야 함.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class KeyedLock:
    """키별 asyncio.Lock 레지스트리

    대기자가 없어진 락은 자동 정리되어 키 수만큼 메모리가 쌓이지 않음.

    사용 예시:
    ```python
    locks = KeyedLock()

    async with locks.hold(("theater-1", "product-1")):
        ...
    ```
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._holders: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, key: Hashable) -> bool:
        """해당 키가 현재 잠겨 있는지 여부"""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """키 락 획득 컨텍스트 매니저"""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]
