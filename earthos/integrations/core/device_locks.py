"""
Блокировки по deviceId

Все изменения состояния одного устройства (конфигурация, набор приложений,
активная сессия обновления) выполняются под его собственной блокировкой.
Разные устройства друг друга не блокируют.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, AsyncIterator

logger = logging.getLogger(__name__)


class DeviceLock:
    """
    Блокировка одного устройства, повторно входимая для задачи-владельца

    Повторный вход нужен для коммита сессии: UpdateSessionManager держит
    блокировку устройства и вызывает DeviceRegistry.set_version, который
    берет ту же блокировку.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None
        self._depth = 0

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    async def acquire(self):
        task = asyncio.current_task()
        if task is not None and self._owner is task:
            self._depth += 1
            return
        await self._lock.acquire()
        self._owner = task
        self._depth = 1

    def release(self):
        if self._depth <= 0:
            raise RuntimeError("DeviceLock released too many times")
        self._depth -= 1
        if self._depth == 0:
            self._owner = None
            self._lock.release()


class DeviceLockManager:
    """Реестр блокировок, создаваемых лениво для каждого deviceId"""

    def __init__(self):
        self._locks: Dict[str, DeviceLock] = {}

    def get_lock(self, device_id: str) -> DeviceLock:
        lock = self._locks.get(device_id)
        if lock is None:
            lock = DeviceLock()
            self._locks[device_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, device_id: str) -> AsyncIterator[None]:
        """Критическая секция для устройства"""
        lock = self.get_lock(device_id)
        await lock.acquire()
        try:
            yield
        finally:
            lock.release()

    def discard(self, device_id: str):
        """Удаление блокировки удаленного устройства (если она свободна)"""
        lock = self._locks.get(device_id)
        if lock is not None and not lock.locked:
            del self._locks[device_id]

    def __len__(self) -> int:
        return len(self._locks)
