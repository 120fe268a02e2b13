"""
Update Session Manager - машина состояний сессий обновления ОС

    downloading -> verifying -> installing -> completed
    failed      - из любого нетерминального состояния
    cancelled   - только из downloading и verifying

Версия ОС в DeviceRegistry меняется только при переходе в completed,
ровно один раз на сессию, в той же критической секции, где сессия
помечается завершенной.
"""

import asyncio
import dataclasses
import logging
import time
from typing import Dict, Any, Optional, List, Set

from ....errors import (
    EarthOSError, ConflictError, NotFoundError, InvalidVersion,
    ChecksumMismatch, TransferError, InternalError
)
from ....integrations.core.universal_module_interface import UniversalModuleInterface, ModuleStatus
from ...device_registry.core.device_registry import DeviceRegistry
from ...identity.core.identity_generator import IdentityGenerator
from ...integrity.core.integrity_checker import IntegrityChecker
from ..config import UpdateConfig
from ..providers.catalog_provider import CatalogProvider
from ..providers.installer_provider import InstallerProvider, NoopInstallerProvider
from ..providers.transfer_provider import TransferProvider
from ..providers.version_provider import VersionProvider
from .types import (
    UpdateState, UpdateSession, UpdatePackage, UpdateCheckResult, UpdateMetrics,
    SessionKind, CANCELLABLE_STATES
)

logger = logging.getLogger(__name__)


class UpdateSessionManager(UniversalModuleInterface):
    """Координатор сессий обновления устройств"""

    def __init__(self, device_registry: DeviceRegistry,
                 catalog: CatalogProvider,
                 transfer: TransferProvider,
                 installer: Optional[InstallerProvider] = None,
                 integrity: Optional[IntegrityChecker] = None,
                 identity: Optional[IdentityGenerator] = None,
                 version_provider: Optional[VersionProvider] = None,
                 config: Optional[UpdateConfig] = None):
        self.update_config = config or UpdateConfig()
        super().__init__(name="update", config=self.update_config.to_dict())

        self.device_registry = device_registry
        self.locks = device_registry.locks

        # Провайдеры
        self.catalog = catalog
        self.transfer = transfer
        self.installer = installer or NoopInstallerProvider()
        self.integrity = integrity or IntegrityChecker()
        self.identity = identity or IdentityGenerator()
        self.version_provider = version_provider or VersionProvider()

        # Сессии в порядке создания; завершенные остаются как история
        self._sessions: Dict[str, UpdateSession] = {}
        self._active_by_device: Dict[str, str] = {}
        self._packages: Dict[str, UpdatePackage] = {}
        self._running: Set[str] = set()
        self._tasks: Dict[str, asyncio.Task] = {}

        self.metrics = UpdateMetrics()

    # Жизненный цикл

    async def initialize(self) -> bool:
        """Инициализация модуля и провайдеров"""
        try:
            logger.info("🔧 Инициализация UpdateSessionManager...")
            self.set_status(ModuleStatus.INITIALIZING)

            if not self.update_config.is_valid():
                logger.error("❌ Неверная конфигурация Update Module")
                self.set_status(ModuleStatus.ERROR)
                return False

            if not self.device_registry.is_initialized:
                logger.error("❌ DeviceRegistry не инициализирован")
                self.set_status(ModuleStatus.ERROR)
                return False

            for provider in (self.catalog, self.transfer, self.installer):
                if not await provider.initialize():
                    logger.error(f"❌ Ошибка инициализации провайдера {provider.name}")
                    self.set_status(ModuleStatus.ERROR)
                    return False

            self.is_initialized = True
            self.set_status(ModuleStatus.READY)
            logger.info("✅ UpdateSessionManager инициализирован")
            return True

        except Exception as e:
            logger.error(f"❌ Ошибка инициализации UpdateSessionManager: {e}")
            self.set_status(ModuleStatus.ERROR)
            return False

    async def cleanup(self) -> bool:
        """Остановка фоновых сессий и провайдеров"""
        try:
            logger.info("🧹 Очистка ресурсов UpdateSessionManager...")

            tasks = list(self._tasks.values())
            for task in tasks:
                task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)

            for provider in (self.catalog, self.transfer, self.installer):
                await provider.cleanup()

            self.is_initialized = False
            self.set_status(ModuleStatus.STOPPED)
            logger.info("✅ Ресурсы UpdateSessionManager очищены")
            return True

        except Exception as e:
            logger.error(f"❌ Ошибка очистки ресурсов UpdateSessionManager: {e}")
            return False

    # Проверка обновлений

    async def check_for_updates(self, device_id: str) -> UpdateCheckResult:
        """
        Пакеты новее текущей версии устройства

        Returns:
            UpdateCheckResult: packages по возрастанию версии
        """
        self.ensure_initialized()

        device = await self.device_registry.get(device_id)
        packages = await self.catalog.list_packages()
        newer = [
            package for package in packages
            if self.version_provider.is_newer_version(device.os_version, package.version)
        ]

        return UpdateCheckResult(
            current_version=device.os_version,
            latest_version=newer[-1].version if newer else device.os_version,
            is_update_available=bool(newer),
            packages=newer
        )

    # Создание сессий

    async def create_session(self, device_id: str, target_version: str) -> UpdateSession:
        """
        Открытие сессии обновления на более новую версию

        Raises:
            InvalidVersion: Версия не semver или не новее текущей
            NotFoundError: Устройство или пакет не найдены
            ConflictError: У устройства уже есть активная сессия
        """
        return await self._open_session(device_id, target_version, SessionKind.UPDATE)

    async def rollback(self, device_id: str, target_version: str) -> UpdateSession:
        """
        Открытие сессии отката на ранее выпущенную версию

        Откат проходит тот же конвейер download -> verify -> install,
        прямой записи версии в реестр нет.

        Raises:
            InvalidVersion: Версия не semver или не старее текущей
        """
        return await self._open_session(device_id, target_version, SessionKind.ROLLBACK)

    async def _open_session(self, device_id: str, target_version: str, kind: SessionKind) -> UpdateSession:
        self.ensure_initialized()

        self.version_provider.parse_version(target_version)
        self.device_registry.require_device(device_id)
        package = await self.catalog.get_package(target_version)

        async with self.locks.hold(device_id):
            device = self.device_registry.require_device(device_id)

            active_id = self._active_by_device.get(device_id)
            if active_id is not None:
                logger.warning(f"⚠️ У устройства {device_id[:12]}... уже есть активная сессия")
                raise ConflictError(
                    "Update session already active",
                    {"device_id": device_id, "session_id": active_id}
                )

            order = self.version_provider.compare_versions(target_version, device.os_version)
            if kind is SessionKind.UPDATE and order <= 0:
                raise InvalidVersion(
                    "Target version must be newer than current",
                    {"current_version": device.os_version, "target_version": target_version}
                )
            if kind is SessionKind.ROLLBACK and order >= 0:
                raise InvalidVersion(
                    "Rollback target must be older than current",
                    {"current_version": device.os_version, "target_version": target_version}
                )

            now = time.time()
            session = UpdateSession(
                session_id=self.identity.new_session_id(),
                device_id=device_id,
                target_version=target_version,
                from_version=device.os_version,
                kind=kind,
                created_at=now,
                updated_at=now
            )
            self._sessions[session.session_id] = session
            self._active_by_device[device_id] = session.session_id
            self._packages[session.session_id] = package

        self.metrics.total_sessions += 1
        if kind is SessionKind.ROLLBACK:
            self.metrics.rollbacks += 1

        logger.info(
            f"🆕 Сессия {session.session_id[:8]} ({kind.value}): "
            f"{device_id[:12]}... {session.from_version} -> {target_version}"
        )
        return self._snapshot(session)

    # Выполнение

    async def start_update(self, device_id: str, target_version: str) -> UpdateSession:
        """Создание сессии обновления и запуск в фоне"""
        session = await self.create_session(device_id, target_version)
        self._spawn(session.session_id)
        return session

    async def start_rollback(self, device_id: str, target_version: str) -> UpdateSession:
        """Создание сессии отката и запуск в фоне"""
        session = await self.rollback(device_id, target_version)
        self._spawn(session.session_id)
        return session

    def _spawn(self, session_id: str):
        task = asyncio.create_task(self._run_in_background(session_id))
        self._tasks[session_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(session_id, None))

    async def _run_in_background(self, session_id: str):
        try:
            await self.run_session(session_id)
        except EarthOSError as e:
            # Ошибка уже записана в сессию и доступна через get_session
            logger.error(f"❌ Сессия {session_id[:8]} завершилась ошибкой {e.kind}: {e.message}")

    async def wait_for_session(self, session_id: str) -> UpdateSession:
        """Ожидание завершения фоновой сессии"""
        task = self._tasks.get(session_id)
        if task is not None:
            await task
        return self.get_session(session_id)

    async def run_session(self, session_id: str) -> UpdateSession:
        """
        Прогон сессии через download -> verify -> install -> commit

        Сбой передачи записывается как failed и не считается исключением
        для вызывающей стороны. Остальные ошибки записываются в сессию
        и пробрасываются.

        Returns:
            UpdateSession: Итоговое состояние сессии

        Raises:
            NotFoundError: Сессия не найдена
            ConflictError: Сессия уже выполняется
            ChecksumMismatch: Контрольная сумма не совпала
        """
        self.ensure_initialized()
        session = self._require_session(session_id)

        if session.state.is_terminal:
            return self._snapshot(session)
        if session_id in self._running or session.state is not UpdateState.DOWNLOADING:
            raise ConflictError("Update session already running", {"session_id": session_id})

        package = self._packages[session_id]
        self._running.add(session_id)
        try:
            payload = await self._download(session, package)
            if payload is not None and await self._verify(session, package, payload):
                await self._install_and_commit(session, package, payload)

        except asyncio.CancelledError:
            if session.is_active:
                self._finish(session, UpdateState.FAILED, InternalError("Update task cancelled"))
            raise
        except EarthOSError as e:
            if session.is_active:
                self._finish(session, UpdateState.FAILED, e)
            raise
        except Exception as e:
            logger.error(f"❌ Неожиданная ошибка сессии {session_id[:8]}: {e}")
            if session.is_active:
                self._finish(session, UpdateState.FAILED, InternalError(str(e)))
            raise
        finally:
            self._running.discard(session_id)

        return self._snapshot(session)

    async def _download(self, session: UpdateSession, package: UpdatePackage) -> Optional[bytes]:
        """
        Фаза downloading

        Прогресс считается по фактически полученным байтам. Отмена
        проверяется на каждом чанке.

        Returns:
            bytes или None если сессия отменена или передача не удалась
        """
        buffer = bytearray()
        stream = self.transfer.fetch(package.download_url)
        try:
            async for chunk in stream:
                if session.state is not UpdateState.DOWNLOADING:
                    logger.info(f"⏹️ Скачивание остановлено, сессия {session.session_id[:8]} отменена")
                    return None

                buffer.extend(chunk)
                session.bytes_received = len(buffer)
                self._advance_download_progress(session, package)

        except TransferError as e:
            logger.error(f"❌ Сбой передачи в сессии {session.session_id[:8]}: {e.message}")
            async with self.locks.hold(session.device_id):
                if session.state is UpdateState.DOWNLOADING:
                    self._finish(session, UpdateState.FAILED, e)
            return None
        finally:
            await stream.aclose()

        self.metrics.bytes_downloaded += len(buffer)

        if not await self._transition(session, UpdateState.DOWNLOADING, UpdateState.VERIFYING, progress=100):
            return None
        return bytes(buffer)

    def _advance_download_progress(self, session: UpdateSession, package: UpdatePackage):
        """Прогресс растет монотонно; 100 только при переходе в verifying"""
        if package.size <= 0:
            return
        progress = min(99, session.bytes_received * 100 // package.size)
        if progress > session.progress:
            session.progress = progress
            session.updated_at = time.time()

    async def _verify(self, session: UpdateSession, package: UpdatePackage, payload: bytes) -> bool:
        """
        Фаза verifying

        Raises:
            ChecksumMismatch: Payload отброшен, сессия переведена в failed
        """
        matches = await asyncio.to_thread(self.integrity.verify, payload, package.checksum)

        async with self.locks.hold(session.device_id):
            if session.state is not UpdateState.VERIFYING:
                logger.info(f"⏹️ Проверка прервана, сессия {session.session_id[:8]} отменена")
                return False

            if matches:
                session.state = UpdateState.INSTALLING
                session.progress = self.update_config.install_progress_start
                session.updated_at = time.time()
                logger.info(f"✅ Пакет {package.version} проверен, установка...")
                return True

            error = ChecksumMismatch(
                "Payload checksum does not match package",
                {"session_id": session.session_id, "version": package.version}
            )
            self._finish(session, UpdateState.FAILED, error)

        raise error

    async def _install_and_commit(self, session: UpdateSession, package: UpdatePackage, payload: bytes):
        """Фаза installing и единственная запись версии в реестр"""
        await self.installer.install(session.device_id, package, payload)
        build_number = self.version_provider.version_to_build(package.version)

        async with self.locks.hold(session.device_id):
            if session.state is not UpdateState.INSTALLING:
                raise InternalError("Session left installing state unexpectedly",
                                    {"session_id": session.session_id})

            await self.device_registry.set_version(session.device_id, package.version, build_number)
            session.progress = 100
            self._finish(session, UpdateState.COMPLETED)

        logger.info(
            f"🎉 Сессия {session.session_id[:8]} завершена: "
            f"{session.device_id[:12]}... теперь {package.version}"
        )

    async def _transition(self, session: UpdateSession, expected: UpdateState,
                          new_state: UpdateState, progress: Optional[int] = None) -> bool:
        async with self.locks.hold(session.device_id):
            if session.state is not expected:
                return False
            session.state = new_state
            if progress is not None:
                session.progress = progress
            session.updated_at = time.time()
            return True

    def _finish(self, session: UpdateSession, state: UpdateState, error: Optional[EarthOSError] = None):
        """Перевод в терминальное состояние (под блокировкой устройства или без await)"""
        session.state = state
        session.updated_at = time.time()
        if error is not None:
            session.error = type(error).__name__
            session.error_detail = error.message

        if self._active_by_device.get(session.device_id) == session.session_id:
            del self._active_by_device[session.device_id]
        self._packages.pop(session.session_id, None)

        if state is UpdateState.COMPLETED:
            self.metrics.completed_sessions += 1
        elif state is UpdateState.FAILED:
            self.metrics.failed_sessions += 1
            logger.error(f"❌ Сессия {session.session_id[:8]} failed: {session.error} {session.error_detail or ''}")
        elif state is UpdateState.CANCELLED:
            self.metrics.cancelled_sessions += 1

        self._trim_history()

    def _trim_history(self):
        limit = self.update_config.max_session_history
        terminal = [sid for sid, s in self._sessions.items() if s.state.is_terminal]
        for sid in terminal[:max(0, len(terminal) - limit)]:
            del self._sessions[sid]

    # Отмена

    async def cancel_session(self, session_id: str) -> UpdateSession:
        """
        Отмена сессии клиентом

        Допустима только в downloading и verifying. Фоновый цикл увидит
        отмену на ближайшей контрольной точке и освободит ресурсы передачи.

        Raises:
            NotFoundError: Сессия не найдена
            ConflictError: Сессию в текущем состоянии отменить нельзя
        """
        self.ensure_initialized()
        session = self._require_session(session_id)

        async with self.locks.hold(session.device_id):
            if session.state not in CANCELLABLE_STATES:
                raise ConflictError(
                    f"Session cannot be cancelled in state {session.state.value}",
                    {"session_id": session_id, "state": session.state.value}
                )
            self._finish(session, UpdateState.CANCELLED)

        logger.info(f"🛑 Сессия {session_id[:8]} отменена")
        return self._snapshot(session)

    # Чтение (без блокировок)

    def get_session(self, session_id: str) -> UpdateSession:
        """Снимок состояния сессии"""
        return self._snapshot(self._require_session(session_id))

    def get_active_session(self, device_id: str) -> Optional[UpdateSession]:
        session_id = self._active_by_device.get(device_id)
        if session_id is None:
            return None
        return self._snapshot(self._sessions[session_id])

    def list_sessions(self, device_id: str) -> List[UpdateSession]:
        """Сессии устройства в порядке создания"""
        return [self._snapshot(s) for s in self._sessions.values() if s.device_id == device_id]

    def _require_session(self, session_id: str) -> UpdateSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Session not found", {"session_id": session_id})
        return session

    @staticmethod
    def _snapshot(session: UpdateSession) -> UpdateSession:
        return dataclasses.replace(session)

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status["active_sessions"] = len(self._active_by_device)
        status["statistics"] = dataclasses.asdict(self.metrics)
        status["providers"] = {
            "catalog": self.catalog.get_status(),
            "transfer": self.transfer.get_status(),
            "installer": self.installer.get_status()
        }
        return status
