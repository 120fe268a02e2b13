"""
Transfer Provider - передача байтов пакета обновления

Контракт: fetch(url) возвращает ленивый конечный асинхронный поток
чанков. Поток отменяется через aclose(), после чего ресурсы соединения
освобождаются.
"""

import asyncio
import logging
from abc import abstractmethod
from typing import Dict, Any, Optional, AsyncIterator

import aiohttp

from ....errors import TransferError, ValidationError
from ....integrations.core.universal_provider_interface import UniversalProviderInterface

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class TransferProvider(UniversalProviderInterface):
    """Базовый провайдер передачи"""

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        super().__init__(name=name, config=config)
        self.chunk_size = int(config.get('chunk_size', DEFAULT_CHUNK_SIZE))

    async def initialize(self) -> bool:
        self.is_initialized = True
        return True

    @abstractmethod
    def fetch(self, url: str) -> AsyncIterator[bytes]:
        """
        Поток чанков по URL

        Raises:
            TransferError: Ошибка сети или источника
        """


class HttpTransferProvider(TransferProvider):
    """Скачивание по HTTP(S) через aiohttp"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(name="http_transfer", config=config)
        self.timeout = float(self.config.get('transfer_timeout', 300))
        self.require_https = bool(self.config.get('require_https', False))

    def _check_url(self, url: str):
        if not isinstance(url, str) or not url.startswith(('http://', 'https://')):
            raise ValidationError("Unsupported download URL", {"url": url})
        if self.require_https and not url.startswith('https://'):
            raise ValidationError("Download URL must use HTTPS", {"url": url})

    async def fetch(self, url: str) -> AsyncIterator[bytes]:
        self._check_url(url)
        logger.info(f"⬇️ Скачивание: {url}")

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        received = 0
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        self.report_error(f"HTTP {response.status}")
                        raise TransferError(
                            f"HTTP {response.status}: {response.reason}",
                            {"url": url, "status": response.status}
                        )

                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        received += len(chunk)
                        yield chunk

            self.report_success()
            logger.info(f"✅ Скачано {received} байт: {url}")

        except aiohttp.ClientError as e:
            logger.error(f"❌ Ошибка HTTP запроса {url}: {e}")
            self.report_error(str(e))
            raise TransferError(f"HTTP transfer failed: {e}", {"url": url}) from e
        except asyncio.TimeoutError as e:
            logger.error(f"❌ Таймаут скачивания {url}")
            self.report_error("timeout")
            raise TransferError("HTTP transfer timed out", {"url": url}) from e


class MemoryTransferProvider(TransferProvider):
    """Передача из объектов в памяти (тесты, локальные пакеты)"""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None,
                 config: Optional[Dict[str, Any]] = None):
        super().__init__(name="memory_transfer", config=config)
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.open_streams = 0

    def put(self, url: str, data: bytes):
        self.objects[url] = bytes(data)

    async def fetch(self, url: str) -> AsyncIterator[bytes]:
        if url not in self.objects:
            self.report_error(f"object not found: {url}")
            raise TransferError("Object not found", {"url": url})

        data = self.objects[url]
        self.open_streams += 1
        try:
            for offset in range(0, len(data), self.chunk_size):
                # Точка переключения: читатели и отмена видят промежуточный прогресс
                await asyncio.sleep(0)
                yield data[offset:offset + self.chunk_size]
            self.report_success()
        finally:
            self.open_streams -= 1
