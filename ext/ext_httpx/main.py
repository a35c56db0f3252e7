import httpx
from typing import override
from config.default import RegisterExtensionConfig, InstanceExtensionConfig
from loguru import logger


class HttpxConfig(RegisterExtensionConfig, InstanceExtensionConfig):
    """httpx 配置类，负责模型调用共享客户端的生命周期管理"""

    _client: httpx.AsyncClient | None = None

    max_connections: int = 100
    max_keepalive_connections: int = 40
    timeout: float = 60.0
    user_agent: str = ""

    @property
    def registered(self) -> bool:
        return self._client is not None

    @property
    def instance(self) -> httpx.AsyncClient:
        """获取当前实例的 httpx 客户端"""
        if self._client is None:
            raise RuntimeError("Httpx client not initialized. Make sure register() has been called.")
        return self._client

    @override
    async def register(self) -> None:
        """初始化 httpx.AsyncClient"""
        if self._client is not None:
            return

        headers = {}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            limits=httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=self.max_keepalive_connections,
            ),
            headers=headers,
        )
        logger.info("Httpx client initialized")

    @override
    async def unregister(self) -> None:
        """关闭 httpx.AsyncClient"""
        if self._client is None:
            return

        try:
            await self._client.aclose()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
            logger.debug("Event loop already closed, skipping httpx client cleanup")
        self._client = None
        logger.info("Httpx client closed")
