"""
LLM 模型基类

提供模型调用的抽象接口，以及流式消费、embedding 校验等通用实现
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar
from collections.abc import AsyncGenerator

import httpx
from loguru import logger

from ext.llm.exceptions import (
    LLMEmptyResponseError,
    LLMResponseLengthError,
    LLMUnexpectedEmbeddingModelError,
)
from ext.llm.types import CallOptions, ChatGeneration, ChatMessage, Generation, StreamingFunc
from util.general import truncate_content


class BaseLLMModel(ABC):
    """
    LLM 模型抽象基类

    设计原则:
        1. 默认值（模型名、max_tokens 等）通过构造参数显式传入，不依赖全局状态
        2. 核心方法（generate, chat, _create_embedding_impl）由子类实现
        3. 流式消费与响应数量校验在基类统一处理
    """

    model_type: ClassVar[str] = "base"

    # 为空表示不限制 embedding 模型
    supported_embedding_models: ClassVar[frozenset[str]] = frozenset()

    def __init__(
        self,
        model_name: str,
        completion_model: str | None = None,
        embedding_model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.0,
        top_p: float | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        max_retries: int = 0,
        timeout: float = 60.0,
        extra_config: dict[str, Any] | None = None,
    ):
        """
        初始化 LLM 模型

        Args:
            model_name: 对话模型名称
            completion_model: 补全模型名称（为空时使用 model_name）
            embedding_model: embedding 模型名称
            max_tokens: 默认最大token数
            temperature: 默认温度参数
            top_p: 默认top_p
            api_key: API密钥
            base_url: API基础URL
            max_retries: SDK 层最大重试次数
            timeout: 请求超时时间(秒)
            extra_config: provider特定配置
        """
        self.model_name = model_name
        self.completion_model = completion_model or model_name
        self.embedding_model = embedding_model
        self.max_tokens = max_tokens
        self.default_temperature = temperature
        self.default_top_p = top_p
        self.api_key = api_key
        self.base_url = base_url
        self.max_retries = max_retries
        self.timeout = timeout
        self.extra_config = extra_config or {}

        logger.info(f"Initialized LLM model: {self.model_type}/{self.model_name}, max_tokens={self.max_tokens}")

    # ========== 核心抽象方法（必须由子类实现） ==========

    @abstractmethod
    async def generate(self, prompts: list[str], options: CallOptions | None = None) -> list[Generation]:
        """
        补全模式，每个 prompt 对应一条生成结果

        Args:
            prompts: 提示词列表
            options: 调用选项

        Returns:
            生成结果列表

        Raises:
            LLMAPIError: provider 调用失败
            LLMEmptyResponseError: provider 没有返回结果
        """
        raise NotImplementedError

    @abstractmethod
    async def chat(self, messages: list[ChatMessage], options: CallOptions | None = None) -> ChatGeneration:
        """
        对话模式

        Args:
            messages: 有序的角色消息列表
            options: 调用选项

        Returns:
            模型回复
        """
        raise NotImplementedError

    @abstractmethod
    async def _create_embedding_impl(self, texts: list[str], model: str) -> list[list[float]]:
        """实际执行 embedding 请求（由子类实现）"""
        raise NotImplementedError

    # ========== 通用实现 ==========

    async def call(self, prompt: str, options: CallOptions | None = None) -> str:
        """单 prompt 补全，返回第一条生成文本"""
        generations = await self.generate([prompt], options)
        if not generations:
            raise LLMEmptyResponseError()
        return generations[0].text

    async def create_embedding(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """
        批量生成 embedding

        Args:
            texts: 文本列表
            model: embedding 模型（为空时使用构造时的默认值）

        Returns:
            向量列表，顺序与输入一致

        Raises:
            LLMUnexpectedEmbeddingModelError: 模型不在支持列表中
            LLMEmptyResponseError: provider 没有返回向量
            LLMResponseLengthError: 返回数量与输入数量不一致
        """
        if not texts:
            return []

        model = model or self.embedding_model or ""
        if self.supported_embedding_models and model not in self.supported_embedding_models:
            raise LLMUnexpectedEmbeddingModelError(model)

        logger.debug(f"Embedding request - model: {model}, texts: {len(texts)}")

        embeddings = await self._create_embedding_impl(texts, model)

        if not embeddings:
            raise LLMEmptyResponseError()
        if len(embeddings) != len(texts):
            logger.error(f"Embedding response length mismatch - expected: {len(texts)}, actual: {len(embeddings)}")
            raise LLMResponseLengthError(len(texts), len(embeddings))

        return embeddings

    def resolve_options(self, options: CallOptions | None, default_model: str) -> CallOptions:
        """用构造时的默认值补全调用选项"""
        options = options or CallOptions()
        return options.model_copy(
            update={
                "model": options.model or default_model,
                "max_tokens": options.max_tokens or self.max_tokens,
                "temperature": self.default_temperature if options.temperature is None else options.temperature,
                "top_p": self.default_top_p if options.top_p is None else options.top_p,
            },
        )

    async def _consume_stream(
        self,
        fragments: AsyncGenerator[str, None],
        streaming_func: StreamingFunc,
    ) -> str:
        """
        消费流式片段：逐个交给回调，最后返回拼接结果

        回调抛出异常、任务被取消或流本身出错时都会关闭底层流后再向上抛出

        Args:
            fragments: provider 的文本片段异步生成器
            streaming_func: 调用方提供的流式回调

        Returns:
            全部片段拼接后的文本
        """
        output: list[str] = []
        try:
            async for fragment in fragments:
                if not fragment:
                    continue
                await streaming_func(fragment)
                output.append(fragment)
        finally:
            await fragments.aclose()

        text = "".join(output)
        logger.debug(f"Stream completed - fragments: {len(output)}, text: {truncate_content(text)}")
        return text

    def get_httpx_client(self) -> httpx.AsyncClient | None:
        """获取全局 httpx client，未注册时返回 None"""
        from config.main import local_configs

        httpx_config = local_configs.extensions.httpx
        return httpx_config.instance if httpx_config.registered else None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"model_name={self.model_name}, "
            f"model_type={self.model_type}, "
            f"max_tokens={self.max_tokens})"
        )
