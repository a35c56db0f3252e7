"""
LLM 模型抽象层

提供统一的 LLM 接口，支持通过配置切换不同的 LLM 服务提供商。
"""

from ext.llm.base import BaseLLMModel
from ext.llm.types import (
    CallOptions,
    ChatGeneration,
    ChatMessage,
    Generation,
    LLMResult,
    StreamingFunc,
    TokenUsage,
)
from ext.llm.factory import LLMModelFactory
from ext.llm.exceptions import (
    LLMError,
    LLMConfigError,
    LLMAPIError,
    LLMTimeoutError,
    LLMEmptyResponseError,
    LLMResponseLengthError,
    LLMUnexpectedEmbeddingModelError,
    LLMStreamingError,
)
from ext.llm.providers import FakeLLMModel, OpenAILLMModel

__all__ = [
    # 基类
    "BaseLLMModel",
    # 类型
    "CallOptions",
    "ChatGeneration",
    "ChatMessage",
    "Generation",
    "LLMResult",
    "StreamingFunc",
    "TokenUsage",
    # 工厂
    "LLMModelFactory",
    # Providers
    "OpenAILLMModel",
    "FakeLLMModel",
    # 异常
    "LLMError",
    "LLMConfigError",
    "LLMAPIError",
    "LLMTimeoutError",
    "LLMEmptyResponseError",
    "LLMResponseLengthError",
    "LLMUnexpectedEmbeddingModelError",
    "LLMStreamingError",
]
