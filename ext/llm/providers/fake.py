"""
Fake LLM Provider

按顺序返回预设响应，用于单元测试和离线演示，无需 API key
"""

import hashlib
from typing import Any
from collections.abc import AsyncGenerator

from loguru import logger

from ext.llm.base import BaseLLMModel
from ext.llm.types import CallOptions, ChatGeneration, ChatMessage, Generation, TokenUsage


class FakeLLMModel(BaseLLMModel):
    """
    Fake Provider - 返回预设响应

    使用方式：
        model = FakeLLMModel(responses=["Action: search\\nAction Input: foo", "Final Answer: bar"])
        text = await model.call("prompt")

    特性：
    - 响应按顺序循环返回
    - 记录每次调用的 prompt 和选项，便于断言
    - 设置 streaming_func 时按 chunk_size 切片流式返回
    - 与真实模型一样在第一个停止词处截断
    - embedding 由文本哈希得到，结果稳定
    - generation_info 中附带按字符数估算的 token_usage
    """

    model_type = "fake"

    def __init__(
        self,
        responses: list[str] | None = None,
        model_name: str = "fake-model",
        chunk_size: int = 4,
        embedding_dim: int = 8,
        embedding_count: int | None = None,
        **kwargs: Any,
    ):
        """
        Args:
            responses: 预设响应列表
            model_name: 模型名称
            chunk_size: 流式返回时每片的字符数
            embedding_dim: 向量维度
            embedding_count: 强制返回的向量条数（用于模拟 provider 返回数量异常）
        """
        kwargs.pop("api_key", None)
        kwargs.pop("base_url", None)
        super().__init__(model_name=model_name, **kwargs)
        self.responses = list(responses) if responses else ["Fake response"]
        self.chunk_size = max(chunk_size, 1)
        self.embedding_dim = embedding_dim
        self.embedding_count = embedding_count

        self.prompts: list[str] = []
        self.options: list[CallOptions] = []
        self._index = 0

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    def _next_response(self, prompt: str, options: CallOptions) -> str:
        self.prompts.append(prompt)
        self.options.append(options)

        text = self.responses[self._index % len(self.responses)]
        self._index += 1

        for stop in options.stop_words or []:
            position = text.find(stop)
            if position != -1:
                text = text[:position]
        return text

    async def _fragments(self, text: str) -> AsyncGenerator[str, None]:
        for start in range(0, len(text), self.chunk_size):
            yield text[start : start + self.chunk_size]

    async def _respond(self, prompt: str, options: CallOptions) -> str:
        text = self._next_response(prompt, options)
        logger.debug(f"Fake response #{self._index} - stream: {options.stream}")
        if options.stream:
            return await self._consume_stream(self._fragments(text), options.streaming_func)  # type: ignore
        return text

    @staticmethod
    def _token_usage(prompt: str, text: str) -> TokenUsage:
        # 与 ConversationBufferMemory 相同的近似：字符数 / 4
        prompt_tokens, completion_tokens = len(prompt) // 4, len(text) // 4
        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )

    async def generate(self, prompts: list[str], options: CallOptions | None = None) -> list[Generation]:
        options = self.resolve_options(options, self.completion_model)
        generations = []
        for prompt in prompts:
            text = await self._respond(prompt, options)
            generations.append(Generation(text=text, generation_info={"token_usage": self._token_usage(prompt, text)}))
        return generations

    async def chat(self, messages: list[ChatMessage], options: CallOptions | None = None) -> ChatGeneration:
        options = self.resolve_options(options, self.model_name)
        prompt = messages[-1].content if messages else ""
        text = await self._respond(prompt, options)
        return ChatGeneration(
            message=ChatMessage(role="assistant", content=text),
            generation_info={"token_usage": self._token_usage(prompt, text)},
        )

    async def _create_embedding_impl(self, texts: list[str], model: str) -> list[list[float]]:
        count = len(texts) if self.embedding_count is None else self.embedding_count
        embeddings = []
        for i in range(count):
            digest = hashlib.sha256(texts[i % len(texts)].encode("utf-8")).digest()
            embeddings.append([digest[j % len(digest)] / 255 for j in range(self.embedding_dim)])
        return embeddings

    def reset(self) -> None:
        """清空调用记录并从第一条响应重新开始"""
        self.prompts.clear()
        self.options.clear()
        self._index = 0


__all__ = ["FakeLLMModel"]
