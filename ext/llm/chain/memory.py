"""
Memory 实现

提供 Chain 调用之间的状态保持能力：调用前加载记忆变量，调用成功后保存上下文
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from ext.llm.chain.exceptions import MemorySaveError
from ext.llm.types import ChatMessage


class BaseMemory(ABC):
    """Memory 抽象基类

    定义 Chain 记忆的加载与保存接口
    """

    @property
    @abstractmethod
    def memory_variables(self) -> list[str]:
        """加载时会返回的变量名"""

    @abstractmethod
    async def load_memory_variables(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """加载记忆变量

        Args:
            inputs: 本次调用的输入

        Returns:
            合并进 Chain 输入的变量字典
        """

    @abstractmethod
    async def save_context(self, inputs: dict[str, Any], outputs: dict[str, Any]) -> None:
        """保存上下文到记忆

        Args:
            inputs: 本次调用的原始输入（不含记忆变量）
            outputs: 本次调用校验后的输出
        """

    @abstractmethod
    async def clear(self) -> None:
        """清空记忆"""


class SimpleMemory(BaseMemory):
    """固定记忆

    始终返回构造时给定的变量，不保存任何上下文；Chain 未指定记忆时的默认值
    """

    def __init__(self, memories: dict[str, Any] | None = None):
        self.memories = dict(memories or {})

    @property
    def memory_variables(self) -> list[str]:
        return list(self.memories)

    async def load_memory_variables(self, inputs: dict[str, Any]) -> dict[str, Any]:
        return dict(self.memories)

    async def save_context(self, inputs: dict[str, Any], outputs: dict[str, Any]) -> None:
        pass

    async def clear(self) -> None:
        pass


def get_buffer_string(messages: list[ChatMessage], human_prefix: str = "Human", ai_prefix: str = "AI") -> str:
    """将消息列表渲染为 `前缀: 内容` 的多行文本"""
    prefixes = {"user": human_prefix, "assistant": ai_prefix, "system": "System"}
    lines = []
    for message in messages:
        prefix = prefixes.get(message.role) or message.name or message.role
        lines.append(f"{prefix}: {message.content}")
    return "\n".join(lines)


class BaseChatMemory(BaseMemory):
    """对话记忆基类

    每次保存追加一轮 user / assistant 消息，并由子类决定如何裁剪。
    状态读写由 asyncio.Lock 保护，可被并发调用的 Chain 共享。

    Args:
        memory_key: 加载时返回的变量名
        return_messages: True 返回 ChatMessage 列表，False 返回渲染后的文本
        input_key: 保存时取用的输入键（为空时自动推断唯一的输入键）
        output_key: 保存时取用的输出键（为空时自动推断唯一的输出键）
        human_prefix: 渲染文本时 user 消息的前缀
        ai_prefix: 渲染文本时 assistant 消息的前缀
    """

    def __init__(
        self,
        memory_key: str = "history",
        return_messages: bool = False,
        input_key: str | None = None,
        output_key: str | None = None,
        human_prefix: str = "Human",
        ai_prefix: str = "AI",
    ):
        self.memory_key = memory_key
        self.return_messages = return_messages
        self.input_key = input_key
        self.output_key = output_key
        self.human_prefix = human_prefix
        self.ai_prefix = ai_prefix
        self.messages: list[ChatMessage] = []
        self._lock = asyncio.Lock()

    @property
    def memory_variables(self) -> list[str]:
        return [self.memory_key]

    def _resolve_input_key(self, inputs: dict[str, Any]) -> str:
        if self.input_key is not None:
            return self.input_key
        candidates = [key for key in inputs if key not in self.memory_variables]
        if len(candidates) != 1:
            raise MemorySaveError(f"{self.__class__.__name__} expects exactly one input key, got {candidates}")
        return candidates[0]

    def _resolve_output_key(self, outputs: dict[str, Any]) -> str:
        if self.output_key is not None:
            return self.output_key
        if len(outputs) != 1:
            raise MemorySaveError(f"{self.__class__.__name__} expects exactly one output key, got {list(outputs)}")
        return next(iter(outputs))

    async def load_memory_variables(self, inputs: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            messages = list(self.messages)
        logger.debug(f"{self.__class__.__name__} load - messages: {len(messages)}")
        if self.return_messages:
            return {self.memory_key: messages}
        return {self.memory_key: get_buffer_string(messages, self.human_prefix, self.ai_prefix)}

    async def save_context(self, inputs: dict[str, Any], outputs: dict[str, Any]) -> None:
        input_key = self._resolve_input_key(inputs)
        output_key = self._resolve_output_key(outputs)
        try:
            human, ai = str(inputs[input_key]), str(outputs[output_key])
        except KeyError as e:
            raise MemorySaveError(f"{self.__class__.__name__} missing key {e} in context", e) from e

        async with self._lock:
            self.messages.append(ChatMessage(role="user", content=human))
            self.messages.append(ChatMessage(role="assistant", content=ai))
            self._trim()
            logger.debug(f"{self.__class__.__name__} save - messages: {len(self.messages)}")

    async def clear(self) -> None:
        async with self._lock:
            count = len(self.messages)
            self.messages.clear()
        logger.info(f"{self.__class__.__name__} cleared {count} messages")

    def _trim(self) -> None:
        """按容量裁剪最早的消息（调用时已持有锁）"""


class InMemoryMemory(BaseChatMemory):
    """内存记忆

    使用 Python 列表存储对话历史，保留最近 max_messages 条消息
    适用于短期会话
    """

    def __init__(self, max_messages: int = 100, **kwargs: Any):
        """初始化内存记忆

        Args:
            max_messages: 最大消息数量
        """
        super().__init__(**kwargs)
        self.max_messages = max_messages

    def _trim(self) -> None:
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages :]
            logger.debug(f"InMemoryMemory trimmed messages to {len(self.messages)}")


class ConversationBufferMemory(BaseChatMemory):
    """对话缓冲记忆

    保留最近的消息，基于 Token 数量限制
    """

    def __init__(self, max_token_limit: int = 2000, **kwargs: Any):
        """初始化对话缓冲记忆

        Args:
            max_token_limit: 最大 Token 数量
        """
        super().__init__(**kwargs)
        self.max_token_limit = max_token_limit

    def _trim(self) -> None:
        while self.messages and self._count_tokens() > self.max_token_limit:
            self.messages.pop(0)

    def _count_tokens(self) -> int:
        """计算消息总 Token 数量

        Returns:
            Token 数量（近似值，使用字符数 / 4）
        """
        total_chars = sum(len(msg.content) for msg in self.messages)
        return total_chars // 4


__all__ = [
    "BaseMemory",
    "SimpleMemory",
    "BaseChatMemory",
    "InMemoryMemory",
    "ConversationBufferMemory",
    "get_buffer_string",
]
