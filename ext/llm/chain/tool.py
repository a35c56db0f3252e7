"""
Tool 实现和装饰器

提供 Agent 可调用的工具抽象，以及将 Python 函数转换为 Tool 的能力
"""

import inspect
from abc import ABC, abstractmethod
from typing import Any
from collections.abc import Callable, Sequence

from loguru import logger

from ext.llm.callbacks.base import CallbackHandler
from ext.llm.callbacks.manager import CallbackManager
from ext.llm.chain.exceptions import ToolExecutionError
from util.general import truncate_content


class Tool(ABC):
    """工具抽象

    名称在同一个 Agent 内唯一，描述会写入提示词供模型选择；
    输入输出均为字符串
    """

    name: str = ""
    description: str = ""

    @abstractmethod
    async def _arun(self, input: str) -> str:
        """执行工具逻辑（由子类实现）"""

    async def acall(
        self,
        input: str,
        callbacks: Sequence[CallbackHandler] | CallbackManager | None = None,
    ) -> str:
        """调用工具并通知 on_tool_start / on_tool_end / on_tool_error

        Args:
            input: 工具输入
            callbacks: 事件观察者

        Returns:
            工具输出

        Raises:
            ToolExecutionError: 工具执行失败，原始异常保存在 original_error 中；
                观察者抛出的异常不做包装
        """
        manager = CallbackManager.configure(callbacks)
        await manager.on_tool_start(self.name, input)
        logger.info(f"Tool '{self.name}' invoke - input: {truncate_content(input)}")

        try:
            output = await self._arun(input)
        except Exception as e:
            logger.error(f"Tool '{self.name}' execution failed: {e}")
            await manager.on_tool_error(e)
            raise ToolExecutionError(self.name, e) from e

        logger.debug(f"Tool '{self.name}' result: {truncate_content(output)}")
        await manager.on_tool_end(output)
        return output

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', description='{self.description}')"


class FunctionTool(Tool):
    """函数工具

    将 str -> str 的 Python 函数（同步或异步）封装为 Tool
    """

    def __init__(self, func: Callable[[str], Any], name: str, description: str):
        """初始化 FunctionTool

        Args:
            func: 工具函数（可以是同步或异步）
            name: 工具名称
            description: 工具描述
        """
        self.func = func
        self.name = name
        self.description = description
        self.is_async = inspect.iscoroutinefunction(func)

    async def _arun(self, input: str) -> str:
        if self.is_async:
            result = await self.func(input)
        else:
            result = self.func(input)
        return result if isinstance(result, str) else str(result)


def tool(func: Callable | None = None, *, name: str | None = None, description: str | None = None):
    """装饰器：将函数转换为 Tool

    使用方式：
        @tool
        def search(query: str) -> str:
            \"\"\"Search the web\"\"\"
            return query

    或者：
        @tool(name="custom_name", description="Custom description")
        async def my_function(query: str) -> str:
            return query

    Args:
        func: 被装饰的函数
        name: 自定义工具名称（可选，默认使用函数名）
        description: 自定义工具描述（可选，默认使用函数文档字符串）

    Returns:
        FunctionTool 实例或装饰器函数
    """

    def decorator(f: Callable) -> FunctionTool:
        return FunctionTool(
            func=f,
            name=name or f.__name__,
            description=description or inspect.cleandoc(f.__doc__ or ""),
        )

    if func is not None:
        return decorator(func)
    return decorator


__all__ = [
    "Tool",
    "FunctionTool",
    "tool",
]
