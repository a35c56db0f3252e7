"""
Chain / Agent 数据结构

定义 Agent 规划结果与 Chain 调用选项的 Pydantic 模型
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ext.llm.callbacks.base import CallbackHandler
from ext.llm.callbacks.manager import CallbackManager


class AgentAction(BaseModel):
    """Agent 选择执行的动作"""

    model_config = ConfigDict(frozen=True)

    tool: str = Field(description="工具名称")
    tool_input: str = Field(description="工具输入")
    log: str = Field(default="", description="产生该动作的模型原始输出")


class AgentFinish(BaseModel):
    """Agent 的最终结果"""

    model_config = ConfigDict(frozen=True)

    return_values: dict[str, Any] = Field(description="最终输出")
    log: str = Field(default="", description="产生该结果的模型原始输出")


class AgentStep(BaseModel):
    """一次已执行的动作及其观察结果"""

    model_config = ConfigDict(frozen=True)

    action: AgentAction = Field(description="执行的动作")
    observation: str = Field(description="工具返回（或工具错误信息）")


# Agent.plan 的返回：非空动作列表或最终结果
AgentPlan = list[AgentAction] | AgentFinish


class ChainCallOptions(BaseModel):
    """Chain 调用选项

    使用示例:
        >>> options = ChainCallOptions(stop_words=["\\nObservation:"], callbacks=[ConsoleCallbackHandler()])
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    stop_words: list[str] = Field(default_factory=list, description="停止序列")
    callbacks: list[CallbackHandler] = Field(default_factory=list, description="事件观察者")

    @property
    def callback_manager(self) -> CallbackManager:
        return CallbackManager(self.callbacks)


__all__ = [
    "AgentAction",
    "AgentFinish",
    "AgentStep",
    "AgentPlan",
    "ChainCallOptions",
]
