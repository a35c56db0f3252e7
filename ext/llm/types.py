"""
LLM 类型定义

定义模型调用请求选项与响应的统一 Pydantic 模型
"""

from typing import Any, Literal
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

# 流式输出回调：每收到一个增量片段调用一次，抛出异常即中止本次调用
StreamingFunc = Callable[[str], Awaitable[None]]


class ChatMessage(BaseModel):
    """聊天消息"""

    role: Literal["system", "user", "assistant", "generic"] = Field(description="消息角色")
    content: str = Field(description="消息内容")
    name: str | None = Field(default=None, description="消息名称（generic 消息可用）")


class TokenUsage(BaseModel):
    """Token 使用统计"""

    prompt_tokens: int = Field(default=0, description="输入token数")
    completion_tokens: int = Field(default=0, description="输出token数")
    total_tokens: int = Field(default=0, description="总token数")


class Generation(BaseModel):
    """单条生成结果"""

    text: str = Field(description="生成的文本")
    generation_info: dict[str, Any] = Field(default_factory=dict, description="provider 附加信息")


class ChatGeneration(BaseModel):
    """对话生成结果"""

    message: ChatMessage = Field(description="模型回复")
    generation_info: dict[str, Any] = Field(default_factory=dict, description="provider 附加信息")

    @property
    def text(self) -> str:
        return self.message.content


class LLMResult(BaseModel):
    """一次模型调用的完整结果，用于 on_llm_end 事件"""

    generations: list[list[Generation]] = Field(description="每个 prompt 对应的生成列表")
    llm_output: dict[str, Any] = Field(default_factory=dict, description="provider 级别输出（如 usage）")


class CallOptions(BaseModel):
    """模型调用选项

    字段为空时使用 provider 构造时传入的默认值
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    model: str | None = Field(default=None, description="模型名称")
    max_tokens: int | None = Field(default=None, ge=1, description="最大输出token数")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0, description="温度参数")
    top_p: float | None = Field(default=None, ge=0.0, le=1.0, description="nucleus sampling参数")
    stop_words: list[str] | None = Field(default=None, description="停止序列")
    repetition_penalty: float | None = Field(default=None, ge=-2.0, le=2.0, description="重复惩罚")
    streaming_func: StreamingFunc | None = Field(default=None, description="流式输出回调", exclude=True)

    @property
    def stream(self) -> bool:
        return self.streaming_func is not None
