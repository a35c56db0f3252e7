"""
控制台回调处理器

通过 loguru 输出带颜色标签的生命周期事件，便于追踪整条调用链
"""

from typing import TYPE_CHECKING, Any

from loguru import logger

from core.context import get_trace_id
from core.types import LifecycleTagEnum
from ext.llm.callbacks.base import CallbackHandler
from ext.llm.types import ChatMessage, LLMResult
from util.general import format_dict_for_log, truncate_content

if TYPE_CHECKING:
    from ext.llm.chain.schema import AgentAction, AgentFinish

TAG_COLORS = {
    LifecycleTagEnum.llm_start: "green",
    LifecycleTagEnum.chain_start: "green",
    LifecycleTagEnum.tool_start: "green",
    LifecycleTagEnum.llm_end: "cyan",
    LifecycleTagEnum.chain_end: "cyan",
    LifecycleTagEnum.tool_end: "cyan",
    LifecycleTagEnum.llm_error: "red",
    LifecycleTagEnum.chain_error: "red",
    LifecycleTagEnum.tool_error: "red",
    LifecycleTagEnum.agent_action: "blue",
    LifecycleTagEnum.agent_finish: "blue",
}


class ConsoleCallbackHandler(CallbackHandler):
    """
    控制台回调处理器

    每条日志格式: [tag] [trace_id] 描述，trace_id 取自 core.context.trace_id_var

    Args:
        truncate: 是否截断过长的输入输出
        max_length: 截断长度
    """

    def __init__(self, truncate: bool = True, max_length: int = 200):
        self.truncate = truncate
        self.max_length = max_length

    def _emit(self, tag: LifecycleTagEnum, message: str) -> None:
        color = TAG_COLORS[tag]
        # 标签通过颜色标记渲染，正文作为参数传入，避免内容中的 <> 被当作标记解析
        logger.opt(colors=True, depth=1).info(
            f"<{color}>[{tag.value}]</{color}> <magenta>[{{}}]</magenta> {{}}",
            get_trace_id(),
            message,
        )

    def _text(self, content: Any) -> str:
        return truncate_content(str(content), self.truncate, self.max_length)

    async def on_llm_start(self, llm: str, prompts: list[str], extra_params: dict[str, Any]) -> None:
        self._emit(
            LifecycleTagEnum.llm_start,
            f"Entering LLM run ({llm}) with input: {[self._text(prompt) for prompt in prompts]}",
        )

    async def on_chat_model_start(
        self,
        llm: str,
        messages: list[list[ChatMessage]],
        extra_params: dict[str, Any],
    ) -> None:
        rendered = [[f"{message.role}: {self._text(message.content)}" for message in batch] for batch in messages]
        self._emit(LifecycleTagEnum.llm_start, f"Entering LLM run ({llm}) with input: {rendered}")

    async def on_llm_error(self, error: BaseException) -> None:
        self._emit(LifecycleTagEnum.llm_error, f"LLM run errored with error: {error!r}")

    async def on_llm_end(self, result: LLMResult) -> None:
        texts = [[self._text(generation.text) for generation in batch] for batch in result.generations]
        self._emit(LifecycleTagEnum.llm_end, f"Exiting LLM run with output: {texts}")

    async def on_chain_start(self, chain: str, inputs: dict[str, Any]) -> None:
        self._emit(
            LifecycleTagEnum.chain_start,
            f"Entering Chain run ({chain}) with input: {format_dict_for_log(inputs, max_value_length=self.max_length)}",
        )

    async def on_chain_error(self, error: BaseException) -> None:
        self._emit(LifecycleTagEnum.chain_error, f"Chain run errored with error: {error!r}")

    async def on_chain_end(self, outputs: dict[str, Any]) -> None:
        self._emit(
            LifecycleTagEnum.chain_end,
            f"Exiting Chain run with output: {format_dict_for_log(outputs, max_value_length=self.max_length)}",
        )

    async def on_tool_start(self, tool: str, input: str) -> None:
        self._emit(LifecycleTagEnum.tool_start, f"Entering Tool run ({tool}) with input: {self._text(input)}")

    async def on_tool_error(self, error: BaseException) -> None:
        self._emit(LifecycleTagEnum.tool_error, f"Tool run errored with error: {error!r}")

    async def on_tool_end(self, output: str) -> None:
        self._emit(LifecycleTagEnum.tool_end, f"Exiting Tool run with output: {self._text(output)}")

    async def on_agent_action(self, action: "AgentAction") -> None:
        self._emit(
            LifecycleTagEnum.agent_action,
            f"Agent selected action: tool={action.tool}, tool_input={self._text(action.tool_input)}",
        )

    async def on_agent_finish(self, finish: "AgentFinish") -> None:
        self._emit(
            LifecycleTagEnum.agent_finish,
            f"Agent finished with: {format_dict_for_log(finish.return_values, max_value_length=self.max_length)}",
        )


__all__ = ["ConsoleCallbackHandler"]
