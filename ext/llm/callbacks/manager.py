"""
回调管理器

将事件依次分发给注册的全部处理器
"""

from typing import TYPE_CHECKING, Any
from collections.abc import Sequence

from ext.llm.callbacks.base import CallbackHandler
from ext.llm.types import ChatMessage, LLMResult

if TYPE_CHECKING:
    from ext.llm.chain.schema import AgentAction, AgentFinish


class CallbackManager(CallbackHandler):
    """
    回调管理器

    本身也是 CallbackHandler，按注册顺序 await 每个处理器；
    没有处理器时直接返回。处理器抛出的异常不做捕获。

    使用示例:
        >>> manager = CallbackManager([ConsoleCallbackHandler()])
        >>> await manager.on_chain_start("LLMChain", {"input": "hi"})
    """

    def __init__(self, handlers: Sequence[CallbackHandler] | None = None):
        self.handlers: list[CallbackHandler] = list(handlers or [])

    @classmethod
    def configure(cls, handlers: "Sequence[CallbackHandler] | CallbackManager | None") -> "CallbackManager":
        """由处理器列表或已有管理器得到管理器"""
        if isinstance(handlers, CallbackManager):
            return handlers
        return cls(handlers)

    def add_handler(self, handler: CallbackHandler) -> None:
        self.handlers.append(handler)

    def remove_handler(self, handler: CallbackHandler) -> None:
        self.handlers.remove(handler)

    def __bool__(self) -> bool:
        return bool(self.handlers)

    async def _handle_event(self, event_name: str, *args: Any) -> None:
        if not self.handlers:
            return
        for handler in self.handlers:
            await getattr(handler, event_name)(*args)

    async def on_llm_start(self, llm: str, prompts: list[str], extra_params: dict[str, Any]) -> None:
        await self._handle_event("on_llm_start", llm, prompts, extra_params)

    async def on_chat_model_start(
        self,
        llm: str,
        messages: list[list[ChatMessage]],
        extra_params: dict[str, Any],
    ) -> None:
        await self._handle_event("on_chat_model_start", llm, messages, extra_params)

    async def on_llm_new_token(self, token: str) -> None:
        await self._handle_event("on_llm_new_token", token)

    async def on_llm_error(self, error: BaseException) -> None:
        await self._handle_event("on_llm_error", error)

    async def on_llm_end(self, result: LLMResult) -> None:
        await self._handle_event("on_llm_end", result)

    async def on_chain_start(self, chain: str, inputs: dict[str, Any]) -> None:
        await self._handle_event("on_chain_start", chain, inputs)

    async def on_chain_error(self, error: BaseException) -> None:
        await self._handle_event("on_chain_error", error)

    async def on_chain_end(self, outputs: dict[str, Any]) -> None:
        await self._handle_event("on_chain_end", outputs)

    async def on_tool_start(self, tool: str, input: str) -> None:
        await self._handle_event("on_tool_start", tool, input)

    async def on_tool_error(self, error: BaseException) -> None:
        await self._handle_event("on_tool_error", error)

    async def on_tool_end(self, output: str) -> None:
        await self._handle_event("on_tool_end", output)

    async def on_text(self, text: str) -> None:
        await self._handle_event("on_text", text)

    async def on_agent_action(self, action: "AgentAction") -> None:
        await self._handle_event("on_agent_action", action)

    async def on_agent_finish(self, finish: "AgentFinish") -> None:
        await self._handle_event("on_agent_finish", finish)


__all__ = ["CallbackManager"]
