"""
回调处理器基类

定义 LLM / Chain / Tool / Agent 生命周期事件的观察者接口
"""

from typing import TYPE_CHECKING, Any

from ext.llm.types import ChatMessage, LLMResult

if TYPE_CHECKING:
    from ext.llm.chain.schema import AgentAction, AgentFinish


class CallbackHandler:
    """
    回调处理器基类

    所有钩子默认什么都不做，子类只需重写关心的事件。
    钩子在事件发生时按顺序 await，抛出的异常会中断当前调用。
    """

    async def on_llm_start(self, llm: str, prompts: list[str], extra_params: dict[str, Any]) -> None:
        """模型（补全模式）调用开始"""

    async def on_chat_model_start(
        self,
        llm: str,
        messages: list[list[ChatMessage]],
        extra_params: dict[str, Any],
    ) -> None:
        """模型（对话模式）调用开始"""

    async def on_llm_new_token(self, token: str) -> None:
        """流式模式下收到新的片段"""

    async def on_llm_error(self, error: BaseException) -> None:
        """模型调用失败"""

    async def on_llm_end(self, result: LLMResult) -> None:
        """模型调用结束"""

    async def on_chain_start(self, chain: str, inputs: dict[str, Any]) -> None:
        """Chain 调用开始，inputs 为合并记忆后的输入"""

    async def on_chain_error(self, error: BaseException) -> None:
        """Chain 调用失败"""

    async def on_chain_end(self, outputs: dict[str, Any]) -> None:
        """Chain 调用结束"""

    async def on_tool_start(self, tool: str, input: str) -> None:
        """工具调用开始"""

    async def on_tool_error(self, error: BaseException) -> None:
        """工具调用失败"""

    async def on_tool_end(self, output: str) -> None:
        """工具调用结束"""

    async def on_text(self, text: str) -> None:
        """任意文本输出"""

    async def on_agent_action(self, action: "AgentAction") -> None:
        """Agent 选择了一个动作"""

    async def on_agent_finish(self, finish: "AgentFinish") -> None:
        """Agent 给出最终答案"""


__all__ = ["CallbackHandler"]
