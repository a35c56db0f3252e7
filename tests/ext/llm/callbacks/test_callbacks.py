"""
测试回调处理器、管理器与控制台输出
"""

import pytest
from loguru import logger

from core.context import new_trace
from ext.llm import ChatMessage, Generation, LLMResult
from ext.llm.callbacks import CallbackHandler, CallbackManager, ConsoleCallbackHandler
from ext.llm.chain import AgentAction, AgentFinish


async def emit_all(handler: CallbackHandler) -> None:
    """触发全部事件"""
    error = RuntimeError("boom")
    await handler.on_llm_start("FakeLLMModel", ["prompt"], {})
    await handler.on_chat_model_start("FakeLLMModel", [[ChatMessage(role="user", content="hi")]], {})
    await handler.on_llm_new_token("tok")
    await handler.on_llm_error(error)
    await handler.on_llm_end(LLMResult(generations=[[Generation(text="out")]]))
    await handler.on_chain_start("LLMChain", {"input": "x"})
    await handler.on_chain_error(error)
    await handler.on_chain_end({"text": "y"})
    await handler.on_tool_start("search", "query")
    await handler.on_tool_error(error)
    await handler.on_tool_end("result")
    await handler.on_text("text")
    await handler.on_agent_action(AgentAction(tool="search", tool_input="query", log="log"))
    await handler.on_agent_finish(AgentFinish(return_values={"output": "done"}, log="log"))


ALL_EVENTS = [
    "on_llm_start",
    "on_chat_model_start",
    "on_llm_new_token",
    "on_llm_error",
    "on_llm_end",
    "on_chain_start",
    "on_chain_error",
    "on_chain_end",
    "on_tool_start",
    "on_tool_error",
    "on_tool_end",
    "on_text",
    "on_agent_action",
    "on_agent_finish",
]


class TestCallbackHandler:
    """测试处理器基类"""

    @pytest.mark.asyncio
    async def test_base_handler_noop(self):
        """测试基类全部钩子为空实现"""
        await emit_all(CallbackHandler())


class TestCallbackManager:
    """测试事件分发"""

    @pytest.mark.asyncio
    async def test_empty_manager(self):
        """测试没有处理器时触发全部事件不会报错"""
        manager = CallbackManager()
        assert not manager
        await emit_all(manager)

    @pytest.mark.asyncio
    async def test_fan_out_order(self, make_recorder):
        """测试按注册顺序分发"""
        log: list = []
        first, second = make_recorder("first", log), make_recorder("second", log)
        manager = CallbackManager([first, second])

        await emit_all(manager)

        assert first.names == ALL_EVENTS
        assert second.names == ALL_EVENTS
        assert log[:4] == [
            ("first", "on_llm_start"),
            ("second", "on_llm_start"),
            ("first", "on_chat_model_start"),
            ("second", "on_chat_model_start"),
        ]

    @pytest.mark.asyncio
    async def test_handler_error_propagates(self, recorder):
        """测试处理器异常不会被吞掉"""

        class BrokenHandler(CallbackHandler):
            async def on_text(self, text):
                raise ValueError("observer defect")

        manager = CallbackManager([BrokenHandler(), recorder])
        with pytest.raises(ValueError, match="observer defect"):
            await manager.on_text("hello")
        # 后续处理器不会收到该事件
        assert recorder.names == []

    def test_configure(self, recorder):
        """测试 configure 复用已有管理器"""
        manager = CallbackManager([recorder])
        assert CallbackManager.configure(manager) is manager
        assert CallbackManager.configure([recorder]).handlers == [recorder]
        assert CallbackManager.configure(None).handlers == []

    def test_add_remove_handler(self, recorder):
        """测试增删处理器"""
        manager = CallbackManager()
        manager.add_handler(recorder)
        assert manager.handlers == [recorder]
        manager.remove_handler(recorder)
        assert manager.handlers == []


class TestConsoleCallbackHandler:
    """测试控制台输出"""

    @pytest.fixture
    def messages(self):
        collected: list[str] = []
        sink_id = logger.add(collected.append, format="{message}", level="INFO")
        yield collected
        logger.remove(sink_id)

    @pytest.mark.asyncio
    async def test_tags_and_trace_id(self, messages):
        """测试日志包含事件标签与追踪 ID"""
        handler = ConsoleCallbackHandler()
        with new_trace("trace-123"):
            await emit_all(handler)

        output = "".join(messages)
        for tag in [
            "[llm/start]",
            "[llm/error]",
            "[llm/end]",
            "[chain/start]",
            "[chain/error]",
            "[chain/end]",
            "[tool/start]",
            "[tool/error]",
            "[tool/end]",
            "[agent/action]",
            "[agent/finish]",
        ]:
            assert tag in output
        assert "[trace-123]" in output
        assert "Entering Chain run (LLMChain)" in output

    @pytest.mark.asyncio
    async def test_markup_in_content(self, messages):
        """测试内容中的尖括号按原样输出"""
        handler = ConsoleCallbackHandler()
        await handler.on_tool_end("<red>not a color</red> {braces}")
        assert "<red>not a color</red> {braces}" in "".join(messages)

    @pytest.mark.asyncio
    async def test_truncate(self, messages):
        """测试过长内容被截断"""
        handler = ConsoleCallbackHandler(max_length=10)
        await handler.on_tool_start("search", "x" * 50)
        assert "truncated" in "".join(messages)
