"""
测试全局 conftest

切换到 test 环境配置（etc/test.yaml），并定义离线测试所需的 fixtures
"""

import os

# 必须在导入 config 之前设置
os.environ["environment"] = "test"

import pytest  # noqa: E402

from ext.llm.callbacks import CallbackHandler  # noqa: E402
from ext.llm.chain import tool  # noqa: E402


class RecordingHandler(CallbackHandler):
    """按顺序记录收到的全部事件"""

    def __init__(self, name: str = "recorder", log: list | None = None):
        self.name = name
        self.events: list[tuple[str, tuple]] = []
        # 多个处理器共享同一个 log 时可以断言分发顺序
        self.log = log if log is not None else []

    def _record(self, event: str, *args) -> None:
        self.events.append((event, args))
        self.log.append((self.name, event))

    @property
    def names(self) -> list[str]:
        return [event for event, _ in self.events]

    def args_of(self, event: str) -> list[tuple]:
        return [args for name, args in self.events if name == event]

    async def on_llm_start(self, llm, prompts, extra_params):
        self._record("on_llm_start", llm, prompts, extra_params)

    async def on_chat_model_start(self, llm, messages, extra_params):
        self._record("on_chat_model_start", llm, messages, extra_params)

    async def on_llm_new_token(self, token):
        self._record("on_llm_new_token", token)

    async def on_llm_error(self, error):
        self._record("on_llm_error", error)

    async def on_llm_end(self, result):
        self._record("on_llm_end", result)

    async def on_chain_start(self, chain, inputs):
        self._record("on_chain_start", chain, inputs)

    async def on_chain_error(self, error):
        self._record("on_chain_error", error)

    async def on_chain_end(self, outputs):
        self._record("on_chain_end", outputs)

    async def on_tool_start(self, tool, input):
        self._record("on_tool_start", tool, input)

    async def on_tool_error(self, error):
        self._record("on_tool_error", error)

    async def on_tool_end(self, output):
        self._record("on_tool_end", output)

    async def on_text(self, text):
        self._record("on_text", text)

    async def on_agent_action(self, action):
        self._record("on_agent_action", action)

    async def on_agent_finish(self, finish):
        self._record("on_agent_finish", finish)


@pytest.fixture
def recorder():
    """记录事件的回调处理器"""
    return RecordingHandler()


@pytest.fixture
def make_recorder():
    """创建多个共享 log 的回调处理器"""

    def factory(name: str, log: list) -> RecordingHandler:
        return RecordingHandler(name=name, log=log)

    return factory


@pytest.fixture
def search_tool():
    """示例搜索工具（同步函数）"""

    @tool
    def search(query: str) -> str:
        """Search the web for current information"""
        return f"Sunny, 25°C in {query}"

    return search


@pytest.fixture
def calculator_tool():
    """示例计算工具（异步函数）"""

    @tool(name="calculator", description="Evaluate a sum like '1 + 2'")
    async def calculate(expression: str) -> str:
        return str(sum(int(part) for part in expression.split("+")))

    return calculate


@pytest.fixture
def failing_tool():
    """总是失败的工具"""

    @tool
    def broken(query: str) -> str:
        """A tool that always fails"""
        raise ValueError(f"broken tool cannot handle {query}")

    return broken
