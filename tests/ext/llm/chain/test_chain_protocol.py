"""
测试 Chain 调用流程 call / run
"""

from typing import Any

import pytest

from ext.llm.chain import (
    Chain,
    ChainCallOptions,
    MissingInputError,
    MissingOutputError,
    MultipleInputsInRunError,
    MultipleOutputsInRunError,
    SequentialChain,
    SimpleMemory,
    WrongOutputTypeInRunError,
    call,
    run,
)
from ext.llm.chain.memory import BaseMemory


class EchoChain(Chain):
    """按配置返回输出的测试 Chain"""

    def __init__(
        self,
        inputs: list[str] | None = None,
        outputs: list[str] | None = None,
        result: dict[str, Any] | None = None,
        error: Exception | None = None,
        memory: BaseMemory | None = None,
    ):
        super().__init__(memory)
        self._inputs = inputs if inputs is not None else ["input"]
        self._outputs = outputs if outputs is not None else ["output"]
        self.result = result
        self.error = error
        self.received: list[dict[str, Any]] = []

    @property
    def input_keys(self) -> list[str]:
        return self._inputs

    @property
    def output_keys(self) -> list[str]:
        return self._outputs

    async def _call(self, inputs: dict[str, Any], options: ChainCallOptions) -> dict[str, Any]:
        self.received.append(inputs)
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return {key: f"{key}:{inputs.get(self._inputs[0]) if self._inputs else ''}" for key in self._outputs}


class RecordingMemory(BaseMemory):
    """记录 save_context 调用的记忆"""

    def __init__(self, variables: dict[str, Any] | None = None):
        self.variables = dict(variables or {})
        self.saved: list[tuple[dict, dict]] = []

    @property
    def memory_variables(self) -> list[str]:
        return list(self.variables)

    async def load_memory_variables(self, inputs: dict[str, Any]) -> dict[str, Any]:
        return dict(self.variables)

    async def save_context(self, inputs: dict[str, Any], outputs: dict[str, Any]) -> None:
        self.saved.append((dict(inputs), dict(outputs)))

    async def clear(self) -> None:
        self.saved.clear()


class TestCall:
    """测试 call 流程"""

    @pytest.mark.asyncio
    async def test_success(self, recorder):
        """测试成功调用的事件顺序"""
        chain = EchoChain()
        outputs = await call(chain, {"input": "hi"}, ChainCallOptions(callbacks=[recorder]))

        assert outputs == {"output": "output:hi"}
        assert recorder.names == ["on_chain_start", "on_chain_end"]
        assert recorder.args_of("on_chain_start") == [("EchoChain", {"input": "hi"})]
        assert recorder.args_of("on_chain_end") == [({"output": "output:hi"},)]

    @pytest.mark.asyncio
    async def test_default_options(self):
        """测试不传选项"""
        outputs = await call(EchoChain(), {"input": "hi"})
        assert outputs["output"] == "output:hi"

    @pytest.mark.asyncio
    async def test_missing_input(self, recorder):
        """测试缺少输入时不执行逻辑、不通知事件"""
        memory = RecordingMemory()
        chain = EchoChain(inputs=["input", "context"], memory=memory)

        with pytest.raises(MissingInputError) as exc_info:
            await call(chain, {"input": "hi"}, ChainCallOptions(callbacks=[recorder]))

        assert exc_info.value.key == "context"
        assert chain.received == []
        assert recorder.events == []
        assert memory.saved == []

    @pytest.mark.asyncio
    async def test_missing_output(self, recorder):
        """测试缺少输出时不保存记忆并通知一次 on_chain_error"""
        memory = RecordingMemory()
        chain = EchoChain(outputs=["output", "extra"], result={"output": "x"}, memory=memory)

        with pytest.raises(MissingOutputError) as exc_info:
            await call(chain, {"input": "hi"}, ChainCallOptions(callbacks=[recorder]))

        assert exc_info.value.key == "extra"
        assert memory.saved == []
        assert recorder.names == ["on_chain_start", "on_chain_error"]
        assert isinstance(recorder.args_of("on_chain_error")[0][0], MissingOutputError)

    @pytest.mark.asyncio
    async def test_extra_outputs_kept(self):
        """测试多余的输出键原样返回"""
        chain = EchoChain(result={"output": "x", "debug": 1})
        outputs = await call(chain, {"input": "hi"})
        assert outputs == {"output": "x", "debug": 1}

    @pytest.mark.asyncio
    async def test_logic_error(self, recorder):
        """测试 _call 异常原样抛出且 on_chain_error 只通知一次"""
        error = RuntimeError("boom")
        chain = EchoChain(error=error)

        with pytest.raises(RuntimeError) as exc_info:
            await call(chain, {"input": "hi"}, ChainCallOptions(callbacks=[recorder]))

        assert exc_info.value is error
        assert recorder.names == ["on_chain_start", "on_chain_error"]
        assert recorder.args_of("on_chain_error") == [(error,)]

    @pytest.mark.asyncio
    async def test_memory_merge_and_save(self):
        """测试记忆变量合并到输入，保存时使用原始输入"""
        memory = RecordingMemory({"history": "Human: hello"})
        chain = EchoChain(memory=memory)

        outputs = await call(chain, {"input": "hi"})

        assert chain.received == [{"input": "hi", "history": "Human: hello"}]
        assert memory.saved == [({"input": "hi"}, outputs)]

    @pytest.mark.asyncio
    async def test_memory_wins_on_collision(self):
        """测试同名键以记忆为准"""
        memory = RecordingMemory({"input": "from memory"})
        chain = EchoChain(memory=memory)

        outputs = await call(chain, {"input": "from caller"})

        assert chain.received[0]["input"] == "from memory"
        assert outputs == {"output": "output:from memory"}
        assert memory.saved[0][0] == {"input": "from caller"}

    @pytest.mark.asyncio
    async def test_simple_memory_default(self):
        """测试默认记忆为空的 SimpleMemory"""
        chain = EchoChain()
        assert isinstance(chain.memory, SimpleMemory)
        assert chain.memory.memory_variables == []

    @pytest.mark.asyncio
    async def test_acall(self):
        """测试 acall 走相同流程"""
        with pytest.raises(MissingInputError):
            await EchoChain().acall({})


class TestRun:
    """测试 run 的输入输出形状约束"""

    @pytest.mark.asyncio
    async def test_run(self):
        """测试单输入单输出"""
        assert await run(EchoChain(), "hi") == "output:hi"
        assert await EchoChain().arun("hey") == "output:hey"

    @pytest.mark.asyncio
    async def test_multiple_inputs(self):
        """测试多个输入键"""
        chain = EchoChain(inputs=["a", "b"])
        with pytest.raises(MultipleInputsInRunError):
            await run(chain, "hi")
        assert chain.received == []

    @pytest.mark.asyncio
    async def test_no_inputs(self):
        """测试没有输入键"""
        with pytest.raises(MultipleInputsInRunError):
            await run(EchoChain(inputs=[]), "hi")

    @pytest.mark.asyncio
    async def test_multiple_outputs(self):
        """测试多个输出键"""
        chain = EchoChain(outputs=["a", "b"])
        with pytest.raises(MultipleOutputsInRunError):
            await run(chain, "hi")
        assert chain.received == []

    @pytest.mark.asyncio
    async def test_wrong_output_type(self):
        """测试输出不是字符串"""
        chain = EchoChain(result={"output": 42})
        with pytest.raises(WrongOutputTypeInRunError) as exc_info:
            await run(chain, "hi")
        assert exc_info.value.output_type is int


class TestPipe:
    """测试 pipe 操作符"""

    def test_pipe(self):
        """测试 | 组合为 SequentialChain"""
        first = EchoChain(inputs=["input"], outputs=["middle"])
        second = EchoChain(inputs=["middle"], outputs=["output"])

        chain = first | second

        assert isinstance(chain, SequentialChain)
        assert chain.chains == [first, second]
        assert chain.input_keys == ["input"]
        assert chain.output_keys == ["output"]

    def test_repr(self):
        """测试 repr"""
        assert repr(EchoChain()) == "EchoChain(input_keys=['input'], output_keys=['output'])"
