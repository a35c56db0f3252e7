"""
Chain 组合实现

将多个 Chain 串联，前一个 Chain 的输出可作为后续 Chain 的输入
"""

from typing import Any

from loguru import logger

from ext.llm.chain.base import Chain, call
from ext.llm.chain.memory import BaseMemory
from ext.llm.chain.schema import ChainCallOptions
from util.general import dedupe_keys


class SequentialChain(Chain):
    """顺序执行 Chain

    每个子 Chain 都经过完整的调用流程（校验、记忆、事件），
    所有中间输出累积在同一个字典中供后续子 Chain 取用

    使用示例:
        >>> chain = SequentialChain([synopsis_chain, review_chain])
        >>> chain = synopsis_chain | review_chain
    """

    def __init__(
        self,
        chains: list[Chain],
        input_keys: list[str] | None = None,
        output_keys: list[str] | None = None,
        memory: BaseMemory | None = None,
    ):
        """初始化顺序执行 Chain

        Args:
            chains: 子 Chain 列表，按执行顺序排列
            input_keys: 输入键（可选，默认推断为既非记忆变量、也未被前序 Chain 产出的输入）
            output_keys: 输出键（可选，默认为最后一个 Chain 的输出键）
            memory: 记忆（可选）

        Raises:
            ValueError: 子 Chain 列表为空，或某个子 Chain 的输入无法被满足
        """
        super().__init__(memory)
        if not chains:
            raise ValueError("SequentialChain requires at least one chain")
        self.chains = list(chains)
        self._input_keys = input_keys if input_keys is not None else self._infer_input_keys()
        self._output_keys = output_keys if output_keys is not None else list(self.chains[-1].output_keys)
        self._validate_chains()

    def _infer_input_keys(self) -> list[str]:
        produced: set[str] = set(self.memory.memory_variables)
        required: list[str] = []
        for chain in self.chains:
            required.extend(key for key in chain.input_keys if key not in produced)
            produced.update(chain.output_keys)
        return dedupe_keys(required)

    def _validate_chains(self) -> None:
        available = set(self._input_keys) | set(self.memory.memory_variables)
        for chain in self.chains:
            missing = [key for key in chain.input_keys if key not in available]
            if missing:
                raise ValueError(f"{chain.name} requires inputs {missing} not provided by previous chains")
            available.update(chain.output_keys)

        missing_outputs = [key for key in self._output_keys if key not in available]
        if missing_outputs:
            raise ValueError(f"SequentialChain output keys {missing_outputs} are not produced by any chain")

    @property
    def input_keys(self) -> list[str]:
        return self._input_keys

    @property
    def output_keys(self) -> list[str]:
        return self._output_keys

    async def _call(self, inputs: dict[str, Any], options: ChainCallOptions) -> dict[str, Any]:
        values = dict(inputs)
        for idx, chain in enumerate(self.chains):
            logger.debug(f"SequentialChain step {idx + 1}/{len(self.chains)}: {chain.name}")
            outputs = await call(chain, {key: values[key] for key in chain.input_keys}, options)
            values.update(outputs)

        logger.debug("SequentialChain completed")
        return {key: values[key] for key in self._output_keys}


__all__ = ["SequentialChain"]
