"""
Chain 模块基础抽象

定义 Chain 接口，以及所有 Chain 统一经过的调用流程 call / run
"""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from ext.llm.chain.exceptions import (
    MissingInputError,
    MissingOutputError,
    MultipleInputsInRunError,
    MultipleOutputsInRunError,
    WrongOutputTypeInRunError,
)
from ext.llm.chain.memory import BaseMemory, SimpleMemory
from ext.llm.chain.schema import ChainCallOptions
from util.general import format_dict_for_log


class Chain(ABC):
    """Chain 抽象基类

    声明固定的输入键与输出键，并持有一个记忆；实际逻辑在 _call 中实现。
    不要直接调用 _call，应通过 call / run（或 acall / arun）调用，
    由调用流程统一完成输入输出校验、记忆加载保存和事件通知。
    """

    def __init__(self, memory: BaseMemory | None = None):
        self.memory = memory or SimpleMemory()

    @property
    @abstractmethod
    def input_keys(self) -> list[str]:
        """调用时必须提供的输入键"""

    @property
    @abstractmethod
    def output_keys(self) -> list[str]:
        """调用结果必须包含的输出键"""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def _call(self, inputs: dict[str, Any], options: ChainCallOptions) -> dict[str, Any]:
        """执行 Chain 逻辑

        Args:
            inputs: 合并了记忆变量的输入
            options: 调用选项

        Returns:
            输出字典
        """

    async def acall(self, inputs: dict[str, Any], options: ChainCallOptions | None = None) -> dict[str, Any]:
        return await call(self, inputs, options)

    async def arun(self, input: str, options: ChainCallOptions | None = None) -> str:
        return await run(self, input, options)

    def __or__(self, other: "Chain") -> "Chain":
        """pipe 操作符支持

        允许使用 | 操作符串联多个 Chain：

            chain = synopsis_chain | review_chain

        Args:
            other: 下一个 Chain

        Returns:
            组合后的 SequentialChain
        """
        from ext.llm.chain.sequential import SequentialChain

        return SequentialChain([self, other])

    def __repr__(self) -> str:
        return f"{self.name}(input_keys={self.input_keys}, output_keys={self.output_keys})"


async def call(
    chain: Chain,
    input_values: dict[str, Any],
    options: ChainCallOptions | None = None,
) -> dict[str, Any]:
    """调用 Chain

    流程:
        1. 校验输入包含全部 input_keys
        2. 加载记忆并合并到输入（同名键以记忆为准）
        3. 通知 on_chain_start
        4. 执行 chain._call
        5. 校验输出包含全部 output_keys
        6. 以原始输入保存上下文到记忆
        7. 通知 on_chain_end

    第 2 步之后的任何异常都会通过 on_chain_error 通知一次后原样抛出

    Args:
        chain: 要调用的 Chain
        input_values: 输入
        options: 调用选项

    Returns:
        校验后的输出

    Raises:
        MissingInputError: 缺少输入键，此时不会执行任何逻辑，也不会通知事件
        MissingOutputError: 缺少输出键，此时不会保存记忆
    """
    options = options or ChainCallOptions()

    for key in chain.input_keys:
        if key not in input_values:
            raise MissingInputError(key)

    callbacks = options.callback_manager
    try:
        memory_values = await chain.memory.load_memory_variables(input_values)
        collisions = sorted(set(memory_values) & set(input_values))
        if collisions:
            logger.warning(f"{chain.name} memory variables override input values: {collisions}")
        working_values = {**input_values, **memory_values}

        await callbacks.on_chain_start(chain.name, working_values)
        logger.debug(f"{chain.name} call - inputs: {format_dict_for_log(working_values)}")

        outputs = await chain._call(working_values, options)

        for key in chain.output_keys:
            if key not in outputs:
                raise MissingOutputError(key)

        await chain.memory.save_context(input_values, outputs)
        logger.debug(f"{chain.name} call finished - outputs: {format_dict_for_log(outputs)}")
        await callbacks.on_chain_end(outputs)
    except Exception as e:
        logger.debug(f"{chain.name} call failed: {e!r}")
        await callbacks.on_chain_error(e)
        raise

    return outputs


async def run(chain: Chain, input: str, options: ChainCallOptions | None = None) -> str:
    """以单个字符串输入调用 Chain，返回单个字符串输出

    Raises:
        MultipleInputsInRunError: Chain 的输入键不是恰好一个
        MultipleOutputsInRunError: Chain 的输出键不是恰好一个
        WrongOutputTypeInRunError: 输出值不是字符串
    """
    input_keys = chain.input_keys
    if len(input_keys) != 1:
        raise MultipleInputsInRunError(input_keys)

    output_keys = chain.output_keys
    if len(output_keys) != 1:
        raise MultipleOutputsInRunError(output_keys)

    outputs = await call(chain, {input_keys[0]: input}, options)

    output = outputs[output_keys[0]]
    if not isinstance(output, str):
        raise WrongOutputTypeInRunError(type(output))
    return output


__all__ = [
    "Chain",
    "call",
    "run",
]
