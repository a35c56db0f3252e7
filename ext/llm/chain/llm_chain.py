"""
LLM Chain

格式化提示词并调用模型，是最基础的 Chain
"""

from typing import Any

from loguru import logger

from ext.llm.base import BaseLLMModel
from ext.llm.chain.base import Chain
from ext.llm.chain.memory import BaseMemory
from ext.llm.chain.output_parser import BaseOutputParser
from ext.llm.chain.prompt import PromptTemplate
from ext.llm.chain.schema import ChainCallOptions
from ext.llm.exceptions import LLMEmptyResponseError
from ext.llm.types import CallOptions, ChatMessage, Generation, LLMResult
from util.general import truncate_content


class LLMChain(Chain):
    """LLM Chain

    使用示例:
        >>> chain = LLMChain(model, PromptTemplate.from_template("Tell me a joke about {topic}"))
        >>> text = await chain.arun("cats")

    Args:
        llm: 模型实例
        prompt: 提示词模板
        memory: 记忆（可选）
        output_key: 输出键
        output_parser: 输出解析器（可选，为空时直接输出模型文本）
        streaming: 是否流式调用，开启后每个片段通过 on_llm_new_token 通知
        chat_mode: 是否以对话模式调用（提示词作为一条 user 消息）
        llm_options: 额外的模型调用选项（温度、max_tokens 等）
    """

    def __init__(
        self,
        llm: BaseLLMModel,
        prompt: PromptTemplate,
        memory: BaseMemory | None = None,
        output_key: str = "text",
        output_parser: BaseOutputParser | None = None,
        streaming: bool = False,
        chat_mode: bool = False,
        llm_options: CallOptions | None = None,
    ):
        super().__init__(memory)
        self.llm = llm
        self.prompt = prompt
        self.output_key = output_key
        self.output_parser = output_parser
        self.streaming = streaming
        self.chat_mode = chat_mode
        self.llm_options = llm_options or CallOptions()

    @property
    def input_keys(self) -> list[str]:
        # 由记忆提供的变量不要求调用方传入
        memory_variables = set(self.memory.memory_variables)
        return [var for var in self.prompt.input_variables if var not in memory_variables]

    @property
    def output_keys(self) -> list[str]:
        return [self.output_key]

    async def _call(self, inputs: dict[str, Any], options: ChainCallOptions) -> dict[str, Any]:
        prompt = self.prompt.format(**{var: inputs[var] for var in self.prompt.input_variables})
        callbacks = options.callback_manager

        update: dict[str, Any] = {}
        if options.stop_words:
            update["stop_words"] = options.stop_words
        if self.streaming:
            update["streaming_func"] = callbacks.on_llm_new_token
        call_options = self.llm_options.model_copy(update=update)

        llm_name = self.llm.__class__.__name__
        extra_params = {"stop_words": call_options.stop_words or [], "streaming": self.streaming}
        logger.debug(f"LLMChain calling {llm_name} - prompt: {truncate_content(prompt)}")

        try:
            if self.chat_mode:
                messages = [ChatMessage(role="user", content=prompt)]
                await callbacks.on_chat_model_start(llm_name, [messages], extra_params)
                chat_generation = await self.llm.chat(messages, call_options)
                generation = Generation(text=chat_generation.text, generation_info=chat_generation.generation_info)
            else:
                await callbacks.on_llm_start(llm_name, [prompt], extra_params)
                generations = await self.llm.generate([prompt], call_options)
                if not generations:
                    raise LLMEmptyResponseError()
                generation = generations[0]
        except Exception as e:
            await callbacks.on_llm_error(e)
            raise

        text = generation.text
        llm_output = {}
        if "token_usage" in generation.generation_info:
            llm_output["token_usage"] = generation.generation_info["token_usage"]
        await callbacks.on_llm_end(LLMResult(generations=[[generation]], llm_output=llm_output))
        logger.debug(f"LLMChain result: {truncate_content(text)}")

        output = await self.output_parser.parse(text) if self.output_parser else text
        return {self.output_key: output}


__all__ = ["LLMChain"]
