"""
Agent 实现

Agent 根据输入和已执行的步骤决定下一步：返回要执行的动作，或给出最终结果。
循环执行由 AgentExecutor 负责。
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any
from collections.abc import Sequence

from loguru import logger

from ext.llm.base import BaseLLMModel
from ext.llm.callbacks.base import CallbackHandler
from ext.llm.chain.base import Chain, call
from ext.llm.chain.exceptions import InvalidChainReturnTypeError
from ext.llm.chain.llm_chain import LLMChain
from ext.llm.chain.output_parser import BaseOutputParser, ZeroShotAgentOutputParser
from ext.llm.chain.prompt import PromptTemplate
from ext.llm.chain.schema import AgentPlan, AgentStep, ChainCallOptions
from ext.llm.chain.tool import Tool
from util.general import truncate_content

SCRATCHPAD_KEY = "agent_scratchpad"
TODAY_KEY = "today"
STOP_WORDS = ["\nObservation:", "\n\tObservation:"]

PREFIX = """Today is {today}.
Answer the following questions as best you can. You have access to the following tools:"""

FORMAT_INSTRUCTIONS = """Use the following format:

Question: the input question you must answer
Thought: you should always think about what to do
Action: the action to take, should be one of [{tool_names}]
Action Input: the input to the action
Observation: the result of the action
... (this Thought/Action/Action Input/Observation can repeat N times)
Thought: I now know the final answer
Final Answer: the final answer to the original input question"""

SUFFIX = """Begin!

Question: {input}
Thought:{agent_scratchpad}"""


class Agent(ABC):
    """Agent 抽象基类

    只负责单轮规划，不持有循环状态
    """

    @abstractmethod
    async def plan(
        self,
        intermediate_steps: list[AgentStep],
        inputs: dict[str, Any],
        callbacks: Sequence[CallbackHandler] | None = None,
    ) -> AgentPlan:
        """决定下一步

        Args:
            intermediate_steps: 本次执行中已完成的步骤（按顺序）
            inputs: 用户输入
            callbacks: 事件观察者

        Returns:
            非空的动作列表，或最终结果
        """

    @property
    @abstractmethod
    def input_keys(self) -> list[str]:
        """调用方需要提供的输入键"""

    @property
    @abstractmethod
    def output_keys(self) -> list[str]:
        """最终结果包含的输出键"""


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def create_prompt(
    tools: list[Tool],
    prefix: str = PREFIX,
    suffix: str = SUFFIX,
    format_instructions: str = FORMAT_INSTRUCTIONS,
) -> PromptTemplate:
    """构造 MRKL 格式的提示词

    依次拼接前缀、工具描述、格式说明和后缀，模板变量为 today / input / agent_scratchpad

    Args:
        tools: 可用工具
        prefix: 前缀
        suffix: 后缀
        format_instructions: 格式说明，{tool_names} 会被替换为工具名列表

    Returns:
        PromptTemplate 实例
    """
    tool_strings = "\n".join(f"{tool.name}: {tool.description}" for tool in tools)
    tool_names = ", ".join(tool.name for tool in tools)
    instructions = format_instructions.replace("{tool_names}", tool_names)

    template = "\n\n".join(
        [prefix, _escape_braces(tool_strings), _escape_braces(instructions), suffix]
    )
    return PromptTemplate(template)


class ZeroShotAgent(Agent):
    """Zero-shot ReAct Agent

    每轮把已执行步骤渲染为 scratchpad 交给内部 Chain，
    再用输出解析器从模型文本中得到动作或最终答案

    Args:
        llm_chain: 内部 Chain，输入需包含 agent_scratchpad，输出需包含 text
        tools: 可用工具
        output_key: 最终答案的输出键
        output_parser: 输出解析器（可选，默认 ZeroShotAgentOutputParser）
    """

    def __init__(
        self,
        llm_chain: Chain,
        tools: list[Tool],
        output_key: str = "output",
        output_parser: BaseOutputParser[AgentPlan] | None = None,
    ):
        self.llm_chain = llm_chain
        self.tools = list(tools)
        self.output_key = output_key
        self.output_parser = output_parser or ZeroShotAgentOutputParser(output_key)

    @classmethod
    def from_llm_and_tools(
        cls,
        llm: BaseLLMModel,
        tools: list[Tool],
        output_key: str | None = None,
        prefix: str = PREFIX,
        suffix: str = SUFFIX,
        format_instructions: str = FORMAT_INSTRUCTIONS,
        streaming: bool = False,
    ) -> "ZeroShotAgent":
        """由模型和工具构造 Agent（使用标准 MRKL 提示词）

        output_key 为空时使用 local_configs.agent.output_key
        """
        if output_key is None:
            from config.main import local_configs

            output_key = local_configs.agent.output_key

        prompt = create_prompt(tools, prefix=prefix, suffix=suffix, format_instructions=format_instructions)
        return cls(LLMChain(llm, prompt, streaming=streaming), tools, output_key=output_key)

    @property
    def input_keys(self) -> list[str]:
        return [key for key in self.llm_chain.input_keys if key not in (SCRATCHPAD_KEY, TODAY_KEY)]

    @property
    def output_keys(self) -> list[str]:
        return [self.output_key]

    @staticmethod
    def construct_scratchpad(intermediate_steps: list[AgentStep]) -> str:
        """将已执行步骤渲染为 scratchpad 文本"""
        if not intermediate_steps:
            return ""
        parts = []
        for step in intermediate_steps:
            parts.append(step.action.log)
            parts.append("\nObservation: " + step.observation)
        parts.append("\nThought:")
        return "".join(parts)

    async def plan(
        self,
        intermediate_steps: list[AgentStep],
        inputs: dict[str, Any],
        callbacks: Sequence[CallbackHandler] | None = None,
    ) -> AgentPlan:
        full_inputs = {
            **inputs,
            SCRATCHPAD_KEY: self.construct_scratchpad(intermediate_steps),
            TODAY_KEY: datetime.now().strftime("%B %d, %Y"),
        }
        options = ChainCallOptions(stop_words=STOP_WORDS, callbacks=list(callbacks or []))

        logger.debug(f"ZeroShotAgent plan - steps: {len(intermediate_steps)}")
        outputs = await call(self.llm_chain, full_inputs, options)

        output = outputs.get("text")
        if not isinstance(output, str):
            raise InvalidChainReturnTypeError(type(output))

        logger.debug(f"ZeroShotAgent llm output: {truncate_content(output)}")
        return await self.output_parser.parse(output)


__all__ = [
    "Agent",
    "ZeroShotAgent",
    "create_prompt",
    "PREFIX",
    "SUFFIX",
    "FORMAT_INSTRUCTIONS",
]
