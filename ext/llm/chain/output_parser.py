"""
输出解析器实现

提供将 LLM 输出转换为 Agent 动作或最终结果的解析器
"""

import re
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from loguru import logger

from ext.llm.chain.exceptions import OutputParserError
from ext.llm.chain.schema import AgentAction, AgentFinish, AgentPlan
from util.general import truncate_content

OutputT = TypeVar("OutputT")

FINAL_ANSWER_ACTION = "Final Answer:"
ACTION_PATTERN = re.compile(r"Action:\s*(.+)\s*Action Input:\s*(.+)")


class BaseOutputParser(Generic[OutputT], ABC):
    """输出解析器基类

    用于将 LLM 的字符串输出转换为特定格式
    """

    @abstractmethod
    async def parse(self, text: str) -> OutputT:
        """解析文本

        Args:
            text: LLM 输出文本

        Returns:
            解析后的数据
        """


class StrOutputParser(BaseOutputParser[str]):
    """字符串输出解析器

    返回去除首尾空白的文本
    """

    async def parse(self, text: str) -> str:
        return text.strip()


class ZeroShotAgentOutputParser(BaseOutputParser[AgentPlan]):
    """MRKL 格式输出解析器

    解析规则：
    - 包含 "Final Answer:" 时取最后一个标记之后的文本作为最终答案
    - 否则匹配 "Action: ... Action Input: ..." 得到一个动作
    - 都不满足时抛出 OutputParserError
    """

    def __init__(self, output_key: str = "output"):
        self.output_key = output_key

    async def parse(self, text: str) -> AgentPlan:
        if FINAL_ANSWER_ACTION in text:
            answer = text.split(FINAL_ANSWER_ACTION)[-1].strip()
            logger.debug(f"ZeroShotAgentOutputParser final answer: {truncate_content(answer)}")
            return AgentFinish(return_values={self.output_key: answer}, log=text)

        match = ACTION_PATTERN.search(text)
        if match is None:
            logger.warning(f"ZeroShotAgentOutputParser unable to parse output: {truncate_content(text)}")
            raise OutputParserError(text)

        action = AgentAction(tool=match.group(1).strip(), tool_input=match.group(2).strip(), log=text)
        logger.debug(f"ZeroShotAgentOutputParser action: {action.tool}, input: {truncate_content(action.tool_input)}")
        return [action]


__all__ = [
    "BaseOutputParser",
    "StrOutputParser",
    "ZeroShotAgentOutputParser",
    "FINAL_ANSWER_ACTION",
]
