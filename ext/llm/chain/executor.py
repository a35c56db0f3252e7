"""
Agent 执行器

驱动 规划 -> 执行工具 -> 观察 的循环，直到 Agent 给出最终结果或超出预算
"""

import time
from typing import Any

from loguru import logger

from ext.llm.chain.agent import Agent
from ext.llm.chain.base import Chain
from ext.llm.chain.exceptions import (
    AgentError,
    DuplicateToolError,
    ExecutionTimeoutError,
    MaxIterationsError,
    ToolExecutionError,
    ToolNotFoundError,
)
from ext.llm.chain.memory import BaseMemory
from ext.llm.chain.schema import AgentFinish, AgentStep, ChainCallOptions
from ext.llm.chain.tool import Tool
from util.general import truncate_content

INTERMEDIATE_STEPS_KEY = "intermediate_steps"


class AgentExecutor(Chain):
    """Agent 执行器

    本身也是 Chain，可通过 call / run 调用；单次调用内的循环严格串行。

    使用示例:
        >>> agent = ZeroShotAgent.from_llm_and_tools(model, [search])
        >>> executor = AgentExecutor(agent, [search], max_iterations=5)
        >>> answer = await executor.arun("What's the weather in Paris?")

    Args:
        agent: 负责规划的 Agent
        tools: 可用工具（名称必须唯一）
        memory: 记忆（可选）
        max_iterations: 最大规划轮数（None 表示不限制）
        max_execution_time: 最长执行时间，单位秒（None 表示不限制）
        return_intermediate_steps: 是否在输出中附带 intermediate_steps

    Raises:
        DuplicateToolError: 存在同名工具
    """

    def __init__(
        self,
        agent: Agent,
        tools: list[Tool],
        memory: BaseMemory | None = None,
        max_iterations: int | None = None,
        max_execution_time: float | None = None,
        return_intermediate_steps: bool = False,
    ):
        super().__init__(memory)
        self.agent = agent
        self.tools = list(tools)
        self.max_iterations = max_iterations
        self.max_execution_time = max_execution_time
        self.return_intermediate_steps = return_intermediate_steps

        self._tools_by_name: dict[str, Tool] = {}
        for tool in self.tools:
            if tool.name in self._tools_by_name:
                raise DuplicateToolError(tool.name)
            self._tools_by_name[tool.name] = tool

    @classmethod
    def from_agent_and_tools(
        cls,
        agent: Agent,
        tools: list[Tool],
        memory: BaseMemory | None = None,
        **kwargs: Any,
    ) -> "AgentExecutor":
        """使用 local_configs.agent 中的预算默认值构造执行器"""
        from config.main import local_configs

        settings = local_configs.agent
        kwargs.setdefault("max_iterations", settings.max_iterations)
        kwargs.setdefault("max_execution_time", settings.max_execution_time)
        return cls(agent, tools, memory=memory, **kwargs)

    @property
    def input_keys(self) -> list[str]:
        # 由记忆提供的变量不要求调用方传入
        memory_variables = set(self.memory.memory_variables)
        return [key for key in self.agent.input_keys if key not in memory_variables]

    @property
    def output_keys(self) -> list[str]:
        if self.return_intermediate_steps:
            return [*self.agent.output_keys, INTERMEDIATE_STEPS_KEY]
        return self.agent.output_keys

    def _get_tool(self, tool_name: str) -> Tool:
        """根据名称获取工具

        Raises:
            ToolNotFoundError: 工具未找到
        """
        tool = self._tools_by_name.get(tool_name)
        if tool is None:
            raise ToolNotFoundError(tool_name)
        return tool

    def _check_budget(self, iterations: int, started_at: float) -> None:
        if self.max_iterations is not None and iterations >= self.max_iterations:
            logger.warning(f"AgentExecutor reached max iterations: {self.max_iterations}")
            raise MaxIterationsError(self.max_iterations)

        if self.max_execution_time is not None and time.monotonic() - started_at >= self.max_execution_time:
            logger.warning(f"AgentExecutor exceeded max execution time: {self.max_execution_time}s")
            raise ExecutionTimeoutError(self.max_execution_time)

    def _return(self, finish: AgentFinish, steps: list[AgentStep]) -> dict[str, Any]:
        outputs = dict(finish.return_values)
        if self.return_intermediate_steps:
            outputs[INTERMEDIATE_STEPS_KEY] = list(steps)
        return outputs

    async def _call(self, inputs: dict[str, Any], options: ChainCallOptions) -> dict[str, Any]:
        callbacks = options.callback_manager
        steps: list[AgentStep] = []
        iterations = 0
        started_at = time.monotonic()

        logger.debug(
            f"AgentExecutor start - tools: {list(self._tools_by_name)}, "
            f"max_iterations: {self.max_iterations}, max_execution_time: {self.max_execution_time}"
        )

        while True:
            self._check_budget(iterations, started_at)
            logger.debug(f"AgentExecutor iteration {iterations + 1}/{self.max_iterations or 'unlimited'}")

            plan = await self.agent.plan(steps, inputs, options.callbacks)
            iterations += 1

            if isinstance(plan, AgentFinish):
                await callbacks.on_agent_finish(plan)
                logger.debug(f"AgentExecutor completed after {iterations} iterations")
                return self._return(plan, steps)

            if not plan:
                raise AgentError("agent returned neither actions nor a finish")

            for action in plan:
                await callbacks.on_agent_action(action)
                tool = self._get_tool(action.tool)

                logger.info(f"AgentExecutor executing tool: {action.tool}")
                try:
                    observation = await tool.acall(action.tool_input, callbacks)
                except ToolExecutionError as e:
                    # 工具错误作为观察结果交给 Agent，不中断循环
                    observation = str(e.original_error)

                logger.debug(f"Tool '{action.tool}' observation: {truncate_content(observation)}")
                steps.append(AgentStep(action=action, observation=observation))


__all__ = ["AgentExecutor", "INTERMEDIATE_STEPS_KEY"]
