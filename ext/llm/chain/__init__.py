"""
Chain 模块

提供 Chain 调用协议、Agent 规划循环和工具管理能力

核心特性：
- 统一的 Chain 调用流程（输入输出校验、记忆加载与保存、事件通知）
- LLM Chain 与顺序组合（pipe 操作符）
- Prompt Template
- Tool 定义和执行
- Zero-shot ReAct Agent 与 AgentExecutor
- Memory 管理
- 输出解析器
"""

# 核心基础
from ext.llm.chain.base import Chain, call, run

# 数据结构
from ext.llm.chain.schema import (
    AgentAction,
    AgentFinish,
    AgentStep,
    AgentPlan,
    ChainCallOptions,
)

# Chain
from ext.llm.chain.llm_chain import LLMChain
from ext.llm.chain.sequential import SequentialChain

# Prompt
from ext.llm.chain.prompt import PromptTemplate

# Tool
from ext.llm.chain.tool import Tool, FunctionTool, tool

# Agent
from ext.llm.chain.agent import Agent, ZeroShotAgent, create_prompt
from ext.llm.chain.executor import AgentExecutor

# Memory
from ext.llm.chain.memory import (
    BaseMemory,
    SimpleMemory,
    InMemoryMemory,
    ConversationBufferMemory,
)

# Output Parser
from ext.llm.chain.output_parser import (
    BaseOutputParser,
    StrOutputParser,
    ZeroShotAgentOutputParser,
)

# Exceptions
from ext.llm.chain.exceptions import (
    ChainError,
    InvalidInputValuesError,
    MissingInputError,
    InvalidOutputValuesError,
    MissingOutputError,
    RunShapeError,
    MultipleInputsInRunError,
    MultipleOutputsInRunError,
    WrongOutputTypeInRunError,
    AgentError,
    OutputParserError,
    InvalidChainReturnTypeError,
    MaxIterationsError,
    ExecutionTimeoutError,
    ToolError,
    ToolNotFoundError,
    DuplicateToolError,
    ToolExecutionError,
    ChainMemoryError,
    MemorySaveError,
)

__all__ = [
    # 核心
    "Chain",
    "call",
    "run",
    # 数据结构
    "AgentAction",
    "AgentFinish",
    "AgentStep",
    "AgentPlan",
    "ChainCallOptions",
    # Chain
    "LLMChain",
    "SequentialChain",
    # Prompt
    "PromptTemplate",
    # Tool
    "Tool",
    "FunctionTool",
    "tool",
    # Agent
    "Agent",
    "ZeroShotAgent",
    "create_prompt",
    "AgentExecutor",
    # Memory
    "BaseMemory",
    "SimpleMemory",
    "InMemoryMemory",
    "ConversationBufferMemory",
    # Output Parser
    "BaseOutputParser",
    "StrOutputParser",
    "ZeroShotAgentOutputParser",
    # Exceptions
    "ChainError",
    "InvalidInputValuesError",
    "MissingInputError",
    "InvalidOutputValuesError",
    "MissingOutputError",
    "RunShapeError",
    "MultipleInputsInRunError",
    "MultipleOutputsInRunError",
    "WrongOutputTypeInRunError",
    "AgentError",
    "OutputParserError",
    "InvalidChainReturnTypeError",
    "MaxIterationsError",
    "ExecutionTimeoutError",
    "ToolError",
    "ToolNotFoundError",
    "DuplicateToolError",
    "ToolExecutionError",
    "ChainMemoryError",
    "MemorySaveError",
]
