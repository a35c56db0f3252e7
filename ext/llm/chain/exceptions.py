"""
Chain 模块异常定义

提供 Chain、Agent、Tool、Memory 相关的自定义异常
"""


class ChainError(Exception):
    """Chain 基础异常"""


class InvalidInputValuesError(ChainError):
    """Chain 输入不合法"""


class MissingInputError(InvalidInputValuesError):
    """缺少声明的输入键"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"missing key in input values: {key}")


class InvalidOutputValuesError(ChainError):
    """Chain 输出不合法"""


class MissingOutputError(InvalidOutputValuesError):
    """缺少声明的输出键"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"missing key in output values: {key}")


class RunShapeError(ChainError):
    """Chain 的输入输出形状不满足 run 的要求"""


class MultipleInputsInRunError(RunShapeError):
    def __init__(self, input_keys: list[str]):
        self.input_keys = input_keys
        super().__init__(f"run not supported in chain with more than one expected input: {input_keys}")


class MultipleOutputsInRunError(RunShapeError):
    def __init__(self, output_keys: list[str]):
        self.output_keys = output_keys
        super().__init__(f"run not supported in chain with more than one expected output: {output_keys}")


class WrongOutputTypeInRunError(RunShapeError):
    def __init__(self, output_type: type):
        self.output_type = output_type
        super().__init__(f"run not supported in chain that returns value that is not string: {output_type.__name__}")


class AgentError(ChainError):
    """Agent 异常"""


class OutputParserError(AgentError):
    """无法从模型输出中解析出动作或最终答案"""

    def __init__(self, llm_output: str):
        self.llm_output = llm_output
        super().__init__(f"unable to parse agent output: {llm_output}")


class InvalidChainReturnTypeError(AgentError):
    """Agent 内部 Chain 返回的文本不是字符串"""

    def __init__(self, output_type: type):
        self.output_type = output_type
        super().__init__(f"agent chain did not return a string: {output_type.__name__}")


class MaxIterationsError(AgentError):
    """达到最大迭代次数异常"""

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        super().__init__(f"Agent reached maximum iterations ({max_iterations}) without completing")


class ExecutionTimeoutError(AgentError):
    """超过最长执行时间异常"""

    def __init__(self, max_execution_time: float):
        self.max_execution_time = max_execution_time
        super().__init__(f"Agent exceeded maximum execution time ({max_execution_time}s) without completing")


class ToolError(ChainError):
    """Tool 异常"""


class ToolNotFoundError(ToolError):
    """工具未找到异常"""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' not found")


class DuplicateToolError(ToolError):
    """工具名称重复"""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' registered more than once")


class ToolExecutionError(ToolError):
    """工具自身执行失败

    消息与原始异常一致，原始异常保存在 original_error 与 __cause__ 中
    """

    def __init__(self, tool_name: str, original_error: Exception):
        self.tool_name = tool_name
        self.original_error = original_error
        super().__init__(str(original_error))


class ChainMemoryError(ChainError):
    """Memory 异常"""


class MemorySaveError(ChainMemoryError):
    """Memory 保存异常"""

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message)


__all__ = [
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
