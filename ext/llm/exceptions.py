"""
LLM 模块异常定义

定义模型配置、API 调用、响应校验过程中的错误。
"""


class LLMError(Exception):
    """LLM 模块基础异常类

    所有 LLM 相关异常的基类，用于统一捕获和处理 LLM 模块的错误。
    """
    pass


class LLMConfigError(LLMError):
    """LLM 配置错误

    典型场景：
    - 缺少 API key（未配置也未设置 OPENAI_API_KEY 环境变量）
    - 未注册的 provider 类型
    """
    pass


class LLMAPIError(LLMError):
    """LLM API 调用错误

    provider 返回错误或传输层失败时抛出，原始异常保存在 __cause__ 中。
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LLMTimeoutError(LLMAPIError):
    """LLM 请求超时错误"""
    pass


class LLMEmptyResponseError(LLMError):
    """provider 返回空结果（没有 choices / data）"""

    def __init__(self, message: str = "no response"):
        super().__init__(message)


class LLMResponseLengthError(LLMError):
    """响应数量与请求数量不一致

    典型场景：批量 embedding 请求 N 条文本，返回 M != N 条向量
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"unexpected length of response: expected {expected}, got {actual}")


class LLMUnexpectedEmbeddingModelError(LLMError):
    """不支持的 embedding 模型"""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"unexpected embedding model: {model}")


class LLMStreamingError(LLMError):
    """LLM 流式输出错误

    典型场景：
    - 流式连接中断
    - 流式响应块缺少 choices
    """
    pass
