"""
LLM 模型工厂类

提供统一的接口，根据 LLMSettings 创建 LLM 模型实例。
"""

from typing import Any

from loguru import logger

from config.default import LLMSettings
from ext.llm.base import BaseLLMModel
from ext.llm.exceptions import LLMConfigError


class LLMModelFactory:
    """LLM 模型工厂类

    负责根据配置创建 LLM 模型实例，支持多种 provider，提供统一的接口。

    使用示例:
        >>> from config.main import local_configs
        >>> model = LLMModelFactory.create(local_configs.llm)
        >>> text = await model.call("Hello")
    """

    # 模型类型到实现类的映射
    _models: dict[str, type[BaseLLMModel]] = {}

    @classmethod
    def register(cls, model_type: str, model_class: type[BaseLLMModel]) -> None:
        """注册新的 LLM 模型类型

        Args:
            model_type: 模型类型标识（如 "openai", "fake"）
            model_class: 实现 BaseLLMModel 的类
        """
        if model_type in cls._models:
            logger.warning(f"LLM model type {model_type} already registered, overriding")
        cls._models[model_type] = model_class

    @classmethod
    def create(cls, settings: LLMSettings | None = None, **overrides: Any) -> BaseLLMModel:
        """创建 LLM 模型实例

        Args:
            settings: 模型配置，为空时使用 local_configs.llm
            overrides: 额外构造参数（覆盖配置中的同名项）

        Returns:
            BaseLLMModel 实例

        Raises:
            LLMConfigError: 不支持的模型类型或缺少必要配置
        """
        if settings is None:
            from config.main import local_configs

            settings = local_configs.llm

        model_cls = cls._models.get(settings.type)
        if not model_cls:
            available_types = ", ".join(cls._models.keys())
            raise LLMConfigError(f"不支持的模型类型: {settings.type}, 可用类型: {available_types}")

        kwargs: dict[str, Any] = {
            "model_name": settings.model_name,
            "completion_model": settings.completion_model,
            "embedding_model": settings.embedding_model,
            "api_key": settings.api_key,
            "base_url": settings.base_url,
            "max_tokens": settings.max_tokens,
            "temperature": settings.temperature,
            "timeout": settings.timeout,
            "max_retries": settings.max_retries,
        }
        kwargs.update(overrides)

        logger.debug(f"Creating LLM model - type: {settings.type}, model: {kwargs['model_name']}")
        return model_cls(**kwargs)

    @classmethod
    def has_model(cls, model_type: str) -> bool:
        """检查模型类型是否已注册"""
        return model_type in cls._models

    @classmethod
    def get_registered_model_types(cls) -> list[str]:
        """获取所有已注册的模型类型

        Example:
            >>> LLMModelFactory.get_registered_model_types()
            ['openai', 'fake']
        """
        return list(cls._models.keys())


__all__ = ["LLMModelFactory"]
