"""
LLM Provider 注册

自动注册所有 LLM providers
"""

from ext.llm.factory import LLMModelFactory
from ext.llm.providers.fake import FakeLLMModel
from ext.llm.providers.openai import OpenAILLMModel

LLMModelFactory.register(OpenAILLMModel.model_type, OpenAILLMModel)
LLMModelFactory.register(FakeLLMModel.model_type, FakeLLMModel)

__all__ = ["OpenAILLMModel", "FakeLLMModel"]
