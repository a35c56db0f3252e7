"""
测试 LLM 模型工厂
"""

import pytest

from config.default import LLMSettings
from config.main import local_configs
from ext.llm import FakeLLMModel, LLMConfigError, LLMModelFactory, OpenAILLMModel


class TestLLMModelFactory:
    """测试 LLM 工厂"""

    def test_registered_providers(self):
        """测试内置 provider 已注册"""
        assert LLMModelFactory.has_model("openai")
        assert LLMModelFactory.has_model("fake")
        assert not LLMModelFactory.has_model("unknown")
        assert {"openai", "fake"} <= set(LLMModelFactory.get_registered_model_types())

    def test_create_from_local_configs(self):
        """测试默认使用 local_configs.llm（test 环境为 fake）"""
        model = LLMModelFactory.create()
        assert isinstance(model, FakeLLMModel)
        assert model.max_tokens == local_configs.llm.max_tokens

    def test_create_with_overrides(self):
        """测试额外参数覆盖配置"""
        model = LLMModelFactory.create(LLMSettings(type="fake", max_tokens=64), responses=["ok"])
        assert isinstance(model, FakeLLMModel)
        assert model.max_tokens == 64
        assert model.responses == ["ok"]

    def test_create_openai(self):
        """测试从配置创建 OpenAI provider"""
        settings = LLMSettings(type="openai", api_key="sk-test", base_url="http://localhost:9999/v1")
        model = LLMModelFactory.create(settings)
        assert isinstance(model, OpenAILLMModel)
        assert model.model_name == "gpt-3.5-turbo"
        assert model.completion_model == "gpt-3.5-turbo-instruct"
        assert model.base_url == "http://localhost:9999/v1"

    def test_unknown_type(self):
        """测试未注册的类型"""
        with pytest.raises(LLMConfigError):
            LLMModelFactory.create(LLMSettings(type="unknown"))
