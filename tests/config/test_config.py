"""
测试配置加载
"""

import pytest
from pydantic import ValidationError

from config.default import AgentSettings, EnvironmentEnum, LLMSettings, ProjectConfig
from config.main import LocalConfig, local_configs


class TestLocalConfigs:
    """测试 local_configs 从 etc/test.yaml 加载"""

    def test_environment(self):
        """测试环境为 test"""
        assert local_configs.project.environment == EnvironmentEnum.test
        assert local_configs.project.unique_code == "chainloop-test"

    def test_llm_settings(self):
        """测试 yaml 覆盖与默认值合并"""
        assert local_configs.llm.type == "fake"
        # 未在 yaml 中配置的字段保留默认值
        assert local_configs.llm.max_tokens == 1024
        assert local_configs.llm.max_retries == 0

    def test_agent_settings(self):
        """测试 Agent 预算配置"""
        assert local_configs.agent.max_iterations == 5
        assert local_configs.agent.max_execution_time is None
        assert local_configs.agent.output_key == "output"

    def test_init_overrides_yaml(self):
        """测试初始化参数优先于 yaml"""
        config = LocalConfig(agent=AgentSettings(max_iterations=2))
        assert config.agent.max_iterations == 2
        assert config.llm.type == "fake"

    def test_env_overrides_yaml(self, monkeypatch):
        """测试环境变量（__ 分隔嵌套字段）优先于 yaml"""
        monkeypatch.setenv("LLM__TYPE", "openai")
        config = LocalConfig()
        assert config.llm.type == "openai"


class TestSettingsModels:
    """测试配置模型"""

    def test_llm_settings_defaults(self):
        """测试模型调用默认值"""
        settings = LLMSettings()
        assert settings.type == "openai"
        assert settings.model_name == "gpt-3.5-turbo"
        assert settings.embedding_model == "text-embedding-ada-002"
        assert settings.max_tokens == 1024

    def test_invalid_max_tokens(self):
        """测试非法 max_tokens"""
        with pytest.raises(ValidationError):
            LLMSettings(max_tokens=0)

    def test_production_debug_forbidden(self):
        """测试生产环境不允许开启 debug"""
        with pytest.raises(ValidationError):
            ProjectConfig(debug=True, environment=EnvironmentEnum.production)

    def test_base_dir(self):
        """测试项目根目录"""
        project = ProjectConfig()
        assert (project.base_dir / "etc").is_dir()
