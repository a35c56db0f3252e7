from functools import lru_cache

from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
    YamlConfigSettingsSource,
    PydanticBaseSettingsSource,
)

from ext.register import ExtensionRegistry
from config.default import BASE_DIR, ENVIRONMENT, LLMSettings, AgentSettings, ProjectConfig


class LocalConfig(BaseSettings):
    """全部的配置信息."""

    model_config = SettingsConfigDict(env_nested_delimiter="__")

    project: ProjectConfig = ProjectConfig()
    llm: LLMSettings = LLMSettings()
    agent: AgentSettings = AgentSettings()
    extensions: ExtensionRegistry = ExtensionRegistry()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, f"{str(BASE_DIR)}/etc/{ENVIRONMENT.lower()}.yaml", "utf-8"),
        )


@lru_cache
def create_local_configs() -> LocalConfig:
    """create yaml file base setting object"""

    return LocalConfig()  # type: ignore


local_configs: LocalConfig = create_local_configs()  # type: ignore
