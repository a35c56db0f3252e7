import os
import abc
import enum
from typing import Self, Generic, TypeVar
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")


class EnvironmentEnum(str, enum.Enum):
    local = "local"
    development = "development"
    test = "test"
    production = "production"


ENVIRONMENT = os.environ.get(
    "environment",  # noqa
    EnvironmentEnum.local.value,
)

BASE_DIR = Path(__file__).resolve().parent.parent


class ProjectConfig(BaseModel):
    unique_code: str = "chainloop"
    debug: bool = False
    environment: EnvironmentEnum = EnvironmentEnum(ENVIRONMENT)

    @model_validator(mode="after")
    def check_debug_options(self) -> Self:
        assert not (
            self.debug and self.environment == EnvironmentEnum.production
        ), "Production cannot set with debug enabled"
        return self

    @property
    def base_dir(self) -> Path:
        return BASE_DIR


class LLMSettings(BaseModel):
    """模型调用默认配置

    替代全局默认常量，由工厂在构造 provider 时显式传入
    """

    type: str = Field(default="openai", description="provider 类型")
    model_name: str = Field(default="gpt-3.5-turbo", description="对话模型")
    completion_model: str = Field(default="gpt-3.5-turbo-instruct", description="补全模型")
    embedding_model: str = Field(default="text-embedding-ada-002", description="向量模型")
    api_key: str | None = Field(default=None, description="API 密钥，为空时读取 OPENAI_API_KEY")
    base_url: str | None = Field(default=None, description="API 基础地址，为空时读取 OPENAI_BASE_URL")
    max_tokens: int = Field(default=1024, ge=1, description="默认最大输出 token 数")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="默认温度")
    timeout: float = Field(default=60.0, gt=0, description="请求超时时间(秒)")
    max_retries: int = Field(default=0, ge=0, description="SDK 层重试次数，核心流程本身不重试")


class AgentSettings(BaseModel):
    """Agent 执行预算"""

    max_iterations: int | None = Field(default=15, ge=1, description="最大规划轮数")
    max_execution_time: float | None = Field(default=None, gt=0, description="最长执行时间(秒)")
    output_key: str = Field(default="output", description="最终答案输出键")


class ExtensionConfig(BaseModel): ...


class InstanceExtensionConfig(ExtensionConfig, Generic[T]):

    @property
    @abc.abstractmethod
    def instance(self) -> T: ...


class RegisterExtensionConfig(ExtensionConfig):

    @abc.abstractmethod
    async def register(self) -> None: ...

    @abc.abstractmethod
    async def unregister(self) -> None: ...
