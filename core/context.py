import uuid
from contextvars import ContextVar
from contextlib import asynccontextmanager, contextmanager
from collections.abc import AsyncGenerator, Generator

from config.main import local_configs
from core.logger import LogLevelEnum, setup_loguru
from core.types import ContextKeyEnum
from config.default import RegisterExtensionConfig

# 当前调用链的追踪 ID，由 ConsoleCallbackHandler 等观察者读取
trace_id_var: ContextVar[str] = ContextVar(ContextKeyEnum.trace_id.value, default="")


def get_trace_id() -> str:
    return trace_id_var.get()


@contextmanager
def new_trace(trace_id: str | None = None) -> Generator[str, None, None]:
    """在当前上下文内开启新的追踪 ID

    Args:
        trace_id: 指定追踪 ID（可选，默认随机生成）

    Yields:
        生效的追踪 ID
    """
    value = trace_id or uuid.uuid4().hex
    token = trace_id_var.set(value)
    try:
        yield value
    finally:
        trace_id_var.reset(token)


async def init_ctx():
    # logger
    setup_loguru(LogLevelEnum.DEBUG if local_configs.project.debug else LogLevelEnum.INFO)
    # extensions
    for _, ext_conf in local_configs.extensions:  # type: ignore
        if isinstance(ext_conf, RegisterExtensionConfig):
            await ext_conf.register()


async def clear_ctx():
    for _, ext_conf in local_configs.extensions:  # type: ignore
        if isinstance(ext_conf, RegisterExtensionConfig):
            await ext_conf.unregister()


@asynccontextmanager
async def ctx() -> AsyncGenerator:
    await init_ctx()
    try:
        yield
    finally:
        await clear_ctx()
