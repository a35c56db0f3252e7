from __future__ import annotations

import sys
import logging
import warnings
import traceback
from enum import Enum
from types import FrameType
from typing import cast
from itertools import chain

import loguru
from loguru import logger

from core.types import IntEnum
from config.default import ENVIRONMENT, EnvironmentEnum


class LogLevelEnum(IntEnum):
    """日志级别"""

    CRITICAL = (logging.CRITICAL, "CRITICAL")
    ERROR = (logging.ERROR, "ERROR")
    WARNING = (logging.WARNING, "WARNING")
    INFO = (logging.INFO, "INFO")
    DEBUG = (logging.DEBUG, "DEBUG")
    NOTSET = (logging.NOTSET, "NOTSET")


class LoggerNameEnum(str, Enum):
    root = "root"
    httpx = "httpx"
    httpcore = "httpcore"
    openai = "openai"


IgnoredLoggerNames = [
    LoggerNameEnum.httpcore.value,
]


class InterceptHandler(logging.Handler):
    """Logs to loguru from Python logging module"""

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.split(".")[0] in IgnoredLoggerNames:
            return
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        if record.exc_info:
            # 保持日志一致性
            tb = traceback.extract_tb(record.exc_info[2])
            if tb:
                file_name, line_num, func_name, _ = tb[-1]
                location = f"{file_name}:{func_name}:{line_num}"
            else:
                location = record.name
            if ENVIRONMENT in [EnvironmentEnum.local.value]:
                print("".join(traceback.format_exception(*record.exc_info)))
                return

            logger.bind(location=location).critical(
                "".join(traceback.format_exception(*record.exc_info)),
            )
            return

        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:  # noqa: WPS609
            frame = cast(FrameType, frame.f_back)
            depth += 1

        logger.opt(depth=depth).log(
            level,
            record.getMessage(),
        )


def setup_loguru_logging_intercept(
    level: int = logging.DEBUG,
    modules: tuple = (),
) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=level)  # noqa
    for logger_name in chain(("",), modules):
        mod_logger = logging.getLogger(logger_name)
        mod_logger.handlers = [InterceptHandler(level=level)]
        mod_logger.setLevel(level)


def edit_record_and_gen_format(record: loguru.Record) -> str:
    extra = record.get("extra") or {}
    if record["level"].no <= 10:
        # debug
        level_color = "white"
    elif record["level"].no <= 20:
        # info
        level_color = "blue"
    elif record["level"].no <= 30:
        # warning
        level_color = "yellow"
    elif record["level"].no <= 40:
        # error
        level_color = "red"
    else:
        # other
        level_color = "magenta"
    if ENVIRONMENT in [EnvironmentEnum.local.value]:
        format_s = (
            "<green>[{time:YYYY-MM-DD HH:mm:ss}]</green> | "
            + f"<{level_color}>"
            + "<bold>[{level}]</bold>"
            + f"</{level_color}>"
            + " | <fg 0,75,0><underline>{name}:{line}</underline> >> {function}</fg 0,75,0> | <cyan>{message}</cyan>"
        )
    else:
        format_s = "[{time:YYYY-MM-DD HH:mm:ss}] | [{level}] | {name}:{line} >> {function} | {message}"

    if extra:
        format_s += " | " + "{extra}"

    return format_s + "\n{exception}"


def setup_loguru(
    level: LogLevelEnum = LogLevelEnum.INFO,
    enqueue: bool = True,
) -> None:
    logger.remove()
    logger.add(
        sink=sys.stdout,  # type: ignore
        format=edit_record_and_gen_format,  # 日志显示格式
        level=level.label,  # 日志级别
        enqueue=enqueue,  # enqueue=True 使得多进程安全
        serialize=False,
        backtrace=True,
        diagnose=ENVIRONMENT != EnvironmentEnum.production.value,
        colorize=None,
    )

    # 第三方 SDK 的标准库日志统一交给 loguru
    setup_loguru_logging_intercept(
        level=level.value,
        modules=(
            LoggerNameEnum.httpx.value,
            LoggerNameEnum.openai.value,
        ),
    )

    # disable duplicate logging
    logging.getLogger(LoggerNameEnum.root.value).handlers.clear()  # type: ignore
    # capture warning
    logging.captureWarnings(True)
    showwarning_ = warnings.showwarning

    def showwarning(message, *args, **kwargs):
        logger.warning(message)
        showwarning_(message, *args, **kwargs)

    warnings.showwarning = showwarning
