"""
回调模块

提供生命周期事件的观察者接口：
- CallbackHandler: 处理器基类（全部钩子默认空实现）
- CallbackManager: 按顺序分发事件到多个处理器
- ConsoleCallbackHandler: 通过 loguru 输出带颜色标签的事件日志
"""

from ext.llm.callbacks.base import CallbackHandler
from ext.llm.callbacks.manager import CallbackManager
from ext.llm.callbacks.console import ConsoleCallbackHandler

__all__ = [
    "CallbackHandler",
    "CallbackManager",
    "ConsoleCallbackHandler",
]
