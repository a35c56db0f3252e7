# ruff: noqa
from enum import IntEnum as OriginIntEnum
from enum import StrEnum as OriginStrEnum
from enum import EnumMeta, unique


class ExtendedEnumMeta(EnumMeta):
    def __call__(cls, value, label: str = ""):  # type: ignore
        obj = super().__call__(value)  # type: ignore
        obj._value_ = value  # type: ignore
        if label:
            obj._label = label  # type: ignore
        else:
            obj._label = obj._dict[value]  # type: ignore
        return obj

    def __new__(metacls, cls, bases, classdict):  # type: ignore
        enum_class = super().__new__(metacls, cls, bases, classdict)
        enum_class._dict = {member.value: member.label for member in enum_class}  # type: ignore
        enum_class._help_text = ", ".join([f"{member.value}: {member.label}" for member in enum_class])  # type: ignore
        return enum_class


class StrEnum(OriginStrEnum, metaclass=ExtendedEnumMeta):
    _dict: dict[str, str]
    _help_text: str

    def __new__(cls, value, label: str = ""):  # type: ignore
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj._label = label  # type: ignore
        return obj

    @property
    def label(self):
        """The value of the Enum member."""
        return self._label  # type: ignore


class IntEnum(OriginIntEnum, metaclass=ExtendedEnumMeta):
    _dict: dict[int, str]
    _help_text: str

    def __new__(cls, value, label: str = ""):  # type: ignore
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj._label = label  # type: ignore
        return obj

    @property
    def label(self):
        """The value of the Enum member."""
        return self._label  # type: ignore


@unique
class ContextKeyEnum(StrEnum):
    """上下文变量key."""

    trace_id = ("trace_id", "调用链追踪ID")


@unique
class LifecycleTagEnum(StrEnum):
    """生命周期事件日志标签"""

    llm_start = ("llm/start", "模型调用开始")
    llm_error = ("llm/error", "模型调用失败")
    llm_end = ("llm/end", "模型调用结束")
    chain_start = ("chain/start", "Chain 调用开始")
    chain_error = ("chain/error", "Chain 调用失败")
    chain_end = ("chain/end", "Chain 调用结束")
    tool_start = ("tool/start", "工具调用开始")
    tool_error = ("tool/error", "工具调用失败")
    tool_end = ("tool/end", "工具调用结束")
    agent_action = ("agent/action", "Agent 选择动作")
    agent_finish = ("agent/finish", "Agent 结束")
