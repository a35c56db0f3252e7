"""
Prompt Template 实现

提供 str.format 风格的提示词模板
"""

from string import Formatter
from typing import Any

from loguru import logger


class PromptTemplate:
    """提示词模板

    使用 Python str.format 风格的模板语法，{{ 与 }} 表示字面量花括号
    """

    def __init__(
        self,
        template: str,
        input_variables: list[str] | None = None,
        partial_variables: dict[str, Any] | None = None,
    ):
        """初始化提示词模板

        Args:
            template: 模板字符串
            input_variables: 输入变量列表（可选，会自动提取）
            partial_variables: 预先填充的变量
        """
        self.template = template
        self.partial_variables = dict(partial_variables or {})
        variables = input_variables or self._extract_variables(template)
        self.input_variables = [var for var in variables if var not in self.partial_variables]

    @classmethod
    def from_template(cls, template: str, **partial_variables: Any) -> "PromptTemplate":
        """从字符串创建提示词模板

        Args:
            template: 模板字符串
            partial_variables: 预先填充的变量

        Returns:
            PromptTemplate 实例
        """
        return cls(template, partial_variables=partial_variables)

    @staticmethod
    def _extract_variables(template: str) -> list[str]:
        """从模板中按出现顺序提取变量名（去重）"""
        variables: dict[str, None] = {}
        for _, field_name, _, _ in Formatter().parse(template):
            if field_name:
                variables.setdefault(field_name, None)
        return list(variables)

    def format(self, **kwargs: Any) -> str:
        """格式化模板

        Args:
            **kwargs: 模板变量

        Returns:
            格式化后的字符串

        Raises:
            ValueError: 缺少模板变量
        """
        missing_vars = [var for var in self.input_variables if var not in kwargs]
        if missing_vars:
            raise ValueError(f"Missing input variables: {missing_vars}")

        result = self.template.format(**{**self.partial_variables, **kwargs})
        logger.debug(f"PromptTemplate formatted - variables: {self.input_variables}, length: {len(result)}")
        return result

    def __repr__(self) -> str:
        return f"PromptTemplate(input_variables={self.input_variables})"


__all__ = ["PromptTemplate"]
