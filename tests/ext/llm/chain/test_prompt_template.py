"""
测试 PromptTemplate
"""

import pytest

from ext.llm.chain import PromptTemplate


class TestPromptTemplate:
    """测试提示词模板"""

    def test_extract_variables(self):
        """测试按出现顺序提取变量并去重"""
        prompt = PromptTemplate.from_template("{question} about {topic}? Answer {question}")
        assert prompt.input_variables == ["question", "topic"]

    def test_format(self):
        """测试格式化"""
        prompt = PromptTemplate.from_template("Tell me a {adjective} joke about {topic}")
        assert prompt.format(adjective="funny", topic="cats") == "Tell me a funny joke about cats"

    def test_escaped_braces(self):
        """测试 {{ }} 为字面量"""
        prompt = PromptTemplate.from_template('Return JSON like {{"answer": "{answer}"}}')
        assert prompt.input_variables == ["answer"]
        assert prompt.format(answer="yes") == 'Return JSON like {"answer": "yes"}'

    def test_partial_variables(self):
        """测试预填充变量"""
        prompt = PromptTemplate.from_template("{greeting}, {name}", greeting="Hello")
        assert prompt.input_variables == ["name"]
        assert prompt.format(name="Bob") == "Hello, Bob"

    def test_explicit_input_variables(self):
        """测试显式声明输入变量"""
        prompt = PromptTemplate("{a}{b}", input_variables=["b", "a"])
        assert prompt.input_variables == ["b", "a"]

    def test_missing_variables(self):
        """测试缺少变量"""
        prompt = PromptTemplate.from_template("{a} and {b}")
        with pytest.raises(ValueError, match="Missing input variables"):
            prompt.format(a="x")

    def test_repr(self):
        assert repr(PromptTemplate("{x}")) == "PromptTemplate(input_variables=['x'])"
