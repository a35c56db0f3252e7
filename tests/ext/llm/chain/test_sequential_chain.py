"""
测试 SequentialChain
"""

import pytest

from ext.llm import FakeLLMModel
from ext.llm.chain import ChainCallOptions, LLMChain, PromptTemplate, SequentialChain, SimpleMemory, call


def synopsis_and_review(model: FakeLLMModel) -> tuple[LLMChain, LLMChain]:
    synopsis = LLMChain(
        model,
        PromptTemplate.from_template("Write a synopsis for the play '{title}' set in {era}."),
        output_key="synopsis",
    )
    review = LLMChain(
        model,
        PromptTemplate.from_template("Review this synopsis:\n{synopsis}"),
        output_key="review",
    )
    return synopsis, review


class TestSequentialChain:
    """测试顺序组合"""

    @pytest.mark.asyncio
    async def test_run_in_order(self):
        """测试前一个 Chain 的输出作为后一个的输入"""
        model = FakeLLMModel(responses=["A tragic tale.", "A masterpiece."])
        synopsis, review = synopsis_and_review(model)
        chain = SequentialChain([synopsis, review])

        assert chain.input_keys == ["title", "era"]
        assert chain.output_keys == ["review"]

        outputs = await call(chain, {"title": "Tragedy at sunset", "era": "Victorian England"})

        assert outputs == {"review": "A masterpiece."}
        assert model.prompts[1] == "Review this synopsis:\nA tragic tale."

    @pytest.mark.asyncio
    async def test_explicit_output_keys(self):
        """测试指定输出中间结果"""
        model = FakeLLMModel(responses=["A tragic tale.", "A masterpiece."])
        synopsis, review = synopsis_and_review(model)
        chain = SequentialChain([synopsis, review], output_keys=["synopsis", "review"])

        outputs = await call(chain, {"title": "t", "era": "e"})
        assert outputs == {"synopsis": "A tragic tale.", "review": "A masterpiece."}

    @pytest.mark.asyncio
    async def test_pipe_run(self):
        """测试 | 组合后以 run 调用"""
        model = FakeLLMModel(responses=["bonjour", "BONJOUR"])
        translate = LLMChain(model, PromptTemplate.from_template("Translate {input}"), output_key="french")
        shout = LLMChain(model, PromptTemplate.from_template("Uppercase {french}"))

        assert await (translate | shout).arun("hello") == "BONJOUR"

    @pytest.mark.asyncio
    async def test_sub_chain_events(self, recorder):
        """测试每个子 Chain 都经过完整调用流程"""
        model = FakeLLMModel(responses=["a", "b"])
        synopsis, review = synopsis_and_review(model)
        chain = SequentialChain([synopsis, review])

        await call(chain, {"title": "t", "era": "e"}, ChainCallOptions(callbacks=[recorder]))

        starts = [args[0] for args in recorder.args_of("on_chain_start")]
        assert starts == ["SequentialChain", "LLMChain", "LLMChain"]
        assert recorder.names.count("on_chain_end") == 3
        assert recorder.names[-1] == "on_chain_end"

    def test_empty_chains(self):
        """测试空列表"""
        with pytest.raises(ValueError, match="at least one chain"):
            SequentialChain([])

    def test_unsatisfied_input(self):
        """测试子 Chain 的输入无法被满足"""
        model = FakeLLMModel()
        synopsis, review = synopsis_and_review(model)
        with pytest.raises(ValueError, match="requires inputs"):
            SequentialChain([synopsis, review], input_keys=["title"])

    def test_unknown_output_key(self):
        """测试输出键不由任何子 Chain 产出"""
        model = FakeLLMModel()
        synopsis, review = synopsis_and_review(model)
        with pytest.raises(ValueError, match="not produced"):
            SequentialChain([synopsis, review], output_keys=["summary"])

    @pytest.mark.asyncio
    async def test_memory_variables_available(self):
        """测试 SequentialChain 的记忆变量可供子 Chain 使用"""
        model = FakeLLMModel(responses=["ok"])
        chain_a = LLMChain(model, PromptTemplate.from_template("{style}: {input}"))
        chain = SequentialChain([chain_a], input_keys=["input"], memory=SimpleMemory({"style": "formal"}))

        assert await chain.arun("hi") == "ok"
        assert model.prompts == ["formal: hi"]

    @pytest.mark.asyncio
    async def test_inferred_input_keys_exclude_memory_variables(self):
        """测试推断输入键时排除由记忆提供的变量"""
        model = FakeLLMModel(responses=["ok", "OK"])
        chain_a = LLMChain(model, PromptTemplate.from_template("{style}: {input}"), output_key="draft")
        chain_b = LLMChain(model, PromptTemplate.from_template("Polish in {style}: {draft}"))
        chain = SequentialChain([chain_a, chain_b], memory=SimpleMemory({"style": "formal"}))

        assert chain.input_keys == ["input"]
        assert await chain.arun("hi") == "OK"
        assert model.prompts == ["formal: hi", "Polish in formal: ok"]
