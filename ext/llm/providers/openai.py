"""
OpenAI LLM Provider

使用官方 OpenAI SDK 实现
"""

import os
from typing import Any
from collections.abc import AsyncGenerator

import openai
from loguru import logger
from openai import AsyncOpenAI

from ext.llm.base import BaseLLMModel
from ext.llm.exceptions import (
    LLMAPIError,
    LLMConfigError,
    LLMTimeoutError,
    LLMStreamingError,
    LLMEmptyResponseError,
)
from ext.llm.types import CallOptions, ChatGeneration, ChatMessage, Generation, TokenUsage
from util.general import truncate_content

TOKEN_ENV_VAR_NAME = "OPENAI_API_KEY"
MODEL_ENV_VAR_NAME = "OPENAI_MODEL"
BASE_URL_ENV_VAR_NAME = "OPENAI_BASE_URL"

DEFAULT_CHAT_MODEL = "gpt-3.5-turbo"
DEFAULT_COMPLETION_MODEL = "gpt-3.5-turbo-instruct"
DEFAULT_EMBEDDING_MODEL = "text-embedding-ada-002"

# generic 消息按 user 发送
ROLE_MAPPING = {
    "system": "system",
    "assistant": "assistant",
    "user": "user",
    "generic": "user",
}


class OpenAILLMModel(BaseLLMModel):
    """
    OpenAI LLM Provider

    使用官方 SDK，支持：
    - Completions（补全模式，含流式）
    - Chat Completions（含流式）
    - Embeddings

    api_key / model_name / base_url 未传入时分别读取
    OPENAI_API_KEY / OPENAI_MODEL / OPENAI_BASE_URL 环境变量
    """

    model_type = "openai"

    supported_embedding_models = frozenset(
        {
            "text-embedding-ada-002",
            "text-embedding-3-small",
            "text-embedding-3-large",
        }
    )

    def __init__(
        self,
        model_name: str | None = None,
        completion_model: str | None = None,
        embedding_model: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
        **kwargs: Any,
    ):
        api_key = api_key or os.getenv(TOKEN_ENV_VAR_NAME)
        if not api_key and client is None:
            raise LLMConfigError(
                f"missing the OpenAI API key, set it in the {TOKEN_ENV_VAR_NAME} environment variable"
            )

        super().__init__(
            model_name=model_name or os.getenv(MODEL_ENV_VAR_NAME) or DEFAULT_CHAT_MODEL,
            completion_model=completion_model or DEFAULT_COMPLETION_MODEL,
            embedding_model=embedding_model or DEFAULT_EMBEDDING_MODEL,
            api_key=api_key,
            base_url=base_url or os.getenv(BASE_URL_ENV_VAR_NAME) or None,
            **kwargs,
        )

        if client is None:
            logger.debug(
                f"Initializing OpenAI client - base_url: {self.base_url}, "
                f"timeout: {self.timeout}, max_retries: {self.max_retries}"
            )
            client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=self.max_retries,
                http_client=self.get_httpx_client(),
            )
        self._client = client

    def _build_kwargs(self, options: CallOptions) -> dict[str, Any]:
        """构造公共请求参数，未设置的可选参数不下发"""
        kwargs: dict[str, Any] = {
            "model": options.model,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "stream": options.stream,
        }
        if options.top_p is not None:
            kwargs["top_p"] = options.top_p
        if options.stop_words:
            kwargs["stop"] = options.stop_words
        if options.repetition_penalty is not None:
            kwargs["frequency_penalty"] = options.repetition_penalty
        return kwargs

    def _convert_messages(self, messages: list[ChatMessage]) -> list[dict]:
        """
        转换消息格式

        Args:
            messages: ChatMessage 列表

        Returns:
            OpenAI 格式的消息列表
        """
        converted = []
        for msg in messages:
            converted_msg = {"role": ROLE_MAPPING[msg.role], "content": msg.content}
            if msg.name:
                converted_msg["name"] = msg.name
            converted.append(converted_msg)
        return converted

    async def generate(self, prompts: list[str], options: CallOptions | None = None) -> list[Generation]:
        """
        补全请求，逐个 prompt 发送

        Args:
            prompts: 提示词列表
            options: 调用选项

        Returns:
            每个 prompt 一条生成结果
        """
        options = self.resolve_options(options, self.completion_model)
        generations = []
        for prompt in prompts:
            generations.append(await self._complete(prompt, options))
        return generations

    async def _complete(self, prompt: str, options: CallOptions) -> Generation:
        kwargs = self._build_kwargs(options)
        kwargs["prompt"] = prompt

        logger.debug(
            f"OpenAI completion request - model: {options.model}, "
            f"prompt: {truncate_content(prompt)}, stream: {options.stream}"
        )

        try:
            response = await self._client.completions.create(**kwargs)

            if options.stream:
                try:
                    text = await self._consume_stream(
                        self._completion_fragments(response),
                        options.streaming_func,  # type: ignore
                    )
                finally:
                    await response.close()
                return Generation(text=text)

        except openai.APITimeoutError as e:
            logger.error(f"OpenAI request timeout: {e}")
            raise LLMTimeoutError(f"OpenAI request timeout: {e}") from e
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMAPIError(f"OpenAI API error: {e}", getattr(e, "status_code", None)) from e

        if not response.choices:
            logger.error(f"Completion response has no choices: {response}")
            raise LLMEmptyResponseError()

        choice = response.choices[0]
        logger.debug(
            f"OpenAI completion response - text: {truncate_content(choice.text)}, "
            f"finish_reason: {choice.finish_reason}"
        )
        return Generation(
            text=choice.text,
            generation_info={"finish_reason": choice.finish_reason, "token_usage": self._token_usage(response)},
        )

    async def chat(self, messages: list[ChatMessage], options: CallOptions | None = None) -> ChatGeneration:
        """
        发起对话请求

        Args:
            messages: 有序的角色消息列表
            options: 调用选项，设置 streaming_func 时使用流式

        Returns:
            模型回复
        """
        options = self.resolve_options(options, self.model_name)
        kwargs = self._build_kwargs(options)
        kwargs["messages"] = self._convert_messages(messages)

        logger.debug(
            f"OpenAI chat request - model: {options.model}, "
            f"messages: {len(messages)}, stream: {options.stream}"
        )

        try:
            response = await self._client.chat.completions.create(**kwargs)

            if options.stream:
                try:
                    text = await self._consume_stream(
                        self._chat_fragments(response),
                        options.streaming_func,  # type: ignore
                    )
                finally:
                    await response.close()
                return ChatGeneration(message=ChatMessage(role="assistant", content=text))

        except openai.APITimeoutError as e:
            logger.error(f"OpenAI request timeout: {e}")
            raise LLMTimeoutError(f"OpenAI request timeout: {e}") from e
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMAPIError(f"OpenAI API error: {e}", getattr(e, "status_code", None)) from e

        if not response.choices:
            logger.error(f"Chat response has no choices: {response}")
            raise LLMEmptyResponseError()

        choice = response.choices[0]
        content = choice.message.content or ""
        logger.debug(
            f"OpenAI chat response - content: {truncate_content(content)}, "
            f"finish_reason: {choice.finish_reason}"
        )
        return ChatGeneration(
            message=ChatMessage(role="assistant", content=content),
            generation_info={"finish_reason": choice.finish_reason, "token_usage": self._token_usage(response)},
        )

    async def _create_embedding_impl(self, texts: list[str], model: str) -> list[list[float]]:
        try:
            response = await self._client.embeddings.create(model=model, input=texts)
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI embedding timeout: {e}")
            raise LLMTimeoutError(f"OpenAI embedding timeout: {e}") from e
        except openai.APIError as e:
            logger.error(f"OpenAI embedding error: {e}")
            raise LLMAPIError(f"OpenAI embedding error: {e}", getattr(e, "status_code", None)) from e

        return [list(item.embedding) for item in response.data]

    @staticmethod
    def _token_usage(response) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=response.usage.completion_tokens if response.usage else 0,
            total_tokens=response.usage.total_tokens if response.usage else 0,
        )

    @staticmethod
    async def _completion_fragments(stream) -> AsyncGenerator[str, None]:
        try:
            async for chunk in stream:
                if not chunk.choices:
                    raise LLMEmptyResponseError()
                yield chunk.choices[0].text
        except openai.APIError as e:
            logger.error(f"OpenAI stream interrupted: {e}")
            raise LLMStreamingError(f"OpenAI stream interrupted: {e}") from e

    @staticmethod
    async def _chat_fragments(stream) -> AsyncGenerator[str, None]:
        try:
            async for chunk in stream:
                if not chunk.choices:
                    raise LLMEmptyResponseError()
                yield chunk.choices[0].delta.content or ""
        except openai.APIError as e:
            logger.error(f"OpenAI stream interrupted: {e}")
            raise LLMStreamingError(f"OpenAI stream interrupted: {e}") from e


__all__ = ["OpenAILLMModel"]
