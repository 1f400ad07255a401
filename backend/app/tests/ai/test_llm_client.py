from unittest.mock import AsyncMock, patch, MagicMock

import pytest
from pydantic import BaseModel

from app.ai.llm_client import LLMClient, LLMError, _extract_balanced_json_span, _strip_code_fences


class DummyModel(BaseModel):
    name: str
    age: int


def _mock_client(*contents):
    responses = []
    for content in contents:
        mock_message = MagicMock()
        mock_message.content = content
        mock_choice = MagicMock()
        mock_choice.message = mock_message
        mock_response = MagicMock()
        mock_response.choices = [mock_choice]
        responses.append(mock_response)

    mock_completions = MagicMock()
    mock_completions.create = AsyncMock(side_effect=responses)

    mock_chat = MagicMock()
    mock_chat.completions = mock_completions

    mock_client_instance = AsyncMock()
    mock_client_instance.chat = mock_chat
    return mock_client_instance, mock_completions


@pytest.mark.asyncio
async def test_llm_client_json_parsing():
    mock_client_instance, mock_completions = _mock_client('{"name": "Alice", "age": 30}')

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        with patch("app.ai.llm_client.settings.LLM_API_KEY", "dummy_key"):
            client = LLMClient(model_name="test-model")

            result = await client.generate_structured(
                system_prompt="You are a helpful assistant.",
                user_prompt="Give me Alice's details",
                response_schema=DummyModel
            )

            assert isinstance(result, DummyModel)
            assert result.name == "Alice"
            assert result.age == 30
            mock_completions.create.assert_called_once()


@pytest.mark.asyncio
async def test_llm_client_retries_once_on_invalid_json():
    mock_client_instance, mock_completions = _mock_client(
        "Sure! Here you go.",
        'Result:\n```json\n{"name": "Bob", "age": 41}\n```',
    )

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="test-model")
        result = await client.generate_structured("system", "user", DummyModel)

    assert result == DummyModel(name="Bob", age=41)
    assert mock_completions.create.call_count == 2
    retry_kwargs = mock_completions.create.call_args_list[1].kwargs
    assert retry_kwargs["temperature"] == 0
    assert "previous response was invalid" in retry_kwargs["messages"][0]["content"]


@pytest.mark.asyncio
async def test_llm_client_raises_after_second_failure():
    mock_client_instance, _ = _mock_client('{"name": "Bob"}', "nope")

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="test-model")
        with pytest.raises(LLMError):
            await client.generate_structured("system", "user", DummyModel)


@pytest.mark.asyncio
async def test_generate_text_strips_fences_and_rejects_empty():
    mock_client_instance, _ = _mock_client("```html\n<p>Merhaba</p>\n```", "   ")

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="test-model")
        assert await client.generate_text("system", "user") == "<p>Merhaba</p>"
        with pytest.raises(LLMError):
            await client.generate_text("system", "user")


@pytest.mark.asyncio
async def test_gpt5_models_skip_temperature():
    mock_client_instance, mock_completions = _mock_client("ok")

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="gpt-5-mini")
        await client.generate_text("system", "user", temperature=0.2, max_tokens=50)

    kwargs = mock_completions.create.call_args.kwargs
    assert "temperature" not in kwargs
    assert kwargs["max_tokens"] == 50


@pytest.mark.asyncio
async def test_empty_choices_raise():
    mock_response = MagicMock()
    mock_response.choices = []
    mock_completions = MagicMock()
    mock_completions.create = AsyncMock(return_value=mock_response)
    mock_client_instance = AsyncMock()
    mock_client_instance.chat = MagicMock(completions=mock_completions)

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="test-model")
        with pytest.raises(LLMError):
            await client.generate_text("system", "user")


def test_json_span_helpers():
    assert _strip_code_fences("```json\n{\"a\": 1}\n```") == '{"a": 1}'
    assert _extract_balanced_json_span('prefix {"a": "}", "b": {"c": 2}} suffix') == (
        '{"a": "}", "b": {"c": 2}}'
    )
    assert _extract_balanced_json_span("no json here") is None
