import json
import threading
from unittest.mock import AsyncMock, patch, MagicMock

import pytest

from app.ai.artifacts import BlogRequest, ImageCaptionRequest, SpeechRequest, TranslationRequest
from app.ai.blog_writer import BlogWriterAgent
from app.ai.image_caption import ImageCaptionAgent
from app.ai.speech import estimate_duration, text_to_speech
from app.ai.translator import TranslatorAgent, translate_record_fields
from app.models import Country


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
    mock_client_instance = AsyncMock()
    mock_client_instance.chat = MagicMock(completions=mock_completions)
    return mock_client_instance, mock_completions


@pytest.mark.asyncio
async def test_blog_writer_falls_back_when_metadata_fails():
    mock_client_instance, mock_completions = _mock_client(
        "## Giriş\n\nVize başvurusu için bilmeniz gerekenler.",
        "not json",
        "still not json",
    )

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        agent = BlogWriterAgent()
        blog = await agent.run(
            BlogRequest(title="Japonya Vizesi Nasıl Alınır", keywords=["japonya", "vize"])
        )

    assert blog.meta_title == "Japonya Vizesi Nasıl Alınır"
    assert blog.slug == "japonya-vizesi-nasil-alinir"
    assert blog.tags == ["japonya", "vize"]
    assert blog.word_count == 7
    assert mock_completions.create.call_count == 3
    writer_prompt = mock_completions.create.call_args_list[0].kwargs["messages"][1]["content"]
    assert "Keywords: japonya, vize" in writer_prompt


@pytest.mark.asyncio
async def test_blog_writer_normalizes_generated_slug():
    metadata = {
        "meta_title": "Japonya Vizesi",
        "meta_description": "Japonya vizesi rehberi.",
        "slug": "Japonya Vizesi Rehberi!",
        "tags": ["japonya"],
    }
    mock_client_instance, _ = _mock_client("Metin.", json.dumps(metadata))

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        blog = await BlogWriterAgent().run(BlogRequest(title="Japonya"))

    assert blog.slug == "japonya-vizesi-rehberi"
    assert blog.reading_time == 1


@pytest.mark.asyncio
async def test_translator_skips_same_language():
    mock_client_instance, mock_completions = _mock_client()

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        result = await TranslatorAgent().run(
            TranslationRequest(text="Merhaba", source="tr", target="tr")
        )

    assert result.translated_text == "Merhaba"
    mock_completions.create.assert_not_called()


@pytest.mark.asyncio
async def test_translate_record_fields_skips_existing_translations():
    country = Country(
        name="Almanya",
        title="Almanya Vizesi",
        title_en="Germany Visa",
        contents="<p>İçerik</p>",
    )
    mock_client_instance, mock_completions = _mock_client("<p>Content</p>")

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        updates = await translate_record_fields(country)

    assert updates == {"contents_en": "<p>Content</p>"}
    assert mock_completions.create.call_args.kwargs["max_tokens"] == 4000


@pytest.mark.asyncio
async def test_image_caption_truncates_alt_text():
    caption = {"alt_text": "a" * 200, "caption": " Kapadokya'da gün doğumu. "}
    mock_client_instance, _ = _mock_client(json.dumps(caption))

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        result = await ImageCaptionAgent().run(
            ImageCaptionRequest(image_url="https://example.com/x.jpg", context="Kapadokya")
        )

    assert len(result.alt_text) == 125
    assert result.caption == "Kapadokya'da gün doğumu."


@pytest.mark.asyncio
async def test_text_to_speech_stores_audio(tmp_path, monkeypatch):
    monkeypatch.setattr("app.services.storage.settings.MEDIA_ROOT", str(tmp_path))
    speech_response = MagicMock()
    speech_response.content = b"fake-opus"
    mock_client_instance = AsyncMock()
    mock_client_instance.audio = MagicMock()
    mock_client_instance.audio.speech.create = AsyncMock(return_value=speech_response)

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        result = await text_to_speech(SpeechRequest(text="Merhaba dünya", format="opus"))

    assert result.format == "opus"
    assert result.duration == 1
    stored = list((tmp_path / "audio").iterdir())
    assert len(stored) == 1
    assert stored[0].name.endswith("-narration.opus")
    assert stored[0].read_bytes() == b"fake-opus"
    call_kwargs = mock_client_instance.audio.speech.create.call_args.kwargs
    assert call_kwargs["model"] == "tts-1-hd"
    assert call_kwargs["response_format"] == "opus"


def test_estimate_duration():
    assert estimate_duration("a" * 15) == 1
    assert estimate_duration("a" * 16) == 2


@pytest.mark.asyncio
async def test_text_to_speech_writes_audio_off_the_event_loop(monkeypatch):
    writer_threads = []

    def fake_save_bytes(data, **kwargs):
        writer_threads.append(threading.get_ident())
        return {"path": "audio/1-narration.mp3", "url": "/media/audio/1-narration.mp3"}

    monkeypatch.setattr("app.ai.speech.storage.save_bytes", fake_save_bytes)
    speech_response = MagicMock()
    speech_response.content = b"fake-mp3"
    mock_client_instance = AsyncMock()
    mock_client_instance.audio = MagicMock()
    mock_client_instance.audio.speech.create = AsyncMock(return_value=speech_response)

    with patch("app.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        result = await text_to_speech(SpeechRequest(text="Merhaba"))

    assert result.audio_url == "/media/audio/1-narration.mp3"
    assert writer_threads and writer_threads[0] != threading.get_ident()
