import asyncio
import logging
import math

from app.ai.artifacts import SpeechRequest, SpeechResult
from app.ai.llm_client import LLMClient
from app.core.config import settings
from app.services import storage

logger = logging.getLogger(__name__)

CHARS_PER_SECOND = 15

VOICES = [
    {"id": "alloy", "name": "Alloy", "description": "Neutral, balanced voice", "gender": "neutral"},
    {"id": "echo", "name": "Echo", "description": "Male voice, warm tone", "gender": "male"},
    {"id": "fable", "name": "Fable", "description": "British accent, storytelling", "gender": "male"},
    {"id": "onyx", "name": "Onyx", "description": "Deep male voice", "gender": "male"},
    {"id": "nova", "name": "Nova", "description": "Female voice, energetic", "gender": "female"},
    {"id": "shimmer", "name": "Shimmer", "description": "Soft female voice", "gender": "female"},
]


def estimate_duration(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_SECOND)


async def text_to_speech(request: SpeechRequest, *, llm: LLMClient | None = None) -> SpeechResult:
    """Synthesize speech and store it as audio/<timestamp>-<scene>.<format>."""
    llm = llm or LLMClient(model_name=request.model or settings.MODEL_TTS)
    audio = await llm.synthesize_speech(
        request.text,
        voice=request.voice,
        speed=request.speed,
        response_format=request.format,
    )
    stem = request.scene_id or "narration"
    stored = await asyncio.to_thread(
        storage.save_bytes,
        audio,
        folder="audio",
        extension=request.format,
        stem=stem,
    )
    logger.info("Speech generated and stored at %s", stored["path"])
    return SpeechResult(
        audio_url=stored["url"],
        voice=request.voice,
        duration=estimate_duration(request.text),
        format=request.format,
    )
