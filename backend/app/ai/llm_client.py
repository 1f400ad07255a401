import json
import logging
import re
from typing import TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from app.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _strip_code_fences(text: str) -> str:
    if not text:
        return ""
    fenced = re.match(r"^\s*```[a-zA-Z0-9_-]*\s*([\s\S]*?)\s*```\s*$", text)
    if fenced:
        return fenced.group(1).strip()
    return text.strip()


def _extract_balanced_json_span(text: str) -> str | None:
    """Best-effort extraction of the first balanced top-level JSON object/array."""
    starts = [(text.find(open_ch), open_ch, close_ch) for open_ch, close_ch in ("{}", "[]")]
    starts = [s for s in starts if s[0] != -1]
    if not starts:
        return None

    start_idx, open_ch, close_ch = min(starts, key=lambda x: x[0])
    depth = 0
    in_string = False
    escape = False
    for i in range(start_idx, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return text[start_idx:i + 1]
    return None


def _json_candidates(raw_text: str) -> list[str]:
    text = (raw_text or "").strip()
    if not text:
        return []

    candidates = [_strip_code_fences(text), text]
    balanced = _extract_balanced_json_span(text)
    if balanced:
        candidates.append(balanced)

    # Deduplicate while preserving order.
    return list(dict.fromkeys(c.strip() for c in candidates if c and c.strip()))


class LLMError(RuntimeError):
    """Raised when the provider fails or returns unusable output."""


class LLMClient:
    """Thin wrapper over the OpenAI chat, JSON and speech endpoints."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT
        self.client = AsyncOpenAI(
            base_url=base_url or settings.LLM_BASE_URL,
            api_key=api_key or settings.LLM_API_KEY,
        )

    def _chat_completion_kwargs(
        self, *, temperature: float | None, max_tokens: int | None = None
    ) -> dict:
        """Build provider/model-compatible kwargs for chat completions."""
        kwargs: dict = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        # GPT-5 family rejects non-default temperature values.
        if temperature is not None and not (self.model_name or "").lower().startswith("gpt-5"):
            kwargs["temperature"] = temperature
        return kwargs

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float | None,
        max_tokens: int | None,
    ) -> str:
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            **self._chat_completion_kwargs(temperature=temperature, max_tokens=max_tokens),
        )
        if not getattr(response, "choices", None):
            logger.error("Received no choices from %s: %s", self.model_name, response)
            raise LLMError(f"Provider {self.model_name} returned no output")
        return response.choices[0].message.content or ""

    async def generate_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        response_schema: type[T],
        *,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> T:
        """
        Generate a response matching the given Pydantic schema.
        The schema is injected into the system prompt; one stricter retry is made
        when the first answer does not parse.
        """
        schema_json = json.dumps(response_schema.model_json_schema())
        augmented_system_prompt = (
            f"{system_prompt}\n\n"
            "Respond with ONLY valid JSON matching the following JSON Schema, "
            "without markdown fences or commentary.\n\n"
            f"EXPECTED SCHEMA:\n{schema_json}"
        )
        attempt_prompts = [
            augmented_system_prompt,
            (
                f"{augmented_system_prompt}\n\n"
                "Your previous response was invalid. Return ONLY a single JSON object."
            ),
        ]

        for attempt_idx, system_prompt_attempt in enumerate(attempt_prompts, start=1):
            logger.info(
                "Issuing structured request to model %s (attempt %s/%s)...",
                self.model_name,
                attempt_idx,
                len(attempt_prompts),
            )
            text_response = await self._complete(
                system_prompt_attempt,
                user_prompt,
                temperature=0 if attempt_idx > 1 else temperature,
                max_tokens=max_tokens,
            )

            parse_errors: list[str] = []
            for candidate in _json_candidates(text_response):
                try:
                    return response_schema.model_validate(json.loads(candidate, strict=False))
                except (json.JSONDecodeError, ValidationError) as e:
                    parse_errors.append(str(e))

            if attempt_idx < len(attempt_prompts):
                logger.warning(
                    "Structured parsing failed for %s on attempt %s: %s. Retrying...",
                    self.model_name,
                    attempt_idx,
                    " | ".join(parse_errors[:2]) or "empty response",
                )
                continue
            logger.error("Could not parse structured response from %s", self.model_name)
            raise LLMError(
                "Unable to parse structured response: " + (" | ".join(parse_errors[:3]) or "empty response")
            )

        raise LLMError("Structured generation failed")

    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        """Plain text/HTML/Markdown completion with surrounding code fences removed."""
        logger.info("Issuing text request to model %s...", self.model_name)
        text_response = _strip_code_fences(
            await self._complete(
                system_prompt, user_prompt, temperature=temperature, max_tokens=max_tokens
            )
        )
        if not text_response:
            raise LLMError(f"Model {self.model_name} returned empty content")
        return text_response

    async def synthesize_speech(
        self,
        text: str,
        *,
        voice: str,
        speed: float = 1.0,
        response_format: str = "mp3",
    ) -> bytes:
        logger.info("Issuing speech request to model %s (%s chars)", self.model_name, len(text))
        response = await self.client.audio.speech.create(
            model=self.model_name,
            voice=voice,
            input=text,
            speed=speed,
            response_format=response_format,
        )
        return response.content
