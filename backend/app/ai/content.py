from app.ai.llm_client import LLMClient
from app.ai.prompts.content import (
    COUNTRY_CONTENT_SYSTEM_PROMPT,
    COUNTRY_CONTENT_USER_PROMPT,
    META_DESCRIPTION_SYSTEM_PROMPT,
    META_DESCRIPTION_USER_PROMPT,
)
from app.core.config import settings
from app.services.seo import strip_tags

META_EXCERPT_CHARS = 500


async def generate_country_content(country_name: str, *, llm: LLMClient | None = None) -> str:
    llm = llm or LLMClient(model_name=settings.MODEL_DEFAULT)
    return await llm.generate_text(
        system_prompt=COUNTRY_CONTENT_SYSTEM_PROMPT,
        user_prompt=COUNTRY_CONTENT_USER_PROMPT.format(country_name=country_name),
        temperature=0.7,
        max_tokens=2000,
    )


async def generate_meta_description(
    content: str, max_length: int = 160, *, llm: LLMClient | None = None
) -> str:
    llm = llm or LLMClient(model_name=settings.MODEL_DEFAULT)
    excerpt = " ".join(strip_tags(content).split())[:META_EXCERPT_CHARS]
    description = await llm.generate_text(
        system_prompt=META_DESCRIPTION_SYSTEM_PROMPT,
        user_prompt=META_DESCRIPTION_USER_PROMPT.format(max_length=max_length, excerpt=excerpt),
        temperature=0.7,
        max_tokens=100,
    )
    description = description.strip().strip('"')
    if len(description) > max_length:
        # cut on a word boundary
        description = description[:max_length].rsplit(" ", 1)[0].rstrip(" ,.;:")
    return description
