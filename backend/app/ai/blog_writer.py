import logging
import math

from app.ai.artifacts import BlogMetadata, BlogRequest, GeneratedBlog
from app.ai.base import BaseAgent
from app.ai.llm_client import LLMClient, LLMError
from app.ai.prompts.blog import (
    BLOG_METADATA_SYSTEM_PROMPT,
    BLOG_WRITER_SYSTEM_PROMPT,
    LANGUAGE_NAMES,
    TONE_DESCRIPTIONS,
)
from app.core.config import settings
from app.services.slugs import generate_slug

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200


class BlogWriterAgent(BaseAgent[BlogRequest, GeneratedBlog]):
    """
    Writes a Markdown blog post with the content model, then asks the
    default model for SEO metadata.
    """

    def __init__(self, model_name: str | None = None, metadata_model: str | None = None):
        super().__init__(model_name=model_name or settings.MODEL_CONTENT)
        self.metadata_llm = LLMClient(model_name=metadata_model or settings.MODEL_DEFAULT)

    def build_user_prompt(self, request: BlogRequest) -> str:
        prompt = f"Title: {request.title}"
        if request.keywords:
            prompt += f"\nKeywords: {', '.join(request.keywords)}"
        if request.additional_context.strip():
            prompt += f"\n\nAdditional information and instructions:\n{request.additional_context.strip()}"
        return prompt

    async def generate_metadata(self, request: BlogRequest, content: str) -> BlogMetadata:
        try:
            return await self.metadata_llm.generate_structured(
                system_prompt=BLOG_METADATA_SYSTEM_PROMPT.format(
                    language=LANGUAGE_NAMES[request.language]
                ),
                user_prompt=f"Title: {request.title}\nContent preview: {content[:500]}",
                response_schema=BlogMetadata,
                max_tokens=300,
            )
        except LLMError as e:
            logger.warning("Blog metadata generation failed, using fallback: %s", e)
            return BlogMetadata(
                meta_title=request.title,
                meta_description=request.title,
                slug=generate_slug(request.title),
                tags=request.keywords,
            )

    async def run(self, input_data: BlogRequest) -> GeneratedBlog:
        system_prompt = BLOG_WRITER_SYSTEM_PROMPT.format(
            site_name=settings.SITE_NAME,
            tone=TONE_DESCRIPTIONS[input_data.tone],
            word_count=input_data.word_count,
            min_words=math.floor(input_data.word_count * 0.8),
            max_words=math.floor(input_data.word_count * 1.2),
            language=LANGUAGE_NAMES[input_data.language],
        )
        logger.info("Generating blog content for %r", input_data.title)
        content = await self.llm.generate_text(
            system_prompt=system_prompt,
            user_prompt=self.build_user_prompt(input_data),
            temperature=0.7,
            max_tokens=4000,
        )

        metadata = await self.generate_metadata(input_data, content)
        words = len(content.split())
        reading_time = max(1, math.ceil(words / WORDS_PER_MINUTE))
        logger.info("Generated %s words, %s min read", words, reading_time)

        return GeneratedBlog(
            content=content,
            meta_title=metadata.meta_title,
            meta_description=metadata.meta_description,
            slug=generate_slug(metadata.slug) or generate_slug(input_data.title),
            tags=metadata.tags,
            word_count=words,
            reading_time=reading_time,
        )
