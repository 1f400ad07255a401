import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import openai
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import select

from app import crud
from app.ai.artifacts import (
    BlogRequest,
    CountryContentRequest,
    GeneratedBlog,
    ImageCaption,
    ImageCaptionRequest,
    MetaDescriptionRequest,
    SeoAnalysis,
    SeoAnalysisRequest,
    SpeechRequest,
    SpeechResult,
    TranslationRequest,
    TranslationResult,
)
from app.ai.blog_writer import BlogWriterAgent
from app.ai.content import generate_country_content, generate_meta_description
from app.ai.image_caption import ImageCaptionAgent
from app.ai.llm_client import LLMError
from app.ai.seo_analyst import CountryPageSnapshot, SeoAnalysisAgent
from app.ai.speech import VOICES, text_to_speech
from app.ai.translator import TranslatorAgent
from app.api.deps import SessionDep, get_current_active_superuser
from app.models import Country, Product

router = APIRouter(
    prefix="/ai",
    tags=["ai"],
    dependencies=[Depends(get_current_active_superuser)],
)
logger = logging.getLogger(__name__)


@contextmanager
def provider_errors(action: str) -> Iterator[None]:
    """Translate provider failures into a 502 for the admin UI."""
    try:
        yield
    except (LLMError, openai.OpenAIError) as e:
        logger.error("%s failed: %s", action, e)
        raise HTTPException(status_code=502, detail=f"{action} failed: {e}")


@router.post("/generate-blog", response_model=GeneratedBlog)
async def generate_blog(request: BlogRequest) -> Any:
    with provider_errors("Blog generation"):
        return await BlogWriterAgent().run(request)


@router.post("/translate", response_model=TranslationResult)
async def translate(request: TranslationRequest) -> Any:
    logger.info("Translating %s from %s to %s", request.field, request.source, request.target)
    with provider_errors("Translation"):
        return await TranslatorAgent().run(request)


@router.post("/seo-analysis", response_model=SeoAnalysis)
async def seo_analysis(session: SessionDep, request: SeoAnalysisRequest) -> Any:
    country = session.get(Country, request.country_id)
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")

    visa_requirement = None
    if country.country_code:
        visa_requirement = crud.get_visa_requirement(
            session=session, country_code=country.country_code
        )
    products = session.exec(
        select(Product).where(Product.country_id == country.id, Product.status == 1)
    ).all()
    snapshot = CountryPageSnapshot(
        country=country, visa_requirement=visa_requirement, products=list(products)
    )
    with provider_errors("SEO analysis"):
        return await SeoAnalysisAgent().run(snapshot)


@router.post("/meta-description")
async def meta_description(request: MetaDescriptionRequest) -> dict[str, str]:
    with provider_errors("Meta description generation"):
        description = await generate_meta_description(request.content, request.max_length)
    return {"meta_description": description}


@router.post("/image-description", response_model=ImageCaption)
async def image_description(request: ImageCaptionRequest) -> Any:
    with provider_errors("Image description"):
        return await ImageCaptionAgent().run(request)


@router.post("/country-content")
async def country_content(request: CountryContentRequest) -> dict[str, str]:
    with provider_errors("Country content generation"):
        content = await generate_country_content(request.country_name)
    return {"content": content}


@router.get("/text-to-speech/voices")
async def list_voices() -> dict[str, Any]:
    return {"voices": VOICES}


@router.post("/text-to-speech", response_model=SpeechResult)
async def create_speech(request: SpeechRequest) -> Any:
    logger.info("Generating speech (%s chars) with voice %s", len(request.text), request.voice)
    with provider_errors("Text-to-speech"):
        return await text_to_speech(request)
