from typing import Literal

from pydantic import BaseModel, Field

Language = Literal["tr", "en"]
Priority = Literal["high", "medium", "low"]
Level = Literal["low", "medium", "high"]


class BlogRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    keywords: list[str] = Field(default_factory=list)
    tone: Literal["informative", "friendly", "formal"] = "informative"
    language: Language = "tr"
    additional_context: str = ""
    word_count: int = Field(default=1500, ge=200, le=5000)


class BlogMetadata(BaseModel):
    """SEO metadata generated for a finished blog post."""
    meta_title: str = Field(description="SEO title, at most 60 characters")
    meta_description: str = Field(description="Compelling description of 150-160 characters")
    slug: str = Field(description="URL-friendly slug in lower case with hyphens")
    tags: list[str] = Field(default_factory=list, description="3 to 6 topical tags")


class GeneratedBlog(BaseModel):
    content: str
    meta_title: str
    meta_description: str
    slug: str
    tags: list[str]
    word_count: int
    reading_time: int


TranslationField = Literal[
    "content",
    "title",
    "description",
    "meta",
    "contents",
    "req_document",
    "price_contents",
    "warning_notes",
]


class TranslationRequest(BaseModel):
    text: str = Field(min_length=1)
    source: Language = "tr"
    target: Language = "en"
    field: TranslationField = "content"


class TranslationResult(BaseModel):
    translated_text: str
    original_length: int
    translated_length: int


class ImageCaptionRequest(BaseModel):
    image_url: str = Field(min_length=1)
    context: str = Field(min_length=1)


class ImageCaption(BaseModel):
    alt_text: str = Field(default="", description="Short SEO-friendly alt text, at most 125 characters")
    caption: str = Field(default="", description="One or two engaging sentences")


class MissingContent(BaseModel):
    title: str
    description: str
    priority: Priority = "medium"
    impact: str = ""


class Improvement(BaseModel):
    section: str
    current: str = ""
    suggestion: str
    priority: Priority = "medium"


class ActionItem(BaseModel):
    rank: int
    action: str
    effort: Level = "medium"
    impact: Level = "medium"
    timeline: str = ""


class ContentScores(BaseModel):
    sufficiency: int = Field(ge=0, le=100)
    diversity: int = Field(ge=0, le=100)
    engagement: int = Field(ge=0, le=100)
    eeat: int = Field(ge=0, le=100)
    semantic_seo: int = Field(ge=0, le=100)


class SeoAnalysis(BaseModel):
    """Content audit of a country page."""
    overall_score: int = Field(ge=0, le=100, description="Overall score from 0 to 100")
    summary: str = Field(description="Two or three sentence assessment")
    strengths: list[str] = Field(default_factory=list)
    missing_content: list[MissingContent] = Field(default_factory=list)
    improvements: list[Improvement] = Field(default_factory=list)
    action_plan: list[ActionItem] = Field(default_factory=list)
    content_scores: ContentScores


class SeoAnalysisRequest(BaseModel):
    country_id: int


class MetaDescriptionRequest(BaseModel):
    content: str = Field(min_length=1)
    max_length: int = Field(default=160, ge=50, le=320)


class CountryContentRequest(BaseModel):
    country_name: str = Field(min_length=1, max_length=255)


Voice = Literal["alloy", "echo", "fable", "onyx", "nova", "shimmer"]
AudioFormat = Literal["mp3", "opus", "aac", "flac"]


class SpeechRequest(BaseModel):
    text: str = Field(min_length=1, max_length=4096)
    voice: Voice = "alloy"
    model: Literal["tts-1", "tts-1-hd"] | None = None
    speed: float = Field(default=1.0, ge=0.25, le=4.0)
    format: AudioFormat = "mp3"
    scene_id: str | None = Field(default=None, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")


class SpeechResult(BaseModel):
    audio_url: str
    voice: Voice
    duration: int
    format: AudioFormat
