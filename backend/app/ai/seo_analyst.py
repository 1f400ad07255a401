from pydantic import BaseModel, ConfigDict

from app.ai.artifacts import SeoAnalysis
from app.ai.base import BaseAgent
from app.ai.prompts.seo import SEO_ANALYSIS_SYSTEM_PROMPT
from app.core.config import settings
from app.models import Country, Product, VisaRequirement
from app.services.seo import strip_tags

SECTION_LIMIT = 3000


class CountryPageSnapshot(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    country: Country
    visa_requirement: VisaRequirement | None = None
    products: list[Product] = []


def _section(title: str, body: str | None) -> str:
    text = " ".join(strip_tags(body or "").split())
    if not text:
        return f"## {title}\n(empty)"
    return f"## {title}\n{text[:SECTION_LIMIT]}"


def render_snapshot(snapshot: CountryPageSnapshot) -> str:
    country = snapshot.country
    parts = [
        f"# {country.name} ({country.country_code or 'no code'})",
        f"Title: {country.title or '-'}",
        f"Meta title: {country.meta_title or '-'}",
        f"Meta description: {country.meta_description or '-'}",
        _section("Description", country.description),
        _section("Main content", country.contents),
        _section("Required documents", country.req_document),
        _section("Prices", country.price_contents),
        _section("Warnings", country.warning_notes),
    ]
    requirement = snapshot.visa_requirement
    if requirement:
        parts.append(
            "## Visa requirement\n"
            f"Status: {requirement.visa_status.value}; stay: {requirement.allowed_stay or '-'}; "
            f"methods: {', '.join(requirement.available_methods) or '-'}"
        )
    if snapshot.products:
        lines = [f"- {p.name}: {p.price:g} {p.currency}" for p in snapshot.products]
        parts.append("## Packages\n" + "\n".join(lines))
    return "\n\n".join(parts)


class SeoAnalysisAgent(BaseAgent[CountryPageSnapshot, SeoAnalysis]):
    """Audits a country page and returns a scored SEO report."""

    def __init__(self, model_name: str | None = None):
        super().__init__(model_name=model_name or settings.MODEL_CONTENT)

    async def run(self, input_data: CountryPageSnapshot) -> SeoAnalysis:
        return await self.llm.generate_structured(
            system_prompt=SEO_ANALYSIS_SYSTEM_PROMPT,
            user_prompt=render_snapshot(input_data),
            response_schema=SeoAnalysis,
            temperature=0.4,
        )
