from app.ai.artifacts import TranslationRequest, TranslationResult
from app.ai.base import BaseAgent
from app.ai.prompts.translation import build_translation_prompt
from app.core.config import settings

LONG_FORM_FIELDS = {"content", "contents", "req_document", "price_contents", "warning_notes"}


class TranslatorAgent(BaseAgent[TranslationRequest, TranslationResult]):
    """Translates CMS fields between Turkish and English, keeping HTML intact."""

    def __init__(self, model_name: str | None = None):
        super().__init__(model_name=model_name or settings.MODEL_CONTENT)

    async def run(self, input_data: TranslationRequest) -> TranslationResult:
        if input_data.source == input_data.target:
            return TranslationResult(
                translated_text=input_data.text,
                original_length=len(input_data.text),
                translated_length=len(input_data.text),
            )

        long_form = input_data.field in LONG_FORM_FIELDS
        translated = await self.llm.generate_text(
            system_prompt=build_translation_prompt(
                input_data.source, input_data.target, input_data.field
            ),
            user_prompt=input_data.text,
            temperature=0.3,
            max_tokens=4000 if long_form else 200,
        )
        return TranslationResult(
            translated_text=translated,
            original_length=len(input_data.text),
            translated_length=len(translated),
        )


COUNTRY_TRANSLATABLE_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "contents": "contents",
    "req_document": "req_document",
    "price_contents": "price_contents",
    "warning_notes": "warning_notes",
}


async def translate_record_fields(
    record: object,
    *,
    fields: dict[str, str] = COUNTRY_TRANSLATABLE_FIELDS,
    overwrite: bool = False,
    agent: TranslatorAgent | None = None,
) -> dict[str, str]:
    """
    Fill the `<field>_en` attributes of record from their Turkish source.
    Returns the new values keyed by attribute name; the caller persists them.
    """
    agent = agent or TranslatorAgent()
    updates: dict[str, str] = {}
    for field, field_type in fields.items():
        source = getattr(record, field, None)
        if not source or (getattr(record, f"{field}_en", None) and not overwrite):
            continue
        result = await agent.run(
            TranslationRequest(text=source, source="tr", target="en", field=field_type)
        )
        updates[f"{field}_en"] = result.translated_text
    return updates
