TRANSLATION_BASE_PROMPT = (
    "You are a professional translator specialising in travel and visa content. "
    "Translate the following {source} text to {target}. "
)

FIELD_INSTRUCTIONS = {
    "content": "Preserve all HTML tags, formatting and structure. Keep a professional tone suitable for visa consultation services.",
    "contents": "Preserve all HTML tags, formatting and structure. Keep a professional tone suitable for visa consultation services.",
    "title": "Keep it concise and SEO-friendly.",
    "description": "Keep it compelling and, if possible, within 160 characters.",
    "meta": "Keep it SEO-optimised.",
    "req_document": "Keep the list format and be clear and precise.",
    "price_contents": "Keep prices, currencies and numbers exactly as they are.",
    "warning_notes": "Keep it clear and make it read as an important notice.",
}

TRANSLATION_SUFFIX = (
    "Keep technical terms such as visa types and document names accurate. "
    "Return ONLY the translated text, with no explanations."
)

LANGUAGE_NAMES = {"tr": "Turkish", "en": "English"}


def build_translation_prompt(source: str, target: str, field: str) -> str:
    return (
        TRANSLATION_BASE_PROMPT.format(
            source=LANGUAGE_NAMES[source], target=LANGUAGE_NAMES[target]
        )
        + FIELD_INSTRUCTIONS.get(field, FIELD_INSTRUCTIONS["content"])
        + " "
        + TRANSLATION_SUFFIX
    )
