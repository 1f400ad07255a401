from app.ai.artifacts import ImageCaption, ImageCaptionRequest
from app.ai.base import BaseAgent
from app.ai.prompts.content import IMAGE_CAPTION_SYSTEM_PROMPT

MAX_ALT_TEXT = 125


class ImageCaptionAgent(BaseAgent[ImageCaptionRequest, ImageCaption]):
    async def run(self, input_data: ImageCaptionRequest) -> ImageCaption:
        caption = await self.llm.generate_structured(
            system_prompt=IMAGE_CAPTION_SYSTEM_PROMPT,
            user_prompt=(
                f"Image URL: {input_data.image_url}\n"
                f"Topic/context: {input_data.context}\n\n"
                "Write alt text and a caption for this image."
            ),
            response_schema=ImageCaption,
            temperature=0.7,
        )
        alt_text = (caption.alt_text or input_data.context).strip()
        return ImageCaption(alt_text=alt_text[:MAX_ALT_TEXT], caption=caption.caption.strip())
