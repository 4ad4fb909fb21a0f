"""Text recognition for nutrition label photos."""

import base64
from dataclasses import dataclass
from typing import Protocol

from biteledger.domain.labels import RecognizedText

TEXT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"lines": {"type": "array", "items": {"type": "string"}}},
    "required": ["lines"],
    "additionalProperties": False,
}

_PROMPT = (
    "Transcribe every line of printed text in the image, top to bottom. "
    "Keep numbers and units exactly as printed. Do not summarize."
)


class TextRecognitionClient(Protocol):
    """Interface for image-to-text extraction."""

    async def read_lines(
        self,
        *,
        model: str,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured text extraction data."""


@dataclass
class TextRecognitionService:
    """Turns label photos into raw text lines."""

    client: TextRecognitionClient
    model: str

    async def recognize(self, image_bytes: bytes) -> list[str]:
        """Return the text lines visible in an image."""
        raw = await self.client.read_lines(
            model=self.model,
            image_data_url=_to_data_url(image_bytes),
            schema=TEXT_SCHEMA,
            prompt=_PROMPT,
        )
        recognized = RecognizedText.model_validate(raw)
        return [line for line in recognized.lines if line.strip()]


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[4:12] in {b"ftypheic", b"ftypheix", b"ftypmif1"}:
        return "image/heic"
    return "image/jpeg"
