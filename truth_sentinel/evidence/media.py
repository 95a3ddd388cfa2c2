"""Media analysis for attached images and documents.

A MediaFetcher turns the platform handle carried on a Message into bytes;
GeminiMediaAnalyzer reads the bytes with the vision model and returns a
MediaAnalysis parsed from a fixed line-oriented reply.
"""

import re
from typing import Literal, Optional, Protocol

import structlog
from pydantic import BaseModel, Field

from truth_sentinel.config.prompts import MEDIA_ANALYSIS_PROMPT
from truth_sentinel.llm.gemini_client import GeminiClient, get_client

DEFAULT_IMAGE_MIME = "image/jpeg"

_EXTENSION_MIME = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "pdf": "application/pdf",
}


def resolve_mime_type(content_type: Optional[str], file_path: str) -> str:
    """Pick a usable MIME type for a downloaded file.

    Generic ``application/octet-stream`` (and a missing header) is replaced by
    the type implied by the file extension, falling back to JPEG.
    """
    content_type = (content_type or "").split(";")[0].strip().lower()
    if content_type and content_type != "application/octet-stream":
        return content_type
    extension = file_path.rsplit(".", 1)[-1].lower() if "." in file_path else ""
    return _EXTENSION_MIME.get(extension, DEFAULT_IMAGE_MIME)


class MediaPayload(BaseModel):
    """Downloaded media ready for analysis."""

    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME
    file_name: str = ""


class MediaFetcher(Protocol):
    """Resolves a platform media handle into bytes."""

    async def fetch(self, handle: str) -> MediaPayload:
        ...


class MediaAnalysis(BaseModel):
    """Structured reading of an image or document."""

    extracted_text: str = ""
    document_type: str = "Unknown document type"
    appears_official: Literal["YES", "NO", "UNCERTAIN"] = "UNCERTAIN"
    readable: bool = True
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    observations: str = ""

    @property
    def description(self) -> str:
        return f"{self.document_type}. {self.observations}".strip()


_FIELD_LABELS = (
    "EXTRACTED_TEXT",
    "DOCUMENT_TYPE",
    "APPEARS_OFFICIAL",
    "READABLE",
    "CONFIDENCE",
    "OBSERVATIONS",
)

# A free-text field runs until the next line that opens with any field label
_NEXT_FIELD = r"(?=\n\s*(?:" + "|".join(_FIELD_LABELS) + r")\s*:|$)"

_FIELD_RE = {
    "extracted_text": re.compile(r"EXTRACTED_TEXT:\s*([\s\S]*?)" + _NEXT_FIELD, re.I),
    "document_type": re.compile(r"DOCUMENT_TYPE:\s*([\s\S]*?)" + _NEXT_FIELD, re.I),
    "appears_official": re.compile(r"APPEARS_OFFICIAL:\s*(YES|NO|UNCERTAIN)", re.I),
    "readable": re.compile(r"READABLE:\s*(YES|NO)", re.I),
    "confidence": re.compile(r"CONFIDENCE:\s*([\d.]+)", re.I),
    "observations": re.compile(r"OBSERVATIONS:\s*([\s\S]*?)" + _NEXT_FIELD, re.I),
}


def parse_media_analysis(response_text: str) -> MediaAnalysis:
    """Parse the vision model reply into a MediaAnalysis.

    Missing fields keep their defaults; when no EXTRACTED_TEXT field is present
    the whole reply is taken as the extracted text.
    """
    def field(key: str) -> Optional[str]:
        match = _FIELD_RE[key].search(response_text)
        return match.group(1).strip() if match else None

    try:
        confidence = float(field("confidence") or 0.5)
    except ValueError:
        confidence = 0.5

    readable = field("readable")
    extracted = field("extracted_text")
    if extracted is None:
        extracted = response_text.strip()

    return MediaAnalysis(
        extracted_text=extracted,
        document_type=field("document_type") or "Unknown document type",
        appears_official=(field("appears_official") or "UNCERTAIN").upper(),
        readable=(readable.upper() == "YES") if readable else bool(extracted),
        confidence=min(max(confidence, 0.0), 1.0),
        observations=field("observations") or "",
    )


class GeminiMediaAnalyzer:
    """Vision analysis of attached media with Gemini."""

    def __init__(self, client: Optional[GeminiClient] = None, temperature: float = 0.2):
        self._client = client
        self.temperature = temperature
        self._logger = structlog.get_logger().bind(component="GeminiMediaAnalyzer")

    @property
    def client(self) -> Optional[GeminiClient]:
        if self._client is None:
            self._client = get_client()
        return self._client

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def analyze(self, payload: MediaPayload, caption: str = "") -> MediaAnalysis:
        """Analyze media bytes.

        Args:
            payload: Downloaded media.
            caption: Text sent with the media, given to the model as context.

        Returns:
            Parsed MediaAnalysis.

        Raises:
            ValueError: If no Gemini client is configured.
        """
        client = self.client
        if client is None:
            raise ValueError("GEMINI_API_KEY not configured in environment")

        caption_line = f'The user provided this caption: "{caption}"' if caption else ""
        prompt = MEDIA_ANALYSIS_PROMPT.format(caption_line=caption_line)
        parts = [{"mime_type": payload.mime_type, "data": payload.data}, prompt]

        response_text = await client.agenerate_content(parts, temperature=self.temperature)
        analysis = parse_media_analysis(response_text)

        self._logger.info(
            "media_analyzed",
            file_name=payload.file_name,
            mime_type=payload.mime_type,
            appears_official=analysis.appears_official,
            readable=analysis.readable,
            text_length=len(analysis.extracted_text),
        )
        return analysis
