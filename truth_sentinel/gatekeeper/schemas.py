"""Inbound message and admission decision schemas.

Message is the normalized unit handed over by a platform adapter. The core
never interprets platform identifiers; media handles are opaque strings the
media fetch collaborator understands.

GatekeeperDecision is created once per message and is immutable. Its
priority and should_process fields must agree: priority SKIP if and only if
should_process is False.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Priority(str, Enum):
    """Processing priority assigned by the gatekeeper."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    SKIP = "skip"


class Message(BaseModel):
    """A normalized inbound chat message."""

    text: str = Field(default="", description="Message text")
    caption: Optional[str] = Field(default=None, description="Media caption")
    has_image: bool = Field(default=False, description="Message carries a photo")
    has_document: bool = Field(
        default=False, description="Message carries a document attachment"
    )
    is_forwarded: bool = Field(default=False, description="Message was forwarded")
    reply_to_text: Optional[str] = Field(
        default=None, description="Text of the message being replied to"
    )
    image_handle: Optional[str] = Field(
        default=None, description="Opaque media handle of the largest photo"
    )
    document_handle: Optional[str] = Field(
        default=None, description="Opaque media handle of the document"
    )
    document_name: Optional[str] = Field(
        default=None, description="Original file name of the document"
    )

    @property
    def has_media(self) -> bool:
        return self.has_image or self.has_document

    @property
    def combined_text(self) -> str:
        """Text and caption joined with a single space, stripped."""
        return f"{self.text or ''} {self.caption or ''}".strip()

    @property
    def is_empty(self) -> bool:
        return not self.combined_text and not self.has_media


class GatekeeperDecision(BaseModel):
    """Outcome of admission control for one message."""

    should_process: bool
    reason: str
    matched_keywords: list[str] = Field(default_factory=list)
    priority: Priority

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _skip_iff_not_processed(self) -> "GatekeeperDecision":
        if (self.priority == Priority.SKIP) == self.should_process:
            raise ValueError(
                "priority must be 'skip' exactly when should_process is False"
            )
        return self
