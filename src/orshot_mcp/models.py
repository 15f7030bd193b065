"""Pydantic models for Orshot render requests."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .types import ColorMode


class PdfOptions(BaseModel):
    """PDF-specific render options (format='pdf' only)."""

    model_config = ConfigDict(extra="forbid")

    margin: str | None = Field(default=None, description="PDF margin, e.g. '20px', '1in'")
    rangeFrom: int | None = Field(default=None, description="First page to include")
    rangeTo: int | None = Field(default=None, description="Last page to include")
    colorMode: ColorMode | None = Field(default=None, description="Color mode for PDF output")
    dpi: int | None = Field(default=None, description="DPI (72 standard, 300 for print)")


class VideoOptions(BaseModel):
    """Video-specific render options (mp4/webm/gif only)."""

    model_config = ConfigDict(extra="forbid")

    trimStart: float | None = Field(default=None, description="Trim start in seconds")
    trimEnd: float | None = Field(default=None, description="Trim end in seconds")
    muted: bool | None = Field(default=None, description="Mute audio")
    loop: bool | None = Field(default=None, description="Loop the video")


class ResponseSpec(BaseModel):
    """The ``response`` block of a render request."""

    type: str
    format: str
    scale: float | None = None
    includePages: list[int] | None = None
    fileName: str | None = None
    quality: int | None = None


class GenerationRequest(BaseModel):
    """Body for ``/v1/generate/images`` and ``/v1/studio/render``."""

    templateId: str
    modifications: dict[str, Any] = Field(default_factory=dict)
    response: ResponseSpec
    pdfOptions: PdfOptions | None = None
    videoOptions: VideoOptions | None = None
    webhook: str | None = None
    source: str = "orshot-mcp-server"

    def to_body(self) -> dict:
        """Wire payload with unset optionals left out.

        ``modifications`` is passed through untouched so explicit nulls survive.
        """
        body = self.model_dump(mode="json", exclude_none=True, exclude={"modifications"})
        body["modifications"] = self.modifications
        return body
