"""Pydantic request models for the Conceptcraft HTTP API.

Field names follow the JSON bodies the frontend sends (camelCase), so the
models declare camelCase aliases while keeping snake_case attributes.

Required fields are typed as optional on purpose: a missing value must be
answered with ``400 {"error": ...}`` by the route handler, not with
FastAPI's default 422 validation payload.

Models
------
ConceptRequest
    Payload for ``POST /api/generate-concept``.
BackgroundRemovalRequest
    Payload for ``POST /api/remove-background``.
ImageGuidanceRequest
    Payload for ``POST /api/generate-image``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ApiRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ConceptRequest(_ApiRequest):
    """Request body for ``POST /api/generate-concept``.

    Attributes:
        style: Design style tag.  Required.
        topic: Optional subject for the concept.
        aspect_ratio: Aspect ratio identifier (``aspectRatio`` in JSON).
    """

    style: str | None = Field(default=None, description="Design style tag (required).")
    topic: str | None = Field(default=None, description="Optional topic or theme.")
    aspect_ratio: str | None = Field(
        default=None,
        alias="aspectRatio",
        description="Aspect ratio identifier (e.g. '1:1', '16:9').",
    )


class BackgroundRemovalRequest(_ApiRequest):
    """Request body for ``POST /api/remove-background``."""

    image_data: str | None = Field(
        default=None,
        alias="imageData",
        description="Base64-encoded image or data URL (required).",
    )


class ImageGuidanceRequest(_ApiRequest):
    """Request body for ``POST /api/generate-image``.

    Attributes:
        prompt: Base prompt.  Required.
        style: Design style tag echoed back and embedded in the enhanced prompt.
        aspect_ratio: Aspect ratio identifier (``aspectRatio`` in JSON).
    """

    prompt: str | None = Field(default=None, description="Base image prompt (required).")
    style: str | None = Field(default=None, description="Design style tag.")
    aspect_ratio: str | None = Field(
        default=None,
        alias="aspectRatio",
        description="Aspect ratio identifier.",
    )
