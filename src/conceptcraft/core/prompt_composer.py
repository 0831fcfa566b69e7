"""Relay message composition for Conceptcraft.

Every relay call sends an ordered list of chat messages to the upstream
provider.  This module turns the user's selections (style, topic, aspect
ratio, prompt) into those lists.  All instructional text lives in the
module-level constants below; the functions only decide which pieces to
join.

Concept Request Structure::

    system: [Concept system instruction]
    user:   Create a detailed, professional image generation prompt for a
            [style] in [aspect ratio description]. [Optional topic clause]
            [Fixed quality/composition requirements]

Image Guidance Request Structure::

    system: [Guidance system instruction]
    user:   Generate an image based on this prompt: [enhanced prompt]

where the enhanced prompt is the caller's prompt followed by style,
aspect-ratio and a fixed quality clause.

Usage
-----
::

    messages = compose_concept_messages("minimalist poster", "coffee shop", "1:1")
    text = await relay_client.complete(messages)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Literal

# ---------------------------------------------------------------------------
# Templates.
# ---------------------------------------------------------------------------

ASPECT_RATIO_DESCRIPTIONS: dict[str, str] = {
    "9:16": "portrait (9:16 aspect ratio)",
    "1:1": "square (1:1 aspect ratio)",
    "16:9": "landscape (16:9 aspect ratio)",
    "3:4": "vertical (3:4 aspect ratio)",
    "4:3": "horizontal (4:3 aspect ratio)",
}

DEFAULT_ASPECT_RATIO = "1:1"
FALLBACK_ASPECT_RATIO_DESCRIPTION = "standard aspect ratio"

CONCEPT_SYSTEM_PROMPT = (
    "You are a creative AI assistant that generates detailed, professional image "
    "generation prompts. Create prompts that will produce high-quality, studio-grade "
    "images suitable for the specified design style."
)

CONCEPT_REQUEST_TEMPLATE = (
    "Create a detailed, professional image generation prompt for a {style} in {ratio}. "
)

CONCEPT_TOPIC_TEMPLATE = 'The main topic/theme is: "{topic}". '

CONCEPT_REQUIREMENTS = """The image should be:
- High quality, professional, studio-grade
- Excellent lighting and composition
- Cinematic quality with premium aesthetics
- Suitable for commercial use
- Visually appealing and engaging
- Optimized for social media sharing

Provide a comprehensive prompt that includes details about:
- Style and aesthetic
- Lighting and atmosphere
- Composition and framing
- Color palette
- Key visual elements
- Overall mood and feeling

Make the prompt descriptive and specific enough to generate a professional-quality image."""

GUIDANCE_SYSTEM_PROMPT = (
    "You are helping to generate images based on detailed prompts. "
    "Provide guidance for image generation."
)

GUIDANCE_REQUEST_TEMPLATE = "Generate an image based on this prompt: {prompt}"

ENHANCED_PROMPT_TEMPLATE = (
    "{prompt}. Style: {style}. Aspect ratio: {aspect_ratio}. "
    "High quality, professional, studio-grade image with cinematic lighting."
)

BACKGROUND_SYSTEM_PROMPT = (
    "You are an AI that analyzes images and provides background removal instructions."
)

BACKGROUND_REQUEST = (
    "Analyze this image for background removal and provide processing instructions."
)


@dataclass(frozen=True)
class UpstreamMessage:
    """A single chat message sent to the upstream provider."""

    role: Literal["system", "user"]
    content: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def describe_aspect_ratio(aspect_ratio: str | None) -> str:
    """Return the textual description of *aspect_ratio*.

    Unknown or missing values fall back to a generic descriptor rather than
    failing.
    """
    if not aspect_ratio:
        return FALLBACK_ASPECT_RATIO_DESCRIPTION
    return ASPECT_RATIO_DESCRIPTIONS.get(aspect_ratio, FALLBACK_ASPECT_RATIO_DESCRIPTION)


def compose_concept_messages(
    style: str,
    topic: str | None = "",
    aspect_ratio: str | None = DEFAULT_ASPECT_RATIO,
) -> list[UpstreamMessage]:
    """Build the message pair asking the provider for a concept prompt.

    Args:
        style: Design style tag (e.g. "minimalist poster").  Required by the
            caller; not validated here.
        topic: Optional subject.  Blank topics omit the topic clause.
        aspect_ratio: One of :data:`ASPECT_RATIO_DESCRIPTIONS` keys.  Other
            values use the generic descriptor.

    Returns:
        ``[system, user]`` messages.
    """
    request = CONCEPT_REQUEST_TEMPLATE.format(
        style=style,
        ratio=describe_aspect_ratio(aspect_ratio),
    )

    stripped_topic = (topic or "").strip()
    if stripped_topic:
        request += CONCEPT_TOPIC_TEMPLATE.format(topic=stripped_topic)

    request += CONCEPT_REQUIREMENTS

    return [
        UpstreamMessage(role="system", content=CONCEPT_SYSTEM_PROMPT),
        UpstreamMessage(role="user", content=request),
    ]


def enhance_prompt(prompt: str, style: str | None, aspect_ratio: str | None) -> str:
    """Append style, aspect-ratio and quality context to a base prompt."""
    return ENHANCED_PROMPT_TEMPLATE.format(
        prompt=prompt,
        style=style or "",
        aspect_ratio=aspect_ratio or "",
    )


def compose_image_messages(
    prompt: str,
    style: str | None,
    aspect_ratio: str | None,
) -> list[UpstreamMessage]:
    """Build the message pair asking the provider for image guidance.

    Returns:
        ``[system, user]`` messages; the user message embeds the enhanced
        prompt produced by :func:`enhance_prompt`.
    """
    enhanced = enhance_prompt(prompt, style, aspect_ratio)
    return [
        UpstreamMessage(role="system", content=GUIDANCE_SYSTEM_PROMPT),
        UpstreamMessage(role="user", content=GUIDANCE_REQUEST_TEMPLATE.format(prompt=enhanced)),
    ]


def compose_background_messages() -> list[UpstreamMessage]:
    """Build the fixed message pair for the background analysis call.

    The image payload itself is not forwarded; the provider only returns
    generic processing instructions.
    """
    return [
        UpstreamMessage(role="system", content=BACKGROUND_SYSTEM_PROMPT),
        UpstreamMessage(role="user", content=BACKGROUND_REQUEST),
    ]
