"""Tests for conceptcraft.core.prompt_composer — relay message composition."""

from __future__ import annotations

from conceptcraft.core.prompt_composer import (
    BACKGROUND_REQUEST,
    CONCEPT_REQUIREMENTS,
    CONCEPT_SYSTEM_PROMPT,
    FALLBACK_ASPECT_RATIO_DESCRIPTION,
    GUIDANCE_SYSTEM_PROMPT,
    UpstreamMessage,
    compose_background_messages,
    compose_concept_messages,
    compose_image_messages,
    describe_aspect_ratio,
    enhance_prompt,
)


class TestDescribeAspectRatio:
    """Test the aspect ratio lookup and its fallback."""

    def test_known_ratios(self):
        assert describe_aspect_ratio("1:1") == "square (1:1 aspect ratio)"
        assert describe_aspect_ratio("9:16") == "portrait (9:16 aspect ratio)"
        assert describe_aspect_ratio("16:9") == "landscape (16:9 aspect ratio)"
        assert describe_aspect_ratio("3:4") == "vertical (3:4 aspect ratio)"
        assert describe_aspect_ratio("4:3") == "horizontal (4:3 aspect ratio)"

    def test_unknown_ratio_falls_back(self):
        assert describe_aspect_ratio("21:9") == FALLBACK_ASPECT_RATIO_DESCRIPTION

    def test_missing_ratio_falls_back(self):
        assert describe_aspect_ratio(None) == FALLBACK_ASPECT_RATIO_DESCRIPTION
        assert describe_aspect_ratio("") == FALLBACK_ASPECT_RATIO_DESCRIPTION


class TestComposeConceptMessages:
    """Test the concept request message pair."""

    def test_returns_system_then_user(self):
        messages = compose_concept_messages("minimalist poster", "coffee shop", "1:1")

        assert [m.role for m in messages] == ["system", "user"]
        assert messages[0].content == CONCEPT_SYSTEM_PROMPT

    def test_user_message_embeds_style_ratio_and_topic(self):
        user = compose_concept_messages("minimalist poster", "coffee shop", "1:1")[1].content

        assert user.startswith(
            "Create a detailed, professional image generation prompt for a "
            "minimalist poster in square (1:1 aspect ratio). "
        )
        assert 'The main topic/theme is: "coffee shop". ' in user
        assert user.endswith(CONCEPT_REQUIREMENTS)

    def test_blank_topic_omits_topic_clause(self):
        user = compose_concept_messages("logo design", "   ", "16:9")[1].content

        assert "topic/theme" not in user

    def test_unknown_ratio_uses_fallback_text(self):
        user = compose_concept_messages("flyer", "", "7:5")[1].content

        assert "in standard aspect ratio." in user

    def test_defaults(self):
        user = compose_concept_messages("flyer")[1].content

        assert "square (1:1 aspect ratio)" in user


class TestImageMessages:
    """Test enhanced prompts and the guidance request."""

    def test_enhance_prompt(self):
        assert enhance_prompt("A red fox", "watercolor", "16:9") == (
            "A red fox. Style: watercolor. Aspect ratio: 16:9. "
            "High quality, professional, studio-grade image with cinematic lighting."
        )

    def test_image_messages_embed_enhanced_prompt(self):
        messages = compose_image_messages("A red fox", "watercolor", "16:9")

        assert messages[0] == UpstreamMessage(role="system", content=GUIDANCE_SYSTEM_PROMPT)
        assert messages[1].role == "user"
        assert messages[1].content == (
            "Generate an image based on this prompt: "
            + enhance_prompt("A red fox", "watercolor", "16:9")
        )

    def test_background_messages_are_fixed(self):
        messages = compose_background_messages()

        assert [m.role for m in messages] == ["system", "user"]
        assert messages[1].content == BACKGROUND_REQUEST

    def test_message_to_dict(self):
        message = UpstreamMessage(role="user", content="hi")
        assert message.to_dict() == {"role": "user", "content": "hi"}
