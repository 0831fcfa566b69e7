"""Unit tests for the wizard state machine."""

from unittest.mock import Mock

import pytest

from conceptcraft.core.errors import NetworkError, WizardError
from conceptcraft.ui.api_client import ApiClient
from conceptcraft.ui.models import PromptMode, WizardSession, WizardStep
from conceptcraft.ui.wizard import WizardController


@pytest.fixture
def api() -> Mock:
    api = Mock(spec=ApiClient)
    api.remove_background.return_value = {"result": "cut along the edges", "message": "ok"}
    api.generate_concept.return_value = {"concept": "A bold concept"}
    api.generate_image.return_value = {
        "success": True,
        "prompt": "A bold concept",
        "enhancedPrompt": "A bold concept. Style: flyer.",
        "guidance": "Use strong contrast",
    }
    return api


@pytest.fixture
def wizard(api, gallery) -> WizardController:
    return WizardController(api=api, gallery=gallery)


def _at_concept(wizard: WizardController, style: str = "flyer") -> WizardController:
    wizard.skip_to_style()
    wizard.select_style(style)
    wizard.proceed_from_style()
    return wizard


class TestUploadStep:
    def test_starts_on_upload(self, wizard):
        assert wizard.step == WizardStep.UPLOAD

    def test_add_and_remove_images(self, wizard, png_bytes):
        wizard.add_image(png_bytes, "a.png")
        wizard.add_image(png_bytes, "a.png")

        assert [image.name for image in wizard.session.images] == ["a.png", "a.png"]

        removed = wizard.remove_image(0)
        assert removed.name == "a.png"
        assert len(wizard.session.images) == 1

    def test_remove_out_of_range(self, wizard):
        with pytest.raises(WizardError):
            wizard.remove_image(3)

    def test_remove_negative_index(self, wizard, png_bytes):
        wizard.add_image(png_bytes, "a.png")
        wizard.add_image(png_bytes, "b.png")

        with pytest.raises(WizardError, match="position 0"):
            wizard.remove_image(-1)

        assert [image.name for image in wizard.session.images] == ["a.png", "b.png"]
        assert wizard.session.notifications == ["No uploaded image at position 0"]

    def test_analyze_requires_an_image(self, wizard, api):
        with pytest.raises(WizardError, match="upload at least one image"):
            wizard.analyze_images()

        assert wizard.step == WizardStep.UPLOAD
        api.remove_background.assert_not_called()
        assert wizard.session.notifications

    def test_analyze_relays_every_image(self, wizard, api, png_bytes, jpeg_bytes):
        wizard.add_image(png_bytes, "a.png")
        wizard.add_image(jpeg_bytes, "b.jpg")

        results = wizard.analyze_images()

        assert results == ["cut along the edges", "cut along the edges"]
        assert api.remove_background.call_count == 2
        assert wizard.step == WizardStep.STYLE
        assert wizard.session.background_results == results

    def test_analyze_failure_keeps_state(self, wizard, api, png_bytes):
        wizard.add_image(png_bytes, "a.png")
        api.remove_background.side_effect = NetworkError("Network error: boom")

        with pytest.raises(WizardError, match="boom"):
            wizard.analyze_images()

        assert wizard.step == WizardStep.UPLOAD
        assert wizard.session.background_results == []

    def test_generate_directly_has_no_guard(self, wizard):
        wizard.skip_to_style()

        assert wizard.step == WizardStep.STYLE


class TestStyleStep:
    def test_proceed_disabled_without_style(self, wizard):
        wizard.skip_to_style()

        assert wizard.can_proceed_from_style() is False
        with pytest.raises(WizardError):
            wizard.proceed_from_style()
        assert wizard.step == WizardStep.STYLE

    @pytest.mark.parametrize("style", ["flyer", "logo design", "anything at all"])
    def test_any_style_enables_proceed(self, wizard, style):
        wizard.skip_to_style()
        wizard.select_style(style)

        assert wizard.can_proceed_from_style() is True
        wizard.proceed_from_style()
        assert wizard.step == WizardStep.CONCEPT

    def test_blank_style_does_not_count(self, wizard):
        wizard.select_style("   ")

        assert wizard.can_proceed_from_style() is False

    def test_aspect_ratio_must_be_known(self, wizard):
        wizard.set_aspect_ratio("16:9")
        assert wizard.session.selection.aspect_ratio == "16:9"

        with pytest.raises(WizardError):
            wizard.set_aspect_ratio("21:9")
        assert wizard.session.selection.aspect_ratio == "16:9"
        assert wizard.session.notifications == ["Unsupported aspect ratio: 21:9"]


class TestConceptStep:
    def test_generate_concept_stores_text(self, wizard, api):
        _at_concept(wizard)
        wizard.set_topic("jazz night")
        wizard.set_aspect_ratio("9:16")

        concept = wizard.generate_concept()

        assert concept == "A bold concept"
        assert wizard.session.selection.concept_prompt == "A bold concept"
        api.generate_concept.assert_called_once_with("flyer", "jazz night", "9:16")

    def test_generate_concept_failure(self, wizard, api):
        _at_concept(wizard)
        api.generate_concept.side_effect = NetworkError("Network error: Style is required")

        with pytest.raises(WizardError):
            wizard.generate_concept()

        assert wizard.session.selection.concept_prompt == ""
        assert wizard.step == WizardStep.CONCEPT

    def test_resolved_prompt_follows_mode(self, wizard):
        _at_concept(wizard)
        wizard.generate_concept()
        wizard.set_manual_prompt("My own words")

        assert wizard.resolved_prompt() == "A bold concept"

        wizard.set_prompt_mode("manual")
        assert wizard.resolved_prompt() == "My own words"

        wizard.set_prompt_mode(PromptMode.GENERATED)
        assert wizard.resolved_prompt() == "A bold concept"

    def test_cannot_proceed_with_empty_prompt(self, wizard, api):
        _at_concept(wizard)

        assert wizard.can_proceed_from_concept() is False
        with pytest.raises(WizardError):
            wizard.generate()
        api.generate_image.assert_not_called()
        assert wizard.step == WizardStep.CONCEPT


class TestGeneration:
    def test_success_advances_to_results_after_delay(self, api, gallery):
        sleep = Mock()
        wizard = WizardController(api=api, gallery=gallery, results_delay=1.5, sleep=sleep)
        _at_concept(wizard)
        wizard.generate_concept()

        result = wizard.generate()

        sleep.assert_called_once_with(1.5)
        assert wizard.step == WizardStep.RESULTS
        assert result is wizard.session.result
        assert result.prompt == "A bold concept"
        assert result.guidance == "Use strong contrast"
        assert result.image_url.startswith("data:image/png;base64,")
        api.generate_image.assert_called_once_with("A bold concept", "flyer", "1:1")

    def test_failure_reverts_to_concept(self, wizard, api):
        _at_concept(wizard)
        wizard.generate_concept()
        api.generate_image.side_effect = NetworkError("Network error: OpenRouter API error: 500")

        with pytest.raises(WizardError, match="Image generation failed"):
            wizard.generate()

        assert wizard.step == WizardStep.CONCEPT
        assert wizard.session.result is None

    def test_superseded_response_is_dropped(self, wizard, api):
        _at_concept(wizard)
        wizard.generate_concept()

        def newer_action_arrives(*args):
            # Another action issues a request while this one is in flight.
            wizard.session.next_request_token()
            return api.generate_image.return_value

        api.generate_image.side_effect = newer_action_arrives

        assert wizard.generate() is None
        assert wizard.session.result is None

    def test_superseded_concept_is_not_stored(self, wizard, api):
        _at_concept(wizard)

        def newer_action_arrives(*args):
            wizard.session.next_request_token()
            return {"concept": "stale"}

        api.generate_concept.side_effect = newer_action_arrives
        wizard.generate_concept()

        assert wizard.session.selection.concept_prompt == ""


class TestResultsBranches:
    @pytest.fixture
    def at_results(self, wizard):
        _at_concept(wizard)
        wizard.generate_concept()
        wizard.generate()
        return wizard

    def test_refinement_regenerates_with_new_prompt(self, at_results, api):
        at_results.start_refinement()
        assert at_results.step == WizardStep.REFINEMENT
        assert at_results.session.selection.manual_prompt == "A bold concept"

        at_results.refine("A bolder concept")

        assert at_results.step == WizardStep.RESULTS
        assert at_results.session.selection.prompt_mode == PromptMode.MANUAL
        api.generate_image.assert_called_with("A bolder concept", "flyer", "1:1")

    def test_failed_refinement_returns_to_refinement(self, at_results, api):
        at_results.start_refinement()
        api.generate_image.side_effect = NetworkError("Network error: down")

        with pytest.raises(WizardError):
            at_results.refine("Try again")

        assert at_results.step == WizardStep.REFINEMENT

    def test_empty_refinement_rejected(self, at_results):
        at_results.start_refinement()

        with pytest.raises(WizardError):
            at_results.refine("  ")

    def test_save_to_gallery(self, at_results, gallery):
        item = at_results.save_to_gallery()

        assert at_results.step == WizardStep.GALLERY
        assert gallery.items == [item]
        assert item.concept == "A bold concept"
        assert item.style == "flyer"
        assert item.aspect_ratio == "1:1"

    def test_gallery_remove_and_clear(self, at_results, gallery):
        first = at_results.save_to_gallery()
        second = at_results.save_to_gallery()

        assert at_results.remove_gallery_item(first.id) is True
        assert [item.id for item in gallery.items] == [second.id]

        at_results.clear_gallery()
        assert gallery.items == []


class TestNavigation:
    def test_save_without_result(self, wizard):
        with pytest.raises(WizardError):
            wizard.save_to_gallery()

    def test_refine_without_result(self, wizard):
        with pytest.raises(WizardError):
            wizard.start_refinement()

    def test_back_walks_linear_flow(self, wizard):
        _at_concept(wizard)

        assert wizard.back() == WizardStep.STYLE
        assert wizard.back() == WizardStep.UPLOAD
        with pytest.raises(WizardError):
            wizard.back()

    def test_back_invalidates_outstanding_requests(self, wizard):
        _at_concept(wizard)
        token = wizard.session.next_request_token()

        wizard.back()

        assert not wizard.session.is_current(token)

    def test_open_gallery(self, wizard):
        assert wizard.open_gallery() == []
        assert wizard.step == WizardStep.GALLERY

    def test_start_over_resets_session_in_place(self, wizard, png_bytes):
        wizard.add_image(png_bytes, "a.png")
        _at_concept(wizard)
        old = wizard.session

        new = wizard.start_over()

        assert new is old
        assert new.images == []
        assert new.selection.style == ""
        assert new.step == WizardStep.UPLOAD

    def test_start_over_drops_in_flight_generation(self, wizard, api):
        _at_concept(wizard)
        wizard.session.selection.concept_prompt = "A bold concept"
        response = api.generate_image.return_value

        def start_over_mid_request(*args):
            wizard.start_over()
            return response

        api.generate_image.side_effect = start_over_mid_request

        assert wizard.generate() is None
        assert wizard.step == WizardStep.UPLOAD
        assert wizard.session.result is None

    def test_uses_given_session(self, api, gallery):
        session = WizardSession(step=WizardStep.CONCEPT)

        wizard = WizardController(api=api, gallery=gallery, session=session)

        assert wizard.session is session
        assert wizard.step == WizardStep.CONCEPT
