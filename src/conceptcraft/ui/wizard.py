"""Wizard state machine.

The wizard walks one user through::

    upload -> style -> concept -> progress -> results -> {refinement | gallery}

:class:`WizardController` owns a :class:`WizardSession` and exposes one
method per user action.  Guards raise :class:`WizardError` with a message
meant for a notification.  A transition that needs a relay call only
mutates the session after the call succeeds; on failure the session is left
as it was (or reverted from the progress step) and the error is re-raised.

Every relay call takes a token from ``session.next_request_token()``.  When
a response arrives for a token that is no longer the latest, it has been
superseded by a newer action and is dropped without touching the session.
"""

import logging
import time
from collections.abc import Callable

from conceptcraft.core.errors import NetworkError, WizardError

from .api_client import ApiClient
from .gallery_store import GalleryItem, GalleryStore, new_gallery_item
from .images import load_uploaded_image, render_placeholder
from .models import (
    ASPECT_RATIO_CHOICES,
    PREVIOUS_STEP,
    GenerationResult,
    PromptMode,
    UploadedImage,
    WizardSession,
    WizardStep,
)

logger = logging.getLogger(__name__)


class WizardController:
    """Drives a wizard session against the HTTP API and the gallery.

    Args:
        api: Client for the relay endpoints.
        gallery: Persisted gallery list.
        session: Existing session, or ``None`` for a fresh one.
        results_delay: Seconds to remain on the progress step after a
            successful generation before showing results.
        sleep: Delay function, replaced in tests.
    """

    def __init__(
        self,
        api: ApiClient,
        gallery: GalleryStore,
        session: WizardSession | None = None,
        results_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api = api
        self.gallery = gallery
        self.session = session if session is not None else WizardSession()
        self.results_delay = results_delay
        self.sleep = sleep

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def step(self) -> WizardStep:
        return self.session.step

    def notify(self, message: str) -> None:
        self.session.notifications.append(message)
        logger.warning(f"Wizard notification: {message}")

    def _fail(self, message: str) -> WizardError:
        self.notify(message)
        return WizardError(message)

    # ------------------------------------------------------------------
    # Upload step
    # ------------------------------------------------------------------

    def add_image(self, raw: bytes, name: str) -> UploadedImage:
        image = load_uploaded_image(raw, name)
        self.session.images.append(image)
        return image

    def remove_image(self, index: int) -> UploadedImage:
        if not 0 <= index < len(self.session.images):
            raise self._fail(f"No uploaded image at position {index + 1}")
        return self.session.images.pop(index)

    def analyze_images(self) -> list[str]:
        """Run background analysis on every uploaded image, then go to style.

        Raises:
            WizardError: No images uploaded, or a relay call failed.
        """
        if not self.session.images:
            raise self._fail("Please upload at least one image first")

        token = self.session.next_request_token()
        results: list[str] = []
        try:
            for image in self.session.images:
                response = self.api.remove_background(image.data_url)
                results.append(response.get("result", ""))
        except NetworkError as e:
            raise self._fail(f"Background analysis failed: {e}") from e

        if not self.session.is_current(token):
            logger.info(f"Dropping superseded background analysis (token {token})")
            return results

        self.session.background_results = results
        self.session.step = WizardStep.STYLE
        return results

    def skip_to_style(self) -> None:
        """Generate-directly path: no upload required."""
        self.session.step = WizardStep.STYLE

    # ------------------------------------------------------------------
    # Style step
    # ------------------------------------------------------------------

    def select_style(self, style: str) -> None:
        self.session.selection.style = (style or "").strip()

    def set_aspect_ratio(self, aspect_ratio: str) -> None:
        if aspect_ratio not in ASPECT_RATIO_CHOICES:
            raise self._fail(f"Unsupported aspect ratio: {aspect_ratio}")
        self.session.selection.aspect_ratio = aspect_ratio

    def set_topic(self, topic: str) -> None:
        self.session.selection.topic = topic or ""

    def can_proceed_from_style(self) -> bool:
        return self.session.selection.has_style()

    def proceed_from_style(self) -> None:
        if not self.can_proceed_from_style():
            raise self._fail("Please select a style first")
        self.session.step = WizardStep.CONCEPT

    # ------------------------------------------------------------------
    # Concept step
    # ------------------------------------------------------------------

    def set_prompt_mode(self, mode: PromptMode | str) -> None:
        self.session.selection.prompt_mode = PromptMode(mode)

    def set_manual_prompt(self, text: str) -> None:
        self.session.selection.manual_prompt = text or ""

    def generate_concept(self) -> str:
        """Ask the API for a concept and store it on the selection.

        Raises:
            WizardError: No style selected, or the relay call failed.
        """
        selection = self.session.selection
        if not selection.has_style():
            raise self._fail("Please select a style first")

        token = self.session.next_request_token()
        try:
            response = self.api.generate_concept(
                selection.style, selection.topic, selection.aspect_ratio
            )
        except NetworkError as e:
            raise self._fail(f"Concept generation failed: {e}") from e

        concept = response.get("concept", "")
        if self.session.is_current(token):
            selection.concept_prompt = concept
        else:
            logger.info(f"Dropping superseded concept (token {token})")
        return concept

    def resolved_prompt(self) -> str:
        return self.session.selection.resolved_prompt()

    def can_proceed_from_concept(self) -> bool:
        return bool(self.resolved_prompt())

    # ------------------------------------------------------------------
    # Progress / results
    # ------------------------------------------------------------------

    def generate(self) -> GenerationResult | None:
        """Generate from the resolved prompt and advance to results.

        The session sits on the progress step while the relay call runs.  On
        failure it returns to the step it came from.

        Returns:
            The new result, or ``None`` if the response was superseded.

        Raises:
            WizardError: Empty prompt, or the relay call failed.
        """
        prompt = self.resolved_prompt()
        if not prompt:
            raise self._fail("Please enter a prompt or generate a concept first")

        selection = self.session.selection
        origin = self.session.step
        token = self.session.next_request_token()
        self.session.step = WizardStep.PROGRESS

        try:
            response = self.api.generate_image(prompt, selection.style, selection.aspect_ratio)
        except NetworkError as e:
            if self.session.is_current(token):
                self.session.step = origin
            raise self._fail(f"Image generation failed: {e}") from e

        if not self.session.is_current(token):
            logger.info(f"Dropping superseded generation (token {token})")
            return None

        result = GenerationResult(
            prompt=prompt,
            enhanced_prompt=response.get("enhancedPrompt", prompt),
            guidance=response.get("guidance", ""),
            style=selection.style,
            aspect_ratio=selection.aspect_ratio,
            image_url=render_placeholder(selection.aspect_ratio, selection.style),
        )

        if self.results_delay:
            self.sleep(self.results_delay)
        if not self.session.is_current(token):
            return None

        self.session.result = result
        self.session.step = WizardStep.RESULTS
        return result

    def start_refinement(self) -> None:
        if self.session.result is None:
            raise self._fail("Generate an image before refining it")
        self.session.selection.manual_prompt = self.session.result.prompt
        self.session.step = WizardStep.REFINEMENT

    def refine(self, text: str) -> GenerationResult | None:
        """Regenerate from an edited prompt."""
        if not (text or "").strip():
            raise self._fail("Please describe the refinement")
        self.session.selection.prompt_mode = PromptMode.MANUAL
        self.session.selection.manual_prompt = text
        return self.generate()

    # ------------------------------------------------------------------
    # Gallery
    # ------------------------------------------------------------------

    def save_to_gallery(self) -> GalleryItem:
        result = self.session.result
        if result is None:
            raise self._fail("Nothing to save yet")
        item = new_gallery_item(
            image_url=result.image_url,
            style=result.style,
            aspect_ratio=result.aspect_ratio,
            concept=result.prompt,
        )
        self.gallery.append(item)
        self.session.step = WizardStep.GALLERY
        return item

    def open_gallery(self) -> list[GalleryItem]:
        self.session.step = WizardStep.GALLERY
        return self.gallery.items

    def remove_gallery_item(self, item_id: str) -> bool:
        return self.gallery.remove_by_id(item_id)

    def clear_gallery(self) -> None:
        self.gallery.clear()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def back(self) -> WizardStep:
        previous = PREVIOUS_STEP.get(self.session.step)
        if previous is None:
            raise self._fail(f"Cannot go back from the {self.session.step.value} step")
        self.session.next_request_token()
        self.session.step = previous
        return previous

    def start_over(self) -> WizardSession:
        """Reset the session in place; in-flight responses are dropped."""
        self.session.reset()
        return self.session
