"""Data models for the Conceptcraft wizard session."""

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    """Wizard steps in flow order."""

    UPLOAD = "upload"
    STYLE = "style"
    CONCEPT = "concept"
    PROGRESS = "progress"
    RESULTS = "results"
    REFINEMENT = "refinement"
    GALLERY = "gallery"


# Linear flow used by back(); refinement and gallery both branch from results.
PREVIOUS_STEP = {
    WizardStep.STYLE: WizardStep.UPLOAD,
    WizardStep.CONCEPT: WizardStep.STYLE,
    WizardStep.RESULTS: WizardStep.CONCEPT,
    WizardStep.REFINEMENT: WizardStep.RESULTS,
    WizardStep.GALLERY: WizardStep.RESULTS,
}


class PromptMode(str, Enum):
    """Source of the prompt used for generation."""

    GENERATED = "generated"
    MANUAL = "manual"


@dataclass
class UploadedImage:
    """An image added on the upload step.

    Attributes:
        data_url: ``data:<mime>;base64,<payload>`` encoding of the file.
        name: Original file name.
        mime_type: ``image/jpeg``, ``image/png`` or ``image/webp``.
    """

    data_url: str
    name: str
    mime_type: str


@dataclass
class Selection:
    """User selections held for the lifetime of one wizard session."""

    style: str = ""
    aspect_ratio: str = "1:1"
    topic: str = ""
    concept_prompt: str = ""
    prompt_mode: PromptMode = PromptMode.GENERATED
    manual_prompt: str = ""

    def has_style(self) -> bool:
        return bool(self.style and self.style.strip())

    def resolved_prompt(self) -> str:
        """Return the manual or generated prompt depending on the mode toggle."""
        if self.prompt_mode == PromptMode.MANUAL:
            return self.manual_prompt.strip()
        return self.concept_prompt.strip()


@dataclass
class GenerationResult:
    """Outcome of a successful ``/api/generate-image`` call."""

    prompt: str
    enhanced_prompt: str
    guidance: str
    style: str
    aspect_ratio: str
    image_url: str


@dataclass
class WizardSession:
    """Session state for one pass through the wizard.

    Each browser session gets its own instance (held in ``gr.State``).  It is
    never shared and is discarded when the user starts over or reloads.

    Attributes
    ----------
    step : WizardStep
        Currently visible step.
    selection : Selection
        Style, aspect ratio, topic and prompt choices.
    images : list[UploadedImage]
        Uploaded images in upload order; duplicates allowed.
    background_results : list[str]
        Relay text from the analyze path, one per image.
    result : GenerationResult | None
        Last successful generation.
    request_seq : int
        Token of the most recently issued relay call.  Responses carrying an
        older token are stale and dropped.
    notifications : list[str]
        User-facing messages raised during the session, oldest first.
    """

    step: WizardStep = WizardStep.UPLOAD
    selection: Selection = field(default_factory=Selection)
    images: list[UploadedImage] = field(default_factory=list)
    background_results: list[str] = field(default_factory=list)
    result: GenerationResult | None = None
    request_seq: int = 0
    notifications: list[str] = field(default_factory=list)

    def next_request_token(self) -> int:
        self.request_seq += 1
        return self.request_seq

    def is_current(self, token: int) -> bool:
        return token == self.request_seq

    def reset(self) -> None:
        """Return this session to its initial state.

        The object is reused, so handlers still holding it see the reset, and
        every outstanding request token becomes stale.
        """
        self.step = WizardStep.UPLOAD
        self.selection = Selection()
        self.images = []
        self.background_results = []
        self.result = None
        self.notifications = []
        self.next_request_token()

    def __repr__(self) -> str:
        return (
            f"WizardSession(step={self.step.value}, "
            f"style={self.selection.style!r}, images={len(self.images)})"
        )


# Constants for the wizard UI
STYLE_CHOICES = [
    "minimalist poster",
    "product photography",
    "social media banner",
    "logo design",
    "book cover",
    "flyer",
    "infographic",
    "3D render",
]

ASPECT_RATIO_CHOICES = ["9:16", "1:1", "16:9", "3:4", "4:3"]

SUPPORTED_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}
