"""Wizard UI: session models, controller, gallery store and Gradio app.

The Gradio layout lives in ``conceptcraft.ui.app`` and is imported on demand
so the controller can be used without building any UI.
"""

from .gallery_store import GalleryItem, GalleryStore, JsonFileStorage, MemoryStorage
from .models import PromptMode, Selection, UploadedImage, WizardSession, WizardStep
from .wizard import WizardController

__all__ = [
    "GalleryItem",
    "GalleryStore",
    "JsonFileStorage",
    "MemoryStorage",
    "PromptMode",
    "Selection",
    "UploadedImage",
    "WizardSession",
    "WizardStep",
    "WizardController",
]
