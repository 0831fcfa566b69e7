"""Gradio event handlers for the wizard.

Each handler receives the session from ``gr.State`` plus component values,
drives a :class:`~conceptcraft.ui.wizard.WizardController`, and returns the
updated session followed by component updates.  Step visibility is always
returned for all sections together, so a transition either replaces the
visible section completely or leaves it as it was.

Wizard errors are shown with ``gr.Warning`` and never propagate to Gradio.
"""

import html
import logging
from pathlib import Path

import gradio as gr

from conceptcraft.core.errors import WizardError

from .gallery_store import GalleryItem
from .models import PromptMode, WizardSession, WizardStep
from .state import build_controller, get_gallery_store, initialize_session

logger = logging.getLogger(__name__)

# Sections in the order their visibility updates are returned.
STEP_SECTIONS = list(WizardStep)


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def step_visibility(step: WizardStep) -> list[dict]:
    """Visibility updates for every section, showing only *step*."""
    return [gr.update(visible=section == step) for section in STEP_SECTIONS]


def render_uploads(session: WizardSession) -> str:
    if not session.images:
        return "*No images uploaded*"
    lines = [f"{index + 1}. `{image.name}` ({image.mime_type})" for index, image in enumerate(session.images)]
    return "\n".join(lines)


def render_result(session: WizardSession) -> tuple[str, str]:
    """Return ``(image_html, guidance_markdown)`` for the results section."""
    result = session.result
    if result is None:
        return "", "*No result yet*"
    image_html = (
        f'<img src="{result.image_url}" alt="{html.escape(result.style)}" '
        f'style="max-width:100%;border-radius:6px;" />'
    )
    guidance = (
        f"**Prompt:** {result.enhanced_prompt}\n\n"
        f"**Style:** {result.style} &nbsp; **Aspect ratio:** {result.aspect_ratio}\n\n"
        f"{result.guidance}"
    )
    return image_html, guidance


def render_gallery(items: list[GalleryItem]) -> str:
    if not items:
        return "<p><em>Your gallery is empty.</em></p>"
    cards = []
    for item in items:
        cards.append(
            '<figure style="display:inline-block;width:200px;margin:6px;vertical-align:top;">'
            f'<img src="{item.image_url}" style="width:100%;border-radius:4px;" />'
            f"<figcaption><strong>{html.escape(item.style)}</strong> "
            f"({html.escape(item.aspect_ratio)})<br/><small>{html.escape(item.concept[:120])}</small>"
            f"<br/><code>{html.escape(item.id)}</code></figcaption></figure>"
        )
    return "".join(cards)


def _gallery_outputs(items: list[GalleryItem]) -> tuple[str, dict]:
    ids = [item.id for item in items]
    return render_gallery(items), gr.update(choices=ids, value=ids[0] if ids else None)


# ---------------------------------------------------------------------------
# Upload step
# ---------------------------------------------------------------------------


def add_uploads(files: list | None, session: WizardSession | None) -> tuple[WizardSession, str]:
    """Add uploaded files to the session, skipping unsupported formats."""
    controller = build_controller(session)
    for file in files or []:
        path = Path(getattr(file, "name", file))
        try:
            controller.add_image(path.read_bytes(), path.name)
        except WizardError as e:
            gr.Warning(str(e))
        except OSError as e:
            logger.error(f"Could not read upload {path}: {e}")
            gr.Warning(f"Could not read {path.name}")
    return controller.session, render_uploads(controller.session)


def remove_upload(position: float | None, session: WizardSession | None) -> tuple[WizardSession, str]:
    """Remove the upload at 1-based *position*."""
    controller = build_controller(session)
    try:
        controller.remove_image(int(position or 0) - 1)
    except WizardError as e:
        gr.Warning(str(e))
    return controller.session, render_uploads(controller.session)


def analyze_uploads(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    try:
        results = controller.analyze_images()
        analysis = "\n\n".join(results)
    except WizardError as e:
        gr.Warning(str(e))
        analysis = ""
    return (controller.session, *step_visibility(controller.step), analysis)


def skip_upload(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    controller.skip_to_style()
    return (controller.session, *step_visibility(controller.step))


# ---------------------------------------------------------------------------
# Style step
# ---------------------------------------------------------------------------


def update_style(
    style: str | None,
    aspect_ratio: str | None,
    topic: str | None,
    session: WizardSession | None,
) -> tuple[WizardSession, dict]:
    """Store style selections and enable "Next" once a style is chosen."""
    controller = build_controller(session)
    controller.select_style(style or "")
    controller.set_topic(topic or "")
    if aspect_ratio:
        try:
            controller.set_aspect_ratio(aspect_ratio)
        except WizardError as e:
            gr.Warning(str(e))
    return controller.session, gr.update(interactive=controller.can_proceed_from_style())


def proceed_from_style(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    try:
        controller.proceed_from_style()
    except WizardError as e:
        gr.Warning(str(e))
    return (controller.session, *step_visibility(controller.step))


def go_back(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    try:
        controller.back()
    except WizardError as e:
        gr.Warning(str(e))
    return (controller.session, *step_visibility(controller.step))


# ---------------------------------------------------------------------------
# Concept step
# ---------------------------------------------------------------------------


def update_prompt_source(
    mode: str, manual_prompt: str | None, session: WizardSession | None
) -> tuple[WizardSession, dict, dict]:
    """Apply the prompt mode toggle and manual text.

    Returns the session, the manual textbox visibility and whether
    "Generate" is enabled.
    """
    controller = build_controller(session)
    controller.set_prompt_mode(mode)
    controller.set_manual_prompt(manual_prompt or "")
    return (
        controller.session,
        gr.update(visible=mode == "manual"),
        gr.update(interactive=controller.can_proceed_from_concept()),
    )


def generate_concept(session: WizardSession | None) -> tuple[WizardSession, str, dict]:
    controller = build_controller(session)
    try:
        controller.generate_concept()
    except WizardError as e:
        gr.Warning(str(e))
    return (
        controller.session,
        controller.session.selection.concept_prompt,
        gr.update(interactive=controller.can_proceed_from_concept()),
    )


# ---------------------------------------------------------------------------
# Progress / results / refinement
# ---------------------------------------------------------------------------


def show_progress(session: WizardSession | None) -> tuple:
    """Display the progress section while generation runs.

    Only the view changes; the session is moved by :func:`run_generation`.
    """
    session = initialize_session(session)
    if not session.selection.resolved_prompt():
        return tuple(step_visibility(session.step))
    return tuple(step_visibility(WizardStep.PROGRESS))


def _generation_outputs(controller) -> tuple:
    image_html, guidance = render_result(controller.session)
    return (controller.session, *step_visibility(controller.step), image_html, guidance)


def run_generation(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    try:
        controller.generate()
    except WizardError as e:
        gr.Warning(str(e))
    return _generation_outputs(controller)


def start_refinement(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    try:
        controller.start_refinement()
    except WizardError as e:
        gr.Warning(str(e))
    return (
        controller.session,
        *step_visibility(controller.step),
        controller.session.selection.manual_prompt,
    )


def submit_refinement(text: str | None, session: WizardSession | None) -> tuple:
    """Regenerate from the refined prompt.

    A refinement switches the concept step to the manual prompt, so the
    prompt mode, manual prompt and "Generate" button are returned after the
    usual generation outputs to keep that step in sync with the session.
    """
    controller = build_controller(session)
    try:
        controller.refine(text or "")
    except WizardError as e:
        gr.Warning(str(e))
    selection = controller.session.selection
    manual = selection.prompt_mode == PromptMode.MANUAL
    return (
        *_generation_outputs(controller),
        gr.update(value=selection.prompt_mode.value),
        gr.update(value=selection.manual_prompt, visible=manual),
        gr.update(interactive=controller.can_proceed_from_concept()),
    )


# ---------------------------------------------------------------------------
# Gallery
# ---------------------------------------------------------------------------


def save_result(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    try:
        item = controller.save_to_gallery()
        gr.Info(f"Saved to gallery ({item.id})")
    except WizardError as e:
        gr.Warning(str(e))
    return (controller.session, *step_visibility(controller.step), *_gallery_outputs(controller.gallery.items))


def open_gallery(session: WizardSession | None) -> tuple:
    controller = build_controller(session)
    items = controller.open_gallery()
    return (controller.session, *step_visibility(controller.step), *_gallery_outputs(items))


def remove_gallery_item(item_id: str | None) -> tuple[str, dict]:
    gallery = get_gallery_store()
    if item_id and not gallery.remove_by_id(item_id):
        gr.Warning(f"No gallery item {item_id}")
    return _gallery_outputs(gallery.items)


def clear_gallery() -> tuple[str, dict]:
    gallery = get_gallery_store()
    gallery.clear()
    return _gallery_outputs(gallery.items)


def start_over(session: WizardSession | None) -> tuple:
    """Reset the session and every input and output widget of the wizard.

    Returns the session, the step visibility updates, then in order: upload
    files, upload summary, analysis text, style, aspect ratio, topic, the
    style "Next" button, prompt mode, manual prompt, concept text, the
    "Generate" button, result image, result guidance and refined prompt.
    """
    controller = build_controller(session)
    controller.start_over()
    fresh = controller.session
    selection = fresh.selection
    image_html, guidance = render_result(fresh)
    return (
        fresh,
        *step_visibility(controller.step),
        gr.update(value=None),
        render_uploads(fresh),
        "",
        gr.update(value=None),
        gr.update(value=selection.aspect_ratio),
        gr.update(value=selection.topic),
        gr.update(interactive=controller.can_proceed_from_style()),
        gr.update(value=selection.prompt_mode.value),
        gr.update(value=selection.manual_prompt, visible=False),
        selection.concept_prompt,
        gr.update(interactive=controller.can_proceed_from_concept()),
        image_html,
        guidance,
        selection.manual_prompt,
    )
