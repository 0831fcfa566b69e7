"""Gradio UI for the Conceptcraft wizard."""

import logging

import gradio as gr

from . import handlers
from .models import ASPECT_RATIO_CHOICES, STYLE_CHOICES, WizardSession, WizardStep

logger = logging.getLogger(__name__)


def create_ui() -> gr.Blocks:
    """Create the wizard as a Gradio Blocks app.

    Each wizard step is a ``gr.Group``; exactly one is visible at a time.

    Returns:
        The Gradio Blocks app, ready to mount or launch.
    """
    app = gr.Blocks(title="Conceptcraft")

    with app:
        # Session state - one instance per user
        session = gr.State(WizardSession())

        gr.Markdown(
            """
            # Conceptcraft
            ### Upload, pick a style, get a concept, generate
            """
        )

        sections: dict[WizardStep, gr.Group] = {}

        # --- Upload ----------------------------------------------------------
        with gr.Group(visible=True) as sections[WizardStep.UPLOAD]:
            gr.Markdown("### 1. Upload images")
            upload_files = gr.File(
                label="Images (JPEG, PNG, WebP)",
                file_count="multiple",
                file_types=["image"],
                type="filepath",
            )
            upload_summary = gr.Markdown("*No images uploaded*")
            with gr.Row():
                remove_position = gr.Number(label="Remove image #", value=1, precision=0)
                remove_btn = gr.Button("Remove")
            with gr.Row():
                analyze_btn = gr.Button("Analyze images", variant="primary")
                skip_btn = gr.Button("Generate directly")
            analysis_output = gr.Markdown()

        # --- Style -----------------------------------------------------------
        with gr.Group(visible=False) as sections[WizardStep.STYLE]:
            gr.Markdown("### 2. Choose a style")
            style_input = gr.Radio(label="Style", choices=STYLE_CHOICES, value=None)
            aspect_input = gr.Radio(label="Aspect ratio", choices=ASPECT_RATIO_CHOICES, value="1:1")
            topic_input = gr.Textbox(label="Topic (optional)", placeholder="e.g. coffee shop")
            with gr.Row():
                style_back_btn = gr.Button("Back")
                style_next_btn = gr.Button("Next", variant="primary", interactive=False)

        # --- Concept ---------------------------------------------------------
        with gr.Group(visible=False) as sections[WizardStep.CONCEPT]:
            gr.Markdown("### 3. Concept")
            mode_input = gr.Radio(
                label="Prompt source",
                choices=["generated", "manual"],
                value="generated",
            )
            concept_btn = gr.Button("Generate concept")
            concept_output = gr.Textbox(label="Generated concept", lines=8, interactive=False)
            manual_input = gr.Textbox(label="Your prompt", lines=4, visible=False)
            with gr.Row():
                concept_back_btn = gr.Button("Back")
                generate_btn = gr.Button("Generate", variant="primary", interactive=False)

        # --- Progress --------------------------------------------------------
        with gr.Group(visible=False) as sections[WizardStep.PROGRESS]:
            gr.Markdown("### Generating...\n\n*Talking to the model, this can take a moment.*")

        # --- Results ---------------------------------------------------------
        with gr.Group(visible=False) as sections[WizardStep.RESULTS]:
            gr.Markdown("### 4. Results")
            result_image = gr.HTML()
            result_guidance = gr.Markdown()
            with gr.Row():
                refine_btn = gr.Button("Refine")
                save_btn = gr.Button("Save to gallery", variant="primary")
                gallery_btn = gr.Button("Open gallery")
                results_back_btn = gr.Button("Back")

        # --- Refinement ------------------------------------------------------
        with gr.Group(visible=False) as sections[WizardStep.REFINEMENT]:
            gr.Markdown("### Refine")
            refine_input = gr.Textbox(label="Refined prompt", lines=6)
            with gr.Row():
                refine_back_btn = gr.Button("Back")
                refine_submit_btn = gr.Button("Regenerate", variant="primary")

        # --- Gallery ---------------------------------------------------------
        with gr.Group(visible=False) as sections[WizardStep.GALLERY]:
            gr.Markdown("### Gallery")
            gallery_view = gr.HTML()
            with gr.Row():
                gallery_ids = gr.Dropdown(label="Item", choices=[], value=None)
                gallery_remove_btn = gr.Button("Remove item")
                gallery_clear_btn = gr.Button("Clear gallery", variant="stop")
            with gr.Row():
                gallery_back_btn = gr.Button("Back")
                start_over_btn = gr.Button("Start over")

        step_groups = [sections[step] for step in handlers.STEP_SECTIONS]

        # --- Event wiring ----------------------------------------------------
        upload_files.upload(
            fn=handlers.add_uploads,
            inputs=[upload_files, session],
            outputs=[session, upload_summary],
        )
        remove_btn.click(
            fn=handlers.remove_upload,
            inputs=[remove_position, session],
            outputs=[session, upload_summary],
        )
        analyze_btn.click(
            fn=handlers.analyze_uploads,
            inputs=[session],
            outputs=[session, *step_groups, analysis_output],
        )
        skip_btn.click(fn=handlers.skip_upload, inputs=[session], outputs=[session, *step_groups])

        for component in (style_input, aspect_input, topic_input):
            component.change(
                fn=handlers.update_style,
                inputs=[style_input, aspect_input, topic_input, session],
                outputs=[session, style_next_btn],
            )
        style_next_btn.click(
            fn=handlers.proceed_from_style, inputs=[session], outputs=[session, *step_groups]
        )

        for component in (mode_input, manual_input):
            component.change(
                fn=handlers.update_prompt_source,
                inputs=[mode_input, manual_input, session],
                outputs=[session, manual_input, generate_btn],
            )
        concept_btn.click(
            fn=handlers.generate_concept,
            inputs=[session],
            outputs=[session, concept_output, generate_btn],
        )

        generation_outputs = [session, *step_groups, result_image, result_guidance]
        generate_btn.click(
            fn=handlers.show_progress, inputs=[session], outputs=step_groups
        ).then(fn=handlers.run_generation, inputs=[session], outputs=generation_outputs)

        refine_btn.click(
            fn=handlers.start_refinement,
            inputs=[session],
            outputs=[session, *step_groups, refine_input],
        )
        refine_submit_btn.click(
            fn=handlers.show_progress, inputs=[session], outputs=step_groups
        ).then(
            fn=handlers.submit_refinement,
            inputs=[refine_input, session],
            outputs=[*generation_outputs, mode_input, manual_input, generate_btn],
        )

        gallery_outputs = [session, *step_groups, gallery_view, gallery_ids]
        save_btn.click(fn=handlers.save_result, inputs=[session], outputs=gallery_outputs)
        gallery_btn.click(fn=handlers.open_gallery, inputs=[session], outputs=gallery_outputs)
        gallery_remove_btn.click(
            fn=handlers.remove_gallery_item,
            inputs=[gallery_ids],
            outputs=[gallery_view, gallery_ids],
        )
        gallery_clear_btn.click(fn=handlers.clear_gallery, outputs=[gallery_view, gallery_ids])

        for back_btn in (style_back_btn, concept_back_btn, results_back_btn, refine_back_btn, gallery_back_btn):
            back_btn.click(fn=handlers.go_back, inputs=[session], outputs=[session, *step_groups])

        start_over_btn.click(
            fn=handlers.start_over,
            inputs=[session],
            outputs=[
                session,
                *step_groups,
                upload_files,
                upload_summary,
                analysis_output,
                style_input,
                aspect_input,
                topic_input,
                style_next_btn,
                mode_input,
                manual_input,
                concept_output,
                generate_btn,
                result_image,
                result_guidance,
                refine_input,
            ],
        )

    logger.info("Wizard UI created")
    return app
