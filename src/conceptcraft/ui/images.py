"""Image helpers for the wizard: upload decoding and placeholder rendering."""

import base64
import io
import logging
import textwrap

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from conceptcraft.core.errors import UnsupportedImageError

from .models import SUPPORTED_MIME_TYPES, UploadedImage

logger = logging.getLogger(__name__)

# Longest edge of rendered placeholders, in pixels.
PLACEHOLDER_LONG_EDGE = 512

PLACEHOLDER_BACKGROUND = (36, 39, 46)
PLACEHOLDER_FOREGROUND = (229, 231, 235)


def load_uploaded_image(raw: bytes, name: str) -> UploadedImage:
    """Decode an uploaded file into an :class:`UploadedImage`.

    The format is sniffed from the bytes with Pillow; the file name's
    extension is ignored.

    Raises:
        UnsupportedImageError: The bytes are not a JPEG, PNG or WebP image.
    """
    try:
        with Image.open(io.BytesIO(raw)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedImageError(f"{name} is not a readable image") from e

    mime_type = SUPPORTED_MIME_TYPES.get(image_format or "")
    if mime_type is None:
        raise UnsupportedImageError(
            f"{name} is a {image_format} image; please upload a JPEG, PNG or WebP file"
        )

    encoded = base64.b64encode(raw).decode("ascii")
    logger.debug(f"Loaded upload {name} as {mime_type} ({len(raw)} bytes)")
    return UploadedImage(data_url=f"data:{mime_type};base64,{encoded}", name=name, mime_type=mime_type)


def placeholder_size(aspect_ratio: str) -> tuple[int, int]:
    """Pixel size for *aspect_ratio* (``"W:H"``), falling back to square."""
    try:
        width_part, height_part = aspect_ratio.split(":")
        ratio_w, ratio_h = float(width_part), float(height_part)
        if ratio_w <= 0 or ratio_h <= 0:
            raise ValueError(aspect_ratio)
    except (AttributeError, ValueError):
        return PLACEHOLDER_LONG_EDGE, PLACEHOLDER_LONG_EDGE

    if ratio_w >= ratio_h:
        return PLACEHOLDER_LONG_EDGE, round(PLACEHOLDER_LONG_EDGE * ratio_h / ratio_w)
    return round(PLACEHOLDER_LONG_EDGE * ratio_w / ratio_h), PLACEHOLDER_LONG_EDGE


def render_placeholder(aspect_ratio: str, label: str) -> str:
    """Render a labelled placeholder PNG and return it as a data URL.

    Stands in for the generated image: it has the requested proportions and
    shows the style label.
    """
    width, height = placeholder_size(aspect_ratio)
    image = Image.new("RGB", (width, height), PLACEHOLDER_BACKGROUND)
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    lines = textwrap.wrap(label, width=max(10, width // 12)) or [""]
    lines.append(aspect_ratio)
    line_height = 16
    top = (height - line_height * len(lines)) // 2
    for index, line in enumerate(lines):
        text_width = draw.textlength(line, font=font)
        draw.text(
            ((width - text_width) / 2, top + index * line_height),
            line,
            fill=PLACEHOLDER_FOREGROUND,
            font=font,
        )
    draw.rectangle((0, 0, width - 1, height - 1), outline=PLACEHOLDER_FOREGROUND)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
