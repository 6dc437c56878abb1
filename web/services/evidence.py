"""
Evidence image handling.

Decodes the inline data URL attached to an evaluation, inspects its pixel
dimensions with Pillow and fits it into the report's image box.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from docx.image.exceptions import InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError
from docx.image.image import Image as DocxImage
from PIL import Image

from web.exceptions import DecodeError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 600
DEFAULT_MAX_HEIGHT = 450

# Declared subtypes the renderer tags as png
COERCED_TO_PNG = frozenset({"jpeg", "webp"})

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*),(?P<payload>.*)$", re.DOTALL)


@dataclass(frozen=True)
class DecodedImage:
    """Raw evidence bytes plus the media subtype declared in the data URL."""
    data: bytes
    subtype: Optional[str]

    @property
    def image_type(self) -> Optional[str]:
        """Declared subtype after the png fallback is applied."""
        if self.subtype in COERCED_TO_PNG:
            return "png"
        return self.subtype


@dataclass(frozen=True)
class FittedImage:
    """Embeddable image bytes and the size they are drawn at."""
    data: bytes
    width: int
    height: int
    original_width: int
    original_height: int
    image_type: Optional[str] = None

    @property
    def caption(self) -> str:
        return f"Imagen de evidencia ({self.width}x{self.height}px)"


def _declared_subtype(mime: str) -> Optional[str]:
    if "/" not in mime:
        return None
    subtype = mime.split("/", 1)[1].strip().lower()
    return subtype or None


def decode_data_url(payload: Optional[str]) -> Optional[DecodedImage]:
    """
    Decode an inline image payload.

    Args:
        payload: ``data:image/<subtype>;base64,<data>`` or a bare base64 string.
            ``None`` or an empty string means no image is attached.

    Returns:
        DecodedImage, or None when there is no image.

    Raises:
        DecodeError: If the payload is not valid base64.
    """
    if not payload:
        return None

    subtype = None
    body = payload
    match = _DATA_URL_RE.match(payload.strip())
    if match:
        params = [p.strip().lower() for p in match.group("params").split(";") if p.strip()]
        if "base64" not in params:
            raise DecodeError("la imagen de evidencia no está codificada en base64")
        subtype = _declared_subtype(match.group("mime"))
        body = match.group("payload")
    elif "," in payload:
        body = payload.split(",", 1)[1]

    body = "".join(body.split())
    if not body:
        raise DecodeError("la imagen de evidencia está vacía")

    try:
        data = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"la imagen de evidencia no es base64 válido ({exc})") from exc

    return DecodedImage(data=data, subtype=subtype)


def read_dimensions(data: bytes) -> Tuple[int, int]:
    """Pixel width and height of an encoded image."""
    with Image.open(io.BytesIO(data)) as img:
        return img.size


def fit_dimensions(
    width: float,
    height: float,
    max_width: float = DEFAULT_MAX_WIDTH,
    max_height: float = DEFAULT_MAX_HEIGHT,
) -> Tuple[float, float]:
    """
    Scale ``width`` x ``height`` into the box, preserving aspect ratio.

    Width is capped first; the height is then capped against the already
    scaled value. Images that already fit are returned unchanged.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    final_width, final_height = float(width), float(height)

    if final_width > max_width:
        ratio = max_width / final_width
        final_width = float(max_width)
        final_height = final_height * ratio

    if final_height > max_height:
        ratio = max_height / final_height
        final_height = float(max_height)
        final_width = final_width * ratio

    return final_width, final_height


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def _docx_can_parse(data: bytes) -> bool:
    """Whether python-docx recognizes the image headers (it is stricter than Pillow)."""
    try:
        DocxImage.from_blob(data)
    except (UnrecognizedImageError, InvalidImageStreamError, UnexpectedEndOfFileError):
        return False
    return True


def _embeddable_bytes(data: bytes) -> Tuple[bytes, bool]:
    """Return bytes python-docx can embed and whether they were converted to PNG."""
    if _docx_can_parse(data):
        return data, False
    with Image.open(io.BytesIO(data)) as img:
        logger.info(f"Converting {img.format} evidence image to PNG")
        if img.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
            img = img.convert("RGBA")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue(), True


def fit_image(
    image: DecodedImage,
    max_width: float = DEFAULT_MAX_WIDTH,
    max_height: float = DEFAULT_MAX_HEIGHT,
) -> FittedImage:
    """
    Inspect a decoded image and compute the size it is drawn at.

    The fitted image keeps the declared type tag unless its bytes had to be
    converted, in which case it is tagged ``png``.

    Raises:
        OSError: If Pillow cannot identify the image.
        ValueError: If the image reports non-positive dimensions.
    """
    original_width, original_height = read_dimensions(image.data)
    final_width, final_height = fit_dimensions(original_width, original_height, max_width, max_height)

    logger.debug(
        f"Evidence dimensions: {original_width}x{original_height} -> "
        f"{round_half_up(final_width)}x{round_half_up(final_height)}"
    )

    data, converted = _embeddable_bytes(image.data)
    image_type = "png" if converted else image.image_type
    logger.debug(f"Evidence declared as {image.subtype!r}, embedded as {image_type!r}")

    return FittedImage(
        data=data,
        width=round_half_up(final_width),
        height=round_half_up(final_height),
        original_width=original_width,
        original_height=original_height,
        image_type=image_type,
    )
