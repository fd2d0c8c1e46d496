"""Pure OCR transformation helpers for receipt parsing."""

import io
from collections.abc import Iterable
from typing import Any

from kassa.domain.receipt import WordBox

MAX_IMAGE_DIMENSION = 3000  # Resize if either dimension exceeds this
OCR_IMAGE_PADDING = 50  # White padding around image to prevent edge truncation
MIN_DETECTION_CONFIDENCE = 0.5


def resize_image_bytes(
    image_bytes: bytes, max_dimension: int = MAX_IMAGE_DIMENSION, padding: int = OCR_IMAGE_PADDING
) -> bytes:
    """
    Resize image bytes if it exceeds max_dimension on either side.

    Also adds white padding around the image to prevent OCR edge truncation.

    Args:
        image_bytes: Image data as bytes
        max_dimension: Maximum allowed dimension (width or height)
        padding: White padding to add around image (pixels)

    Returns:
        Image bytes (JPEG format), resized if necessary, with padding added
    """
    from PIL import Image, ImageOps

    img = Image.open(io.BytesIO(image_bytes))

    # Telegram photos keep EXIF orientation; normalize before OCR
    img = ImageOps.exif_transpose(img)

    width, height = img.size
    if width > max_dimension or height > max_dimension:
        scale = max_dimension / max(width, height)
        img = img.resize((int(width * scale), int(height * scale)), Image.Resampling.LANCZOS)

    if padding > 0:
        img = ImageOps.expand(img, border=padding, fill="white")

    buffer = io.BytesIO()
    img.convert("RGB").save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def _full_text_box(words: list[WordBox]) -> WordBox:
    return WordBox(text="\n".join(w.text for w in words), vertices=())


def paddle_result_to_word_boxes(
    raw_result: dict[str, Any],
    padding: int = OCR_IMAGE_PADDING,
    min_confidence: float = MIN_DETECTION_CONFIDENCE,
) -> list[WordBox]:
    """
    Convert a PaddleOCR service response into oracle word boxes.

    Coordinates are shifted back by the padding added in resize_image_bytes.
    Element 0 of the result is the full-text blob, matching the Vision API.
    """
    words: list[WordBox] = []
    for detection in raw_result.get("detections", []):
        bbox, (text, confidence) = detection
        if confidence < min_confidence or not str(text).strip():
            continue
        vertices = tuple((float(p[0]) - padding, float(p[1]) - padding) for p in bbox)
        words.append(WordBox(text=str(text).strip(), vertices=vertices))

    if not words:
        return []
    return [_full_text_box(words), *words]


def vision_annotations_to_word_boxes(annotations: Iterable[Any]) -> list[WordBox]:
    """
    Convert Google Vision ``text_annotations`` into word boxes.

    Vision omits zero coordinates from its vertices, so missing x/y read as 0.
    """
    boxes: list[WordBox] = []
    for annotation in annotations:
        vertices = tuple(
            (float(getattr(v, "x", 0) or 0), float(getattr(v, "y", 0) or 0))
            for v in annotation.bounding_poly.vertices
        )
        boxes.append(WordBox(text=annotation.description, vertices=vertices))
    return boxes
