"""OCR oracle adapters: Google Cloud Vision and a PaddleOCR HTTP service."""

from __future__ import annotations

import json
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

import httpx

from kassa.domain.errors import OracleFailure
from kassa.domain.receipt import WordBox
from kassa.receipt.ocr_helpers import (
    OCR_IMAGE_PADDING,
    paddle_result_to_word_boxes,
    resize_image_bytes,
    vision_annotations_to_word_boxes,
)
from kassa.runtime.logging import get_logger
from kassa.runtime.paths import get_paths

logger = get_logger(__name__)

DEFAULT_OCR_SERVICE_URL = "http://localhost:8001"
OCR_TIMEOUT_SECONDS = 60.0


class OcrOracle(Protocol):
    """detect_text returns word boxes with the full-text blob as element 0."""

    def detect_text(self, image_bytes: bytes) -> list[WordBox]: ...


class HttpOcrOracle:
    """Client for a PaddleOCR service exposing POST {url}/ocr."""

    def __init__(self, service_url: str | None = None, timeout: float = OCR_TIMEOUT_SECONDS) -> None:
        self.service_url = (service_url or os.environ.get("OCR_SERVICE_URL") or DEFAULT_OCR_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    def detect_text(self, image_bytes: bytes) -> list[WordBox]:
        logger.info("Sending receipt to OCR service at %s...", self.service_url)
        try:
            resized_bytes = resize_image_bytes(image_bytes, padding=OCR_IMAGE_PADDING)
        except OSError as e:
            # PIL.UnidentifiedImageError is an OSError
            raise OracleFailure(f"Unreadable image: {e}") from e

        try:
            start_time = time.time()
            response = httpx.post(
                f"{self.service_url}/ocr",
                files={"file": ("receipt.jpg", resized_bytes, "image/jpeg")},
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            logger.error("Failed to connect to OCR service: %s", e)
            raise OracleFailure(f"Failed to connect to OCR service: {e}") from e

        logger.info("OCR service returned in %.2f seconds", time.time() - start_time)
        if response.status_code != 200:
            logger.error("OCR service error: %s", response.status_code)
            raise OracleFailure(f"OCR service error: {response.status_code}")

        raw_result = response.json()
        save_ocr_json(raw_result)
        return paddle_result_to_word_boxes(raw_result, padding=OCR_IMAGE_PADDING)


class VisionOcrOracle:
    """Google Cloud Vision text_detection; the client is created on first use."""

    def __init__(self, credentials_path: str | None = None) -> None:
        self.credentials_path = credentials_path or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            from google.cloud import vision
            from google.oauth2 import service_account

            if self.credentials_path:
                credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
                self._client = vision.ImageAnnotatorClient(credentials=credentials)
            else:
                self._client = vision.ImageAnnotatorClient()
            logger.info("Google Cloud Vision client initialized")
        return self._client

    def detect_text(self, image_bytes: bytes) -> list[WordBox]:
        from google.api_core import exceptions as google_exceptions
        from google.auth import exceptions as auth_exceptions
        from google.cloud import vision

        try:
            client = self._get_client()
        except (auth_exceptions.GoogleAuthError, OSError) as e:
            logger.error("Vision client unavailable: %s", e)
            raise OracleFailure(f"Vision client unavailable: {e}") from e
        try:
            response = client.text_detection(image=vision.Image(content=image_bytes))
        except google_exceptions.GoogleAPIError as e:
            logger.error("Vision API request failed: %s", e)
            raise OracleFailure(f"Vision API request failed: {e}") from e

        if response.error.message:
            logger.error("Vision API error: %s", response.error.message)
            raise OracleFailure(f"Vision API error: {response.error.message}")

        return vision_annotations_to_word_boxes(response.text_annotations)


def create_ocr_oracle(backend: str | None = None, service_url: str | None = None) -> OcrOracle:
    """Build the oracle named by ``backend`` or KASSA_OCR_BACKEND (vision | http)."""
    backend = (backend or os.environ.get("KASSA_OCR_BACKEND") or "vision").lower()
    if backend == "vision":
        return VisionOcrOracle()
    if backend == "http":
        return HttpOcrOracle(service_url)
    raise ValueError(f"Unknown OCR backend: {backend}")


def save_ocr_json(ocr_result: dict[str, Any], stem: str | None = None) -> Path:
    """Save OCR result JSON for debugging."""
    ocr_json_dir = get_paths().receipts_ocr_json
    ocr_json_dir.mkdir(parents=True, exist_ok=True)
    stem = stem or datetime.now().strftime("receipt_%Y%m%d_%H%M%S_%f")
    ocr_json_path = ocr_json_dir / f"{stem}.json"
    ocr_json_path.write_text(json.dumps(ocr_result, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.debug("OCR JSON saved to: %s", ocr_json_path)
    return ocr_json_path
