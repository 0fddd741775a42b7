"""Text recognition on stored screenshots using Tesseract."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import pytesseract
from PIL import Image, UnidentifiedImageError

from .errors import OcrError


class OcrEngine(Protocol):
    def recognize(self, image_path: Path) -> str: ...


class TesseractOcr:
    """Runs ``tesseract`` through pytesseract.

    ``languages`` uses Tesseract's ``+`` syntax, e.g. ``"jpn+eng"``.
    """

    def __init__(self, languages: str = "eng") -> None:
        self.languages = languages

    def recognize(self, image_path: Path) -> str:
        image_path = Path(image_path)
        if not image_path.exists():
            raise OcrError(f"Image not found: {image_path}")
        try:
            with Image.open(image_path) as image:
                text = pytesseract.image_to_string(image, lang=self.languages)
        except (OSError, UnidentifiedImageError, pytesseract.TesseractError) as exc:
            raise OcrError(f"OCR failed for {image_path}: {exc}") from exc
        return text.strip()
