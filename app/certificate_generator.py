"""Certificate Generator Module.

Renders a single landscape PDF page: the background image stretched to the
page, with the participant's name drawn in bold on top.

Key features:
- Background bytes fetched once and reused across requests
- Horizontal centering from the font's measured text width
- Any failure is logged and reported as ``None`` instead of raised
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable, Optional, Tuple

import requests
from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], bytes]

DEFAULT_FONT_NAME = "Helvetica-Bold"
CUSTOM_FONT_NAME = "CertificateName-Bold"


def _http_fetch(url: str, timeout: float = 10.0) -> bytes:
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    if not resp.content:
        raise ValueError(f"Empty response body from {url}")
    return resp.content


class BackgroundCache:
    """Fetch-once holder for the certificate background image bytes."""

    def __init__(self, url: str, timeout: float = 10.0, fetch: Optional[Fetcher] = None):
        self.url = url
        self.timeout = timeout
        self._fetch = fetch or (lambda u: _http_fetch(u, timeout=self.timeout))
        self._bytes: Optional[bytes] = None

    @property
    def cached(self) -> bool:
        return self._bytes is not None

    def prefetch(self) -> bool:
        """Warm the cache. Failures are logged so a later ``get()`` can retry."""
        try:
            self.get()
        except Exception:
            logger.exception("Failed to preload certificate background from %s", self.url)
            return False
        return True

    def get(self) -> bytes:
        if self._bytes is not None:
            return self._bytes

        data = self._fetch(self.url)
        # prefetch and an on-demand fetch may both land here; either copy is fine
        self._bytes = data
        logger.info("Cached certificate background (%d bytes) from %s", len(data), self.url)
        return data

    def clear(self) -> None:
        self._bytes = None


def certificate_filename(name: str) -> str:
    return f"Certificate-{name}.pdf"


class CertificateGenerator:
    """Generate personalized certificates on top of a background image."""

    PAGE_WIDTH = 842
    PAGE_HEIGHT = 595
    NAME_FONT_SIZE = 28
    NAME_Y_OFFSET = 10

    def __init__(self, background: BackgroundCache, font_path: Optional[str] = None):
        self.background = background
        self._project_root = Path(__file__).resolve().parents[1]
        self.font_path = self._resolve_font_path(font_path)

    def _resolve_font_path(self, font_path: Optional[str]) -> Optional[str]:
        """Resolve an optional TTF path, relative paths against the project root."""
        if not font_path:
            return None
        p = Path(font_path.replace("\\", "/"))
        if not p.is_absolute():
            p = self._project_root / p
        return str(p)

    def _load_font(self) -> str:
        """Return the registered font name used for the participant name."""
        if not self.font_path:
            return DEFAULT_FONT_NAME

        if CUSTOM_FONT_NAME not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(CUSTOM_FONT_NAME, self.font_path))
        return CUSTOM_FONT_NAME

    @staticmethod
    def _prepare_image(image_bytes: bytes) -> Image.Image:
        with Image.open(io.BytesIO(image_bytes)) as img_in:
            img = img_in.convert("RGBA")

        # Flatten transparency onto white; PDF backgrounds are drawn opaque
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background

    def name_position(self, name: str, font_name: str = DEFAULT_FONT_NAME) -> Tuple[float, float]:
        """Baseline origin that centers ``name`` horizontally near mid-height."""
        text_width = pdfmetrics.stringWidth(name, font_name, self.NAME_FONT_SIZE)
        x = (self.PAGE_WIDTH - text_width) / 2
        y = self.PAGE_HEIGHT / 2 + self.NAME_Y_OFFSET
        return x, y

    def render(self, participant_name: str, image_bytes: bytes) -> bytes:
        """Draw the certificate page and return the serialized PDF.

        Raises whatever the image decoder, font loader or PDF writer raise.
        """
        name = (participant_name or "").strip()
        if not name:
            raise ValueError("Participant name is empty")

        image = self._prepare_image(image_bytes)
        font_name = self._load_font()

        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=(self.PAGE_WIDTH, self.PAGE_HEIGHT))
        c.setTitle(f"Certificate - {name}")

        c.drawImage(ImageReader(image), 0, 0, width=self.PAGE_WIDTH, height=self.PAGE_HEIGHT)

        x, y = self.name_position(name, font_name)
        c.setFont(font_name, self.NAME_FONT_SIZE)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(x, y, name)

        c.showPage()
        c.save()
        return buffer.getvalue()

    def generate(self, participant_name: str) -> Optional[bytes]:
        """Produce the certificate PDF, or ``None`` if anything goes wrong."""
        try:
            image_bytes = self.background.get()
            pdf_bytes = self.render(participant_name, image_bytes)
        except Exception:
            logger.exception("PDF generation failed for %r", participant_name)
            return None

        logger.info("Generated certificate for %r (%d bytes)", participant_name, len(pdf_bytes))
        return pdf_bytes
