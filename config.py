# Extraction settings, read once from env and handed to the engine.

import logging
import os
from dataclasses import dataclass
from typing import Optional

log = logging.getLogger(__name__)

# remarks box on a 300 dpi render of page 1 (x, y, width, height)
DEFAULT_REMARKS_REGION = (1221, 2765, 1200, 370)
DEFAULT_SOURCE_DPI = 300
DEFAULT_TARGET_DPI = 72


def _env_flag(name, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name, default):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring %s=%r, using %s", name, raw, default)
        return default


def _env_region(name, default):
    # "x,y,w,h" in source-dpi pixels
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        parts = tuple(int(p.strip()) for p in raw.split(","))
    except ValueError:
        parts = ()
    if len(parts) != 4 or parts[2] <= 0 or parts[3] <= 0:
        log.warning("Ignoring %s=%r, using %s", name, raw, default)
        return default
    return parts


@dataclass(frozen=True)
class ExtractionConfig:
    text_remarks_enabled: bool = True
    ocr_enabled: bool = False
    ocr_debug_image: Optional[str] = None
    remarks_region: tuple = DEFAULT_REMARKS_REGION
    source_dpi: int = DEFAULT_SOURCE_DPI
    target_dpi: int = DEFAULT_TARGET_DPI
    tesseract_cmd: Optional[str] = None
    output_dir: str = "output"

    @classmethod
    def from_env(cls):
        return cls(
            text_remarks_enabled=_env_flag("REMARKS_TEXT_ENABLED", True),
            ocr_enabled=_env_flag("REMARKS_OCR_ENABLED", False),
            ocr_debug_image=os.environ.get("REMARKS_OCR_DEBUG_IMAGE") or None,
            remarks_region=_env_region("REMARKS_REGION", DEFAULT_REMARKS_REGION),
            source_dpi=_env_int("REMARKS_SOURCE_DPI", DEFAULT_SOURCE_DPI) or DEFAULT_SOURCE_DPI,
            target_dpi=_env_int("REMARKS_TARGET_DPI", DEFAULT_TARGET_DPI) or DEFAULT_TARGET_DPI,
            tesseract_cmd=os.environ.get("TESSERACT_CMD") or None,
            output_dir=os.environ.get("EXPORT_OUTPUT_DIR", "output"),
        )

    def remarks_bbox(self):
        # pixel rectangle -> (x0, top, x1, bottom) in PDF points
        x, y, w, h = self.remarks_region
        scale = self.target_dpi / self.source_dpi
        return (x * scale, y * scale, (x + w) * scale, (y + h) * scale)
