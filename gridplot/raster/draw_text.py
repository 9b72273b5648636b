from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont


DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 11.0
SANS_FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "liberation sans",
    "arial",
    "helvetica",
    "freesans",
)
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path("C:/Windows/Fonts"),
)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def text_size(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    rotate_deg: int = 0,
    bold: bool = False,
) -> tuple[int, int]:
    font = _load_font(font_family, _size_key(font_size_px))
    ascent, descent = _line_metrics(font)
    h = max(1, ascent + descent)
    if not text:
        w = 0
    else:
        left, _, right, _ = font.getbbox(text)
        w = max(1, int(right - left)) + (_embolden_px(bold) - 1)
    if _normalize_quarter_turns(rotate_deg) % 2 == 1:
        return (h, w)
    return (w, h)


def font_ascent(*, font_family: str = DEFAULT_FONT_FAMILY, font_size_px: float = DEFAULT_FONT_SIZE_PX) -> int:
    ascent, _ = _line_metrics(_load_font(font_family, _size_key(font_size_px)))
    return ascent


def text_mask(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    rotate_deg: int = 0,
    bold: bool = False,
) -> np.ndarray:
    """Anti-aliased uint8 coverage for ``text``; its shape matches ``text_size`` (rows, cols swapped)."""
    font = _load_font(font_family, _size_key(font_size_px))
    mask = _render_mask(text, font)
    embolden_px = _embolden_px(bold)
    if embolden_px > 1:
        mask = _embolden(mask, embolden_px)
    return _rotate_mask(mask, rotate_deg=rotate_deg)


def _embolden_px(bold: bool) -> int:
    return 2 if bold else 1


def _size_key(font_size_px: float) -> int:
    return max(1, int(round(font_size_px)))


def _line_metrics(font: Font) -> tuple[int, int]:
    getmetrics = getattr(font, "getmetrics", None)
    if getmetrics is not None:
        ascent, descent = getmetrics()
        return int(ascent), int(descent)
    _, _, _, bottom = font.getbbox("Ag")
    return int(bottom), 0


def _embolden(mask: np.ndarray, embolden_px: int) -> np.ndarray:
    out = np.zeros((mask.shape[0], mask.shape[1] + embolden_px - 1), dtype=np.uint8)
    for shift in range(embolden_px):
        view = out[:, shift : shift + mask.shape[1]]
        np.maximum(view, mask, out=view)
    return out


@lru_cache(maxsize=256)
def _render_mask(text: str, font: Font) -> np.ndarray:
    ascent, descent = _line_metrics(font)
    height = max(1, ascent + descent)
    if not text:
        return np.zeros((height, 1), dtype=np.uint8)
    left, _, right, _ = font.getbbox(text)
    width = max(1, int(right - left))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, 0), text, fill=255, font=font)
    mask = np.asarray(image, dtype=np.uint8)
    mask.setflags(write=False)
    return mask


@lru_cache(maxsize=64)
def _load_font(font_family: str, size: int) -> Font:
    font_path = _resolve_font_path(font_family)
    if font_path is None:
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(str(font_path), size=size)
    except OSError:
        return ImageFont.load_default(size=size)


@lru_cache(maxsize=16)
def _resolve_font_path(font_family: str) -> Path | None:
    wanted = font_family.strip().lower() if font_family.strip() else DEFAULT_FONT_FAMILY.lower()
    patterns = (wanted,) + SANS_FONT_FALLBACK_PATTERNS

    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))
    candidates.sort()

    for pattern in patterns:
        p = pattern.replace(" ", "")
        # Exact family file first so "dejavusans" does not pick DejaVuSansMono-Bold.
        for path in candidates:
            if path.stem.lower().replace(" ", "").replace("-", "") in (p, p + "regular"):
                return path
        for path in candidates:
            if p in path.name.lower().replace(" ", ""):
                return path
    return None


def _normalize_quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4


def _rotate_mask(mask: np.ndarray, *, rotate_deg: int) -> np.ndarray:
    turns = _normalize_quarter_turns(rotate_deg)
    if turns == 0:
        return mask
    return np.rot90(mask, k=turns)
