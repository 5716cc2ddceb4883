"""パレットの読み込みと組み込みパレット定義。

対応形式:
- GIMP パレット (.gpl)
- 1行1色のテキスト (.hex, .txt 等)。"#rrggbb" / "rrggbb" / "0xrrggbb" / "#rgb" / "r,g,b"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from indexed_color_converter.domain.color import RGB
from indexed_color_converter.domain.errors import ValidationError

logger = logging.getLogger(__name__)


# --- 組み込みパレット ---

BUILTIN_PALETTES: dict[str, tuple[RGB, ...]] = {
    "bw": (RGB(0, 0, 0), RGB(255, 255, 255)),
    # 4色 E-Ink (白・黒・赤・黄)
    "eink4": (RGB(255, 255, 255), RGB(0, 0, 0), RGB(200, 0, 0), RGB(255, 255, 0)),
    "rgb": (
        RGB(0, 0, 0), RGB(255, 0, 0), RGB(0, 255, 0), RGB(0, 0, 255),
        RGB(255, 255, 0), RGB(0, 255, 255), RGB(255, 0, 255), RGB(255, 255, 255),
    ),
    # CGA パレット1 (高輝度)
    "cga": (RGB(0, 0, 0), RGB(85, 255, 255), RGB(255, 85, 255), RGB(255, 255, 255)),
    "gameboy": (RGB(15, 56, 15), RGB(48, 98, 48), RGB(139, 172, 15), RGB(155, 188, 15)),
}


def get_builtin_palette(name: str) -> tuple[RGB, ...]:
    """名前から組み込みパレットを取得。"""
    try:
        return BUILTIN_PALETTES[name.lower()]
    except KeyError:
        known = ", ".join(sorted(BUILTIN_PALETTES))
        raise ValidationError(f"unknown palette {name!r} (known: {known})") from None


def _parse_hex(raw: str, text: str) -> RGB:
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) != 6:
        raise ValidationError(f"invalid hex color {text!r}")
    try:
        return RGB(int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16))
    except ValueError:
        raise ValidationError(f"invalid hex color {text!r}") from None


def parse_color(text: str) -> RGB:
    """色の文字列表現を RGB に変換。

    Args:
        text: "#ff0000", "ff0000", "0xff0000", "#f00", "255,0,0" のいずれか

    Returns:
        RGB色
    """
    raw = text.strip()
    if "," in raw:
        parts = [p.strip() for p in raw.split(",")]
        if len(parts) != 3:
            raise ValidationError(f"invalid color {text!r}: expected r,g,b")
        try:
            values = [int(p) for p in parts]
        except ValueError:
            raise ValidationError(f"invalid color {text!r}: channels must be integers") from None
        if not all(0 <= v <= 255 for v in values):
            raise ValidationError(f"invalid color {text!r}: channels must be in 0-255")
        return RGB(*values)

    if raw.lower().startswith("0x"):
        raw = raw[2:]
    elif raw.startswith("#"):
        raw = raw[1:]
    return _parse_hex(raw, text)


def parse_palette(texts: Iterable[str]) -> list[RGB]:
    """色文字列のリストをパレットに変換。"""
    return [parse_color(t) for t in texts]


def _parse_gpl(text: str) -> list[RGB]:
    """GIMP パレット形式を解析。"""
    lines = text.splitlines()
    if not lines or lines[0].strip() != "GIMP Palette":
        raise ValidationError("not a GIMP palette: missing 'GIMP Palette' header")

    colors: list[RGB] = []
    for lineno, line in enumerate(lines[1:], start=2):
        line = line.strip()
        if not line or line.startswith("#") or ":" in line.split()[0]:
            continue
        parts = line.split()
        if len(parts) < 3 or not all(p.isdigit() for p in parts[:3]):
            raise ValidationError(f"line {lineno}: expected 'R G B [name]', got {line!r}")
        r, g, b = (int(p) for p in parts[:3])
        if not all(0 <= v <= 255 for v in (r, g, b)):
            raise ValidationError(f"line {lineno}: channels must be in 0-255")
        colors.append(RGB(r, g, b))
    return colors


def _parse_lines(text: str) -> list[RGB]:
    """1行1色のテキストを解析。空行と ";" / "//" コメントは無視。"""
    colors: list[RGB] = []
    for line in text.splitlines():
        line = line.split(";", 1)[0].split("//", 1)[0].strip()
        if line:
            colors.append(parse_color(line))
    return colors


def load_palette(path: str | Path) -> list[RGB]:
    """パレットファイルを読み込む。

    Args:
        path: .gpl または 1行1色のテキストファイル

    Returns:
        ファイル内の順序どおりの色リスト
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".gpl":
        colors = _parse_gpl(text)
    else:
        colors = _parse_lines(text)

    if not colors:
        raise ValidationError(f"palette file {path} contains no colors")
    logger.debug("Loaded %d colors from %s", len(colors), path)
    return colors
