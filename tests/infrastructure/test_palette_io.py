"""palette_io.py のテスト。"""

from pathlib import Path

import pytest

from indexed_color_converter.domain.color import RGB
from indexed_color_converter.domain.errors import ValidationError
from indexed_color_converter.infrastructure.palette_io import (
    BUILTIN_PALETTES,
    get_builtin_palette,
    load_palette,
    parse_color,
    parse_palette,
)


class TestParseColor:
    @pytest.mark.parametrize(
        "text",
        ["#ff8000", "ff8000", "0xFF8000", "  #FF8000 ", "255,128,0", "255, 128, 0"],
    )
    def test_formats(self, text: str) -> None:
        assert parse_color(text) == RGB(255, 128, 0)

    def test_short_hex(self) -> None:
        assert parse_color("#f80") == RGB(255, 136, 0)

    @pytest.mark.parametrize(
        "text",
        ["", "#ff80", "#gg0000", "1,2", "1,2,3,4", "256,0,0", "a,b,c", "-1,0,0"],
    )
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValidationError):
            parse_color(text)

    def test_parse_palette_keeps_order(self) -> None:
        assert parse_palette(["#000000", "255,255,255", "#000000"]) == [
            RGB(0, 0, 0), RGB(255, 255, 255), RGB(0, 0, 0),
        ]


class TestBuiltinPalettes:
    def test_known_palette(self) -> None:
        assert get_builtin_palette("bw") == (RGB(0, 0, 0), RGB(255, 255, 255))
        assert get_builtin_palette("EINK4") == BUILTIN_PALETTES["eink4"]

    def test_all_builtins_valid(self) -> None:
        for palette in BUILTIN_PALETTES.values():
            assert len(palette) >= 2
            for color in palette:
                assert all(0 <= c <= 255 for c in color.to_tuple())

    def test_unknown_palette(self) -> None:
        with pytest.raises(ValidationError):
            get_builtin_palette("nope")


class TestLoadPalette:
    def test_gpl(self, tmp_path: Path) -> None:
        path = tmp_path / "test.gpl"
        path.write_text(
            "GIMP Palette\n"
            "Name: Test\n"
            "Columns: 2\n"
            "#\n"
            "  0   0   0\tBlack\n"
            "255 255 255\tWhite\n"
            "200   0   0\n",
            encoding="utf-8",
        )
        assert load_palette(path) == [RGB(0, 0, 0), RGB(255, 255, 255), RGB(200, 0, 0)]

    def test_gpl_without_header(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.gpl"
        path.write_text("0 0 0\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_palette(path)

    def test_gpl_bad_line(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.gpl"
        path.write_text("GIMP Palette\n0 0 zero\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_palette(path)

    def test_hex_lines_with_comments(self, tmp_path: Path) -> None:
        path = tmp_path / "palette.hex"
        path.write_text(
            "; exported palette\n"
            "ff0000\n"
            "\n"
            "#00ff00 ; green\n"
            "0,0,255 // blue\n",
            encoding="utf-8",
        )
        assert load_palette(path) == [RGB(255, 0, 0), RGB(0, 255, 0), RGB(0, 0, 255)]

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.txt"
        path.write_text("; nothing\n\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_palette(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            load_palette(tmp_path / "missing.txt")
