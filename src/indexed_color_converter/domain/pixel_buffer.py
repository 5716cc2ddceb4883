"""RGBAピクセルバッファ。

行優先・RGBAインターリーブのバイト列に対する範囲チェック付きアクセサ。
"""

from __future__ import annotations

from typing import Optional, Union

from indexed_color_converter.domain.color import RGB, ColorLike, as_triple
from indexed_color_converter.domain.errors import PixelBoundsError, ValidationError

CHANNELS = 4
OPAQUE = 255


class PixelBuffer:
    """width × height の RGBA 画像。data 長は常に width * height * 4。"""

    def __init__(
        self,
        width: int,
        height: int,
        data: Optional[Union[bytes, bytearray, memoryview]] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValidationError(
                f"buffer dimensions must be positive, got {width}x{height}"
            )
        expected = width * height * CHANNELS
        if data is None:
            buf = bytearray(expected)
        else:
            buf = bytearray(data)
            if len(buf) != expected:
                raise ValidationError(
                    f"buffer of {width}x{height} needs {expected} bytes, got {len(buf)}"
                )
        self._width = width
        self._height = height
        self._data = buf

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def data(self) -> bytes:
        """バイト列のスナップショット（変更不可）。"""
        return bytes(self._data)

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise PixelBoundsError(x, y, self._width, self._height)
        return (y * self._width + x) * CHANNELS

    def get(self, x: int, y: int) -> RGB:
        """(x, y) のRGB値を取得。"""
        i = self._offset(x, y)
        d = self._data
        return RGB(d[i], d[i + 1], d[i + 2])

    def get_alpha(self, x: int, y: int) -> int:
        return self._data[self._offset(x, y) + 3]

    def set(self, x: int, y: int, rgb: ColorLike) -> None:
        """(x, y) にRGB値を書き込む。アルファは常に不透明(255)になる。"""
        i = self._offset(x, y)
        r, g, b = as_triple(rgb)
        d = self._data
        d[i] = r
        d[i + 1] = g
        d[i + 2] = b
        d[i + 3] = OPAQUE

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self._width, self._height, self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and self._data == other._data

    def __repr__(self) -> str:
        return f"PixelBuffer({self._width}x{self._height})"
