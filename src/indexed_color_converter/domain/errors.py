"""変換処理の例外定義。"""

from __future__ import annotations


class IndexedColorError(Exception):
    """indexed_color_converter の例外の基底クラス。"""


class ValidationError(IndexedColorError, ValueError):
    """入力（パレット、ピクセルバッファ、パレットファイル等）が不正。

    ピクセル処理の開始前に送出され、部分的な出力は生成されない。
    """


class PixelBoundsError(IndexedColorError, IndexError):
    """ピクセル座標がバッファの範囲外。

    走査ロジックの不具合でのみ発生するため、握りつぶさずに送出する。
    """

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(
            f"pixel ({x}, {y}) is out of bounds for a {width}x{height} buffer"
        )
        self.x = x
        self.y = y
