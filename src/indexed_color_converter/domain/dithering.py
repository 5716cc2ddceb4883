"""ディザリングアルゴリズム定義。

Protocol + Floyd-Steinberg実装。
domain層のためPure Python（typing依存のみ）。
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from indexed_color_converter.domain.image_model import DEFAULT_DITHER_AMOUNT, ColorMetric
from indexed_color_converter.domain.palette import (
    MetricLike,
    PaletteIndex,
    find_closest_color_index,
    resolve_metric,
)
from indexed_color_converter.domain.pixel_buffer import PixelBuffer

WorkingColor = List[float]
RowBuffer = List[Optional[WorkingColor]]


class DitherAlgorithm(Protocol):
    """ディザリングアルゴリズムのProtocol。"""

    def dither(
        self,
        source: PixelBuffer,
        palette: PaletteIndex,
        amount: float = DEFAULT_DITHER_AMOUNT,
        metric: MetricLike = ColorMetric.RGB,
    ) -> PixelBuffer:
        """画像にディザリングを適用し、新しいバッファを返す。

        Args:
            source: 入力画像（変更しない）
            palette: 事前計算済みパレット
            amount: 誤差拡散量 (0〜1)
            metric: 最近傍色検索の色空間

        Returns:
            全ピクセルがパレット色で、アルファが255のバッファ
        """
        ...


def _sample(source: PixelBuffer, x: int, y: int) -> WorkingColor:
    """入力画像から作業用の浮動小数点色を取り出す。"""
    r, g, b = source.get(x, y).to_tuple()
    return [float(r), float(g), float(b)]


class FloydSteinbergDither:
    """Floyd-Steinbergディザリングの Pure Python 実装。

    エラー拡散パターン:
            [*] [7]
       [3] [5] [1]
       ※ [*]=現在のピクセル、数値=エラー拡散の重み(/16)

    作業色は現在行・次行の2本のローリングバッファで保持し、
    入力画像のピクセルは必要になった時点で遅延的に読み込む。
    画像外への拡散は捨てる（折り返し・誤差クランプなし）。
    """

    def dither(
        self,
        source: PixelBuffer,
        palette: PaletteIndex,
        amount: float = DEFAULT_DITHER_AMOUNT,
        metric: MetricLike = ColorMetric.RGB,
    ) -> PixelBuffer:
        metric = resolve_metric(metric)
        width = source.width
        height = source.height
        result = PixelBuffer(width, height)
        pal_rgb = palette.rgb_values

        current: RowBuffer = [None] * width
        next_row: RowBuffer = [None] * width

        for i in range(height):
            if i > 0:
                current = next_row
                next_row = [None] * width
            has_next = i < height - 1

            for j in range(width):
                if i == 0 and j == 0:
                    color = _sample(source, j, i)
                else:
                    color = current[j]
                    # 前のセルからの拡散で必ず埋まっている
                    assert color is not None

                # 先読み: 拡散先になるピクセルを入力画像から読み込む
                if j < width - 1 and current[j + 1] is None:
                    current[j + 1] = _sample(source, j + 1, i)
                if has_next:
                    if next_row[j] is None:
                        next_row[j] = _sample(source, j, i + 1)
                    if j < width - 1 and next_row[j + 1] is None:
                        next_row[j + 1] = _sample(source, j + 1, i + 1)

                closest = pal_rgb[find_closest_color_index(color, palette, metric)]

                for key in range(3):
                    quant_error = color[key] - closest[key]
                    if j < width - 1:
                        current[j + 1][key] += quant_error * 7 / 16 * amount  # type: ignore[index]
                    if has_next:
                        if j > 0:
                            next_row[j - 1][key] += quant_error * 3 / 16 * amount  # type: ignore[index]
                        next_row[j][key] += quant_error * 5 / 16 * amount  # type: ignore[index]
                        if j < width - 1:
                            next_row[j + 1][key] += quant_error * 1 / 16 * amount  # type: ignore[index]

                result.set(j, i, closest)

        return result
