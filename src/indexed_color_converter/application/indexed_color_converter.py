"""インデックスカラー変換ユースケース。

パレット構築→ディザリングの一連処理。
DI でディザリングアルゴリズムを注入可能。進捗コールバック対応。
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import numpy as np

from indexed_color_converter.domain.color import ColorLike
from indexed_color_converter.domain.dithering import DitherAlgorithm, FloydSteinbergDither
from indexed_color_converter.domain.image_model import ColorMetric, ConversionSettings, ImageSpec
from indexed_color_converter.domain.palette import MetricLike, PaletteIndex, resolve_metric
from indexed_color_converter.domain.pixel_buffer import PixelBuffer
from indexed_color_converter.infrastructure.image_io import (
    buffer_from_array,
    buffer_to_array,
    check_output_format,
    load_image,
    resize_image,
    save_image,
)
from indexed_color_converter.infrastructure.palette_lookup import (
    lab_for_colors,
    nearest_palette_indices,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]
"""進捗コールバック: (stage_name, progress_0_to_1)"""

PaletteLike = Union[PaletteIndex, Iterable[ColorLike]]


def build_palette_index(palette: PaletteLike) -> PaletteIndex:
    """パレットを PaletteIndex に変換。構築済みならそのまま返す。"""
    if isinstance(palette, PaletteIndex):
        return palette
    return PaletteIndex(palette)


class IndexedColorConverter:
    """画像をパレット色のみのインデックスカラー画像に変換する。"""

    def __init__(
        self,
        algorithm: Optional[DitherAlgorithm] = None,
        settings: Optional[ConversionSettings] = None,
    ) -> None:
        self._algorithm = algorithm or FloydSteinbergDither()
        self._settings = settings or ConversionSettings()

    @property
    def settings(self) -> ConversionSettings:
        return self._settings

    @settings.setter
    def settings(self, value: ConversionSettings) -> None:
        self._settings = value

    def convert(
        self,
        image: PixelBuffer,
        palette: PaletteLike,
        dither_amount: Optional[float] = None,
        metric: Optional[MetricLike] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> PixelBuffer:
        """画像をインデックスカラーに変換。入力画像は変更しない。

        Args:
            image: 入力画像
            palette: カラーパレット（色のシーケンスまたは構築済み PaletteIndex）
            dither_amount: Floyd-Steinberg の誤差拡散量。省略時は settings の値 (0.75)
            metric: 最近傍色検索の色空間。省略時は settings の値 (RGB)
            progress: 進捗コールバック

        Returns:
            入力と同サイズ・全ピクセルがパレット色・アルファ255の新しい画像
        """
        amount = self._settings.dither_amount if dither_amount is None else dither_amount
        color_metric = resolve_metric(self._settings.metric if metric is None else metric)

        if progress:
            progress("パレット構築", 0.0)

        # ピクセル処理の前にパレットを検証する
        index = build_palette_index(palette)

        if progress:
            progress("ディザリング", 0.1)

        logger.info(
            "Converting %dx%d image to %d colors (dither=%.3g, metric=%s)",
            image.width, image.height, len(index), amount, color_metric.value,
        )
        started = time.perf_counter()
        result = self._algorithm.dither(image, index, amount, color_metric)
        logger.info("Dithering took %.2f seconds", time.perf_counter() - started)

        if progress:
            progress("完了", 1.0)

        return result

    def quantize(
        self,
        image: PixelBuffer,
        palette: PaletteLike,
        metric: Optional[MetricLike] = None,
    ) -> PixelBuffer:
        """誤差拡散なしで各ピクセルを最近傍パレット色に置換（NumPy一括処理）。

        convert(..., dither_amount=0) と同じ結果になる。
        """
        color_metric = resolve_metric(self._settings.metric if metric is None else metric)
        index = build_palette_index(palette)

        rgba = buffer_to_array(image)
        colors = rgba[:, :, :3].reshape(-1, 3)
        # 検索はユニーク色のみ
        unique, inverse = np.unique(colors, axis=0, return_inverse=True)
        if color_metric is ColorMetric.LAB:
            query = lab_for_colors(unique)
        else:
            query = unique.astype(np.float64)

        unique_indices = nearest_palette_indices(query, index.values_for(color_metric))
        indices = unique_indices[inverse.reshape(-1)]
        pal_rgb = np.array(index.rgb_values, dtype=np.uint8)
        out = pal_rgb[indices].reshape(image.height, image.width, 3)
        logger.debug(
            "Quantized %dx%d image (%d unique colors) to %d colors without diffusion",
            image.width, image.height, len(unique), len(index),
        )
        return buffer_from_array(out)

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        palette: PaletteLike,
        settings: Optional[ConversionSettings] = None,
        spec: Optional[ImageSpec] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> PixelBuffer:
        """画像ファイルを読み込み、変換して保存。

        Args:
            input_path: 入力画像パス
            output_path: 保存先パス
            palette: カラーパレット
            settings: 変換設定。None ならコンストラクタの設定
            spec: リサイズ仕様。None ならリサイズしない
            progress: 進捗コールバック

        Returns:
            変換済みの画像
        """
        if progress:
            progress("読み込み", 0.0)

        # 画像の読み込み前にパレットと保存形式を検証する
        index = build_palette_index(palette)
        check_output_format(output_path)
        settings = settings or self._settings
        image = load_image(input_path)

        if spec is not None:
            if progress:
                progress("リサイズ", 0.1)
            image = resize_image(
                image, spec.target_width, spec.target_height, spec.keep_aspect_ratio,
            )

        if progress:
            progress("ディザリング", 0.2)

        result = self.convert(
            image, index, dither_amount=settings.dither_amount, metric=settings.metric,
        )

        if progress:
            progress("保存", 0.9)

        save_image(result, output_path)
        logger.info("Saved %s", output_path)

        if progress:
            progress("完了", 1.0)

        return result
