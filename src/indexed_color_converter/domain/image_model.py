"""変換設定のドメインモデル。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


DEFAULT_DITHER_AMOUNT = 0.75


class ColorMetric(Enum):
    """最近傍色検索で距離を測る色空間。"""

    RGB = "rgb"
    LAB = "lab"


@dataclass
class ConversionSettings:
    """インデックスカラー変換の設定。

    dither_amount は慣例的に 0〜1。範囲外の値も拒否せず、
    誤差拡散がそのまま線形に拡大・縮小される。
    """

    dither_amount: float = DEFAULT_DITHER_AMOUNT
    metric: ColorMetric = ColorMetric.RGB


@dataclass
class ImageSpec:
    """ファイル変換時のリサイズ仕様。"""

    target_width: int
    target_height: int
    keep_aspect_ratio: bool = True
