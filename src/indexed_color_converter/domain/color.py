"""色の型定義と RGB → CIE L*a*b* 変換。

Pure Pythonで実装（外部ライブラリ依存なし）。
パレット照合の再現性のため、演算順序は固定している。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Union


@dataclass(frozen=True)
class RGB:
    """RGB色空間の色。各チャンネル 0-255。"""

    r: int
    g: int
    b: int

    def to_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class LAB:
    """CIE L*a*b* 色空間の色。"""

    l: float  # noqa: E741
    a: float
    b: float

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.l, self.a, self.b)


ColorLike = Union[RGB, Sequence[float]]
"""RGB インスタンス、または (r, g, b) の数値シーケンス。"""


# --- D65 白色点 (observer = 2°) ---

REF_X = 95.047
REF_Y = 100.0
REF_Z = 108.883


def as_triple(color: ColorLike) -> tuple[float, float, float]:
    """RGB または数値シーケンスを (r, g, b) タプルに正規化。"""
    if isinstance(color, RGB):
        return color.to_tuple()
    r, g, b = color
    return (r, g, b)


def _srgb_to_linear(c: float) -> float:
    """sRGBコンポーネント(0-255)をリニアRGB(0-100)に変換。"""
    v = c / 255
    if v > 0.04045:
        try:
            v = ((v + 0.055) / 1.055) ** 2.4
        except OverflowError:
            # 誤差拡散で発散した作業色
            v = math.inf
    else:
        v = v / 12.92
    return v * 100


def _lab_f(t: float) -> float:
    """LAB変換の補助関数。"""
    if t > 0.008856:
        return t ** (1 / 3)
    return 7.787 * t + 16 / 116


def rgb_to_xyz(color: ColorLike) -> tuple[float, float, float]:
    """RGB色をXYZ色空間に変換。observer = 2°, illuminant = D65。

    Args:
        color: RGB色。作業中の浮動小数点色（0-255 の範囲外を含む）も受け付ける

    Returns:
        (X, Y, Z)。白は Y=100 付近
    """
    red, green, blue = as_triple(color)
    r = _srgb_to_linear(red)
    g = _srgb_to_linear(green)
    b = _srgb_to_linear(blue)

    return (
        r * 0.4124 + g * 0.3576 + b * 0.1805,
        r * 0.2126 + g * 0.7152 + b * 0.0722,
        r * 0.0193 + g * 0.1192 + b * 0.9505,
    )


def xyz_to_lab(xyz: Sequence[float]) -> LAB:
    """XYZ色をCIE L*a*b*に変換。observer = 2°, illuminant = D65。"""
    fx = _lab_f(xyz[0] / REF_X)
    fy = _lab_f(xyz[1] / REF_Y)
    fz = _lab_f(xyz[2] / REF_Z)

    return LAB(116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz))


def rgb_to_lab(color: ColorLike) -> LAB:
    """RGB色をCIE L*a*b*に変換。D65光源基準。"""
    return xyz_to_lab(rgb_to_xyz(color))


def squared_distance(p: Sequence[float], q: Sequence[float]) -> float:
    """2色間のユークリッド距離の2乗。"""
    # 発散した作業色では inf を返す（** 2 は OverflowError になる）
    dr = q[0] - p[0]
    dg = q[1] - p[1]
    db = q[2] - p[2]
    return dr * dr + dg * dg + db * db
