"""パレットのインデックスと最近傍色検索。

Pure Pythonで実装（外部ライブラリ依存なし）。
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Union

from indexed_color_converter.domain.color import (
    LAB,
    RGB,
    ColorLike,
    rgb_to_lab,
    squared_distance,
)
from indexed_color_converter.domain.errors import ValidationError
from indexed_color_converter.domain.image_model import ColorMetric


@dataclass(frozen=True)
class PaletteEntry:
    """パレットの1色。Lab値は構築時に1度だけ計算する。"""

    rgb: RGB
    lab: LAB


def _to_rgb(color: ColorLike, position: int) -> RGB:
    """パレット色を検証して RGB に変換。"""
    if isinstance(color, RGB):
        channels: Sequence[object] = color.to_tuple()
    else:
        try:
            channels = tuple(color)
        except TypeError:
            raise ValidationError(
                f"palette entry {position} is not a color: {color!r}"
            ) from None
    if len(channels) != 3:
        raise ValidationError(
            f"palette entry {position} must have 3 channels, got {len(channels)}"
        )
    for c in channels:
        # bool は int のサブクラスだが色値としては不正
        if isinstance(c, bool) or not isinstance(c, numbers.Integral) or not 0 <= c <= 255:
            raise ValidationError(
                f"palette entry {position} has an invalid channel value {c!r}"
            )
    r, g, b = (int(c) for c in channels)  # type: ignore[call-overload]
    return RGB(r, g, b)


class PaletteIndex:
    """呼び出し側のパレットをラップし、各色のLab値を事前計算する。

    構築後は不変。複数の変換で読み取り専用として共有できる。
    """

    def __init__(self, palette: Iterable[ColorLike]) -> None:
        colors = list(palette)
        if not colors:
            raise ValidationError("Palette cannot be empty")

        entries = []
        for i, color in enumerate(colors):
            rgb = _to_rgb(color, i)
            entries.append(PaletteEntry(rgb, rgb_to_lab(rgb)))

        self._entries: tuple[PaletteEntry, ...] = tuple(entries)
        self._rgb_values = tuple(e.rgb.to_tuple() for e in self._entries)
        self._lab_values = tuple(e.lab.to_tuple() for e in self._entries)

    @property
    def entries(self) -> tuple[PaletteEntry, ...]:
        return self._entries

    @property
    def rgb_values(self) -> tuple[tuple[int, int, int], ...]:
        return self._rgb_values

    @property
    def lab_values(self) -> tuple[tuple[float, float, float], ...]:
        return self._lab_values

    def values_for(self, metric: ColorMetric) -> tuple[tuple[float, float, float], ...]:
        """指定した色空間でのパレット値。"""
        if metric is ColorMetric.LAB:
            return self._lab_values
        return self._rgb_values

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self._entries)

    def __getitem__(self, i: int) -> PaletteEntry:
        return self._entries[i]

    def __repr__(self) -> str:
        return f"PaletteIndex({[e.rgb.to_tuple() for e in self._entries]!r})"


MetricLike = Union[ColorMetric, str]


def resolve_metric(metric: MetricLike) -> ColorMetric:
    """ColorMetric または "rgb" / "lab" 文字列を ColorMetric に変換。"""
    if isinstance(metric, ColorMetric):
        return metric
    try:
        return ColorMetric(metric)
    except ValueError:
        raise ValidationError(
            f"unknown color metric {metric!r} (expected 'rgb' or 'lab')"
        ) from None


def find_closest_color_index(
    color: ColorLike,
    index: PaletteIndex,
    metric: MetricLike = ColorMetric.RGB,
) -> int:
    """パレットから最も近い色のインデックスを線形探索で検索。

    距離は指定色空間でのユークリッド距離の2乗。
    同距離の場合はパレット順で先の色を優先する。

    Args:
        color: 検索対象の色（作業中の浮動小数点色を含む）
        index: 事前計算済みパレット
        metric: 距離計算の色空間。デフォルトは RGB

    Returns:
        最近傍色のインデックス
    """
    metric = resolve_metric(metric)
    if metric is ColorMetric.LAB:
        query: Sequence[float] = rgb_to_lab(color).to_tuple()
    elif isinstance(color, RGB):
        query = color.to_tuple()
    else:
        query = color

    best_idx = 0
    best_dist = float("inf")
    for i, candidate in enumerate(index.values_for(metric)):
        dist = squared_distance(query, candidate)
        if dist < best_dist:
            best_dist = dist
            best_idx = i

    return best_idx


def find_closest_color(
    color: ColorLike,
    index: PaletteIndex,
    metric: MetricLike = ColorMetric.RGB,
) -> PaletteEntry:
    """パレットから最も近い色を検索。find_closest_color_index のラッパー。"""
    return index[find_closest_color_index(color, index, metric)]
