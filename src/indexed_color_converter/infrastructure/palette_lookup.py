"""最近傍パレット色のバッチ検索（NumPyベース）。

誤差拡散なしの量子化で画像全体を一括処理する。
結果はスカラー版 find_closest_color_index と一致する。
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import numpy.typing as npt

from indexed_color_converter.domain.color import rgb_to_lab

# 作業配列のメモリ上限: 16色なら約 25 MB
DEFAULT_CHUNK_SIZE = 65536


def nearest_palette_indices(
    colors: npt.NDArray[np.float64],
    palette_values: Sequence[Sequence[float]],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> npt.NDArray[np.intp]:
    """各色に最も近いパレットインデックスを返す。

    距離はユークリッド距離の2乗。同距離の場合は argmin の仕様により
    パレット順で先のインデックスになる。

    Args:
        colors: (N, 3) の float64 配列
        palette_values: (P, 3) のパレット値（colors と同じ色空間）
        chunk_size: 一度に距離を計算する色数。作業配列は (chunk_size, P, 3)

    Returns:
        (N,) のインデックス配列
    """
    pal = np.asarray(palette_values, dtype=np.float64)
    indices = np.empty(len(colors), dtype=np.intp)

    for start in range(0, len(colors), chunk_size):
        chunk = colors[start:start + chunk_size]
        # 発散した値は inf / nan として扱う
        with np.errstate(over="ignore", invalid="ignore"):
            # (n, 1, 3) - (1, P, 3) → (n, P, 3)
            diff = pal[np.newaxis, :, :] - chunk[:, np.newaxis, :]
            # チャンネル順に加算（スカラー版と同じ丸め）
            sq = diff * diff
            dist_sq = sq[..., 0] + sq[..., 1] + sq[..., 2]
        indices[start:start + chunk_size] = np.argmin(dist_sq, axis=-1)

    return indices


def lab_for_colors(colors: npt.NDArray[np.uint8]) -> npt.NDArray[np.float64]:
    """(N, 3) のRGB配列をLabに変換。

    ユニーク色ごとにスカラー版 rgb_to_lab を使う。

    Args:
        colors: (N, 3) の uint8 配列

    Returns:
        (N, 3) の float64 配列 (LAB)
    """
    unique, inverse = np.unique(colors, axis=0, return_inverse=True)
    unique_lab = np.array(
        [rgb_to_lab(tuple(int(c) for c in rgb)).to_tuple() for rgb in unique],
        dtype=np.float64,
    ).reshape(-1, 3)
    return unique_lab[inverse.reshape(-1)]
