"""画像I/O（Pillow ベース）。

画像の読み込み、保存、リサイズと PixelBuffer ⇔ NumPy 配列の変換を担当。
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image

from indexed_color_converter.domain.errors import ValidationError
from indexed_color_converter.domain.pixel_buffer import PixelBuffer

# アルファチャンネルを保存できない形式
_NO_ALPHA_SUFFIXES = {".jpg", ".jpeg", ".bmp"}


def buffer_from_array(array: npt.NDArray[np.uint8]) -> PixelBuffer:
    """NumPy配列から PixelBuffer を作成。

    Args:
        array: (H, W, 3) または (H, W, 4) の uint8 配列。3チャンネルならアルファ255

    Returns:
        RGBA の PixelBuffer
    """
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ValidationError(f"expected an (H, W, 3|4) array, got shape {array.shape}")
    h, w = array.shape[:2]
    if array.shape[2] == 3:
        rgba = np.empty((h, w, 4), dtype=np.uint8)
        rgba[:, :, :3] = array
        rgba[:, :, 3] = 255
    else:
        rgba = array.astype(np.uint8, copy=False)
    return PixelBuffer(w, h, np.ascontiguousarray(rgba).tobytes())


def buffer_to_array(buffer: PixelBuffer) -> npt.NDArray[np.uint8]:
    """PixelBuffer を (H, W, 4) の uint8 配列に変換。"""
    flat = np.frombuffer(buffer.data, dtype=np.uint8)
    return flat.reshape(buffer.height, buffer.width, 4).copy()


def load_image(path: str | Path) -> PixelBuffer:
    """画像ファイルを読み込み、RGBAの PixelBuffer として返す。

    Args:
        path: 画像ファイルパス (JPEG, PNG等)
    """
    with Image.open(path) as img:
        img = img.convert("RGBA")
        return buffer_from_array(np.array(img, dtype=np.uint8))


def check_output_format(path: str | Path) -> str:
    """保存先の拡張子から Pillow の保存形式を判定。

    Raises:
        ValidationError: 拡張子が未知、または Pillow が書き込めない形式
    """
    suffix = Path(path).suffix.lower()
    fmt = Image.registered_extensions().get(suffix)
    if fmt is None or fmt not in Image.SAVE:
        raise ValidationError(f"unsupported output format: {str(path)!r}")
    return fmt


def save_image(buffer: PixelBuffer, path: str | Path) -> None:
    """PixelBuffer を画像ファイルとして保存。

    Args:
        buffer: 保存する画像
        path: 保存先パス (PNG, BMP等)。JPEG/BMP はRGBで保存
    """
    fmt = check_output_format(path)
    img = Image.fromarray(buffer_to_array(buffer))
    if Path(path).suffix.lower() in _NO_ALPHA_SUFFIXES:
        img = img.convert("RGB")
    img.save(path, format=fmt)


def resize_image(
    buffer: PixelBuffer,
    target_width: int,
    target_height: int,
    keep_aspect_ratio: bool = True,
) -> PixelBuffer:
    """画像をリサイズ。

    Args:
        buffer: 入力画像
        target_width: 目標幅
        target_height: 目標高さ
        keep_aspect_ratio: アスペクト比を維持するか

    Returns:
        リサイズ済みの PixelBuffer
    """
    img = Image.fromarray(buffer_to_array(buffer))

    if keep_aspect_ratio:
        img.thumbnail((target_width, target_height), Image.Resampling.LANCZOS)
        # 目標サイズのキャンバスに中央配置（白背景）
        canvas = Image.new("RGBA", (target_width, target_height), (255, 255, 255, 255))
        offset_x = (target_width - img.width) // 2
        offset_y = (target_height - img.height) // 2
        canvas.paste(img, (offset_x, offset_y))
        return buffer_from_array(np.array(canvas, dtype=np.uint8))
    else:
        img = img.resize((target_width, target_height), Image.Resampling.LANCZOS)
        return buffer_from_array(np.array(img, dtype=np.uint8))
