from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol, Union

import numpy as np
import rasterio
from rasterio.transform import Affine


class RasterSampler(Protocol):
    """Read-only pixel access the tracer needs. Callers bounds-check with ``contains``."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def contains(self, x: int, y: int) -> bool: ...

    def color_at(self, x: int, y: int) -> int: ...


class ArraySampler:
    """
    Immutable packed-RGB snapshot of an image array.

    Parameters
    ----------
    pixels : ndarray
        (H,W) grey, (H,W,1) grey, (H,W,3) RGB or (H,W,4) RGBA with values
        in 0..255. Alpha is dropped. Row index is y (down), column is x (right).
    """

    def __init__(self, pixels: np.ndarray):
        arr = np.asarray(pixels)
        if arr.ndim == 2:
            rgb = np.repeat(arr[:, :, None], 3, axis=2)
        elif arr.ndim == 3 and arr.shape[2] == 1:
            rgb = np.repeat(arr, 3, axis=2)
        elif arr.ndim == 3 and arr.shape[2] in (3, 4):
            rgb = arr[:, :, :3]
        else:
            raise ValueError(f"Expected an (H,W), (H,W,1), (H,W,3) or (H,W,4) array, got shape {arr.shape}.")

        if rgb.shape[0] == 0 or rgb.shape[1] == 0:
            raise ValueError("Raster has no pixels.")

        rgb = np.clip(rgb, 0, 255).astype(np.uint32)
        packed = (rgb[:, :, 0] << 16) | (rgb[:, :, 1] << 8) | rgb[:, :, 2]
        packed.setflags(write=False)
        self._packed = packed

    @property
    def width(self) -> int:
        return int(self._packed.shape[1])

    @property
    def height(self) -> int:
        return int(self._packed.shape[0])

    @property
    def packed(self) -> np.ndarray:
        return self._packed

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def color_at(self, x: int, y: int) -> int:
        return int(self._packed[y, x])

    def __repr__(self) -> str:
        return f"ArraySampler(width={self.width}, height={self.height})"


@dataclass(frozen=True)
class RasterSnapshot:
    sampler: ArraySampler
    transform: Affine
    crs: Optional[Any]
    path: Path


def _stretch_to_byte(band: np.ndarray) -> np.ndarray:
    band = band.astype(np.float64, copy=False)
    finite = np.isfinite(band)
    if not finite.any():
        return np.zeros(band.shape, dtype=np.uint8)

    lo = float(band[finite].min())
    hi = float(band[finite].max())
    out = np.zeros(band.shape, dtype=np.float64)
    if hi > lo:
        out[finite] = (band[finite] - lo) * (255.0 / (hi - lo))
    return np.round(out).astype(np.uint8)


def load_raster(path: Union[str, Path]) -> RasterSnapshot:
    """
    Read an image with rasterio into an ``ArraySampler``.

    Bands 1-3 are used as RGB when the file has at least three bands,
    otherwise band 1 is used as grey. Non-byte bands are linearly stretched
    to 0..255. The affine transform and CRS are returned so traced pixels
    can be exported in world units.
    """
    path = Path(path)
    with rasterio.open(path) as src:
        if src.count >= 3:
            data = src.read([1, 2, 3])
        else:
            data = src.read([1])
        transform = src.transform
        crs = src.crs

    if data.dtype != np.uint8:
        data = np.stack([_stretch_to_byte(b) for b in data])

    pixels = np.transpose(data, (1, 2, 0))
    return RasterSnapshot(sampler=ArraySampler(pixels), transform=transform, crs=crs, path=path)
