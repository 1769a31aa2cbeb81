import io
import logging
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image

from src.api.response import Response

logger = logging.getLogger(__name__)


class ImageSink(Protocol):
    """Receives the display matrix of a windowing request and answers the client."""

    def deliver(self, matrix: np.ndarray) -> Response: ...


def to_display_image(matrix: np.ndarray) -> Image.Image:
    """Converts a [0, 255] display matrix into a PIL Image object.

    Does NOT save to disk (separation of concerns).

    Args:
        matrix (np.ndarray): Display values, shape (H, W).

    Returns:
        Image.Image: A PIL Image object representing the matrix (Mode 'L').
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D display matrix, got shape {matrix.shape}")

    # Round before the cast: 127.5 must not truncate to 127.
    pixels = np.clip(np.rint(np.nan_to_num(matrix, nan=0.0)), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels)


def encode_png(matrix: np.ndarray) -> bytes:
    """Encodes a display matrix as PNG bytes."""
    buffer = io.BytesIO()
    to_display_image(matrix).save(buffer, format="PNG")
    return buffer.getvalue()


class PngImageSink:
    """Answers the request with the rendered image as an `image/png` body."""

    def deliver(self, matrix: np.ndarray) -> Response:
        body = encode_png(matrix)
        logger.debug(f"Encoded {matrix.shape} display matrix into {len(body)} PNG bytes")
        return Response(status=200, content_type="image/png", body=body)


class FileImageSink:
    """Writes the rendered image to disk, then answers like `PngImageSink`."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def deliver(self, matrix: np.ndarray) -> Response:
        body = encode_png(matrix)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(body)
        logger.info(f"Saved windowed image to {self.path}")
        return Response(status=200, content_type="image/png", body=body)
