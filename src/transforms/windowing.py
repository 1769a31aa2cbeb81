import logging
from dataclasses import dataclass

import numpy as np

from src.utils.errors import DimensionMismatch

logger = logging.getLogger(__name__)

DISPLAY_MIN = 0.0
DISPLAY_MAX = 255.0


@dataclass(frozen=True)
class Window:
    """A Hounsfield sub-range to stretch over the display range.

    Attributes:
        low (float): Value mapped to black (0).
        high (float): Value mapped to white (255).
    """
    low: float
    high: float

    @classmethod
    def from_center_width(cls, center: float, width: float) -> "Window":
        """Builds a window from the DICOM WindowCenter / WindowWidth convention."""
        return cls(low=center - width / 2.0, high=center + width / 2.0)

    @property
    def is_valid(self) -> bool:
        return self.high > self.low

    @property
    def width(self) -> float:
        return self.high - self.low

    @property
    def center(self) -> float:
        return (self.low + self.high) / 2.0


def window(matrix: np.ndarray | None, req: Window, out_height: int, out_width: int) -> np.ndarray:
    """Maps a calibrated matrix onto [0, 255] through a (low, high) window.

    Values below `low` clamp to 0 and values above `high` clamp to 255. An invalid window
    (`high <= low`) is not an error: it yields an all-black image of the declared size.

    Args:
        matrix (np.ndarray | None): Calibrated (Hounsfield) matrix, shape (H, W). Unused,
            and may be None, when the window is invalid.
        req (Window): Requested window.
        out_height (int): Rows declared by the image metadata.
        out_width (int): Columns declared by the image metadata.

    Returns:
        np.ndarray: A new float64 display matrix of shape (out_height, out_width).

    Raises:
        DimensionMismatch: If the declared size is negative, or if it differs from the
            matrix shape on a valid window.
    """
    declared = (int(out_height), int(out_width))
    if declared[0] < 0 or declared[1] < 0:
        raise DimensionMismatch(declared, np.shape(matrix))

    if not req.is_valid:
        logger.debug(f"Invalid window [{req.low}, {req.high}], returning a black {declared} image")
        return np.zeros(declared, dtype=np.float64)

    values = np.asarray(matrix, dtype=np.float64)
    if values.shape != declared:
        raise DimensionMismatch(declared, values.shape)

    # Denominator is strictly positive on this branch.
    display = (values - req.low) / (req.high - req.low) * DISPLAY_MAX
    return np.clip(display, DISPLAY_MIN, DISPLAY_MAX)
