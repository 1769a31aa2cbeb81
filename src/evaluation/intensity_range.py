import math
from dataclasses import dataclass

import numpy as np

from src.utils.errors import EmptyImage


@dataclass(frozen=True)
class IntensityRange:
    """Minimum and maximum calibrated value found in an image."""
    low: float
    high: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.low) and math.isfinite(self.high)

    def to_dict(self) -> dict[str, float | None]:
        """Returns the `{"low": ..., "high": ...}` document sent to clients.

        NaN and infinite bounds have no JSON spelling and become None (null).
        """
        return {
            "low": self.low if math.isfinite(self.low) else None,
            "high": self.high if math.isfinite(self.high) else None,
        }


def intensity_range(matrix: np.ndarray) -> IntensityRange:
    """Scans a calibrated matrix once and returns its true extrema.

    The running extrema are seeded from the matrix itself, so images whose values are
    all negative (air, lung) report a negative maximum.

    Args:
        matrix (np.ndarray): Calibrated matrix (H, W).

    Returns:
        IntensityRange: (low, high) of the values present.

    Raises:
        EmptyImage: If the matrix holds no element.
    """
    values = np.asarray(matrix, dtype=np.float64).ravel()
    if values.size == 0:
        raise EmptyImage("Cannot compute the range of an image without pixels.")

    # NaN propagates through min/max like any other arithmetic.
    return IntensityRange(low=float(values.min()), high=float(values.max()))
