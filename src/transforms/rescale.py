import logging

import numpy as np

from src.imaging.calibration import CalibrationParameters, read_calibration
from src.imaging.image import DicomImage

logger = logging.getLogger(__name__)


def rescale(raw: np.ndarray, calib: CalibrationParameters) -> np.ndarray:
    """Maps raw pixel codes to calibrated units: `v * slope + intercept`.

    Args:
        raw (np.ndarray): Raw pixel matrix (H, W). Left untouched.
        calib (CalibrationParameters): Slope and intercept of the image.

    Returns:
        np.ndarray: A new float64 matrix of the same shape.

    Raises:
        ValueError: If `raw` is not 2-D.
    """
    # Cast to float first so that negative results (e.g. -1024 HU) survive unsigned inputs.
    matrix = np.array(raw, dtype=np.float64, copy=True)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D pixel matrix, got shape {matrix.shape}")

    matrix *= calib.slope
    matrix += calib.intercept
    return matrix


def apply_rescale(image: DicomImage) -> np.ndarray:
    """Returns the Hounsfield matrix of an image, using its own calibration tags."""
    calib = read_calibration(image.metadata)
    logger.debug(f"Rescaling with slope={calib.slope}, intercept={calib.intercept}")
    return rescale(image.pixel_data(), calib)
