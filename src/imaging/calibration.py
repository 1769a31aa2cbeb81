from dataclasses import dataclass

from src.imaging.metadata import RESCALE_INTERCEPT, RESCALE_SLOPE, MetadataStore


@dataclass(frozen=True)
class CalibrationParameters:
    """Linear calibration from stored pixel codes to Hounsfield units.

    Attributes:
        slope (float): RescaleSlope (0028,1053). Defaults to 1.0.
        intercept (float): RescaleIntercept (0028,1052). Defaults to 0.0.
    """
    slope: float = 1.0
    intercept: float = 0.0


def read_calibration(metadata: MetadataStore) -> CalibrationParameters:
    """Reads the rescale slope/intercept of an image, falling back to the identity transform."""
    return CalibrationParameters(
        slope=metadata.get_double(RESCALE_SLOPE, 1.0),
        intercept=metadata.get_double(RESCALE_INTERCEPT, 0.0),
    )
