import logging
from pathlib import Path

import numpy as np
import pydicom
from pydicom.dataset import Dataset

from src.imaging.metadata import COLUMNS, ROWS, DatasetMetadataStore, DictMetadataStore, MetadataStore

logger = logging.getLogger(__name__)


class DicomImage:
    """A single grayscale slice: its metadata store plus its raw pixel matrix.

    The handle is read-only. `pixel_data()` hands out a fresh float64 copy on every
    call so that downstream engines can never alias the stored samples.
    """

    def __init__(self, metadata: MetadataStore, pixels: np.ndarray) -> None:
        """Initializes the image handle.

        Args:
            metadata (MetadataStore): Store exposing `get_double` / `get_int`.
            pixels (np.ndarray): Raw stored pixel values, shape (H, W).

        Raises:
            ValueError: If the pixel data is not a single 2-D grayscale frame.
        """
        pixels = np.asarray(pixels)
        if pixels.ndim != 2:
            raise ValueError(f"Expected a single grayscale frame (H, W), got shape {pixels.shape}")

        self.metadata = metadata
        self._pixels = pixels.copy()
        self._pixels.setflags(write=False)

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> "DicomImage":
        """Builds an image from an in-memory pydicom Dataset."""
        frames = int(dataset.get("NumberOfFrames", 1) or 1)
        samples = int(dataset.get("SamplesPerPixel", 1) or 1)
        if frames != 1 or samples != 1:
            raise ValueError(f"Only single-frame grayscale images are supported (frames={frames}, samples={samples})")

        return cls(DatasetMetadataStore(dataset), dataset.pixel_array)

    @classmethod
    def from_file(cls, path: str | Path) -> "DicomImage":
        """Reads a DICOM file from disk.

        Args:
            path (str | Path): Location of the .dcm file.

        Returns:
            DicomImage: The parsed image handle.
        """
        path = Path(path)
        logger.info(f"Reading DICOM file: {path}")
        return cls.from_dataset(pydicom.dcmread(path))

    @classmethod
    def from_array(cls, pixels: np.ndarray, **tags) -> "DicomImage":
        """Wraps a bare array, declaring its dimensions unless given explicitly.

        Extra keyword arguments are DICOM keywords, e.g. `RescaleSlope=2.0`.
        """
        pixels = np.asarray(pixels)
        values = {"Rows": pixels.shape[0] if pixels.ndim > 0 else 0,
                  "Columns": pixels.shape[1] if pixels.ndim > 1 else 0}
        values.update(tags)
        return cls(DictMetadataStore(values), pixels)

    def pixel_data(self) -> np.ndarray:
        """Returns a new float64 matrix of the raw stored values."""
        return self._pixels.astype(np.float64, copy=True)

    @property
    def declared_shape(self) -> tuple[int, int]:
        """(Rows, Columns) as announced by the metadata, 0 when absent."""
        return (self.metadata.get_int(ROWS, 0), self.metadata.get_int(COLUMNS, 0))

    def __repr__(self) -> str:
        return f"DicomImage(shape={self._pixels.shape}, declared={self.declared_shape})"
