import numpy as np
from PIL import Image

from src.api.delivery import to_display_image
from src.evaluation.intensity_range import intensity_range
from src.transforms.windowing import DISPLAY_MAX, Window, window


class Visualizer:
    """
    Builds a side-by-side preview of a windowing result.

    Layout:
        [ Full Range | Windowed | Clipping Map ]

    The clipping map is mid-gray where the window clamped to black, white where it
    clamped to white, and black where the value fell inside the window.
    """

    def __init__(self, padding: int = 4):
        self.padding = padding

    def _full_range(self, hounsfield: np.ndarray) -> np.ndarray:
        """Min-Max normalizes a calibrated matrix to [0, 255] for display."""
        hu_range = intensity_range(hounsfield)
        return window(hounsfield, Window(hu_range.low, hu_range.high), *hounsfield.shape)

    def _clipping_map(self, hounsfield: np.ndarray, req: Window) -> np.ndarray:
        clip_map = np.zeros(hounsfield.shape, dtype=np.float64)
        clip_map[hounsfield < req.low] = DISPLAY_MAX / 2
        clip_map[hounsfield > req.high] = DISPLAY_MAX
        return clip_map

    def create_grid(self, hounsfield: np.ndarray, displayed: np.ndarray, req: Window) -> Image.Image:
        """Constructs the 3-panel preview image.

        Args:
            hounsfield: The calibrated matrix (H, W).
            displayed: The windowed display matrix (H, W).
            req: The window that produced `displayed`.
        """
        panels = [self._full_range(hounsfield), np.asarray(displayed, dtype=np.float64), self._clipping_map(hounsfield, req)]

        # Padding puts a small black border between panels
        h = hounsfield.shape[0]
        spacer = np.zeros((h, self.padding), dtype=np.float64)
        row = [panels[0]]
        for panel in panels[1:]:
            row.extend([spacer, panel])

        return to_display_image(np.concatenate(row, axis=1))
