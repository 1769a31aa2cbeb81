import io

import numpy as np
import pytest
from PIL import Image

from src.api.delivery import FileImageSink, encode_png, to_display_image
from src.transforms.windowing import Window
from src.utils.visualization import Visualizer


def test_display_image_rounds_and_clips() -> None:
    img = to_display_image(np.array([[-3.0, 0.4], [127.6, 300.0]]))
    assert img.mode == "L"
    np.testing.assert_array_equal(np.array(img), [[0, 0], [128, 255]])


def test_display_image_rejects_3d() -> None:
    with pytest.raises(ValueError):
        to_display_image(np.zeros((2, 2, 3)))


def test_png_round_trip_keeps_size() -> None:
    body = encode_png(np.zeros((5, 7)))
    assert body.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(body)).size == (7, 5)


def test_file_sink_writes_png(tmp_path) -> None:
    path = tmp_path / "out" / "windowed.png"
    response = FileImageSink(path).deliver(np.full((3, 3), 255.0))
    assert response.ok
    assert path.read_bytes() == response.body


def test_preview_grid_layout() -> None:
    hounsfield = np.array([[-1000.0, 0.0], [500.0, 3000.0]])
    req = Window(0, 1000)
    displayed = np.array([[0.0, 0.0], [127.5, 255.0]])
    grid = np.array(Visualizer(padding=1).create_grid(hounsfield, displayed, req))

    assert grid.shape == (2, 2 * 3 + 2)
    # Full-range panel spans black to white.
    assert grid[0, 0] == 0 and grid[1, 1] == 255
    # Clipping map: below window mid-gray, above white, inside black.
    clip = grid[:, 6:8]
    np.testing.assert_array_equal(clip, [[128, 0], [0, 255]])
