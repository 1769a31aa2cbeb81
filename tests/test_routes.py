import io

import numpy as np
import pytest
from PIL import Image

from src.api.delivery import PngImageSink
from src.api.response import Response
from src.api.routes import apply_hounsfield_windowing, get_hounsfield_range, parse_window_request
from src.imaging.image import DicomImage
from src.transforms.windowing import Window
from src.utils.errors import DimensionMismatch, EmptyImage, MalformedRequest


class RecordingSink:
    """Delivery sink that keeps what it was given."""

    def __init__(self):
        self.delivered: list[np.ndarray] = []

    def deliver(self, matrix: np.ndarray) -> Response:
        self.delivered.append(matrix)
        return Response(status=200, content_type="image/png")


@pytest.fixture
def ct_image() -> DicomImage:
    raw = np.array([[24, 1024], [1524, 4024]], dtype=np.uint16)
    return DicomImage.from_array(raw, RescaleSlope=1.0, RescaleIntercept=-1024.0)


class TestParseWindowRequest:
    @pytest.mark.parametrize("body", [b'{"low": 200, "high": 1000}', '{"low": 200, "high": 1000}', {"low": 200, "high": 1000.0}])
    def test_accepted_body_forms(self, body):
        assert parse_window_request(body) == Window(200.0, 1000.0)

    def test_inverted_window_is_not_a_parse_error(self):
        assert not parse_window_request('{"low": 500, "high": 100}').is_valid

    @pytest.mark.parametrize("body", [
        None,
        b"",
        b"not json",
        b"\xff\xfe",
        "[200, 1000]",
        '{"low": 200}',
        '{"high": 1000}',
        '{"low": "200", "high": 1000}',
        '{"low": true, "high": 1000}',
        '{"low": null, "high": 1000}',
        '{"low": NaN, "high": 1000}',
        '{"low": 0, "high": Infinity}',
        '{"low": 1' + "0" * 400 + ', "high": 1}',
        '{"low": 1' + "0" * 5000 + ', "high": 1}',
        "[" * 100000,
        {"low": 10 ** 400, "high": 1},
    ])
    def test_malformed_bodies(self, body):
        with pytest.raises(MalformedRequest):
            parse_window_request(body)


class TestHounsfieldRange:
    def test_json_document(self, ct_image):
        response = get_hounsfield_range(ct_image)
        assert response.status == 200
        assert response.content_type == "application/json"
        assert response.json() == {"low": -1000.0, "high": 3000.0}

    def test_all_negative_image(self):
        image = DicomImage.from_array(np.array([[-1000, -50], [-999, -2000]]))
        assert get_hounsfield_range(image).json() == {"low": -2000.0, "high": -50.0}

    def test_nan_extremum_is_sent_as_null(self):
        image = DicomImage.from_array(np.array([[np.nan, 1.0], [2.0, 3.0]]))
        response = get_hounsfield_range(image)
        assert response.status == 200
        assert b"NaN" not in response.body
        assert response.json() == {"low": None, "high": None}

    def test_empty_image_propagates(self):
        with pytest.raises(EmptyImage):
            get_hounsfield_range(DicomImage.from_array(np.zeros((0, 0))))


class TestHounsfieldWindowing:
    def test_windowed_matrix_reaches_sink(self, ct_image):
        sink = RecordingSink()
        response = apply_hounsfield_windowing(b'{"low": 0, "high": 1000}', ct_image, sink)
        assert response.status == 200
        assert len(sink.delivered) == 1
        np.testing.assert_array_equal(sink.delivered[0], [[0.0, 0.0], [127.5, 255.0]])

    def test_missing_high_is_bad_request(self, ct_image):
        sink = RecordingSink()
        response = apply_hounsfield_windowing(b'{"low": 0}', ct_image, sink)
        assert response.status == 400
        assert sink.delivered == []

    def test_oversized_number_is_bad_request(self, ct_image):
        sink = RecordingSink()
        body = '{"low": 1' + "0" * 400 + ', "high": 1}'
        response = apply_hounsfield_windowing(body, ct_image, sink)
        assert response.status == 400
        assert sink.delivered == []

    def test_inverted_window_sends_black_image(self):
        image = DicomImage.from_array(np.ones((4, 3)))
        sink = RecordingSink()
        apply_hounsfield_windowing({"low": 500, "high": 100}, image, sink)
        assert sink.delivered[0].shape == (4, 3)
        assert np.all(sink.delivered[0] == 0)

    def test_inverted_window_uses_declared_size(self):
        image = DicomImage.from_array(np.ones((2, 2)), Rows=4, Columns=3)
        sink = RecordingSink()
        apply_hounsfield_windowing({"low": 1, "high": 0}, image, sink)
        assert sink.delivered[0].shape == (4, 3)

    def test_dimension_mismatch_propagates(self):
        image = DicomImage.from_array(np.ones((2, 2)), Rows=4, Columns=3)
        sink = RecordingSink()
        with pytest.raises(DimensionMismatch):
            apply_hounsfield_windowing({"low": 0, "high": 1}, image, sink)
        assert sink.delivered == []

    def test_png_delivery(self, ct_image):
        response = apply_hounsfield_windowing('{"low": 0, "high": 1000}', ct_image, PngImageSink())
        assert response.content_type == "image/png"
        img = Image.open(io.BytesIO(response.body))
        assert img.mode == "L"
        assert img.size == (2, 2)
        np.testing.assert_array_equal(np.array(img), [[0, 0], [128, 255]])
