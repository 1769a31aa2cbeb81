import json
import logging
import math
from numbers import Real
from typing import Any

from src.api.delivery import ImageSink
from src.api.response import Response
from src.evaluation.intensity_range import intensity_range
from src.imaging.image import DicomImage
from src.transforms.rescale import apply_rescale
from src.transforms.windowing import Window, window
from src.utils.errors import MalformedRequest, WindowingError

logger = logging.getLogger(__name__)


def _read_number(document: dict, key: str) -> float:
    """Extracts a finite numeric field; booleans are not numbers."""
    if key not in document:
        raise MalformedRequest(f"Missing field '{key}'")

    value = document[key]
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedRequest(f"Field '{key}' must be a number, got {type(value).__name__}")

    try:
        value = float(value)
    except OverflowError as e:
        raise MalformedRequest(f"Field '{key}' is too large: {e}") from e
    if not math.isfinite(value):
        raise MalformedRequest(f"Field '{key}' must be finite, got {value}")
    return value


def parse_window_request(body: bytes | str | dict | None) -> Window:
    """Parses a `{"low": <number>, "high": <number>}` request body.

    Args:
        body (bytes | str | dict | None): Raw body, or a document already decoded by the transport.

    Returns:
        Window: The requested window. It may be invalid (high <= low); that is not a parse error.

    Raises:
        MalformedRequest: If the body is absent, not a JSON object, or lacks numeric `low`/`high`.
    """
    if body is None:
        raise MalformedRequest("Empty request body")

    document: Any = body
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedRequest(f"Request body is not UTF-8: {e}") from e
    if isinstance(body, str):
        try:
            document = json.loads(body)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError, integer digit limit, or nesting too deep
            raise MalformedRequest(f"Request body is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedRequest(f"Expected a JSON object, got {type(document).__name__}")

    return Window(low=_read_number(document, "low"), high=_read_number(document, "high"))


def get_hounsfield_range(image: DicomImage) -> Response:
    """GET route: minimum and maximum Hounsfield values of an image.

    Answers with a JSON body formatted as `{"low": -1000.0, "high": 3000.0}`. A NaN or
    infinite extremum cannot be written as JSON and is sent as `null`.

    Raises:
        EmptyImage: If the image has no pixels.
    """
    try:
        hu_range = intensity_range(apply_rescale(image))
    except WindowingError as e:
        logger.error(f"Range query failed: {e}")
        raise
    logger.info(f"Hounsfield range: [{hu_range.low}, {hu_range.high}]")
    if not hu_range.is_finite:
        logger.warning("Image holds non-finite Hounsfield values, reporting them as null")
    return Response.from_json(hu_range.to_dict())


def apply_hounsfield_windowing(body: bytes | str | dict | None, image: DicomImage, sink: ImageSink) -> Response:
    """POST route: windows an image and hands the result to the delivery sink.

    A malformed body answers 400 without touching the image or the sink. When
    `high <= low` the delivered image is entirely black.

    Args:
        body (bytes | str | dict | None): Request body `{"low": ..., "high": ...}`.
        image (DicomImage): The image to render.
        sink (ImageSink): Collaborator encoding and sending the display matrix.

    Returns:
        Response: 400 for a malformed body, otherwise the sink's response.

    Raises:
        DimensionMismatch: If the declared Rows/Columns disagree with the pixel data.
    """
    try:
        req = parse_window_request(body)
    except MalformedRequest as e:
        logger.warning(f"Rejected windowing request: {e}")
        return Response.bad_request(str(e))

    rows, columns = image.declared_shape
    try:
        if req.is_valid:
            displayed = window(apply_rescale(image), req, rows, columns)
            logger.info(f"Applied window [{req.low}, {req.high}] to a {rows}x{columns} image")
        else:
            # Black image: no need to rescale anything.
            displayed = window(None, req, rows, columns)
            logger.info(f"Window [{req.low}, {req.high}] is empty, sending a black image")
    except WindowingError as e:
        logger.error(f"Windowing failed: {e}")
        raise

    return sink.deliver(displayed)
