class WindowingError(Exception):
    """Base class for request-scoped failures of the rescale/windowing pipeline."""


class MalformedRequest(WindowingError, ValueError):
    """The windowing request body is missing `low`/`high` or they are not numbers."""


class EmptyImage(WindowingError, ValueError):
    """A range was requested over a matrix without any element."""


class DimensionMismatch(WindowingError, ValueError):
    """Declared (Rows, Columns) disagree with the shape of the pixel matrix.

    Attributes:
        declared (tuple[int, int]): Shape announced by the image metadata.
        actual (tuple[int, ...]): Shape of the matrix actually provided.
    """

    def __init__(self, declared: tuple[int, int], actual: tuple[int, ...]) -> None:
        self.declared = tuple(declared)
        self.actual = tuple(actual)
        super().__init__(f"Declared dimensions {self.declared} do not match pixel data {self.actual}.")
