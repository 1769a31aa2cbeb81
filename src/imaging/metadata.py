import logging
from typing import Any, Protocol

from pydicom.dataset import Dataset
from pydicom.datadict import tag_for_keyword
from pydicom.multival import MultiValue
from pydicom.tag import Tag

logger = logging.getLogger(__name__)

# DICOM tags (group, element) read by the pipeline.
RESCALE_INTERCEPT = (0x0028, 0x1052)
RESCALE_SLOPE = (0x0028, 0x1053)
ROWS = (0x0028, 0x0010)
COLUMNS = (0x0028, 0x0011)


class MetadataStore(Protocol):
    """Keyed per-image attributes with a fallback for absent entries."""

    def get_double(self, tag: tuple[int, int], default: float) -> float: ...

    def get_int(self, tag: tuple[int, int], default: int) -> int: ...


def _first(value: Any) -> Any:
    """Returns the first item of a multi-valued element, the value itself otherwise."""
    if isinstance(value, (MultiValue, list, tuple)):
        return value[0] if len(value) > 0 else None
    return value


def _normalize_key(key: str | tuple[int, int]) -> tuple[int, int]:
    """Resolves a DICOM keyword (e.g. 'RescaleSlope') or a (group, element) pair to a tuple."""
    if isinstance(key, str):
        tag = tag_for_keyword(key)
        if tag is None:
            raise KeyError(f"Unknown DICOM keyword: '{key}'")
        key = Tag(tag)
    else:
        key = Tag(key)
    return (key.group, key.element)


class DictMetadataStore:
    """A plain dictionary acting as a metadata store.

    Keys may be DICOM keywords or (group, element) tuples; both are stored as tuples.
    """

    def __init__(self, values: dict | None = None) -> None:
        self._values: dict[tuple[int, int], Any] = {}
        for key, value in (values or {}).items():
            self._values[_normalize_key(key)] = value

    def _lookup(self, tag: tuple[int, int]) -> Any:
        return _first(self._values.get(_normalize_key(tag)))

    def get_double(self, tag: tuple[int, int], default: float) -> float:
        value = self._lookup(tag)
        return default if value is None else float(value)

    def get_int(self, tag: tuple[int, int], default: int) -> int:
        value = self._lookup(tag)
        return default if value is None else int(value)

    def __contains__(self, tag: tuple[int, int]) -> bool:
        return self._lookup(tag) is not None

    def __repr__(self) -> str:
        return f"DictMetadataStore({self._values})"


class DatasetMetadataStore:
    """Read-only view of a pydicom Dataset through the metadata store interface.

    Absent or empty elements resolve to the caller's default.
    """

    def __init__(self, dataset: Dataset) -> None:
        self.dataset = dataset

    def _lookup(self, tag: tuple[int, int]) -> Any:
        element = self.dataset.get(Tag(tag))
        if element is None or element.value is None or element.value == "":
            return None
        return _first(element.value)

    def get_double(self, tag: tuple[int, int], default: float) -> float:
        value = self._lookup(tag)
        if value is None:
            logger.debug(f"Tag {Tag(tag)} absent, using default {default}")
            return default
        return float(value)

    def get_int(self, tag: tuple[int, int], default: int) -> int:
        value = self._lookup(tag)
        if value is None:
            logger.debug(f"Tag {Tag(tag)} absent, using default {default}")
            return default
        return int(value)

    def __contains__(self, tag: tuple[int, int]) -> bool:
        return self._lookup(tag) is not None
