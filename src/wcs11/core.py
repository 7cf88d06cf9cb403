"""
Core generic helpers shared by the WCS document builders.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Sequence

from pyproj.transformer import Transformer

from .types import Extent

logger = logging.getLogger(__name__)


# Ordered unique lists


class UniqueNameList:
    """
    Insertion-ordered list of strings that rejects case-insensitive duplicates.

    The first spelling that is added wins, later duplicates are dropped.

    Args:
        values: Optional initial values, added in order
    """

    def __init__(self, values: Optional[Iterable[str]] = None):
        self._items: List[str] = []
        self._seen = set()
        if values is not None:
            self.extend(values)

    def add(self, value: str) -> bool:
        """
        Append ``value`` unless an equal string (ignoring case) is present.

        Returns:
            True if the value was appended, False if it was a duplicate
        """
        key = value.casefold()
        if key in self._seen:
            return False
        self._seen.add(key)
        self._items.append(value)
        return True

    def extend(self, values: Iterable[str]) -> None:
        for value in values:
            self.add(value)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and value.casefold() in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"UniqueNameList({self._items!r})"

    def to_list(self) -> List[str]:
        return list(self._items)

    def join(self, separator: str = ",") -> str:
        return separator.join(self._items)


def split_list(value: Optional[str], separator: str = ",") -> List[str]:
    """Split a delimited metadata value, dropping empty tokens."""
    if not value:
        return []
    if separator == " ":
        return value.split()
    return [token.strip() for token in value.split(separator) if token.strip()]


# Number formatting


def format_number(value: float) -> str:
    """Format a coordinate the way C's ``%.15g`` does."""
    return "%.15g" % value


def format_numbers(values: Sequence[float]) -> str:
    return " ".join(format_number(value) for value in values)


# Extent operations


def transform_extent(extent: Extent, src_crs: str, dst_crs: str = "EPSG:4326") -> Extent:
    """
    Transform an extent from one CRS to another.

    Args:
        extent: Extent expressed in ``src_crs``
        src_crs: Source coordinate reference system (anything pyproj accepts)
        dst_crs: Destination coordinate reference system

    Returns:
        Extent covering the transformed area
    """
    transformer = Transformer.from_crs(src_crs, dst_crs, always_xy=True)
    minx, miny, maxx, maxy = transformer.transform_bounds(
        extent.minx, extent.miny, extent.maxx, extent.maxy
    )
    return Extent(minx=minx, miny=miny, maxx=maxx, maxy=maxy)
