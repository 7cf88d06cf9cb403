"""Namespaced metadata lookups for layers and maps."""

from typing import Any, Dict, Iterator, Mapping, Optional

# Single-letter namespace codes, e.g. "COM" searches wcs_, ows_ then wms_.
NAMESPACE_PREFIXES: Dict[str, str] = {
    "C": "wcs_",
    "O": "ows_",
    "M": "wms_",
    "F": "wfs_",
    "G": "gml_",
    "S": "sos_",
}


class MetadataDictionary(Mapping[str, str]):
    """
    Case-insensitive string dictionary with namespaced lookups.

    Keys keep the spelling they were configured with; lookups ignore case.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, str] = {}
        self._keys: Dict[str, str] = {}
        for key, value in (values or {}).items():
            self._keys[key.lower()] = key
            self._data[key] = str(value)

    def __getitem__(self, key: str) -> str:
        return self._data[self._keys[key.lower()]]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MetadataDictionary({self._data!r})"

    def lookup(self, namespaces: str, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Look up ``name`` under each namespace prefix in turn.

        Args:
            namespaces: Namespace codes to search in order, e.g. ``"COM"``
            name: Unprefixed metadata key, e.g. ``"formats"``
            default: Value returned when no namespace defines the key

        Returns:
            The first matching value, or ``default``
        """
        for code in namespaces:
            prefix = NAMESPACE_PREFIXES.get(code.upper())
            if prefix is None:
                continue
            value = self.get(prefix + name)
            if value is not None:
                return value
        return default

    def with_defaults(self, defaults: Mapping[str, str]) -> "MetadataDictionary":
        """Return a copy where keys missing from this dictionary take ``defaults``."""
        merged: Dict[str, str] = {}
        for key, value in defaults.items():
            if key not in self:
                merged[key] = value
        merged.update(self._data)
        return MetadataDictionary(merged)
