"""
Minimal XML document builder used by the WCS response builders.

Elements are named with literal ``prefix:local`` names and every namespace
binding is declared on the root, so documents always carry the full binding
set whether or not a prefix ends up being used.
"""

import re
from typing import Dict, Mapping, Optional

import xml.etree.ElementTree as ET

from .errors import OWSException

WCS_NAMESPACE = "http://www.opengis.net/wcs/1.1"
OWS_NAMESPACE = "http://www.opengis.net/ows/1.1"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
OGC_NAMESPACE = "http://www.opengis.net/ogc"

WCS_NAMESPACES: Dict[str, str] = {
    "": WCS_NAMESPACE,
    "ows": OWS_NAMESPACE,
    "xlink": XLINK_NAMESPACE,
    "xsi": XSI_NAMESPACE,
    "ogc": OGC_NAMESPACE,
}

_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def is_xml_safe(text: str) -> bool:
    """True if ``text`` contains only characters XML 1.0 can carry."""
    return _XML_ILLEGAL.search(text) is None


def strip_unsafe(text: str) -> str:
    """Drop the characters XML 1.0 cannot carry."""
    return _XML_ILLEGAL.sub("", text)


class Document:
    """
    An XML document under construction.

    Args:
        root_name: Name of the root element, optionally prefixed
        namespaces: Prefix to URI bindings declared on the root ("" is the default namespace)
        version: Value of the root ``version`` attribute
    """

    def __init__(
        self,
        root_name: str,
        namespaces: Optional[Mapping[str, str]] = None,
        version: Optional[str] = None,
    ):
        self.namespaces = dict(WCS_NAMESPACES if namespaces is None else namespaces)
        self.root = ET.Element(self._name(root_name))
        for prefix, uri in self.namespaces.items():
            self.root.set(f"xmlns:{prefix}" if prefix else "xmlns", uri)
        if version is not None:
            self.root.set("version", version)

    def _name(self, name: str) -> str:
        prefix, _, local = name.rpartition(":")
        if prefix and prefix not in self.namespaces:
            raise ValueError(f"Namespace prefix '{prefix}' is not bound in this document")
        if not local:
            raise ValueError(f"Invalid element name: {name!r}")
        return name

    def child(
        self,
        parent: ET.Element,
        name: str,
        text: Optional[str] = None,
        attributes: Optional[Mapping[str, str]] = None,
    ) -> ET.Element:
        """
        Append a child element, with optional text and attributes, to ``parent``.

        Raises:
            OWSException: If the text or an attribute value cannot be written as XML
        """
        if text is not None:
            self._check(name, text)
        element = ET.SubElement(parent, self._name(name))
        for key, value in (attributes or {}).items():
            self.set(element, key, value)
        if text is not None:
            element.text = text
        return element

    def children(self, parent: ET.Element, name: str, values) -> None:
        """Append one ``name`` child per value."""
        for value in values:
            self.child(parent, name, value)

    def set(self, element: ET.Element, name: str, value: str) -> None:
        self._check(name, value)
        element.set(self._name(name), value)

    @staticmethod
    def _check(name: str, value: str) -> None:
        if not is_xml_safe(value):
            raise OWSException(f"Value of '{name}' contains characters that cannot be written as XML")

    def serialize(self, encoding: str = "ISO-8859-1", pretty_print: bool = True) -> bytes:
        """Serialize the document with an XML declaration."""
        if pretty_print:
            ET.indent(self.root, space="  ")
        return ET.tostring(self.root, encoding=encoding, xml_declaration=True)
