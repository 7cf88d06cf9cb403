"""
OWS common fragments shared by OGC service documents.
"""

import logging
from typing import Iterable, Optional, Union

import xml.etree.ElementTree as ET

from .core import format_numbers, split_list
from .document import Document
from .types import Extent, MapConfig, RequestContext

logger = logging.getLogger(__name__)

NAMESPACES = "COM"


def terminate_online_resource(url: str) -> str:
    """Make sure ``url`` ends where query parameters can be appended."""
    if url.endswith("?") or url.endswith("&"):
        return url
    return url + ("&" if "?" in url else "?")


def get_online_resource(map_config: MapConfig, request: Optional[RequestContext] = None) -> Optional[str]:
    """
    Resolve the externally reachable URL of the service.

    The ``onlineresource`` metadata wins; otherwise the URL is rebuilt from
    the incoming request. Returns None when neither is available.
    """
    value = map_config.metadata.lookup(NAMESPACES, "onlineresource")
    if value:
        return terminate_online_resource(value)

    if request is None or not request.host:
        logger.debug("No onlineresource metadata and no request host to build one from")
        return None

    scheme = "https" if request.https else "http"
    default_port = 443 if request.https else 80
    port = f":{request.port}" if request.port and request.port != default_port else ""
    script = request.script_name or "/"
    if not script.startswith("/"):
        script = "/" + script
    return terminate_online_resource(f"{scheme}://{request.host}{port}{script}")


class OWSCommonBuilder:
    """Builds the boilerplate ``ows:`` sections of a capabilities document."""

    def service_identification(
        self, doc: Document, parent: ET.Element, map_config: MapConfig, service_type: str, version: str
    ) -> ET.Element:
        metadata = map_config.metadata
        node = doc.child(parent, "ows:ServiceIdentification")
        doc.child(node, "ows:Title", metadata.lookup(NAMESPACES, "title", map_config.name))

        abstract = metadata.lookup(NAMESPACES, "abstract")
        if abstract:
            doc.child(node, "ows:Abstract", abstract)

        keywords = split_list(metadata.lookup(NAMESPACES, "keywordlist"))
        if keywords:
            doc.children(doc.child(node, "ows:Keywords"), "ows:Keyword", keywords)

        doc.child(node, "ows:ServiceType", service_type, {"codeSpace": "OGC"})
        doc.child(node, "ows:ServiceTypeVersion", version)
        doc.child(node, "ows:Fees", metadata.lookup(NAMESPACES, "fees", "NONE"))
        doc.child(node, "ows:AccessConstraints", metadata.lookup(NAMESPACES, "accessconstraints", "NONE"))
        return node

    def service_provider(self, doc: Document, parent: ET.Element, map_config: MapConfig) -> ET.Element:
        metadata = map_config.metadata
        node = doc.child(parent, "ows:ServiceProvider")
        doc.child(node, "ows:ProviderName", metadata.lookup(NAMESPACES, "contactorganization", ""))

        site = metadata.lookup(NAMESPACES, "service_onlineresource")
        if site:
            doc.child(node, "ows:ProviderSite", attributes={"xlink:type": "simple", "xlink:href": site})

        contact = doc.child(node, "ows:ServiceContact")
        self._optional(doc, contact, "ows:IndividualName", metadata.lookup(NAMESPACES, "contactperson"))
        self._optional(doc, contact, "ows:PositionName", metadata.lookup(NAMESPACES, "contactposition"))

        info = doc.child(contact, "ows:ContactInfo")
        phone = doc.child(info, "ows:Phone")
        self._optional(doc, phone, "ows:Voice", metadata.lookup(NAMESPACES, "contactvoicetelephone"))
        self._optional(doc, phone, "ows:Facsimile", metadata.lookup(NAMESPACES, "contactfacsimiletelephone"))

        address = doc.child(info, "ows:Address")
        for name, key in (
            ("ows:DeliveryPoint", "address"),
            ("ows:City", "city"),
            ("ows:AdministrativeArea", "stateorprovince"),
            ("ows:PostalCode", "postcode"),
            ("ows:Country", "country"),
            ("ows:ElectronicMailAddress", "contactelectronicmailaddress"),
        ):
            self._optional(doc, address, name, metadata.lookup(NAMESPACES, key))
        return node

    def operations_metadata(self, doc: Document, parent: ET.Element) -> ET.Element:
        return doc.child(parent, "ows:OperationsMetadata")

    def operation(self, doc: Document, parent: ET.Element, name: str, href: str) -> ET.Element:
        """An ``ows:Operation`` reachable with HTTP GET at ``href``."""
        node = doc.child(parent, "ows:Operation", attributes={"name": name})
        http = doc.child(doc.child(node, "ows:DCP"), "ows:HTTP")
        doc.child(http, "ows:Get", attributes={"xlink:type": "simple", "xlink:href": href})
        return node

    def domain_type(
        self,
        doc: Document,
        parent: ET.Element,
        element_name: str,
        name: str,
        values: Union[str, Iterable[str]],
    ) -> ET.Element:
        """A named domain whose values are a list or a comma separated string."""
        if isinstance(values, str):
            values = split_list(values)
        node = doc.child(parent, f"ows:{element_name}", attributes={"name": name})
        doc.children(node, "ows:Value", values)
        return node

    def bounding_box(
        self, doc: Document, parent: ET.Element, crs: str, minx: float, miny: float, maxx: float, maxy: float
    ) -> ET.Element:
        node = doc.child(parent, "ows:BoundingBox", attributes={"crs": crs, "dimensions": "2"})
        self._corners(doc, node, minx, miny, maxx, maxy)
        return node

    def wgs84_bounding_box(self, doc: Document, parent: ET.Element, extent: Extent) -> ET.Element:
        node = doc.child(parent, "ows:WGS84BoundingBox", attributes={"dimensions": "2"})
        self._corners(doc, node, *extent.as_tuple())
        return node

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _corners(doc: Document, node: ET.Element, minx: float, miny: float, maxx: float, maxy: float) -> None:
        doc.child(node, "ows:LowerCorner", format_numbers((minx, miny)))
        doc.child(node, "ows:UpperCorner", format_numbers((maxx, maxy)))

    @staticmethod
    def _optional(doc: Document, parent: ET.Element, name: str, value: Optional[str]) -> None:
        if value:
            doc.child(parent, name, value)
