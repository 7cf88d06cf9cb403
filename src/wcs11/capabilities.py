"""
WCS 1.1 GetCapabilities document generation.
"""

import logging
from typing import Optional

import xml.etree.ElementTree as ET

from .config import WCSSettings
from .core import UniqueNameList, split_list
from .coverage_metadata import CoverageMetadataResolver
from .crs import CRSResolver
from .document import Document, is_xml_safe
from .errors import MissingOnlineResource
from .formats import FormatCatalog
from .ows import OWSCommonBuilder, get_online_resource
from .projection import IMAGE_CRS_URN
from .response import Transport
from .types import CoverageMetadata, Layer, MapConfig, RequestContext, RequestParams

logger = logging.getLogger(__name__)

INTERPOLATION_TYPES = ("NEAREST_NEIGHBOUR", "BILINEAR")
GRID_BASE_CRS = "urn:ogc:def:crs:epsg::4326"


def add_coverage_identity(doc: Document, parent: ET.Element, layer: Layer) -> None:
    """Title, Identifier and Keywords of a coverage."""
    title = layer.metadata.lookup("COM", "description", layer.name)
    doc.child(parent, "ows:Title", title)
    doc.child(parent, "Identifier", layer.name)

    keywordlist = layer.metadata.lookup("COM", "keywordlist")
    if keywordlist is not None:
        keywords = doc.child(parent, "ows:Keywords")
        doc.children(keywords, "ows:Keyword", split_list(keywordlist))


def add_bounding_boxes(
    doc: Document, parent: ET.Element, ows: OWSCommonBuilder, cm: CoverageMetadata
) -> None:
    """The image, native and WGS84 bounding boxes, always in that order."""
    ows.bounding_box(doc, parent, IMAGE_CRS_URN, 0, 0, cm.xsize - 1, cm.ysize - 1)
    ows.bounding_box(doc, parent, cm.srs_urn, *cm.extent.as_tuple())
    ows.wgs84_bounding_box(doc, parent, cm.llextent)


class CapabilitiesBuilder:
    """
    Assembles the WCS 1.1 ``Capabilities`` document for a map.

    Args:
        formats: Output format resolver
        crs: Supported CRS resolver
        coverage_metadata: Per-layer grid and extent resolver
        ows: Builder for the OWS common sections
        settings: Encoding and formatting settings
    """

    service_type = "OGC WCS"

    def __init__(
        self,
        formats: Optional[FormatCatalog] = None,
        crs: Optional[CRSResolver] = None,
        coverage_metadata: Optional[CoverageMetadataResolver] = None,
        ows: Optional[OWSCommonBuilder] = None,
        settings: Optional[WCSSettings] = None,
    ):
        self.formats = formats or FormatCatalog()
        self.crs = crs or CRSResolver()
        self.coverage_metadata = coverage_metadata or CoverageMetadataResolver()
        self.ows = ows or OWSCommonBuilder()
        self.settings = settings or WCSSettings()

    def identifier_list(self, map_config: MapConfig) -> str:
        """Comma separated names of every coverage the map serves."""
        return UniqueNameList(layer.name for layer in map_config.wcs_layers()).join(",")

    def build(
        self, map_config: MapConfig, params: RequestParams, request: Optional[RequestContext] = None
    ) -> Document:
        """
        Build the capabilities document. ``params`` is released on return.

        Raises:
            MissingOnlineResource: If the service URL cannot be determined
            MetadataResolutionFailure: If any coverage summary cannot be built
        """
        with params:
            version = params.version or self.settings.default_version
            identifiers = self.identifier_list(map_config)

            doc = Document("Capabilities", version=version)
            self.ows.service_identification(doc, doc.root, map_config, self.service_type, version)
            self.ows.service_provider(doc, doc.root, map_config)

            href = get_online_resource(map_config, request)
            if href is None or not is_xml_safe(href):
                raise MissingOnlineResource(
                    "Unable to determine the online resource of the service", locator="onlineresource"
                )

            self._operations_metadata(doc, map_config, version, identifiers, href)

            contents = doc.child(doc.root, "Contents")
            for layer in map_config.wcs_layers():
                self.coverage_summary(doc, contents, map_config, layer)
            return doc

    def respond(
        self,
        map_config: MapConfig,
        params: RequestParams,
        transport: Transport,
        request: Optional[RequestContext] = None,
    ) -> None:
        """Build the document and write it; nothing is written if building fails."""
        payload = self.build(map_config, params, request).serialize(
            self.settings.encoding, self.settings.pretty_print
        )
        transport.start("text/xml")
        transport.write(payload)
        logger.info("Wrote WCS capabilities for map '%s'", map_config.name)

    def coverage_summary(
        self, doc: Document, parent: ET.Element, map_config: MapConfig, layer: Layer
    ) -> ET.Element:
        cm = self.coverage_metadata.resolve(layer)

        summary = doc.child(parent, "CoverageSummary")
        add_coverage_identity(doc, summary, layer)
        add_bounding_boxes(doc, summary, self.ows, cm)

        doc.children(summary, "SupportedFormat", self.formats.resolve(map_config, layer))
        doc.children(summary, "SupportedCRS", self.crs.resolve(layer))
        return summary

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _operations_metadata(
        self, doc: Document, map_config: MapConfig, version: str, identifiers: str, href: str
    ) -> None:
        ows = self.ows
        node = ows.operations_metadata(doc, doc.root)

        # TODO: advertise the Sections and AcceptVersions parameters.
        operation = ows.operation(doc, node, "GetCapabilities", href)
        ows.domain_type(doc, operation, "Parameter", "service", "WCS")
        ows.domain_type(doc, operation, "Parameter", "version", version)

        operation = ows.operation(doc, node, "DescribeCoverage", href)
        ows.domain_type(doc, operation, "Parameter", "service", "WCS")
        ows.domain_type(doc, operation, "Parameter", "version", version)
        ows.domain_type(doc, operation, "Parameter", "identifiers", identifiers)

        operation = ows.operation(doc, node, "GetCoverage", href)
        ows.domain_type(doc, operation, "Parameter", "service", "WCS")
        ows.domain_type(doc, operation, "Parameter", "version", version)
        ows.domain_type(doc, operation, "Parameter", "Identifier", identifiers)
        ows.domain_type(doc, operation, "Parameter", "InterpolationType", INTERPOLATION_TYPES)
        ows.domain_type(doc, operation, "Parameter", "format", self.formats.resolve(map_config))
        ows.domain_type(doc, operation, "Parameter", "store", "false")
        ows.domain_type(doc, operation, "Parameter", "GridBaseCRS", GRID_BASE_CRS)
