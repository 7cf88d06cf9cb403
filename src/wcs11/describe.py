"""
WCS 1.1 DescribeCoverage document generation.
"""

import logging
from typing import List, Optional

import xml.etree.ElementTree as ET

from .capabilities import add_bounding_boxes, add_coverage_identity
from .config import WCSSettings
from .core import format_numbers
from .coverage_metadata import CoverageMetadataResolver, default_rangeset_metadata
from .crs import CRSResolver
from .document import Document
from .errors import CoverageNotDefined, MetadataResolutionFailure
from .formats import FormatCatalog
from .ows import OWSCommonBuilder
from .response import Transport
from .types import Layer, MapConfig, RequestParams

logger = logging.getLogger(__name__)

GRID_TYPE = "urn:ogc:def:method:WCS:1.1:2dSimpleGrid"
GRID_CS = "urn:ogc:def:cs:OGC:0.0:Grid2dSquareCS"


def normalize_identifiers(coverages: List[str]) -> List[str]:
    """
    Treat a single comma separated value like repeated parameters.

    ``["a,b,c"]`` becomes ``["a", "b", "c"]``; longer lists are kept as given.
    Tokens are not stripped, so ``" "`` names a (missing) coverage.
    """
    if len(coverages) == 1:
        return [token for token in coverages[0].split(",") if token]
    return list(coverages)


class CoverageDescriptionBuilder:
    """Assembles the WCS 1.1 ``CoverageDescriptions`` document."""

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

    def target_layers(self, map_config: MapConfig, params: RequestParams) -> List[Layer]:
        """
        Resolve the requested identifiers to layers, or every layer if none were requested.

        Raises:
            CoverageNotDefined: For the first identifier that names no layer
        """
        identifiers = normalize_identifiers(params.coverages)
        if not identifiers:
            return list(map_config.layers)

        layers = []
        for identifier in identifiers:
            layer = map_config.get_layer(identifier)
            if layer is None:
                raise CoverageNotDefined(identifier)
            layers.append(layer)
        return layers

    def build(self, map_config: MapConfig, params: RequestParams) -> Document:
        """Build the document. ``params`` is released on return."""
        with params:
            layers = self.target_layers(map_config, params)

            doc = Document("CoverageDescriptions", version=params.version or self.settings.default_version)
            for layer in layers:
                self.coverage_description(doc, doc.root, map_config, layer)
            return doc

    def respond(self, map_config: MapConfig, params: RequestParams, transport: Transport) -> None:
        payload = self.build(map_config, params).serialize(self.settings.encoding, self.settings.pretty_print)
        transport.start("text/xml")
        transport.write(payload)
        logger.info("Wrote WCS coverage descriptions for map '%s'", map_config.name)

    def coverage_description(
        self, doc: Document, parent: ET.Element, map_config: MapConfig, layer: Layer
    ) -> Optional[ET.Element]:
        """Append a CoverageDescription, or nothing for layers that cannot be served or resolved."""
        if layer.map is None:
            logger.debug("Layer '%s' has no owning map, skipping", layer.name)
            return None
        if not layer.wcs_supported:
            logger.debug("Layer '%s' is not served through WCS, skipping", layer.name)
            return None

        try:
            cm = self.coverage_metadata.resolve(layer)
        except MetadataResolutionFailure as exc:
            logger.warning("Skipping coverage description of layer '%s': %s", layer.name, exc)
            return None
        metadata = default_rangeset_metadata(layer.metadata, cm.bandcount)

        node = doc.child(parent, "CoverageDescription")
        add_coverage_identity(doc, node, layer)

        spatial = doc.child(doc.child(node, "Domain"), "SpatialDomain")
        add_bounding_boxes(doc, spatial, self.ows, cm)

        grid = doc.child(spatial, "GridCRS")
        doc.child(grid, "GridBaseCRS", cm.srs_urn)
        doc.child(grid, "GridType", GRID_TYPE)
        doc.child(grid, "GridOrigin", format_numbers(cm.grid_origin))
        doc.child(grid, "GridOffsets", format_numbers(cm.grid_offsets))
        doc.child(grid, "GridCS", GRID_CS)

        field = doc.child(doc.child(node, "Range"), "Field")
        label = metadata.lookup("COM", "rangeset_label")
        if label:
            doc.child(field, "ows:Title", label)
        doc.child(field, "Identifier", metadata.lookup("COM", "rangeset_name", "bands"))

        methods = doc.child(field, "InterpolationMethods")
        doc.child(methods, "DefaultMethod", "nearest neighbour")
        doc.child(methods, "OtherMethod", "bilinear")

        # Only the first band is listed as an axis key for now.
        axis = doc.child(field, "Axis", attributes={"identifier": "Band"})
        doc.children(doc.child(axis, "AvailableKeys"), "Key", ["1"])

        doc.children(node, "SupportedCRS", self.crs.resolve(layer))
        doc.children(node, "SupportedFormat", self.formats.resolve(map_config, layer))
        return node
