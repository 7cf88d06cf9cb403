"""
Coverage metadata derived from layer configuration.

Sizes and extents come from the layer's ``extent``, ``size`` and
``resolution`` metadata (or the layer extent); datasets are never opened.
"""

import logging
from typing import Optional, Tuple

from pydantic import ValidationError
from pyproj.exceptions import CRSError, ProjError

from .core import transform_extent
from .errors import MetadataResolutionFailure
from .metadata import MetadataDictionary
from .projection import ProjectionResolver, token_to_urn
from .types import CoverageMetadata, Extent, Layer

logger = logging.getLogger(__name__)

WGS84_URN = "urn:ogc:def:crs:EPSG::4326"


def default_rangeset_metadata(metadata: MetadataDictionary, bandcount: int) -> MetadataDictionary:
    """
    Overlay the default "bands" range-set description onto layer metadata.

    Keys the layer already defines are left alone and the layer's own
    dictionary is not modified.
    """
    if metadata.lookup("COM", "rangeset_axes") is not None:
        return metadata
    return metadata.with_defaults({
        "wcs_rangeset_axes": "bands",
        "wcs_bands_name": "bands",
        "wcs_bands_label": "Bands",
        "wcs_bands_rangeitem": "_bands",
        "wcs_bands_values": ",".join(str(band) for band in range(1, bandcount + 1)),
    })


class CoverageMetadataResolver:
    """Compute pixel size, extents, geotransform and native CRS for a layer."""

    namespaces = "COM"

    def __init__(self, projections: Optional[ProjectionResolver] = None):
        self.projections = projections or ProjectionResolver()

    def resolve(self, layer: Layer) -> CoverageMetadata:
        """
        Build a fresh CoverageMetadata for ``layer``.

        Raises:
            MetadataResolutionFailure: If the CRS, extent or grid size is unknown
        """
        srs_urn = self._native_urn(layer)
        extent = self._extent(layer)
        xsize, ysize = self._size(layer, extent)

        xres = (extent.maxx - extent.minx) / xsize
        yres = (extent.maxy - extent.miny) / ysize
        geotransform = (extent.minx, xres, 0.0, extent.maxy, 0.0, -yres)

        llextent = self._llextent(layer, extent, srs_urn)
        try:
            return CoverageMetadata(
                xsize=xsize,
                ysize=ysize,
                extent=extent,
                llextent=llextent,
                geotransform=geotransform,
                srs_urn=srs_urn,
                bandcount=self._bandcount(layer),
            )
        except ValidationError as exc:
            raise MetadataResolutionFailure(
                f"Inconsistent coverage metadata for layer '{layer.name}'", cause=exc
            ) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _native_urn(self, layer: Layer) -> str:
        sources = [(layer.projection, layer.metadata)]
        if layer.map is not None:
            sources.append((layer.map.projection, layer.map.metadata))

        for projection, metadata in sources:
            for token in self.projections.epsg_codes(projection, metadata):
                urn = token_to_urn(token)
                if urn is not None:
                    return urn

        raise MetadataResolutionFailure(f"Unable to determine the SRS for layer '{layer.name}'")

    def _extent(self, layer: Layer) -> Extent:
        value = layer.metadata.lookup(self.namespaces, "extent")
        if value:
            try:
                return Extent.from_string(value)
            except ValueError as exc:
                raise MetadataResolutionFailure(
                    f"Invalid extent metadata '{value}' on layer '{layer.name}'", cause=exc
                ) from exc
        if layer.extent is not None:
            return layer.extent
        raise MetadataResolutionFailure(f"Unable to determine the extent of layer '{layer.name}'")

    def _size(self, layer: Layer, extent: Extent) -> Tuple[int, int]:
        size = layer.metadata.lookup(self.namespaces, "size")
        if size:
            xsize, ysize = self._pair(layer, "size", size)
            result = (int(xsize), int(ysize))
        else:
            resolution = layer.metadata.lookup(self.namespaces, "resolution")
            if not resolution:
                raise MetadataResolutionFailure(
                    f"Layer '{layer.name}' defines neither size nor resolution metadata"
                )
            xres, yres = self._pair(layer, "resolution", resolution)
            if xres <= 0 or yres <= 0:
                raise MetadataResolutionFailure(f"Resolution of layer '{layer.name}' must be positive")
            result = (
                int((extent.maxx - extent.minx) / xres + 0.5),
                int((extent.maxy - extent.miny) / yres + 0.5),
            )

        if result[0] <= 0 or result[1] <= 0:
            raise MetadataResolutionFailure(f"Layer '{layer.name}' has an empty grid {result}")
        return result

    @staticmethod
    def _pair(layer: Layer, key: str, value: str) -> Tuple[float, float]:
        parts = value.split()
        try:
            if len(parts) != 2:
                raise ValueError("expected two numbers")
            return float(parts[0]), float(parts[1])
        except ValueError as exc:
            raise MetadataResolutionFailure(
                f"Invalid {key} metadata '{value}' on layer '{layer.name}'", cause=exc
            ) from exc

    def _llextent(self, layer: Layer, extent: Extent, srs_urn: str) -> Extent:
        if srs_urn == WGS84_URN:
            return extent
        try:
            return transform_extent(extent, srs_urn)
        except (CRSError, ProjError, ValidationError) as exc:
            raise MetadataResolutionFailure(
                f"Unable to compute the WGS84 extent of layer '{layer.name}'", cause=exc
            ) from exc

    def _bandcount(self, layer: Layer) -> int:
        value = layer.metadata.lookup(self.namespaces, "bandcount")
        if value is None:
            return 1
        try:
            return max(1, int(value))
        except ValueError:
            logger.debug("Ignoring invalid bandcount '%s' on layer '%s'", value, layer.name)
            return 1
