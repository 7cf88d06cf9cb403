"""
Type definitions and models for WCS 1.1 document generation.
"""

from typing import Any, List, Optional, Tuple
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from .metadata import MetadataDictionary


class RendererKind(str, Enum):
    """Renderer categories of configured output formats."""
    GD = "GD"
    AGG = "AGG"
    RAWDATA = "RAWDATA"
    IMAGEMAP = "IMAGEMAP"
    SVG = "SVG"
    PDF = "PDF"
    TEMPLATE = "TEMPLATE"
    OGR = "OGR"
    OTHER = "OTHER"


# Output formats rendered by these are plausible WCS coverage encodings.
RASTER_RENDERERS = frozenset({RendererKind.GD, RendererKind.AGG, RendererKind.RAWDATA})


class LayerType(str, Enum):
    """Layer geometry types."""
    RASTER = "raster"
    POINT = "point"
    LINE = "line"
    POLYGON = "polygon"
    ANNOTATION = "annotation"


def _as_metadata(value: Any) -> MetadataDictionary:
    if value is None:
        return MetadataDictionary()
    if isinstance(value, MetadataDictionary):
        return value
    if isinstance(value, dict):
        return MetadataDictionary(value)
    raise ValueError("metadata must be a mapping of strings")


class OutputFormat(BaseModel):
    """Server-configured output format."""
    name: str = Field(..., description="Format name, e.g. GTiff")
    driver: str = Field(default="", description="Driver used to write the format")
    renderer: RendererKind = Field(default=RendererKind.OTHER, description="Renderer category")
    mimetype: str = Field(default="", description="MIME type, may be empty")
    extension: str = Field(default="", description="File extension without the dot")

    @property
    def is_raster(self) -> bool:
        return self.renderer in RASTER_RENDERERS


class Extent(BaseModel):
    """Rectangular extent in some CRS."""
    minx: float = Field(..., description="Minimum X coordinate")
    miny: float = Field(..., description="Minimum Y coordinate")
    maxx: float = Field(..., description="Maximum X coordinate")
    maxy: float = Field(..., description="Maximum Y coordinate")

    @model_validator(mode='after')
    def validate_coordinates(self):
        """Validate that min coordinates do not exceed max coordinates."""
        if self.minx > self.maxx:
            raise ValueError('minx must not exceed maxx')
        if self.miny > self.maxy:
            raise ValueError('miny must not exceed maxy')
        return self

    @classmethod
    def from_string(cls, value: str) -> "Extent":
        """Create an Extent from a ``"minx miny maxx maxy"`` string."""
        parts = value.split()
        if len(parts) != 4:
            raise ValueError(f"Invalid extent: {value!r}. Expected four numbers")
        minx, miny, maxx, maxy = (float(part) for part in parts)
        return cls(minx=minx, miny=miny, maxx=maxx, maxy=maxy)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.minx, self.miny, self.maxx, self.maxy)


class Layer(BaseModel):
    """A configured layer; only some layers can be served as coverages."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    type: LayerType = LayerType.RASTER
    connection_type: Optional[str] = Field(None, description="Connection type, e.g. 'wms' for cascaded layers")
    dump: bool = Field(default=False, description="Whether raw data may be served")
    projection: Optional[str] = Field(None, description="Projection definition, e.g. 'init=epsg:26915'")
    extent: Optional[Extent] = None
    metadata: MetadataDictionary = Field(default_factory=MetadataDictionary)

    _map: Optional["MapConfig"] = PrivateAttr(default=None)

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, value: Any) -> MetadataDictionary:
        return _as_metadata(value)

    @property
    def map(self) -> Optional["MapConfig"]:
        """Owning map, or None when the layer is not attached."""
        return self._map

    def attach(self, map_config: Optional["MapConfig"]) -> None:
        self._map = map_config

    @property
    def wcs_supported(self) -> bool:
        """Only raster layers with raw data access, and not cascaded WMS layers, are coverages."""
        if self.type != LayerType.RASTER:
            return False
        if (self.connection_type or "").lower() == "wms":
            return False
        return self.dump


class MapConfig(BaseModel):
    """Server-wide configuration: layers, output formats and web metadata."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = "WCS"
    projection: Optional[str] = None
    extent: Optional[Extent] = None
    metadata: MetadataDictionary = Field(default_factory=MetadataDictionary)
    output_formats: List[OutputFormat] = Field(default_factory=list)
    output_format: Optional[str] = Field(None, description="Name of the format used for GetCoverage")
    layers: List[Layer] = Field(default_factory=list)

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, value: Any) -> MetadataDictionary:
        return _as_metadata(value)

    @model_validator(mode='after')
    def attach_layers(self):
        """Point every layer back at this map."""
        for layer in self.layers:
            layer.attach(self)
        return self

    def add_layer(self, layer: Layer) -> Layer:
        self.layers.append(layer)
        layer.attach(self)
        return layer

    def get_layer(self, name: str) -> Optional[Layer]:
        """Find a layer by exact name."""
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def get_output_format(self, name: str) -> Optional[OutputFormat]:
        """Find an output format by name, ignoring case."""
        wanted = name.lower()
        for output_format in self.output_formats:
            if output_format.name.lower() == wanted:
                return output_format
        return None

    @property
    def selected_output_format(self) -> Optional[OutputFormat]:
        if not self.output_format:
            return None
        return self.get_output_format(self.output_format)

    def wcs_layers(self) -> List[Layer]:
        return [layer for layer in self.layers if layer.wcs_supported]


class CoverageMetadata(BaseModel):
    """Per-request description of a coverage's grid and extents."""
    xsize: int = Field(..., gt=0, description="Width in pixels")
    ysize: int = Field(..., gt=0, description="Height in pixels")
    extent: Extent = Field(..., description="Extent in the native CRS")
    llextent: Extent = Field(..., description="Extent in WGS84 longitude/latitude")
    geotransform: Tuple[float, float, float, float, float, float] = Field(
        ..., description="Affine pixel/line to CRS transform"
    )
    srs_urn: str = Field(..., description="Native CRS URN")
    bandcount: int = Field(default=1, gt=0)

    @property
    def grid_origin(self) -> Tuple[float, float]:
        """Georeferenced position of the centre of the first pixel."""
        gt = self.geotransform
        return (gt[0] + gt[1] / 2 + gt[2] / 2, gt[3] + gt[4] / 2 + gt[5] / 2)

    @property
    def grid_offsets(self) -> Tuple[float, float]:
        """Signed pixel size along X and Y."""
        return (self.geotransform[1], self.geotransform[5])


class RequestParams(BaseModel):
    """
    Parsed WCS request parameters.

    A builder that is handed a RequestParams owns it and releases it with
    ``with params:`` so the release happens on every exit path.
    """
    version: str = Field(default="1.1.0", description="Negotiated protocol version")
    request: Optional[str] = None
    coverages: List[str] = Field(default_factory=list, description="Requested identifiers, empty means all")
    format: Optional[str] = None

    _released: bool = PrivateAttr(default=False)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        self.coverages = []
        self._released = True

    def __enter__(self) -> "RequestParams":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class RequestContext(BaseModel):
    """Details of the incoming HTTP request used to rebuild the service URL."""
    host: Optional[str] = None
    port: Optional[int] = None
    script_name: str = ""
    https: bool = False


Layer.model_rebuild()
