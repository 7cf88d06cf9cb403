"""wcs11 - WCS 1.1 capabilities, coverage descriptions and coverage responses."""

from ._version import __version__

from .capabilities import CapabilitiesBuilder
from .config import WCSSettings, load_map
from .core import UniqueNameList
from .coverage import CoverageResponseWrapper, ImageEncoder, RawImageEncoder
from .coverage_metadata import CoverageMetadataResolver
from .crs import CRSResolver
from .describe import CoverageDescriptionBuilder
from .document import Document
from .errors import (
    ConfigurationError,
    CoverageNotDefined,
    ImageEncodingFailure,
    MetadataResolutionFailure,
    MissingOnlineResource,
    OWSException,
    ServiceError,
    WCSError,
)
from .formats import FormatCatalog
from .metadata import MetadataDictionary
from .ows import OWSCommonBuilder
from .projection import ProjectionResolver
from .response import ExceptionReporter, Transport
from .service import WCS11Service
from .types import (
    CoverageMetadata,
    Extent,
    Layer,
    LayerType,
    MapConfig,
    OutputFormat,
    RendererKind,
    RequestContext,
    RequestParams,
)

__all__ = [
    "__version__",
    "CapabilitiesBuilder",
    "WCSSettings",
    "load_map",
    "UniqueNameList",
    "CoverageResponseWrapper",
    "ImageEncoder",
    "RawImageEncoder",
    "CoverageMetadataResolver",
    "CRSResolver",
    "CoverageDescriptionBuilder",
    "Document",
    "ConfigurationError",
    "CoverageNotDefined",
    "ImageEncodingFailure",
    "MetadataResolutionFailure",
    "MissingOnlineResource",
    "OWSException",
    "ServiceError",
    "WCSError",
    "FormatCatalog",
    "MetadataDictionary",
    "OWSCommonBuilder",
    "ProjectionResolver",
    "ExceptionReporter",
    "Transport",
    "WCS11Service",
    "CoverageMetadata",
    "Extent",
    "Layer",
    "LayerType",
    "MapConfig",
    "OutputFormat",
    "RendererKind",
    "RequestContext",
    "RequestParams",
]
