"""
WCS 1.1 GetCoverage response wrapping.

A rendered coverage is returned as a two part ``multipart/mixed`` stream:
an XML manifest referencing the data, then the encoded data itself.
"""

import logging
from typing import Any, Optional, Protocol

import numpy as np

from .config import WCSSettings
from .document import OWS_NAMESPACE, WCS_NAMESPACE, XLINK_NAMESPACE, XSI_NAMESPACE, Document
from .errors import ImageEncodingFailure, OWSException
from .response import Transport
from .types import MapConfig, OutputFormat, RequestParams

logger = logging.getLogger(__name__)

BOUNDARY = "wcs"
COVERAGES_SCHEMA_LOCATION = "http://www.opengis.net/ows/1.1 ../owsCoverages.xsd"


class ImageEncoder(Protocol):
    """Serializes a rendered raster for an output format."""

    def encode(self, image: Any, output_format: OutputFormat) -> bytes:
        ...


class RawImageEncoder:
    """Writes numpy rasters as raw, C-ordered pixel data."""

    def encode(self, image: Any, output_format: OutputFormat) -> bytes:
        if not isinstance(image, np.ndarray):
            raise ImageEncodingFailure(
                f"Cannot encode {type(image).__name__} as {output_format.name}, expected a numpy array"
            )
        if image.size == 0:
            raise ImageEncodingFailure("Cannot encode an empty image")
        return np.ascontiguousarray(image).tobytes()


def coverages_manifest(extension: str) -> bytes:
    """The XML part pointing at the coverage data part."""
    doc = Document(
        "Coverages",
        namespaces={"": WCS_NAMESPACE, "ows": OWS_NAMESPACE, "xlink": XLINK_NAMESPACE, "xsi": XSI_NAMESPACE},
    )
    doc.set(doc.root, "xsi:schemaLocation", COVERAGES_SCHEMA_LOCATION)
    coverage = doc.child(doc.root, "Coverage")
    doc.child(coverage, "Reference", attributes={"xlink:href": f"cid:coverage/wcs.{extension}"})
    return doc.serialize("UTF-8")


class CoverageResponseWrapper:
    """Sends a rendered coverage with WCS 1.1 MIME wrapping."""

    def __init__(self, encoder: Optional[ImageEncoder] = None, settings: Optional[WCSSettings] = None):
        self.encoder = encoder or RawImageEncoder()
        self.settings = settings or WCSSettings()

    def send(self, params: RequestParams, map_config: MapConfig, image: Any, transport: Transport) -> None:
        """
        Write the multipart response. ``params`` is released on return.

        The headers and the manifest are committed before the image is
        encoded, so an encoding failure leaves a started stream behind.

        Raises:
            OWSException: If the map has no usable output format (nothing written)
            ImageEncodingFailure: If the encoder fails
        """
        with params:
            output_format = self.select_output_format(map_config, params)
            extension = output_format.extension or output_format.name.lower()

            transport.start(f"multipart/mixed; boundary={BOUNDARY}")
            transport.write(
                f"--{BOUNDARY}\n"
                "Content-Type: text/xml\n"
                "Content-ID: wcs.xml\n\n".encode("ascii")
            )
            transport.write(coverages_manifest(extension))
            transport.write(
                f"\n--{BOUNDARY}\n"
                f"Content-Type: {output_format.mimetype}\n"
                "Content-Description: coverage data\n"
                "Content-Transfer-Encoding: binary\n"
                f"Content-ID: coverage/wcs.{extension}\n"
                "Content-Disposition: INLINE\n\n".encode("ascii")
            )

            try:
                data = self.encoder.encode(image, output_format)
            except ImageEncodingFailure:
                raise
            except Exception as exc:
                raise ImageEncodingFailure(f"Failed to encode coverage as {output_format.name}", cause=exc) from exc

            transport.write(data)
            transport.write(f"\n--{BOUNDARY}--\n".encode("ascii"))
            logger.info("Wrote %d bytes of %s coverage data", len(data), output_format.mimetype)

    def select_output_format(self, map_config: MapConfig, params: RequestParams) -> OutputFormat:
        """
        The output format named by the request, or the map's selected one.

        A requested format is matched by name, then by mime type, ignoring case.

        Raises:
            OWSException: If the format is unknown or has no mime type
        """
        if params.format:
            output_format = map_config.get_output_format(params.format)
            if output_format is None:
                wanted = params.format.lower()
                output_format = next(
                    (f for f in map_config.output_formats if f.mimetype.lower() == wanted), None
                )
            if output_format is None or not output_format.mimetype:
                raise OWSException(
                    f"Output format '{params.format}' is not supported",
                    code="InvalidParameterValue",
                    locator="format",
                )
            return output_format

        output_format = map_config.selected_output_format
        if output_format is None or not output_format.mimetype:
            raise OWSException(f"No output format with a mime type selected for map '{map_config.name}'")
        return output_format
