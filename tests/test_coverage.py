"""Tests for the GetCoverage multipart response."""

import xml.etree.ElementTree as ET

import numpy as np
import pytest

from wcs11.coverage import BOUNDARY, CoverageResponseWrapper, RawImageEncoder, coverages_manifest
from wcs11.errors import ImageEncodingFailure, OWSException
from wcs11.response import Transport
from wcs11.service import WCS11Service
from wcs11.types import OutputFormat, RequestParams

NS = {
    "wcs": "http://www.opengis.net/wcs/1.1",
    "xlink": "http://www.w3.org/1999/xlink",
}


class FailingEncoder:
    def encode(self, image, output_format):
        raise ValueError("unsupported pixel type")


class CrashingEncoder:
    def encode(self, image, output_format):
        raise RuntimeError("driver crashed")


class RecordingEncoder:
    def __init__(self):
        self.formats = []

    def encode(self, image, output_format):
        self.formats.append(output_format.name)
        return b"data"


class TestRawImageEncoder:

    def test_encodes_array_bytes(self):
        image = np.arange(6, dtype=np.uint8).reshape(2, 3)
        fmt = OutputFormat(name="raw", driver="raw")

        assert RawImageEncoder().encode(image, fmt) == bytes(range(6))

    def test_non_contiguous_array_is_c_ordered(self):
        image = np.arange(6, dtype=np.uint8).reshape(2, 3).T
        fmt = OutputFormat(name="raw", driver="raw")

        assert RawImageEncoder().encode(image, fmt) == bytes([0, 3, 1, 4, 2, 5])

    @pytest.mark.parametrize("image", [np.zeros((0, 3)), "pixels", None])
    def test_rejects_empty_or_non_array_input(self, image):
        with pytest.raises(ImageEncodingFailure):
            RawImageEncoder().encode(image, OutputFormat(name="raw", driver="raw"))


def test_coverages_manifest_references_data_part():
    payload = coverages_manifest("tif")

    assert payload.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
    root = ET.fromstring(payload)
    assert root.tag == "{http://www.opengis.net/wcs/1.1}Coverages"
    reference = root.find("wcs:Coverage/wcs:Reference", NS)
    assert reference.get("{http://www.w3.org/1999/xlink}href") == "cid:coverage/wcs.tif"


class TestCoverageResponseWrapper:
    """Test the multipart layout of a coverage response."""

    def setup_method(self):
        self.wrapper = CoverageResponseWrapper()
        self.image = np.zeros((2, 2), dtype=np.uint8)

    def test_multipart_layout(self, map_config):
        transport = Transport()

        self.wrapper.send(RequestParams(), map_config, self.image, transport)

        assert transport.content_type == f"multipart/mixed; boundary={BOUNDARY}"
        assert transport.getvalue().startswith(b"Content-Type: multipart/mixed; boundary=wcs\n\n")
        body = transport.body
        assert body.startswith(b"--wcs\nContent-Type: text/xml\nContent-ID: wcs.xml\n\n")
        assert body.count(b"--wcs\n") == 2
        assert body.endswith(b"\n--wcs--\n")

    def test_data_part_headers_and_payload(self, map_config):
        transport = Transport()

        self.wrapper.send(RequestParams(), map_config, self.image, transport)

        _, _, data_part = transport.body.partition(b"\n--wcs\n")
        headers, _, data = data_part.partition(b"\n\n")
        assert headers.split(b"\n") == [
            b"Content-Type: image/tiff",
            b"Content-Description: coverage data",
            b"Content-Transfer-Encoding: binary",
            b"Content-ID: coverage/wcs.tif",
            b"Content-Disposition: INLINE",
        ]
        assert data == b"\x00\x00\x00\x00\n--wcs--\n"

    def test_manifest_part_matches_extension(self, map_config):
        transport = Transport()

        self.wrapper.send(RequestParams(), map_config, self.image, transport)

        manifest_part, _, _ = transport.body.partition(b"\n--wcs\n")
        _, _, manifest = manifest_part.partition(b"\n\n")
        reference = ET.fromstring(manifest).find("wcs:Coverage/wcs:Reference", NS)
        assert reference.get("{http://www.w3.org/1999/xlink}href") == "cid:coverage/wcs.tif"

    def test_extension_defaults_to_lowercased_format_name(self, map_factory):
        formats = [OutputFormat(name="ENVI", driver="GDAL/ENVI", mimetype="application/x-envi")]
        map_config = map_factory(output_formats=formats, output_format="envi")
        transport = Transport()

        self.wrapper.send(RequestParams(), map_config, self.image, transport)

        assert b"Content-ID: coverage/wcs.envi\n" in transport.body
        assert b"Content-Type: application/x-envi\n" in transport.body

    @pytest.mark.parametrize("output_format", [None, "missing", "AAIGrid"])
    def test_no_usable_output_format_writes_nothing(self, map_factory, output_format):
        map_config = map_factory(output_format=output_format)
        params = RequestParams(coverages=["dem"])
        transport = Transport()

        with pytest.raises(OWSException):
            self.wrapper.send(params, map_config, self.image, transport)

        assert not transport.headers_sent
        assert transport.getvalue() == b""
        assert params.released

    def test_encoder_errors_are_wrapped(self, map_config):
        wrapper = CoverageResponseWrapper(encoder=FailingEncoder())
        params = RequestParams()
        transport = Transport()

        with pytest.raises(ImageEncodingFailure) as excinfo:
            wrapper.send(params, map_config, self.image, transport)

        assert isinstance(excinfo.value.cause, ValueError)
        assert transport.headers_sent
        assert params.released


    def test_any_encoder_error_is_wrapped(self, map_config):
        wrapper = CoverageResponseWrapper(encoder=CrashingEncoder())

        with pytest.raises(ImageEncodingFailure) as excinfo:
            wrapper.send(RequestParams(), map_config, self.image, Transport())

        assert isinstance(excinfo.value.cause, RuntimeError)

    @pytest.mark.parametrize("requested, expected", [
        ("PNG", "PNG"),
        ("png", "PNG"),
        ("image/png", "PNG"),
        ("IMAGE/TIFF", "GTiff"),
        (None, "GTiff"),
    ])
    def test_requested_format_selects_output(self, map_config, requested, expected):
        encoder = RecordingEncoder()
        transport = Transport()

        CoverageResponseWrapper(encoder=encoder).send(
            RequestParams(format=requested), map_config, self.image, transport
        )

        assert encoder.formats == [expected]
        assert f"Content-Type: {map_config.get_output_format(expected).mimetype}\n".encode() in transport.body

    @pytest.mark.parametrize("requested", ["image/jpeg", "AAIGrid"])
    def test_unknown_requested_format_writes_nothing(self, map_config, requested):
        transport = Transport()

        with pytest.raises(OWSException) as excinfo:
            self.wrapper.send(RequestParams(format=requested), map_config, self.image, transport)

        assert excinfo.value.code == "InvalidParameterValue"
        assert excinfo.value.locator == "format"
        assert transport.getvalue() == b""

@pytest.mark.integration
class TestGetCoverageThroughService:

    def test_encoding_failure_is_appended_to_started_stream(self, map_config):
        service = WCS11Service(map_config, encoder=FailingEncoder())
        transport = Transport()

        assert service.get_coverage(RequestParams(), np.zeros((2, 2)), transport) is False

        assert transport.status == 200
        assert transport.content_type == "multipart/mixed; boundary=wcs"
        body = transport.body
        assert b"Content-ID: coverage/wcs.tif" in body
        assert b"ows:ExceptionReport" in body
        assert not body.endswith(b"--wcs--\n")

    def test_unexpected_encoder_error_is_appended_to_started_stream(self, map_config):
        service = WCS11Service(map_config, encoder=CrashingEncoder())
        transport = Transport()

        assert service.get_coverage(RequestParams(), np.zeros((2, 2)), transport) is False

        assert transport.status == 200
        body = transport.body
        assert b"Content-ID: coverage/wcs.tif" in body
        assert b"ows:ExceptionReport" in body
        _, _, report = body.partition(b"Content-Disposition: INLINE\n\n")
        root = ET.fromstring(report)
        assert root.tag == "{http://www.opengis.net/ows/1.1}ExceptionReport"

    def test_missing_output_format_reports_error(self, map_factory):
        service = WCS11Service(map_factory(output_format=None))
        transport = Transport()

        assert service.get_coverage(RequestParams(), np.zeros((2, 2)), transport) is False

        assert transport.content_type == "text/xml"
        assert transport.status == 500
        assert b"--wcs" not in transport.getvalue()
        root = ET.fromstring(transport.body)
        assert root.tag == "{http://www.opengis.net/ows/1.1}ExceptionReport"

    def test_successful_coverage(self, map_config):
        service = WCS11Service(map_config)
        transport = Transport()

        assert service.get_coverage(RequestParams(), np.ones((3, 2), dtype=np.uint8), transport) is True

        assert transport.body.endswith(b"\x01" * 6 + b"\n--wcs--\n")
