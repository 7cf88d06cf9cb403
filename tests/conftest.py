"""
Shared test configuration, fixtures, and markers for wcs11 tests.
"""

import io
import xml.etree.ElementTree as ET

import pytest

from wcs11.types import Layer, LayerType, MapConfig, OutputFormat, RendererKind, RequestParams


NS = {
    "wcs": "http://www.opengis.net/wcs/1.1",
    "ows": "http://www.opengis.net/ows/1.1",
    "xlink": "http://www.w3.org/1999/xlink",
    "xsi": "http://www.w3.org/2001/XMLSchema-instance",
    "ogc": "http://www.opengis.net/ogc",
}


def pytest_configure(config):
    """Configure test markers."""
    config.addinivalue_line("markers", "unit: marks unit tests (fast, pure logic)")
    config.addinivalue_line("markers", "property: marks property-based tests")
    config.addinivalue_line("markers", "integration: marks tests running a whole WCS operation")


def declared_namespaces(payload: bytes):
    """Namespace bindings declared anywhere in an XML document."""
    return [ns for _, ns in ET.iterparse(io.BytesIO(payload), events=("start-ns",))]


def build_output_formats():
    return [
        OutputFormat(name="GTiff", driver="GDAL/GTiff", renderer=RendererKind.RAWDATA,
                     mimetype="image/tiff", extension="tif"),
        OutputFormat(name="PNG", driver="AGG/PNG", renderer=RendererKind.AGG,
                     mimetype="image/png", extension="png"),
        OutputFormat(name="GeoTIFF", driver="GDAL/GTiff", renderer=RendererKind.RAWDATA,
                     mimetype="Image/Tiff", extension="tif"),
        OutputFormat(name="AAIGrid", driver="GDAL/AAIGrid", renderer=RendererKind.RAWDATA,
                     mimetype="", extension="grd"),
        OutputFormat(name="imagemap", driver="imagemap", renderer=RendererKind.IMAGEMAP,
                     mimetype="text/html", extension="html"),
        OutputFormat(name="pdf", driver="pdf", renderer=RendererKind.PDF,
                     mimetype="application/pdf", extension="pdf"),
    ]


def build_map(**overrides) -> MapConfig:
    """A map serving two coverages plus two layers that are not coverages."""
    values = dict(
        name="demo",
        projection="init=epsg:4326",
        metadata={
            "wcs_title": "Demo WCS",
            "ows_onlineresource": "http://example.com/cgi-bin/wcs",
            "wcs_contactorganization": "Example Org",
        },
        output_formats=build_output_formats(),
        output_format="GTiff",
        layers=[
            Layer(
                name="dem",
                dump=True,
                projection="init=epsg:4326",
                metadata={
                    "wcs_extent": "0 0 10 5",
                    "wcs_size": "100 50",
                    "wcs_description": "Elevation",
                    "wcs_keywordlist": "height,terrain",
                    "wcs_formats": "GTiff PNG",
                    "wcs_rangeset_label": "Elevation bands",
                },
            ),
            Layer(
                name="ortho",
                dump=True,
                metadata={
                    "wcs_extent": "100 170 400 200",
                    "wcs_resolution": "30 30",
                    "wcs_srs": "EPSG:4326 EPSG:3857",
                },
            ),
            Layer(name="roads", type=LayerType.POLYGON, dump=True),
            Layer(name="cascaded", connection_type="wms", dump=True),
        ],
    )
    values.update(overrides)
    return MapConfig(**values)


@pytest.fixture
def map_config():
    """Fresh demo map for each test."""
    return build_map()


@pytest.fixture
def params():
    return RequestParams(version="1.1.0")


@pytest.fixture
def map_factory():
    """Build demo maps with some fields overridden."""
    return build_map


@pytest.fixture
def namespaces_of():
    return declared_namespaces
