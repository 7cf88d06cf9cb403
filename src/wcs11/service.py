"""WCS 1.1 request dispatching."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .capabilities import CapabilitiesBuilder
from .config import WCSSettings
from .coverage import CoverageResponseWrapper, ImageEncoder
from .coverage_metadata import CoverageMetadataResolver
from .crs import CRSResolver
from .describe import CoverageDescriptionBuilder
from .errors import OWSException
from .formats import FormatCatalog
from .ows import OWSCommonBuilder
from .response import ExceptionReporter, Transport
from .types import MapConfig, RequestContext, RequestParams

logger = logging.getLogger(__name__)


class WCS11Service:
    """
    Serves the three WCS 1.1 operations for one map.

    Each operation either writes its response to the transport and returns
    True, or writes an OWS exception report and returns False.
    """

    def __init__(
        self,
        map_config: MapConfig,
        *,
        settings: Optional[WCSSettings] = None,
        encoder: Optional[ImageEncoder] = None,
        formats: Optional[FormatCatalog] = None,
        crs: Optional[CRSResolver] = None,
        coverage_metadata: Optional[CoverageMetadataResolver] = None,
        ows: Optional[OWSCommonBuilder] = None,
    ) -> None:
        self.map = map_config
        self.settings = settings or WCSSettings()
        shared = dict(
            formats=formats or FormatCatalog(),
            crs=crs or CRSResolver(),
            coverage_metadata=coverage_metadata or CoverageMetadataResolver(),
            ows=ows or OWSCommonBuilder(),
            settings=self.settings,
        )
        self.capabilities = CapabilitiesBuilder(**shared)
        self.descriptions = CoverageDescriptionBuilder(**shared)
        self.coverages = CoverageResponseWrapper(encoder=encoder, settings=self.settings)
        self.reporter = ExceptionReporter(self.settings.exception_version, self.settings.encoding)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_capabilities(
        self, params: RequestParams, transport: Transport, request: Optional[RequestContext] = None
    ) -> bool:
        return self._run(lambda: self.capabilities.respond(self.map, params, transport, request), params, transport)

    def describe_coverage(self, params: RequestParams, transport: Transport) -> bool:
        return self._run(lambda: self.descriptions.respond(self.map, params, transport), params, transport)

    def get_coverage(self, params: RequestParams, image: Any, transport: Transport) -> bool:
        return self._run(lambda: self.coverages.send(params, self.map, image, transport), params, transport)

    def dispatch(
        self,
        params: RequestParams,
        transport: Transport,
        request: Optional[RequestContext] = None,
        image: Any = None,
    ) -> bool:
        """Route ``params`` to the operation named by ``params.request``."""
        operation = (params.request or "").lower()
        if operation == "getcapabilities":
            return self.get_capabilities(params, transport, request)
        if operation == "describecoverage":
            return self.describe_coverage(params, transport)
        if operation == "getcoverage":
            return self.get_coverage(params, image, transport)

        with params:
            self.reporter.report(
                OWSException(
                    f"WCS request '{params.request}' is not supported",
                    code="OperationNotSupported",
                    locator="request",
                ),
                transport,
            )
        return False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _run(self, operation: Callable[[], None], params: RequestParams, transport: Transport) -> bool:
        if not params.version:
            params.version = self.settings.default_version
        try:
            operation()
        except OWSException as exc:
            self.reporter.report(exc, transport)
            return False
        finally:
            # Builders release their params; this covers failures raised before they take ownership.
            if not params.released:
                params.release()
        return True
