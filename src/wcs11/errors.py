"""Custom exception hierarchy for wcs11."""

from typing import Optional


class WCSError(Exception):
    """Base exception for wcs11 library."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(WCSError):
    """Map configuration and settings errors."""
    pass


class ServiceError(WCSError):
    """Errors related to misuse of the response transport."""
    pass


class OWSException(WCSError):
    """Error that is reported to the client as an OWS exception report."""

    code = "NoApplicableCode"
    status = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        locator: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        if code is not None:
            self.code = code
        self.locator = locator


class MissingOnlineResource(OWSException):
    """The externally reachable service URL cannot be determined."""
    pass


class CoverageNotDefined(OWSException):
    """A requested coverage identifier does not name a layer."""

    code = "CoverageNotDefined"
    status = 400

    def __init__(self, identifier: str, cause: Optional[Exception] = None):
        super().__init__(
            f"COVERAGE {identifier} cannot be opened / does not exist",
            locator=identifier,
            cause=cause,
        )
        self.identifier = identifier


class MetadataResolutionFailure(OWSException):
    """Coverage metadata for a layer could not be computed."""
    pass


class ImageEncodingFailure(OWSException):
    """The rendered coverage could not be encoded."""
    pass
