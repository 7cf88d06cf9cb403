"""Response transport and OWS exception reporting."""

import io
import logging
from typing import BinaryIO, Optional

from .document import OWS_NAMESPACE, XSI_NAMESPACE, Document, strip_unsafe
from .errors import OWSException, ServiceError

logger = logging.getLogger(__name__)

EXCEPTION_SCHEMA_LOCATION = (
    "http://www.opengis.net/ows/1.1 http://schemas.opengis.net/ows/1.1.0/owsExceptionReport.xsd"
)


class Transport:
    """
    CGI-style response sink: one ``Content-Type`` header line, a blank line, then the body.

    Args:
        stream: Binary stream receiving the response; an in-memory buffer by default
    """

    def __init__(self, stream: Optional[BinaryIO] = None):
        self.stream = stream if stream is not None else io.BytesIO()
        self.content_type: Optional[str] = None
        self.status = 200
        self.headers_sent = False

    def start(self, content_type: str, status: int = 200) -> None:
        """Commit the response headers; they cannot be changed afterwards."""
        if self.headers_sent:
            raise ServiceError(f"Response headers already sent as '{self.content_type}'")
        self.content_type = content_type
        self.status = status
        self.stream.write(f"Content-Type: {content_type}\n\n".encode("ascii"))
        self.headers_sent = True

    def write(self, data: bytes) -> None:
        if not self.headers_sent:
            raise ServiceError("Response body written before the headers")
        self.stream.write(data)

    def getvalue(self) -> bytes:
        """Everything written so far, for in-memory transports."""
        if not isinstance(self.stream, io.BytesIO):
            raise ServiceError("Only in-memory transports can be read back")
        return self.stream.getvalue()

    @property
    def body(self) -> bytes:
        _, _, body = self.getvalue().partition(b"\n\n")
        return body


class ExceptionReporter:
    """Renders OWS exception reports onto a transport."""

    def __init__(self, version: str = "1.1.0", encoding: str = "ISO-8859-1"):
        self.version = version
        self.encoding = encoding

    def build(self, exc: OWSException) -> Document:
        doc = Document(
            "ows:ExceptionReport",
            namespaces={"ows": OWS_NAMESPACE, "xsi": XSI_NAMESPACE},
            version=self.version,
        )
        doc.set(doc.root, "language", "en-US")
        doc.set(doc.root, "xsi:schemaLocation", EXCEPTION_SCHEMA_LOCATION)

        attributes = {"exceptionCode": exc.code}
        if exc.locator:
            attributes["locator"] = strip_unsafe(exc.locator)
        node = doc.child(doc.root, "ows:Exception", attributes=attributes)
        doc.child(node, "ows:ExceptionText", strip_unsafe(str(exc)))
        return doc

    def report(self, exc: OWSException, transport: Transport) -> None:
        """
        Write an exception report for ``exc``.

        When the headers are already on the wire the report is appended to
        the started body; the status and content type stay as they were.
        """
        logger.warning("WCS request failed with %s: %s", exc.code, exc)
        if not transport.headers_sent:
            transport.start("text/xml", status=exc.status)
        transport.write(self.build(exc).serialize(self.encoding))
