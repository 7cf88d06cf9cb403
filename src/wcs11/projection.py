"""Derive CRS URNs from projection definitions and srs metadata."""

import logging
import re
from typing import List, Optional

from pyproj import CRS as ProjCRS
from pyproj.exceptions import CRSError

from .core import UniqueNameList
from .metadata import MetadataDictionary

logger = logging.getLogger(__name__)

IMAGE_CRS_URN = "urn:ogc:def:crs:OGC::imageCRS"
_INIT_EPSG = re.compile(r"^\+?init=epsg:(\d+)$", re.IGNORECASE)
_EPSG_CODE = re.compile(r"^epsg:(\d+)$", re.IGNORECASE)


def epsg_to_urn(code: int) -> str:
    return f"urn:ogc:def:crs:EPSG::{code}"


def token_to_urn(token: str) -> Optional[str]:
    """Convert one srs token to a URN, or None when it has no URN form."""
    match = _EPSG_CODE.match(token)
    if match:
        return epsg_to_urn(int(match.group(1)))
    if token.lower() == "imagecrs":
        return IMAGE_CRS_URN
    if token.startswith("urn:ogc:def:crs:"):
        return token
    return None


class ProjectionResolver:
    """Resolve the CRS URNs advertised for a projection definition."""

    namespaces = "COM"

    def epsg_codes(self, projection: Optional[str], metadata: Optional[MetadataDictionary]) -> List[str]:
        """
        Return the srs tokens for a projection, e.g. ``["EPSG:4326"]``.

        The ``srs`` metadata item wins over the projection definition.
        """
        if metadata is not None:
            srs = metadata.lookup(self.namespaces, "srs")
            if srs:
                return srs.split()

        if not projection:
            return []

        definition = projection.strip()
        match = _INIT_EPSG.match(definition) or _EPSG_CODE.match(definition)
        if match:
            return [f"EPSG:{match.group(1)}"]

        try:
            code = ProjCRS.from_user_input(definition).to_epsg()
        except CRSError as exc:
            logger.debug("Unable to interpret projection '%s': %s", definition, exc)
            return []
        if code is None:
            logger.debug("Projection '%s' has no EPSG equivalent", definition)
            return []
        return [f"EPSG:{code}"]

    def urns(self, projection: Optional[str], metadata: Optional[MetadataDictionary]) -> List[str]:
        """Return the unique CRS URNs for a projection and its metadata."""
        result = UniqueNameList()
        for token in self.epsg_codes(projection, metadata):
            urn = token_to_urn(token)
            if urn is None:
                logger.debug("Skipping srs '%s' which has no URN form", token)
                continue
            result.add(urn)
        return result.to_list()
