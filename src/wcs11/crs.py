"""Supported CRS resolution for coverages."""

import logging
from typing import List, Optional

from .projection import ProjectionResolver
from .types import Layer

logger = logging.getLogger(__name__)


class CRSResolver:
    """
    Resolve the CRS URNs a layer can be served in.

    The layer's own projection and metadata are tried first; the owning map's
    projection and web metadata are only used when the layer yields nothing.
    """

    def __init__(self, projections: Optional[ProjectionResolver] = None):
        self.projections = projections or ProjectionResolver()

    def resolve(self, layer: Layer) -> List[str]:
        urns = self.projections.urns(layer.projection, layer.metadata)
        if urns:
            return urns

        owner = layer.map
        if owner is not None:
            urns = self.projections.urns(owner.projection, owner.metadata)
            if urns:
                return urns

        logger.debug("Layer '%s': missing required information, no CRS defined", layer.name)
        return []
