"""Supported output format (MIME type) resolution."""

import logging
from typing import List, Optional

from .core import UniqueNameList, split_list
from .types import Layer, MapConfig

logger = logging.getLogger(__name__)

DEFAULT_LAYER_FORMATS = "GTiff"


class FormatCatalog:
    """
    Resolve the MIME types a layer, or the whole server, can deliver.

    A layer lists format names in its ``formats`` metadata (space separated,
    ``GTiff`` by default). Without a layer every raster-capable output format
    of the map is offered. Names are mapped to MIME types and duplicate MIME
    types, compared ignoring case, are dropped.
    """

    namespaces = "COM"

    def format_names(self, map_config: MapConfig, layer: Optional[Layer] = None) -> List[str]:
        if layer is not None:
            value = layer.metadata.lookup(self.namespaces, "formats", DEFAULT_LAYER_FORMATS)
            return split_list(value, " ")
        return [fmt.name for fmt in map_config.output_formats if fmt.is_raster]

    def resolve(self, map_config: MapConfig, layer: Optional[Layer] = None) -> List[str]:
        mimetypes = UniqueNameList()
        for name in self.format_names(map_config, layer):
            output_format = map_config.get_output_format(name)
            if output_format is None:
                logger.debug("Failed to find output format info on format '%s', ignoring", name)
                continue
            if not output_format.mimetype:
                logger.debug("No mimetype for format '%s', ignoring", name)
                continue
            if not mimetypes.add(output_format.mimetype):
                logger.debug(
                    "Format '%s' ignored since mimetype '%s' duplicates another output format",
                    name,
                    output_format.mimetype,
                )
        return mimetypes.to_list()

    def resolve_string(self, map_config: MapConfig, layer: Optional[Layer] = None) -> str:
        """Comma-joined form of :meth:`resolve`."""
        return ",".join(self.resolve(map_config, layer))
