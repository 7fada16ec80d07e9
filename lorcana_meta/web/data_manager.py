"""
Data manager for caching and efficient corpus access.
"""
import logging
from pathlib import Path
from typing import Optional

from ..corpus.loader import MetaCache, MetaSnapshot, load_tournament_meta

_LOG = logging.getLogger(__name__)


class DataManager:
    """Owns the corpus cache for one web process."""

    def __init__(self, meta_path: Optional[Path] = None):
        self.meta_path = meta_path
        self.cache = MetaCache()

    def get_snapshot(self, force_refresh: bool = False) -> MetaSnapshot:
        """Get the parsed corpus, reparsing only when the file changed."""
        if force_refresh:
            _LOG.info("Forcing corpus reload")
            self.cache.clear()
        return load_tournament_meta(self.meta_path, cache=self.cache)

    def set_meta_path(self, meta_path: Optional[Path]) -> None:
        self.meta_path = meta_path
        self.cache.clear()
