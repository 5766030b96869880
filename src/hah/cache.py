"""On-disk cache of generated PHP keyed by a hash of the .hah source and its settings."""

import hashlib
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def source_hash(key: str) -> str:
    """Hash a cache key for use as a file name."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


class SourceCache:
    """Stores generated source as ``<hash>.php`` files in one directory.

    ``key`` is any text that fully determines the generated output, normally
    ``Document.cache_key()``.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{source_hash(key)}.php"

    def load(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        logger.info(f"Cache hit: {path}")
        return path.read_bytes().decode("utf-8")

    def store(self, key: str, generated: str) -> Path:
        path = self.path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(generated.encode("utf-8"))
        logger.info(f"Cached generated source: {path}")
        return path
