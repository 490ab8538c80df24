import hashlib
import threading
from typing import Dict, List, Optional, Tuple

from .base import DocumentStore, decode_document, encode_document
from ..errors import NotFound, VersionConflict
from ..models.data import VersionedDocument
from ..logger import get_logger

logger = get_logger()


def blob_sha(raw: bytes) -> str:
    """Version token computed like a git blob id"""
    return hashlib.sha1(b'blob %d\0' % len(raw) + raw).hexdigest()


class InMemoryDocumentStore(DocumentStore):
    """Process-local store with the same contract as the GitHub store"""

    name = 'memory'

    def __init__(self):
        self._documents: Dict[str, Tuple[bytes, str]] = {}
        self._lock = threading.Lock()
        # (path, description) of every accepted write, oldest first
        self.history: List[Tuple[str, str]] = []

    async def read(self, path: str) -> VersionedDocument:
        with self._lock:
            stored = self._documents.get(path)
        if stored is None:
            raise NotFound(f"{path} not found", path)
        raw, version = stored
        logger.debug(f"Read {path} at {version[:7]}")
        return VersionedDocument(path, decode_document(raw, path), version)

    async def write(self, path: str, document: dict, version: Optional[str], description: str) -> str:
        raw = encode_document(document)
        new_version = blob_sha(raw)
        with self._lock:
            stored = self._documents.get(path)
            if version is None and stored is not None:
                raise VersionConflict(f"{path} already exists", path)
            if version is not None:
                if stored is None:
                    raise NotFound(f"{path} not found", path)
                if stored[1] != version:
                    raise VersionConflict(f"{path} does not match {version}", path)
            self._documents[path] = (raw, new_version)
            self.history.append((path, description))
        logger.debug(f"Wrote {path} at {new_version[:7]}: {description}")
        return new_version

    def paths(self) -> List[str]:
        with self._lock:
            return sorted(self._documents)
