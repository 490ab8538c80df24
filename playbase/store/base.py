from abc import ABC, abstractmethod
from typing import Optional

import orjson

from ..errors import NotFound, PlaybaseError
from ..models.data import VersionedDocument


def encode_document(document: dict) -> bytes:
    """Serialize a document the way it is committed: two-space indented JSON"""
    return orjson.dumps(document, option=orjson.OPT_INDENT_2)


def decode_document(raw: bytes, path: str) -> dict:
    try:
        content = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise PlaybaseError(f"{path} does not hold valid JSON: {e}", path) from e
    if not isinstance(content, dict):
        raise PlaybaseError(f"{path} does not hold a JSON object", path)
    return content


class DocumentStore(ABC):
    """
    Conditional-write primitive over independently versioned JSON documents.

    ``read`` returns the document with its version token. ``write`` succeeds only
    while that token still matches the stored document; a ``version`` of None
    creates the document and fails if it already exists. Conflicts and outages
    are raised to the caller, never retried here.
    """

    name = 'abstract'

    @abstractmethod
    async def read(self, path: str) -> VersionedDocument:
        raise NotImplementedError

    @abstractmethod
    async def write(self, path: str, document: dict, version: Optional[str], description: str) -> str:
        raise NotImplementedError

    async def read_optional(self, path: str) -> Optional[VersionedDocument]:
        try:
            return await self.read(path)
        except NotFound:
            return None

    async def exists(self, path: str) -> bool:
        return await self.read_optional(path) is not None
