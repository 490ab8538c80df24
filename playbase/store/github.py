import asyncio
import base64
from typing import Optional
from urllib.parse import quote

import aiohttp

from .base import DocumentStore, decode_document, encode_document
from ..config import GitHubConfig, github
from ..errors import (
    AccessDenied,
    AuthError,
    NotFound,
    PlaybaseError,
    TransientError,
    VersionConflict,
)
from ..models.data import AccessToken, VersionedDocument
from ..logger import get_logger

logger = get_logger()


class GitHubContentsStore(DocumentStore):
    """
    Document store backed by the GitHub Contents API.

    Each document is a file on one branch; its blob sha is the version token.
    GitHub rejects a PUT whose sha is stale (409) or missing for an existing
    file (422), which gives compare-and-set on a single file.
    """

    name = 'github'

    def __init__(self, session: aiohttp.ClientSession, token: AccessToken, config: GitHubConfig = github):
        self.session = session
        self.token = token
        self.config = config

    def _url(self, path: str) -> str:
        return f"{self.config.api_url}/repos/{self.config.owner}/{self.config.repo}/contents/{quote(path)}"

    def _headers(self, path: str) -> dict:
        if self.token.is_expired():
            raise AuthError("Access token expired; request a new one", path)
        return {
            'Authorization': f"token {self.token.token}",
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': self.config.user_agent,
        }

    async def read(self, path: str) -> VersionedDocument:
        headers = self._headers(path)
        try:
            async with self.session.get(self._url(path), params={'ref': self.config.branch}, headers=headers) as resp:
                if resp.status != 200:
                    await self._raise_for_status(resp, path)
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransientError(f"Failed to fetch {path}: {e!r}", path) from e

        if not isinstance(data, dict) or data.get('type', 'file') != 'file':
            raise NotFound(f"{path} is not a file", path)

        raw = base64.b64decode(data.get('content', ''))
        logger.debug(f"Read {path} at {data['sha'][:7]}")
        return VersionedDocument(path, decode_document(raw, path), data['sha'])

    async def write(self, path: str, document: dict, version: Optional[str], description: str) -> str:
        headers = self._headers(path)
        body = {
            'message': description,
            'content': base64.b64encode(encode_document(document)).decode('ascii'),
            'branch': self.config.branch,
        }
        if version is not None:
            body['sha'] = version

        try:
            async with self.session.put(self._url(path), json=body, headers=headers) as resp:
                if resp.status not in (200, 201):
                    await self._raise_for_status(resp, path)
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransientError(f"Failed to update {path}: {e!r}", path) from e

        new_version = data['content']['sha']
        logger.info(f"Committed {path} ({new_version[:7]}): {description}")
        return new_version

    async def _raise_for_status(self, resp: aiohttp.ClientResponse, path: str):
        status = resp.status
        detail = await resp.text()

        if status == 404:
            raise NotFound(f"{path} not found", path)
        if status == 429 or (status == 403 and resp.headers.get('x-ratelimit-remaining') == '0'):
            raise TransientError(f"Rate limited while accessing {path}", path)
        if status in (401, 403):
            raise AccessDenied(f"Access denied for {path}: {detail}", path)
        if status == 409 or (status == 422 and 'sha' in detail):
            raise VersionConflict(f"{path} was modified concurrently: {detail}", path)
        if status >= 500:
            raise TransientError(f"GitHub returned {status} for {path}", path)
        raise PlaybaseError(f"Unexpected GitHub response {status} for {path}: {detail}", path)
