from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiohttp

from .base import DocumentStore
from .github import GitHubContentsStore
from .memory import InMemoryDocumentStore
from ..auth import GitHubAppCredentialProvider, GitHubAppIdentity
from ..config import GitHubConfig, StoreConfig, github, store
from ..logger import get_logger

logger = get_logger()

class StoreManager:
    """
    Hands out a document store per unit of work.

    The GitHub backend opens a fresh HTTP session and installation token on every
    ``open()``; nothing survives between invocations. The memory backend keeps
    one process-local store, which is the backing store itself.
    """
    _instance = None

    def __init__(self, config: StoreConfig = store, github_config: GitHubConfig = github):
        self.config = config
        self.github_config = github_config
        self._memory = InMemoryDocumentStore() if config.backend == 'memory' else None

    @classmethod
    def get_instance(cls) -> 'StoreManager':
        """Get the singleton instance of StoreManager"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def configure(cls, config: StoreConfig = store, github_config: GitHubConfig = github) -> 'StoreManager':
        cls._instance = cls(config, github_config)
        return cls._instance

    @classmethod
    def reset(cls):
        cls._instance = None

    @property
    def backend(self) -> str:
        return self.config.backend

    @asynccontextmanager
    async def open(self) -> AsyncIterator[DocumentStore]:
        """Open a store with a freshly issued credential"""
        if self._memory is not None:
            yield self._memory
            return

        timeout = aiohttp.ClientTimeout(total=self.github_config.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            provider = GitHubAppCredentialProvider(session, self.github_config)
            token = await provider.obtain_access_token(
                GitHubAppIdentity.from_config(self.github_config),
                self.github_config.private_key,
            )
            yield GitHubContentsStore(session, token, self.github_config)
