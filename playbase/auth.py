"""
Short-lived credentials for the document store.

A GitHub App proves its identity with an RS256 JWT signed by its private key and
exchanges it for an installation access token. Tokens are requested once per
unit of work and never cached between invocations.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

import aiohttp
import jwt

from .config import GitHubConfig, github
from .errors import AuthError, TransientError
from .models.data import AccessToken, utcnow
from .logger import get_logger

logger = get_logger()

# GitHub refuses app JWTs that live longer than ten minutes
MAX_JWT_TTL = 600
CLOCK_SKEW = 60


class GitHubAppIdentity:
    __slots__ = ('app_id', 'installation_id')
    def __init__(self, app_id: str, installation_id: str):
        self.app_id = app_id
        self.installation_id = installation_id

    @classmethod
    def from_config(cls, config: GitHubConfig = github):
        return cls(config.app_id, config.installation_id)


class CredentialProvider(ABC):
    @abstractmethod
    async def obtain_access_token(self, identity, signing_key: str) -> AccessToken:
        raise NotImplementedError


class GitHubAppCredentialProvider(CredentialProvider):
    def __init__(self, session: aiohttp.ClientSession, config: GitHubConfig = github):
        self.session = session
        self.config = config

    def build_app_jwt(self, identity: GitHubAppIdentity, signing_key: str, now: datetime = None) -> str:
        issued = int((now or utcnow()).timestamp())
        payload = {
            'iat': issued - CLOCK_SKEW,
            'exp': issued + min(self.config.jwt_ttl, MAX_JWT_TTL),
            'iss': identity.app_id,
        }
        try:
            return jwt.encode(payload, signing_key, algorithm='RS256')
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise AuthError(f"Could not sign app JWT: {e}") from e

    async def obtain_access_token(self, identity: GitHubAppIdentity, signing_key: str) -> AccessToken:
        if not identity.app_id or not identity.installation_id or not signing_key:
            raise AuthError("Missing GitHub App credentials")

        app_jwt = self.build_app_jwt(identity, signing_key)
        url = f"{self.config.api_url}/app/installations/{identity.installation_id}/access_tokens"
        headers = {
            'Authorization': f"Bearer {app_jwt}",
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': self.config.user_agent,
        }
        try:
            async with self.session.post(url, headers=headers) as resp:
                if resp.status >= 500:
                    raise TransientError(f"Token exchange failed with {resp.status}")
                if resp.status not in (200, 201):
                    detail = await resp.text()
                    logger.error(f"GitHub auth failed: {detail}")
                    raise AuthError(f"GitHub authentication failed ({resp.status})")
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransientError(f"Token exchange failed: {e!r}") from e

        token = data.get('token')
        if not token:
            raise AuthError("GitHub returned no installation token")

        expires_at = data.get('expires_at')
        if expires_at:
            expires = datetime.fromisoformat(expires_at.replace('Z', '+00:00'))
        else:
            expires = utcnow() + timedelta(hours=1)
        logger.debug(f"Obtained installation token expiring at {expires.isoformat()}")
        return AccessToken(token, expires)
