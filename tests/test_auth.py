"""
Tests for GitHub App credentials and the per-invocation store manager.
"""

from datetime import datetime, timezone

import aiohttp
import jwt
import pytest

from playbase.auth import GitHubAppCredentialProvider, GitHubAppIdentity
from playbase.config import StoreConfig
from playbase.errors import AuthError, TransientError
from playbase.store import GitHubContentsStore, InMemoryDocumentStore, StoreManager


@pytest.fixture
async def session():
    async with aiohttp.ClientSession() as s:
        yield s


class TestAppJwt:
    """Signing the app's identity assertion."""

    def test_claims_are_time_bounded(self, github_config, rsa_keys):
        provider = GitHubAppCredentialProvider(None, github_config)
        now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

        token = provider.build_app_jwt(GitHubAppIdentity('12345', '678'), rsa_keys[0], now)
        claims = jwt.decode(token, rsa_keys[1], algorithms=['RS256'], options={'verify_exp': False})

        assert claims['iss'] == '12345'
        assert claims['iat'] == int(now.timestamp()) - 60
        assert claims['exp'] == int(now.timestamp()) + 600

    def test_ttl_is_capped_at_ten_minutes(self, github_config, rsa_keys):
        config = github_config.model_copy(update={'jwt_ttl': 3600})
        provider = GitHubAppCredentialProvider(None, config)
        now = datetime(2025, 6, 1, tzinfo=timezone.utc)

        token = provider.build_app_jwt(GitHubAppIdentity('1', '2'), rsa_keys[0], now)
        claims = jwt.decode(token, rsa_keys[1], algorithms=['RS256'], options={'verify_exp': False})

        assert claims['exp'] - int(now.timestamp()) == 600

    def test_unusable_key_is_auth_error(self, github_config):
        provider = GitHubAppCredentialProvider(None, github_config)

        with pytest.raises(AuthError):
            provider.build_app_jwt(GitHubAppIdentity('1', '2'), 'not a pem key')


class TestTokenExchange:
    """Exchanging the app JWT for an installation token."""

    async def test_obtains_installation_token(self, github_api, github_config, session, rsa_keys):
        provider = GitHubAppCredentialProvider(session, github_config)

        token = await provider.obtain_access_token(GitHubAppIdentity('12345', '678'), rsa_keys[0])

        assert token.token == 'ghs_installation_token'
        assert not token.is_expired()
        assert github_api.jwt_claims[-1]['iss'] == '12345'
        assert github_api.requests[-1][1] == '678'

    async def test_missing_credentials_fail_without_request(self, github_api, github_config, session):
        provider = GitHubAppCredentialProvider(session, github_config)

        with pytest.raises(AuthError, match='Missing GitHub App credentials'):
            await provider.obtain_access_token(GitHubAppIdentity('', '678'), 'key')
        assert github_api.requests == []

    async def test_rejected_exchange_is_auth_error(self, github_api, github_config, session, rsa_keys):
        github_api.token_status = 404
        provider = GitHubAppCredentialProvider(session, github_config)

        with pytest.raises(AuthError) as exc:
            await provider.obtain_access_token(GitHubAppIdentity('12345', '678'), rsa_keys[0])
        assert exc.value.retryable is False

    async def test_server_failure_is_transient(self, github_api, github_config, session, rsa_keys):
        github_api.token_status = 503
        provider = GitHubAppCredentialProvider(session, github_config)

        with pytest.raises(TransientError):
            await provider.obtain_access_token(GitHubAppIdentity('12345', '678'), rsa_keys[0])


class TestStoreManager:
    """Opening a store per unit of work."""

    async def test_github_backend_requests_fresh_token_per_open(self, github_api, github_config):
        github_api.seed('reaction/top.json', b'{"top": [], "season": 2}')
        manager = StoreManager(StoreConfig(backend='github'), github_config)

        for _ in range(2):
            async with manager.open() as store:
                assert isinstance(store, GitHubContentsStore)
                assert (await store.read('reaction/top.json')).content['season'] == 2

        assert len(github_api.jwt_claims) == 2

    async def test_memory_backend_shares_one_store(self):
        manager = StoreManager(StoreConfig(backend='memory'))

        async with manager.open() as first:
            await first.write('doc.json', {'n': 1}, None, 'create')
        async with manager.open() as second:
            assert isinstance(second, InMemoryDocumentStore)
            assert (await second.read('doc.json')).content == {'n': 1}

    def test_configure_replaces_singleton(self):
        try:
            configured = StoreManager.configure(StoreConfig(backend='memory'))
            assert StoreManager.get_instance() is configured
            assert configured.backend == 'memory'
        finally:
            StoreManager.reset()
