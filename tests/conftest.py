"""
Shared fixtures: a scriptable in-memory store, a fixed season clock and a fake
GitHub REST API served by aiohttp.
"""

import base64
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from playbase.config import GitHubConfig, LeaderboardConfig, StoreConfig
from playbase.models.data import ScoreEntry
from playbase.season import SeasonClock
from playbase.store import InMemoryDocumentStore
from playbase.store.memory import blob_sha

EPOCH = datetime(2025, 1, 15, tzinfo=timezone.utc)
PERIOD = timedelta(days=90)
INSTALLATION_TOKEN = 'ghs_installation_token'


class ScriptedStore(InMemoryDocumentStore):
    """In-memory store that counts calls and can fail chosen writes"""

    def __init__(self):
        super().__init__()
        self.reads = 0
        self.writes = 0
        self.write_failures = {}

    def fail_writes(self, path, *errors):
        self.write_failures.setdefault(path, []).extend(errors)

    async def read(self, path):
        self.reads += 1
        return await super().read(path)

    async def write(self, path, document, version, description):
        self.writes += 1
        pending = self.write_failures.get(path)
        if pending:
            raise pending.pop(0)
        return await super().write(path, document, version, description)


class FakeGitHub:
    """Just enough of the GitHub Contents and App APIs to exercise the clients"""

    def __init__(self, public_key):
        self.public_key = public_key
        self.files = {}
        self.commits = []
        self.requests = []
        self.jwt_claims = []
        self.forced_responses = []
        self.token_status = 201
        self.url = None

    def app(self):
        app = web.Application()
        app.router.add_get('/repos/{owner}/{repo}/contents/{path:.+}', self.get_contents)
        app.router.add_put('/repos/{owner}/{repo}/contents/{path:.+}', self.put_contents)
        app.router.add_post('/app/installations/{installation_id}/access_tokens', self.create_token)
        return app

    def seed(self, path, raw: bytes):
        self.files[path] = (raw, blob_sha(raw))
        return self.files[path][1]

    def force(self, status, body=None, headers=None):
        self.forced_responses.append((status, body or {'message': 'forced'}, headers or {}))

    def _forced(self):
        if self.forced_responses:
            status, body, headers = self.forced_responses.pop(0)
            return web.json_response(body, status=status, headers=headers)
        return None

    def _authorized(self, request):
        return request.headers.get('Authorization') == f"token {INSTALLATION_TOKEN}"

    async def get_contents(self, request):
        self.requests.append(('GET', request.match_info['path'], dict(request.headers), dict(request.query)))
        forced = self._forced()
        if forced is not None:
            return forced
        if not self._authorized(request):
            return web.json_response({'message': 'Bad credentials'}, status=401)

        path = request.match_info['path']
        if path not in self.files:
            return web.json_response({'message': 'Not Found'}, status=404)
        raw, sha = self.files[path]
        encoded = base64.b64encode(raw).decode('ascii')
        # GitHub wraps base64 content at 60 characters
        wrapped = '\n'.join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
        return web.json_response({
            'type': 'file',
            'path': path,
            'sha': sha,
            'encoding': 'base64',
            'content': wrapped,
        })

    async def put_contents(self, request):
        body = await request.json()
        self.requests.append(('PUT', request.match_info['path'], dict(request.headers), body))
        forced = self._forced()
        if forced is not None:
            return forced
        if not self._authorized(request):
            return web.json_response({'message': 'Bad credentials'}, status=401)

        path = request.match_info['path']
        sha = body.get('sha')
        if path in self.files:
            current = self.files[path][1]
            if sha is None:
                return web.json_response(
                    {'message': 'Invalid request.\n\n"sha" wasn\'t supplied.'}, status=422)
            if sha != current:
                return web.json_response({'message': f"{path} does not match {sha}"}, status=409)
            status = 200
        else:
            if sha is not None:
                return web.json_response({'message': 'Not Found'}, status=404)
            status = 201

        new_sha = self.seed(path, base64.b64decode(body['content']))
        self.commits.append((path, body['message'], body['branch']))
        return web.json_response({'content': {'path': path, 'sha': new_sha}, 'commit': {'message': body['message']}},
                                 status=status)

    async def create_token(self, request):
        self.requests.append(('POST', request.match_info['installation_id'], dict(request.headers), None))
        auth = request.headers.get('Authorization', '')
        if not auth.startswith('Bearer '):
            return web.json_response({'message': 'A JSON web token could not be decoded'}, status=401)
        self.jwt_claims.append(jwt.decode(auth[len('Bearer '):], self.public_key, algorithms=['RS256']))
        if self.token_status != 201:
            return web.json_response({'message': 'Integration not found'}, status=self.token_status)
        expires = datetime.now(timezone.utc) + timedelta(hours=1)
        return web.json_response({
            'token': INSTALLATION_TOKEN,
            'expires_at': expires.strftime('%Y-%m-%dT%H:%M:%SZ'),
        }, status=201)


@pytest.fixture(scope='session')
def rsa_keys():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
async def github_api(rsa_keys):
    fake = FakeGitHub(rsa_keys[1])
    server = TestServer(fake.app())
    await server.start_server()
    fake.url = str(server.make_url('/'))
    yield fake
    await server.close()


@pytest.fixture
def github_config(github_api, rsa_keys):
    return GitHubConfig(
        api_url=github_api.url,
        app_id='12345',
        installation_id='678',
        private_key=rsa_keys[0],
        owner='jovylle',
        repo='playbase',
        branch='master',
        timeout=5,
    )


@pytest.fixture
def clock():
    return SeasonClock(EPOCH, PERIOD)


@pytest.fixture
def now():
    # 100 days after the epoch: season 2
    return EPOCH + timedelta(days=100)


@pytest.fixture
def store():
    return ScriptedStore()


@pytest.fixture
def paths():
    return StoreConfig(backend='memory')


@pytest.fixture
def board_config():
    return LeaderboardConfig(capacity=10, min_value=80, max_value=1000, max_attempts=3, retry_delay=0)


@pytest.fixture
def make_entry():
    counter = iter(range(1, 10_000))

    def factory(value, player_name='Tester', season=1):
        n = next(counter)
        return ScoreEntry(
            value=value,
            timestamp=EPOCH + timedelta(seconds=n),
            id=f"{n:08x}",
            player_name=player_name,
            player_id=f"player-{n}",
            season=season,
        )

    return factory
