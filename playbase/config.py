import re
import textwrap
from datetime import datetime, timezone
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PEM_ONE_LINE = re.compile(r'(-----BEGIN [A-Z ]+-----)([^\n]+?)(-----END [A-Z ]+-----)')

class GitHubConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='GITHUB_')

    app_id: str = ''
    installation_id: str = ''
    private_key: str = ''
    owner: str = 'jovylle'
    repo: str = 'playbase'
    branch: str = 'master'
    api_url: str = 'https://api.github.com'
    user_agent: str = 'playbase-bot/1.0'
    timeout: float = 10.0
    jwt_ttl: int = 600

    @field_validator('private_key')
    @classmethod
    def normalize_private_key(cls, v):
        # Keys pasted into env vars usually carry literal "\n" escapes
        key = v.replace('\\n', '\n').strip()
        match = PEM_ONE_LINE.fullmatch(key)
        if match:
            # No newlines at all: rebuild the PEM framing with 64-character body lines
            begin, body, end = match.groups()
            key = '\n'.join([begin, *textwrap.wrap(re.sub(r'\s+', '', body), 64), end])
        return key

    @field_validator('api_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip('/')

github = GitHubConfig()

class StoreConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='STORE_')

    backend: Literal['github', 'memory'] = 'github'
    leaderboard_path: str = 'reaction/top.json'
    latest_path: str = 'reaction/latest.json'
    archive_path_template: str = 'reaction/archive/season-{season}.json'

    def archive_path(self, season: int) -> str:
        return self.archive_path_template.format(season=season)

store = StoreConfig()

class LeaderboardConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='LEADERBOARD_')

    capacity: int = 10
    min_value: float = 80
    max_value: float = 1000
    max_attempts: int = 3
    retry_delay: float = 1.0

leaderboard = LeaderboardConfig()

class SeasonConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='SEASON_')

    epoch: datetime = datetime(2025, 1, 15, tzinfo=timezone.utc)
    period_days: int = 90

    @field_validator('epoch')
    @classmethod
    def ensure_utc(cls, v):
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

season = SeasonConfig()
