import secrets
from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# --- Stored documents ---
class Document(BaseModel):
    """Base for JSON documents kept in the versioned store"""
    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_document(cls, content: dict):
        return cls.model_validate(content)

    def to_document(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)

class ScoreEntry(Document):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    value: Union[int, float] = Field(alias='ms')
    timestamp: datetime
    id: str
    player_name: str = Field('Anonymous', alias='playerName')
    player_id: str = Field('unknown', alias='playerId')
    # Entries written before seasons existed carry no season
    season: Optional[int] = None

    @classmethod
    def create(cls, value, season: int, player_name: str = None, player_id: str = None,
               now: datetime = None) -> 'ScoreEntry':
        return cls(
            value=value,
            timestamp=now or utcnow(),
            id=secrets.token_hex(4),
            player_name=player_name or 'Anonymous',
            player_id=player_id or 'unknown',
            season=season,
        )

class LeaderboardDocument(Document):
    entries: List[ScoreEntry] = Field(default_factory=list, alias='top')
    last_updated: Optional[datetime] = None
    # Boards written before seasons existed carry none; readers assign one from the clock
    season: Optional[int] = None
    season_start: Optional[datetime] = None

    @property
    def best(self) -> Optional[ScoreEntry]:
        return self.entries[0] if self.entries else None

class LatestPointerDocument(Document):
    entry: Optional[ScoreEntry] = Field(None, alias='latest')
    last_updated: Optional[datetime] = None
    season: Optional[int] = None

    @model_validator(mode='before')
    @classmethod
    def wrap_bare_entry(cls, data):
        # Older deployments wrote the latest ScoreEntry itself as the document
        if isinstance(data, dict) and 'ms' in data:
            return {
                'latest': data,
                'last_updated': data.get('timestamp'),
                'season': data.get('season'),
            }
        return data

class ArchiveDocument(Document):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    season: int
    season_end: datetime
    entries: List[ScoreEntry] = Field(default_factory=list, alias='top_scores')
    total_players: int = 0

# --- Store and service records ---
class VersionedDocument:
    __slots__ = ('path', 'content', 'version')
    def __init__(self, path: str, content: dict, version: str):
        self.path = path
        self.content = content
        self.version = version

class AccessToken:
    __slots__ = ('token', 'expires_at')
    def __init__(self, token: str, expires_at: datetime):
        self.token = token
        self.expires_at = expires_at

    def is_expired(self, now: datetime = None) -> bool:
        return (now or utcnow()) >= self.expires_at

class MergeResult:
    __slots__ = ('document', 'version', 'entry', 'is_new_record', 'rank')
    def __init__(self, document: LeaderboardDocument, version: Optional[str], entry: ScoreEntry,
                 is_new_record: bool, rank: Optional[int]):
        self.document = document
        self.version = version
        self.entry = entry
        self.is_new_record = is_new_record
        self.rank = rank

class SubmissionResult:
    __slots__ = ('entry', 'is_new_record', 'rank')
    def __init__(self, entry: ScoreEntry, is_new_record: bool, rank: Optional[int]):
        self.entry = entry
        self.is_new_record = is_new_record
        self.rank = rank

    @property
    def message(self) -> str:
        ms = self.entry.value
        if self.is_new_record:
            return f"NEW RECORD! {ms}ms"
        if self.rank:
            return f"Nice! Ranked #{self.rank} with {ms}ms"
        return f"{ms}ms recorded"

class RotationResult:
    __slots__ = ('archived_season', 'new_season', 'archive_path')
    def __init__(self, archived_season: int, new_season: int, archive_path: str):
        self.archived_season = archived_season
        self.new_season = new_season
        self.archive_path = archive_path

    def to_dict(self):
        return {
            'archived_season': self.archived_season,
            'new_season': self.new_season,
            'archive_path': self.archive_path,
        }
