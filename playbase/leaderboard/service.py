from datetime import datetime

from .aggregator import merge, validate_value
from ..config import LeaderboardConfig, StoreConfig, leaderboard, store as store_config
from ..core.retry import with_retries
from ..errors import NotFound
from ..models.data import (
    LatestPointerDocument,
    LeaderboardDocument,
    MergeResult,
    ScoreEntry,
    SubmissionResult,
    utcnow,
)
from ..season.clock import SeasonClock
from ..store.base import DocumentStore
from ..logger import get_logger

logger = get_logger()

class ScoreService:
    """Records reaction-time scores into the leaderboard and latest-score documents"""

    def __init__(self, store: DocumentStore, clock: SeasonClock = None,
                 config: LeaderboardConfig = leaderboard, paths: StoreConfig = store_config):
        self.store = store
        self.clock = clock or SeasonClock.from_config()
        self.config = config
        self.paths = paths

    def validate(self, value) -> None:
        validate_value(value, self.config.min_value, self.config.max_value)

    async def submit(self, value, player_name: str = None, player_id: str = None,
                     now: datetime = None) -> SubmissionResult:
        """
        Validate and record one score.

        The leaderboard update is a read-merge-conditional-write cycle, re-run from
        the read on a version conflict up to ``max_attempts`` times. The latest
        pointer is then replaced whether or not the entry made the leaderboard.
        """
        self.validate(value)
        now = now or utcnow()
        entry = ScoreEntry.create(value, self.clock.current_season(now), player_name, player_id, now)

        merged = await with_retries(
            lambda: self.update_leaderboard(entry),
            self.config.max_attempts,
            self.config.retry_delay,
            f"Leaderboard update for {entry.id}",
        )
        entry = merged.entry
        await with_retries(
            lambda: self.update_latest(entry, merged.document.season),
            self.config.max_attempts,
            self.config.retry_delay,
            f"Latest score update for {entry.id}",
        )

        logger.info(f"Recorded {entry.value}ms for {entry.player_name} (rank={merged.rank}, record={merged.is_new_record})")
        return SubmissionResult(entry, merged.is_new_record, merged.rank)

    async def read_leaderboard(self, now: datetime = None):
        """Return the leaderboard and its version, or an empty one with no version"""
        try:
            current = await self.store.read(self.paths.leaderboard_path)
        except NotFound:
            return self.empty_leaderboard(now), None
        board = LeaderboardDocument.from_document(current.content)
        return self.clock.assign_season(board, now), current.version

    def empty_leaderboard(self, now: datetime = None) -> LeaderboardDocument:
        season = self.clock.current_season(now)
        return LeaderboardDocument(season=season, season_start=self.clock.season_start(season))

    async def update_leaderboard(self, entry: ScoreEntry) -> MergeResult:
        document, version = await self.read_leaderboard(entry.timestamp)
        # An entry belongs to the season of the board it lands on
        entry = entry.model_copy(update={'season': document.season})
        merged = merge(document, version, entry, self.config.capacity,
                       self.config.min_value, self.config.max_value)
        await self.store.write(
            self.paths.leaderboard_path,
            merged.document.to_document(),
            merged.version,
            f"update(reaction): top scores updated with {entry.player_name} {entry.value}ms",
        )
        return merged

    async def update_latest(self, entry: ScoreEntry, season: int) -> str:
        current = await self.store.read_optional(self.paths.latest_path)
        pointer = LatestPointerDocument(entry=entry, last_updated=entry.timestamp, season=season)
        return await self.store.write(
            self.paths.latest_path,
            pointer.to_document(),
            current.version if current else None,
            f"feat(reaction): {entry.player_name} scored {entry.value}ms",
        )

    async def read_latest(self) -> LatestPointerDocument:
        current = await self.store.read_optional(self.paths.latest_path)
        if current is None:
            return LatestPointerDocument(season=self.clock.current_season())
        return self.clock.assign_season(LatestPointerDocument.from_document(current.content))
