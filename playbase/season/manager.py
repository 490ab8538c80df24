"""
Season rotation: archive the closing season, then reset the live documents.

The store only guarantees atomicity per document, so rotation is a sequence of
steps that each check their own precondition:

1. ``archive`` creates ``archive/season-N`` from the leaderboard; it refuses to
   run twice for the same season.
2. ``reset_leaderboard`` empties the leaderboard and moves it to season N+1. Within
   ``rotate`` the write is conditioned on the version read in step 1, so a score
   that lands after the archive snapshot raises ``VersionConflict`` instead of
   being dropped unseen.
3. ``reset_latest`` clears the latest-score pointer for season N+1.

Steps 2 and 3 leave a document alone once it has reached a later season, so
``complete_rotation`` can re-run them after a partial failure without touching
the archive. "Archived but not yet reset" is a valid state for readers.
"""

from datetime import datetime
from typing import Optional

from .clock import SeasonClock
from ..config import StoreConfig, store as store_config
from ..errors import AlreadyArchived, NotFound, ValidationError, VersionConflict
from ..models.data import (
    ArchiveDocument,
    LatestPointerDocument,
    LeaderboardDocument,
    RotationResult,
    utcnow,
)
from ..store.base import DocumentStore
from ..logger import get_logger

logger = get_logger()


class SeasonManager:
    def __init__(self, store: DocumentStore, clock: SeasonClock = None, paths: StoreConfig = store_config):
        self.store = store
        self.clock = clock or SeasonClock.from_config()
        self.paths = paths

    def current_season(self, now: datetime = None) -> int:
        return self.clock.current_season(now)

    async def rotate(self, season: int, now: datetime = None) -> RotationResult:
        """Close ``season``: archive it, then reset both live documents"""
        now = now or utcnow()
        _, current = await self._archive(season, now)
        return await self._reset(season, now, current)

    async def complete_rotation(self, season: int, now: datetime = None) -> RotationResult:
        """Finish a rotation whose archive step already succeeded"""
        self._check_season(season)
        path = self.paths.archive_path(season)
        if not await self.store.exists(path):
            raise NotFound(f"Season {season} has not been archived", path)
        return await self._reset(season, now or utcnow())

    async def rotate_if_due(self, now: datetime = None) -> Optional[RotationResult]:
        """Close the leaderboard's season once the clock has moved past it"""
        now = now or utcnow()
        board, _ = await self._read_leaderboard(now)
        if board is None or board.season >= self.clock.current_season(now):
            return None

        if await self.store.exists(self.paths.archive_path(board.season)):
            logger.info(f"Season {board.season} archived but not reset; completing rotation")
            return await self._reset(board.season, now)
        return await self.rotate(board.season, now)

    async def archive(self, season: int, now: datetime = None) -> ArchiveDocument:
        archive, _ = await self._archive(season, now or utcnow())
        return archive

    async def _archive(self, season: int, now: datetime):
        """Write the archive; returns it with the (board, version) pair it was taken from"""
        self._check_season(season)
        path = self.paths.archive_path(season)

        if await self.store.exists(path):
            raise AlreadyArchived(season, path)

        board, version = await self._read_leaderboard(now)
        if board is not None and board.season > season:
            raise ValidationError(
                f"Leaderboard is already in season {board.season}; cannot archive season {season}"
            )
        entries = board.entries if board is not None else []

        archive = ArchiveDocument(
            season=season,
            season_end=now,
            entries=entries,
            total_players=len(entries),
        )
        try:
            await self.store.write(path, archive.to_document(), None, f"Archive Season {season} data")
        except VersionConflict as e:
            # Another rotation created it between our check and our write
            raise AlreadyArchived(season, path) from e

        logger.info(f"Archived season {season} with {len(archive.entries)} entries to {path}")
        return archive, (board, version)

    async def reset_leaderboard(self, season: int, now: datetime = None, current=None) -> bool:
        """
        Empty the leaderboard into season ``season + 1``; False if already done.

        ``current`` is a (board, version) pair read earlier. Writing against it
        fails with ``VersionConflict`` if anything was committed since.
        """
        now = now or utcnow()
        board, version = current if current is not None else await self._read_leaderboard(now)
        if board is not None and board.season > season:
            logger.info(f"Leaderboard already in season {board.season}; skipping reset")
            return False

        fresh = LeaderboardDocument(
            entries=[],
            last_updated=now,
            season=season + 1,
            season_start=self.clock.season_start(season + 1),
        )
        await self.store.write(
            self.paths.leaderboard_path,
            fresh.to_document(),
            version,
            f"Reset leaderboard for Season {season + 1}",
        )
        return True

    async def reset_latest(self, season: int, now: datetime = None) -> bool:
        """Clear the latest-score pointer into season ``season + 1``; False if already done"""
        current = await self.store.read_optional(self.paths.latest_path)
        if current is not None:
            pointer = LatestPointerDocument.from_document(current.content)
            if pointer.season is not None and pointer.season > season:
                logger.info(f"Latest pointer already in season {pointer.season}; skipping reset")
                return False

        fresh = LatestPointerDocument(entry=None, last_updated=now or utcnow(), season=season + 1)
        await self.store.write(
            self.paths.latest_path,
            fresh.to_document(),
            current.version if current else None,
            f"Reset latest score for Season {season + 1}",
        )
        return True

    async def get_archive(self, season: int) -> ArchiveDocument:
        current = await self.store.read(self.paths.archive_path(season))
        return ArchiveDocument.from_document(current.content)

    async def _reset(self, season: int, now: datetime, current=None) -> RotationResult:
        await self.reset_leaderboard(season, now, current)
        await self.reset_latest(season, now)
        logger.info(f"Season {season} archived, Season {season + 1} started")
        return RotationResult(season, season + 1, self.paths.archive_path(season))

    async def _read_leaderboard(self, now: datetime = None):
        current = await self.store.read_optional(self.paths.leaderboard_path)
        if current is None:
            return None, None
        board = LeaderboardDocument.from_document(current.content)
        return self.clock.assign_season(board, now), current.version


    @staticmethod
    def _check_season(season: int):
        if season < 1:
            raise ValidationError(f"Season must be 1 or later, got {season}")
