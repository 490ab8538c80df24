from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from ..models.response import SeasonInfoResponse, SeasonResetResponse
from ..models.data import RotationResult
from ..season import SeasonClock, SeasonManager
from ..store import StoreManager
from ..core.http import to_http_exception
from ..core.retry import with_retries
from ..config import leaderboard, store as store_config
from ..errors import PlaybaseError, VersionConflict
from ..logger import get_logger

logger = get_logger()
router = APIRouter()

async def _finish_rotation(manager: SeasonManager, season: int) -> RotationResult:
    # Resetting is safe to repeat; the archive step is not
    return await with_retries(
        lambda: manager.complete_rotation(season),
        leaderboard.max_attempts,
        leaderboard.retry_delay,
        f"Season {season} reset",
    )

def _reset_response(result: RotationResult) -> SeasonResetResponse:
    return SeasonResetResponse(
        message=f"Season {result.archived_season} archived, Season {result.new_season} started",
        **result.to_dict(),
    )

@router.get("/season", response_model=SeasonInfoResponse)
async def get_season():
    """Get the clock-derived season and the season the leaderboard is in"""
    try:
        clock = SeasonClock.from_config()
        current = clock.current_season()
        async with StoreManager.get_instance().open() as store:
            board = await store.read_optional(store_config.leaderboard_path)
        return SeasonInfoResponse(
            current_season=current,
            season_start=clock.season_start(current),
            season_end=clock.season_end(current),
            leaderboard_season=board.content.get('season') if board else None,
        )
    except PlaybaseError as e:
        logger.error(f"Error getting season: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting season: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get season")

@router.post("/season/reset", response_model=SeasonResetResponse)
async def reset_season(season: Optional[int] = Query(None, ge=1, description="Season to close (default: current season)")):
    """
    Archive a season and start the next one.

    - **season**: Season to close; defaults to the clock's current season
    """
    try:
        async with StoreManager.get_instance().open() as store:
            manager = SeasonManager(store)
            closing = season or manager.current_season()
            logger.info(f"Rotating season {closing}")
            try:
                result = await manager.rotate(closing)
            except VersionConflict:
                logger.warning(f"Leaderboard changed after season {closing} was archived; retrying reset")
                result = await _finish_rotation(manager, closing)
        return _reset_response(result)
    except PlaybaseError as e:
        logger.error(f"Season reset error: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Season reset error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to reset season")

@router.post("/season/complete", response_model=SeasonResetResponse)
async def complete_season(season: int = Query(..., ge=1, description="Season whose archive already exists")):
    """
    Finish a rotation that archived a season but did not reset the leaderboard.

    - **season**: Season that was archived
    """
    try:
        async with StoreManager.get_instance().open() as store:
            result = await _finish_rotation(SeasonManager(store), season)
        return _reset_response(result)
    except PlaybaseError as e:
        logger.error(f"Season completion error: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Season completion error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to complete season reset")

@router.post("/season/rotate-due")
async def rotate_due_season():
    """Close the leaderboard's season if the clock has moved past it"""
    try:
        async with StoreManager.get_instance().open() as store:
            result = await SeasonManager(store).rotate_if_due()
        if result is None:
            return {'success': True, 'rotated': False}
        return {'success': True, 'rotated': True, **result.to_dict()}
    except PlaybaseError as e:
        logger.error(f"Scheduled rotation error: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Scheduled rotation error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to rotate season")
