from fastapi import APIRouter, HTTPException, Path
from ..models.response import LeaderboardResponse
from ..leaderboard import ScoreService
from ..season import SeasonManager
from ..store import StoreManager
from ..core.http import to_http_exception
from ..errors import NotFound, PlaybaseError
from ..logger import get_logger

logger = get_logger()
router = APIRouter()

@router.get("/reaction/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard():
    """Get the current season's top scores, fastest first"""
    try:
        async with StoreManager.get_instance().open() as store:
            board, _ = await ScoreService(store).read_leaderboard()
        return LeaderboardResponse(
            season=board.season,
            season_start=board.season_start,
            last_updated=board.last_updated,
            top=[entry.to_document() for entry in board.entries],
        )
    except PlaybaseError as e:
        logger.error(f"Error getting leaderboard: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting leaderboard: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get leaderboard")

@router.get("/reaction/latest")
async def get_latest():
    """Get the most recently submitted score"""
    try:
        async with StoreManager.get_instance().open() as store:
            latest = await ScoreService(store).read_latest()
        return latest.to_document()
    except PlaybaseError as e:
        logger.error(f"Error getting latest score: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting latest score: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get latest score")

@router.get("/reaction/archive/{season}")
async def get_archive(season: int = Path(..., ge=1)):
    """
    Get the archived leaderboard of a closed season.

    - **season**: Season number (1 or later)
    """
    try:
        async with StoreManager.get_instance().open() as store:
            archive = await SeasonManager(store).get_archive(season)
        return archive.to_document()
    except NotFound as e:
        logger.warning(f"Archive for season {season} not found")
        raise to_http_exception(e)
    except PlaybaseError as e:
        logger.error(f"Error getting archive: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error getting archive: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get archive")
