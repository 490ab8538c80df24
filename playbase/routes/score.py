from fastapi import APIRouter, HTTPException
from ..models.score import ScoreRequest
from ..models.response import ScoreResponse
from ..leaderboard import ScoreService, validate_value
from ..config import leaderboard
from ..store import StoreManager
from ..core.http import to_http_exception
from ..errors import PlaybaseError, ValidationError
from ..logger import get_logger

logger = get_logger()
router = APIRouter()

@router.post("/reaction/scores", response_model=ScoreResponse)
async def submit_score(data: ScoreRequest):
    """
    Record a reaction-time score.

    - **ms**: Reaction time in milliseconds (80-1000)
    - **playerName**: Display name, defaults to "Anonymous"
    - **playerId**: Stable player identifier, defaults to "unknown"
    """
    try:
        manager = StoreManager.get_instance()

        # Reject bad input before a credential is even requested
        validate_value(data.ms, leaderboard.min_value, leaderboard.max_value)

        async with manager.open() as store:
            result = await ScoreService(store).submit(data.ms, data.player_name, data.player_id)

        return ScoreResponse(
            score=result.entry.to_document(),
            is_new_record=result.is_new_record,
            position=result.rank,
            message=result.message,
        )
    except HTTPException:
        raise
    except ValidationError as e:
        logger.warning(f"Rejected score: {e}")
        raise to_http_exception(e)
    except PlaybaseError as e:
        logger.error(f"Failed to save score: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error saving score: {e}")
        raise HTTPException(status_code=500, detail="Failed to save score")
