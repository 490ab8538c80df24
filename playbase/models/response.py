from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional

class ScoreResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    score: Dict[str, Any]
    is_new_record: bool = Field(alias='isNewRecord')
    position: Optional[int] = None
    message: str

class LeaderboardResponse(BaseModel):
    season: int
    season_start: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    top: List[Dict[str, Any]]

class SeasonInfoResponse(BaseModel):
    current_season: int
    season_start: datetime
    season_end: datetime
    leaderboard_season: Optional[int] = None

class SeasonResetResponse(BaseModel):
    success: Literal[True] = True
    message: str
    archived_season: int
    new_season: int
    archive_path: str

class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    uptime: float
    backend: str
