# --- Pydantic Models ---
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator
from typing import Optional, Union

class ScoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Range is checked by the submission service so it fails before any store access
    ms: Union[StrictInt, StrictFloat]
    player_name: Optional[str] = Field(None, alias='playerName', max_length=100)
    player_id: Optional[str] = Field(None, alias='playerId', max_length=100)

    @field_validator('player_name', 'player_id')
    @classmethod
    def blank_to_none(cls, v):
        if v is None or not v.strip():
            return None
        return v.strip()
