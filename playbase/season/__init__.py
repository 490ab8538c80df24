from .clock import SeasonClock
from .manager import SeasonManager
