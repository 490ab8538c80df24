from .aggregator import merge, validate_value
from .service import ScoreService
