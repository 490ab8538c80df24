from datetime import datetime, timedelta

from ..config import SeasonConfig, season
from ..models.data import utcnow


class SeasonClock:
    """
    Maps wall-clock time to season numbers.

    Season 1 starts at ``epoch`` and every season lasts ``period``. Nothing is
    stored: every call recomputes from the clock, so all instances agree.
    Times before the epoch yield seasons below 1.
    """

    def __init__(self, epoch: datetime, period: timedelta):
        if period <= timedelta(0):
            raise ValueError("Season period must be positive")
        self.epoch = epoch
        self.period = period

    @classmethod
    def from_config(cls, config: SeasonConfig = season) -> 'SeasonClock':
        return cls(config.epoch, timedelta(days=config.period_days))

    def current_season(self, now: datetime = None) -> int:
        return (((now or utcnow()) - self.epoch) // self.period) + 1

    def season_start(self, number: int) -> datetime:
        return self.epoch + self.period * (number - 1)

    def season_end(self, number: int) -> datetime:
        return self.season_start(number + 1)

    def assign_season(self, document, now: datetime = None):
        """Place a document written before seasons existed in the season of ``now``"""
        if document.season is not None:
            return document
        number = self.current_season(now)
        update = {'season': number}
        if 'season_start' in type(document).model_fields and document.season_start is None:
            update['season_start'] = self.season_start(number)
        return document.model_copy(update=update)
