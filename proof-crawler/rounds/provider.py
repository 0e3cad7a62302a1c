import time
from abc import ABC, abstractmethod
from crawler.core import ROUND_LENGTH_SECONDS, ROUND_GENESIS


class RoundProvider(ABC):
    """
    Source of the externally driven round number.
    The host orchestration framework normally supplies an implementation.
    """

    @abstractmethod
    def get_current_round(self) -> int:
        pass

    @abstractmethod
    def update_round(self) -> int:
        """Refresh from the source of truth and return the current round."""
        pass


class ClockRoundProvider(RoundProvider):
    """Derives rounds from wall-clock time for standalone runs."""

    def __init__(self, round_length=ROUND_LENGTH_SECONDS, genesis=ROUND_GENESIS, clock=time.time):
        if round_length <= 0:
            raise ValueError("round_length must be positive")
        self.round_length = round_length
        self.genesis = genesis
        self._clock = clock

    def _compute(self):
        return max(0, int((self._clock() - self.genesis) // self.round_length))

    def get_current_round(self):
        return self._compute()

    def update_round(self):
        return self._compute()
