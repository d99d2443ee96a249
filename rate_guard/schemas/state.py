"""Rate limit state exchanged between the decision engine and the stores."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RateLimitState(BaseModel):
    """Last observed limit information for a coordination key.

    Attributes:
        remaining: Requests believed available before the next reset.
        reset_at: UNIX epoch seconds when the limit window resets.
        updated_at: UNIX epoch seconds when the record was written. Informational.
    """

    remaining: int = Field(..., ge=0, description="Requests left in the current window")
    reset_at: float = Field(..., description="UNIX time when the window resets")
    updated_at: float = Field(..., description="UNIX time the record was written")

    model_config = ConfigDict(frozen=True, extra="ignore")

    def seconds_until_reset(self, now: float) -> float:
        """Return the time left in the window (negative once it has elapsed)."""
        return self.reset_at - now
