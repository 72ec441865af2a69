"""
Domain exceptions raised by the service layer.
All subclass TournamentError (a ValueError) so callers can catch one type;
the API maps each family to an HTTP status.
"""
from __future__ import annotations


class TournamentError(ValueError):
    """Base for every rejected tournament action."""

    @property
    def kind(self) -> str:
        return type(self).__name__


# ---------- Precondition failures (400) ----------


class PreconditionError(TournamentError):
    """The action is not allowed in the current state."""


class AuctionNotActive(PreconditionError):
    """Auction is not in_progress / lost_gold_round (paused, not started or completed)."""


class AuctionAlreadyStarted(PreconditionError):
    pass


class NoEligiblePlayers(PreconditionError):
    """No registered, approved and verified player left to open."""


class NoBidsToUndo(PreconditionError):
    pass


class NoPlayerInAuction(PreconditionError):
    pass


class PlayerAlreadyInAuction(PreconditionError):
    """A player is under the hammer; sell or mark unsold first."""


class TeamAlreadyLeading(PreconditionError):
    """A team cannot outbid itself."""


class MatchNotLive(PreconditionError):
    pass


class MatchAlreadyStarted(PreconditionError):
    pass


class BatsmenNotSet(PreconditionError):
    pass


class BowlerNotSet(PreconditionError):
    pass


class InvalidDelivery(PreconditionError):
    """Runs out of range, or dismissed player not at the crease."""


class InvalidSelection(PreconditionError):
    """Player does not belong to the side, or was already dismissed."""


class InvalidCategory(PreconditionError):
    pass


class DuplicateRegistration(PreconditionError):
    """Mobile, email or team name already registered."""


class InvalidRegistration(PreconditionError):
    """Bad mobile number, rating or role."""


class FixturesLocked(PreconditionError):
    """Groups cannot be redrawn once a match has gone live."""


# ---------- Caps (400) ----------


class CapViolation(TournamentError):
    """A budget or wicket ceiling would be exceeded."""


class InsufficientBudget(CapViolation):
    pass


class LastManStanding(CapViolation):
    """Batting side is already all out; no further wicket is possible."""


# ---------- Not found (404) ----------


class NotFoundError(TournamentError):
    pass


class TeamNotFound(NotFoundError):
    pass


class PlayerNotFound(NotFoundError):
    pass


class MatchNotFound(NotFoundError):
    pass


# ---------- Invariant violations (409) ----------


class InvariantViolation(TournamentError):
    """Persisted state does not allow the action (e.g. sale with no bidder)."""


class NoBiddingTeam(InvariantViolation):
    pass
