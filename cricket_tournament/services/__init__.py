"""
Service layer: auction and match state machines, registry, standings, fixtures.
Services own transactions and locks; repositories only read and write rows.
"""
from .auction_service import AuctionService
from .match_service import MatchService
from .registry_service import RegistryService
from .standings_service import StandingsService
from .tournament_service import TournamentService

__all__ = [
    "AuctionService",
    "MatchService",
    "RegistryService",
    "StandingsService",
    "TournamentService",
]
