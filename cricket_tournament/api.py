"""
REST API for the cricket tournament backend.
Thin wrappers around the service layer; every write is one service call.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

# Ensure project root on path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cricket_tournament import config
from cricket_tournament.auth import authenticate_admin, create_access_token, decode_token
from cricket_tournament.errors import InvariantViolation, NotFoundError, TournamentError
from cricket_tournament.models import AuctionState
from cricket_tournament.persistence import get_connection, init_db
from cricket_tournament.services import (
    AuctionService,
    MatchService,
    RegistryService,
    StandingsService,
    TournamentService,
)

logger = logging.getLogger(__name__)


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config.configure_logging()
    config.validate_config()
    init_db()
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Cricket Tournament API",
    description="Player auction, ball-by-ball scoring, points table and leaderboards",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

registry = RegistryService()
auction = AuctionService()
matches = MatchService()
standings_svc = StandingsService()
tournament = TournamentService()


# ---------- Errors ----------
def _status_for(exc: TournamentError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, InvariantViolation):
        return 409
    return 400


@app.exception_handler(TournamentError)
async def tournament_error_handler(request: Request, exc: TournamentError) -> JSONResponse:
    logger.debug(f"Rejected {request.method} {request.url.path}: {exc.kind}: {exc}")
    return JSONResponse(status_code=_status_for(exc), content={"detail": str(exc), "error": exc.kind})


# ---------- Auth ----------
security = HTTPBearer(auto_error=False)


def require_admin(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Admin login required")
    subject = decode_token(credentials.credentials)
    if subject is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return subject


# ---------- Request models ----------


class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class CreateTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    short_name: str = Field(..., min_length=1, max_length=10)
    primary_color: str = Field(..., min_length=1, max_length=32)
    secondary_color: str = Field(..., min_length=1, max_length=32)
    logo_url: str | None = None
    budget: int | None = Field(None, gt=0)


class SetCaptainRequest(BaseModel):
    captain_id: str | None = None
    vice_captain_id: str | None = None


class RegisterPlayerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    mobile: str
    email: str | None = None
    address: str = Field(..., min_length=1)
    role: str
    batting_rating: int
    bowling_rating: int
    fielding_rating: int
    photo_url: str = Field(..., min_length=1)


class CategoryRequest(BaseModel):
    category: str


class NextPlayerRequest(BaseModel):
    category: str | None = None


class BidRequest(BaseModel):
    team_id: str


class AssignGroupsRequest(BaseModel):
    seed: int | None = None


class KnockoutMatchRequest(BaseModel):
    stage: str
    team1_id: str
    team2_id: str


class CreateMatchRequest(BaseModel):
    team1_id: str
    team2_id: str
    stage: str = "group"
    group_name: str | None = None
    squad_size: int | None = Field(None, ge=2)
    overs_limit: int | None = Field(None, ge=1)


class StartMatchRequest(BaseModel):
    toss_winner_id: str
    toss_decision: str


class SetBatsmenRequest(BaseModel):
    striker_id: str
    non_striker_id: str


class SetBowlerRequest(BaseModel):
    bowler_id: str


class NewBatsmanRequest(BaseModel):
    player_id: str
    replace_striker: bool | None = None


class PowerOverRequest(BaseModel):
    over_number: int
    innings: int


class BallRequest(BaseModel):
    runs: int = 0
    extra_type: str | None = None
    is_wicket: bool = False
    wicket_type: str | None = None
    dismissed_player_id: str | None = None
    fielder_id: str | None = None


# ---------- Admin ----------


@app.post("/admin/login")
def admin_login(req: AdminLoginRequest) -> dict[str, Any]:
    if not authenticate_admin(req.username, req.password):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"token": create_access_token(req.username), "token_type": "bearer"}


# ---------- Teams ----------


@app.get("/teams")
def list_teams() -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [t.to_dict() for t in registry.list_teams(conn)]


@app.get("/teams/{team_id}")
def get_team(team_id: str) -> dict[str, Any]:
    """Team plus its bought squad."""
    with db_conn() as conn:
        team = registry.get_team(conn, team_id)
        out = team.to_dict()
        out["players"] = [p.to_dict() for p in registry.team_squad(conn, team_id)]
        return out


@app.post("/teams", status_code=201)
def create_team(req: CreateTeamRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        team = registry.create_team(
            conn,
            name=req.name,
            short_name=req.short_name,
            primary_color=req.primary_color,
            secondary_color=req.secondary_color,
            budget=req.budget,
            logo_url=req.logo_url,
        )
        return team.to_dict()


@app.post("/teams/{team_id}/captain")
def set_captain(team_id: str, req: SetCaptainRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return registry.set_captain(conn, team_id, req.captain_id, req.vice_captain_id).to_dict()


# ---------- Players ----------


@app.get("/players")
def list_players(
    status: str | None = Query(None),
    category: str | None = Query(None),
    team_id: str | None = Query(None),
) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [p.to_dict() for p in registry.list_players(conn, status=status, category=category, team_id=team_id)]


@app.get("/players/pending")
def list_pending_players(admin: str = Depends(require_admin)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [p.to_dict() for p in registry.list_pending(conn)]


@app.get("/players/{player_id}")
def get_player(player_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return registry.get_player(conn, player_id).to_dict()


@app.post("/players", status_code=201)
def register_player(req: RegisterPlayerRequest) -> dict[str, Any]:
    with db_conn() as conn:
        player = registry.register_player(
            conn,
            name=req.name,
            mobile=req.mobile,
            email=req.email,
            address=req.address,
            role=req.role,
            batting_rating=req.batting_rating,
            bowling_rating=req.bowling_rating,
            fielding_rating=req.fielding_rating,
            photo_url=req.photo_url,
        )
        return player.to_dict()


@app.post("/players/{player_id}/approve")
def approve_player(player_id: str, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return registry.approve_player(conn, player_id).to_dict()


@app.post("/players/{player_id}/reject")
def reject_player(player_id: str, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return registry.reject_player(conn, player_id).to_dict()


@app.post("/players/{player_id}/verify-payment")
def verify_payment(player_id: str, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return registry.verify_payment(conn, player_id).to_dict()


# ---------- Auction ----------


def _auction_snapshot(conn, state: AuctionState) -> dict[str, Any]:
    out = state.to_dict()
    player = auction.current_player(conn, state)
    out["current_player"] = player.to_dict() if player else None
    return out


@app.get("/auction/state")
def get_auction_state() -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.get_state(conn))


@app.post("/auction/start")
def auction_start(req: CategoryRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.start(conn, req.category))


@app.post("/auction/category")
def auction_select_category(req: CategoryRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.select_category(conn, req.category))


@app.post("/auction/next")
def auction_next(req: NextPlayerRequest | None = None, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.next_player(conn, req.category if req else None))


@app.post("/auction/bid")
def auction_bid(req: BidRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.place_bid(conn, req.team_id))


@app.post("/auction/undo-bid")
def auction_undo_bid(admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.undo_bid(conn))


@app.post("/auction/sell")
def auction_sell(admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.sell(conn))


@app.post("/auction/unsold")
def auction_unsold(admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.mark_unsold(conn))


@app.post("/auction/pause")
def auction_pause(admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.pause(conn))


@app.post("/auction/resume")
def auction_resume(admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.resume(conn))


@app.post("/auction/stop")
def auction_stop(admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.stop(conn))


@app.post("/auction/reset")
def auction_reset(admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return _auction_snapshot(conn, auction.reset(conn))


# ---------- Tournament ----------


@app.post("/tournament/assign-groups")
def assign_groups(req: AssignGroupsRequest | None = None, admin: str = Depends(require_admin)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        teams = tournament.assign_groups(conn, seed=req.seed if req else None)
        return [t.to_dict() for t in teams]


@app.post("/tournament/knockout", status_code=201)
def create_knockout_match(req: KnockoutMatchRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return tournament.create_knockout_match(conn, req.stage, req.team1_id, req.team2_id).to_dict()


# ---------- Matches ----------


@app.get("/matches")
def list_matches(status: str | None = Query(None)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [m.to_dict() for m in matches.list_matches(conn, status=status)]


@app.get("/matches/{match_id}")
def get_match(match_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return matches.get_match(conn, match_id).to_dict()


@app.get("/matches/{match_id}/balls")
def get_match_balls(match_id: str, innings: int | None = Query(None)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [b.to_dict() for b in matches.list_balls(conn, match_id, innings)]


@app.get("/matches/{match_id}/player-stats")
def get_match_player_stats(match_id: str) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [s.to_dict() for s in matches.list_player_stats(conn, match_id)]


@app.post("/matches", status_code=201)
def create_match(req: CreateMatchRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        match = matches.create_match(
            conn,
            req.team1_id,
            req.team2_id,
            stage=req.stage,
            group_name=req.group_name,
            squad_size=req.squad_size,
            overs_limit=req.overs_limit,
        )
        return match.to_dict()


@app.post("/matches/{match_id}/start")
def start_match(match_id: str, req: StartMatchRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return matches.start(conn, match_id, req.toss_winner_id, req.toss_decision).to_dict()


@app.post("/matches/{match_id}/batsmen")
def set_batsmen(match_id: str, req: SetBatsmenRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return matches.set_batsmen(conn, match_id, req.striker_id, req.non_striker_id).to_dict()


@app.post("/matches/{match_id}/bowler")
def set_bowler(match_id: str, req: SetBowlerRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return matches.set_bowler(conn, match_id, req.bowler_id).to_dict()


@app.post("/matches/{match_id}/new-batsman")
def new_batsman(match_id: str, req: NewBatsmanRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return matches.new_batsman(conn, match_id, req.player_id, req.replace_striker).to_dict()


@app.post("/matches/{match_id}/power-over")
def set_power_over(match_id: str, req: PowerOverRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        return matches.set_power_over(conn, match_id, req.over_number, req.innings).to_dict()


@app.post("/matches/{match_id}/ball")
def record_ball(match_id: str, req: BallRequest, admin: str = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        match = matches.record_ball(
            conn,
            match_id,
            runs=req.runs,
            extra_type=req.extra_type,
            is_wicket=req.is_wicket,
            wicket_type=req.wicket_type,
            dismissed_player_id=req.dismissed_player_id,
            fielder_id=req.fielder_id,
        )
        return match.to_dict()


@app.post("/matches/{match_id}/verify-stats")
def verify_match_stats(
    match_id: str,
    repair: bool = Query(False),
    admin: str = Depends(require_admin),
) -> dict[str, Any]:
    """Report stats rows that diverge from the ball log; repair=true rewrites them."""
    with db_conn() as conn:
        report = matches.verify_stats(conn, match_id)
        if repair and report["mismatches"]:
            matches.recompute_player_stats(conn, match_id)
            report = matches.verify_stats(conn, match_id)
            report["repaired"] = True
        return report


# ---------- Standings ----------


@app.get("/points-table")
def get_points_table(group: str | None = Query(None)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return standings_svc.points_table(conn, group_name=group)


@app.post("/points-table/rebuild")
def rebuild_points_table(admin: str = Depends(require_admin)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return standings_svc.rebuild_points_table(conn)


@app.get("/leaderboards/orange-cap")
def orange_cap(limit: int = Query(10, ge=1, le=100)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return standings_svc.orange_cap(conn, limit)


@app.get("/leaderboards/purple-cap")
def purple_cap(limit: int = Query(10, ge=1, le=100)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return standings_svc.purple_cap(conn, limit)


@app.get("/leaderboards/mvp")
def mvp(limit: int = Query(10, ge=1, le=100)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return standings_svc.mvp(conn, limit)


# ---------- Run with: uvicorn cricket_tournament.api:app --reload ----------
