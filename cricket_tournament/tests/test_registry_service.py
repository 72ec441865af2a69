"""
Tests for team creation, player registration, approval (category placement),
payment verification and captain selection.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from cricket_tournament.errors import (
    DuplicateRegistration,
    InvalidRegistration,
    InvalidSelection,
    PlayerNotFound,
    TeamNotFound,
)
from cricket_tournament.persistence.db import get_connection, init_db, set_db_path
from cricket_tournament.persistence.repositories import PlayerRepository
from cricket_tournament.services import RegistryService


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "registry_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def registry():
    return RegistryService()


def _register(registry, conn, mobile="9876543210", email=None, ratings=(5, 5, 5), role="Batsman"):
    return registry.register_player(
        conn,
        name="Rohan Patil",
        mobile=mobile,
        email=email,
        address="Pune",
        role=role,
        batting_rating=ratings[0],
        bowling_rating=ratings[1],
        fielding_rating=ratings[2],
        photo_url="https://example.com/p.jpg",
    )


# ---------- Teams ----------


def test_create_team_uses_default_budget(db_conn, registry):
    team = registry.create_team(db_conn, "Thunder", "THU", "#000", "#fff")
    assert team.budget == team.remaining_budget == 25000
    assert registry.get_team(db_conn, team.id).name == "Thunder"


def test_team_name_unique(db_conn, registry):
    registry.create_team(db_conn, "Thunder", "THU", "#000", "#fff")
    with pytest.raises(DuplicateRegistration):
        registry.create_team(db_conn, "Thunder", "TH2", "#000", "#fff")


def test_team_budget_must_be_positive(db_conn, registry):
    with pytest.raises(InvalidRegistration):
        registry.create_team(db_conn, "Broke", "BRK", "#000", "#fff", budget=0)


def test_unknown_team(db_conn, registry):
    with pytest.raises(TeamNotFound):
        registry.get_team(db_conn, "nope")


# ---------- Registration ----------


def test_register_player_starts_pending(db_conn, registry):
    p = _register(registry, db_conn, email="Rohan@Example.com")
    assert p.status == "registered"
    assert p.approval_status == "pending"
    assert p.payment_status == "pending"
    assert p.category is None
    assert p.email == "rohan@example.com"
    assert not p.is_auction_eligible
    assert [x.id for x in registry.list_pending(db_conn)] == [p.id]


@pytest.mark.parametrize("mobile", ["12345", "98765432101", "98765abcde"])
def test_mobile_must_be_ten_digits(db_conn, registry, mobile):
    with pytest.raises(InvalidRegistration):
        _register(registry, db_conn, mobile=mobile)


@pytest.mark.parametrize("ratings", [(0, 5, 5), (5, 11, 5), (5, 5, -1)])
def test_ratings_bounded(db_conn, registry, ratings):
    with pytest.raises(InvalidRegistration):
        _register(registry, db_conn, ratings=ratings)


def test_unknown_role(db_conn, registry):
    with pytest.raises(InvalidRegistration):
        _register(registry, db_conn, role="Wicketkeeper")


def test_duplicate_mobile_and_email(db_conn, registry):
    _register(registry, db_conn, email="a@example.com")
    with pytest.raises(DuplicateRegistration):
        _register(registry, db_conn)
    with pytest.raises(DuplicateRegistration):
        _register(registry, db_conn, mobile="9000000000", email="A@EXAMPLE.COM")


# ---------- Approval ----------


@pytest.mark.parametrize(
    "ratings,category,base",
    [
        ((10, 10, 10), "3000", 3000),
        ((8, 8, 8), "3000", 3000),
        ((8, 8, 7), "2500", 2500),
        ((6, 6, 6), "2500", 2500),
        ((4, 4, 4), "2000", 2000),
        ((4, 4, 3), "1500", 1500),
        ((1, 1, 1), "1500", 1500),
    ],
)
def test_approval_places_player_in_tier(db_conn, registry, ratings, category, base):
    p = _register(registry, db_conn, ratings=ratings)
    approved = registry.approve_player(db_conn, p.id)
    assert approved.approval_status == "approved"
    assert approved.category == category
    assert approved.base_points == base


def test_eligible_only_after_payment_verified(db_conn, registry):
    p = _register(registry, db_conn)
    assert not registry.approve_player(db_conn, p.id).is_auction_eligible
    assert registry.verify_payment(db_conn, p.id).is_auction_eligible


def test_reject_player(db_conn, registry):
    p = _register(registry, db_conn)
    rejected = registry.reject_player(db_conn, p.id)
    assert rejected.approval_status == "rejected"
    assert rejected.category is None
    assert registry.list_pending(db_conn) == []


def test_approval_refused_once_in_auction(db_conn, registry):
    p = _register(registry, db_conn)
    PlayerRepository().set_status(db_conn, p.id, "in_auction")
    with pytest.raises(InvalidSelection):
        registry.approve_player(db_conn, p.id)


def test_unknown_player(db_conn, registry):
    with pytest.raises(PlayerNotFound):
        registry.verify_payment(db_conn, "nope")


# ---------- Captains ----------


def test_captains_must_belong_to_team(db_conn, registry):
    team = registry.create_team(db_conn, "Thunder", "THU", "#000", "#fff")
    other = registry.create_team(db_conn, "Royals", "ROY", "#000", "#fff")
    repo = PlayerRepository()
    c = _register(registry, db_conn, mobile="9000000001")
    v = _register(registry, db_conn, mobile="9000000002")
    x = _register(registry, db_conn, mobile="9000000003")
    repo.mark_sold(db_conn, c.id, team.id, 1500)
    repo.mark_sold(db_conn, v.id, team.id, 1500)
    repo.mark_sold(db_conn, x.id, other.id, 1500)

    updated = registry.set_captain(db_conn, team.id, c.id, v.id)
    assert (updated.captain_id, updated.vice_captain_id) == (c.id, v.id)
    assert [p.id for p in registry.team_squad(db_conn, team.id)] == [c.id, v.id]

    with pytest.raises(InvalidSelection):
        registry.set_captain(db_conn, team.id, c.id, c.id)
    with pytest.raises(InvalidSelection):
        registry.set_captain(db_conn, team.id, x.id)
