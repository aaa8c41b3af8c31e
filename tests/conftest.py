"""
Shared fixtures: in-memory stand-ins for the MySQL repositories.

They keep rows as plain dicts shaped like the DictCursor rows the real
repositories return, so services run unchanged on top of them.
"""
from datetime import datetime, timedelta

import pytest

from repositories.match_repo import UPDATABLE_COLUMNS, StaleMatchError, match_from_row
from services.bracket_service import BracketService
from services.tournament_service import TournamentService


class FakeTournamentRepo:
    def __init__(self, db):
        self._db = db

    async def create_tournament(self, *, name):
        tid = self._db.next_id("tournament")
        created = datetime(2024, 1, 1) + timedelta(minutes=tid)
        self._db.tournaments[tid] = {"tournament_id": tid, "name": name, "created_at": created}
        return tid

    async def get_tournament(self, *, tournament_id):
        row = self._db.tournaments.get(tournament_id)
        return dict(row) if row else None

    async def list_tournaments(self):
        rows = sorted(self._db.tournaments.values(), key=lambda r: r["created_at"], reverse=True)
        return [dict(r) for r in rows]

    async def delete_tournament(self, *, tournament_id):
        if tournament_id not in self._db.tournaments:
            return 0
        del self._db.tournaments[tournament_id]
        self._db.players = {k: v for k, v in self._db.players.items() if v["tournament_id"] != tournament_id}
        self._db.matches = {k: v for k, v in self._db.matches.items() if v["tournament_id"] != tournament_id}
        return 1

    async def count_tournaments(self):
        return len(self._db.tournaments)


class FakePlayerRepo:
    def __init__(self, db):
        self._db = db

    async def create_players(self, *, tournament_id, players):
        ids = []
        for name, seed_position in players:
            pid = self._db.next_id("player")
            self._db.players[pid] = {
                "player_id": pid,
                "tournament_id": tournament_id,
                "name": name,
                "seed_position": seed_position,
            }
            ids.append(pid)
        return ids

    async def list_players(self, *, tournament_id):
        rows = [dict(r) for r in self._db.players.values() if r["tournament_id"] == tournament_id]
        return sorted(rows, key=lambda r: (r["seed_position"], r["player_id"]))


class FakeMatchRepo:
    def __init__(self, db):
        self._db = db
        self.apply_calls = 0

    async def create_matches(self, *, tournament_id, matches):
        ids = []
        for m in matches:
            mid = self._db.next_id("match")
            self._db.matches[mid] = {
                "match_id": mid,
                "tournament_id": tournament_id,
                "round_no": m.round_no,
                "match_no": m.match_no,
                "player1_id": m.player1_id,
                "player2_id": m.player2_id,
                "winner_id": m.winner_id,
                "is_bye": 1 if m.is_bye else 0,
            }
            ids.append(mid)
        return ids

    async def list_matches(self, *, tournament_id, round_no=None):
        rows = [
            dict(r)
            for r in self._db.matches.values()
            if r["tournament_id"] == tournament_id and (round_no is None or r["round_no"] == round_no)
        ]
        return sorted(rows, key=lambda r: (r["round_no"], r["match_no"]))

    async def get_match(self, *, match_id):
        row = self._db.matches.get(match_id)
        return dict(row) if row else None

    async def update_match(self, *, match_id, fields):
        unknown = set(fields) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot update bracket_match columns: {sorted(unknown)}")
        row = self._db.matches.get(match_id)
        if row is None:
            return None
        row.update(fields)
        return match_from_row(row)

    async def apply_updates(self, *, updates, before):
        self.apply_calls += 1
        for m in updates:
            row = self._db.matches.get(m.match_id)
            if row is None or _slot_state(row) != _match_state(before[m.match_id]):
                raise StaleMatchError(f"{m.code} (match {m.match_id}) was changed by another writer.")
        for m in updates:
            self._db.matches[m.match_id].update(
                player1_id=m.player1_id,
                player2_id=m.player2_id,
                winner_id=m.winner_id,
                is_bye=1 if m.is_bye else 0,
            )


def _slot_state(row):
    return row["player1_id"], row["player2_id"], row["winner_id"], bool(row["is_bye"])


def _match_state(m):
    return m.player1_id, m.player2_id, m.winner_id, m.is_bye


class FakeDb:
    def __init__(self):
        self.tournaments = {}
        self.players = {}
        self.matches = {}
        self._seq = {}

    def next_id(self, table):
        self._seq[table] = self._seq.get(table, 0) + 1
        return self._seq[table]


@pytest.fixture
def fake_db():
    return FakeDb()


@pytest.fixture
def match_repo(fake_db):
    return FakeMatchRepo(fake_db)


@pytest.fixture
def bracket_service(match_repo):
    return BracketService(match_repo=match_repo)


@pytest.fixture
def tournament_repo(fake_db):
    return FakeTournamentRepo(fake_db)


@pytest.fixture
def tournament_service(fake_db, tournament_repo, bracket_service):
    return TournamentService(
        tournament_repo=tournament_repo,
        player_repo=FakePlayerRepo(fake_db),
        bracket_service=bracket_service,
    )
