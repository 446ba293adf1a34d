#!/usr/bin/env python3
"""
World Generation Tests
=======================

Seeded careers, league calendars and the scout's starting position.
"""

from collections import Counter

import pytest

from market.config import WEEKS_PER_SEASON
from market.models import League
from market.world import generate_fixtures, generate_world


# ═══════════════════════════════════════════════════════════════
# WORLD
# ═══════════════════════════════════════════════════════════════

class TestGenerateWorld:
    def test_same_seed_same_world(self):
        a, _ = generate_world("career-1")
        b, _ = generate_world("career-1")
        assert a.to_dict() == b.to_dict()

    def test_different_seed_different_world(self):
        a, _ = generate_world("career-1")
        b, _ = generate_world("career-2")
        assert a.to_dict() != b.to_dict()

    def test_returned_rng_continues_the_stream(self):
        _, rng_a = generate_world(7)
        _, rng_b = generate_world(7)
        assert rng_a.next() == rng_b.next()

    def test_shape(self):
        state, _ = generate_world(3, countries=["england", "spain"], clubs_per_league=6, squad_size=12)
        assert set(state.leagues) == {"lg_england", "lg_spain"}
        assert len(state.clubs) == 12
        assert len(state.players) == 144
        assert state.current_week == 1
        assert state.current_season == 1
        assert state.free_agent_pool.agents == []
        for player in state.players.values():
            assert player.club_id in state.clubs
            assert 20 <= player.current_ability <= 180
            assert player.potential_ability >= player.current_ability
            assert 1 <= player.contract_expiry <= 4

    def test_scout_works_in_lower_half_of_home_league(self):
        for seed in range(10):
            state, _ = generate_world(seed, countries=["spain", "italy"])
            club_ids = state.leagues["lg_spain"].club_ids
            assert state.scout.current_club_id in club_ids[len(club_ids) // 2:]
            assert state.scout.country_familiarity["spain"] == 70
            assert 0 <= state.scout.country_familiarity["italy"] <= 35

    def test_rivals_work_elsewhere(self):
        state, _ = generate_world(11)
        assert 3 <= len(state.rival_scouts) <= 5
        assert all(r.club_id != state.scout.current_club_id for r in state.rival_scouts.values())
        assert sum(r.is_nemesis for r in state.rival_scouts.values()) == 1

    def test_regional_scout_covers_two_territories(self):
        regional, _ = generate_world(5, specialization="regional")
        youth, _ = generate_world(5, specialization="youth")
        assert len(regional.territories) == 2
        assert list(youth.territories) == ["tr_england"]

    def test_contacts(self):
        state, _ = generate_world(5, home_country="germany")
        assert 4 <= len(state.contacts) <= 8
        assert state.contacts["ct_00"].country == "germany"
        assert all(15 <= c.relationship <= 70 for c in state.contacts.values())

    def test_club_count_clamped(self):
        state, _ = generate_world(1, countries=["france"], clubs_per_league=40, squad_size=1)
        assert len(state.clubs) == 12

    @pytest.mark.parametrize("kwargs", [
        {"specialization": "goalkeeping"},
        {"countries": ["atlantis"]},
        {"countries": ["england"], "home_country": "spain"},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            generate_world(1, **kwargs)


# ═══════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════

class TestFixtures:
    def _league(self, size):
        return {"lg": League("lg", "Test League", "england", [f"c{i}" for i in range(size)])}

    def test_every_week_has_fixtures(self):
        fixtures = generate_fixtures(self._league(10), 1)
        weeks = Counter(f.week for f in fixtures.values())
        assert set(weeks) == set(range(1, WEEKS_PER_SEASON + 1))
        assert all(count == 5 for count in weeks.values())

    @pytest.mark.parametrize("size", [2, 3, 7, 10])
    def test_each_club_plays_at_most_once_per_week(self, size):
        fixtures = generate_fixtures(self._league(size), 1)
        for week in range(1, WEEKS_PER_SEASON + 1):
            clubs = []
            for f in fixtures.values():
                if f.week == week:
                    assert f.home_club_id != f.away_club_id
                    clubs += [f.home_club_id, f.away_club_id]
            assert len(clubs) == len(set(clubs))

    def test_everyone_meets_everyone(self):
        fixtures = generate_fixtures(self._league(6), 1)
        pairs = {frozenset((f.home_club_id, f.away_club_id)) for f in fixtures.values()}
        assert len(pairs) == 15

    def test_deterministic_and_season_scoped(self):
        leagues = self._league(4)
        assert generate_fixtures(leagues, 2) == generate_fixtures(leagues, 2)
        assert all(fid.startswith("fx_s3_") for fid in generate_fixtures(leagues, 3))

    def test_tiny_league_has_no_fixtures(self):
        assert generate_fixtures(self._league(1), 1) == {}
