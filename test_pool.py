#!/usr/bin/env python3
"""
Free Agent Pool Tests
======================

Weekly tick, NPC market, mid-season releases and visibility.
"""

from dataclasses import replace

import market.pool as pool_module
from market.models import (
    Club,
    FreeAgent,
    FreeAgentPool,
    GameState,
    NPCInterest,
    Player,
    Scout,
)
from market.pool import (
    add_free_agent,
    create_empty_pool,
    find_free_agent,
    get_visible_free_agents,
    mark_free_agent_signed,
    prune_resolved_agents,
    remove_free_agent,
    reset_season_counters,
    tick_free_agent_pool,
)
from market.rng import SeededRNG


def _player(pid="p1", age=27, ca=60, club_id=None, nationality="england") -> Player:
    return Player(
        id=pid, first_name="Sam", last_name=f"Reed{pid}", age=age, position="CB",
        nationality=nationality, club_id=club_id, contract_expiry=0,
        current_ability=ca, potential_ability=ca + 5,
    )


def _agent(pid="p1", weeks=0, max_weeks=16, wage=4800, bonus=14400, **kwargs) -> FreeAgent:
    defaults = dict(
        player_id=pid, country="england", released_from="c0", released_season=1,
        max_weeks_in_pool=max_weeks, wage_expectation=wage, signing_bonus_expectation=bonus,
        weeks_in_pool=weeks,
    )
    defaults.update(kwargs)
    return FreeAgent(**defaults)


def _clubs() -> dict:
    return {
        "c0": Club("c0", "Ashford United", "england", "lg", 60, 2_000_000),
        "c1": Club("c1", "Brinton City", "england", "lg", 55, 2_000_000),
        "c2": Club("c2", "Carlow Vale", "england", "lg", 58, 100),   # can't afford anyone
    }


def _state(agents, players=None, clubs=None, week=5) -> GameState:
    players = players if players is not None else {a.player_id: _player(a.player_id) for a in agents}
    return GameState(
        current_week=week,
        current_season=1,
        scout=Scout(id="s", name="Alex", reputation=30, primary_specialization="regional"),
        players=players,
        clubs=clubs if clubs is not None else _clubs(),
        free_agent_pool=FreeAgentPool(agents=list(agents)),
    )


# ═══════════════════════════════════════════════════════════════
# STORE OPERATIONS
# ═══════════════════════════════════════════════════════════════

class TestStore:
    def test_empty_pool(self):
        pool = create_empty_pool(3)
        assert pool.agents == []
        assert pool.last_refresh_season == 3

    def test_add_find_remove(self):
        pool = add_free_agent(create_empty_pool(1), _agent("p1"))
        assert pool.total_released_this_season == 1
        assert find_free_agent(pool, "p1") is not None
        assert find_free_agent(pool, "nobody") is None
        assert remove_free_agent(pool, "p1").agents == []

    def test_mark_signed(self):
        pool = FreeAgentPool(agents=[_agent("p1"), _agent("p2")])
        signed = mark_free_agent_signed(pool, "p1", "c9")
        assert find_free_agent(signed, "p1").status == "signed"
        assert find_free_agent(signed, "p1").signed_club_id == "c9"
        assert signed.total_signed_this_season == 1
        assert pool.agents[0].status == "available"

    def test_mark_signed_unknown_or_terminal_is_noop(self):
        pool = FreeAgentPool(agents=[_agent("p1", status="retired")])
        assert mark_free_agent_signed(pool, "p1", "c9") is pool
        assert mark_free_agent_signed(pool, "zzz", "c9") is pool

    def test_prune_and_reset(self):
        pool = FreeAgentPool(
            agents=[_agent("p1"), _agent("p2", status="signed"), _agent("p3", status="dropped_out")],
            total_signed_this_season=4,
        )
        assert [a.player_id for a in prune_resolved_agents(pool).agents] == ["p1"]
        reset = reset_season_counters(pool, 2)
        assert reset.total_signed_this_season == 0
        assert reset.last_refresh_season == 2
        assert len(reset.agents) == 3


# ═══════════════════════════════════════════════════════════════
# WEEKLY TICK
# ═══════════════════════════════════════════════════════════════

class TestTick:
    def test_old_agent_retires_at_max_weeks(self):
        state = _state([_agent("p1", weeks=7, max_weeks=8)], players={"p1": _player("p1", age=33)})
        result = tick_free_agent_pool(state, SeededRNG(1))
        agent = find_free_agent(result.updated_pool, "p1")
        assert agent.status == "retired"
        assert agent.weeks_in_pool == 8
        assert "p1" in result.removed_player_ids
        assert result.updated_pool.total_retired_this_season == 1

    def test_young_agent_drops_out(self):
        state = _state([_agent("p1", weeks=7, max_weeks=8)], players={"p1": _player("p1", age=24)})
        result = tick_free_agent_pool(state, SeededRNG(1))
        assert find_free_agent(result.updated_pool, "p1").status == "dropped_out"

    def test_expectations_decay_with_floor(self):
        state = _state([_agent("p1", wage=1000, bonus=1000), _agent("p2", wage=200, bonus=0)])
        result = tick_free_agent_pool(state, SeededRNG(1))
        assert find_free_agent(result.updated_pool, "p1").wage_expectation == 970
        assert find_free_agent(result.updated_pool, "p1").signing_bonus_expectation == 955
        assert find_free_agent(result.updated_pool, "p2").wage_expectation == 200
        assert find_free_agent(result.updated_pool, "p2").signing_bonus_expectation == 0

    def test_terminal_agents_are_untouched(self):
        signed = _agent("p1", weeks=3, status="signed", signed_club_id="c1")
        state = _state([signed])
        result = tick_free_agent_pool(state, SeededRNG(1))
        assert result.updated_pool.agents[0] == signed

    def test_input_state_not_mutated(self):
        agent = _agent("p1", weeks=2)
        state = _state([agent])
        before = state.to_dict()
        tick_free_agent_pool(state, SeededRNG(1))
        assert state.to_dict() == before

    def test_deterministic(self):
        agents = [_agent(f"p{i}", weeks=i % 5) for i in range(30)]
        state = _state(agents)
        a = tick_free_agent_pool(state, SeededRNG("same"))
        b = tick_free_agent_pool(state, SeededRNG("same"))
        assert a.updated_pool.to_dict() == b.updated_pool.to_dict()
        assert a.npc_signed == b.npc_signed

    def test_available_agents_stay_within_bounds(self):
        rng = SeededRNG(42)
        state = _state([_agent(f"p{i}", max_weeks=4 + i % 3) for i in range(20)])
        for _ in range(10):
            result = tick_free_agent_pool(state, rng)
            for agent in result.updated_pool.available():
                assert 0 <= agent.weeks_in_pool < agent.max_weeks_in_pool
                assert agent.wage_expectation >= 200
            state = replace(state, free_agent_pool=result.updated_pool)

    def test_missing_player_record_still_ages_but_gets_no_interest(self):
        state = _state([_agent("ghost", weeks=1)], players={})
        for seed in range(20):
            result = tick_free_agent_pool(state, SeededRNG(seed))
            agent = find_free_agent(result.updated_pool, "ghost")
            assert agent.weeks_in_pool == 2
            assert agent.npc_interest == []

    def test_releasing_and_broke_clubs_never_interested(self):
        clubs = {k: v for k, v in _clubs().items() if k in ("c0", "c2")}
        state = _state([_agent("p1", released_from="c0")], clubs=clubs)
        for seed in range(40):
            result = tick_free_agent_pool(state, SeededRNG(seed))
            assert find_free_agent(result.updated_pool, "p1").npc_interest == []

    def test_interest_from_eligible_club(self):
        state = _state([_agent("p1", released_from="c0")])
        clubs_seen = set()
        for seed in range(60):
            result = tick_free_agent_pool(state, SeededRNG(seed))
            agent = find_free_agent(result.updated_pool, "p1")
            clubs_seen.update(i.club_id for i in agent.npc_interest)
            clubs_seen.update(club for _, club in result.npc_signed)
        assert clubs_seen == {"c1"}

    def test_interest_capped(self):
        interests = [NPCInterest("c1", 1, accepted=True) for _ in range(3)]
        state = _state([_agent("p1", npc_interest=interests)])
        for seed in range(30):
            result = tick_free_agent_pool(state, SeededRNG(seed))
            assert len(find_free_agent(result.updated_pool, "p1").npc_interest) <= 3

    def test_npc_signing_message_only_when_discovered(self):
        pending = [NPCInterest("c1", 1)]
        hidden = _state([_agent("p1", npc_interest=pending)])
        known = _state([_agent("p1", npc_interest=pending, discovered_by_scout=True)])
        hidden_signings = known_signings = 0
        for seed in range(40):
            h = tick_free_agent_pool(hidden, SeededRNG(seed))
            k = tick_free_agent_pool(known, SeededRNG(seed))
            assert h.messages == []
            if h.npc_signed:
                hidden_signings += 1
                assert find_free_agent(h.updated_pool, "p1").signed_club_id == "c1"
            if k.npc_signed:
                known_signings += 1
                assert len(k.messages) == 1
                assert k.messages[0].title == "Sam Reedp1 Signs with Brinton City"
        assert hidden_signings > 0
        assert known_signings > 0

    def test_counters(self):
        state = _state([_agent("p1", weeks=7, max_weeks=8)], players={"p1": _player("p1", age=33)})
        state = replace(state, free_agent_pool=replace(state.free_agent_pool, total_retired_this_season=2))
        result = tick_free_agent_pool(state, SeededRNG(1))
        assert result.updated_pool.total_retired_this_season == 3


class TestMidSeasonReleases:
    def test_journeymen_released_when_roll_succeeds(self, monkeypatch):
        monkeypatch.setattr(pool_module, "MID_SEASON_RELEASE_CHANCE", 1.0)
        players = {
            "vet": _player("vet", age=31, ca=50, club_id="c1"),
            "young": _player("young", age=22, ca=50, club_id="c1"),
            "star": _player("star", age=29, ca=90, club_id="c1"),
            "orphan": _player("orphan", age=29, ca=40, club_id="missing"),
        }
        state = _state([], players=players)
        result = tick_free_agent_pool(state, SeededRNG(1))
        released = {a.player_id: a for a in result.mid_season_releases}
        assert set(released) == {"vet"}
        vet = released["vet"]
        assert vet.released_from == "c1"
        assert vet.wage_expectation == 3200            # 50 * 80 * 0.8
        assert vet.signing_bonus_expectation == 6400
        assert vet.max_weeks_in_pool == 16
        assert result.updated_pool.total_released_this_season == 1

    def test_player_already_in_pool_skipped(self, monkeypatch):
        monkeypatch.setattr(pool_module, "MID_SEASON_RELEASE_CHANCE", 1.0)
        players = {"vet": _player("vet", age=31, ca=40, club_id="c1")}
        state = _state([_agent("vet")], players=players)
        result = tick_free_agent_pool(state, SeededRNG(1))
        assert result.mid_season_releases == []


# ═══════════════════════════════════════════════════════════════
# VISIBILITY
# ═══════════════════════════════════════════════════════════════

class TestVisibility:
    def test_gate(self):
        pool = FreeAgentPool(agents=[
            _agent("known", country="brazil", discovered_by_scout=True),
            _agent("basic", country="spain"),
            _agent("rumor", country="italy"),
            _agent("gone", country="spain", status="signed"),
        ])
        visible = get_visible_free_agents(pool, {"spain": 20, "italy": 19})
        assert [a.player_id for a in visible] == ["known", "basic"]
