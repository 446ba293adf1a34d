#!/usr/bin/env python3
"""
Free Agent Discovery Tests
===========================

Familiarity gating, specialization channels and contact tips.
"""

from dataclasses import replace

import pytest

from market.discovery import (
    discover_free_agents,
    get_familiarity_accuracy_penalty,
    get_familiarity_visibility,
    process_contact_free_agent_tip,
)
from market.models import (
    Club,
    Contact,
    FreeAgent,
    FreeAgentPool,
    GameState,
    Player,
    Scout,
    Territory,
)
from market.pool import find_free_agent
from market.rng import SeededRNG


def _state(specialization="first_team", familiarity=None, contacts=None, territories=None,
           agents=None) -> GameState:
    agents = agents if agents is not None else [FreeAgent(
        player_id="p1", country="spain", released_from="c0", released_season=1,
        max_weeks_in_pool=16, wage_expectation=4000, signing_bonus_expectation=12000,
    )]
    players = {
        a.player_id: Player(
            id=a.player_id, first_name="Iker", last_name="Ruiz", age=28, position="ST",
            nationality=a.country, club_id=None, contract_expiry=0,
            current_ability=55, potential_ability=60,
        )
        for a in agents
    }
    return GameState(
        current_week=4,
        current_season=1,
        scout=Scout(
            id="s", name="Alex", reputation=40, primary_specialization=specialization,
            country_familiarity=familiarity or {},
        ),
        players=players,
        clubs={"c0": Club("c0", "Alcora CF", "spain", "lg_spain", 50, 900_000)},
        contacts={c.id: c for c in (contacts or [])},
        territories={t.id: t for t in (territories or [])},
        free_agent_pool=FreeAgentPool(agents=agents),
    )


def _run_until_discovered(state, seeds=400):
    """Return the first discovered agent across independent seeds, or None."""
    for seed in range(seeds):
        result = discover_free_agents(state, SeededRNG(seed))
        agent = find_free_agent(result.updated_pool, "p1")
        if agent.discovered_by_scout:
            return agent, result
    return None, None


# ═══════════════════════════════════════════════════════════════
# VISIBILITY
# ═══════════════════════════════════════════════════════════════

class TestVisibilityTiers:
    @pytest.mark.parametrize("familiarity,tier", [
        (0, "none"), (1, "rumor"), (19, "rumor"), (20, "basic"), (39, "basic"),
        (40, "standard"), (60, "good"), (79, "good"), (80, "expert"), (100, "expert"),
    ])
    def test_tiers(self, familiarity, tier):
        assert get_familiarity_visibility(familiarity) == tier

    def test_accuracy_penalty(self):
        assert get_familiarity_accuracy_penalty(90, "first_team") == 0.0
        assert get_familiarity_accuracy_penalty(65, "first_team") == 0.10
        assert get_familiarity_accuracy_penalty(45, "youth") == 0.25
        assert get_familiarity_accuracy_penalty(25, "regional") == 0.50
        assert get_familiarity_accuracy_penalty(5, "regional") == 1.0
        assert get_familiarity_accuracy_penalty(25, "data") == 0.25


# ═══════════════════════════════════════════════════════════════
# WEEKLY DISCOVERY
# ═══════════════════════════════════════════════════════════════

class TestDiscoveryGating:
    def test_never_discovered_without_familiarity_or_contacts(self):
        state = _state(familiarity={"spain": 0})
        rng = SeededRNG("long-career")
        for _ in range(1000):
            result = discover_free_agents(state, rng)
            assert result.new_discoveries == 0
            assert not find_free_agent(result.updated_pool, "p1").discovered_by_scout

    def test_rumor_familiarity_is_not_enough(self):
        state = _state(specialization="data", familiarity={"spain": 19})
        assert _run_until_discovered(state)[0] is None

    def test_contacts_elsewhere_do_not_help(self):
        contacts = [Contact("ct1", "Hugo Marsh", "journalist", "england", 100)]
        state = _state(familiarity={"spain": 0}, contacts=contacts)
        assert _run_until_discovered(state)[0] is None

    def test_weak_contact_in_country_does_not_help(self):
        contacts = [Contact("ct1", "Pablo Ortega", "agent", "spain", 29)]
        state = _state(familiarity={"spain": 0}, contacts=contacts)
        assert _run_until_discovered(state)[0] is None

    def test_no_draw_without_qualifying_contact(self):
        state = _state(familiarity={"spain": 0})
        rng = SeededRNG(77)
        discover_free_agents(state, rng)
        assert rng.next() == SeededRNG(77).next()

    def test_already_discovered_untouched(self):
        state = _state(familiarity={"spain": 100})
        agent = replace(state.free_agent_pool.agents[0], discovered_by_scout=True, discovery_source="data_query")
        state = replace(state, free_agent_pool=FreeAgentPool(agents=[agent]))
        result = discover_free_agents(state, SeededRNG(1))
        assert result.updated_pool.agents[0] == agent
        assert result.new_discoveries == 0


class TestDiscoveryChannels:
    def test_contact_tip_bypasses_familiarity(self):
        contacts = [Contact("ct1", "Pablo Ortega", "journalist", "spain", 100)]
        state = _state(familiarity={}, contacts=contacts)
        agent, result = _run_until_discovered(state)
        assert agent.discovery_source == "contact_tip"
        assert result.messages[0].body.startswith("A contact has informed you")

    def test_data_scout_tags_data_query(self):
        state = _state(specialization="data", familiarity={"spain": 50})
        agent, result = _run_until_discovered(state)
        assert agent.discovery_source == "data_query"
        assert "database analysis" in result.messages[0].body

    def test_regional_scout_in_territory(self):
        state = _state(
            specialization="regional", familiarity={"spain": 30},
            territories=[Territory("tr_spain", "Spain", "spain")],
        )
        agent, result = _run_until_discovered(state)
        assert agent.discovery_source == "territory_scan"

    def test_regional_scout_outside_territory(self):
        state = _state(specialization="regional", familiarity={"spain": 30})
        agent, _ = _run_until_discovered(state)
        assert agent.discovery_source == "familiarity"

    def test_message_shape(self):
        state = _state(specialization="first_team", familiarity={"spain": 80})
        agent, result = _run_until_discovered(state)
        message = result.messages[0]
        assert message.title == "Free Agent: Iker Ruiz"
        assert message.type == "news"
        assert message.related_id == "p1"
        assert "Alcora CF" in message.body
        assert result.new_discoveries == 1

    def test_deterministic(self):
        agents = [
            FreeAgent(player_id=f"p{i}", country="spain", released_from="c0", released_season=1,
                      max_weeks_in_pool=16, wage_expectation=4000, signing_bonus_expectation=12000)
            for i in range(25)
        ]
        state = _state(familiarity={"spain": 60}, agents=agents,
                       contacts=[Contact("ct1", "Pablo Ortega", "agent", "spain", 70)])
        a = discover_free_agents(state, SeededRNG("d"))
        b = discover_free_agents(state, SeededRNG("d"))
        assert a.updated_pool.to_dict() == b.updated_pool.to_dict()
        assert [m.to_dict() for m in a.messages] == [m.to_dict() for m in b.messages]


class TestContactTip:
    def test_marks_agent(self):
        pool = _state().free_agent_pool
        tipped = process_contact_free_agent_tip(pool, "p1")
        assert tipped.agents[0].discovered_by_scout
        assert tipped.agents[0].discovery_source == "contact_tip"
        assert not pool.agents[0].discovered_by_scout

    def test_unknown_player_returns_same_pool(self):
        pool = _state().free_agent_pool
        assert process_contact_free_agent_tip(pool, "nobody") is pool

    def test_already_discovered_returns_same_pool(self):
        pool = process_contact_free_agent_tip(_state().free_agent_pool, "p1")
        assert process_contact_free_agent_tip(pool, "p1") is pool
