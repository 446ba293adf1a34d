#!/usr/bin/env python3
"""
Rival Scout Tests
==================

Generation, the weekly per-rival state machine, threat and intelligence.
"""

from dataclasses import replace

from market.models import (
    Club,
    Contact,
    Fixture,
    GameState,
    League,
    Observation,
    Player,
    RivalScout,
    Scout,
    ScoutReport,
)
from market.rivals import (
    _select_target_by_personality,
    check_rival_presence,
    generate_rival_intelligence,
    generate_rival_scouts,
    get_rival_threat_level,
    get_shared_targets,
    process_rival_scout_week,
)
from market.rng import SeededRNG


def _world(player_specs=None, scout_club="c0", week=3) -> GameState:
    """Two-club league; player_specs is a list of (id, club, ca, pa)."""
    player_specs = player_specs or [
        ("p60", "c1", 60, 70), ("p95", "c1", 95, 100), ("p80", "c1", 80, 140),
    ]
    players = {
        pid: Player(
            id=pid, first_name="Kwame", last_name=pid.upper(), age=24, position="WG",
            nationality="england", club_id=club, contract_expiry=3,
            current_ability=ca, potential_ability=pa,
        )
        for pid, club, ca, pa in player_specs
    }
    clubs = {
        "c0": Club("c0", "Ashford United", "england", "lg", 70, 1_500_000),
        "c1": Club("c1", "Brinton City", "england", "lg", 60, 900_000),
        "c2": Club("c2", "Carlow Vale", "england", "lg", 40, 300_000),
    }
    return GameState(
        current_week=week,
        current_season=1,
        scout=Scout(id="s", name="Alex", reputation=40, primary_specialization="first_team",
                    current_club_id=scout_club, skills={"eye": 10, "network": 10}),
        players=players,
        clubs=clubs,
        leagues={"lg": League("lg", "Premier Division", "england", ["c0", "c1", "c2"])},
    )


def _rival(**kwargs) -> RivalScout:
    defaults = dict(
        id="r1", name="Marco Santos", quality=3, specialization="first_team", club_id="c2",
        reputation=45, personality="aggressive", aggressiveness=0.5, budget_tier="medium",
        target_player_ids=["p60", "p95", "p80"],
    )
    defaults.update(kwargs)
    return RivalScout(**defaults)


def _with_rivals(state, *rivals) -> GameState:
    return replace(state, rival_scouts={r.id: r for r in rivals})


# ═══════════════════════════════════════════════════════════════
# GENERATION
# ═══════════════════════════════════════════════════════════════

class TestGeneration:
    def test_count_and_clubs(self):
        state = _world()
        for seed in range(20):
            rivals = generate_rival_scouts(SeededRNG(seed), state)
            assert 3 <= len(rivals) <= 5
            for rival in rivals.values():
                assert rival.club_id != "c0"
                assert 30 <= rival.reputation <= 60
                assert rival.quality in (2, 3, 4, 5)
                assert 0.0 <= rival.aggressiveness <= 1.0
                assert 2 <= len(rival.target_player_ids) <= 3   # only 3 players exist
                assert rival.id.startswith("rival_")

    def test_single_nemesis_is_strongest(self):
        for seed in range(20):
            rivals = list(generate_rival_scouts(SeededRNG(seed), _world()).values())
            nemeses = [r for r in rivals if r.is_nemesis]
            assert len(nemeses) == 1
            best = max((r.quality, r.reputation) for r in rivals)
            assert (nemeses[0].quality, nemeses[0].reputation) == best

    def test_no_eligible_club(self):
        state = _world()
        state = replace(state, clubs={"c0": state.clubs["c0"]})
        assert generate_rival_scouts(SeededRNG(1), state) == {}

    def test_budget_tiers(self):
        rivals = generate_rival_scouts(SeededRNG(3), _world())
        for rival in rivals.values():
            expected = "medium" if rival.club_id == "c1" else "low"
            assert rival.budget_tier == expected

    def test_deterministic(self):
        a = generate_rival_scouts(SeededRNG("x"), _world())
        b = generate_rival_scouts(SeededRNG("x"), _world())
        assert {k: v.to_dict() for k, v in a.items()} == {k: v.to_dict() for k, v in b.items()}


# ═══════════════════════════════════════════════════════════════
# TARGET SELECTION
# ═══════════════════════════════════════════════════════════════

class TestTargetSelection:
    def test_aggressive_takes_highest_ability(self):
        assert _select_target_by_personality(SeededRNG(1), _rival(), _world()) == "p95"

    def test_methodical_takes_biggest_gap(self):
        rival = _rival(personality="methodical")
        assert _select_target_by_personality(SeededRNG(1), rival, _world()) == "p80"

    def test_lucky_takes_hidden_gem(self):
        state = _world([("a", "c1", 40, 110), ("b", "c1", 90, 150)])
        rival = _rival(personality="lucky", target_player_ids=["a", "b"])
        assert _select_target_by_personality(SeededRNG(1), rival, state) == "a"

    def test_connected_picks_from_targets(self):
        rival = _rival(personality="connected")
        for seed in range(10):
            assert _select_target_by_personality(SeededRNG(seed), rival, _world()) in rival.target_player_ids

    def test_skips_completed_and_missing(self):
        rival = _rival(target_player_ids=["ghost", "p95", "p60"], scouting_progress={"p95": 5})
        assert _select_target_by_personality(SeededRNG(1), rival, _world()) == "p60"

    def test_nothing_available(self):
        rival = _rival(target_player_ids=["ghost"])
        assert _select_target_by_personality(SeededRNG(1), rival, _world()) is None


# ═══════════════════════════════════════════════════════════════
# WEEKLY STEP
# ═══════════════════════════════════════════════════════════════

class TestRivalWeek:
    def test_idle_rival_acquires_target_and_deadline(self):
        state = _with_rivals(_world(), _rival(aggressiveness=0.8))
        result = process_rival_scout_week(SeededRNG(1), state)
        rival = result.updated_rivals["r1"]
        assert rival.current_target == "p95"
        assert rival.report_deadline == 3 + 2   # round(2 + 0.2 * 2)
        assert result.new_activities[0].type == "target_acquired"

    def test_attendance_builds_progress(self):
        state = _world()
        state = replace(state, fixtures={"fx1": Fixture("fx1", 3, "lg", "c1", "c0")})
        for quality, gain in ((3, 1), (4, 2)):
            rival = _rival(quality=quality, current_target="p95", report_deadline=10)
            result = process_rival_scout_week(SeededRNG(1), _with_rivals(state, rival))
            updated = result.updated_rivals["r1"]
            assert updated.scouting_progress["p95"] == gain
            assert updated.last_seen_at_fixture == "fx1"
            assert "spotted" in [a.type for a in result.new_activities]

    def test_no_fixture_no_progress(self):
        state = replace(_world(), fixtures={"fx1": Fixture("fx1", 4, "lg", "c1", "c0")})
        rival = _rival(current_target="p95", report_deadline=10)
        result = process_rival_scout_week(SeededRNG(1), _with_rivals(state, rival))
        assert result.updated_rivals["r1"].scouting_progress == {}

    def test_report_on_completion(self):
        rival = _rival(current_target="p95", report_deadline=10, scouting_progress={"p95": 5})
        result = process_rival_scout_week(SeededRNG(1), _with_rivals(_world(), rival))
        updated = result.updated_rivals["r1"]
        assert updated.current_target is None
        assert updated.report_deadline is None
        assert "report_submitted" in [a.type for a in result.new_activities]
        assert result.new_messages[0].id == "rival-report-r1-p95-w3"
        assert "Carlow Vale" in result.new_messages[0].body

    def test_report_on_deadline(self):
        rival = _rival(current_target="p95", report_deadline=3)
        result = process_rival_scout_week(SeededRNG(1), _with_rivals(_world(), rival))
        assert result.new_messages[0].title == "Rival Report Submitted"

    def test_signing_removes_target(self):
        signed_once = False
        for seed in range(40):
            rival = _rival(quality=5, current_target="p95", report_deadline=10, scouting_progress={"p95": 5})
            result = process_rival_scout_week(SeededRNG(seed), _with_rivals(_world(), rival))
            if result.lost_player_ids:
                signed_once = True
                assert result.lost_player_ids == ["p95"]
                assert result.signings == [("p95", "c2")]
                assert "p95" not in result.updated_rivals["r1"].target_player_ids
                assert result.new_messages[1].id == "rival-signed-r1-p95-w3"
        assert signed_once

    def test_progress_and_target_caps(self):
        specs = [(f"p{i}", "c1", 50 + i, 80) for i in range(20)]
        state = _world(specs)
        state = replace(state, fixtures={
            f"fx{w}": Fixture(f"fx{w}", w, "lg", "c1", "c0") for w in range(1, 39)
        })
        rival = _rival(quality=5, target_player_ids=[f"p{i}" for i in range(8)])
        state = _with_rivals(state, rival)
        rng = SeededRNG(5)
        for week in range(1, 39):
            state = replace(state, current_week=week)
            result = process_rival_scout_week(rng, state)
            for r in result.updated_rivals.values():
                assert len(r.target_player_ids) <= 8
                assert all(v <= 5 for v in r.scouting_progress.values())
            state = replace(state, rival_scouts=result.updated_rivals)

    def test_reputation_clamped(self):
        rival = _rival(reputation=100, target_player_ids=[])
        for seed in range(10):
            result = process_rival_scout_week(SeededRNG(seed), _with_rivals(_world(), rival))
            assert result.updated_rivals["r1"].reputation == 100

    def test_freshly_discovered_target_counts_for_poach_check(self):
        state = _world([("star", "c1", 120, 150)])
        state = replace(state, reports={"rep1": ScoutReport("rep1", "star", 1, 1)})
        rival = _rival(target_player_ids=[])
        state = _with_rivals(state, rival)
        found = False
        for seed in range(60):
            result = process_rival_scout_week(SeededRNG(seed), state)
            if result.discoveries:
                found = True
                assert result.discoveries == [("r1", "star")]
                assert result.updated_rivals["r1"].competing_for_players == ["star"]
        assert found

    def test_poach_warning_names_shared_player(self):
        state = replace(_world(), reports={"rep1": ScoutReport("rep1", "p60", 1, 1)})
        state = _with_rivals(state, _rival())
        warned = False
        for seed in range(80):
            result = process_rival_scout_week(SeededRNG(seed), state)
            for rival_id, player_id in result.poach_warnings:
                warned = True
                assert (rival_id, player_id) == ("r1", "p60")
        assert warned

    def test_deterministic(self):
        state = _with_rivals(_world(), _rival(), _rival(id="r2", personality="connected"))
        a = process_rival_scout_week(SeededRNG(8), state)
        b = process_rival_scout_week(SeededRNG(8), state)
        assert {k: v.to_dict() for k, v in a.updated_rivals.items()} == \
               {k: v.to_dict() for k, v in b.updated_rivals.items()}
        assert a.poach_warnings == b.poach_warnings

    def test_input_not_mutated(self):
        state = _with_rivals(_world(), _rival())
        before = state.to_dict()
        process_rival_scout_week(SeededRNG(2), state)
        assert state.to_dict() == before


# ═══════════════════════════════════════════════════════════════
# QUERIES
# ═══════════════════════════════════════════════════════════════

class TestQueries:
    def test_threat_levels(self):
        scout = _world().scout                       # skills avg 10 -> quality 3, rep 40 -> 90
        assert get_rival_threat_level(_rival(quality=5, reputation=60), scout) == "high"
        assert get_rival_threat_level(_rival(quality=3, reputation=45), scout) == "medium"
        assert get_rival_threat_level(_rival(quality=2, reputation=30), scout) == "low"

    def test_scout_without_skills_is_quality_one(self):
        scout = replace(_world().scout, skills={}, reputation=50)
        assert get_rival_threat_level(_rival(quality=1, reputation=50), scout) == "medium"

    def test_shared_targets(self):
        state = replace(
            _world(),
            observations={"o1": Observation("o1", "p80", 1, 1)},
            reports={"rp": ScoutReport("rp", "p60", 1, 1)},
        )
        assert get_shared_targets(_rival(), state) == ["p60", "p80"]

    def test_presence(self):
        state = _with_rivals(_world(), _rival(last_seen_at_fixture="fx1"), _rival(id="r2"))
        assert [r.id for r in check_rival_presence(state, "fx1")] == ["r1"]
        assert check_rival_presence(state, "fx2") == []


class TestIntelligence:
    def test_no_helpful_contacts(self):
        state = replace(_world(), contacts={"c": Contact("c", "Ezra Reid", "agent", "england", 49)})
        state = _with_rivals(state, _rival(current_target="p95"))
        for seed in range(30):
            assert generate_rival_intelligence(SeededRNG(seed), state) == []

    def test_at_most_one_message(self):
        contacts = {f"c{i}": Contact(f"c{i}", "Ezra Reid", "agent", "england", 90) for i in range(10)}
        state = _with_rivals(replace(_world(), contacts=contacts), _rival(current_target="p95", aggressiveness=0.9))
        seen = False
        for seed in range(30):
            messages = generate_rival_intelligence(SeededRNG(seed), state)
            assert len(messages) <= 1
            if messages:
                seen = True
                assert "very keen" in messages[0].body
                assert messages[0].related_id == "p95"
        assert seen

    def test_no_active_rivals(self):
        contacts = {"c": Contact("c", "Ezra Reid", "agent", "england", 90)}
        state = _with_rivals(replace(_world(), contacts=contacts), _rival())
        for seed in range(30):
            assert generate_rival_intelligence(SeededRNG(seed), state) == []
