"""
Weekly Orchestrator
====================

Drives one simulated week of the free-agent economy.  One RNG and one
snapshot are threaded through the subsystems in a fixed order:

    housekeeping → contract expiry (final week) → pool tick → discovery
    → rival week → rival intelligence → calendar

The input snapshot is never modified; ``run_week`` returns a new one in
its ``WeekResult``.  Messages go to the optional ``inbox`` callable and the
finished snapshot to the optional ``save`` callable.

Usage:
    from market.weekly import run_week, simulate_weeks

    result = run_week(state, rng, inbox=messages.extend)
    state = result.state
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Tuple

from market.config import (
    MAX_ACTIVITY_HISTORY,
    NPC_SIGNING_CONTRACT_SEASONS,
    WEEKS_PER_SEASON,
)
from market.discovery import discover_free_agents
from market.expiry import process_contract_expiries
from market.models import FreeAgentPool, GameState, InboxMessage, Player
from market.negotiation import is_negotiation_expired
from market.pool import (
    add_free_agent,
    find_free_agent,
    mark_free_agent_signed,
    prune_resolved_agents,
    reset_season_counters,
    tick_free_agent_pool,
)
from market.rivals import generate_rival_intelligence, process_rival_scout_week
from market.rng import SeededRNG
from market.world import generate_fixtures

_log = logging.getLogger("market.weekly")


@dataclass
class WeekResult:
    state: GameState
    messages: List[InboxMessage] = field(default_factory=list)
    released_player_ids: List[str] = field(default_factory=list)
    retired_player_ids: List[str] = field(default_factory=list)
    npc_signed: List[Tuple[str, str]] = field(default_factory=list)
    removed_player_ids: List[str] = field(default_factory=list)
    new_discoveries: int = 0
    poach_warnings: List[Tuple[str, str]] = field(default_factory=list)
    lost_player_ids: List[str] = field(default_factory=list)


def run_week(
    state: GameState,
    rng: SeededRNG,
    inbox: Optional[Callable[[List[InboxMessage]], None]] = None,
    save: Optional[Callable[[GameState], None]] = None,
) -> WeekResult:
    """Simulate the current week and return the next snapshot."""
    result = WeekResult(state=state)
    week = state.current_week
    season = state.current_season

    # ── 1. Housekeeping ──
    pool = prune_resolved_agents(state.free_agent_pool)
    negotiations = {}
    for player_id, negotiation in state.negotiations.items():
        agent = find_free_agent(pool, player_id)
        if negotiation.status == "accepted":
            result.messages.extend(_lapsed_offer_message(state, player_id))
            continue
        if negotiation.is_terminal or is_negotiation_expired(negotiation, week):
            continue
        if agent is None or not agent.is_available:
            continue
        negotiations[player_id] = negotiation
    state = replace(state, free_agent_pool=pool, negotiations=negotiations)

    # ── 2. Season end ──
    if week == WEEKS_PER_SEASON:
        expiry = process_contract_expiries(state, rng)
        pool = state.free_agent_pool
        for agent in expiry.released_players:
            if find_free_agent(pool, agent.player_id) is None:
                pool = add_free_agent(pool, agent)
        pool = replace(
            pool,
            total_retired_this_season=pool.total_retired_this_season + len(expiry.retired_player_ids),
        )
        state = replace(
            state,
            players={**state.players, **expiry.updated_players},
            free_agent_pool=pool,
        )
        result.released_player_ids = [a.player_id for a in expiry.released_players]
        result.retired_player_ids = list(expiry.retired_player_ids)
        result.messages.extend(expiry.messages)

    # ── 3. Pool tick ──
    tick = tick_free_agent_pool(state, rng)
    players: Dict[str, Player] = dict(state.players)
    for player_id, club_id in tick.npc_signed:
        player = players.get(player_id)
        agent = find_free_agent(tick.updated_pool, player_id)
        if player is None:
            continue
        players[player_id] = replace(
            player,
            club_id=club_id,
            wage=agent.wage_expectation if agent else player.wage,
            contract_expiry=season + NPC_SIGNING_CONTRACT_SEASONS,
        )
    for agent in tick.mid_season_releases:
        player = players.get(agent.player_id)
        if player is not None:
            players[agent.player_id] = replace(player, club_id=None, contract_expiry=0)
    state = replace(state, players=players, free_agent_pool=tick.updated_pool)
    result.npc_signed = list(tick.npc_signed)
    result.removed_player_ids = list(tick.removed_player_ids)
    result.released_player_ids.extend(a.player_id for a in tick.mid_season_releases)
    result.messages.extend(tick.messages)

    # ── 4. Discovery ──
    discovery = discover_free_agents(state, rng)
    state = replace(state, free_agent_pool=discovery.updated_pool)
    result.new_discoveries = discovery.new_discoveries
    result.messages.extend(discovery.messages)

    # ── 5. Rival week ──
    rival_week = process_rival_scout_week(rng, state)
    state = _apply_rival_week(state, rival_week.updated_rivals, rival_week.signings,
                              rival_week.new_activities, rival_week.lost_player_ids)
    result.poach_warnings = list(rival_week.poach_warnings)
    result.lost_player_ids = list(rival_week.lost_player_ids)
    result.messages.extend(rival_week.new_messages)
    result.messages.extend(_poach_messages(state, rival_week.poach_warnings))

    # ── 6. Rival intelligence ──
    result.messages.extend(generate_rival_intelligence(rng, state))

    # ── 7. Calendar ──
    state = _advance_calendar(state)

    _log.info(
        f"Season {season} week {week}: pool {len(state.free_agent_pool.available())} available, "
        f"{len(result.npc_signed)} NPC signings, {result.new_discoveries} discoveries, "
        f"{len(result.lost_player_ids)} lost to rivals"
    )

    result.state = state
    if inbox is not None and result.messages:
        inbox(result.messages)
    if save is not None:
        save(state)
    return result


def simulate_weeks(
    state: GameState,
    rng: SeededRNG,
    weeks: int,
    inbox: Optional[Callable[[List[InboxMessage]], None]] = None,
    save: Optional[Callable[[GameState], None]] = None,
) -> GameState:
    for _ in range(weeks):
        state = run_week(state, rng, inbox=inbox, save=save).state
    return state


# ──────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────

def _apply_rival_week(state, rivals, signings, activities, lost_player_ids) -> GameState:
    pool: FreeAgentPool = state.free_agent_pool
    players = dict(state.players)
    for player_id, club_id in signings:
        pool = mark_free_agent_signed(pool, player_id, club_id)
        player = players.get(player_id)
        if player is not None:
            players[player_id] = replace(
                player,
                club_id=club_id,
                contract_expiry=max(player.contract_expiry, state.current_season + NPC_SIGNING_CONTRACT_SEASONS),
            )

    lost = list(state.lost_player_ids)
    for player_id in lost_player_ids:
        if player_id not in lost:
            lost.append(player_id)

    history = (state.rival_activities + activities)[-MAX_ACTIVITY_HISTORY:]
    return replace(
        state,
        rival_scouts=rivals,
        players=players,
        free_agent_pool=pool,
        rival_activities=history,
        lost_player_ids=lost,
    )


def _poach_messages(state: GameState, warnings: List[Tuple[str, str]]) -> List[InboxMessage]:
    messages = []
    for rival_id, player_id in warnings:
        rival = state.rival_scouts.get(rival_id)
        player = state.players.get(player_id)
        if rival is None or player is None:
            continue
        messages.append(InboxMessage(
            id=f"rival-poach-{rival_id}-{player_id}-w{state.current_week}",
            week=state.current_week,
            season=state.current_season,
            type="event",
            title="Rival Interest",
            body=(
                f"{rival.name} of {state.club_name(rival.club_id)} is also tracking "
                f"{player.full_name}, a player you have reported on."
            ),
            related_id=player_id,
            related_entity_type="player",
        ))
    return messages


def _lapsed_offer_message(state: GameState, player_id: str) -> List[InboxMessage]:
    player = state.players.get(player_id)
    if player is None:
        return []
    return [InboxMessage(
        id=f"fa-lapsed-{player_id}-s{state.current_season}-w{state.current_week}",
        week=state.current_week,
        season=state.current_season,
        type="event",
        title=f"Offer Lapsed: {player.full_name}",
        body=(
            f"{player.full_name} agreed terms but the signing was never completed. "
            f"The deal has lapsed."
        ),
        related_id=player_id,
        related_entity_type="player",
    )]


def _advance_calendar(state: GameState) -> GameState:
    """
    Next week; past week 38 the season rolls over and everyone ages a year.

    Deadlines count weeks of the current season, so open negotiation and
    rival report deadlines are shifted back by a season at rollover.
    """
    if state.current_week < WEEKS_PER_SEASON:
        return replace(state, current_week=state.current_week + 1)

    season = state.current_season + 1
    _log.info(f"Season {state.current_season} complete, starting season {season}")
    return replace(
        state,
        current_week=1,
        current_season=season,
        players={pid: replace(p, age=p.age + 1) for pid, p in state.players.items()},
        fixtures=generate_fixtures(state.leagues, season),
        free_agent_pool=reset_season_counters(state.free_agent_pool, season),
        negotiations={
            pid: replace(n, deadline=n.deadline - WEEKS_PER_SEASON)
            for pid, n in state.negotiations.items()
        },
        rival_scouts={
            rid: replace(r, report_deadline=r.report_deadline - WEEKS_PER_SEASON)
            if r.report_deadline is not None else r
            for rid, r in state.rival_scouts.items()
        },
    )
