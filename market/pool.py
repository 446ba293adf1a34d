"""
Free Agent Pool
================

The authoritative store of released players.  Once a week the pool:

1. Ages every available agent by one week.
2. Decays wage (3%) and signing-bonus (4.5%) expectations, floored.
3. Expires agents who hit ``max_weeks_in_pool`` (retired if over 32,
   otherwise dropped out).
4. Lets NPC clubs register interest, then rolls each pending interest for
   acceptance.  First acceptance signs the agent.
5. Trickles a handful of mid-season releases out of club squads.

This module is the only writer of ``FreeAgent.status``.  Terminal entries
are kept for the week they resolved in and pruned at the start of the next.

Usage:
    from market.pool import tick_free_agent_pool, get_visible_free_agents

    result = tick_free_agent_pool(state, rng)
    visible = get_visible_free_agents(result.updated_pool, scout.country_familiarity)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from market.config import (
    BONUS_DECAY_RATE,
    EXPIRY_RETIREMENT_AGE,
    MAX_NPC_INTEREST,
    MID_SEASON_BONUS_WEEKS,
    MID_SEASON_RELEASE_CA_CEILING,
    MID_SEASON_RELEASE_CHANCE,
    MID_SEASON_RELEASE_MIN_AGE,
    MIN_WAGE,
    NPC_ACCEPTANCE_CHANCE,
    NPC_BUDGET_WEEKS,
    NPC_OFFER_BASE_CHANCE,
    NPC_OFFER_CA_MULTIPLIER,
    NPC_REPUTATION_WINDOW,
    NPC_URGENCY_BONUS,
    NPC_URGENCY_WEEK,
    POOL_OVERFLOW_MULTIPLIER,
    POOL_OVERFLOW_THRESHOLD,
    VISIBILITY_THRESHOLDS,
    WAGE_DECAY_RATE,
    WAGE_PER_CA_POINT,
)
from market.models import (
    Club,
    FreeAgent,
    FreeAgentPool,
    GameState,
    InboxMessage,
    NPCInterest,
    Player,
)
from market.rng import SeededRNG, make_message_id
from market.utils import round_half_up

_log = logging.getLogger("market.pool")


@dataclass
class PoolTickResult:
    updated_pool: FreeAgentPool
    npc_signed: List[Tuple[str, str]] = field(default_factory=list)   # (player_id, club_id)
    removed_player_ids: List[str] = field(default_factory=list)
    messages: List[InboxMessage] = field(default_factory=list)
    mid_season_releases: List[FreeAgent] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════
# STORE OPERATIONS
# ═══════════════════════════════════════════════════════════════

def create_empty_pool(season: int) -> FreeAgentPool:
    """Create an empty free agent pool for a new career."""
    return FreeAgentPool(agents=[], last_refresh_season=season)


def add_free_agent(pool: FreeAgentPool, agent: FreeAgent) -> FreeAgentPool:
    return replace(
        pool,
        agents=pool.agents + [agent],
        total_released_this_season=pool.total_released_this_season + 1,
    )


def remove_free_agent(pool: FreeAgentPool, player_id: str) -> FreeAgentPool:
    return replace(pool, agents=[a for a in pool.agents if a.player_id != player_id])


def find_free_agent(pool: FreeAgentPool, player_id: str) -> Optional[FreeAgent]:
    for agent in pool.agents:
        if agent.player_id == player_id:
            return agent
    return None


def mark_free_agent_signed(pool: FreeAgentPool, player_id: str, club_id: str) -> FreeAgentPool:
    """Close out an available agent signed outside the NPC market.

    Used for the scout's own club and for rival-club signings.  Unknown or
    already-resolved agents leave the pool unchanged.
    """
    agents = []
    changed = False
    for agent in pool.agents:
        if agent.player_id == player_id and agent.is_available:
            agents.append(replace(agent, status="signed", signed_club_id=club_id))
            changed = True
        else:
            agents.append(agent)
    if not changed:
        return pool
    return replace(
        pool,
        agents=agents,
        total_signed_this_season=pool.total_signed_this_season + 1,
    )


def prune_resolved_agents(pool: FreeAgentPool) -> FreeAgentPool:
    """Drop signed / retired / dropped-out entries from the active pool."""
    return replace(pool, agents=[a for a in pool.agents if a.is_available])


def reset_season_counters(pool: FreeAgentPool, season: int) -> FreeAgentPool:
    return replace(
        pool,
        last_refresh_season=season,
        total_released_this_season=0,
        total_signed_this_season=0,
        total_retired_this_season=0,
    )


# ═══════════════════════════════════════════════════════════════
# WEEKLY TICK
# ═══════════════════════════════════════════════════════════════

def tick_free_agent_pool(state: GameState, rng: SeededRNG) -> PoolTickResult:
    """
    Advance the pool one week.

    RNG draws happen in pool order, then in player-record order for the
    mid-season trickle, so a seed replays identically.
    """
    pool = state.free_agent_pool
    overflow = POOL_OVERFLOW_MULTIPLIER if len(pool.agents) > POOL_OVERFLOW_THRESHOLD else 1.0

    result = PoolTickResult(updated_pool=pool)
    updated_agents: List[FreeAgent] = []

    for agent in pool.agents:
        if not agent.is_available:
            updated_agents.append(agent)
            continue

        weeks = agent.weeks_in_pool + 1
        updated = replace(
            agent,
            weeks_in_pool=weeks,
            wage_expectation=max(MIN_WAGE, round_half_up(agent.wage_expectation * (1 - WAGE_DECAY_RATE))),
            signing_bonus_expectation=max(
                0, round_half_up(agent.signing_bonus_expectation * (1 - BONUS_DECAY_RATE)),
            ),
        )

        player = state.players.get(agent.player_id)

        if weeks >= agent.max_weeks_in_pool:
            status = "retired" if player is not None and player.age > EXPIRY_RETIREMENT_AGE else "dropped_out"
            updated_agents.append(replace(updated, status=status))
            result.removed_player_ids.append(agent.player_id)
            continue

        # NPC interest generation
        if player is not None:
            urgency = NPC_URGENCY_BONUS if weeks > NPC_URGENCY_WEEK else 0.0
            offer_chance = min(1.0, (
                NPC_OFFER_BASE_CHANCE
                + player.current_ability * NPC_OFFER_CA_MULTIPLIER
                + urgency
            ) * overflow)
            if rng.chance(offer_chance) and len(updated.npc_interest) < MAX_NPC_INTEREST:
                club = _find_interested_npc_club(player, agent, state.clubs, rng)
                if club is not None:
                    updated = replace(
                        updated,
                        npc_interest=updated.npc_interest + [
                            NPCInterest(club_id=club.id, offer_week=state.current_week),
                        ],
                    )

        # Pending NPC offers
        kept: List[NPCInterest] = []
        for interest in updated.npc_interest:
            if interest.accepted:
                kept.append(interest)
                continue
            if rng.chance(min(1.0, NPC_ACCEPTANCE_CHANCE * overflow)):
                result.npc_signed.append((agent.player_id, interest.club_id))
                updated = replace(updated, status="signed", signed_club_id=interest.club_id)
                if agent.discovered_by_scout:
                    message = _npc_signing_message(state, agent, interest.club_id, rng)
                    if message is not None:
                        result.messages.append(message)
                break
            kept.append(interest)
        updated = replace(updated, npc_interest=kept)

        updated_agents.append(updated)

    result.mid_season_releases = _mid_season_releases(state, updated_agents, rng)

    result.updated_pool = replace(
        pool,
        agents=updated_agents + result.mid_season_releases,
        total_released_this_season=pool.total_released_this_season + len(result.mid_season_releases),
        total_signed_this_season=pool.total_signed_this_season + len(result.npc_signed),
        total_retired_this_season=pool.total_retired_this_season + len(result.removed_player_ids),
    )

    _log.debug(
        f"Pool tick week {state.current_week}: {len(result.npc_signed)} NPC signings, "
        f"{len(result.removed_player_ids)} removed, {len(result.mid_season_releases)} trickle releases"
    )
    return result


def _mid_season_releases(
    state: GameState,
    pool_agents: List[FreeAgent],
    rng: SeededRNG,
) -> List[FreeAgent]:
    """Occasional mutual terminations of journeymen during the season."""
    in_pool = {a.player_id for a in pool_agents}
    releases: List[FreeAgent] = []

    for player in state.players.values():
        if not player.club_id or player.retired:
            continue
        if player.current_ability > MID_SEASON_RELEASE_CA_CEILING:
            continue
        if player.age < MID_SEASON_RELEASE_MIN_AGE:
            continue
        if not rng.chance(MID_SEASON_RELEASE_CHANCE):
            continue

        club = state.clubs.get(player.club_id)
        if club is None:
            continue
        if player.id in in_pool:
            continue

        base_wage = round_half_up(player.current_ability * WAGE_PER_CA_POINT)
        age_factor = 0.8 if player.age > 30 else 0.9
        releases.append(FreeAgent(
            player_id=player.id,
            country=player.nationality,
            released_from=club.id,
            released_season=state.current_season,
            max_weeks_in_pool=16 if player.current_ability >= 45 else 20,
            wage_expectation=max(MIN_WAGE, round_half_up(base_wage * age_factor)),
            signing_bonus_expectation=round_half_up(base_wage * age_factor * MID_SEASON_BONUS_WEEKS),
        ))
        in_pool.add(player.id)

    return releases


def _find_interested_npc_club(
    player: Player,
    agent: FreeAgent,
    clubs: Dict[str, Club],
    rng: SeededRNG,
) -> Optional[Club]:
    """Clubs that can afford the player and sit near his level."""
    required_budget = player.current_ability * WAGE_PER_CA_POINT * NPC_BUDGET_WEEKS
    candidates = [
        club for club in clubs.values()
        if club.id != agent.released_from
        and club.budget >= required_budget
        and abs(club.reputation - player.current_ability) <= NPC_REPUTATION_WINDOW
    ]
    if not candidates:
        return None
    return rng.pick(candidates)


def _npc_signing_message(
    state: GameState,
    agent: FreeAgent,
    club_id: str,
    rng: SeededRNG,
) -> Optional[InboxMessage]:
    club = state.clubs.get(club_id)
    player = state.players.get(agent.player_id)
    if club is None or player is None:
        return None
    return InboxMessage(
        id=make_message_id("fa_npc_sign", rng),
        week=state.current_week,
        season=state.current_season,
        type="event",
        title=f"{player.full_name} Signs with {club.name}",
        body=f"Free agent {player.full_name} has signed with {club.name}. He is no longer available.",
        related_id=agent.player_id,
        related_entity_type="player",
    )


# ═══════════════════════════════════════════════════════════════
# VISIBILITY
# ═══════════════════════════════════════════════════════════════

def get_visible_free_agents(
    pool: FreeAgentPool,
    country_familiarity: Dict[str, int],
) -> List[FreeAgent]:
    """
    Free agents the scout can see.

    Discovered agents are always visible; the rest need at least "basic"
    familiarity (20) with their country.
    """
    basic = VISIBILITY_THRESHOLDS["basic"]
    return [
        agent for agent in pool.agents
        if agent.is_available
        and (agent.discovered_by_scout or country_familiarity.get(agent.country, 0) >= basic)
    ]
