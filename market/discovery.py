"""
Free Agent Discovery
=====================

How the scout learns that a free agent exists.  Each specialization finds
free agents through its own channel:

  - first_team: agent / sporting-director contacts in the player's country
  - regional:   assigned territories (tagged ``territory_scan``)
  - data:       database queries (tagged ``data_query``)
  - youth:      barely looks at senior free agents

Contacts can tip the scout off regardless of familiarity.  Without a tip,
the scout needs at least "basic" familiarity with the agent's country.

Visibility tiers by familiarity:
    0      none
    1-19   rumor
    20-39  basic
    40-59  standard
    60-79  good
    80+    expert
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional

from market.config import (
    ACCURACY_PENALTY_BY_VISIBILITY,
    CONTACT_DISCOVERY_BASE,
    CONTACT_DISCOVERY_MIN_RELATIONSHIP,
    CONTACT_DISCOVERY_RANGE,
    CONTACT_DISCOVERY_TYPES,
    DATA_SCOUT_DISCOVERY_BONUS,
    DATA_SCOUT_PENALTY_REDUCTION,
    DISCOVERY_CHANCE,
    FIRST_TEAM_CONTACT_BONUS,
    FIRST_TEAM_CONTACT_MIN_RELATIONSHIP,
    TERRITORY_DISCOVERY_BONUS,
    VISIBILITY_THRESHOLDS,
    YOUTH_DISCOVERY_SCALE,
)
from market.models import (
    Contact,
    FreeAgent,
    FreeAgentPool,
    GameState,
    InboxMessage,
    Player,
)
from market.rng import SeededRNG, make_message_id
from market.utils import clamp

_log = logging.getLogger("market.discovery")


@dataclass
class DiscoveryResult:
    updated_pool: FreeAgentPool
    messages: List[InboxMessage] = field(default_factory=list)
    new_discoveries: int = 0


# ──────────────────────────────────────────────
# VISIBILITY
# ──────────────────────────────────────────────

def get_familiarity_visibility(familiarity: int) -> str:
    """Map a 0-100 familiarity score to a named visibility tier."""
    for tier in ("expert", "good", "standard", "basic", "rumor"):
        if familiarity >= VISIBILITY_THRESHOLDS[tier]:
            return tier
    return "none"


def get_familiarity_accuracy_penalty(familiarity: int, specialization: str) -> float:
    """Observation accuracy penalty for a country; data scouts suffer half."""
    penalty = ACCURACY_PENALTY_BY_VISIBILITY.get(get_familiarity_visibility(familiarity), 1.0)
    if specialization == "data":
        penalty *= 1 - DATA_SCOUT_PENALTY_REDUCTION
    return penalty


# ──────────────────────────────────────────────
# WEEKLY DISCOVERY
# ──────────────────────────────────────────────

def discover_free_agents(state: GameState, rng: SeededRNG) -> DiscoveryResult:
    """
    Roll weekly discovery for every free agent the scout hasn't found yet.

    Already-discovered and non-available agents are passed through untouched.
    """
    pool = state.free_agent_pool
    scout = state.scout
    spec = scout.primary_specialization
    contacts = list(state.contacts.values())
    territory_countries = {t.country for t in state.territories.values()}

    result = DiscoveryResult(updated_pool=pool)
    updated_agents: List[FreeAgent] = []

    for agent in pool.agents:
        if agent.discovered_by_scout or not agent.is_available:
            updated_agents.append(agent)
            continue

        player = state.players.get(agent.player_id)
        if player is None:
            updated_agents.append(agent)
            continue

        if _check_contact_discovery(agent, contacts, rng):
            result.new_discoveries += 1
            result.messages.append(_discovery_message(state, player, agent, "contact_tip", rng))
            updated_agents.append(replace(agent, discovered_by_scout=True, discovery_source="contact_tip"))
            continue

        familiarity = scout.familiarity_with(agent.country)
        if familiarity < VISIBILITY_THRESHOLDS["basic"]:
            updated_agents.append(agent)
            continue

        chance = DISCOVERY_CHANCE.get(spec, 0.0) * (0.5 + familiarity / 200)
        source = "familiarity"

        if spec == "first_team":
            if (
                _has_contact_type(contacts, "agent", agent.country)
                or _has_contact_type(contacts, "sporting_director", agent.country)
            ):
                chance += FIRST_TEAM_CONTACT_BONUS
        elif spec == "regional":
            if agent.country in territory_countries:
                chance += TERRITORY_DISCOVERY_BONUS
                source = "territory_scan"
        elif spec == "data":
            chance += DATA_SCOUT_DISCOVERY_BONUS
            source = "data_query"
        elif spec == "youth":
            chance *= YOUTH_DISCOVERY_SCALE

        if rng.chance(clamp(chance, 0.0, 1.0)):
            result.new_discoveries += 1
            result.messages.append(_discovery_message(state, player, agent, source, rng))
            updated_agents.append(replace(agent, discovered_by_scout=True, discovery_source=source))
        else:
            updated_agents.append(agent)

    result.updated_pool = replace(pool, agents=updated_agents)
    if result.new_discoveries:
        _log.debug(f"Week {state.current_week}: scout discovered {result.new_discoveries} free agents")
    return result


def process_contact_free_agent_tip(pool: FreeAgentPool, player_id: str) -> FreeAgentPool:
    """Turn a contact's "contract running down" tip into a pool discovery."""
    for index, agent in enumerate(pool.agents):
        if agent.player_id != player_id:
            continue
        if agent.discovered_by_scout:
            return pool
        agents = list(pool.agents)
        agents[index] = replace(agent, discovered_by_scout=True, discovery_source="contact_tip")
        return replace(pool, agents=agents)
    return pool


# ──────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────

def _check_contact_discovery(agent: FreeAgent, contacts: Iterable[Contact], rng: SeededRNG) -> bool:
    """Agents, journalists and scouts in the player's country can reveal him.

    No RNG draw happens unless a qualifying contact exists.
    """
    relevant = [
        c for c in contacts
        if c.country == agent.country
        and c.type in CONTACT_DISCOVERY_TYPES
        and c.relationship >= CONTACT_DISCOVERY_MIN_RELATIONSHIP
    ]
    if not relevant:
        return False
    best = max(c.relationship for c in relevant)
    return rng.chance(clamp(CONTACT_DISCOVERY_BASE + best / 100 * CONTACT_DISCOVERY_RANGE, 0.0, 1.0))


def _has_contact_type(contacts: Iterable[Contact], contact_type: str, country: str) -> bool:
    return any(
        c.type == contact_type
        and c.country == country
        and c.relationship >= FIRST_TEAM_CONTACT_MIN_RELATIONSHIP
        for c in contacts
    )


def _discovery_message(
    state: GameState,
    player: Player,
    agent: FreeAgent,
    source: str,
    rng: SeededRNG,
) -> InboxMessage:
    club_name = state.clubs[agent.released_from].name if agent.released_from in state.clubs else "an unknown club"
    name = player.full_name

    intro: Optional[str] = {
        "familiarity": f"Your knowledge of football in {agent.country} has brought {name} to your attention.",
        "contact_tip": f"A contact has informed you that {name} is available as a free agent.",
        "data_query": f"Your database analysis has flagged {name} as an available free agent.",
        "territory_scan": f"Your territory network has identified {name} as available.",
    }.get(source)

    return InboxMessage(
        id=make_message_id("fa_discover", rng),
        week=state.current_week,
        season=state.current_season,
        type="news",
        title=f"Free Agent: {name}",
        body=(
            f"{intro} The {player.age}-year-old {player.position} was released by "
            f"{club_name} and is looking for a new club."
        ),
        related_id=agent.player_id,
        related_entity_type="player",
    )
