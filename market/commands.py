"""
Player-facing commands.

Each command takes a ``GameState`` and returns a ``CommandResult`` holding
the new state, the outcome and any inbox messages.  Requests that make no
sense for the current snapshot (unknown player, agent not visible, no open
counter offer) come back with ``outcome=None`` and the state untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from market.models import FreeAgent, GameState, InboxMessage, RivalScout
from market.negotiation import (
    advance_free_agent_negotiation,
    calculate_free_agent_acceptance,
    generate_negotiation_message,
    initiate_free_agent_negotiation,
    is_negotiation_expired,
    process_free_agent_signing,
)
from market.pool import find_free_agent, get_visible_free_agents, mark_free_agent_signed
from market.rivals import get_rival_threat_level
from market.rng import SeededRNG

_log = logging.getLogger("market.commands")


@dataclass
class CommandResult:
    state: GameState
    outcome: Any = None
    messages: List[InboxMessage] = field(default_factory=list)


def list_visible_free_agents(state: GameState) -> List[FreeAgent]:
    return get_visible_free_agents(state.free_agent_pool, state.scout.country_familiarity)


def _visible_agent(state: GameState, player_id: str) -> Optional[FreeAgent]:
    for agent in list_visible_free_agents(state):
        if agent.player_id == player_id:
            return agent
    return None


def open_free_agent_negotiation(
    state: GameState,
    player_id: str,
    wage: int,
    bonus: int,
    contract_length: int,
    rng: SeededRNG,
) -> CommandResult:
    """Make a first offer to a visible free agent on behalf of the scout's club."""
    agent = _visible_agent(state, player_id)
    player = state.players.get(player_id)
    club = state.clubs.get(state.scout.current_club_id) if state.scout.current_club_id else None
    if agent is None or player is None or club is None:
        return CommandResult(state=state)
    if wage <= 0 or bonus < 0 or contract_length < 1:
        return CommandResult(state=state)

    existing = state.negotiations.get(player_id)
    if existing is not None and not existing.is_terminal:
        return CommandResult(state=state)

    negotiation = initiate_free_agent_negotiation(
        agent, player, wage, bonus, contract_length, state.current_week, rng,
    )
    message = generate_negotiation_message(
        negotiation, player, club, rng, state.current_week, state.current_season,
    )
    _log.debug(f"Opened negotiation with {player.full_name}: {negotiation.status}")
    return CommandResult(
        state=replace(state, negotiations={**state.negotiations, player_id: negotiation}),
        outcome=negotiation,
        messages=[message],
    )


def respond_to_counter_offer(
    state: GameState,
    player_id: str,
    wage: int,
    bonus: int,
    contract_length: int,
    rng: SeededRNG,
) -> CommandResult:
    """Answer the agent's counter with a revised offer."""
    negotiation = state.negotiations.get(player_id)
    agent = find_free_agent(state.free_agent_pool, player_id)
    player = state.players.get(player_id)
    club = state.clubs.get(state.scout.current_club_id) if state.scout.current_club_id else None
    if negotiation is None or agent is None or player is None or club is None:
        return CommandResult(state=state)
    if negotiation.status != "countered" or not agent.is_available:
        return CommandResult(state=state)
    if wage <= 0 or bonus < 0 or contract_length < 1:
        return CommandResult(state=state)
    if is_negotiation_expired(negotiation, state.current_week):
        return CommandResult(state=state)

    updated = advance_free_agent_negotiation(
        negotiation, agent, player, wage, bonus, contract_length, rng,
    )
    message = generate_negotiation_message(
        updated, player, club, rng, state.current_week, state.current_season,
    )
    return CommandResult(
        state=replace(state, negotiations={**state.negotiations, player_id: updated}),
        outcome=updated,
        messages=[message],
    )


def complete_free_agent_signing(state: GameState, player_id: str) -> CommandResult:
    """Commit an accepted negotiation: player joins the club, agent leaves the pool."""
    negotiation = state.negotiations.get(player_id)
    player = state.players.get(player_id)
    club_id = state.scout.current_club_id
    if negotiation is None or negotiation.status != "accepted" or player is None or club_id is None:
        return CommandResult(state=state)

    agent = find_free_agent(state.free_agent_pool, player_id)
    if agent is None or not agent.is_available:
        return CommandResult(state=state)

    signed = process_free_agent_signing(
        player, club_id, negotiation.offered_wage,
        negotiation.offered_contract_length, state.current_season,
    )
    negotiations = {k: v for k, v in state.negotiations.items() if k != player_id}
    new_state = replace(
        state,
        players={**state.players, player_id: signed},
        free_agent_pool=mark_free_agent_signed(state.free_agent_pool, player_id, club_id),
        negotiations=negotiations,
    )
    message = InboxMessage(
        id=f"fa-complete-{player_id}-s{state.current_season}-w{state.current_week}",
        week=state.current_week,
        season=state.current_season,
        type="event",
        title=f"Welcome, {player.full_name}",
        body=(
            f"{player.full_name} has joined {state.club_name(club_id)} on a "
            f"{negotiation.offered_contract_length}-season deal."
        ),
        related_id=player_id,
        related_entity_type="player",
    )
    _log.info(f"{player.full_name} signed for {state.club_name(club_id)}")
    return CommandResult(state=new_state, outcome=signed, messages=[message])


def club_acceptance_chance(state: GameState, player_id: str) -> Optional[float]:
    """Odds the scout's club backs a recommendation for this player."""
    player = state.players.get(player_id)
    club = state.clubs.get(state.scout.current_club_id) if state.scout.current_club_id else None
    if player is None or club is None:
        return None
    return calculate_free_agent_acceptance(player, club, state.scout, state.observations.values())


def list_rivals_with_threat(state: GameState) -> List[Tuple[RivalScout, str]]:
    return [(rival, get_rival_threat_level(rival, state.scout)) for rival in state.rival_scouts.values()]
