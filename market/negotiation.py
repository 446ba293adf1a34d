"""
Free Agent Negotiation
=======================

Direct wage/bonus negotiation between the scout's club and an unattached
player.  No selling club and no fee, so the whole thing is a small state
machine:

    pending  → accepted | countered | rejected
    countered → accepted | countered | rejected   (via advance)

``accepted`` and ``rejected`` are absorbing.  A negotiation never runs past
round 3.  Expiry (``week > deadline``) is checked by the caller.

Separately, ``calculate_free_agent_acceptance`` answers whether the scout's
own club will back the recommendation at all.

Usage:
    from market.negotiation import initiate_free_agent_negotiation

    neg = initiate_free_agent_negotiation(agent, player, 900, 3000, 2, week, rng)
    if neg.status == "countered":
        neg = advance_free_agent_negotiation(neg, agent, player,
                                             neg.counter_wage, neg.counter_bonus, 2, rng)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from market.config import (
    ACCEPTANCE_CEILING,
    ACCEPTANCE_FLOOR,
    BONUS_WEIGHT,
    CONTRACT_LENGTH_ADJUSTMENT,
    CONVICTION_BASE_CHANCE,
    COUNTER_BONUS_JITTER,
    COUNTER_CONCESSION_RATE,
    COUNTER_WAGE_JITTER,
    DESPERATION_PER_WEEK,
    FIRST_TEAM_ACCEPTANCE_BONUS,
    INSTANT_REJECTION_SATISFACTION,
    MAX_DESPERATION,
    MAX_ROUNDS,
    MIN_COUNTER_WAGE,
    NEGOTIATION_DEADLINE_WEEKS,
    PREFERRED_CONTRACT_LENGTH,
    TOP_CLUB_SELECTIVITY,
    WAGE_ACCEPTANCE_TOLERANCE,
    WAGE_WEIGHT,
    WEAK_CLUB_SELECTIVITY,
    WEEKS_PER_SEASON,
)
from market.models import (
    Club,
    FreeAgent,
    FreeAgentNegotiation,
    InboxMessage,
    Observation,
    Player,
    Scout,
)
from market.rng import SeededRNG, make_message_id
from market.utils import clamp, round_half_up

_log = logging.getLogger("market.negotiation")


# ═══════════════════════════════════════════════════════════════
# STATE MACHINE
# ═══════════════════════════════════════════════════════════════

def initiate_free_agent_negotiation(
    agent: FreeAgent,
    player: Player,
    offered_wage: int,
    offered_bonus: int,
    offered_contract_length: int,
    current_week: int,
    rng: SeededRNG,
) -> FreeAgentNegotiation:
    """Open round 1 and evaluate the first offer immediately."""
    negotiation = FreeAgentNegotiation(
        free_agent_id=agent.player_id,
        offered_wage=offered_wage,
        offered_bonus=offered_bonus,
        offered_contract_length=offered_contract_length,
        deadline=current_week + NEGOTIATION_DEADLINE_WEEKS,
    )
    return evaluate_offer(negotiation, agent, player, rng)


def advance_free_agent_negotiation(
    negotiation: FreeAgentNegotiation,
    agent: FreeAgent,
    player: Player,
    new_wage: int,
    new_bonus: int,
    new_contract_length: int,
    rng: SeededRNG,
) -> FreeAgentNegotiation:
    """Submit a revised offer.  Only a countered negotiation moves."""
    if negotiation.status != "countered":
        return negotiation
    if negotiation.round >= MAX_ROUNDS:
        return replace(negotiation, status="rejected")

    updated = replace(
        negotiation,
        offered_wage=new_wage,
        offered_bonus=new_bonus,
        offered_contract_length=new_contract_length,
        round=negotiation.round + 1,
    )
    return evaluate_offer(updated, agent, player, rng)


def preferred_contract_length(age: int) -> int:
    if age < 26:
        return PREFERRED_CONTRACT_LENGTH["young"]
    if age <= 30:
        return PREFERRED_CONTRACT_LENGTH["prime"]
    return PREFERRED_CONTRACT_LENGTH["veteran"]


def offer_satisfaction(negotiation: FreeAgentNegotiation, agent: FreeAgent) -> float:
    wage_ratio = negotiation.offered_wage / max(1, agent.wage_expectation)
    bonus_ratio = negotiation.offered_bonus / max(1, agent.signing_bonus_expectation)
    return wage_ratio * WAGE_WEIGHT + bonus_ratio * BONUS_WEIGHT


def evaluate_offer(
    negotiation: FreeAgentNegotiation,
    agent: FreeAgent,
    player: Player,
    rng: SeededRNG,
) -> FreeAgentNegotiation:
    """
    Weigh an offer against the agent's expectations.

    Acceptance threshold is 0.85, eased by 0.05 when the contract is at
    least the preferred length (tightened by 0.05 otherwise) and by up to
    0.15 of desperation from time spent in the pool.
    """
    satisfaction = offer_satisfaction(negotiation, agent)

    if negotiation.offered_contract_length >= preferred_contract_length(player.age):
        length_bonus = CONTRACT_LENGTH_ADJUSTMENT
    else:
        length_bonus = -CONTRACT_LENGTH_ADJUSTMENT
    desperation = min(MAX_DESPERATION, agent.weeks_in_pool * DESPERATION_PER_WEEK)
    threshold = WAGE_ACCEPTANCE_TOLERANCE - length_bonus - desperation

    if satisfaction >= threshold:
        return replace(negotiation, status="accepted")

    if satisfaction < INSTANT_REJECTION_SATISFACTION or negotiation.round >= MAX_ROUNDS:
        return replace(negotiation, status="rejected")

    wage_gap = agent.wage_expectation - negotiation.offered_wage
    bonus_gap = agent.signing_bonus_expectation - negotiation.offered_bonus
    concession = COUNTER_CONCESSION_RATE * negotiation.round

    counter_wage = round_half_up(
        agent.wage_expectation - wage_gap * concession
        + rng.next_int(-COUNTER_WAGE_JITTER, COUNTER_WAGE_JITTER)
    )
    counter_bonus = round_half_up(
        agent.signing_bonus_expectation - bonus_gap * concession
        + rng.next_int(-COUNTER_BONUS_JITTER, COUNTER_BONUS_JITTER)
    )

    return replace(
        negotiation,
        status="countered",
        counter_wage=max(MIN_COUNTER_WAGE, counter_wage),
        counter_bonus=max(0, counter_bonus),
    )


def is_negotiation_expired(negotiation: FreeAgentNegotiation, current_week: int) -> bool:
    return current_week > negotiation.deadline


# ═══════════════════════════════════════════════════════════════
# CLUB ACCEPTANCE
# ═══════════════════════════════════════════════════════════════

def derive_conviction(observations: Iterable[Observation], player_id: str) -> str:
    """Conviction from how often and how confidently the player was watched."""
    player_obs = [o for o in observations if o.player_id == player_id]
    count = len(player_obs)
    if count == 0:
        return "note"

    readings = [r for o in player_obs for r in o.readings]
    avg_confidence = sum(r.confidence for r in readings) / max(1, len(readings))

    if count >= 6 and avg_confidence > 0.6:
        return "table_pound"
    if count >= 4 and avg_confidence > 0.5:
        return "strong_recommend"
    if count >= 2:
        return "recommend"
    return "note"


def calculate_free_agent_acceptance(
    player: Player,
    club: Club,
    scout: Scout,
    observations: Iterable[Observation],
) -> float:
    """Probability the scout's club acts on a free agent recommendation."""
    chance = CONVICTION_BASE_CHANCE[derive_conviction(observations, player.id)]

    chance *= 0.5 + scout.reputation / 200

    # Top clubs are pickier
    if club.reputation > 75:
        chance *= TOP_CLUB_SELECTIVITY
    elif club.reputation < 30:
        chance *= WEAK_CLUB_SELECTIVITY

    ca_club_match = 1 - abs(player.current_ability - club.reputation) / 100
    chance *= max(0.5, ca_club_match)

    if scout.primary_specialization == "first_team":
        chance *= FIRST_TEAM_ACCEPTANCE_BONUS

    return clamp(chance, ACCEPTANCE_FLOOR, ACCEPTANCE_CEILING)


# ═══════════════════════════════════════════════════════════════
# SIGNING + MESSAGES
# ═══════════════════════════════════════════════════════════════

def process_free_agent_signing(
    player: Player,
    club_id: str,
    wage: int,
    contract_length: int,
    current_season: int,
) -> Player:
    _log.debug(f"{player.full_name} signs for {club_id} on {wage}/week for {contract_length} seasons")
    return replace(
        player,
        club_id=club_id,
        wage=wage,
        contract_expiry=current_season + contract_length,
    )


def generate_negotiation_message(
    negotiation: FreeAgentNegotiation,
    player: Player,
    club: Club,
    rng: SeededRNG,
    week: int,
    season: int,
) -> InboxMessage:
    name = player.full_name

    if negotiation.status == "accepted":
        return InboxMessage(
            id=make_message_id("fa_signed", rng),
            week=week,
            season=season,
            type="event",
            title=f"{name} Signs!",
            body=(
                f"{name} has agreed terms and signed a {negotiation.offered_contract_length}-season "
                f"contract with {club.name} on {negotiation.offered_wage}/week."
            ),
            related_id=player.id,
            related_entity_type="player",
        )

    if negotiation.status == "rejected":
        return InboxMessage(
            id=make_message_id("fa_rejected", rng),
            week=week,
            season=season,
            type="event",
            title=f"{name} Rejects Offer",
            body=f"{name} has rejected the offer from {club.name}. The negotiation has broken down.",
            related_id=player.id,
            related_entity_type="player",
        )

    return InboxMessage(
        id=make_message_id("fa_counter", rng),
        week=week,
        season=season,
        type="event",
        title=f"{name}: Counter Offer",
        body=(
            f"{name} has countered with a demand of {negotiation.counter_wage}/week and "
            f"{negotiation.counter_bonus} signing bonus. You have until "
            f"{_deadline_label(negotiation.deadline)} to respond."
        ),
        action_required=True,
        related_id=player.id,
        related_entity_type="player",
    )


def _deadline_label(deadline: int) -> str:
    if deadline > WEEKS_PER_SEASON:
        return f"week {deadline - WEEKS_PER_SEASON} of next season"
    return f"week {deadline}"
