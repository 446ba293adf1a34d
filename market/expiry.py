"""
Contract Expiry Processing
===========================

Season-boundary pass that decides, for every player whose contract has
lapsed, whether the club renews, the player retires, or the player is
released into the free agent pool.

Renewal odds:
    CA > 70 → 0.70, CA 50-70 → 0.50, CA < 50 → 0.30
    club reputation > 75 → +0.15, < 30 → -0.10
    positive form → +0.05 per point
    clamped to [0.05, 0.95]

Pure: returns updated player records and new FreeAgent entries, never
touches the state it was given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List

from market.config import (
    FORM_RENEWAL_BONUS,
    HIGH_REP_RENEWAL_BOOST,
    LOW_REP_RENEWAL_PENALTY,
    MIN_WAGE,
    NOTABLE_CLUB_REPUTATION,
    NOTABLE_RELEASE_CA,
    NOTABLE_RETIREMENT_CA,
    NOTABLE_RETIREMENT_CLUB_REPUTATION,
    POOL_DURATION_TABLE,
    RENEWAL_CHANCE_CEILING,
    RENEWAL_CHANCE_FLOOR,
    RENEWAL_CHANCE_HIGH,
    RENEWAL_CHANCE_LOW,
    RENEWAL_CHANCE_MID,
    RENEWAL_EXTENSION_MAX,
    RENEWAL_EXTENSION_MIN,
    RETIREMENT_AGE_THRESHOLD,
    RETIREMENT_CA_THRESHOLD,
    RETIREMENT_CHANCE,
    SIGNING_BONUS_WEEKS,
    WAGE_PER_CA_POINT,
)
from market.models import Club, FreeAgent, GameState, InboxMessage, Player
from market.rng import SeededRNG, make_message_id
from market.utils import clamp, round_half_up

_log = logging.getLogger("market.expiry")


@dataclass
class ContractExpiryResult:
    """Outcome of one season-end expiry pass."""
    released_players: List[FreeAgent] = field(default_factory=list)
    renewed_player_ids: List[str] = field(default_factory=list)
    retired_player_ids: List[str] = field(default_factory=list)
    updated_players: Dict[str, Player] = field(default_factory=dict)
    messages: List[InboxMessage] = field(default_factory=list)


# ──────────────────────────────────────────────
# TABLE LOOKUPS
# ──────────────────────────────────────────────

def get_renewal_chance(current_ability: int) -> float:
    if current_ability > 70:
        return RENEWAL_CHANCE_HIGH
    if current_ability >= 50:
        return RENEWAL_CHANCE_MID
    return RENEWAL_CHANCE_LOW


def get_club_reputation_modifier(reputation: int) -> float:
    if reputation > 75:
        return HIGH_REP_RENEWAL_BOOST
    if reputation < 30:
        return LOW_REP_RENEWAL_PENALTY
    return 0.0


def get_max_weeks_in_pool(current_ability: int) -> int:
    """Pool lifetime before an unsigned agent drops out, by CA tier."""
    for min_ca, weeks in POOL_DURATION_TABLE:
        if current_ability >= min_ca:
            return weeks
    return POOL_DURATION_TABLE[-1][1]


def compute_renewal_probability(player: Player, club: Club) -> float:
    chance = get_renewal_chance(player.current_ability)
    chance += get_club_reputation_modifier(club.reputation)
    if player.form > 0:
        chance += FORM_RENEWAL_BONUS * player.form
    return clamp(chance, RENEWAL_CHANCE_FLOOR, RENEWAL_CHANCE_CEILING)


def create_free_agent_from_player(player: Player, club: Club, season: int) -> FreeAgent:
    """Snapshot a released player into a pool entry."""
    base_wage = round_half_up(player.current_ability * WAGE_PER_CA_POINT)
    # Older players accept lower wages
    if player.age > 30:
        age_factor = 0.8
    elif player.age > 28:
        age_factor = 0.9
    else:
        age_factor = 1.0
    wage_expectation = max(MIN_WAGE, round_half_up(base_wage * age_factor))

    return FreeAgent(
        player_id=player.id,
        country=player.nationality,
        released_from=club.id,
        released_season=season,
        max_weeks_in_pool=get_max_weeks_in_pool(player.current_ability),
        wage_expectation=wage_expectation,
        signing_bonus_expectation=round_half_up(wage_expectation * SIGNING_BONUS_WEEKS),
    )


# ──────────────────────────────────────────────
# MAIN PASS
# ──────────────────────────────────────────────

def process_contract_expiries(state: GameState, rng: SeededRNG) -> ContractExpiryResult:
    """
    Resolve every lapsed contract at the end of a season.

    For each player with a club and ``contract_expiry <= current_season``:
      1. Roll for renewal (CA tier, club reputation, form).
      2. If not renewed and old with low CA: roll for retirement.
      3. Otherwise release into the free agent pool.

    Players without a club, with a running contract, or whose club record is
    missing are skipped.
    """
    result = ContractExpiryResult()
    season = state.current_season

    for player_id, player in state.players.items():
        if not player.club_id or player.retired:
            continue
        if player.contract_expiry > season:
            continue

        club = state.clubs.get(player.club_id)
        if club is None:
            _log.debug(f"Skipping expiry for {player_id}: club {player.club_id} not found")
            continue

        if rng.chance(compute_renewal_probability(player, club)):
            extension = rng.next_int(RENEWAL_EXTENSION_MIN, RENEWAL_EXTENSION_MAX)
            result.updated_players[player_id] = replace(player, contract_expiry=season + extension)
            result.renewed_player_ids.append(player_id)
            continue

        if (
            player.age > RETIREMENT_AGE_THRESHOLD
            and player.current_ability < RETIREMENT_CA_THRESHOLD
            and rng.chance(RETIREMENT_CHANCE)
        ):
            result.retired_player_ids.append(player_id)
            result.updated_players[player_id] = replace(
                player, club_id=None, contract_expiry=0, retired=True,
            )
            if (
                player.current_ability > NOTABLE_RETIREMENT_CA
                or club.reputation > NOTABLE_RETIREMENT_CLUB_REPUTATION
            ):
                result.messages.append(InboxMessage(
                    id=make_message_id("fa_retire", rng),
                    week=state.current_week,
                    season=season,
                    type="event",
                    title=f"{player.full_name} Retires",
                    body=(
                        f"{player.full_name} ({player.age}) has retired from professional "
                        f"football after leaving {club.name}."
                    ),
                    related_id=player_id,
                    related_entity_type="player",
                ))
            continue

        result.released_players.append(create_free_agent_from_player(player, club, season))
        result.updated_players[player_id] = replace(player, club_id=None, contract_expiry=0)

        if (
            player.current_ability > NOTABLE_RELEASE_CA
            or club.reputation > NOTABLE_CLUB_REPUTATION
        ):
            result.messages.append(InboxMessage(
                id=make_message_id("fa_release", rng),
                week=state.current_week,
                season=season,
                type="event",
                title=f"{player.full_name} Released",
                body=(
                    f"{player.full_name} ({player.age}, {player.position}) has been released by "
                    f"{club.name} and is available as a free agent."
                ),
                related_id=player_id,
                related_entity_type="player",
            ))

    _log.info(
        f"Season {season} expiries: {len(result.renewed_player_ids)} renewed, "
        f"{len(result.released_players)} released, {len(result.retired_player_ids)} retired"
    )
    return result
