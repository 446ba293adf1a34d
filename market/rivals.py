"""
Rival Scout Directory
======================

NPC scouts employed by other clubs.  Each one tracks a short list of
targets, watches them at fixtures, files reports and occasionally lands
the player for his club before the human scout can.

Per-rival lifecycle, driven by ``current_target``:

    idle → targeting → progressing → reporting → idle   (or the player is lost)

Weekly order per rival (insertion order of ``state.rival_scouts``):
  1. pick a target if idle            4. discover a new target (20%)
  2. attend the target's fixture      5. recompute shared targets, poach roll (10%)
  3. report + signing trial           6. reputation drift (+0..2)

A target added in step 4 is already part of step 5's shared-target set.

Usage:
    from market.rivals import generate_rival_scouts, process_rival_scout_week

    rivals = generate_rival_scouts(rng, state)
    result = process_rival_scout_week(rng, replace(state, rival_scouts=rivals))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from market.config import (
    HIGH_CA_DISCOVERY_WEIGHT,
    HIGH_CA_THRESHOLD,
    HIGH_QUALITY_RIVAL,
    INITIAL_TARGETS_MAX,
    INITIAL_TARGETS_MIN,
    INTEL_CHANCE,
    INTEL_MIN_RELATIONSHIP,
    KEEN_AGGRESSIVENESS,
    MAX_SIGNING_CHANCE,
    MAX_TARGET_PLAYERS,
    PERSONALITY_AGGRESSIVENESS,
    POACH_CHANCE,
    REP_GAIN_MAX,
    REP_GAIN_MIN,
    REPORT_DEADLINE_MAX_WEEKS,
    REPORT_DEADLINE_MIN_WEEKS,
    RIVAL_COUNT_MAX,
    RIVAL_COUNT_MIN,
    RIVAL_DISCOVERY_CHANCE,
    RIVAL_FIRST_NAMES,
    RIVAL_LAST_NAMES,
    RIVAL_PERSONALITIES,
    RIVAL_QUALITY_WEIGHTS,
    RIVAL_REPUTATION_MAX,
    RIVAL_REPUTATION_MIN,
    SCOUTING_COMPLETION_THRESHOLD,
    SIGNING_CHANCE,
    SIGNING_PROGRESS_BONUS,
    SIGNING_QUALITY_STEP,
    SPECIALIZATIONS,
    THREAT_MARGIN,
)
from market.models import (
    Club,
    GameState,
    InboxMessage,
    Player,
    RivalActivity,
    RivalScout,
    Scout,
)
from market.rng import SeededRNG
from market.utils import clamp, round_half_up

_log = logging.getLogger("market.rivals")


@dataclass
class RivalScoutWeekResult:
    updated_rivals: Dict[str, RivalScout]
    poach_warnings: List[Tuple[str, str]] = field(default_factory=list)    # (rival_id, player_id)
    discoveries: List[Tuple[str, str]] = field(default_factory=list)       # (rival_id, player_id)
    new_activities: List[RivalActivity] = field(default_factory=list)
    new_messages: List[InboxMessage] = field(default_factory=list)
    lost_player_ids: List[str] = field(default_factory=list)
    signings: List[Tuple[str, str]] = field(default_factory=list)          # (player_id, club_id)


# ═══════════════════════════════════════════════════════════════
# GENERATION
# ═══════════════════════════════════════════════════════════════

def generate_rival_scouts(rng: SeededRNG, state: GameState) -> Dict[str, RivalScout]:
    """
    Create 3-5 rivals at clubs the scout does not work for.

    Exactly one rival is flagged as the nemesis: highest quality, then
    highest reputation.  A world with no eligible club yields no rivals.
    """
    count = rng.next_int(RIVAL_COUNT_MIN, RIVAL_COUNT_MAX)
    own_club_id = state.scout.current_club_id

    eligible_clubs = [c for c in state.clubs.values() if c.id != own_club_id]
    if not eligible_clubs:
        _log.debug("No eligible clubs for rival scouts")
        return {}

    rivals: Dict[str, RivalScout] = {}
    for _ in range(count):
        rival_id = f"rival_{rng.next_int(100_000, 999_999):x}"
        first_name = rng.pick(RIVAL_FIRST_NAMES)
        last_name = rng.pick(RIVAL_LAST_NAMES)
        quality = rng.pick_weighted(RIVAL_QUALITY_WEIGHTS)
        specialization = rng.pick(SPECIALIZATIONS)
        club = rng.pick(eligible_clubs)
        reputation = rng.next_int(RIVAL_REPUTATION_MIN, RIVAL_REPUTATION_MAX)
        personality = rng.pick(RIVAL_PERSONALITIES)
        targets = _pick_initial_targets(rng, club, state)

        rivals[rival_id] = RivalScout(
            id=rival_id,
            name=f"{first_name} {last_name}",
            quality=quality,
            specialization=specialization,
            club_id=club.id,
            reputation=reputation,
            personality=personality,
            aggressiveness=_derive_aggressiveness(rng, personality),
            budget_tier=_derive_budget_tier(club, state),
            target_player_ids=targets,
        )

    nemesis: Optional[RivalScout] = None
    for rival in rivals.values():
        if (
            nemesis is None
            or rival.quality > nemesis.quality
            or (rival.quality == nemesis.quality and rival.reputation > nemesis.reputation)
        ):
            nemesis = rival
    if nemesis is not None:
        rivals[nemesis.id] = replace(nemesis, is_nemesis=True)

    _log.info(f"Generated {len(rivals)} rival scouts")
    return rivals


# ═══════════════════════════════════════════════════════════════
# WEEKLY STEP
# ═══════════════════════════════════════════════════════════════

def process_rival_scout_week(rng: SeededRNG, state: GameState) -> RivalScoutWeekResult:
    """Advance every rival by one week.  See the module docstring for order."""
    week = state.current_week
    season = state.current_season
    reported_ids = {r.player_id for r in state.reports.values()}
    week_fixtures = state.fixtures_for_week(week)

    result = RivalScoutWeekResult(updated_rivals={})

    for rival in state.rival_scouts.values():
        updated = rival

        # 1. Target acquisition
        if updated.current_target is None or updated.current_target not in state.players:
            target = _select_target_by_personality(rng, updated, state)
            if target is not None:
                deadline_weeks = round_half_up(
                    REPORT_DEADLINE_MIN_WEEKS
                    + (1 - updated.aggressiveness) * (REPORT_DEADLINE_MAX_WEEKS - REPORT_DEADLINE_MIN_WEEKS)
                )
                updated = replace(updated, current_target=target, report_deadline=week + deadline_weeks)
                result.new_activities.append(RivalActivity(
                    rival_id=rival.id, type="target_acquired", player_id=target, week=week, season=season,
                ))

        # 2. Match attendance
        target_player = state.players.get(updated.current_target) if updated.current_target else None
        if target_player is not None:
            fixture = next((f for f in week_fixtures if f.involves(target_player.club_id)), None)
            if fixture is not None:
                increment = 2 if updated.quality >= HIGH_QUALITY_RIVAL else 1
                progress = min(
                    updated.scouting_progress.get(target_player.id, 0) + increment,
                    SCOUTING_COMPLETION_THRESHOLD,
                )
                updated = replace(
                    updated,
                    last_seen_at_fixture=fixture.id,
                    scouting_progress={**updated.scouting_progress, target_player.id: progress},
                )
                result.new_activities.append(RivalActivity(
                    rival_id=rival.id, type="spotted", player_id=target_player.id,
                    week=week, season=season, fixture_id=fixture.id,
                ))

        # 3. Report submission and signing trial
        if updated.current_target is not None:
            updated = _resolve_report(rng, updated, state, result)

        # 4. Discovery
        if rng.chance(RIVAL_DISCOVERY_CHANCE):
            new_target = _discover_new_target(rng, updated, state)
            if (
                new_target is not None
                and new_target not in updated.target_player_ids
                and len(updated.target_player_ids) < MAX_TARGET_PLAYERS
            ):
                updated = replace(updated, target_player_ids=updated.target_player_ids + [new_target])
                result.discoveries.append((rival.id, new_target))

        # 5. Shared targets and poach warning
        competing = [pid for pid in updated.target_player_ids if pid in reported_ids]
        updated = replace(updated, competing_for_players=competing)
        if rng.chance(POACH_CHANCE) and competing:
            result.poach_warnings.append((rival.id, rng.pick(competing)))

        # 6. Reputation drift
        gain = rng.next_int(REP_GAIN_MIN, REP_GAIN_MAX)
        updated = replace(updated, reputation=clamp(updated.reputation + gain, 0, 100))

        result.updated_rivals[rival.id] = updated

    _log.debug(
        f"Rival week {week}: {len(result.discoveries)} discoveries, "
        f"{len(result.poach_warnings)} poach warnings, {len(result.lost_player_ids)} players lost"
    )
    return result


def _resolve_report(
    rng: SeededRNG,
    rival: RivalScout,
    state: GameState,
    result: RivalScoutWeekResult,
) -> RivalScout:
    target_id = rival.current_target
    week = state.current_week
    season = state.current_season
    progress = rival.scouting_progress.get(target_id, 0)
    deadline_reached = rival.report_deadline is not None and week >= rival.report_deadline

    if not deadline_reached and progress < SCOUTING_COMPLETION_THRESHOLD:
        return rival

    player = state.players.get(target_id)
    player_name = player.full_name if player else "a player"
    club_name = state.club_name(rival.club_id)

    result.new_activities.append(RivalActivity(
        rival_id=rival.id, type="report_submitted", player_id=target_id, week=week, season=season,
    ))
    result.new_messages.append(InboxMessage(
        id=f"rival-report-{rival.id}-{target_id}-w{week}",
        week=week,
        season=season,
        type="event",
        title="Rival Report Submitted",
        body=(
            f"{rival.name} has submitted a scouting report on {player_name} to {club_name}. "
            f"They may move to sign the player."
        ),
        related_id=target_id,
        related_entity_type="player",
    ))

    if rng.chance(_compute_signing_chance(rival, progress)):
        result.lost_player_ids.append(target_id)
        result.signings.append((target_id, rival.club_id))
        result.new_activities.append(RivalActivity(
            rival_id=rival.id, type="player_signed", player_id=target_id, week=week, season=season,
        ))
        result.new_messages.append(InboxMessage(
            id=f"rival-signed-{rival.id}-{target_id}-w{week}",
            week=week,
            season=season,
            type="event",
            title="Player Signed by Rival",
            body=(
                f"{club_name} has signed {player_name} following {rival.name}'s recommendation. "
                f"This opportunity is no longer available."
            ),
            related_id=target_id,
            related_entity_type="player",
        ))
        _log.info(f"{rival.name} ({club_name}) landed {player_name}")
        rival = replace(rival, target_player_ids=[p for p in rival.target_player_ids if p != target_id])

    return replace(rival, current_target=None, report_deadline=None)


# ═══════════════════════════════════════════════════════════════
# QUERIES
# ═══════════════════════════════════════════════════════════════

def get_rival_threat_level(rival: RivalScout, scout: Scout) -> str:
    """
    low / medium / high, from a combined quality + reputation score.

    Both sides score ``(quality - 1) * 25 + reputation`` on a 0-200 scale.
    A delta beyond +/-10 tips the threat either way.
    """
    rival_score = (rival.quality - 1) * 25 + rival.reputation
    scout_score = (_derive_scout_quality(scout) - 1) * 25 + scout.reputation
    delta = rival_score - scout_score

    if delta > THREAT_MARGIN:
        return "high"
    if delta < -THREAT_MARGIN:
        return "low"
    return "medium"


def get_shared_targets(rival: RivalScout, state: GameState) -> List[str]:
    """Rival targets the scout has also observed or reported on."""
    scout_ids = {o.player_id for o in state.observations.values()}
    scout_ids.update(r.player_id for r in state.reports.values())
    return [pid for pid in rival.target_player_ids if pid in scout_ids]


def check_rival_presence(state: GameState, fixture_id: str) -> List[RivalScout]:
    return [r for r in state.rival_scouts.values() if r.last_seen_at_fixture == fixture_id]


def generate_rival_intelligence(rng: SeededRNG, state: GameState) -> List[InboxMessage]:
    """Well-connected contacts occasionally tell the scout who a rival is chasing.

    At most one message per week.
    """
    helpful = [c for c in state.contacts.values() if c.relationship >= INTEL_MIN_RELATIONSHIP]
    if not helpful:
        return []

    for contact in helpful:
        if not rng.chance(INTEL_CHANCE):
            continue

        active = [r for r in state.rival_scouts.values() if r.current_target is not None]
        if not active:
            continue

        rival = rng.pick(active)
        player = state.players.get(rival.current_target)
        if player is None:
            continue

        keenness = "very keen" if rival.aggressiveness > KEEN_AGGRESSIVENESS else "interested"
        return [InboxMessage(
            id=f"contact-intel-{contact.id}-{rival.id}-w{state.current_week}",
            week=state.current_week,
            season=state.current_season,
            type="news",
            title="Contact Intelligence",
            body=(
                f"{contact.name} tells you that {rival.name} ({state.club_name(rival.club_id)}) "
                f"has been scouting {player.full_name}. They seem {keenness}."
            ),
            related_id=rival.current_target,
            related_entity_type="player",
        )]

    return []


# ──────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────

def _select_target_by_personality(
    rng: SeededRNG,
    rival: RivalScout,
    state: GameState,
) -> Optional[str]:
    """
    aggressive  - highest CA
    methodical  - biggest PA - CA gap
    lucky       - hidden gems, PA - 1.5 * CA
    connected   - weighted random by CA
    """
    available = [
        pid for pid in rival.target_player_ids
        if pid in state.players
        and rival.scouting_progress.get(pid, 0) < SCOUTING_COMPLETION_THRESHOLD
    ]
    if not available:
        return None

    players = state.players
    if rival.personality == "aggressive":
        key = lambda pid: players[pid].current_ability
    elif rival.personality == "methodical":
        key = lambda pid: players[pid].potential_ability - players[pid].current_ability
    elif rival.personality == "lucky":
        key = lambda pid: players[pid].potential_ability - players[pid].current_ability * 1.5
    else:
        return rng.pick_weighted([(pid, max(1, players[pid].current_ability)) for pid in available])

    # stable: first listed wins ties
    return sorted(available, key=key, reverse=True)[0]


def _compute_signing_chance(rival: RivalScout, progress: int) -> float:
    quality_bonus = (rival.quality - 1) * SIGNING_QUALITY_STEP
    progress_bonus = progress / SCOUTING_COMPLETION_THRESHOLD * SIGNING_PROGRESS_BONUS
    return clamp(SIGNING_CHANCE + quality_bonus + progress_bonus, 0.0, MAX_SIGNING_CHANCE)


def _league_players(club: Optional[Club], state: GameState) -> List[Player]:
    """Players at clubs in the club's league; everyone when the league is unknown."""
    league = state.leagues.get(club.league_id) if club and club.league_id else None
    if league is None:
        return list(state.players.values())
    club_ids = set(league.club_ids)
    return [p for p in state.players.values() if p.club_id in club_ids]


def _pick_initial_targets(rng: SeededRNG, club: Club, state: GameState) -> List[str]:
    count = rng.next_int(INITIAL_TARGETS_MIN, INITIAL_TARGETS_MAX)
    candidates = _league_players(club, state)
    if not candidates:
        return []

    ranked = sorted(candidates, key=lambda p: p.current_ability, reverse=True)
    top_half = max(count, (len(ranked) + 1) // 2)
    top_pool = [p for p in ranked[:top_half] if p.current_ability >= HIGH_CA_THRESHOLD]
    pool = top_pool if len(top_pool) >= count else ranked

    return [p.id for p in rng.shuffled(pool)[:count]]


def _discover_new_target(rng: SeededRNG, rival: RivalScout, state: GameState) -> Optional[str]:
    tracked = set(rival.target_player_ids)
    candidates = [p for p in _league_players(state.clubs.get(rival.club_id), state) if p.id not in tracked]
    if not candidates:
        return None
    return rng.pick_weighted([
        (p.id, HIGH_CA_DISCOVERY_WEIGHT if p.current_ability >= HIGH_CA_THRESHOLD else 1)
        for p in candidates
    ])


def _derive_scout_quality(scout: Scout) -> int:
    """Average skill (1-20) mapped onto the rival 1-5 quality scale."""
    if not scout.skills:
        return 1
    avg = sum(scout.skills.values()) / len(scout.skills)
    return int(clamp(round_half_up(1 + (avg - 1) / 19 * 4), 1, 5))


def _derive_aggressiveness(rng: SeededRNG, personality: str) -> float:
    variance = (rng.next_int(0, 20) - 10) / 100
    return clamp(PERSONALITY_AGGRESSIVENESS.get(personality, 0.5) + variance, 0.0, 1.0)


def _derive_budget_tier(club: Club, state: GameState) -> str:
    budgets = sorted(c.budget for c in state.clubs.values())
    if not budgets:
        return "medium"
    percentile = budgets.index(club.budget) / max(1, len(budgets) - 1)
    if percentile >= 0.66:
        return "high"
    if percentile >= 0.33:
        return "medium"
    return "low"
