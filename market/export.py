"""
Scout Market Export

Dumps the free agent pool and rival activity feed to CSV for analysis.

Available exports:
    export_free_agent_pool_csv(state, filepath)
        - One row per pool entry: player, origin club, expectations, status

    export_rival_activity_csv(state, filepath)
        - One row per recorded rival activity

Usage:
    from market.export import export_free_agent_pool_csv
    export_free_agent_pool_csv(state, "output/pool_s1_w20.csv")
"""

from __future__ import annotations

import csv
import os

from market.models import GameState


def _ensure_dir(filepath: str):
    parent = os.path.dirname(filepath)
    if parent:
        os.makedirs(parent, exist_ok=True)


POOL_COLUMNS = [
    "player_id", "name", "age", "position", "country", "current_ability",
    "released_from", "released_season", "weeks_in_pool", "max_weeks_in_pool",
    "wage_expectation", "signing_bonus_expectation", "npc_interest",
    "discovered", "discovery_source", "status", "signed_club",
]


def export_free_agent_pool_csv(state: GameState, filepath: str) -> str:
    """Columns: see ``POOL_COLUMNS``.  Unknown player records leave name/age blank."""
    _ensure_dir(filepath)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=POOL_COLUMNS)
        writer.writeheader()
        for agent in state.free_agent_pool.agents:
            player = state.players.get(agent.player_id)
            writer.writerow({
                "player_id": agent.player_id,
                "name": player.full_name if player else "",
                "age": player.age if player else "",
                "position": player.position if player else "",
                "country": agent.country,
                "current_ability": player.current_ability if player else "",
                "released_from": state.club_name(agent.released_from),
                "released_season": agent.released_season,
                "weeks_in_pool": agent.weeks_in_pool,
                "max_weeks_in_pool": agent.max_weeks_in_pool,
                "wage_expectation": agent.wage_expectation,
                "signing_bonus_expectation": agent.signing_bonus_expectation,
                "npc_interest": len(agent.npc_interest),
                "discovered": agent.discovered_by_scout,
                "discovery_source": agent.discovery_source or "",
                "status": agent.status,
                "signed_club": state.club_name(agent.signed_club_id) if agent.signed_club_id else "",
            })
    return filepath


ACTIVITY_COLUMNS = ["season", "week", "rival", "club", "type", "player_id", "player", "fixture_id"]


def export_rival_activity_csv(state: GameState, filepath: str) -> str:
    _ensure_dir(filepath)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=ACTIVITY_COLUMNS)
        writer.writeheader()
        for activity in state.rival_activities:
            rival = state.rival_scouts.get(activity.rival_id)
            player = state.players.get(activity.player_id)
            writer.writerow({
                "season": activity.season,
                "week": activity.week,
                "rival": rival.name if rival else activity.rival_id,
                "club": state.club_name(rival.club_id) if rival else "",
                "type": activity.type,
                "player_id": activity.player_id,
                "player": player.full_name if player else "",
                "fixture_id": activity.fixture_id or "",
            })
    return filepath
