"""
Snapshot migrations.

Older saves are upgraded once, at load time, so the simulation code can
assume every field of the current schema is present.

Version history:
    1 → initial release (rivals without progress tracking)
    2 → rival scouting_progress / aggressiveness / budget_tier,
        negotiations and lost_player_ids on the state
"""

from __future__ import annotations

import copy
import logging

from market.config import PERSONALITY_AGGRESSIVENESS
from market.models import CURRENT_SCHEMA_VERSION

_log = logging.getLogger("market.migrations")


def _migrate_v1_to_v2(data: dict) -> dict:
    for rival in data.get("rival_scouts", {}).values():
        rival.setdefault("scouting_progress", {})
        # no RNG at load time: the personality base stands in for the rolled value
        rival.setdefault("aggressiveness", PERSONALITY_AGGRESSIVENESS.get(rival.get("personality"), 0.5))
        rival.setdefault("budget_tier", "medium")
        rival.setdefault("competing_for_players", [])
        rival.setdefault("current_target", None)
        rival.setdefault("report_deadline", None)
        rival.setdefault("last_seen_at_fixture", None)
        rival.setdefault("is_nemesis", False)
    data.setdefault("negotiations", {})
    data.setdefault("lost_player_ids", [])
    data.setdefault("rival_activities", [])
    data["version"] = 2
    return data


_MIGRATIONS = {
    1: _migrate_v1_to_v2,
}


def migrate_state_dict(data: dict) -> dict:
    """Return a copy of ``data`` upgraded to the current schema version."""
    data = copy.deepcopy(data)
    version = data.get("version", 1)
    if version > CURRENT_SCHEMA_VERSION:
        raise ValueError(
            f"Save is schema version {version}, newer than supported {CURRENT_SCHEMA_VERSION}"
        )
    while version < CURRENT_SCHEMA_VERSION:
        _log.info(f"Migrating snapshot from version {version}")
        data = _MIGRATIONS[version](data)
        version = data["version"]
    return data
