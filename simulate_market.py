#!/usr/bin/env python3
"""Batch simulation of the free-agent economy for balance checks."""

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from market.config import SPECIALIZATIONS
from market.export import export_free_agent_pool_csv, export_rival_activity_csv
from market.rivals import get_rival_threat_level
from market.weekly import run_week
from market.world import generate_world


def run_batch(seed, weeks, specialization, export_dir=None):
    state, rng = generate_world(seed, specialization=specialization)

    released = 0
    npc_signed = 0
    removed = 0
    discoveries = 0
    poach_warnings = 0
    lost = 0
    messages = 0

    for _ in range(weeks):
        result = run_week(state, rng)
        released += len(result.released_player_ids)
        npc_signed += len(result.npc_signed)
        removed += len(result.removed_player_ids)
        discoveries += result.new_discoveries
        poach_warnings += len(result.poach_warnings)
        lost += len(result.lost_player_ids)
        messages += len(result.messages)
        state = result.state

    pool = state.free_agent_pool
    available = pool.available()

    print(f"\n{'='*60}")
    print(f"SCOUT MARKET: seed={seed} spec={specialization} weeks={weeks}")
    print(f"{'='*60}")
    print(f"{'Now at':<35} season {state.current_season}, week {state.current_week}")
    print(f"{'Players released':<35} {released:>12}")
    print(f"{'NPC signings':<35} {npc_signed:>12}")
    print(f"{'Expired (retired/dropped out)':<35} {removed:>12}")
    print(f"{'Scout discoveries':<35} {discoveries:>12}")
    print(f"{'Poach warnings':<35} {poach_warnings:>12}")
    print(f"{'Players lost to rivals':<35} {lost:>12}")
    print(f"{'Inbox messages':<35} {messages:>12}")
    print(f"{'Pool size (available)':<35} {len(available):>12}")

    if available:
        avg_wage = sum(a.wage_expectation for a in available) / len(available)
        avg_weeks = sum(a.weeks_in_pool for a in available) / len(available)
        print(f"{'  Avg wage expectation':<35} {avg_wage:>12.0f}")
        print(f"{'  Avg weeks in pool':<35} {avg_weeks:>12.1f}")
        by_country = Counter(a.country for a in available)
        for country, count in by_country.most_common():
            fam = state.scout.familiarity_with(country)
            print(f"    {country:<31} {count:>6}  (familiarity {fam})")

    print(f"\n{'RIVALS':<35} {'Qual':>5} {'Rep':>5} {'Threat':>8}")
    for rival in state.rival_scouts.values():
        marker = " *" if rival.is_nemesis else ""
        threat = get_rival_threat_level(rival, state.scout)
        print(f"  {rival.name + marker:<33} {rival.quality:>5} {rival.reputation:>5} {threat:>8}")
        print(f"    {state.club_name(rival.club_id)}, {rival.personality}, "
              f"{len(rival.target_player_ids)} targets, phase {rival.phase}")

    if export_dir:
        out = Path(export_dir)
        pool_path = export_free_agent_pool_csv(state, str(out / f"pool_{seed}.csv"))
        activity_path = export_rival_activity_csv(state, str(out / f"rivals_{seed}.csv"))
        print(f"\nExported {pool_path} and {activity_path}")

    return state


def main():
    parser = argparse.ArgumentParser(description="Simulate the scout free-agent market")
    parser.add_argument("--seed", default="scout-market", help="World seed")
    parser.add_argument("--weeks", type=int, default=38, help="Weeks to simulate")
    parser.add_argument("--specialization", choices=SPECIALIZATIONS, default="first_team")
    parser.add_argument("--export", metavar="DIR", help="Write pool and rival activity CSVs here")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    print(f"Running {args.weeks} week market simulation...")
    run_batch(args.seed, args.weeks, args.specialization, args.export)


if __name__ == "__main__":
    main()
