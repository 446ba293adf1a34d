"""
Scout Market API
FastAPI wrapper around the free-agent economy
"""

import sys
import os
import uuid
import time
from typing import Dict, List, Optional
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
from market import db
from market.commands import (
    club_acceptance_chance,
    complete_free_agent_signing,
    list_rivals_with_threat,
    list_visible_free_agents,
    open_free_agent_negotiation,
    respond_to_counter_offer,
)
from market.config import SPECIALIZATIONS
from market.discovery import get_familiarity_visibility
from market.models import FreeAgent, FreeAgentNegotiation, GameState, RivalScout
from market.rivals import check_rival_presence
from market.rng import SeededRNG
from market.weekly import run_week
from market.world import COUNTRIES, generate_world


app = FastAPI(title="Scout Market API", version="1.0.0")

sessions: Dict[str, dict] = {}


@app.get("/api/health")
def health_check():
    return {"status": "ok", "sessions": len(sessions)}


class CreateCareerRequest(BaseModel):
    seed: str = "scout-market"
    specialization: str = "first_team"
    scout_name: str = "Alex Morgan"
    countries: Optional[List[str]] = None
    home_country: Optional[str] = None
    clubs_per_league: int = Field(10, ge=2, le=12)
    squad_size: int = Field(18, ge=1, le=40)


class AdvanceRequest(BaseModel):
    weeks: int = Field(1, ge=1, le=76)


class OfferRequest(BaseModel):
    wage: int
    bonus: int = 0
    contract_length: int = 2


class OpenNegotiationRequest(OfferRequest):
    player_id: str


class SaveRequest(BaseModel):
    save_key: str
    label: str = ""


# ═══════════════════════════════════════════════════════════════
# SESSION HELPERS
# ═══════════════════════════════════════════════════════════════

def _get_session(session_id: str) -> dict:
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    return sessions[session_id]


def _new_session(state: GameState, rng: SeededRNG, seed: str) -> dict:
    session_id = str(uuid.uuid4())
    now = time.time()
    sessions[session_id] = {
        "state": state,
        "rng": rng,
        "seed": seed,
        "inbox": [],
        "created_at": now,
    }
    return {"session_id": session_id, "created_at": now, "status": _serialize_status(state)}


def _serialize_status(state: GameState) -> dict:
    pool = state.free_agent_pool
    return {
        "season": state.current_season,
        "week": state.current_week,
        "scout": state.scout.name,
        "specialization": state.scout.primary_specialization,
        "club": state.club_name(state.scout.current_club_id),
        "pool_size": len(pool.available()),
        "released_this_season": pool.total_released_this_season,
        "signed_this_season": pool.total_signed_this_season,
        "retired_this_season": pool.total_retired_this_season,
        "open_negotiations": len(state.negotiations),
        "rivals": len(state.rival_scouts),
        "lost_players": len(state.lost_player_ids),
    }


def _serialize_free_agent(state: GameState, agent: FreeAgent) -> dict:
    player = state.players.get(agent.player_id)
    familiarity = state.scout.familiarity_with(agent.country)
    return {
        "player_id": agent.player_id,
        "name": player.full_name if player else None,
        "age": player.age if player else None,
        "position": player.position if player else None,
        "current_ability": player.current_ability if player else None,
        "country": agent.country,
        "visibility": get_familiarity_visibility(familiarity),
        "released_from": state.club_name(agent.released_from),
        "weeks_in_pool": agent.weeks_in_pool,
        "max_weeks_in_pool": agent.max_weeks_in_pool,
        "wage_expectation": agent.wage_expectation,
        "signing_bonus_expectation": agent.signing_bonus_expectation,
        "npc_interest": len(agent.npc_interest),
        "discovered": agent.discovered_by_scout,
        "discovery_source": agent.discovery_source,
    }


def _serialize_negotiation(negotiation: FreeAgentNegotiation) -> dict:
    return negotiation.to_dict()


def _serialize_rival(state: GameState, rival: RivalScout, threat: Optional[str] = None) -> dict:
    result = {
        "id": rival.id,
        "name": rival.name,
        "club": state.club_name(rival.club_id),
        "quality": rival.quality,
        "reputation": rival.reputation,
        "personality": rival.personality,
        "specialization": rival.specialization,
        "is_nemesis": rival.is_nemesis,
        "phase": rival.phase,
        "targets": len(rival.target_player_ids),
        "competing_for_players": list(rival.competing_for_players),
    }
    if threat is not None:
        result["threat"] = threat
    return result


# ═══════════════════════════════════════════════════════════════
# CAREER SESSIONS
# ═══════════════════════════════════════════════════════════════

@app.post("/sessions")
def create_session(req: CreateCareerRequest):
    if req.specialization not in SPECIALIZATIONS:
        raise HTTPException(status_code=400, detail=f"Unknown specialization '{req.specialization}'")
    for country in (req.countries or []) + ([req.home_country] if req.home_country else []):
        if country not in COUNTRIES:
            raise HTTPException(status_code=400, detail=f"Unknown country '{country}'")
    try:
        state, rng = generate_world(
            req.seed,
            specialization=req.specialization,
            countries=req.countries,
            clubs_per_league=req.clubs_per_league,
            squad_size=req.squad_size,
            scout_name=req.scout_name,
            home_country=req.home_country,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _new_session(state, rng, req.seed)


@app.get("/sessions/{session_id}")
def get_session(session_id: str):
    session = _get_session(session_id)
    return {
        "session_id": session_id,
        "created_at": session["created_at"],
        "status": _serialize_status(session["state"]),
    }


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str):
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    del sessions[session_id]
    return {"deleted": True}


@app.post("/sessions/{session_id}/advance")
def advance_weeks(session_id: str, req: AdvanceRequest):
    session = _get_session(session_id)
    state = session["state"]
    summaries = []
    for _ in range(req.weeks):
        week_result = run_week(state, session["rng"], inbox=session["inbox"].extend)
        summaries.append({
            "season": state.current_season,
            "week": state.current_week,
            "released": len(week_result.released_player_ids),
            "npc_signed": len(week_result.npc_signed),
            "removed": len(week_result.removed_player_ids),
            "discoveries": week_result.new_discoveries,
            "poach_warnings": len(week_result.poach_warnings),
            "lost_players": list(week_result.lost_player_ids),
            "messages": len(week_result.messages),
        })
        state = week_result.state
    session["state"] = state
    return {"weeks": summaries, "status": _serialize_status(state)}


@app.get("/sessions/{session_id}/inbox")
def get_inbox(session_id: str, unread_only: bool = False, limit: int = Query(50, ge=1, le=500)):
    session = _get_session(session_id)
    messages = [m for m in session["inbox"] if not (unread_only and m.read)]
    return {"total": len(messages), "messages": [m.to_dict() for m in messages[-limit:]]}


# ═══════════════════════════════════════════════════════════════
# FREE AGENTS
# ═══════════════════════════════════════════════════════════════

@app.get("/sessions/{session_id}/free-agents")
def get_free_agents(session_id: str, discovered_only: bool = False):
    session = _get_session(session_id)
    state = session["state"]
    agents = list_visible_free_agents(state)
    if discovered_only:
        agents = [a for a in agents if a.discovered_by_scout]
    return {"count": len(agents), "free_agents": [_serialize_free_agent(state, a) for a in agents]}


@app.get("/sessions/{session_id}/free-agents/{player_id}/acceptance")
def get_acceptance_chance(session_id: str, player_id: str):
    session = _get_session(session_id)
    chance = club_acceptance_chance(session["state"], player_id)
    if chance is None:
        raise HTTPException(status_code=404, detail=f"Player '{player_id}' not found")
    return {"player_id": player_id, "acceptance_chance": round(chance, 3)}


@app.get("/sessions/{session_id}/negotiations")
def get_negotiations(session_id: str):
    session = _get_session(session_id)
    return {
        "negotiations": [_serialize_negotiation(n) for n in session["state"].negotiations.values()],
    }


@app.post("/sessions/{session_id}/negotiations")
def open_negotiation(session_id: str, req: OpenNegotiationRequest):
    session = _get_session(session_id)
    result = open_free_agent_negotiation(
        session["state"], req.player_id, req.wage, req.bonus, req.contract_length, session["rng"],
    )
    if result.outcome is None:
        raise HTTPException(status_code=400, detail=f"Cannot negotiate with '{req.player_id}'")
    session["state"] = result.state
    session["inbox"].extend(result.messages)
    return {"negotiation": _serialize_negotiation(result.outcome)}


@app.post("/sessions/{session_id}/negotiations/{player_id}/counter")
def counter_offer(session_id: str, player_id: str, req: OfferRequest):
    session = _get_session(session_id)
    result = respond_to_counter_offer(
        session["state"], player_id, req.wage, req.bonus, req.contract_length, session["rng"],
    )
    if result.outcome is None:
        raise HTTPException(status_code=400, detail=f"No open counter offer from '{player_id}'")
    session["state"] = result.state
    session["inbox"].extend(result.messages)
    return {"negotiation": _serialize_negotiation(result.outcome)}


@app.post("/sessions/{session_id}/negotiations/{player_id}/sign")
def sign_free_agent(session_id: str, player_id: str):
    session = _get_session(session_id)
    result = complete_free_agent_signing(session["state"], player_id)
    if result.outcome is None:
        raise HTTPException(status_code=400, detail=f"No accepted negotiation for '{player_id}'")
    session["state"] = result.state
    session["inbox"].extend(result.messages)
    player = result.outcome
    return {
        "player_id": player.id,
        "club": result.state.club_name(player.club_id),
        "wage": player.wage,
        "contract_expiry": player.contract_expiry,
    }


# ═══════════════════════════════════════════════════════════════
# RIVALS
# ═══════════════════════════════════════════════════════════════

@app.get("/sessions/{session_id}/rivals")
def get_rivals(session_id: str):
    session = _get_session(session_id)
    state = session["state"]
    return {"rivals": [_serialize_rival(state, r, threat) for r, threat in list_rivals_with_threat(state)]}


@app.get("/sessions/{session_id}/fixtures/{fixture_id}/rivals")
def get_rivals_at_fixture(session_id: str, fixture_id: str):
    session = _get_session(session_id)
    state = session["state"]
    if fixture_id not in state.fixtures:
        raise HTTPException(status_code=404, detail=f"Fixture '{fixture_id}' not found")
    return {"fixture_id": fixture_id, "rivals": [_serialize_rival(state, r) for r in check_rival_presence(state, fixture_id)]}


# ═══════════════════════════════════════════════════════════════
# SAVES
# ═══════════════════════════════════════════════════════════════

@app.post("/sessions/{session_id}/save")
def save_session(session_id: str, req: SaveRequest):
    session = _get_session(session_id)
    db.save_state(req.save_key, session["state"], label=req.label or session["seed"])
    return {"saved": True, "save_key": req.save_key}


@app.get("/saves")
def get_saves():
    return {"saves": db.list_saves()}


@app.post("/saves/{save_key}/load")
def load_save(save_key: str):
    state = db.load_state(save_key)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Save '{save_key}' not found")
    # the live RNG is not persisted; resume from a seed derived from the save point
    seed = f"{save_key}-s{state.current_season}-w{state.current_week}"
    return _new_session(state, SeededRNG(seed), seed)


@app.delete("/saves/{save_key}")
def delete_save(save_key: str):
    if not db.delete_save(save_key):
        raise HTTPException(status_code=404, detail=f"Save '{save_key}' not found")
    return {"deleted": True}
