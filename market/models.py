"""
Scout Market Data Model
========================

Dataclasses for the simulated world.  Two families:

1. World records (Player, Club, League, Contact, Fixture, Territory, Scout,
   Observation, ScoutReport) are owned by other subsystems; the market only
   reads them by id.
2. Economy records (FreeAgent, FreeAgentPool, FreeAgentNegotiation,
   RivalScout, RivalActivity) are owned by the market and live in GameState.

The engine never mutates a record it was handed.  Updates go through
``dataclasses.replace`` and fresh containers so every weekly tick yields a
new snapshot.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from market.config import SCOUTING_COMPLETION_THRESHOLD


CURRENT_SCHEMA_VERSION = 2


# ═══════════════════════════════════════════════════════════════
# WORLD RECORDS
# ═══════════════════════════════════════════════════════════════

@dataclass
class Player:
    """A footballer.  Ability is on the 1-200 scale."""
    id: str
    first_name: str
    last_name: str
    age: int
    position: str
    nationality: str
    club_id: Optional[str]
    contract_expiry: int          # last season under contract
    current_ability: int
    potential_ability: int
    form: int = 0                 # -3..3
    wage: int = 0
    retired: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Player":
        return cls(**d)


@dataclass
class Club:
    id: str
    name: str
    country: str
    league_id: Optional[str]
    reputation: int               # 0-100
    budget: int

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Club":
        return cls(**d)


@dataclass
class League:
    id: str
    name: str
    country: str
    club_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "League":
        return cls(**d)


@dataclass
class Contact:
    """Someone in the scout's network."""
    id: str
    name: str
    type: str                     # agent / journalist / scout / sporting_director / coach
    country: str
    relationship: int             # 0-100

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Contact":
        return cls(**d)


@dataclass
class Fixture:
    id: str
    week: int
    league_id: str
    home_club_id: str
    away_club_id: str

    def involves(self, club_id: Optional[str]) -> bool:
        return club_id is not None and club_id in (self.home_club_id, self.away_club_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Fixture":
        return cls(**d)


@dataclass
class Territory:
    """A country the scout has been assigned to cover."""
    id: str
    name: str
    country: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Territory":
        return cls(**d)


@dataclass
class Scout:
    """The human player's scout."""
    id: str
    name: str
    reputation: int                                   # 0-100
    primary_specialization: str                       # youth / first_team / regional / data
    current_club_id: Optional[str] = None
    skills: Dict[str, int] = field(default_factory=dict)              # 1-20 each
    country_familiarity: Dict[str, int] = field(default_factory=dict)  # 0-100

    def familiarity_with(self, country: str) -> int:
        return self.country_familiarity.get(country, 0)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Scout":
        return cls(**d)


@dataclass
class AttributeReading:
    attribute: str
    value: int
    confidence: float             # 0-1

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Observation:
    id: str
    player_id: str
    week: int
    season: int
    readings: List[AttributeReading] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Observation":
        d = dict(d)
        d["readings"] = [AttributeReading(**r) for r in d.get("readings", [])]
        return cls(**d)


@dataclass
class ScoutReport:
    id: str
    player_id: str
    week: int
    season: int
    conviction: str = "recommend"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "ScoutReport":
        return cls(**d)


@dataclass
class InboxMessage:
    """Outbound notification.  The market writes these and never reads them back."""
    id: str
    week: int
    season: int
    type: str                     # event / news
    title: str
    body: str
    read: bool = False
    action_required: bool = False
    related_id: Optional[str] = None
    related_entity_type: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "InboxMessage":
        return cls(**d)


# ═══════════════════════════════════════════════════════════════
# FREE AGENTS
# ═══════════════════════════════════════════════════════════════

@dataclass
class NPCInterest:
    club_id: str
    offer_week: int
    accepted: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class FreeAgent:
    """A released player waiting for a new club.

    ``country`` and the expectations are snapshotted at release and do not
    follow later changes to the player record.
    """
    player_id: str
    country: str
    released_from: str
    released_season: int
    max_weeks_in_pool: int
    wage_expectation: int
    signing_bonus_expectation: int
    weeks_in_pool: int = 0
    discovered_by_scout: bool = False
    discovery_source: Optional[str] = None
    npc_interest: List[NPCInterest] = field(default_factory=list)
    status: str = "available"     # available / signed / retired / dropped_out
    signed_club_id: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.status == "available"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "FreeAgent":
        d = dict(d)
        d["npc_interest"] = [NPCInterest(**i) for i in d.get("npc_interest", [])]
        return cls(**d)


@dataclass
class FreeAgentPool:
    agents: List[FreeAgent] = field(default_factory=list)
    last_refresh_season: int = 1
    total_released_this_season: int = 0
    total_signed_this_season: int = 0
    total_retired_this_season: int = 0

    def available(self) -> List[FreeAgent]:
        return [a for a in self.agents if a.is_available]

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "FreeAgentPool":
        d = dict(d)
        d["agents"] = [FreeAgent.from_dict(a) for a in d.get("agents", [])]
        return cls(**d)


@dataclass
class FreeAgentNegotiation:
    """One attempt by the scout's club to sign a free agent."""
    free_agent_id: str
    offered_wage: int
    offered_bonus: int
    offered_contract_length: int
    deadline: int                 # absolute week
    round: int = 1
    status: str = "pending"       # pending / countered / accepted / rejected
    counter_wage: Optional[int] = None
    counter_bonus: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in ("accepted", "rejected")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "FreeAgentNegotiation":
        return cls(**d)


# ═══════════════════════════════════════════════════════════════
# RIVAL SCOUTS
# ═══════════════════════════════════════════════════════════════

@dataclass
class RivalScout:
    """An NPC scout working for another club."""
    id: str
    name: str
    quality: int                  # 1-5
    specialization: str
    club_id: str
    reputation: int               # 0-100
    personality: str              # aggressive / methodical / connected / lucky
    aggressiveness: float         # 0-1
    budget_tier: str              # low / medium / high
    target_player_ids: List[str] = field(default_factory=list)
    is_nemesis: bool = False
    competing_for_players: List[str] = field(default_factory=list)
    scouting_progress: Dict[str, int] = field(default_factory=dict)
    current_target: Optional[str] = None
    report_deadline: Optional[int] = None
    last_seen_at_fixture: Optional[str] = None

    @property
    def phase(self) -> str:
        """idle → targeting → progressing → reporting, driven by current_target."""
        if self.current_target is None:
            return "idle"
        progress = self.scouting_progress.get(self.current_target, 0)
        if progress >= SCOUTING_COMPLETION_THRESHOLD:
            return "reporting"
        if progress > 0:
            return "progressing"
        return "targeting"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "RivalScout":
        return cls(**d)


@dataclass
class RivalActivity:
    rival_id: str
    type: str                     # target_acquired / spotted / report_submitted / player_signed
    player_id: str
    week: int
    season: int
    fixture_id: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "RivalActivity":
        return cls(**d)


# ═══════════════════════════════════════════════════════════════
# GAME STATE
# ═══════════════════════════════════════════════════════════════

@dataclass
class GameState:
    """One immutable-by-convention snapshot of the whole career."""
    current_week: int
    current_season: int
    scout: Scout
    players: Dict[str, Player] = field(default_factory=dict)
    clubs: Dict[str, Club] = field(default_factory=dict)
    leagues: Dict[str, League] = field(default_factory=dict)
    contacts: Dict[str, Contact] = field(default_factory=dict)
    fixtures: Dict[str, Fixture] = field(default_factory=dict)
    territories: Dict[str, Territory] = field(default_factory=dict)
    observations: Dict[str, Observation] = field(default_factory=dict)
    reports: Dict[str, ScoutReport] = field(default_factory=dict)
    free_agent_pool: FreeAgentPool = field(default_factory=FreeAgentPool)
    negotiations: Dict[str, FreeAgentNegotiation] = field(default_factory=dict)
    rival_scouts: Dict[str, RivalScout] = field(default_factory=dict)
    rival_activities: List[RivalActivity] = field(default_factory=list)
    lost_player_ids: List[str] = field(default_factory=list)
    version: int = CURRENT_SCHEMA_VERSION

    def fixtures_for_week(self, week: int) -> List[Fixture]:
        return [f for f in self.fixtures.values() if f.week == week]

    def club_name(self, club_id: Optional[str]) -> str:
        club = self.clubs.get(club_id) if club_id else None
        return club.name if club else "Unknown Club"

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "current_week": self.current_week,
            "current_season": self.current_season,
            "scout": self.scout.to_dict(),
            "players": {k: v.to_dict() for k, v in self.players.items()},
            "clubs": {k: v.to_dict() for k, v in self.clubs.items()},
            "leagues": {k: v.to_dict() for k, v in self.leagues.items()},
            "contacts": {k: v.to_dict() for k, v in self.contacts.items()},
            "fixtures": {k: v.to_dict() for k, v in self.fixtures.items()},
            "territories": {k: v.to_dict() for k, v in self.territories.items()},
            "observations": {k: v.to_dict() for k, v in self.observations.items()},
            "reports": {k: v.to_dict() for k, v in self.reports.items()},
            "free_agent_pool": self.free_agent_pool.to_dict(),
            "negotiations": {k: v.to_dict() for k, v in self.negotiations.items()},
            "rival_scouts": {k: v.to_dict() for k, v in self.rival_scouts.items()},
            "rival_activities": [a.to_dict() for a in self.rival_activities],
            "lost_player_ids": list(self.lost_player_ids),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "GameState":
        """Rebuild a snapshot.  Expects current-schema data; see migrations."""
        return cls(
            version=d["version"],
            current_week=d["current_week"],
            current_season=d["current_season"],
            scout=Scout.from_dict(d["scout"]),
            players={k: Player.from_dict(v) for k, v in d["players"].items()},
            clubs={k: Club.from_dict(v) for k, v in d["clubs"].items()},
            leagues={k: League.from_dict(v) for k, v in d["leagues"].items()},
            contacts={k: Contact.from_dict(v) for k, v in d["contacts"].items()},
            fixtures={k: Fixture.from_dict(v) for k, v in d["fixtures"].items()},
            territories={k: Territory.from_dict(v) for k, v in d["territories"].items()},
            observations={k: Observation.from_dict(v) for k, v in d["observations"].items()},
            reports={k: ScoutReport.from_dict(v) for k, v in d["reports"].items()},
            free_agent_pool=FreeAgentPool.from_dict(d["free_agent_pool"]),
            negotiations={k: FreeAgentNegotiation.from_dict(v) for k, v in d["negotiations"].items()},
            rival_scouts={k: RivalScout.from_dict(v) for k, v in d["rival_scouts"].items()},
            rival_activities=[RivalActivity.from_dict(a) for a in d["rival_activities"]],
            lost_player_ids=list(d["lost_player_ids"]),
        )
