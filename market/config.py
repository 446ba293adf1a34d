"""
Scout Market Configuration
===========================

Tunable constants for the free-agent economy and the rival scout directory.
Grouped by subsystem; every probability is per entity per simulated week
unless stated otherwise.

Ability (CA/PA) is on the 1-200 scale. Reputation and familiarity are 0-100.
"""

from typing import Dict, List, Tuple


# ═══════════════════════════════════════════════════════════════
# CALENDAR
# ═══════════════════════════════════════════════════════════════

WEEKS_PER_SEASON = 38
STARTING_SEASON = 1


# ═══════════════════════════════════════════════════════════════
# CONTRACT EXPIRY
# ═══════════════════════════════════════════════════════════════

RENEWAL_CHANCE_HIGH = 0.70     # CA > 70
RENEWAL_CHANCE_MID = 0.50      # CA 50-70
RENEWAL_CHANCE_LOW = 0.30      # CA < 50

HIGH_REP_RENEWAL_BOOST = 0.15     # club reputation > 75
LOW_REP_RENEWAL_PENALTY = -0.10   # club reputation < 30
FORM_RENEWAL_BONUS = 0.05         # per point of positive form

RENEWAL_CHANCE_FLOOR = 0.05
RENEWAL_CHANCE_CEILING = 0.95

RENEWAL_EXTENSION_MIN = 1
RENEWAL_EXTENSION_MAX = 3

RETIREMENT_AGE_THRESHOLD = 34
RETIREMENT_CA_THRESHOLD = 50
RETIREMENT_CHANCE = 0.60

NOTABLE_RELEASE_CA = 65
NOTABLE_RETIREMENT_CA = 60
NOTABLE_CLUB_REPUTATION = 75
NOTABLE_RETIREMENT_CLUB_REPUTATION = 60

# Max weeks in the pool before dropping out, by CA tier
POOL_DURATION_TABLE: List[Tuple[int, int]] = [
    # (min_ca, max_weeks)
    (75, 4),    # elite
    (60, 8),    # quality
    (45, 16),   # depth
    (0, 20),    # journeyman
]

WAGE_PER_CA_POINT = 80
SIGNING_BONUS_WEEKS = 3


# ═══════════════════════════════════════════════════════════════
# FREE AGENT POOL
# ═══════════════════════════════════════════════════════════════

NPC_OFFER_BASE_CHANCE = 0.08
NPC_OFFER_CA_MULTIPLIER = 0.003
NPC_URGENCY_WEEK = 3
NPC_URGENCY_BONUS = 0.05
NPC_ACCEPTANCE_CHANCE = 0.40
MAX_NPC_INTEREST = 3
NPC_REPUTATION_WINDOW = 30
NPC_BUDGET_WEEKS = 12          # club budget must cover this many weeks of wages
NPC_SIGNING_CONTRACT_SEASONS = 2

WAGE_DECAY_RATE = 0.03
BONUS_DECAY_RATE = WAGE_DECAY_RATE * 1.5
MIN_WAGE = 200

POOL_OVERFLOW_THRESHOLD = 200
POOL_OVERFLOW_MULTIPLIER = 2.0

EXPIRY_RETIREMENT_AGE = 32

MID_SEASON_RELEASE_CHANCE = 0.0008
MID_SEASON_RELEASE_CA_CEILING = 60
MID_SEASON_RELEASE_MIN_AGE = 25
MID_SEASON_BONUS_WEEKS = 2


# ═══════════════════════════════════════════════════════════════
# DISCOVERY / VISIBILITY
# ═══════════════════════════════════════════════════════════════

VISIBILITY_THRESHOLDS: Dict[str, int] = {
    "none": 0,
    "rumor": 1,
    "basic": 20,
    "standard": 40,
    "good": 60,
    "expert": 80,
}

ACCURACY_PENALTY_BY_VISIBILITY: Dict[str, float] = {
    "expert": 0.0,
    "good": 0.10,
    "standard": 0.25,
    "basic": 0.50,
}
DATA_SCOUT_PENALTY_REDUCTION = 0.50

DISCOVERY_CHANCE: Dict[str, float] = {
    "first_team": 0.15,
    "regional": 0.20,
    "data": 0.25,
    "youth": 0.05,
}

FIRST_TEAM_CONTACT_BONUS = 0.08
FIRST_TEAM_CONTACT_MIN_RELATIONSHIP = 20
TERRITORY_DISCOVERY_BONUS = 0.20
DATA_SCOUT_DISCOVERY_BONUS = 0.05
YOUTH_DISCOVERY_SCALE = 0.5

CONTACT_DISCOVERY_TYPES = ("agent", "journalist", "scout")
CONTACT_DISCOVERY_MIN_RELATIONSHIP = 30
CONTACT_DISCOVERY_BASE = 0.02
CONTACT_DISCOVERY_RANGE = 0.08

SPECIALIZATIONS = ("youth", "first_team", "regional", "data")


# ═══════════════════════════════════════════════════════════════
# NEGOTIATION
# ═══════════════════════════════════════════════════════════════

MAX_ROUNDS = 3
NEGOTIATION_DEADLINE_WEEKS = 3
WAGE_ACCEPTANCE_TOLERANCE = 0.85
INSTANT_REJECTION_SATISFACTION = 0.50
COUNTER_CONCESSION_RATE = 0.30
MIN_COUNTER_WAGE = 200
WAGE_WEIGHT = 0.7
BONUS_WEIGHT = 0.3
CONTRACT_LENGTH_ADJUSTMENT = 0.05
DESPERATION_PER_WEEK = 0.01
MAX_DESPERATION = 0.15
COUNTER_WAGE_JITTER = 50
COUNTER_BONUS_JITTER = 100

PREFERRED_CONTRACT_LENGTH: Dict[str, int] = {
    "young": 3,     # < 26
    "prime": 2,     # 26-30
    "veteran": 1,   # > 30
}

CONVICTION_BASE_CHANCE: Dict[str, float] = {
    "note": 0.08,
    "recommend": 0.35,
    "strong_recommend": 0.60,
    "table_pound": 0.80,
}
TOP_CLUB_SELECTIVITY = 0.6
WEAK_CLUB_SELECTIVITY = 1.3
FIRST_TEAM_ACCEPTANCE_BONUS = 1.10
ACCEPTANCE_FLOOR = 0.05
ACCEPTANCE_CEILING = 0.95


# ═══════════════════════════════════════════════════════════════
# RIVAL SCOUTS
# ═══════════════════════════════════════════════════════════════

RIVAL_COUNT_MIN = 3
RIVAL_COUNT_MAX = 5

RIVAL_QUALITY_WEIGHTS: List[Tuple[int, int]] = [
    (2, 20),
    (3, 40),
    (4, 30),
    (5, 10),
]

RIVAL_REPUTATION_MIN = 30
RIVAL_REPUTATION_MAX = 60

INITIAL_TARGETS_MIN = 2
INITIAL_TARGETS_MAX = 4
MAX_TARGET_PLAYERS = 8

RIVAL_DISCOVERY_CHANCE = 0.2
HIGH_CA_DISCOVERY_WEIGHT = 3
POACH_CHANCE = 0.1
REP_GAIN_MIN = 0
REP_GAIN_MAX = 2
HIGH_CA_THRESHOLD = 100

REPORT_DEADLINE_MIN_WEEKS = 2
REPORT_DEADLINE_MAX_WEEKS = 4
SCOUTING_COMPLETION_THRESHOLD = 5
HIGH_QUALITY_RIVAL = 4

SIGNING_CHANCE = 0.25
SIGNING_QUALITY_STEP = 0.05
SIGNING_PROGRESS_BONUS = 0.1
MAX_SIGNING_CHANCE = 0.6

MAX_ACTIVITY_HISTORY = 50

INTEL_MIN_RELATIONSHIP = 50
INTEL_CHANCE = 0.15
KEEN_AGGRESSIVENESS = 0.6

THREAT_MARGIN = 10

RIVAL_PERSONALITIES = ("aggressive", "methodical", "connected", "lucky")

PERSONALITY_AGGRESSIVENESS: Dict[str, float] = {
    "aggressive": 0.8,
    "methodical": 0.3,
    "connected": 0.5,
    "lucky": 0.6,
}

RIVAL_FIRST_NAMES = [
    "Marco", "Luca", "Diego", "João", "Alejandro", "Raphaël", "Tomáš",
    "Sven", "Patrick", "Henrik", "Mihail", "Andrei", "Kwame", "Ibrahima",
    "Carlos", "Takashi", "Yusuf", "Ander", "Florian", "Matteo", "Emeka",
    "Stefan", "Viktor", "Ezra", "Rúben", "Lars", "Tariq", "Noel", "Björn",
    "James", "Michael", "David", "Robert", "William", "Thomas", "Daniel",
]

RIVAL_LAST_NAMES = [
    "Santos", "Müller", "García", "Novák", "Andersen", "Okonkwo", "Ramos",
    "Eriksen", "Petrov", "López", "Kone", "Bauer", "Tanaka", "Öztürk",
    "Fernández", "Johansson", "Diallo", "Krejčí", "Reyes", "Svensson",
    "Adeyemi", "Hoffmann", "Nascimento", "Lindström", "Mbeki", "Watanabe",
    "Costa", "Kristiansen", "Yilmaz", "Papadopoulos", "Fletcher", "Morrison",
    "Hughes", "Wallace", "Reid", "Shaw", "Walsh", "Burton",
]
