"""
Scout Market: free-agent economy and rival scouts for a football scouting career
"""

from .rng import SeededRNG, make_message_id
from .models import (
    Player,
    Club,
    League,
    Contact,
    Fixture,
    Territory,
    Scout,
    Observation,
    AttributeReading,
    ScoutReport,
    InboxMessage,
    NPCInterest,
    FreeAgent,
    FreeAgentPool,
    FreeAgentNegotiation,
    RivalScout,
    RivalActivity,
    GameState,
    CURRENT_SCHEMA_VERSION,
)
from .expiry import ContractExpiryResult, process_contract_expiries, create_free_agent_from_player
from .pool import (
    PoolTickResult,
    tick_free_agent_pool,
    get_visible_free_agents,
    create_empty_pool,
    add_free_agent,
    remove_free_agent,
    mark_free_agent_signed,
)
from .discovery import (
    DiscoveryResult,
    discover_free_agents,
    get_familiarity_visibility,
    get_familiarity_accuracy_penalty,
    process_contact_free_agent_tip,
)
from .negotiation import (
    initiate_free_agent_negotiation,
    advance_free_agent_negotiation,
    evaluate_offer,
    is_negotiation_expired,
    calculate_free_agent_acceptance,
    process_free_agent_signing,
    generate_negotiation_message,
)
from .rivals import (
    RivalScoutWeekResult,
    generate_rival_scouts,
    process_rival_scout_week,
    get_rival_threat_level,
    get_shared_targets,
    check_rival_presence,
    generate_rival_intelligence,
)
from .weekly import WeekResult, run_week, simulate_weeks
from .world import generate_world, generate_fixtures
