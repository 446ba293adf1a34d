"""
World Generation
=================

Builds a fresh career: one league per country, clubs with reputations and
budgets, contracted squads, the scout's contact network, assigned
territories, fixtures and the rival scout directory.

Everything is drawn from a single ``SeededRNG`` so a seed string fully
determines the world.  The same RNG is returned so the caller can keep
threading it through the weekly simulation.

Usage:
    from market.world import generate_world

    state, rng = generate_world("career-2026", specialization="regional")
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from market.config import SPECIALIZATIONS, STARTING_SEASON, WEEKS_PER_SEASON
from market.models import (
    Club,
    Contact,
    Fixture,
    GameState,
    League,
    Player,
    Scout,
    Territory,
)
from market.pool import create_empty_pool
from market.rivals import generate_rival_scouts
from market.rng import SeededRNG
from market.utils import clamp, round_half_up

_log = logging.getLogger("market.world")


# ═══════════════════════════════════════════════════════════════
# NAMING DATA
# ═══════════════════════════════════════════════════════════════

COUNTRIES: Dict[str, dict] = {
    "england": {
        "league": "Premier Division",
        "towns": ["Ashford", "Brinton", "Carlow Vale", "Dunmere", "Eastholme", "Fernley",
                  "Granthorpe", "Hollins", "Ivybridge", "Kestwick", "Langmoor", "Marston"],
        "suffixes": ["United", "City", "Town", "Rovers", "Athletic", "Albion"],
        "first": ["Jack", "Harry", "Oliver", "George", "Callum", "Liam", "Ryan", "Kieran"],
        "last": ["Walker", "Hughes", "Turner", "Bennett", "Cole", "Marsh", "Fletcher", "Shaw"],
    },
    "spain": {
        "league": "Primera Liga",
        "towns": ["Alcora", "Benalta", "Castrillo", "Dosaguas", "Esteiro", "Fuenmayor",
                  "Garrovilla", "Hinojosa", "Illueca", "Jarandilla", "Lorquí", "Montalbo"],
        "suffixes": ["CF", "Deportivo", "Real", "Atlético", "UD", "SD"],
        "first": ["Pablo", "Álvaro", "Sergio", "Iker", "Javier", "Mario", "Hugo", "Dani"],
        "last": ["García", "Ruiz", "Moreno", "Navarro", "Serrano", "Ortega", "Castro", "Rubio"],
    },
    "germany": {
        "league": "Erste Liga",
        "towns": ["Altenau", "Brückheim", "Calbe", "Dornstadt", "Eisfeld", "Friedland",
                  "Gersthofen", "Hainburg", "Ilmenau", "Kirchberg", "Lauterbach", "Mühlhausen"],
        "suffixes": ["SV", "FC", "Borussia", "Eintracht", "SpVgg", "VfB"],
        "first": ["Lukas", "Jonas", "Leon", "Felix", "Niklas", "Tim", "Jan", "Moritz"],
        "last": ["Schmidt", "Weber", "Becker", "Wagner", "Krüger", "Vogel", "Hartmann", "Brandt"],
    },
    "italy": {
        "league": "Serie Prima",
        "towns": ["Arzano", "Bivona", "Castelnuovo", "Dolceacqua", "Empoli Alta", "Fondi",
                  "Gavorrano", "Imola Nord", "Lauria", "Mondello", "Nocera", "Ostiglia"],
        "suffixes": ["Calcio", "AC", "US", "Sporting", "Virtus", "FC"],
        "first": ["Lorenzo", "Matteo", "Andrea", "Davide", "Simone", "Marco", "Luca", "Riccardo"],
        "last": ["Rossi", "Bianchi", "Ferrari", "Esposito", "Romano", "Greco", "Conti", "Marino"],
    },
    "france": {
        "league": "Ligue Élite",
        "towns": ["Aubenas", "Bressuire", "Cholet", "Dieppe", "Épernay", "Fougères",
                  "Guingamp Est", "Hazebrouck", "Issoire", "Lannion", "Mâcon", "Niort"],
        "suffixes": ["FC", "Olympique", "AS", "Stade", "Racing", "US"],
        "first": ["Lucas", "Théo", "Hugo", "Enzo", "Mathis", "Nathan", "Louis", "Yanis"],
        "last": ["Martin", "Bernard", "Dubois", "Moreau", "Laurent", "Girard", "Roux", "Fontaine"],
    },
    "brazil": {
        "league": "Série Nacional",
        "towns": ["Arapiraca", "Bagé", "Caxias", "Divinópolis", "Erechim", "Franca",
                  "Guarapuava", "Itabuna", "Jequié", "Lajeado", "Marabá", "Parnaíba"],
        "suffixes": ["EC", "FC", "SC", "Atlético", "Esporte", "AA"],
        "first": ["Gabriel", "Lucas", "Matheus", "Vinícius", "Rafael", "Thiago", "Bruno", "Caio"],
        "last": ["Silva", "Souza", "Oliveira", "Pereira", "Lima", "Carvalho", "Ribeiro", "Almeida"],
    },
}

POSITIONS = ["GK", "CB", "CB", "FB", "FB", "DM", "CM", "CM", "AM", "WG", "WG", "ST", "ST"]

CONTACT_TYPES = ["agent", "journalist", "scout", "sporting_director", "coach"]

SCOUT_SKILLS = ["technical_eye", "physical_assessment", "psychological_read",
                "tactical_understanding", "data_literacy", "network"]


# ═══════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════

def _round_robin_rounds(club_ids: Sequence[str]) -> List[List[Tuple[str, str]]]:
    """Single round robin by the circle method.  Odd counts get a bye slot."""
    teams: List[Optional[str]] = list(club_ids)
    if len(teams) % 2:
        teams.append(None)
    n = len(teams)
    rounds: List[List[Tuple[str, str]]] = []
    for r in range(n - 1):
        pairs = []
        for i in range(n // 2):
            home, away = teams[i], teams[n - 1 - i]
            if home is None or away is None:
                continue
            # alternate home advantage so nobody hosts every week
            pairs.append((home, away) if (r + i) % 2 == 0 else (away, home))
        rounds.append(pairs)
        teams = [teams[0]] + [teams[-1]] + teams[1:-1]
    return rounds


def generate_fixtures(leagues: Dict[str, League], season: int) -> Dict[str, Fixture]:
    """
    Double round robin for every league, cycled to fill the season.

    Deterministic: no RNG.  Fixture ids carry the season so a regenerated
    calendar never collides with last season's.
    """
    fixtures: Dict[str, Fixture] = {}
    for league in leagues.values():
        if len(league.club_ids) < 2:
            continue
        first_half = _round_robin_rounds(league.club_ids)
        second_half = [[(away, home) for home, away in rnd] for rnd in first_half]
        rounds = first_half + second_half

        for week in range(1, WEEKS_PER_SEASON + 1):
            for index, (home, away) in enumerate(rounds[(week - 1) % len(rounds)]):
                fixture_id = f"fx_s{season}_{league.id}_w{week}_{index}"
                fixtures[fixture_id] = Fixture(
                    id=fixture_id,
                    week=week,
                    league_id=league.id,
                    home_club_id=home,
                    away_club_id=away,
                )
    return fixtures


# ═══════════════════════════════════════════════════════════════
# WORLD
# ═══════════════════════════════════════════════════════════════

def generate_world(
    seed,
    specialization: str = "first_team",
    countries: Optional[Sequence[str]] = None,
    clubs_per_league: int = 10,
    squad_size: int = 18,
    scout_name: str = "Alex Morgan",
    home_country: Optional[str] = None,
) -> Tuple[GameState, SeededRNG]:
    """Generate a new career world from ``seed``."""
    if specialization not in SPECIALIZATIONS:
        raise ValueError(f"Unknown specialization '{specialization}'. Choose from {SPECIALIZATIONS}")

    country_keys = list(countries) if countries else list(COUNTRIES)
    unknown = [c for c in country_keys if c not in COUNTRIES]
    if unknown:
        raise ValueError(f"Unknown countries: {unknown}")
    clubs_per_league = max(2, min(clubs_per_league, 12))

    rng = SeededRNG(seed)
    season = STARTING_SEASON
    home = home_country or country_keys[0]
    if home not in country_keys:
        raise ValueError(f"Home country '{home}' is not one of the generated countries")

    leagues: Dict[str, League] = {}
    clubs: Dict[str, Club] = {}
    players: Dict[str, Player] = {}

    for country in country_keys:
        data = COUNTRIES[country]
        league_id = f"lg_{country}"
        club_ids = []
        towns = rng.shuffled(data["towns"])[:clubs_per_league]
        for rank, town in enumerate(towns):
            club_id = f"cl_{country}_{rank}"
            # rank 0 is the strongest club in the league
            reputation = int(clamp(90 - rank * 6 + rng.next_int(-5, 5), 10, 99))
            clubs[club_id] = Club(
                id=club_id,
                name=f"{town} {rng.pick(data['suffixes'])}",
                country=country,
                league_id=league_id,
                reputation=reputation,
                budget=reputation * 20_000 + rng.next_int(0, 200_000),
            )
            club_ids.append(club_id)
            for _ in range(squad_size):
                player = _generate_player(rng, len(players), clubs[club_id], country, country_keys, season)
                players[player.id] = player
        leagues[league_id] = League(id=league_id, name=data["league"], country=country, club_ids=club_ids)

    home_clubs = leagues[f"lg_{home}"].club_ids
    scout = _generate_scout(rng, scout_name, specialization, home, country_keys)
    scout = replace(scout, current_club_id=rng.pick(home_clubs[len(home_clubs) // 2:]))
    contacts = _generate_contacts(rng, home, country_keys)
    territories = _generate_territories(rng, specialization, home, country_keys)

    state = GameState(
        current_week=1,
        current_season=season,
        scout=scout,
        players=players,
        clubs=clubs,
        leagues=leagues,
        contacts=contacts,
        fixtures=generate_fixtures(leagues, season),
        territories=territories,
        free_agent_pool=create_empty_pool(season),
    )
    state = replace(state, rival_scouts=generate_rival_scouts(rng, state))

    _log.info(
        f"World '{seed}': {len(leagues)} leagues, {len(clubs)} clubs, {len(players)} players, "
        f"{len(state.rival_scouts)} rivals"
    )
    return state, rng


def _generate_player(
    rng: SeededRNG,
    index: int,
    club: Club,
    country: str,
    all_countries: Sequence[str],
    season: int,
) -> Player:
    # roughly one in seven players is an import
    nationality = rng.pick(all_countries) if rng.chance(0.15) else country
    names = COUNTRIES[nationality]
    age = rng.next_int(17, 36)
    ability = int(clamp(round_half_up(rng.gaussian(club.reputation * 1.1, 18)), 20, 180))
    headroom = max(0, 28 - age) * rng.next_int(1, 5)
    return Player(
        id=f"pl_{index:05d}",
        first_name=rng.pick(names["first"]),
        last_name=rng.pick(names["last"]),
        age=age,
        position=rng.pick(POSITIONS),
        nationality=nationality,
        club_id=club.id,
        contract_expiry=season + rng.next_int(0, 3),
        current_ability=ability,
        potential_ability=min(200, ability + headroom),
        form=rng.next_int(-3, 3),
        wage=ability * 80,
    )


def _generate_scout(
    rng: SeededRNG,
    name: str,
    specialization: str,
    home: str,
    country_keys: Sequence[str],
) -> Scout:
    familiarity = {home: 70}
    for country in country_keys:
        if country != home:
            familiarity[country] = rng.next_int(0, 35)
    return Scout(
        id="scout_player",
        name=name,
        reputation=rng.next_int(10, 30),
        primary_specialization=specialization,
        skills={skill: rng.next_int(5, 14) for skill in SCOUT_SKILLS},
        country_familiarity=familiarity,
    )


def _generate_contacts(rng: SeededRNG, home: str, country_keys: Sequence[str]) -> Dict[str, Contact]:
    contacts: Dict[str, Contact] = {}
    for i in range(rng.next_int(4, 8)):
        country = home if i < 2 else rng.pick(country_keys)
        names = COUNTRIES[country]
        contact_id = f"ct_{i:02d}"
        contacts[contact_id] = Contact(
            id=contact_id,
            name=f"{rng.pick(names['first'])} {rng.pick(names['last'])}",
            type=rng.pick(CONTACT_TYPES),
            country=country,
            relationship=rng.next_int(15, 70),
        )
    return contacts


def _generate_territories(
    rng: SeededRNG,
    specialization: str,
    home: str,
    country_keys: Sequence[str],
) -> Dict[str, Territory]:
    count = 2 if specialization == "regional" else 1
    others = rng.shuffled([c for c in country_keys if c != home])
    chosen = [home] + others[: count - 1]
    return {
        f"tr_{country}": Territory(id=f"tr_{country}", name=country.title(), country=country)
        for country in chosen
    }
