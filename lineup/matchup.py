"""
Post-hoc matchup analysis of a chosen lineup against the opponent roster.

Each of our players is compared with the opponent in the same slot code (a
midpoint benchmark when that slot is empty). Role-specific edges above the
configured thresholds become insight strings; every positive edge also feeds
a category score (wings, midfield, aerial, defense, creation) and the top two
categories become the tactical suggestions. Against a mirrored opponent an
overall quality gap beyond the "gap" threshold is called out either way, as
our advantage or as their threat.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from lineup.players import (
    OpponentProfile,
    PlayerProfile,
    aerial_composite,
    index_opponents_by_slot,
    neutral_opponent,
    pressing_composite,
    technical_composite,
)
from lineup.roles import RoleFamily
from lineup.tactical_config import DEFAULT_CONFIG, TacticalConfig

if TYPE_CHECKING:
    from lineup.lineup_optimizer import LineupResult

logger = logging.getLogger(__name__)

CATEGORIES: Tuple[str, ...] = ("wings", "midfield", "aerial", "defense", "creation")

SUGGESTION_PHRASES: Dict[str, str] = {
    "wings": "Attack down the flanks where our pace advantage is greatest",
    "midfield": "Control the tempo through superior midfield stamina",
    "aerial": "Target crosses and set pieces to exploit aerial superiority",
    "defense": "Win the physical duels and build attacks from the back",
    "creation": "Play through the lines to exploit our technical edge",
}

FALLBACK_INSIGHT = "Evenly matched across all positions"
FALLBACK_SUGGESTION = "Maintain tactical discipline and wait for opportunities"

WIDE = {RoleFamily.LB, RoleFamily.RB, RoleFamily.LW, RoleFamily.RW}
CENTRAL_MIDFIELD = {RoleFamily.DM, RoleFamily.CM, RoleFamily.AM}


@dataclass(frozen=True)
class MatchupDeltas:
    """Own minus opponent, normalised to -1..1."""
    pace: float
    stamina: float
    strength: float
    aerial: float
    technical: float
    quality: float


@dataclass(frozen=True)
class MatchupAnalysis:
    insights: Tuple[str, ...]
    suggestions: Tuple[str, ...]
    best_suggestion: str
    category_scores: Tuple[Tuple[str, float], ...]  # highest first


def matchup_deltas(player: PlayerProfile, opponent: PlayerProfile) -> MatchupDeltas:
    return MatchupDeltas(
        pace=(player.speed - opponent.speed) / 100.0,
        stamina=(player.stamina - opponent.stamina) / 100.0,
        strength=(player.strength - opponent.strength) / 100.0,
        aerial=(aerial_composite(player) - aerial_composite(opponent)) / 100.0,
        technical=(technical_composite(player) - pressing_composite(opponent)) / 100.0,
        quality=(player.quality - opponent.quality) / 100.0,
    )


def _label(player: PlayerProfile) -> str:
    return player.name or player.player_id


class _Accumulator:
    def __init__(self, config: TacticalConfig):
        self.config = config
        self.scores: Dict[str, float] = {c: 0.0 for c in CATEGORIES}
        self.insights: List[str] = []

    def add(self, category: str, delta: float, impact_key: str) -> None:
        if delta > 0:
            self.scores[category] += delta * self.config.delta_impact.get(impact_key, 1.0)

    def edge(self, delta: float, threshold_key: str) -> bool:
        return delta > self.config.matchup_thresholds[threshold_key]


def _analyze_pairing(
    acc: _Accumulator,
    family: RoleFamily,
    slot_code: str,
    player: PlayerProfile,
    opponent: OpponentProfile,
    mirrored: bool,
) -> None:
    d = matchup_deltas(player, opponent)
    me = _label(player)
    them = _label(opponent) if mirrored else "the midpoint benchmark"

    # overall quality calls only against a real mirrored opponent
    if mirrored:
        gap = acc.config.matchup_thresholds["gap"]
        if d.quality > gap:
            acc.insights.append(f"{me} has a significant advantage over {them} at position {slot_code}")
        elif d.quality < -gap:
            acc.insights.append(f"{them} poses a threat to {me} at position {slot_code}")

    if family in WIDE:
        acc.add("wings", d.pace, "speed")
        acc.add("aerial", d.aerial, "jumping")
        if acc.edge(d.pace, "fast"):
            acc.insights.append(
                f"Wing advantage at {slot_code}: {me} has a {d.pace * 100:.0f}-point pace edge over {them}"
            )
        if acc.edge(d.aerial, "air"):
            acc.insights.append(f"Aerial edge at {slot_code}: {me} out-jumps {them}")

    elif family in CENTRAL_MIDFIELD:
        acc.add("midfield", d.stamina, "stamina")
        acc.add("creation", d.technical, "quality")
        if acc.edge(d.stamina, "stam"):
            acc.insights.append(f"Midfield engine at {slot_code}: {me} can outlast {them}")
        if acc.edge(d.technical, "qual"):
            acc.insights.append(f"Technical edge at {slot_code}: {me} can play through {them}'s press")
        if family is RoleFamily.DM:
            acc.add("defense", d.strength, "strength")
            if acc.edge(d.strength, "str"):
                acc.insights.append(f"Physical edge at {slot_code}: {me} should win duels against {them}")

    elif family is RoleFamily.ST:
        acc.add("creation", d.pace, "speed")
        acc.add("aerial", d.aerial, "jumping")
        if acc.edge(d.pace, "fast") or acc.edge(d.aerial, "air"):
            acc.insights.append(f"Finishing lane at {slot_code}: {me} can get the better of {them}")

    elif family is RoleFamily.CB:
        acc.add("aerial", d.aerial, "jumping")
        acc.add("defense", d.strength, "strength")
        if acc.edge(d.aerial, "air"):
            acc.insights.append(f"Aerial edge at {slot_code}: {me} dominates {them} in the air")
        if acc.edge(d.strength, "str"):
            acc.insights.append(f"Physical edge at {slot_code}: {me} should win duels against {them}")


def analyze_matchups(
    lineup: "LineupResult",
    opponents: Sequence[OpponentProfile],
    config: TacticalConfig = DEFAULT_CONFIG,
) -> MatchupAnalysis:
    by_slot = index_opponents_by_slot(opponents)

    acc = _Accumulator(config)
    for assignment in lineup.assignments:
        slot = assignment.slot
        opponent: Optional[OpponentProfile] = by_slot.get(slot.code)
        mirrored = opponent is not None
        if opponent is None:
            opponent = neutral_opponent(slot.code)
        _analyze_pairing(acc, slot.family, slot.code, assignment.player, opponent, mirrored)

    weighted = {c: acc.scores[c] * config.suggestion_weights.get(c, 1.0) for c in CATEGORIES}
    # ties keep the fixed category order
    ranked = sorted(CATEGORIES, key=lambda c: -weighted[c])
    suggestions = [SUGGESTION_PHRASES[c] for c in ranked[:2] if weighted[c] > 0]
    if not suggestions:
        suggestions = [FALLBACK_SUGGESTION]

    logger.debug("Matchup category scores: %s", weighted)
    return MatchupAnalysis(
        insights=tuple(acc.insights) or (FALLBACK_INSIGHT,),
        suggestions=tuple(suggestions),
        best_suggestion=suggestions[0],
        category_scores=tuple((c, weighted[c]) for c in ranked),
    )
