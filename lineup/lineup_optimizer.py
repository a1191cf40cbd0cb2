"""
Lineup optimizer: formation search and the end-to-end recommendation.

For every formation in the catalog we score each (player, slot) pair with the
cost model, solve the roster x slots matrix optimally with the Hungarian
algorithm, and keep the formation only if all 11 slots are filled without
touching a sentinel cell. Accepted lineups are ranked by total cost; catalog
order breaks ties so identical inputs always rank identically.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from lineup.cost_model import slot_cost
from lineup.errors import (
    InsufficientRosterError,
    MissingGoalkeeperError,
    NoFeasibleLineupError,
    SearchCancelledError,
)
from lineup.formations import SLOTS_PER_FORMATION, Formation, RoleSlot, list_formations
from lineup.hungarian import solve_assignment
from lineup.matchup import MatchupAnalysis, analyze_matchups
from lineup.opponent_analysis import OpponentAnalysis, analyze_opponent
from lineup.players import OpponentProfile, PlayerProfile, index_opponents_by_slot
from lineup.tactical_config import DEFAULT_CONFIG, TacticalConfig

logger = logging.getLogger(__name__)

MIN_ROSTER_SIZE = SLOTS_PER_FORMATION
DEFAULT_TOP_K = 3


@dataclass(frozen=True)
class SlotAssignment:
    player: PlayerProfile
    slot: RoleSlot
    cost: float


@dataclass(frozen=True)
class LineupResult:
    formation_code: str
    formation_name: str
    shape: str
    assignments: Tuple[SlotAssignment, ...]  # in formation slot order
    total_cost: float

    def player_for(self, slot_code: str) -> Optional[PlayerProfile]:
        for a in self.assignments:
            if a.slot.code == slot_code:
                return a.player
        return None


@dataclass(frozen=True)
class LineupRecommendation:
    lineups: Tuple[LineupResult, ...]
    opponent: OpponentAnalysis
    matchup: MatchupAnalysis

    @property
    def best(self) -> LineupResult:
        return self.lineups[0]

    @property
    def opponent_shape(self) -> str:
        return self.opponent.shape


def validate_rosters(own: Sequence[PlayerProfile], opponents: Sequence[OpponentProfile]) -> None:
    """Abort before any computation if either roster cannot field a side."""
    if len(own) < MIN_ROSTER_SIZE:
        raise InsufficientRosterError("own", len(own), MIN_ROSTER_SIZE)
    if len(opponents) < MIN_ROSTER_SIZE:
        raise InsufficientRosterError("opponent", len(opponents), MIN_ROSTER_SIZE)
    if not any(p.is_goalkeeper for p in own):
        raise MissingGoalkeeperError(len(own))


def build_cost_matrix(
    own: Sequence[PlayerProfile],
    formation: Formation,
    opponents_by_slot: Dict[str, OpponentProfile],
    analysis: Optional[OpponentAnalysis] = None,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """Rows follow `own`, columns follow `formation.slots`."""
    insights = analysis.insights if analysis else None
    opponent_shape = analysis.shape if analysis else None
    matrix = np.empty((len(own), len(formation.slots)), dtype=float)
    for j, slot in enumerate(formation.slots):
        opponent = opponents_by_slot.get(slot.code)
        for i, player in enumerate(own):
            matrix[i, j] = slot_cost(
                player,
                slot,
                opponent=opponent,
                own_shape=formation.shape,
                opponent_shape=opponent_shape,
                insights=insights,
                config=config,
            )
    return matrix


def _evaluate(
    own: Sequence[PlayerProfile],
    formation: Formation,
    opponents_by_slot: Dict[str, OpponentProfile],
    analysis: Optional[OpponentAnalysis],
    config: TacticalConfig,
) -> Optional[LineupResult]:
    matrix = build_cost_matrix(own, formation, opponents_by_slot, analysis, config)
    pairs = solve_assignment(matrix, config.sentinel_cost, formation_code=formation.code)
    if len(pairs) != len(formation.slots):
        logger.debug("Formation %s dropped: filled %d/%d slots", formation.code, len(pairs), len(formation.slots))
        return None

    assignments = tuple(
        SlotAssignment(player=own[r], slot=formation.slots[c], cost=float(matrix[r, c]))
        for r, c in pairs
    )
    total = float(sum(a.cost for a in assignments))
    logger.debug("Formation %s total cost %.4f", formation.code, total)
    return LineupResult(
        formation_code=formation.code,
        formation_name=formation.name,
        shape=formation.shape,
        assignments=assignments,
        total_cost=total,
    )


def evaluate_formation(
    own: Sequence[PlayerProfile],
    formation: Formation,
    opponents: Sequence[OpponentProfile],
    analysis: Optional[OpponentAnalysis] = None,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> Optional[LineupResult]:
    """
    Best lineup for a single formation, or None when the formation cannot be
    filled with 11 non-sentinel pairings.
    """
    if analysis is None:
        analysis = analyze_opponent(opponents, config)
    return _evaluate(own, formation, index_opponents_by_slot(opponents), analysis, config)


def _evaluate_all(
    own: Sequence[PlayerProfile],
    catalog: List[Formation],
    opponents_by_slot: Dict[str, OpponentProfile],
    analysis: OpponentAnalysis,
    config: TacticalConfig,
    cancel_check: Optional[Callable[[], bool]],
    max_workers: Optional[int],
) -> List[Optional[LineupResult]]:
    results: List[Optional[LineupResult]] = [None] * len(catalog)

    if not max_workers or max_workers <= 1:
        for idx, formation in enumerate(catalog):
            if cancel_check is not None and cancel_check():
                raise SearchCancelledError(idx, len(catalog))
            results[idx] = _evaluate(own, formation, opponents_by_slot, analysis, config)
        return results

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(_evaluate, own, formation, opponents_by_slot, analysis, config): idx
            for idx, formation in enumerate(catalog)
        }
        completed = 0
        for future in as_completed(future_to_index):
            if cancel_check is not None and cancel_check():
                for pending in future_to_index:
                    pending.cancel()
                raise SearchCancelledError(completed, len(catalog))
            results[future_to_index[future]] = future.result()
            completed += 1
    return results


def _ranked_lineups(
    own: Sequence[PlayerProfile],
    opponents: Sequence[OpponentProfile],
    config: TacticalConfig,
    catalog: Optional[Sequence[Formation]],
    top_k: int,
    analysis: OpponentAnalysis,
    cancel_check: Optional[Callable[[], bool]],
    max_workers: Optional[int],
) -> List[LineupResult]:
    # rosters are validated by the public callers
    formations = list(catalog) if catalog is not None else list_formations()
    opponents_by_slot = index_opponents_by_slot(opponents)

    results = _evaluate_all(
        own, formations, opponents_by_slot, analysis, config, cancel_check, max_workers
    )
    accepted = [r for r in results if r is not None]
    if not accepted:
        raise NoFeasibleLineupError(tuple(f.code for f in formations))

    # stable sort: equal totals keep catalog order
    ranked = sorted(accepted, key=lambda r: r.total_cost)
    return ranked[:max(1, top_k)]


def search_formations(
    own: Sequence[PlayerProfile],
    opponents: Sequence[OpponentProfile],
    config: TacticalConfig = DEFAULT_CONFIG,
    catalog: Optional[Sequence[Formation]] = None,
    top_k: int = DEFAULT_TOP_K,
    analysis: Optional[OpponentAnalysis] = None,
    cancel_check: Optional[Callable[[], bool]] = None,
    max_workers: Optional[int] = None,
) -> List[LineupResult]:
    """
    Ranked feasible lineups (lowest total cost first), at most `top_k`.
    Raises NoFeasibleLineupError when no formation in the catalog fits.
    """
    validate_rosters(own, opponents)
    if analysis is None:
        analysis = analyze_opponent(opponents, config)
    return _ranked_lineups(own, opponents, config, catalog, top_k, analysis, cancel_check, max_workers)


def recommend_lineup(
    own: Sequence[PlayerProfile],
    opponents: Sequence[OpponentProfile],
    config: Optional[TacticalConfig] = None,
    catalog: Optional[Sequence[Formation]] = None,
    top_k: int = DEFAULT_TOP_K,
    cancel_check: Optional[Callable[[], bool]] = None,
    max_workers: Optional[int] = None,
) -> LineupRecommendation:
    """
    Full pipeline: opponent analysis -> formation search -> matchup analysis
    of the winning lineup.
    """
    config = config or DEFAULT_CONFIG
    validate_rosters(own, opponents)
    analysis = analyze_opponent(opponents, config)
    lineups = _ranked_lineups(own, opponents, config, catalog, top_k, analysis, cancel_check, max_workers)
    best = lineups[0]
    matchup = analyze_matchups(best, opponents, config)
    logger.info(
        "Recommended %s (total cost %.3f) against %s; %s",
        best.formation_name, best.total_cost, analysis.shape, matchup.best_suggestion,
    )
    return LineupRecommendation(lineups=tuple(lineups), opponent=analysis, matchup=matchup)
