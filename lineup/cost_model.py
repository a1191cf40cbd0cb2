"""
Cost of placing one player in one formation slot.

Lower is better and negative means a favourable pairing. The score blends:
- role fitness (weighted role-specific attributes) scaled by footedness,
- a differential against the opponent in the mirrored slot,
- a favourable shift when the opponent's matching unit is weak,
- a penalty for playing out of the player's native role,
- a tactical multiplier for the (own shape, opponent shape, role) combination.

Goalkeeper exclusivity is a hard rule: a keeper outfield or an outfielder in
goal costs the sentinel. Everything is a pure function of its inputs.
"""
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from lineup.formations import RoleSlot
from lineup.players import PlayerProfile, attribute_value, neutral_opponent, normalize_foot
from lineup.roles import FULLBACKS, WINGERS, RoleFamily, slot_side
from lineup.tactical_config import DEFAULT_CONFIG, TacticalConfig

# the fitness term is centred here: a 0.5-fit player is cost-neutral
FITNESS_PIVOT = 0.5


@dataclass(frozen=True)
class CostBreakdown:
    family: RoleFamily
    fitness: float = 0.0
    footedness: float = 1.0
    differential: float = 0.0
    weakness: float = 0.0
    bias_shift: float = 0.0
    role_penalty: float = 0.0
    formation_multiplier: float = 1.0
    total: float = 0.0
    forbidden: bool = False


def role_fitness(player: PlayerProfile, family: RoleFamily, config: TacticalConfig = DEFAULT_CONFIG) -> float:
    """Weighted role attributes on a 0-1 scale."""
    weights = config.role_weights[family]
    score = sum(w * attribute_value(player, attr) / 100.0 for attr, w in weights.items())
    return float(np.clip(score, 0.0, 1.0))


def footedness_factor(player: PlayerProfile, family: RoleFamily, config: TacticalConfig = DEFAULT_CONFIG) -> float:
    """
    Fullbacks prefer their own side's foot; wingers slightly prefer the
    inverted foot so they can cut inside. Central roles are unaffected.
    """
    side = slot_side(family)
    if side is None:
        return 1.0
    adj = config.footedness
    foot = normalize_foot(player.preferred_foot)
    if foot == "Both":
        return adj.two_footed
    if foot == "Unknown":
        return adj.unknown_foot

    natural = foot[0] == side
    if family in FULLBACKS:
        return adj.fullback_match if natural else adj.fullback_mismatch
    if family in WINGERS:
        return adj.winger_natural if natural else adj.winger_inverted
    return 1.0


def opponent_differential(
    player: PlayerProfile,
    opponent: Optional[PlayerProfile],
    config: TacticalConfig = DEFAULT_CONFIG,
) -> float:
    """Signed edge over the mirrored opponent in [-1, 1]; positive when we are better."""
    if opponent is None:
        opponent = neutral_opponent()
    weights = config.differential_weights
    total_weight = sum(weights.values())
    if total_weight <= 0:
        return 0.0
    edge = sum(
        w * (attribute_value(player, attr) - attribute_value(opponent, attr)) / 100.0
        for attr, w in weights.items()
    )
    return edge / total_weight


def opponent_weakness(family: RoleFamily, insights, config: TacticalConfig = DEFAULT_CONFIG) -> float:
    """
    How far the opponent unit this role attacks sits below the neutral
    midpoint, on 0-1. Roles with no configured source, or no insights, read 0.
    """
    sources = config.bias_sources.get(family, ())
    if insights is None or not sources:
        return 0.0
    gaps = []
    for metric in sources:
        value = float(getattr(insights, metric, config.bias_midpoint))
        gaps.append(max(0.0, (config.bias_midpoint - value) / config.bias_midpoint))
    return min(1.0, sum(gaps) / len(gaps))


def role_change_penalty(native: RoleFamily, target: RoleFamily, config: TacticalConfig = DEFAULT_CONFIG) -> float:
    tiers = config.role_penalties
    if native == target:
        return tiers.same
    pair = frozenset((native, target))
    if pair in tiers.friendly_transitions:
        return tiers.friendly
    if pair in tiers.hostile_transitions:
        return tiers.hostile
    return tiers.default


def formation_multiplier(
    own_shape: Optional[str],
    opponent_shape: Optional[str],
    family: RoleFamily,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> float:
    table = config.formation_multipliers.get((own_shape, opponent_shape))
    if not table:
        return 1.0
    return table.get(family, 1.0)


def _bias_scaled(term: float, weakness: float, config: TacticalConfig) -> float:
    # a weak opponent shrinks a bad fit and stretches a good one
    if term > 0:
        return term * (1.0 - config.bias_scale * weakness)
    return term * (1.0 + config.bias_scale * weakness)


def cost_breakdown(
    player: PlayerProfile,
    slot: Union[RoleSlot, str],
    opponent: Optional[PlayerProfile] = None,
    own_shape: Optional[str] = None,
    opponent_shape: Optional[str] = None,
    insights=None,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> CostBreakdown:
    if isinstance(slot, str):
        slot = RoleSlot.from_code(slot)
    family = slot.family

    if (family is RoleFamily.GK) != player.is_goalkeeper:
        return CostBreakdown(family=family, total=config.sentinel_cost, forbidden=True)

    fitness = role_fitness(player, family, config)
    foot = footedness_factor(player, family, config)
    differential = opponent_differential(player, opponent, config)
    weakness = opponent_weakness(family, insights, config)
    shift = -config.bias_impact * weakness
    penalty = role_change_penalty(player.native_role, family, config)
    multiplier = formation_multiplier(own_shape, opponent_shape, family, config)

    advanced = _bias_scaled(FITNESS_PIVOT - fitness * foot, weakness, config)
    raw = (
        (1.0 - config.advanced_weight) * -differential
        + config.advanced_weight * advanced
        + shift
        + penalty
    ) * multiplier
    # favourable pairings stay unbounded below
    total = min(raw, config.max_cost)

    return CostBreakdown(
        family=family,
        fitness=fitness,
        footedness=foot,
        differential=differential,
        weakness=weakness,
        bias_shift=shift,
        role_penalty=penalty,
        formation_multiplier=multiplier,
        total=total,
    )


def slot_cost(
    player: PlayerProfile,
    slot: Union[RoleSlot, str],
    opponent: Optional[PlayerProfile] = None,
    own_shape: Optional[str] = None,
    opponent_shape: Optional[str] = None,
    insights=None,
    config: TacticalConfig = DEFAULT_CONFIG,
) -> float:
    """Scalar cost of `player` at `slot`; see `cost_breakdown` for the parts."""
    return cost_breakdown(
        player, slot, opponent, own_shape, opponent_shape, insights, config
    ).total
