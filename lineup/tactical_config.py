"""
Tactical configuration for the lineup core.

Every weight, tier, multiplier and threshold used by the cost model, opponent
analysis and matchup analysis lives on one immutable `TacticalConfig` value
that is passed explicitly into each call. Style presets (counter, high press,
possession) are derived copies of the balanced default.
"""
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Tuple

from lineup.errors import TacticalConfigError
from lineup.players import is_known_attribute
from lineup.roles import RoleFamily

CONFIG_VERSION = "1.0"


def _pair(a: RoleFamily, b: RoleFamily) -> FrozenSet[RoleFamily]:
    return frozenset((a, b))


DEFAULT_ROLE_WEIGHTS: Dict[RoleFamily, Dict[str, float]] = {
    RoleFamily.GK: {"quality": 0.4, "agility": 0.2, "balance": 0.15, "positioning": 0.15, "jumping": 0.1},
    RoleFamily.CB: {"tackling": 0.25, "strength": 0.2, "aerial_power": 0.2, "positioning": 0.2, "speed": 0.15},
    RoleFamily.RB: {"speed": 0.25, "stamina": 0.2, "tackling": 0.2, "passing": 0.15, "agility": 0.1, "quality": 0.1},
    RoleFamily.LB: {"speed": 0.25, "stamina": 0.2, "tackling": 0.2, "passing": 0.15, "agility": 0.1, "quality": 0.1},
    RoleFamily.DM: {
        "tackling": 0.25, "passing": 0.2, "positioning": 0.15,
        "stamina": 0.15, "press_resistance": 0.15, "strength": 0.1,
    },
    RoleFamily.CM: {
        "passing": 0.25, "stamina": 0.2, "vision": 0.15,
        "first_touch": 0.15, "press_resistance": 0.15, "quality": 0.1,
    },
    RoleFamily.AM: {
        "vision": 0.25, "passing": 0.2, "first_touch": 0.2,
        "off_ball": 0.15, "finishing": 0.1, "agility": 0.1,
    },
    RoleFamily.RW: {"speed": 0.3, "agility": 0.2, "first_touch": 0.15, "finishing": 0.15, "off_ball": 0.1, "balance": 0.1},
    RoleFamily.LW: {"speed": 0.3, "agility": 0.2, "first_touch": 0.15, "finishing": 0.15, "off_ball": 0.1, "balance": 0.1},
    RoleFamily.ST: {"finishing": 0.3, "off_ball": 0.2, "speed": 0.2, "aerial_power": 0.15, "first_touch": 0.15},
}

DEFAULT_FRIENDLY_TRANSITIONS: FrozenSet[FrozenSet[RoleFamily]] = frozenset({
    _pair(RoleFamily.LB, RoleFamily.CB),
    _pair(RoleFamily.RB, RoleFamily.CB),
    _pair(RoleFamily.LB, RoleFamily.RB),
    _pair(RoleFamily.CM, RoleFamily.DM),
    _pair(RoleFamily.CM, RoleFamily.AM),
    _pair(RoleFamily.LW, RoleFamily.ST),
    _pair(RoleFamily.RW, RoleFamily.ST),
    _pair(RoleFamily.LW, RoleFamily.RW),
})

DEFAULT_HOSTILE_TRANSITIONS: FrozenSet[FrozenSet[RoleFamily]] = frozenset({
    _pair(RoleFamily.CB, RoleFamily.ST),
    _pair(RoleFamily.CB, RoleFamily.LW),
    _pair(RoleFamily.CB, RoleFamily.RW),
    _pair(RoleFamily.DM, RoleFamily.ST),
})

# (own shape, opponent shape) -> role family -> multiplier on the slot cost.
# Opponent shapes are inferred from slot codes, so wing-backs count as defenders.
DEFAULT_FORMATION_MULTIPLIERS: Dict[Tuple[str, str], Dict[RoleFamily, float]] = {
    ("4-3-3", "4-4-2"): {RoleFamily.CM: 0.95, RoleFamily.DM: 0.95, RoleFamily.RW: 1.05, RoleFamily.LW: 1.05},
    ("4-3-3", "5-3-2"): {RoleFamily.RB: 0.95, RoleFamily.LB: 0.95, RoleFamily.CM: 1.05},
    ("4-4-2", "4-3-3"): {RoleFamily.CM: 1.05, RoleFamily.ST: 0.95},
    ("3-5-2", "4-3-3"): {RoleFamily.CB: 0.95, RoleFamily.RB: 1.05, RoleFamily.LB: 1.05},
    ("3-5-2", "4-4-2"): {RoleFamily.CM: 0.95},
    ("4-2-3-1", "4-4-2"): {RoleFamily.AM: 0.95, RoleFamily.DM: 0.95},
    ("3-4-3", "4-4-2"): {RoleFamily.RW: 0.95, RoleFamily.LW: 0.95, RoleFamily.CB: 1.05},
}

INSIGHT_METRICS: Tuple[str, ...] = (
    "backline_pace",
    "backline_aerial",
    "midfield_stamina",
    "midfield_pressing",
    "attack_speed",
    "attack_finishing",
)

# which opponent insight metrics measure the weakness a role family can exploit
DEFAULT_BIAS_SOURCES: Dict[RoleFamily, Tuple[str, ...]] = {
    RoleFamily.RW: ("backline_pace",),
    RoleFamily.LW: ("backline_pace",),
    RoleFamily.ST: ("backline_pace", "backline_aerial"),
    RoleFamily.AM: ("backline_pace", "midfield_pressing"),
    RoleFamily.CM: ("midfield_stamina", "midfield_pressing"),
    RoleFamily.DM: ("midfield_stamina", "midfield_pressing"),
}

DEFAULT_TEAM_THRESHOLDS: Dict[str, float] = {
    "backline_pace_max": 70.0,
    "backline_aerial_max": 65.0,
    "midfield_stamina_max": 70.0,
    "midfield_press_max": 65.0,
    "attack_speed_min": 85.0,
    "attack_finishing_min": 85.0,
}

# edge thresholds on the 0-1 scale
DEFAULT_MATCHUP_THRESHOLDS: Dict[str, float] = {
    "fast": 0.12,
    "air": 0.10,
    "qual": 0.10,
    "str": 0.10,
    "stam": 0.12,
    "gap": 0.15,      # overall quality gap for advantage / threat calls
}

DEFAULT_DELTA_IMPACT: Dict[str, float] = {
    "speed": 1.2,
    "stamina": 1.0,
    "jumping": 0.9,
    "quality": 1.1,
    "strength": 1.0,
}

DEFAULT_SUGGESTION_WEIGHTS: Dict[str, float] = {
    "wings": 1.2,
    "midfield": 1.0,
    "aerial": 0.9,
    "defense": 1.0,
    "creation": 1.1,
}

DEFAULT_DIFFERENTIAL_WEIGHTS: Dict[str, float] = {
    "quality": 0.4,
    "speed": 0.25,
    "stamina": 0.2,
    "aerial_power": 0.15,
}


@dataclass(frozen=True)
class FootednessAdjustments:
    fullback_match: float = 1.0
    fullback_mismatch: float = 0.9
    winger_inverted: float = 1.0
    winger_natural: float = 0.95
    two_footed: float = 1.0
    unknown_foot: float = 0.95


@dataclass(frozen=True)
class RolePenaltyTiers:
    same: float = 0.0
    friendly: float = 0.15
    hostile: float = 0.45
    default: float = 0.3
    friendly_transitions: FrozenSet[FrozenSet[RoleFamily]] = DEFAULT_FRIENDLY_TRANSITIONS
    hostile_transitions: FrozenSet[FrozenSet[RoleFamily]] = DEFAULT_HOSTILE_TRANSITIONS


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


# flat tables whose overrides are merged key by key over the current values
MERGED_TABLES: Dict[str, Mapping[str, float]] = {
    "differential_weights": DEFAULT_DIFFERENTIAL_WEIGHTS,
    "team_thresholds": DEFAULT_TEAM_THRESHOLDS,
    "matchup_thresholds": DEFAULT_MATCHUP_THRESHOLDS,
    "delta_impact": DEFAULT_DELTA_IMPACT,
    "suggestion_weights": DEFAULT_SUGGESTION_WEIGHTS,
}

# tables read by key at analysis time; every default key must be present
REQUIRED_KEY_TABLES = ("team_thresholds", "matchup_thresholds", "delta_impact", "suggestion_weights")


@dataclass(frozen=True)
class TacticalConfig:
    version: str = CONFIG_VERSION
    role_weights: Mapping[RoleFamily, Mapping[str, float]] = field(default_factory=lambda: DEFAULT_ROLE_WEIGHTS)
    role_penalties: RolePenaltyTiers = field(default_factory=RolePenaltyTiers)
    footedness: FootednessAdjustments = field(default_factory=FootednessAdjustments)
    formation_multipliers: Mapping[Tuple[str, str], Mapping[RoleFamily, float]] = field(
        default_factory=lambda: DEFAULT_FORMATION_MULTIPLIERS
    )
    differential_weights: Mapping[str, float] = field(default_factory=lambda: DEFAULT_DIFFERENTIAL_WEIGHTS)
    bias_sources: Mapping[RoleFamily, Tuple[str, ...]] = field(default_factory=lambda: DEFAULT_BIAS_SOURCES)
    bias_midpoint: float = 50.0
    bias_impact: float = 0.2      # largest favourable shift, reached when the opponent metric is 0
    bias_scale: float = 0.3       # how strongly a weak opponent amplifies the fitness term
    team_thresholds: Mapping[str, float] = field(default_factory=lambda: DEFAULT_TEAM_THRESHOLDS)
    matchup_thresholds: Mapping[str, float] = field(default_factory=lambda: DEFAULT_MATCHUP_THRESHOLDS)
    delta_impact: Mapping[str, float] = field(default_factory=lambda: DEFAULT_DELTA_IMPACT)
    suggestion_weights: Mapping[str, float] = field(default_factory=lambda: DEFAULT_SUGGESTION_WEIGHTS)
    advanced_weight: float = 0.7
    max_cost: float = 2.5
    sentinel_cost: float = 1e6
    empty_group_default: float = 50.0

    def __post_init__(self):
        # keys may arrive as plain strings (e.g. from parsed JSON)
        role_weights = {RoleFamily(k): _freeze(v) for k, v in self.role_weights.items()}
        multipliers = {
            tuple(k): _freeze({RoleFamily(f): float(m) for f, m in v.items()})
            for k, v in self.formation_multipliers.items()
        }
        bias_sources = {RoleFamily(k): tuple(v) for k, v in self.bias_sources.items()}
        object.__setattr__(self, "role_weights", _freeze(role_weights))
        object.__setattr__(self, "formation_multipliers", _freeze(multipliers))
        object.__setattr__(self, "bias_sources", _freeze(bias_sources))
        for name in ("differential_weights", "team_thresholds", "matchup_thresholds",
                     "delta_impact", "suggestion_weights"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        self._validate()

    def _validate(self) -> None:
        missing = [f.value for f in RoleFamily if f not in self.role_weights]
        if missing:
            raise TacticalConfigError(f"Missing role weights for: {', '.join(missing)}")
        for family, weights in self.role_weights.items():
            unknown = [k for k in weights if not is_known_attribute(k)]
            if unknown:
                raise TacticalConfigError(f"Unknown attributes in {family.value} weights: {unknown}")
            if any(w < 0 for w in weights.values()):
                raise TacticalConfigError(f"Negative attribute weight for {family.value}")
            total = sum(weights.values())
            if abs(total - 1.0) > 1e-6:
                raise TacticalConfigError(f"Role weights for {family.value} sum to {total:.4f}, expected 1.0")

        for family, metrics in self.bias_sources.items():
            unknown = [m for m in metrics if m not in INSIGHT_METRICS]
            if unknown:
                raise TacticalConfigError(f"Unknown bias metrics for {family.value}: {unknown}")

        unknown = [k for k in self.differential_weights if not is_known_attribute(k)]
        if unknown:
            raise TacticalConfigError(f"Unknown attributes in differential weights: {unknown}")
        if any(w < 0 for w in self.differential_weights.values()):
            raise TacticalConfigError("Differential weights must be non-negative")

        for name in REQUIRED_KEY_TABLES:
            missing = sorted(set(MERGED_TABLES[name]) - set(getattr(self, name)))
            if missing:
                raise TacticalConfigError(f"{name} is missing keys: {missing}")

        for key, table in self.formation_multipliers.items():
            for family, mult in table.items():
                if not 0.9 <= mult <= 1.1:
                    raise TacticalConfigError(
                        f"Formation multiplier {key}/{family.value}={mult} outside [0.9, 1.1]"
                    )

        for f in fields(self.footedness):
            value = getattr(self.footedness, f.name)
            if not 0.85 <= value <= 1.0:
                raise TacticalConfigError(f"Footedness value {f.name}={value} outside [0.85, 1.0]")

        tiers = self.role_penalties
        if min(tiers.same, tiers.friendly, tiers.hostile, tiers.default) < 0:
            raise TacticalConfigError("Role penalty tiers must be non-negative")

        if not 0.0 <= self.advanced_weight <= 1.0:
            raise TacticalConfigError(f"advanced_weight={self.advanced_weight} outside [0, 1]")
        if self.bias_impact < 0 or not 0.0 <= self.bias_scale < 1.0:
            raise TacticalConfigError("bias_impact must be >= 0 and bias_scale within [0, 1)")
        if self.bias_midpoint <= 0:
            raise TacticalConfigError("bias_midpoint must be positive")
        if self.max_cost * 100 > self.sentinel_cost:
            raise TacticalConfigError(
                f"sentinel_cost={self.sentinel_cost} must dominate max_cost={self.max_cost}"
            )

    def with_overrides(self, **overrides: Any) -> "TacticalConfig":
        """
        Validated copy with the given fields replaced. Flat tables in
        MERGED_TABLES are merged over the current values, so a partial table
        only changes the keys it names.
        """
        for name in MERGED_TABLES:
            if isinstance(overrides.get(name), Mapping):
                merged = dict(getattr(self, name))
                merged.update(overrides[name])
                overrides[name] = merged
        try:
            return replace(self, **overrides)
        except TypeError as exc:
            raise TacticalConfigError(str(exc)) from exc

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TacticalConfig":
        """Build a config from a plain mapping, filling gaps from the defaults."""
        overrides: Dict[str, Any] = dict(data)
        if isinstance(overrides.get("footedness"), Mapping):
            overrides["footedness"] = FootednessAdjustments(**overrides["footedness"])
        if isinstance(overrides.get("role_penalties"), Mapping):
            tiers = dict(overrides["role_penalties"])
            for key in ("friendly_transitions", "hostile_transitions"):
                if key in tiers:
                    tiers[key] = frozenset(
                        frozenset(RoleFamily(r) for r in pair) for pair in tiers[key]
                    )
            overrides["role_penalties"] = RolePenaltyTiers(**tiers)
        if isinstance(overrides.get("formation_multipliers"), Mapping):
            overrides["formation_multipliers"] = {
                (tuple(k.split("|")) if isinstance(k, str) else tuple(k)): v
                for k, v in overrides["formation_multipliers"].items()
            }
        return DEFAULT_CONFIG.with_overrides(**overrides)


DEFAULT_CONFIG = TacticalConfig()


def tactical_preset(style: str) -> TacticalConfig:
    """
    Map a team style keyword to a tuned config.
    Styles: counter, high_press, possession, balanced (default for anything unknown).
    """
    s = (style or "balanced").strip().lower()
    base = DEFAULT_CONFIG
    if s in {"counter", "counter_attack"}:
        return base.with_overrides(
            delta_impact=dict(speed=1.4),
            suggestion_weights=dict(wings=1.4, creation=1.0),
        )
    if s in {"high_press", "press"}:
        return base.with_overrides(
            delta_impact=dict(stamina=1.2),
            suggestion_weights=dict(midfield=1.3, defense=1.1),
        )
    if s in {"possession", "tiki_taka"}:
        return base.with_overrides(
            delta_impact=dict(quality=1.3),
            suggestion_weights=dict(creation=1.3, midfield=1.1, aerial=0.8),
        )
    # balanced default
    return base
