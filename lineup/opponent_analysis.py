"""
Opponent analysis: unit-level composites and the weaknesses they expose.

The opponent roster is laid out as a DataFrame (one row per player, with the
role bucket derived from the slot code), composite columns are added, and a
groupby gives the per-unit means that bias the cost model. Threshold rules
over those means produce the textual suggestions, mirroring how playstyle
tags are derived from attributes: deterministic and easy to retune.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from lineup.players import ATTRIBUTE_NAMES, OpponentProfile
from lineup.roles import RoleBucket, formation_shape, role_bucket
from lineup.tactical_config import DEFAULT_CONFIG, TacticalConfig

logger = logging.getLogger(__name__)

FALLBACK_SUGGESTION = "Balanced approach against well-rounded opponent"

COMPOSITE_COLUMNS = ["pace", "aerial_power", "stamina", "pressing", "speed", "finishing"]


@dataclass(frozen=True)
class OpponentInsights:
    """Per-unit composite averages on the 0-100 scale."""
    backline_pace: float
    backline_aerial: float
    midfield_stamina: float
    midfield_pressing: float
    attack_speed: float
    attack_finishing: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "backline_pace": self.backline_pace,
            "backline_aerial": self.backline_aerial,
            "midfield_stamina": self.midfield_stamina,
            "midfield_pressing": self.midfield_pressing,
            "attack_speed": self.attack_speed,
            "attack_finishing": self.attack_finishing,
        }


@dataclass(frozen=True)
class OpponentAnalysis:
    insights: OpponentInsights
    suggestions: Tuple[str, ...]
    final_suggestion: str
    shape: str
    group_counts: Mapping[str, int] = field(default_factory=dict)


def opponent_frame(opponents: Sequence[OpponentProfile]) -> pd.DataFrame:
    """
    One row per opponent with slot, role family, bucket, raw attributes and
    the composite columns used by the analysis.
    """
    records = []
    for opp in opponents:
        family = opp.slot_role
        row = {
            "player_id": opp.player_id,
            "name": opp.name,
            "slot_code": opp.slot_code,
            "family": family.value,
            "bucket": role_bucket(family).value,
        }
        row.update({attr: float(opp.attribute(attr)) for attr in ATTRIBUTE_NAMES})
        records.append(row)

    columns = ["player_id", "name", "slot_code", "family", "bucket", *ATTRIBUTE_NAMES]
    df = pd.DataFrame.from_records(records, columns=columns)
    for attr in ATTRIBUTE_NAMES:
        df[attr] = pd.to_numeric(df[attr], errors="coerce").fillna(0.0).astype(float)

    is_defender = df["bucket"] == RoleBucket.DEFENDER.value
    # defenders are judged on recovery pace, everyone else on straight-line speed
    df["pace"] = np.where(is_defender, (df["speed"] + df["agility"]) / 2.0, df["speed"])
    df["aerial_power"] = df[["jumping", "heading", "aerial"]].mean(axis=1)
    df["pressing"] = df[["tackling", "positioning"]].mean(axis=1)
    return df


def _unit_means(df: pd.DataFrame) -> pd.DataFrame:
    outfield = df[df["bucket"] != RoleBucket.GOALKEEPER.value]
    if outfield.empty:
        return pd.DataFrame(columns=COMPOSITE_COLUMNS)
    return outfield.groupby("bucket")[COMPOSITE_COLUMNS].mean()


def _mean_or_default(means: pd.DataFrame, bucket: RoleBucket, column: str, default: float) -> float:
    if bucket.value not in means.index:
        return float(default)
    return float(means.loc[bucket.value, column])


def compute_insights(df: pd.DataFrame, config: TacticalConfig = DEFAULT_CONFIG) -> OpponentInsights:
    means = _unit_means(df)
    neutral = config.empty_group_default
    return OpponentInsights(
        backline_pace=_mean_or_default(means, RoleBucket.DEFENDER, "pace", neutral),
        backline_aerial=_mean_or_default(means, RoleBucket.DEFENDER, "aerial_power", neutral),
        midfield_stamina=_mean_or_default(means, RoleBucket.MIDFIELDER, "stamina", neutral),
        midfield_pressing=_mean_or_default(means, RoleBucket.MIDFIELDER, "pressing", neutral),
        attack_speed=_mean_or_default(means, RoleBucket.ATTACKER, "speed", neutral),
        attack_finishing=_mean_or_default(means, RoleBucket.ATTACKER, "finishing", neutral),
    )


def derive_suggestions(insights: OpponentInsights, config: TacticalConfig = DEFAULT_CONFIG) -> List[str]:
    t = config.team_thresholds
    suggestions: List[str] = []
    if insights.backline_pace < t["backline_pace_max"]:
        suggestions.append("Exploit flank pace against a slow back line")
    if insights.backline_aerial < t["backline_aerial_max"]:
        suggestions.append("Target aerial duels and set pieces")
    if insights.midfield_stamina < t["midfield_stamina_max"]:
        suggestions.append("Press high to exploit low midfield stamina")
    if insights.midfield_pressing < t["midfield_press_max"]:
        suggestions.append("Play through a loose midfield press")
    if insights.attack_speed > t["attack_speed_min"]:
        suggestions.append("Hold a deeper line against their pace up front")
    if insights.attack_finishing > t["attack_finishing_min"]:
        suggestions.append("Deny central chances to clinical finishers")
    return suggestions


def _final_suggestion(suggestions: List[str]) -> str:
    if not suggestions:
        return FALLBACK_SUGGESTION
    head = " and ".join(s[0].lower() + s[1:] for s in suggestions[:2])
    return f"Focus on {head}"


def infer_formation(opponents: Sequence[OpponentProfile]) -> str:
    """Defender-midfielder-attacker label inferred from the opponents' slot codes."""
    return formation_shape(opp.slot_role for opp in opponents)


def analyze_opponent(
    opponents: Sequence[OpponentProfile],
    config: TacticalConfig = DEFAULT_CONFIG,
) -> OpponentAnalysis:
    df = opponent_frame(opponents)
    insights = compute_insights(df, config)
    suggestions = derive_suggestions(insights, config)
    counts = {b.value: int((df["bucket"] == b.value).sum()) for b in RoleBucket}
    shape = infer_formation(opponents)
    logger.debug("Opponent shape %s, unit sizes %s, insights %s", shape, counts, insights.as_dict())

    return OpponentAnalysis(
        insights=insights,
        suggestions=tuple(suggestions) or (FALLBACK_SUGGESTION,),
        final_suggestion=_final_suggestion(suggestions),
        shape=shape,
        group_counts=counts,
    )
