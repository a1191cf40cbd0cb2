"""
Roster preparation: tabular records -> immutable player profiles.

Callers load their own CSV/Excel/DB data into a DataFrame; this module only
normalises it. Header variants are coalesced onto canonical column names,
attributes are coerced to numbers, missing values become 0 and everything is
clipped to 0-100 so the lineup core never sees NaN.
"""
import logging
from typing import Dict, List, Optional

import pandas as pd

from lineup.players import ATTRIBUTE_NAMES, OpponentProfile, PlayerProfile, normalize_foot

logger = logging.getLogger(__name__)

# canonical column -> accepted (lower-cased) header variants, in priority order
COLUMN_ALIASES: Dict[str, List[str]] = {
    "player_id": ["id", "player_id", "playerid"],
    "number": ["number", "jersey", "jersey number", "shirt"],
    "name": ["name", "player", "displayname", "display_name"],
    "first_name": ["firstname", "first_name", "first name"],
    "last_name": ["lastname", "last_name", "last name"],
    "position": ["position", "pos", "position_10"],
    "slot_code": ["slot", "slot_code", "slotcode"],
    "preferred_foot": ["preferredfoot", "preferred_foot", "foot", "pref_foot"],
    "quality": ["quality", "qualityscore", "quality_score", "rating", "overall"],
    "first_touch": ["firsttouch", "first_touch", "first touch"],
    "press_resistance": ["pressresistance", "press_resistance", "press resistance"],
    "off_ball": ["offball", "off_ball", "off ball"],
}


def _clamp_series(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").fillna(0.0).clip(lower=0.0, upper=100.0)


def _integral_text(value) -> str:
    if pd.isna(value):
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def _text(series: pd.Series) -> pd.Series:
    # a numeric slot/shirt column with gaps is read as float: 11.0 -> "11"
    if pd.api.types.is_float_dtype(series):
        return series.map(_integral_text)
    return series.fillna("").astype(str).str.strip()


def _pick(df: pd.DataFrame, canonical: str) -> Optional[pd.Series]:
    for alias in COLUMN_ALIASES.get(canonical, [canonical]):
        if alias in df.columns:
            return df[alias]
    return None


def _pick_text(df: pd.DataFrame, canonical: str) -> pd.Series:
    col = _pick(df, canonical)
    if col is None:
        return pd.Series([""] * len(df), index=df.index)
    return _text(col)


def normalize_roster_frame(df: pd.DataFrame, require_slot: bool = False) -> pd.DataFrame:
    """
    Return a new frame with canonical columns: player_id, name, position,
    preferred_foot, slot_code and every attribute in ATTRIBUTE_NAMES.
    """
    raw = df.copy()
    raw.columns = [str(c).strip().lower() for c in raw.columns]
    before = len(raw)
    raw = raw.dropna(how="all").reset_index(drop=True)
    if len(raw) < before:
        logger.warning("Dropped %d empty roster rows", before - len(raw))

    out = pd.DataFrame(index=raw.index)
    empty = pd.Series([""] * len(raw), index=raw.index)

    for attr in ATTRIBUTE_NAMES:
        col = _pick(raw, attr)
        out[attr] = _clamp_series(col) if col is not None else 0.0

    joined = (_pick_text(raw, "first_name") + " " + _pick_text(raw, "last_name")).str.strip()
    display = _pick_text(raw, "name")
    out["name"] = display.where(display != "", joined)

    number = _pick_text(raw, "number")
    ids = _pick_text(raw, "player_id")
    fallback_ids = pd.Series([f"player_{i + 1}" for i in range(len(raw))], index=raw.index)
    ids = ids.where(ids != "", number)
    out["player_id"] = ids.where(ids != "", fallback_ids)
    out["name"] = out["name"].where(out["name"] != "", out["player_id"])

    pos_col = _pick(raw, "position")
    out["position"] = _text(pos_col).str.upper() if pos_col is not None else empty

    foot_col = _pick(raw, "preferred_foot")
    out["preferred_foot"] = foot_col.map(normalize_foot) if foot_col is not None else "Unknown"

    slot_col = _pick(raw, "slot_code")
    if require_slot:
        if slot_col is None and pos_col is None and _pick(raw, "number") is None:
            raise ValueError("Opponent roster needs a 'slot' column (e.g. 11L, 3R, RB)")
        slots = _text(slot_col).str.upper() if slot_col is not None else empty
        # slot falls back to position, then shirt number
        slots = slots.where(slots != "", out["position"])
        out["slot_code"] = slots.where(slots != "", number)
    else:
        out["slot_code"] = _text(slot_col).str.upper() if slot_col is not None else empty

    return out


def _profile_kwargs(row: pd.Series) -> Dict:
    kwargs = {
        "player_id": str(row["player_id"]),
        "name": str(row["name"]),
        "position": str(row["position"]),
        "preferred_foot": str(row["preferred_foot"]),
    }
    kwargs.update({attr: float(row[attr]) for attr in ATTRIBUTE_NAMES})
    return kwargs


def profiles_from_frame(df: pd.DataFrame) -> List[PlayerProfile]:
    """Own-roster profiles, in frame order."""
    norm = normalize_roster_frame(df)
    return [PlayerProfile(**_profile_kwargs(row)) for _, row in norm.iterrows()]


def opponents_from_frame(df: pd.DataFrame) -> List[OpponentProfile]:
    """Opponent profiles; every row must resolve to a slot code."""
    norm = normalize_roster_frame(df, require_slot=True)
    missing = norm["slot_code"] == ""
    if missing.any():
        logger.warning("Dropped %d opponent rows without a slot code", int(missing.sum()))
        norm = norm[~missing]
    return [
        OpponentProfile(slot_code=str(row["slot_code"]), **_profile_kwargs(row))
        for _, row in norm.iterrows()
    ]
