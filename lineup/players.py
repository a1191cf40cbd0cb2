"""
Player and opponent profiles consumed by the lineup core.

Profiles are immutable snapshots with every numeric attribute already clamped
to 0-100 by the ingestion side (see `scouting/roster_prep.py`). The composite
helpers here are shared by the cost model, opponent analysis and matchup
analysis so that "aerial" or "pressing" means the same thing everywhere.
"""
import logging
from dataclasses import dataclass, replace
from typing import Dict, Sequence, Tuple

from lineup.roles import RoleFamily, resolve_role_family

logger = logging.getLogger(__name__)

ATTRIBUTE_NAMES: Tuple[str, ...] = (
    "quality",
    "speed",
    "stamina",
    "strength",
    "balance",
    "agility",
    "jumping",
    "heading",
    "aerial",
    "passing",
    "vision",
    "first_touch",
    "finishing",
    "tackling",
    "positioning",
    "press_resistance",
    "off_ball",
)

FOOT_VALUES = ("Left", "Right", "Both", "Unknown")
NEUTRAL_RATING = 50.0


@dataclass(frozen=True)
class PlayerProfile:
    player_id: str
    name: str
    position: str                # native position, e.g. "GK", "CB", "RW" or a slot code
    preferred_foot: str = "Unknown"
    quality: float = 0.0
    speed: float = 0.0
    stamina: float = 0.0
    strength: float = 0.0
    balance: float = 0.0
    agility: float = 0.0
    jumping: float = 0.0
    heading: float = 0.0
    aerial: float = 0.0
    passing: float = 0.0
    vision: float = 0.0
    first_touch: float = 0.0
    finishing: float = 0.0
    tackling: float = 0.0
    positioning: float = 0.0
    press_resistance: float = 0.0
    off_ball: float = 0.0

    @property
    def native_role(self) -> RoleFamily:
        return resolve_role_family(self.position)

    @property
    def is_goalkeeper(self) -> bool:
        return self.native_role is RoleFamily.GK

    def attribute(self, name: str) -> float:
        """Attribute on the 0-100 scale; unknown names read as 0."""
        return float(getattr(self, name, 0.0) or 0.0)


@dataclass(frozen=True)
class OpponentProfile(PlayerProfile):
    """An opposing player pinned to the formation slot they occupy."""
    slot_code: str = ""

    @property
    def slot_role(self) -> RoleFamily:
        return resolve_role_family(self.slot_code)


def index_opponents_by_slot(opponents: Sequence[OpponentProfile]) -> Dict[str, OpponentProfile]:
    """Slot code -> opponent; the first entry wins when a code repeats."""
    by_slot: Dict[str, OpponentProfile] = {}
    for opp in opponents:
        code = str(opp.slot_code).strip()
        if code in by_slot:
            logger.warning("Duplicate opponent slot code %r (%s); keeping %s", code, opp.name, by_slot[code].name)
            continue
        by_slot[code] = opp
    return by_slot


def neutral_opponent(slot_code: str = "") -> OpponentProfile:
    """Stand-in for an empty mirrored slot: every attribute at the midpoint."""
    base = OpponentProfile(player_id="neutral", name="", position="", slot_code=slot_code)
    return replace(base, **{attr: NEUTRAL_RATING for attr in ATTRIBUTE_NAMES})


def aerial_composite(player: PlayerProfile) -> float:
    return (player.jumping + player.heading + player.aerial) / 3.0


def pressing_composite(player: PlayerProfile) -> float:
    return (player.tackling + player.positioning) / 2.0


def technical_composite(player: PlayerProfile) -> float:
    return (player.quality + player.passing + player.first_touch + player.press_resistance) / 4.0


def defender_pace(player: PlayerProfile) -> float:
    return (player.speed + player.agility) / 2.0


COMPOSITES = {
    "aerial_power": aerial_composite,
    "pressing": pressing_composite,
    "technical": technical_composite,
    "pace": defender_pace,
}


def attribute_value(player: PlayerProfile, key: str) -> float:
    """Raw attribute or named composite, on the 0-100 scale."""
    if key in COMPOSITES:
        return COMPOSITES[key](player)
    return player.attribute(key)


def is_known_attribute(key: str) -> bool:
    return key in ATTRIBUTE_NAMES or key in COMPOSITES


def normalize_foot(value: object) -> str:
    """Map free-form foot labels ("R", "left", "both feet") onto FOOT_VALUES."""
    text = str(value or "").strip().upper()
    if not text or text in {"NAN", "NONE"}:
        return "Unknown"
    if "BOTH" in text or text in {"B", "EITHER", "AMBIDEXTROUS"}:
        return "Both"
    if text.startswith("R"):
        return "Right"
    if text.startswith("L"):
        return "Left"
    return "Unknown"
