"""
Slot code -> role family mapping.

A slot code is either a shirt-number token ("1", "3R", "11L") or an
alphabetic position ("RB", "CDM", "LCB", "STR"). Everything resolves through
explicit lookup tables; codes that match nothing default to a central
midfielder.
"""
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple


class RoleFamily(str, Enum):
    GK = "GK"
    CB = "CB"
    LB = "LB"
    RB = "RB"
    DM = "DM"
    CM = "CM"
    AM = "AM"
    LW = "LW"
    RW = "RW"
    ST = "ST"


class RoleBucket(str, Enum):
    GOALKEEPER = "goalkeeper"
    DEFENDER = "defender"
    MIDFIELDER = "midfielder"
    ATTACKER = "attacker"


DEFAULT_FAMILY = RoleFamily.CM

# numeric token -> (family with no side / R suffix, family with L suffix)
NUMERIC_TOKENS: Dict[str, Tuple[RoleFamily, RoleFamily]] = {
    "1": (RoleFamily.GK, RoleFamily.GK),
    "2": (RoleFamily.RB, RoleFamily.LB),
    "3": (RoleFamily.CB, RoleFamily.CB),
    "4": (RoleFamily.CB, RoleFamily.CB),
    "5": (RoleFamily.LB, RoleFamily.LB),
    "6": (RoleFamily.DM, RoleFamily.DM),
    "7": (RoleFamily.CM, RoleFamily.CM),
    "8": (RoleFamily.CM, RoleFamily.CM),
    "9": (RoleFamily.ST, RoleFamily.ST),
    "10": (RoleFamily.AM, RoleFamily.AM),
    "11": (RoleFamily.RW, RoleFamily.LW),
}

ALPHA_TOKENS: Dict[str, RoleFamily] = {
    "GK": RoleFamily.GK,
    "CB": RoleFamily.CB,
    "RB": RoleFamily.RB,
    "LB": RoleFamily.LB,
    "DM": RoleFamily.DM,
    "CDM": RoleFamily.DM,
    "CM": RoleFamily.CM,
    "AM": RoleFamily.AM,
    "CAM": RoleFamily.AM,
    "RW": RoleFamily.RW,
    "LW": RoleFamily.LW,
    "ST": RoleFamily.ST,
    "CF": RoleFamily.ST,
}

# central families that may carry a side prefix/suffix without changing role
SIDED_CENTRAL = {"CB", "DM", "CDM", "CM", "AM", "CAM", "ST", "CF"}

BUCKETS: Dict[RoleFamily, RoleBucket] = {
    RoleFamily.GK: RoleBucket.GOALKEEPER,
    RoleFamily.CB: RoleBucket.DEFENDER,
    RoleFamily.LB: RoleBucket.DEFENDER,
    RoleFamily.RB: RoleBucket.DEFENDER,
    RoleFamily.DM: RoleBucket.MIDFIELDER,
    RoleFamily.CM: RoleBucket.MIDFIELDER,
    RoleFamily.AM: RoleBucket.MIDFIELDER,
    RoleFamily.LW: RoleBucket.ATTACKER,
    RoleFamily.RW: RoleBucket.ATTACKER,
    RoleFamily.ST: RoleBucket.ATTACKER,
}

FULLBACKS = {RoleFamily.LB, RoleFamily.RB}
WINGERS = {RoleFamily.LW, RoleFamily.RW}
LEFT_SIDED = {RoleFamily.LB, RoleFamily.LW}


def _split_side(code: str) -> Tuple[str, Optional[str]]:
    if len(code) > 1 and code[-1] in ("L", "R"):
        return code[:-1], code[-1]
    return code, None


def _lookup(code: str) -> Optional[RoleFamily]:
    if not code:
        return None
    if code in ALPHA_TOKENS:
        return ALPHA_TOKENS[code]

    token, side = _split_side(code)
    if token in NUMERIC_TOKENS:
        right, left = NUMERIC_TOKENS[token]
        if token == "5" and side == "R":
            return RoleFamily.RB
        return left if side == "L" else right
    if side and token in SIDED_CENTRAL:
        return ALPHA_TOKENS[token]

    # side prefix on a central code: LCB, RCM, LST ...
    if code[0] in ("L", "R") and code[1:] in SIDED_CENTRAL:
        return ALPHA_TOKENS[code[1:]]
    return None


def resolve_role_family(code: Optional[str]) -> RoleFamily:
    """Resolve a slot code or native position label to its role family."""
    normalized = str(code or "").strip().upper().replace(" ", "")
    return _lookup(normalized) or DEFAULT_FAMILY


def is_recognized(code: Optional[str]) -> bool:
    normalized = str(code or "").strip().upper().replace(" ", "")
    return _lookup(normalized) is not None


def role_bucket(family: RoleFamily) -> RoleBucket:
    return BUCKETS[family]


def slot_side(family: RoleFamily) -> Optional[str]:
    """Flank a wide family plays on ("L"/"R"), or None for central families."""
    if family in FULLBACKS or family in WINGERS:
        return "L" if family in LEFT_SIDED else "R"
    return None


def formation_shape(families: Iterable[RoleFamily]) -> str:
    """
    Defender-midfielder-attacker label (e.g. "4-3-3") for a set of roles.
    Goalkeepers are ignored; a side with no attackers still reads as one up top.
    """
    counts = {RoleBucket.DEFENDER: 0, RoleBucket.MIDFIELDER: 0, RoleBucket.ATTACKER: 0}
    for family in families:
        bucket = BUCKETS[family]
        if bucket in counts:
            counts[bucket] += 1
    attackers = max(1, counts[RoleBucket.ATTACKER])
    return f"{counts[RoleBucket.DEFENDER]}-{counts[RoleBucket.MIDFIELDER]}-{attackers}"
