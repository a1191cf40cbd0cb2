"""
Formation templates for lineup optimisation.

Each template is an ordered list of 11 slot codes. Role families are resolved
once when the template is built, so the cost model never re-parses a code.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from lineup.roles import RoleFamily, resolve_role_family

SLOTS_PER_FORMATION = 11


@dataclass(frozen=True)
class RoleSlot:
    """A single on-field slot: its code and the role family it requires."""
    code: str             # unique within a formation (e.g. "1", "2R", "11L")
    family: RoleFamily

    @classmethod
    def from_code(cls, code: str) -> "RoleSlot":
        return cls(code=code, family=resolve_role_family(code))


@dataclass(frozen=True)
class Formation:
    name: str                    # human-readable name
    code: str                    # stable identifier
    shape: str                   # defender-midfielder-attacker label used for tactical multipliers
    slots: Tuple[RoleSlot, ...]  # ordered XI

    def __post_init__(self):
        if len(self.slots) != SLOTS_PER_FORMATION:
            raise ValueError(
                f"Formation {self.code} has {len(self.slots)} slots, expected {SLOTS_PER_FORMATION}"
            )
        codes = [s.code for s in self.slots]
        if len(set(codes)) != len(codes):
            raise ValueError(f"Formation {self.code} repeats a slot code: {codes}")

    @property
    def slot_codes(self) -> List[str]:
        return [s.code for s in self.slots]


def build_formation(name: str, code: str, shape: str, slot_codes: List[str]) -> Formation:
    return Formation(
        name=name,
        code=code,
        shape=shape,
        slots=tuple(RoleSlot.from_code(c) for c in slot_codes),
    )


# 4-3-3 with a single holding midfielder
FORMATION_433_DM = build_formation(
    "4-3-3 (DM)", "433_dm", "4-3-3",
    ["1", "2R", "3R", "3L", "2L", "6", "8R", "8L", "11R", "9", "11L"],
)

# 4-3-3 with an attacking midfielder at the tip
FORMATION_433_AM = build_formation(
    "4-3-3 (AM)", "433_am", "4-3-3",
    ["1", "2R", "3R", "3L", "2L", "8R", "8L", "10", "11R", "9", "11L"],
)

FORMATION_442 = build_formation(
    "4-4-2", "442", "4-4-2",
    ["1", "2R", "3R", "3L", "2L", "11R", "8R", "8L", "11L", "9R", "9L"],
)

FORMATION_4231 = build_formation(
    "4-2-3-1", "4231", "4-2-3-1",
    ["1", "2R", "3R", "3L", "2L", "6R", "6L", "11R", "10", "11L", "9"],
)

# back three with wing-backs on the fullback tokens
FORMATION_352 = build_formation(
    "3-5-2", "352", "3-5-2",
    ["1", "3R", "4", "3L", "2R", "6", "8R", "8L", "2L", "9R", "9L"],
)

FORMATION_343 = build_formation(
    "3-4-3", "343", "3-4-3",
    ["1", "3R", "4", "3L", "2R", "8R", "8L", "2L", "11R", "9", "11L"],
)


FORMATIONS: Dict[str, Formation] = {
    f.code: f
    for f in (
        FORMATION_433_DM,
        FORMATION_433_AM,
        FORMATION_442,
        FORMATION_4231,
        FORMATION_352,
        FORMATION_343,
    )
}


def get_formation(code: str) -> Formation:
    if code not in FORMATIONS:
        raise ValueError(f"Unknown formation code: {code}")
    return FORMATIONS[code]


def list_formations() -> List[Formation]:
    return list(FORMATIONS.values())
