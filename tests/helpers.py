from typing import Dict, List

from lineup.players import ATTRIBUTE_NAMES, OpponentProfile, PlayerProfile

BASE_RATING = 45.0

# id, name, native position, preferred foot, attribute overrides
OWN_ROSTER_TABLE = [
    ("gk", "Keeper", "GK", "Right",
     {"quality": 86, "agility": 72, "balance": 68, "positioning": 78, "jumping": 74}),
    ("rb", "Right Back", "RB", "Right",
     {"quality": 74, "speed": 82, "stamina": 80, "tackling": 72, "passing": 68, "agility": 76, "strength": 66}),
    ("cb1", "Centre Back A", "CB", "Right",
     {"quality": 78, "tackling": 82, "strength": 84, "jumping": 80, "heading": 82, "aerial": 80,
      "positioning": 80, "speed": 64}),
    ("cb2", "Centre Back B", "CB", "Left",
     {"quality": 76, "tackling": 80, "strength": 82, "jumping": 78, "heading": 80, "aerial": 79,
      "positioning": 78, "speed": 62}),
    ("lb", "Left Back", "LB", "Left",
     {"quality": 73, "speed": 81, "stamina": 79, "tackling": 71, "passing": 67, "agility": 75, "strength": 64}),
    ("dm", "Holding Mid", "CDM", "Right",
     {"quality": 77, "tackling": 80, "passing": 74, "positioning": 78, "stamina": 82,
      "press_resistance": 72, "strength": 76}),
    ("cm1", "Box Mid", "CM", "Right",
     {"quality": 79, "passing": 82, "stamina": 80, "vision": 78, "first_touch": 80, "press_resistance": 78}),
    ("cm2", "Deep Mid", "CM", "Left",
     {"quality": 78, "passing": 80, "stamina": 84, "vision": 74, "first_touch": 78, "press_resistance": 76}),
    ("rw", "Right Winger", "RW", "Left",
     {"quality": 80, "speed": 88, "agility": 86, "first_touch": 80, "finishing": 74, "off_ball": 78, "balance": 80}),
    ("st", "Striker", "ST", "Right",
     {"quality": 82, "finishing": 86, "off_ball": 84, "heading": 78, "aerial": 76, "jumping": 74,
      "first_touch": 80, "speed": 80, "strength": 74}),
    ("lw", "Left Winger", "LW", "Right",
     {"quality": 79, "speed": 86, "agility": 84, "first_touch": 78, "finishing": 72, "off_ball": 76, "balance": 78}),
]

OPPONENT_433_SLOTS = ["1", "2R", "3R", "3L", "2L", "6", "8R", "8L", "11R", "9", "11L"]

def make_player(player_id: str, position: str, foot: str = "Unknown", name: str = "",
                base: float = BASE_RATING, **attrs: float) -> PlayerProfile:
    values: Dict[str, float] = {a: base for a in ATTRIBUTE_NAMES}
    values.update({k: float(v) for k, v in attrs.items()})
    return PlayerProfile(player_id=player_id, name=name or player_id, position=position,
                         preferred_foot=foot, **values)

def make_opponent(slot_code: str, base: float = 50.0, **attrs: float) -> OpponentProfile:
    values: Dict[str, float] = {a: base for a in ATTRIBUTE_NAMES}
    values.update({k: float(v) for k, v in attrs.items()})
    return OpponentProfile(player_id=f"opp_{slot_code}", name=f"Opponent {slot_code}",
                           position=slot_code, slot_code=slot_code, **values)

def build_own_roster() -> List[PlayerProfile]:
    return [
        make_player(pid, pos, foot, name=name, **attrs)
        for pid, name, pos, foot, attrs in OWN_ROSTER_TABLE
    ]

