"""Error taxonomy for the lineup core. Everything derives from ValueError."""
from typing import Optional, Tuple


class LineupError(ValueError):
    """Base class for lineup optimisation failures."""


class InsufficientRosterError(LineupError):
    def __init__(self, side: str, size: int, required: int):
        super().__init__(f"{side} roster has {size} players, at least {required} required")
        self.side = side
        self.size = size
        self.required = required


class MissingGoalkeeperError(LineupError):
    def __init__(self, roster_size: int):
        super().__init__(f"No goalkeeper-eligible player among {roster_size} players")
        self.roster_size = roster_size


class NoFeasibleLineupError(LineupError):
    def __init__(self, attempted: Tuple[str, ...]):
        super().__init__(f"No valid lineup found across formations: {', '.join(attempted)}")
        self.attempted = attempted


class NonFiniteCostError(LineupError):
    def __init__(self, cell: Tuple[int, int], value: float, formation_code: Optional[str] = None):
        where = f" in formation {formation_code}" if formation_code else ""
        super().__init__(f"Non-finite cost {value!r} at cell {cell}{where}")
        self.cell = cell
        self.value = value
        self.formation_code = formation_code


class TacticalConfigError(LineupError):
    pass


class SearchCancelledError(LineupError):
    def __init__(self, completed: int, total: int):
        super().__init__(f"Formation search cancelled after {completed}/{total} formations")
        self.completed = completed
        self.total = total
