from enum import Enum, IntEnum
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

INVALID_STATE = -1


class Cell(Enum):
    START = "S"
    NORMAL = "N"
    MONSTER = "M"
    GOAL = "G"

    @property
    def terminal(self) -> bool:
        return self in (Cell.GOAL, Cell.MONSTER)


class Action(IntEnum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]


_DELTAS = {
    Action.UP: (-1, 0),
    Action.DOWN: (1, 0),
    Action.LEFT: (0, -1),
    Action.RIGHT: (0, 1),
}

N_ACTIONS = len(Action)


class Transition(NamedTuple):
    next_state: int
    hit_wall: bool
    slipped: bool


class Grid:
    """Immutable map of cell tags parsed from rows of ``S``/``N``/``M``/``G``.

    The start position is the single ``S`` cell unless ``start`` is given,
    in which case the layout may have no ``S`` at all (e.g. a 1x1 goal grid).
    """

    def __init__(self, layout: Sequence[str], start: Optional[Tuple[int, int]] = None):
        if not layout:
            raise ValueError("grid layout is empty")
        rows = [str(r).replace(" ", "") for r in layout]
        width = len(rows[0])
        if width == 0 or any(len(r) != width for r in rows):
            raise ValueError("grid rows must be non-empty and equally long")

        try:
            cells = [[Cell(ch) for ch in r] for r in rows]
        except ValueError as e:
            raise ValueError(f"unknown cell tag in layout: {e}") from None

        self.rows = len(rows)
        self.cols = width
        self._cells: Tuple[Tuple[Cell, ...], ...] = tuple(tuple(r) for r in cells)

        starts = [(r, c) for r in range(self.rows) for c in range(self.cols) if self._cells[r][c] is Cell.START]
        if len(starts) > 1:
            raise ValueError(f"grid has {len(starts)} start cells, expected one")
        if start is None:
            if not starts:
                raise ValueError("grid has no start cell and no explicit start was given")
            start = starts[0]
        r, c = int(start[0]), int(start[1])
        if not (0 <= r < self.rows and 0 <= c < self.cols):
            raise ValueError(f"start {start} is outside the {self.rows}x{self.cols} grid")
        self.start = (r, c)

    def __getitem__(self, rc: Tuple[int, int]) -> Cell:
        r, c = rc
        return self._cells[r][c]

    def layout(self) -> List[str]:
        return ["".join(cell.value for cell in row) for row in self._cells]


class SlipperyGridWorld:
    """GridWorld where every successful move may slide one extra cell.

    States are flat indices ``row * cols + col``.
    Actions: 0=up, 1=down, 2=left, 3=right.
    Rewards: +100 on goal, -100 on monster, -0.1 per step elsewhere.
    A move into a wall keeps the agent in place and skips the slip draw;
    a slip into a wall keeps the agent on the first-step cell.
    """

    GOAL_REWARD = 100.0
    MONSTER_REWARD = -100.0
    STEP_REWARD = -0.1

    def __init__(self, grid: Grid, slip_prob: float = 0.5, rng: Optional[np.random.Generator] = None):
        self.grid = grid
        self.rows = grid.rows
        self.cols = grid.cols
        self.n_states = self.rows * self.cols
        self.n_actions = N_ACTIONS
        self.slip_prob = float(slip_prob)
        self.rng = rng if rng is not None else np.random.default_rng()

    @property
    def start_state(self) -> int:
        return self.coordinates_to_index(*self.grid.start)

    def coordinates_to_index(self, row: int, col: int) -> int:
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return row * self.cols + col
        return INVALID_STATE

    def index_to_coordinates(self, index: int) -> Tuple[int, int]:
        return divmod(int(index), self.cols)

    def _inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell_at(self, index: int) -> Cell:
        return self.grid[self.index_to_coordinates(index)]

    def is_terminal(self, index: int) -> bool:
        return self.cell_at(index).terminal

    def reward_for(self, index: int) -> float:
        cell = self.cell_at(index)
        if cell is Cell.GOAL:
            return self.GOAL_REWARD
        if cell is Cell.MONSTER:
            return self.MONSTER_REWARD
        return self.STEP_REWARD

    def step(self, index: int, action: Action) -> Transition:
        r, c = self.index_to_coordinates(index)
        dr, dc = Action(action).delta

        r1, c1 = r + dr, c + dc
        if not self._inside(r1, c1):
            return Transition(int(index), True, False)

        slipped = False
        if self.rng.random() < self.slip_prob:
            r2, c2 = r1 + dr, c1 + dc
            if self._inside(r2, c2):
                r1, c1 = r2, c2
                slipped = True

        nxt = self.coordinates_to_index(r1, c1)
        assert nxt != INVALID_STATE, f"transition from {index} left the grid"
        return Transition(nxt, False, slipped)

    def resolve_transition(self, index: int, action: Action) -> int:
        return self.step(index, action).next_state
