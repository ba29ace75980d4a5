import copy
import logging
import numbers
import random
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 4
WIN_TILE = 2048
SPAWN_VALUE = 2


class InvalidConfiguration(ValueError):
    """The grid cannot be built with the requested shape or contents."""


class NoSpaceAvailable(RuntimeError):
    """A tile was requested on a grid without empty cells."""


class Direction(Enum):
    """Move directions. Values follow the 0 - Right, 1 - Up, 2 - Left, 3 - Down order."""

    RIGHT = 0
    UP = 1
    LEFT = 2
    DOWN = 3

    @property
    def vector(self) -> tuple[int, int]:
        return _VECTORS[self]

    @property
    def is_vertical(self) -> bool:
        return self.value % 2 == 1

    @property
    def is_horizontal(self) -> bool:
        return self.value % 2 == 0


_VECTORS = {
    Direction.RIGHT: (1, 0),
    Direction.UP: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.DOWN: (0, 1),
}


def _is_tile(value) -> bool:
    if not isinstance(value, numbers.Integral) or isinstance(value, bool):
        return False
    return value == 0 or (value >= 2 and value & (value - 1) == 0)


class GridEngine:
    """2048 grid state.

    Cells are addressed as (x, y) with y the row and x the column; 0 is an empty cell.
    """

    state: list[list[int]]

    def __init__(self, size: int = DEFAULT_SIZE, rng: random.Random | None = None):
        if size < 2:
            raise InvalidConfiguration(f"grid size must be at least 2, got {size}")
        self.size = size
        self.rng = rng if rng is not None else random.Random()
        self.state = [[0] * size for _ in range(size)]
        self.spawn_random_tile()
        self.spawn_random_tile()

    @classmethod
    def from_rows(cls, rows, rng: random.Random | None = None) -> "GridEngine":
        """Wrap an existing grid without placing any tiles."""
        state = [list(row) for row in rows]
        size = len(state)
        if size < 2 or any(len(row) != size for row in state):
            raise InvalidConfiguration("grid must be square and at least 2x2")
        for row in state:
            for value in row:
                if not _is_tile(value):
                    raise InvalidConfiguration(f"invalid tile value {value}")
        engine = cls.__new__(cls)
        engine.size = size
        engine.rng = rng if rng is not None else random.Random()
        engine.state = state
        return engine

    @property
    def rows(self) -> tuple[tuple[int, ...], ...]:
        return tuple(tuple(row) for row in self.state)

    def cell(self, x: int, y: int) -> int:
        if not self._in_bounds(x, y):
            raise IndexError(f"cell ({x}, {y}) is outside a {self.size}x{self.size} grid")
        return self.state[y][x]

    def empty_spaces(self) -> list[tuple[int, int]]:
        return [
            (x, y)
            for y in range(self.size)
            for x in range(self.size)
            if self.state[y][x] == 0
        ]

    def spawn_random_tile(self) -> tuple[int, int]:
        """Place a 2 on an empty cell chosen uniformly at random."""
        places = self.empty_spaces()
        if len(places) == 0:
            raise NoSpaceAvailable("no empty cell left to place a tile")
        x, y = places[self.rng.randrange(len(places))]
        self.state[y][x] = SPAWN_VALUE
        logger.debug("spawned %d at (%d, %d)", SPAWN_VALUE, x, y)
        return x, y

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def _move_space(self, direction: Direction, x: int, y: int) -> bool:
        value = self.state[y][x]
        if value == 0:
            return False
        dx, dy = direction.vector
        fx, fy = x + dx, y + dy
        if not self._in_bounds(fx, fy):
            return False
        front = self.state[fy][fx]
        if front == 0:
            self.state[fy][fx] = value
            self.state[y][x] = 0
            return True
        if front == value:
            self.state[fy][fx] = front * 2
            self.state[y][x] = 0
            return True
        return False

    def _shift(self, direction: Direction) -> bool:
        # cells nearest the target wall go first
        order = range(self.size)
        if direction in (Direction.DOWN, Direction.RIGHT):
            order = range(self.size - 1, -1, -1)
        moved = False
        for y in order:
            for x in order:
                if self._move_space(direction, x, y):
                    moved = True
        return moved

    def move(self, direction: Direction | int) -> bool:
        """
        Play a move in the game. Return whether the grid changed.

        The grid is swept up to `size` times, each sweep advancing every tile at
        most one cell. A tile is spawned only when something moved.
        """

        direction = Direction(direction)
        moved = False
        for _ in range(self.size):
            if not self._shift(direction):
                break
            moved = True
        if moved:
            self.spawn_random_tile()
        logger.debug("move %s changed=%s", direction.name, moved)
        logger.debug("grid after move:\n%s", self)
        return moved

    def is_won(self) -> bool:
        return any(WIN_TILE in row for row in self.state)

    def _can_merge(self) -> bool:
        for y in range(self.size):
            for x in range(self.size):
                value = self.state[y][x]
                if x + 1 < self.size and self.state[y][x + 1] == value:
                    return True
                if y + 1 < self.size and self.state[y + 1][x] == value:
                    return True
        return False

    def is_lost(self) -> bool:
        return all(0 not in row for row in self.state) and not self._can_merge()

    def highest_tile(self) -> int:
        return max(max(row) for row in self.state)

    def clone(self) -> "GridEngine":
        g = GridEngine.from_rows(self.state, rng=copy.deepcopy(self.rng))
        return g

    def valid(self, direction: Direction | int) -> bool:
        return self.clone().move(direction)

    def __str__(self) -> str:
        return "\n".join(" ".join(f"{v:4d}" for v in row) for row in self.state)
