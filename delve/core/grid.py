"""Grid / level map."""

from __future__ import annotations

from delve.core.enums import Terrain

_PASSABLE = frozenset({Terrain.FLOOR, Terrain.DOOR, Terrain.STAIRS_UP, Terrain.STAIRS_DOWN})

# 8-neighbourhood offsets, clockwise from north
NEIGHBOURS8: tuple[tuple[int, int], ...] = (
    (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1),
)


class Grid:
    """2D tile grid backed by a flat list; cells are addressed by index ``y * width + x``."""

    __slots__ = ("width", "height", "_tiles")

    def __init__(self, width: int, height: int, default: Terrain = Terrain.WALL) -> None:
        self.width = width
        self.height = height
        self._tiles: list[Terrain] = [default] * (width * height)

    def __len__(self) -> int:
        return len(self._tiles)

    # -- addressing --

    def cell(self, x: int, y: int) -> int:
        return y * self.width + x

    def xy(self, cell: int) -> tuple[int, int]:
        return cell % self.width, cell // self.width

    def in_bounds_xy(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def offset(self, cell: int, dx: int, dy: int) -> int | None:
        """Return the cell at (dx, dy) from *cell*, or None when it falls off the map."""
        x, y = self.xy(cell)
        nx, ny = x + dx, y + dy
        if not self.in_bounds_xy(nx, ny):
            return None
        return self.cell(nx, ny)

    def distance(self, a: int, b: int) -> int:
        """Chebyshev distance: diagonal steps cost the same as orthogonal ones."""
        ax, ay = self.xy(a)
        bx, by = self.xy(b)
        return max(abs(ax - bx), abs(ay - by))

    def adjacent(self, a: int, b: int) -> bool:
        return a != b and self.distance(a, b) == 1

    # -- terrain --

    def get(self, cell: int) -> Terrain:
        if 0 <= cell < len(self._tiles):
            return self._tiles[cell]
        return Terrain.WALL

    def get_xy(self, x: int, y: int) -> Terrain:
        if self.in_bounds_xy(x, y):
            return self._tiles[y * self.width + x]
        return Terrain.WALL

    def set(self, cell: int, terrain: Terrain) -> None:
        if 0 <= cell < len(self._tiles):
            self._tiles[cell] = terrain

    def set_xy(self, x: int, y: int, terrain: Terrain) -> None:
        if self.in_bounds_xy(x, y):
            self._tiles[y * self.width + x] = terrain

    def is_passable(self, cell: int) -> bool:
        return self.get(cell) in _PASSABLE

    def passable_bitmap(self) -> tuple[int, ...]:
        """One entry per cell: 1 if passable, 0 otherwise."""
        return tuple(1 if t in _PASSABLE else 0 for t in self._tiles)

    def cells_of(self, terrain: Terrain) -> list[int]:
        return [i for i, t in enumerate(self._tiles) if t == terrain]

    # -- copy --

    def copy(self) -> Grid:
        new = Grid.__new__(Grid)
        new.width = self.width
        new.height = self.height
        new._tiles = list(self._tiles)
        return new
