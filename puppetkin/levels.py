"""Levels (rooms) of a game world and the registry that moves between them."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

import numpy as np

from puppetkin.surface import Region


class LevelObject(Protocol):
    """What a level needs from the objects it contains."""

    name: str

    def initialize(self, init_string: str) -> None: ...

    def save(self) -> str: ...


class Theme(Protocol):
    """Background sound of a level."""

    def load(self) -> object: ...

    def unload(self) -> object: ...

    def play(self) -> object: ...

    def stop(self) -> object: ...


class LoadStatus(Enum):
    """How loaded a level is.

    ACTIVE is fully loaded and updated, STANDBY is loaded but not updated,
    FROZEN is neither loaded nor updated.
    """

    ACTIVE = "active"
    STANDBY = "standby"
    FROZEN = "frozen"


def _as_matrix4(value) -> np.ndarray:
    mat = np.asarray(value, dtype=float)
    if mat.shape != (4, 4):
        raise ValueError(f"expected a 4x4 transform, got shape {mat.shape}")
    return mat.copy()


class Level:
    """A room holding objects, with neighbouring rooms and a layout file.

    The layout file has one line per named object: its name, a tab, and the
    string the object saves and initializes itself from.
    """

    def __init__(
        self,
        name: str,
        layout_file: Union[str, Path, None] = None,
        position=None,
        region: Optional[Region] = None,
        theme: Optional[Theme] = None,
    ) -> None:
        self.name = name
        self.layout_file = Path(layout_file) if layout_file is not None else Path(f"{name}.txt")
        self.position = np.eye(4) if position is None else _as_matrix4(position)
        self.region = region
        self.theme = theme
        self.load_state = LoadStatus.FROZEN
        self.level_number: Optional[int] = None
        self._neighbors: list[Level] = []
        self._dependents: list[LevelObject] = []

    def __repr__(self) -> str:
        return f"Level({self.name!r}, number={self.level_number}, state={self.load_state.name})"

    @property
    def neighbors(self) -> tuple["Level", ...]:
        return tuple(self._neighbors)

    @property
    def contents(self) -> tuple[LevelObject, ...]:
        return tuple(self._dependents)

    @property
    def collision_surface(self) -> Optional[Region]:
        return self.region

    def add_neighbor(self, neighbor: "Level") -> None:
        self._neighbors.append(neighbor)

    def add_dependent(self, obj: LevelObject) -> None:
        if not any(existing is obj for existing in self._dependents):
            self._dependents.append(obj)

    def within_level(self, pos: Sequence[float]) -> bool:
        """True if the world point pos lies inside this level's region."""
        if self.region is None:
            raise RuntimeError(f"level {self.name!r} has no collision region")
        point = np.asarray(pos, dtype=float).reshape(-1)
        if point.shape != (3,):
            raise ValueError(f"expected a 3-vector, got shape {point.shape}")
        return bool(self.region.inside_region(point - self.position[:3, 3]))

    def neighbor_at(self, pos: Sequence[float]) -> Optional[int]:
        """Index of the first neighbour containing pos, or None."""
        return next(
            (i for i, neig in enumerate(self._neighbors) if neig.within_level(pos)),
            None,
        )

    def reset(self) -> None:
        """Re-initialize named objects from the layout file."""
        with self.layout_file.open("r", encoding="utf-8") as layout:
            for raw_line in layout:
                line = raw_line.rstrip("\n")
                name, _, init_string = line.partition("\t")
                for obj in self._dependents:
                    if obj.name == name:
                        obj.initialize(init_string)

    def save_layout_file(self) -> None:
        """Write every named object's saved state to the layout file."""
        with self.layout_file.open("w", encoding="utf-8") as layout:
            for obj in self._dependents:
                if obj.name:
                    layout.write(f"{obj.name}\t{obj.save()}\n")

    def _notify(self, hook: str) -> None:
        for obj in self._dependents:
            callback = getattr(obj, hook, None)
            if callback is not None:
                callback()

    def _enter_standby(self) -> None:
        if self.load_state is LoadStatus.ACTIVE:
            self._deactivate()
        self.load_state = LoadStatus.STANDBY
        if self.theme is not None:
            self.theme.load()

    def _activate(self) -> None:
        if self.load_state is LoadStatus.FROZEN:
            self._enter_standby()
        self.load_state = LoadStatus.ACTIVE
        self._notify("on_room_activation")
        if self.theme is not None:
            self.theme.play()

    def _freeze(self) -> None:
        if self.load_state is LoadStatus.ACTIVE:
            self._deactivate()
        self.load_state = LoadStatus.FROZEN
        if self.theme is not None:
            self.theme.unload()

    def _deactivate(self) -> None:
        self.load_state = LoadStatus.STANDBY
        self._notify("on_room_deactivation")
        if self.theme is not None:
            self.theme.stop()


class LevelRegistry:
    """All levels of a game, numbered in order of registration, and the current one."""

    def __init__(self) -> None:
        self._levels: list[Level] = []
        self.current_level: Optional[Level] = None
        self.prev_level: Optional[Level] = None

    @property
    def levels(self) -> tuple[Level, ...]:
        return tuple(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def register(self, level: Level) -> Level:
        """Add a level and give it the next level number."""
        if any(existing is level for existing in self._levels):
            raise ValueError(f"level {level.name!r} is already registered")
        level.level_number = len(self._levels)
        self._levels.append(level)
        return level

    def go_to_level(self, level: Union[Level, int, None]) -> None:
        """Make level current: it activates and its neighbours go on standby.

        Neighbours of the previous level that neither are the new level nor
        neighbour it are frozen.
        """
        if isinstance(level, int):
            level = self._levels[level]
        if level is None or level is self.current_level:
            return
        self.prev_level = self.current_level
        self.current_level = level
        level._activate()
        for neig in level.neighbors:
            neig._enter_standby()
        if self.prev_level is not None:
            keep = [level, *level.neighbors]
            for neig in self.prev_level.neighbors:
                if not any(neig is kept for kept in keep):
                    neig._freeze()

    def go_to_neighbor(self, neighbor: Union[Level, int]) -> None:
        """Move to a neighbour of the current level, given by index or level."""
        if self.current_level is None:
            raise RuntimeError("there is no current level")
        neighbors = self.current_level.neighbors
        if isinstance(neighbor, int):
            self.go_to_level(neighbors[neighbor])
            return
        if not any(neig is neighbor for neig in neighbors):
            raise ValueError(
                f"{neighbor.name!r} is not a neighbor of {self.current_level.name!r}"
            )
        self.go_to_level(neighbor)

    def increment_level(self) -> None:
        """Go to the next level by number, wrapping to the first."""
        if self.current_level is None:
            self.go_to_level(0)
            return
        next_level = self.current_level.level_number + 1
        self.go_to_level(next_level if next_level < len(self._levels) else 0)

    def decrement_level(self) -> None:
        """Go to the previous level by number, wrapping to the last."""
        if self.current_level is None:
            self.go_to_level(0)
            return
        next_level = self.current_level.level_number - 1
        self.go_to_level(next_level if next_level >= 0 else len(self._levels) - 1)

    def go_to_prev_level(self) -> None:
        """Return to the level visited before the current one, if any."""
        if self.prev_level is not None:
            self.go_to_level(self.prev_level)