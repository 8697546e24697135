import numpy as np
import pytest

from puppetkin.levels import Level, LevelRegistry, LoadStatus
from puppetkin.surface import Region


class BoxRegion(Region):
    def __init__(self, half):
        self.half = half

    def inside_region(self, state):
        return bool(np.all(np.abs(np.asarray(state)) <= self.half))


class Prop:
    def __init__(self, name):
        self.name = name
        self.inits = []
        self.events = []

    def initialize(self, init_string):
        self.inits.append(init_string)

    def save(self):
        return f"state of {self.name}"

    def on_room_activation(self):
        self.events.append("activate")

    def on_room_deactivation(self):
        self.events.append("deactivate")


class FakeTheme:
    def __init__(self):
        self.calls = []

    def load(self):
        self.calls.append("load")

    def unload(self):
        self.calls.append("unload")

    def play(self):
        self.calls.append("play")

    def stop(self):
        self.calls.append("stop")


def make_registry(*names):
    registry = LevelRegistry()
    levels = [registry.register(Level(n)) for n in names]
    return registry, levels


def test_register_numbers_levels_in_order():
    registry, levels = make_registry("a", "b", "c")
    assert [lvl.level_number for lvl in levels] == [0, 1, 2]
    assert registry.levels == tuple(levels)


def test_register_twice_raises():
    registry, (a,) = make_registry("a")
    with pytest.raises(ValueError):
        registry.register(a)


def test_new_level_is_frozen():
    assert Level("x").load_state is LoadStatus.FROZEN


def test_go_to_level_activates_and_standbys_neighbors():
    registry, (a, b) = make_registry("a", "b")
    a.add_neighbor(b)
    prop = Prop("thing")
    a.add_dependent(prop)
    theme = FakeTheme()
    a.theme = theme
    registry.go_to_level(a)
    assert registry.current_level is a
    assert a.load_state is LoadStatus.ACTIVE
    assert b.load_state is LoadStatus.STANDBY
    assert prop.events == ["activate"]
    assert theme.calls == ["load", "play"]


def test_go_to_same_level_is_noop():
    registry, (a, b) = make_registry("a", "b")
    registry.go_to_level(a)
    registry.go_to_level(a)
    assert registry.prev_level is None


def test_go_to_level_by_number():
    registry, (a, b) = make_registry("a", "b")
    registry.go_to_level(1)
    assert registry.current_level is b


def test_active_neighbor_is_deactivated_on_standby():
    registry, (a, b) = make_registry("a", "b")
    b.add_neighbor(a)
    prop = Prop("p")
    a.add_dependent(prop)
    theme = FakeTheme()
    a.theme = theme
    registry.go_to_level(a)
    registry.go_to_level(b)
    assert a.load_state is LoadStatus.STANDBY
    assert prop.events == ["activate", "deactivate"]
    assert theme.calls[-1] == "load"
    assert "stop" in theme.calls


def test_leaving_freezes_distant_neighbors():
    registry, (a, b, c) = make_registry("a", "b", "c")
    a.add_neighbor(b)
    theme = FakeTheme()
    b.theme = theme
    registry.go_to_level(a)
    registry.go_to_level(c)
    assert b.load_state is LoadStatus.FROZEN
    assert theme.calls == ["load", "unload"]
    assert registry.prev_level is a


def test_shared_neighbor_is_not_frozen():
    registry, (a, b, c) = make_registry("a", "b", "c")
    a.add_neighbor(b)
    c.add_neighbor(b)
    registry.go_to_level(a)
    registry.go_to_level(c)
    assert b.load_state is LoadStatus.STANDBY


def test_increment_wraps_around():
    registry, (a, b) = make_registry("a", "b")
    registry.increment_level()
    assert registry.current_level is a
    registry.increment_level()
    assert registry.current_level is b
    registry.increment_level()
    assert registry.current_level is a


def test_decrement_wraps_around():
    registry, (a, b, c) = make_registry("a", "b", "c")
    registry.decrement_level()
    assert registry.current_level is a
    registry.decrement_level()
    assert registry.current_level is c
    registry.decrement_level()
    assert registry.current_level is b


def test_go_to_prev_level():
    registry, (a, b) = make_registry("a", "b")
    registry.go_to_prev_level()
    assert registry.current_level is None
    registry.go_to_level(a)
    registry.go_to_level(b)
    registry.go_to_prev_level()
    assert registry.current_level is a
    assert registry.prev_level is b


def test_go_to_neighbor_by_index_and_level():
    registry, (a, b, c) = make_registry("a", "b", "c")
    a.add_neighbor(b)
    a.add_neighbor(c)
    registry.go_to_level(a)
    registry.go_to_neighbor(1)
    assert registry.current_level is c
    c.add_neighbor(a)
    registry.go_to_neighbor(a)
    assert registry.current_level is a


def test_go_to_non_neighbor_raises():
    registry, (a, b) = make_registry("a", "b")
    registry.go_to_level(a)
    with pytest.raises(ValueError):
        registry.go_to_neighbor(b)
    assert registry.current_level is a


def test_go_to_neighbor_without_current_raises():
    registry, (a,) = make_registry("a")
    with pytest.raises(RuntimeError):
        registry.go_to_neighbor(0)


def test_within_level_uses_level_position():
    position = np.eye(4)
    position[:3, 3] = (10, 0, 0)
    level = Level("room", position=position, region=BoxRegion(1.0))
    assert level.within_level((10.5, 0, 0))
    assert not level.within_level((0, 0, 0))


def test_within_level_without_region_raises():
    with pytest.raises(RuntimeError):
        Level("room").within_level((0, 0, 0))


def test_neighbor_at():
    home = Level("home", region=BoxRegion(1.0))
    far = np.eye(4)
    far[:3, 3] = (5, 0, 0)
    other = Level("other", position=far, region=BoxRegion(1.0))
    home.add_neighbor(home)
    home.add_neighbor(other)
    assert home.neighbor_at((5, 0.5, 0)) == 1
    assert home.neighbor_at((0, 0, 0)) == 0
    assert home.neighbor_at((50, 0, 0)) is None


def test_reset_reads_layout(tmp_path):
    layout = tmp_path / "room.txt"
    layout.write_text("a\tx y\nb\tz\nghost\tq\n", encoding="utf-8")
    level = Level("room", layout_file=layout)
    a, b = Prop("a"), Prop("b")
    level.add_dependent(a)
    level.add_dependent(b)
    level.reset()
    assert a.inits == ["x y"]
    assert b.inits == ["z"]


def test_save_then_reset_round_trip(tmp_path):
    level = Level("room", layout_file=tmp_path / "room.txt")
    a, unnamed = Prop("a"), Prop("")
    level.add_dependent(a)
    level.add_dependent(unnamed)
    level.save_layout_file()
    lines = (tmp_path / "room.txt").read_text(encoding="utf-8").splitlines()
    assert lines == [f"a\t{a.save()}"]
    level.reset()
    assert a.inits == [a.save()]
    assert unnamed.inits == []


def test_reset_missing_file_raises(tmp_path):
    level = Level("room", layout_file=tmp_path / "missing.txt")
    with pytest.raises(FileNotFoundError):
        level.reset()


def test_add_dependent_keeps_one_copy():
    level = Level("room")
    prop = Prop("p")
    level.add_dependent(prop)
    level.add_dependent(prop)
    assert level.contents == (prop,)