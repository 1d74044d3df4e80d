"""Pipes and the distance-based spawner."""
import pytest

from src.game.config import EASY, MEDIUM, HARD, GROUND_Y, PIPE_W, PIPE_HITBOX_PADDING, WIDTH, SPAWN_MARGIN
from src.game.obstacles import Obstacle, ObstacleManager


# -------------------- Obstacle --------------------

def test_pipe_stands_on_ground():
    ob = Obstacle.pipe(500, 80)
    assert ob.y + ob.height == GROUND_Y
    assert ob.width == PIPE_W
    assert ob.kind == "pipe"


def test_update_moves_left_by_speed():
    ob = Obstacle.pipe(500, 80)
    ob.update(7.5)
    assert ob.x == 492.5


@pytest.mark.parametrize("x, off", [
    (0, False),
    (-5, False),      # right edge at 75: still partly visible
    (-80, False),     # right edge exactly at 0
    (-80.5, True),
    (-200, True),
])
def test_is_off_screen_uses_right_edge(x, off):
    assert Obstacle(x=x, y=0, width=80, height=80).is_off_screen() is off


def test_bounds_are_padded():
    ob = Obstacle.pipe(300, 90)
    b = ob.bounds()
    p = PIPE_HITBOX_PADDING
    assert (b.left, b.top, b.right, b.bottom) == (300 + p, ob.y + p, 300 + PIPE_W - p, GROUND_Y - p)


# -------------------- ObstacleManager --------------------

def _manager(profile=MEDIUM, seed=42, enabled=True):
    m = ObstacleManager(seed=seed)
    m.set_difficulty(profile)
    if enabled:
        m.enable_spawning()
    return m


def test_set_difficulty_uses_min_distance_first():
    m = ObstacleManager(seed=1)
    m.set_difficulty(HARD)
    assert m.next_spawn_distance == HARD.min_spawn_distance
    assert not m.spawn_enabled


def test_no_spawn_while_disabled():
    m = _manager(enabled=False)
    for _ in range(1000):
        m.update(10.0)
    assert m.obstacles == []


def test_no_spawn_without_profile():
    m = ObstacleManager(seed=1)
    m.enable_spawning()
    for _ in range(1000):
        m.update(10.0)
    assert m.obstacles == []


def test_first_spawn_at_right_edge_after_min_distance():
    m = _manager(MEDIUM)
    ticks = 0
    while not m.obstacles:
        m.update(5.0)
        ticks += 1
    assert ticks == int(MEDIUM.min_spawn_distance / 5.0)
    # spawned at the edge, then moved once in the same update
    assert m.obstacles[0].x == WIDTH + SPAWN_MARGIN - 5.0
    assert m.distance_since_last == 0.0


@pytest.mark.parametrize("profile", [EASY, MEDIUM, HARD])
def test_spawn_heights_and_distances_in_range(profile):
    m = _manager(profile, seed=99)
    heights, thresholds = [], []
    real_spawn = m._spawn

    def record():
        ob = real_spawn()
        heights.append(ob.height)
        thresholds.append(m.next_spawn_distance)
        return ob

    m._spawn = record
    for _ in range(60_000):
        m.update(profile.max_speed)
    assert len(heights) > 50
    assert all(profile.min_height <= h < profile.max_height for h in heights)
    assert all(profile.min_spawn_distance <= d < profile.max_spawn_distance for d in thresholds)


def test_spacing_between_spawns_tracks_threshold():
    speed = 7.3
    m = _manager(MEDIUM, seed=5)
    travelled = 0.0
    spawned_at, thresholds = [], [m.next_spawn_distance]
    real_spawn = m._spawn

    def spy():
        ob = real_spawn()
        spawned_at.append(travelled)
        thresholds.append(m.next_spawn_distance)
        return ob

    m._spawn = spy
    for _ in range(20_000):
        travelled += speed
        m.update(speed)

    assert len(spawned_at) > 20
    starts = [0.0] + spawned_at[:-1]
    for start, end, threshold in zip(starts, spawned_at, thresholds):
        gap = end - start
        assert threshold - 1e-6 <= gap < threshold + speed + 1e-6


def test_off_screen_obstacles_are_dropped():
    m = _manager()
    m.obstacles.append(Obstacle.pipe(-70, 80))   # right edge at 10
    m.update(5.0)
    assert len(m.obstacles) == 1
    m.update(6.0)                                # right edge at -1
    assert m.obstacles == []


def test_reset():
    m = _manager(EASY)
    for _ in range(2000):
        m.update(6.0)
    m.reset()
    assert m.obstacles == []
    assert m.distance_since_last == 0.0
    assert m.next_spawn_distance == EASY.min_spawn_distance
    assert not m.spawn_enabled


def test_same_seed_same_layout():
    def layout(seed):
        m = _manager(HARD, seed=seed)
        out = []
        for _ in range(5000):
            m.update(9.0)
            out.append(tuple((round(o.x, 3), o.height) for o in m.obstacles))
        return out
    assert layout(3) == layout(3)
    assert layout(3) != layout(4)


def test_next_obstacle_ahead():
    m = _manager()
    far, near, behind = Obstacle.pipe(900, 70), Obstacle.pipe(400, 90), Obstacle.pipe(50, 60)
    m.obstacles.extend([far, near, behind])
    assert m.next_obstacle_ahead(200) is near
    assert m.next_obstacle_ahead(1000) is None
