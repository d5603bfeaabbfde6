"""
Grid world oracles and unit views.

The decision core in ``ai`` only talks to a world accessor and to unit views.
This module provides the reference implementation used by the simulator,
the runtime and the tests: path lengths come from a BFS over the wall grid,
shots need Chebyshev range and a wall-free Bresenham line, and every unit
command is queued as an ``Order`` instead of touching the state directly.
"""

from collections import deque
from typing import Dict, List, Optional, Tuple

import numpy as np

from .model import (
    ActivateShieldResult, ControlPoint, Direction, MoveResult, Order, Pickup,
    PickupResult, Position, ShotResult, State, Team, UnitState,
)

# Path length reported for unreachable cells
UNREACHABLE = 10_000


def bresenham(a: Position, b: Position) -> List[Position]:
    """Cells on the line from a to b, both ends included."""
    cells: List[Position] = []
    x0, y0, x1, y1 = a.x, a.y, b.x, b.y
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        cells.append(Position(x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
    return cells


class GridWorld:
    """World accessor over a match state with static walls."""

    def __init__(self, state: State):
        self.state = state
        self.width = state.width
        self.height = state.height
        self.walls = np.zeros((state.height, state.width), dtype=bool)
        for w in state.walls:
            if not self.in_bounds(w):
                raise ValueError(f"Wall {w} outside {state.width}x{state.height} map")
            self.walls[w.y, w.x] = True
        self._distance_maps: Dict[Position, np.ndarray] = {}

    @property
    def control_points(self) -> List[ControlPoint]:
        return self.state.control_points

    @property
    def pickups(self) -> List[Pickup]:
        return self.state.pickups

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def is_wall(self, pos: Position) -> bool:
        return bool(self.walls[pos.y, pos.x])

    def is_open(self, pos: Position) -> bool:
        return self.in_bounds(pos) and not self.is_wall(pos)

    def _distance_map(self, source: Position) -> np.ndarray:
        """BFS distances from source over 8-neighbour moves, -1 if unreachable."""
        cached = self._distance_maps.get(source)
        if cached is not None:
            return cached

        dist = np.full((self.height, self.width), -1, dtype=np.int32)
        if self.is_open(source):
            dist[source.y, source.x] = 0
            queue = deque([source])
            while queue:
                cur = queue.popleft()
                for d in Direction:
                    nxt = d.move_point(cur)
                    if self.is_open(nxt) and dist[nxt.y, nxt.x] < 0:
                        dist[nxt.y, nxt.x] = dist[cur.y, cur.x] + 1
                        queue.append(nxt)

        self._distance_maps[source] = dist
        return dist

    def get_path_length(self, start: Position, end: Position) -> int:
        """Shortest path length in tiles, UNREACHABLE if there is none."""
        if not self.is_open(start) or not self.is_open(end):
            return UNREACHABLE
        d = int(self._distance_map(end)[start.y, start.x])
        return d if d >= 0 else UNREACHABLE

    def get_next_direction_in_path(self, start: Position, target: Position) -> Optional[Direction]:
        """First step of a shortest path from start to target."""
        if start == target or not self.is_open(start) or not self.is_open(target):
            return None
        dist = self._distance_map(target)
        here = int(dist[start.y, start.x])
        if here < 0:
            return None
        for d in Direction:
            nxt = d.move_point(start)
            if self.is_open(nxt) and int(dist[nxt.y, nxt.x]) == here - 1:
                return d
        return None

    def has_line_of_sight(self, a: Position, b: Position) -> bool:
        for cell in bresenham(a, b)[1:-1]:
            if self.is_wall(cell):
                return False
        return True

    def can_shooter_shoot_target(self, shooter: Position, target: Position, weapon_range: int) -> bool:
        if not self.in_bounds(shooter) or not self.in_bounds(target):
            return False
        if shooter.chebyshev(target) > weapon_range:
            return False
        return self.has_line_of_sight(shooter, target)

    def get_pickup_at_position(self, pos: Position) -> Optional[Pickup]:
        for p in self.state.pickups:
            if p.position == pos:
                return p
        return None


class EnemyUnit:
    """Read-only view of an opposing unit."""

    def __init__(self, unit: UnitState):
        self._unit = unit

    @property
    def index(self) -> int:
        return self._unit.index

    @property
    def position(self) -> Position:
        return self._unit.position

    @property
    def health(self) -> int:
        return self._unit.health

    @property
    def current_weapon(self):
        return self._unit.weapon

    @property
    def team(self) -> Team:
        return self._unit.team

    def __repr__(self) -> str:
        return f"EnemyUnit({self._unit.key} at ({self.position.x},{self.position.y}) hp={self.health})"


class FriendlyUnit(EnemyUnit):
    """Controllable view: legality checks plus commands that queue orders."""

    def __init__(self, unit: UnitState, world: GridWorld, orders: List[Order],
                 enemies: List[EnemyUnit]):
        super().__init__(unit)
        self._world = world
        self._orders = orders
        self._enemies = enemies

    @property
    def last_move_result(self) -> MoveResult:
        return self._unit.last_move_result

    @property
    def damage_taken_last_turn(self) -> int:
        return self._unit.damage_taken_last_turn

    @property
    def shot_by_last_turn(self) -> List[EnemyUnit]:
        return [e for e in self._enemies if e.index in self._unit.shot_by_last_turn]

    @property
    def shields(self) -> int:
        return self._unit.shields

    def check_move(self, direction: Direction) -> MoveResult:
        if not self._unit.is_alive:
            return MoveResult.UNIT_DEAD
        dest = direction.move_point(self.position)
        if not self._world.in_bounds(dest):
            return MoveResult.OUT_OF_BOUNDS
        if self._world.is_wall(dest):
            return MoveResult.BLOCKED_BY_WALL
        return MoveResult.MOVE_VALID

    def check_shot_against_enemy(self, enemy: EnemyUnit) -> ShotResult:
        if not self._unit.is_alive:
            return ShotResult.SHOOTER_DEAD
        if enemy.health <= 0:
            return ShotResult.TARGET_DEAD
        if self.position.chebyshev(enemy.position) > self.current_weapon.range:
            return ShotResult.TARGET_OUT_OF_RANGE
        if not self._world.has_line_of_sight(self.position, enemy.position):
            return ShotResult.BLOCKED_BY_WALL
        return ShotResult.CAN_HIT_ENEMY

    def check_shield_activation(self) -> ActivateShieldResult:
        if not self._unit.is_alive:
            return ActivateShieldResult.UNIT_DEAD
        if self._unit.shield_active:
            return ActivateShieldResult.SHIELD_ALREADY_ACTIVE
        if self._unit.shields <= 0:
            return ActivateShieldResult.NO_SHIELDS
        return ActivateShieldResult.SHIELD_ACTIVATION_VALID

    def check_pickup_result(self) -> PickupResult:
        if not self._unit.is_alive:
            return PickupResult.UNIT_DEAD
        if self._world.get_pickup_at_position(self.position) is None:
            return PickupResult.NOTHING_TO_PICK_UP
        return PickupResult.PICK_UP_VALID

    def _queue(self, kind: str, **kwargs) -> None:
        self._orders.append(Order(kind=kind, team=self.team, unit_index=self.index, **kwargs))

    def move(self, direction: Direction) -> None:
        self._queue("move", direction=direction)

    def shoot_at(self, enemy: EnemyUnit) -> None:
        self._queue("shoot", target_index=enemy.index)

    def activate_shield(self) -> None:
        self._queue("shield")

    def pickup_item_at_position(self) -> None:
        self._queue("pickup")

    def standby(self) -> None:
        self._queue("standby")


def build_views(state: State, world: GridWorld, team: Team,
                orders: List[Order]) -> Tuple[List[EnemyUnit], List[FriendlyUnit]]:
    """Enemy and friendly views for one team, both ordered by unit index."""
    enemies = [EnemyUnit(u) for u in state.team_units(Team.opposite(team))]
    friendlies = [FriendlyUnit(u, world, orders, enemies) for u in state.team_units(team)]
    return enemies, friendlies
