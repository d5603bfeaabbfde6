from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional
from enum import Enum


@dataclass(frozen=True)
class Position:
    """Integer grid coordinate. y grows southward."""
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def chebyshev(self, other: "Position") -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y))


class Team(Enum):
    BLUE = "blue"
    RED = "red"
    NONE = "none"  # neutral control points

    @staticmethod
    def opposite(team: "Team") -> "Team":
        if team == Team.BLUE:
            return Team.RED
        if team == Team.RED:
            return Team.BLUE
        return Team.NONE


class Direction(Enum):
    """The eight single-tile moves available to a unit."""
    NORTH = (0, -1)
    NORTH_EAST = (1, -1)
    EAST = (1, 0)
    SOUTH_EAST = (1, 1)
    SOUTH = (0, 1)
    SOUTH_WEST = (-1, 1)
    WEST = (-1, 0)
    NORTH_WEST = (-1, -1)

    def move_point(self, pos: Position) -> Position:
        dx, dy = self.value
        return pos.offset(dx, dy)


class WeaponType(Enum):
    """Weapon loadouts: (damage, range)"""
    LASER_RIFLE = (10, 3)
    MINI_BLASTER = (15, 2)
    SCATTER_GUN = (30, 1)
    RAIL_GUN = (25, 6)

    @property
    def damage(self) -> int:
        return self.value[0]

    @property
    def range(self) -> int:
        return self.value[1]


class PickupType(Enum):
    REPAIR_KIT = "repair_kit"
    SHIELD = "shield"
    WEAPON_LASER_RIFLE = "weapon_laser_rifle"
    WEAPON_MINI_BLASTER = "weapon_mini_blaster"
    WEAPON_SCATTER_GUN = "weapon_scatter_gun"
    WEAPON_RAIL_GUN = "weapon_rail_gun"

    @property
    def weapon(self) -> Optional[WeaponType]:
        """Weapon granted by this pickup, None for repair kits and shields."""
        return _PICKUP_WEAPONS.get(self)


_PICKUP_WEAPONS = {
    PickupType.WEAPON_LASER_RIFLE: WeaponType.LASER_RIFLE,
    PickupType.WEAPON_MINI_BLASTER: WeaponType.MINI_BLASTER,
    PickupType.WEAPON_SCATTER_GUN: WeaponType.SCATTER_GUN,
    PickupType.WEAPON_RAIL_GUN: WeaponType.RAIL_GUN,
}


class MoveResult(Enum):
    MOVE_VALID = "move_valid"
    MOVE_COMPLETED = "move_completed"
    BLOCKED_BY_WALL = "blocked_by_wall"
    BLOCKED_BY_ENEMY = "blocked_by_enemy"
    BLOCKED_BY_FRIENDLY = "blocked_by_friendly"
    OUT_OF_BOUNDS = "out_of_bounds"
    NO_MOVE_ATTEMPTED = "no_move_attempted"
    UNIT_DEAD = "unit_dead"


class ShotResult(Enum):
    CAN_HIT_ENEMY = "can_hit_enemy"
    TARGET_OUT_OF_RANGE = "target_out_of_range"
    BLOCKED_BY_WALL = "blocked_by_wall"
    TARGET_DEAD = "target_dead"
    SHOOTER_DEAD = "shooter_dead"


class ActivateShieldResult(Enum):
    SHIELD_ACTIVATION_VALID = "shield_activation_valid"
    NO_SHIELDS = "no_shields"
    SHIELD_ALREADY_ACTIVE = "shield_already_active"
    UNIT_DEAD = "unit_dead"


class PickupResult(Enum):
    PICK_UP_VALID = "pick_up_valid"
    NOTHING_TO_PICK_UP = "nothing_to_pick_up"
    UNIT_DEAD = "unit_dead"


@dataclass
class ControlPoint:
    name: str
    position: Position
    controlling_team: Team = Team.NONE
    is_mainframe: bool = False


@dataclass
class Pickup:
    position: Position
    pickup_type: PickupType


MAX_HEALTH = 100


@dataclass
class UnitState:
    """Simulator-side record of one unit"""
    index: int  # 0..3, stable for the whole match
    team: Team
    position: Position
    health: int = MAX_HEALTH
    weapon: WeaponType = WeaponType.LASER_RIFLE
    shields: int = 0
    shield_active: bool = False
    last_move_result: MoveResult = MoveResult.NO_MOVE_ATTEMPTED
    damage_taken_last_turn: int = 0
    shot_by_last_turn: List[int] = field(default_factory=list)  # enemy indices

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def key(self) -> str:
        return unit_key(self.team, self.index)


def unit_key(team: Team, index: int) -> str:
    return f"{team.value}-{index}"


@dataclass
class Order:
    kind: Literal["move", "shoot", "shield", "pickup", "standby"]
    team: Team
    unit_index: int
    direction: Optional[Direction] = None
    target_index: Optional[int] = None


@dataclass
class Event:
    kind: str
    turn: int
    data: Dict


@dataclass
class State:
    turn: int
    width: int
    height: int
    walls: List[Position] = field(default_factory=list)
    units: Dict[str, UnitState] = field(default_factory=dict)
    control_points: List[ControlPoint] = field(default_factory=list)
    pickups: List[Pickup] = field(default_factory=list)
    scores: Dict[Team, int] = field(default_factory=lambda: {Team.BLUE: 0, Team.RED: 0})
    match_id: str = "local"

    def team_units(self, team: Team) -> List[UnitState]:
        """Units of one team ordered by index."""
        return sorted((u for u in self.units.values() if u.team == team), key=lambda u: u.index)
