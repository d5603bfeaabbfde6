from dataclasses import dataclass, field
from typing import Dict, List, Optional

from engine.model import Direction, MoveResult, Position
from engine.world import EnemyUnit
from .snapshot import Snapshot


@dataclass
class UnitMemory:
    """What one unit index remembers from the previous call."""
    previous_target: Optional[Position] = None
    move_attempted: bool = False
    previous_result: Optional[MoveResult] = None

    def refresh(self, last_move_result: MoveResult) -> None:
        """Pull in the outcome of last call's move, or forget the target if none was made."""
        if self.move_attempted:
            self.previous_result = last_move_result
        else:
            self.previous_target = None
            self.previous_result = None
        self.move_attempted = False

    def record_move(self, destination: Position) -> None:
        """Remember a committed move so its outcome can be checked next call."""
        self.previous_target = destination
        self.move_attempted = True

    def blocks(self, destination: Position) -> bool:
        """Destination was tried last turn and the move did not complete."""
        return (self.previous_target == destination
                and self.previous_result is not None
                and self.previous_result != MoveResult.MOVE_COMPLETED)


@dataclass
class TurnState:
    """Scratch state for a single call to plan_turn."""
    reservations: Dict[int, Position] = field(default_factory=dict)
    best_move_directions: Dict[int, Direction] = field(default_factory=dict)
    best_shoot_targets: Dict[int, EnemyUnit] = field(default_factory=dict)

    def reserve(self, unit_index: int, destination: Position) -> None:
        """Claim destination for unit_index; two units may not share one."""
        for other, reserved in self.reservations.items():
            if other != unit_index and reserved == destination:
                raise ValueError(f"{destination} already reserved by unit {other}")
        self.reservations[unit_index] = destination

    def reserved_destinations(self) -> List[Position]:
        return list(self.reservations.values())


class MoveConflictResolver:
    """Decides whether a unit may step in a direction this turn."""

    def __init__(self, snapshot: Snapshot, memory: List[UnitMemory], turn: TurnState):
        self.snapshot = snapshot
        self.memory = memory
        self.turn = turn

    def destination(self, unit_index: int, direction: Direction) -> Position:
        """Tile the unit would reach by stepping in direction."""
        return direction.move_point(self.snapshot.friendly_units[unit_index].position)

    def is_move_legal(self, unit_index: int, direction: Direction) -> bool:
        """Step is free of remembered failures, enemies, claimed or occupied tiles, walls and edges."""
        unit = self.snapshot.friendly_units[unit_index]
        dest = self.destination(unit_index, direction)

        if self.memory[unit_index].blocks(dest):
            return False

        for enemy in self.snapshot.living_enemies():
            if enemy.position == dest:
                return False

        for j, other in enumerate(self.snapshot.friendly_units):
            if j == unit_index or other.health <= 0:
                continue
            reserved = self.turn.reservations.get(j)
            if reserved is not None:
                if reserved == dest:
                    return False
            elif other.position == dest:
                return False

        return unit.check_move(direction) == MoveResult.MOVE_VALID

    def legal_directions(self, unit_index: int) -> List[Direction]:
        """All directions that pass is_move_legal."""
        return [d for d in Direction if self.is_move_legal(unit_index, d)]
