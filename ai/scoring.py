"""
Per-unit action scoring.

Every candidate action is turned into an estimate of the points it would
earn (or deny the enemy) this turn. The planner compares these estimates;
the best move direction and shoot target found along the way are cached on
the TurnState so the winning action can be executed without rescoring.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from engine.model import ActivateShieldResult, Direction, Position, PickupResult, ShotResult
from engine.world import EnemyUnit, FriendlyUnit
from .moves import MoveConflictResolver, TurnState, UnitMemory
from .snapshot import Snapshot
from .threat import ThreatModel
from .valuators import ControlPointValuator, PickupValuator


class ActionKind(Enum):
    SHIELD = "shield"
    SHOOT = "shoot"
    PICKUP = "pickup"
    MOVE = "move"
    STANDBY = "standby"


@dataclass
class ActionScores:
    """Weighted scores of the legal actions of one unit."""
    unit_index: int
    scores: Dict[ActionKind, float] = field(default_factory=dict)

    @property
    def legal(self) -> List[ActionKind]:
        return list(self.scores)

    @property
    def best_score(self) -> float:
        return max(self.scores.values(), default=-math.inf)

    def get(self, kind: ActionKind) -> float:
        return self.scores.get(kind, 0.0)


class ActionScorer:
    """Scores the move, shoot, shield and pickup options of one friendly unit."""

    def __init__(self, snapshot: Snapshot, memory: List[UnitMemory], turn: TurnState):
        self.snapshot = snapshot
        self.config = snapshot.config
        self.world = snapshot.world
        self.turn = turn
        self.threat = ThreatModel(snapshot)
        self.pickups = PickupValuator(snapshot, self.threat)
        self.control_points = ControlPointValuator(snapshot)
        self.resolver = MoveConflictResolver(snapshot, memory, turn)

    def _unit(self, i: int) -> FriendlyUnit:
        """Friendly view of unit index i."""
        return self.snapshot.friendly_units[i]

    # Legality

    def can_move(self, i: int) -> bool:
        """At least one direction passes the conflict rules."""
        return any(self.resolver.is_move_legal(i, d) for d in Direction)

    def can_shoot(self, i: int) -> bool:
        """Some enemy is in range and line of sight."""
        unit = self._unit(i)
        return any(unit.check_shot_against_enemy(e) == ShotResult.CAN_HIT_ENEMY
                   for e in self.snapshot.enemy_units)

    def can_shield(self, i: int) -> bool:
        """Unit has a charge and no shield already up."""
        return self._unit(i).check_shield_activation() == ActivateShieldResult.SHIELD_ACTIVATION_VALID

    def can_pickup(self, i: int) -> bool:
        """A pickup lies on the unit's tile."""
        return self._unit(i).check_pickup_result() == PickupResult.PICK_UP_VALID

    # Move

    def _ally_target(self, j: int) -> Position:
        """Where ally j will stand after this turn, as far as we know."""
        return self.turn.reservations.get(j, self._unit(j).position)

    def _pickup_points(self, i: int, current: Position, dest: Position, here_value: int) -> float:
        """Decayed value of pickups dest brings one step closer, if better than the one underfoot."""
        total = 0.0
        for p in self.world.pickups:
            before = self.world.get_path_length(current, p.position)
            after = self.world.get_path_length(dest, p.position)
            if after != before - 1:
                continue
            value = self.pickups.value_of(i, p.pickup_type)
            if value <= here_value:
                continue
            total += value / (max(after, 1) ** self.config.distance_exponent)
        return total

    def _assist_points(self, i: int, current: Position, dest: Position) -> float:
        """Pull toward allies that were shot last turn, scaled by how many enemies fired."""
        cfg = self.config
        total = 0.0
        for j, ally in enumerate(self.snapshot.friendly_units):
            if j == i or ally.health <= 0 or ally.damage_taken_last_turn <= 0:
                continue
            target = self._ally_target(j)
            before = self.world.get_path_length(current, target)
            after = self.world.get_path_length(dest, target)
            if after != before - 1:
                continue
            shooters = max(len(ally.shot_by_last_turn), 1)
            weight = (cfg.assist_bonus + ally.damage_taken_last_turn * cfg.points_per_damage) * shooters
            total += weight / max(after, cfg.assist_min_distance)
        return total

    def _grouping_points(self, i: int, current: Position, dest: Position) -> float:
        """Pull toward teammates that have drifted farther than group_distance."""
        total = 0.0
        for j, ally in enumerate(self.snapshot.friendly_units):
            if j == i or ally.health <= 0:
                continue
            target = self._ally_target(j)
            before = self.world.get_path_length(current, target)
            if before <= self.config.group_distance:
                continue
            if self.world.get_path_length(dest, target) == before - 1:
                total += self.config.grouping_points
        return total

    def here_pickup_value(self, i: int) -> int:
        """Points of the pickup under unit i, 0 when there is none."""
        return self.pickups.points_for_pickup(i) if self.can_pickup(i) else 0

    def move_points(self, i: int, direction: Direction, here_value: Optional[int] = None) -> float:
        """Unweighted value of stepping in direction. Assumes the step is legal."""
        unit = self._unit(i)
        current = unit.position
        dest = direction.move_point(current)

        if here_value is None:
            here_value = self.here_pickup_value(i)

        total = 0.0
        for cp in self.world.control_points:
            total += self.control_points.contribution(i, cp, dest)
        total += self._pickup_points(i, current, dest, here_value)
        total += self._assist_points(i, current, dest)

        threat_here = self.threat.threat_points(unit.health, self.threat.potential_damage_at(current))
        threat_there = self.threat.threat_points(unit.health, self.threat.potential_damage_at(dest))
        total += threat_here - threat_there

        total += (self.threat.potential_damage_dealt_from(i, dest)
                  - self.threat.potential_damage_dealt_from(i, current))

        if not self.snapshot.any_mainframe_controlled():
            total += self._grouping_points(i, current, dest)
        return total

    def score_move(self, i: int) -> float:
        """Best legal direction; caches it on the turn state."""
        best = -math.inf
        best_direction = None
        here_value = self.here_pickup_value(i)
        for d in Direction:
            if not self.resolver.is_move_legal(i, d):
                continue
            points = self.move_points(i, d, here_value)
            if points > best:
                best = points
                best_direction = d

        if best_direction is None:
            return -math.inf
        self.turn.best_move_directions[i] = best_direction
        return best * self.config.weights.move

    # Shoot

    def shot_points(self, enemy: EnemyUnit) -> float:
        """Points for the whole team focusing enemy, before the defender bonus."""
        cfg = self.config
        damage = 0
        attackers = 0
        for friendly in self.snapshot.living_friendlies():
            if friendly.check_shot_against_enemy(enemy) == ShotResult.CAN_HIT_ENEMY:
                damage += friendly.current_weapon.damage
                attackers += 1
        damage *= attackers

        points = float(damage * cfg.points_per_damage)
        if damage >= enemy.health:
            points += cfg.kill_bonus
        if self.snapshot.friendly_has_mainframe_advantage():
            points *= cfg.mainframe_damage_multiplier
        return points

    def is_holding_point(self, i: int) -> bool:
        """Unit stands within hold_radius of a control point."""
        pos = self._unit(i).position
        return any(self.world.get_path_length(pos, cp.position) <= self.config.hold_radius
                   for cp in self.world.control_points)

    def score_shoot(self, i: int) -> float:
        """Best hittable enemy; caches the target on the turn state."""
        unit = self._unit(i)
        best = -math.inf
        target = None
        for enemy in self.snapshot.enemy_units:
            if unit.check_shot_against_enemy(enemy) != ShotResult.CAN_HIT_ENEMY:
                continue
            points = self.shot_points(enemy)
            # Equal value: finish off the weakest
            if points > best or (points == best and enemy.health < target.health):
                best = points
                target = enemy

        if target is None:
            return -math.inf
        self.turn.best_shoot_targets[i] = target
        if self.is_holding_point(i):
            best *= self.config.defender_multiplier
        return best * self.config.weights.shoot

    # Shield and pickup

    def score_shield(self, i: int) -> float:
        """Threat points the shield would cancel at the current tile."""
        unit = self._unit(i)
        damage = self.threat.potential_damage_at(unit.position)
        points = float(self.threat.threat_points(unit.health, damage))
        if self.snapshot.enemy_has_mainframe_advantage():
            points *= self.config.shield_mainframe_multiplier
        return points * self.config.weights.shield

    def score_pickup(self, i: int) -> float:
        """Value of the pickup on the unit's tile."""
        return self.pickups.points_for_pickup(i) * self.config.weights.pickup

    def evaluate(self, i: int) -> ActionScores:
        """Scores for every legal action of unit i."""
        result = ActionScores(unit_index=i)
        if self.can_move(i):
            result.scores[ActionKind.MOVE] = self.score_move(i)
        if self.can_shoot(i):
            result.scores[ActionKind.SHOOT] = self.score_shoot(i)
        # Shield only while something can hit the tile
        if self.can_shield(i) and self.threat.potential_damage_at(self._unit(i).position) > 0:
            result.scores[ActionKind.SHIELD] = self.score_shield(i)
        if self.can_pickup(i):
            result.scores[ActionKind.PICKUP] = self.score_pickup(i)
        return result
