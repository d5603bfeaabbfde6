"""
Threat model.

Estimates the damage a tile is exposed to next turn and the damage the team
can pour onto an enemy from a candidate tile. Both use the concentration
rule: summed damage is multiplied by the number of units contributing to it,
so focused fire counts for more than the same damage spread out.
"""

from engine.model import Position
from .snapshot import Snapshot


class ThreatModel:

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        self.config = snapshot.config
        self.world = snapshot.world

    def potential_damage_at(self, position: Position) -> int:
        """Damage living enemies could deal to position next turn."""
        damage = 0
        shooters = 0
        for enemy in self.snapshot.living_enemies():
            weapon = enemy.current_weapon
            if self.world.can_shooter_shoot_target(enemy.position, position, weapon.range):
                damage += weapon.damage
                shooters += 1
        return damage * shooters

    def potential_damage_dealt_from(self, unit_index: int, position: Position) -> int:
        """
        Best points the team could score against a single enemy if unit
        unit_index stood on position.

        Returns 0 when no enemy is in range from position.
        """
        unit = self.snapshot.friendly_units[unit_index]
        best = 0
        for enemy in self.snapshot.living_enemies():
            if not self.world.can_shooter_shoot_target(position, enemy.position, unit.current_weapon.range):
                continue

            damage = 0
            attackers = 0
            for j, friendly in enumerate(self.snapshot.friendly_units):
                if friendly.health <= 0:
                    continue
                origin = position if j == unit_index else friendly.position
                weapon = friendly.current_weapon
                if self.world.can_shooter_shoot_target(origin, enemy.position, weapon.range):
                    damage += weapon.damage
                    attackers += 1

            damage *= attackers
            points = damage * self.config.points_per_damage
            if damage >= enemy.health:
                points += self.config.kill_bonus
            best = max(best, points)
        return best

    def threat_points(self, health: int, damage: int) -> int:
        """Points the enemy would earn from dealing damage to a unit with health."""
        points = damage * self.config.points_per_damage
        if damage > 0 and damage >= health:
            points += self.config.kill_bonus
        return points
