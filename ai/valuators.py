from engine.model import ControlPoint, PickupType, Position, Team
from .snapshot import Snapshot
from .threat import ThreatModel


class PickupValuator:
    """Point values for pickups given a unit's loadout and exposure."""

    def __init__(self, snapshot: Snapshot, threat: ThreatModel):
        self.snapshot = snapshot
        self.config = snapshot.config
        self.threat = threat

    def value_of(self, unit_index: int, pickup_type: PickupType) -> int:
        """Worth of pickup_type to this unit, wherever it lies."""
        unit = self.snapshot.friendly_units[unit_index]

        if pickup_type == PickupType.REPAIR_KIT:
            return self.config.repair_kit_value

        if pickup_type == PickupType.SHIELD:
            damage = self.threat.potential_damage_at(unit.position)
            if damage >= unit.health and self.snapshot.mainframes_controlled(unit.team) == 0:
                # Dead next turn anyway, a shield buys nothing
                return 0
            return self.config.shield_value

        offered = pickup_type.weapon
        if offered == unit.current_weapon:
            return self.config.same_weapon_value
        return self.config.upgrade_value(unit.current_weapon, offered)

    def points_for_pickup(self, unit_index: int) -> int:
        """Points for picking up whatever lies on the unit's tile."""
        unit = self.snapshot.friendly_units[unit_index]
        pickup = self.snapshot.world.get_pickup_at_position(unit.position)
        if pickup is None:
            return 0

        if pickup.pickup_type == PickupType.REPAIR_KIT:
            damage = self.threat.potential_damage_at(unit.position)
            if damage >= self.config.repair_kit_heal:
                return 0
            return (self.config.repair_kit_heal - damage) * self.config.points_per_damage + self.config.pickup_bonus

        return self.value_of(unit_index, pickup.pickup_type)


class ControlPointValuator:
    """
    Distance-decayed value of stepping toward a control point.

    Only steps that bring the unit exactly one tile closer, or that end
    within hold radius of the point, earn anything.
    """

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        self.config = snapshot.config
        self.world = snapshot.world

    def _enemies_within(self, cp: ControlPoint, radius: int):
        for enemy in self.snapshot.living_enemies():
            d = self.world.get_path_length(enemy.position, cp.position)
            if d <= radius:
                yield enemy, d

    def base_value(self, team: Team, cp: ControlPoint):
        """(points, decay exponent) for a point as seen by team."""
        cfg = self.config
        exponent = cfg.distance_exponent

        if cp.controlling_team == team:
            points = 0.0
            for _, d in self._enemies_within(cp, cfg.defend_radius):
                points += cfg.defend_bonus / max(d, 1)
            return points, exponent

        if cp.controlling_team == Team.opposite(team):
            if cp.is_mainframe:
                points = float(cfg.neutralize_points + cfg.mainframe_bonus)
                if self.snapshot.mainframes_controlled(team) == 0:
                    # Rush an enemy mainframe when we hold none
                    exponent = cfg.rush_exponent
                return points, exponent
            if any(True for _ in self._enemies_within(cp, cfg.guard_radius)):
                return 0.0, exponent
            return float(cfg.neutralize_points), exponent

        points = float(cfg.capture_points)
        if cp.is_mainframe:
            points += cfg.mainframe_bonus
        return points, exponent

    def contribution(self, unit_index: int, cp: ControlPoint, destination: Position) -> float:
        unit = self.snapshot.friendly_units[unit_index]
        current = self.world.get_path_length(unit.position, cp.position)
        after = self.world.get_path_length(destination, cp.position)
        if after != current - 1 and after > self.config.hold_radius:
            return 0.0

        points, exponent = self.base_value(unit.team, cp)
        return points / (max(after, 1) ** exponent)
