from dataclasses import dataclass
from typing import List

from engine.model import Team
from engine.world import EnemyUnit, FriendlyUnit, GridWorld
from .config import ScoringConfig


@dataclass
class Snapshot:
    """World plus both unit arrays for the turn being planned."""
    world: GridWorld
    enemy_units: List[EnemyUnit]
    friendly_units: List[FriendlyUnit]
    config: ScoringConfig

    @property
    def team(self) -> Team:
        return self.friendly_units[0].team

    def living_enemies(self) -> List[EnemyUnit]:
        return [e for e in self.enemy_units if e.health > 0]

    def living_friendlies(self) -> List[FriendlyUnit]:
        return [f for f in self.friendly_units if f.health > 0]

    def mainframes_controlled(self, team: Team) -> int:
        """Mainframes currently held by team."""
        return sum(1 for cp in self.world.control_points
                   if cp.is_mainframe and cp.controlling_team == team)

    def any_mainframe_controlled(self) -> bool:
        return any(cp.is_mainframe and cp.controlling_team != Team.NONE
                   for cp in self.world.control_points)

    def enemy_has_mainframe_advantage(self) -> bool:
        """Enemy holds a mainframe while we hold none."""
        return (self.mainframes_controlled(Team.opposite(self.team)) > 0
                and self.mainframes_controlled(self.team) == 0)

    def friendly_has_mainframe_advantage(self) -> bool:
        """We hold a mainframe while the enemy holds none."""
        return (self.mainframes_controlled(self.team) > 0
                and self.mainframes_controlled(Team.opposite(self.team)) == 0)
