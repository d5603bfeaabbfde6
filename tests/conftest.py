"""Shared helpers for building small hand-drawn matches."""
import pytest
from ai.config import ScoringConfig
from ai.moves import TurnState, UnitMemory
from ai.scoring import ActionScorer
from ai.snapshot import Snapshot
from engine.model import Team
from engine.scenario import parse_map
from engine.world import GridWorld, build_views


class Match:
    """A parsed map plus the views one team's planner would receive."""

    def __init__(self, rows, team=Team.BLUE, config=None):
        self.state = parse_map(rows)
        self.world = GridWorld(self.state)
        self.team = team
        self.orders = []
        self.enemies, self.friendlies = build_views(self.state, self.world, team, self.orders)
        self.config = config or ScoringConfig()

    def unit(self, team, index):
        return self.state.units[f"{team.value}-{index}"]

    def snapshot(self):
        return Snapshot(world=self.world, enemy_units=self.enemies,
                        friendly_units=self.friendlies, config=self.config)

    def scorer(self, memory=None, turn=None):
        memory = memory or [UnitMemory() for _ in range(4)]
        return ActionScorer(self.snapshot(), memory, turn or TurnState())


@pytest.fixture
def make_match():
    return Match
