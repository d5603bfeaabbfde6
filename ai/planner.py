"""
Turn planner.

Runs the action scorer over the friendly units in index order, resolves the
winning action with a fixed priority among equal scores and issues the
matching command. Units are evaluated strictly 0 -> 3: a move committed by
an earlier unit reserves its destination before later units are scored.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from engine.model import Direction, Position
from .config import ScoringConfig
from .moves import TurnState, UnitMemory
from .scoring import ActionKind, ActionScorer, ActionScores
from .snapshot import Snapshot

# Consulted only among actions sharing the best score
ACTION_PRIORITY = (ActionKind.SHIELD, ActionKind.SHOOT, ActionKind.PICKUP, ActionKind.MOVE)

TEAM_SIZE = 4


def resolve_action(scores: ActionScores, priority: Sequence[ActionKind] = ACTION_PRIORITY) -> ActionKind:
    """Highest scoring legal action, ties broken by priority order."""
    if not scores.legal:
        return ActionKind.STANDBY
    best = scores.best_score
    for kind in priority:
        if kind in scores.scores and scores.scores[kind] == best:
            return kind
    return ActionKind.STANDBY


@dataclass
class Decision:
    unit_index: int
    action: ActionKind
    scores: ActionScores
    direction: Optional[Direction] = None
    destination: Optional[Position] = None
    target_index: Optional[int] = None


class TurnPlanner:
    """Chooses and issues one action per friendly unit each turn."""

    def __init__(self, config: Optional[ScoringConfig] = None,
                 priority: Sequence[ActionKind] = ACTION_PRIORITY, verbose: bool = False):
        self.config = config or ScoringConfig()
        self.priority = tuple(priority)
        self.verbose = verbose
        self.memory: List[UnitMemory] = [UnitMemory() for _ in range(TEAM_SIZE)]
        self.turn = TurnState()
        self.decisions: List[Decision] = []
        self.turns_planned = 0

    def plan_turn(self, world, enemy_units, friendly_units) -> None:
        """Issue exactly one command to every living friendly unit."""
        snapshot = Snapshot(world=world, enemy_units=list(enemy_units),
                            friendly_units=list(friendly_units), config=self.config)
        self.turn = TurnState()
        self.decisions = []
        scorer = ActionScorer(snapshot, self.memory, self.turn)

        if self.verbose:
            print(f"[TurnPlanner] Team {snapshot.team.value} turn {self.turns_planned}")

        for i, unit in enumerate(snapshot.friendly_units):
            self.memory[i].refresh(unit.last_move_result)
            if unit.health <= 0:
                continue
            self.decisions.append(self._act(scorer, i, unit))

        self.turns_planned += 1

    def _act(self, scorer: ActionScorer, i: int, unit) -> Decision:
        scores = scorer.evaluate(i)
        action = resolve_action(scores, self.priority)
        decision = Decision(unit_index=i, action=action, scores=scores)

        if action == ActionKind.SHIELD:
            unit.activate_shield()
        elif action == ActionKind.SHOOT:
            target = self.turn.best_shoot_targets[i]
            decision.target_index = target.index
            unit.shoot_at(target)
        elif action == ActionKind.PICKUP:
            unit.pickup_item_at_position()
        elif action == ActionKind.MOVE:
            direction = self.turn.best_move_directions[i]
            dest = direction.move_point(unit.position)
            decision.direction = direction
            decision.destination = dest
            unit.move(direction)
            self.turn.reserve(i, dest)
            self.memory[i].record_move(dest)
        else:
            unit.standby()

        if self.verbose:
            s = scores
            print(f"[TurnPlanner]   Unit {i}: move={s.get(ActionKind.MOVE):.1f} "
                  f"shoot={s.get(ActionKind.SHOOT):.1f} shield={s.get(ActionKind.SHIELD):.1f} "
                  f"pickup={s.get(ActionKind.PICKUP):.1f} -> {action.value}")
        return decision
