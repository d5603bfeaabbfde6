"""Test the per-action scores of a single unit."""
import math
from ai.config import ActionWeights, ScoringConfig
from ai.moves import TurnState
from ai.scoring import ActionKind
from engine.model import ControlPoint, Direction, Pickup, PickupType, Position, Team, WeaponType


def test_shoot_concentration_rule(make_match):
    """Two shooters on one enemy: (d1 + d2) * 2 * points per damage."""
    m = make_match([
        "B.....",
        "..R...",
        "B.....",
    ])
    m.unit(Team.BLUE, 1).weapon = WeaponType.MINI_BLASTER
    scorer = m.scorer()
    assert scorer.score_shoot(0) == (10 + 15) * 2 * 10


def test_shoot_kill_bonus(make_match):
    m = make_match([
        "B.....",
        "..R...",
        "B.....",
    ])
    m.unit(Team.RED, 0).health = 30
    assert m.scorer().score_shoot(0) == (10 + 10) * 2 * 10 + 100


def test_shoot_prefers_weaker_target_on_ties(make_match):
    m = make_match([
        "B.R...",
        "......",
        "R.....",
    ])
    m.unit(Team.RED, 1).health = 80
    turn = TurnState()
    scorer = m.scorer(turn=turn)
    assert scorer.score_shoot(0) == 100
    assert turn.best_shoot_targets[0].index == 1


def test_shoot_prefers_higher_value_target(make_match):
    m = make_match([
        "B.R...",
        "......",
        "R.....",
    ])
    m.unit(Team.RED, 0).health = 10
    turn = TurnState()
    m.scorer(turn=turn).score_shoot(0)
    assert turn.best_shoot_targets[0].index == 0


def test_shoot_without_target(make_match):
    m = make_match(["B.......R"])
    scorer = m.scorer()
    assert not scorer.can_shoot(0)
    assert scorer.score_shoot(0) == -math.inf


def test_defender_multiplier(make_match):
    """Shooting while standing next to a control point is prioritized."""
    m = make_match(["BC.R.."])
    assert m.scorer().score_shoot(0) == 100 * m.config.defender_multiplier


def test_mainframe_damage_multiplier(make_match):
    m = make_match(["B.R..."])
    m.state.control_points.append(ControlPoint("mf", Position(5, 0), Team.BLUE, is_mainframe=True))
    assert m.scorer().score_shoot(0) == 100 * m.config.mainframe_damage_multiplier


def test_shield_score_under_fire(make_match):
    m = make_match(["BR...."])
    assert m.scorer().score_shield(0) == 100


def test_shield_score_lethal(make_match):
    m = make_match(["BR...."])
    m.unit(Team.BLUE, 0).health = 10
    assert m.scorer().score_shield(0) == 100 + 100


def test_shield_score_scaled_when_enemy_holds_mainframe(make_match):
    m = make_match(["BR...."])
    m.state.control_points.append(ControlPoint("mf", Position(5, 0), Team.RED, is_mainframe=True))
    assert m.scorer().score_shield(0) == 100 * m.config.shield_mainframe_multiplier


def test_shield_score_without_threat(make_match):
    m = make_match([
        "B..",
        "...",
        "...",
        "...",
        "...",
        "R..",
    ])
    assert m.scorer().score_shield(0) == 0


def test_move_heads_for_pickup(make_match):
    m = make_match([
        "......",
        "B....r",
        "......",
    ])
    turn = TurnState()
    scorer = m.scorer(turn=turn)
    score = scorer.score_move(0)
    assert score > 0
    assert turn.best_move_directions[0].move_point(Position(0, 1)).x == 1


def test_move_steps_out_of_fire(make_match):
    """With nothing else to gain, the unit backs away from a shooter."""
    m = make_match([
        "........",
        "....B..R",
        "........",
    ])
    m.unit(Team.BLUE, 0).weapon = WeaponType.SCATTER_GUN
    turn = TurnState()
    scorer = m.scorer(turn=turn)
    scorer.score_move(0)
    dest = turn.best_move_directions[0].move_point(Position(4, 1))
    assert dest.x == 3


def test_move_skips_pickups_no_better_than_current_tile(make_match):
    m = make_match([
        "B....o",
        "......",
    ])
    m.state.pickups.append(Pickup(Position(0, 0), PickupType.REPAIR_KIT))
    scorer = m.scorer()
    assert scorer.move_points(0, Direction.EAST) == 0.0
    assert scorer.here_pickup_value(0) == 250
    # Without the kit underfoot the shield four tiles on pulls: 100 / 4 ** 1.5
    assert scorer.move_points(0, Direction.EAST, here_value=0) == 100 / 4 ** 1.5


def test_move_assists_damaged_ally(make_match):
    m = make_match([
        "B.......B",
        ".........",
    ])
    ally = m.unit(Team.BLUE, 1)
    ally.damage_taken_last_turn = 10
    scorer = m.scorer()
    # (100 + 10 * 10) * 1 shooter / 7 tiles, plus the grouping pull
    expected = 200 / 7 + m.config.grouping_points
    assert abs(scorer.move_points(0, Direction.EAST) - expected) < 1e-9


def test_move_assist_scales_with_shooters(make_match):
    m = make_match([
        "B.......B",
        ".........",
        ".........",
        ".........",
        ".........",
        ".........",
        ".........",
        ".......RR",
    ])
    ally = m.unit(Team.BLUE, 1)
    ally.damage_taken_last_turn = 10
    ally.shot_by_last_turn = [0, 1]
    scorer = m.scorer()
    # (100 + 10 * 10) * 2 shooters / 7 tiles, plus the grouping pull
    expected = 400 / 7 + m.config.grouping_points
    assert abs(scorer.move_points(0, Direction.EAST) - expected) < 1e-9


def test_reserved_ally_destination_moves_grouping_target(make_match):
    m = make_match([
        "B.......B",
        ".........",
    ])
    turn = TurnState()
    assert m.scorer(turn=turn).move_points(0, Direction.EAST) == m.config.grouping_points
    # Ally 1 already committed to a tile within group_distance
    turn.reserve(1, Position(4, 0))
    assert m.scorer(turn=turn).move_points(0, Direction.EAST) == 0.0


def test_reserved_ally_destination_moves_assist_target(make_match):
    m = make_match([
        "B.......B",
        ".........",
    ])
    m.unit(Team.BLUE, 1).damage_taken_last_turn = 10
    turn = TurnState()
    assert abs(m.scorer(turn=turn).move_points(0, Direction.EAST) - (200 / 7 + m.config.grouping_points)) < 1e-9
    turn.reserve(1, Position(4, 0))
    # Target is now 3 tiles past the step and inside group_distance
    assert abs(m.scorer(turn=turn).move_points(0, Direction.EAST) - 200 / 3) < 1e-9


def test_grouping_only_without_mainframes(make_match):
    m = make_match([
        "B.......B",
        ".........",
    ])
    assert m.scorer().move_points(0, Direction.EAST) == m.config.grouping_points
    m.state.control_points.append(ControlPoint("mf", Position(4, 1), Team.RED, is_mainframe=True))
    # the mainframe pull replaces the grouping pull
    assert m.scorer().move_points(0, Direction.EAST) == (250 + 200) / 3 ** 1.0


def test_no_legal_move(make_match):
    m = make_match(["B"])
    scorer = m.scorer()
    assert not scorer.can_move(0)
    assert scorer.score_move(0) == -math.inf


def test_weights_scale_scores(make_match):
    m = make_match(["B....."], config=ScoringConfig(weights=ActionWeights(pickup=2.0)))
    m.state.pickups.append(Pickup(Position(0, 0), PickupType.REPAIR_KIT))
    assert m.scorer().score_pickup(0) == 500


def test_evaluate_only_scores_legal_actions(make_match):
    m = make_match(["B....."])
    m.state.pickups.append(Pickup(Position(0, 0), PickupType.REPAIR_KIT))
    scores = m.scorer().evaluate(0)
    assert set(scores.legal) == {ActionKind.MOVE, ActionKind.PICKUP}
    assert scores.get(ActionKind.PICKUP) == 250
