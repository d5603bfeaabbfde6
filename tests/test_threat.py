"""Test damage estimates of the threat model."""
from ai.config import ScoringConfig
from ai.snapshot import Snapshot
from ai.threat import ThreatModel
from engine.model import Position, Team, WeaponType


def test_no_enemy_in_range(make_match):
    """A tile out of every enemy's reach is safe."""
    m = make_match(["B.........R"])
    threat = ThreatModel(m.snapshot())
    assert threat.potential_damage_at(Position(0, 0)) == 0


def test_single_enemy_in_range(make_match):
    m = make_match(["B.R......."])
    threat = ThreatModel(m.snapshot())
    assert threat.potential_damage_at(Position(0, 0)) == WeaponType.LASER_RIFLE.damage


def test_two_enemies_concentrate(make_match):
    """Two shooters deal (D1 + D2) * 2."""
    m = make_match([
        "B.R.",
        "....",
        "R...",
    ])
    m.unit(Team.RED, 1).weapon = WeaponType.MINI_BLASTER
    threat = ThreatModel(m.snapshot())
    assert threat.potential_damage_at(Position(0, 0)) == (10 + 15) * 2


def test_dead_enemies_are_ignored(make_match):
    m = make_match([
        "B.R.",
        "....",
        "R...",
    ])
    m.unit(Team.RED, 1).health = 0
    threat = ThreatModel(m.snapshot())
    assert threat.potential_damage_at(Position(0, 0)) == 10


def test_wall_blocks_threat(make_match):
    m = make_match(["B#R."])
    threat = ThreatModel(m.snapshot())
    assert threat.potential_damage_at(Position(0, 0)) == 0


def test_damage_dealt_from_counts_whole_team(make_match):
    """Blue 0 stepping to (1,0) joins blue 1 on the same target."""
    m = make_match([
        "B..R....",
        "B.......",
    ])
    threat = ThreatModel(m.snapshot())
    # (10 + 10) * 2 attackers * 10 points per damage
    assert threat.potential_damage_dealt_from(0, Position(1, 0)) == 400


def test_damage_dealt_from_adds_kill_bonus(make_match):
    m = make_match([
        "B..R....",
        "B.......",
    ])
    m.unit(Team.RED, 0).health = 40
    threat = ThreatModel(m.snapshot())
    assert threat.potential_damage_dealt_from(0, Position(1, 0)) == 400 + 100


def test_damage_dealt_from_out_of_range(make_match):
    m = make_match(["B.......R"])
    threat = ThreatModel(m.snapshot())
    assert threat.potential_damage_dealt_from(0, Position(1, 0)) == 0


def test_threat_points():
    """Lethal damage earns the enemy a kill bonus on top."""
    threat = ThreatModel(Snapshot(world=None, enemy_units=[], friendly_units=[], config=ScoringConfig()))
    assert threat.threat_points(health=100, damage=20) == 200
    assert threat.threat_points(health=20, damage=20) == 300
    assert threat.threat_points(health=20, damage=0) == 0
