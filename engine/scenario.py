from typing import Dict, List, Optional
from .model import ControlPoint, Pickup, PickupType, Position, State, Team, UnitState, WeaponType

# Map legend:
#   .  open floor         #  wall
#   B  blue unit          R  red unit      (indexed in reading order)
#   C  neutral point      M  neutral mainframe
#   +  repair kit         o  shield
#   l/m/g/r  laser rifle, mini blaster, scatter gun, rail gun pickups
PICKUP_GLYPHS: Dict[str, PickupType] = {
    "+": PickupType.REPAIR_KIT,
    "o": PickupType.SHIELD,
    "l": PickupType.WEAPON_LASER_RIFLE,
    "m": PickupType.WEAPON_MINI_BLASTER,
    "g": PickupType.WEAPON_SCATTER_GUN,
    "r": PickupType.WEAPON_RAIL_GUN,
}

DEFAULT_MAP = [
    "...............",
    ".B.....+.....R.",
    "......###......",
    ".B..C.....C..R.",
    "..o....M....o..",
    ".B..C.....C..R.",
    "......###......",
    ".B.....r.....R.",
    "...............",
]


def parse_map(rows: List[str], weapon: WeaponType = WeaponType.LASER_RIFLE,
              match_id: str = "local") -> State:
    """Build an initial State from an ASCII map."""
    if not rows:
        raise ValueError("Map has no rows")
    width = len(rows[0])
    if any(len(r) != width for r in rows):
        raise ValueError("Map rows must all have the same length")

    state = State(turn=0, width=width, height=len(rows), match_id=match_id)
    counts = {Team.BLUE: 0, Team.RED: 0}
    cp_count = 0
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            pos = Position(x, y)
            if ch == ".":
                continue
            if ch == "#":
                state.walls.append(pos)
            elif ch in "BR":
                team = Team.BLUE if ch == "B" else Team.RED
                unit = UnitState(index=counts[team], team=team, position=pos, weapon=weapon)
                state.units[unit.key] = unit
                counts[team] += 1
            elif ch in "CM":
                state.control_points.append(
                    ControlPoint(name=f"cp{cp_count}", position=pos, is_mainframe=(ch == "M")))
                cp_count += 1
            elif ch in PICKUP_GLYPHS:
                state.pickups.append(Pickup(pos, PICKUP_GLYPHS[ch]))
            else:
                raise ValueError(f"Unknown map glyph {ch!r} at ({x},{y})")

    for team, n in counts.items():
        if n > 4:
            raise ValueError(f"Team {team.value} has {n} units, at most 4 allowed")
    return state


def make_initial_state(rows: Optional[List[str]] = None, match_id: str = "local") -> State:
    """Default match: two full teams, four control points around a central mainframe."""
    return parse_map(rows or DEFAULT_MAP, match_id=match_id)
