from typing import Dict, List, Optional, Set, Tuple
from .model import (
    MAX_HEALTH, Event, MoveResult, Order, Pickup, PickupType, Position, State,
    Team, UnitState, unit_key,
)
from .rng import DRNG
from .world import GridWorld

REPAIR_KIT_HEAL = 20
POINTS_PER_CONTROL_POINT = 1
POINTS_PER_MAINFRAME = 3


class Engine:
    """Pure, deterministic match simulator: orders in, events out."""

    def __init__(self, seed: int, initial_state: State, respawn_every: int = 10):
        self.state = initial_state
        self.world = GridWorld(initial_state)
        self._rng = DRNG(seed)
        self._pending_orders: List[Order] = []
        self.respawn_every = respawn_every

    def apply_orders(self, orders: List[Order]) -> None:
        """Queue orders to be applied on next step."""
        self._pending_orders.extend(orders)

    def _unit(self, team: Team, index: int) -> Optional[UnitState]:
        return self.state.units.get(unit_key(team, index))

    def _apply_orders_now(self) -> Tuple[Dict[str, Order], List[Event]]:
        """Validate queued orders, keeping the first order of each living unit."""
        evts: List[Event] = []
        accepted: Dict[str, Order] = {}
        for o in self._pending_orders:
            u = self._unit(o.team, o.unit_index)
            reason = None
            if u is None:
                reason = "unknown unit"
            elif not u.is_alive:
                reason = "unit dead"
            elif u.key in accepted:
                reason = "unit already has an order"
            if reason:
                evts.append(Event("OrderRejected", self.state.turn,
                                  {"team": o.team.value, "unit": o.unit_index, "kind": o.kind, "reason": reason}))
                continue
            accepted[u.key] = o
        self._pending_orders.clear()
        return accepted, evts

    def _reset_turn_flags(self) -> None:
        for u in self.state.units.values():
            u.last_move_result = MoveResult.NO_MOVE_ATTEMPTED
            u.damage_taken_last_turn = 0
            u.shot_by_last_turn = []
            u.shield_active = False

    def _shields(self, orders: Dict[str, Order]) -> List[Event]:
        evts: List[Event] = []
        for key, o in orders.items():
            u = self.state.units[key]
            if o.kind != "shield":
                continue
            if u.shields <= 0:
                evts.append(Event("ShieldFailed", self.state.turn, {"unit": key}))
                continue
            u.shields -= 1
            u.shield_active = True
            evts.append(Event("ShieldActivated", self.state.turn, {"unit": key, "remaining": u.shields}))
        return evts

    def _move(self, orders: Dict[str, Order]) -> List[Event]:
        """Resolve all moves at once. A move fails if its tile stays occupied or is contested."""
        evts: List[Event] = []
        living = {k: u for k, u in self.state.units.items() if u.is_alive}
        wanted: Dict[str, Position] = {}

        for key, o in orders.items():
            if o.kind != "move" or o.direction is None:
                continue
            u = living[key]
            dest = o.direction.move_point(u.position)
            if not self.world.in_bounds(dest):
                u.last_move_result = MoveResult.OUT_OF_BOUNDS
            elif self.world.is_wall(dest):
                u.last_move_result = MoveResult.BLOCKED_BY_WALL
            else:
                wanted[key] = dest

        moving: Set[str] = set(wanted)
        for key in sorted(wanted):
            rivals = [living[k] for k in wanted if k != key and wanted[k] == wanted[key]]
            if rivals:
                moving.discard(key)
                mover = living[key]
                mover.last_move_result = (MoveResult.BLOCKED_BY_ENEMY
                                          if any(r.team != mover.team for r in rivals)
                                          else MoveResult.BLOCKED_BY_FRIENDLY)

        # A tile frees up only if its occupant's own move succeeds
        changed = True
        while changed:
            changed = False
            for key in sorted(moving):
                dest = wanted[key]
                mover = living[key]
                blocker = next((other for other_key, other in living.items()
                                if other_key not in moving and other.position == dest), None)
                if blocker is not None:
                    moving.discard(key)
                    mover.last_move_result = (MoveResult.BLOCKED_BY_FRIENDLY if blocker.team == mover.team
                                              else MoveResult.BLOCKED_BY_ENEMY)
                    changed = True

        for key in sorted(wanted):
            u = living[key]
            if key in moving:
                old = u.position
                u.position = wanted[key]
                u.last_move_result = MoveResult.MOVE_COMPLETED
                evts.append(Event("UnitMoved", self.state.turn,
                                  {"unit": key, "from": [old.x, old.y], "to": [u.position.x, u.position.y]}))
            else:
                evts.append(Event("MoveBlocked", self.state.turn,
                                  {"unit": key, "result": u.last_move_result.value}))
        for key, o in orders.items():
            if o.kind == "move" and key not in wanted:
                evts.append(Event("MoveBlocked", self.state.turn,
                                  {"unit": key, "result": living[key].last_move_result.value}))
        return evts

    def _combat(self, orders: Dict[str, Order]) -> List[Event]:
        """Resolve shots simultaneously; units killed this turn still fire."""
        evts: List[Event] = []
        damage: Dict[str, int] = {}
        shooters: Dict[str, List[int]] = {}

        for key, o in orders.items():
            if o.kind != "shoot" or o.target_index is None:
                continue
            s = self.state.units[key]
            t = self._unit(Team.opposite(s.team), o.target_index)
            if t is None or not t.is_alive:
                evts.append(Event("ShotMissed", self.state.turn, {"shooter": key, "reason": "no target"}))
                continue
            if not self.world.can_shooter_shoot_target(s.position, t.position, s.weapon.range):
                evts.append(Event("ShotMissed", self.state.turn,
                                  {"shooter": key, "target": t.key, "reason": "out of range"}))
                continue
            evts.append(Event("ShotFired", self.state.turn,
                              {"shooter": key, "target": t.key, "weapon": s.weapon.name}))
            if t.shield_active:
                evts.append(Event("ShotAbsorbed", self.state.turn, {"shooter": key, "target": t.key}))
                continue
            damage[t.key] = damage.get(t.key, 0) + s.weapon.damage
            shooters.setdefault(t.key, []).append(s.index)

        for key in sorted(damage):
            t = self.state.units[key]
            t.health = max(0, t.health - damage[key])
            t.damage_taken_last_turn = damage[key]
            t.shot_by_last_turn = shooters[key]
            evts.append(Event("Damage", self.state.turn, {"target": key, "dmg": damage[key], "hp": t.health}))
            if not t.is_alive:
                evts.append(Event("Destroyed", self.state.turn, {"unit_id": key, "killers": shooters[key]}))
        return evts

    def _pickups(self, orders: Dict[str, Order]) -> List[Event]:
        evts: List[Event] = []
        for key, o in orders.items():
            u = self.state.units[key]
            if o.kind != "pickup" or not u.is_alive:
                continue
            p = self.world.get_pickup_at_position(u.position)
            if p is None:
                evts.append(Event("PickupFailed", self.state.turn, {"unit": key}))
                continue
            if p.pickup_type == PickupType.REPAIR_KIT:
                u.health = min(MAX_HEALTH, u.health + REPAIR_KIT_HEAL)
            elif p.pickup_type == PickupType.SHIELD:
                u.shields += 1
            else:
                u.weapon = p.pickup_type.weapon
            self.state.pickups.remove(p)
            evts.append(Event("PickedUp", self.state.turn, {"unit": key, "pickup": p.pickup_type.value}))
        return evts

    def _capture(self) -> List[Event]:
        """An opposing point under a lone team is neutralized, a neutral one is captured."""
        evts: List[Event] = []
        for cp in self.state.control_points:
            present = {u.team for u in self.state.units.values() if u.is_alive and u.position == cp.position}
            if len(present) != 1:
                continue
            team = present.pop()
            if cp.controlling_team == team:
                continue
            if cp.controlling_team == Team.NONE:
                cp.controlling_team = team
                evts.append(Event("ControlPointCaptured", self.state.turn, {"name": cp.name, "team": team.value}))
            else:
                cp.controlling_team = Team.NONE
                evts.append(Event("ControlPointNeutralized", self.state.turn, {"name": cp.name, "by": team.value}))
        return evts

    def _score(self) -> None:
        for cp in self.state.control_points:
            if cp.controlling_team == Team.NONE:
                continue
            gain = POINTS_PER_MAINFRAME if cp.is_mainframe else POINTS_PER_CONTROL_POINT
            self.state.scores[cp.controlling_team] += gain

    def _respawn(self) -> List[Event]:
        if self.respawn_every <= 0 or (self.state.turn + 1) % self.respawn_every != 0:
            return []
        taken = {u.position for u in self.state.units.values() if u.is_alive}
        taken |= {p.position for p in self.state.pickups}
        taken |= {cp.position for cp in self.state.control_points}
        free = [Position(x, y) for y in range(self.state.height) for x in range(self.state.width)
                if not self.world.walls[y, x] and Position(x, y) not in taken]
        if not free:
            return []
        pos = self._rng.choice(free)
        kind = self._rng.choice(list(PickupType))
        self.state.pickups.append(Pickup(pos, kind))
        return [Event("PickupSpawned", self.state.turn, {"pickup": kind.value, "pos": [pos.x, pos.y]})]

    def step(self) -> List[Event]:
        """Advance the match by one turn."""
        orders, evts = self._apply_orders_now()
        self._reset_turn_flags()
        evts += self._shields(orders)
        evts += self._move(orders)
        evts += self._combat(orders)
        evts += self._pickups(orders)
        evts += self._capture()
        self._score()
        evts += self._respawn()
        evts.append(Event("TurnEnded", self.state.turn,
                          {"scores": {t.value: s for t, s in self.state.scores.items()}}))
        self.state.turn += 1
        return evts

    def is_over(self) -> bool:
        return any(not any(u.is_alive for u in self.state.team_units(team)) for team in (Team.BLUE, Team.RED))

    def snapshot(self) -> State:
        """Return current state."""
        return self.state
