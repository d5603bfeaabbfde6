import asyncio
from typing import Dict, List, Optional
from ai.planner import TurnPlanner
from engine.engine import Engine
from engine.model import Event, Order, State, Team
from engine.world import build_views
from .eventlog import EventLog

class TurnRunner:
    """Drives a match: both teams plan on the same snapshot, then the engine resolves the turn."""

    def __init__(self, engine: Engine, planners: Optional[Dict[Team, TurnPlanner]] = None,
                 tick_ms: int = 500, max_turns: int = 200, verbose: bool = False):
        self.engine = engine
        self.planners = planners or {Team.BLUE: TurnPlanner(verbose=verbose),
                                     Team.RED: TurnPlanner(verbose=verbose)}
        self.tick_ms = tick_ms
        self.max_turns = max_turns
        self.verbose = verbose
        self.events = EventLog()
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    @property
    def finished(self) -> bool:
        return self.engine.is_over() or self.engine.state.turn >= self.max_turns

    def step_once(self) -> List[Event]:
        """Plan and resolve a single turn."""
        state = self.engine.snapshot()
        world = self.engine.world
        orders: List[Order] = []
        evts: List[Event] = []
        for team, planner in self.planners.items():
            enemies, friendlies = build_views(state, world, team, orders)
            if not friendlies:
                continue
            planner.plan_turn(world, enemies, friendlies)
            for d in planner.decisions:
                evts.append(Event("ActionChosen", state.turn, {
                    "team": team.value,
                    "unit": d.unit_index,
                    "action": d.action.value,
                    "scores": {k.value: v for k, v in d.scores.scores.items()},
                }))

        self.engine.apply_orders(orders)
        evts += self.engine.step()
        self.events.append_many(evts)
        if self.verbose:
            print(f"[TurnRunner] Turn {state.turn - 1} produced {len(evts)} events, {len(orders)} orders")
        return evts

    async def advance(self, turns: int = 1) -> int:
        """Step up to turns turns under the lock; returns how many were played."""
        played = 0
        async with self._lock:
            while played < turns and not self.finished:
                self.step_once()
                played += 1
        return played

    async def start(self):
        """Start the tick loop."""
        if self._task:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Stop the tick loop gracefully."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self):
        """Main tick loop - one turn per tick until the match ends."""
        while not self.finished:
            await self.advance(1)
            await asyncio.sleep(self.tick_ms / 1000.0)
        if self.verbose:
            print(f"[TurnRunner] Match finished at turn {self.engine.state.turn}: {self.scores()}")

    async def snapshot(self) -> State:
        """Get current state (thread-safe)."""
        async with self._lock:
            return self.engine.snapshot()

    def scores(self) -> Dict[str, int]:
        return {t.value: s for t, s in self.engine.state.scores.items()}

    def set_tick(self, tick_ms: int):
        """Update the delay between turns, clamped to [10, 10000] ms."""
        self.tick_ms = max(10, min(10000, tick_ms))
        if self.verbose:
            print(f"[TurnRunner] Tick set to {self.tick_ms} ms")
