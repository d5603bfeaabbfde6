"""Test the turn runner and its event log."""
import pytest
from ai.planner import TurnPlanner
from engine.engine import Engine
from engine.model import Event, Team
from engine.scenario import make_initial_state
from runtime.eventlog import EventLog
from runtime.runner import TurnRunner


def test_eventlog_offsets_and_turns():
    log = EventLog()
    start, end = log.append_many([Event("A", 0, {}), Event("B", 0, {})])
    assert (start, end) == (0, 1)
    log.append_many([Event("C", 1, {})])

    chunk, next_offset = log.since(1, limit=10)
    assert [e.kind for e in chunk] == ["B", "C"]
    assert next_offset == 3
    assert [e.kind for e in log.for_turn(0)] == ["A", "B"]
    assert log.for_turn(5) == []
    assert len(log) == 3


def test_step_once_issues_one_order_per_living_unit():
    runner = TurnRunner(Engine(3, make_initial_state()))
    evts = runner.step_once()
    chosen = [e for e in evts if e.kind == "ActionChosen"]
    assert len(chosen) == 8
    assert not any(e.kind == "OrderRejected" for e in evts)
    assert runner.engine.state.turn == 1


def test_each_team_keeps_its_own_planner():
    blue, red = TurnPlanner(), TurnPlanner()
    runner = TurnRunner(Engine(3, make_initial_state()), planners={Team.BLUE: blue, Team.RED: red})
    runner.step_once()
    assert blue.turns_planned == 1
    assert red.turns_planned == 1
    assert {d.unit_index for d in blue.decisions} == {0, 1, 2, 3}


@pytest.mark.asyncio
async def test_advance_stops_at_max_turns():
    runner = TurnRunner(Engine(3, make_initial_state()), max_turns=5)
    played = await runner.advance(10)
    assert played == 5
    assert runner.finished
    assert (await runner.snapshot()).turn == 5


def test_set_tick_is_clamped():
    runner = TurnRunner(Engine(3, make_initial_state()))
    runner.set_tick(1)
    assert runner.tick_ms == 10
    runner.set_tick(50000)
    assert runner.tick_ms == 10000
    runner.set_tick(250)
    assert runner.tick_ms == 250
