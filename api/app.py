from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from ai.config import ScoringConfig
from ai.planner import TurnPlanner
from engine.engine import Engine
from engine.model import State, Team
from engine.scenario import make_initial_state
from runtime.runner import TurnRunner
from .schemas import EventsResponse, StartRequest, StepRequest, StepResponse, TeamName

app = FastAPI(title="Capture-the-Zone Planner API")
runner: TurnRunner | None = None

# Enable CORS for development (React runs on different port)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:5175"],  # Vite dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _require_runner() -> TurnRunner:
    if not runner:
        raise HTTPException(400, "Match not started")
    return runner

def _state_json(s: State) -> dict:
    return {
        "turn": s.turn,
        "width": s.width,
        "height": s.height,
        "walls": [[w.x, w.y] for w in s.walls],
        "scores": {t.value: v for t, v in s.scores.items()},
        "units": {
            key: {
                "team": u.team.value,
                "index": u.index,
                "pos": [u.position.x, u.position.y],
                "hp": u.health,
                "weapon": u.weapon.name,
                "shields": u.shields,
                "last_move_result": u.last_move_result.value,
            } for key, u in s.units.items()
        },
        "control_points": [
            {"name": cp.name, "pos": [cp.position.x, cp.position.y],
             "team": cp.controlling_team.value, "mainframe": cp.is_mainframe}
            for cp in s.control_points
        ],
        "pickups": [{"pos": [p.position.x, p.position.y], "type": p.pickup_type.value} for p in s.pickups],
    }

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Capture-the-Zone Planner API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.on_event("shutdown")
async def shutdown():
    """Stop the match loop on app shutdown."""
    global runner
    if runner:
        await runner.stop()

@app.post("/match/start")
async def start_match(req: StartRequest):
    """Start a new match with specified seed."""
    await shutdown()
    global runner
    eng = Engine(seed=req.seed, initial_state=make_initial_state())
    runner = TurnRunner(eng, tick_ms=req.tick_ms, max_turns=req.max_turns)
    if req.autorun:
        await runner.start()
    print(f"[API] Match started (seed={req.seed}, autorun={req.autorun})")
    return {"match_id": eng.state.match_id}

@app.post("/match/step", response_model=StepResponse)
async def step_match(req: StepRequest):
    """Advance the match manually."""
    r = _require_runner()
    played = await r.advance(req.turns)
    return StepResponse(played=played, turn=r.engine.state.turn, finished=r.finished, scores=r.scores())

@app.get("/match/state")
async def get_state():
    """Get current match state snapshot."""
    r = _require_runner()
    return _state_json(await r.snapshot())

@app.get("/match/events")
async def get_events(since: int = 0, limit: int = 500):
    """Get events since offset."""
    r = _require_runner()
    evts, next_offset = r.events.since(since, limit)
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "turn": e.turn, "data": e.data} for e in evts]
    )

@app.get("/match/config")
async def get_config(team: TeamName = "blue"):
    """Scoring config of one team's planner."""
    r = _require_runner()
    return r.planners[Team(team or "blue")].config.model_dump()

@app.put("/match/config")
async def set_config(config: ScoringConfig, team: TeamName = None):
    """Replace the scoring config of one team, or of both when team is omitted."""
    r = _require_runner()
    teams = [Team(team)] if team else list(r.planners)
    for t in teams:
        planner: TurnPlanner = r.planners[t]
        planner.config = config
    print(f"[API] Scoring config updated for {[t.value for t in teams]}")
    return {"updated": [t.value for t in teams]}
