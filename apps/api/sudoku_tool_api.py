# sudoku_tool_api.py
# FastAPI wrapper around GameSession: one in-memory session per id.
# Run with: uvicorn apps.api.sudoku_tool_api:app --reload

import uuid
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from engine.board_core import BoardContractError, create_empty_board, load_puzzle_string, sanity_check
from engine.config import EngineConfig, load_engine_config
from engine.oracle import HintSource, KnownSolutionOracle, PuzzleGenerator, SolverOracle
from engine.propagation import legal_digits
from engine.session import GameSession
from types_sudoku import Difficulty, InputMode


class PuzzleModel(BaseModel):
    puzzle: str = Field(min_length=81, max_length=81)


class CreateSessionRequest(BaseModel):
    # a known solution lets a session validate without a configured oracle
    solution: Optional[str] = Field(default=None, min_length=81, max_length=81)
    difficulty: Optional[Difficulty] = None


class LoadRequest(PuzzleModel):
    difficulty: Optional[Difficulty] = None
    color_mode: bool = False


class GenerateRequest(BaseModel):
    difficulty: Optional[Difficulty] = None


class StartRequest(BaseModel):
    mode: Literal["solving", "manual", "competition"] = "solving"


class SelectRequest(BaseModel):
    row: int = Field(ge=0, le=8)
    col: int = Field(ge=0, le=8)


class MoveRequest(BaseModel):
    direction: Literal["up", "down", "left", "right"]


class InputRequest(BaseModel):
    digit: int = Field(ge=1, le=9)
    mode: Optional[InputMode] = None


def create_app(
    oracle: Optional[SolverOracle] = None,
    generator: Optional[PuzzleGenerator] = None,
    hint_source: Optional[HintSource] = None,
    config: Optional[EngineConfig] = None,
) -> FastAPI:
    app = FastAPI(title="Sudoku Phase Engine API")
    sessions: Dict[str, GameSession] = {}
    app.state.sessions = sessions

    @app.exception_handler(BoardContractError)
    async def contract_error(request: Request, exc: BoardContractError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    def get_session(sid: str) -> GameSession:
        if sid not in sessions:
            raise HTTPException(status_code=404, detail=f"unknown session {sid}")
        return sessions[sid]

    @app.post("/sanity_check")
    def api_sanity(payload: PuzzleModel):
        board = load_puzzle_string(create_empty_board(), payload.puzzle)
        return sanity_check(board)

    @app.post("/compute_candidates")
    def api_cands(payload: PuzzleModel):
        board = load_puzzle_string(create_empty_board(), payload.puzzle)
        cands: Dict[str, List[int]] = {}
        for r in range(9):
            for c in range(9):
                if board[r][c].value is None:
                    cands[f"r{r + 1}c{c + 1}"] = sorted(legal_digits(board, r, c))
        return {"candidates": cands}

    @app.post("/sessions")
    def api_create(req: CreateSessionRequest):
        session_oracle = KnownSolutionOracle(req.solution) if req.solution else oracle
        session = GameSession(
            oracle=session_oracle,
            generator=generator,
            hint_source=hint_source,
            config=config or load_engine_config(),
        )
        if req.difficulty is not None:
            session.difficulty = req.difficulty
        sid = uuid.uuid4().hex
        sessions[sid] = session
        return {"id": sid, **session.snapshot()}

    @app.get("/sessions/{sid}")
    def api_get(sid: str):
        return get_session(sid).snapshot()

    @app.delete("/sessions/{sid}")
    def api_drop(sid: str):
        get_session(sid)
        del sessions[sid]
        return {"ok": True}

    @app.post("/sessions/{sid}/new")
    def api_new(sid: str):
        session = get_session(sid)
        session.start_new_game()
        return session.snapshot()

    @app.post("/sessions/{sid}/load")
    def api_load(sid: str, req: LoadRequest):
        session = get_session(sid)
        if not session.load_puzzle(req.puzzle, req.difficulty, req.color_mode):
            raise HTTPException(status_code=409, detail=session.error_message)
        return session.snapshot()

    @app.post("/sessions/{sid}/generate")
    def api_generate(sid: str, req: GenerateRequest):
        session = get_session(sid)
        try:
            ok = session.generate_puzzle(req.difficulty)
        except (RuntimeError, KeyError) as e:
            raise HTTPException(status_code=409, detail=str(e))
        if not ok:
            raise HTTPException(status_code=409, detail=session.error_message)
        return session.snapshot()

    @app.post("/sessions/{sid}/start")
    def api_start(sid: str, req: StartRequest):
        session = get_session(sid)
        starters = {
            "solving": session.start_game,
            "manual": session.start_manual_game,
            "competition": session.start_competition_game,
        }
        try:
            ok = starters[req.mode]()
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        if not ok:
            raise HTTPException(status_code=400, detail=session.error_message)
        return session.snapshot()

    @app.post("/sessions/{sid}/challenge")
    def api_challenge(sid: str, req: LoadRequest):
        session = get_session(sid)
        try:
            ok = session.start_challenge(req.puzzle, req.difficulty, req.color_mode)
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        if not ok:
            raise HTTPException(status_code=400, detail=session.error_message)
        return session.snapshot()

    @app.post("/sessions/{sid}/select")
    def api_select(sid: str, req: SelectRequest):
        session = get_session(sid)
        session.select(req.row, req.col)
        return session.snapshot()

    @app.post("/sessions/{sid}/deselect")
    def api_deselect(sid: str):
        session = get_session(sid)
        session.clear_selection()
        return session.snapshot()

    @app.post("/sessions/{sid}/move")
    def api_move(sid: str, req: MoveRequest):
        session = get_session(sid)
        session.move_selection(req.direction)
        return session.snapshot()

    @app.post("/sessions/{sid}/input")
    def api_input(sid: str, req: InputRequest):
        session = get_session(sid)
        if req.mode is not None:
            session.set_input_mode(req.mode)
        result = session.handle_input(req.digit)
        return {"changed": result.changed, **session.snapshot()}

    @app.post("/sessions/{sid}/delete")
    def api_delete(sid: str):
        session = get_session(sid)
        result = session.handle_delete()
        return {"changed": result.changed, **session.snapshot()}

    @app.post("/sessions/{sid}/undo")
    def api_undo(sid: str):
        session = get_session(sid)
        changed = session.undo()
        return {"changed": changed, **session.snapshot()}

    @app.post("/sessions/{sid}/hint")
    def api_hint(sid: str):
        session = get_session(sid)
        session.get_hint()
        return session.snapshot()

    @app.post("/sessions/{sid}/hint/apply")
    def api_apply_hint(sid: str):
        session = get_session(sid)
        changed = session.apply_current_hint()
        return {"changed": changed, **session.snapshot()}

    return app


app = create_app()
