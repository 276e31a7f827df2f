"""FastAPI-powered web UI for playing tic-tac-toe against the computer."""

from __future__ import annotations

import logging
import math
import os
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import threading

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import Difficulty, select_computer_move
from .game import (
    COMPUTER,
    DRAW,
    HUMAN,
    WIN,
    Board,
    InvalidMove,
    Outcome,
    Player,
    apply_move,
    evaluate,
    legal_moves,
    new_board,
)

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = Difficulty.MEDIUM
DIFFICULTY_CHOICES = ", ".join(d.value for d in Difficulty)
DEFAULT_AI_THINK_DELAY = 0.6
MAX_AI_THINK_DELAY = 5.0


def _read_think_delay() -> float:
    """Seconds the computer waits before answering, from ``TICTACTOE_AI_DELAY``."""

    raw = os.environ.get("TICTACTOE_AI_DELAY")
    if raw is None:
        return DEFAULT_AI_THINK_DELAY
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring malformed TICTACTOE_AI_DELAY=%r", raw)
        return DEFAULT_AI_THINK_DELAY
    if math.isnan(value):
        return DEFAULT_AI_THINK_DELAY
    return min(max(value, 0.0), MAX_AI_THINK_DELAY)


AI_THINK_DELAY: float = _read_think_delay()


@dataclass
class Scoreboard:
    player: int = 0
    computer: int = 0
    draws: int = 0

    def record(self, outcome: Outcome) -> None:
        if outcome.status == DRAW:
            self.draws += 1
        elif outcome.winner == HUMAN:
            self.player += 1
        elif outcome.winner == COMPUTER:
            self.computer += 1

    def reset(self) -> None:
        self.player = self.computer = self.draws = 0


@dataclass
class GameSession:
    """Container for one browser's board, difficulty, and running score."""

    difficulty: Difficulty = DEFAULT_DIFFICULTY
    board: Board = field(default_factory=new_board)
    current_player: Player = HUMAN
    outcome: Outcome = field(default_factory=lambda: evaluate(new_board()))
    scores: Scoreboard = field(default_factory=Scoreboard)
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    # Bumped on every reset so a stale AI task cannot touch the new board
    generation: int = 0
    rng: random.Random = field(default_factory=random.Random, repr=False)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def play(self, index: int, player: Player) -> None:
        self.board = apply_move(self.board, index, player)
        self.move_log.append({"player": player, "cellIndex": index})
        self.outcome = evaluate(self.board)
        if self.outcome.finished:
            self.scores.record(self.outcome)
        else:
            self.current_player = COMPUTER if player == HUMAN else HUMAN

    def reset_board(self) -> None:
        self.board = new_board()
        self.current_player = HUMAN
        self.outcome = evaluate(self.board)
        self.move_log = []
        self.ai_pending = False
        self.generation += 1


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Play tic-tac-toe against the computer")


def _parse_difficulty(value: object) -> Difficulty:
    if isinstance(value, str):
        value = value.strip().lower()
    try:
        return Difficulty(value)
    except ValueError as exc:
        raise ValueError(
            f"Unsupported difficulty {value!r}. Choose one of {DIFFICULTY_CHOICES}."
        ) from exc


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    difficulty: Difficulty = Field(
        default=DEFAULT_DIFFICULTY,
        description="Computer strength: easy, medium or hard",
    )

    @field_validator("difficulty", mode="before")
    @classmethod
    def ensure_supported_difficulty(cls, value: object) -> Difficulty:
        return _parse_difficulty(value)


class DifficultyRequest(NewGameRequest):
    """Request payload for switching difficulty on an existing game."""


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _create_session(difficulty: Difficulty) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(difficulty=difficulty)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created game %s at %s difficulty", session_id, difficulty.value)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str, generation: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(AI_THINK_DELAY)

    with session.lock:
        if session.generation != generation:
            return
        try:
            if session.outcome.finished or session.current_player != COMPUTER:
                return
            move = select_computer_move(
                session.board, session.difficulty, session.rng, COMPUTER
            )
            if move is None:
                return
            session.play(move, COMPUTER)
            if session.outcome.finished:
                logger.info("Game %s finished: %s", game_id, _status_message(session))
        finally:
            session.ai_pending = False


def _status_message(session: GameSession) -> str:
    outcome = session.outcome
    if outcome.status == WIN:
        return "You win!" if outcome.winner == HUMAN else "The computer wins!"
    if outcome.status == DRAW:
        return "It's a draw!"
    if session.current_player == HUMAN:
        return "You are X. Your turn."
    return "The computer (O) is thinking…"


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        outcome = session.outcome
        state: Dict[str, object] = {
            "id": game_id,
            "board": [c if c in (HUMAN, COMPUTER) else "" for c in session.board],
            "currentPlayer": session.current_player,
            "difficulty": session.difficulty.value,
            "status": outcome.status,
            "winner": outcome.winner,
            "winningLine": list(outcome.line) if outcome.line else None,
            "scores": {
                "player": session.scores.player,
                "computer": session.scores.computer,
                "draws": session.scores.draws,
            },
            "availableMoves": [] if outcome.finished else legal_moves(session.board),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
            "message": _status_message(session),
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        if session.outcome.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending or session.current_player != HUMAN:
            raise HTTPException(
                status_code=400, detail="The computer is completing its move"
            )

        try:
            session.play(cell_index, HUMAN)
        except InvalidMove as exc:
            logger.debug("Rejected move %s on game %s: %s", cell_index, game_id, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        if session.outcome.finished:
            logger.info("Game %s finished: %s", game_id, _status_message(session))
        should_schedule_ai = session.current_player == COMPUTER
        if should_schedule_ai:
            session.ai_pending = True
        generation = session.generation

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, generation)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.difficulty)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.reset_board()
    logger.info("Reset board for game %s", game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset-score")
def reset_score(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.scores.reset()
        session.reset_board()
    logger.info("Reset score for game %s", game_id)
    return _serialize_session(game_id, session)


@app.put("/api/game/{game_id}/difficulty")
def change_difficulty(game_id: str, request: DifficultyRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.difficulty = request.difficulty
        session.reset_board()
    logger.info("Game %s switched to %s", game_id, request.difficulty.value)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-Tac-Toe</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(460px, 100%);
        text-align: center;
      }
      h1 {
        margin: 0 0 1rem;
        letter-spacing: 0.06em;
      }
      .controls {
        display: flex;
        gap: 0.75rem;
        justify-content: center;
        flex-wrap: wrap;
        margin-bottom: 1.25rem;
      }
      button,
      select {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
        font-family: inherit;
      }
      #status {
        min-height: 1.6rem;
        font-weight: 600;
        margin-bottom: 1rem;
      }
      #status.winner {
        color: #1f8a4c;
      }
      #status.draw {
        color: #8a6d1f;
      }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 8px;
        margin: 0 auto 1.5rem;
        width: min(300px, 100%);
      }
      .cell {
        aspect-ratio: 1;
        border-radius: 12px;
        background: #eef1ff;
        font-size: 2.6rem;
        font-weight: 700;
        display: flex;
        align-items: center;
        justify-content: center;
        cursor: pointer;
        user-select: none;
      }
      .cell.taken {
        cursor: default;
      }
      .cell.x {
        color: #3a66ff;
      }
      .cell.o {
        color: #ff4f6d;
      }
      .cell.winning {
        background: #c9f5d9;
      }
      .scores {
        display: flex;
        justify-content: space-around;
      }
      .scores strong {
        display: block;
        font-size: 1.4rem;
      }
      #message {
        min-height: 1.2rem;
        color: #b3261e;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tic-Tac-Toe</h1>
      <div class=\"controls\">
        <select id=\"difficultySelect\">
          <option value=\"easy\">Easy</option>
          <option value=\"medium\" selected>Medium</option>
          <option value=\"hard\">Hard</option>
        </select>
        <button id=\"resetBtn\">New game</button>
        <button id=\"resetScoreBtn\">Reset score</button>
      </div>
      <div id=\"status\">Setting up your game…</div>
      <div id=\"board\"></div>
      <div class=\"scores\">
        <div>You<strong id=\"playerScore\">0</strong></div>
        <div>Draws<strong id=\"drawScore\">0</strong></div>
        <div>Computer<strong id=\"computerScore\">0</strong></div>
      </div>
      <p id=\"message\"></p>
    </main>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const difficultyEl = document.getElementById('difficultySelect');
      const playerScoreEl = document.getElementById('playerScore');
      const computerScoreEl = document.getElementById('computerScore');
      const drawScoreEl = document.getElementById('drawScore');
      let gameId = null;
      let gameState = null;
      let pollHandle = null;
      let isRequestPending = false;

      for (let i = 0; i < 9; i++) {
        const cell = document.createElement('div');
        cell.className = 'cell';
        cell.dataset.index = String(i);
        cell.addEventListener('click', () => sendMove(i));
        boardEl.appendChild(cell);
      }

      async function request(path, options = {}) {
        const response = await fetch(path, {
          headers: { 'Content-Type': 'application/json' },
          ...options,
        });
        const payload = await response.json().catch(() => ({}));
        if (!response.ok) {
          const detail = typeof payload?.detail === 'string' ? payload.detail : 'Request failed';
          throw new Error(detail);
        }
        return payload;
      }

      function render() {
        if (!gameState) return;
        const line = gameState.winningLine || [];
        boardEl.querySelectorAll('.cell').forEach((cell, index) => {
          const mark = gameState.board[index];
          cell.textContent = mark;
          cell.className = 'cell';
          if (mark) cell.classList.add('taken', mark.toLowerCase());
          if (line.includes(index)) cell.classList.add('winning');
        });
        statusEl.textContent = gameState.message;
        statusEl.classList.toggle('winner', gameState.status === 'win');
        statusEl.classList.toggle('draw', gameState.status === 'draw');
        playerScoreEl.textContent = gameState.scores.player;
        computerScoreEl.textContent = gameState.scores.computer;
        drawScoreEl.textContent = gameState.scores.draws;
        difficultyEl.value = gameState.difficulty;
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        render();
        if (gameState.aiPending) {
          ensurePolling();
        }
      }

      function ensurePolling() {
        if (pollHandle) return;
        pollHandle = window.setTimeout(poll, 250);
      }

      async function poll() {
        pollHandle = null;
        if (!gameId) return;
        try {
          setState(await request(`/api/game/${gameId}`));
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      async function run(action) {
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await action());
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      function sendMove(cellIndex) {
        if (!gameState || gameState.status !== 'in_progress' || gameState.aiPending) return;
        if (gameState.board[cellIndex]) return;
        run(() =>
          request(`/api/game/${gameId}/move`, {
            method: 'POST',
            body: JSON.stringify({ cellIndex }),
          })
        );
      }

      document.getElementById('resetBtn').addEventListener('click', () =>
        run(() => request(`/api/game/${gameId}/reset`, { method: 'POST' }))
      );
      document.getElementById('resetScoreBtn').addEventListener('click', () =>
        run(() => request(`/api/game/${gameId}/reset-score`, { method: 'POST' }))
      );
      difficultyEl.addEventListener('change', () =>
        run(() =>
          request(`/api/game/${gameId}/difficulty`, {
            method: 'PUT',
            body: JSON.stringify({ difficulty: difficultyEl.value }),
          })
        )
      );

      run(() =>
        request('/api/game', {
          method: 'POST',
          body: JSON.stringify({ difficulty: difficultyEl.value }),
        })
      );
    </script>
  </body>
</html>
"""
