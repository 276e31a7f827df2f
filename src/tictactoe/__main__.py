"""Entry point for running the game via ``python -m tictactoe``."""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

import uvicorn

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def server_options(env: Optional[Mapping[str, str]] = None) -> Dict[str, object]:
    """Read ``TICTACTOE_HOST``, ``TICTACTOE_PORT`` and ``TICTACTOE_LOG_LEVEL``.

    A port outside 1-65535 or an unknown log level raises ``ValueError`` so a
    misconfigured server fails at startup instead of binding somewhere odd.
    """

    env = os.environ if env is None else env
    port = int(env.get("TICTACTOE_PORT", "8000"))
    if not 0 < port < 65536:
        raise ValueError(f"TICTACTOE_PORT must be between 1 and 65535, got {port}")
    log_level = env.get("TICTACTOE_LOG_LEVEL", "info").strip().lower()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"TICTACTOE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
        )
    return {
        "host": env.get("TICTACTOE_HOST", "0.0.0.0"),
        "port": port,
        "log_level": log_level,
    }


def main() -> None:
    """Start the FastAPI-powered tic-tac-toe web server."""

    uvicorn.run("tictactoe.ui:app", reload=False, **server_options())


if __name__ == "__main__":
    main()
