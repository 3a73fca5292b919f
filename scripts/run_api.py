# scripts/run_api.py
from __future__ import annotations

import argparse

import uvicorn

from inmobiliaria.logging_config import configure_logging


def main() -> None:
    ap = argparse.ArgumentParser(description="Run the listing import API")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--reload", action="store_true")
    args = ap.parse_args()

    configure_logging()
    uvicorn.run(
        "inmobiliaria.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
