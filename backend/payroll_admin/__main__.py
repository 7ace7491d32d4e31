"""Command-line entry point for the Payroll Admin backend."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Sequence

from .config import get_settings
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


async def _init_db() -> None:
    from .database import create_all_tables

    await create_all_tables()
    logger.info("Database tables created")


async def _seed_demo(account_id: str) -> dict:
    from .database import AsyncSessionLocal, create_all_tables
    from .services.seed import seed_demo

    await create_all_tables()
    async with AsyncSessionLocal() as session:
        return await seed_demo(session, account_id)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse CLI arguments and dispatch to the requested workflow."""

    parser = argparse.ArgumentParser(
        prog="payroll_admin",
        description="Run the Payroll Admin API server or one of its helper utilities.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    sub.add_parser("init-db", help="Create all database tables.")

    seed = sub.add_parser("seed-demo", help="Load demo employees, periods, advances and loans.")
    seed.add_argument("--account-id", default="demo")

    sub.add_parser("diag-db", help="Print tables and row counts per tenant and exit.")

    args = parser.parse_args(None if argv is None else list(argv))
    configure_logging(get_settings().log_level)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("payroll_admin.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == "init-db":
        asyncio.run(_init_db())
        return 0

    if args.command == "seed-demo":
        counts = asyncio.run(_seed_demo(args.account_id))
        if not counts:
            print(f"Tenant {args.account_id!r} already has data; nothing seeded.")
        else:
            print(", ".join(f"{name}: {count}" for name, count in counts.items()))
        return 0

    from .services.diagnostics import run as run_db_diagnostics

    asyncio.run(run_db_diagnostics())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
