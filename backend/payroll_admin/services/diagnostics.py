"""Lightweight database diagnostics printed by ``python -m payroll_admin diag-db``."""
from __future__ import annotations

from typing import Dict, List

from sqlalchemy import func, inspect, select

from ..database import AsyncSessionLocal, engine
from ..models import Base


async def collect() -> Dict[str, object]:
    async with engine.connect() as conn:
        names: List[str] = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    counts: Dict[str, Dict[str, int]] = {}
    async with AsyncSessionLocal() as session:
        for table in Base.metadata.sorted_tables:
            if table.name not in names:
                continue
            if "account_id" in table.c:
                rows = await session.execute(
                    select(table.c.account_id, func.count()).group_by(table.c.account_id)
                )
                counts[table.name] = {account: total for account, total in rows.all()}
            else:
                total = await session.execute(select(func.count()).select_from(table))
                counts[table.name] = {"*": int(total.scalar_one())}
    return {"url": engine.url.render_as_string(hide_password=True), "tables": names, "counts": counts}


async def run() -> None:
    report = await collect()
    print("DB URL:", report["url"])
    print("Tables:", ", ".join(report["tables"]) or "<none>")
    for table, by_tenant in report["counts"].items():
        summary = ", ".join(f"{tenant}={count}" for tenant, count in sorted(by_tenant.items()))
        print(f"{table}: {summary or 0}")
