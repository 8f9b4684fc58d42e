"""
scraper/export.py
Writes scraped check-ins to beers.json and optionally pushes each one through
the merge_beer_log stored procedure.
"""
import asyncio
import json
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

MERGE_SQL = text(
    "CALL merge_beer_log(:name, :brewery, :rating, :style, :abv, :total_checkins)"
)


@dataclass
class MergeOutcome:
    record: dict
    ok: bool
    error: str | None = None


def write_json(records: list[dict], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(records, f, indent=2)


def normalize_database_url(url: str) -> str:
    """Point bare postgres URLs at the psycopg driver."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def create_db_engine(url: str, pool_size: int = 5) -> Engine:
    return create_engine(normalize_database_url(url), pool_pre_ping=True, pool_size=pool_size)


def merge_one(engine: Engine, record: dict) -> None:
    with engine.begin() as conn:
        conn.execute(MERGE_SQL, record)


async def merge_records(records: list[dict], engine: Engine, concurrency: int = 5) -> list[MergeOutcome]:
    """Merge every record, at most `concurrency` calls in flight.

    Waits for all calls to finish. Outcomes come back in record order; one
    failed record never cancels the others.
    """
    sem = asyncio.Semaphore(max(1, concurrency))

    async def _merge(record: dict) -> MergeOutcome:
        async with sem:
            try:
                await asyncio.to_thread(merge_one, engine, record)
            except Exception as e:
                print(f"  {record.get('name')}: MERGE FAILED — {e}")
                return MergeOutcome(record, ok=False, error=str(e))
        return MergeOutcome(record, ok=True)

    return list(await asyncio.gather(*(_merge(r) for r in records)))


def summarize(outcomes: list[MergeOutcome]) -> tuple[int, int]:
    ok = sum(1 for o in outcomes if o.ok)
    return ok, len(outcomes) - ok
