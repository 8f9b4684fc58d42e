"""
scraper/scrape.py
Scrapes one user's distinct-beer check-in history from their Untappd profile.
Reuses a saved session, expands the full list, then extracts every beer card.
Run: python scrape.py [--db] [--headless] [--full-counts]
Output: ../data/beers.json
"""
import argparse
import asyncio
import re

from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

from config import COOKIE_PATH, DATABASE_URL, MERGE_CONCURRENCY, OUTPUT_PATH, PROFILE_URL
from export import create_db_engine, merge_records, summarize, write_json
from paginate import ITEM_SEL, PageSurface, expand_all
from session_guard import ensure_session
from session_store import apply_saved_session

MISSING = "N/A"
RECORD_FIELDS = ('name', 'brewery', 'rating', 'style', 'abv', 'total_checkins')

RATING_RE = re.compile(r'\((\d+(\.\d+)?)\)')
# First digit run only: "1,204 check-ins" -> "1". Kept for existing consumers.
CHECKINS_RE = re.compile(r'\d+')
CHECKINS_FULL_RE = re.compile(r'\d{1,3}(?:,\d{3})+|\d+')


def _text(card, selector: str) -> str | None:
    node = card.select_one(selector)
    if node is None:
        return None
    return node.get_text(' ', strip=True) or None


def parse_rating(text: str | None) -> str:
    """Pull the user's own rating out of text like 'Their Rating (4.25)'."""
    match = RATING_RE.search(text or '')
    return match.group(1) if match else MISSING


def parse_checkin_count(text: str | None, full: bool = False) -> str:
    if full:
        match = CHECKINS_FULL_RE.search(text or '')
        return match.group(0).replace(',', '') if match else MISSING
    match = CHECKINS_RE.search(text or '')
    return match.group(0) if match else MISSING


def parse_checkins(html: str, full_counts: bool = False) -> list[dict]:
    """Parse every beer card in document order into a check-in record.

    All six fields are always present; anything missing on the card becomes "N/A".
    """
    soup = BeautifulSoup(html, 'html.parser')
    records = []
    for card in soup.select(ITEM_SEL):
        records.append({
            'name':           _text(card, '.name') or MISSING,
            'brewery':        _text(card, '.brewery') or MISSING,
            'rating':         parse_rating(_text(card, '.ratings .you')),
            'style':          _text(card, '.style') or MISSING,
            'abv':            _text(card, '.abv') or MISSING,
            'total_checkins': parse_checkin_count(_text(card, '.details .check-ins'), full_counts),
        })
    return records


async def scrape_checkins(page, full_counts: bool = False) -> list[dict]:
    """Log in if needed, expand the whole list and extract it."""
    await page.goto(PROFILE_URL, wait_until='networkidle')
    if await ensure_session(page, COOKIE_PATH):
        await page.goto(PROFILE_URL, wait_until='networkidle')

    await expand_all(PageSurface(page))
    return parse_checkins(await page.content(), full_counts)


async def export_to_db(records: list[dict]) -> None:
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not set; cannot forward records to the database.")
    engine = create_db_engine(DATABASE_URL, pool_size=MERGE_CONCURRENCY)
    try:
        outcomes = await merge_records(records, engine, MERGE_CONCURRENCY)
    finally:
        engine.dispose()
    ok, failed = summarize(outcomes)
    print(f"Data Import Complete! {ok} merged, {failed} failed.")


async def run_in_browser(browser, args) -> list[dict]:
    context = await browser.new_context()
    await apply_saved_session(context, COOKIE_PATH)
    page = await context.new_page()

    records = await scrape_checkins(page, args.full_counts)
    print(f"Total Beers Scraped: {len(records)}")
    write_json(records, args.output)
    print(f"Beers saved to {args.output}")

    if args.db:
        await export_to_db(records)
    return records


async def run(args) -> list[dict] | None:
    """One full scrape. Errors are reported, never re-raised."""
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=args.headless, slow_mo=50)
            try:
                return await run_in_browser(browser, args)
            finally:
                await browser.close()
    except Exception as e:
        print(f"Error: {e}")
        return None


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Scrape an Untappd user's beer history.")
    ap.add_argument('--db', action='store_true', help='Also merge each beer into the database')
    ap.add_argument('--headless', action='store_true', help='Run without a visible browser')
    ap.add_argument('--full-counts', action='store_true',
                    help='Keep the whole check-in count ("1,204" -> "1204")')
    ap.add_argument('--output', '-o', default=OUTPUT_PATH, help='Where to write the JSON')
    return ap.parse_args(argv)


if __name__ == '__main__':
    print("Scraping Untappd check-in history...")
    asyncio.run(run(parse_args()))
