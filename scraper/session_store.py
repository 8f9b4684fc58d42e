"""
scraper/session_store.py
Reads and writes the saved Untappd session (a JSON array of cookie objects).
The file is always replaced wholesale, never merged.
"""
import json
from pathlib import Path


def load_cookies(path: Path) -> list[dict] | None:
    """Return saved cookies, or None when no session has been stored yet."""
    path = Path(path)
    if not path.exists():
        return None
    with open(path) as f:
        return json.load(f)


def save_cookies(path: Path, cookies: list[dict]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(cookies, f, indent=2)


async def apply_saved_session(context, path: Path) -> bool:
    """Load saved cookies into a browser context. Returns True if any were applied."""
    cookies = load_cookies(path)
    if not cookies:
        return False
    await context.add_cookies(cookies)
    print("Loaded session cookies")
    return True
