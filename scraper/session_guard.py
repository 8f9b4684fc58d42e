"""
scraper/session_guard.py
Detects an expired Untappd session and hands control to the operator for a
manual login (Apple ID etc. cannot be automated), then saves the fresh cookies.
"""
import asyncio
import sys
import threading
from pathlib import Path

from config import LOGIN_TIMEOUT_SECONDS, LOGIN_URL
from session_store import save_cookies

LOGIN_PROMPT_SEL = 'a[href*="login"]'


class LoginTimeout(TimeoutError):
    """Raised when the operator does not confirm a manual login in time."""


class LoginAborted(RuntimeError):
    """Raised when stdin closes before the operator confirms a login."""


async def is_logged_out(page) -> bool:
    return await page.query_selector(LOGIN_PROMPT_SEL) is not None


async def wait_for_operator(prompt: str, timeout: float = LOGIN_TIMEOUT_SECONDS) -> None:
    """Block until the operator presses ENTER.

    Raises LoginTimeout when nobody answers in time and LoginAborted when
    stdin hits end of input, so a closed stdin is never taken as a login.

    stdin is read on a daemon thread so an abandoned read never keeps the
    process alive after the timeout fires.
    """
    loop = asyncio.get_running_loop()
    signalled = loop.create_future()

    def _release(error):
        if signalled.done():
            return
        if error is None:
            signalled.set_result(None)
        else:
            signalled.set_exception(error)

    def _read():
        error = None
        try:
            # EOF reads as an empty string, a bare ENTER as "\n"
            if not sys.stdin.readline():
                error = LoginAborted("stdin closed before login was confirmed")
        except Exception as e:
            error = LoginAborted(f"could not read stdin: {e}")
        try:
            loop.call_soon_threadsafe(_release, error)
        except RuntimeError:
            pass  # loop already closed

    print(prompt)
    threading.Thread(target=_read, daemon=True).start()
    try:
        await asyncio.wait_for(signalled, timeout)
    except asyncio.TimeoutError:
        raise LoginTimeout(f"no login confirmation after {timeout:.0f}s") from None


async def ensure_session(page, cookie_path: Path, wait=wait_for_operator,
                         timeout: float = LOGIN_TIMEOUT_SECONDS) -> bool:
    """Make sure the loaded page is authenticated.

    Returns True when a manual login happened and a new session was saved,
    False when the existing session was still valid.
    """
    if not await is_logged_out(page):
        print("Already logged in!")
        return False

    print("Session expired. Please log in manually.")
    await page.goto(LOGIN_URL, wait_until='networkidle')
    await wait("Log in manually with Apple ID, then press ENTER here...", timeout)

    cookies = await page.context.cookies()
    save_cookies(cookie_path, cookies)
    print("Session saved! Next time, login will be skipped.")
    return True
