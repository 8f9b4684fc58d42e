import asyncio
import io
import json
import os
import sys

import pytest
from session_guard import LoginAborted, LoginTimeout, ensure_session, wait_for_operator
from session_store import apply_saved_session, load_cookies, save_cookies

COOKIES = [
    {'name': 'untappd_user_v3_e', 'value': 'abc123', 'domain': '.untappd.com',
     'path': '/', 'expires': 1893456000, 'httpOnly': True, 'secure': True, 'sameSite': 'Lax'},
]


class FakeContext:
    def __init__(self, cookies=()):
        self._cookies = list(cookies)
        self.added = []

    async def cookies(self):
        return list(self._cookies)

    async def add_cookies(self, cookies):
        self.added.extend(cookies)


class FakePage:
    def __init__(self, logged_out, context=None):
        self.logged_out = logged_out
        self.context = context or FakeContext(COOKIES)
        self.visited = []

    async def query_selector(self, selector):
        assert selector == 'a[href*="login"]'
        return object() if self.logged_out else None

    async def goto(self, url, **kwargs):
        self.visited.append(url)


class FakeOperator:
    def __init__(self):
        self.prompts = []

    async def __call__(self, prompt, timeout):
        self.prompts.append(prompt)


# --- session store ---

def test_load_cookies_missing_file(tmp_path):
    assert load_cookies(tmp_path / 'cookies.json') is None


def test_save_then_load_cookies(tmp_path):
    path = tmp_path / 'nested' / 'cookies.json'
    save_cookies(path, COOKIES)
    assert load_cookies(path) == COOKIES


def test_save_cookies_replaces_wholesale(tmp_path):
    path = tmp_path / 'cookies.json'
    save_cookies(path, COOKIES + [{'name': 'old', 'value': '1'}])
    save_cookies(path, COOKIES)
    assert json.loads(path.read_text()) == COOKIES


def test_apply_saved_session(tmp_path):
    path = tmp_path / 'cookies.json'
    save_cookies(path, COOKIES)
    context = FakeContext()
    assert asyncio.run(apply_saved_session(context, path)) is True
    assert context.added == COOKIES


def test_apply_saved_session_without_file(tmp_path):
    context = FakeContext()
    assert asyncio.run(apply_saved_session(context, tmp_path / 'cookies.json')) is False
    assert context.added == []


# --- session guard ---

def test_logged_in_page_proceeds_without_side_effects(tmp_path):
    page = FakePage(logged_out=False)
    operator = FakeOperator()
    path = tmp_path / 'cookies.json'

    assert asyncio.run(ensure_session(page, path, wait=operator)) is False
    assert operator.prompts == []
    assert page.visited == []
    assert not path.exists()


def test_expired_session_waits_for_operator_and_saves(tmp_path):
    page = FakePage(logged_out=True)
    operator = FakeOperator()
    path = tmp_path / 'cookies.json'
    save_cookies(path, [{'name': 'stale', 'value': 'x'}])

    assert asyncio.run(ensure_session(page, path, wait=operator)) is True
    assert len(operator.prompts) == 1
    assert page.visited == ['https://untappd.com/login']
    assert load_cookies(path) == COOKIES


def test_probe_failure_propagates(tmp_path):
    class BrokenPage(FakePage):
        async def query_selector(self, selector):
            raise ConnectionError('net::ERR_INTERNET_DISCONNECTED')

    with pytest.raises(ConnectionError):
        asyncio.run(ensure_session(BrokenPage(logged_out=True), tmp_path / 'c.json',
                                   wait=FakeOperator()))
    assert not (tmp_path / 'c.json').exists()


def test_operator_timeout_prevents_session_write(tmp_path):
    async def never(prompt, timeout):
        raise LoginTimeout('no login confirmation after 0s')

    path = tmp_path / 'cookies.json'
    with pytest.raises(LoginTimeout):
        asyncio.run(ensure_session(FakePage(logged_out=True), path, wait=never))
    assert not path.exists()


def test_closed_stdin_keeps_previous_session(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, 'stdin', io.StringIO(''))
    path = tmp_path / 'cookies.json'
    save_cookies(path, [{'name': 'good', 'value': '1'}])
    page = FakePage(logged_out=True, context=FakeContext([{'name': 'anon', 'value': 'logged-out'}]))

    with pytest.raises(LoginAborted):
        asyncio.run(ensure_session(page, path, timeout=2))
    assert load_cookies(path) == [{'name': 'good', 'value': '1'}]


# --- operator signal ---

def test_wait_for_operator_returns_on_enter(monkeypatch):
    monkeypatch.setattr(sys, 'stdin', io.StringIO('\n'))
    asyncio.run(wait_for_operator('press enter', timeout=5))


def test_wait_for_operator_times_out(monkeypatch):
    read_fd, write_fd = os.pipe()
    stdin = os.fdopen(read_fd)
    monkeypatch.setattr(sys, 'stdin', stdin)
    try:
        with pytest.raises(LoginTimeout):
            asyncio.run(wait_for_operator('press enter', timeout=0.05))
    finally:
        os.close(write_fd)
        stdin.close()


def test_wait_for_operator_rejects_end_of_input(monkeypatch):
    monkeypatch.setattr(sys, 'stdin', io.StringIO(''))
    with pytest.raises(LoginAborted):
        asyncio.run(wait_for_operator('press enter', timeout=5))
