# src/game/online.py
"""
Hosted leaderboard + profiles (Supabase: GoTrue auth and PostgREST tables).

Tables used:
  profiles(id, username)
  scores(user_id, username, score, difficulty, character, created_at)

The game itself only ever calls `ScoreReporter.submit`, which returns at once;
the HTTP request runs on a background asyncio loop and its outcome is only logged.

Usage (from repo root):
  python -m src.game.online leaderboard --difficulty EASY --limit 10
  python -m src.game.online best --email me@x.io --password ...
  python -m src.game.online history --email me@x.io --password ...
  python -m src.game.online signup --email me@x.io --password ... --username dogfan
"""
from __future__ import annotations
import argparse
import asyncio
import concurrent.futures
import logging
import os
import sys
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)

ENV_URL = "BARKOUR_SUPABASE_URL"
ENV_KEY = "BARKOUR_SUPABASE_KEY"
SCORE_COLUMNS = "username,score,difficulty,character,created_at"
DEFAULT_TIMEOUT_S = 10.0


class ScoreStoreError(RuntimeError):
    """Any failure talking to the hosted store (network, HTTP status, bad payload)."""


@dataclass(frozen=True)
class Session:
    """Authentication as the game sees it: a yes/no plus a display name."""
    user_id: Optional[str] = None
    username: str = "Guest"
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and self.access_token)


GUEST = Session()


@dataclass(frozen=True)
class ScoreRecord:
    username: str
    score: int
    difficulty: str
    character: str
    created_at: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any], username: str = "") -> "ScoreRecord":
        if not isinstance(row, dict):
            raise ScoreStoreError(f"unexpected score row: {row!r:.80}")
        try:
            score = int(row.get("score", 0))
        except (TypeError, ValueError) as e:
            raise ScoreStoreError(f"bad score in row: {row!r:.80}") from e
        return cls(
            username=str(row.get("username") or username),
            score=score,
            difficulty=str(row.get("difficulty", "")),
            character=str(row.get("character", "")),
            created_at=str(row.get("created_at") or ""),
        )


def _as_rows(data: Any) -> List[Dict[str, Any]]:
    """PostgREST answers a list of objects; anything else is a bad payload."""
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise ScoreStoreError(f"expected a list of rows, got {type(data).__name__}")
    return data


class SupabaseClient:
    """Thin async client. Every method raises ScoreStoreError on failure."""
    def __init__(self, base_url: str, api_key: str, timeout_s: float = DEFAULT_TIMEOUT_S):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_env(cls) -> Optional["SupabaseClient"]:
        url, key = os.environ.get(ENV_URL), os.environ.get(ENV_KEY)
        if not url or not key:
            return None
        return cls(url, key)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self):
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, *exc):
        await self.close()

    def _headers(self, session: Optional[Session] = None) -> Dict[str, str]:
        token = session.access_token if session and session.access_token else self.api_key
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, *, session: Optional[Session] = None,
                       params: Optional[Dict[str, str]] = None, json: Any = None,
                       extra_headers: Optional[Dict[str, str]] = None) -> Any:
        http = await self._ensure_session()
        headers = self._headers(session)
        if extra_headers:
            headers.update(extra_headers)
        url = f"{self.base_url}{path}"
        try:
            async with http.request(method, url, params=params, json=json, headers=headers) as resp:
                if resp.status >= 400:
                    detail = await resp.text()
                    raise ScoreStoreError(f"{method} {path} -> HTTP {resp.status}: {detail[:200]}")
                if resp.status == 204:
                    return None
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ScoreStoreError(f"{method} {path} failed: {e}") from e
        except ValueError as e:  # body is not JSON
            raise ScoreStoreError(f"{method} {path} returned an unreadable body: {e}") from e

    # -------------------- Auth --------------------

    async def sign_up(self, email: str, password: str, username: str) -> None:
        await self._request("POST", "/auth/v1/signup",
                            json={"email": email, "password": password,
                                  "data": {"username": username}})

    async def sign_in(self, email: str, password: str) -> Session:
        data = await self._request("POST", "/auth/v1/token",
                                   params={"grant_type": "password"},
                                   json={"email": email, "password": password})
        try:
            token = data["access_token"]
            user_id = data["user"]["id"]
        except (TypeError, KeyError) as e:
            raise ScoreStoreError(f"unexpected sign-in payload: {e}") from e
        partial = Session(user_id=user_id, access_token=token)
        username = await self.load_username(partial)
        return Session(user_id=user_id, username=username or "Guest", access_token=token)

    async def sign_out(self, session: Session) -> None:
        if session.is_authenticated:
            await self._request("POST", "/auth/v1/logout", session=session)

    async def load_username(self, session: Session) -> Optional[str]:
        rows = await self._request("GET", "/rest/v1/profiles", session=session,
                                   params={"id": f"eq.{session.user_id}", "select": "username"})
        rows = _as_rows(rows)
        if rows:
            return rows[0].get("username")
        return None

    # -------------------- Scores --------------------

    async def submit_score(self, session: Session, score: int, difficulty: str,
                           character: str) -> ScoreRecord:
        if not session.is_authenticated:
            raise ScoreStoreError("not logged in, score not saved")
        row = {
            "user_id": session.user_id,
            "username": session.username,
            "score": int(score),
            "difficulty": difficulty,
            "character": character,
        }
        data = await self._request("POST", "/rest/v1/scores", session=session, json=[row],
                                   extra_headers={"Prefer": "return=representation"})
        rows = _as_rows(data)
        return ScoreRecord.from_row(rows[0] if rows else row)

    def _score_params(self, difficulty: Optional[str], order: str, limit: int,
                      user_id: Optional[str] = None) -> Dict[str, str]:
        params = {"select": SCORE_COLUMNS, "order": order, "limit": str(int(limit))}
        if difficulty:
            params["difficulty"] = f"eq.{difficulty}"
        if user_id:
            params["user_id"] = f"eq.{user_id}"
        return params

    async def query_top_scores(self, difficulty: Optional[str] = None,
                               limit: int = 10) -> List[ScoreRecord]:
        rows = await self._request("GET", "/rest/v1/scores",
                                   params=self._score_params(difficulty, "score.desc", limit))
        records = [ScoreRecord.from_row(r) for r in _as_rows(rows)]
        return sorted(records, key=lambda r: r.score, reverse=True)

    async def query_personal_best(self, session: Session,
                                  difficulty: Optional[str] = None) -> Optional[ScoreRecord]:
        if not session.is_authenticated:
            raise ScoreStoreError("not logged in")
        rows = await self._request("GET", "/rest/v1/scores", session=session,
                                   params=self._score_params(difficulty, "score.desc", 1,
                                                             user_id=session.user_id))
        rows = _as_rows(rows)
        if not rows:
            return None
        return ScoreRecord.from_row(rows[0], username=session.username)

    async def query_score_history(self, session: Session, limit: int = 20) -> List[ScoreRecord]:
        if not session.is_authenticated:
            raise ScoreStoreError("not logged in")
        rows = await self._request("GET", "/rest/v1/scores", session=session,
                                   params=self._score_params(None, "created_at.desc", limit,
                                                             user_id=session.user_id))
        return [ScoreRecord.from_row(r, username=session.username) for r in _as_rows(rows)]


# -------------------- Display-safe wrappers --------------------

async def fetch_leaderboard(client: SupabaseClient, difficulty: Optional[str] = None,
                            limit: int = 10) -> List[ScoreRecord]:
    """Top scores, or [] when the store can't be reached."""
    try:
        return await client.query_top_scores(difficulty, limit)
    except ScoreStoreError as e:
        logger.warning("Get leaderboard error: %s", e)
        return []


async def fetch_personal_best(client: SupabaseClient, session: Session,
                              difficulty: Optional[str] = None) -> Optional[ScoreRecord]:
    try:
        return await client.query_personal_best(session, difficulty)
    except ScoreStoreError as e:
        logger.warning("Get personal best error: %s", e)
        return None


# -------------------- Background reporter --------------------

class ScoreReporter:
    """
    Owns a daemon thread running an asyncio loop. `submit` never blocks the
    caller and never raises; failures end up in the log.
    """
    def __init__(self, client: SupabaseClient):
        self.client = client
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="score-reporter", daemon=True)
        self._thread.start()

    def _run(self):
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def call(self, coro, timeout_s: float):
        """Run `coro` on the reporter loop and wait for it. Only for use outside the tick loop."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(timeout_s)

    def submit(self, session: Session, score: int, difficulty: str,
               character: str) -> concurrent.futures.Future:
        coro = self.client.submit_score(session, score, difficulty, character)
        fut = asyncio.run_coroutine_threadsafe(coro, self._loop)
        fut.add_done_callback(self._log_result)
        return fut

    @staticmethod
    def _log_result(fut: concurrent.futures.Future):
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.warning("Save score error: %s", exc)
        else:
            rec = fut.result()
            logger.info("Score saved: %d (%s, %s)", rec.score, rec.difficulty, rec.character)

    def close(self, timeout_s: float = 2.0):
        if self._loop.is_closed():
            return
        try:
            asyncio.run_coroutine_threadsafe(self.client.close(), self._loop).result(timeout_s)
        except (concurrent.futures.TimeoutError, ScoreStoreError, aiohttp.ClientError) as e:
            logger.warning("Score reporter shutdown: %s", e)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout_s)
        if self._thread.is_alive():
            logger.warning("Score reporter thread did not stop within %.1fs", timeout_s)
            return
        self._loop.close()

    @property
    def closed(self) -> bool:
        return self._loop.is_closed()


# -------------------- CLI --------------------

def format_scores(records: List[ScoreRecord]) -> str:
    if not records:
        return "No scores yet"
    lines = [f"{'#':>3}  {'PLAYER':<16} {'SCORE':>7}  {'DIFF':<7} {'DOG':<8} DATE"]
    for i, r in enumerate(records, start=1):
        lines.append(f"{i:>3}  {r.username[:16]:<16} {r.score:>7}  {r.difficulty:<7} "
                     f"{r.character:<8} {r.created_at[:10]}")
    return "\n".join(lines)


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="python -m src.game.online",
                                description="Barkour online leaderboard")
    sub = p.add_subparsers(dest="cmd", required=True)

    lb = sub.add_parser("leaderboard", help="Global top scores")
    lb.add_argument("--difficulty", choices=["EASY", "MEDIUM", "HARD"], default=None)
    lb.add_argument("--limit", type=int, default=10)

    for name, helptext in (("best", "Your personal best"), ("history", "Your recent rounds")):
        sp = sub.add_parser(name, help=helptext)
        sp.add_argument("--email", required=True)
        sp.add_argument("--password", required=True)
        if name == "best":
            sp.add_argument("--difficulty", choices=["EASY", "MEDIUM", "HARD"], default=None)
        else:
            sp.add_argument("--limit", type=int, default=20)

    su = sub.add_parser("signup", help="Create an account")
    su.add_argument("--email", required=True)
    su.add_argument("--password", required=True)
    su.add_argument("--username", required=True)
    return p.parse_args(argv)


async def _run_cli(client: SupabaseClient, args) -> int:
    async with client:
        if args.cmd == "leaderboard":
            print(format_scores(await fetch_leaderboard(client, args.difficulty, args.limit)))
            return 0
        if args.cmd == "signup":
            try:
                await client.sign_up(args.email, args.password, args.username)
            except ScoreStoreError as e:
                print(f"Sign up failed: {e}", file=sys.stderr)
                return 1
            print("Check your email to confirm your account!")
            return 0

        try:
            session = await client.sign_in(args.email, args.password)
        except ScoreStoreError as e:
            print(f"Login failed: {e}", file=sys.stderr)
            return 1
        if args.cmd == "best":
            best = await fetch_personal_best(client, session, args.difficulty)
            print(format_scores([best] if best else []))
        else:
            try:
                history = await client.query_score_history(session, args.limit)
            except ScoreStoreError as e:
                logger.warning("Get score history error: %s", e)
                history = []
            print(format_scores(history))
        return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.WARNING)
    client = SupabaseClient.from_env()
    if client is None:
        print(f"Set {ENV_URL} and {ENV_KEY} to use the online leaderboard.", file=sys.stderr)
        return 2
    return asyncio.run(_run_cli(client, args))


if __name__ == "__main__":
    sys.exit(main())
