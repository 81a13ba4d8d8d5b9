"""In-memory game sessions keyed by game code.

Each entry pairs a GameSession with its own lock; every mutation of a
session happens while holding that lock. Entries left idle for longer than
the session TTL are swept whenever a new game is created, and are treated
as gone when looked up.
"""
import random
import string
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .engine import GameSession

# Patched in tests to move time forward
_clock = time.monotonic


@dataclass
class SessionEntry:
    code: str
    session: GameSession
    lock: threading.RLock = field(default_factory=threading.RLock)
    last_active: float = field(default_factory=lambda: _clock())

    def touch(self) -> None:
        self.last_active = _clock()

    def is_expired(self, ttl: Optional[float], now: Optional[float] = None) -> bool:
        if not ttl or ttl <= 0:
            return False
        now = _clock() if now is None else now
        return now - self.last_active > ttl


_sessions: Dict[str, SessionEntry] = {}
_registry_lock = threading.Lock()


def generate_game_code(length=4):
    """Generate a unique, short game code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in _sessions:
            return code


def sweep_expired(ttl: Optional[float], now: Optional[float] = None) -> List[str]:
    """Dispose every session idle for longer than ``ttl`` seconds."""
    now = _clock() if now is None else now
    with _registry_lock:
        expired = [entry for entry in _sessions.values() if entry.is_expired(ttl, now)]
        for entry in expired:
            del _sessions[entry.code]
    for entry in expired:
        with entry.lock:
            entry.session.dispose()
    return [entry.code for entry in expired]


def create_session(ttl: Optional[float] = None, **kwargs) -> SessionEntry:
    session = GameSession(**kwargs)
    sweep_expired(ttl)
    with _registry_lock:
        code = generate_game_code()
        entry = SessionEntry(code=code, session=session)
        _sessions[code] = entry
    return entry


def get_session(code: str, ttl: Optional[float] = None) -> Optional[SessionEntry]:
    if not code:
        return None
    entry = _sessions.get(code.upper())
    if entry and entry.is_expired(ttl):
        dispose_session(entry.code)
        return None
    return entry


def dispose_session(code: str) -> bool:
    with _registry_lock:
        entry = _sessions.pop(code.upper(), None) if code else None
    if not entry:
        return False
    with entry.lock:
        entry.session.dispose()
    return True


def clear_sessions() -> None:
    with _registry_lock:
        entries = list(_sessions.values())
        _sessions.clear()
    for entry in entries:
        with entry.lock:
            entry.session.dispose()
