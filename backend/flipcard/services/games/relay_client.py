"""Client side of the scoring round-trip: the game engine talking to the relay."""
import re
from typing import Any, Dict, Optional

import requests

from flipcard.services.errors import ClientNetworkError

EMAIL_RE = re.compile(r'^[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,6}$')


def is_valid_email(email) -> bool:
    return isinstance(email, str) and EMAIL_RE.match(email) is not None


def _post(relay_url: str, payload: Dict[str, Any], timeout: Optional[float] = None) -> Dict[str, Any]:
    try:
        response = requests.post(
            relay_url,
            json=payload,
            headers={'Content-Type': 'application/json'},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise ClientNetworkError(str(exc)) from exc
    if not response.ok:
        raise ClientNetworkError(f'Server responded with {response.status_code}: {response.reason}')
    try:
        result = response.json()
    except ValueError as exc:
        raise ClientNetworkError(f'Malformed response from server: {exc}') from exc
    if not isinstance(result, dict):
        raise ClientNetworkError('Malformed response from server')
    return result


def send_time(relay_url: str, time: str, timeout: Optional[float] = None) -> Dict[str, Any]:
    """Submit a finished time; returns the scoring reply (percentile, message)."""
    return _post(relay_url, {'type': 'saveTime', 'time': time}, timeout=timeout)


def send_details(relay_url: str, name: str, email: str, timeout: Optional[float] = None) -> Dict[str, Any]:
    return _post(relay_url, {'type': 'saveDetails', 'Name': name, 'Email': email}, timeout=timeout)
