import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Union

from flipcard import db
from flipcard.services.errors import DuplicateRecordError, InputError
from flipcard.services.timefmt import convert_to_seconds
from .ranking import calculate_percentile, ranking_message
from .store import DETAILS_SHEET, TIME_SHEET, SheetStore

logger = logging.getLogger(__name__)

EMAIL_EXISTS_MESSAGE = 'Email already exists.'


class RequestType(str, Enum):
    SAVE_TIME = 'saveTime'
    SAVE_DETAILS = 'saveDetails'


@dataclass(frozen=True)
class SaveTimeRequest:
    time: Any
    type: RequestType = RequestType.SAVE_TIME


@dataclass(frozen=True)
class SaveDetailsRequest:
    name: str
    email: str
    type: RequestType = RequestType.SAVE_DETAILS


ScoringRequest = Union[SaveTimeRequest, SaveDetailsRequest]


def parse_request(payload: Any) -> ScoringRequest:
    if not isinstance(payload, dict):
        raise InputError('Request body must be a JSON object.')
    try:
        kind = RequestType(payload.get('type'))
    except ValueError:
        raise InputError('Invalid request type.') from None
    if kind is RequestType.SAVE_TIME:
        return SaveTimeRequest(time=payload.get('time'))
    email = payload.get('Email')
    if not isinstance(email, str) or not email:
        raise InputError('Email is required.')
    return SaveDetailsRequest(name=str(payload.get('Name') or ''), email=email)


def save_time(req: SaveTimeRequest, store: SheetStore) -> Dict[str, Any]:
    # Converted once and stored as seconds; the new time counts towards its own percentile
    seconds = convert_to_seconds(req.time)
    store.append_value(TIME_SHEET, seconds)
    times = store.read_column(TIME_SHEET, 1)
    percentile = calculate_percentile(times, seconds)
    return {'result': 'Success', 'percentile': percentile, 'message': ranking_message(percentile)}


def save_details(req: SaveDetailsRequest, store: SheetStore) -> Dict[str, Any]:
    emails = set(store.read_column(DETAILS_SHEET, 2))
    if req.email in emails:
        return {'result': 'Success', 'message': EMAIL_EXISTS_MESSAGE}
    try:
        store.append_value(DETAILS_SHEET, (req.name, req.email))
    except DuplicateRecordError:
        # Lost a race with an identical submission
        return {'result': 'Success', 'message': EMAIL_EXISTS_MESSAGE}
    return {'result': 'Success'}


_HANDLERS: Dict[RequestType, Callable[[Any, SheetStore], Dict[str, Any]]] = {
    RequestType.SAVE_TIME: save_time,
    RequestType.SAVE_DETAILS: save_details,
}


def handle_request(payload: Any, store: SheetStore = None) -> Dict[str, Any]:
    """Run one scoring request; failures come back as ``{result: Error}``."""
    store = store or SheetStore()
    try:
        req = parse_request(payload)
        result = _HANDLERS[req.type](req, store)
        logger.info(f"[scoring] type={req.type.value} result={result.get('result')}")
        return result
    except InputError as exc:
        logger.warning(f"[scoring] rejected: {exc}")
        return {'result': 'Error', 'message': str(exc)}
    except Exception as exc:
        logger.exception(f"[scoring] failed: {exc}")
        db.session.rollback()
        return {'result': 'Error', 'message': str(exc)}
