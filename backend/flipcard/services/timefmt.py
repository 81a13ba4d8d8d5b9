import re

from .errors import InputError

_TIME_RE = re.compile(r'^\s*(\d+):(\d{1,2})\s*$')


def convert_to_seconds(time) -> int:
    """Convert a "MM:SS" string into total seconds.

    Integers are taken as a raw number of seconds. Anything else, including
    a seconds part of 60 or more, raises InputError.
    """
    if isinstance(time, bool):
        raise InputError(f'Invalid time: {time!r}')
    if isinstance(time, int):
        if time < 0:
            raise InputError(f'Invalid time: {time!r}')
        return time
    if not isinstance(time, str):
        raise InputError(f'Invalid time: {time!r}')
    m = _TIME_RE.match(time)
    if not m:
        raise InputError(f'Invalid time: {time!r}')
    minutes, seconds = int(m.group(1)), int(m.group(2))
    if seconds >= 60:
        raise InputError(f'Invalid time: {time!r}')
    return minutes * 60 + seconds


def format_seconds(total: int) -> str:
    minutes, seconds = divmod(int(total), 60)
    return f'{minutes:02d}:{seconds:02d}'
