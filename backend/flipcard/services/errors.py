"""Exceptions shared by the game, relay and scoring services."""


class InputError(ValueError):
    """Malformed time string, unknown request type or unknown collection."""


class DuplicateRecordError(Exception):
    """An append would break a uniqueness rule of the store."""


class BackendError(Exception):
    """The relay's upstream call failed or returned a non-success status."""


class ClientNetworkError(Exception):
    """The game engine could not complete a round-trip through the relay."""
