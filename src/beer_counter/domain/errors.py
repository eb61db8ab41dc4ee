"""Errors raised by tally operations."""


class TallyError(Exception):
    """Base class for tally failures with a user-facing message."""


class StorageUnavailableError(TallyError):
    """The backing store could not complete an operation."""


class NoUndoAvailableError(TallyError):
    """There is no logged drink that can be undone."""


class DuplicateParticipantError(TallyError):
    """A participant with the same name already exists."""


class InvalidParticipantError(TallyError):
    """A participant name is blank."""
