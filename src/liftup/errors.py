"""Exceptions raised by liftup."""


class LiftUpError(Exception):
    """Base class for all liftup errors."""

    pass


class ValidationError(LiftUpError, ValueError):
    """An operation was rejected because its input is not valid.

    Raised synchronously to the caller: negative reps or weight, an
    inverted rep range, an unknown session type string, or an attempt
    to delete a built-in catalog exercise.
    """

    pass


class PersistenceError(LiftUpError):
    """A repository call failed.

    The underlying exception is kept as ``__cause__``. Background writes
    made by the session runtime never raise this; it is stored in the
    runtime's ``last_error`` instead.
    """

    pass


class DomainStateError(LiftUpError):
    """A lookup referenced something that does not exist in the domain graph."""

    pass
