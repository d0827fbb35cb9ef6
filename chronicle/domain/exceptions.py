"""Error taxonomy shared by the write and read sides."""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds a caller may need to tell apart."""

    DOMAIN_RULE_VIOLATION = "DOMAIN_RULE_VIOLATION"
    PROJECTION_INVARIANT_VIOLATION = "PROJECTION_INVARIANT_VIOLATION"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    UNSUPPORTED_COMMAND = "UNSUPPORTED_COMMAND"


class ChronicleError(Exception):
    """Base class for every error raised by chronicle.

    Each subclass is tagged with an ErrorKind so callers that prefer
    values over exception types (see CommandBus.try_dispatch) can match on
    ``error.kind``.
    """

    kind: ErrorKind


class DomainRuleViolation(ChronicleError):
    """Raised when a command violates an aggregate invariant.

    No events are appended when this is raised.
    """

    kind = ErrorKind.DOMAIN_RULE_VIOLATION


class ProjectionInvariantViolation(ChronicleError):
    """Raised when the event stream implies an impossible read model state.

    For example an update for a record that was never created. This points
    to a write-side defect or a broken rebuild and is never recovered
    locally: it propagates through EventBus.publish into the originating
    append.
    """

    kind = ErrorKind.PROJECTION_INVARIANT_VIOLATION


class StoreUnavailable(ChronicleError):
    """Raised when the underlying event storage cannot be reached."""

    kind = ErrorKind.STORE_UNAVAILABLE


class UnsupportedCommand(ChronicleError):
    """Raised when no aggregate handles the dispatched command type."""

    kind = ErrorKind.UNSUPPORTED_COMMAND
