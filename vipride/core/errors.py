"""
Database error taxonomy and MySQL error classification.
"""
import errno
from typing import Optional

from pymysql.err import InterfaceError as PyMySQLInterfaceError

CONNECTION_LOST = "connection_lost"
CONNECTION_RESET = "connection_reset"
USE_AFTER_FATAL = "use_after_fatal_error"

# Kinds after which a retry of the same statement may succeed
TRANSIENT_KINDS = frozenset({CONNECTION_LOST, CONNECTION_RESET})
# Kinds after which the pool has to be thrown away
FATAL_POOL_KINDS = frozenset({CONNECTION_LOST, CONNECTION_RESET, USE_AFTER_FATAL})

# CR_SERVER_GONE_ERROR, CR_SERVER_LOST, CR_SERVER_LOST_EXTENDED
MYSQL_LOST_CODES = frozenset({2006, 2013, 2055})


class ReservationStoreError(Exception):
    """Base class for reservation persistence failures."""


class TransientConnectionError(ReservationStoreError):
    """The database link dropped (reset or lost). Safe to retry a write."""

    def __init__(self, message: str, kind: str = CONNECTION_LOST):
        super().__init__(message)
        self.kind = kind


class QueryError(ReservationStoreError):
    """Any other failure reported by the database."""


class PaymentGatewayError(Exception):
    """The payment gateway could not be reached or answered garbage."""


def _unwrap(exc: BaseException) -> BaseException:
    # SQLAlchemy DBAPIError keeps the driver exception in .orig
    orig = getattr(exc, "orig", None)
    return orig if isinstance(orig, BaseException) else exc


def classify_db_error(exc: BaseException) -> Optional[str]:
    """
    Maps a driver/SQLAlchemy exception to one of the connection-failure kinds.
    Returns None for anything that is not a connection problem
    (syntax errors, constraint violations, ...).
    """
    orig = _unwrap(exc)

    if isinstance(orig, ConnectionResetError) or getattr(orig, "errno", None) == errno.ECONNRESET:
        return CONNECTION_RESET
    if isinstance(orig, (BrokenPipeError, ConnectionAbortedError)):
        return CONNECTION_LOST

    args = getattr(orig, "args", ())
    code = args[0] if args and isinstance(args[0], int) else None
    message = " ".join(str(a) for a in args)

    if code in MYSQL_LOST_CODES:
        # pymysql reports socket resets as "Lost connection ... (ConnectionResetError ...)"
        if "ConnectionResetError" in message or "Connection reset" in message:
            return CONNECTION_RESET
        return CONNECTION_LOST

    # aiomysql raises InterfaceError(0, ...) when a dead connection is used again
    if isinstance(orig, PyMySQLInterfaceError) and code in (0, None):
        return USE_AFTER_FATAL

    if getattr(exc, "connection_invalidated", False):
        return CONNECTION_LOST

    return None


def is_transient_connection_error(exc: BaseException) -> bool:
    if isinstance(exc, TransientConnectionError):
        return True
    return classify_db_error(exc) in TRANSIENT_KINDS
