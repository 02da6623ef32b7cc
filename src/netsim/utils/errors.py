"""Error types for the network sandbox engine.

Expected validation failures (empty build requests, full switches, unknown
device ids) are returned as typed result values by the engine. The classes
here cover everything else: misuse of the graph API, unreadable documents,
and broken topology invariants.
"""


class NetsimError(Exception):
    """Structured error carrying a code and an optional recovery hint."""

    def __init__(
        self,
        message: str,
        error_code: str,
        suggestion: str | None = None,
    ):
        """Initialize error with structured context.

        Args:
            message: Human-readable error description
            error_code: Structured error code (e.g., 'PORT_NOT_FOUND')
            suggestion: Optional recovery suggestion for the user
        """
        self.message = message
        self.error_code = error_code
        self.suggestion = suggestion
        super().__init__(self._format())

    def _format(self) -> str:
        """Format error message with structured information."""
        parts = [f'[{self.error_code}] {self.message}']

        if self.suggestion:
            parts.append(f'Suggestion: {self.suggestion}')

        return '\n'.join(parts)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'suggestion': self.suggestion or '',
        }


class GraphError(NetsimError):
    """Invalid call into the graph API (unknown port, self connection)."""


class DocumentError(NetsimError):
    """Sandbox document cannot be loaded (bad JSON, duplicate ids)."""


class TopologyInvariantError(AssertionError):
    """A structural invariant of the device graph does not hold.

    Raised for asymmetric ``connected_to`` references, references to ports
    that do not exist, and cyclic power dependencies. These are programming
    errors and are never caught by the engine.
    """


class ErrorCodes:
    """Standard error codes used in errors and rejected results."""

    # Device/port lookups
    DEVICE_NOT_FOUND = 'DEVICE_NOT_FOUND'
    PORT_NOT_FOUND = 'PORT_NOT_FOUND'
    UNKNOWN_DEVICE_TYPE = 'UNKNOWN_DEVICE_TYPE'

    # Wiring
    SELF_CONNECTION = 'SELF_CONNECTION'
    PORT_OCCUPIED = 'PORT_OCCUPIED'
    INSUFFICIENT_CAPACITY = 'INSUFFICIENT_CAPACITY'

    # Build requests
    EMPTY_BUILD = 'EMPTY_BUILD'
    INVALID_ROUTER = 'INVALID_ROUTER'
    UNKNOWN_TARGET = 'UNKNOWN_TARGET'

    # Mutations
    NOT_USER_CONTROLLED = 'NOT_USER_CONTROLLED'
    NOT_WIRELESS_CAPABLE = 'NOT_WIRELESS_CAPABLE'

    # Documents
    INVALID_DOCUMENT = 'INVALID_DOCUMENT'
    DUPLICATE_ID = 'DUPLICATE_ID'
    UNSUPPORTED_SCHEMA = 'UNSUPPORTED_SCHEMA'
