"""Exceptions raised by rowhook.

Registration collisions are not exceptions: ``add`` returns a falsy
:class:`rowhook.triggers.models.RegistrationRejected` instead.
"""


class RowHookError(Exception):
    """Base exception for rowhook."""

    pass


class InvalidHandler(RowHookError, TypeError):
    """Raised when a trigger is registered with a non-callable handler."""

    pass


class InvalidExpression(RowHookError, ValueError):
    """Raised when a pattern does not parse as ``schema.table``."""

    def __init__(self, expression: object) -> None:
        self.expression = expression
        super().__init__(
            f"Invalid expression {expression!r}: expected [schema|*].[table|*] or '*'"
        )


class UpstreamConnectionError(RowHookError):
    """Raised (or reported) when the replication stream fails."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)
