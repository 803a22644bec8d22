"""Exception hierarchy for the Solana MCP server.

Every error carries a machine-readable code and a recoverable flag so the
transport layer can decide whether to fail one request or the whole process.
"""


class SolanaMcpError(Exception):
    """Base exception for server errors.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        code: str,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, str | bool]:
        """Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary with error details.
        """
        return {
            "error": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class ConfigurationError(SolanaMcpError):
    """Invalid process configuration.

    Raised at startup when required environment variables are missing or
    malformed. Fatal to the process.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIG", recoverable=False)


class MissingEnvironmentError(ConfigurationError):
    """One or more required environment variables are unset."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(
            f"Missing required environment variables: {', '.join(names)}"
        )
        self.names = names


class ValidationError(SolanaMcpError):
    """A credential header or action argument is missing or invalid.

    At connect time this is an HTTP 400 to the offending connection only;
    inside a tool call it fails just that call.
    """

    def __init__(
        self,
        field: str,
        message: str,
        code: str = "VALIDATION",
    ) -> None:
        super().__init__(message, code, recoverable=False)
        self.field = field


class NoWalletError(ValidationError):
    """The connection carries no usable custody wallet id."""

    def __init__(self, field: str = "X-Privy-Wallet-Id") -> None:
        super().__init__(field, "User has no privy wallet", code="NO_WALLET")


class SigningFailure(SolanaMcpError):
    """The signing backend rejected or failed a signing/submission call.

    Fails only the command that triggered it; the session stays active.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        full_message = f"{operation} failed: {message}"
        if cause:
            full_message += f": {cause}"
        super().__init__(full_message, "SIGNING_FAILED", recoverable=True)
        self.operation = operation
        self.cause = cause


class RpcError(SolanaMcpError):
    """A Solana JSON-RPC call failed."""

    def __init__(
        self,
        method: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        full_message = f"RPC {method} failed: {message}"
        if cause:
            full_message += f": {cause}"
        super().__init__(full_message, "RPC_ERROR", recoverable=True)
        self.method = method
        self.cause = cause


class SessionNotFoundError(SolanaMcpError):
    """A message was addressed to a session id that is not registered."""

    def __init__(self, session_id: str | None) -> None:
        super().__init__(
            "No transport found for sessionId", "SESSION_NOT_FOUND", recoverable=True
        )
        self.session_id = session_id


class DuplicateSessionError(SolanaMcpError):
    """A session id is already registered."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Session {session_id} is already registered",
            "DUPLICATE_SESSION",
            recoverable=False,
        )
        self.session_id = session_id


class ActionConflictError(SolanaMcpError):
    """Two action bundles define an action with the same name."""

    def __init__(self, action: str, first: str, second: str) -> None:
        super().__init__(
            f"Action '{action}' is defined by both '{first}' and '{second}'",
            "ACTION_CONFLICT",
            recoverable=False,
        )
        self.action = action
