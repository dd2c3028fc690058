class BackendError(RuntimeError):
    """Base for failures talking to the booking backend."""
    pass


class BackendTransportError(BackendError):
    """Raised on network failures and timeouts."""
    pass


class BackendStatusError(BackendError):
    """Raised when the backend answers with a non-success status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"Backend responded with HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class BackendContractError(BackendError):
    """Raised when a response body does not match the expected shape."""
    pass
