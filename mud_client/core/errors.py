from __future__ import annotations


class MudClientError(RuntimeError):
    """Base class for every failure the client renders as a log line."""


class MalformedCommand(MudClientError):
    """Arguments did not match the verb's grammar; carries the verb's usage line."""

    def __init__(self, usage: str) -> None:
        super().__init__(usage)
        self.usage = usage


class UnresolvedReference(MudClientError):
    """The resolver found zero or several candidates for a user reference."""


class RemoteError(MudClientError):
    """The backend answered with an explicit Err."""


class TransportError(MudClientError):
    """The remote call itself failed (network, HTTP status, undecodable body)."""


class RemoteProtocolError(TransportError):
    """The backend answered with a shape that is neither Ok nor Err."""


class TransferRequestError(MudClientError):
    """A token transfer request could not be fully resolved."""


class InsufficientFunds(MudClientError):
    pass
