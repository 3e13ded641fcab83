"""Errors raised by the real-time relay."""


class RelayError(Exception):
    """Base class for relay errors."""


class AuthenticationError(RelayError):
    """A connection attempt was refused during the handshake."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class UninitializedRelayError(RelayError):
    def __init__(self):
        super().__init__("Socket.IO not initialized")


class RelayAlreadyInitializedError(RelayError):
    def __init__(self):
        super().__init__("Socket.IO already initialized")
