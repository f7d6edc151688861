"""
Exception hierarchy for haloquery

Protocol errors are raised while decoding data, transport errors while moving
it over the network. Both share QueryError so callers can catch everything the
library raises in one place.
"""


class QueryError(Exception):
    """Base exception for everything raised by haloquery"""
    pass


class ProtocolError(QueryError):
    """Base exception for wire format errors"""
    pass


class TruncatedResponse(ProtocolError):
    """Raised when a response is shorter than its fixed header"""
    pass


class MasterServerError(ProtocolError):
    """Raised when the master server flags its reply with the error port"""
    pass


class DecryptionFailed(ProtocolError):
    """Raised when the master server reply could not be decrypted"""
    pass


class UnrecognizedGameType(ProtocolError):
    """Raised when game flags carry a game type with no known layout"""

    def __init__(self, game_type: int, value: int):
        self.game_type = game_type
        self.value = value
        super().__init__(f"Unrecognized gametype code {game_type} in flags {value}")


class TransportError(QueryError):
    """Base exception for network errors"""
    pass


class TransportClosed(TransportError):
    """Raised when a socket is closed while an operation is in flight"""
    pass


class ConnectFailed(TransportError):
    """Raised when a stream connection cannot be established"""
    pass


class QueryTimeout(TransportError):
    """Raised when a read or connect does not finish in time"""
    pass
