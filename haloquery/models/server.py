"""Server address data structures."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .server_info import ServerInfo


@dataclass(frozen=True)
class ServerAddress:
    """An IPv4 game server address."""

    address: str  # Dotted-quad IPv4
    port: int

    @property
    def key(self) -> str:
        """Get the ip:port key used to group replies by sender."""
        return f"{self.address}:{self.port}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class Server(ServerAddress):
    """A server address tagged with the game it was listed under."""

    game: Optional[str] = None  # None when given directly rather than by a master server


@dataclass
class ServerResponse:
    """A reply from a single game server."""

    address: str
    port: int
    game: Optional[str]
    data: Union[ServerInfo, str]  # Raw string when parsing is disabled

    @property
    def key(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass
class UDPResponse:
    """Datagram data received from a single sender."""

    address: str
    port: int
    data: bytes

    @property
    def key(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass
class MasterServerResponse:
    """Decoded list reply from the master server."""

    requester_ip: str
    common_port: int  # 0xFFFF signals an error and never reaches this class
    aux_field1: str  # Pascal strings of unknown meaning
    aux_field2: str
    servers: List[ServerAddress] = field(default_factory=list)
