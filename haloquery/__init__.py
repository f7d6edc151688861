"""
haloquery - Query Halo game servers and their GameSpy master servers

Usage:
    import asyncio
    from haloquery import ServerAddress, query_server_info

    servers = [ServerAddress("1.2.3.4", 2302)]
    responses = asyncio.run(query_server_info(servers))
    for response in responses or []:
        print(response.data.hostname, response.data.players)

Via master server (the reply is encrypted, so bring a decrypt function):
    from haloquery import MasterServerClient

    client = MasterServerClient(decrypt=enctypex_decrypt)
    servers = asyncio.run(client.get_servers("halom"))

Or resolve and query in one go:
    from haloquery import query_servers

    responses = asyncio.run(query_servers(["ce", ServerAddress("1.2.3.4", 2302)],
                                          decrypt=enctypex_decrypt))

Flag integers can be decoded on their own:
    from haloquery import decode_game_flags

    decode_game_flags(value)  # {'game_type': 1, 'assault': 0, ...}
"""

__version__ = "0.1.0"

from .config import QueryConfig, ConfigValidationError
from .errors import (
    QueryError,
    ProtocolError,
    TruncatedResponse,
    MasterServerError,
    DecryptionFailed,
    UnrecognizedGameType,
    TransportError,
    TransportClosed,
    ConnectFailed,
    QueryTimeout,
)
from .models import ServerAddress, Server, ServerResponse, UDPResponse, MasterServerResponse, ServerInfo
from .protocol import (
    Bitfield,
    BitfieldLayout,
    GameType,
    GAME_KEYS,
    MASTER_SERVER_ALIASES,
    decode_player_flags,
    decode_vehicle_flags,
    decode_game_flags,
    encode_master_request,
    decode_master_response,
    parse_server_info,
)
from .connection import QuietPeriod, TCPClient, UDPClient
from .masterserver import Decryptor, MasterServerClient, get_master_server_list
from .handler import parse_server_address, resolve_servers, query_server_info, query_servers

__all__ = [
    "QueryConfig", "ConfigValidationError",
    "QueryError", "ProtocolError", "TruncatedResponse", "MasterServerError",
    "DecryptionFailed", "UnrecognizedGameType", "TransportError",
    "TransportClosed", "ConnectFailed", "QueryTimeout",
    "ServerAddress", "Server", "ServerResponse", "UDPResponse",
    "MasterServerResponse", "ServerInfo",
    "Bitfield", "BitfieldLayout", "GameType", "GAME_KEYS", "MASTER_SERVER_ALIASES",
    "decode_player_flags", "decode_vehicle_flags", "decode_game_flags",
    "encode_master_request", "decode_master_response", "parse_server_info",
    "QuietPeriod", "TCPClient", "UDPClient",
    "Decryptor", "MasterServerClient", "get_master_server_list",
    "parse_server_address", "resolve_servers", "query_server_info", "query_servers",
]
