"""
Server resolution and info queries

Turns a mixed list of game server addresses and master server names into game
server addresses, then queries every game server for its info over one UDP
socket.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Union

from .config.client_config import QueryConfig
from .config.validation import ConfigValidationError, validate_port
from .connection.udp_client import UDPClient
from .errors import QueryError
from .masterserver import Decryptor, MasterServerClient
from .models.server import Server, ServerAddress, ServerResponse
from .protocol.gamespy import resolve_game_code
from .protocol.server_info import parse_server_info

logger = logging.getLogger(__name__)

# Game servers answer a lone backslash with their full info string
INFO_PROBE = b'\\'

IP_REGEX = re.compile(r'^\d{1,3}(\.\d{1,3}){3}$')

ServerArg = Union[ServerAddress, str]


def parse_server_address(value: str, default_port: int = 2302) -> Optional[ServerAddress]:
    """Parse "1.2.3.4" or "1.2.3.4:2302" into a ServerAddress

    Returns None if value isn't an IPv4 address with an optional valid port.
    """
    address, _, port_text = value.partition(':')
    if not IP_REGEX.match(address) or any(int(part) > 255 for part in address.split('.')):
        return None
    if not port_text:
        return ServerAddress(address, default_port)

    try:
        return ServerAddress(address, validate_port(int(port_text)))
    except (ValueError, ConfigValidationError):
        return None


async def resolve_servers(args: Iterable[ServerArg], decrypt: Decryptor = None,
                          config: QueryConfig = None) -> List[Server]:
    """
    Resolve a mixed list of addresses and master server names into servers.

    Args:
        args: Each item is either an individual game server (a ServerAddress,
            or a "1.2.3.4[:port]" string using config.server_port when no port
            is given), or a GameSpy game code / friendly name (see
            MASTER_SERVER_ALIASES).
            - A game name is expanded into every server its master server lists,
              tagged with that game code.
            - An address is passed through with game set to None, since we
              can't know what game it's for.
        decrypt: Decryption function, required when any game names are given
        config: Query settings

    A failed master server query only drops that game's servers; it is logged
    and the remaining arguments are still resolved.

    Raises:
        ValueError: an argument is neither an address nor a known game name
    """
    config = config or QueryConfig()
    servers: List[Server] = []
    master = None

    for arg in args:
        if isinstance(arg, ServerAddress):
            servers.append(Server(arg.address, arg.port, getattr(arg, 'game', None)))
            continue

        game = resolve_game_code(arg) if isinstance(arg, str) else None
        if game is None:
            address = parse_server_address(arg, config.server_port) if isinstance(arg, str) else None
            if address is None:
                raise ValueError(f"Invalid server argument: {arg}")
            servers.append(Server(address.address, address.port))
            continue

        if master is None:
            master = MasterServerClient.from_config(config, decrypt)

        try:
            addresses = await master.get_servers(game)
        except QueryError as e:
            logger.error(f"Master server query for {game} failed: {e}")
            continue

        servers.extend(Server(address.address, address.port, game) for address in addresses)

    return servers


async def query_server_info(servers: Iterable[ServerAddress], config: QueryConfig = None,
                            parse: bool = True) -> Optional[List[ServerResponse]]:
    """
    Query info from the given game servers.

    Every server is probed over the same socket, then replies are collected
    until the socket goes quiet. Replies are matched back to servers by
    address; replies from unexpected senders are kept with game set to None.

    Args:
        servers: Game servers to query
        config: Query settings
        parse: Parse replies into ServerInfo records (False keeps raw strings)

    Returns:
        One ServerResponse per replying server, or None if nobody replied
    """
    config = config or QueryConfig()
    servers = list(servers)

    # Replies are keyed by "ip:port", same as UDPClient.read_all
    address_game_map: Dict[str, Optional[str]] = {
        server.key: getattr(server, 'game', None) for server in servers
    }

    async with UDPClient() as client:
        for server in servers:
            await client.write(server.address, server.port, INFO_PROBE)
        logger.debug(f"Probed {len(servers)} server(s)")

        replies = await client.read_all(config.end_delay)

    if replies is None:
        logger.info("No servers replied")
        return None

    responses = []
    for key, reply in replies.items():
        text = reply.data.decode('latin-1')
        responses.append(ServerResponse(
            address=reply.address,
            port=reply.port,
            game=address_game_map.get(key),
            data=parse_server_info(text) if parse else text,
        ))

    logger.info(f"{len(responses)} of {len(servers)} server(s) replied")
    return responses


async def query_servers(args: Iterable[ServerArg], decrypt: Decryptor = None,
                        config: QueryConfig = None,
                        parse: bool = True) -> Optional[List[ServerResponse]]:
    """Resolve args into servers and query each of them for info."""
    config = config or QueryConfig()
    servers = await resolve_servers(args, decrypt, config)
    if not servers:
        return None
    return await query_server_info(servers, config, parse)
