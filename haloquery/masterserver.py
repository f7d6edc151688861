"""Master server client for retrieving GameSpy server lists."""

import logging
from typing import Callable, List, Optional

from .config.client_config import QueryConfig
from .connection.tcp_client import TCPClient
from .errors import DecryptionFailed
from .models.server import MasterServerResponse, ServerAddress
from .protocol.gamespy import (
    GAME_KEYS,
    decode_master_response,
    encode_master_request,
    make_validation_key,
)

logger = logging.getLogger(__name__)

# decrypt(game_key, validation_key, ciphertext) -> plaintext, or None on failure.
# GameSpy encrypts the list with "enctypex"; the implementation lives outside
# this library. See http://aluigi.altervista.org/papers.htm#gsmsalg
Decryptor = Callable[[str, str, bytes], Optional[bytes]]


class MasterServerClient:
    """Client for retrieving the server list from a GameSpy master server.

    Each query is a single round trip over a fresh TCP connection: send the
    list request, read until the server goes quiet, decrypt, decode.

    Usage:
        client = MasterServerClient(decrypt=enctypex_decrypt)
        servers = await client.get_servers("halom")
    """

    DEFAULT_HOST = "hosthpc.com"
    DEFAULT_PORT = 28910
    DEFAULT_TIMEOUT = 3.0
    DEFAULT_END_DELAY = 0.5

    def __init__(self, host: str = None, port: int = None, timeout: float = None,
                 end_delay: float = None, decrypt: Decryptor = None):
        """Initialize master server client.

        Args:
            host: Master server hostname (default: hosthpc.com)
            port: Master server port (default: 28910)
            timeout: Connect and inactivity timeout in seconds (default: 3.0)
            end_delay: Quiet period that ends the reply in seconds (default: 0.5)
            decrypt: Decryption function for the encrypted reply
        """
        if decrypt is None:
            raise ValueError("A decrypt function is required to read master server replies")

        self.host = host or self.DEFAULT_HOST
        self.port = port or self.DEFAULT_PORT
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.end_delay = end_delay or self.DEFAULT_END_DELAY
        self.decrypt = decrypt

    @classmethod
    def from_config(cls, config: QueryConfig, decrypt: Decryptor) -> 'MasterServerClient':
        return cls(
            host=config.master_host,
            port=config.master_port,
            timeout=config.master_timeout,
            end_delay=config.end_delay,
            decrypt=decrypt,
        )

    async def query(self, game: str) -> MasterServerResponse:
        """Fetch and decode the full master server reply for a game.

        Args:
            game: GameSpy game code (see GAME_KEYS)

        Raises:
            ValueError: the game code is not supported
            ConnectFailed, QueryTimeout, TransportClosed: network failure
            DecryptionFailed: the reply could not be decrypted
            TruncatedResponse, MasterServerError: the reply was unusable
        """
        if game not in GAME_KEYS:
            raise ValueError(f"Unsupported game key: {game}")

        game_key = GAME_KEYS[game]
        validation_key = make_validation_key()
        request = encode_master_request(game, validation_key)

        client = TCPClient(timeout=self.timeout)
        try:
            await client.connect(self.host, self.port)
            encrypted = await client.request(request, self.end_delay)
        finally:
            client.close()

        logger.debug(f"Received {len(encrypted)} encrypted bytes for {game}")

        try:
            decrypted = self.decrypt(game_key, validation_key, encrypted)
        except Exception as e:
            raise DecryptionFailed(f"Failed to decrypt master server response: {e}") from e
        if decrypted is None:
            raise DecryptionFailed("Failed to decrypt master server response!")

        response = decode_master_response(decrypted)
        logger.info(f"Master server listed {len(response.servers)} server(s) for {game}")
        return response

    async def get_servers(self, game: str) -> List[ServerAddress]:
        """Retrieve the addresses of all known public servers for a game."""
        response = await self.query(game)
        return response.servers


async def get_master_server_list(game: str, decrypt: Decryptor,
                                 config: QueryConfig = None) -> List[ServerAddress]:
    """
    Quick helper to get a game's server list from its master server.

    Usage:
        servers = await get_master_server_list("halom", enctypex_decrypt)
        for server in servers:
            print(f"{server.address}:{server.port}")
    """
    client = MasterServerClient.from_config(config or QueryConfig(), decrypt)
    return await client.get_servers(game)
