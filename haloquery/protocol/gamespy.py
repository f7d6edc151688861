"""
GameSpy master server protocol codec

Encodes server list requests and decodes the (already decrypted) server list
replies. The reply layout was worked out from ALuigi's enctypex decoder
(enctypex_decoder_convert_to_ipport); fields we don't understand are read and
kept or skipped, never interpreted.
"""

import logging
import random
import string
from dataclasses import dataclass
from enum import IntFlag
from typing import Dict, Optional

from ..errors import MasterServerError, TruncatedResponse
from ..models.server import MasterServerResponse, ServerAddress
from .binary_reader import IP_PORT_LEN, BinaryReader, unpack_address
from .packet_writer import PacketWriter

logger = logging.getLogger(__name__)


# GameSpy game code -> per-game decryption key
# See: https://github.com/gbMichelle/gslist/blob/master/gslist.cfg
GAME_KEYS: Dict[str, str] = {
    'halo': 'QW88cv',
    'halod': 'yG3d9w',
    'halomacd': 'e4Rd9J',
    'halomac': 'e4Rd9J',
    'halom': 'e4Rd9J',
    'halor': 'e4Rd9J',
}

# Friendly name -> GameSpy game code
MASTER_SERVER_ALIASES: Dict[str, str] = {
    'beta': 'halo',         # Halo Beta
    'trial': 'halod',       # Halo Trial
    'macdemo': 'halomacd',  # Halo Trial for Mac
    'mac': 'halomac',       # Halo: Combat Evolved for Mac
    'ce': 'halom',          # Halo Custom Edition
    'pc': 'halor',          # Halo: Combat Evolved (aka Halo PC)
}

# No idea what these mean, but they get us the list of server IPs and ports
QUERY_SETTINGS = bytes([1, 3, 0, 0, 0, 0])

VALIDATION_KEY_LENGTH = 8
ERROR_PORT = 0xFFFF
END_OF_LIST_IP = '255.255.255.255'


class RecordFlags(IntFlag):
    """Server record flags. Their meaning is unknown, only their lengths."""
    A = 0x02
    B = 0x08
    C = 0x10
    D = 0x20
    E = 0x40


# Extra record bytes contributed by each flag. E contributes nothing.
RECORD_FLAG_LENGTHS = (
    (RecordFlags.A, 3),
    (RecordFlags.B, 4),
    (RecordFlags.C, 2),
    (RecordFlags.D, 2),
)


@dataclass
class MasterServerRequest:
    """Decoded list request, as seen by a master server"""
    length: int
    game: str
    sub_game: str
    validation_key: str


def is_supported_game(game: str) -> bool:
    return game in GAME_KEYS


def resolve_game_code(name: str) -> Optional[str]:
    """Translate a friendly name or game code into a game code"""
    if name in GAME_KEYS:
        return name
    return MASTER_SERVER_ALIASES.get(name)


def make_validation_key() -> str:
    """Generate an 8 character alphanumeric one-time key.

    GameSpy only needs each request to have a unique key, so this doesn't need
    to be cryptographically secure.
    """
    alphabet = string.ascii_letters + string.digits
    return ''.join(random.choice(alphabet) for _ in range(VALIDATION_KEY_LENGTH))


def encode_master_request(game: str, validation_key: str) -> bytes:
    """Encode a server list query in the form GameSpy wants.

    Layout:
        - 1 byte padding
        - 1 byte message length
        - 1 byte padding
        - 6 bytes query settings
        - null-terminated game code (e.g. halom\\0)
        - null-terminated game code again
        - null-terminated validation key
        - 5 bytes padding

    GameSpy supports listing a different "sub-game" with the second game code,
    but Halo doesn't use that feature so we always repeat the game.
    """
    writer = PacketWriter()
    writer.write_char(0)
    writer.write_char(0)  # Length, patched below
    writer.write_char(0)
    writer.write(QUERY_SETTINGS)
    writer.write_cstring(game)
    writer.write_cstring(game)
    writer.write_cstring(validation_key)
    writer.write_padding(5)

    if len(writer) > 0xFF:
        raise ValueError(f"Master server request too long ({len(writer)} bytes)")
    writer.set_char(1, len(writer))

    return writer.to_bytes()


def decode_master_request(data: bytes) -> MasterServerRequest:
    """Decode a list request produced by encode_master_request"""
    if len(data) < 3 + len(QUERY_SETTINGS):
        raise TruncatedResponse(f"Master server request too short ({len(data)} bytes)")

    reader = BinaryReader(data, 3 + len(QUERY_SETTINGS))
    return MasterServerRequest(
        length=data[1],
        game=reader.read_cstring(),
        sub_game=reader.read_cstring(),
        validation_key=reader.read_cstring(),
    )


def record_extra_length(flag: int) -> int:
    """Number of trailing record bytes implied by a record flag byte"""
    return sum(length for mask, length in RECORD_FLAG_LENGTHS if flag & mask)


def decode_master_response(data: bytes) -> MasterServerResponse:
    """Decode a *decrypted* GameSpy master server reply.

    Layout:
        - 4 bytes requester IP
        - 2 bytes "most used" port, or 0xFFFF on error
        - Pascal string (1 byte length + data) of unknown meaning
        - Pascal string of unknown meaning
        - Server records, each:
            - 1 byte flags (see RecordFlags)
            - 4 bytes server IP
            - 2 bytes server port
            - flag-dependent trailing bytes. A cursory look shows 192.168.x.x
              and 10.x.x.x addresses here; they are skipped.
        - End record: flags 0 and IP 255.255.255.255

    Raises:
        TruncatedResponse: data is shorter than the header
        MasterServerError: the master server reported an error
    """
    if len(data) < IP_PORT_LEN:
        raise TruncatedResponse(f"Master server response too short ({len(data)} bytes)")

    reader = BinaryReader(data)
    requester_ip, common_port = reader.read_address()

    if common_port == ERROR_PORT:
        raise MasterServerError("GameSpy master server request error")

    # Halo may not use these at all. They match the Pascal string layout.
    aux_field1 = reader.read_pascal_string()
    aux_field2 = reader.read_pascal_string()

    servers = []
    while not reader.at_end():
        flag = reader.read_byte()
        extra = record_extra_length(flag)

        chunk = reader.peek_fixed_data(IP_PORT_LEN)
        if len(chunk) < IP_PORT_LEN:
            logger.debug(f"Server record cut short at offset {reader.pos}, ending scan")
            break
        address, port = unpack_address(chunk)

        # The -1 carries over from the reference decoder and only applies when
        # flag-dependent trailing bytes are present.
        reader.skip(IP_PORT_LEN + extra - 1 if extra else IP_PORT_LEN)

        if flag == 0 and address == END_OF_LIST_IP:
            break

        servers.append(ServerAddress(address, port))

    logger.debug(f"Decoded {len(servers)} server(s) for requester {requester_ip}")

    return MasterServerResponse(
        requester_ip=requester_ip,
        common_port=common_port,
        aux_field1=aux_field1,
        aux_field2=aux_field2,
        servers=servers,
    )
