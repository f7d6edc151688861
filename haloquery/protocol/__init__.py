"""
haloquery Protocol - Wire codecs for GameSpy master servers and Halo game servers
"""

from .bitfield import Bitfield, BitfieldLayout, decode
from .flags import (
    GameType,
    PLAYER_FLAGS_LAYOUT,
    VEHICLE_FLAGS_LAYOUT,
    GAME_FLAGS_LAYOUTS,
    decode_player_flags,
    decode_vehicle_flags,
    decode_game_flags,
)
from .gamespy import (
    GAME_KEYS,
    MASTER_SERVER_ALIASES,
    encode_master_request,
    decode_master_request,
    decode_master_response,
    make_validation_key,
    resolve_game_code,
)
from .server_info import parse_server_info

__all__ = [
    'Bitfield', 'BitfieldLayout', 'decode',
    'GameType', 'PLAYER_FLAGS_LAYOUT', 'VEHICLE_FLAGS_LAYOUT', 'GAME_FLAGS_LAYOUTS',
    'decode_player_flags', 'decode_vehicle_flags', 'decode_game_flags',
    'GAME_KEYS', 'MASTER_SERVER_ALIASES',
    'encode_master_request', 'decode_master_request', 'decode_master_response',
    'make_validation_key', 'resolve_game_code',
    'parse_server_info',
]
