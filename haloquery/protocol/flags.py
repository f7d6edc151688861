"""
Halo server flag decoders

Game servers pack their rule settings into three integers: player flags,
vehicle flags, and game flags. The game flag layout depends on the game type
stored in its low bits.

Layouts follow the published Halo-Status flag tables:
https://github.com/Chaosvex/Halo-Status/blob/master/script/flags.php
"""

from enum import IntEnum
from typing import Dict

from ..errors import UnrecognizedGameType
from .bitfield import Bitfield, BitfieldLayout


class GameType(IntEnum):
    """Game type codes stored in game flags"""
    UNRECOGNIZED = 0  # Not vanilla; some server extensions use it for custom modes
    CTF = 1
    SLAYER = 2
    ODDBALL = 3
    KING = 4
    RACE = 5


# The game type is repeated in the low bits of the flags, which is what we
# dispatch on. Three bits, same width as the game_type field.
GAME_TYPE_MASK = 0x7

GAME_TYPE_FIELD = Bitfield('game_type', 3)

PLAYER_FLAGS_LAYOUT = BitfieldLayout([
    Bitfield('lives', 2),
    Bitfield('health_percent', 3),
    Bitfield('shields_enabled', 1),
    Bitfield('respawn_time', 2),
    Bitfield('respawn_growth', 2),
    Bitfield('odd_man_out', 1),
    Bitfield('invisible', 1),
    Bitfield('suicide_penalty', 2),
    Bitfield('infinite_grenades', 1),  # Keep this off, you animals
    Bitfield('weapon_set', 4),
    Bitfield('default_equipment', 1),
    Bitfield('indicator', 2),
    Bitfield('players_on_radar', 2),
    Bitfield('friend_indicators', 1),
    Bitfield('friendly_fire', 2),
    Bitfield('friendly_fire_penalty', 2),
    Bitfield('auto_balance', 1),
])

VEHICLE_FLAGS_LAYOUT = BitfieldLayout([
    Bitfield('respawn_time', 3),
    Bitfield('red_team', 4),
    Bitfield('blue_team', 4),
])

GAME_FLAGS_LAYOUTS: Dict[GameType, BitfieldLayout] = {
    GameType.CTF: BitfieldLayout([
        GAME_TYPE_FIELD,
        Bitfield('assault', 2),  # Second bit unused
        Bitfield('flag_must_reset', 1),
        Bitfield('flag_must_be_home', 1),
        Bitfield('single_flag_time', 3),
    ]),
    GameType.SLAYER: BitfieldLayout([
        GAME_TYPE_FIELD,
        Bitfield('death_bonus', 2),  # Second bit unused
        Bitfield('kill_penalty', 1),
        Bitfield('kill_in_order', 1),
    ]),
    GameType.ODDBALL: BitfieldLayout([
        GAME_TYPE_FIELD,
        Bitfield('random_start', 2),  # Second bit unused
        Bitfield('ball_speed_percent', 2),
        Bitfield('trait_with_ball', 2),
        Bitfield('trait_without_ball', 2),
        Bitfield('ball_type', 2),
        Bitfield('num_balls', 5),
    ]),
    GameType.KING: BitfieldLayout([
        GAME_TYPE_FIELD,
        Bitfield('moving_hill', 1),
    ]),
    GameType.RACE: BitfieldLayout([
        GAME_TYPE_FIELD,
        Bitfield('race_type', 2),
        Bitfield('team_scoring', 2),
    ]),
}


def decode_player_flags(value: int) -> Dict[str, int]:
    return PLAYER_FLAGS_LAYOUT.decode(value)


def decode_vehicle_flags(value: int) -> Dict[str, int]:
    return VEHICLE_FLAGS_LAYOUT.decode(value)


def game_type_of(value: int) -> int:
    """Extract the game type discriminant from a game flags integer"""
    return value & GAME_TYPE_MASK


def decode_game_flags(value: int) -> Dict[str, int]:
    """Decode game flags using the layout selected by their game type

    Raises:
        UnrecognizedGameType: the game type has no known layout
    """
    game_type = game_type_of(value)

    if game_type == GameType.UNRECOGNIZED:
        # We don't know what the remaining bits mean for custom game types
        return {'game_type': int(GameType.UNRECOGNIZED)}

    try:
        layout = GAME_FLAGS_LAYOUTS[GameType(game_type)]
    except ValueError:
        raise UnrecognizedGameType(game_type, value) from None

    return layout.decode(value)
