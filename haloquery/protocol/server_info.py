"""
Game server query reply parser

Game servers answer a bare backslash probe with a flat string of the form
\\key1\\value1\\key2\\value2... This module turns that into a ServerInfo.
"""

import logging
import re
from typing import Dict, List, Optional, Union

from ..errors import UnrecognizedGameType
from ..models.server_info import InfoValue, ServerInfo
from .flags import decode_game_flags, decode_player_flags, decode_vehicle_flags

logger = logging.getLogger(__name__)

# "hostname" can have backslashes in it, but "gamever" always follows it
HOSTNAME_REGEX = re.compile(r'^\\hostname\\(.*?)\\gamever', re.DOTALL)

# Key and index from player values like "score_1"
PLAYER_VALUE_REGEX = re.compile(r'^(\w+)_(\d+)$')
# Key and index from team values like "score_t1"
TEAM_VALUE_REGEX = re.compile(r'^(\w+)_t(\d+)$')

INTEGER_REGEX = re.compile(r'^-?\d+$')

FIRST_KEY = 'gamever'

# Player and team indices above this are kept as plain values
MAX_SLOT_INDEX = 255


def parse_value(value: str) -> InfoValue:
    """Parse a reply value into the most appropriate type"""
    if value == '':
        return None
    if INTEGER_REGEX.match(value):
        try:
            return int(value)
        except ValueError:
            # Too many digits for int()
            return value
    return value


def _split_pairs(data: str, start: int) -> List[List[str]]:
    if start == -1:
        start = 1 if data.startswith('\\') else 0

    parts = data[start:].split('\\')
    pairs = [parts[i:i + 2] for i in range(0, len(parts), 2)]
    for pair in pairs:
        if len(pair) == 1:
            pair.append('')
    return pairs


def _slot_index(text: str) -> Optional[int]:
    """Player or team index, or None if it is out of range"""
    # Length check first, int() refuses very long digit strings
    digits = text.lstrip('0') or '0'
    if len(digits) > len(str(MAX_SLOT_INDEX)) or int(digits) > MAX_SLOT_INDEX:
        return None
    return int(digits)


def _slot_list(slots: Dict[int, Dict[str, InfoValue]]) -> List[Dict[str, InfoValue]]:
    """List positions match wire indices, gaps filled with empty records"""
    if not slots:
        return []
    return [slots.get(index, {}) for index in range(max(slots) + 1)]


def _store_player_flags(record: ServerInfo, value: str) -> bool:
    try:
        player_flags, vehicle_flags = (int(num) for num in value.split(','))
    except ValueError:
        logger.debug(f"Unparsable player_flags value: {value!r}")
        return False

    record.player_flags = player_flags
    record.player_flags_decoded = decode_player_flags(player_flags)
    record.vehicle_flags = vehicle_flags
    record.vehicle_flags_decoded = decode_vehicle_flags(vehicle_flags)
    return True


def _store_game_flags(record: ServerInfo, value: str) -> bool:
    try:
        game_flags = int(value)
    except ValueError:
        logger.debug(f"Unparsable game_flags value: {value!r}")
        return False

    record.game_flags = game_flags
    try:
        record.game_flags_decoded = decode_game_flags(game_flags)
    except UnrecognizedGameType as e:
        logger.warning(str(e))
        record.game_flags_decoded = None
        record.game_flags_error = str(e)
    return True


def parse_server_info(data: Union[str, bytes]) -> ServerInfo:
    """Split a \\key1\\value1\\key2\\value2 reply into a ServerInfo"""
    if isinstance(data, (bytes, bytearray)):
        data = data.decode('latin-1')

    match = HOSTNAME_REGEX.match(data)
    record = ServerInfo(hostname=match.group(1) if match else None)
    players: Dict[int, Dict[str, InfoValue]] = {}
    teams: Dict[int, Dict[str, InfoValue]] = {}

    # Start at "gamever" so backslashes in the hostname are never split on
    start = match.end() - len(FIRST_KEY) if match else data.find(FIRST_KEY)

    for key, value in _split_pairs(data, start):
        if not key:
            continue

        team_match = TEAM_VALUE_REGEX.match(key)
        player_match = None if team_match else PLAYER_VALUE_REGEX.match(key)
        slot_match = team_match or player_match
        index = _slot_index(slot_match.group(2)) if slot_match else None

        if slot_match and index is None:
            logger.debug(f"Index out of range, keeping {key!r} as a plain value")
            record.values[key] = parse_value(value)
        elif team_match:
            teams.setdefault(index, {})[team_match.group(1)] = parse_value(value)
        elif player_match:
            players.setdefault(index, {})[player_match.group(1)] = parse_value(value)
        elif key == 'player_flags' and _store_player_flags(record, value):
            continue
        elif key == 'game_flags' and _store_game_flags(record, value):
            continue
        else:
            record.values[key] = parse_value(value)

    record.players = _slot_list(players)
    record.teams = _slot_list(teams)
    return record
