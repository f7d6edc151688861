"""
Server info record

Structured form of the \\key\\value reply sent by a game server. Indexed keys
(score_0, name_1, score_t0, ...) are grouped into the players and teams lists,
flag integers are stored both raw and decoded, everything else lands in values.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

InfoValue = Union[str, int, None]

_FLAG_KEYS = (
    'player_flags',
    'player_flags_decoded',
    'vehicle_flags',
    'vehicle_flags_decoded',
    'game_flags',
    'game_flags_decoded',
    'game_flags_error',
)


@dataclass
class ServerInfo:
    """Parsed game server reply"""

    hostname: Optional[str] = None
    players: List[Dict[str, InfoValue]] = field(default_factory=list)
    teams: List[Dict[str, InfoValue]] = field(default_factory=list)

    player_flags: Optional[int] = None
    player_flags_decoded: Optional[Dict[str, int]] = None
    vehicle_flags: Optional[int] = None
    vehicle_flags_decoded: Optional[Dict[str, int]] = None
    game_flags: Optional[int] = None
    game_flags_decoded: Optional[Dict[str, int]] = None
    game_flags_error: Optional[str] = None  # Set when game_flags could not be decoded

    values: Dict[str, InfoValue] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        if key in ('hostname', 'players', 'teams') or key in _FLAG_KEYS:
            return getattr(self, key)
        return self.values[key]

    def __contains__(self, key: str) -> bool:
        if key in ('players', 'teams') or key in _FLAG_KEYS:
            return getattr(self, key) not in (None, [])
        if key == 'hostname':
            return self.hostname is not None
        return key in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_dict())

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by wire key, like dict.get"""
        if key in self:
            return self[key]
        return default

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict, omitting fields that never appeared"""
        record: Dict[str, Any] = {}
        if self.hostname is not None:
            record['hostname'] = self.hostname
        if self.players:
            record['players'] = [dict(player) for player in self.players]
        if self.teams:
            record['teams'] = [dict(team) for team in self.teams]

        for key in _FLAG_KEYS:
            value = getattr(self, key)
            if value is not None:
                record[key] = dict(value) if isinstance(value, dict) else value
        # A failed decode still shows up, as None next to the error
        if self.game_flags_error is not None:
            record['game_flags_decoded'] = None

        record.update(self.values)
        return record
