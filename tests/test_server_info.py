"""
Tests for game server info parsing
"""

import sys

import pytest

from haloquery.models import ServerInfo
from haloquery.protocol.flags import GAME_FLAGS_LAYOUTS, PLAYER_FLAGS_LAYOUT, GameType
from haloquery.protocol.server_info import parse_server_info, parse_value


class TestParseValue:
    """Test value type inference"""

    def test_integers(self):
        assert parse_value('5') == 5
        assert parse_value('-3') == -3
        assert parse_value('0') == 0

    def test_empty_is_none(self):
        assert parse_value('') is None

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="int() has no digit limit")
    def test_oversized_integer_stays_string(self):
        """Digit strings too long for int() are left as strings"""
        value = '7' * 5000
        assert parse_value(value) == value

    def test_strings_stay_strings(self):
        """Only whole integers are converted"""
        assert parse_value('1.0') == '1.0'
        assert parse_value('01.00.09.0620') == '01.00.09.0620'
        assert parse_value('bloodgulch') == 'bloodgulch'


class TestParseServerInfo:
    """Test splitting replies into ServerInfo records"""

    def test_hostname_with_backslash(self):
        """Hostnames keep their backslashes, indexed keys become lists"""
        info = parse_server_info('\\hostname\\My\\Server\\gamever\\1.0\\score_0\\5\\score_1\\3\\score_t0\\10')

        assert info.hostname == 'My\\Server'
        assert info.values['gamever'] == '1.0'
        assert info.players == [{'score': 5}, {'score': 3}]
        assert info.teams == [{'score': 10}]

    def test_player_fields_grouped(self):
        """Player keys with the same index land in the same record"""
        info = parse_server_info(
            '\\hostname\\box\\gamever\\01.00.09.0620\\numplayers\\2'
            '\\player_0\\Chief\\score_0\\12\\ping_0\\40'
            '\\player_1\\Arbiter\\score_1\\-1\\ping_1\\95'
        )
        assert info['numplayers'] == 2
        assert info.players == [
            {'player': 'Chief', 'score': 12, 'ping': 40},
            {'player': 'Arbiter', 'score': -1, 'ping': 95},
        ]

    def test_index_gaps_filled(self):
        """List positions match wire indices"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\score_2\\7')
        assert info.players == [{}, {}, {'score': 7}]

    def test_huge_index_kept_as_value(self):
        """Indices past the slot limit don't grow the player list"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\score_99999999999\\1\\score_t256\\4\\score_0\\2')
        assert info.players == [{'score': 2}]
        assert info.teams == []
        assert info.values['score_99999999999'] == 1
        assert info.values['score_t256'] == 4

    def test_highest_index_in_range(self):
        """The largest allowed index still becomes a list position"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\ping_255\\40\\ping_0007\\9')
        assert len(info.players) == 256
        assert info.players[255] == {'ping': 40}
        assert info.players[7] == {'ping': 9}

    def test_long_digit_index(self):
        """Index strings too long to convert are kept as plain values"""
        key = 'score_' + '9' * 5000
        info = parse_server_info(f'\\hostname\\x\\gamever\\1\\{key}\\1')
        assert info.players == []
        assert info.values[key] == 1

    def test_team_keys_before_player_keys(self):
        """"_t" suffixed keys always count as team keys"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\team_t1\\Blue\\team_0\\Red')
        assert info.teams == [{}, {'team': 'Blue'}]
        assert info.players == [{'team': 'Red'}]

    def test_empty_and_trailing_values(self):
        """Empty values become None, a dangling key pairs with nothing"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\password\\\\final')
        assert info.values['password'] is None
        assert info.values['final'] is None

    def test_missing_hostname(self):
        """Replies without a hostname still parse"""
        info = parse_server_info('\\gamever\\01.00.09.0620\\mapname\\bloodgulch')
        assert info.hostname is None
        assert info.values == {'gamever': '01.00.09.0620', 'mapname': 'bloodgulch'}

    def test_bytes_input(self):
        """Raw datagram bytes are accepted"""
        info = parse_server_info(b'\\hostname\\caf\xe9\\gamever\\1\\maxplayers\\16')
        assert info.hostname == 'café'
        assert info.values['maxplayers'] == 16

    def test_empty_reply(self):
        info = parse_server_info('')
        assert info.hostname is None
        assert info.players == []
        assert info.values == {}


class TestFlagDecoding:
    """Test flag keys in replies"""

    def test_player_and_vehicle_flags(self):
        """player_flags holds both player and vehicle flags"""
        player_flags = PLAYER_FLAGS_LAYOUT.encode(lives=1, weapon_set=6, friendly_fire=2)
        vehicle_flags = (2 << 29) | (7 << 25) | (1 << 21)
        info = parse_server_info(f'\\hostname\\x\\gamever\\1\\player_flags\\{player_flags},{vehicle_flags}')

        assert info.player_flags == player_flags
        assert info.player_flags_decoded['lives'] == 1
        assert info.player_flags_decoded['weapon_set'] == 6
        assert info.player_flags_decoded['friendly_fire'] == 2
        assert info.vehicle_flags == vehicle_flags
        assert info.vehicle_flags_decoded == {'respawn_time': 2, 'red_team': 7, 'blue_team': 1}
        assert 'player_flags' not in info.values

    def test_game_flags(self):
        """game_flags is decoded with its game type's layout"""
        game_flags = GAME_FLAGS_LAYOUTS[GameType.KING].encode(game_type=4, moving_hill=1) | 4
        info = parse_server_info(f'\\hostname\\x\\gamever\\1\\game_flags\\{game_flags}')

        assert info.game_flags == game_flags
        assert info.game_flags_decoded == {'game_type': 4, 'moving_hill': 1}
        assert info.game_flags_error is None

    def test_unrecognized_game_type(self):
        """An unknown game type marks the record instead of failing the parse"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\game_flags\\6\\mapname\\bloodgulch')

        assert info.game_flags == 6
        assert info.game_flags_decoded is None
        assert 'Unrecognized gametype' in info.game_flags_error
        assert info.values['mapname'] == 'bloodgulch'

        record = info.to_dict()
        assert record['game_flags_decoded'] is None
        assert record['game_flags_error'] == info.game_flags_error

    def test_unparsable_flags_kept_raw(self):
        """Flag values that aren't numbers are stored as plain values"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\player_flags\\abc\\game_flags\\x')
        assert info.player_flags is None
        assert info.values['player_flags'] == 'abc'
        assert info.values['game_flags'] == 'x'


class TestServerInfoRecord:
    """Test ServerInfo access helpers"""

    def test_to_dict_omits_missing(self):
        """Fields that never appeared are left out"""
        info = parse_server_info('\\hostname\\x\\gamever\\1')
        assert info.to_dict() == {'hostname': 'x', 'gamever': 1}

    def test_item_access(self):
        """Wire keys read like a dict"""
        info = parse_server_info('\\hostname\\x\\gamever\\1\\score_0\\3')
        assert info['hostname'] == 'x'
        assert info['players'] == [{'score': 3}]
        assert 'gamever' in info
        assert 'mapname' not in info
        assert info.get('mapname', 'none') == 'none'
        assert set(info) == {'hostname', 'players', 'gamever'}
        with pytest.raises(KeyError):
            info['mapname']

    def test_default_record(self):
        info = ServerInfo()
        assert info.to_dict() == {}
        assert 'hostname' not in info


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
