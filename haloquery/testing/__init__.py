"""
Testing infrastructure for haloquery
"""

from .mock_servers import (
    MockGameServer,
    MockMasterServer,
    ReplyScenario,
    build_master_response,
    passthrough_decryptor,
    xor_cipher,
)

__all__ = [
    'MockGameServer', 'MockMasterServer', 'ReplyScenario',
    'build_master_response', 'passthrough_decryptor', 'xor_cipher'
]
