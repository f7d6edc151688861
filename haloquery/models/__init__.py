"""
haloquery Models - Data models for servers and their replies
"""

from .server import ServerAddress, Server, ServerResponse, UDPResponse, MasterServerResponse
from .server_info import ServerInfo, InfoValue

__all__ = [
    'ServerAddress', 'Server', 'ServerResponse', 'UDPResponse',
    'MasterServerResponse', 'ServerInfo', 'InfoValue'
]
