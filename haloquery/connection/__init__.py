"""
haloquery Connection - asyncio socket clients with quiet period reads
"""

from .quiet_period import QuietPeriod
from .tcp_client import TCPClient
from .udp_client import UDPClient

__all__ = ['QuietPeriod', 'TCPClient', 'UDPClient']
