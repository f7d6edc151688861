"""
Configuration system for haloquery
"""

from .client_config import QueryConfig
from .validation import ConfigValidationError

__all__ = ['QueryConfig', 'ConfigValidationError']
