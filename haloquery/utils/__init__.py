"""
haloquery Utilities - Utility functions and helpers
"""

from .logging_config import ModuleLogger, ModulePrefixFormatter, configure_logging

__all__ = [
    'ModuleLogger',
    'ModulePrefixFormatter',
    'configure_logging',
]
