"""
Logging configuration for haloquery with clear module prefixes
"""

import logging
from typing import Union


class ModuleLogger:
    """Custom logger that adds module-specific prefixes"""

    # Module prefix mapping
    MODULE_PREFIXES = {
        'haloquery.protocol': '[PROTO]',
        'haloquery.connection': '[NET]',
        'haloquery.masterserver': '[MASTER]',
        'haloquery.handler': '[QUERY]',
        'haloquery.testing': '[MOCK]',
    }

    @classmethod
    def prefix_for(cls, name: str) -> str:
        """Find the prefix for a logger name"""
        for module_name, module_prefix in cls.MODULE_PREFIXES.items():
            if name.startswith(module_name):
                return module_prefix
        return '[HALOQUERY]'

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with appropriate prefix for the module"""
        logger = logging.getLogger(name)

        # Don't add handler if already configured
        if logger.handlers:
            return logger

        handler = logging.StreamHandler()
        handler.setFormatter(ModulePrefixFormatter(cls.prefix_for(name)))

        logger.addHandler(handler)
        logger.propagate = False  # Don't propagate to root logger

        return logger


class ModulePrefixFormatter(logging.Formatter):
    """Custom formatter that adds module prefix to log messages"""

    def __init__(self, prefix: str):
        self.prefix = prefix
        # Include time, module prefix, level, and message
        super().__init__(
            fmt='%(asctime)s - %(prefix)s %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

    def format(self, record):
        record.prefix = self.prefix
        return super().format(record)


def configure_logging(level: Union[int, str] = logging.INFO):
    """Configure logging for the whole haloquery package"""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    # Configure specific module loggers
    for module_name in ModuleLogger.MODULE_PREFIXES:
        ModuleLogger.get_logger(module_name).setLevel(level)
