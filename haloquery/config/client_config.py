"""
Query Configuration - Settings shared by master server and game server queries
"""

from dataclasses import dataclass, fields
from typing import Dict, Any

from .validation import validate_host, validate_port, validate_timeout, ConfigValidationError
from ..utils.logging_config import configure_logging


@dataclass
class QueryConfig:
    """Query configuration settings. All durations are in seconds."""

    # Master server
    master_host: str = "hosthpc.com"
    master_port: int = 28910
    master_timeout: float = 3.0

    # Reads end once nothing has arrived for this long
    end_delay: float = 0.5

    # Game servers listen here unless told otherwise
    server_port: int = 2302

    # Logging
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'master_host': self.master_host,
            'master_port': self.master_port,
            'master_timeout': self.master_timeout,
            'end_delay': self.end_delay,
            'server_port': self.server_port,
            'log_level': self.log_level
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QueryConfig':
        """Create from dictionary, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def update(self, **kwargs):
        """Update configuration values"""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def validate(self) -> 'QueryConfig':
        """Validate all settings, raising ConfigValidationError on the first bad one"""
        self.master_host = validate_host(self.master_host)
        self.master_port = validate_port(self.master_port)
        self.server_port = validate_port(self.server_port)
        self.master_timeout = validate_timeout(self.master_timeout)
        self.end_delay = validate_timeout(self.end_delay)
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigValidationError(f"Unknown log level: {self.log_level}")
        return self

    def configure_logging(self) -> 'QueryConfig':
        """Apply log_level to the haloquery module loggers"""
        configure_logging(self.log_level)
        return self
