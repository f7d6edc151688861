"""
Configuration validation utilities
"""

class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""
    pass


def validate_host(host: str) -> str:
    """Validate host address"""
    if not host or not isinstance(host, str):
        raise ConfigValidationError("Host must be a non-empty string")

    if len(host.strip()) == 0:
        raise ConfigValidationError("Host cannot be empty or whitespace")

    return host.strip()


def validate_port(port: int) -> int:
    """Validate port number"""
    if not isinstance(port, int) or isinstance(port, bool):
        raise ConfigValidationError("Port must be an integer")

    # 0xFFFF is the master server's error marker, never a real port
    if port < 1 or port >= 0xFFFF:
        raise ConfigValidationError("Port must be between 1 and 65534")

    return port


def validate_timeout(timeout: float) -> float:
    """Validate timeout value"""
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool):
        raise ConfigValidationError("Timeout must be a number")

    if timeout <= 0:
        raise ConfigValidationError("Timeout must be greater than 0")

    return float(timeout)
