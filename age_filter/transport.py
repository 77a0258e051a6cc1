"""
Transport configuration for the registry age filter server.

The filter is only ever served over HTTP; this module validates where it
listens.
"""

from dataclasses import dataclass


@dataclass
class HttpConfig:
    """Configuration for the HTTP listener."""

    host: str = "127.0.0.1"
    port: int = 4873

    def __post_init__(self):
        """Validate HTTP configuration."""
        if not isinstance(self.port, int):
            raise ValueError("Port must be an integer")

        if not (1 <= self.port <= 65535):
            raise ValueError("Port must be between 1 and 65535")

        if not self.host:
            raise ValueError("Host cannot be empty")


def create_transport_config(host: str = "127.0.0.1", port: int = 4873) -> HttpConfig:
    """
    Create an HTTP transport configuration.

    Args:
        host: Host to bind to
        port: Port to listen on

    Returns:
        Validated HTTP configuration

    Raises:
        ValueError: If the configuration is invalid
    """
    return HttpConfig(host=host, port=port)
