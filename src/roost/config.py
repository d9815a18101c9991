"""Server configuration.

One frozen dataclass shared by the server, the dispatch wrappers and the
transport. Nested servers carry their own instance.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(port=3000, expose_resolution_errors=False)
    """

    # Transport
    host: str = "127.0.0.1"
    port: int = 8000
    backlog: int = 2048
    startup_poll_interval: float = 0.01  # seconds between "is uvicorn up yet" checks

    # Logging (uvicorn keeps the host application's logging config)
    log_level: str = "info"
    access_log: bool = False

    # Dispatch
    single_flight: bool = True  # one resolution per wrapper under concurrent first requests

    # Error bodies
    expose_resolution_errors: bool = True
    server_error_body: str = "Internal Server Error"
