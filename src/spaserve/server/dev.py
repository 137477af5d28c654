"""HTTP server for ``spaserve serve``.

Runs the live ``StaticHandler`` object under uvicorn. Each request is a
separate task on the event loop; file I/O is pushed to worker threads by
the handler itself.
"""

from spaserve.config import ServerConfig
from spaserve.handler import StaticHandler


def run_dev_server(handler: StaticHandler, config: ServerConfig) -> None:
    """Start uvicorn with *handler* as the ASGI app and block until shutdown.

    Args:
        handler: The static handler to serve.
        config: Bind address, port and log level.
    """
    import uvicorn

    uvicorn.run(
        handler,
        host=config.host,
        port=config.port,
        log_level=config.log_level,
        lifespan="on",
    )
