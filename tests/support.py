"""Local aiohttp backends for the network tests."""

import socket
from contextlib import asynccontextmanager

from aiohttp.test_utils import TestServer

from speedcore.servers import Server


@asynccontextmanager
async def local_backend(app, **server_kwargs):
    """Serve *app* on 127.0.0.1 and yield a ``Server`` pointing at it."""
    backend = TestServer(app, host="127.0.0.1")
    await backend.start_server()
    try:
        yield Server(
            id="local",
            name="local",
            ip="127.0.0.1",
            host="127.0.0.1",
            port=backend.port,
            **server_kwargs,
        )
    finally:
        await backend.close()


def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
