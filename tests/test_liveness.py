"""Tests for speedcore.liveness against a local backend."""

import asyncio
import unittest

from aiohttp import web

from speedcore.constants import ANDROID_UA
from speedcore.liveness import is_server_up
from speedcore.servers import Server
from support import local_backend, unused_port


def _app(seen_agents):
    async def ok(request):
        seen_agents.append(request.headers.get("User-Agent"))
        return web.Response(text="")

    async def forbidden(request):
        return web.Response(status=403)

    async def broken(request):
        return web.Response(status=500)

    async def slow(request):
        await asyncio.sleep(1.0)
        return web.Response(text="late")

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/forbidden", forbidden)
    app.router.add_get("/broken", broken)
    app.router.add_get("/slow", slow)
    return app


class TestIsServerUp(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.agents = []
        self._backend = local_backend(_app(self.agents))
        self.server = await self._backend.__aenter__()

    async def asyncTearDown(self):
        await self._backend.__aexit__(None, None, None)

    async def test_200_is_up(self):
        self.server.ping_uri = "/ok"
        self.assertTrue(await is_server_up(self.server))
        self.assertEqual(self.agents, [ANDROID_UA])

    async def test_403_is_up(self):
        self.server.ping_uri = "/forbidden"
        self.assertTrue(await is_server_up(self.server))

    async def test_500_is_down(self):
        self.server.ping_uri = "/broken"
        self.assertFalse(await is_server_up(self.server))

    async def test_404_is_down(self):
        self.server.ping_uri = "/missing"
        self.assertFalse(await is_server_up(self.server))

    async def test_timeout_is_down(self):
        self.server.ping_uri = "/slow"
        self.assertFalse(await is_server_up(self.server, timeout=0.2))


class TestUnreachable(unittest.IsolatedAsyncioTestCase):
    async def test_connection_refused_is_down(self):
        server = Server(id="x", host="127.0.0.1", port=unused_port())
        self.assertFalse(await is_server_up(server, timeout=2.0))

    async def test_malformed_url_is_down(self):
        server = Server(id="x", host="", port=80)
        self.assertFalse(await is_server_up(server))


if __name__ == "__main__":
    unittest.main()
