"""aiohttp.web route layer serving the cached feeds."""

from __future__ import annotations

from collections.abc import AsyncIterator

from aiohttp import web

from pygrandlyon._constants import METRO_LAYER
from pygrandlyon.client import GrandLyonClient
from pygrandlyon.config import GrandLyonConfig

CLIENT_KEY = web.AppKey("client", GrandLyonClient)
_OWNS_CLIENT_KEY = web.AppKey("owns_client", bool)

routes = web.RouteTableDef()


@routes.get("/api/vehicles")
async def get_vehicles(request: web.Request) -> web.Response:
    snapshot = await request.app[CLIENT_KEY].get_vehicle_positions()
    return web.json_response(snapshot.to_payload())


@routes.get("/api/metro-lines")
async def get_metro_lines(request: web.Request) -> web.Response:
    return web.json_response(await request.app[CLIENT_KEY].get_layer(METRO_LAYER))


@routes.get("/api/lines/{type}")
async def get_lines(request: web.Request) -> web.Response:
    layer = request.match_info["type"]
    return web.json_response(await request.app[CLIENT_KEY].get_layer(layer))


@routes.get("/health")
async def health(_request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def _client_context(app: web.Application) -> AsyncIterator[None]:
    client = app[CLIENT_KEY]
    await client.start()
    await client.prefetch_layers()
    yield
    if app[_OWNS_CLIENT_KEY]:
        await client.close()


def create_app(config: GrandLyonConfig | None = None, *, client: GrandLyonClient | None = None) -> web.Application:
    """Build the web application.

    Either *config* or a prebuilt *client* must be given. A client built
    here is started on startup and closed on cleanup; an injected one is
    started but left open.
    """
    if client is None:
        if config is None:
            raise ValueError("create_app() needs a config or a client")
        client = GrandLyonClient(config)
        owns_client = True
    else:
        owns_client = False

    app = web.Application()
    app[CLIENT_KEY] = client
    app[_OWNS_CLIENT_KEY] = owns_client
    app.add_routes(routes)
    app.cleanup_ctx.append(_client_context)
    return app
