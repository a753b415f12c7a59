"""
HTTP JSON-RPC transport for the wallet handler.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any

from aiohttp import web
from loguru import logger

from walletrpc.config import Settings
from walletrpc.errors import InvalidRequest, ParseError, RpcError
from walletrpc.rpc.handler import WalletRpcHandler
from walletrpc.rpc.session import WalletSession


class RpcServer:
    def __init__(
        self,
        settings: Settings,
        session: WalletSession,
        handler: WalletRpcHandler | None = None,
    ) -> None:
        self.settings = settings
        self.session = session
        self.handler = handler or WalletRpcHandler()
        self.app = web.Application(client_max_size=settings.max_request_size)
        self.runner: web.AppRunner | None = None
        self.site: web.TCPSite | None = None
        self._stopping = False
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_post("/", self._handle_rpc)
        self.app.router.add_get("/health", self._handle_health)

    async def _handle_health(self, _request: web.Request) -> web.Response:
        return web.json_response(
            {
                "status": "healthy",
                "wallet_loaded": self.session.wallet is not None,
                "methods": self.handler.methods,
            }
        )

    async def _handle_rpc(self, request: web.Request) -> web.Response:
        try:
            body = json.loads(await request.text())
        except (json.JSONDecodeError, UnicodeDecodeError):
            return web.json_response(self._error_response(None, ParseError()))

        # Handlers block on the wallet and relay, so they run off the event loop
        if isinstance(body, list):
            if not body:
                return web.json_response(self._error_response(None, InvalidRequest()))
            return web.json_response(await asyncio.to_thread(self.dispatch_batch, body))

        return web.json_response(await asyncio.to_thread(self.dispatch, body))

    def dispatch_batch(self, requests: list[Any]) -> list[dict[str, Any]]:
        return [self.dispatch(request) for request in requests]

    def dispatch(self, request: Any) -> dict[str, Any]:
        """Run one JSON-RPC request object and build its response object."""
        if not isinstance(request, dict):
            return self._error_response(None, InvalidRequest())

        request_id = request.get("id")
        method = request.get("method")
        if not isinstance(method, str):
            return self._error_response(request_id, InvalidRequest())

        try:
            result = self.handler.process(self.session, method, request.get("params", []))
        except RpcError as e:
            logger.debug(f"RPC {method} failed: {e.code} {e.message}")
            return self._error_response(request_id, e)
        except Exception as e:
            logger.exception(f"Unexpected error handling {method}: {e}")
            return self._error_response(request_id, RpcError())

        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _error_response(self, request_id: Any, error: RpcError) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": request_id, "error": error.to_json()}

    async def start(self) -> None:
        logger.info(f"Starting wallet RPC server on {self.settings.host}:{self.settings.port}")

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        self.site = web.TCPSite(self.runner, self.settings.host, self.settings.port)
        await self.site.start()

        logger.info(
            f"Wallet RPC server running at http://{self.settings.host}:{self.settings.port}"
        )

    async def stop(self) -> None:
        if self._stopping:
            return
        self._stopping = True

        logger.info("Stopping wallet RPC server...")

        if self.site:
            with contextlib.suppress(RuntimeError):
                await self.site.stop()
            self.site = None

        if self.runner:
            with contextlib.suppress(RuntimeError):
                await self.runner.cleanup()
            self.runner = None

        self.session.close()
        logger.info("Wallet RPC server stopped")
