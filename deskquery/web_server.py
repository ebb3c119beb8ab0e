"""HTTP API for query interpretation, answering and cache management."""

import logging

from aiohttp import web

from deskquery.engine import QueryEngine
from deskquery.errors import ValidationError
from deskquery.query import check_query_length

logger = logging.getLogger(__name__)


class WebServer:
    """aiohttp server exposing the query engine."""

    def __init__(self, engine: QueryEngine, port: int = 3000):
        """Initialize web server."""
        self.engine = engine
        self.port = port
        self.app = web.Application()
        self._setup_routes()
        logger.info(f"Web server initialized on port {port}")

    def _setup_routes(self):
        """Set up HTTP routes."""
        self.app.router.add_get("/", self._handle_health)
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_post("/api/query/interpret", self._handle_interpret)
        self.app.router.add_post("/api/query", self._handle_query)
        self.app.router.add_post("/api/refresh", self._handle_refresh)
        self.app.router.add_get("/api/context/stats", self._handle_context_stats)
        self.app.router.add_post("/api/context/invalidate", self._handle_context_invalidate)
        logger.info("Routes configured: /, /health, /api/query, /api/query/interpret, /api/refresh, /api/context/*")

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response(
            {
                "status": "healthy",
                "service": "deskquery",
                "storage": self.engine.store.describe(),
                "aiAvailable": self.engine.ai_available,
                "interpretationCacheSize": self.engine.interpretation_cache.size,
                "context": self.engine.context_stats(),
            }
        )

    async def _read_query(self, request: web.Request) -> str:
        try:
            data = await request.json()
        except ValueError as e:
            raise ValidationError("Request body must be JSON") from e
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return check_query_length(data.get("query"), self.engine.settings.max_query_length)

    async def _handle_interpret(self, request: web.Request) -> web.Response:
        """
        Interpret a query without answering it.

        Expects JSON: {"query": "..."}
        """
        try:
            query = await self._read_query(request)
            logger.info(f"Interpreting: {query}")
            result = await self.engine.orchestrator.interpret(query)
            return web.json_response({"success": True, **result.to_dict()})

        except ValidationError as e:
            return web.json_response({"success": False, "error": f"Validation error: {e}"}, status=400)
        except Exception as e:
            logger.error(f"Error interpreting query: {e}", exc_info=True)
            return web.json_response({"success": False, "error": "Internal server error"}, status=500)

    async def _handle_query(self, request: web.Request) -> web.Response:
        """
        Answer a query.

        Expects JSON: {"query": "..."}
        """
        try:
            query = await self._read_query(request)
            result = await self.engine.processor.process_query(query)
            return web.json_response(result.to_dict())

        except ValidationError as e:
            return web.json_response({"error": f"Validation error: {e}"}, status=400)
        except Exception as e:
            logger.error(f"Error handling query: {e}", exc_info=True)
            return web.json_response({"error": "Internal server error"}, status=500)

    async def _handle_refresh(self, request: web.Request) -> web.Response:
        """Refresh the snapshot from the configured source."""
        try:
            success, message = await self.engine.processor.refresh()
            return web.json_response({"success": success, "message": message}, status=200 if success else 502)

        except Exception as e:
            logger.error(f"Error refreshing snapshot: {e}", exc_info=True)
            return web.json_response({"success": False, "error": "Internal server error"}, status=500)

    async def _handle_context_stats(self, request: web.Request) -> web.Response:
        return web.json_response(self.engine.context_stats())

    async def _handle_context_invalidate(self, request: web.Request) -> web.Response:
        self.engine.context_builder.invalidate()
        return web.json_response({"success": True})

    async def start(self):
        """Start the web server."""
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, "0.0.0.0", self.port)
        await site.start()
        logger.info(f"Web server started on port {self.port}")
        logger.info(f"Query endpoint: http://localhost:{self.port}/api/query")
        return runner

    async def stop(self, runner):
        """Stop the web server."""
        await runner.cleanup()
        await self.engine.close()
        logger.info("Web server stopped")
