"""
HTTP API for the rankings scraper.

Serves the persisted consolidated data, triggers scrapes and exposes
the per-year cache. One RankingsPipeline is shared by all handlers.
"""

import asyncio
from datetime import datetime, timezone

import structlog
from aiohttp import web

from rankings_scraper.config.loader import Settings
from rankings_scraper.core.errors import FatalFetchError, PersistenceError
from rankings_scraper.orchestrator import RankingsPipeline

logger = structlog.get_logger(__name__)

PIPELINE_KEY = web.AppKey("pipeline", RankingsPipeline)

ENDPOINTS = [
    "/health",
    "/api/get-data",
    "/api/data-info",
    "/api/scrape-and-save",
    "/api/scrape-year/{year}",
    "/api/scrape-all",
    "/api/cached-data",
]


def _pipeline(request: web.Request) -> RankingsPipeline:
    return request.app[PIPELINE_KEY]


def _error(message: str, status: int, **extra) -> web.Response:
    return web.json_response({"error": message, **extra}, status=status)


async def handle_index(request):
    """Service description."""
    return web.json_response({
        "status": "Rankings scraper backend is running!",
        "dataSource": "JSON file storage",
        "endpoints": ENDPOINTS,
    })


async def handle_health(request):
    """Health check."""
    return web.json_response({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "dataFile": _pipeline(request).store.path.name,
    })


async def handle_get_data(request):
    """Persisted consolidated data."""
    try:
        data = await _pipeline(request).load_dataset()
    except PersistenceError as e:
        logger.error("get_data_failed", error=str(e))
        return _error("Failed to load data", 500)

    consolidated = data.get("consolidatedData") if data else None
    if not isinstance(consolidated, list):
        return _error("No data found. Run /api/scrape-and-save first.", 404)

    return web.json_response({
        "consolidatedData": consolidated,
        "lastUpdated": data.get("lastUpdated"),
        "totalChurches": len(consolidated),
        "yearsCovered": data.get("yearsCovered", []),
    })


async def handle_data_info(request):
    """Metadata about the persisted data file."""
    pipeline = _pipeline(request)
    try:
        data = await pipeline.load_dataset()
    except PersistenceError as e:
        logger.error("data_info_failed", error=str(e))
        return _error("Failed to check data file", 500)

    if not data:
        return web.json_response({
            "exists": False,
            "message": "No data file found. Run scrape-and-save to create it.",
        })

    return web.json_response({
        "exists": True,
        "lastUpdated": data.get("lastUpdated"),
        "totalChurches": len(data.get("consolidatedData") or []),
        "yearsCovered": data.get("yearsCovered", []),
        "fileSize": pipeline.store.file_size(),
    })


async def handle_scrape_and_save(request):
    """Full fresh scrape, streamed as plain-text progress, then persisted."""
    response = web.StreamResponse(
        status=200,
        headers={"Content-Type": "text/plain; charset=utf-8"},
    )
    response.enable_chunked_encoding()
    await response.prepare(request)

    async def write(line: str) -> None:
        await response.write(line.encode("utf-8"))

    try:
        await _pipeline(request).scrape_and_save(on_progress=write)
    except ConnectionResetError:
        logger.warning("scrape_and_save_client_disconnected")
        raise
    except Exception as e:
        logger.exception("scrape_and_save_failed", error=str(e))
        await write(f"\nFatal error: {e}\n")

    await response.write_eof()
    return response


async def handle_scrape_year(request):
    """Scrape a single year through the per-year cache."""
    pipeline = _pipeline(request)

    try:
        year = int(request.match_info["year"])
    except ValueError:
        return _error("Year must be an integer", 400)

    try:
        pipeline.validate_year(year)
    except ValueError as e:
        return _error(str(e), 400)

    try:
        records = await pipeline.scrape_year(year)
    except FatalFetchError as e:
        logger.error("scrape_year_failed", year=year, error=str(e))
        return _error(str(e), 502, year=year)

    return web.json_response({
        "year": year,
        "count": len(records),
        "data": [r.to_dict() for r in records],
    })


async def handle_scrape_all(request):
    """Scrape all configured years without persisting."""
    run = await _pipeline(request).scrape_years()
    return web.json_response(run.to_payload())


async def handle_cached_data(request):
    """Current per-year cache contents with age."""
    cached = _pipeline(request).cached_years()

    return web.json_response({
        "cachedYears": sorted(cached),
        "entries": {
            str(year): {
                "count": len(records),
                "ageSeconds": round(age, 3),
                "data": [r.to_dict() for r in records],
            }
            for year, (records, age) in sorted(cached.items())
        },
    })


async def _pipeline_context(app: web.Application):
    async with app[PIPELINE_KEY]:
        yield


def create_app(pipeline: RankingsPipeline) -> web.Application:
    """Build the aiohttp application around a pipeline."""
    app = web.Application()
    app[PIPELINE_KEY] = pipeline
    app.cleanup_ctx.append(_pipeline_context)

    app.router.add_get("/", handle_index)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/api/get-data", handle_get_data)
    app.router.add_get("/api/data-info", handle_data_info)
    app.router.add_get("/api/scrape-and-save", handle_scrape_and_save)
    app.router.add_get("/api/scrape-year/{year}", handle_scrape_year)
    app.router.add_get("/api/scrape-all", handle_scrape_all)
    app.router.add_get("/api/cached-data", handle_cached_data)

    return app


async def start_web_server(settings: Settings):
    """Start aiohttp web server and serve until cancelled."""
    app = create_app(RankingsPipeline(settings))

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.server.host, settings.server.port)
    await site.start()

    logger.info(
        "web_server_started",
        url=f"http://{settings.server.host}:{settings.server.port}",
        endpoints=ENDPOINTS,
    )

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
