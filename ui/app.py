"""FastAPI application factory."""

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from communication.bus import EVENT_TOPIC, STATE_TOPIC, EventBus
from config import load_config
from internal.health import (
    HealthChecker,
    check_event_loop,
    create_bus_check,
    create_engine_check,
    create_logger_check,
    create_store_check,
)
from internal.logging import get_logger, LogLevel, StructuredLogger, AsyncFileLogger
from simulation.engine import SimulationEngine
from simulation.state import GameSnapshot
from storage.preferences import PreferenceStore
from ui.routes import control, api, health, paths
from utils.crash import create_async_handler, set_context_provider

STATIC_DIR = Path(__file__).parent / "static"


def create_app(config=None):
    """Create and configure the FastAPI application."""
    config = config or load_config()

    # Configure structured logging
    StructuredLogger.configure(min_level=LogLevel[config.logging.level.upper()])
    logger_instance = get_logger()

    # Create core components
    bus = EventBus(queue_size=100)
    store = PreferenceStore(config.storage.file)
    engine = SimulationEngine(bus=bus, config=config, store=store)
    file_logger = AsyncFileLogger(file_path=config.logging.file)
    health_checker = HealthChecker()
    set_context_provider(engine.context)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger_instance.info("Application starting", version="1.0.0")
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(create_async_handler(logger_instance))

        await file_logger.start()
        log_sub = await bus.subscribe("logger", max_queue_size=200)

        async def log_worker():
            while True:
                item = await log_sub.queue.get()
                if isinstance(item, GameSnapshot):
                    file_logger.try_log("state", item.to_dict())
                else:
                    file_logger.try_log("event", item)

        app.state.log_worker = asyncio.create_task(log_worker())

        health_checker.register("event_loop", check_event_loop, critical=True)
        health_checker.register("event_bus", create_bus_check(bus), critical=True)
        health_checker.register("simulation_engine", create_engine_check(engine), critical=True)
        health_checker.register("async_logger", create_logger_check(file_logger), critical=False)
        health_checker.register("preferences", create_store_check(store), critical=False)

        await engine.start()
        logger_instance.info("Application started successfully")

        yield

        # Shutdown
        logger_instance.info("Application shutting down")
        await engine.stop()
        app.state.log_worker.cancel()
        try:
            await app.state.log_worker
        except asyncio.CancelledError:
            pass
        await file_logger.stop()
        logger_instance.info("Application shutdown complete")

    app = FastAPI(
        title="Particle Dance",
        version="1.0.0",
        description="particle steering arcade game simulation",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.bus = bus
    app.state.store = store

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # Initialize route modules with dependencies
    control.init(engine)
    paths.init(engine)
    api.init(engine, bus, file_logger, store)
    health.init(engine, health_checker)

    app.include_router(control.router)
    app.include_router(paths.router)
    app.include_router(api.router)
    app.include_router(health.router)

    # ===================================================================
    # Renderer page & Server-Sent Events (SSE), kept here for direct bus access
    # ===================================================================

    @app.get("/", response_class=HTMLResponse)
    async def index():
        """Serve the canvas page."""
        return (STATIC_DIR / "index.html").read_text(encoding="utf-8")

    @app.get("/events")
    async def events(request: Request):
        """SSE endpoint - streams snapshots and game events to the renderer."""
        subscriber_name = f"ui-{uuid.uuid4().hex[:8]}"
        frames = await bus.subscribe(f"{subscriber_name}-state", max_queue_size=2, topics={STATE_TOPIC},
                                     latest_only=True)
        notices = await bus.subscribe(f"{subscriber_name}-event", max_queue_size=100, topics={EVENT_TOPIC})

        async def event_generator():
            try:
                snapshot = await engine.get_snapshot()
                yield format_sse("state", snapshot.to_dict())

                while True:
                    if await request.is_disconnected():
                        break

                    # Events first so a frame never outruns the notification that caused it.
                    while not notices.queue.empty():
                        item = notices.queue.get_nowait()
                        yield format_sse(item.get("kind", "event"), item)

                    try:
                        frame = await asyncio.wait_for(frames.queue.get(), timeout=1.0)
                    except asyncio.TimeoutError:
                        yield ": keep-alive\n\n"
                        continue
                    yield format_sse("state", frame.to_dict())
            finally:
                await bus.unsubscribe(frames.name)
                await bus.unsubscribe(notices.name)

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    return app


def format_sse(event, data):
    """Format data as Server-Sent Event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"
