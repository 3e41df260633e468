import asyncio
import json
import sys
import structlog
import uvicorn
from pathlib import Path
from typing import Any, List

from src.config import get_settings
from .infrastructure.influx_client import InfluxDB3Client
from .infrastructure.logging import setup_logging
from .runtime.flow_runtime import FlowRuntime
from .api.server import create_app

logger = structlog.get_logger()


def load_flows(path: Path) -> List[Any]:
    """
    Read node definitions from a flows JSON file (a list of node objects).
    """
    with open(path, "r", encoding="utf-8") as f:
        definitions = json.load(f)
    if not isinstance(definitions, list):
        raise ValueError(f"Flows file must contain a JSON array: {path}")
    return definitions


async def main() -> int:
    # 1. Config & Logging
    settings = get_settings()
    setup_logging(settings.env)
    logger.info("service_starting", env=settings.env, flows=str(settings.flows.path))

    # 2. Flow runtime
    runtime = FlowRuntime(client_factory=InfluxDB3Client)
    try:
        runtime.load(load_flows(settings.flows.path))
    except Exception as e:
        logger.critical("flows_load_failed", error=str(e))
        runtime.close()
        return 1

    # 3. HTTP Server (API)
    api_app = create_app(runtime)
    http_config = uvicorn.Config(api_app, host=settings.api.host, port=settings.api.port, log_level="info")
    http_server = uvicorn.Server(http_config)

    logger.info("api_server_starting", port=settings.api.port)
    try:
        await http_server.serve()
    except asyncio.CancelledError:
        pass
    finally:
        logger.info("shutdown_initiated")
        runtime.close()
        logger.info("shutdown_complete")
    return 0


def run() -> int:
    # Platform Check & uvloop
    if sys.platform != 'win32':
        try:
            import uvloop
        except ImportError:
            uvloop = None
        if uvloop is not None:
            return uvloop.run(main())
    return asyncio.run(main())


if __name__ == "__main__":
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        pass
