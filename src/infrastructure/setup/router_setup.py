# Path: src/infrastructure/setup/router_setup.py
from fastapi import FastAPI, APIRouter
from pathlib import Path
from importlib import import_module
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig

logger = LoggingService(LogConfig())

ENDPOINTS_DIR = Path(__file__).resolve().parent.parent.parent / "api" / "v1" / "endpoints"


def _module_path(file_path: Path) -> str:
    relative_path = file_path.relative_to(ENDPOINTS_DIR.parent.parent.parent).with_suffix("")
    return f"src.{relative_path.as_posix().replace('/', '.')}"


def setup_routers(app: FastAPI):
    """
    Automatically register all API routers found under src/api/v1/endpoints.

    Every module exposing a ``router`` attribute is included; files starting
    with an underscore are skipped. Tags are set per endpoint module.

    Args:
        app: The FastAPI application instance.
    """
    base_router = APIRouter()
    registered_count = 0

    if not ENDPOINTS_DIR.exists():
        logger.error(
            "Routers directory not found, skipping router registration",
            context={"path": str(ENDPOINTS_DIR)},
        )
        app.include_router(base_router)
        return

    logger.info("Scanning routers directory", context={"path": str(ENDPOINTS_DIR)})

    for file_path in sorted(ENDPOINTS_DIR.rglob("*.py")):
        if file_path.name.startswith("_"):
            continue

        module_path = _module_path(file_path)
        try:
            module = import_module(module_path)
        except ImportError as e:
            logger.error(
                "Failed to import router module",
                context={"module": module_path, "error": str(e)},
            )
            continue

        if not hasattr(module, "router"):
            logger.debug("Skipped module without router", context={"module": module_path})
            continue

        base_router.include_router(module.router)
        registered_count += 1
        logger.info(
            "Registered router",
            context={"module": module_path, "path": module.router.prefix or "/"},
        )

    app.include_router(base_router)

    if registered_count == 0:
        logger.warning("No routers were registered", context={"directory": str(ENDPOINTS_DIR)})
    else:
        logger.info(
            "All routers registered",
            context={"count": registered_count, "routes": len(base_router.routes)},
        )
