"""
Blink Counter Server

Small web page that follows the tracker: the blink command hits
/blinked, and the page polls /blink-number and swaps its picture
through /angel-changing.png.
"""

from pathlib import Path
from typing import Optional, Union
import logging

from fastapi import FastAPI
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / 'static'
ANGEL_FRAMES = 6


def create_app(static_dir: Optional[Union[str, Path]] = None) -> FastAPI:
    """
    Build the blink counter application.

    Args:
        static_dir: Directory holding index.html and images/, defaults to
            the bundled static directory

    Returns:
        FastAPI application with its own counter in ``app.state.blink_number``
    """
    static_dir = Path(static_dir) if static_dir is not None else STATIC_DIR

    app = FastAPI(title="Blink Counter")
    app.state.blink_number = 0

    @app.get("/")
    async def index():
        return FileResponse(static_dir / 'index.html', media_type='text/html')

    @app.get("/blink-number", response_class=PlainTextResponse)
    async def blink_number():
        return str(app.state.blink_number)

    @app.get("/blinked", response_class=PlainTextResponse)
    async def blinked():
        app.state.blink_number += 1
        logger.debug(f"Blink reported, count={app.state.blink_number}")
        return str(app.state.blink_number)

    @app.get("/angel-changing.png")
    async def angel_changing():
        return RedirectResponse(f"/images/angel-{app.state.blink_number % ANGEL_FRAMES}.png")

    # Mounted last so the routes above take precedence
    app.mount("/", StaticFiles(directory=str(static_dir)), name="static")

    return app


def run_server(host: str = '0.0.0.0', port: int = 4567, log_level: str = 'info') -> None:
    """Serve the blink counter with uvicorn."""
    import uvicorn

    logger.info(f"Starting blink counter server on {host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level=log_level)
