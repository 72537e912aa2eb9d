"""FastAPI app for WOLFLIX: upstream proxy routes plus the server-rendered pages."""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from wolflix import pages
from wolflix.config import HOST, PORT, configure_logging
from wolflix.routes import arslan, imdb, tmdb, watch, wolflix_api, wolfmovie
from wolflix.services.upstream import UpstreamError, close_client, get_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await get_client()
    logger.info("WOLFLIX started")
    yield
    await close_client()


app = FastAPI(title="WOLFLIX", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed query parameters answer like missing ones
    first = exc.errors()[0]
    name = first["loc"][-1]
    return JSONResponse(status_code=400, content={"error": f"{name}: {first['msg']}"})


@app.get("/api/health")
async def health():
    return {"status": "ok"}


for module in (tmdb, wolfmovie, wolflix_api, imdb, arslan, watch):
    app.include_router(module.router)
app.include_router(pages.router)

static_path = os.path.join(os.path.dirname(__file__), "static")
if os.path.exists(static_path):
    app.mount("/static", StaticFiles(directory=static_path), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
