from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pagesearch import __version__
from pagesearch.api.routes import notion, search, system
from pagesearch.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    yield
    # Shutdown


app = FastAPI(
    title="pagesearch",
    description="Intelligent search over a Notion workspace with cited answers",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Routes
app.include_router(search.router)
app.include_router(notion.router)
app.include_router(system.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "pagesearch"}
