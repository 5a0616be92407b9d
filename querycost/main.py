"""FastAPI main application"""
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI

from querycost.config import settings
from querycost.routers import query_cost
from querycost.sanity_checks.runner import run_startup_sanity_checks_or_raise
from querycost.smart_logger import SmartLogger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    if settings.startup_sanity_check:
        await run_startup_sanity_checks_or_raise()
    SmartLogger.log(
        "INFO",
        "main.lifespan.started",
        category="main.lifespan.start",
        params={
            "target_db": f"{settings.target_db_host}:{settings.target_db_port}/{settings.target_db_name}",
            "schemas": settings.schema_list,
            "max_query_cost": settings.max_query_cost,
        },
        max_inline_chars=0,
    )
    yield
    SmartLogger.log("INFO", "main.lifespan.stopped", category="main.lifespan.stop")


app = FastAPI(
    title="Query Cost API",
    description="Estimate the relative cost of SQL statements before running them",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(query_cost.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("querycost.main:app", host=settings.api_host, port=settings.api_port)
