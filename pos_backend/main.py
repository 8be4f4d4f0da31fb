import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .api.checkout import router as checkout_router
from .api.products import router as products_router
from .api.reports import router as reports_router
from .database import DB_SEED, engine, init_db
from .errors import InvalidInput, PosError

logger = logging.getLogger("uvicorn.error")  # shows up in the uvicorn console

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- startup ---
    try:
        with engine.connect() as con:
            con.execute(text("SELECT 1"))
        logger.info("DB connectivity OK (startup)")
        init_db(engine, seed=DB_SEED)
    except Exception as e:
        logger.error("DB connectivity FAILED (startup): %s", e, exc_info=True)
    yield
    # --- shutdown ---
    engine.dispose()


# Create the app exactly once
app = FastAPI(
    title="POS API",
    version="0.2.0",
    lifespan=lifespan,
)
app.include_router(products_router)
app.include_router(checkout_router)
app.include_router(reports_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %.1fms", request.method, request.url.path, duration_ms)
    return response


@app.exception_handler(PosError)
async def pos_error_handler(request: Request, exc: PosError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code, exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# malformed bodies and query strings share the INVALID_INPUT shape
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = [
        "{}: {}".format(".".join(str(p) for p in e["loc"] if p != "body"), e["msg"])
        for e in exc.errors()
    ]
    err = InvalidInput("invalid request: " + "; ".join(problems))
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


# ========== routes ==========
@app.get("/")
def root():
    return {
        "message": "POS API is running",
        "endpoints": [
            "GET /health",
            "GET /health/db",
            "GET /api/products",
            "POST /api/products",
            "GET /api/products/{id}",
            "PUT /api/products/{id}",
            "POST /api/products/{id}/stock",
            "DELETE /api/products/{id}",
            "POST /api/checkout",
            "GET /api/report/today",
            "GET /api/report",
        ],
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/health/db")
def health_db():
    """Health check: SELECT 1 against the database."""
    try:
        with engine.connect() as con:
            con.execute(text("SELECT 1"))
        return {"db": "ok"}
    except Exception as e:
        logger.warning("db health check failed: %s", e)
        raise HTTPException(status_code=503, detail="db not ok")


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
