import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import CORS_ORIGINS, LOG_LEVEL
from app.routers.auth import router as auth_router
from app.routers import jobs
from app.routers import materials
from app.routers import debug
from app.schemas.job import dump_job
from app.services.errors import AlreadyTerminal, JobNotFound, QueueUnavailable

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("app")

# Create FastAPI app FIRST
app = FastAPI(title="Novel Assistant Jobs API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth_router)
app.include_router(jobs.router)
app.include_router(materials.router)
app.include_router(debug.router)


# Every error body carries an "error" field; internals never reach the client
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    fields = []
    for e in exc.errors():
        loc = [str(p) for p in e.get("loc", ()) if p != "body"]
        fields.append({"field": ".".join(loc), "message": e.get("msg", "Invalid value")})
    return JSONResponse({"error": "Validation failed", "fields": fields}, status_code=400)


@app.exception_handler(JobNotFound)
async def job_not_found(request: Request, exc: JobNotFound):
    return JSONResponse({"error": "Job not found"}, status_code=404)


@app.exception_handler(AlreadyTerminal)
async def already_terminal(request: Request, exc: AlreadyTerminal):
    return JSONResponse(
        {"error": f"Job already {exc.job.status}", "code": "ALREADY_TERMINAL", "job": dump_job(exc.job)},
        status_code=409,
    )


@app.exception_handler(QueueUnavailable)
async def queue_unavailable(request: Request, exc: QueueUnavailable):
    logger.warning("Queue unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": "Job queue unavailable, please retry", "retryable": True}, status_code=500)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# Health check
@app.get("/")
def health_check():
    return {"status": "ok"}
