from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.database import create_db_and_tables
from app.api import accounts, auth, dashboard, net_worth, shares
from app.core.config import CORS_ORIGINS
from app.core.exceptions import AppError
from app.core.logging_config import configure_logging
from fastapi.middleware.cors import CORSMiddleware
import logging

configure_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Database tables ready")
    yield

app = FastAPI(title="Finarro API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.code, "detail": exc.detail},
    )

app.include_router(auth.router)
app.include_router(accounts.router)
app.include_router(dashboard.router)
app.include_router(net_worth.router)
app.include_router(shares.router)

@app.get("/")
def root():
    return {"message": "Finarro personal finance API"}

@app.get("/health")
def health():
    return {"status": "OK"}
