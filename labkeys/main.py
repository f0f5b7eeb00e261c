import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from starlette.middleware.base import BaseHTTPMiddleware
from labkeys.config import settings
from labkeys.database import engine, Base, SessionLocal
from labkeys.errors import LabKeysError
from labkeys.routes import auth, keys, teachers, checkout, transactions, kiosk, events
from labkeys.services.auth import ensure_admin
from labkeys.services.events import event_publisher

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests."""
    async def dispatch(self, request: Request, call_next):
        auth_header = request.headers.get("Authorization")
        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"{request.method} {request.url.path} - IP: {client_ip} - Auth: {'Present' if auth_header else 'Missing'}")

        response = await call_next(request)
        return response


def init_db():
    """Create tables and the bootstrap admin account."""
    Base.metadata.create_all(bind=engine)
    if settings.bootstrap_admin_id and settings.bootstrap_admin_password:
        db = SessionLocal()
        try:
            ensure_admin(db, settings.bootstrap_admin_id, settings.bootstrap_admin_password)
        finally:
            db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Set up the database and the event feed for the app's lifetime."""
    init_db()
    logger.info("Starting event feed...")
    event_publisher.connect()

    yield

    logger.info("Stopping event feed...")
    event_publisher.disconnect()


app = FastAPI(
    title="Lab Key Checkout API",
    description="Backend API for tracking lab key borrowing and returns",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Logging middleware (last, to log everything)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(LabKeysError)
async def labkeys_error_handler(request: Request, exc: LabKeysError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Include routers
app.include_router(auth.router)
app.include_router(keys.router)
app.include_router(teachers.router)
app.include_router(checkout.router)
app.include_router(transactions.router)
app.include_router(kiosk.router)
app.include_router(events.router)

@app.get("/")
async def root():
    return {"message": "Lab Key Checkout API", "version": "1.0.0"}

@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "labkeys.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
