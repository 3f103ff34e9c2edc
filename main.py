from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings
from database.db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
# quiet library loggers
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

# ✅ middlewares
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ routers
from routers import bulletins, config, grades, statistics

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ X-Request-ID / X-Latency-Ms headers + access log
app.add_middleware(TimingMiddleware)

# ✅ consistent JSON error body
add_error_handlers(app)

# ✅ /v1 prefix
app.include_router(config.router,      prefix="/v1")
app.include_router(grades.router,      prefix="/v1")
app.include_router(statistics.router,  prefix="/v1")
app.include_router(bulletins.router,   prefix="/v1")


@app.on_event("startup")
def _create_tables():
    init_db()


# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}


@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - {settings.APP_DESCRIPTION}"}
