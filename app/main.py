import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core import config
from app.core.logging_config import setup_logging
from app.api.routes import auth, health, members, reconciliation, registration
from app.workers.reconciliation_loop import reconciliation_loop

setup_logging(config.LOG_LEVEL, config.LOG_DIR)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    if config.RECONCILE_INTERVAL_SEC > 0:
        task = asyncio.create_task(reconciliation_loop(config.RECONCILE_INTERVAL_SEC))
    yield
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="Gym Membership API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(registration.router)
app.include_router(members.router)
app.include_router(reconciliation.router)
app.include_router(health.router)


# ============================================
# ✅ ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"status": "Gym Membership API running"}
