import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stride_pulse.api.stats import router as stats_router
from stride_pulse.api.today import router as today_router
from stride_pulse.core.config import settings
from stride_pulse.core.logging import setup_logging
from stride_pulse.db import Base, SessionLocal, engine
from stride_pulse.models.blob import Blob  # noqa: F401  (import ensures table is registered)
from stride_pulse.services.sensors import LocationProvider, MotionProvider
from stride_pulse.services.session import SessionController
from stride_pulse.services.store import BlobStore

setup_logging()
logger = logging.getLogger(__name__)


def build_controller() -> SessionController:
    store = BlobStore(SessionLocal, settings.timezone)
    return SessionController(
        store,
        LocationProvider(),
        MotionProvider(requires_permission=settings.motion_requires_permission),
        settings,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create the blob table on startup
    Base.metadata.create_all(bind=engine)
    controller = build_controller()
    controller.start()
    app.state.controller = controller
    logger.info("Session %s loaded, %d runs in history", controller.today.id, len(controller.stats.history))
    yield
    controller.stop()


app = FastAPI(lifespan=lifespan)

# Allow CORS for the local device UI
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# State-changing routes are `async def` so they all run on the event loop
# thread: one writer, no locks.
app.include_router(today_router)
app.include_router(stats_router)


@app.get("/")
def root():
    return {"message": "StridePulse is tracking"}
