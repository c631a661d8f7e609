"""Lost & Found API: reports, comments, notifications and moderation."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from lostfound.config import settings
from lostfound.authentication.router import router as auth_router
from lostfound.profiles.router import router as profiles_router
from lostfound.preferences.router import router as preferences_router
from lostfound.reports.router import router as reports_router
from lostfound.comments.router import router as comments_router
from lostfound.notifications.router import router as notifications_router, ws_router as notifications_ws_router
from lostfound.admin.router import router as admin_router
from lostfound.uploads import UPLOAD_URL_PREFIX

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"

app = FastAPI(
    title="Lost & Found",
    description="Missing and sighting reports with comments, reactions and moderation",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (
    auth_router,
    profiles_router,
    preferences_router,
    reports_router,
    comments_router,
    notifications_router,
    notifications_ws_router,
    admin_router,
):
    app.include_router(router, prefix=API_PREFIX)

app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


logger.info("Lost & Found API ready (%d routes)", len(app.routes))
