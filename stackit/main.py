import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .background import drain
from .database import init_db
from .errors import StackItError, stackit_error_handler
from .routers import answers, auth, comments, notifications, questions, tags, users as user_routes
from .schemas import UserRead, UserUpdate
from .settings.config import settings
from .users import auth_backend, fastapi_users

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="StackIt API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StackItError, stackit_error_handler)

# ----------------------
# Route Includes
# ----------------------
app.include_router(auth.router)
app.include_router(questions.router)
app.include_router(answers.router)
app.include_router(comments.router)
app.include_router(notifications.router)
app.include_router(tags.router)
app.include_router(user_routes.router)

# Authentication Routes
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["auth"]
)

app.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix="/users",
    tags=["users"]
)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.on_event("startup")
async def on_startup():
    from . import models  # noqa: F401  registers every table on Base.metadata
    await init_db()
    logger.info("StackIt API started")


@app.on_event("shutdown")
async def on_shutdown():
    # let pending notification fan-out finish before the loop goes away
    await drain()
