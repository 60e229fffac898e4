import logging
import os
from contextlib import asynccontextmanager

import firebase_admin
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from firebase_admin import credentials
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from context import RequestContextMiddleware, RequestContextFilter
from routes.posts import router as posts_router
from services.exceptions import PostServiceError
from services.firestore import FirestoreDB
from services.posts import PostService

load_dotenv()

FIREBASE_CREDENTIALS = os.environ.get("FIREBASE_CREDENTIALS", "./firebase.json")
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
POSTS_COLLECTION = os.environ.get("POSTS_COLLECTION", "posts")
USERS_COLLECTION = os.environ.get("USERS_COLLECTION", "users")

# ─── logging ────────────────────────────────────────────────
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"),
                    format="%(asctime)s %(levelname)-8s %(name)s [%(method)s %(path)s] %(message)s")
for handler in logging.getLogger().handlers:
    handler.addFilter(RequestContextFilter())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize Firebase Admin SDK
    cred = credentials.Certificate(FIREBASE_CREDENTIALS)
    firebase_app = firebase_admin.initialize_app(cred)

    firestore = FirestoreDB(firebase_app, POSTS_COLLECTION, USERS_COLLECTION)
    app.state.post_service = PostService(firestore)
    logger.info("Connected to Firestore (posts=%s, users=%s)", POSTS_COLLECTION, USERS_COLLECTION)

    yield
    firebase_admin.delete_app(firebase_app)


app = FastAPI(lifespan=lifespan)

# middleware to set request context
app.add_middleware(RequestContextMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PostServiceError)
async def post_service_error_handler(request: Request, exc: PostServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = error.get("loc", ())
        if error.get("type") == "value_error":
            msg = str(error["ctx"]["error"])
        else:
            msg = error.get("msg")
        errors.append({
            "msg": msg,
            "param": str(loc[-1]) if loc else None,
            "location": loc[0] if loc else None,
        })
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"msg": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    return JSONResponse(status_code=500, content={"msg": "Server Error"})


# Include routers
app.include_router(posts_router, prefix="/api/posts", tags=["posts"])
