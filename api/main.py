import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from .chat.chat import router as chat_router
from utils.logger import setup_logging
from utils.mongodb_conn import get_mongodb_connection

load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    get_mongodb_connection().close_mongo_client()


app = FastAPI(title="cgpt REST API", lifespan=lifespan)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["accept", "accept-encoding", "authorization", "content-type", "origin"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = time.perf_counter() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(
        "%s %s -> %d (%.2fms)",
        request.method,
        request.url.path,
        response.status_code,
        process_time * 1000,
    )
    return response


app.include_router(chat_router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "cgpt REST api service!"


@app.get("/health")
async def health():
    if not await get_mongodb_connection().check_connection():
        return {"status": "error", "message": "MongoDB connection failed"}
    return {"status": "ok", "message": "cgpt backend is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 3000)))
