# backend/main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import init_db

# Import routerów
from routes.products import router as products_router
from routes.reports import router as reports_router
from routes.websocket import router as websocket_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_BASE_PATH = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Inicjalizacja
    init_db()
    yield


app = FastAPI(title="Inventory Service API", version="1.0.0", lifespan=lifespan)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def malformed_request_handler(request: Request, exc: RequestValidationError):
    logger.warning("Malformed request %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return Response(status_code=405, headers=exc.headers)
    return await http_exception_handler(request, exc)


# Rejestracja routerów; raporty przed /products/{product_id}
app.include_router(reports_router, prefix=API_BASE_PATH)
app.include_router(products_router, prefix=API_BASE_PATH)
app.include_router(websocket_router)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
