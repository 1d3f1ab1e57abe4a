# backoffice/main.py
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backoffice.config import settings
from backoffice.database import init_db
from backoffice.errors import ServiceError

load_dotenv()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Router imports
from backoffice.routes.adjustments import router as adjustments_router
from backoffice.routes.purchases import router as purchases_router
from backoffice.routes.products import router as products_router
from backoffice.routes.warehouses import router as warehouses_router
from backoffice.routes.suppliers import router as suppliers_router
from backoffice.routes.settings import router as settings_router
from backoffice.routes.logs import router as logs_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Back Office API", version="1.0.0", lifespan=lifespan)

# CORS: local frontend plus the deployed one from FRONTEND_URL
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every failure is returned as {"error": "..."}
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"error": "Invalid request"})
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"error": message})


# Router registration
app.include_router(adjustments_router)
app.include_router(purchases_router)
app.include_router(products_router)
app.include_router(warehouses_router)
app.include_router(suppliers_router)
app.include_router(settings_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "Back Office API is running"}
