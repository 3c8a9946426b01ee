import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import APIRouter, Depends, FastAPI, Path, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import accounts, config, crud, schemas, startup
from .auth import MANAGER_ROLE, get_current_principal, require_role
from .cache import ReadThroughCache
from .db import SessionLocal
from .errors import LogiTrackError, ValidationError
from .logging_config import setup_logging
from .schemas import INT32_MAX, INT32_MIN

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = config.get_settings()
    db = app.state.session_factory()
    try:
        startup.initialize(db, settings)
    finally:
        db.close()
    app.state.cache = ReadThroughCache(size_limit=settings.cache_size_limit)
    logger.info("LogiTrack ready (cache ttl %ss, size limit %s)", settings.cache_ttl_seconds, settings.cache_size_limit)
    yield


app = FastAPI(title="LogiTrack API", lifespan=lifespan)
# Startup work opens its own session; tests point this at their engine
app.state.session_factory = SessionLocal


# Dependency to get DB session per request

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_cache(request: Request) -> ReadThroughCache:
    return request.app.state.cache


def set_read_headers(response: Response, result: crud.CachedRead, report_hit: bool = True):
    if report_hit:
        response.headers["X-Cache-Hit"] = "true" if result.cache_hit else "false"
    if result.query_ms is not None:
        response.headers["X-Query-MS"] = str(result.query_ms)


# -------------------- Error handling --------------------

@app.middleware("http")
async def catch_unhandled(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Unexpected server error", "detail": "An internal error occurred."},
        )


@app.exception_handler(LogiTrackError)
async def logitrack_error_handler(request: Request, exc: LogiTrackError):
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    headers = dict(exc.headers)
    if exc.status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Request validation failed.", "errors": errors})


@app.get("/health")
async def health():
    return {"status": "ok"}


# -------------------- Auth --------------------

auth_router = APIRouter(prefix="/api/auth", tags=["Auth"])


@auth_router.post("/register")
async def register(payload: schemas.Credentials, db: Session = Depends(get_db)):
    accounts.register(db, payload.email, payload.password)
    return "Registered"


@auth_router.post("/login", response_model=schemas.TokenResponse)
async def login(payload: schemas.Credentials, db: Session = Depends(get_db)):
    return {"token": accounts.login(db, payload.email, payload.password)}


# -------------------- Inventory --------------------

inventory_router = APIRouter(
    prefix="/api/inventory",
    tags=["Inventory"],
    dependencies=[Depends(get_current_principal)],
)


@inventory_router.get("", response_model=List[schemas.InventoryItemRead])
async def list_inventory(response: Response, db: Session = Depends(get_db), cache: ReadThroughCache = Depends(get_cache)):
    result = crud.list_inventory(db, cache)
    set_read_headers(response, result)
    return result.value


@inventory_router.post("", response_model=schemas.InventoryItemRead, status_code=201)
async def create_inventory_item(
    item: schemas.InventoryItemCreate,
    response: Response,
    db: Session = Depends(get_db),
    cache: ReadThroughCache = Depends(get_cache),
):
    created = crud.create_inventory_item(db, cache, item)
    response.headers["Location"] = f"/api/inventory?id={created.item_id}"
    return created


@inventory_router.delete("/{item_id}", status_code=204, dependencies=[Depends(require_role(MANAGER_ROLE))])
async def delete_inventory_item(item_id: int = Path(..., ge=INT32_MIN, le=INT32_MAX), db: Session = Depends(get_db), cache: ReadThroughCache = Depends(get_cache)):
    crud.delete_inventory_item(db, cache, item_id)
    return Response(status_code=204)


# -------------------- Orders --------------------

orders_router = APIRouter(
    prefix="/api/orders",
    tags=["Orders"],
    dependencies=[Depends(get_current_principal)],
)


@orders_router.get("", response_model=List[schemas.OrderSummary])
async def list_orders(response: Response, db: Session = Depends(get_db)):
    result = crud.list_orders(db)
    set_read_headers(response, result, report_hit=False)
    return result.value


@orders_router.get("/{order_id}", response_model=schemas.OrderRead)
async def get_order(response: Response, order_id: int = Path(..., ge=INT32_MIN, le=INT32_MAX), db: Session = Depends(get_db), cache: ReadThroughCache = Depends(get_cache)):
    result = crud.get_order(db, cache, order_id)
    set_read_headers(response, result)
    return result.value


@orders_router.post("", response_model=schemas.OrderRead, status_code=201)
async def create_order(
    order: schemas.OrderCreate,
    response: Response,
    db: Session = Depends(get_db),
    cache: ReadThroughCache = Depends(get_cache),
):
    created = crud.create_order(db, cache, order)
    response.headers["Location"] = f"/api/orders/{created.order_id}"
    return created


@orders_router.delete("/{order_id}", status_code=204, dependencies=[Depends(require_role(MANAGER_ROLE))])
async def delete_order(order_id: int = Path(..., ge=INT32_MIN, le=INT32_MAX), db: Session = Depends(get_db), cache: ReadThroughCache = Depends(get_cache)):
    crud.delete_order(db, cache, order_id)
    return Response(status_code=204)


app.include_router(auth_router)
app.include_router(inventory_router)
app.include_router(orders_router)
