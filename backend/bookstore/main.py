import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from bookstore import config, models  # noqa: F401  (registers tables on Base)
from bookstore.api.admin import router as admin_router
from bookstore.api.ai import router as ai_router
from bookstore.api.authors import router as authors_router
from bookstore.api.books import router as books_router
from bookstore.api.categories import router as categories_router
from bookstore.db import SessionLocal, get_db, init_db
from bookstore.errors import BookstoreError
from bookstore.services.seed import seed_catalog

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
log = logging.getLogger("bookstore")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if config.SEED_ON_STARTUP:
        with SessionLocal() as db:
            seed_catalog(db)
    yield


app = FastAPI(title="Bookstore API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_ORIGIN],
    allow_credentials=config.FRONTEND_ORIGIN != "*",
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(authors_router)
app.include_router(categories_router)
app.include_router(books_router)
app.include_router(ai_router)
app.include_router(admin_router)


@app.exception_handler(BookstoreError)
async def bookstore_error_handler(request: Request, exc: BookstoreError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        fields[".".join(loc) or "request"] = err.get("msg", "invalid")
    return JSONResponse(
        status_code=400,
        content={
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": 400,
            "error": "Validation Failed",
            "message": "Input validation failed",
            "validation_errors": fields,
        },
    )


@app.get("/")
def root():
    return {"message": "Bookstore API is up. Try /health or /db-ping or /docs."}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    db.execute(text("select 1")).scalar()
    return {"db": "ok", "dialect": db.get_bind().dialect.name}
