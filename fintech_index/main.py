# fintech_index/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import RedirectResponse

from fintech_index import config
from fintech_index.db import Base, engine

# Registrar todos los modelos (usuarios, índice, startups)
import fintech_index.models  # noqa: F401

# Routers
from fintech_index.routers.auth import router as auth_router
from fintech_index.routers.users import router as users_router
from fintech_index.routers.country_data import router as country_data_router
from fintech_index.routers.startups import router as startups_router
from fintech_index.routers.ui import router as ui_router


logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
log = logging.getLogger("fintech_index")

app = FastAPI(title="African Fintech Index", version="1.0.0")

# ==================== MIDDLEWARES ====================

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Sesiones para el login del dashboard
app.add_middleware(SessionMiddleware, secret_key=config.SESSION_SECRET)

# ==================== ERRORES ====================

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})

# ==================== ROUTERS ====================

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(country_data_router)
app.include_router(startups_router)
app.include_router(ui_router)

# ==================== RUTAS BASE ====================

@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/ui/dashboard")


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}

# ==================== CICLO DE VIDA ====================

@app.on_event("startup")
async def on_startup():
    log.info("Creando tablas de base de datos (users, country_data, startups)...")
    Base.metadata.create_all(bind=engine)
    log.info("African Fintech Index listo en /ui/dashboard")


@app.on_event("shutdown")
async def on_shutdown():
    log.info("Apagando African Fintech Index...")


# Arranque directo opcional: python -m fintech_index.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fintech_index.main:app", host="0.0.0.0", port=8000, reload=True)
