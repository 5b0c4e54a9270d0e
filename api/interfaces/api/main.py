# api/interfaces/api/main.py
from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import duckdb
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.infrastructure.config import get_settings
from api.infrastructure.log import log
from api.interfaces.api.middleware.rate_limit import RateLimitMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    from api.infrastructure.duckdb_connection import get_connection

    settings = get_settings()
    get_connection()  # falha cedo se o banco nao abre
    teto = settings.silencio_penalidade_max
    log(
        f"API pronta: banco={settings.duckdb_path}, "
        f"teto silencio={'nenhum' if teto is None else teto}, "
        f"leituras paralelas={settings.consultas_paralelas}"
    )
    yield


app = FastAPI(
    title="QS Score API",
    debug=False,  # NUNCA True em producao
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
)


@app.exception_handler(duckdb.Error)
async def erro_banco(request: Request, exc: duckdb.Error) -> JSONResponse:
    # Sem retry: o erro vira 500 generico, detalhe so no log.
    log(f"Erro de banco em {request.method} {request.url.path}: {exc}", nivel="ERRO")
    return JSONResponse(status_code=500, content={"detail": "Erro ao acessar o banco de dados"})


@app.middleware("http")
async def cabecalhos_de_seguranca(request: Request, call_next: object) -> Response:
    response = await call_next(request)  # type: ignore[misc]
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    # Score e calculado a cada chamada; nenhum proxy deve guardar copia.
    response.headers["Cache-Control"] = "no-store"
    return response  # type: ignore[return-value]


app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-API-Key"],
)

from api.interfaces.api.routes.qs_score_routes import router as qs_score_router  # noqa: E402

app.include_router(qs_score_router, prefix="/api")
