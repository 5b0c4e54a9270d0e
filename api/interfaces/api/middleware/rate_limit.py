# api/interfaces/api/middleware/rate_limit.py
from __future__ import annotations

import time
from collections import deque

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.infrastructure.config import get_settings

_JANELA_SEGUNDOS = 60.0


class JanelaDeslizante:
    """Acessos por chave nos ultimos `janela` segundos.

    Chave sem acesso na janela e descartada: na propria chamada quando volta,
    ou na varredura feita no maximo uma vez por janela para as que nao voltam.
    """

    def __init__(self, janela: float = _JANELA_SEGUNDOS) -> None:
        self._janela = janela
        self._acessos: dict[str, deque[float]] = {}
        self._ultima_varredura = 0.0

    def __len__(self) -> int:
        return len(self._acessos)

    def registrar(self, chave: str, limite: int, agora: float) -> int | None:
        """Conta o acesso e retorna None, ou retorna o Retry-After em segundos se o limite estourou."""
        if agora - self._ultima_varredura >= self._janela:
            self._varrer(agora)

        acessos = self._acessos.get(chave)
        if acessos is not None:
            self._expirar(acessos, agora)
        if acessos and len(acessos) >= limite:
            return int(self._janela - (agora - acessos[0])) + 1

        if not acessos:
            acessos = self._acessos[chave] = deque()
        acessos.append(agora)
        return None

    def _expirar(self, acessos: deque[float], agora: float) -> None:
        while acessos and agora - acessos[0] >= self._janela:
            acessos.popleft()

    def _varrer(self, agora: float) -> None:
        for chave in list(self._acessos):
            acessos = self._acessos[chave]
            self._expirar(acessos, agora)
            if not acessos:
                del self._acessos[chave]
        self._ultima_varredura = agora


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Janela deslizante de 60s por IP. Limite 0 desliga; X-API-Key ignora o limite."""

    def __init__(self, app: object) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._janela = JanelaDeslizante()

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        limite = get_settings().rate_limit_per_minute
        if limite == 0 or request.headers.get("X-API-Key"):
            return await call_next(request)

        ip = request.client.host if request.client else "unknown"
        retry_after = self._janela.registrar(ip, limite, time.monotonic())
        if retry_after is not None:
            return Response(
                content='{"detail": "Rate limit excedido. Tente novamente em 1 minuto."}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
