# api/domain/qs_score/repository.py
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from .entities import Area, ConfiguracaoSistema, DenunciaResolvida, QSScore, Visita
from .enums import StatusPendencia

# (area_id, visita_id, tipo, nota): tipo/nota nulos = visita sem avaliacao
LinhaVisita = tuple[str, str, str | None, float | None]
# (area_id, status, criado_em, resolvido_em)
LinhaDenuncia = tuple[str, str, datetime, datetime | None]


class AreaRepository(Protocol):
    def buscar_area(self, area_id: str) -> Area | None: ...
    def listar_areas(self, empresa_id: str) -> list[Area]: ...

    # Leituras por area (fetch sob demanda)
    def contar_pendencias(self, area_id: str, status: Sequence[StatusPendencia]) -> int: ...
    def contar_pendencias_lideranca(self, area_id: str) -> int: ...
    def listar_visitas(self, area_id: str, desde: datetime) -> list[Visita]: ...
    def contar_colaboradores(self, area_id: str) -> int: ...
    def listar_denuncias_resolvidas(self, area_id: str, desde: datetime) -> list[DenunciaResolvida]: ...
    def contar_denuncias(self, area_id: str, desde: datetime) -> int: ...
    def ultima_denuncia_em(self, area_id: str) -> datetime | None: ...

    # Leituras em lote (recalculo da empresa)
    def contar_pendencias_por_area(self, empresa_id: str, status: Sequence[StatusPendencia]) -> dict[str, int]: ...
    def contar_colaboradores_por_area(self, empresa_id: str) -> dict[str, int]: ...
    def visitas_da_empresa(self, empresa_id: str, desde: datetime) -> list[LinhaVisita]: ...
    def denuncias_da_empresa(self, empresa_id: str) -> list[LinhaDenuncia]: ...
    def pendencias_lideranca_da_empresa(self, empresa_id: str) -> list[str]: ...


class QSScoreRepository(Protocol):
    def inserir(self, scores: Sequence[QSScore]) -> None: ...
    def ultimo_da_empresa(self, empresa_id: str) -> QSScore | None: ...
    def historico_da_empresa(self, empresa_id: str, desde: datetime) -> list[QSScore]: ...
    def ultimos_por_area(self, empresa_id: str) -> dict[str, QSScore]: ...


class ConfiguracaoRepository(Protocol):
    def obter(self, empresa_id: str) -> ConfiguracaoSistema | None: ...
