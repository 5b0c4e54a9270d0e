# api/application/services/area_score_service.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

from api.domain.qs_score.entities import DadosArea, QSScore
from api.domain.qs_score.enums import PENDENCIA_ABERTA, PENDENCIA_RESOLVIDA
from api.domain.qs_score.exceptions import FuncionalidadeDesabilitada
from api.domain.qs_score.repository import AreaRepository, ConfiguracaoRepository, QSScoreRepository
from api.domain.qs_score.score import JANELA_DIAS, SILENCIO_PENALIDADE_MAX
from api.domain.qs_score.simulacao import AcaoSimulada, ResultadoSimulacao, simular_impacto

from .qs_score_service import calcular_score


def agora_utc() -> datetime:
    """Relogio do banco: timestamps naive em UTC."""
    return datetime.now(tz=UTC).replace(tzinfo=None)


class AreaScoreService:
    """Imperative Shell: leituras de uma area (IO) + calculo puro (calcular_score)."""

    def __init__(
        self,
        area_repo: AreaRepository,
        score_repo: QSScoreRepository,
        configuracao_repo: ConfiguracaoRepository,
        silencio_penalidade_max: int | None = SILENCIO_PENALIDADE_MAX,
        consultas_paralelas: int = 8,
    ) -> None:
        self._area_repo = area_repo
        self._score_repo = score_repo
        self._configuracao_repo = configuracao_repo
        self._silencio_penalidade_max = silencio_penalidade_max
        self._consultas_paralelas = consultas_paralelas

    def buscar_dados_area(self, area_id: str, agora: datetime | None = None) -> DadosArea:
        """Dispara as leituras da area em paralelo. Falha de banco propaga."""
        agora = agora or agora_utc()
        desde = agora - timedelta(days=JANELA_DIAS)
        repo = self._area_repo

        with ThreadPoolExecutor(max_workers=self._consultas_paralelas) as pool:
            abertas = pool.submit(repo.contar_pendencias, area_id, PENDENCIA_ABERTA)
            resolvidas = pool.submit(repo.contar_pendencias, area_id, PENDENCIA_RESOLVIDA)
            visitas = pool.submit(repo.listar_visitas, area_id, desde)
            colaboradores = pool.submit(repo.contar_colaboradores, area_id)
            denuncias_resolvidas = pool.submit(repo.listar_denuncias_resolvidas, area_id, desde)
            total_denuncias = pool.submit(repo.contar_denuncias, area_id, desde)
            lideranca = pool.submit(repo.contar_pendencias_lideranca, area_id)
            ultima_denuncia = pool.submit(repo.ultima_denuncia_em, area_id)

        return DadosArea(
            pendencias_abertas=abertas.result(),
            pendencias_resolvidas=resolvidas.result(),
            visitas=tuple(visitas.result()),
            colaboradores=colaboradores.result(),
            denuncias_resolvidas=tuple(denuncias_resolvidas.result()),
            total_denuncias=total_denuncias.result(),
            pendencias_lideranca=lideranca.result(),
            ultima_denuncia_em=ultima_denuncia.result(),
        )

    def calcular_area(self, area_id: str) -> QSScore | None:
        """Calcula e grava uma nova linha para a area. None = area inexistente."""
        area = self._area_repo.buscar_area(area_id)
        if area is None:
            return None

        configuracao = self._configuracao_repo.obter(area.empresa_id)
        if configuracao is None or not configuracao.qs_score_habilitado:
            raise FuncionalidadeDesabilitada(area.empresa_id, "QS Score")

        agora = agora_utc()
        resultado = calcular_score(
            self.buscar_dados_area(area_id, agora), agora, self._silencio_penalidade_max,
        )
        linha = QSScore(
            empresa_id=area.empresa_id,
            area_id=area_id,
            score=resultado.score,
            classificacao=resultado.classificacao,
            fatores=resultado.fatores,
            breakdown=resultado.breakdown,
            tendencia=resultado.tendencia,
            calculado_em=agora,
        )
        self._score_repo.inserir([linha])
        return linha

    def simular(self, area_id: str, acoes: list[AcaoSimulada]) -> ResultadoSimulacao | None:
        """Score atual calculado ao vivo (nada gravado) + impactos fixos das acoes."""
        if self._area_repo.buscar_area(area_id) is None:
            return None
        agora = agora_utc()
        atual = calcular_score(
            self.buscar_dados_area(area_id, agora), agora, self._silencio_penalidade_max,
        )
        return simular_impacto(atual.score, acoes)
