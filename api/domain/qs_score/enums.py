# api/domain/qs_score/enums.py
from enum import StrEnum


class Classificacao(StrEnum):
    EXCELENTE = "EXCELENTE"
    BOM = "BOM"
    ATENCAO = "ATENCAO"
    RISCO = "RISCO"
    CRITICO = "CRITICO"


class CorRisco(StrEnum):
    """Visao de 3 faixas usada no mapa de risco (mais grossa que Classificacao)."""

    VERDE = "green"
    AMARELO = "yellow"
    VERMELHO = "red"


class Tendencia(StrEnum):
    ESTAVEL = "ESTAVEL"


class TipoAvaliacao(StrEnum):
    AREA = "AREA"
    LIDERANCA = "LIDERANCA"
    COLABORADOR = "COLABORADOR"


class TipoAcaoSimulada(StrEnum):
    RESOLVE_PENDING = "RESOLVE_PENDING"
    COMPLETE_COURSE = "COMPLETE_COURSE"
    VISIT = "VISIT"
    MEDIATION = "MEDIATION"


class StatusPendencia(StrEnum):
    PENDENTE = "PENDENTE"
    RESOLVIDA = "RESOLVIDA"
    CONCLUIDA = "CONCLUIDA"


class StatusDenuncia(StrEnum):
    RESOLVIDO = "RESOLVIDO"


PENDENCIA_ABERTA: tuple[StatusPendencia, ...] = (StatusPendencia.PENDENTE,)
PENDENCIA_RESOLVIDA: tuple[StatusPendencia, ...] = (StatusPendencia.RESOLVIDA, StatusPendencia.CONCLUIDA)
