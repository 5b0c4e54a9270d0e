# api/interfaces/api/dependencies.py
from api.application.services.area_score_service import AreaScoreService
from api.application.services.painel_service import PainelService
from api.application.services.recalculo_service import RecalculoService
from api.infrastructure.config import get_settings
from api.infrastructure.duckdb_connection import get_connection
from api.infrastructure.repositories.duckdb_area_repo import DuckDBAreaRepo
from api.infrastructure.repositories.duckdb_configuracao_repo import DuckDBConfiguracaoRepo
from api.infrastructure.repositories.duckdb_qs_score_repo import DuckDBQSScoreRepo


def get_recalculo_service() -> RecalculoService:
    conn = get_connection()
    settings = get_settings()
    return RecalculoService(
        area_repo=DuckDBAreaRepo(conn),
        score_repo=DuckDBQSScoreRepo(conn),
        silencio_penalidade_max=settings.silencio_penalidade_max,
        consultas_paralelas=settings.consultas_paralelas,
    )


def get_area_score_service() -> AreaScoreService:
    conn = get_connection()
    settings = get_settings()
    return AreaScoreService(
        area_repo=DuckDBAreaRepo(conn),
        score_repo=DuckDBQSScoreRepo(conn),
        configuracao_repo=DuckDBConfiguracaoRepo(conn),
        silencio_penalidade_max=settings.silencio_penalidade_max,
        consultas_paralelas=settings.consultas_paralelas,
    )


def get_painel_service() -> PainelService:
    conn = get_connection()
    return PainelService(
        area_repo=DuckDBAreaRepo(conn),
        score_repo=DuckDBQSScoreRepo(conn),
        configuracao_repo=DuckDBConfiguracaoRepo(conn),
        recalculo=get_recalculo_service(),
    )
