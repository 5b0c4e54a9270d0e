# api/interfaces/api/routes/qs_score_routes.py
from fastapi import APIRouter, Depends, HTTPException

from api.application.dtos.mapa_risco_dto import MapaRiscoDTO
from api.application.dtos.painel_dto import PainelDTO
from api.application.dtos.qs_score_dto import QSScoreDTO, RecalculoDTO
from api.application.dtos.simulacao_dto import SimulacaoDTO, SimulacaoRequestDTO
from api.application.services.area_score_service import AreaScoreService
from api.application.services.painel_service import PainelService
from api.application.services.recalculo_service import RecalculoService
from api.domain.qs_score.exceptions import FuncionalidadeDesabilitada
from api.interfaces.api.dependencies import (
    get_area_score_service,
    get_painel_service,
    get_recalculo_service,
)

router = APIRouter(prefix="/qs-score")


@router.get("/empresa/{empresa_id}", response_model=PainelDTO)
def get_painel_empresa(
    empresa_id: str,
    service: PainelService = Depends(get_painel_service),  # noqa: B008
) -> PainelDTO:
    try:
        return service.obter_painel(empresa_id)
    except FuncionalidadeDesabilitada as err:
        raise HTTPException(status_code=403, detail=str(err)) from err


@router.get("/area/{area_id}", response_model=QSScoreDTO)
def get_score_area(
    area_id: str,
    service: AreaScoreService = Depends(get_area_score_service),  # noqa: B008
) -> QSScoreDTO:
    try:
        score = service.calcular_area(area_id)
    except FuncionalidadeDesabilitada as err:
        raise HTTPException(status_code=403, detail=str(err)) from err
    if score is None:
        raise HTTPException(status_code=404, detail="Area nao encontrada")
    return QSScoreDTO.from_domain(score)


@router.get("/mapa-risco/{empresa_id}", response_model=MapaRiscoDTO)
def get_mapa_risco(
    empresa_id: str,
    service: PainelService = Depends(get_painel_service),  # noqa: B008
) -> MapaRiscoDTO:
    try:
        return service.mapa_risco(empresa_id)
    except FuncionalidadeDesabilitada as err:
        raise HTTPException(status_code=403, detail=str(err)) from err


@router.post("/simular", response_model=SimulacaoDTO)
def post_simular(
    body: SimulacaoRequestDTO,
    service: AreaScoreService = Depends(get_area_score_service),  # noqa: B008
) -> SimulacaoDTO:
    resultado = service.simular(body.area_id, body.to_domain())
    if resultado is None:
        raise HTTPException(status_code=404, detail="Area nao encontrada")
    return SimulacaoDTO.from_domain(resultado)


@router.post("/recalcular/{empresa_id}", response_model=RecalculoDTO)
def post_recalcular(
    empresa_id: str,
    service: RecalculoService = Depends(get_recalculo_service),  # noqa: B008
) -> RecalculoDTO:
    agregado = service.recalcular(empresa_id)
    return RecalculoDTO(mensagem="Scores recalculados com sucesso", score_empresa=agregado.score)
