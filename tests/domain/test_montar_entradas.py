# tests/domain/test_montar_entradas.py
from datetime import datetime, timedelta

from api.application.services.recalculo_service import montar_entradas
from api.domain.qs_score.entities import Avaliacao, DenunciaResolvida
from api.domain.qs_score.enums import PENDENCIA_ABERTA, PENDENCIA_RESOLVIDA, StatusPendencia
from api.domain.qs_score.services import agrupar_visitas

AGORA = datetime(2026, 3, 2, 12, 0, 0)
DESDE = AGORA - timedelta(days=90)


def _montar(area_ids: list[str], **kwargs: object) -> dict:
    padrao: dict[str, object] = {
        "pendencias_abertas": {},
        "pendencias_resolvidas": {},
        "colaboradores": {},
        "visitas": [],
        "denuncias": [],
        "lideranca": [],
        "desde": DESDE,
    }
    padrao.update(kwargs)
    return montar_entradas(area_ids, **padrao)  # type: ignore[arg-type]


def test_area_sem_dados_recebe_zeros():
    entradas = _montar(["a1"])
    dados = entradas["a1"]
    assert dados.pendencias_abertas == 0
    assert dados.pendencias_resolvidas == 0
    assert dados.visitas == ()
    assert dados.colaboradores == 0
    assert dados.denuncias_resolvidas == ()
    assert dados.total_denuncias == 0
    assert dados.pendencias_lideranca == 0
    assert dados.ultima_denuncia_em is None


def test_contagens_por_area():
    entradas = _montar(
        ["a1", "a2"],
        pendencias_abertas={"a1": 2},
        pendencias_resolvidas={"a1": 8, "a2": 1},
        colaboradores={"a2": 7},
    )
    assert (entradas["a1"].pendencias_abertas, entradas["a1"].pendencias_resolvidas) == (2, 8)
    assert (entradas["a2"].pendencias_abertas, entradas["a2"].pendencias_resolvidas) == (0, 1)
    assert entradas["a2"].colaboradores == 7


def test_visitas_particionadas_com_avaliacoes():
    visitas = [
        ("a1", "v1", "AREA", 4.0),
        ("a1", "v1", "LIDERANCA", 2.0),
        ("a1", "v2", None, None),
        ("a2", "v3", "AREA", 5.0),
    ]
    entradas = _montar(["a1", "a2"], visitas=visitas)

    v1, v2 = entradas["a1"].visitas
    assert v1.id == "v1"
    assert v1.avaliacoes == (Avaliacao("AREA", 4.0), Avaliacao("LIDERANCA", 2.0))
    assert v2.id == "v2"
    assert v2.avaliacoes == ()
    assert [v.id for v in entradas["a2"].visitas] == ["v3"]


def test_denuncias_janela_e_ultima():
    antiga = AGORA - timedelta(days=200)
    recente = AGORA - timedelta(days=10)
    denuncias = [
        ("a1", "RESOLVIDO", recente, recente + timedelta(days=2)),
        ("a1", "ABERTO", AGORA - timedelta(days=3), None),
        ("a1", "RESOLVIDO", antiga, antiga + timedelta(days=1)),
        ("a2", "RESOLVIDO", antiga, antiga + timedelta(days=40)),
    ]
    entradas = _montar(["a1", "a2"], denuncias=denuncias)

    a1 = entradas["a1"]
    assert a1.total_denuncias == 2
    assert a1.denuncias_resolvidas == (
        DenunciaResolvida(criado_em=recente, resolvido_em=recente + timedelta(days=2)),
    )
    assert a1.ultima_denuncia_em == AGORA - timedelta(days=3)

    # Fora da janela: nao conta, mas ainda define a ultima denuncia
    a2 = entradas["a2"]
    assert a2.total_denuncias == 0
    assert a2.denuncias_resolvidas == ()
    assert a2.ultima_denuncia_em == antiga


def test_pendencias_da_lideranca_contadas_por_area():
    entradas = _montar(["a1", "a2", "a3"], lideranca=["a1", "a1", "a2"])
    assert [entradas[a].pendencias_lideranca for a in ("a1", "a2", "a3")] == [2, 1, 0]


def test_area_fora_da_lista_e_ignorada():
    entradas = _montar(["a1"], pendencias_abertas={"a1": 1, "outra": 9})
    assert set(entradas) == {"a1"}


def test_agrupar_visitas_mantem_ordem_e_nota_nula():
    rows = [("v1", "AREA", 3), ("v1", "AREA", None), ("v2", None, None)]
    visitas = agrupar_visitas(rows)
    assert [v.id for v in visitas] == ["v1", "v2"]
    assert visitas[0].avaliacoes == (Avaliacao("AREA", 3.0), Avaliacao("AREA", None))
    assert visitas[1].avaliacoes == ()


def test_visitas_em_lote_iguais_ao_agrupamento_por_area():
    visitas = [
        ("a2", "v3", "AREA", 5.0),
        ("a1", "v1", "AREA", 4.0),
        ("a2", "v4", None, None),
        ("a1", "v1", "COLABORADOR", None),
    ]
    entradas = _montar(["a1", "a2"], visitas=visitas)
    for area_id in ("a1", "a2"):
        da_area = [(v, t, n) for a, v, t, n in visitas if a == area_id]
        assert entradas[area_id].visitas == tuple(agrupar_visitas(da_area))


def test_status_de_pendencia():
    assert PENDENCIA_ABERTA == (StatusPendencia.PENDENTE,)
    assert [s.value for s in PENDENCIA_RESOLVIDA] == ["RESOLVIDA", "CONCLUIDA"]
    assert StatusPendencia.CONCLUIDA == "CONCLUIDA"
