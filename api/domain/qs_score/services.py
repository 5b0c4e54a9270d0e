# api/domain/qs_score/services.py
from __future__ import annotations

from collections.abc import Iterable

from .entities import Avaliacao, Visita


def agrupar_visitas(rows: Iterable[tuple[object, object, object]]) -> list[Visita]:
    """(visita_id, tipo, nota), ordenado por visita -> Visita com suas avaliacoes.

    Linha com tipo nulo (visita sem avaliacao no LEFT JOIN) gera a visita sem avaliacao.
    Usado pelo caminho de uma area e pelo caminho em lote: os dois precisam
    produzir as mesmas visitas.
    """
    avaliacoes: dict[str, list[Avaliacao]] = {}
    for visita_id, tipo, nota in rows:
        lista = avaliacoes.setdefault(str(visita_id), [])
        if tipo is not None:
            lista.append(Avaliacao(tipo=str(tipo), nota=float(nota) if nota is not None else None))
    return [Visita(id=vid, avaliacoes=tuple(avs)) for vid, avs in avaliacoes.items()]
