# api/domain/qs_score/exceptions.py
from __future__ import annotations


class FuncionalidadeDesabilitada(Exception):
    """Toggle da empresa (configuracao_sistema) desligado ou inexistente."""

    def __init__(self, empresa_id: str, funcionalidade: str) -> None:
        self.empresa_id = empresa_id
        self.funcionalidade = funcionalidade
        super().__init__(f"{funcionalidade} nao esta habilitado para a empresa {empresa_id}")
