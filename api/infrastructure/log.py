# api/infrastructure/log.py
#
# Logger compartilhado pela API e pelo recalculo agendado (pipeline/main.py).
#
# Design decisions:
#   - Uma unica funcao log(); sem framework de logging.
#   - Linha com componente, nivel e tempo decorrido desde o import do modulo,
#     para o operador ver quanto cada etapa do recalculo leva.
#   - stdout com flush; uma unica escrita por linha (atomica no CPython).
from __future__ import annotations

import sys
import time

_start = time.monotonic()


def log(message: str, *, componente: str = "qs-score", nivel: str = "INFO") -> None:
    """Write a timestamped log line to stdout."""
    elapsed = time.monotonic() - _start
    minutes, seconds = divmod(int(elapsed), 60)
    sys.stdout.write(f"[{componente} {minutes:02d}:{seconds:02d}] {nivel} {message}\n")
    sys.stdout.flush()
