"""
converters.py - Conversão de erros do motor para Diagnostics LSP

Propósito:
    Converter os AnalysisError do motor (offset absoluto + mensagem) em
    Diagnostic LSP ancorados na posição traduzida do texto atual.

Componentes principais:
    - build_diagnostic: AnalysisError → Diagnostic
    - build_diagnostics: handle do motor → List[Diagnostic]

Notas de implementação:
    - Range de ponto único (start == end) no offset do erro
    - Severidade sempre Error (o motor não distingue warnings)
    - Lista completa a cada publicação (substitui a anterior no cliente)
    - Limite de maxNumberOfProblems aplicado na ordem do motor
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lsprotocol.types import Diagnostic, DiagnosticSeverity, Range

from openscad_lsp.engine import AnalysisError, AnalysisHandle
from openscad_lsp.positions import offset_to_position

logger = logging.getLogger(__name__)

DIAGNOSTIC_SOURCE = "openscad-lsp"


def build_diagnostic(error: AnalysisError, text: str) -> Diagnostic:
    position = offset_to_position(text, error.location.char)
    return Diagnostic(
        range=Range(start=position, end=position),
        severity=DiagnosticSeverity.Error,
        source=DIAGNOSTIC_SOURCE,
        message=error.message,
    )


def build_diagnostics(
    handle: Optional[AnalysisHandle],
    text: str,
    max_number_of_problems: Optional[int] = None,
) -> List[Diagnostic]:
    """
    Converte todos os erros do handle em diagnostics.

    Args:
        handle: Handle do motor (None quando o arquivo não foi registrado)
        text: Texto atual do documento, usado para traduzir offsets
        max_number_of_problems: Limite de diagnostics (None = sem limite)
    """
    if handle is None:
        return []

    errors = list(handle.errors or [])
    if max_number_of_problems is not None and len(errors) > max_number_of_problems:
        logger.debug(
            f"{len(errors)} erros, publicando apenas {max_number_of_problems}"
        )
        errors = errors[:max_number_of_problems]

    return [build_diagnostic(error, text) for error in errors]
