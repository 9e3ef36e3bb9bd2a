"""
formatting.py - Formatação de documento (textDocument/formatting)

Propósito:
    Substitui o buffer inteiro pela reimpressão canônica do motor.

Notas de implementação:
    - Com qualquer erro de análise, recusa formatar (lista vazia)
    - Sucesso: um único TextEdit de (0, 0) até o fim do texto atual
"""

from __future__ import annotations

import logging
from typing import List

from lsprotocol.types import Position, Range, TextEdit

from openscad_lsp.documents import AnalysisBridge, AnalysisUnavailableError, OpenDocument
from openscad_lsp.positions import offset_to_position

logger = logging.getLogger(__name__)


def compute_formatting(document: OpenDocument, bridge: AnalysisBridge) -> List[TextEdit]:
    handle = bridge.handle(document.uri)
    if handle is None:
        raise AnalysisUnavailableError(f"Arquivo não registrado no motor: {document.uri}")

    if handle.errors:
        logger.info(
            f"Formatação recusada para {document.uri}: {len(handle.errors)} erros"
        )
        return []

    return [
        TextEdit(
            range=Range(
                start=Position(line=0, character=0),
                end=offset_to_position(document.text, len(document.text)),
            ),
            new_text=handle.get_formatted(),
        )
    ]
