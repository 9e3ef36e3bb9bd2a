"""
definition.py - Go-to-definition para símbolos OpenSCAD

Propósito:
    Resolve a declaração do símbolo sob o cursor usando o motor e devolve
    a Location da declaração (ponto de largura zero no início do nome).

Notas de implementação:
    - Nenhum símbolo resolvido → None (não é erro)
    - Arquivo sem handle ou sem AST → AnalysisUnavailableError
    - O motor devolve caminhos; convertidos para URI file://
    - Linhas/colunas do motor já são 0-based
"""

from __future__ import annotations

import logging
from typing import Optional

from lsprotocol.types import Location, Position, Range

from openscad_lsp.documents import AnalysisBridge, OpenDocument
from openscad_lsp.engine import CodeLocation
from openscad_lsp.positions import path_to_uri, to_code_location

logger = logging.getLogger(__name__)


def compute_definition(
    document: OpenDocument, position: Position, bridge: AnalysisBridge
) -> Optional[Location]:
    """
    Resolve definição do símbolo sob o cursor.

    Raises:
        AnalysisUnavailableError: arquivo nunca analisado com sucesso
    """
    handle = bridge.analyzed_handle(document.uri)
    loc = to_code_location(document.text, position, getattr(handle.ast, "file", None))

    target = handle.get_symbol_declaration_location(loc)
    if target is None or target.file is None:
        logger.debug(f"Sem definição em {document.uri}:{position.line}:{position.character}")
        return None

    return _location_to_lsp(target)


def _location_to_lsp(location: CodeLocation) -> Location:
    point = Position(line=location.line, character=location.col)
    return Location(
        uri=path_to_uri(location.file.path),
        range=Range(start=point, end=point),
    )
