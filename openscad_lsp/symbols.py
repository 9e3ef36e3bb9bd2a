"""
symbols.py - Document symbols (outline view) para arquivos OpenSCAD

Propósito:
    Converte as declarações do motor em DocumentSymbol[] hierárquico que o
    editor exibe como outline/breadcrumb.

Mapeamento de SymbolKind do motor → LSP SymbolKind:
    FUNCTION → Function
    MODULE   → Module
    VARIABLE → Variable

Notas de implementação:
    - range = declaração completa; selection_range = apenas o identificador
    - Children convertidos recursivamente
    - Com qualquer erro de análise, retorna lista vazia (nunca parcial)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lsprotocol.types import DocumentSymbol, Position, Range, SymbolKind

from openscad_lsp.engine import AnalysisHandle, DeclarationSymbol, SourceRange
from openscad_lsp.engine import SymbolKind as ScadSymbolKind

logger = logging.getLogger(__name__)

_KIND_MAP = {
    ScadSymbolKind.FUNCTION: SymbolKind.Function,
    ScadSymbolKind.MODULE: SymbolKind.Module,
    ScadSymbolKind.VARIABLE: SymbolKind.Variable,
}


def compute_document_symbols(handle: Optional[AnalysisHandle]) -> List[DocumentSymbol]:
    """Computa document symbols a partir do handle do motor."""
    if handle is None or handle.ast is None:
        return []
    if handle.errors:
        logger.debug(f"{len(handle.errors)} erros de análise, outline omitido")
        return []

    return [_build_symbol(decl) for decl in handle.get_symbols()]


def _build_symbol(decl: DeclarationSymbol) -> DocumentSymbol:
    children = [_build_symbol(child) for child in decl.children]
    return DocumentSymbol(
        name=decl.name,
        kind=_KIND_MAP[decl.kind],
        range=_make_range(decl.full_range),
        selection_range=_make_range(decl.name_range),
        children=children,
    )


def _make_range(source_range: SourceRange) -> Range:
    return Range(
        start=Position(line=source_range.start.line, character=source_range.start.col),
        end=Position(line=source_range.end.line, character=source_range.end.col),
    )
