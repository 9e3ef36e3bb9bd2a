"""
completion.py - Autocomplete de símbolos em escopo (textDocument/completion)

Propósito:
    Pede ao motor os candidatos em escopo na posição do cursor e os
    converte em CompletionItem, com documentação já renderizada para
    functions, modules e variáveis.

Mapeamento CompletionType → CompletionItemKind:
    FUNCTION  → Function
    MODULE    → Module
    VARIABLE  → Variable
    KEYWORD   → Keyword
    DIRECTORY → Folder
    FILE      → File

Notas de implementação:
    - Sem handle ou sem AST (falha de lexer), retorna lista vazia
    - Ordem dos candidatos do motor é preservada
    - data = índice 1-based, usado por completionItem/resolve
"""

from __future__ import annotations

import logging
from typing import List

from lsprotocol.types import CompletionItem, CompletionItemKind, Position

from openscad_lsp.documents import AnalysisBridge, OpenDocument
from openscad_lsp.engine import AnalysisEngine, CompletionCandidate, CompletionType
from openscad_lsp.hover import declaration_to_markup
from openscad_lsp.positions import to_code_location

logger = logging.getLogger(__name__)

_KIND_MAP = {
    CompletionType.FUNCTION: CompletionItemKind.Function,
    CompletionType.MODULE: CompletionItemKind.Module,
    CompletionType.VARIABLE: CompletionItemKind.Variable,
    CompletionType.KEYWORD: CompletionItemKind.Keyword,
    CompletionType.DIRECTORY: CompletionItemKind.Folder,
    CompletionType.FILE: CompletionItemKind.File,
}

_DECLARATION_TYPES = {
    CompletionType.FUNCTION,
    CompletionType.MODULE,
    CompletionType.VARIABLE,
}

# Detalhes estáticos de completionItem/resolve, por índice
_RESOLVE_DETAILS = {
    1: ("module", "A module"),
    2: ("function", "A function"),
}


def compute_completions(
    document: OpenDocument, position: Position, bridge: AnalysisBridge
) -> List[CompletionItem]:
    """
    Computa lista de completamento.

    Args:
        document: Documento aberto (texto atual)
        position: Posição do cursor (0-based)
        bridge: Ponte com o motor de análise

    Returns:
        Lista de CompletionItem (vazia se o arquivo não tem AST)
    """
    handle = bridge.handle(document.uri)
    if handle is None or handle.ast is None:
        logger.debug(f"Sem AST para completion: {document.uri}")
        return []

    loc = to_code_location(document.text, position, getattr(handle.ast, "file", None))
    candidates = handle.get_completions_at_location(loc)

    return [
        build_completion_item(candidate, index, bridge.engine)
        for index, candidate in enumerate(candidates, start=1)
    ]


def build_completion_item(
    candidate: CompletionCandidate, index: int, engine: AnalysisEngine
) -> CompletionItem:
    documentation = None
    if candidate.type in _DECLARATION_TYPES and candidate.decl is not None:
        documentation = declaration_to_markup(candidate.decl, engine)

    return CompletionItem(
        label=candidate.name,
        kind=_KIND_MAP.get(candidate.type, CompletionItemKind.Text),
        documentation=documentation,
        data=index,
    )


def resolve_completion_item(item: CompletionItem) -> CompletionItem:
    """Anexa detail/documentation estáticos; outros índices ficam inalterados."""
    details = _RESOLVE_DETAILS.get(item.data)
    if details:
        item.detail, item.documentation = details
    return item
