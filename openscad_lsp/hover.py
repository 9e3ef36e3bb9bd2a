"""
hover.py - Documentação de declarações (textDocument/hover)

Propósito:
    Monta a documentação Markdown de uma declaração OpenSCAD a partir da
    assinatura reimpressa pelo motor e das anotações do doc comment.
    A mesma renderização é usada pelo completion.

Estrutura do Markdown:
    1. Assinatura (impressão "definitions only") em bloco ```scad
    2. Texto livre do doc comment
    3. "Parameters:" com um bullet por @param, em ordem de origem
    4. Uma linha "see also" por @see, categorizada pelo host do link

Notas de implementação:
    - Cada tipo de anotação tem seu renderer (tabela por AnnotationKind)
    - Link malformado vira texto puro; não aborta o hover
    - Sem doc comment, apenas o bloco de assinatura é retornado
"""

from __future__ import annotations

import logging
from typing import Callable, Dict
from urllib.parse import urlparse

from lsprotocol.types import Hover, MarkupContent, MarkupKind, Position

from openscad_lsp.documents import AnalysisBridge, OpenDocument
from openscad_lsp.engine import (
    AnalysisEngine,
    Annotation,
    AnnotationKind,
    Declaration,
    ParamAnnotation,
    SeeAnnotation,
)
from openscad_lsp.positions import to_code_location

logger = logging.getLogger(__name__)

UNKNOWN_HOVER = "<unknown>"

_WIKIPEDIA_HOST = "wikipedia.org"
_USER_MANUAL_HOST = "wikibooks.org"
_USER_MANUAL_PATH = "/wiki/OpenSCAD_User_Manual"


def compute_hover(
    document: OpenDocument, position: Position, bridge: AnalysisBridge
) -> Hover:
    """
    Computa hover para a declaração sob o cursor.

    Raises:
        AnalysisUnavailableError: arquivo sem handle ou sem AST
    """
    handle = bridge.analyzed_handle(document.uri)
    loc = to_code_location(document.text, position, getattr(handle.ast, "file", None))

    declaration = handle.get_symbol_declaration(loc)
    if declaration is None:
        return Hover(contents=UNKNOWN_HOVER)

    return Hover(contents=declaration_to_markup(declaration, bridge.engine))


def declaration_to_markup(
    declaration: Declaration, engine: AnalysisEngine
) -> MarkupContent:
    """Renderiza a documentação Markdown de uma declaração."""
    signature = engine.print_definition(declaration).strip()
    contents = f"```scad\n{signature}\n```\n---\n"

    doc_comment = getattr(declaration, "doc_comment", None)
    if doc_comment:
        contents += doc_comment.documentation_content or ""

        params = [
            a for a in doc_comment.annotations if a.kind is AnnotationKind.PARAM
        ]
        if params:
            contents += "\n\n\n\nParameters:\n"
            for annotation in params:
                contents += render_annotation(annotation)

        for annotation in doc_comment.annotations:
            if annotation.kind is AnnotationKind.SEE:
                contents += render_annotation(annotation)

    return MarkupContent(kind=MarkupKind.Markdown, value=contents)


def render_annotation(annotation: Annotation) -> str:
    return _RENDERERS[annotation.kind](annotation)


def _render_param(param: ParamAnnotation) -> str:
    label = ""
    if param.positional:
        label = " *positional*"
    if param.named:
        label = " *named*"
    types = f" ({', '.join(param.types)})" if param.types else ""
    return f"\n* **`{param.link}`**{label}{types}: {param.description}"


def _render_see(see: SeeAnnotation) -> str:
    link = see.link
    try:
        url = _parse_link(link)
    except ValueError:
        logger.debug(f"Link @see malformado, renderizando como texto: {link!r}")
        return f"\n\n **See also**: {link}"

    host = url.hostname or ""
    if host.endswith(_WIKIPEDIA_HOST):
        return f"\n\n [See more on **Wikipedia**]({link})"
    if host.endswith(_USER_MANUAL_HOST) and url.path.startswith(_USER_MANUAL_PATH):
        return f"\n\n [See more on the **OpenSCAD User Manual**]({link})"
    return f"\n **See also**: [{link}]({link})"


def _parse_link(link: str):
    """urlparse estrito: exige esquema e host (ou caminho, para file:)."""
    url = urlparse(link.strip())
    if not url.scheme or not (url.netloc or url.path):
        raise ValueError(f"URL inválida: {link!r}")
    _ = url.port
    return url


_RENDERERS: Dict[AnnotationKind, Callable[[Annotation], str]] = {
    AnnotationKind.PARAM: _render_param,
    AnnotationKind.SEE: _render_see,
}

