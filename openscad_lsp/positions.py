"""
positions.py - Conversão entre coordenadas do editor e do motor

Propósito:
    O editor fala em (linha, coluna) 0-based; o motor fala em offset
    absoluto dentro do texto. Este módulo converte nos dois sentidos e
    trata a convenção de URIs (file://) ↔ caminhos do motor.

Componentes principais:
    - position_to_offset: (texto, linha, coluna) → offset absoluto
    - offset_to_position: offset absoluto → Position LSP
    - to_code_location: Position LSP → CodeLocation do motor
    - uri_to_path / path_to_uri: file:// ↔ caminho

Notas de implementação:
    - Varredura linear a cada chamada (sem índice de linhas em cache)
    - Offset no fim do arquivo é limitado a max(0, len(texto) - 1)
    - Cada '\\n' conta como um caractere
"""

from __future__ import annotations

from typing import Optional

from lsprotocol.types import Position

from openscad_lsp.engine import CodeFile, CodeLocation

FILE_SCHEME = "file://"


def position_to_offset(text: str, line: int, character: int) -> int:
    """
    Converte (linha, coluna) em offset absoluto.

    Conta os caracteres anteriores à linha pedida e soma a coluna.
    Cursor no fim do arquivo (ou além) é limitado ao último índice válido.
    """
    chars_before_line = 0
    lines_to_go = line
    while lines_to_go != 0 and chars_before_line < len(text):
        if text[chars_before_line] == "\n":
            lines_to_go -= 1
        chars_before_line += 1

    offset = chars_before_line + character
    if offset >= len(text):
        offset = max(0, len(text) - 1)
    return offset


def offset_to_position(text: str, offset: int) -> Position:
    """Converte offset absoluto em Position LSP (inverso de position_to_offset)."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return Position(line=line, character=offset - line_start)


def to_code_location(
    text: str, position: Position, file: Optional[CodeFile]
) -> CodeLocation:
    """Monta o CodeLocation do motor para a posição do cursor."""
    return CodeLocation(
        file=file,
        char=position_to_offset(text, position.line, position.character),
        line=position.line,
        col=position.character,
    )


def uri_to_path(uri: str) -> str:
    if uri.startswith(FILE_SCHEME):
        return uri[len(FILE_SCHEME):]
    return uri


def path_to_uri(path: str) -> str:
    return FILE_SCHEME + path
