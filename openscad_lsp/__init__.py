"""
openscad_lsp - Language Server Protocol para OpenSCAD

Propósito:
    Servidor LSP que liga o editor a um motor de análise OpenSCAD externo
    (lexer, parser, escopo e formatador), traduzindo coordenadas e
    convertendo as respostas do motor em objetos do protocolo.

Componentes principais:
    - server: Servidor principal usando pygls
    - handlers: Estado do servidor e tabela de handlers LSP
    - documents: Documentos abertos e ponte com o motor
    - positions: Conversão (linha, coluna) ↔ offset absoluto
    - converters, completion, symbols, definition, hover, formatting

Dependências críticas:
    - pygls: Framework LSP
    - lsprotocol: Tipos do protocolo
    - motor de análise registrado em "openscad_lsp.engines"

Exemplo de uso:
    python -m openscad_lsp
"""
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from pathlib import Path
import re


def _read_version_from_pyproject() -> str:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    try:
        text = pyproject.read_text(encoding="utf-8")
    except OSError:
        return "0.0.0"
    match = re.search(r'(?m)^version = "([^"]+)"\s*$', text)
    return match.group(1) if match else "0.0.0"


try:
    __version__ = _pkg_version("openscad-lsp")
except PackageNotFoundError:
    __version__ = _read_version_from_pyproject()

__all__ = ["server", "handlers", "documents", "positions", "converters"]
