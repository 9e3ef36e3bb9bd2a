"""
conftest.py - Fixtures compartilhadas

Propósito:
    Motor de análise falso (FakeEngine/FakeHandle) que segue o contrato de
    openscad_lsp.engine sem lexer/parser reais. Os testes configuram
    erros, candidatos, símbolos e declarações diretamente no handle.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from openscad_lsp.engine import CodeFile
from openscad_lsp.handlers import ServerState


class FakeHandle:
    """Handle de análise com respostas configuráveis."""

    def __init__(self, path: str, text: str):
        self.file = CodeFile(path=path, code=text)
        self.text = text
        self.ast = SimpleNamespace(file=self.file)
        self.errors = []
        self.completions = []
        self.symbols = []
        self.declaration = None
        self.declaration_location = None
        self.formatted = ""
        self.queries = []

    def get_completions_at_location(self, loc):
        self.queries.append(loc)
        return list(self.completions)

    def get_symbols(self):
        return list(self.symbols)

    def get_symbol_declaration_location(self, loc):
        self.queries.append(loc)
        return self.declaration_location

    def get_symbol_declaration(self, loc):
        self.queries.append(loc)
        return self.declaration

    def get_formatted(self):
        return self.formatted


class FakeEngine:
    """Registro de arquivos em memória; registra cada chamada em `calls`."""

    def __init__(self):
        self.files: dict[str, FakeHandle] = {}
        self.calls: list[tuple[str, str]] = []

    def get_file(self, path):
        return self.files.get(path)

    def notify_new_file_opened(self, path, text):
        self.calls.append(("open", path))
        self.files[path] = FakeHandle(path, text)

    def notify_file_changed(self, path, text):
        self.calls.append(("change", path))
        self.files[path].text = text

    def notify_file_closed(self, path):
        self.calls.append(("close", path))
        del self.files[path]

    def print_definition(self, declaration):
        return declaration.signature


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def state(engine):
    return ServerState(engine)
