"""
test_documents.py - Testes para DocumentStore e AnalysisBridge

Propósito:
    Validar a máquina de estados Closed → Open → Open(editado) → Closed:
    open duplicado não cria segundo handle, change antes de open registra,
    close de uri não aberto é no-op.
"""

from __future__ import annotations

import pytest

from openscad_lsp.documents import (
    AnalysisBridge,
    AnalysisUnavailableError,
    DocumentNotFoundError,
    DocumentStore,
)

URI = "file:///proj/a.scad"
PATH = "/proj/a.scad"


class TestDocumentStore:
    def test_open_get(self):
        store = DocumentStore()
        store.open(URI, "cube(1);")
        doc = store.get(URI)
        assert doc.text == "cube(1);"
        assert doc.version == 0

    def test_change_substitui_texto(self):
        store = DocumentStore()
        store.open(URI, "cube(1);")
        store.change(URI, "cube(2);", version=3)
        doc = store.get(URI)
        assert doc.text == "cube(2);"
        assert doc.version == 3

    def test_change_sem_open_abre(self):
        store = DocumentStore()
        store.change(URI, "x = 1;", version=1)
        assert store.has(URI)
        assert store.get(URI).text == "x = 1;"

    def test_close_remove(self):
        store = DocumentStore()
        store.open(URI, "")
        store.close(URI)
        assert not store.has(URI)
        with pytest.raises(DocumentNotFoundError):
            store.get(URI)

    def test_close_inexistente(self):
        """Fechar documento não aberto não levanta exceção."""
        store = DocumentStore()
        assert store.close(URI) is None

    def test_open_duplicado_mantem_um_documento(self):
        store = DocumentStore()
        store.open(URI, "a")
        store.open(URI, "b")
        assert store.get(URI).text == "b"
        store.close(URI)
        assert not store.has(URI)


class TestAnalysisBridge:
    def test_open_registra_no_motor(self, engine):
        bridge = AnalysisBridge(engine)
        bridge.open(URI, "cube(1);")
        assert engine.calls == [("open", PATH)]
        assert bridge.handle(URI) is engine.files[PATH]

    def test_open_duplicado_um_handle(self, engine):
        bridge = AnalysisBridge(engine)
        bridge.open(URI, "cube(1);")
        first = bridge.handle(URI)
        bridge.open(URI, "cube(1);")

        assert [c for c in engine.calls if c[0] == "open"] == [("open", PATH)]
        assert bridge.handle(URI) is first

    def test_change_reenvia_texto_inteiro(self, engine):
        bridge = AnalysisBridge(engine)
        bridge.open(URI, "cube(1);")
        bridge.change(URI, "cube(2);\nsphere(1);")
        assert engine.calls[-1] == ("change", PATH)
        assert engine.files[PATH].text == "cube(2);\nsphere(1);"

    def test_change_antes_de_open_registra(self, engine):
        bridge = AnalysisBridge(engine)
        bridge.change(URI, "cube(1);")
        assert engine.calls == [("open", PATH)]

    def test_close_remove_handle(self, engine):
        bridge = AnalysisBridge(engine)
        bridge.open(URI, "")
        bridge.close(URI)
        assert engine.calls[-1] == ("close", PATH)
        assert bridge.handle(URI) is None

    def test_close_nao_aberto_noop(self, engine):
        bridge = AnalysisBridge(engine)
        bridge.close(URI)
        assert engine.calls == []

    def test_analyzed_handle_sem_ast(self, engine):
        bridge = AnalysisBridge(engine)
        bridge.open(URI, "§§§")
        engine.files[PATH].ast = None
        with pytest.raises(AnalysisUnavailableError):
            bridge.analyzed_handle(URI)

    def test_analyzed_handle_sem_registro(self, engine):
        bridge = AnalysisBridge(engine)
        with pytest.raises(AnalysisUnavailableError):
            bridge.analyzed_handle(URI)
