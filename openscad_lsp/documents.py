"""
documents.py - Documentos abertos e ponte com o registro do motor

Propósito:
    Mantém o texto atual de cada documento aberto no editor e repassa
    os eventos de ciclo de vida (open/change/close) ao motor de análise,
    para que a AST e os erros em cache fiquem consistentes com o editor.

Componentes principais:
    - OpenDocument: {uri, text, version}
    - DocumentStore: mapa uri → OpenDocument (fonte da verdade do editor)
    - AnalysisBridge: repassa eventos ao motor e resolve handles por uri
    - DocumentNotFoundError / AnalysisUnavailableError: falhas de consulta

Notas de implementação:
    - Apenas sincronização completa: cada change reenvia o buffer inteiro
    - open duplicado não cria um segundo handle no motor
    - change sem handle (corrida open/change) é tratado como open
    - close de uri nunca aberto é no-op
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from openscad_lsp.engine import AnalysisEngine, AnalysisHandle
from openscad_lsp.positions import uri_to_path

logger = logging.getLogger(__name__)


class DocumentNotFoundError(LookupError):
    """URI pedido não está aberto no DocumentStore."""


class AnalysisUnavailableError(RuntimeError):
    """Documento aberto, mas o motor não tem handle ou AST para ele."""


@dataclass
class OpenDocument:
    uri: str
    text: str
    version: int = 0


class DocumentStore:
    """Documentos abertos no editor, indexados por URI."""

    def __init__(self):
        self._documents: Dict[str, OpenDocument] = {}

    def open(self, uri: str, text: str, version: int = 0) -> OpenDocument:
        document = self._documents.get(uri)
        if document is None:
            document = OpenDocument(uri=uri, text=text, version=version)
            self._documents[uri] = document
        else:
            document.text = text
            document.version = version
        return document

    def change(self, uri: str, text: str, version: Optional[int] = None) -> OpenDocument:
        """Substitui o texto inteiro; abre o documento se ainda não existir."""
        document = self._documents.get(uri)
        if document is None:
            return self.open(uri, text, version or 0)
        document.text = text
        if version is not None:
            document.version = version
        return document

    def close(self, uri: str) -> Optional[OpenDocument]:
        return self._documents.pop(uri, None)

    def get(self, uri: str) -> OpenDocument:
        """Retorna o documento aberto ou lança DocumentNotFoundError."""
        document = self._documents.get(uri)
        if document is None:
            raise DocumentNotFoundError(f"Documento não está aberto: {uri}")
        return document

    def has(self, uri: str) -> bool:
        return uri in self._documents


class AnalysisBridge:
    """Repassa o ciclo de vida dos documentos ao motor de análise."""

    def __init__(self, engine: AnalysisEngine):
        self.engine = engine

    def handle(self, uri: str) -> Optional[AnalysisHandle]:
        """Handle do motor para o uri, ou None se não registrado."""
        return self.engine.get_file(uri_to_path(uri))

    def open(self, uri: str, text: str) -> None:
        path = uri_to_path(uri)
        if self.engine.get_file(path) is None:
            logger.debug(f"Registrando arquivo no motor: {path}")
            self.engine.notify_new_file_opened(path, text)
        else:
            # open duplicado: reaproveita o handle existente
            self.engine.notify_file_changed(path, text)

    def change(self, uri: str, text: str) -> None:
        path = uri_to_path(uri)
        if self.engine.get_file(path) is None:
            logger.debug(f"change antes de open, registrando: {path}")
            self.engine.notify_new_file_opened(path, text)
        else:
            self.engine.notify_file_changed(path, text)

    def close(self, uri: str) -> None:
        path = uri_to_path(uri)
        if self.engine.get_file(path) is None:
            return
        self.engine.notify_file_closed(path)

    def analyzed_handle(self, uri: str) -> AnalysisHandle:
        """Handle com AST; lança AnalysisUnavailableError caso contrário."""
        handle = self.handle(uri)
        if handle is None or handle.ast is None:
            raise AnalysisUnavailableError(f"Arquivo sem análise disponível: {uri}")
        return handle
