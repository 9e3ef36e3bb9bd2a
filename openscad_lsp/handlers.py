"""
handlers.py - Estado do servidor e tabela de handlers LSP

Propósito:
    Concentra o estado mutável do servidor em um único objeto (ServerState)
    e expõe um handler por método LSP como função pura de
    (estado, params) → resposta, independente do transporte (pygls).

Componentes principais:
    - ServerState: documentos abertos, ponte com o motor, configurações
      e capacidades do cliente; criado no startup e vive até o shutdown
    - diagnostics_for: diagnostics atuais de um URI (publicação completa)
    - HANDLERS: tabela método LSP → handler

Notas de implementação:
    - Handlers de ciclo de vida mutam documento e motor sem ceder o loop;
      diagnostics são sempre calculados a partir do texto mais recente
    - Erros de consulta sobem como DocumentNotFoundError /
      AnalysisUnavailableError; o transporte os registra e repassa
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Dict, List, Optional

from lsprotocol.types import (
    COMPLETION_ITEM_RESOLVE,
    INITIALIZE,
    INITIALIZED,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DEFINITION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DOCUMENT_SYMBOL,
    TEXT_DOCUMENT_FORMATTING,
    TEXT_DOCUMENT_HOVER,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    WORKSPACE_DID_CHANGE_WATCHED_FILES,
    WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS,
    CompletionItem,
    CompletionParams,
    DefinitionParams,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidChangeWatchedFilesParams,
    DidChangeWorkspaceFoldersParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentFormattingParams,
    DocumentSymbol,
    DocumentSymbolParams,
    Hover,
    HoverParams,
    InitializedParams,
    InitializeParams,
    Location,
    PublishDiagnosticsParams,
    Registration,
    RegistrationParams,
    TextEdit,
)

from openscad_lsp.completion import compute_completions, resolve_completion_item
from openscad_lsp.converters import build_diagnostics
from openscad_lsp.definition import compute_definition
from openscad_lsp.documents import AnalysisBridge, DocumentStore
from openscad_lsp.engine import AnalysisEngine
from openscad_lsp.formatting import compute_formatting
from openscad_lsp.hover import compute_hover
from openscad_lsp.settings import SettingsCache
from openscad_lsp.symbols import compute_document_symbols

logger = logging.getLogger(__name__)


class ServerState:
    """
    Estado de longa duração do servidor OpenSCAD.

    Attributes:
        documents: Documentos abertos (texto/versão atuais)
        bridge: Ponte com o registro de arquivos do motor
        settings: Configurações do cliente (por URI ou globais)
        has_configuration_capability: Cliente suporta workspace/configuration
        has_workspace_folder_capability: Cliente suporta workspace folders
    """

    def __init__(self, engine: AnalysisEngine):
        self.documents = DocumentStore()
        self.bridge = AnalysisBridge(engine)
        self.settings = SettingsCache()
        self.has_configuration_capability = False
        self.has_workspace_folder_capability = False


def initialize(state: ServerState, params: InitializeParams) -> None:
    """Registra as capacidades do cliente relevantes para o servidor."""
    capabilities = params.capabilities
    workspace = capabilities.workspace

    state.has_configuration_capability = bool(workspace and workspace.configuration)
    state.has_workspace_folder_capability = bool(
        workspace and workspace.workspace_folders
    )
    state.settings.scoped = state.has_configuration_capability

    logger.info(
        "Capacidades do cliente: configuration=%s, workspaceFolders=%s",
        state.has_configuration_capability,
        state.has_workspace_folder_capability,
    )


def initialized(
    state: ServerState, params: InitializedParams
) -> Optional[RegistrationParams]:
    """Retorna o registro dinâmico de didChangeConfiguration, se suportado."""
    if not state.has_configuration_capability:
        return None
    return RegistrationParams(
        registrations=[
            Registration(
                id=str(uuid.uuid4()),
                method=WORKSPACE_DID_CHANGE_CONFIGURATION,
            )
        ]
    )


def did_open(state: ServerState, params: DidOpenTextDocumentParams) -> None:
    item = params.text_document
    state.documents.open(item.uri, item.text, item.version)
    state.bridge.open(item.uri, item.text)


def did_change(state: ServerState, params: DidChangeTextDocumentParams) -> None:
    """Sincronização completa: o último change contém o buffer inteiro."""
    if not params.content_changes:
        return
    uri = params.text_document.uri
    text = params.content_changes[-1].text
    state.documents.change(uri, text, params.text_document.version)
    state.bridge.change(uri, text)


def did_close(
    state: ServerState, params: DidCloseTextDocumentParams
) -> Optional[PublishDiagnosticsParams]:
    """Libera o documento; None se ele não estava aberto (nada a limpar)."""
    uri = params.text_document.uri
    if not state.documents.has(uri):
        logger.debug(f"didClose para documento não aberto: {uri}")
        return None
    state.bridge.close(uri)
    state.documents.close(uri)
    state.settings.drop(uri)
    return PublishDiagnosticsParams(uri=uri, diagnostics=[])


def did_change_configuration(
    state: ServerState, params: DidChangeConfigurationParams
) -> None:
    if state.has_configuration_capability:
        state.settings.clear()
    else:
        state.settings.update_global(params.settings)


def did_change_workspace_folders(
    state: ServerState, params: DidChangeWorkspaceFoldersParams
) -> None:
    logger.info("Workspace folder change event received.")


def did_change_watched_files(
    state: ServerState, params: DidChangeWatchedFilesParams
) -> None:
    logger.info(f"Arquivos monitorados mudaram: {len(params.changes)} eventos")


def diagnostics_for(state: ServerState, uri: str) -> Optional[PublishDiagnosticsParams]:
    """Diagnostics completos do URI; None se o documento já foi fechado."""
    if not state.documents.has(uri):
        return None
    document = state.documents.get(uri)
    settings = state.settings.resolve(uri)
    diagnostics = build_diagnostics(
        state.bridge.handle(uri),
        document.text,
        settings.max_number_of_problems,
    )
    return PublishDiagnosticsParams(
        uri=uri, diagnostics=diagnostics, version=document.version
    )


def completion(state: ServerState, params: CompletionParams) -> List[CompletionItem]:
    document = state.documents.get(params.text_document.uri)
    return compute_completions(document, params.position, state.bridge)


def completion_resolve(state: ServerState, item: CompletionItem) -> CompletionItem:
    return resolve_completion_item(item)


def document_symbol(
    state: ServerState, params: DocumentSymbolParams
) -> List[DocumentSymbol]:
    uri = params.text_document.uri
    state.documents.get(uri)
    return compute_document_symbols(state.bridge.handle(uri))


def definition(state: ServerState, params: DefinitionParams) -> Optional[Location]:
    document = state.documents.get(params.text_document.uri)
    return compute_definition(document, params.position, state.bridge)


def hover(state: ServerState, params: HoverParams) -> Hover:
    document = state.documents.get(params.text_document.uri)
    return compute_hover(document, params.position, state.bridge)


def formatting(state: ServerState, params: DocumentFormattingParams) -> List[TextEdit]:
    document = state.documents.get(params.text_document.uri)
    return compute_formatting(document, state.bridge)


HANDLERS: Dict[str, Callable] = {
    INITIALIZE: initialize,
    INITIALIZED: initialized,
    TEXT_DOCUMENT_DID_OPEN: did_open,
    TEXT_DOCUMENT_DID_CHANGE: did_change,
    TEXT_DOCUMENT_DID_CLOSE: did_close,
    WORKSPACE_DID_CHANGE_CONFIGURATION: did_change_configuration,
    WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS: did_change_workspace_folders,
    WORKSPACE_DID_CHANGE_WATCHED_FILES: did_change_watched_files,
    TEXT_DOCUMENT_COMPLETION: completion,
    COMPLETION_ITEM_RESOLVE: completion_resolve,
    TEXT_DOCUMENT_DOCUMENT_SYMBOL: document_symbol,
    TEXT_DOCUMENT_DEFINITION: definition,
    TEXT_DOCUMENT_HOVER: hover,
    TEXT_DOCUMENT_FORMATTING: formatting,
}
