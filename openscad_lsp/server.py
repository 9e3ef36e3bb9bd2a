"""
server.py - Servidor LSP principal para OpenSCAD usando pygls

Propósito:
    Liga a tabela de handlers (handlers.HANDLERS) ao transporte pygls:
    registra cada método LSP, publica diagnostics, busca configurações
    do cliente e faz o registro dinâmico de capacidades.

Componentes principais:
    - OpenScadLanguageServer: LanguageServer com o ServerState
    - dispatch: executa o handler da tabela com log de exceções
    - Event handlers: did_open, did_change, did_close, consultas
    - main: ponto de entrada (STDIO)

Dependências críticas:
    - pygls: Framework LSP
    - openscad_lsp.engine: motor de análise (descoberto via entry points)

Exemplo de uso:
    python -m openscad_lsp

Notas de implementação:
    - Sincronização completa de documentos (TextDocumentSyncKind.Full)
    - Mutação de documento/motor acontece antes de qualquer await;
      diagnostics usam o texto mais recente (último change vence)
    - Exceções em handlers são logadas com stack e repassadas ao pygls,
      que responde erro JSON-RPC ao cliente
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

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
    CompletionOptions,
    CompletionParams,
    ConfigurationItem,
    DefinitionParams,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidChangeWatchedFilesParams,
    DidChangeWorkspaceFoldersParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentFormattingParams,
    DocumentSymbolParams,
    HoverParams,
    InitializedParams,
    InitializeParams,
    TextDocumentSyncKind,
    WorkspaceConfigurationParams,
)
from pygls.server import LanguageServer

from openscad_lsp import __version__
from openscad_lsp.engine import load_engine
from openscad_lsp.handlers import HANDLERS, ServerState, diagnostics_for
from openscad_lsp.settings import SETTINGS_SECTION, Settings

# Configuração de logging (stderr; stdout é o canal do protocolo)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class OpenScadLanguageServer(LanguageServer):
    """
    Servidor LSP especializado para OpenSCAD.

    Attributes:
        state: ServerState com documentos, motor e configurações.
               None até main() carregar o motor de análise.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.state: Optional[ServerState] = None


# Instância global do servidor
server = OpenScadLanguageServer(
    "openscad-lsp",
    f"v{__version__}",
    text_document_sync_kind=TextDocumentSyncKind.Full,
)


def dispatch(ls: OpenScadLanguageServer, method: str, params) -> Any:
    """Executa o handler de `method`; exceções são logadas e repassadas."""
    handler = HANDLERS[method]
    try:
        return handler(ls.state, params)
    except Exception as e:
        logger.error(f"Erro em {method}: {e}", exc_info=True)
        raise


async def ensure_settings(ls: OpenScadLanguageServer, uri: str) -> Settings:
    """
    Retorna as configurações do URI, buscando no cliente se necessário.

    Falha ao buscar não derruba a publicação de diagnostics: usa as
    configurações globais e tenta de novo na próxima mudança.
    """
    cache = ls.state.settings
    cached = cache.get(uri)
    if cached is not None:
        return cached

    # didChangeConfiguration pode limpar o cache durante o await
    generation = cache.generation
    try:
        result = await ls.get_configuration_async(
            WorkspaceConfigurationParams(
                items=[ConfigurationItem(scope_uri=uri, section=SETTINGS_SECTION)]
            )
        )
    except Exception as e:
        logger.warning(f"Falha ao obter configurações para {uri}: {e}", exc_info=True)
        return cache.global_settings

    settings = Settings.from_client(result[0] if result else None)
    # O documento pode ter sido fechado enquanto aguardávamos o cliente
    if ls.state.documents.has(uri):
        cache.put(uri, settings, generation)
    return settings


async def publish_document_diagnostics(ls: OpenScadLanguageServer, uri: str) -> None:
    """Calcula e publica a lista completa de diagnostics do URI."""
    await ensure_settings(ls, uri)
    publish = diagnostics_for(ls.state, uri)
    if publish is None:
        return
    logger.debug(f"Publicando {len(publish.diagnostics)} diagnostics para {uri}")
    ls.publish_diagnostics(publish.uri, publish.diagnostics, version=publish.version)


@server.feature(INITIALIZE)
def initialize(ls: OpenScadLanguageServer, params: InitializeParams) -> None:
    dispatch(ls, INITIALIZE, params)


@server.feature(INITIALIZED)
async def initialized(ls: OpenScadLanguageServer, params: InitializedParams) -> None:
    """Registra didChangeConfiguration dinamicamente quando suportado."""
    registration = dispatch(ls, INITIALIZED, params)
    if registration is None:
        return
    try:
        await ls.register_capability_async(registration)
        logger.info("Registrado para workspace/didChangeConfiguration")
    except Exception as e:
        logger.error(f"Falha ao registrar didChangeConfiguration: {e}", exc_info=True)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
async def did_open(ls: OpenScadLanguageServer, params: DidOpenTextDocumentParams) -> None:
    """Handler para abertura de documento: registra no motor e valida."""
    uri = params.text_document.uri
    logger.info(f"Documento aberto: {uri}")
    dispatch(ls, TEXT_DOCUMENT_DID_OPEN, params)
    await publish_document_diagnostics(ls, uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
async def did_change(
    ls: OpenScadLanguageServer, params: DidChangeTextDocumentParams
) -> None:
    """Handler para mudanças: reenvia o buffer inteiro e revalida."""
    uri = params.text_document.uri
    logger.debug(f"Documento modificado: {uri}")
    dispatch(ls, TEXT_DOCUMENT_DID_CHANGE, params)
    await publish_document_diagnostics(ls, uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: OpenScadLanguageServer, params: DidCloseTextDocumentParams) -> None:
    """Handler para fechamento: libera o handle e limpa diagnostics."""
    logger.info(f"Documento fechado: {params.text_document.uri}")
    publish = dispatch(ls, TEXT_DOCUMENT_DID_CLOSE, params)
    if publish is None:
        return
    ls.publish_diagnostics(publish.uri, publish.diagnostics)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(
    ls: OpenScadLanguageServer, params: DidChangeConfigurationParams
) -> None:
    dispatch(ls, WORKSPACE_DID_CHANGE_CONFIGURATION, params)


@server.feature(WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)
def did_change_workspace_folders(
    ls: OpenScadLanguageServer, params: DidChangeWorkspaceFoldersParams
) -> None:
    dispatch(ls, WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS, params)


@server.feature(WORKSPACE_DID_CHANGE_WATCHED_FILES)
def did_change_watched_files(
    ls: OpenScadLanguageServer, params: DidChangeWatchedFilesParams
) -> None:
    dispatch(ls, WORKSPACE_DID_CHANGE_WATCHED_FILES, params)


@server.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(resolve_provider=True))
def completion(ls: OpenScadLanguageServer, params: CompletionParams):
    return dispatch(ls, TEXT_DOCUMENT_COMPLETION, params)


@server.feature(COMPLETION_ITEM_RESOLVE)
def completion_resolve(ls: OpenScadLanguageServer, item: CompletionItem):
    return dispatch(ls, COMPLETION_ITEM_RESOLVE, item)


@server.feature(TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(ls: OpenScadLanguageServer, params: DocumentSymbolParams):
    """Retorna document symbols para outline/breadcrumb do editor."""
    return dispatch(ls, TEXT_DOCUMENT_DOCUMENT_SYMBOL, params)


@server.feature(TEXT_DOCUMENT_DEFINITION)
def definition(ls: OpenScadLanguageServer, params: DefinitionParams):
    return dispatch(ls, TEXT_DOCUMENT_DEFINITION, params)


@server.feature(TEXT_DOCUMENT_HOVER)
def hover(ls: OpenScadLanguageServer, params: HoverParams):
    return dispatch(ls, TEXT_DOCUMENT_HOVER, params)


@server.feature(TEXT_DOCUMENT_FORMATTING)
def formatting(ls: OpenScadLanguageServer, params: DocumentFormattingParams):
    return dispatch(ls, TEXT_DOCUMENT_FORMATTING, params)


def main() -> None:
    """
    Ponto de entrada principal do servidor.

    Carrega o motor de análise e inicia o servidor em modo STDIO.
    """
    logger.info("Iniciando OpenSCAD Language Server...")
    logger.info("Python executable: %s", sys.executable)
    logger.info("openscad-lsp package: %s", __version__)
    server.state = ServerState(load_engine())
    server.start_io()


if __name__ == "__main__":
    main()
