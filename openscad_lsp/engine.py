"""
engine.py - Contrato com o motor de análise OpenSCAD

Propósito:
    Descreve a interface consumida do motor externo (lexer, parser,
    resolvedor de escopo e formatador). O servidor nunca inspeciona a AST;
    apenas chama as operações abaixo e converte os resultados para LSP.

Componentes principais:
    - CodeFile, CodeLocation, SourceRange: coordenadas do motor
    - AnalysisError: erro de análise (offset absoluto + mensagem)
    - DeclarationSymbol: projeção somente-leitura das declarações
    - ParamAnnotation, SeeAnnotation: variantes fechadas de anotação
    - AnalysisEngine, AnalysisHandle: protocolos do motor
    - load_engine: descoberta do motor via entry points

Notas de implementação:
    - Offsets do motor são 0-based e contam '\\n' como um caractere
    - Linhas e colunas do motor também são 0-based (iguais ao LSP)
    - Motores se registram no grupo de entry points "openscad_lsp.engines"
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from importlib.metadata import entry_points
from typing import List, Optional, Protocol, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

ENGINE_ENTRY_POINT_GROUP = "openscad_lsp.engines"
ENGINE_ENV_VAR = "OPENSCAD_LSP_ENGINE"


@dataclass(frozen=True)
class CodeFile:
    """Arquivo conhecido pelo motor (caminho de filesystem, sem file://)."""

    path: str
    code: str = ""


@dataclass(frozen=True)
class CodeLocation:
    """Posição no código: offset absoluto + linha/coluna derivadas."""

    file: Optional[CodeFile]
    char: int
    line: int
    col: int


@dataclass(frozen=True)
class SourceRange:
    start: CodeLocation
    end: CodeLocation


@dataclass(frozen=True)
class AnalysisError:
    location: CodeLocation
    message: str


class SymbolKind(enum.Enum):
    FUNCTION = "function"
    MODULE = "module"
    VARIABLE = "variable"


class CompletionType(enum.Enum):
    FUNCTION = "function"
    MODULE = "module"
    VARIABLE = "variable"
    KEYWORD = "keyword"
    DIRECTORY = "directory"
    FILE = "file"


class AnnotationKind(enum.Enum):
    PARAM = "param"
    SEE = "see"


@dataclass(frozen=True)
class ParamAnnotation:
    """@param de um doc comment."""

    link: str
    description: str = ""
    positional: bool = False
    named: bool = False
    types: Tuple[str, ...] = ()
    kind: AnnotationKind = field(default=AnnotationKind.PARAM, init=False)


@dataclass(frozen=True)
class SeeAnnotation:
    """@see de um doc comment (link de referência cruzada)."""

    link: str
    kind: AnnotationKind = field(default=AnnotationKind.SEE, init=False)


Annotation = Union[ParamAnnotation, SeeAnnotation]


@dataclass(frozen=True)
class DocComment:
    documentation_content: str = ""
    annotations: Tuple[Annotation, ...] = ()


@dataclass
class DeclarationSymbol:
    """Declaração (function, module ou variável) com ranges de origem."""

    name: str
    kind: SymbolKind
    full_range: SourceRange
    name_range: SourceRange
    children: List["DeclarationSymbol"] = field(default_factory=list)


@dataclass(frozen=True)
class CompletionCandidate:
    """Candidato de completamento retornado pelo motor."""

    name: str
    type: CompletionType
    decl: Optional[object] = None


class Declaration(Protocol):
    """Nó de declaração da AST; só o doc comment é lido diretamente."""

    doc_comment: Optional[DocComment]


class AnalysisHandle(Protocol):
    """Estado de análise de um arquivo, mantido pelo motor."""

    ast: Optional[object]
    errors: Sequence[AnalysisError]

    def get_completions_at_location(
        self, loc: CodeLocation
    ) -> Sequence[CompletionCandidate]: ...

    def get_symbols(self) -> Sequence[DeclarationSymbol]: ...

    def get_symbol_declaration_location(
        self, loc: CodeLocation
    ) -> Optional[CodeLocation]: ...

    def get_symbol_declaration(self, loc: CodeLocation) -> Optional[Declaration]: ...

    def get_formatted(self) -> str: ...


class AnalysisEngine(Protocol):
    """Registro de arquivos do motor (equivalente a um SolutionManager)."""

    def get_file(self, path: str) -> Optional[AnalysisHandle]: ...

    def notify_new_file_opened(self, path: str, text: str) -> None: ...

    def notify_file_changed(self, path: str, text: str) -> None: ...

    def notify_file_closed(self, path: str) -> None: ...

    def print_definition(self, declaration: Declaration) -> str: ...


class EngineNotFoundError(ImportError):
    """Nenhum motor de análise OpenSCAD instalado."""


def load_engine(name: Optional[str] = None) -> AnalysisEngine:
    """
    Instancia o motor de análise registrado via entry points.

    Args:
        name: Nome do entry point; se None, usa OPENSCAD_LSP_ENGINE ou,
              na ausência dela, o único motor instalado

    Raises:
        EngineNotFoundError: nenhum motor (ou o motor pedido) encontrado
    """
    name = name or os.environ.get(ENGINE_ENV_VAR)
    candidates = list(entry_points(group=ENGINE_ENTRY_POINT_GROUP))
    if name:
        candidates = [ep for ep in candidates if ep.name == name]

    if not candidates:
        wanted = f" '{name}'" if name else ""
        raise EngineNotFoundError(
            f"Motor de análise OpenSCAD{wanted} não encontrado. "
            f"Instale um pacote que registre o grupo '{ENGINE_ENTRY_POINT_GROUP}'."
        )
    if len(candidates) > 1:
        logger.warning(
            "Vários motores instalados (%s); usando '%s'. Defina %s para escolher.",
            ", ".join(ep.name for ep in candidates),
            candidates[0].name,
            ENGINE_ENV_VAR,
        )

    entry = candidates[0]
    logger.info(f"Carregando motor de análise: {entry.name} ({entry.value})")
    factory = entry.load()
    return factory()
