"""
test_hover.py - Testes para textDocument/hover e renderização de docs

Propósito:
    Validar a montagem do Markdown: bloco de assinatura, corpo do doc
    comment, seção Parameters e linhas "see also" por categoria de link
    (Wikipedia, User Manual, genérico, malformado).
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from lsprotocol.types import MarkupKind, Position

from openscad_lsp.documents import AnalysisUnavailableError
from openscad_lsp.engine import DocComment, ParamAnnotation, SeeAnnotation
from openscad_lsp.hover import (
    UNKNOWN_HOVER,
    compute_hover,
    declaration_to_markup,
    render_annotation,
)

URI = "file:///proj/shapes.scad"
PATH = "/proj/shapes.scad"
SOURCE = "module ring(r, h) {}\nring(5, 2);\n"


def _decl(signature="module ring(r, h);", doc_comment=None):
    return SimpleNamespace(signature=signature, doc_comment=doc_comment)


def _open(state, text=SOURCE):
    state.documents.open(URI, text)
    state.bridge.open(URI, text)
    return state.documents.get(URI)


# --- declaration_to_markup ---


def test_sem_doc_comment_apenas_assinatura(engine):
    markup = declaration_to_markup(_decl(), engine)
    assert markup.kind == MarkupKind.Markdown
    assert markup.value == "```scad\nmodule ring(r, h);\n```\n---\n"


def test_assinatura_com_espacos_e_aparada(engine):
    markup = declaration_to_markup(_decl(signature="\n  function f() = 1;\n\n"), engine)
    assert markup.value.startswith("```scad\nfunction f() = 1;\n```")


def test_doc_completo_parametros_e_wikipedia(engine):
    doc = DocComment(
        documentation_content="Desenha um anel.",
        annotations=(
            ParamAnnotation(link="r", description="raio externo", types=("number",)),
            SeeAnnotation(link="https://en.wikipedia.org/wiki/Torus"),
            ParamAnnotation(
                link="h", description="altura", named=True, types=("number", "undef")
            ),
        ),
    )
    value = declaration_to_markup(_decl(doc_comment=doc), engine).value

    assert value.startswith("```scad\nmodule ring(r, h);\n```\n---\nDesenha um anel.")
    assert "Parameters:" in value
    bullets = [line for line in value.splitlines() if line.startswith("* ")]
    assert bullets == [
        "* **`r`** (number): raio externo",
        "* **`h`** *named* (number, undef): altura",
    ]
    assert "[See more on **Wikipedia**](https://en.wikipedia.org/wiki/Torus)" in value
    # see also vem depois da seção de parâmetros
    assert value.index("Parameters:") < value.index("Wikipedia")


def test_sem_parametros_sem_secao(engine):
    doc = DocComment(documentation_content="Só texto.")
    value = declaration_to_markup(_decl(doc_comment=doc), engine).value
    assert "Parameters:" not in value
    assert value.endswith("Só texto.")


# --- render_annotation ---


def test_param_positional():
    text = render_annotation(ParamAnnotation(link="size", positional=True))
    assert text == "\n* **`size`** *positional*: "


def test_param_named_prevalece():
    text = render_annotation(
        ParamAnnotation(link="size", positional=True, named=True, types=("vector",))
    )
    assert "*named*" in text
    assert "*positional*" not in text


def test_see_user_manual():
    link = "https://en.wikibooks.org/wiki/OpenSCAD_User_Manual/Primitive_Solids"
    text = render_annotation(SeeAnnotation(link=link))
    assert text == f"\n\n [See more on the **OpenSCAD User Manual**]({link})"


def test_see_wikibooks_fora_do_manual_e_generico():
    link = "https://en.wikibooks.org/wiki/Outro_Livro"
    text = render_annotation(SeeAnnotation(link=link))
    assert text == f"\n **See also**: [{link}]({link})"


def test_see_link_generico():
    link = "https://openscad.org/cheatsheet/"
    assert render_annotation(SeeAnnotation(link=link)) == (
        f"\n **See also**: [{link}]({link})"
    )


@pytest.mark.parametrize("link", ["not a url", "www.sem-esquema", "http://", "http://[::1"])
def test_see_link_malformado_texto_puro(link):
    assert render_annotation(SeeAnnotation(link=link)) == f"\n\n **See also**: {link}"


def test_link_malformado_nao_aborta_hover(engine):
    doc = DocComment(
        documentation_content="Doc.",
        annotations=(
            SeeAnnotation(link="::quebrado::"),
            SeeAnnotation(link="https://de.wikipedia.org/wiki/Kugel"),
        ),
    )
    value = declaration_to_markup(_decl(doc_comment=doc), engine).value
    assert "**See also**: ::quebrado::" in value
    assert "See more on **Wikipedia**" in value


# --- compute_hover ---


def test_compute_hover_declaracao(state, engine):
    document = _open(state)
    handle = engine.files[PATH]
    handle.declaration = _decl()

    hover = compute_hover(document, Position(line=1, character=1), state.bridge)

    assert hover.contents.value.startswith("```scad\nmodule ring(r, h);")
    loc = handle.queries[-1]
    assert loc.char == 22
    assert loc.file is handle.file


def test_compute_hover_sem_declaracao(state, engine):
    document = _open(state)
    hover = compute_hover(document, Position(line=0, character=0), state.bridge)
    assert hover.contents == UNKNOWN_HOVER


def test_compute_hover_sem_ast_erro(state, engine):
    document = _open(state)
    engine.files[PATH].ast = None
    with pytest.raises(AnalysisUnavailableError):
        compute_hover(document, Position(line=0, character=0), state.bridge)
