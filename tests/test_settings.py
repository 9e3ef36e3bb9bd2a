"""
test_settings.py - Testes unitários para SettingsCache

Propósito:
    Validar cache por URI (cliente com workspace/configuration) e valor
    global (cliente sem suporte), limpeza e conversão do dict do cliente.
"""

from __future__ import annotations

from openscad_lsp.settings import (
    DEFAULT_MAX_NUMBER_OF_PROBLEMS,
    Settings,
    SettingsCache,
)


def test_defaults():
    assert Settings().max_number_of_problems == DEFAULT_MAX_NUMBER_OF_PROBLEMS == 1000


def test_from_client():
    assert Settings.from_client({"maxNumberOfProblems": 5}).max_number_of_problems == 5


def test_from_client_invalido_usa_padrao():
    assert Settings.from_client(None) == Settings()
    assert Settings.from_client({"maxNumberOfProblems": "muitos"}) == Settings()
    assert Settings.from_client({"maxNumberOfProblems": -1}) == Settings()


def test_global_sem_escopo():
    """Sem suporte a configuration, get sempre retorna o valor global."""
    cache = SettingsCache(scoped=False)
    assert cache.get("file:///a.scad") is cache.global_settings


def test_update_global():
    cache = SettingsCache(scoped=False)
    cache.update_global({"openscad": {"maxNumberOfProblems": 7}})
    assert cache.get("file:///a.scad").max_number_of_problems == 7


def test_update_global_sem_secao():
    cache = SettingsCache(scoped=False)
    cache.update_global({"outra": {}})
    assert cache.global_settings == Settings()


def test_escopo_miss_retorna_none():
    cache = SettingsCache(scoped=True)
    assert cache.get("file:///a.scad") is None
    assert cache.resolve("file:///a.scad") is cache.global_settings


def test_put_get_drop():
    cache = SettingsCache(scoped=True)
    cache.put("file:///a.scad", Settings(3))
    assert cache.get("file:///a.scad") == Settings(3)

    cache.drop("file:///a.scad")
    assert cache.get("file:///a.scad") is None
    cache.drop("file:///a.scad")  # Não deve lançar exceção


def test_clear():
    """didChangeConfiguration limpa todas as entradas."""
    cache = SettingsCache(scoped=True)
    cache.put("file:///a.scad", Settings(3))
    cache.put("file:///b.scad", Settings(4))
    cache.clear()
    assert cache.get("file:///a.scad") is None
    assert cache.get("file:///b.scad") is None


def test_put_com_geracao_obsoleta_descarta():
    """Valor buscado antes de um clear() não entra no cache."""
    cache = SettingsCache(scoped=True)
    generation = cache.generation
    cache.clear()

    assert cache.put("file:///a.scad", Settings(3), generation) is False
    assert cache.get("file:///a.scad") is None

    assert cache.put("file:///a.scad", Settings(3), cache.generation) is True
    assert cache.get("file:///a.scad") == Settings(3)
