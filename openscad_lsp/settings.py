"""
settings.py - Configurações do cliente por documento

Propósito:
    Guarda as configurações da seção "openscad" do cliente. Quando o
    cliente suporta workspace/configuration, as configurações ficam em
    cache por URI; caso contrário há um único valor global.

Componentes principais:
    - Settings: {max_number_of_problems}
    - SettingsCache: cache por URI + valor global

Notas de implementação:
    - didChangeConfiguration limpa o cache inteiro (refetch preguiçoso)
    - generation muda a cada limpeza; buscas iniciadas antes são descartadas
    - didClose remove apenas a entrada do URI fechado
    - Valores inválidos caem no padrão (1000 problemas)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "openscad"
DEFAULT_MAX_NUMBER_OF_PROBLEMS = 1000


@dataclass(frozen=True)
class Settings:
    max_number_of_problems: int = DEFAULT_MAX_NUMBER_OF_PROBLEMS

    @classmethod
    def from_client(cls, raw) -> "Settings":
        """Converte o dict enviado pelo cliente (camelCase) em Settings."""
        if not isinstance(raw, dict):
            return cls()
        value = raw.get("maxNumberOfProblems", DEFAULT_MAX_NUMBER_OF_PROBLEMS)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            logger.warning(f"maxNumberOfProblems inválido: {value!r}; usando padrão")
            value = DEFAULT_MAX_NUMBER_OF_PROBLEMS
        return cls(max_number_of_problems=value)


class SettingsCache:
    """Configurações por URI (escopo) ou globais."""

    def __init__(self, scoped: bool = False):
        self.scoped = scoped
        self.global_settings: Settings = Settings()
        self._by_uri: dict[str, Settings] = {}
        self.generation = 0

    def get(self, uri: str) -> Optional[Settings]:
        """Retorna configurações do URI; None indica que é preciso buscar no cliente."""
        if not self.scoped:
            return self.global_settings
        return self._by_uri.get(uri)

    def resolve(self, uri: str) -> Settings:
        """Como get, mas cai nas configurações globais em vez de None."""
        return self.get(uri) or self.global_settings

    def put(
        self, uri: str, settings: Settings, generation: Optional[int] = None
    ) -> bool:
        """
        Armazena configurações do URI.

        Com `generation`, só armazena se o cache não foi limpo desde que a
        busca no cliente começou; retorna False quando o valor é descartado.
        """
        if generation is not None and generation != self.generation:
            logger.debug(f"Configurações obsoletas descartadas para {uri}")
            return False
        self._by_uri[uri] = settings
        return True

    def drop(self, uri: str) -> None:
        self._by_uri.pop(uri, None)

    def clear(self) -> None:
        if self._by_uri:
            logger.info(f"Cache de configurações limpo ({len(self._by_uri)} entradas)")
        self._by_uri.clear()
        self.generation += 1

    def update_global(self, raw) -> None:
        """Atualiza o valor global a partir de params.settings do cliente."""
        section = raw.get(SETTINGS_SECTION) if isinstance(raw, dict) else None
        self.global_settings = Settings.from_client(section)
        logger.info(f"Configurações globais atualizadas: {self.global_settings}")
