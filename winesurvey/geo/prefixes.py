# -*- coding: utf-8 -*-
"""Static postal-code prefix table (first two CEP digits).

Centroids are approximate; they are only used to drop points on a map.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from ..errors import RegionNotFound


@dataclass(frozen=True)
class RegionEntry:
    prefix: str
    region_name: str
    city: str
    district: str
    state: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None


_ENTRIES = (
    RegionEntry('01', 'São Paulo - Centro', 'São Paulo', 'Centro', 'SP', -23.5489, -46.6388),
    RegionEntry('02', 'São Paulo - Zona Norte', 'São Paulo', 'Zona Norte', 'SP', -23.4814, -46.6339),
    RegionEntry('03', 'São Paulo - Zona Leste', 'São Paulo', 'Zona Leste', 'SP', -23.5606, -46.5634),
    RegionEntry('04', 'São Paulo - Zona Sul', 'São Paulo', 'Zona Sul', 'SP', -23.6158, -46.6565),
    RegionEntry('05', 'São Paulo - Zona Oeste', 'São Paulo', 'Zona Oeste', 'SP', -23.5482, -46.7362),
    RegionEntry('06', 'São Paulo - Osasco', 'Osasco', 'Centro', 'SP', -23.5329, -46.7920),
    RegionEntry('08', 'São Paulo - Grande SP', 'São Paulo', 'Grande SP Leste', 'SP', -23.5475, -46.4563),
    RegionEntry('09', 'São Paulo - Grande ABC', 'Santo André', 'Grande ABC', 'SP', -23.6819, -46.5653),
    RegionEntry('13', 'São Paulo - Campinas/Região', 'Campinas', 'Centro', 'SP', -22.9056, -47.0608),
    RegionEntry('14', 'São Paulo - Bauru/Região', 'Bauru', 'Centro', 'SP', -22.3208, -49.0767),
    RegionEntry('15', 'São Paulo - Sorocaba/Região', 'Sorocaba', 'Centro', 'SP', -23.5015, -47.4526),
    RegionEntry('16', 'São Paulo - Ribeirão Preto/Região', 'Ribeirão Preto', 'Centro', 'SP', -21.1699, -47.8099),
    RegionEntry('17', 'São Paulo - São José do Rio Preto', 'São José do Rio Preto', 'Centro', 'SP',
                -20.8197, -49.3794),
    RegionEntry('18', 'São Paulo - Presidente Prudente', 'Presidente Prudente', 'Centro', 'SP',
                -22.1256, -51.3895),
    RegionEntry('19', 'São Paulo - Americana/Região', 'Americana', 'Centro', 'SP', -22.7391, -47.3313),
    RegionEntry('20', 'Rio de Janeiro - Centro', 'Rio de Janeiro', 'Centro', 'RJ', -22.9068, -43.1729),
    RegionEntry('21', 'Rio de Janeiro - Zona Norte', 'Rio de Janeiro', 'Zona Norte', 'RJ', -22.8747, -43.2436),
    RegionEntry('22', 'Rio de Janeiro - Zona Sul/Oeste', 'Rio de Janeiro', 'Zona Sul', 'RJ', -22.9711, -43.1882),
    RegionEntry('23', 'Rio de Janeiro - Baixada', 'Nova Iguaçu', 'Baixada Fluminense', 'RJ', -22.7635, -43.4536),
    RegionEntry('24', 'Rio de Janeiro - Niterói', 'Niterói', 'Centro', 'RJ', -22.8833, -43.1036),
    RegionEntry('30', 'Minas Gerais - Belo Horizonte', 'Belo Horizonte', 'Centro', 'MG', -19.9191, -43.9386),
    RegionEntry('31', 'Minas Gerais - BH Metropolitana', 'Contagem', 'Grande BH', 'MG', -19.8157, -43.9542),
    RegionEntry('32', 'Minas Gerais - Interior', 'Divinópolis', 'Interior de MG', 'MG', -20.4606, -45.2471),
)

STATE_NAMES = {'SP': 'São Paulo', 'RJ': 'Rio de Janeiro', 'MG': 'Minas Gerais'}
OTHER_STATES = 'Outros'


class PostalPrefixTable:
    def __init__(self, entries=_ENTRIES):
        self._entries: Dict[str, RegionEntry] = {}
        for entry in entries:
            if len(entry.prefix) != 2 or not entry.prefix.isdigit():
                raise ValueError(f"prefix must be two digits: {entry.prefix!r}")
            self._entries[entry.prefix] = entry

    def __contains__(self, prefix):
        return prefix in self._entries

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    def lookup(self, prefix: str) -> RegionEntry:
        try:
            return self._entries[prefix]
        except KeyError:
            raise RegionNotFound(prefix, "Prefixo de CEP não mapeado") from None

    def state_name(self, prefix: str) -> str:
        """Full state name for a prefix; unmapped prefixes fall in 'Outros'."""
        entry = self._entries.get(prefix)
        if entry is None:
            return OTHER_STATES
        return STATE_NAMES.get(entry.state, OTHER_STATES)


POSTAL_PREFIXES = PostalPrefixTable()
