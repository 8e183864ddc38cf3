# -*- coding: utf-8 -*-
"""CEP geocoding through ViaCEP (address) and Nominatim (coordinates).

Calls are made one at a time with a fixed pause before each Nominatim
request to stay inside its usage policy (max 1 request/second).
"""
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from ..errors import ExternalServiceFailure, InvalidPostalCode, RegionNotFound
from .resolver import RegionResult, normalize_postal_code

logger = logging.getLogger(__name__)

CEP_DIGITS = 8
CITY_FALLBACK_STREET = "Aproximado por cidade"


class GeocodeCache:
    """Per-run memo of resolved CEPs, keyed by the raw postal code.

    Failures are stored too so a bad CEP is not looked up twice.
    """

    def __init__(self):
        self._entries: Dict[str, Any] = {}

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)

    def get(self, key):
        return self._entries.get(key)

    def put(self, key, value):
        self._entries[key] = value
        return value


class OnlineRegionResolver:
    def __init__(self, cache: GeocodeCache,
                 session: Optional[requests.Session] = None,
                 viacep_url: str = "https://viacep.com.br/ws",
                 nominatim_url: str = "https://nominatim.openstreetmap.org/search",
                 viacep_timeout: float = 5.0,
                 nominatim_timeout: float = 10.0,
                 delay: float = 1.0,
                 user_agent: str = "PesquisaVinhos/1.0 (contato@example.com)",
                 sleep=time.sleep):
        self.cache = cache
        self.session = session if session is not None else requests.Session()
        self.viacep_url = viacep_url.rstrip("/")
        self.nominatim_url = nominatim_url
        self.viacep_timeout = viacep_timeout
        self.nominatim_timeout = nominatim_timeout
        self.delay = delay
        self.user_agent = user_agent
        self._sleep = sleep

    @classmethod
    def from_config(cls, cfg, cache: GeocodeCache, session=None):
        return cls(
            cache,
            session=session,
            viacep_url=cfg["VIACEP_URL"],
            nominatim_url=cfg["NOMINATIM_URL"],
            viacep_timeout=cfg["VIACEP_TIMEOUT"],
            nominatim_timeout=cfg["NOMINATIM_TIMEOUT"],
            delay=cfg["GEOCODE_DELAY_SECONDS"],
            user_agent=cfg["GEOCODE_USER_AGENT"],
        )

    def _get_json(self, service, url, params=None, timeout=10.0):
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise ExternalServiceFailure(service, str(e)) from e
        except ValueError as e:
            raise ExternalServiceFailure(service, f"invalid JSON: {e}") from e

    def _lookup_address(self, digits: str) -> dict:
        data = self._get_json("viacep", f"{self.viacep_url}/{digits}/json/", timeout=self.viacep_timeout)
        if not isinstance(data, dict) or data.get("erro"):
            raise RegionNotFound(digits, "CEP não encontrado")
        return data

    def _search(self, query: str) -> List[dict]:
        if self.delay:
            self._sleep(self.delay)
        params = {"q": query, "format": "json", "limit": 1, "countrycodes": "br"}
        data = self._get_json("nominatim", self.nominatim_url, params=params, timeout=self.nominatim_timeout)
        return data if isinstance(data, list) else []

    def _geocode(self, raw, digits: str) -> RegionResult:
        logger.info(f"Buscando coordenadas para CEP: {digits}")
        address = self._lookup_address(digits)

        street = address.get("logradouro") or ""
        district = address.get("bairro") or ""
        city = address.get("localidade") or ""
        uf = address.get("uf") or ""

        approximate = False
        hits = self._search(f"{street}, {district}, {city}, {uf}, Brasil")
        if not hits:
            logger.info(f"Sem resultado por endereço para {digits}, tentando cidade")
            hits = self._search(f"{city}, {uf}, Brasil")
            approximate = True
            street = CITY_FALLBACK_STREET
        if not hits:
            raise RegionNotFound(digits, "Coordenadas não encontradas")

        try:
            latitude = float(hits[0]["lat"])
            longitude = float(hits[0]["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalServiceFailure("nominatim", f"unexpected payload: {e}") from e

        return RegionResult(
            postal_code=raw,
            digits=digits,
            prefix=digits[:2],
            region_name=f"{city} - {uf}" if city else f"Região {digits[:2]}",
            city=city or None,
            district=district or None,
            state=uf or None,
            street=street or None,
            latitude=latitude,
            longitude=longitude,
            approximate=approximate,
        )

    def resolve(self, raw_postal_code) -> RegionResult:
        if raw_postal_code in self.cache:
            cached = self.cache.get(raw_postal_code)
            if isinstance(cached, Exception):
                raise cached
            return cached

        digits = normalize_postal_code(raw_postal_code)
        try:
            if len(digits) != CEP_DIGITS:
                raise InvalidPostalCode(raw_postal_code)
            result = self._geocode(raw_postal_code, digits)
        except (InvalidPostalCode, RegionNotFound, ExternalServiceFailure) as e:
            logger.error(f"Erro ao buscar CEP {raw_postal_code}: {e}")
            self.cache.put(raw_postal_code, e)
            raise

        logger.info(f"Coordenadas encontradas: {result.latitude}, {result.longitude}")
        return self.cache.put(raw_postal_code, result)
