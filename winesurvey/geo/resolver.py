# -*- coding: utf-8 -*-
import logging
import re
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from ..errors import ExternalServiceFailure, InvalidPostalCode, RegionNotFound
from .prefixes import POSTAL_PREFIXES, PostalPrefixTable

logger = logging.getLogger(__name__)

MIN_PREFIX_DIGITS = 2
DEFAULT_JITTER = 0.01  # degrees, roughly 1 km


@dataclass
class RegionResult:
    postal_code: str
    digits: str
    prefix: str
    region_name: str
    city: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    street: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    approximate: bool = True

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        return asdict(self)


def normalize_postal_code(raw) -> str:
    """Strip everything that is not a digit."""
    if raw is None:
        return ""
    return re.sub(r"\D", "", str(raw))


def postal_prefix(raw) -> str:
    digits = normalize_postal_code(raw)
    if len(digits) < MIN_PREFIX_DIGITS:
        raise InvalidPostalCode(raw)
    return digits[:MIN_PREFIX_DIGITS]


class OfflineRegionResolver:
    """Resolve a CEP through the static prefix table.

    Coordinates get an independent uniform jitter on each axis so distinct
    respondents of the same prefix do not stack on one marker.
    """

    def __init__(self, table: PostalPrefixTable = POSTAL_PREFIXES,
                 jitter: float = DEFAULT_JITTER,
                 rng: Optional[np.random.Generator] = None):
        self.table = table
        self.jitter = jitter
        self.rng = rng if rng is not None else np.random.default_rng()

    def _jitter(self) -> float:
        if not self.jitter:
            return 0.0
        return float(self.rng.uniform(-self.jitter, self.jitter))

    def resolve(self, raw_postal_code) -> RegionResult:
        digits = normalize_postal_code(raw_postal_code)
        if len(digits) < MIN_PREFIX_DIGITS:
            raise InvalidPostalCode(raw_postal_code)
        prefix = digits[:MIN_PREFIX_DIGITS]

        try:
            entry = self.table.lookup(prefix)
        except RegionNotFound:
            return RegionResult(raw_postal_code, digits, prefix, f"Região {prefix}")

        latitude = longitude = None
        if entry.latitude is not None and entry.longitude is not None:
            latitude = entry.latitude + self._jitter()
            longitude = entry.longitude + self._jitter()

        return RegionResult(
            postal_code=raw_postal_code,
            digits=digits,
            prefix=prefix,
            region_name=entry.region_name,
            city=entry.city,
            district=entry.district,
            state=entry.state,
            street=f"{entry.district}, {entry.city}",
            latitude=latitude,
            longitude=longitude,
            approximate=True,
        )


def region_label(raw_postal_code, table: PostalPrefixTable = POSTAL_PREFIXES) -> Optional[str]:
    """Region name for grouping; None when the CEP has fewer than 2 digits."""
    try:
        prefix = postal_prefix(raw_postal_code)
    except InvalidPostalCode:
        return None
    try:
        return table.lookup(prefix).region_name
    except RegionNotFound:
        return f"Região {prefix}"


def locate_records(records: Iterable[dict], resolver) -> Tuple[List[dict], List[dict]]:
    """Attach region/coordinates to every record that can be placed on a map.

    Failures are recorded per record and never abort the batch.
    """
    located, skipped = [], []
    for record in records:
        cep = record.get("cep")
        if not cep:
            continue
        try:
            result = resolver.resolve(cep)
        except (InvalidPostalCode, RegionNotFound, ExternalServiceFailure) as e:
            logger.warning(f"Skipping CEP {cep}: {e}")
            skipped.append({"id": record.get("id"), "cep": cep, "reason": str(e)})
            continue

        if not result.has_coordinates:
            logger.warning(f"CEP não mapeado: {cep}")
            skipped.append({"id": record.get("id"), "cep": cep, "reason": f"sem coordenadas ({result.region_name})"})
            continue

        located.append({
            **record,
            "region_name": result.region_name,
            "city": result.city,
            "district": result.district,
            "state": result.state,
            "address": result.street,
            "latitude": result.latitude,
            "longitude": result.longitude,
            "approximate": result.approximate,
        })
        logger.info(f"{cep} -> {result.city}, {result.state}")
    return located, skipped
