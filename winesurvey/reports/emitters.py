# -*- coding: utf-8 -*-
"""Plain text, CSV, JSON and GeoJSON writers for the report scripts."""
import json
import logging
from pathlib import Path
from typing import Iterable, List, Sequence

import pandas as pd

from ..geo.resolver import normalize_postal_code
from ..questions import as_list
from .aggregation import NOT_INFORMED, AggregationBucket

logger = logging.getLogger(__name__)

LIST_SEPARATOR = ";"

# (csv header, profile key, is list)
CSV_COLUMNS = (
    ("ID", "id", False),
    ("Idade", "age_range", False),
    ("Gênero", "gender", False),
    ("Estado Civil", "marital_status", False),
    ("Região CEP", "region_prefix", False),
    ("Frequência", "frequency", False),
    ("Faixa Preço", "price_range", False),
    ("Tipos Vinho", "wine_type", True),
    ("Origens", "preferred_origins", True),
    ("Comunicação", "communication_preference", False),
)

GEOJSON_PROPERTIES = (
    "id", "cep", "address", "city", "state", "region_name",
    "age_range", "gender", "marital_status", "frequency", "price_range",
    "wine_type", "wine_style", "preferred_origins", "purchase_channels",
    "attractive_factors", "communication_preference",
)


def format_buckets(buckets: Iterable[AggregationBucket], indent: str = "  ",
                   show_percentage: bool = True) -> List[str]:
    lines = []
    for b in buckets:
        if show_percentage:
            lines.append(f"{indent}{b.key}: {b.count} ({b.percentage:.1f}%)")
        else:
            lines.append(f"{indent}{b.key}: {b.count}")
    return lines


def output_path(directory, filename) -> Path:
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path / filename


def profile_row(record: dict) -> dict:
    """Flatten a response record into the exported customer profile."""
    digits = normalize_postal_code(record.get("cep"))
    return {
        "id": record.get("id"),
        "age_range": record.get("age_range") or NOT_INFORMED,
        "gender": record.get("gender") or NOT_INFORMED,
        "marital_status": record.get("marital_status") or NOT_INFORMED,
        "region_prefix": digits[:2] if len(digits) >= 2 else NOT_INFORMED,
        "frequency": record.get("frequency") or NOT_INFORMED,
        "price_range": record.get("price_range") or NOT_INFORMED,
        "wine_type": as_list(record.get("wine_type")),
        "preferred_origins": as_list(record.get("preferred_origins")),
        "communication_preference": record.get("communication_preference") or NOT_INFORMED,
    }


def write_csv(rows: Sequence[dict], path) -> Path:
    data = []
    for row in rows:
        out = {}
        for header, key, is_list in CSV_COLUMNS:
            value = row.get(key)
            out[header] = LIST_SEPARATOR.join(value or []) if is_list else ("" if value is None else str(value))
        data.append(out)
    df = pd.DataFrame(data, columns=[c[0] for c in CSV_COLUMNS])
    df.to_csv(path, index=False, encoding="utf-8")
    logger.info(f"CSV written: {path} ({len(df)} rows)")
    return Path(path)


def read_csv(path) -> List[dict]:
    """Inverse of write_csv: list columns are split back on ';'."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
    rows = []
    for _, r in df.iterrows():
        row = {}
        for header, key, is_list in CSV_COLUMNS:
            value = r.get(header, "")
            if is_list:
                row[key] = [v for v in value.split(LIST_SEPARATOR) if v] if value else []
            else:
                row[key] = value
        rows.append(row)
    return rows


def write_json(payload, path) -> Path:
    path = Path(path)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
    logger.info(f"JSON written: {path}")
    return path


def build_geojson(located: Sequence[dict]) -> dict:
    features = []
    for r in located:
        properties = {key: r.get(key) for key in GEOJSON_PROPERTIES}
        properties["coordinates"] = f"{r['latitude']},{r['longitude']}"
        features.append({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [r["longitude"], r["latitude"]]},
            "properties": properties,
        })
    return {
        "type": "FeatureCollection",
        "name": "Respondentes_Pesquisa_Vinhos",
        "crs": {"type": "name", "properties": {"name": "urn:ogc:def:crs:OGC:1.3:CRS84"}},
        "features": features,
    }


def write_text(text: str, path) -> Path:
    path = Path(path)
    path.write_text(text, encoding="utf-8")
    logger.info(f"Text written: {path}")
    return path
