# -*- coding: utf-8 -*-
"""Georeference respondents by CEP and write the map, GeoJSON and coordinates files."""
import logging
from datetime import datetime

import requests

from ..errors import DatabaseQueryFailure
from ..geo.online import GeocodeCache, OnlineRegionResolver
from ..geo.resolver import OfflineRegionResolver, locate_records
from . import loader
from .aggregation import group_and_count, top
from .base import ReportRun, base_line
from .emitters import build_geojson, output_path, write_json
from .mapview import city_key, write_map

logger = logging.getLogger(__name__)

MAP_FILENAME = "mapa-respondentes.html"
GEOJSON_FILENAME = "respondentes-georeferenciados.geojson"
COORDINATES_FILENAME = "coordenadas-respondentes.json"
HIGH_DENSITY = 5


def make_resolver(cfg, online=False, session=None, rng=None):
    if online:
        return OnlineRegionResolver.from_config(cfg, GeocodeCache(), session=session)
    return OfflineRegionResolver(jitter=cfg["MAP_JITTER_DEGREES"], rng=rng)


def geographic_stats(located):
    states = group_and_count(located, lambda r: r.get("state"))
    cities = group_and_count(located, city_key)
    return {
        "total": len(located),
        "cities": len(cities),
        "states": len(states),
        "by_state": states,
        "top_cities": top(cities, 10),
        "high_density": [b for b in cities if b.count >= HIGH_DENSITY],
    }


def report_lines(stats):
    lines = [
        "\n🗺️ === RELATÓRIO GEOGRÁFICO ===",
        f"📍 Total de pontos mapeados: {stats['total']}",
        f"🏙️ Cidades únicas: {stats['cities']}",
        f"🗺️ Estados únicos: {stats['states']}",
        "\n📊 Distribuição por Estado:",
        base_line(stats["total"], "pontos"),
    ]
    lines += [f"  {b.key}: {b.count} ({b.percentage:.1f}%)" for b in stats["by_state"]]
    lines.append("\n🏙️ Top 10 Cidades:")
    lines += [f"  {i}. {b.key}: {b.count} ({b.percentage:.1f}%)" for i, b in enumerate(stats["top_cities"], 1)]
    if stats["high_density"]:
        lines.append(f"\n🔥 Cidades com {HIGH_DENSITY}+ respondentes:")
        lines += [f"  {b.key}: {b.count}" for b in stats["high_density"]]
        lines.append(f"  📍 {len(stats['high_density'])} cidades com densidade alta - focar em eventos locais")
    return lines


def run(cfg, online=False, echo=print, session=None, rng=None):
    mode = "online (ViaCEP + Nominatim)" if online else "offline (tabela de prefixos)"
    echo(f"🗺️ === GEOREFERENCIAMENTO DE RESPONDENTES - {mode} ===")
    result = ReportRun("map")
    try:
        records = loader.load_records(with_cep_only=True)
    except DatabaseQueryFailure as e:
        echo(f"❌ Erro ao carregar respostas: {e}")
        result.failed_sections.append("GEOREFERENCIAMENTO")
        return result

    echo(f"📍 Total de respostas com CEP: {len(records)}")
    if online and session is None:
        with requests.Session() as owned:
            located, skipped = locate_records(records, make_resolver(cfg, online, session=owned))
    else:
        located, skipped = locate_records(records, make_resolver(cfg, online, session=session, rng=rng))
    echo("\n📊 Resultados do Georeferenciamento:")
    echo(f"✅ Sucessos: {len(located)}")
    echo(f"❌ Erros: {len(skipped)}")
    for s in skipped:
        echo(f"  ⚠️  {s['cep']}: {s['reason']}")

    if not located:
        echo("❌ Nenhum respondente foi georeferenciado com sucesso.")
        return result

    for line in report_lines(geographic_stats(located)):
        echo(line)

    output_dir = cfg["REPORT_OUTPUT_DIR"]
    coordinates = {
        "timestamp": datetime.now().isoformat(),
        "total": len(located),
        "respondentes": located,
    }
    try:
        map_path = output_path(output_dir, MAP_FILENAME)
        write_map(located, map_path)
        result.files.append(map_path)
        result.files.append(write_json(build_geojson(located), output_path(output_dir, GEOJSON_FILENAME)))
        result.files.append(write_json(coordinates, output_path(output_dir, COORDINATES_FILENAME)))
    except OSError as e:
        logger.error(f"Export failed: {e}")
        echo(f"⚠️  Erro ao exportar arquivos: {e}")
        result.failed_sections.append("EXPORTAÇÃO")

    echo("\n📂 Arquivos gerados:")
    for path in result.files:
        echo(f"  {path}")
    echo(f"\n🎉 {len(located)} respondentes mapeados")
    logger.info(f"Georeferencing done: {len(located)} located, {len(skipped)} skipped")
    return result
