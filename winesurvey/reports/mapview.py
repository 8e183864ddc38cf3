# -*- coding: utf-8 -*-
"""Self-contained HTML map of located respondents (folium/Leaflet)."""
import html
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Sequence

import folium
from folium import plugins

from ..questions import as_list
from .aggregation import NOT_INFORMED, percent
from .segments import count_segment

logger = logging.getLogger(__name__)

SAO_PAULO = (-23.5505, -46.6333)
WINE = "#722F37"


def marker_style(count: int):
    """(colour, diameter px) for a marker that stands for ``count`` respondents."""
    if count >= 10:
        color = "#8B0000"
    elif count >= 5:
        color = "#A0522D"
    elif count >= 3:
        color = "#CD853F"
    else:
        color = WINE
    return color, min(40, 20 + count * 3)


def city_key(r: dict) -> str:
    return f"{r.get('city')}, {r.get('state')}"


def region_stats(located: Sequence[dict]) -> Dict[str, dict]:
    groups: Dict[str, List[dict]] = OrderedDict()
    for r in located:
        groups.setdefault(city_key(r), []).append(r)
    stats = {}
    for key, members in groups.items():
        n = len(members)
        premium = count_segment(members, "premium")
        frequent = count_segment(members, "frequent")
        stats[key] = {
            "count": n,
            "premium": premium,
            "premium_pct": percent(premium, n),
            "frequent": frequent,
            "frequent_pct": percent(frequent, n),
            "male": count_segment(members, "male"),
            "female": count_segment(members, "female"),
        }
    return stats


def group_by_coordinate(located: Sequence[dict], precision: int = 6) -> Dict[tuple, List[dict]]:
    clusters: Dict[tuple, List[dict]] = OrderedDict()
    for r in located:
        key = (round(r["latitude"], precision), round(r["longitude"], precision))
        clusters.setdefault(key, []).append(r)
    return clusters


def _esc(value) -> str:
    return html.escape(str(value)) if value else NOT_INFORMED


def _popup_html(r: dict, stats: dict) -> str:
    e = _esc
    types = ", ".join(as_list(r.get("wine_type"))) or NOT_INFORMED
    plural = "s" if stats["count"] > 1 else ""
    return f"""
    <div style="min-width: 280px; font-family: 'Segoe UI', sans-serif;">
      <h3 style="margin: 0 0 12px 0; color: {WINE};">📍 {e(r.get('city'))}, {e(r.get('state'))}</h3>
      <p><strong>CEP:</strong> {e(r.get('cep'))}</p>
      <p><strong>Região:</strong> {e(r.get('address'))}</p>
      <h4 style="color: {WINE};">👤 Perfil do Respondente</h4>
      <p><strong>Idade:</strong> {e(r.get('age_range'))}</p>
      <p><strong>Gênero:</strong> {e(r.get('gender'))}</p>
      <p><strong>Frequência:</strong> {e(r.get('frequency'))}</p>
      <p><strong>Faixa de preço:</strong> {e(r.get('price_range'))}</p>
      <p><strong>Tipos preferidos:</strong> {html.escape(types)}</p>
      <h4 style="color: {WINE};">📊 Estatísticas da Região</h4>
      <p><strong>Total na região:</strong> {stats['count']} respondente{plural}</p>
      <p><strong>Consumidores premium:</strong> {stats['premium']} ({stats['premium_pct']:.1f}%)</p>
      <p><strong>Consumidores frequentes:</strong> {stats['frequent']} ({stats['frequent_pct']:.1f}%)</p>
      <p><strong>Gênero:</strong> {stats['male']}M / {stats['female']}F</p>
    </div>"""


def _header_html(located: Sequence[dict], stats: Dict[str, dict]) -> str:
    premium = count_segment(located, "premium")
    frequent = count_segment(located, "frequent")
    items = [
        (len(located), "Respondentes Localizados"),
        (len(stats), "Cidades Diferentes"),
        (premium, "Consumidores Premium"),
        (frequent, "Consumidores Frequentes"),
    ]
    cells = "".join(
        f'<div style="text-align:center;margin:0 14px;"><b style="font-size:1.6em;color:{WINE};">{n}</b>'
        f'<br><span style="color:#666;">{label}</span></div>'
        for n, label in items
    )
    generated = datetime.now().strftime("%d/%m/%Y")
    return f"""
    <div style="position: fixed; top: 10px; left: 50px; z-index: 9999; background: white;
                padding: 10px 16px; border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,0.2);">
      <div style="font-weight: bold; color: {WINE}; margin-bottom: 6px;">
        🍷 Mapa de Respondentes - Pesquisa sobre Vinhos ({generated})
      </div>
      <div style="display: flex;">{cells}</div>
    </div>"""


def build_map(located: Sequence[dict]) -> folium.Map:
    stats = region_stats(located)
    clusters = group_by_coordinate(located)

    m = folium.Map(location=list(SAO_PAULO), zoom_start=6, tiles=None)
    folium.TileLayer("OpenStreetMap", name="OpenStreetMap", control=True).add_to(m)
    folium.TileLayer("CartoDB positron", name="Positron", control=True).add_to(m)

    cluster_layer = plugins.MarkerCluster(name="Respondentes").add_to(m)
    for (lat, lng), members in clusters.items():
        count = len(members)
        color, size = marker_style(count)
        first = members[0]
        icon = folium.DivIcon(
            html=(
                f'<div style="background-color:{color};color:white;border-radius:50%;'
                f'width:{size}px;height:{size}px;display:flex;align-items:center;justify-content:center;'
                f'font-weight:bold;border:3px solid white;box-shadow:0 2px 4px rgba(0,0,0,0.3);'
                f'font-size:{14 if count >= 10 else 12}px;">{count}</div>'
            ),
            icon_size=(size, size),
            icon_anchor=(size // 2, size // 2),
        )
        folium.Marker(
            location=[lat, lng],
            icon=icon,
            popup=folium.Popup(_popup_html(first, stats[city_key(first)]), max_width=350),
            tooltip=f"{first.get('city')}, {first.get('state')} ({count})",
        ).add_to(cluster_layer)

    if clusters:
        lats = [k[0] for k in clusters]
        lngs = [k[1] for k in clusters]
        m.fit_bounds([[min(lats), min(lngs)], [max(lats), max(lngs)]], padding=(30, 30))

    m.get_root().html.add_child(folium.Element(_header_html(located, stats)))
    plugins.Fullscreen(position="topleft").add_to(m)
    folium.LayerControl(collapsed=True).add_to(m)
    return m


def write_map(located: Sequence[dict], path) -> None:
    build_map(located).save(str(path))
    logger.info(f"Map written: {path} ({len(located)} points)")
