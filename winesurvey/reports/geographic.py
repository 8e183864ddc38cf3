# -*- coding: utf-8 -*-
"""Regional breakdown of respondents by CEP prefix."""
from collections import OrderedDict

from ..errors import InvalidPostalCode
from ..geo.prefixes import OTHER_STATES, POSTAL_PREFIXES, STATE_NAMES
from ..geo.resolver import postal_prefix, region_label
from . import loader
from .aggregation import field, group_and_count, group_and_count_multi, percent, top
from .base import Section, base_line, run_sections
from .segments import count_segment

PREFERENCE_MIN_RESPONDENTS = 2
OPPORTUNITY_MIN_RESPONDENTS = 3
LOCAL_EVENTS_MIN_RESPONDENTS = 5
PREMIUM_SHARE = 0.3
FREQUENT_SHARE = 0.6
SP_CONCENTRATION = 0.7
SOLID_BASE = 30


def group_by_region(records):
    """{region label: [records]} ordered by size, largest first."""
    regions = OrderedDict()
    for r in records:
        label = region_label(r.get("cep"))
        if label is not None:
            regions.setdefault(label, []).append(r)
    return OrderedDict(sorted(regions.items(), key=lambda kv: -len(kv[1])))


def region_opportunities(members):
    n = len(members)
    flags = []
    if count_segment(members, "premium") / n > PREMIUM_SHARE:
        flags.append("💎 OPORTUNIDADE: Região com alto poder aquisitivo - focar em vinhos premium")
    if count_segment(members, "frequent") / n > FREQUENT_SHARE:
        flags.append("🔄 OPORTUNIDADE: Muitos consumidores frequentes - criar programa de fidelidade")
    if n >= LOCAL_EVENTS_MIN_RESPONDENTS:
        flags.append("📍 OPORTUNIDADE: Base sólida de clientes - considerar eventos locais")
    return flags


def has_prefix(record):
    try:
        postal_prefix(record.get("cep"))
    except InvalidPostalCode:
        return False
    return True


def state_distribution(records):
    """{state name: count} for the three mapped states plus 'Outros'."""
    states = OrderedDict((name, 0) for name in STATE_NAMES.values())
    states[OTHER_STATES] = 0
    for r in records:
        try:
            prefix = postal_prefix(r.get("cep"))
        except InvalidPostalCode:
            continue
        states[POSTAL_PREFIXES.state_name(prefix)] += 1
    return states


def state_insights(states, with_cep):
    sp = states.get(STATE_NAMES["SP"], 0)
    insights = []
    if sp > with_cep * SP_CONCENTRATION:
        insights.append("🎯 Forte concentração em São Paulo - expandir para outros estados")
    if sp > 0:
        insights.append("📍 Presença significativa em SP - aproveitar logística local")
    if with_cep >= SOLID_BASE:
        insights.append("📊 Base geográfica sólida para análise estatística")
    return insights


def distribution(records, total):
    regions = group_by_region(records)
    lines = ["📍 Distribuição por Região:", base_line(total)]
    for label, members in regions.items():
        lines.append(f"  {label}: {len(members)} ({percent(len(members), total):.1f}%)")
    return lines


def preferences(records):
    lines = []
    for label, members in group_by_region(records).items():
        if len(members) < PREFERENCE_MIN_RESPONDENTS:
            continue
        lines.append(f"📍 {label} ({len(members)} clientes):")
        types = top(group_and_count_multi(members, field("wine_type")), 3)
        if types:
            lines.append("  🍷 Tipos preferidos: " + ", ".join(f"{b.key} ({b.count})" for b in types))
        origins = top(group_and_count_multi(members, field("preferred_origins")), 3)
        if origins:
            lines.append("  🌍 Origens preferidas: " + ", ".join(f"{b.key} ({b.count})" for b in origins))
        prices = group_and_count(members, field("price_range"), missing_label=None)
        if prices:
            lines.append(f"  💰 Faixa de preço predominante: {prices[0].key} ({prices[0].count} clientes)")
        lines.append("")
    if not lines:
        lines.append(f"Nenhuma região com {PREFERENCE_MIN_RESPONDENTS} ou mais respondentes.")
    return lines


def opportunities(records):
    lines = []
    for label, members in group_by_region(records).items():
        n = len(members)
        if n < OPPORTUNITY_MIN_RESPONDENTS:
            continue
        premium = percent(count_segment(members, "premium"), n)
        frequent = percent(count_segment(members, "frequent"), n)
        lines.append(f"🎯 {label}:")
        lines.append(f"  📊 Perfil: {premium:.1f}% premium, {frequent:.1f}% frequentes")
        lines += [f"  {flag}" for flag in region_opportunities(members)]
        lines.append("")
    if not lines:
        lines.append(f"Nenhuma região com {OPPORTUNITY_MIN_RESPONDENTS} ou mais respondentes.")
    return lines


def summary():
    total = loader.count_responses()
    # a CEP counts as covered only when it yields a region prefix
    with_cep_records = [r for r in loader.load_records(with_cep_only=True) if has_prefix(r)]
    with_cep = len(with_cep_records)
    lines = [f"📊 Cobertura geográfica: {with_cep}/{total} ({percent(with_cep, total):.1f}%)"]

    states = state_distribution(with_cep_records)
    lines += ["\n🗺️ Distribuição por Estado:", base_line(with_cep, "respostas com CEP")]
    for name, count in states.items():
        if count > 0:
            lines.append(f"  {name}: {count} ({percent(count, with_cep):.1f}%)")

    lines.append("\n📈 INSIGHTS GEOGRÁFICOS:")
    lines += [f"  {insight}" for insight in state_insights(states, with_cep)]
    return lines


def run(cfg, echo=print):
    echo("🗺️ === ANÁLISE GEOGRÁFICA COMPLETA ===")
    state = {"records": [], "total": 0}

    def load_distribution():
        state["total"] = loader.count_responses()
        state["records"] = loader.load_records(with_cep_only=True)
        return distribution(state["records"], state["total"])

    sections = [
        Section("ANÁLISE GEOGRÁFICA DETALHADA", load_distribution),
        Section("PREFERÊNCIAS POR REGIÃO", lambda: preferences(state["records"])),
        Section("OPORTUNIDADES POR REGIÃO", lambda: opportunities(state["records"])),
        Section("RESUMO GEOGRÁFICO", summary),
    ]
    result = run_sections("geographic", sections, echo=echo)
    echo("\n✅ === ANÁLISE GEOGRÁFICA CONCLUÍDA ===")
    return result
