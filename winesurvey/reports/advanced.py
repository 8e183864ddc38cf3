# -*- coding: utf-8 -*-
"""Marketing report: customer segments, trends, recommendations and exports."""
import logging
from collections import OrderedDict
from datetime import datetime

from ..questions import AGE_RANGES, as_list
from . import loader
from .aggregation import (bucket_map, field, group_and_count,
                          group_and_count_multi, percent, top)
from .base import Section, base_line, run_sections
from .emitters import output_path, profile_row, write_csv, write_json
from .segments import count_segment, get_segment

logger = logging.getLogger(__name__)

CSV_FILENAME = "relatorio-vinhos.csv"
JSON_FILENAME = "resumo-analise.json"

PRICE_SEGMENTS = ("premium", "mid_range", "budget")
FREQUENCY_SEGMENTS = ("frequent", "regular", "occasional")

AGE_BANDS = OrderedDict([
    ("Jovens (26-35)", AGE_RANGES[1]),
    ("Adultos (36-45)", AGE_RANGES[2]),
    ("Maduros (46-60)", AGE_RANGES[3]),
    ("Sênior (60+)", AGE_RANGES[4]),
])


def _segment_line(names, records):
    n = count_segment(records, *names)
    return n, percent(n, len(records))


def segmentation(records):
    total = len(records)
    lines = [base_line(total, "clientes"), "💰 Segmentação por Poder Aquisitivo:"]
    for name in PRICE_SEGMENTS:
        n, pct = _segment_line((name,), records)
        lines.append(f"  {get_segment(name).label}: {n} clientes ({pct:.1f}%)")

    lines.append("\n📅 Segmentação por Frequência:")
    for name in FREQUENCY_SEGMENTS:
        n, pct = _segment_line((name,), records)
        lines.append(f"  {get_segment(name).label}: {n} clientes ({pct:.1f}%)")

    lines.append("\n👥 Perfil Demográfico Principal:")
    for label, rule in (("Homens 36-60 anos", "male"), ("Mulheres 36-60 anos", "female")):
        n, pct = _segment_line((rule, "age_36_60"), records)
        lines.append(f"  {label}: {n} ({pct:.1f}%)")
    return lines


def type_combinations(records, n=5):
    """Most common wine-type combinations among respondents who picked several."""
    combos = [r for r in records if len(as_list(r.get("wine_type"))) > 1]
    buckets = group_and_count(combos, lambda r: " + ".join(sorted(r["wine_type"])), missing_label=None)
    return top(buckets, n)


def top_type_by_age(records):
    result = OrderedDict()
    for label, age_range in AGE_BANDS.items():
        members = [r for r in records if r.get("age_range") == age_range]
        if not members:
            continue
        buckets = group_and_count_multi(members, field("wine_type"))
        result[label] = (len(members), buckets[0].key if buckets else "N/A")
    return result


def trends(records):
    lines = ["🍷 Combinações de Tipos Mais Populares:"]
    combos = type_combinations(records)
    if not combos:
        lines.append("  Nenhum cliente escolheu mais de um tipo.")
    for b in combos:
        lines.append(f"  {b.key}: {b.count} clientes")

    lines.append("\n🎯 Preferências por Faixa Etária:")
    for label, (n, preferred) in top_type_by_age(records).items():
        lines.append(f"  {label} ({n}): Preferem {preferred}")
    return lines


def recommendations(records):
    """Recommended actions derived from the current answers."""
    total = len(records)
    if total == 0:
        return []
    actions = []

    core = count_segment(records, "male", "married", "age_36_60")
    if core:
        actions.append(f"Focar em homens casados 36-60 anos ({percent(core, total):.1f}% do público)")

    whatsapp = count_segment(records, "whatsapp")
    email = count_segment(records, "email_contact")
    if whatsapp or email:
        channel, n = ("WhatsApp", whatsapp) if whatsapp >= email else ("e-mail", email)
        actions.append(f"Priorizar {channel} para comunicação ({percent(n, total):.1f}% preferem)")

    origins = top(group_and_count_multi(records, field("preferred_origins")), 2)
    if origins:
        names = " e ".join(b.key for b in origins)
        actions.append(f"Investir em vinhos de {names} (origens mais populares)")

    types = group_and_count_multi(records, field("wine_type"))
    styles = group_and_count_multi(records, field("wine_style"))
    if types and styles:
        actions.append(f"Desenvolver linha de {types[0].key.lower()} {styles[0].key.lower()} (preferência dominante)")

    prices = group_and_count(records, field("price_range"), missing_label=None, total=total)
    if prices:
        actions.append(f"Criar ofertas para a faixa {prices[0].key} ({prices[0].percentage:.1f}% do mercado)")

    frequent = count_segment(records, "frequent")
    if frequent:
        actions.append(f"Campanhas para consumidores semanais ({percent(frequent, total):.1f}% alta frequência)")
    return actions


def recommendations_section(records):
    total = len(records)
    core = count_segment(records, "male", "married", "age_36_60")
    premium = count_segment(records, "premium")
    frequent = count_segment(records, "frequent")
    whatsapp = count_segment(records, "whatsapp")
    email = count_segment(records, "email_contact")
    lines = [
        base_line(total),
        "🎯 Público-Alvo Principal:",
        f"  Homens casados 36-60 anos: {core} ({percent(core, total):.1f}%)",
        "\n💰 Oportunidades Comerciais:",
        f"  Clientes Premium: {premium} ({percent(premium, total):.1f}%)",
        f"  Consumidores Frequentes: {frequent} ({percent(frequent, total):.1f}%)",
        "\n📱 Estratégia de Comunicação:",
        f"  WhatsApp preferido: {whatsapp} ({percent(whatsapp, total):.1f}%)",
        f"  E-mail preferido: {email} ({percent(email, total):.1f}%)",
        "\n📋 AÇÕES RECOMENDADAS:",
    ]
    actions = recommendations(records)
    if not actions:
        lines.append("  Dados insuficientes para recomendações.")
    lines += [f"  {i}. {action}" for i, action in enumerate(actions, 1)]
    return lines


def analysis_summary(profiles):
    def counts(attr):
        return bucket_map(group_and_count(profiles, field(attr)))

    return {
        "totalRespostas": len(profiles),
        "dataAnalise": datetime.now().strftime("%d/%m/%Y"),
        "demografico": {"genero": counts("gender"), "idade": counts("age_range")},
        "consumo": {"frequencia": counts("frequency"), "faixaPreco": counts("price_range")},
    }


def export(profiles, output_dir):
    csv_path = write_csv(profiles, output_path(output_dir, CSV_FILENAME))
    json_path = write_json(analysis_summary(profiles), output_path(output_dir, JSON_FILENAME))
    return [csv_path, json_path]


def run(cfg, echo=print):
    echo("📊 === RELATÓRIO AVANÇADO - PESQUISA VINHOS ===")
    state = {"records": [], "profiles": []}
    files = []

    def load():
        state["records"] = loader.load_records()
        state["profiles"] = [profile_row(r) for r in state["records"]]
        return [f"✅ {len(state['profiles'])} perfis de clientes carregados"]

    def exports():
        try:
            paths = export(state["profiles"], cfg["REPORT_OUTPUT_DIR"])
        except OSError as e:
            logger.error(f"Export failed: {e}")
            return [f"⚠️  Erro ao exportar arquivos: {e}"]
        files.extend(paths)
        return [f"✅ Dados exportados para: {p}" for p in paths]

    sections = [
        Section("PERFIL DETALHADO DOS CLIENTES", load),
        Section("SEGMENTAÇÃO DE CLIENTES", lambda: segmentation(state["records"])),
        Section("TENDÊNCIAS E OPORTUNIDADES", lambda: trends(state["records"])),
        Section("RECOMENDAÇÕES ESTRATÉGICAS", lambda: recommendations_section(state["records"])),
        Section("EXPORTANDO DADOS", exports),
    ]
    result = run_sections("advanced", sections, echo=echo)
    result.files.extend(files)
    echo("\n🎉 === RELATÓRIO CONCLUÍDO ===")
    return result

