# -*- coding: utf-8 -*-
"""Executive summary: one object with the headline numbers and threshold-based recommendations."""
import logging
from datetime import datetime

from ..errors import DatabaseQueryFailure
from ..geo.prefixes import STATE_NAMES
from . import loader
from .aggregation import bucket_map, field, group_and_count, group_and_count_multi, percent
from .base import ReportRun, base_line
from .emitters import output_path, write_json, write_text
from .geographic import group_by_region, state_distribution
from .segments import count_segment

logger = logging.getLogger(__name__)

JSON_FILENAME = "resumo-executivo.json"
TEXT_FILENAME = "relatorio-final.txt"

# (description, test over the summary counts)
RECOMMENDATION_RULES = (
    ("Desenvolver linha premium com vinhos especiais acima de R$ 100",
     lambda c: c["premium"] > c["total"] * 0.25),
    ("Implementar programa de fidelidade para consumidores frequentes",
     lambda c: c["frequent"] > c["total"] * 0.5),
    ("Expandir operação para Rio de Janeiro e Minas Gerais",
     lambda c: c["sao_paulo"] > c["total"] * 0.8),
    ("Focar estratégia de comunicação em WhatsApp e mídias digitais",
     lambda c: c["whatsapp"] > c["total"] * 0.4),
    ("Ampliar portfólio de tintos, especialmente argentinos e chilenos",
     lambda c: c["red"] > c["total"] * 0.6),
)

NEXT_STEPS = (
    "Segmentar comunicação por região e perfil",
    "Desenvolver parcerias com distribuidores em RJ/MG",
    "Criar campanhas específicas para WhatsApp",
    "Ampliar portfólio de tintos premium",
    "Implementar programa de fidelidade",
)


def recommendations(counts):
    if not counts["total"]:
        return []
    return [text for text, rule in RECOMMENDATION_RULES if rule(counts)]


def build_summary(records, now=None):
    now = now or datetime.now()
    total = len(records)

    def counts(attr):
        return bucket_map(group_and_count(records, field(attr)))

    ages = group_and_count(records, field("age_range"), missing_label=None)
    genders = group_and_count(records, field("gender"), missing_label=None)
    wine_types = bucket_map(group_and_count_multi(records, field("wine_type")))
    states = state_distribution(records)
    regions = group_by_region(records)
    premium = count_segment(records, "premium")
    frequent = count_segment(records, "frequent")

    rule_counts = {
        "total": total,
        "premium": premium,
        "frequent": frequent,
        "sao_paulo": states[STATE_NAMES["SP"]],
        "whatsapp": count_segment(records, "whatsapp"),
        "red": wine_types.get("Tinto", 0),
    }
    return {
        "timestamp": now.isoformat(),
        "totalResponses": total,
        "demographic": {
            "primaryAgeGroup": ages[0].key if ages else "N/A",
            "primaryGender": genders[0].key if genders else "N/A",
            "genderDistribution": counts("gender"),
            "maritalStatus": counts("marital_status"),
        },
        "consumption": {
            "frequencyProfile": counts("frequency"),
            "priceSegmentation": counts("price_range"),
            "winePreferences": wine_types,
        },
        "geographic": {
            "stateDistribution": dict(states),
            "mainRegions": [
                {"region": label, "count": len(members), "percentage": percent(len(members), total)}
                for label, members in list(regions.items())[:5]
            ],
        },
        "opportunities": {
            "premiumSegment": percent(premium, total),
            "frequentConsumers": percent(frequent, total),
            "communicationChannels": counts("communication_preference"),
        },
        "recommendations": recommendations(rule_counts),
    }


def _lines(summary):
    total = summary["totalResponses"]
    demographic = summary["demographic"]
    opportunities = summary["opportunities"]
    lines = [
        "📊 DADOS GERAIS:",
        f"   • Total de Respostas: {total}",
        f"   • Data da Análise: {summary['timestamp'][:10]}",
        "\n👥 PERFIL DEMOGRÁFICO:",
        f"   • Faixa Etária Principal: {demographic['primaryAgeGroup']}",
        "   • Distribuição por Gênero:",
    ]
    lines += [f"     - {g}: {n} ({percent(n, total):.1f}%)" for g, n in demographic["genderDistribution"].items()]

    preferences = summary["consumption"]["winePreferences"]
    main_type = max(preferences, key=preferences.get) if preferences else "N/A"
    lines += [
        "\n🍷 HÁBITOS DE CONSUMO:",
        f"   • Consumidores Frequentes: {opportunities['frequentConsumers']:.1f}%",
        f"   • Segmento Premium: {opportunities['premiumSegment']:.1f}%",
        f"   • Preferência Principal: {main_type}",
        "\n🗺️ DISTRIBUIÇÃO GEOGRÁFICA:",
    ]
    lines += [f"   • {r['region']}: {r['count']} respostas ({r['percentage']:.1f}%)"
              for r in summary["geographic"]["mainRegions"][:3]]
    lines.append("\n📱 CANAIS DE COMUNICAÇÃO:")
    lines += [f"   • {c}: {percent(n, total):.1f}%" for c, n in opportunities["communicationChannels"].items()]
    lines.append("\n🎯 RECOMENDAÇÕES ESTRATÉGICAS:")
    lines += [f"   {i}. {rec}" for i, rec in enumerate(summary["recommendations"], 1)]
    lines.append("\n📈 PRÓXIMOS PASSOS:")
    lines += [f"   {i}. {step}" for i, step in enumerate(NEXT_STEPS, 1)]
    return lines


def final_report(summary):
    demographic = summary["demographic"]
    recs = "\n".join(f"{i}. {rec}" for i, rec in enumerate(summary["recommendations"], 1))
    steps = "\n".join(f"{i}. {step}" for i, step in enumerate(NEXT_STEPS, 1))
    return f"""
RESUMO EXECUTIVO - PESQUISA SOBRE VINHOS
========================================

DADOS GERAIS:
• Total de Respostas: {summary['totalResponses']}
• Data da Análise: {summary['timestamp'][:10]}

PRINCIPAIS INSIGHTS:
• Público-alvo: {demographic['primaryAgeGroup']}, predominantemente {demographic['primaryGender']}
• {summary['opportunities']['frequentConsumers']:.1f}% são consumidores frequentes (semanais)
• {summary['opportunities']['premiumSegment']:.1f}% dispostos a investir em vinhos premium

RECOMENDAÇÕES:
{recs}

PRÓXIMOS PASSOS:
{steps}
"""


def run(cfg, echo=print):
    echo("🍷 === RESUMO EXECUTIVO - PESQUISA SOBRE VINHOS ===")
    result = ReportRun("executive")
    try:
        records = loader.load_records()
    except DatabaseQueryFailure as e:
        echo(f"❌ Erro ao gerar resumo executivo: {e}")
        result.failed_sections.append("RESUMO EXECUTIVO")
        return result

    summary = build_summary(records)
    echo(base_line(summary["totalResponses"]))
    for line in _lines(summary):
        echo(line)

    output_dir = cfg["REPORT_OUTPUT_DIR"]
    try:
        result.files.append(write_json(summary, output_path(output_dir, JSON_FILENAME)))
        result.files.append(write_text(final_report(summary), output_path(output_dir, TEXT_FILENAME)))
    except OSError as e:
        logger.error(f"Export failed: {e}")
        echo(f"⚠️  Erro ao exportar arquivos: {e}")
        result.failed_sections.append("EXPORTAÇÃO")
    echo("\n💾 ARQUIVOS EXPORTADOS:")
    for path in result.files:
        echo(f"   • {path}")
    echo(f"\n✅ Insights gerados: {len(summary['recommendations'])} recomendações estratégicas")
    return result
