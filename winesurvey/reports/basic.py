# -*- coding: utf-8 -*-
"""Descriptive statistics over every collected response."""
from ..geo.resolver import region_label
from . import loader
from .aggregation import buckets_from_counts, field, group_and_count, group_and_count_multi, percent
from .base import Section, base_line, run_sections
from .emitters import format_buckets

DEMOGRAPHIC_FIELDS = (
    ("Distribuição por Faixa Etária", "age_range"),
    ("Distribuição por Gênero", "gender"),
    ("Distribuição por Estado Civil", "marital_status"),
)
CONSUMPTION_FIELDS = (
    ("Frequência de Consumo", "frequency"),
    ("Classificação Preferida", "classification"),
    ("Faixa de Preço", "price_range"),
)
PREFERENCE_FIELDS = (
    ("Estilos de Vinho Mais Populares", "wine_style"),
    ("Tipos de Vinho Mais Consumidos", "wine_type"),
    ("Origens Preferidas", "preferred_origins"),
    ("Canais de Compra", "purchase_channels"),
    ("Fatores Atrativos", "attractive_factors"),
)


def _grouped_block(title, attr, total):
    lines = [f"\n{title}:", base_line(total)]
    lines += format_buckets(buckets_from_counts(loader.grouped_counts(attr, include_null=True), total))
    return lines


def demographics():
    total = loader.count_responses()
    lines = [f"Total de respostas coletadas: {total}"]
    if total == 0:
        return lines + ["⚠️  Nenhuma resposta encontrada no banco de dados."]
    for title, attr in DEMOGRAPHIC_FIELDS:
        lines += _grouped_block(title, attr, total)
    return lines


def consumption():
    total = loader.count_responses()
    lines = []
    for title, attr in CONSUMPTION_FIELDS:
        lines += _grouped_block(title, attr, total)
    return lines


def preferences():
    records = loader.load_records()
    lines = [base_line(len(records)) + " - um respondente pode marcar várias opções"]
    for title, attr in PREFERENCE_FIELDS:
        lines.append(f"\n{title}:")
        lines += format_buckets(group_and_count_multi(records, field(attr)))
    return lines


def geography():
    records = loader.load_records(with_cep_only=True)
    located = [r for r in records if region_label(r["cep"]) is not None]
    buckets = group_and_count(located, lambda r: region_label(r["cep"]), total=len(records), missing_label=None)
    lines = ["Distribuição por Região (primeiros 2 dígitos do CEP):", base_line(len(records), "respostas com CEP")]
    lines += format_buckets(buckets)
    invalid = len(records) - len(located)
    if invalid:
        lines.append(f"  CEPs inválidos (sem região): {invalid}")
    return lines


def contact():
    total = loader.count_responses()
    emails = loader.count_not_null("email")
    phones = loader.count_not_null("phone")
    lines = [f"Total com e-mail: {emails}", f"Total com telefone: {phones}", "\nPreferência de Comunicação:"]
    lines.append(base_line(total))
    lines += format_buckets(buckets_from_counts(loader.grouped_counts("communication_preference", True), total))
    return lines


def summary():
    total = loader.count_responses()
    lines = [f"Total de Respostas: {total}"]
    if total == 0:
        return lines
    emails = loader.count_not_null("email")
    phones = loader.count_not_null("phone")
    lines.append(f"Taxa de E-mail: {percent(emails, total):.1f}%")
    lines.append(f"Taxa de Telefone: {percent(phones, total):.1f}%")
    first, last = loader.response_date_range()
    if first and last:
        lines.append(f"Primeira resposta: {first:%d/%m/%Y}")
        lines.append(f"Última resposta: {last:%d/%m/%Y}")
    return lines


SECTIONS = (
    Section("ANÁLISE DEMOGRÁFICA", demographics),
    Section("ANÁLISE DE CONSUMO", consumption),
    Section("ANÁLISE DE PREFERÊNCIAS", preferences),
    Section("ANÁLISE GEOGRÁFICA (CEP)", geography),
    Section("ANÁLISE DE CONTATO", contact),
    Section("RESUMO EXECUTIVO", summary),
)


def run(cfg, echo=print):
    echo("🍷 === ANÁLISE DE DADOS - PESQUISA VINHOS & ESPUMANTES ===")
    result = run_sections("basic", SECTIONS, echo=echo)
    echo("\n✅ === ANÁLISE CONCLUÍDA ===")
    return result
