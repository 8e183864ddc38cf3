"""Tests for the report generators and the reports CLI."""

import argparse
import json

import numpy as np
import pytest
from sqlalchemy import inspect

from winesurvey import cli, create_app
from winesurvey.config import TestingConfig
from winesurvey.errors import DatabaseConnectionFailure, DatabaseQueryFailure
from winesurvey.extensions import db
from winesurvey.reports import advanced, basic, executive, geographic, georef, loader

from conftest import make_record


def collect():
    lines = []
    return lines, lines.append


def test_loader_counts(seeded):
    assert loader.count_responses() == 5
    assert loader.count_not_null("email") == 1
    assert len(loader.load_records(with_cep_only=True)) == 4
    assert dict(loader.grouped_counts("gender")) == {"Masculino": 3, "Feminino": 2}


def test_loader_unknown_column():
    with pytest.raises(DatabaseQueryFailure):
        loader.grouped_counts("favourite_colour")


def test_basic_report_prints_every_section(app, seeded):
    lines, echo = collect()
    result = basic.run(app.config, echo=echo)
    output = "\n".join(lines)

    assert result.ok
    assert "Total de respostas coletadas: 5" in output
    assert "(base: 5 respostas)" in output
    assert "Masculino: 3 (60.0%)" in output
    assert "São Paulo - Centro: 1 (25.0%)" in output


def test_failing_section_does_not_stop_the_next(app, seeded, monkeypatch):
    def boom(*args, **kwargs):
        raise DatabaseQueryFailure("load records: connection reset")

    monkeypatch.setattr(loader, "load_records", boom)
    lines, echo = collect()
    result = basic.run(app.config, echo=echo)
    output = "\n".join(lines)

    assert result.failed_sections == ["ANÁLISE DE PREFERÊNCIAS", "ANÁLISE GEOGRÁFICA (CEP)"]
    assert "❌ Erro na seção ANÁLISE DE PREFERÊNCIAS" in output
    # sections after the failures still ran
    assert "Total de Respostas: 5" in output


def test_empty_database(app):
    lines, echo = collect()
    basic.run(app.config, echo=echo)
    assert "⚠️  Nenhuma resposta encontrada no banco de dados." in lines


def test_advanced_report_writes_csv_and_json(app, seeded, tmp_path):
    lines, echo = collect()
    result = advanced.run(app.config, echo=echo)

    names = sorted(p.name for p in result.files)
    assert names == ["relatorio-vinhos.csv", "resumo-analise.json"]
    summary = json.loads(result.files[1].read_text(encoding="utf-8"))
    assert summary["totalRespostas"] == 5
    assert summary["demografico"]["genero"] == {"Masculino": 3, "Feminino": 2}


def test_type_combinations_sort_each_record():
    records = [
        make_record(wine_type=["Tinto", "Branco"]),
        make_record(wine_type=["Branco", "Tinto"]),
        make_record(wine_type=["Rosé"]),
    ]
    combos = advanced.type_combinations(records)
    assert [(b.key, b.count) for b in combos] == [("Branco + Tinto", 2)]


def test_top_type_by_age():
    records = [
        make_record(age_range="26 – 35 anos", wine_type=["Espumante"]),
        make_record(age_range="26 – 35 anos", wine_type=["Espumante", "Tinto"]),
    ]
    assert advanced.top_type_by_age(records) == {"Jovens (26-35)": (2, "Espumante")}


def test_recommendations_come_from_data():
    records = [make_record(), make_record(preferred_origins=["Argentina", "Chile"])]
    actions = advanced.recommendations(records)
    assert actions[0] == "Focar em homens casados 36-60 anos (100.0% do público)"
    assert any("Chile e Argentina" in a for a in actions)
    assert advanced.recommendations([]) == []


def test_geographic_report(app, seeded):
    lines, echo = collect()
    result = geographic.run(app.config, echo=echo)
    output = "\n".join(lines)

    assert result.ok
    assert "📊 Cobertura geográfica: 4/5 (80.0%)" in output
    assert "  São Paulo: 3 (75.0%)" in output
    assert "  Rio de Janeiro: 1 (25.0%)" in output


def test_region_opportunities():
    premium = [make_record(price_range="Acima de R$ 200", frequency="Raramente")] * 5
    flags = geographic.region_opportunities(premium)
    assert len(flags) == 2
    assert "premium" in flags[0]
    assert "eventos locais" in flags[1]


def test_executive_summary_thresholds():
    records = [
        make_record(price_range="Acima de R$ 200", wine_type=["Tinto"]),
        make_record(price_range="Acima de R$ 200", wine_type=["Tinto"], cep="20040-002"),
    ]
    summary = executive.build_summary(records)

    assert summary["totalResponses"] == 2
    assert summary["opportunities"]["premiumSegment"] == 100.0
    assert summary["geographic"]["stateDistribution"]["São Paulo"] == 1
    assert summary["recommendations"] == [
        "Desenvolver linha premium com vinhos especiais acima de R$ 100",
        "Implementar programa de fidelidade para consumidores frequentes",
        "Focar estratégia de comunicação em WhatsApp e mídias digitais",
        "Ampliar portfólio de tintos, especialmente argentinos e chilenos",
    ]


def test_executive_writes_files(app, seeded):
    lines, echo = collect()
    result = executive.run(app.config, echo=echo)
    assert sorted(p.name for p in result.files) == ["relatorio-final.txt", "resumo-executivo.json"]
    text = result.files[1].read_text(encoding="utf-8")
    assert "RESUMO EXECUTIVO - PESQUISA SOBRE VINHOS" in text


def test_offline_map_report(app, seeded):
    lines, echo = collect()
    result = georef.run(app.config, echo=echo, rng=np.random.default_rng(1))

    assert sorted(p.name for p in result.files) == [
        "coordenadas-respondentes.json",
        "mapa-respondentes.html",
        "respondentes-georeferenciados.geojson",
    ]
    geojson = json.loads(result.files[1].read_text(encoding="utf-8"))
    assert len(geojson["features"]) == 4
    assert "✅ Sucessos: 4" in lines


def test_geographic_stats_high_density():
    points = [make_record(city="Campinas", state="SP")] * 5 + [make_record(city="Santos", state="SP")]
    stats = georef.geographic_stats(points)
    assert stats["cities"] == 2
    assert [b.key for b in stats["high_density"]] == ["Campinas, SP"]


def test_connection_failure_exits_non_zero(app, monkeypatch):
    def refuse():
        raise DatabaseConnectionFailure("Não foi possível conectar ao banco")

    monkeypatch.setattr(loader, "check_connection", refuse)
    lines, echo = collect()
    args = argparse.Namespace(command="basic")
    assert cli.run_command(app, args, echo=echo) == 1
    assert any("Erro de conexão" in line for line in lines)

    with pytest.raises(SystemExit) as exc:
        cli.main(["--config", "testing", "basic"])
    assert exc.value.code == 1


def test_cli_all_lists_generated_files(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(TestingConfig, "SQLALCHEMY_DATABASE_URI", f"sqlite:///{tmp_path / 'survey.db'}")
    # the web app owns the schema; the reports only read it
    create_app("testing")

    with pytest.raises(SystemExit) as exc:
        cli.main(["--config", "testing", "--output-dir", str(tmp_path), "all"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "Arquivos gerados" in out
    assert "resumo-executivo.json" in out


def test_cli_parser():
    args = cli.build_parser().parse_args(["map", "--online"])
    assert args.command == "map"
    assert args.online is True


def test_short_cep_is_left_out_of_regions_but_counted(app, seeded_with_short_cep):
    """A CEP with fewer than 2 digits has no region but still counts as a response."""
    assert basic.demographics()[0] == "Total de respostas coletadas: 6"

    lines = basic.geography()
    assert "  (base: 5 respostas com CEP)" in lines
    assert "  São Paulo - Centro: 1 (20.0%)" in lines
    assert "  CEPs inválidos (sem região): 1" in lines

    records = loader.load_records()
    regions = geographic.group_by_region(records)
    assert sum(len(members) for members in regions.values()) == 4
    assert "  (base: 6 respostas)" in geographic.distribution(records, len(records))

    summary = executive.build_summary(records)
    assert summary["totalResponses"] == 6
    assert sum(summary["geographic"]["stateDistribution"].values()) == 4
    assert sum(r["count"] for r in summary["geographic"]["mainRegions"]) == 4


def test_coverage_counts_only_resolvable_ceps(app, seeded_with_short_cep):
    lines = geographic.summary()
    assert lines[0] == "📊 Cobertura geográfica: 4/6 (66.7%)"
    assert "  (base: 4 respostas com CEP)" in lines
    assert "  São Paulo: 3 (75.0%)" in lines


def test_final_report_names_an_informed_gender():
    records = [make_record(gender=None), make_record(gender=None), make_record(gender="Feminino")]
    summary = executive.build_summary(records)

    assert summary["demographic"]["primaryGender"] == "Feminino"
    assert "predominantemente Feminino" in executive.final_report(summary)


def test_unwritable_output_dir_does_not_abort(app, seeded, tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("not a directory", encoding="utf-8")
    app.config["REPORT_OUTPUT_DIR"] = str(blocked)

    for result in (executive.run(app.config, echo=lambda line: None),
                   georef.run(app.config, echo=lambda line: None, rng=np.random.default_rng(1))):
        assert result.files == []
        assert result.failed_sections == ["EXPORTAÇÃO"]


def test_online_map_closes_its_session(app, monkeypatch):
    opened = []

    class ClosingSession:
        def __init__(self):
            self.closed = False
            opened.append(self)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.closed = True

        def get(self, *args, **kwargs):
            raise AssertionError("no CEP to look up")

    monkeypatch.setattr(georef.requests, "Session", ClosingSession)
    georef.run(app.config, online=True, echo=lambda line: None)

    assert len(opened) == 1
    assert opened[0].closed


def test_connection_check_leaves_schema_alone():
    app = create_app("testing", create_tables=False)
    with app.app_context():
        loader.check_connection()
        assert not inspect(db.engine).has_table("survey_responses")
