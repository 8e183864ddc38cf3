"""Shared fixtures: an app on the in-memory testing database and response builders."""

import pytest

from winesurvey import create_app
from winesurvey.extensions import db
from winesurvey.models import SurveyResponse


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config["REPORT_OUTPUT_DIR"] = str(tmp_path / "reports")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_record(**overrides):
    """A plain response record as produced by SurveyResponse.to_record()."""
    record = {
        "id": "r-1",
        "age_range": "36 – 45 anos",
        "gender": "Masculino",
        "marital_status": "Casado(a)/em união estável",
        "household_size": "2",
        "cep": "01310-100",
        "frequency": "Uma vez por semana",
        "wine_style": ["Seco"],
        "wine_type": ["Tinto"],
        "classification": "Vinhos finos",
        "price_range": "R$ 51 – R$ 80",
        "alcohol_free_wine": "Não",
        "grape_varieties": None,
        "try_new_varieties": "Sim",
        "preferred_origins": ["Chile"],
        "purchase_channels": ["Supermercados"],
        "attractive_factors": ["Menor preço"],
        "wine_events": "Não",
        "canned_wines": None,
        "natural_wines": None,
        "name": None,
        "email": None,
        "phone": None,
        "communication_preference": "Sim, pode me chamar no WhatsApp",
        "created_at": None,
        "completed_at": None,
    }
    record.update(overrides)
    return record


@pytest.fixture
def add_response(app):
    def _add(**values):
        response = SurveyResponse(**values)
        db.session.add(response)
        db.session.commit()
        return response
    return _add


@pytest.fixture
def seeded(add_response):
    """Five responses: three in São Paulo, one in Rio, one without CEP."""
    add_response(age_range="36 – 45 anos", gender="Masculino", cep="01310-100",
                 frequency="Uma vez por semana", price_range="R$ 101 – R$ 200",
                 wine_type=["Tinto", "Branco"], preferred_origins=["Chile", "Argentina"],
                 wine_style=["Seco"], email="a@example.com",
                 communication_preference="Sim, pode me chamar no WhatsApp")
    add_response(age_range="46 – 60 anos", gender="Feminino", cep="04538-132",
                 frequency="Mensal", price_range="R$ 51 – R$ 80",
                 wine_type=["Tinto"], preferred_origins=["Chile"], wine_style=["Seco"],
                 communication_preference="Sim, prefiro por e-mail")
    add_response(age_range="26 – 35 anos", gender="Masculino", cep="05422-000",
                 frequency="Duas vezes por semana", price_range="Acima de R$ 200",
                 wine_type=["Espumante", "Tinto"], preferred_origins=["França"],
                 wine_style=["Meio seco"], phone="11999990000")
    add_response(age_range="36 – 45 anos", gender="Feminino", cep="22041-001",
                 frequency="Raramente", price_range="Até R$ 40",
                 wine_type=["Rosé"], preferred_origins=["Portugal"], wine_style=["Suave"])
    add_response(age_range="18 – 25 anos", gender="Masculino", cep=None,
                 frequency="Quinzenal", price_range="R$ 41 – R$ 50", wine_type=["Tinto"])


@pytest.fixture
def seeded_with_short_cep(seeded, add_response):
    """The five seeded responses plus one whose CEP has a single digit."""
    add_response(age_range="26 – 35 anos", gender="Feminino", cep="1",
                 frequency="Mensal", price_range="R$ 51 – R$ 80", wine_type=["Branco"])
