"""Tests for the questionnaire definition and the step validator."""

import pytest

from winesurvey.questions import (FIELDS, MULTIPLE, STEPS, TOTAL_STEPS, get_field, questionnaire,
                                  validate_step)

DEMOGRAPHICS = {
    "ageRange": "36 – 45 anos",
    "gender": "Feminino",
    "maritalStatus": "Solteiro(a)",
    "householdSize": "2",
    "cep": "01310-100",
}
CONTACT = {
    "name": "Ana",
    "email": "ana@example.com",
    "phone": "11999990000",
    "communicationPreference": "Sim, prefiro por e-mail",
}


def test_welcome_and_thank_you_always_pass():
    assert validate_step(0, {}).is_valid
    assert validate_step(TOTAL_STEPS - 1, {}).is_valid


def test_out_of_range_step_raises():
    with pytest.raises(IndexError):
        validate_step(TOTAL_STEPS, {})
    with pytest.raises(IndexError):
        validate_step(-1, {})


def test_complete_demographics_pass():
    result = validate_step(1, DEMOGRAPHICS)
    assert result.is_valid
    assert result.missing == []


def test_missing_fields_listed_by_title_in_order():
    result = validate_step(1, {"gender": "Feminino", "ageRange": "  "})
    assert not result.is_valid
    assert result.missing == ["Faixa etária", "Estado civil", "Quantas pessoas moram na sua casa?", "CEP"]


@pytest.mark.parametrize("cep", ["0131010", "013101000", "abcdefgh"])
def test_cep_needs_eight_digits(cep):
    result = validate_step(1, dict(DEMOGRAPHICS, cep=cep))
    assert result.missing == ["CEP"]


def test_formatted_cep_is_accepted():
    assert validate_step(1, dict(DEMOGRAPHICS, cep="01.310-100")).is_valid


def test_email_format():
    step = len(STEPS)
    assert validate_step(step, CONTACT).is_valid
    assert validate_step(step, dict(CONTACT, email="ana@example")).missing == ["E-mail"]


def test_multiple_choice_needs_non_empty_list():
    step = 2
    data = {
        "frequency": "Mensal",
        "wineStyle": [],
        "wineType": "Tinto",
        "classification": "Ambos",
        "priceRange": "Até R$ 40",
        "alcoholFreeWine": "Não",
    }
    result = validate_step(step, data)
    assert "Estilo de vinho preferido" in result.missing
    assert "Tipo mais consumido" in result.missing


def test_wine_type_is_multiple_choice():
    assert get_field("wineType").kind == MULTIPLE


def test_unknown_field():
    with pytest.raises(KeyError):
        get_field("favouriteColour")


def test_field_ids_are_unique():
    ids = [f.field_id for f in FIELDS]
    assert len(ids) == len(set(ids))


def test_questionnaire_serializes_every_step():
    steps = questionnaire()
    assert len(steps) == len(STEPS)
    assert steps[0]["sections"][0]["id"] == "ageRange"
    assert "options" in steps[0]["sections"][0]
