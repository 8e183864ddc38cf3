# -*- coding: utf-8 -*-
"""Questionnaire definition and the step validator used by the survey form.

Every field the form collects is declared once as a FieldDescriptor. The
descriptor carries the API key (camelCase, as posted by the form), the
model attribute it is stored in and its kind, so the validator, the API
and the analytics routes never index records by free-form strings.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

TEXT = "text"
SINGLE = "single"
MULTIPLE = "multiple"

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
CEP_LENGTH = 8


@dataclass(frozen=True)
class FieldDescriptor:
    field_id: str
    attr: str
    title: str
    kind: str
    options: Tuple[str, ...] = ()
    placeholder: Optional[str] = None

    def to_dict(self) -> dict:
        d = {"id": self.field_id, "title": self.title, "type": self.kind}
        if self.options:
            d["options"] = list(self.options)
        if self.placeholder:
            d["placeholder"] = self.placeholder
        return d


@dataclass(frozen=True)
class Step:
    step_id: str
    title: str
    subtitle: str
    fields: Tuple[FieldDescriptor, ...]
    required: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.step_id,
            "type": "multiple_section",
            "title": self.title,
            "subtitle": self.subtitle,
            "sections": [f.to_dict() for f in self.fields],
            "required": self.required,
        }


@dataclass
class StepValidation:
    is_valid: bool
    missing: List[str] = field(default_factory=list)


AGE_RANGES = (
    '18 – 25 anos',
    '26 – 35 anos',
    '36 – 45 anos',
    '46 – 60 anos',
    'Acima de 60 anos',
)
GENDERS = ('Feminino', 'Masculino', 'Prefiro não informar')
MARITAL_STATUSES = (
    'Solteiro(a)',
    'Casado(a)/em união estável',
    'Divorciado(a)',
    'Viúvo(a)',
)
FREQUENCIES = (
    'Uma vez por semana',
    'Duas vezes por semana',
    'Quinzenal',
    'Mensal',
    'Raramente',
)
WINE_TYPES = ('Branco', 'Rosé', 'Tinto', 'Espumante')
PRICE_RANGES = (
    'Até R$ 40',
    'R$ 41 – R$ 50',
    'R$ 51 – R$ 80',
    'R$ 81 – R$ 100',
    'R$ 101 – R$ 200',
    'Acima de R$ 200',
)
ORIGINS = ('Argentina', 'Brasil', 'Chile', 'Espanha', 'França', 'Portugal', 'Uruguai')
COMMUNICATION_PREFERENCES = (
    'Sim, pode me chamar no WhatsApp',
    'Sim, prefiro por e-mail',
    'Não, obrigado(a)',
)
YES_NO = ('Sim', 'Não')
NOVELTY_AWARENESS = (
    'Conheço e gosto',
    'Não conheço, mas quero conhecer',
    'Já conheço, mas não consumo',
)

STEPS: Tuple[Step, ...] = (
    Step(
        "demographicInfo",
        "Perfil Demográfico",
        "Queremos conhecer um pouco mais sobre você para personalizar nossa recomendação",
        (
            FieldDescriptor("ageRange", "age_range", "Faixa etária", SINGLE, AGE_RANGES),
            FieldDescriptor("gender", "gender", "Sexo", SINGLE, GENDERS),
            FieldDescriptor("maritalStatus", "marital_status", "Estado civil", SINGLE, MARITAL_STATUSES),
            FieldDescriptor("householdSize", "household_size", "Quantas pessoas moram na sua casa?",
                            SINGLE, ('1', '2', '3', '4', '5 ou mais')),
            FieldDescriptor("cep", "cep", "CEP", TEXT, placeholder="00000000"),
        ),
    ),
    Step(
        "consumptionHabits",
        "Hábitos de Consumo",
        "Conte-nos sobre seus hábitos de consumo de vinhos e espumantes",
        (
            FieldDescriptor("frequency", "frequency", "Frequência de consumo de vinhos/espumantes",
                            SINGLE, FREQUENCIES),
            FieldDescriptor("wineStyle", "wine_style", "Estilo de vinho preferido", MULTIPLE,
                            ('Seco', 'Meio seco', 'Suave')),
            FieldDescriptor("wineType", "wine_type", "Tipo mais consumido", MULTIPLE, WINE_TYPES),
            FieldDescriptor("classification", "classification", "Classificação preferida", SINGLE,
                            ('Vinhos de mesa', 'Vinhos finos', 'Ambos')),
            FieldDescriptor("priceRange", "price_range", "Faixa de preço que costuma investir por garrafa",
                            SINGLE, PRICE_RANGES),
            FieldDescriptor("alcoholFreeWine", "alcohol_free_wine", "Consome vinho sem álcool?",
                            SINGLE, YES_NO),
        ),
    ),
    Step(
        "preferences",
        "Preferências",
        "Suas preferências nos ajudam a fazer melhores recomendações",
        (
            FieldDescriptor("grapeVarieties", "grape_varieties", "Variedades que mais consome", TEXT,
                            placeholder="Ex: Cabernet Sauvignon, Chardonnay, Malbec..."),
            FieldDescriptor("tryNewVarieties", "try_new_varieties", "Gostaria de conhecer novas variedades?",
                            SINGLE, YES_NO),
            FieldDescriptor("preferredOrigins", "preferred_origins", "Origens preferidas", MULTIPLE, ORIGINS),
            FieldDescriptor("purchaseChannels", "purchase_channels", "Onde costuma comprar vinhos?", MULTIPLE, (
                'Supermercados',
                'Lojas especializadas (adegas, empórios)',
                'Delivery (iFood, Rappi, etc.)',
                'E-commerce/clube de assinatura',
                'Lojas de conveniência',
                'WhatsApp/revendedores',
                'Conhecido que vende com preço especial',
                'Eventos/feiras',
                'Degustações/jantares harmonizados',
            )),
            FieldDescriptor("attractiveFactors", "attractive_factors", "O que é mais atrativo ao escolher um vinho?",
                            MULTIPLE, (
                                'Menor preço',
                                'Entrega grátis',
                                'Bom atendimento',
                                'Rótulos exclusivos',
                                'Marcas conhecidas',
                                'Degustar antes de comprar',
                            )),
        ),
    ),
    Step(
        "novelties",
        "Novidades",
        "Explore novas tendências no mundo dos vinhos",
        (
            FieldDescriptor("wineEvents", "wine_events", "Costuma ir a eventos de vinhos?", SINGLE, YES_NO),
            FieldDescriptor("cannedWines", "canned_wines", "Conhece vinhos em lata?", SINGLE, NOVELTY_AWARENESS),
            FieldDescriptor("naturalWines", "natural_wines", "Conhece vinhos naturais ou biodinâmicos?",
                            SINGLE, NOVELTY_AWARENESS),
        ),
    ),
    Step(
        "contact",
        "Contato",
        "Para enviarmos recomendações personalizadas e novidades",
        (
            FieldDescriptor("name", "name", "Nome", TEXT, placeholder="Seu nome completo"),
            FieldDescriptor("email", "email", "E-mail", TEXT, placeholder="seu@email.com"),
            FieldDescriptor("phone", "phone", "Telefone/WhatsApp", TEXT, placeholder="(00) 00000-0000"),
            FieldDescriptor("communicationPreference", "communication_preference",
                            "Gostaria de receber promoções e novidades?", SINGLE, COMMUNICATION_PREFERENCES),
        ),
    ),
)

# welcome + questions + thank you
TOTAL_STEPS = len(STEPS) + 2

FIELDS: Tuple[FieldDescriptor, ...] = tuple(f for step in STEPS for f in step.fields)
FIELDS_BY_ID: Dict[str, FieldDescriptor] = {f.field_id: f for f in FIELDS}


def get_field(field_id: str) -> FieldDescriptor:
    try:
        return FIELDS_BY_ID[field_id]
    except KeyError:
        raise KeyError(f"unknown survey field: {field_id}") from None


def as_list(value) -> list:
    """Multiple-choice value as a list; a lone string is a one-item list."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _is_blank(value) -> bool:
    return value is None or not str(value).strip()


def _format_ok(descriptor: FieldDescriptor, value) -> bool:
    if descriptor.field_id == "cep":
        return len(re.sub(r"\D", "", str(value))) == CEP_LENGTH
    if descriptor.field_id == "email":
        return bool(EMAIL_RE.match(str(value).strip()))
    return True


def validate_step(step: int, data: dict) -> StepValidation:
    """Check the fields of one form step.

    ``step`` counts the welcome page as 0, so the first question block is 1
    and ``TOTAL_STEPS - 1`` is the thank-you page. Both ends always pass.
    """
    if step < 0 or step >= TOTAL_STEPS:
        raise IndexError(f"step {step} out of range (0..{TOTAL_STEPS - 1})")
    if step == 0 or step == TOTAL_STEPS - 1:
        return StepValidation(True, [])

    question = STEPS[step - 1]
    if not question.required:
        return StepValidation(True, [])

    missing = []
    for descriptor in question.fields:
        value = data.get(descriptor.field_id)
        if descriptor.kind == MULTIPLE:
            if not isinstance(value, list) or len(value) == 0:
                missing.append(descriptor.title)
        elif _is_blank(value) or not _format_ok(descriptor, value):
            missing.append(descriptor.title)

    return StepValidation(len(missing) == 0, missing)


def questionnaire() -> List[dict]:
    return [s.to_dict() for s in STEPS]
