# -*- coding: utf-8 -*-
"""Named respondent segments shared by every report.

Each rule is defined from the questionnaire's declared options, so the
"premium" bracket is the same everywhere it is counted.
"""
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable

from ..questions import (AGE_RANGES, COMMUNICATION_PREFERENCES, FREQUENCIES,
                         MARITAL_STATUSES, PRICE_RANGES)

PREMIUM_PRICES = frozenset(PRICE_RANGES[-2:])
MID_PRICES = frozenset(PRICE_RANGES[2:4])
BUDGET_PRICES = frozenset(PRICE_RANGES[:2])
WEEKLY = frozenset(FREQUENCIES[:2])
REGULAR = frozenset(FREQUENCIES[2:4])
RARELY = frozenset(FREQUENCIES[4:])
MIDDLE_AGED = frozenset(AGE_RANGES[2:4])
MARRIED = MARITAL_STATUSES[1]
WHATSAPP, EMAIL_CONTACT = COMMUNICATION_PREFERENCES[0], COMMUNICATION_PREFERENCES[1]


@dataclass(frozen=True)
class Segment:
    label: str
    predicate: Callable[[dict], bool]


def _in(attr, values):
    return lambda r: r.get(attr) in values


def _eq(attr, value):
    return lambda r: r.get(attr) == value


SEGMENTS: Dict[str, Segment] = OrderedDict([
    ("premium", Segment("Premium (R$ 101+)", _in("price_range", PREMIUM_PRICES))),
    ("mid_range", Segment("Médio (R$ 51-100)", _in("price_range", MID_PRICES))),
    ("budget", Segment("Econômico (até R$ 50)", _in("price_range", BUDGET_PRICES))),
    ("frequent", Segment("Entusiastas (semanal+)", _in("frequency", WEEKLY))),
    ("regular", Segment("Regulares (quinzenal/mensal)", _in("frequency", REGULAR))),
    ("occasional", Segment("Ocasionais (raramente)", _in("frequency", RARELY))),
    ("male", Segment("Masculino", _eq("gender", "Masculino"))),
    ("female", Segment("Feminino", _eq("gender", "Feminino"))),
    ("married", Segment("Casados(as)", _eq("marital_status", MARRIED))),
    ("age_36_60", Segment("36-60 anos", _in("age_range", MIDDLE_AGED))),
    ("whatsapp", Segment("WhatsApp preferido", _eq("communication_preference", WHATSAPP))),
    ("email_contact", Segment("E-mail preferido", _eq("communication_preference", EMAIL_CONTACT))),
])


def get_segment(name: str) -> Segment:
    try:
        return SEGMENTS[name]
    except KeyError:
        raise KeyError(f"unknown segment rule: {name}") from None


def matches(record: dict, name: str) -> bool:
    return bool(get_segment(name).predicate(record))


def matches_all(record: dict, names: Iterable[str]) -> bool:
    return all(matches(record, n) for n in names)


def count_segment(records: Iterable[dict], *names: str) -> int:
    return sum(1 for r in records if matches_all(r, names))
