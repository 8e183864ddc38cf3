# -*- coding: utf-8 -*-
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Sequence

from ..errors import DatabaseQueryFailure

logger = logging.getLogger(__name__)


@dataclass
class Section:
    title: str
    build: Callable[[], List[str]]


@dataclass
class ReportRun:
    name: str
    failed_sections: List[str] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_sections


def base_line(n: int, what: str = "respostas") -> str:
    return f"  (base: {n} {what})"


def run_sections(name: str, sections: Sequence[Section], echo=print) -> ReportRun:
    """Print each section in order; a failing query only skips its own section."""
    run = ReportRun(name)
    for section in sections:
        echo(f"\n=== {section.title} ===")
        try:
            lines = section.build()
        except DatabaseQueryFailure as e:
            logger.error(f"Section '{section.title}' failed: {e}")
            echo(f"❌ Erro na seção {section.title}: {e}")
            run.failed_sections.append(section.title)
            continue
        for line in lines:
            echo(line)
    return run
