"""
Declarative pattern tables for structure-aware chunking of legal documents.

Adding an instrument type or a section marker is a data change: append a row
here, the chunker iterates the tables as-is. Headers accept the Portuguese
spelling used in official gazettes and the English equivalent.
"""

import re
from typing import Tuple

from ..models import InstrumentType

# "Nº 123/2024", "N° 1.234/2024", "n.º 5/2020", "No 1/2024"
_NUMBER = r'\s*N[.º°o]*\s*\d[\d.]*/\d+'


def _header(names: str) -> "re.Pattern[str]":
    return re.compile(r'\b(?:' + names + r')' + _NUMBER, re.IGNORECASE)


INSTRUMENT_PATTERNS: Tuple[Tuple[InstrumentType, "re.Pattern[str]"], ...] = (
    (InstrumentType.ORDINANCE, _header(r'PORT[AÁ]RIA|ORDINANCE')),
    (InstrumentType.DECREE, _header(r'DECRETO|DECREE')),
    (InstrumentType.LAW, _header(r'LEI|LAW')),
    (InstrumentType.RESOLUTION, _header(r'RESOLU[ÇC][ÃA]O|RESOLUTION')),
    (InstrumentType.NORMATIVE_INSTRUCTION, _header(r'INSTRU[ÇC][ÃA]O\s+NORMATIVA|NORMATIVE\s+INSTRUCTION')),
    (InstrumentType.NOTICE, _header(r'EDITAL|NOTICE')),
    (InstrumentType.OFFICIAL_LETTER, _header(r'OF[ÍI]CIO|OFFICIAL\s+LETTER')),
    (InstrumentType.OPINION, _header(r'PARECER|OPINION')),
)

# Operative clause of an instrument ("RESOLVE:" / "RESOLVES:")
RESOLVES_MARKER = re.compile(r'RESOLVES?:')

# Section boundaries searched after the operative clause (line-anchored)
SECTION_MARKERS: Tuple["re.Pattern[str]", ...] = (
    re.compile(r'^[ \t]*Art\.\s*\d+', re.MULTILINE),
    re.compile(r'^[ \t]*§\s*\d+', re.MULTILINE),
    re.compile(r'^[ \t]*(?:CAPÍTULO|CHAPTER)', re.MULTILINE),
    re.compile(r'^[ \t]*(?:SEÇÃO|SECTION)', re.MULTILINE),
    re.compile(r'^[ \t]*(?:ANEXO|ANNEX)', re.MULTILINE),
    re.compile(r'^[ \t]*(?:CONSIDERANDO|WHEREAS)', re.MULTILINE),
)

# A sentence ending in one of these is a citation fragment ("Art.", "§ 2.",
# "nº.") and is merged with the following sentence
CITATION_ABBREVIATIONS: Tuple[str, ...] = (
    "Art", "Arts", "art", "arts", "Inc", "inc", "Par", "Cap", "Sec",
    "nº", "Nº", "n°", "N°",
    "Dr", "Dra", "Sr", "Sra", "fl", "fls",
)

CITATION_FRAGMENT = re.compile(
    r'(?:\b(?:' + '|'.join(map(re.escape, CITATION_ABBREVIATIONS)) + r')|§)\s*\d*\.?$'
)

# "No."/"n." are also plain words ("No.", "Nos."); they only cite when a
# number follows, either inside the fragment or at the start of the next one
NUMBER_ABBREVIATIONS: Tuple[str, ...] = ("n", "N", "No", "Nos")

NUMBER_FRAGMENT = re.compile(
    r'\b(?:' + '|'.join(NUMBER_ABBREVIATIONS) + r')\.?(?:\s*\d+\.?)?$'
)

# Span limits (characters / words)
MAX_SPAN_CHARS = 3000
SINGLE_CHUNK_MAX_WORDS = 600
PART_WORDS = 500
PART_STRIDE = 400
