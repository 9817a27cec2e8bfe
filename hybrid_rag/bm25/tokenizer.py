"""
Tokenizer (normalizer) for BM25 text processing.

Tokenization pipeline:
1. Lowercase conversion
2. Extract alphanumeric runs (Unicode aware: "ação", "nº" are single tokens;
   punctuation, underscores and whitespace separate tokens)
3. Filter stopwords (Portuguese + English)
4. Apply Portuguese Snowball stemming
5. Return list of meaningful tokens

Same function is used when ingesting chunks into corpus statistics and when
encoding queries, so both sides always agree on the term space.
"""

import re
from typing import List

from .stemmer import stem

# Portuguese stopwords (Snowball/NLTK list)
PORTUGUESE_STOPWORDS = frozenset([
    'a', 'à', 'ao', 'aos', 'aquela', 'aquelas', 'aquele', 'aqueles', 'aquilo',
    'as', 'às', 'até', 'com', 'como', 'da', 'das', 'de', 'dela', 'delas',
    'dele', 'deles', 'depois', 'do', 'dos', 'e', 'é', 'ela', 'elas', 'ele',
    'eles', 'em', 'entre', 'era', 'eram', 'éramos', 'essa', 'essas', 'esse',
    'esses', 'esta', 'está', 'estamos', 'estão', 'estar', 'estas', 'estava',
    'estavam', 'estávamos', 'este', 'esteja', 'estejam', 'estejamos', 'estes',
    'esteve', 'estive', 'estivemos', 'estiver', 'estivera', 'estiveram',
    'estivéramos', 'estiverem', 'estivermos', 'estivesse', 'estivessem',
    'estivéssemos', 'estou', 'eu', 'foi', 'fomos', 'for', 'fora', 'foram',
    'fôramos', 'forem', 'formos', 'fosse', 'fossem', 'fôssemos', 'fui', 'há',
    'haja', 'hajam', 'hajamos', 'hão', 'havemos', 'haver', 'hei', 'houve',
    'houvemos', 'houver', 'houvera', 'houverá', 'houveram', 'houvéramos',
    'houverão', 'houverei', 'houverem', 'houveremos', 'houveria',
    'houveriam', 'houveríamos', 'houvermos', 'houvesse', 'houvessem',
    'houvéssemos', 'isso', 'isto', 'já', 'lhe', 'lhes', 'mais', 'mas', 'me',
    'mesmo', 'meu', 'meus', 'minha', 'minhas', 'muito', 'na', 'não', 'nas',
    'nem', 'no', 'nos', 'nós', 'nossa', 'nossas', 'nosso', 'nossos', 'num',
    'numa', 'o', 'os', 'ou', 'para', 'pela', 'pelas', 'pelo', 'pelos',
    'por', 'qual', 'quando', 'que', 'quem', 'são', 'se', 'seja', 'sejam',
    'sejamos', 'sem', 'ser', 'será', 'serão', 'serei', 'seremos', 'seria',
    'seriam', 'seríamos', 'seu', 'seus', 'só', 'somos', 'sou', 'sua', 'suas',
    'também', 'te', 'tem', 'tém', 'temos', 'tenha', 'tenham', 'tenhamos',
    'tenho', 'terá', 'terão', 'terei', 'teremos', 'teria', 'teriam',
    'teríamos', 'teu', 'teus', 'teve', 'tinha', 'tinham', 'tínhamos', 'tive',
    'tivemos', 'tiver', 'tivera', 'tiveram', 'tivéramos', 'tiverem',
    'tivermos', 'tivesse', 'tivessem', 'tivéssemos', 'tu', 'tua', 'tuas',
    'um', 'uma', 'você', 'vocês', 'vos',
])

# English stopwords (based on Elasticsearch/Lucene standard list, extended)
ENGLISH_STOPWORDS = frozenset([
    'a', 'about', 'above', 'after', 'again', 'against', 'all', 'am', 'an',
    'and', 'any', 'are', 'as', 'at', 'be', 'because', 'been', 'before',
    'being', 'below', 'between', 'both', 'but', 'by', 'can', 'did', 'do',
    'does', 'doing', 'down', 'during', 'each', 'few', 'for', 'from',
    'further', 'had', 'has', 'have', 'having', 'he', 'her', 'here', 'hers',
    'herself', 'him', 'himself', 'his', 'how', 'i', 'if', 'in', 'into', 'is',
    'it', 'its', 'itself', 'just', 'me', 'more', 'most', 'my', 'myself',
    'no', 'nor', 'not', 'now', 'of', 'off', 'on', 'once', 'only', 'or',
    'other', 'our', 'ours', 'ourselves', 'out', 'over', 'own', 'same', 'she',
    'should', 'so', 'some', 'such', 'than', 'that', 'the', 'their', 'theirs',
    'them', 'themselves', 'then', 'there', 'these', 'they', 'this', 'those',
    'through', 'to', 'too', 'under', 'until', 'up', 'very', 'was', 'we',
    'were', 'what', 'when', 'where', 'which', 'while', 'who', 'whom', 'why',
    'will', 'with', 'you', 'your', 'yours', 'yourself', 'yourselves',
])

STOPWORDS = PORTUGUESE_STOPWORDS | ENGLISH_STOPWORDS

# Runs of Unicode letters/digits (\w minus underscore)
_WORD_PATTERN = re.compile(r'[^\W_]+')


def tokenize(text: str) -> List[str]:
    """
    Normalize text into BM25 tokens.

    Process:
    1. Convert to lowercase
    2. Extract alphanumeric runs (numbers are kept: "123/2024" → "123", "2024")
    3. Remove Portuguese and English stopwords
    4. Apply Portuguese Snowball stemming

    Args:
        text: Input text to tokenize

    Returns:
        Ordered list of normalized tokens (may contain repeats)

    Examples:
        >>> tokenize("As Portarias do Ministério")
        ['port', 'ministéri']

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    tokens = _WORD_PATTERN.findall(text.lower())

    return [stem(t) for t in tokens if t not in STOPWORDS]
