"""
Snowball Stemmer for Portuguese (via NLTK).

The corpus is Portuguese-language legal text, so the Portuguese Snowball
algorithm is authoritative for every token (English words pass through it
too; they are usually left close to their surface form):
https://snowballstem.org/algorithms/portuguese/stemmer.html

Example:
- "portarias", "portaria" → "port"
"""

from nltk.stem.snowball import SnowballStemmer

# Initialize stemmer once (thread-safe, reusable)
_stemmer = SnowballStemmer('portuguese')


def stem(word: str) -> str:
    """
    Stem a single word using the Portuguese Snowball algorithm.

    Args:
        word: Lowercase word to stem

    Returns:
        Stemmed word
    """
    return _stemmer.stem(word)
