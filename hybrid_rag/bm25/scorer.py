"""
BM25 term weighting with corpus-wide IDF.

BM25 (Best Match 25) is a probabilistic ranking function used for information
retrieval. Here it is used to weight the terms of a single text (chunk or
query) so the result can be stored as a sparse vector and scored by the
vector index with a dot product.

Formula:
    idf(term)         = ln((N - df + 0.5) / (df + 0.5) + 1)
    score(term, text) = idf × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × L/avgL))

Where:
    N    = number of chunks ingested into corpus statistics
    df   = number of chunks containing the term
    tf   = term frequency within the text being encoded
    L    = token count of the text being encoded
    avgL = average chunk length (in tokens)
    k1   = 1.2 (term frequency saturation)
    b    = 0.75 (length normalization)
"""

import math

# Fixed BM25 parameters (not configurable)
K1 = 1.2
B = 0.75


def inverse_document_frequency(total_documents: int, document_frequency: int) -> float:
    """
    BM25 IDF with the +1 smoothing inside the log (never negative).

    Args:
        total_documents: N, chunks ingested so far
        document_frequency: df, chunks containing the term

    Returns:
        IDF weight (>= 0)
    """
    return math.log(
        (total_documents - document_frequency + 0.5) / (document_frequency + 0.5) + 1
    )


def bm25_term_score(
    term_frequency: int,
    document_frequency: int,
    doc_length: int,
    total_documents: int,
    avg_doc_length: float,
) -> float:
    """
    Compute the BM25 weight of one term in one text.

    Args:
        term_frequency: tf, occurrences of the term in this text
        document_frequency: df, chunks containing the term
        doc_length: L, token count of this text
        total_documents: N, chunks ingested so far
        avg_doc_length: avgL, treated as 1 when zero (empty corpus)

    Returns:
        BM25 weight (higher = more important term for this text)

    Example:
        >>> bm25_term_score(3, 2, 100, 10, 100.0) > bm25_term_score(1, 2, 100, 10, 100.0)
        True
    """
    if avg_doc_length <= 0:
        avg_doc_length = 1.0

    idf = inverse_document_frequency(total_documents, document_frequency)

    numerator = term_frequency * (K1 + 1)
    denominator = term_frequency + K1 * (
        1 - B + B * (doc_length / avg_doc_length)
    )

    return idf * (numerator / denominator)
