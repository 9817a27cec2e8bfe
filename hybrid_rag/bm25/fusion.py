"""
Weighted score fusion for combining dense and sparse rankings.

Both candidate lists come from the vector index (each over-fetched with
2 × limit). Scores are blended linearly:

    fused(item) = alpha × dense_score + (1 - alpha) × sparse_score

An item present in only one list still participates, with 0 for the missing
side - documents strong in either modality can surface, alpha controls the
blend (1.0 = dense only, 0.0 = sparse only).

Ties on the fused score are broken by ascending str(id), so equal scores
always come back in the same order.
"""

from typing import Dict, List, Union

from ..exceptions import InputError
from ..models import RankedResult


def fuse_rankings(
    dense: List[RankedResult],
    sparse: List[RankedResult],
    alpha: float = 0.5,
    limit: int = 5,
) -> List[RankedResult]:
    """
    Merge dense and sparse results into one ranking.

    Args:
        dense: Results of the dense (embedding) search
        sparse: Results of the sparse (BM25) search
        alpha: Weight of the dense score, in [0, 1]
        limit: Maximum number of results to return

    Returns:
        Fused results sorted by fused score (descending), at most `limit`.
        Each result carries `score` (fused), `dense_score` and `sparse_score`.

    Raises:
        InputError: If alpha is outside [0, 1] or limit is negative

    Example:
        >>> dense = [RankedResult("a", score=0.9), RankedResult("b", score=0.4)]
        >>> sparse = [RankedResult("b", score=0.8), RankedResult("c", score=0.5)]
        >>> [r.id for r in fuse_rankings(dense, sparse, alpha=0.5, limit=2)]
        ['b', 'a']  # b=0.60, a=0.45, c=0.25
    """
    if not 0.0 <= alpha <= 1.0:
        raise InputError(f"alpha must be within [0, 1], got {alpha}")
    if limit < 0:
        raise InputError(f"limit must be non-negative, got {limit}")

    merged: Dict[Union[str, int], RankedResult] = {}

    for item in dense:
        merged[item.id] = RankedResult(
            id=item.id,
            payload=dict(item.payload),
            dense_score=item.score,
            sparse_score=0.0,
        )

    for item in sparse:
        existing = merged.get(item.id)
        if existing is not None:
            existing.sparse_score = item.score
            if not existing.payload:
                existing.payload = dict(item.payload)
        else:
            merged[item.id] = RankedResult(
                id=item.id,
                payload=dict(item.payload),
                dense_score=0.0,
                sparse_score=item.score,
            )

    for result in merged.values():
        result.score = alpha * result.dense_score + (1 - alpha) * result.sparse_score

    ranked = sorted(merged.values(), key=lambda r: (-r.score, str(r.id)))
    return ranked[:limit]
