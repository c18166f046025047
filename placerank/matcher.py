"""店舗名の正規化と照合."""

from __future__ import annotations

from placerank.models import MatchStrategy


def normalize(value: str) -> str:
    """前後の空白除去・casefold・連続空白を半角スペース 1 つに畳む."""
    return " ".join(value.casefold().split())


def matches(candidate: str, target: str, strategy: MatchStrategy) -> bool:
    """候補の店舗名が対象店舗名に一致するか判定する.

    EXACT は正規化後の完全一致、PARTIAL は正規化後にどちらかが
    もう一方を含めば一致とみなす。どちらかが空なら常に False。
    """
    left = normalize(candidate)
    right = normalize(target)
    if not left or not right:
        return False

    if strategy == MatchStrategy.EXACT:
        return left == right
    return right in left or left in right
