"""NAVER 地図のプレイス検索における店舗順位取得ツール."""

from placerank.engine import RankEngine, rank
from placerank.errors import (
    HTTPStatusError,
    ParseError,
    PlaceListNotFoundError,
    PlaceRankError,
    RequestError,
    SearchTimeoutError,
)
from placerank.models import MatchStrategy, PlaceItem, RankResult, SearchQuery, SelectorSet

__version__ = "0.1.0"

__all__ = [
    "HTTPStatusError",
    "MatchStrategy",
    "ParseError",
    "PlaceItem",
    "PlaceListNotFoundError",
    "PlaceRankError",
    "RankEngine",
    "RankResult",
    "RequestError",
    "SearchQuery",
    "SearchTimeoutError",
    "SelectorSet",
    "rank",
]
