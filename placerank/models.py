"""データモデル定義."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class MatchStrategy(str, Enum):
    """店舗名の照合方式."""

    PARTIAL = "partial"  # 部分一致（双方向）
    EXACT = "exact"  # 完全一致

    @classmethod
    def parse(cls, value: str) -> MatchStrategy:
        """文字列から照合方式を得る. 不正な値は ValueError."""
        normalized = value.strip().lower()
        for strategy in cls:
            if strategy.value == normalized:
                return strategy
        raise ValueError(f"invalid match strategy: {value}")


@dataclass(frozen=True)
class SelectorSet:
    """サイト構造ごとの CSS セレクタ一覧（いずれも優先順）."""

    place_list: tuple[str, ...]  # 検索結果の各項目 (li) を指すセレクタ
    ad: tuple[str, ...]  # 広告マーカー
    shop_name: tuple[str, ...]  # 店舗名の要素


@dataclass(frozen=True)
class SearchQuery:
    """1 回の順位取得の入力."""

    keyword: str
    shop_name: str
    strategy: MatchStrategy = MatchStrategy.PARTIAL


@dataclass(frozen=True)
class PlaceItem:
    """検索結果の広告以外の 1 店舗を表す."""

    rank: int  # 広告を除いた順位（1始まり）
    name: str  # 店舗名

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RankMatch:
    """iframe HTML から得た抽出・照合結果."""

    rank: int  # -1 = 圏外
    matched_name: str
    items: tuple[PlaceItem, ...]
    items_scanned: int


@dataclass(frozen=True)
class RankResult:
    """順位取得の結果."""

    query: SearchQuery
    found: bool
    rank: int  # -1 = 圏外
    matched_name: str
    items: tuple[PlaceItem, ...] = field(default_factory=tuple)
    items_scanned: int = 0
    search_url: str = ""
    iframe_url: str = ""

    def to_dict(self) -> dict:
        return {
            "keyword": self.query.keyword,
            "shop_name": self.query.shop_name,
            "match_strategy": self.query.strategy.value,
            "found": self.found,
            "rank": self.rank,
            "matched_name": self.matched_name,
            "items": [item.to_dict() for item in self.items],
            "items_scanned": self.items_scanned,
            "search_url": self.search_url,
            "iframe_url": self.iframe_url,
        }
