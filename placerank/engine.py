"""順位取得エンジン.

処理フロー:
  1. キーワードから検索ページ URL を組み立てる
  2. 検索ページを取得
  3. 検索結果 iframe の URL を特定
  4. iframe ページを取得
  5. 店舗リストを抽出し、対象店舗の順位を照合
"""

from __future__ import annotations

import logging

import requests

from placerank.config import DEFAULT_SELECTORS, REQUEST_TIMEOUT, USER_AGENT
from placerank.extractor import find_rank_in_html
from placerank.models import MatchStrategy, RankResult, SearchQuery, SelectorSet
from placerank.scraper import (
    Deadline,
    build_headers,
    build_search_url,
    extract_iframe_url,
    fetch_page,
)

logger = logging.getLogger(__name__)


class RankEngine:
    """1 回の検索で店舗の順位を求める.

    Args:
        timeout: 2 回の取得を合わせた制限時間（秒）
        user_agent: User-Agent ヘッダ
        selectors: 抽出に使うセレクタ一覧
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT,
        user_agent: str | None = None,
        selectors: SelectorSet = DEFAULT_SELECTORS,
    ) -> None:
        self.timeout = timeout
        self.headers = build_headers(user_agent or USER_AGENT)
        self.selectors = selectors

    def _new_session(self) -> requests.Session:
        return requests.Session()

    def rank(self, query: SearchQuery) -> RankResult:
        """順位を取得する. 途中で失敗した場合は PlaceRankError を送出する."""
        deadline = Deadline(self.timeout)
        search_url = build_search_url(query.keyword)

        with self._new_session() as session:
            body = fetch_page(session, search_url, deadline, self.headers)
            iframe_url = extract_iframe_url(search_url, body)
            iframe_body = fetch_page(session, iframe_url, deadline, self.headers)

        match = find_rank_in_html(iframe_body, query.shop_name, query.strategy, self.selectors)
        logger.info(
            "検索結果: keyword=%s, %d 件中 %s",
            query.keyword,
            match.items_scanned,
            f"{match.rank}位" if match.rank > 0 else "圏外",
        )

        return RankResult(
            query=query,
            found=match.rank > 0,
            rank=match.rank,
            matched_name=match.matched_name,
            items=match.items,
            items_scanned=match.items_scanned,
            search_url=search_url,
            iframe_url=iframe_url,
        )


def rank(
    keyword: str,
    shop_name: str,
    strategy: MatchStrategy = MatchStrategy.PARTIAL,
    timeout: float = REQUEST_TIMEOUT,
    user_agent: str | None = None,
) -> RankResult:
    """RankEngine を使わずに 1 回だけ順位を取得するためのショートカット."""
    engine = RankEngine(timeout=timeout, user_agent=user_agent)
    return engine.rank(SearchQuery(keyword=keyword, shop_name=shop_name, strategy=strategy))
