"""iframe 内の検索結果 HTML から店舗リストと順位を抽出するモジュール.

抽出戦略:
  1. 検索結果リストはセレクタを優先順に試し、最初にヒットしたものを使う
  2. 広告判定は全セレクタの OR（項目自身または子孫に一致すれば広告）
  3. 店舗名もセレクタを優先順に試し、最初に空でないテキストを採用

NAVER 側の class 名は予告なく変わるため、セレクタは SelectorSet として
外から差し替えられるようにしている。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bs4 import BeautifulSoup, ParserRejectedMarkup, Tag

from placerank.config import DEFAULT_SELECTORS
from placerank.errors import ParseError, PlaceListNotFoundError
from placerank.matcher import matches
from placerank.models import MatchStrategy, PlaceItem, RankMatch, SelectorSet

logger = logging.getLogger(__name__)


def parse_html(html: str | bytes, step: str) -> BeautifulSoup:
    """HTML をパースする. 失敗時は step 付きの ParseError."""
    try:
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise ParseError(step, str(e)) from e


def resolve_first(node: Tag, selectors: Iterable[str]) -> list[Tag]:
    """最初に 1 件以上ヒットしたセレクタの結果を返す. 全滅なら空リスト."""
    for selector in selectors:
        found = node.select(selector)
        if found:
            logger.debug("セレクタ一致: %s (%d 件)", selector, len(found))
            return found
    return []


def any_matches(node: Tag, selectors: Iterable[str]) -> bool:
    """node 自身または子孫がいずれかのセレクタに一致するか."""
    for selector in selectors:
        if node.css.match(selector) or node.select_one(selector) is not None:
            return True
    return False


def first_text(node: Tag, selectors: Iterable[str]) -> str:
    """各セレクタの最初の一致要素のテキストを順に見て、最初の空でないものを返す."""
    for selector in selectors:
        element = node.select_one(selector)
        if element is None:
            continue
        text = element.get_text().strip()
        if text:
            return text
    return ""


def find_place_items(doc: Tag, selectors: SelectorSet = DEFAULT_SELECTORS) -> list[Tag]:
    """検索結果の各項目 (li) を取得する."""
    return resolve_first(doc, selectors.place_list)


def is_ad_item(item: Tag, selectors: SelectorSet = DEFAULT_SELECTORS) -> bool:
    """広告枠の項目か判定する."""
    return any_matches(item, selectors.ad)


def extract_shop_name(item: Tag, selectors: SelectorSet = DEFAULT_SELECTORS) -> str:
    """項目から店舗名だけを取り出す（バッジ等の兄弟要素は含めない）."""
    return first_text(item, selectors.shop_name)


def extract_places(
    items: Iterable[Tag], selectors: SelectorSet = DEFAULT_SELECTORS
) -> tuple[list[PlaceItem], int]:
    """項目を文書順に走査し、広告を除いた店舗リストを作る.

    店舗名が取れない項目も順位は 1 つ消費する（リストには載せない）。

    Returns:
        (店舗リスト, 走査した広告以外の項目数)
    """
    rank = 0
    scanned = 0
    places: list[PlaceItem] = []

    for item in items:
        if is_ad_item(item, selectors):
            continue
        rank += 1
        scanned += 1

        name = extract_shop_name(item, selectors)
        if not name:
            logger.debug("店舗名なし: rank=%d", rank)
            continue
        places.append(PlaceItem(rank=rank, name=name))

    return places, scanned


def find_rank_in_html(
    html: str | bytes,
    shop_name: str,
    strategy: MatchStrategy = MatchStrategy.PARTIAL,
    selectors: SelectorSet = DEFAULT_SELECTORS,
) -> RankMatch:
    """iframe HTML から対象店舗の順位を求める.

    複数の店舗が一致した場合は文書順で最初のものを採用する。
    走査は最後まで行い、全店舗をリストに含める。

    Raises:
        ParseError: HTML をパースできない
        PlaceListNotFoundError: 検索結果リストが見つからない
    """
    doc = parse_html(html, "parse_iframe_html")

    items = find_place_items(doc, selectors)
    if not items:
        raise PlaceListNotFoundError()

    places, scanned = extract_places(items, selectors)

    for place in places:
        if matches(place.name, shop_name, strategy):
            return RankMatch(
                rank=place.rank,
                matched_name=place.name,
                items=tuple(places),
                items_scanned=scanned,
            )

    return RankMatch(rank=-1, matched_name="", items=tuple(places), items_scanned=scanned)
