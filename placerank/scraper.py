"""NAVER 地図検索ページの取得と iframe URL の特定.

検索ページ本体には結果リストが無く、id="searchIframe" の iframe 内に
描画される。iframe が見つからない場合は検索キーワードから
pcmap.place.naver.com の URL を組み立てて代用する。
"""

from __future__ import annotations

import logging
import time
from urllib.parse import quote, quote_plus, unquote, urljoin, urlparse

import requests

from placerank.config import (
    ACCEPT,
    ACCEPT_LANGUAGE,
    FALLBACK_IFRAME_URL_PREFIX,
    READ_CHUNK_SIZE,
    REFERER,
    SEARCH_IFRAME_ID,
    SEARCH_URL_PREFIX,
    SEARCH_URL_SUFFIX,
    USER_AGENT,
)
from placerank.errors import HTTPStatusError, ParseError, RequestError, SearchTimeoutError
from placerank.extractor import parse_html

logger = logging.getLogger(__name__)


class Deadline:
    """実行全体で共有する締め切り（2 回の取得の合計時間を制限する）."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return self._expires_at - time.monotonic()

    def expired(self) -> bool:
        return self.remaining() <= 0


def build_headers(user_agent: str = USER_AGENT) -> dict[str, str]:
    """ブラウザ相当のリクエストヘッダを作る."""
    return {
        "User-Agent": user_agent,
        "Accept-Language": ACCEPT_LANGUAGE,
        "Referer": REFERER,
        "Accept": ACCEPT,
    }


def fetch_page(
    session: requests.Session,
    url: str,
    deadline: Deadline,
    headers: dict[str, str] | None = None,
) -> bytes:
    """URL の本文を取得する. リトライはしない.

    requests の timeout は 1 回の読み込みごとにしか効かないので、
    本文は分割して読み込み、その都度締め切りを確認する。

    Raises:
        SearchTimeoutError: 締め切り超過
        HTTPStatusError: 2xx 以外のステータス
        RequestError: その他の通信エラー
    """
    if deadline.expired():
        raise SearchTimeoutError(url)

    logger.debug("GET %s", url)
    try:
        resp = session.get(
            url, headers=headers or build_headers(), timeout=deadline.remaining(), stream=True
        )
    except requests.Timeout as e:
        raise SearchTimeoutError(url, str(e)) from e
    except requests.RequestException as e:
        logger.error("取得失敗: url=%s, error=%s", url, e)
        raise RequestError(url, str(e)) from e

    try:
        if not 200 <= resp.status_code < 300:
            raise HTTPStatusError(url, resp.status_code)
        return _read_body(resp, url, deadline)
    finally:
        resp.close()


def _read_body(resp: requests.Response, url: str, deadline: Deadline) -> bytes:
    """締め切りを確認しながら本文を読み込む."""
    chunks: list[bytes] = []
    try:
        for chunk in resp.iter_content(chunk_size=READ_CHUNK_SIZE):
            chunks.append(chunk)
            if deadline.expired():
                raise SearchTimeoutError(url)
    except requests.RequestException as e:
        # 本文読み込み中の read timeout は ConnectionError として届く
        if isinstance(e, requests.Timeout) or deadline.expired():
            raise SearchTimeoutError(url, str(e)) from e
        logger.error("本文の読み込み失敗: url=%s, error=%s", url, e)
        raise RequestError(url, str(e)) from e
    return b"".join(chunks)


def build_search_url(keyword: str) -> str:
    """キーワードから地図検索ページの URL を作る.

    UTF-8 にできないバイト（surrogateescape）はそのままパーセントエンコードする。
    """
    return SEARCH_URL_PREFIX + quote(keyword, safe="", errors="surrogateescape") + SEARCH_URL_SUFFIX


def keyword_from_search_url(search_url: str) -> str:
    """検索ページ URL の最後のパス要素からキーワードを復元する."""
    try:
        path = urlparse(search_url).path
    except ValueError:
        return ""
    return unquote(path.split("/")[-1], errors="surrogateescape")


def fallback_iframe_url(keyword: str) -> str:
    """iframe が見つからないときの代替 URL."""
    return FALLBACK_IFRAME_URL_PREFIX + quote_plus(keyword, errors="surrogateescape")


def extract_iframe_url(search_url: str, html: str | bytes) -> str:
    """検索ページ HTML から検索結果 iframe の絶対 URL を得る.

    Raises:
        ParseError: HTML または URL を解釈できない
    """
    doc = parse_html(html, "parse_search_html")

    iframe_src = ""
    for iframe in doc.find_all("iframe"):
        if iframe.get("id") == SEARCH_IFRAME_ID:
            iframe_src = (iframe.get("src") or "").strip()
            break

    if not iframe_src:
        keyword = keyword_from_search_url(search_url)
        logger.warning("searchIframe が見つかりません。代替 URL を使用: keyword=%s", keyword)
        return fallback_iframe_url(keyword)

    try:
        base = urlparse(search_url)
    except ValueError as e:
        raise ParseError("parse_search_url", str(e)) from e
    if not base.scheme or not base.netloc:
        raise ParseError("parse_search_url", f"not an absolute url: {search_url}")

    try:
        return urljoin(base.geturl(), iframe_src)
    except ValueError as e:
        raise ParseError("parse_iframe_url", str(e)) from e
