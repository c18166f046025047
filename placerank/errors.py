"""順位取得で発生するエラー定義.

kind はエラー種別（transport / status / parse / structure / timeout）、
code は JSON 出力用のエラーコード。
"""

from __future__ import annotations


class PlaceRankError(Exception):
    """順位取得エラーの基底クラス."""

    kind = "transport"
    code = "request_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RequestError(PlaceRankError):
    """接続失敗など通信レベルのエラー."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


class HTTPStatusError(PlaceRankError):
    """2xx 以外のステータスが返った."""

    kind = "status"
    code = "http_status"

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"http status {status} for {url}")
        self.url = url
        self.status = status


class ParseError(PlaceRankError):
    """HTML / URL を解釈できなかった. step は失敗した処理段階."""

    kind = "parse"
    code = "parse_error"

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step


class PlaceListNotFoundError(ParseError):
    """検索結果リストがどのセレクタでも見つからない（0 件とは別扱い）."""

    kind = "structure"

    def __init__(self, message: str = "no place items found") -> None:
        super().__init__("find_place_items", message)


class SearchTimeoutError(PlaceRankError):
    """全体のタイムアウトを超過した."""

    kind = "timeout"
    code = "timeout"

    def __init__(self, url: str, message: str = "deadline exceeded") -> None:
        super().__init__(f"{message}: {url}")
        self.url = url
