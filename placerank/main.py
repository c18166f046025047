"""NAVER 地図プレイス順位取得 — コマンドラインエントリーポイント.

結果は JSON で標準出力に、ログは標準エラー出力に書く。

終了コード:
  0: 実行成功（圏外も含む）
  1: 取得・解析エラー
  2: 引数エラー
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from placerank.config import DEFAULT_USER_AGENT, LOG_DIR, REQUEST_TIMEOUT, USER_AGENT
from placerank.engine import RankEngine
from placerank.errors import HTTPStatusError, PlaceRankError
from placerank.models import MatchStrategy, RankResult, SearchQuery

PROG = "naver-place-rank"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGS = 2


@dataclass
class Options:
    """コマンドライン引数."""

    keyword: str = ""
    shop_name: str = ""
    match: MatchStrategy = MatchStrategy.PARTIAL
    timeout: float = REQUEST_TIMEOUT
    user_agent: str = USER_AGENT
    pretty: bool = False
    debug: bool = False
    full: bool = False


class InvalidArguments(Exception):
    """引数エラー. 解釈できたところまでの options を持つ."""

    def __init__(self, message: str, options: Options | None = None) -> None:
        super().__init__(message)
        self.options = options or Options()


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise InvalidArguments(message)

    def print_help(self, file=None) -> None:
        # 標準出力は JSON 専用
        super().print_help(file or sys.stderr)


def parse_timeout(value: str) -> float:
    """"10" / "10s" / "500ms" 形式の秒数を float にする."""
    text = value.strip().lower()
    try:
        if text.endswith("ms"):
            seconds = float(text[:-2]) / 1000
        elif text.endswith("s"):
            seconds = float(text[:-1])
        else:
            seconds = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value}")
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"timeout must be positive: {value}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        usage=(
            f"{PROG} --keyword <keyword> --shop <shop name> [--match partial|exact]\n"
            f"       {PROG} <keyword> <shop name>"
        ),
        description="NAVER 地図のプレイス検索で店舗の順位を調べる",
    )
    parser.add_argument("positional", nargs="*", help=argparse.SUPPRESS)
    parser.add_argument("--keyword", default="", help="検索キーワード（位置引数でも可）")
    parser.add_argument("--shop", default="", help="照合する店舗名（位置引数でも可）")
    parser.add_argument(
        "--match", default=MatchStrategy.PARTIAL.value, help="照合方式: partial（既定）または exact"
    )
    parser.add_argument(
        "--timeout", type=parse_timeout, default=REQUEST_TIMEOUT, help="全体のタイムアウト（例: 10s）"
    )
    parser.add_argument("--user-agent", default=USER_AGENT, help="User-Agent ヘッダ")
    parser.add_argument("--pretty", action="store_true", help="JSON を整形して出力")
    parser.add_argument("--debug", action="store_true", help="デバッグログを標準エラーに出力")
    parser.add_argument("--full", action="store_true", help="拡張フィールドも出力")
    return parser


def _to_valid_text(value: str) -> tuple[str, bool]:
    """UTF-8 にできない文字（argv の不正バイト由来の surrogate）を置換する.

    Returns:
        (出力可能な文字列, 元の値が UTF-8 として正しいか)
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return value.encode("utf-8", "replace").decode("utf-8"), False
    return value, True


def parse_options(argv: list[str]) -> Options:
    """引数を解釈する. 不正な場合は InvalidArguments を送出する."""
    try:
        args = build_parser().parse_args(argv)
    except InvalidArguments as e:
        # argparse が弾いた場合も出力形式の指定だけは活かす
        e.options = Options(pretty="--pretty" in argv, full="--full" in argv)
        raise

    keyword, keyword_ok = _to_valid_text(args.keyword)
    shop_name, shop_ok = _to_valid_text(args.shop)
    positional = [_to_valid_text(value) for value in args.positional]
    opts = Options(
        keyword=keyword,
        shop_name=shop_name,
        timeout=args.timeout,
        user_agent=args.user_agent or DEFAULT_USER_AGENT,
        pretty=args.pretty,
        debug=args.debug,
        full=args.full,
    )

    try:
        opts.match = MatchStrategy.parse(args.match)
    except ValueError as e:
        raise InvalidArguments(str(e), opts)

    remaining = [value for value, _ in positional]
    if not opts.keyword and not opts.shop_name and len(remaining) == 2:
        opts.keyword, opts.shop_name = remaining
    elif not opts.keyword and opts.shop_name and len(remaining) == 1:
        opts.keyword = remaining[0]
    elif opts.keyword and not opts.shop_name and len(remaining) == 1:
        opts.shop_name = remaining[0]
    elif remaining:
        raise InvalidArguments("unexpected positional arguments", opts)

    if not (keyword_ok and shop_ok and all(ok for _, ok in positional)):
        raise InvalidArguments("arguments must be valid UTF-8", opts)
    try:
        opts.user_agent.encode("latin-1")
    except UnicodeEncodeError:
        raise InvalidArguments("user agent must be latin-1 text", opts)

    if not opts.keyword.strip():
        raise InvalidArguments("keyword is required", opts)
    if not opts.shop_name.strip():
        raise InvalidArguments("shop name is required", opts)
    return opts


def setup_logging(debug: bool = False) -> None:
    """ロギングの初期設定. 標準出力は JSON 専用なのでログは stderr へ."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if LOG_DIR is not None:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOG_DIR / f"place_rank_{datetime.now().strftime('%Y%m%d')}.log"
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def error_info(code: str, message: str, status: int | None = None) -> dict:
    info = {"code": code, "message": message}
    if status:
        info["status"] = status
    return info


def map_error(err: PlaceRankError) -> dict:
    """例外を JSON の error オブジェクトに変換する."""
    if isinstance(err, HTTPStatusError):
        return error_info(err.code, str(err), err.status)
    return error_info(err.code, str(err))


def build_response(
    opts: Options,
    result: RankResult | None,
    error: dict | None,
    started: float,
) -> dict:
    """出力 JSON を組み立てる. エラー時は結果を含めない."""
    ok = error is None and result is not None
    response = {
        "ok": ok,
        "keyword": opts.keyword,
        "shop_name": opts.shop_name,
        "found": result.found if ok else False,
        "rank": result.rank if ok else -1,
        "matched_name": result.matched_name if ok else "",
        "items": [item.to_dict() for item in result.items] if ok else [],
        "error": error,
    }
    if opts.full:
        response.update({
            "match_strategy": opts.match.value,
            "items_scanned": result.items_scanned if ok else 0,
            "search_url": result.search_url if ok else "",
            "iframe_url": result.iframe_url if ok else "",
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "duration_ms": int((time.monotonic() - started) * 1000),
        })
    return response


def write_json(payload: dict, pretty: bool = False) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2 if pretty else None)
    sys.stdout.write("\n")


def run(argv: list[str] | None = None) -> int:
    """メイン処理. 終了コードを返す."""
    started = time.monotonic()
    argv = sys.argv[1:] if argv is None else argv

    try:
        opts = parse_options(argv)
    except InvalidArguments as e:
        message, _ = _to_valid_text(str(e))
        write_json(
            build_response(e.options, None, error_info("invalid_args", message), started),
            e.options.pretty,
        )
        return EXIT_INVALID_ARGS

    setup_logging(opts.debug)
    logger = logging.getLogger(__name__)
    logger.debug("検索: keyword=%s, shop=%s, match=%s", opts.keyword, opts.shop_name, opts.match.value)

    engine = RankEngine(timeout=opts.timeout, user_agent=opts.user_agent)
    query = SearchQuery(keyword=opts.keyword, shop_name=opts.shop_name, strategy=opts.match)

    try:
        result = engine.rank(query)
    except PlaceRankError as e:
        logger.error("順位取得失敗: kind=%s, error=%s", e.kind, e)
        write_json(build_response(opts, None, map_error(e), started), opts.pretty)
        return EXIT_ERROR

    write_json(build_response(opts, result, None, started), opts.pretty)
    return EXIT_OK


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
