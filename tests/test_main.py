"""main モジュール（CLI）のテスト."""

import json
from unittest.mock import patch

import pytest

from placerank.errors import HTTPStatusError, PlaceListNotFoundError, SearchTimeoutError
from placerank.main import (
    EXIT_ERROR,
    EXIT_INVALID_ARGS,
    EXIT_OK,
    InvalidArguments,
    parse_options,
    parse_timeout,
    run,
)
from placerank.models import MatchStrategy, PlaceItem, RankResult, SearchQuery


def _result(found: bool = True) -> RankResult:
    query = SearchQuery(keyword="강남 카페", shop_name="Second", strategy=MatchStrategy.PARTIAL)
    return RankResult(
        query=query,
        found=found,
        rank=2 if found else -1,
        matched_name="Second Place" if found else "",
        items=(PlaceItem(rank=1, name="First Place"), PlaceItem(rank=2, name="Second Place")),
        items_scanned=2,
        search_url="https://map.naver.com/p/search/x?searchType=place",
        iframe_url="https://pcmap.place.naver.com/place/list?query=x",
    )


def _output(capsys) -> dict:
    return json.loads(capsys.readouterr().out)


class TestParseOptions:
    """parse_options のテスト."""

    def test_flags(self):
        opts = parse_options(["--keyword", "강남 카페", "--shop", "스타벅스", "--match", "EXACT"])

        assert opts.keyword == "강남 카페"
        assert opts.shop_name == "스타벅스"
        assert opts.match is MatchStrategy.EXACT

    def test_positional_pair(self):
        opts = parse_options(["강남 카페", "스타벅스"])
        assert (opts.keyword, opts.shop_name) == ("강남 카페", "스타벅스")

    def test_positional_fills_missing_keyword(self):
        opts = parse_options(["--shop", "스타벅스", "강남 카페"])
        assert (opts.keyword, opts.shop_name) == ("강남 카페", "스타벅스")

    def test_positional_fills_missing_shop(self):
        opts = parse_options(["--keyword", "강남 카페", "스타벅스"])
        assert (opts.keyword, opts.shop_name) == ("강남 카페", "스타벅스")

    def test_extra_positional(self):
        with pytest.raises(InvalidArguments, match="unexpected positional"):
            parse_options(["a", "b", "c"])

    def test_missing_shop(self):
        with pytest.raises(InvalidArguments, match="shop name is required"):
            parse_options(["--keyword", "cafe"])

    def test_invalid_match(self):
        with pytest.raises(InvalidArguments, match="invalid match strategy") as exc_info:
            parse_options(["cafe", "shop", "--match", "fuzzy"])
        assert exc_info.value.options.keyword == ""

    def test_unknown_flag(self):
        with pytest.raises(InvalidArguments):
            parse_options(["--bogus"])

    def test_undecodable_positional(self):
        with pytest.raises(InvalidArguments, match="valid UTF-8") as exc_info:
            parse_options(["caf\udcff", "shop"])
        assert exc_info.value.options.keyword == "caf?"

    def test_rejected_by_argparse_keeps_format_flags(self):
        with pytest.raises(InvalidArguments) as exc_info:
            parse_options(["--full", "--timeout", "soon"])
        assert exc_info.value.options.full is True
        assert exc_info.value.options.pretty is False


class TestParseTimeout:
    """parse_timeout のテスト."""

    @pytest.mark.parametrize("value, expected", [("10", 10.0), ("2.5s", 2.5), ("500ms", 0.5)])
    def test_valid(self, value, expected):
        assert parse_timeout(value) == expected

    def test_invalid(self):
        with pytest.raises(InvalidArguments):
            parse_options(["cafe", "shop", "--timeout", "soon"])


class TestRun:
    """run のテスト."""

    @patch("placerank.main.RankEngine")
    def test_found(self, mock_engine_cls, capsys):
        mock_engine_cls.return_value.rank.return_value = _result()

        code = run(["강남 카페", "Second"])
        out = _output(capsys)

        assert code == EXIT_OK
        assert out == {
            "ok": True,
            "keyword": "강남 카페",
            "shop_name": "Second",
            "found": True,
            "rank": 2,
            "matched_name": "Second Place",
            "items": [{"rank": 1, "name": "First Place"}, {"rank": 2, "name": "Second Place"}],
            "error": None,
        }

    @patch("placerank.main.RankEngine")
    def test_not_found_is_success(self, mock_engine_cls, capsys):
        mock_engine_cls.return_value.rank.return_value = _result(found=False)

        code = run(["강남 카페", "Missing"])
        out = _output(capsys)

        assert code == EXIT_OK
        assert out["ok"] is True
        assert out["found"] is False
        assert out["rank"] == -1
        assert len(out["items"]) == 2

    @patch("placerank.main.RankEngine")
    def test_full(self, mock_engine_cls, capsys):
        mock_engine_cls.return_value.rank.return_value = _result()

        run(["강남 카페", "Second", "--full", "--pretty"])
        out = _output(capsys)

        assert out["match_strategy"] == "partial"
        assert out["items_scanned"] == 2
        assert out["iframe_url"] == "https://pcmap.place.naver.com/place/list?query=x"
        assert out["timestamp"].endswith("Z")
        assert out["duration_ms"] >= 0

    @patch("placerank.main.RankEngine")
    def test_status_error(self, mock_engine_cls, capsys):
        """エラー時は結果を含めずエラー情報だけを返すこと."""
        mock_engine_cls.return_value.rank.side_effect = HTTPStatusError("https://map.naver.com/", 403)

        code = run(["cafe", "shop", "--full"])
        out = _output(capsys)

        assert code == EXIT_ERROR
        assert out["ok"] is False
        assert out["rank"] == -1
        assert out["items"] == []
        assert out["items_scanned"] == 0
        assert out["search_url"] == ""
        assert out["error"] == {
            "code": "http_status",
            "message": "http status 403 for https://map.naver.com/",
            "status": 403,
        }

    @pytest.mark.parametrize(
        "error, code",
        [
            (PlaceListNotFoundError(), "parse_error"),
            (SearchTimeoutError("https://map.naver.com/"), "timeout"),
        ],
    )
    @patch("placerank.main.RankEngine")
    def test_error_codes(self, mock_engine_cls, error, code, capsys):
        mock_engine_cls.return_value.rank.side_effect = error

        assert run(["cafe", "shop"]) == EXIT_ERROR
        assert _output(capsys)["error"]["code"] == code

    def test_invalid_args(self, capsys):
        code = run(["--keyword", "cafe"])
        out = _output(capsys)

        assert code == EXIT_INVALID_ARGS
        assert out["ok"] is False
        assert out["keyword"] == "cafe"
        assert out["error"]["code"] == "invalid_args"

    def test_help(self, capsys):
        """ヘルプは標準エラーに出し、標準出力（JSON）を汚さないこと."""
        with pytest.raises(SystemExit) as exc_info:
            run(["--help"])

        captured = capsys.readouterr()
        assert exc_info.value.code == 0
        assert captured.out == ""
        assert "usage:" in captured.err

    @patch("placerank.main.RankEngine")
    def test_undecodable_argument(self, mock_engine_cls, capsys):
        """UTF-8 として不正な引数は JSON の引数エラーになること."""
        code = run(["\udcff", "shop"])
        out = _output(capsys)

        assert code == EXIT_INVALID_ARGS
        assert out["error"]["code"] == "invalid_args"
        assert out["keyword"] == "?"
        mock_engine_cls.assert_not_called()

    def test_rejected_flag_keeps_full_output(self, capsys):
        """argparse が弾いた引数でも --full の出力形式を保つこと."""
        code = run(["--bogus", "--full", "--pretty"])
        out = _output(capsys)

        assert code == EXIT_INVALID_ARGS
        assert out["error"]["code"] == "invalid_args"
        assert out["items_scanned"] == 0
        assert out["search_url"] == ""
