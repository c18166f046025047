"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

from placerank.models import SelectorSet

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- NAVER 地図検索 ---
SEARCH_URL_PREFIX = "https://map.naver.com/p/search/"
SEARCH_URL_SUFFIX = "?searchType=place"
FALLBACK_IFRAME_URL_PREFIX = "https://pcmap.place.naver.com/place/list?query="
SEARCH_IFRAME_ID = "searchIframe"

# --- リクエストヘッダ ---
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)
USER_AGENT: str = os.getenv("PLACE_RANK_USER_AGENT") or DEFAULT_USER_AGENT
ACCEPT_LANGUAGE = "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7"
ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
REFERER = "https://map.naver.com/"

# --- リクエスト設定 ---
REQUEST_TIMEOUT: float = float(os.getenv("PLACE_RANK_TIMEOUT", "10"))  # 秒（2 回の取得の合計）
READ_CHUNK_SIZE = 8192  # 本文読み込みの単位（バイト）

# --- ログ ---
# 未設定ならファイル出力しない
LOG_DIR: Path | None = (
    Path(os.environ["PLACE_RANK_LOG_DIR"]) if os.getenv("PLACE_RANK_LOG_DIR") else None
)

# --- セレクタ（上から優先） ---
PLACE_LIST_SELECTORS = (
    "div.Ryr1F#_pcmap_list_scroll_container > ul > li",
    "li.VLTHu",
    "li.UEzoS",
    "ul._3l82D > li",
    "ul._1s-8x > li",
    "div.place_section > ul > li",
    ".api_subject_bx > ul > li",
    "div._1EKsQ li.YjsMB",
)

AD_SELECTORS = (
    ".gU6bV._DHlh",
    ".ad_area",
    ".ad-badge",
    ".OErwL",
    "span.OErwL",
)

SHOP_NAME_SELECTORS = (
    "a.place_bluelink span.YwYLL",
    "span.YwYLL",
    ".place_bluelink.tWIhh > span.O_Uah",
    "span.place_bluelink",
    "span.TYaxT",
    "span.LDgIH",
    "span.OXiLu",
    "span._3Apve",
    "span.place_bluelink._3Apve",
    ".place_bluelink",
    "a.place_link > span",
)

DEFAULT_SELECTORS = SelectorSet(
    place_list=PLACE_LIST_SELECTORS,
    ad=AD_SELECTORS,
    shop_name=SHOP_NAME_SELECTORS,
)
