"""
Google Sheetsサービスモジュール
スプレッドシートの読み取り・セル更新・行追加を提供

取得失敗（権限不足・存在しないシート・通信エラー）は空のグリッドとして扱い、
呼び出し元の集計処理を止めない。認証情報の不備だけは ConfigurationError で即座に失敗させる。
"""
import json
import os
import sys
import threading
from typing import List, Optional, Protocol, Tuple

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from formboard import config
from formboard.errors import ConfigurationError

Grid = List[List[str]]

TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsDataSource(Protocol):
    """スプレッドシートへの最小限のアクセス手段"""

    def fetch(self, spreadsheet_id: str, range_spec: str) -> Grid:
        ...

    def update(self, spreadsheet_id: str, cell_range: str, values: Grid) -> None:
        ...

    def append(self, spreadsheet_id: str, range_spec: str, rows: Grid) -> None:
        ...


# =========================
# A1表記ヘルパー
# =========================

def column_letter(index: int) -> str:
    """0始まりの列番号をA1表記の列名に変換（0 → A, 25 → Z, 26 → AA）"""
    if index < 0:
        raise ValueError(f"column index must be >= 0: {index}")
    letters = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def column_index(letters: str) -> int:
    """A1表記の列名を0始まりの列番号に変換"""
    n = 0
    for ch in letters.upper():
        n = n * 26 + (ord(ch) - 64)
    return n - 1


def sheet_range(sheet_name: Optional[str], cells: str = "A:Z") -> str:
    """'シート名!A:Z' 形式の範囲文字列を作る。シート名が無ければ既定タブ"""
    if sheet_name:
        return f"{sheet_name}!{cells}"
    return cells


def split_range(range_spec: str) -> Tuple[Optional[str], str]:
    """'シート名!A:Z' を (シート名, 'A:Z') に分割する"""
    if "!" in range_spec:
        sheet, cells = range_spec.rsplit("!", 1)
        return sheet.strip("'"), cells
    return None, range_spec


# =========================
# 認証情報
# =========================

def load_service_account_credentials(scopes: Optional[List[str]] = None):
    """
    サービスアカウント認証情報を読み込む

    優先順位:
        1. GOOGLE_SERVICE_ACCOUNT_JSON（JSON文字列）
        2. GOOGLE_SERVICE_ACCOUNT_PATH（JSONファイル）
        3. GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_PRIVATE_KEY

    Raises:
        ConfigurationError: いずれも未設定、または内容が不正な場合
    """
    scopes = scopes or config.SHEETS_SCOPES
    try:
        if config.GOOGLE_SERVICE_ACCOUNT_JSON:
            print("[Sheets] Using credentials from GOOGLE_SERVICE_ACCOUNT_JSON environment variable")
            try:
                info = json.loads(config.GOOGLE_SERVICE_ACCOUNT_JSON)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in GOOGLE_SERVICE_ACCOUNT_JSON: {e}") from e
            return service_account.Credentials.from_service_account_info(info, scopes=scopes)

        if config.GOOGLE_SERVICE_ACCOUNT_PATH:
            print(f"[Sheets] Using credentials from file: {config.GOOGLE_SERVICE_ACCOUNT_PATH}")
            if not os.path.exists(config.GOOGLE_SERVICE_ACCOUNT_PATH):
                raise ConfigurationError(
                    f"Service account file not found: {config.GOOGLE_SERVICE_ACCOUNT_PATH}"
                )
            return service_account.Credentials.from_service_account_file(
                config.GOOGLE_SERVICE_ACCOUNT_PATH, scopes=scopes
            )

        if config.GOOGLE_SERVICE_ACCOUNT_EMAIL and config.GOOGLE_PRIVATE_KEY:
            print(f"[Sheets] Using credentials for {config.GOOGLE_SERVICE_ACCOUNT_EMAIL}")
            info = {
                "type": "service_account",
                "client_email": config.GOOGLE_SERVICE_ACCOUNT_EMAIL,
                "private_key": config.normalize_private_key(config.GOOGLE_PRIVATE_KEY),
                "token_uri": TOKEN_URI,
            }
            return service_account.Credentials.from_service_account_info(info, scopes=scopes)
    except (ValueError, GoogleAuthError) as e:
        raise ConfigurationError(f"Invalid service account credentials: {e}") from e

    raise ConfigurationError("Credentials missing: set GOOGLE_SERVICE_ACCOUNT_JSON, "
                             "GOOGLE_SERVICE_ACCOUNT_PATH or GOOGLE_SERVICE_ACCOUNT_EMAIL/GOOGLE_PRIVATE_KEY")


# =========================
# Google Sheets API 実装
# =========================

class GoogleSheetsDataSource:
    """
    Sheets API v4 を使った SheetsDataSource 実装

    認証情報だけをプロセス内で使い回し、APIクライアント（httplib2.Http を保持する）は
    呼び出しごとに作る。スレッド間でクライアントを共有しないこと。
    """

    def __init__(self, credentials=None):
        self._credentials = credentials
        self._credentials_lock = threading.Lock()

    def _get_credentials(self):
        with self._credentials_lock:
            if self._credentials is None:
                self._credentials = load_service_account_credentials()
            return self._credentials

    def _get_service(self):
        return build("sheets", "v4", credentials=self._get_credentials(), cache_discovery=False)

    def fetch(self, spreadsheet_id: str, range_spec: str) -> Grid:
        """
        指定範囲の値を文字列グリッドとして取得する

        取得に失敗した場合は空リストを返す（例外にしない）。
        """
        service = self._get_service()
        try:
            result = service.spreadsheets().values().get(
                spreadsheetId=spreadsheet_id, range=range_spec
            ).execute()
        except HttpError as e:
            status = getattr(e.resp, "status", "?")
            print(f"[Sheets] データ取得失敗 ID:{spreadsheet_id} Range:{range_spec} (HTTP {status})")
            sys.stdout.flush()
            return []
        except Exception as e:
            print(f"[Sheets] データ取得失敗 ID:{spreadsheet_id} Range:{range_spec}: {e}")
            sys.stdout.flush()
            return []
        values = result.get("values", [])
        return [["" if cell is None else str(cell) for cell in row] for row in values]

    def update(self, spreadsheet_id: str, cell_range: str, values: Grid) -> None:
        """セル範囲を上書きする（入力値はそのまま保存）"""
        service = self._get_service()
        service.spreadsheets().values().update(
            spreadsheetId=spreadsheet_id,
            range=cell_range,
            valueInputOption="RAW",
            body={"values": values},
        ).execute()

    def append(self, spreadsheet_id: str, range_spec: str, rows: Grid) -> None:
        """範囲の末尾に行を追加する（入力値はシート上で解釈される）"""
        service = self._get_service()
        service.spreadsheets().values().append(
            spreadsheetId=spreadsheet_id,
            range=range_spec,
            valueInputOption="USER_ENTERED",
            body={"values": rows},
        ).execute()
