"""
フォーム一覧サービスモジュール
管理シートの「フォーム一覧」を FormDescriptor に変換し、フォームの登録（行追加）を提供
"""
import re
import sys
from typing import List, Optional

from formboard import config
from formboard.models import FormDescriptor, FormRegistration
from formboard.services.sheets_client import SheetsDataSource, sheet_range
from formboard.utils.names import safe_trim

_SPREADSHEET_ID_RE = re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)")
_GROUP_SPLIT_RE = re.compile(r"[,、\s]+")

# スプレッドシートIDは30文字以上、タブ名は短いという経験則
SPREADSHEET_ID_MIN_LENGTH = 30

# フォーム一覧の列（ヘッダー判定はせず固定位置）
COL_NAME, COL_SHEET, COL_FORM_URL, COL_TARGET, COL_DEADLINE, COL_CREATOR = range(6)


def extract_spreadsheet_id(value: Optional[str]) -> str:
    """URL中の /spreadsheets/d/<ID>/ を取り出す。URLでなければそのまま返す"""
    if not value:
        return ""
    m = _SPREADSHEET_ID_RE.search(value)
    return m.group(1) if m else value


def looks_like_url(value: str) -> bool:
    return "http" in value or "spreadsheets" in value


def is_sheet_tab_name(raw: str) -> bool:
    """
    フォーム一覧のID列がタブ名かどうか

    URL形式でなく、かつ30文字未満ならタブ名とみなす（経験則であり保証ではない）。
    """
    return not looks_like_url(raw) and len(extract_spreadsheet_id(raw)) < SPREADSHEET_ID_MIN_LENGTH


def parse_target_groups(text: Optional[str]) -> List[str]:
    """'44,45' / '44、45' / '44 45' を ['44', '45'] に分割"""
    if not text:
        return []
    return [g.strip() for g in _GROUP_SPLIT_RE.split(text) if g.strip()]


def is_required_for(form: FormDescriptor, group: str) -> bool:
    """対象グループ指定が無ければ全員必須、あればグループ完全一致のときのみ必須"""
    if not form.target_groups:
        return True
    return group in parse_target_groups(form.target_groups)


def _cell(row: List[str], idx: int) -> str:
    return safe_trim(row[idx]) if idx < len(row) else ""


def parse_form_registry(grid: List[List[str]], management_id: str) -> List[FormDescriptor]:
    """
    フォーム一覧シートのグリッドをフォーム定義のリストに変換する

    列: フォーム名, 回答シートURL/ID/タブ名, フォームURL, 対象グループ, 締切, 作成者
    フォーム名かID列が空の行は除外する。ID列がタブ名の場合は管理シートIDを使い、
    タブ名を sheet_name に保持する。

    Args:
        grid: フォーム一覧シートの値（1行目はヘッダー）
        management_id: 管理スプレッドシートID

    Returns:
        FormDescriptor のリスト（シートの行順）
    """
    forms = []
    for row in grid[1:]:
        name = _cell(row, COL_NAME)
        raw_id = _cell(row, COL_SHEET)
        if not name or not raw_id:
            continue
        extracted = extract_spreadsheet_id(raw_id)
        tab = is_sheet_tab_name(raw_id)
        forms.append(FormDescriptor(
            form_id=management_id if tab else extracted,
            sheet_name=extracted if tab else None,
            form_name=name,
            form_url=_cell(row, COL_FORM_URL),
            target_groups=_cell(row, COL_TARGET),
            deadline=_cell(row, COL_DEADLINE),
            creator=_cell(row, COL_CREATOR),
        ))
    return forms


def load_forms(source: SheetsDataSource, management_id: str) -> List[FormDescriptor]:
    grid = source.fetch(management_id, sheet_range(config.FORM_LIST_SHEET_NAME))
    return parse_form_registry(grid, management_id)


def register_form(request: FormRegistration, *, source: SheetsDataSource, management_id: str) -> None:
    """
    フォーム一覧の末尾にフォームを1行追加する

    Raises:
        ValueError: フォーム名・回答シートURL・作成者のいずれかが空の場合
    """
    if not request.name.strip() or not request.sheet_url.strip() or not request.creator.strip():
        raise ValueError("必須項目が足りません")
    row = [
        request.name.strip(),
        extract_spreadsheet_id(request.sheet_url.strip()),
        request.form_url.strip(),
        request.target.strip(),
        request.deadline.strip(),
        request.creator.strip(),
    ]
    source.append(management_id, sheet_range(config.FORM_LIST_SHEET_NAME, "A:F"), [row])
    print(f"[Forms] フォームを登録しました: {row[0]} (作成者: {row[5]})")
    sys.stdout.flush()
