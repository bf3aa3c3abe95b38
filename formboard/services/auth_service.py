"""
認証サービスモジュール
名簿シートの氏名・パスワード列によるログイン判定とパスワード変更を提供

パスワードは名簿シートに平文で保存され、平文のまま比較している。
既存運用との互換のための挙動であり、この方式を他の機能に広げないこと。
"""
import sys
from typing import Optional

from formboard import config
from formboard.models import AuthenticatedUser
from formboard.services.columns import ROSTER_HEADER_RULES, ColumnRole, detect_columns
from formboard.services.roster import find_user, parse_roster
from formboard.services.sheets_client import SheetsDataSource, column_letter, sheet_range


def _fetch_roster_grid(source: SheetsDataSource, management_id: str):
    return source.fetch(management_id, sheet_range(config.ROSTER_SHEET_NAME))


def _has_credential_columns(header) -> bool:
    cols = detect_columns(header, ROSTER_HEADER_RULES)
    return cols[ColumnRole.NAME] != -1 and cols[ColumnRole.PASSWORD] != -1


def authenticate_user(
    name: str,
    password: str,
    *,
    source: SheetsDataSource,
    management_id: Optional[str] = None,
) -> Optional[AuthenticatedUser]:
    """
    氏名とパスワードでログイン判定する

    Args:
        name: 入力された氏名（空白・大文字小文字は無視）
        password: 入力されたパスワード（完全一致）

    Returns:
        一致したユーザー情報。不一致・名簿なし・管理シートID未設定なら None
    """
    management_id = management_id or config.GOOGLE_MANAGEMENT_SHEET_ID
    if not management_id or not name or not password:
        return None

    grid = _fetch_roster_grid(source, management_id)
    if len(grid) < 2 or not _has_credential_columns(grid[0]):
        return None

    user = find_user(parse_roster(grid), name)
    if user is None or user.password != password:
        print(f"[Auth] ログイン失敗: {name!r}")
        return None

    return AuthenticatedUser(
        id=user.normalized_name,
        name=user.raw_name,
        role=user.role,
        team=user.team,
        group=user.group,
    )


def update_password(
    name: str,
    new_password: str,
    *,
    source: SheetsDataSource,
    management_id: Optional[str] = None,
) -> bool:
    """
    名簿シートのパスワードセルを上書きする

    同時に同じユーザーのパスワードを変更した場合は後勝ちになる。

    Returns:
        成功した場合は True、失敗した場合は False
    """
    management_id = management_id or config.GOOGLE_MANAGEMENT_SHEET_ID
    if not management_id:
        return False

    grid = _fetch_roster_grid(source, management_id)
    if len(grid) < 2 or not _has_credential_columns(grid[0]):
        return False

    user = find_user(parse_roster(grid), name)
    if user is None:
        return False

    pass_idx = detect_columns(grid[0], ROSTER_HEADER_RULES)[ColumnRole.PASSWORD]
    cell = sheet_range(config.ROSTER_SHEET_NAME, f"{column_letter(pass_idx)}{user.row_number}")
    try:
        source.update(management_id, cell, [[new_password]])
    except Exception as e:
        print(f"[Auth] パスワード更新エラー: {e}")
        sys.stdout.flush()
        return False
    print(f"[Auth] パスワードを更新しました: {user.normalized_name}")
    return True
