"""
名簿サービスモジュール
名簿シートのグリッドを UserRecord に変換し、権限の分類を提供
"""
from enum import Enum
from typing import Dict, List, Optional, Sequence

from formboard.models import UserRecord
from formboard.services.columns import ROSTER_HEADER_RULES, ColumnRole, detect_columns
from formboard.utils.names import normalize_name, safe_trim

DEFAULT_ROLE = "一般"

# 権限文字列は部分一致で判定する（列挙型ではない）
GLOBAL_ADMIN_KEYWORDS = ("全体", "管理", "admin")
TEAM_LEADER_KEYWORDS = ("リーダー", "Leader")


class RoleCategory(str, Enum):
    GLOBAL_ADMIN = "global_admin"
    TEAM_LEADER = "team_leader"
    GENERAL = "general"


def is_global_admin(role: str) -> bool:
    return any(keyword in (role or "") for keyword in GLOBAL_ADMIN_KEYWORDS)


def is_team_leader(role: str) -> bool:
    return any(keyword in (role or "") for keyword in TEAM_LEADER_KEYWORDS)


def classify_role(role: str) -> RoleCategory:
    """全体管理 → チームリーダー → 一般 の順で分類"""
    if is_global_admin(role):
        return RoleCategory.GLOBAL_ADMIN
    if is_team_leader(role):
        return RoleCategory.TEAM_LEADER
    return RoleCategory.GENERAL


def _cell(row: Sequence[str], idx: int) -> str:
    if idx < 0 or idx >= len(row):
        return ""
    return row[idx] or ""


def parse_roster(grid: List[List[str]]) -> List[UserRecord]:
    """
    名簿シートのグリッドをユーザー一覧に変換する

    1行目をヘッダーとして列位置を判定する。氏名列が見つからなければA列を使う。
    正規化後の氏名が空の行は除外し、同じ氏名が複数あれば後の行で上書きする。

    Args:
        grid: 名簿シートの値（ヘッダー行 + データ行）

    Returns:
        UserRecord のリスト（ヘッダー + 1行未満なら空）
    """
    if len(grid) < 2:
        return []

    cols = detect_columns(grid[0], ROSTER_HEADER_RULES)
    name_idx = cols[ColumnRole.NAME] if cols[ColumnRole.NAME] != -1 else 0

    users: Dict[str, UserRecord] = {}
    for offset, row in enumerate(grid[1:]):
        raw_name = _cell(row, name_idx)
        normalized = normalize_name(raw_name)
        if not normalized:
            continue
        users[normalized] = UserRecord(
            raw_name=raw_name,
            normalized_name=normalized,
            normalized_nickname=normalize_name(_cell(row, cols[ColumnRole.NICKNAME])),
            role=safe_trim(_cell(row, cols[ColumnRole.ROLE])) or DEFAULT_ROLE,
            team=safe_trim(_cell(row, cols[ColumnRole.TEAM])),
            group=safe_trim(_cell(row, cols[ColumnRole.GROUP])),
            password=_cell(row, cols[ColumnRole.PASSWORD]),
            row_number=offset + 2,
        )
    return list(users.values())


def find_user(users: List[UserRecord], name: str) -> Optional[UserRecord]:
    """正規化した氏名で名簿から1人を探す"""
    key = normalize_name(name)
    if not key:
        return None
    return next((u for u in users if u.normalized_name == key), None)
