"""
列判定ルール
ヘッダー行のキーワードから各列の意味（氏名・パスワード・権限など）を決める
"""
import re
from enum import Enum
from typing import Dict, List, Sequence, Tuple

_WHITESPACE_RE = re.compile(r"\s+")


class ColumnRole(str, Enum):
    NAME = "name"
    PASSWORD = "password"
    ROLE = "role"
    TEAM = "team"
    GROUP = "group"
    NICKNAME = "nickname"
    UNKNOWN = "unknown"


HeaderRules = List[Tuple[ColumnRole, Tuple[str, ...]]]

NAME_KEYWORDS = ("名前", "氏名")
NICKNAME_KEYWORDS = ("あだ名", "ニックネーム", "Nickname", "通称", "呼称")

# 名簿シート用（上から順に評価）
ROSTER_HEADER_RULES: HeaderRules = [
    (ColumnRole.NAME, NAME_KEYWORDS),
    (ColumnRole.PASSWORD, ("パスワード", "PASS")),
    (ColumnRole.ROLE, ("権限",)),
    (ColumnRole.TEAM, ("チーム",)),
    (ColumnRole.GROUP, ("グループ", "Group")),
    (ColumnRole.NICKNAME, NICKNAME_KEYWORDS),
]

# 回答シート用（氏名列 → あだ名列 の優先順）
RESPONSE_HEADER_RULES: HeaderRules = [
    (ColumnRole.NAME, NAME_KEYWORDS + ("Name", "name")),
    (ColumnRole.NICKNAME, ("あだ名", "ニックネーム", "Nickname", "通称")),
]

# 回答シートでヘッダーが見つからない場合に使う列（B列）
RESPONSE_FALLBACK_COLUMN = 1


def _matches(cell: str, keywords: Sequence[str]) -> bool:
    return any(keyword in cell for keyword in keywords)


def classify_header_cell(cell: str, rules: HeaderRules = ROSTER_HEADER_RULES) -> ColumnRole:
    """ヘッダーセル1つを最初に一致したルールの列種別に分類する"""
    for role, keywords in rules:
        if _matches(cell or "", keywords):
            return role
    return ColumnRole.UNKNOWN


def detect_columns(header: Sequence[str], rules: HeaderRules = ROSTER_HEADER_RULES) -> Dict[ColumnRole, int]:
    """
    各列種別について、キーワードを含む最初のヘッダーセルの位置を返す

    見つからない列種別は -1。1つのセルが複数の種別に一致してもよい。
    """
    found = {}
    for role, keywords in rules:
        found[role] = next(
            (i for i, cell in enumerate(header) if _matches(cell or "", keywords)),
            -1,
        )
    return found


def find_response_name_column(header: Sequence[str]) -> int:
    """
    回答シートで氏名として扱う列を決める

    1. 氏名系のヘッダー（空白を除いて判定）
    2. あだ名系のヘッダー
    3. B列（2列以上ある場合）
    4. 該当なし → -1
    """
    # 大文字小文字は区別したまま、空白だけ除去して判定する
    # ("Nickname" は "name" を含むため 1. で一致する)
    stripped = [_WHITESPACE_RE.sub("", cell or "") for cell in header]
    found = detect_columns(stripped, RESPONSE_HEADER_RULES)
    for role, _ in RESPONSE_HEADER_RULES:
        if found[role] != -1:
            return found[role]
    if len(header) > RESPONSE_FALLBACK_COLUMN:
        return RESPONSE_FALLBACK_COLUMN
    return -1
