"""
回答状況サービスモジュール
各フォームの回答シートから回答者を集め、名簿のユーザーと照合する
"""
from typing import Set

from formboard.models import FormDescriptor, UserRecord
from formboard.services.columns import find_response_name_column
from formboard.services.sheets_client import SheetsDataSource, sheet_range
from formboard.utils.names import normalize_name


def response_range(form: FormDescriptor) -> str:
    return sheet_range(form.sheet_name)


def resolve_submitters(source: SheetsDataSource, form: FormDescriptor) -> Set[str]:
    """
    フォームの回答シートから回答者（正規化済み氏名）の集合を作る

    回答シートが取得できない・回答が無い場合は空集合（未提出扱い）。
    """
    grid = source.fetch(form.form_id, response_range(form))
    if len(grid) < 2:
        return set()
    name_idx = find_response_name_column(grid[0])
    if name_idx == -1:
        return set()
    submitters = set()
    for row in grid[1:]:
        if name_idx < len(row) and row[name_idx].strip():
            submitters.add(normalize_name(row[name_idx]))
    return submitters


def is_submitted(user: UserRecord, submitters: Set[str]) -> bool:
    """
    ユーザーが回答済みかどうか

    1. 氏名の完全一致
    2. あだ名の完全一致
    3. 回答者名に氏名かあだ名が部分文字列として含まれる

    3. は「山田太郎（営業）」のような入力を拾うためのもの。短い氏名は
    無関係な回答者名に含まれて誤って提出済みになることがある。
    """
    name = user.normalized_name
    nickname = user.normalized_nickname
    if name and name in submitters:
        return True
    if nickname and nickname in submitters:
        return True
    keys = [k for k in (name, nickname) if k]
    return any(key in entry for entry in submitters for key in keys)
