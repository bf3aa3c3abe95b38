"""
表示範囲サービスモジュール
閲覧者の権限に応じて、提出状況を表示してよいユーザーを決める
"""
from typing import List, Optional

from formboard.models import FormDescriptor, UserRecord
from formboard.services.roster import RoleCategory, classify_role
from formboard.utils.names import collation_key, normalize_name


def find_form(forms: List[FormDescriptor], form_id: Optional[str]) -> Optional[FormDescriptor]:
    """フォームIDで最初に一致したフォームを返す"""
    if not form_id:
        return None
    return next((f for f in forms if f.form_id == form_id), None)


def is_form_creator(viewer: UserRecord, form: Optional[FormDescriptor]) -> bool:
    return form is not None and normalize_name(form.creator) == viewer.normalized_name


def visible_users(
    viewer: UserRecord,
    all_users: List[UserRecord],
    target_form_id: Optional[str] = None,
    forms: Optional[List[FormDescriptor]] = None,
) -> List[UserRecord]:
    """
    閲覧者に見せるユーザー一覧を返す

    判定順:
        1. 全体管理者（権限に「全体」「管理」「admin」）→ 全員
        2. 指定フォームの作成者 → 全員
        3. チームリーダー → 同じチームのメンバー（チーム未設定なら本人のみ）
        4. 一般 → 本人のみ

    閲覧者本人を先頭に、残りは氏名の日本語順で並べる。
    閲覧者が名簿にいなければ空リスト。
    """
    if not any(u.normalized_name == viewer.normalized_name for u in all_users):
        return []

    category = classify_role(viewer.role)
    if category == RoleCategory.GLOBAL_ADMIN or is_form_creator(viewer, find_form(forms or [], target_form_id)):
        targets = list(all_users)
    elif category == RoleCategory.TEAM_LEADER and viewer.team:
        targets = [u for u in all_users if u.team == viewer.team]
    else:
        targets = [viewer]

    return sorted(
        targets,
        key=lambda u: (
            u.normalized_name != viewer.normalized_name,
            collation_key(u.normalized_name),
            u.normalized_name,
        ),
    )
