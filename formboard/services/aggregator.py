"""
提出状況集計モジュール
名簿・フォーム一覧・各回答シートを突き合わせ、ユーザー × フォームの提出状況を組み立てる
"""
import sys
from typing import Dict, List, Optional, Set

from formboard import config
from formboard.models import FormDescriptor, FormStatus, SubmissionStatus, UserRecord
from formboard.services.form_registry import is_required_for, load_forms
from formboard.services.roster import find_user, parse_roster
from formboard.services.sheets_client import SheetsDataSource, sheet_range
from formboard.services.submissions import is_submitted, resolve_submitters
from formboard.services.visibility import visible_users


def load_roster(source: SheetsDataSource, management_id: str) -> List[UserRecord]:
    grid = source.fetch(management_id, sheet_range(config.ROSTER_SHEET_NAME))
    return parse_roster(grid)


def _form_status(form: FormDescriptor, user: UserRecord, submitters: Set[str]) -> FormStatus:
    return FormStatus(
        form_id=form.form_id,
        form_name=form.form_name,
        form_url=form.form_url,
        deadline=form.deadline,
        submitted=is_submitted(user, submitters),
        is_required=is_required_for(form, user.group),
        creator=form.creator,
    )


def build_statuses(
    users: List[UserRecord],
    forms: List[FormDescriptor],
    submissions: Dict[str, Set[str]],
) -> List[SubmissionStatus]:
    """表示対象ユーザーごとに、全フォーム分の提出状況をフォーム一覧の順で並べる"""
    statuses = []
    for user in users:
        statuses.append(SubmissionStatus(
            user_id=user.normalized_name,
            user_name=user.raw_name,
            user_role=user.role,
            user_team=user.team,
            user_group=user.group,
            user_email=user.email,
            forms=[_form_status(f, user, submissions.get(f.form_name, set())) for f in forms],
        ))
    return statuses


def calculate_submission_status(
    viewer_name: str,
    target_form_id: Optional[str] = None,
    *,
    source: SheetsDataSource,
    management_id: Optional[str] = None,
) -> List[SubmissionStatus]:
    """
    閲覧者から見た提出状況一覧を計算する

    Args:
        viewer_name: ログイン中のユーザー名
        target_form_id: フォーム詳細画面で見ているフォームのID（作成者判定に使う）
        source: スプレッドシートのデータソース
        management_id: 管理シートID（省略時は設定値）

    Returns:
        表示対象ユーザーごとの SubmissionStatus。閲覧者が名簿にいなければ空リスト

    Raises:
        ConfigurationError: 管理シートIDが未設定の場合
    """
    management_id = management_id or config.require_management_sheet_id()

    all_users = load_roster(source, management_id)
    forms = load_forms(source, management_id)

    viewer = find_user(all_users, viewer_name)
    if viewer is None:
        print(f"[Status] 名簿に存在しない閲覧者: {viewer_name!r}")
        sys.stdout.flush()
        return []

    target_users = visible_users(viewer, all_users, target_form_id, forms)

    # 回答者集合はフォーム名をキーに1回の呼び出し中だけ保持する
    # 同名フォームが複数あると後の行の回答シートで上書きされる
    submissions: Dict[str, Set[str]] = {}
    for form in forms:
        submissions[form.form_name] = resolve_submitters(source, form)

    return build_statuses(target_users, forms, submissions)
