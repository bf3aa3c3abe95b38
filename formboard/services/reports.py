"""
集計レポートモジュール
ダッシュボード・フォーム詳細画面向けに提出状況から提出率やチーム別集計を作る
"""
from typing import Dict, Iterable, List, Optional

from formboard.models import FormStatus, SubmissionStatus, TeamSummary
from formboard.utils.names import collation_key, normalize_name

NO_TEAM_LABEL = "チーム未所属"


def _find_form(status: SubmissionStatus, form_id: str) -> Optional[FormStatus]:
    return next((f for f in status.forms if f.form_id == form_id), None)


def _percent(done: int, total: int) -> int:
    if total == 0:
        return 0
    # JavaScript の Math.round と同じく .5 は切り上げ
    return int(done * 100 / total + 0.5)


def submission_rate(status: SubmissionStatus, form_ids: Optional[Iterable[str]] = None) -> int:
    """
    ユーザーの提出率（%）

    提出必須のフォームのみを分母にする。form_ids を指定した場合はその中だけで計算する。
    """
    ids = set(form_ids) if form_ids is not None else None
    required = [f for f in status.forms if f.is_required and (ids is None or f.form_id in ids)]
    return _percent(sum(1 for f in required if f.submitted), len(required))


def list_teams(statuses: List[SubmissionStatus]) -> List[str]:
    return sorted({s.user_team for s in statuses if s.user_team})


def managed_forms(statuses: List[SubmissionStatus]) -> List[FormStatus]:
    """
    閲覧者（先頭のユーザー）が作成したフォーム一覧を新しい順に返す

    フォーム一覧シートは上から古い順に並んでいる前提。
    """
    if not statuses:
        return []
    me = normalize_name(statuses[0].user_name)
    forms = [f for f in statuses[0].forms if f.creator and normalize_name(f.creator) == me]
    return list(reversed(forms))


def team_summaries(statuses: List[SubmissionStatus], form_id: str) -> List[TeamSummary]:
    """
    フォーム1件についてチーム別の提出状況をまとめる

    対象外（提出不要）のメンバーは集計・一覧から除く。
    メンバーは未提出者を先に、チームは日本語順に並べる。
    """
    teams: Dict[str, List[SubmissionStatus]] = {}
    for status in statuses:
        form = _find_form(status, form_id)
        if form is None:
            continue
        teams.setdefault(status.user_team or NO_TEAM_LABEL, []).append(status)

    summaries = []
    for team, members in teams.items():
        required = [m for m in members if _find_form(m, form_id).is_required]
        submitted = sum(1 for m in required if _find_form(m, form_id).submitted)
        # 安定ソートなので同じ提出状態の中では元の並び（閲覧者が先頭）を保つ
        required.sort(key=lambda m: _find_form(m, form_id).submitted)
        summaries.append(TeamSummary(
            team=team,
            total=len(required),
            submitted=submitted,
            rate=_percent(submitted, len(required)),
            members=required,
        ))
    summaries.sort(key=lambda s: (collation_key(s.team), s.team))
    return summaries
