"""
表示範囲（権限）のテスト
"""
from conftest import FORM_LIST, MANAGEMENT_ID, PARTY_ID, ROSTER

from formboard.models import UserRecord
from formboard.services.form_registry import parse_form_registry
from formboard.services.roster import find_user, parse_roster
from formboard.services.visibility import find_form, is_form_creator, visible_users

USERS = parse_roster(ROSTER)
FORMS = parse_form_registry(FORM_LIST, MANAGEMENT_ID)


def _names(users):
    return [u.normalized_name for u in users]


def test_global_admin_sees_everyone_viewer_first():
    viewer = find_user(USERS, "Sprach")
    result = visible_users(viewer, USERS)
    assert len(result) == len(USERS)
    assert result[0].normalized_name == "sprach"
    assert set(_names(result)) == set(_names(USERS))


def test_global_admin_ignores_target_form():
    viewer = find_user(USERS, "Sprach")
    assert len(visible_users(viewer, USERS, PARTY_ID, FORMS)) == len(USERS)
    assert len(visible_users(viewer, USERS, "unknown-form", FORMS)) == len(USERS)


def test_team_leader_sees_own_team():
    viewer = find_user(USERS, "田中太郎")
    result = visible_users(viewer, USERS)
    assert _names(result)[0] == "田中太郎"
    assert set(_names(result)) == {"sprach", "田中太郎", "佐藤花子"}


def test_admin_leader_role_is_treated_as_admin():
    users = parse_roster([
        ["名前", "権限", "チーム"],
        ["田中", "管理リーダー", "A班"],
        ["佐藤", "一般", "A班"],
        ["鈴木", "一般", "B班"],
    ])
    viewer = find_user(users, "田中")
    assert set(_names(visible_users(viewer, users))) == {"田中", "佐藤", "鈴木"}


def test_team_leader_without_team_sees_only_self():
    viewer = find_user(USERS, "山田")
    assert _names(visible_users(viewer, USERS)) == ["山田"]


def test_general_user_sees_only_self():
    viewer = find_user(USERS, "佐藤花子")
    assert _names(visible_users(viewer, USERS)) == ["佐藤花子"]


def test_general_user_without_team_gets_one_record():
    viewer = find_user(USERS, "高橋")
    assert _names(visible_users(viewer, USERS)) == ["高橋"]


def test_target_form_creator_sees_everyone():
    # 鈴木一郎は「健康診断」（管理シートのタブ）の作成者
    viewer = find_user(USERS, "鈴木一郎")
    result = visible_users(viewer, USERS, MANAGEMENT_ID, FORMS)
    assert len(result) == len(USERS)
    assert result[0].normalized_name == "鈴木一郎"


def test_creator_of_other_form_sees_only_self():
    viewer = find_user(USERS, "鈴木一郎")
    assert _names(visible_users(viewer, USERS, PARTY_ID, FORMS)) == ["鈴木一郎"]
    assert _names(visible_users(viewer, USERS, None, FORMS)) == ["鈴木一郎"]


def test_unknown_viewer_gets_empty_result():
    stranger = UserRecord(raw_name="部外者", normalized_name="部外者", role="管理")
    assert visible_users(stranger, USERS) == []


def test_others_sorted_by_japanese_collation():
    users = parse_roster([
        ["名前", "権限"],
        ["たなか", "管理"],
        ["サトウ", "一般"],
        ["あべ", "一般"],
        ["イトウ", "一般"],
    ])
    viewer = find_user(users, "たなか")
    assert _names(visible_users(viewer, users)) == ["たなか", "あべ", "イトウ", "サトウ"]


def test_admin_view_orders_kanji_and_kana_names():
    users = parse_roster([
        ["名前", "権限"],
        ["Sprach", "管理"],
        ["佐藤", "一般"],
        ["山田", "一般"],
        ["田中", "一般"],
        ["鈴木", "一般"],
        ["高橋", "一般"],
        ["かz", "一般"],
        ["がa", "一般"],
    ])
    viewer = find_user(users, "Sprach")
    assert _names(visible_users(viewer, users)) == [
        "sprach", "がa", "かz", "高橋", "佐藤", "山田", "田中", "鈴木",
    ]


def test_find_form_and_creator():
    assert find_form(FORMS, PARTY_ID).form_name == "懇親会出欠"
    assert find_form(FORMS, None) is None
    assert find_form(FORMS, "missing") is None
    sprach = find_user(USERS, "Sprach")
    assert is_form_creator(sprach, find_form(FORMS, PARTY_ID))
    assert not is_form_creator(sprach, None)
