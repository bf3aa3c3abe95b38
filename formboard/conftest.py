import pytest

from formboard.utils.memory_sheets import InMemorySheets

MANAGEMENT_ID = "MGMT_SHEET_ID_FOR_TESTS_000000000000"
PARTY_ID = "RESP_PARTY_0123456789abcdefghij"
SURVEY_ID = "RESP_SURVEY_0123456789abcdefghi"

ROSTER = [
    ["名前", "パスワード", "権限", "チーム", "グループ", "あだ名"],
    ["Sprach", "secret", "管理", "A班", "44", ""],
    ["田中 太郎", "pw1", "リーダー", "A班", "44", "たなか"],
    ["佐藤　花子", "pw2", "一般", "A班", "45", ""],
    ["鈴木 一郎", "pw3", "一般", "B班", "46", "いっちゃん"],
    ["山田", "pw4", "Leader", "", "45", ""],
    ["高橋", "pw5", "", "", "", ""],
]

FORM_LIST = [
    ["フォーム名", "回答シート", "フォームURL", "対象グループ", "締切", "作成者"],
    ["懇親会出欠", f"https://docs.google.com/spreadsheets/d/{PARTY_ID}/edit", "https://forms.gle/abc", "44,45", "1/31", "Sprach"],
    ["健康診断", "健診回答", "https://forms.gle/def", "", "2/15", "鈴木 一郎"],
    ["アンケート", SURVEY_ID, "https://forms.gle/ghi", "46", "", ""],
]

PARTY_RESPONSES = [
    ["タイムスタンプ", "お名前"],
    ["2024-01-01", "Sprach"],
    ["2024-01-02", "佐藤 花子"],
]

HEALTH_RESPONSES = [
    ["タイムスタンプ", "メール", "ニックネーム"],
    ["2024-02-01", "a@example.com", "たなか"],
    ["2024-02-02", "b@example.com", "鈴木一郎（営業）"],
]


@pytest.fixture
def sheets():
    s = InMemorySheets()
    s.put(MANAGEMENT_ID, ROSTER, "名簿")
    s.put(MANAGEMENT_ID, FORM_LIST, "フォーム一覧")
    s.put(MANAGEMENT_ID, HEALTH_RESPONSES, "健診回答")
    s.put(PARTY_ID, PARTY_RESPONSES)
    # アンケートの回答シートは権限不足で読めない想定
    s.failing.add(SURVEY_ID)
    return s
