"""
データモデル定義
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON では camelCase で入出力するモデル"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRecord(BaseModel):
    """名簿の1行"""
    raw_name: str
    normalized_name: str
    normalized_nickname: str = ""
    role: str = "一般"
    team: str = ""
    group: str = ""
    email: str = ""          # 名簿にメール列は無いため常に空
    # 以下はパース時のメタ情報（出力しない）
    password: str = Field(default="", exclude=True, repr=False)
    row_number: int = Field(default=0, exclude=True)   # シート上の行番号（1始まり）


class FormDescriptor(BaseModel):
    """フォーム一覧の1行"""
    form_id: str
    sheet_name: Optional[str] = None   # 管理シート内のタブを参照する場合のみ
    form_name: str
    form_url: str = ""
    target_groups: str = ""   # 例: "44,45"（空なら全員対象）
    deadline: str = ""
    creator: str = ""


class FormStatus(CamelModel):
    form_id: str
    form_name: str
    form_url: str
    deadline: str
    submitted: bool
    is_required: bool
    creator: str


class SubmissionStatus(CamelModel):
    user_id: str
    user_name: str
    user_role: str
    user_team: str
    user_group: str
    user_email: str
    forms: List[FormStatus]


class AuthenticatedUser(BaseModel):
    """ログイン成功時に返すユーザー情報"""
    id: str
    name: str
    role: str
    team: str
    group: str


class TeamSummary(CamelModel):
    """フォーム詳細画面のチーム別提出状況"""
    team: str
    total: int
    submitted: int
    rate: int
    members: List[SubmissionStatus]


# =========================
# リクエストボディ
# =========================

class LoginRequest(BaseModel):
    name: str
    password: str


class PasswordUpdateRequest(CamelModel):
    new_password: str = ""


class FormRegistration(CamelModel):
    """フォーム登録（フォーム一覧への追記）"""
    name: str = ""
    form_url: str = ""
    sheet_url: str = ""
    target: str = ""       # 対象グループ（カンマ区切り）
    deadline: str = ""
    creator: str = ""
