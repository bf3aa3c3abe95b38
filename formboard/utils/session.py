"""
セッションCookieユーティリティ
ログイン情報を HS256 の JWT にしてCookie値として発行・検証する
"""
import time
from typing import Optional

from jose import JWTError, jwt

ALGORITHM = "HS256"

# JWT の登録済みクレーム（ユーザー情報としては返さない）
TOKEN_CLAIMS = ("iat", "exp")


def sign_session(payload: dict, secret: str, max_age: int, issued_at: Optional[int] = None) -> str:
    """
    セッション情報に発行時刻と有効期限を付けて JWT を作る

    Args:
        payload: Cookieに載せる情報（氏名など）
        secret: 署名キー
        max_age: 有効期間（秒）
        issued_at: 発行時刻（UNIX秒）。省略時は現在時刻

    Returns:
        エンコード済みの JWT
    """
    to_encode = dict(payload)
    iat = int(time.time()) if issued_at is None else issued_at
    to_encode.update({"iat": iat, "exp": iat + max_age})
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def load_session(token: Optional[str], secret: str) -> Optional[dict]:
    """JWT を検証して中身を返す。署名不一致・形式不正・期限切れの場合は None"""
    if not token:
        return None
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None


def session_user(claims: dict) -> dict:
    """JWT のクレームからユーザー情報だけを取り出す"""
    return {k: v for k, v in claims.items() if k not in TOKEN_CLAIMS}
