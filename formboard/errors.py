"""
例外クラス定義
"""


class FormboardError(Exception):
    """アプリケーション共通の基底例外"""


class ConfigurationError(FormboardError):
    """管理シートIDや認証情報が未設定・不正な場合の例外（リトライしない）"""
