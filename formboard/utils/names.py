"""
氏名ユーティリティ
名簿・回答シート間で氏名を比較するための正規化ヘルパー
"""
import re
import unicodedata
from typing import Optional, Tuple

# \s は全角スペース(U+3000)も含むが、明示しておく
_WHITESPACE_RE = re.compile(r"[\s　]+")

_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_OFFSET = 0x60

# 濁点・半濁点（NFD で分解したときの結合文字）
_VOICING_MARKS = ("\u3099", "\u309a")

# 小書き仮名 → 通常の仮名
_SMALL_KANA = str.maketrans("ぁぃぅぇぉっゃゅょゎゕゖ", "あいうえおつやゆよわかけ")

# JIS X 0208 に無い文字は全ての漢字の後ろに符号位置順で並べる
_OUTSIDE_JIS = b"\xff"


def normalize_name(name: Optional[str]) -> str:
    """
    氏名を比較用キーに変換する

    空白（全角スペース含む）をすべて除去し、小文字化する。
    None や空文字は "" を返す。normalize_name(normalize_name(x)) == normalize_name(x)。

    Args:
        name: 名簿や回答シートに入力された氏名

    Returns:
        比較用の正規化済みキー
    """
    if not name:
        return ""
    return _WHITESPACE_RE.sub("", name).strip().lower()


def safe_trim(text: Optional[str]) -> str:
    """None を空文字として扱う strip"""
    if not text:
        return ""
    return text.strip()


def _fold_kana(text: str) -> str:
    folded = []
    for ch in unicodedata.normalize("NFKC", text or ""):
        code = ord(ch)
        if _KATAKANA_START <= code <= _KATAKANA_END:
            ch = chr(code - _KANA_OFFSET)
        folded.append(ch)
    return "".join(folded).casefold()


def _jis_order(text: str) -> bytes:
    # EUC-JP のバイト列は JIS X 0208 の区点順（英数字 → かな → 第一水準漢字(読み順) → 第二水準）
    encoded = []
    for ch in text:
        try:
            b = ch.encode("euc_jp")
        except UnicodeEncodeError:
            b = b""
        # 0x8F 始まりは補助漢字（JIS X 0212）
        if not b or b[:1] == b"\x8f":
            b = _OUTSIDE_JIS + ord(ch).to_bytes(3, "big")
        encoded.append(b)
    return b"".join(encoded)


def collation_key(text: str) -> Tuple[bytes, bytes]:
    """
    日本語の並び替え用キー（localeCompare(..., "ja") 相当）

    - 全角・半角、カタカナ・ひらがな、大文字・小文字は区別しない
    - 濁点・半濁点と小書き仮名は一次比較では無視し、同じなら清音を先にする
    - 漢字は JIS X 0208 の順（第一水準は音読み順）

    Returns:
        (一次キー, 二次キー) のタプル
    """
    folded = _fold_kana(text)
    decomposed = unicodedata.normalize("NFD", folded)
    base = "".join(ch for ch in decomposed if ch not in _VOICING_MARKS)
    base = unicodedata.normalize("NFC", base).translate(_SMALL_KANA)
    return _jis_order(base), _jis_order(folded)
