"""
Answer Text Folding

Shared by answer grading and by question validation, so that two closed-form
options that would grade as the same answer are rejected when authored.
"""

import unicodedata
from typing import Optional

# Katakana block that has a hiragana counterpart 0x60 code points lower
_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_OFFSET = 0x60


def fold_text(text: Optional[str]) -> str:
    """
    Fold surface variants so they compare equal.

    Applies NFKC (full-width to half-width), case folding and katakana to
    hiragana, replaces punctuation with spaces and collapses whitespace.
    """
    text = unicodedata.normalize("NFKC", text or "").casefold()
    chars = []
    for ch in text:
        code = ord(ch)
        if _KATAKANA_START <= code <= _KATAKANA_END:
            ch = chr(code - _KANA_OFFSET)
        elif unicodedata.category(ch).startswith("P"):
            ch = " "
        chars.append(ch)
    return " ".join("".join(chars).split())


def normalize_answer(text: Optional[str]) -> str:
    """Fold ``text`` and drop all whitespace."""
    return fold_text(text).replace(" ", "")
