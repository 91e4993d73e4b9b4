"""Resolve a user's reply against a numbered list of candidate files."""

import re
from typing import List, Optional, Sequence

from file_agent.schemas.files import FileInfo

# Words accepted for positions one through ten
_ORDINAL_WORDS = {
    1: ("first", "one", "1st", "一"),
    2: ("second", "two", "2nd", "二", "两"),
    3: ("third", "three", "3rd", "三"),
    4: ("fourth", "four", "4th", "四"),
    5: ("fifth", "five", "5th", "五"),
    6: ("sixth", "six", "6th", "六"),
    7: ("seventh", "seven", "7th", "七"),
    8: ("eighth", "eight", "8th", "八"),
    9: ("ninth", "nine", "9th", "九"),
    10: ("tenth", "ten", "10th", "十"),
}
_ORDINALS = {word: n for n, words in _ORDINAL_WORDS.items() for word in words}
_ORDINALS.update({str(n): n for n in range(1, 11)})

_ORDINAL_RE = re.compile(
    r"^(?:the\s+|no\.?\s*|#)?"
    r"(?:第\s*)?"
    r"(?P<word>[a-z0-9]+|[一二两三四五六七八九十])"
    r"\s*(?:个文件|个|項|项|one|file)?$"
)

# Standalone tokens inside a longer reply. Neighbours that occur in file
# names (letters, digits, '_', '.', '-', separators) disqualify a token.
# Spelled cardinals stay out: "the second one" would read as two positions.
_CARDINALS = {"one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten"}
_FILE_CHAR = r"a-z0-9_.\-/\\"
_LOOSE_TOKENS = sorted((w for w in _ORDINALS if w.isascii() and w not in _CARDINALS), key=len, reverse=True)
_LOOSE_RE = re.compile(
    rf"(?<![{_FILE_CHAR}])(?P<word>{'|'.join(_LOOSE_TOKENS)})(?![{_FILE_CHAR}])"
    r"|第\s*(?P<cn_ordinal>[一二两三四五六七八九十])(?![一二两三四五六七八九十])"
    r"|(?<![一二两三四五六七八九十第])(?P<cn_counted>[一二两三四五六七八九十])\s*(?:个|号)"
)

# Phrases checked by containment as a last resort
_POSITION_PHRASES = (
    (1, ("第一个", "第一", "first")),
    (2, ("第二个", "第二", "second")),
    (3, ("第三个", "第三", "third")),
)


def parse_ordinal(text: str) -> Optional[int]:
    """
    Parse '2', '2nd', 'second', 'the second one', '第二', '第2个' and the like. None if not an ordinal.

    A reply that is not an ordinal on its own ('选2', 'option 2', "I'll take 2")
    still counts when it holds exactly one standalone position token.
    """
    text = text.strip().lower()
    match = _ORDINAL_RE.match(text)
    if match and match.group("word") in _ORDINALS:
        return _ORDINALS[match.group("word")]

    positions = set()
    for token in _LOOSE_RE.finditer(text):
        word = token.group("word") or token.group("cn_ordinal") or token.group("cn_counted")
        positions.add(_ORDINALS[word])
    if len(positions) == 1:
        return positions.pop()
    return None


def _pick(candidates: Sequence[FileInfo], position: Optional[int]) -> Optional[str]:
    if position is not None and 1 <= position <= len(candidates):
        return candidates[position - 1].path
    return None


def resolve_selection(reply: str, candidates: List[FileInfo]) -> Optional[str]:
    """
    Match a free-text reply to one candidate and return its path.

    Strategies, first success wins: integer index, ordinal word, exact file
    name, file name substring, path substring, sole candidate, and finally
    first/second/third phrases anywhere in the reply. Indexes are 1-based.
    """
    if not candidates:
        return None

    message = (reply or "").strip().lower()

    try:
        selected = _pick(candidates, int(message))
        if selected:
            return selected
    except ValueError:
        pass

    selected = _pick(candidates, parse_ordinal(message))
    if selected:
        return selected

    if message:
        for f in candidates:
            if f.name.lower() == message:
                return f.path

        for f in candidates:
            if message in f.name.lower():
                return f.path

        for f in candidates:
            if message in f.path.lower():
                return f.path

    if len(candidates) == 1:
        return candidates[0].path

    for position, phrases in _POSITION_PHRASES:
        if any(phrase in message for phrase in phrases):
            selected = _pick(candidates, position)
            if selected:
                return selected

    return None
