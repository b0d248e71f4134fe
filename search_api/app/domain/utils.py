"""
유틸리티 함수.
"""

import re

_VERSIONED_INDEX = re.compile(r"^(?P<name>.+?)-\d.*$")

_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
}


def strip_alias_from_index_name(index_name: str) -> str:
    """
    실제 인덱스 이름에서 버전 접미사를 떼어 alias 이름을 얻는 함수.
    Args:
        index_name: str (예: 'mainstream-2024-05-01t12:00:00z' 또는 'mainstream-3')
    Returns:
        str: alias 이름 (예: 'mainstream')
    """
    if not index_name:
        return index_name
    m = _VERSIONED_INDEX.match(index_name)
    return m.group("name") if m else index_name


def pluralize(word: str) -> str:
    """
    영어 단어의 간단한 복수형.
    Args:
        word: str (단수형)
    Returns:
        str: 복수형
    """
    if not word:
        return word
    lower = word.lower()
    if lower in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower]
        return plural.capitalize() if word[0].isupper() else plural
    if re.search(r"(s|x|z|ch|sh)$", lower):
        return word + "es"
    if re.search(r"[^aeiou]y$", lower):
        return word[:-1] + "ies"
    return word + "s"


def humanize(text: str) -> str:
    """'local_transaction' → 'Local transaction'"""
    words = text.replace("-", "_").strip("_").split("_")
    phrase = " ".join(w for w in words if w)
    return phrase[:1].upper() + phrase[1:]


def humanize_plural(text: str) -> str:
    """'detailed_guide' → 'Detailed guides' (마지막 단어만 복수형)"""
    phrase = humanize(text)
    if not phrase:
        return phrase
    head, _, last = phrase.rpartition(" ")
    return f"{head} {pluralize(last)}" if head else pluralize(last)
