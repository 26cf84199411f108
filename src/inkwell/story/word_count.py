import re

CJK_IDEOGRAPH = re.compile(r"[\u4e00-\u9fff]")


def count_words(text: str) -> int:
    """Count words, treating each CJK ideograph as a word of its own."""
    if not text or not text.strip():
        return 0
    ideographs = len(CJK_IDEOGRAPH.findall(text))
    remainder = CJK_IDEOGRAPH.sub(" ", text)
    return ideographs + len(remainder.split())
