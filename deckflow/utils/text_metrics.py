"""
Text measurement helpers shared by the markdown parser and the slide segmenter.

Fenced code blocks are found by scanning lines, so a blank line inside a
fence never splits a paragraph.
"""

import math
import re
from typing import List

FENCE_LINE = re.compile(r'^\s*(```|~~~)')

CJK_CHARACTER = re.compile(r'[぀-ゟ゠-ヿ㐀-䶿一-鿿]')
LATIN_WORD = re.compile(r'[A-Za-z]+')

_STRIP_PATTERNS = [
    (re.compile(r'```[\s\S]*?```'), ''),
    (re.compile(r'`[^`]+`'), ''),
    (re.compile(r'!\[.*?\]\(.*?\)'), ''),
    (re.compile(r'\[.*?\]\(.*?\)'), ''),
    (re.compile(r'#{1,6}\s+'), ''),
    (re.compile(r'[*_]{1,2}([^*_]+)[*_]{1,2}'), r'\1'),
    (re.compile(r'^\s*[-*+]\s+', re.MULTILINE), ''),
    (re.compile(r'^\s*\d+\.\s+', re.MULTILINE), ''),
    (re.compile(r'^\s*>\s+', re.MULTILINE), ''),
]


def strip_markdown(text: str) -> str:
    """Remove code, links, images and markup so only prose is left."""
    for pattern, replacement in _STRIP_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def count_words(text: str) -> int:
    """Latin words plus CJK characters / 2.5 (rounded up)."""
    clean = strip_markdown(text or "")
    latin = len(LATIN_WORD.findall(clean))
    cjk = len(CJK_CHARACTER.findall(clean))
    return latin + math.ceil(cjk / 2.5)


def non_empty_lines(text: str) -> List[str]:
    return [line for line in (text or "").split("\n") if line.strip()]


def count_code_blocks(text: str) -> int:
    """Fenced code blocks; an unclosed fence at the end still counts as one."""
    blocks = 0
    in_fence = False
    for line in (text or "").split("\n"):
        if FENCE_LINE.match(line):
            if not in_fence:
                blocks += 1
            in_fence = not in_fence
    return blocks


def split_paragraphs(text: str) -> List[str]:
    """Split on blank lines outside fenced code blocks; fences stay whole."""
    paragraphs: List[str] = []
    buffer: List[str] = []
    in_fence = False

    for line in (text or "").split("\n"):
        if FENCE_LINE.match(line):
            in_fence = not in_fence
            buffer.append(line)
            continue
        if not in_fence and not line.strip():
            if buffer:
                paragraphs.append("\n".join(buffer))
                buffer = []
            continue
        buffer.append(line)

    if buffer:
        paragraphs.append("\n".join(buffer))

    return [p for p in paragraphs if p.strip()]


def lines_outside_fences(text: str) -> List[str]:
    lines = []
    in_fence = False
    for line in (text or "").split("\n"):
        if FENCE_LINE.match(line):
            in_fence = not in_fence
            continue
        if not in_fence:
            lines.append(line)
    return lines
