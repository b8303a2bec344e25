"""
Merge-aware editing of existing file lines.

Writers never regenerate a whole file. They locate the records that changed,
replace or remove exactly those character spans, and append what is new.
Everything else (comments, blank lines, ordering, unrelated records) is kept
byte for byte.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

Position = Tuple[int, int]  # (line index, column)


@dataclass
class Span:
    """The character range an on-disk record occupies."""

    key: str
    start: Position
    end: Position  # exclusive


@dataclass
class RecordEdit:
    """One change to apply to a file.

    Attributes:
        key: The key the record is written under.
        lines: Serialized record lines, or None to delete ``key``. The first
            line carries no indentation; later lines are indented relative to it.
        stale_keys: Other on-disk keys this record supersedes (an origin name
            after a rename, for example). If ``key`` is not on disk, the first
            record under these keys is replaced in place; the rest are removed.
    """

    key: str
    lines: Optional[List[str]]
    stale_keys: Tuple[str, ...] = ()


@dataclass
class Splice:
    start: Position
    end: Position
    lines: List[str]
    insert: bool = False  # Insert ``lines`` as whole lines before ``start``


def index_spans(spans: Sequence[Span]) -> Dict[str, List[Span]]:
    """Groups spans by case-insensitive key, keeping file order."""
    by_key: Dict[str, List[Span]] = {}
    for span in spans:
        by_key.setdefault(span.key.casefold(), []).append(span)
    return by_key


def plan_splices(
    spans: Sequence[Span], edits: Sequence[RecordEdit]
) -> Tuple[List[Splice], List[List[str]]]:
    """Works out which spans to replace or remove, and which records are new.

    Stale keys and deletions are resolved first, then writes. A write claims
    the first on-disk record with its key (even one a stale key or deletion
    had marked for removal), so a record keeps its position in the file;
    further duplicates of that key are removed. A write whose key is not on
    disk takes over the first unclaimed record of its stale keys instead, so
    a renamed record stays where its origin was. Only records with neither
    are appended.

    Returns:
        A tuple (splices, appended), where appended holds the serialized
        records that have no on-disk counterpart, in edit order.
    """
    by_key = index_spans(spans)
    removals: Dict[int, Span] = {}
    replacements: Dict[int, Tuple[Span, List[str]]] = {}
    appended: Dict[str, List[str]] = {}

    for edit in edits:
        doomed = list(edit.stale_keys)
        if edit.lines is None:
            doomed.append(edit.key)
        for key in doomed:
            if edit.lines is not None and key.casefold() == edit.key.casefold():
                continue
            for span in by_key.get(key.casefold(), []):
                removals[id(span)] = span

    def claim(span: Span, edit: RecordEdit):
        if id(span) in replacements:
            logging.warning("Record '%s' written twice, keeping the last.", edit.key)
        removals.pop(id(span), None)
        replacements[id(span)] = (span, edit.lines)

    renamed = []
    for edit in edits:
        if edit.lines is None:
            continue
        existing = by_key.get(edit.key.casefold(), [])
        if not existing:
            renamed.append(edit)
            continue
        claim(existing[0], edit)
        for duplicate in existing[1:]:
            removals[id(duplicate)] = duplicate

    for edit in renamed:
        origin = next(
            (
                span
                for key in edit.stale_keys
                for span in by_key.get(key.casefold(), [])
                if id(span) not in replacements
            ),
            None,
        )
        if origin is not None:
            claim(origin, edit)
            continue
        folded = edit.key.casefold()
        if folded in appended:
            logging.warning("Record '%s' written twice, keeping the last.", edit.key)
        appended[folded] = edit.lines

    splices = [Splice(span.start, span.end, []) for span in removals.values()]
    splices.extend(
        Splice(span.start, span.end, list(lines)) for span, lines in replacements.values()
    )
    return splices, list(appended.values())


def apply_splices(lines: Sequence[str], splices: Sequence[Splice]) -> List[str]:
    """Applies non-overlapping splices to a copy of ``lines``.

    Text before a span's start and after its end on the same lines is kept.
    A line left holding only whitespace after a removal is dropped.
    """
    result = list(lines)
    for splice in sorted(splices, key=lambda s: (s.start, s.end), reverse=True):
        start_line, start_col = splice.start
        end_line, end_col = splice.end
        prefix = result[start_line][:start_col]
        suffix = result[end_line][end_col:]

        if splice.insert:
            result[start_line:end_line + 1] = _insert_before(prefix, suffix, splice.lines)
            continue

        if splice.lines:
            indent = _leading_whitespace(prefix)
            new_lines = [prefix + splice.lines[0]]
            new_lines.extend(indent + line if line else line for line in splice.lines[1:])
            if suffix.strip():
                new_lines[-1] = new_lines[-1] + suffix
        else:
            new_lines = _join_remainder(prefix, suffix)
        result[start_line:end_line + 1] = new_lines
    return result


def _insert_before(prefix: str, suffix: str, block: List[str]) -> List[str]:
    if not prefix.strip():
        return list(block) + [prefix + suffix]
    indent = _leading_whitespace(prefix)
    return [prefix.rstrip()] + list(block) + [indent + suffix.lstrip()]


def _join_remainder(prefix: str, suffix: str) -> List[str]:
    if not prefix.strip() and not suffix.strip():
        return []
    if not prefix.strip():
        return [prefix + suffix.lstrip()]
    if not suffix.strip():
        return [prefix.rstrip()]
    return [prefix.rstrip() + " " + suffix.lstrip()]


def _leading_whitespace(text: str) -> str:
    return text[: len(text) - len(text.lstrip())]


def indent_block(lines: Sequence[str], indent: str) -> List[str]:
    return [indent + line if line else line for line in lines]
