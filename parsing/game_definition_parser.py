"""Parser for game definition files (religions, cultures, topography, goods...)."""

from typing import Dict, Optional, Sequence, Set

import config
from core.errors import StructuralParseError
from parsing.file_parser import FileParser
from parsing.scanner import CLOSE_BRACE, EQUALS, OPEN_BRACE, tokenize


class GameDefinitionParser(FileParser[Set[str]]):
    """Collects the names of top-level ``key = { ... }`` definitions.

    With a category filter, a definition is kept only if its block contains
    ``category = <filter>`` at any depth. The filter is evaluated when the
    definition's block closes, since the category may appear anywhere in it.
    Names are de-duplicated case-insensitively; the first spelling is kept.
    """

    def __init__(
        self,
        ignore_comments: bool = True,
        category_filter: Optional[str] = None,
    ):
        self._comment_marker = config.COMMENT_MARKER if ignore_comments else ""
        self._category_filter = category_filter

    def empty(self) -> Set[str]:
        return set()

    def combine(self, first: Set[str], second: Set[str]) -> Set[str]:
        seen: Dict[str, str] = {name.casefold(): name for name in first}
        for name in second:
            seen.setdefault(name.casefold(), name)
        return set(seen.values())

    def parse_lines(self, lines: Sequence[str], path: str = None) -> Set[str]:
        found: Dict[str, str] = {}
        tokens = tokenize(lines, self._comment_marker)
        depth = 0
        current_key: Optional[str] = None
        current_matches = False
        category = self._category_filter.casefold() if self._category_filter else None

        for i, token in enumerate(tokens):
            text = token.text
            if text == OPEN_BRACE:
                if depth == 0 and i >= 2 and tokens[i - 1].text == EQUALS:
                    current_key = tokens[i - 2].text
                    current_matches = category is None
                depth += 1
            elif text == CLOSE_BRACE:
                depth -= 1
                if depth < 0:
                    raise StructuralParseError(
                        "unbalanced braces: '}' without a matching '{'", path, token.line + 1
                    )
                if depth == 0 and current_key is not None:
                    if current_matches:
                        found.setdefault(current_key.casefold(), current_key)
                    current_key = None
                    current_matches = False
            elif (
                category is not None
                and depth > 0
                and current_key is not None
                and text.casefold() == "category"
                and i + 2 < len(tokens)
                and tokens[i + 1].text == EQUALS
                and tokens[i + 2].text.strip('"').casefold() == category
            ):
                current_matches = True

        if depth != 0:
            raise StructuralParseError(
                f"unbalanced braces: {depth} block(s) never closed", path, len(lines)
            )
        return set(found.values())
