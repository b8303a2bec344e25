"""
Token scanner shared by the brace-dialect parsers.

The dialect is whitespace separated: ``key = value`` assignments and
``key = { ... }`` blocks, with ``#`` comments running to the end of a line.
Every token remembers the line and columns it came from so that the writers
can splice new text into existing files without disturbing anything else.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

import config
from core.errors import StructuralParseError

OPEN_BRACE = "{"
CLOSE_BRACE = "}"
EQUALS = "="
_PUNCTUATION = (OPEN_BRACE, CLOSE_BRACE, EQUALS)


@dataclass(frozen=True)
class Token:
    """A single lexical token and its position in the source lines."""

    text: str
    line: int  # 0-based line index
    start: int  # column of the first character
    end: int  # column one past the last character


@dataclass
class Record:
    """A ``key = value`` or ``key = { ... }`` record found by :func:`scan_records`."""

    key_token: Token
    value_token: Optional[Token] = None  # Set for flat assignments
    open_token: Optional[Token] = None  # Set for blocks
    close_token: Optional[Token] = None
    body: List[Token] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.key_token.text

    @property
    def is_block(self) -> bool:
        return self.open_token is not None

    @property
    def value(self) -> str:
        """The assigned value, or the joined body text for blocks."""
        if self.is_block:
            return join_tokens(self.body)
        return self.value_token.text

    @property
    def last_token(self) -> Token:
        return self.close_token if self.is_block else self.value_token

    @property
    def start(self):
        return (self.key_token.line, self.key_token.start)

    @property
    def end(self):
        last = self.last_token
        return (last.line, last.end)


def tokenize_line(
    line: str, line_index: int, comment_marker: str = config.COMMENT_MARKER
) -> List[Token]:
    """Splits one line into tokens, dropping anything after the comment marker.

    Braces and ``=`` are always tokens of their own, so ``a={b=c}`` scans the
    same as ``a = { b = c }``. Double-quoted strings are kept whole, quotes
    included, and may contain braces or the comment marker.
    """
    tokens: List[Token] = []
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch.isspace():
            i += 1
            continue
        if comment_marker and line.startswith(comment_marker, i):
            break
        if ch in _PUNCTUATION:
            tokens.append(Token(ch, line_index, i, i + 1))
            i += 1
            continue
        if ch == '"':
            close = line.find('"', i + 1)
            end = n if close == -1 else close + 1
            tokens.append(Token(line[i:end], line_index, i, end))
            i = end
            continue
        j = i
        while (
            j < n
            and not line[j].isspace()
            and line[j] not in _PUNCTUATION
            and line[j] != '"'
            and not (comment_marker and line.startswith(comment_marker, j))
        ):
            j += 1
        tokens.append(Token(line[i:j], line_index, i, j))
        i = j
    return tokens


def tokenize(
    lines: Sequence[str], comment_marker: str = config.COMMENT_MARKER
) -> List[Token]:
    """Tokenizes every line in order."""
    tokens: List[Token] = []
    for index, line in enumerate(lines):
        tokens.extend(tokenize_line(line, index, comment_marker))
    return tokens


def join_tokens(tokens: Iterable[Token]) -> str:
    return " ".join(t.text for t in tokens)


def scan_records(
    tokens: Sequence[Token], path: Optional[str] = None, strict: bool = True
) -> List[Record]:
    """Groups a token stream into top-level records with a single forward scan.

    Brace depth is tracked token by token, so a block may open and close
    across any number of lines. Nested blocks are kept whole in the record's
    ``body``; call this again on a body to descend one level.

    Args:
        tokens: Tokens at a single nesting level (a file, or a block body).
        path: Source file, used in error messages.
        strict: If True, a word that is not followed by ``=`` is an error.
            If False such tokens are skipped.

    Raises:
        StructuralParseError: On unbalanced braces, a stray ``}``, or a key
            with no ``=`` (in strict mode).
    """
    records: List[Record] = []
    i = 0
    n = len(tokens)
    while i < n:
        tok = tokens[i]
        if tok.text == CLOSE_BRACE:
            raise StructuralParseError(
                "unbalanced braces: '}' without a matching '{'", path, tok.line + 1
            )
        if tok.text in (OPEN_BRACE, EQUALS) or i + 1 >= n or tokens[i + 1].text != EQUALS:
            if strict:
                message = (
                    f"unexpected '{tok.text}' where a key was expected"
                    if tok.text in (OPEN_BRACE, EQUALS)
                    else f"missing '=' after '{tok.text}'"
                )
                raise StructuralParseError(message, path, tok.line + 1)
            if tok.text == OPEN_BRACE:
                i = _skip_block(tokens, i, path) + 1
            else:
                i += 1
            continue
        if i + 2 >= n:
            raise StructuralParseError(
                f"missing value for '{tok.text}'", path, tok.line + 1
            )
        value_tok = tokens[i + 2]
        if value_tok.text == OPEN_BRACE:
            close_index = _skip_block(tokens, i + 2, path, key=tok.text)
            records.append(
                Record(
                    key_token=tok,
                    open_token=value_tok,
                    close_token=tokens[close_index],
                    body=list(tokens[i + 3 : close_index]),
                )
            )
            i = close_index + 1
        elif value_tok.text in (CLOSE_BRACE, EQUALS):
            raise StructuralParseError(
                f"missing value for '{tok.text}'", path, value_tok.line + 1
            )
        else:
            records.append(Record(key_token=tok, value_token=value_tok))
            i += 3
    return records


def _skip_block(
    tokens: Sequence[Token], open_index: int, path: Optional[str], key: Optional[str] = None
) -> int:
    """Returns the index of the ``}`` closing the block opened at ``open_index``."""
    depth = 0
    for j in range(open_index, len(tokens)):
        text = tokens[j].text
        if text == OPEN_BRACE:
            depth += 1
        elif text == CLOSE_BRACE:
            depth -= 1
            if depth == 0:
                return j
    opener = tokens[open_index]
    name = f"block '{key}'" if key else "block"
    raise StructuralParseError(
        f"unbalanced braces: {name} opened here is never closed", path, opener.line + 1
    )


def parse_properties(body: Sequence[Token], path: Optional[str] = None) -> Dict[str, str]:
    """Parses ``prop = value`` pairs out of a block body.

    Nested groups such as ``color = { 10 20 30 }`` are kept as their text,
    braces included. A repeated property keeps its last value.
    """
    properties: Dict[str, str] = {}
    for record in scan_records(body, path=path, strict=True):
        if record.is_block:
            inner = record.value
            properties[record.key] = f"{{ {inner} }}" if inner else "{ }"
        else:
            properties[record.key] = record.value
    return properties


def format_properties(properties: Dict[str, str]) -> str:
    return " ".join(f"{key} = {value}" for key, value in properties.items())
