"""Line-oriented file reading and writing that preserves a file's byte conventions."""

import codecs
import os
from dataclasses import dataclass, field
from typing import List, Sequence

import config


@dataclass
class FileContent:
    """The lines of a text file plus what is needed to write it back unchanged."""

    lines: List[str] = field(default_factory=list)
    has_bom: bool = False
    newline: str = "\n"
    trailing_newline: bool = True


def read_lines(file_path: str) -> FileContent:
    """Reads a text file, remembering its BOM, line ending and final newline."""
    with open(file_path, "rb") as f:
        raw = f.read()
    has_bom = raw.startswith(codecs.BOM_UTF8)
    if has_bom:
        raw = raw[len(codecs.BOM_UTF8):]
    text = raw.decode(config.FILE_ENCODING)
    newline = "\r\n" if "\r\n" in text else "\n"
    return FileContent(
        lines=text.splitlines(),
        has_bom=has_bom,
        newline=newline,
        trailing_newline=text.endswith(("\n", "\r")) or not text,
    )


def write_lines(
    file_path: str,
    lines: Sequence[str],
    has_bom: bool = False,
    newline: str = "\n",
    trailing_newline: bool = True,
) -> None:
    """Writes lines to a file, creating parent directories as needed."""
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    text = newline.join(lines)
    if lines and trailing_newline:
        text += newline
    data = text.encode(config.FILE_ENCODING)
    if has_bom:
        data = codecs.BOM_UTF8 + data
    with open(file_path, "wb") as f:
        f.write(data)


def write_content(file_path: str, content: FileContent) -> None:
    write_lines(
        file_path,
        content.lines,
        has_bom=content.has_bom,
        newline=content.newline,
        trailing_newline=content.trailing_newline,
    )
