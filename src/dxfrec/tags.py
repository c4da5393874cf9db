from __future__ import annotations

from typing import Iterable, NamedTuple, TextIO

from .errors import IoFailure, Malformed, TruncatedRecord


class Tag(NamedTuple):
    code: int
    value: str


class TagReader:
    """Reads ``(group code, value)`` pairs, two physical lines per tag.

    Keeps a single tag of lookahead so a record reader can stop in front
    of the next record's code 0 without consuming it.
    """

    def __init__(self, stream: TextIO, name: str | None = None) -> None:
        self.stream = stream
        self.name = name or getattr(stream, "name", None) or "<stream>"
        self.line_number = 0
        self._pending: Tag | None = None
        self._pending_line = 0
        self._exhausted = False
        self._tag_line = 0

    def __iter__(self):
        while True:
            tag = self.next_tag()
            if tag is None:
                return
            yield tag

    @property
    def tag_line(self) -> int:
        """Line number of the value line of the last consumed tag."""
        return self._tag_line

    def peek(self) -> Tag | None:
        if self._pending is None and not self._exhausted:
            self._pending = self._read_tag()
            self._pending_line = self.line_number
        return self._pending

    def next_tag(self) -> Tag | None:
        tag = self.peek()
        self._pending = None
        self._tag_line = self._pending_line
        return tag

    def skip_record(self) -> int:
        """Discard tags up to the next code 0 and return how many were dropped.

        A code line that is not an integer means the pairs are misaligned; the
        scan then goes line by line until a line reads as code 0.
        """
        skipped = 0
        while True:
            try:
                tag = self.peek()
            except Malformed:
                return skipped + self._resync()
            if tag is None or tag.code == 0:
                return skipped
            self.next_tag()
            skipped += 1

    def _resync(self) -> int:
        skipped = 0
        line = self._readline()
        while line is not None:
            skipped += 1
            if line.strip() == "0":
                value_line = self._readline()
                # A "0" value line is followed by a code, never by a record name.
                if value_line is not None and _looks_like_record_name(value_line):
                    self._pending = Tag(0, value_line)
                    self._pending_line = self.line_number
                    return skipped
                line = value_line
                continue
            line = self._readline()
        self._exhausted = True
        return skipped

    def _read_tag(self) -> Tag | None:
        code_line = self._readline()
        if code_line is None:
            self._exhausted = True
            return None
        text = code_line.strip()
        if text == "" and self._at_eof_after_blank():
            self._exhausted = True
            return None
        try:
            code = int(text)
        except ValueError:
            raise Malformed(
                f"invalid group code {text!r} in {self.name}",
                value=text,
                line_number=self.line_number,
            ) from None
        if code < 0:
            raise Malformed(
                f"negative group code {code} in {self.name}",
                code=code,
                line_number=self.line_number,
            )
        value_line = self._readline()
        if value_line is None:
            self._exhausted = True
            raise TruncatedRecord(
                f"missing value for group code {code} in {self.name}",
                code=code,
                line_number=self.line_number,
            )
        return Tag(code, value_line)

    def _at_eof_after_blank(self) -> bool:
        # Trailing blank lines after the last tag are tolerated.
        while True:
            line = self._readline()
            if line is None:
                return True
            if line.strip():
                raise Malformed(
                    f"blank group code line in {self.name}",
                    line_number=self.line_number - 1,
                )

    def _readline(self) -> str | None:
        try:
            line = self.stream.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise IoFailure(
                f"read failed: {exc}",
                stream_name=self.name,
                line_number=self.line_number + 1,
            ) from exc
        if line == "":
            return None
        self.line_number += 1
        return line.rstrip("\r\n")


def _looks_like_record_name(text: str) -> bool:
    name = text.strip()
    return name.isupper() and " " not in name


class TagWriter:
    def __init__(self, stream: TextIO, name: str | None = None) -> None:
        self.stream = stream
        self.name = name or getattr(stream, "name", None) or "<stream>"
        self.line_number = 0

    def write_tag(self, tag: Tag) -> None:
        code, value = tag
        if "\n" in value or "\r" in value:
            raise Malformed(f"line break in value for group code {code}", code=code, value=value)
        try:
            self.stream.write(f"{code:>3}\n{value}\n")
        except (OSError, UnicodeEncodeError) as exc:
            raise IoFailure(
                f"write failed: {exc}",
                stream_name=self.name,
                line_number=self.line_number + 1,
            ) from exc
        self.line_number += 2

    def write_tags(self, tags: Iterable[Tag]) -> int:
        count = 0
        for tag in tags:
            self.write_tag(tag)
            count += 1
        return count


def tags_to_text(tags: Iterable[Tag | tuple[int, str]]) -> str:
    return "".join(f"{int(code):>3}\n{value}\n" for code, value in tags)
