"""Character-level scanning shared by the H and PLL parsers.

The scanner owns one immutable text buffer and a monotonically advancing
cursor. Lines are counted only when a ``\\n`` is consumed. Structural
failures raise ``ParseError`` located where the fix belongs; style issues
go through ``notify_error`` which honours the strict flag.
"""

from __future__ import annotations

from pydantic import ValidationError


# ---------------------------------------------------------------------------
# ParseError
# ---------------------------------------------------------------------------

class ParseError(Exception):
    """Error during parsing with source location."""

    def __init__(self, message: str, line: int, offset: int, source: str = "<text>"):
        self.message = message
        self.line = line
        self.offset = offset
        self.source = source
        super().__init__(f"{message} (line {line}, offset {offset})")


def error_message(exc: Exception) -> str:
    """Plain message of a model error, without pydantic decorations."""
    if isinstance(exc, ValidationError):
        err = exc.errors()[0]
        original = err.get("ctx", {}).get("error")
        if original is not None:
            return str(original)
        return err["msg"]
    return str(exc)


def escape(text: str) -> str:
    """Make control characters visible in messages."""
    return text.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")


def _is_ident_char(c: str) -> bool:
    return c.isalnum() or c == "_"


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class Scanner:
    """Cursor over a text buffer with line tracking."""

    def __init__(
        self,
        text: str | bytes,
        issues: list[str],
        strict: bool = False,
        source: str = "<text>",
    ) -> None:
        self.source = source
        self.issues = issues
        self.strict = strict
        self.text = self._decode(text)
        self.size = len(self.text)
        self.pos = 0
        self.line = 1

    def _decode(self, text: str | bytes) -> str:
        if not text:
            raise ParseError("Empty file", 1, 0, self.source)
        if isinstance(text, bytes):
            # UTF-16/UTF-32 byte order marks, or a leading NUL
            if text[0] in (0xFF, 0xFE, 0x00):
                raise ParseError("Bad encoding, not UTF-8", 1, 0, self.source)
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(
                    "Bad encoding, not UTF-8", text.count(b"\n", 0, e.start) + 1, e.start, self.source
                ) from None
        if text[0] == "\x00":
            raise ParseError("Bad encoding, not UTF-8", 1, 0, self.source)
        cr = text.find("\r")
        if cr >= 0:
            raise ParseError(
                "Use unix EOL, remove CR (\\r) characters", text.count("\n", 0, cr) + 1, cr, self.source
            )
        return text

    # -- Errors --------------------------------------------------------------

    def error(self, message: str, line: int | None = None, offset: int | None = None) -> ParseError:
        """Build a located ``ParseError`` (at the cursor unless given)."""
        if line is None:
            line = self.line
        if offset is None:
            offset = self.pos
        return ParseError(message, line, min(offset, self.size), self.source)

    def notify_error(self, message: str, at: tuple[int, int] | None = None) -> None:
        """Report a style issue: fatal when strict, else recorded."""
        line, offset = at if at is not None else (self.line, self.pos)
        if self.strict:
            raise self.error(message, line, offset)
        self.issues.append(f"{message} (line {line}, offset {min(offset, self.size)})")

    def mark(self) -> tuple[int, int]:
        return self.line, self.pos

    # -- Basic cursor queries ------------------------------------------------

    def at_end(self) -> bool:
        return self.pos >= self.size

    def peek(self, ahead: int = 0) -> str:
        """Character at the cursor (plus *ahead*), ``""`` past the end."""
        j = self.pos + ahead
        return self.text[j] if j < self.size else ""

    @staticmethod
    def is_blank(c: str) -> bool:
        return c != "" and c.isspace() and c != "\n"

    # -- Skipping ------------------------------------------------------------

    def skip_blanks(self) -> None:
        """Skip horizontal whitespace; a new line is never blank."""
        while self.pos < self.size and self.is_blank(self.text[self.pos]):
            self.pos += 1

    def skip_empty_lines(self) -> None:
        """Skip any whitespace, new lines included."""
        while self.pos < self.size and self.text[self.pos].isspace():
            if self.text[self.pos] == "\n":
                self.line += 1
            self.pos += 1

    def eat_line_end(self) -> bool:
        if self.peek() == "\n":
            self.pos += 1
            self.line += 1
            return True
        return False

    def skip_line(self) -> str:
        """Consume the rest of the line, returning it without the new line."""
        start = self.pos
        end = self.text.find("\n", start)
        if end < 0:
            self.pos = self.size
            return self.text[start:]
        self.pos = end + 1
        self.line += 1
        return self.text[start:end]

    def check_line_end_after(self, what: str) -> None:
        """Expect only blanks up to the end of the current line."""
        self.skip_blanks()
        if self.at_end() or self.eat_line_end():
            return
        at = self.mark()
        self.notify_error(f"Unexpected content after {what}: {escape(self.skip_line())}", at)

    # -- Matching ------------------------------------------------------------

    def eat(self, s: str) -> bool:
        """Consume *s* if the buffer continues with it."""
        if self.text.startswith(s, self.pos):
            self.pos += len(s)
            return True
        return False

    def eat_token(self, s: str) -> bool:
        """Like ``eat`` but *s* must not continue into an identifier."""
        end = self.pos + len(s)
        if self.text.startswith(s, self.pos) and (end >= self.size or not _is_ident_char(self.text[end])):
            self.pos = end
            return True
        return False

    # -- Collecting ----------------------------------------------------------

    def _collect_while(self, pred) -> str:
        start = self.pos
        while self.pos < self.size and pred(self.text[self.pos]):
            self.pos += 1
        return self.text[start:self.pos]

    def collect_token(self) -> str:
        """Run of characters up to the next whitespace."""
        return self._collect_while(lambda c: not c.isspace())

    def collect_identifier(self) -> str:
        return self._collect_while(_is_ident_char)

    def collect_digits(self) -> str:
        return self._collect_while(lambda c: "0" <= c <= "9")

    def collect_numeric_value(self) -> str:
        return self._collect_while(lambda c: "0" <= c <= "9" or c in "+-.E")

    def extract_index(self) -> int:
        """Read a non-negative base 10 integer literal."""
        c = self.peek()
        if c == "":
            raise self.error("Index not found")
        if c == "+":
            self.pos += 1
            if self.at_end():
                raise self.error("Invalid index '+'")
        elif c == "-":
            raise self.error("Negative index")
        digits = self.collect_digits()
        if not digits:
            raise self.error(f"Invalid char '{escape(self.peek())}' in index")
        return int(digits)

    def extract_integer(self) -> int:
        """Read a signed base 10 integer literal."""
        c = self.peek()
        if c == "":
            raise self.error("No integer found")
        sign = 1
        if c in "+-":
            sign = -1 if c == "-" else 1
            self.pos += 1
            if self.at_end():
                raise self.error(f"Invalid integer '{c}'")
        digits = self.collect_digits()
        if not digits:
            raise self.error(f"Invalid char '{escape(self.peek())}' in integer")
        return sign * int(digits)

    def collect_until_char_trimmed(self, stop: str) -> str:
        """Collect up to (not including) *stop*, trimming trailing blanks.

        Raises at the start of the region if *stop* is never found.
        """
        line_start, start = self.mark()
        last_not_blank = start
        while self.pos < self.size:
            c = self.text[self.pos]
            if c == stop:
                return self.text[start:last_not_blank]
            if c == "\n":
                self.line += 1
            elif not self.is_blank(c):
                last_not_blank = self.pos + 1
            self.pos += 1
        raise self.error(f"Unclosed content ('{escape(stop)}' expected)", line_start, start)

    def collect_until_newline_token(self, tok: str) -> str:
        """Collect up to a line that begins, after blanks, with keyword *tok*.

        The keyword is consumed; the returned text ends right before it.
        Raises at the start of the region if no such line exists.
        """
        line_start, start = self.mark()
        while self.pos < self.size:
            if self.text[self.pos] == "\n":
                self.pos += 1
                self.line += 1
                self.skip_blanks()
                tok_start = self.pos
                if self.eat_token(tok):
                    return self.text[start:tok_start]
            else:
                self.pos += 1
        raise self.error(f"Unclosed content (\"{tok}\" expected)", line_start, start)

    def skip_block_comment(self, closing: str) -> str:
        """Skip a block comment whose opener was already eaten.

        Returns the comment content. Raises at the opener if unclosed.
        """
        line_start, start = self.line, self.pos
        end = self.text.find(closing, start)
        if end < 0:
            raise self.error("Unclosed block comment", line_start, start)
        self.line += self.text.count("\n", start, end)
        self.pos = end + len(closing)
        return self.text[start:end]
