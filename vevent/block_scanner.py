"""Scanner for VEVENT blocks and their properties in raw ICS text.

The scanner walks the text with ``str.find`` and index arithmetic instead of
regular expressions, so its cost stays linear in the size of the feed no
matter what the third party puts in it.
"""
from typing import Dict, Iterable, Iterator, Optional, Tuple

BEGIN_MARKER = 'BEGIN:VEVENT'
END_MARKER = 'END:VEVENT'

# Applied in this order; each substitution must not see the output of a later one.
ESCAPE_SEQUENCES = (
    ('\\,', ','),
    ('\\;', ';'),
    ('\\n', '\n'),
    ('\\\\', '\\'),
)


def iter_event_blocks(text: str) -> Iterator[str]:
    """
    Yield the inner text of each BEGIN:VEVENT ... END:VEVENT pair.

    Matching is exact and case-sensitive. The first END:VEVENT after a
    BEGIN:VEVENT closes the block, and a BEGIN:VEVENT with no END:VEVENT
    after it yields nothing.

    Args:
        text: Raw ICS text

    Yields:
        Block contents in document order
    """
    if not text:
        return

    position = 0
    while True:
        # seeking begin
        begin = text.find(BEGIN_MARKER, position)
        if begin == -1:
            return

        # in event
        content_start = begin + len(BEGIN_MARKER)
        end = text.find(END_MARKER, content_start)
        if end == -1:
            return

        yield text[content_start:end]
        position = end + len(END_MARKER)


def unescape_text(value: str) -> str:
    """Undo the iCalendar TEXT escapes for commas, semicolons, newlines and backslashes."""
    for escaped, plain in ESCAPE_SEQUENCES:
        value = value.replace(escaped, plain)
    return value


def _iter_lines(block: str) -> Iterator[str]:
    """Yield lines terminated by CRLF, LF or a bare CR."""
    position = 0
    length = len(block)
    # -1 marks "not looked up yet"; a missing terminator is stored as length
    next_lf = next_cr = -1
    while position < length:
        if next_lf < position:
            next_lf = block.find('\n', position)
            if next_lf == -1:
                next_lf = length
        if next_cr < position:
            next_cr = block.find('\r', position)
            if next_cr == -1:
                next_cr = length
        line_end = min(next_lf, next_cr)

        yield block[position:line_end]

        position = line_end + 1
        if block.startswith('\r\n', line_end):
            position += 1


def _split_property(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a ``NAME[;PARAMS]:VALUE`` line into its name and raw value.

    Returns:
        (name, value) tuple or None if the line has no colon
    """
    line = line.lstrip(' \t')
    colon = line.find(':')
    if colon == -1:
        return None

    semicolon = line.find(';', 0, colon)
    name_end = semicolon if semicolon != -1 else colon
    return line[:name_end], line[colon + 1:]


def extract_fields(block: str, names: Iterable[str]) -> Dict[str, Optional[str]]:
    """
    Extract several properties from a block in one pass.

    Only the first occurrence of each property is honored. A property that is
    absent, or present with an empty value, maps to None.

    Args:
        block: VEVENT block contents
        names: Property names to look up (exact, case-sensitive)

    Returns:
        Dictionary mapping every requested name to its unescaped value or None
    """
    wanted = set(names)
    found: Dict[str, Optional[str]] = {name: None for name in wanted}
    pending = set(wanted)

    for line in _iter_lines(block):
        if not pending:
            break

        parts = _split_property(line)
        if parts is None:
            continue

        name, value = parts
        if name in pending:
            pending.discard(name)
            if value:
                found[name] = unescape_text(value)

    return found


def extract_field(block: str, name: str) -> Optional[str]:
    """
    Extract a single property value from a block.

    Args:
        block: VEVENT block contents
        name: Property name (exact, case-sensitive)

    Returns:
        Unescaped value of the first matching line, or None
    """
    return extract_fields(block, [name])[name]
