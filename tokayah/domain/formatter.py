"""Reply formatting for Telegram's HTML subset, plus chunking.

Two pure stages: rewrite the model's lightweight Markdown into <b>/<i> tags,
then validate tag nesting with a stack machine. Any nesting error discards
the rewrite in favour of a plain-text rendering that emits no tags at all.
"""

import html
import re
import sys
from typing import List, Tuple

MAX_CHUNK_LENGTH = 4000

CONTINUED_MARKER = "<i>(continued...)</i>"
CONTINUATION_MARKER = "<i>(continuation)</i>\n\n"

TAG_ALPHABET = ("b", "i")
_TAG_RE = re.compile(r"<(/?)(" + "|".join(TAG_ALPHABET) + r")>")

# Rewrite rules run after escaping, so ">" quotes appear as "&gt;"
_HEADER_RE = re.compile(r"^#{1,6}[ \t]+(.*?)[ \t]*#*[ \t]*$", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
_ITALIC_RE = re.compile(r"(?<!\*)\*(?=[^\s*])([^*\n]+?)(?<=\S)\*(?!\*)")
_QUOTE_RE = re.compile(r"^&gt;[ \t]?(.*?)$", re.MULTILINE)
_ORDERED_RE = re.compile(r"^[ \t]*(\d+)\.[ \t]+", re.MULTILINE)
_BULLET_RE = re.compile(r"^[ \t]*[-*+][ \t]+", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n\s*\n")

# Plain fallback rules: escaped text in, no tags out
_PLAIN_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_PLAIN_ITALIC_RE = re.compile(r"(?<!\*)\*([^*\n]+?)\*(?!\*)")


class FormatValidationError(ValueError):
    """Tag nesting mismatch in a rewritten reply."""


def _log(msg: str):
    print(msg, file=sys.stderr)


def escape(text: str) -> str:
    """Treat all input as untrusted plain text."""
    return html.escape(text or "", quote=False)


def _header(match: "re.Match") -> str:
    title = match.group(1).replace("**", "")
    return f"<b>{title}</b>" if title.strip() else ""


def rewrite(text: str) -> str:
    """Escape text and rewrite the Markdown subset into <b>/<i> tags."""
    formatted = escape(text)
    formatted = _HEADER_RE.sub(_header, formatted)
    formatted = _BOLD_RE.sub(r"<b>\1</b>", formatted)
    formatted = _ITALIC_RE.sub(r"<i>\1</i>", formatted)
    formatted = _QUOTE_RE.sub(r"\n<i>\1</i>\n", formatted)
    formatted = _ORDERED_RE.sub(r"\1. ", formatted)
    formatted = _BULLET_RE.sub("• ", formatted)
    formatted = formatted.replace("<i></i>", "").replace("<b></b>", "")
    formatted = _BLANK_RUN_RE.sub("\n\n", formatted).strip()

    # One space around tag boundaries for readability
    formatted = formatted.replace("><", "> <")
    formatted = re.sub(r"(\w)<(b|i)>", r"\1 <\2>", formatted)
    formatted = re.sub(r"</(b|i)>(\w)", r"</\1> \2", formatted)
    return formatted


def open_tags(text: str) -> List[Tuple[str, int]]:
    """Run the tag stack machine; return tags still open at the end with their offsets.

    Raises FormatValidationError on a closer that does not match the top of the stack.
    """
    stack: List[Tuple[str, int]] = []
    for match in _TAG_RE.finditer(text):
        closing, tag = match.group(1), match.group(2)
        if not closing:
            stack.append((tag, match.start()))
            continue
        if not stack or stack[-1][0] != tag:
            raise FormatValidationError(f"unmatched </{tag}> at offset {match.start()}")
        stack.pop()
    return stack


def validate(text: str) -> str:
    """Return text unchanged if every tag pair nests properly."""
    left_open = open_tags(text)
    if left_open:
        tag, offset = left_open[-1]
        raise FormatValidationError(f"unclosed <{tag}> at offset {offset}")
    return text


def is_valid(text: str) -> bool:
    try:
        validate(text)
    except FormatValidationError:
        return False
    return True


def plain_format(text: str) -> str:
    """Tag-free rendering with visual markers instead of markup."""
    formatted = escape(text)
    formatted = _HEADER_RE.sub(lambda m: "► " + m.group(1).replace("**", ""), formatted)
    formatted = _PLAIN_BOLD_RE.sub(r"► \1 ◄", formatted)
    formatted = _PLAIN_ITALIC_RE.sub(r"• \1 •", formatted)
    formatted = _QUOTE_RE.sub(r"  » \1 «", formatted)
    formatted = _ORDERED_RE.sub(r"\1. ", formatted)
    formatted = _BULLET_RE.sub("• ", formatted)
    return _BLANK_RUN_RE.sub("\n\n", formatted).strip()


def format_reply(raw_text: str) -> str:
    """Rewrite to Telegram HTML, falling back to plain text on invalid nesting."""
    try:
        return validate(rewrite(raw_text))
    except FormatValidationError as e:
        _log(f"[Formatter] invalid tag nesting ({e}), falling back to plain formatting")
        return plain_format(raw_text)


# -- Chunking --

# Room kept for closing tags when a tagged span has to be split
_TAG_RESERVE = 16


def _safe_cut(text: str, limit: int) -> int:
    """Move a hard cut back so it never lands inside a tag or an HTML entity."""
    cut = limit
    lt = text.rfind("<", 0, cut)
    if lt > text.rfind(">", 0, cut):
        cut = lt
    amp = text.rfind("&", 0, cut)
    if amp != -1 and amp > text.rfind(";", 0, cut) and cut - amp <= 10:
        cut = amp
    return cut if cut > 0 else limit


def find_break(text: str, limit: int) -> int:
    """Latest safe break at or before limit: blank line, then sentence end, then hard cut."""
    para = text.rfind("\n\n", 0, limit)
    if para > 0:
        return para + 2
    sentence = text.rfind(". ", 0, limit)
    if sentence > 0:
        return sentence + 2
    return _safe_cut(text, limit)


def _balance(text: str, cut: int, limit: int, carried: str = "") -> Tuple[int, str, str]:
    """Keep tag pairs inside one chunk.

    carried holds openers replayed at the start of this chunk. Moves the cut
    before the outermost still-open tag when that leaves a reasonable chunk;
    otherwise closes the open tags at the cut and returns the openers to
    replay at the start of the next chunk.
    """
    try:
        left_open = open_tags(carried + text[:cut])
    except FormatValidationError:
        return cut, "", ""
    if not left_open:
        return cut, "", ""

    outer_offset = left_open[0][1] - len(carried)
    if outer_offset >= limit // 2:
        earlier = find_break(text, outer_offset + 1)
        if earlier <= outer_offset and not open_tags(carried + text[:earlier]):
            return earlier, "", ""
        return outer_offset, "", ""

    closers = "".join(f"</{tag}>" for tag, _ in reversed(left_open))
    openers = "".join(f"<{tag}>" for tag, _ in left_open)
    return cut, closers, openers


def chunk(text: str, limit: int = MAX_CHUNK_LENGTH) -> List[str]:
    """Split formatted text into ordered chunks of at most limit characters.

    Each non-final chunk ends with CONTINUED_MARKER and each following chunk
    starts with CONTINUATION_MARKER. Chunks are individually valid markup.
    """
    if not text:
        return []
    chunks: List[str] = []
    carried = ""
    body = text
    while len(CONTINUATION_MARKER if chunks else "") + len(carried) + len(body) > limit:
        prefix = (CONTINUATION_MARKER if chunks else "") + carried
        room = limit - len(prefix) - len(CONTINUED_MARKER) - _TAG_RESERVE
        if room <= 0:
            raise ValueError(f"chunk limit {limit} too small for continuation markers")
        cut = find_break(body, room)
        cut, closers, openers = _balance(body, cut, room, carried)
        chunks.append(prefix + body[:cut] + closers + CONTINUED_MARKER)
        body = body[cut:]
        carried = openers
    chunks.append((CONTINUATION_MARKER if chunks else "") + carried + body)
    return chunks


def strip_markers(chunks: List[str]) -> str:
    """Join chunks back into the original text, dropping continuation markers."""
    parts = []
    for i, part in enumerate(chunks):
        if i > 0 and part.startswith(CONTINUATION_MARKER):
            part = part[len(CONTINUATION_MARKER):]
        if i < len(chunks) - 1 and part.endswith(CONTINUED_MARKER):
            part = part[: -len(CONTINUED_MARKER)]
        parts.append(part)
    return "".join(parts)


def render(raw_text: str, limit: int = MAX_CHUNK_LENGTH) -> List[str]:
    """Format a generated answer and split it for delivery."""
    return chunk(format_reply(raw_text), limit=limit)
