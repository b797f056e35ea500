"""
Response recovery - coerce a free-text model reply into review findings.

The reply goes through an ordered pipeline of pure text steps:

1. extract_fenced_block  - keep the first ```json block (or any fenced block)
2. strip_line_comments   - trim, drop // comments outside string literals
3. normalize_quotes      - typographic quotes to ASCII quotes
4. trim_to_braces        - keep the span from the first { to the last }

followed by parse_json (strict parse, then repair_json and a second parse)
and findings_from_payload, which reads the ``reviews`` list.
"""
import re
import json
import logging
from typing import Any, Callable, List, Tuple

from pydantic import ValidationError

from legal_review.exceptions import RecoveryError
from legal_review.models import ReviewFinding

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```json\b[ \t]*\n?(.*?)(?:```|\Z)", re.DOTALL | re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\n?(.*?)(?:```|\Z)", re.DOTALL)

_QUOTE_TABLE = str.maketrans({
    "“": '"', "”": '"', "„": '"', "‟": '"',
    "‘": "'", "’": "'", "‚": "'", "‛": "'",
})


def extract_fenced_block(text: str) -> str:
    match = _JSON_FENCE_RE.search(text)
    if match is None:
        match = _ANY_FENCE_RE.search(text)
    return match.group(1) if match else text


def strip_line_comments(text: str) -> str:
    """Trim and remove ``//`` comments running to end of line, leaving string literals alone."""
    text = text.strip()
    out: List[str] = []
    in_string = False
    escape = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            out.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            if newline == -1:
                break
            i = newline
            continue
        out.append(ch)
        i += 1
    return "".join(out).strip()


def normalize_quotes(text: str) -> str:
    return text.translate(_QUOTE_TABLE)


def trim_to_braces(text: str) -> str:
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and last > first:
        return text[first:last + 1]
    return text


TEXT_STEPS: Tuple[Callable[[str], str], ...] = (
    extract_fenced_block,
    strip_line_comments,
    normalize_quotes,
    trim_to_braces,
)


# --- repair -----------------------------------------------------------------

_LITERALS = {
    "true": "true", "false": "false", "null": "null",
    "True": "true", "False": "false", "None": "null",
}
_CLOSERS = {"{": "}", "[": "]"}
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}
_NUMBER_CHARS = set("0123456789+-.eE")
# what may follow "<value>," : a string, container, number, literal or bare key
_NEXT_TOKEN_RE = re.compile(
    r"[\"'{\[\d-]|(?:true|false|null|True|False|None)\b|[A-Za-z_$][\w$-]*\s*:"
)


def _last_token_index(out: List[str]) -> int:
    idx = len(out) - 1
    while idx >= 0 and not out[idx].strip():
        idx -= 1
    return idx


def _close_pending_value(out: List[str]) -> None:
    """Drop a dangling comma and fill a dangling colon before a container closes."""
    idx = _last_token_index(out)
    if idx < 0:
        return
    if out[idx] == ",":
        del out[idx]
    elif out[idx] == ":":
        out.append("null")


def _string_ends_at(text: str, pos: int) -> bool:
    """Whether the quote at pos terminates the string rather than being an inner quote."""
    j = pos + 1
    saw_newline = False
    while j < len(text) and text[j].isspace():
        saw_newline = saw_newline or text[j] == "\n"
        j += 1
    if j >= len(text) or text[j] in ":}]":
        return True
    if text[j] == ",":
        # an inner quote followed by prose punctuation, as in 依据“合同法”, 第5条
        k = j + 1
        while k < len(text) and text[k].isspace():
            k += 1
        return k >= len(text) or _NEXT_TOKEN_RE.match(text, k) is not None
    # a quote at line end followed by a new key on the next line
    return saw_newline and text[j] == '"'


def _read_string(text: str, start: int) -> Tuple[str, int]:
    """Read a single- or double-quoted string starting at start; return JSON literal and next index."""
    quote = text[start]
    buf = ['"']
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            nxt = text[i + 1] if i + 1 < len(text) else ""
            if nxt == "'":
                buf.append("'")
            elif nxt:
                buf.append("\\" + nxt)
            i += 2
            continue
        if ch == quote and _string_ends_at(text, i):
            buf.append('"')
            return "".join(buf), i + 1
        if ch == '"':
            buf.append('\\"')
        elif ch in _CONTROL_ESCAPES:
            buf.append(_CONTROL_ESCAPES[ch])
        elif ord(ch) < 0x20:
            buf.append(f"\\u{ord(ch):04x}")
        else:
            buf.append(ch)
        i += 1
    # unterminated
    buf.append('"')
    return "".join(buf), i


def repair_json(text: str) -> str:
    """
    Best-effort rewrite of almost-JSON into JSON.

    Handles trailing commas, missing commas between values, unquoted keys and
    bare words, single-quoted strings, unescaped inner quotes, raw control
    characters inside strings, unterminated strings, Python literals and
    unclosed or mismatched brackets.
    """
    out: List[str] = []
    stack: List[str] = []
    value_ended = False
    i = 0
    n = len(text)

    def begin_value():
        if value_ended and stack:
            out.append(",")

    while i < n:
        ch = text[i]
        if ch in "\"'":
            begin_value()
            literal, i = _read_string(text, i)
            out.append(literal)
            value_ended = True
            continue
        if ch in "{[":
            begin_value()
            stack.append(_CLOSERS[ch])
            out.append(ch)
            value_ended = False
        elif ch in "}]":
            if ch in stack:
                while stack:
                    closer = stack.pop()
                    _close_pending_value(out)
                    out.append(closer)
                    if closer == ch:
                        break
                value_ended = True
            # a closer with no matching opener is dropped
        elif ch in ",:":
            out.append(ch)
            value_ended = False
        elif ch.isdigit() or ch == "-":
            begin_value()
            j = i
            while j < n and text[j] in _NUMBER_CHARS:
                j += 1
            out.append(text[i:j])
            value_ended = True
            i = j
            continue
        elif ch.isalpha() or ch in "_$":
            begin_value()
            j = i
            while j < n and (text[j].isalnum() or text[j] in "_$-"):
                j += 1
            word = text[i:j]
            out.append(_LITERALS.get(word) or json.dumps(word, ensure_ascii=False))
            value_ended = True
            i = j
            continue
        elif ch.isspace():
            out.append(ch)
        # anything else outside a string is noise
        i += 1

    while stack:
        _close_pending_value(out)
        out.append(stack.pop())
    return "".join(out)


def parse_json(text: str) -> Any:
    """
    Strict parse, falling back to a repaired parse.

    Raises:
        RecoveryError: neither the text nor its repair parses
    """
    # RecursionError: nesting deeper than the decoder can follow
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as strict_error:
        logger.warning(f"Strict JSON parse failed: {type(strict_error).__name__}: {strict_error}, "
                       f"attempting repair")
        repaired = repair_json(text)
        try:
            return json.loads(repaired, strict=False)
        except (json.JSONDecodeError, RecursionError) as repair_error:
            logger.error(f"Repaired JSON parse failed: {repair_error}, "
                         f"raw text preview: {text[:300]!r}")
            raise RecoveryError(f"Reply is not valid JSON even after repair: {repair_error}") from repair_error


def findings_from_payload(payload: Any) -> List[ReviewFinding]:
    """Read the reviews list; a missing or non-list reviews field means no findings."""
    if not isinstance(payload, dict):
        logger.warning(f"Recovered JSON is not an object: {type(payload).__name__}")
        return []
    items = payload.get("reviews")
    if not isinstance(items, list):
        logger.info("Recovered JSON has no reviews list, treating as zero findings")
        return []

    findings: List[ReviewFinding] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning(f"Skipping review item {index}: not an object")
            continue
        try:
            findings.append(ReviewFinding.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping review item {index}: {e.error_count()} invalid field(s)")
    return findings


def recover_payload(raw: str) -> Any:
    """Run the text steps and parse; raises RecoveryError when nothing parses."""
    text = raw or ""
    for step in TEXT_STEPS:
        text = step(text)
    return parse_json(text)


def recover_findings(raw: str) -> List[ReviewFinding]:
    return findings_from_payload(recover_payload(raw))
