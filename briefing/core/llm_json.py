"""Pull JSON values out of free-form LLM responses."""

from __future__ import annotations

import json
from typing import Any, Iterator

_CLOSERS = {"[": "]", "{": "}"}


def strip_code_fence(text: str) -> str:
    """Remove Markdown code-fence lines (```json ... ```) from a response."""
    lines = [line for line in text.strip().splitlines() if not line.strip().startswith("```")]
    return "\n".join(lines).strip()


def iter_balanced(text: str, opener: str) -> Iterator[str]:
    """Yield the outermost balanced ``[...]`` or ``{...}`` substrings in order.

    Brackets inside JSON string literals are ignored. Scanning resumes after
    each yielded structure, so nested structures are never yielded on their
    own. An opener that is never closed is skipped.

    Args:
        text: Raw text that may wrap the JSON value in prose.
        opener: ``"["`` or ``"{"``.
    """
    closer = _CLOSERS[opener]
    start = text.find(opener)
    while start != -1:
        depth = 0
        in_string = False
        escape = False
        for idx in range(start, len(text)):
            ch = text[idx]
            if in_string:
                if escape:
                    escape = False
                elif ch == "\\":
                    escape = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == opener:
                depth += 1
            elif ch == closer:
                depth -= 1
                if depth == 0:
                    yield text[start: idx + 1]
                    break
        else:
            idx = start
        start = text.find(opener, idx + 1)


def find_balanced(text: str, opener: str) -> str | None:
    """Return the first balanced structure, or None if none starts in ``text``."""
    return next(iter_balanced(text, opener), None)


def extract_json(text: str, opener: str) -> Any:
    """Strip fences and parse the first balanced structure that is valid JSON.

    Bracketed prose such as ``[siehe unten]`` is skipped.

    Raises:
        ValueError: If no balanced structure parses as JSON
            (``json.JSONDecodeError`` is a ``ValueError``).
    """
    last_error: ValueError | None = None
    for candidate in iter_balanced(strip_code_fence(text), opener):
        try:
            return json.loads(candidate)
        except ValueError as e:
            last_error = e
    if last_error is not None:
        raise last_error
    raise ValueError(f"no balanced {opener!r} structure in response")
