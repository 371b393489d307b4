"""
Response Normalizer - Recover JSON from loosely structured model output.

Models asked for JSON still wrap it in Markdown fences, prepend a friendly
sentence, or append commentary. normalize() tries, in order:

1. The whole string as JSON
2. The body of the first ``` / ```json fenced block
3. The span from the first "{" to the last "}"

and returns `default` (None unless given) when nothing parses. It never
raises. Callers that must tell a literal JSON null apart from unparseable
text pass default=NOT_JSON.
"""

import json
import logging
import re
from typing import Any, Optional, Tuple

logger = logging.getLogger("tubegrow.ai.normalizer")

# Marks "no JSON found", distinct from a parsed null
NOT_JSON: Any = object()

_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def _try_parse(text: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (TypeError, ValueError):
        return False, None


def normalize(text: Optional[str], default: Any = None) -> Any:
    """
    Extract a JSON value from raw model text.

    Args:
        text: Raw text returned by a provider
        default: Returned when no strategy succeeded

    Returns:
        The parsed JSON value (possibly None for a literal null), or default
    """
    if not text:
        return default

    ok, value = _try_parse(text)
    if ok:
        return value

    match = _FENCED_BLOCK_RE.search(text)
    if match and match.group(1):
        ok, value = _try_parse(match.group(1))
        if ok:
            return value

    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        ok, value = _try_parse(text[first_brace:last_brace + 1])
        if ok:
            return value

    logger.debug(f"Could not recover JSON from {len(text)} chars of model output")
    return default
