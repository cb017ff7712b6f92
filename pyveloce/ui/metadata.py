"""Element metadata extraction from embedded element scripts.

An element script declares its component through a decorator placed on a
class, e.g.::

    @ElementDefinition({
      name: 'Header',
      selector: 'vl-header',
    })
    export class HeaderComponent {}

Only string-valued properties at the top level of the decorator object are
read; nested objects and arrays are ignored.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

DECORATOR_START_RE = re.compile(r"@(?P<decorator>[A-Za-z_$][\w$]*)\s*\(\s*\{")
CLASS_AFTER_DECORATOR_RE = re.compile(
    r"\s*\)\s*(?:@[\w$.]+(?:\([^()]*\))?\s*)*"
    r"(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\b"
)
PROPERTY_RE = re.compile(
    r"""(?:^|(?<=[\s,]))['"]?(?P<key>[A-Za-z_$][\w$]*)['"]?\s*:\s*"""
    r"""(?P<quote>['"`])(?P<value>(?:\\.|(?!(?P=quote)).)*)(?P=quote)""",
    re.DOTALL,
)
QUOTES = "'\"`"
OPENERS = "{[("
CLOSERS = "}])"


@dataclass
class ElementMetadata:
    """Declaration read from an element script."""

    name: str
    decorator: str
    properties: dict[str, str] = field(default_factory=dict)


def _top_level_body(text: str, start: int) -> Optional[tuple[str, int]]:
    """Scan an object literal body starting right after its opening brace.

    Returns the body with everything nested below the top level blanked out,
    and the index of the closing brace. Returns None if the braces are not
    balanced.
    """
    out: list[str] = []
    depth = 0
    quote: Optional[str] = None
    i = start

    while i < len(text):
        ch = text[i]
        keep = depth == 0

        if quote:
            if ch == "\\" and i + 1 < len(text):
                out.append(text[i : i + 2] if keep else "  ")
                i += 2
                continue
            if ch == quote:
                quote = None
            out.append(ch if keep else " ")
            i += 1
            continue

        if text.startswith("//", i):
            end = text.find("\n", i)
            end = len(text) if end == -1 else end
            out.append(" " * (end - i))
            i = end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = len(text) if end == -1 else end + 2
            out.append(" " * (end - i))
            i = end
            continue

        if ch in QUOTES:
            quote = ch
            out.append(ch if keep else " ")
        elif ch in OPENERS:
            depth += 1
            out.append(" ")
        elif ch in CLOSERS:
            if depth == 0:
                return ("".join(out), i) if ch == "}" else None
            depth -= 1
            out.append(" ")
        else:
            out.append(ch if keep else " ")
        i += 1

    return None


def extract_element_metadata(script: str) -> Optional[ElementMetadata]:
    """Find the class decorator of an element script.

    Args:
        script: Decoded element script

    Returns:
        The first decorator object applied to a class, or None
    """
    for match in DECORATOR_START_RE.finditer(script):
        scanned = _top_level_body(script, match.end())
        if scanned is None:
            continue
        body, end = scanned
        if not CLASS_AFTER_DECORATOR_RE.match(script, end + 1):
            continue

        properties = {
            m.group("key"): m.group("value") for m in PROPERTY_RE.finditer(body)
        }
        name = properties.get("name", "").strip()
        if not name:
            continue
        return ElementMetadata(
            name=name, decorator=match.group("decorator"), properties=properties
        )

    return None


def extract_name(script: str) -> Optional[str]:
    """Return the declared element name, or None if there is none.

    Names that cannot be used as a directory name are treated as absent.
    """
    metadata = extract_element_metadata(script)
    if metadata is None:
        return None

    name = metadata.name
    if name in (".", "..") or "/" in name or "\\" in name:
        logger.warning("Ignoring element name unusable as a directory: %r", name)
        return None
    return name
