import re
from collections.abc import Sequence

from rust_order.models import Category, ItemUnit

# Head marker the scanner records for a string literal at depth zero (an `extern "C"` ABI).
STRING_MARKER = '"'

_QUALIFIERS = frozenset({"pub", "async", "unsafe", "safe", "default"})
_FN_QUALIFIERS = frozenset({"fn", "unsafe", "async", "extern", "safe"})
_SEMICOLON_KEYWORDS = frozenset({"use", "extern crate", "type", "const", "static"})
_TEST_MODULE_NAMES = frozenset({"tests"})

_KEYWORD_CATEGORIES = {
    "use": Category.IMPORT,
    "extern crate": Category.IMPORT,
    "type": Category.TYPE_ALIAS,
    "const": Category.CONSTANT,
    "static": Category.CONSTANT,
    "mod": Category.MODULE,
    "impl": Category.IMPLEMENTATION,
    "fn": Category.FUNCTION,
}

_CFG_TOKEN = re.compile(r'"(?:\\.|[^"\\])*"|[A-Za-z_][A-Za-z0-9_]*|[(),=]')


def leading_keyword(head: Sequence[str]) -> tuple[str | None, int]:
    """Return the item keyword in *head* and its index, skipping visibility and qualifiers.

    ``const fn`` and ``extern "C" fn`` resolve to ``fn``; ``extern crate`` is
    reported as a single keyword. Returns ``(None, len(head))`` when the head
    runs out before a keyword is found.
    """
    i = 0
    while i < len(head):
        word = head[i]
        following = head[i + 1] if i + 1 < len(head) else None
        if word in _QUALIFIERS or word == STRING_MARKER:
            i += 1
            continue
        if word == "const":
            if following in _FN_QUALIFIERS:
                i += 1
                continue
            return word, i
        if word == "extern":
            if following == "crate":
                return "extern crate", i
            i += 1
            continue
        return word, i
    return None, len(head)


def is_semicolon_terminated(head: Sequence[str]) -> bool:
    """True for items that only a top-level ``;`` can end (a closing brace inside them is an expression)."""
    keyword, _ = leading_keyword(head)
    return keyword in _SEMICOLON_KEYWORDS


def cfg_enables_test(attribute: str) -> bool:
    """Check whether a ``#[cfg(...)]`` attribute turns on under ``cfg(test)``.

    ``test`` counts when it appears bare or nested only inside ``any``/``all``;
    ``not(test)`` and ``feature = "test"`` do not count.
    """
    body = attribute.strip()
    if not body.startswith("#[") or not body.endswith("]"):
        return False
    tokens = _CFG_TOKEN.findall(body[2:-1])
    if len(tokens) < 3 or tokens[0] != "cfg" or tokens[1] != "(":
        return False

    stack: list[str] = []
    for pos, token in enumerate(tokens[2:], start=2):
        following = tokens[pos + 1] if pos + 1 < len(tokens) else None
        if token == ")":
            if not stack:
                break
            stack.pop()
        elif following == "(":
            stack.append(token)
        elif token == "test" and following != "=" and all(name in ("any", "all") for name in stack):
            return True
    return False


def is_test_module(unit: ItemUnit, name: str | None) -> bool:
    if name in _TEST_MODULE_NAMES:
        return True
    return any(cfg_enables_test(attr) for attr in unit.attributes)


def classify(unit: ItemUnit) -> Category:
    if not unit.terminated:
        return Category.OTHER

    keyword, index = leading_keyword(unit.head)
    category = _KEYWORD_CATEGORIES.get(keyword or "", Category.OTHER)
    if category is Category.MODULE:
        name = unit.head[index + 1] if index + 1 < len(unit.head) else None
        if is_test_module(unit, name):
            return Category.TEST_MODULE
    return category
