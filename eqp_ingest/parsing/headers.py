import re

_NO_CAL_PAREN_RE = re.compile(r"\(\s*no\s*cal\.?\s*\)", re.IGNORECASE)
_NO_CAL_RE = re.compile(r"\bno[\s_]*cal\b", re.IGNORECASE)
_CAL_PAREN_RE = re.compile(r"\(\s*cal\.?\s*\)", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_STRIP_CHARS_RE = re.compile(r"[#/:\-]")

# Micrometre units appear as "(µm)", "(μm)", "(um)" or, after a cp949
# decode of the vendor's symbol, "(탆)".
_UNIT_TOKENS = ("(mm)", "(µm)", "(μm)", "(um)", "(탆)")


def normalize_header(header: str) -> str:
    """Turn a vendor column title into a lowercase identifier.

    ``"Die X"`` becomes ``diex``, ``"Thickness (no cal.)"`` becomes
    ``thickness_nocal``, ``"Point#"`` becomes ``point``. Applying it to an
    already-normalized name returns the name unchanged.
    """
    current = header
    while True:
        normalized = _normalize_once(current)
        if normalized == current:
            return normalized
        current = normalized


def _normalize_once(header: str) -> str:
    h = _STRIP_CHARS_RE.sub("", header.lower())
    h = _NO_CAL_PAREN_RE.sub(" nocal ", h)
    h = _NO_CAL_RE.sub("nocal", h)
    h = _CAL_PAREN_RE.sub(" cal ", h)
    for token in _UNIT_TOKENS:
        h = h.replace(token, "")
    h = h.replace("die x", "diex").replace("die y", "diey").strip()
    return _WHITESPACE_RE.sub("_", h)


def build_header_map(headers: list[str]) -> dict[str, int]:
    """Map each normalized name to its column index; first occurrence wins.

    Blank names (e.g. from a trailing comma) get no column.
    """
    header_map: dict[str, int] = {}
    for index, name in enumerate(headers):
        if name:
            header_map.setdefault(name, index)
    return header_map
