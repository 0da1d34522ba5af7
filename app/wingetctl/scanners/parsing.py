"""Heuristic parsers for winget's tabular text output.

winget prints loosely aligned tables whose column boundaries and header
labels vary with locale and tool version. There is no machine-readable
mode, so every parser here anchors on the package identifier column: the
first token that contains a '.' and at least one letter (e.g.
'Google.Chrome'). Values are then read at fixed offsets to the right of
that token.

All functions are pure: raw text in, string out. An empty string means
"not determined"; callers treat it as unknown rather than as an error.

Example:
    >>> text = "Name Id Version Source\\nGoogle Chrome Google.Chrome 119.0.1 winget"
    >>> parse_installed_version(text)
    '119.0.1'
    >>> parse_source(text)
    'winget'
"""

import logging
from collections.abc import Iterable, Iterator

from wingetctl.models.package import DEFAULT_SOURCE, PackageSource

logger = logging.getLogger(__name__)

# Registry names that can appear in the Source column
SOURCE_NAMES: frozenset[str] = frozenset(source.value for source in PackageSource)

# Column headers of `winget list` in the locales winget ships with
HEADER_TOKENS: frozenset[str] = frozenset(
    {
        # English
        "name",
        "id",
        "version",
        "source",
        "match",
        # French
        "nom",
        # German
        "quelle",
        # Spanish
        "nombre",
        "versión",
        "origen",
        # Italian
        "nome",
        "versione",
        "origine",
        # Portuguese
        "versão",
        "fonte",
        # Japanese
        "名前",
        "バージョン",
        "ソース",
        # Simplified Chinese
        "名称",
        "版本",
        "源",
    }
)

# Extra headers printed by `winget upgrade` for the newest version column
AVAILABLE_TOKENS: frozenset[str] = frozenset(
    {
        "available",
        "disponible",
        "verfügbar",
        "disponibile",
        "disponível",
        "利用可能",
        "可用",
    }
)

# Markers meaning the listing query matched nothing
NOT_INSTALLED_MARKERS: tuple[str, ...] = (
    "no installed package found",
    "no package found",
)

# Markers meaning the upgrade check found nothing to do
NO_UPDATE_MARKERS: tuple[str, ...] = (
    "no applicable update found",
    "no available upgrade found",
    "no installed package found",
    "no package found",
)

# Left by errors="replace" decoding; winget mangles some localized headers
_REPLACEMENT_CHAR = "\ufffd"

# Glyphs winget uses for download/progress bars
_PROGRESS_GLYPHS = frozenset("█▒░")


def _normalize_line(raw: str) -> str:
    """Keep only what a terminal would finally show for a raw line.

    winget redraws spinners and progress bars with carriage returns, so a
    captured line can hold several frames; the last one wins.
    """
    return raw.rsplit("\r", 1)[-1].strip()


def _is_progress_line(line: str) -> bool:
    return any(ch in _PROGRESS_GLYPHS for ch in line)


def is_header_line(line: str, extra_tokens: Iterable[str] = ()) -> bool:
    """Check if a line looks like a table header in any supported locale.

    Args:
        line: Normalized output line.
        extra_tokens: Additional lower-cased header tokens to recognise.

    Returns:
        True if any whitespace-separated token is a known header label.
    """
    extra = frozenset(extra_tokens)
    for token in line.split():
        lowered = token.lower()
        if lowered in HEADER_TOKENS or lowered in extra:
            return True
    return False


def _data_rows(text: str, extra_header_tokens: Iterable[str] = ()) -> Iterator[list[str]]:
    """Yield the whitespace-split tokens of every non-header, non-noise line."""
    extra = frozenset(extra_header_tokens)
    for raw in text.splitlines():
        line = _normalize_line(raw)
        if not line or line.startswith("-") or _is_progress_line(line):
            continue
        if _REPLACEMENT_CHAR in line:
            logger.debug("Skipping undecodable line: %r", line[:100])
            continue
        if is_header_line(line, extra):
            logger.debug("Skipping header line: %r", line[:100])
            continue
        yield line.split()


def is_identifier_token(token: str) -> bool:
    """Check if a token looks like a package identifier.

    The check is a dot plus at least one letter, which separates
    'Google.Chrome' from '119.0.1'.
    """
    return "." in token and any(ch.isalpha() for ch in token)


def is_strict_identifier_token(token: str) -> bool:
    """Check if a token looks like an identifier with letters in both leading segments.

    Used for the wider upgrade table, where the looser check would also
    match version strings such as '1.2.3-beta'.
    """
    segments = token.split(".")
    if len(segments) < 2:
        return False
    return any(ch.isalpha() for ch in segments[0]) and any(ch.isalpha() for ch in segments[1])


def parse_installed_version(text: str) -> str:
    """Extract the installed version from `winget list` output.

    Args:
        text: Raw captured output.

    Returns:
        The token right after the identifier column, or "" if none found.
    """
    if not text or not text.strip():
        return ""

    rejected = HEADER_TOKENS | SOURCE_NAMES
    for parts in _data_rows(text):
        for index, token in enumerate(parts[:-1]):
            if not is_identifier_token(token):
                continue
            version = parts[index + 1]
            if version.lower() not in rejected:
                return version
    return ""


def parse_source(text: str) -> str:
    """Extract the source registry from `winget list` output.

    Args:
        text: Raw captured output.

    Returns:
        The lower-cased registry two columns after the identifier, or the
        default channel if no known registry name is found there.
    """
    if not text or not text.strip():
        return DEFAULT_SOURCE

    for parts in _data_rows(text):
        for index, token in enumerate(parts[:-2]):
            if not is_identifier_token(token):
                continue
            source = parts[index + 2].lower()
            if source in SOURCE_NAMES:
                return source
    return DEFAULT_SOURCE


def parse_available_version(text: str) -> str:
    """Extract the newest available version from `winget upgrade` output.

    Upgrade rows read (name..., id, installed, available, source), so the
    value sits two columns after the identifier.

    Args:
        text: Raw captured output.

    Returns:
        The available version, or "" if it cannot be determined.
    """
    if not text or not text.strip():
        return ""

    rejected = HEADER_TOKENS | AVAILABLE_TOKENS | SOURCE_NAMES
    for parts in _data_rows(text, AVAILABLE_TOKENS):
        for index, token in enumerate(parts[:-2]):
            if not is_strict_identifier_token(token):
                continue
            version = parts[index + 2]
            if version.lower() not in rejected:
                return version
    return ""


def _contains_marker(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def is_not_installed(text: str) -> bool:
    """Check if listing output is empty or says the package is not installed."""
    if not text or not text.strip():
        return True
    return _contains_marker(text, NOT_INSTALLED_MARKERS)


def has_no_update(text: str) -> bool:
    """Check if upgrade-check output is empty or reports nothing to upgrade."""
    if not text or not text.strip():
        return True
    return _contains_marker(text, NO_UPDATE_MARKERS)


def parse_show_details(text: str) -> dict[str, str]:
    """Extract key/value fields from `winget show` output.

    The first line reads 'Found <display name> [<id>]'; it is reported
    under the 'name' and 'id' keys. Following 'Key: value' lines are
    returned with lower-cased keys. Indented continuation lines are
    ignored.

    Args:
        text: Raw captured output.

    Returns:
        Mapping of field name to value; empty if nothing was recognised.
    """
    details: dict[str, str] = {}
    if not text or not text.strip():
        return details

    for raw in text.splitlines():
        if raw[:1].isspace():
            continue
        line = _normalize_line(raw)
        if not line or _is_progress_line(line):
            continue
        if line.startswith("Found ") and line.endswith("]") and "[" in line:
            name, _, package_id = line[len("Found ") : -1].rpartition("[")
            details.setdefault("name", name.strip())
            details.setdefault("id", package_id.strip())
            continue
        key, sep, value = line.partition(":")
        if sep and key and " " not in key.strip() and value.strip():
            details.setdefault(key.strip().lower(), value.strip())
    return details
