# feature_switch/strip/stripper.py
"""
Build-time removal of disabled feature blocks from source text.

Regions are delimited by FEATURE.start(name) / FEATURE.end(name) markers in
HTML, star (/* */) or slash (//) comments, by custom elements named after the
feature, or by elements carrying a feature-name="name" attribute. Each region
belonging to a disabled feature is replaced with the dialect's template.
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from feature_switch.flags.truth import as_features
from feature_switch.strip.options import (
    HTML_ATTRIBUTES,
    HTML_COMMENTS,
    HTML_ELEMENTS,
    SLASH_COMMENTS,
    STAR_COMMENTS,
    invalid_dialects,
    merge_options,
    render_replacement,
)

logger = logging.getLogger(__name__)

STAR_COMMENT = re.compile(r"/\*[\s\S]*?\*/")


def _start_marker(feature: str) -> str:
    return rf"FEATURE\.start\({re.escape(feature)}\)"


def _end_marker(feature: str) -> str:
    return rf"FEATURE\.end\({re.escape(feature)}\)"


def _substitute(content: str, pattern: str, replacement: str, flags: int = 0) -> str:
    # A callable replacement keeps backslashes in templates literal
    return re.sub(pattern, lambda _match: replacement, content, flags=flags)


def strip_html_comments(content: str, feature: str, replace: str) -> str:
    """
    Strip regions between HTML comment markers.

        <!-- FEATURE.start(some-feature) -->
        <div>some feature is enabled</div>
        <!-- FEATURE.end(some-feature) -->
    """
    pattern = (
        rf"<!--\s*\S*\s*{_start_marker(feature)}"
        r"[\s\S]*?"
        rf"{_end_marker(feature)}\s*\S*\s*-->"
    )
    return _substitute(content, pattern, render_replacement(replace, feature))


def strip_html_elements(content: str, feature: str, replace: str) -> str:
    """
    Strip custom elements named after the feature.

        <some-feature class="x">...</some-feature>
    """
    name = re.escape(feature)
    pattern = rf"<{name}(?![\w-])[\s\S]*?</{name}\s*>"
    return _substitute(content, pattern, render_replacement(replace, feature))


def strip_html_attributes(content: str, feature: str, replace: str) -> str:
    """
    Strip elements tagged with a feature-name attribute.

        <div class="x" feature-name="some-feature">...</div>

    Nested elements with the same tag name as the tagged element are not
    supported; the region ends at the first matching closing tag.
    """
    pattern = (
        r"<([\w-]+)[^>]*?\sfeature-name\s*=\s*[\"']?"
        rf"{re.escape(feature)}"
        r"[\"']?(?=[\s/>])[^>]*>"
        r"[\s\S]*?"
        r"</\1\s*>"
    )
    return _substitute(content, pattern, render_replacement(replace, feature))


def strip_star_comments(content: str, feature: str, replace: str) -> str:
    """
    Strip from a star comment holding the start marker through the next star
    comment holding the end marker. Markers may sit anywhere inside a
    (possibly multi-line) comment.

        /* FEATURE.start(some-feature) */
        console.log('some feature is enabled');
        /* FEATURE.end(some-feature) */
    """
    start = re.compile(_start_marker(feature))
    end = re.compile(_end_marker(feature))

    regions: List[Tuple[int, int]] = []
    region_start: Optional[int] = None

    for comment in STAR_COMMENT.finditer(content):
        text = comment.group(0)
        end_search_from = 0

        if region_start is None:
            start_match = start.search(text)
            if not start_match:
                continue
            region_start = comment.start()
            end_search_from = start_match.end()

        if end.search(text, end_search_from):
            regions.append((region_start, comment.end()))
            region_start = None

    if not regions:
        return content

    replacement = render_replacement(replace, feature)
    parts: List[str] = []
    previous = 0
    for begin, finish in regions:
        parts.append(content[previous:begin])
        parts.append(replacement)
        previous = finish
    parts.append(content[previous:])
    return "".join(parts)


def strip_slash_comments(content: str, feature: str, replace: str) -> str:
    """
    Strip from a // line holding the start marker through the end of the
    next // line holding the end marker.

        // FEATURE.start(some-feature)
        console.log('some feature is enabled');
        // FEATURE.end(some-feature)
    """
    pattern = (
        rf"//[^\S\r\n]*{_start_marker(feature)}.*$"
        r"[\s\S]*?"
        rf"//[^\S\r\n]*{_end_marker(feature)}.*$"
    )
    return _substitute(content, pattern, render_replacement(replace, feature), flags=re.MULTILINE)


STRIPPERS = {
    HTML_COMMENTS: strip_html_comments,
    HTML_ELEMENTS: strip_html_elements,
    HTML_ATTRIBUTES: strip_html_attributes,
    STAR_COMMENTS: strip_star_comments,
    SLASH_COMMENTS: strip_slash_comments,
}


def disabled_features(features: Mapping[str, Any]) -> List[str]:
    """Names of the features in a feature set that are not enabled."""
    return [name for name, enabled in as_features(features).items() if not enabled]


def strip(
    content: str,
    features: Mapping[str, Any],
    options: Optional[Mapping[str, Any]] = None
) -> str:
    """
    Strip every disabled feature block from content.

    Args:
        content: Source text
        features: Feature set of name -> enabled
        options: Partial per-dialect overrides of DEFAULT_OPTIONS

    Returns:
        The content with disabled regions replaced

    Raises:
        ValueError: If a dialect's options are neither a mapping nor a boolean
    """
    resolved: Dict[str, Dict[str, Any]] = merge_options(options)

    invalid = invalid_dialects(resolved)
    if invalid:
        raise ValueError(f"Options for {', '.join(invalid)} must be a mapping or a boolean")

    for feature in disabled_features(features):
        for dialect, stripper in STRIPPERS.items():
            settings = resolved[dialect]
            if not settings.get("enabled"):
                continue
            stripped = stripper(content, feature, str(settings.get("replace", "")))
            if stripped != content:
                logger.debug(f"Stripped {dialect} blocks for feature {feature}")
            content = stripped

    return content
