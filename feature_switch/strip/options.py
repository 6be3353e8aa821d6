# feature_switch/strip/options.py
"""
Options for the stripping tool.

Each dialect has an ``enabled`` switch and a ``replace`` template. The
template may contain ``${FEATURE}``, which is substituted with the name of
the disabled feature.
"""
import copy
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

FEATURE_TOKEN = "${FEATURE}"

HTML_COMMENTS = "html_comments"
HTML_ELEMENTS = "html_elements"
HTML_ATTRIBUTES = "html_attributes"
STAR_COMMENTS = "star_comments"
SLASH_COMMENTS = "slash_comments"

# Application order during strip()
DIALECTS = (
    HTML_COMMENTS,
    HTML_ELEMENTS,
    HTML_ATTRIBUTES,
    STAR_COMMENTS,
    SLASH_COMMENTS,
)

DEFAULT_OPTIONS: Dict[str, Dict[str, Any]] = {
    # <!-- FEATURE.start(name) --> ... <!-- FEATURE.end(name) -->
    HTML_COMMENTS: {
        "enabled": True,
        "replace": "<!-- Feature [${FEATURE}] DISABLED -->"
    },
    # <name ...> ... </name>
    HTML_ELEMENTS: {
        "enabled": True,
        "replace": "<!-- Feature [${FEATURE}] DISABLED -->"
    },
    # <div ... feature-name="name" ...> ... </div>
    HTML_ATTRIBUTES: {
        "enabled": True,
        "replace": "<!-- Feature [${FEATURE}] DISABLED -->"
    },
    # /* FEATURE.start(name) */ ... /* FEATURE.end(name) */
    STAR_COMMENTS: {
        "enabled": True,
        "replace": "/* Feature [${FEATURE}] DISABLED */"
    },
    # // FEATURE.start(name) ... // FEATURE.end(name)
    SLASH_COMMENTS: {
        "enabled": True,
        "replace": "// Feature [${FEATURE}] DISABLED //"
    },
}


def merge_deep(target: Dict[str, Any], *sources: Optional[Mapping]) -> Dict[str, Any]:
    """
    Merge mappings into target recursively, later sources winning.

    Nested mappings are merged key by key; any other value replaces the
    existing one. Non-mapping sources are skipped. Returns target.
    """
    for source in sources:
        if not isinstance(source, Mapping):
            continue
        for key, value in source.items():
            if isinstance(value, Mapping):
                existing = target.get(key)
                if not isinstance(existing, dict):
                    existing = {}
                    target[key] = existing
                merge_deep(existing, value)
            else:
                target[key] = value
    return target


def expand_shorthand(overrides: Optional[Mapping]) -> Optional[Mapping]:
    """Turn ``{dialect: bool}`` shorthand into ``{dialect: {"enabled": bool}}``."""
    if not isinstance(overrides, Mapping):
        return overrides
    return {
        key: {"enabled": value} if key in DIALECTS and isinstance(value, bool) else value
        for key, value in overrides.items()
    }


def invalid_dialects(options: Mapping) -> List[str]:
    """Dialects whose settings are neither a mapping nor a boolean."""
    return [
        dialect for dialect in DIALECTS
        if dialect in options and not isinstance(options[dialect], (Mapping, bool))
    ]


def merge_options(*overrides: Optional[Mapping]) -> Dict[str, Dict[str, Any]]:
    """
    Return the default options with overrides applied, leaving defaults intact.

    A dialect may be given as a bare boolean to switch it on or off while
    keeping its default replacement.
    """
    expanded = [expand_shorthand(override) for override in overrides]
    return merge_deep(copy.deepcopy(DEFAULT_OPTIONS), *expanded)


def render_replacement(template: str, feature: str) -> str:
    """Substitute every ${FEATURE} token in template with the feature name."""
    return template.replace(FEATURE_TOKEN, feature)
