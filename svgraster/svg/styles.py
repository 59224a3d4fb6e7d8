"""Style cascade — <style> sheets, selector specificity, inline declarations.

Selector tables live on the session:
    session.styles[selector]              {property name → Property}
    session.styles_specificity[selector]  "abc" string of the three counts
    session.selectors[selector]           compiled cssselect2 selector

Specificities are compared as plain strings; a count of 10 or more compares
lexicographically rather than numerically.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

import cssselect2
import tinycss2

from svgraster.svg.properties import Property

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.svg.elements.base import Element

logger = logging.getLogger(__name__)

DEFAULT_SPECIFICITY = "000"
FONT_FACE = "@font-face"


def parse_declarations(css: str) -> list[tuple[str, str]]:
    """Parse ``name: value; ...`` into ordered (name, value) pairs."""
    declarations = tinycss2.parse_declaration_list(css, skip_comments=True, skip_whitespace=True)
    pairs = []
    for decl in declarations:
        if decl.type != "declaration":
            continue
        pairs.append((decl.lower_name, tinycss2.serialize(decl.value).strip()))
    return pairs


def specificity_string(specificity: tuple[int, int, int]) -> str:
    return "".join(str(n) for n in specificity)


def _compile(selector: str) -> Optional[Any]:
    try:
        compiled = cssselect2.compile_selector_list(selector)
    except cssselect2.SelectorError as e:
        logger.warning("Unsupported selector %r: %s", selector, e)
        return None
    if not compiled:
        return None
    return compiled[0]


def _merge(session: "RenderSession", selector: str, declarations: list[tuple[str, str]]) -> None:
    props = session.styles.get(selector, {})
    for name, value in declarations:
        props[name] = Property(name, value, session)
    session.styles[selector] = props


def add_stylesheet(session: "RenderSession", css: str) -> list[dict[str, Property]]:
    """Merge a stylesheet into the session tables.

    Returns the ``@font-face`` declaration tables found, in order.
    """
    font_faces: list[dict[str, Property]] = []
    for rule in tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True):
        if rule.type == "error":
            logger.warning("CSS parse error: %s", rule.message)
            continue

        if rule.type == "at-rule":
            if rule.lower_at_keyword != "font-face" or rule.content is None:
                logger.debug("Skipping @%s rule", rule.at_keyword)
                continue
            declarations = parse_declarations(tinycss2.serialize(rule.content))
            _merge(session, FONT_FACE, declarations)
            font_faces.append({name: Property(name, value, session) for name, value in declarations})
            continue

        declarations = parse_declarations(tinycss2.serialize(rule.content))
        for selector in tinycss2.serialize(rule.prelude).split(","):
            selector = " ".join(selector.split())
            if not selector:
                continue
            compiled = _compile(selector)
            if compiled is None:
                continue
            _merge(session, selector, declarations)
            session.selectors[selector] = compiled
            session.styles_specificity[selector] = specificity_string(compiled.specificity)
    return font_faces


def matches(session: "RenderSession", element: "Element", selector: str) -> bool:
    compiled = session.selectors.get(selector)
    if compiled is None or element.node is None or compiled.pseudo_element is not None:
        return False
    return bool(compiled.test(element.node))


def apply_matching_styles(element: "Element") -> None:
    """Copy every matching rule's properties onto ``element`` by specificity.

    Each element gets its own Property, so animating or clearing one never
    touches the other elements the rule matched.

    A property is overwritten only by a strictly greater specificity, so on
    ties the first rule applied wins.
    """
    session = element.session
    for selector, props in session.styles.items():
        if selector.startswith("@") or not matches(session, element, selector):
            continue
        specificity = session.styles_specificity.get(selector, DEFAULT_SPECIFICITY)
        for name, prop in props.items():
            existing = element.styles_specificity.get(name, DEFAULT_SPECIFICITY)
            if specificity > existing:
                element.styles[name] = Property(name, prop.value, session)
                element.styles_specificity[name] = specificity


def svg_font_sources(font_face: dict[str, Property]) -> tuple[str, list[str]]:
    """Family name and the ``format("svg")`` source URLs of a @font-face rule."""
    family = str(font_face.get("font-family", Property("font-family", "")).value).replace('"', "").replace("'", "")
    src = font_face.get("src")
    urls: list[str] = []
    if src is None or not src.has_value():
        return family, urls
    for source in str(src.value).split(","):
        if 'format("svg")' not in source and "format('svg')" not in source:
            continue
        for token in tinycss2.parse_component_value_list(source):
            if token.type == "url":
                urls.append(token.value)
            elif token.type == "function" and token.lower_name == "url":
                urls.extend(t.value for t in token.arguments if t.type == "string")
    return family.strip(), urls
