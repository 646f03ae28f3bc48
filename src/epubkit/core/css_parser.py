"""Parse the small CSS subset needed to style content nodes.

Only plain rule blocks are understood: no combinators, pseudo-classes,
at-rules or cascade. Grouped selectors such as ``.a, .b { ... }`` are split
and every member is indexed on its own; a later block for the same selector
updates the declarations of an earlier one. Lookup is exact string equality
on a single selector.
"""

import re

from epubkit.models.nodes import Align, Margin

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

_ALIGNMENTS = {
    "center": Align.CENTER,
    "start": Align.LEADING,
    "left": Align.LEADING,
    "end": Align.TRAILING,
    "right": Align.TRAILING,
}

_MARGIN_SIDES = ("top", "right", "bottom", "left")


def parse_declarations(body: str) -> dict[str, str]:
    """Parse 'name: value; name: value' into a dict, skipping malformed pairs."""
    properties: dict[str, str] = {}
    for declaration in body.split(";"):
        name, sep, value = declaration.partition(":")
        name = name.strip().lower()
        value = value.strip()
        if not sep or not name or not value:
            continue
        properties[name] = value.replace("!important", "").strip()
    return properties


def parse_inline_style(style: str | None) -> dict[str, str]:
    """Parse the body of an HTML style attribute."""
    if not style:
        return {}
    return parse_declarations(style)


def _top_level_blocks(css_string: str):
    """Yield (selector, body) for every brace block at nesting depth zero."""
    depth = 0
    start = 0
    selector = ""
    for index, char in enumerate(css_string):
        if char == "{":
            if depth == 0:
                # Statement at-rules such as @import end in a semicolon
                selector = css_string[start:index].rsplit(";", 1)[-1]
                start = index + 1
            depth += 1
        elif char == "}":
            if depth == 0:
                start = index + 1
                continue
            depth -= 1
            if depth == 0:
                yield selector, css_string[start:index]
                start = index + 1


class CSSParser:
    """Selector to declarations table built from a stylesheet."""

    def __init__(self, css_string: str = ""):
        self.rules: dict[str, dict[str, str]] = {}
        self._parse(css_string or "")

    def _parse(self, css_string: str) -> None:
        css_string = _COMMENT_RE.sub("", css_string)

        for selector_text, body in _top_level_blocks(css_string):
            # @media, @supports and friends nest whole rule blocks
            if selector_text.strip().startswith("@") or "{" in body:
                continue
            properties = parse_declarations(body)
            if not properties:
                continue
            for selector in selector_text.split(","):
                selector = " ".join(selector.split())
                if not selector or selector.startswith("@"):
                    continue
                self.rules.setdefault(selector, {}).update(properties)

    def __len__(self) -> int:
        return len(self.rules)

    def get_properties(self, selector: str) -> dict[str, str]:
        """Declarations for an exact selector, empty when there are none."""
        return dict(self.rules.get(selector.strip(), {}))

    def class_properties(self, class_name: str) -> dict[str, str]:
        return self.get_properties(f".{class_name}")


def em_to_points(value: str, base: float = 16.0) -> float | None:
    """Convert an em length to points, None for anything else.

    '1.5em' gives 24.0 with the default 16pt em; a bare zero gives 0.0.
    """
    value = value.strip().lower()
    if value.endswith("em"):
        number = value[:-2].strip()
        if _NUMBER_RE.match(number):
            return base * float(number)
        return None
    if _NUMBER_RE.match(value) and float(value) == 0:
        return 0.0
    return None


def parse_alignment(value: str) -> Align | None:
    return _ALIGNMENTS.get(value.strip().lower())


def apply_margin(margin: Margin, properties: dict[str, str], base: float = 16.0) -> Margin:
    """Return a copy of margin updated with margin shorthand and longhands."""
    updated = margin.model_copy()

    shorthand = properties.get("margin")
    if shorthand:
        values = shorthand.split()
        # top, right, bottom, left
        if len(values) == 1:
            expanded = values * 4
        elif len(values) == 2:
            expanded = values * 2
        elif len(values) == 3:
            expanded = [values[0], values[1], values[2], values[1]]
        elif len(values) == 4:
            expanded = values
        else:
            expanded = []
        for side, raw in zip(_MARGIN_SIDES, expanded):
            size = em_to_points(raw, base)
            if size is not None:
                setattr(updated, side, size)

    for side in _MARGIN_SIDES:
        raw = properties.get(f"margin-{side}")
        if raw is None:
            continue
        size = em_to_points(raw, base)
        if size is not None:
            setattr(updated, side, size)
    return updated
