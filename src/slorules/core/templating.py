"""Strict query templates.

SLI queries and rule expressions use ``{{ .name }}`` placeholders, e.g.::

    sum(rate(http_requests_total{code=~"5.."}[{{ .window }}]))

Rendering is strict: a placeholder whose variable is missing from the data
raises, and so does any template action other than a plain variable
reference. Nothing is ever silently left unrendered.
"""

from __future__ import annotations

import re
from typing import Mapping

from slorules.core.errors import TemplateRenderError

_ACTION_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_VARIABLE_RE = re.compile(r"^\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*$")


class Template:
    """A parsed query template.

    Parsing happens once at construction, so module level templates fail
    at import time and user templates fail before any data is rendered.
    """

    def __init__(self, text: str, name: str = "expr"):
        self.name = name
        self.text = text
        self._parts = self._parse(text)

    def _parse(self, text: str) -> list[tuple[bool, str]]:
        parts: list[tuple[bool, str]] = []
        pos = 0
        for match in _ACTION_RE.finditer(text):
            literal = text[pos : match.start()]
            self._check_literal(literal)
            parts.append((False, literal))

            var = _VARIABLE_RE.match(match.group(1))
            if not var:
                raise TemplateRenderError(
                    f"template {self.name!r}: unsupported action {match.group(0)!r}",
                    details={"template": self.name},
                )
            parts.append((True, var.group(1)))
            pos = match.end()

        tail = text[pos:]
        self._check_literal(tail)
        parts.append((False, tail))
        return parts

    def _check_literal(self, literal: str) -> None:
        if "{{" in literal:
            raise TemplateRenderError(
                f"template {self.name!r}: unclosed action",
                details={"template": self.name},
            )

    @property
    def variables(self) -> list[str]:
        """Variable names referenced by the template, in order of appearance."""
        return [value for is_var, value in self._parts if is_var]

    def render(self, data: Mapping[str, object]) -> str:
        """Render the template, failing on any variable missing from ``data``."""
        out = []
        for is_var, value in self._parts:
            if not is_var:
                out.append(value)
                continue
            if value not in data:
                raise TemplateRenderError(
                    f"template {self.name!r}: map has no entry for key {value!r}",
                    details={"template": self.name, "key": value},
                )
            out.append(str(data[value]))
        return "".join(out)


def render_template(text: str, data: Mapping[str, object], name: str = "expr") -> str:
    """Parse and render a template in one step."""
    return Template(text, name=name).render(data)
