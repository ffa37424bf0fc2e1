"""Template rendering engine and template sources."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Protocol

from jinja2 import (
    ChainableUndefined,
    Environment,
    StrictUndefined,
    TemplateError,
    UndefinedError,
)

from ..core.errors import TemplateNotFoundError, TemplateRenderError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_SUFFIX = ".j2"


@lru_cache(maxsize=2)
def _environment(strict: bool = False) -> Environment:
    # Output may be source code, config or markup; escaping would corrupt it.
    # Missing values render as "" unless strict, including dotted lookups.
    return Environment(
        undefined=StrictUndefined if strict else ChainableUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render(
    template_text: str, data_context: Mapping[str, Any], *, strict: bool = False
) -> str:
    """Render template text with the given data context.

    Args:
        template_text: Raw template source
        data_context: Values substituted into the template
        strict: Raise on undefined variables instead of rendering them empty

    Returns:
        Rendered text, with no escaping applied
    """
    try:
        template = _environment(strict).from_string(template_text)
        return template.render(dict(data_context))
    except UndefinedError as exc:
        raise TemplateRenderError(f"Undefined template variable: {exc.message}") from exc
    except TemplateError as exc:
        raise TemplateRenderError(f"Invalid template: {exc}") from exc


class TemplateSource(Protocol):
    """Lookup of raw template text by identifier."""

    def has(self, template_id: str) -> bool: ...

    def read(self, template_id: str) -> str: ...


def with_suffix(template_id: str, suffix: str) -> str:
    """Append ``suffix`` to the identifier unless it already carries it."""
    if not suffix or template_id.lower().endswith(suffix.lower()):
        return template_id
    return f"{template_id}{suffix}"


class DirectoryTemplateSource:
    """Templates stored as files below a root directory."""

    def __init__(self, root: Path, suffix: str = DEFAULT_TEMPLATE_SUFFIX) -> None:
        self.root = Path(root)
        self.suffix = suffix

    def resolve(self, template_id: str) -> Path | None:
        candidate = (self.root / with_suffix(template_id, self.suffix)).resolve()
        root = self.root.resolve()
        if candidate != root and root not in candidate.parents:
            logger.debug(f"Template id escapes template root: {template_id}")
            return None
        return candidate

    def has(self, template_id: str) -> bool:
        path = self.resolve(template_id)
        return path is not None and path.is_file()

    def read(self, template_id: str) -> str:
        path = self.resolve(template_id)
        if path is None or not path.is_file():
            raise TemplateNotFoundError(template_id)
        return path.read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"DirectoryTemplateSource({str(self.root)!r}, suffix={self.suffix!r})"


class MappingTemplateSource:
    """Templates held in memory, keyed by identifier."""

    def __init__(
        self, templates: Mapping[str, str], suffix: str = DEFAULT_TEMPLATE_SUFFIX
    ) -> None:
        self.suffix = suffix
        self._templates = {with_suffix(key, suffix): value for key, value in templates.items()}

    def has(self, template_id: str) -> bool:
        return with_suffix(template_id, self.suffix) in self._templates

    def read(self, template_id: str) -> str:
        try:
            return self._templates[with_suffix(template_id, self.suffix)]
        except KeyError:
            raise TemplateNotFoundError(template_id) from None
