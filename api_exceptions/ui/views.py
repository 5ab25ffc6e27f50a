"""
Template resolution for error pages.

Template ids use dotted names (``errors.404``), optionally prefixed with a
namespace (``api_exceptions::errors.404``). The Jinja2 resolver maps them to
``errors/404.html`` in the application's template directory, or in the
bundled templates for the namespaced form.
"""

from __future__ import annotations

import logging
from importlib.util import find_spec
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Protocol

if TYPE_CHECKING:
    from api_exceptions.core.config import Settings

logger = logging.getLogger(__name__)

NAMESPACE_DELIMITER = "::"

# Bundled default error pages
BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"


class ViewResolver(Protocol):
    """Collaborator that checks for and renders templates."""

    def exists(self, template_id: str) -> bool: ...

    def render(self, template_id: str, context: Mapping[str, Any]) -> str: ...


def template_path(template_id: str) -> str:
    """
    Convert a dotted template id into a Jinja2 template name.

    Args:
        template_id: e.g. ``errors.404`` or ``ns::errors.404``

    Returns:
        e.g. ``errors/404.html`` or ``ns::errors/404.html``
    """
    namespace, delimiter, name = template_id.rpartition(NAMESPACE_DELIMITER)
    return f"{namespace}{delimiter}{name.replace('.', '/')}.html"


class Jinja2ViewResolver:
    """
    ViewResolver backed by Jinja2Templates.

    Application templates are looked up first; the namespace prefix routes
    to the bundled templates directory.
    """

    def __init__(
        self,
        templates_dir: Path | None,
        namespace: str = "api_exceptions",
        bundled_dir: Path = BUNDLED_TEMPLATES_DIR,
    ) -> None:
        # Imported lazily so the package works without Jinja2 installed
        import jinja2
        from fastapi.templating import Jinja2Templates

        loaders: list[jinja2.BaseLoader] = []
        if templates_dir is not None:
            loaders.append(jinja2.FileSystemLoader(templates_dir))
        loaders.append(
            jinja2.PrefixLoader(
                {namespace: jinja2.FileSystemLoader(bundled_dir)},
                delimiter=NAMESPACE_DELIMITER,
            )
        )
        env = jinja2.Environment(loader=jinja2.ChoiceLoader(loaders), autoescape=True)
        env.globals["error_layout"] = template_path(
            f"{namespace}{NAMESPACE_DELIMITER}errors.layout"
        )

        self.namespace = namespace
        self.templates = Jinja2Templates(env=env)
        self._not_found = jinja2.TemplateNotFound

    def exists(self, template_id: str) -> bool:
        try:
            self.templates.get_template(template_path(template_id))
        except self._not_found:
            return False
        return True

    def render(self, template_id: str, context: Mapping[str, Any]) -> str:
        template = self.templates.get_template(template_path(template_id))
        return template.render(dict(context))


def page_rendering_supported() -> bool:
    """Return True if a template engine is installed."""
    return find_spec("jinja2") is not None


def get_view_resolver(settings: Settings) -> ViewResolver | None:
    """
    Build the default view resolver from settings.

    Returns:
        A Jinja2ViewResolver, or None when page rendering is disabled or
        Jinja2 is not installed
    """
    if not settings.page_rendering:
        return None
    if not page_rendering_supported():
        logger.info("Jinja2 not installed - error pages will render as JSON")
        return None
    return Jinja2ViewResolver(settings.templates_dir, settings.template_namespace)
