"""
Custom environment variables rendered from Jinja2 templates.

Templates see the aggregated service tree, e.g.::

    {{ v1alpha1.postgresql_baiju_dev.Database.db_testing.status.dbConnectionIP }}
    {{ marshal(v1alpha1.postgresql_baiju_dev.Database.db_testing.spec) }}
    {{ v1alpha1["postgresql.baiju.dev"].Database["db-testing"].status | marshal }}

Any undefined reference is an error. Templates come from binding requests and
run sandboxed: Python internals (dunder attributes, unsafe callables) are
not reachable.
"""

import logging
from typing import Any, Dict, Iterable

from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from .core.canonical import compact_json
from .core.errors import TemplateError
from .request import CustomEnvTemplate

logger = logging.getLogger(__name__)


def marshal(value: Any) -> str:
    """Serialize a sub-tree to compact JSON text."""
    return compact_json(value)


class BindingTemplateEnvironment(SandboxedEnvironment):
    """
    Sandboxed environment where dotted access on a mapping reads its keys
    before any attribute, so fields named ``values`` or ``items`` resolve
    to the field.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, dict) and attribute in obj:
            return obj[attribute]
        return super().getattr(obj, attribute)


def template_environment() -> BindingTemplateEnvironment:
    env = BindingTemplateEnvironment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)
    env.globals["marshal"] = marshal
    env.filters["marshal"] = marshal
    return env


class CustomEnvParser:
    """Renders every template against one shared context tree."""

    def __init__(self, templates: Iterable[CustomEnvTemplate], context: Dict[str, Any]):
        self.templates = list(templates)
        self.context = context
        self.env = template_environment()

    def parse(self) -> Dict[str, str]:
        """
        Render all templates, in order.

        Raises:
            TemplateError: Naming the first template that fails; nothing
                is returned for the others
        """
        data: Dict[str, str] = {}
        for tmpl in self.templates:
            try:
                rendered = self.env.from_string(tmpl.body).render(self.context)
            except Exception as e:
                raise TemplateError(tmpl.name, str(e)) from e
            logger.debug(f"Rendered custom env var {tmpl.name}")
            data[tmpl.name] = rendered
        return data
