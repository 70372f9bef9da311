"""
Env var composer.

Turns service contexts into the final binding payload: prefixed environment
variables, custom template variables and the volume keys to project as files.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .core.gvk import GroupVersionKind
from .core.nested import set_field
from .custom_env import CustomEnvParser
from .envvars import build
from .logging_config import get_logger
from .request import CustomEnvTemplate
from .servicecontext import ServiceContext


@dataclass
class BindingPayload:
    """
    Result of a resolution pass.

    Fields:
        env_vars: Env var name -> value, the payload of the generated secret
        volume_keys: Keys to project as mounted files rather than env vars
    """
    env_vars: Dict[str, bytes] = field(default_factory=dict)
    volume_keys: List[str] = field(default_factory=list)


def _sanitize(segment: str) -> str:
    return segment.replace(".", "_").replace("-", "_")


def service_index_path(name: str, gvk: GroupVersionKind) -> List[str]:
    """
    Template-friendly location of a service in the custom env var context.

    Group dots and name dashes become underscores so plain dotted access works:
    ``v1alpha1.postgresql_baiju_dev.Database.db_testing``
    """
    return [_sanitize(gvk.version), _sanitize(gvk.group), _sanitize(gvk.kind), _sanitize(name)]


def service_literal_path(name: str, gvk: GroupVersionKind) -> List[str]:
    """Location with the original segments, for indexed template access."""
    return [gvk.version, gvk.group, gvk.kind, name]


def env_var_prefixes(ctx: ServiceContext, global_prefix: str) -> List[str]:
    prefixes = []
    if global_prefix:
        prefixes.append(global_prefix)
    if ctx.env_var_prefix is None:
        prefixes.append(ctx.gvk.kind)
    elif ctx.env_var_prefix:
        prefixes.append(ctx.env_var_prefix)
    return prefixes


class Retriever:
    """Composes service contexts into a BindingPayload."""

    def __init__(self, logger=None):
        self.logger = logger or get_logger(__name__)

    def build_service_env_vars(self, ctx: ServiceContext, global_prefix: str) -> Dict[str, str]:
        return build(ctx.env_vars, *env_var_prefixes(ctx, global_prefix))

    def process_service_context(
        self,
        ctx: ServiceContext,
        template_context: Dict[str, Any],
        global_prefix: str,
    ) -> Tuple[Dict[str, bytes], List[str]]:
        """
        Env vars and volume keys of one context; also contributes the
        context's object snapshot to ``template_context`` (in place).
        """
        env_vars = self.build_service_env_vars(ctx, global_prefix)

        gvk = ctx.gvk
        set_field(template_context, ctx.service, service_literal_path(ctx.name, gvk))
        set_field(template_context, ctx.service, service_index_path(ctx.name, gvk))

        encoded = {k: v.encode("utf-8") for k, v in env_vars.items()}
        return encoded, list(ctx.volume_keys)

    def process(
        self,
        global_prefix: str,
        contexts: Iterable[ServiceContext],
        templates: Optional[Iterable[CustomEnvTemplate]] = None,
    ) -> BindingPayload:
        """
        Compose every context, in order, then render custom env vars.

        Later contexts win on env var name collisions; custom env vars win
        over everything.

        Raises:
            TemplateError: If any custom template fails
        """
        payload = BindingPayload()
        template_context: Dict[str, Any] = {}

        for ctx in contexts:
            env_vars, volume_keys = self.process_service_context(ctx, template_context, global_prefix)
            for key in env_vars:
                if key in payload.env_vars:
                    self.logger.debug(f"Env var {key} overridden by {ctx.gvk.kind} {ctx.name}")
            payload.env_vars.update(env_vars)
            for key in volume_keys:
                if key not in payload.volume_keys:
                    payload.volume_keys.append(key)

        templates = list(templates or [])
        if templates:
            try:
                custom = CustomEnvParser(templates, template_context).parse()
            except Exception as e:
                self.logger.error(f"Creating custom env vars failed: {e}")
                raise
            for name, value in custom.items():
                key = "_".join([global_prefix, name]) if global_prefix else name
                payload.env_vars[key] = value.encode("utf-8")

        self.logger.debug(
            f"Composed {len(payload.env_vars)} env vars, {len(payload.volume_keys)} volume keys"
        )
        return payload
