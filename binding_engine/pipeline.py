"""
One resolution pass: binding request in, binding payload out.

The pass only reads from the cluster; callers own deadlines and retries and
re-run the whole pass on failure.
"""

from typing import Optional

from .cluster.reader import ClusterReader
from .config import BindingSettings
from .logging_config import get_logger
from .metrics import track_resolve_duration
from .request import BindingRequest
from .retriever import BindingPayload, Retriever
from .servicecontext import ServiceContextBuilder


def resolve_binding(
    reader: ClusterReader,
    request: BindingRequest,
    settings: Optional[BindingSettings] = None,
) -> BindingPayload:
    """
    Resolve a binding request into env vars and volume keys.

    Raises:
        BindingError: On any failure; no partial payload is returned
    """
    logger = get_logger(__name__, trace_id=request.trace_id)
    logger.info(f"Resolving binding with {len(request.selectors)} selector(s)")

    builder = ServiceContextBuilder(reader, settings, logger=logger)
    try:
        with track_resolve_duration("contexts"):
            contexts = builder.build_all(request)
        with track_resolve_duration("compose"):
            payload = Retriever(logger=logger).process(
                request.env_var_prefix, contexts, request.custom_env_vars
            )
    except Exception as e:
        logger.error(f"Binding resolution failed: {e}")
        raise

    logger.info(
        f"Resolved {len(contexts)} service context(s) into {len(payload.env_vars)} env var(s)"
    )
    return payload
