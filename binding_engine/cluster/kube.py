"""
ClusterReader backed by the Kubernetes dynamic client.
"""

import logging
from typing import Dict, List, Optional

import urllib3
from kubernetes import client, config, dynamic
from kubernetes.client.rest import ApiException
from kubernetes.dynamic.exceptions import NotFoundError, ResourceNotFoundError

from ..core.errors import FetchError, FetchErrorKind
from ..core.gvk import GroupVersionKind, GroupVersionResource
from .reader import ClusterReader

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (ApiException, urllib3.exceptions.HTTPError)


class KubernetesClusterReader(ClusterReader):
    """
    Reads through ``kubernetes.dynamic.DynamicClient``.

    Resource discovery is delegated to the dynamic client's cache, so the
    first lookup of a resource type hits the discovery endpoints.
    """

    def __init__(self, dynamic_client: dynamic.DynamicClient):
        self._client = dynamic_client

    @classmethod
    def from_config(cls, kubeconfig: Optional[str] = None, context: Optional[str] = None) -> "KubernetesClusterReader":
        """
        Build a reader from in-cluster config, falling back to kubeconfig.
        """
        if kubeconfig is None and context is None:
            try:
                config.load_incluster_config()
            except config.ConfigException:
                config.load_kube_config()
        else:
            config.load_kube_config(config_file=kubeconfig, context=context)
        return cls(dynamic.DynamicClient(client.ApiClient()))

    def _resource(self, gvr: GroupVersionResource):
        try:
            return self._client.resources.get(
                group=gvr.group or None, api_version=gvr.version, name=gvr.resource
            )
        except ResourceNotFoundError as e:
            raise FetchError(FetchErrorKind.NOT_FOUND, str(gvr), detail=str(e)) from e
        except TRANSPORT_ERRORS as e:
            raise FetchError(FetchErrorKind.TRANSPORT, str(gvr), detail=str(e)) from e

    def get(self, gvr: GroupVersionResource, namespace: Optional[str], name: str) -> Dict:
        resource = self._resource(gvr)
        logger.debug(f"GET {gvr} {namespace or '<cluster>'}/{name}")
        try:
            obj = resource.get(name=name, namespace=namespace)
        except NotFoundError as e:
            raise FetchError(FetchErrorKind.NOT_FOUND, str(gvr), name) from e
        except TRANSPORT_ERRORS as e:
            raise FetchError(FetchErrorKind.TRANSPORT, str(gvr), name, detail=str(e)) from e
        return obj.to_dict()

    def list(
        self,
        gvr: GroupVersionResource,
        namespace: Optional[str],
        label_selector: Optional[str] = None,
    ) -> List[Dict]:
        resource = self._resource(gvr)
        logger.debug(f"LIST {gvr} {namespace or '<cluster>'} selector={label_selector}")
        kwargs = {"namespace": namespace}
        if label_selector:
            kwargs["label_selector"] = label_selector
        try:
            result = resource.get(**kwargs).to_dict()
        except NotFoundError as e:
            raise FetchError(FetchErrorKind.NOT_FOUND, str(gvr)) from e
        except TRANSPORT_ERRORS as e:
            raise FetchError(FetchErrorKind.TRANSPORT, str(gvr), detail=str(e)) from e

        items = result.get("items") or []
        # list responses omit per-item type metadata
        for item in items:
            item.setdefault("apiVersion", gvr.api_version)
            item.setdefault("kind", resource.kind)
        return items

    def kind_for(self, gvr: GroupVersionResource) -> str:
        return self._resource(gvr).kind

    def resource_for(self, gvk: GroupVersionKind) -> GroupVersionResource:
        try:
            resource = self._client.resources.get(
                group=gvk.group or None, api_version=gvk.version, kind=gvk.kind
            )
        except ResourceNotFoundError as e:
            raise FetchError(FetchErrorKind.NOT_FOUND, str(gvk), detail=str(e)) from e
        except TRANSPORT_ERRORS as e:
            raise FetchError(FetchErrorKind.TRANSPORT, str(gvk), detail=str(e)) from e
        return GroupVersionResource(gvk.group, gvk.version, resource.name)
