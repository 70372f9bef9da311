"""
Cluster object builders: a Database backing service with its CRD, operator
descriptor, credentials Secret and ConfigMap.
"""

import base64

NS = "testing"
PREFIX = "servicebindingoperator.redhat.io"


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def database_cr(annotations=None, name="db-testing", namespace=NS, labels=None):
    return {
        "apiVersion": "postgresql.baiju.dev/v1alpha1",
        "kind": "Database",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"{name}-uid",
            "labels": labels or {},
            "annotations": dict(annotations or {}),
        },
        "spec": {
            "imageName": "postgres",
            "image": {"name": "postgres", "third": {"something": "somevalue"}},
            "dbName": "db-demo",
            "dbConfigMap": "db-config",
        },
        "status": {
            "dbCredentials": "db-credentials",
            "dbConnectionIP": "10.0.0.1",
            "dbConnectionPort": 5432,
        },
    }


def credentials_secret(namespace=NS):
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": "db-credentials", "namespace": namespace},
        "data": {"user": b64("admin"), "password": b64("secret")},
    }


def config_map(namespace=NS):
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "db-config", "namespace": namespace},
        "data": {"user": "cm-user", "password": "cm-pass"},
    }


def database_crd(annotations=None):
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {
            "name": "databases.postgresql.baiju.dev",
            "annotations": dict(annotations or {}),
        },
        "spec": {
            "group": "postgresql.baiju.dev",
            "names": {"plural": "databases", "kind": "Database"},
            "scope": "Namespaced",
        },
    }


def database_crd_description():
    return {
        "name": "databases.postgresql.baiju.dev",
        "version": "v1alpha1",
        "kind": "Database",
        "specDescriptors": [
            {
                "path": "dbConfigMap",
                "x-descriptors": [
                    "urn:alm:descriptor:io.kubernetes:ConfigMap",
                    "binding:env:object:configmap:user",
                ],
            },
        ],
        "statusDescriptors": [
            {
                "path": "dbCredentials",
                "x-descriptors": [
                    "urn:alm:descriptor:io.kubernetes:Secret",
                    "binding:env:object:secret:user",
                    "binding:env:object:secret:password",
                ],
            },
            {
                "path": "dbConnectionIP",
                "x-descriptors": ["binding:env:attribute"],
            },
        ],
    }


def cluster_service_version(namespace=NS):
    return {
        "apiVersion": "operators.coreos.com/v1alpha1",
        "kind": "ClusterServiceVersion",
        "metadata": {"name": "postgresql-operator.v0.0.1", "namespace": namespace},
        "spec": {"customresourcedefinitions": {"owned": [database_crd_description()]}},
    }


def owned_config_map(owner_name="db-testing", owner_uid="db-testing-uid"):
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": "db-owned-config",
            "namespace": NS,
            "ownerReferences": [
                {"apiVersion": "postgresql.baiju.dev/v1alpha1", "kind": "Database",
                 "name": owner_name, "uid": owner_uid},
            ],
            "annotations": {f"{PREFIX}/data.host": "binding:env:attribute"},
        },
        "data": {"host": "db.example"},
    }


ANNOTATED = {
    f"{PREFIX}/status.dbCredentials-user": "binding:env:object:secret",
    f"{PREFIX}/status.dbCredentials-password": "binding:env:object:secret",
    f"{PREFIX}/spec.dbConfigMap-user": "binding:env:object:configmap",
    f"{PREFIX}/status.dbConnectionIP": "binding:env:attribute",
    "kubectl.kubernetes.io/last-applied-configuration": "{}",
}


def binding_request(selectors=None, env_var_prefix="", custom_env_vars=None, detect=None):
    spec = {
        "backingServiceSelector": {
            "group": "postgresql.baiju.dev",
            "version": "v1alpha1",
            "kind": "Database",
            "resourceRef": "db-testing",
        },
    }
    if selectors is not None:
        spec = {"backingServiceSelectors": selectors}
    if env_var_prefix:
        spec["envVarPrefix"] = env_var_prefix
    if custom_env_vars:
        spec["customEnvVar"] = custom_env_vars
    if detect is not None:
        spec["detectBindingResources"] = detect
    return {
        "apiVersion": "apps.openshift.io/v1alpha1",
        "kind": "ServiceBindingRequest",
        "metadata": {"name": "binding-request", "namespace": NS},
        "spec": spec,
    }
