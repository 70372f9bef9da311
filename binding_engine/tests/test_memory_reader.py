"""
Tests for the manifest-backed cluster reader.
"""

import pytest
import yaml

from binding_engine.cluster.memory import ManifestClusterReader, load_manifests, parse_label_selector
from binding_engine.core.errors import FetchError, FetchErrorKind
from binding_engine.core.gvk import (
    CONFIG_MAPS,
    CUSTOM_RESOURCE_DEFINITIONS,
    SECRETS,
    GroupVersionKind,
    GroupVersionResource,
)

from .fixtures import NS, config_map, credentials_secret, database_cr, database_crd

POLICY_CRD = {
    "apiVersion": "apiextensions.k8s.io/v1",
    "kind": "CustomResourceDefinition",
    "metadata": {"name": "policies.example.com"},
    "spec": {"group": "example.com", "names": {"plural": "policies", "kind": "Policy"}},
}


def test_load_manifests_flattens_lists(tmp_path):
    path = tmp_path / "cluster.yaml"
    path.write_text(yaml.safe_dump_all([
        {"kind": "List", "items": [credentials_secret(), config_map()]},
        None,
        database_cr(),
    ]))

    objects = load_manifests([path])

    assert [o["kind"] for o in objects] == ["Secret", "ConfigMap", "Database"]


def test_get_and_namespace_filter():
    reader = ManifestClusterReader([credentials_secret(), credentials_secret(namespace="other")])

    assert reader.get(SECRETS, NS, "db-credentials")["metadata"]["namespace"] == NS
    assert reader.get(SECRETS, "other", "db-credentials")["metadata"]["namespace"] == "other"

    with pytest.raises(FetchError) as exc:
        reader.get(SECRETS, "missing", "db-credentials")
    assert exc.value.not_found


def test_cluster_scoped_get_ignores_namespace():
    reader = ManifestClusterReader([database_crd()])

    crd = reader.get(CUSTOM_RESOURCE_DEFINITIONS, None, "databases.postgresql.baiju.dev")

    assert crd["spec"]["group"] == "postgresql.baiju.dev"


def test_results_are_copies():
    reader = ManifestClusterReader([config_map()])

    reader.get(CONFIG_MAPS, NS, "db-config")["data"]["user"] = "changed"

    assert reader.get(CONFIG_MAPS, NS, "db-config")["data"]["user"] == "cm-user"


def test_list_with_label_selector():
    reader = ManifestClusterReader([
        database_cr(name="b", labels={"app": "shop"}),
        database_cr(name="a", labels={"app": "shop", "tier": "db"}),
        database_cr(name="c", labels={"app": "blog"}),
    ])
    gvr = reader.resource_for(GroupVersionKind("postgresql.baiju.dev", "v1alpha1", "Database"))

    names = [o["metadata"]["name"] for o in reader.list(gvr, NS, "app=shop")]

    assert sorted(names) == ["a", "b"]
    assert len(reader.list(gvr, NS)) == 3


def test_unsupported_selector_is_transport_error():
    reader = ManifestClusterReader([config_map()])

    with pytest.raises(FetchError) as exc:
        reader.list(CONFIG_MAPS, NS, "app!=shop")
    assert exc.value.kind == FetchErrorKind.TRANSPORT


def test_kind_mapping_learned_from_crds():
    reader = ManifestClusterReader([POLICY_CRD])

    gvr = reader.resource_for(GroupVersionKind("example.com", "v1", "Policy"))

    assert gvr == GroupVersionResource("example.com", "v1", "policies")
    assert reader.kind_for(gvr) == "Policy"


def test_builtin_and_unknown_kinds():
    reader = ManifestClusterReader()

    assert reader.kind_for(SECRETS) == "Secret"
    with pytest.raises(FetchError) as exc:
        reader.kind_for(GroupVersionResource("example.com", "v1", "widgets"))
    assert exc.value.not_found


def test_parse_label_selector():
    assert parse_label_selector("a=b, c==d") == {"a": "b", "c": "d"}
    assert parse_label_selector(None) == {}
    with pytest.raises(ValueError):
        parse_label_selector("a")
