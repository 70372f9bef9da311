"""
Tests for service context building: precedence, skipping, owned resources.
"""

import pytest

from binding_engine.cluster.memory import ManifestClusterReader
from binding_engine.config import BindingSettings
from binding_engine.core.errors import FetchError, FieldAccessError
from binding_engine.core.gvk import GroupVersionKind
from binding_engine.request import BackingServiceSelector, BindingRequest
from binding_engine.servicecontext import ServiceContextBuilder

from .fixtures import (
    NS,
    PREFIX,
    cluster_service_version,
    config_map,
    credentials_secret,
    database_cr,
    database_crd,
    owned_config_map,
)

DATABASE = GroupVersionKind("postgresql.baiju.dev", "v1alpha1", "Database")


def _request(**kwargs):
    selector = BackingServiceSelector(
        group=DATABASE.group, version=DATABASE.version, kind=DATABASE.kind,
        resource_ref=kwargs.pop("resource_ref", "db-testing"),
        env_var_prefix=kwargs.pop("env_var_prefix", None),
    )
    return BindingRequest(name="binding", namespace=NS, selectors=[selector], **kwargs)


def test_annotations_resolved_into_context(reader):
    ctx = ServiceContextBuilder(reader).build(NS, DATABASE, "db-testing")

    assert ctx.env_vars == {
        "secret": {"user": "admin", "password": "secret"},
        "configmap": {"user": "cm-user"},
        "dbConnectionIP": "10.0.0.1",
    }
    assert ctx.volume_keys == []
    assert ctx.service["status"]["dbCredentials"] == {"user": "admin", "password": "secret"}
    assert ctx.service["spec"]["dbConfigMap"] == {"user": "cm-user"}
    assert ctx.gvk == DATABASE
    assert ctx.name == "db-testing"


def test_source_object_not_mutated(reader, annotated_db):
    ServiceContextBuilder(reader).build(NS, DATABASE, "db-testing")

    assert reader.get(reader.resource_for(DATABASE), NS, "db-testing") == annotated_db


def test_unknown_type_skipped_without_aborting_siblings():
    db = database_cr({
        f"{PREFIX}/status.dbConnectionIP": "binding:env:attribute",
        f"{PREFIX}/status.dbConnectionPort": "binding:bogus:attribute",
        f"{PREFIX}/spec.dbName": "not-a-binding",
        f"{PREFIX}/spec.imageName": "binding:env:object:route",
    })
    ctx = ServiceContextBuilder(ManifestClusterReader([db])).build(NS, DATABASE, "db-testing")

    assert ctx.env_vars == {"dbConnectionIP": "10.0.0.1"}


def test_fetch_error_aborts_selector():
    db = database_cr({f"{PREFIX}/status.dbCredentials-user": "binding:env:object:secret"})

    with pytest.raises(FetchError):
        ServiceContextBuilder(ManifestClusterReader([db])).build(NS, DATABASE, "db-testing")


def test_field_error_aborts_selector():
    db = database_cr({f"{PREFIX}/status.missing": "binding:env:attribute"})

    with pytest.raises(FieldAccessError):
        ServiceContextBuilder(ManifestClusterReader([db])).build(NS, DATABASE, "db-testing")


def test_missing_service_is_fetch_error():
    with pytest.raises(FetchError):
        ServiceContextBuilder(ManifestClusterReader([])).build(NS, DATABASE, "db-testing")


def test_instance_annotations_win_over_crd_and_descriptor():
    key = f"{PREFIX}/status.dbConnectionIP"
    csv = cluster_service_version()
    # descriptor tier yields binding:env:attribute for the same key
    crd = database_crd({key: "b"})
    db = database_cr({key: "c"})
    builder = ServiceContextBuilder(ManifestClusterReader([db, crd, csv]))

    anns = builder.collect_annotations(db, DATABASE)

    assert anns[key] == "c"


def test_crd_annotations_win_over_descriptor():
    key = f"{PREFIX}/status.dbConnectionIP"
    crd = database_crd({key: "b"})
    db = database_cr()
    builder = ServiceContextBuilder(ManifestClusterReader([db, crd, cluster_service_version()]))

    anns = builder.collect_annotations(db, DATABASE)

    assert anns[key] == "b"
    assert anns[f"{PREFIX}/status.dbCredentials-user"] == "binding:env:object:secret"


def test_descriptor_annotations_ignored_without_crd():
    db = database_cr()
    builder = ServiceContextBuilder(ManifestClusterReader([db, cluster_service_version()]))

    assert builder.collect_annotations(db, DATABASE) == {}


def test_descriptor_only_resolution():
    objects = [database_cr(), database_crd(), cluster_service_version(), credentials_secret(), config_map()]
    ctx = ServiceContextBuilder(ManifestClusterReader(objects)).build(NS, DATABASE, "db-testing")

    assert ctx.env_vars["secret"] == {"user": "admin", "password": "secret"}
    assert ctx.env_vars["configmap"] == {"user": "cm-user"}
    assert ctx.env_vars["dbConnectionIP"] == "10.0.0.1"


def test_volume_mount_goes_to_volume_keys_only():
    db = database_cr({
        f"{PREFIX}/status.dbCredentials-user": "binding:env:object:secret",
        f"{PREFIX}/status.dbCredentials-password": "binding:volumemount:secret",
    })
    ctx = ServiceContextBuilder(ManifestClusterReader([db, credentials_secret()])).build(NS, DATABASE, "db-testing")

    assert ctx.volume_keys == ["secret.password"]
    assert ctx.env_vars == {"secret": {"user": "admin"}}
    assert ctx.service["status"]["dbCredentials"] == {"user": "admin", "password": "secret"}


def test_build_all_keeps_selector_prefix(reader):
    contexts = ServiceContextBuilder(reader).build_all(_request(env_var_prefix="testEnvPrefix"))

    assert len(contexts) == 1
    assert contexts[0].env_var_prefix == "testEnvPrefix"


def test_owned_resources_follow_their_owner(annotated_db):
    objects = [annotated_db, credentials_secret(), config_map(), owned_config_map()]
    builder = ServiceContextBuilder(ManifestClusterReader(objects))

    contexts = builder.build_all(_request(detect_binding_resources=True))

    assert [c.name for c in contexts] == ["db-testing", "db-owned-config"]
    owned = contexts[1]
    assert owned.env_var_prefix == "Database"
    assert owned.env_vars == {"data": {"host": "db.example"}}


def test_owned_resources_use_explicit_prefix(annotated_db):
    objects = [annotated_db, credentials_secret(), config_map(), owned_config_map()]
    builder = ServiceContextBuilder(ManifestClusterReader(objects))

    contexts = builder.build_all(_request(detect_binding_resources=True, env_var_prefix="db"))

    assert contexts[1].env_var_prefix == "db"


def test_owner_uid_must_match(annotated_db):
    objects = [annotated_db, credentials_secret(), config_map(), owned_config_map(owner_uid="other")]
    builder = ServiceContextBuilder(ManifestClusterReader(objects))

    contexts = builder.build_all(_request(detect_binding_resources=True))

    assert [c.name for c in contexts] == ["db-testing"]


def test_owned_resources_off_by_default(annotated_db):
    objects = [annotated_db, credentials_secret(), config_map(), owned_config_map()]
    contexts = ServiceContextBuilder(ManifestClusterReader(objects)).build_all(_request())

    assert len(contexts) == 1


def test_settings_enable_owned_resources(annotated_db):
    objects = [annotated_db, credentials_secret(), config_map(), owned_config_map()]
    settings = BindingSettings(detect_owned_resources=True)

    contexts = ServiceContextBuilder(ManifestClusterReader(objects), settings).build_all(_request())

    assert len(contexts) == 2


def test_label_selector_matches_in_name_order():
    objects = [
        database_cr(name="db-b", labels={"app": "shop"}),
        database_cr(name="db-a", labels={"app": "shop"}),
        database_cr(name="db-c", labels={"app": "other"}),
    ]
    selector = BackingServiceSelector(
        group=DATABASE.group, version=DATABASE.version, kind=DATABASE.kind, label_selector="app=shop"
    )
    request = BindingRequest(name="binding", namespace=NS, selectors=[selector])

    contexts = ServiceContextBuilder(ManifestClusterReader(objects)).build_all(request)

    assert [c.name for c in contexts] == ["db-a", "db-b"]


def test_contexts_are_deterministic(reader):
    builder = ServiceContextBuilder(reader)
    results = [builder.build(NS, DATABASE, "db-testing").env_vars for _ in range(10)]

    assert all(r == results[0] for r in results)
