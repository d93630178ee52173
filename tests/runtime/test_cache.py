from __future__ import annotations

import pytest

from tfclaim.domain.model import DependentObject, OwnerReference, WatchEventType
from tfclaim.domain.ports.watch import WatchEvent
from tfclaim.runtime import (
    POD_KIND,
    POD_PHASE_FIELD,
    IndexerError,
    ObjectCache,
    default_object_cache,
    pod_phase,
)


def _pod(name: str, phase: str | None, namespace: str = "default") -> DependentObject:
    status = {"phase": phase} if phase else {}
    return DependentObject(kind=POD_KIND, namespace=namespace, name=name, status=status)


def test_pods_are_listed_by_phase() -> None:
    cache = default_object_cache()
    cache.upsert(_pod("plan-1", "Running"))
    cache.upsert(_pod("plan-2", "Succeeded"))
    cache.start()
    cache.upsert(_pod("plan-3", "Running"))

    running = cache.list(POD_KIND, matching_fields={POD_PHASE_FIELD: "Running"})

    assert [pod.name for pod in running] == ["plan-1", "plan-3"]


def test_index_follows_updates_and_removals() -> None:
    cache = default_object_cache()
    cache.start()
    cache.upsert(_pod("plan-1", "Pending"))

    cache.upsert(_pod("plan-1", "Running"))
    assert cache.list(POD_KIND, matching_fields={POD_PHASE_FIELD: "Pending"}) == []
    assert len(cache.list(POD_KIND, matching_fields={POD_PHASE_FIELD: "Running"})) == 1

    cache.remove(POD_KIND, "default", "plan-1")
    assert cache.list(POD_KIND, matching_fields={POD_PHASE_FIELD: "Running"}) == []


def test_pod_without_phase_is_indexed_under_empty_value() -> None:
    assert pod_phase(_pod("x", None)) == [""]

    cache = default_object_cache()
    cache.start()
    cache.upsert(_pod("x", None))

    assert [pod.name for pod in cache.list(POD_KIND, matching_fields={POD_PHASE_FIELD: ""})] == [
        "x"
    ]


def test_list_filters_by_namespace() -> None:
    cache = default_object_cache()
    cache.start()
    cache.upsert(_pod("a", "Running", namespace="team-a"))
    cache.upsert(_pod("b", "Running", namespace="team-b"))

    pods = cache.list(
        POD_KIND, namespace="team-b", matching_fields={POD_PHASE_FIELD: "Running"}
    )

    assert [pod.name for pod in pods] == ["b"]


def test_indexers_must_be_registered_before_start() -> None:
    cache = ObjectCache()
    cache.start()

    with pytest.raises(IndexerError):
        cache.index_field(POD_KIND, POD_PHASE_FIELD, pod_phase)


def test_duplicate_indexer_is_rejected() -> None:
    cache = default_object_cache()

    with pytest.raises(IndexerError):
        cache.index_field(POD_KIND, POD_PHASE_FIELD, pod_phase)


def test_unknown_index_and_unstarted_cache_are_errors() -> None:
    cache = default_object_cache()
    with pytest.raises(IndexerError):
        cache.list(POD_KIND, matching_fields={POD_PHASE_FIELD: "Running"})

    cache.start()
    with pytest.raises(IndexerError):
        cache.list(POD_KIND, matching_fields={"spec.nodeName": "node-1"})


def test_get_returns_copies() -> None:
    cache = ObjectCache()
    cache.upsert(_pod("a", "Running"))

    pod = cache.get(POD_KIND, "default", "a")
    assert pod is not None
    pod.status["phase"] = "Failed"

    stored = cache.get(POD_KIND, "default", "a")
    assert stored is not None
    assert stored.status["phase"] == "Running"
    assert cache.get(POD_KIND, "default", "missing") is None


def test_changes_are_published_with_owner_references() -> None:
    cache = ObjectCache()
    events: list[WatchEvent] = []
    cache.subscribe(events.append)
    owner = OwnerReference(kind="TFApplyClaim", name="infra", controller=True)
    deployment = DependentObject(
        kind="Deployment", namespace="default", name="infra-runner", owner_references=(owner,)
    )

    cache.upsert(deployment)
    cache.upsert(deployment)
    cache.remove("Deployment", "default", "infra-runner")
    cache.remove("Deployment", "default", "infra-runner")

    assert [event.type for event in events] == [
        WatchEventType.ADDED,
        WatchEventType.MODIFIED,
        WatchEventType.DELETED,
    ]
    assert events[0].owner_references == (owner,)
