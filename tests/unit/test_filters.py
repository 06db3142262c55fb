"""Tests for the filter registry, the pipeline and the built-in filters."""

from __future__ import annotations

import copy
import threading
from datetime import UTC, datetime

import pytest

from kubeherald.filters import (
    Filter,
    FilterNotFoundError,
    FilterPipeline,
    FilterRegistry,
    ImageTagChecker,
    PodLabelChecker,
    build_filter_registry,
)
from kubeherald.filters.image_tag_checker import image_tag, uses_latest_tag
from kubeherald.models.events import Event, EventType
from kubeherald.models.resources import ContainerView, GenericResourceView, PodView, build_resource_view

_TS = datetime(2026, 3, 1, 9, 30, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Helper factories
# ---------------------------------------------------------------------------


def _make_event(kind: str = "Pod", type: EventType = EventType.CREATE, name: str = "web") -> Event:  # noqa: A002
    return Event(kind=kind, type=type, name=name, namespace="default", cluster="prod", timestamp=_TS)


def _make_pod(*images: str, init_images: tuple[str, ...] = (), labels: dict[str, str] | None = None) -> PodView:
    return PodView(
        name="web",
        namespace="default",
        labels={"app": "web"} if labels is None else labels,
        init_containers=tuple(ContainerView(name=f"init-{i}", image=img) for i, img in enumerate(init_images)),
        containers=tuple(ContainerView(name=f"c-{i}", image=img) for i, img in enumerate(images)),
    )


class _NoteFilter(Filter):
    """Appends a fixed warning, for ordering tests."""

    description = "Appends a note."

    def __init__(self, filter_id: str, note: str | None = None) -> None:
        self.filter_id = filter_id
        self.note = note or filter_id

    def run(self, resource, event: Event) -> None:
        event.add_warning(self.note)


class _BrokenFilter(Filter):
    filter_id = "broken"
    description = "Always raises."

    def run(self, resource, event: Event) -> None:
        event.add_warning("partial")
        raise RuntimeError("boom")


class _RelabelFilter(Filter):
    filter_id = "relabel"
    description = "Tries to rewrite labels."

    def run(self, resource, event: Event) -> None:
        resource.labels["app"] = "hijacked"


# =====================================================================
# FilterRegistry
# =====================================================================


class TestRegistry:
    def test_register_defaults_to_enabled(self) -> None:
        registry = FilterRegistry()
        registry.register(_NoteFilter("a"))
        assert registry.is_enabled("a") is True

    def test_reregister_replaces_without_duplicating(self) -> None:
        registry = FilterRegistry()
        registry.register(_NoteFilter("a", note="old"))
        registry.register(_NoteFilter("b"))
        registry.set_enabled("a", False)
        registry.register(_NoteFilter("a", note="new"))

        assert len(registry) == 2
        assert registry.is_enabled("a") is True
        assert [f.note for f in registry.enabled_filters()] == ["new", "b"]

    def test_register_requires_id(self) -> None:
        with pytest.raises(ValueError):
            FilterRegistry().register(_NoteFilter(""))

    def test_set_enabled_unknown_raises(self) -> None:
        registry = FilterRegistry()
        with pytest.raises(FilterNotFoundError) as exc_info:
            registry.set_enabled("missing", False)
        assert exc_info.value.filter_id == "missing"
        assert str(exc_info.value) == "Filter 'missing' not found"

    def test_list_sorted_by_id_regardless_of_registration_order(self) -> None:
        registry = FilterRegistry()
        for fid in ("zeta", "alpha", "mid"):
            registry.register(_NoteFilter(fid))
        registry.set_enabled("mid", False)

        first = registry.list_filters()
        assert [(r.filter_id, r.enabled) for r in first] == [("alpha", True), ("mid", False), ("zeta", True)]
        assert all(r.description == "Appends a note." for r in first)
        assert registry.list_filters() == first

    def test_enabled_filters_keep_registration_order(self) -> None:
        registry = FilterRegistry()
        for fid in ("zeta", "alpha", "mid"):
            registry.register(_NoteFilter(fid))
        assert [f.filter_id for f in registry.enabled_filters()] == ["zeta", "alpha", "mid"]

    def test_concurrent_toggles_and_reads(self) -> None:
        registry = build_filter_registry()
        errors: list[Exception] = []

        def toggle() -> None:
            try:
                for i in range(500):
                    registry.set_enabled("image_tag_checker", i % 2 == 0)
                    registry.list_filters()
                    registry.enabled_filters()
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=toggle) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(registry.list_filters()) == 2


# =====================================================================
# FilterPipeline
# =====================================================================


class TestPipeline:
    def test_runs_enabled_filters_in_registration_order(self) -> None:
        registry = FilterRegistry()
        for fid in ("second", "first", "third"):
            registry.register(_NoteFilter(fid))
        registry.set_enabled("third", False)

        event = FilterPipeline(registry).run({}, _make_event())
        assert event.warnings == ["second", "first"]

    def test_failing_filter_is_isolated(self) -> None:
        registry = FilterRegistry()
        registry.register(_NoteFilter("before"))
        registry.register(_BrokenFilter())
        registry.register(_NoteFilter("after"))

        event = FilterPipeline(registry).run({}, _make_event())
        assert event.warnings == ["before", "partial", "after"]

    def test_existing_advisories_are_preserved(self) -> None:
        registry = FilterRegistry()
        registry.register(_NoteFilter("new"))
        event = _make_event()
        event.add_warning("existing")

        FilterPipeline(registry).run({}, event)
        assert event.warnings == ["existing", "new"]

    def test_idempotent_on_identical_inputs(self) -> None:
        pipeline = FilterPipeline(build_filter_registry())
        pod = {
            "metadata": {"name": "web", "namespace": "default"},
            "spec": {"containers": [{"name": "a", "image": "nginx"}, {"name": "b", "image": "busybox:latest"}]},
        }
        template = _make_event()

        first = pipeline.run(copy.deepcopy(pod), copy.deepcopy(template))
        second = pipeline.run(copy.deepcopy(pod), copy.deepcopy(template))

        assert first.recommendations == second.recommendations
        assert first.warnings == second.warnings

    def test_filter_cannot_write_back_to_object(self) -> None:
        registry = FilterRegistry()
        registry.register(_RelabelFilter())
        registry.register(_NoteFilter("after"))
        obj = {"metadata": {"name": "web", "labels": {"app": "web"}}}

        event = FilterPipeline(registry).run(obj, _make_event())

        assert obj == {"metadata": {"name": "web", "labels": {"app": "web"}}}
        assert event.warnings == ["after"]
        assert len(first.recommendations) == 3

    def test_disable_removes_effect_and_enable_restores(self) -> None:
        registry = build_filter_registry()
        pipeline = FilterPipeline(registry)
        pod = _make_pod("nginx")

        registry.set_enabled("image_tag_checker", False)
        assert pipeline.run(pod, _make_event()).recommendations == []

        registry.set_enabled("image_tag_checker", True)
        assert len(pipeline.run(pod, _make_event()).recommendations) == 1

    def test_raw_object_is_not_mutated(self) -> None:
        pod = {"metadata": {"name": "web"}, "spec": {"containers": [{"name": "a", "image": "nginx"}]}}
        snapshot = copy.deepcopy(pod)
        FilterPipeline(build_filter_registry()).run(pod, _make_event())
        assert pod == snapshot


# =====================================================================
# Resource views
# =====================================================================


class TestResourceViews:
    def test_pod_view_from_raw(self) -> None:
        view = build_resource_view(
            "Pod",
            {
                "metadata": {"name": "web", "namespace": "shop", "labels": {"app": "web"}},
                "spec": {
                    "initContainers": [{"name": "migrate", "image": "migrate:v2"}],
                    "containers": [{"name": "app", "image": "shop:1.0"}],
                },
            },
        )
        assert isinstance(view, PodView)
        assert view.namespace == "shop"
        assert view.init_containers == (ContainerView("migrate", "migrate:v2"),)
        assert view.containers == (ContainerView("app", "shop:1.0"),)

    def test_other_kinds_get_generic_view(self) -> None:
        view = build_resource_view("Service", {"metadata": {"name": "api"}})
        assert isinstance(view, GenericResourceView)
        assert view.kind == "Service"
        assert view.name == "api"

    def test_missing_fields_yield_empty_view(self) -> None:
        view = build_resource_view("Pod", None)
        assert isinstance(view, PodView)
        assert view.containers == ()
        assert view.labels == {}

    def test_existing_view_passes_through(self) -> None:
        pod = _make_pod("nginx")
        assert build_resource_view("Pod", pod) is pod

    def test_pod_view_is_read_only(self) -> None:
        labels = {"app": "web"}
        view = build_resource_view("Pod", {"metadata": {"name": "web", "labels": labels}})

        with pytest.raises(TypeError):
            view.labels["app"] = "other"  # type: ignore[index]
        with pytest.raises(TypeError):
            view.annotations["note"] = "x"  # type: ignore[index]
        assert labels == {"app": "web"}

    def test_direct_construction_copies_labels(self) -> None:
        labels = {"app": "web"}
        view = PodView(name="web", namespace="default", labels=labels)
        labels["app"] = "changed"
        assert view.labels == {"app": "web"}

    def test_generic_view_does_not_share_payload(self) -> None:
        obj = {"metadata": {"name": "api", "labels": {"tier": "backend"}}, "spec": {"ports": [80]}}
        view = build_resource_view("Service", obj)

        with pytest.raises(TypeError):
            view.raw["spec"] = {}  # type: ignore[index]
        view.raw["spec"]["ports"].append(443)
        with pytest.raises(TypeError):
            view.labels["tier"] = "frontend"  # type: ignore[index]

        assert obj["spec"] == {"ports": [80]}
        assert view.raw["metadata"]["name"] == "api"


# =====================================================================
# ImageTagChecker
# =====================================================================


class TestImageTag:
    @pytest.mark.parametrize(
        ("image", "expected"),
        [
            ("nginx", None),
            ("nginx:1.14", "1.14"),
            ("nginx:latest", "latest"),
            ("registry:5000/nginx", None),
            ("registry:5000/team/nginx:2.0", "2.0"),
            ("nginx@sha256:abcd", "sha256:abcd"),
        ],
    )
    def test_image_tag(self, image: str, expected: str | None) -> None:
        assert image_tag(image) == expected

    def test_uses_latest_tag(self) -> None:
        assert uses_latest_tag("nginx")
        assert uses_latest_tag("nginx:latest")
        assert uses_latest_tag("nginx:")
        assert not uses_latest_tag("nginx:1.14")
        assert not uses_latest_tag("nginx@sha256:abcd")


class TestImageTagChecker:
    def test_two_recommendations_for_untagged_and_latest(self) -> None:
        event = _make_event()
        ImageTagChecker().run(_make_pod("nginx", "nginx:1.14", "nginx:latest"), event)

        assert event.recommendations == [
            ":latest tag used in image 'nginx' of Container 'c-0' should be avoided.",
            ":latest tag used in image 'nginx:latest' of Container 'c-2' should be avoided.",
        ]
        assert event.warnings == []

    def test_init_containers_checked_first(self) -> None:
        event = _make_event()
        ImageTagChecker().run(_make_pod("app:latest", init_images=("busybox",)), event)

        assert event.recommendations == [
            ":latest tag used in image 'busybox' of initContainer 'init-0' should be avoided.",
            ":latest tag used in image 'app:latest' of Container 'c-0' should be avoided.",
        ]

    @pytest.mark.parametrize("event_type", [EventType.UPDATE, EventType.DELETE, EventType.WARNING])
    def test_only_create_events(self, event_type: EventType) -> None:
        event = _make_event(type=event_type)
        ImageTagChecker().run(_make_pod("nginx"), event)
        assert event.recommendations == []

    def test_noop_on_other_kinds(self) -> None:
        event = _make_event(kind="Deployment")
        view = GenericResourceView(kind="Deployment", name="web", namespace="default")
        ImageTagChecker().run(view, event)
        assert event.recommendations == []

    def test_describe(self) -> None:
        assert "latest" in ImageTagChecker().describe()


class TestPodLabelChecker:
    def test_unlabelled_pod(self) -> None:
        event = _make_event()
        PodLabelChecker().run(_make_pod("nginx:1.0", labels={}), event)
        assert event.recommendations == ["pod 'web' creation without labels should be avoided."]

    def test_labelled_pod(self) -> None:
        event = _make_event()
        PodLabelChecker().run(_make_pod("nginx:1.0"), event)
        assert event.recommendations == []


def test_build_filter_registry() -> None:
    registry = build_filter_registry()
    assert registry.names() == ["image_tag_checker", "pod_label_checker"]
