"""Tests for the concurrent configuration registry."""

import threading

import numpy as np
import pytest

from adcpscreen.ensemble import ConfigKey, EnsembleSource, bad_velocity_mask
from adcpscreen.pipeline import ConfigRegistry, EnsembleCorrectionPipeline
from adcpscreen.pipeline import correction
from adcpscreen.schemas import ScreenOptions

from tests.helpers.fake_ensemble import make_ensemble

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def key(code="2", cepo=0, idx=0, source=EnsembleSource.PLAYBACK):
    return ConfigKey(code, cepo, idx, source)


class TestResolve:

    def test_first_sight_creates_pipeline(self, registry, notifier, events):
        pipeline = registry.resolve(key())

        assert isinstance(pipeline, EnsembleCorrectionPipeline)
        assert key() in registry
        assert registry.stats["created"] == 1

        notifier.process_pending()
        assert [(e.kind, e.keys) for e in events] == [("added", (key(),))]

    def test_same_key_same_instance(self, registry, notifier, events):
        first = registry.resolve(key())
        second = registry.resolve(ConfigKey("2", 0, 0, "playback"))

        assert first is second
        assert len(registry) == 1
        notifier.process_pending()
        assert len(events) == 1

    def test_distinct_keys_distinct_pipelines(self, registry):
        a = registry.resolve(key(cepo=0))
        b = registry.resolve(key(cepo=1))
        c = registry.resolve(key(cepo=0, source=EnsembleSource.LIVE))

        assert len({id(a), id(b), id(c)}) == 3
        assert len(registry) == 3

    def test_options_loaded_from_store(self, registry, store):
        saved = ScreenOptions(remove_ship_speed=False, bt_snr_thresh=15)
        store.save_options(key(source=EnsembleSource.LIVE), saved)

        pipeline = registry.resolve(key(source=EnsembleSource.PLAYBACK))

        assert pipeline.options == saved

    def test_new_configuration_saved_to_store(self, registry, store):
        registry.resolve(key(code="3"))
        assert store.known_configs() == [key(code="3")]

    def test_default_options_without_store(self):
        defaults = ScreenOptions(retransform=True)
        registry = ConfigRegistry(default_options=defaults)

        assert registry.resolve(key()).options is defaults


class TestExcludeAveraged:

    @pytest.mark.parametrize("source", [
        EnsembleSource.SHORT_TERM_AVERAGE,
        EnsembleSource.LONG_TERM_AVERAGE,
    ])
    def test_averaged_sources_not_registered(self, registry, notifier, events, source):
        assert registry.resolve(key(source=source)) is None
        assert len(registry) == 0
        notifier.process_pending()
        assert events == []

    def test_averaged_registered_when_allowed(self):
        registry = ConfigRegistry(exclude_averaged=False)
        assert registry.resolve(key(source=EnsembleSource.LONG_TERM_AVERAGE)) is not None


class TestConcurrentResolve:

    def test_single_creation_under_race(self, store, notifier, events):
        registry = ConfigRegistry(store=store, notifier=notifier)
        n_threads = 8
        barrier = threading.Barrier(n_threads)
        results = [None] * n_threads

        def worker(i):
            barrier.wait()
            results[i] = registry.resolve(key())

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(n_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(r is results[0] for r in results)
        assert registry.stats["created"] == 1
        assert len(registry) == 1
        assert not results[0].closed

        notifier.process_pending()
        assert len(events) == 1

    def test_losing_candidates_are_closed(self, monkeypatch):
        registry = ConfigRegistry()
        created = []
        original = registry._create_pipeline

        def tracking_create(k):
            pipeline = original(k)
            created.append(pipeline)
            # Another thread registers the key while this one builds
            if len(created) == 1:
                registry.resolve(k)
            return pipeline

        monkeypatch.setattr(registry, "_create_pipeline", tracking_create)

        winner = registry.resolve(key())

        assert winner is created[1]
        assert created[0].closed
        assert registry.stats["discarded"] == 1


class TestRemoveAndClear:

    def test_remove_is_idempotent(self, registry, notifier, events):
        pipeline = registry.resolve(key())

        assert registry.remove(key()) is True
        assert registry.remove(key()) is False

        assert pipeline.closed
        assert key() not in registry
        notifier.process_pending()
        assert [e.kind for e in events] == ["added", "removed"]

    def test_removed_key_is_recreated(self, registry):
        first = registry.resolve(key())
        registry.remove(key())

        second = registry.resolve(key())

        assert second is not first
        assert not second.closed

    def test_clear_publishes_one_event(self, registry, notifier, events):
        registry.resolve(key(cepo=0))
        registry.resolve(key(cepo=1))
        notifier.process_pending()
        events.clear()

        assert registry.clear() == 2
        assert registry.clear() == 0

        notifier.process_pending()
        assert len(events) == 1
        assert events[0].kind == "cleared"
        assert set(events[0].keys) == {key(cepo=0), key(cepo=1)}
        assert len(registry) == 0


class TestRemoveWhileProcessing:
    """Removing a configuration waits for the frame it is correcting."""

    @pytest.fixture
    def held_stage(self, monkeypatch):
        entered = threading.Event()
        release = threading.Event()
        original = correction.remove_ship_speed

        def held(ensemble, reference):
            entered.set()
            release.wait(timeout=5)
            return original(ensemble, reference)

        monkeypatch.setattr(correction, "remove_ship_speed", held)
        return entered, release

    def _run_while_held(self, registry, held_stage, removal):
        entered, release = held_stage
        pipeline = registry.resolve(key())
        ens = make_ensemble()
        results = []

        processor = threading.Thread(target=pipeline.process, args=(ens,))
        processor.start()
        assert entered.wait(timeout=5)

        remover = threading.Thread(target=lambda: results.append(removal()))
        remover.start()
        remover.join(timeout=0.2)
        still_blocked = remover.is_alive()

        release.set()
        processor.join(timeout=5)
        remover.join(timeout=5)
        return pipeline, ens, results, still_blocked

    def _assert_corrected(self, ens):
        earth = ens.water_profile.earth_velocity
        assert bad_velocity_mask(earth[3]).all()
        np.testing.assert_allclose(earth[:3, :3], np.tile([0.5, 1.5, 0.1], (3, 1)))

    def test_remove_waits_for_in_flight_frame(self, registry, held_stage):
        pipeline, ens, results, still_blocked = self._run_while_held(
            registry, held_stage, lambda: registry.remove(key()))

        assert still_blocked
        assert results == [True]
        self._assert_corrected(ens)
        assert pipeline.closed
        assert pipeline.stats["processed"] == 1
        assert key() not in registry

    def test_clear_waits_for_in_flight_frame(self, registry, held_stage):
        pipeline, ens, results, still_blocked = self._run_while_held(
            registry, held_stage, registry.clear)

        assert still_blocked
        assert results == [1]
        self._assert_corrected(ens)
        assert pipeline.closed
        assert len(registry) == 0


class TestPopulate:

    def test_populate_adds_new_keys_once(self, registry, notifier, events):
        registry.resolve(key(cepo=0))
        notifier.process_pending()
        events.clear()

        added = registry.populate([key(cepo=0), key(cepo=1), key(cepo=2), key(cepo=1)])

        assert added == [key(cepo=1), key(cepo=2)]
        assert len(registry) == 3
        notifier.process_pending()
        assert len(events) == 1
        assert events[0].keys == (key(cepo=1), key(cepo=2))

    def test_populate_builds_only_missing_keys(self, registry, monkeypatch):
        existing = registry.resolve(key(cepo=0))
        built = []
        original = registry._create_pipeline

        def tracking_create(k):
            built.append(k)
            return original(k)

        monkeypatch.setattr(registry, "_create_pipeline", tracking_create)

        registry.populate([key(cepo=0), key(cepo=1)])

        assert built == [key(cepo=1)]
        assert registry.get(key(cepo=0)) is existing
        assert registry.stats["discarded"] == 0

    def test_populate_closes_candidate_that_lost_race(self, monkeypatch):
        registry = ConfigRegistry()
        created = []
        original = registry._create_pipeline

        def tracking_create(k):
            pipeline = original(k)
            created.append(pipeline)
            # Another thread registers the key while populate builds it
            if len(created) == 1:
                registry.resolve(k)
            return pipeline

        monkeypatch.setattr(registry, "_create_pipeline", tracking_create)

        added = registry.populate([key()])

        assert added == []
        assert created[0].closed
        assert registry.get(key()) is created[1]
        assert registry.stats["discarded"] == 1

    def test_populate_skips_averaged(self, registry):
        added = registry.populate([key(source=EnsembleSource.SHORT_TERM_AVERAGE)])
        assert added == []

    def test_active_keys_in_registration_order(self, registry):
        for cepo in (2, 0, 1):
            registry.resolve(key(cepo=cepo))

        assert [k.cepo_index for k, _ in registry.active_keys()] == [2, 0, 1]
