import random

from turn_timer.services.timers.controller import ActiveTimerController


class FakeScheduler:
    """Captures background tasks instead of starting them."""

    def __init__(self):
        self.tasks = []

    def __call__(self, fn, *args):
        self.tasks.append((fn, args))

    def run(self, index):
        fn, args = self.tasks[index]
        fn(*args)


class CountedSleep:
    """Lets the worker wake up a fixed number of times, then stops it via a callback."""

    def __init__(self, wakeups, on_exhausted):
        self.remaining = wakeups
        self.on_exhausted = on_exhausted
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)
        if self.remaining == 0:
            self.on_exhausted()
        self.remaining -= 1


def player_ids(store):
    return [p.id for p in store.snapshot().players]


def test_scenario_a_three_ticks(store, controller):
    p1, p2, p3, p4 = player_ids(store)
    controller.toggle_start_stop(p1)
    for _ in range(3):
        controller.tick()
    snap = store.snapshot()
    assert snap.get(p1).elapsed_seconds == 3
    assert [snap.get(p).elapsed_seconds for p in (p2, p3, p4)] == [0, 0, 0]
    assert snap.total_elapsed_seconds == 3


def test_scenario_b_switch_players(store, controller):
    p1, p2, _, _ = player_ids(store)
    controller.toggle_start_stop(p1)
    for _ in range(3):
        controller.tick()
    controller.toggle_start_stop(p1)
    assert store.active_player_id is None
    controller.toggle_start_stop(p2)
    for _ in range(2):
        controller.tick()
    snap = store.snapshot()
    assert snap.get(p2).elapsed_seconds == 2
    assert snap.get(p1).elapsed_seconds == 3
    assert snap.total_elapsed_seconds == 5


def test_scenario_c_removing_other_player_keeps_clock_running(store, controller):
    p1, p2, _, _ = player_ids(store)
    controller.toggle_start_stop(p1)
    controller.tick()
    store.remove_player(p2)
    controller.tick()
    snap = store.snapshot()
    assert snap.active_player_id == p1
    assert snap.get(p1).elapsed_seconds == 2


def test_starting_another_player_stops_the_previous(store, controller):
    p1, p2, _, _ = player_ids(store)
    controller.toggle_start_stop(p1)
    snap = controller.toggle_start_stop(p2)
    assert snap.active_player_id == p2
    assert [p['is_active'] for p in snap.to_dict()['players']] == [False, True, False, False]


def test_at_most_one_active_under_random_toggles(store, controller):
    rng = random.Random(11)
    ids = player_ids(store)
    for _ in range(100):
        snap = controller.toggle_start_stop(rng.choice(ids + ['missing']))
        active = [p for p in snap.to_dict()['players'] if p['is_active']]
        assert len(active) <= 1
        if snap.active_player_id is not None:
            assert snap.active_player_id in ids


def test_toggle_unknown_player_is_noop(store, controller):
    p1 = player_ids(store)[0]
    controller.toggle_start_stop(p1)
    snap = controller.toggle_start_stop('missing')
    assert snap.active_player_id == p1


def test_tick_without_active_player_changes_nothing(store, adapter, controller):
    saves = adapter.save_count
    snap = controller.tick()
    assert snap.total_elapsed_seconds == 0
    assert adapter.save_count == saves


def test_ticks_are_persisted(store, adapter, controller):
    p1 = player_ids(store)[0]
    controller.toggle_start_stop(p1)
    controller.tick()
    controller.tick()
    assert '"time": 2' in adapter.values['players']


def test_reset_clears_active_and_ticks_do_nothing(store, controller):
    p1 = player_ids(store)[0]
    controller.toggle_start_stop(p1)
    store.reset_all()
    snap = controller.tick()
    assert snap.active_player_id is None
    assert snap.total_elapsed_seconds == 0


def test_worker_applies_ticks_until_stopped(store):
    scheduler = FakeScheduler()
    ticks = []
    controller = ActiveTimerController(store, interval=1, start_background_task=scheduler, on_tick=ticks.append)
    p1 = player_ids(store)[0]
    controller.sleep = CountedSleep(3, lambda: controller.toggle_start_stop(p1))

    controller.toggle_start_stop(p1)
    assert len(scheduler.tasks) == 1
    scheduler.run(0)

    assert store.snapshot().get(p1).elapsed_seconds == 3
    assert store.active_player_id is None
    assert [s.get(p1).elapsed_seconds for s in ticks] == [1, 2, 3]
    assert controller.sleep.calls == [1, 1, 1, 1]


def test_stale_worker_is_discarded_after_switch(store):
    scheduler = FakeScheduler()
    controller = ActiveTimerController(store, start_background_task=scheduler, sleep=lambda s: None)
    p1, p2, _, _ = player_ids(store)

    controller.toggle_start_stop(p1)
    controller.toggle_start_stop(p2)
    assert len(scheduler.tasks) == 2

    # The worker started for p1 wakes up after the switch and must not tick anyone
    scheduler.run(0)
    snap = store.snapshot()
    assert snap.get(p1).elapsed_seconds == 0
    assert snap.get(p2).elapsed_seconds == 0


def test_stale_worker_is_discarded_after_stop_and_restart(store):
    scheduler = FakeScheduler()
    controller = ActiveTimerController(store, start_background_task=scheduler, sleep=lambda s: None)
    p1 = player_ids(store)[0]

    controller.toggle_start_stop(p1)
    controller.toggle_start_stop(p1)
    controller.toggle_start_stop(p1)
    assert controller.generation == 3

    scheduler.run(0)
    assert store.snapshot().get(p1).elapsed_seconds == 0
    assert store.active_player_id == p1


def test_worker_exits_when_active_player_removed(store):
    scheduler = FakeScheduler()
    controller = ActiveTimerController(store, start_background_task=scheduler)
    p1, p2, _, _ = player_ids(store)
    controller.sleep = CountedSleep(2, lambda: store.remove_player(p1))

    controller.toggle_start_stop(p1)
    scheduler.run(0)

    snap = store.snapshot()
    assert snap.active_player_id is None
    assert snap.get(p1) is None
    assert snap.total_elapsed_seconds == 0


def test_stop_forces_inactive(store, controller):
    p1 = player_ids(store)[0]
    controller.toggle_start_stop(p1)
    generation = controller.generation
    snap = controller.stop()
    assert snap.active_player_id is None
    assert controller.generation == generation + 1


def test_worker_keeps_ticking_when_push_fails(store):
    scheduler = FakeScheduler()

    def failing_push(snapshot):
        raise RuntimeError('emit failed')

    controller = ActiveTimerController(store, start_background_task=scheduler, on_tick=failing_push)
    p1 = player_ids(store)[0]
    controller.sleep = CountedSleep(3, controller.stop)

    controller.toggle_start_stop(p1)
    scheduler.run(0)

    assert store.snapshot().get(p1).elapsed_seconds == 3
