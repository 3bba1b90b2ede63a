from make10_events import EventBus, GameEvent, TILE_MATCHED, SESSION_ENDED
from make10_timers import Timers


def test_timer_fires_once_when_due():
    timers = Timers()
    calls = []
    timers.set("hint", 100, lambda: calls.append("hint"), epoch=1)
    assert timers.advance(60, epoch=1) == 0
    assert timers.advance(40, epoch=1) == 1
    assert calls == ["hint"]
    assert not timers.pending("hint")
    assert timers.advance(1000, epoch=1) == 0


def test_stale_epoch_is_dropped():
    timers = Timers()
    calls = []
    timers.set("boss-respawn", 10, lambda: calls.append(1), epoch=1)
    assert timers.advance(10, epoch=2) == 0
    assert calls == []
    assert not timers.pending("boss-respawn")


def test_same_key_replaces_and_cancel():
    timers = Timers()
    calls = []
    timers.set("hint", 10, lambda: calls.append("old"), epoch=0)
    timers.set("hint", 50, lambda: calls.append("new"), epoch=0)
    timers.advance(20, epoch=0)
    assert calls == []
    assert timers.cancel("hint")
    assert not timers.cancel("hint")
    timers.advance(100, epoch=0)
    assert calls == []


def test_callback_may_reschedule_its_key():
    timers = Timers()
    calls = []

    def again():
        calls.append(len(calls))
        if len(calls) < 3:
            timers.set("tick", 10, again, epoch=0)

    timers.set("tick", 10, again, epoch=0)
    for _ in range(5):
        timers.advance(10, epoch=0)
    assert calls == [0, 1, 2]


def test_bus_delivers_in_subscription_order():
    bus = EventBus()
    seen = []
    a = lambda e: seen.append(("a", e.kind))
    b = lambda e: seen.append(("b", e.kind))
    bus.subscribe(a)
    bus.subscribe(b)
    bus.subscribe(a)
    event = bus.emit(TILE_MATCHED, points=200)
    assert event == GameEvent(TILE_MATCHED, {"points": 200})
    assert seen == [("a", TILE_MATCHED), ("b", TILE_MATCHED)]
    bus.unsubscribe(a)
    bus.emit(SESSION_ENDED)
    assert seen[-1] == ("b", SESSION_ENDED)
    assert bus.history == []


def test_bus_history_when_enabled():
    bus = EventBus()
    bus.keep_history = True
    bus.emit(TILE_MATCHED)
    bus.emit(SESSION_ENDED, reason="exit")
    assert bus.kinds() == [TILE_MATCHED, SESSION_ENDED]
    assert bus.history[1].payload == {"reason": "exit"}
