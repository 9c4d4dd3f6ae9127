from __future__ import annotations

from usako.core.events import Event, EventBus, EventType, crouch_event, jump_event
from usako.core.state import State, StateMachine


def test_handlers_receive_matching_events() -> None:
    bus = EventBus()
    jumps = []
    everything = []
    bus.subscribe(EventType.JUMP_OR_SELECT, jumps.append)
    bus.subscribe_all(everything.append)

    bus.emit(jump_event())
    bus.emit(crouch_event(True))

    assert [e.type for e in jumps] == [EventType.JUMP_OR_SELECT]
    assert [e.type for e in everything] == [EventType.JUMP_OR_SELECT, EventType.CROUCH_START]


def test_failing_handler_does_not_block_others() -> None:
    bus = EventBus()
    received = []

    def broken(event: Event) -> None:
        raise RuntimeError("boom")

    bus.subscribe(EventType.RESTART, broken)
    bus.subscribe(EventType.RESTART, received.append)

    bus.emit(Event(EventType.RESTART))

    assert len(received) == 1


def test_unsubscribe() -> None:
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe(EventType.GAME_OVER, received.append)

    unsubscribe()
    bus.emit(Event(EventType.GAME_OVER))

    assert received == []


def test_history_is_bounded() -> None:
    bus = EventBus(history_limit=3)
    for _ in range(5):
        bus.emit(jump_event())
    bus.emit(crouch_event(False))

    assert len(bus.get_history(limit=10)) == 3
    assert [e.type for e in bus.get_history(EventType.CROUCH_END)] == [EventType.CROUCH_END]

    bus.clear_history()
    assert bus.get_history() == []


def test_state_machine_allows_menu_round_trips() -> None:
    machine = StateMachine()
    changes = []
    machine.add_listener(lambda old, new: changes.append((old, new)))

    assert machine.transition(State.RUNNER)
    assert not machine.transition(State.RANKING)
    assert machine.transition(State.TITLE)
    assert machine.transition(State.RANKING)

    assert changes == [
        (State.TITLE, State.RUNNER),
        (State.RUNNER, State.TITLE),
        (State.TITLE, State.RANKING),
    ]


def test_state_machine_reset() -> None:
    machine = StateMachine()
    machine.transition(State.FLAPPY)

    machine.reset()

    assert machine.state is State.TITLE
    assert not machine.can_transition(State.TITLE)


def test_state_changes_are_published() -> None:
    bus = EventBus()
    machine = StateMachine(event_bus=bus)

    machine.transition(State.FLAPPY)
    machine.transition(State.RUNNER)

    changes = bus.get_history(EventType.STATE_CHANGED)
    assert [e.data for e in changes] == [{"from": "TITLE", "to": "FLAPPY"}]


def test_failing_listener_does_not_block_transition() -> None:
    machine = StateMachine()

    def broken(old: State, new: State) -> None:
        raise RuntimeError("boom")

    machine.add_listener(broken)

    assert machine.transition(State.RANKING)
    assert machine.state is State.RANKING
    machine.remove_listener(broken)
