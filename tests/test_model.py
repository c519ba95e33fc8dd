from __future__ import annotations

import pytest
from evdev import ecodes

from inputactions.core.errors import ConfigError, EventDecodeError
from inputactions.core.events import decode_event
from inputactions.core.keys import key_for_code, parse_key_name
from inputactions.core.model import ActionSpec, Config, KeyEvent, KeyIdentity, OtherEvent, RawEvent, Rule, TriggerState


def _rule(key: int, on: TriggerState, *argv: str) -> Rule:
    return Rule(key=KeyIdentity(key), on=on, action=ActionSpec(argv=argv, command=" ".join(argv)))


@pytest.mark.parametrize(
    ("value", "state"),
    [(0, TriggerState.RELEASE), (1, TriggerState.PRESS), (2, TriggerState.REPEAT)],
)
def test_trigger_state_decoding(value: int, state: TriggerState) -> None:
    assert TriggerState.from_value(value) is state


@pytest.mark.parametrize("value", [-1, 3, 4, 255, 2**31 - 1])
def test_trigger_state_rejects_out_of_range(value: int) -> None:
    with pytest.raises(EventDecodeError, match=str(value)):
        TriggerState.from_value(value)


def test_trigger_state_from_name() -> None:
    assert TriggerState.from_name("repeat") is TriggerState.REPEAT
    with pytest.raises(ConfigError, match="press, release, repeat"):
        TriggerState.from_name("Press")


def test_find_returns_first_match_in_order() -> None:
    config = Config(
        name="dev",
        rules=(
            _rule(ecodes.KEY_A, TriggerState.RELEASE, "release-a"),
            _rule(ecodes.KEY_A, TriggerState.PRESS, "first"),
            _rule(ecodes.KEY_A, TriggerState.PRESS, "second"),
        ),
    )

    rule = config.find(KeyIdentity(ecodes.KEY_A), TriggerState.PRESS)
    assert rule is config.rules[1]
    assert config.find(KeyIdentity(ecodes.KEY_A), TriggerState.REPEAT) is None
    assert config.find(KeyIdentity(ecodes.KEY_B), TriggerState.PRESS) is None


def test_key_identity_compares_by_code() -> None:
    assert KeyIdentity(ecodes.KEY_A, "KEY_A") == KeyIdentity(ecodes.KEY_A)
    assert KeyIdentity(ecodes.KEY_A) != KeyIdentity(ecodes.KEY_B)


def test_parse_key_name_round_trips_code() -> None:
    key = parse_key_name("KEY_VOLUMEUP")
    assert key.code == ecodes.KEY_VOLUMEUP
    assert key_for_code(key.code) == key
    assert key_for_code(ecodes.BTN_LEFT).name.startswith("BTN_")


def test_decode_key_event() -> None:
    event = decode_event(RawEvent(kind=ecodes.EV_KEY, code=ecodes.KEY_A, value=1))
    assert isinstance(event, KeyEvent)
    assert event.key == KeyIdentity(ecodes.KEY_A)
    assert event.state is TriggerState.PRESS


def test_decode_ignores_other_kinds_even_with_odd_values() -> None:
    raw = RawEvent(kind=ecodes.EV_REL, code=ecodes.REL_X, value=-7)
    assert decode_event(raw) == OtherEvent(raw=raw)


def test_decode_rejects_bad_key_value() -> None:
    with pytest.raises(EventDecodeError):
        decode_event(RawEvent(kind=ecodes.EV_KEY, code=ecodes.KEY_A, value=5))
