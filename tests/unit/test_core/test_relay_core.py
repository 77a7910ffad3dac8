"""
Unit tests for the RelayCore component.
"""

import pytest
from unittest.mock import MagicMock, patch

from peer_relay.config import RelayConfig
from peer_relay.core import (
    BroadcastPolicy,
    Connect,
    Disconnect,
    Message,
    RelayCore,
    TargetedRelayPolicy,
)


def connect_all(core, *peer_ids):
    for peer_id in peer_ids:
        core.handle(Connect(peer_id))


class TestLifecycle:
    """Connect / disconnect handling."""

    @pytest.mark.unit
    def test_connect_registers_with_empty_attributes(self, broadcast_core):
        broadcast_core.handle(Connect("a"))

        assert broadcast_core.roster() == ["a"]
        assert broadcast_core.get_attributes("a") == {}

    @pytest.mark.unit
    def test_connect_twice_overwrites(self, broadcast_core):
        broadcast_core.handle(Connect("a"))
        broadcast_core.update_attributes("a", {"x": 3})
        broadcast_core.handle(Connect("a"))

        assert broadcast_core.roster() == ["a"]
        assert broadcast_core.get_attributes("a") == {}

    @pytest.mark.unit
    def test_disconnect_twice_is_harmless(self, broadcast_core):
        connect_all(broadcast_core, "a", "b")

        broadcast_core.handle(Disconnect("a"))
        after_first = broadcast_core.roster()
        broadcast_core.handle(Disconnect("a"))

        assert after_first == ["b"]
        assert broadcast_core.roster() == ["b"]

    @pytest.mark.unit
    def test_disconnect_unknown_peer(self, broadcast_core, transport):
        broadcast_core.handle(Disconnect("ghost"))

        assert broadcast_core.roster() == []
        assert transport.sent == []

    @pytest.mark.unit
    def test_evict_removes_peer(self, broadcast_core):
        connect_all(broadcast_core, "a", "b")
        broadcast_core.evict("b")

        assert broadcast_core.roster() == ["a"]

    @pytest.mark.unit
    def test_unknown_event_type(self, broadcast_core):
        with pytest.raises(TypeError):
            broadcast_core.handle("connect a")

    @pytest.mark.unit
    def test_shutdown_clears_silently(self, transport):
        core = RelayCore(transport, roster_on_disconnect=True)
        connect_all(core, "a", "b")

        core.shutdown()

        assert core.roster() == []
        assert transport.sent == []


class TestRoster:
    """Roster emission flags."""

    @pytest.mark.unit
    def test_no_roster_by_default(self, broadcast_core, transport):
        connect_all(broadcast_core, "a", "b")
        broadcast_core.handle(Disconnect("a"))

        assert transport.sent == []

    @pytest.mark.unit
    def test_roster_on_connect_reaches_everyone(self, transport):
        core = RelayCore(transport, roster_on_connect=True)
        connect_all(core, "a")
        transport.clear()

        core.handle(Connect("b"))

        assert sorted(transport.recipients()) == ["a", "b"]
        for _, payload in transport.sent:
            assert payload == {"type": "clients", "clients": ["a", "b"]}

    @pytest.mark.unit
    def test_roster_on_disconnect_reaches_remaining(self, transport):
        core = RelayCore(transport, roster_on_disconnect=True)
        connect_all(core, "a", "b", "c")

        core.handle(Disconnect("b"))

        assert sorted(transport.recipients()) == ["a", "c"]
        assert transport.sent[0][1] == {"type": "clients", "clients": ["a", "c"]}

    @pytest.mark.unit
    def test_roster_flags_are_independent(self, transport):
        core = RelayCore(transport, roster_on_connect=True, roster_on_disconnect=False)
        connect_all(core, "a", "b")
        transport.clear()

        core.handle(Disconnect("a"))

        assert transport.sent == []


class TestTargetedRelay:
    """Targeted-relay policy."""

    @pytest.mark.unit
    def test_present_target_gets_exactly_one_send(self, targeted_core, transport):
        connect_all(targeted_core, "a", "b", "c")

        targeted_core.handle(Message("a", "signal", {"sdp": "offer"}, target_id="b"))

        assert transport.sent == [
            ("b", {"type": "signal", "from": "a", "data": {"sdp": "offer"}, "target": "b"})
        ]

    @pytest.mark.unit
    def test_absent_target_is_silent_drop(self, targeted_core, transport):
        connect_all(targeted_core, "a", "b")

        targeted_core.handle(Message("a", "signal", {"sdp": "offer"}, target_id="zz"))

        assert transport.sent == []
        assert targeted_core.get_stats()["messages_dropped"] == 1

    @pytest.mark.unit
    def test_missing_target_is_silent_drop(self, targeted_core, transport):
        connect_all(targeted_core, "a", "b")

        targeted_core.handle(Message("a", "signal", {}))

        assert transport.sent == []

    @pytest.mark.unit
    def test_attribute_fields_stored_on_sender(self, transport):
        core = RelayCore(
            transport, policy=TargetedRelayPolicy(), attribute_fields=("x", "y")
        )
        connect_all(core, "a", "b")

        core.handle(Message("a", "update", {"x": 4, "y": 7, "z": 1}, target_id="b"))

        assert core.get_attributes("a") == {"x": 4, "y": 7}
        assert core.get_attributes("b") == {}
        assert transport.sent_to("b")[0]["data"] == {"x": 4, "y": 7, "z": 1}

    @pytest.mark.unit
    def test_attributes_untouched_when_target_absent(self, transport):
        core = RelayCore(
            transport, policy=TargetedRelayPolicy(), attribute_fields=("x", "y")
        )
        connect_all(core, "a")

        core.handle(Message("a", "update", {"x": 4, "y": 7}, target_id="gone"))

        assert core.get_attributes("a") == {}

    @pytest.mark.unit
    def test_non_mapping_payload_skips_attributes(self, transport):
        core = RelayCore(transport, policy=TargetedRelayPolicy(), attribute_fields=("x",))
        connect_all(core, "a", "b")

        core.handle(Message("a", "update", [1, 2], target_id="b"))

        assert core.get_attributes("a") == {}
        assert len(transport.sent) == 1


class TestBroadcast:
    """Broadcast policy, with and without echo."""

    @pytest.mark.unit
    def test_broadcast_without_echo(self, broadcast_core, transport):
        connect_all(broadcast_core, "a", "b", "c")

        broadcast_core.handle(Message("b", "message", "hi"))

        assert sorted(transport.recipients()) == ["a", "c"]

    @pytest.mark.unit
    def test_broadcast_with_echo(self, echo_core, transport):
        connect_all(echo_core, "a", "b", "c")

        echo_core.handle(Message("b", "message", "hi"))

        assert sorted(transport.recipients()) == ["a", "b", "c"]
        assert transport.sent_to("b") == [{"type": "message", "from": "b", "data": "hi"}]

    @pytest.mark.unit
    def test_send_failure_does_not_stop_other_recipients(self):
        transport = MagicMock()
        transport.send.side_effect = [ConnectionError("gone"), None]
        core = RelayCore(transport, policy=BroadcastPolicy(include_sender=True))
        connect_all(core, "a", "b")

        with patch("peer_relay.core.relay_core.logger") as log:
            core.handle(Message("a", "message", "hi"))

        assert transport.send.call_count == 2
        log.warning.assert_called_once()
        assert "gone" in log.warning.call_args.args[0]


class TestScenario:
    """The a/b/c walkthrough: targeted signals, then a broadcast."""

    @pytest.mark.unit
    @pytest.mark.parametrize("echo", [False, True])
    def test_abc_walkthrough(self, transport, echo):
        targeted = RelayCore(transport, policy=TargetedRelayPolicy())
        connect_all(targeted, "a", "b", "c")

        targeted.handle(Message("a", "color", {"r": 10, "g": 20, "b": 30}, target_id="b"))
        assert transport.recipients() == ["b"]
        assert transport.sent_to("b")[0]["data"] == {"r": 10, "g": 20, "b": 30}

        targeted.handle(Disconnect("c"))
        transport.clear()
        targeted.handle(Message("a", "color", {"r": 0, "g": 0, "b": 0}, target_id="c"))
        assert transport.sent == []

        broadcaster = RelayCore(transport, policy=BroadcastPolicy(include_sender=echo))
        connect_all(broadcaster, "a", "b", "c")
        broadcaster.handle(Message("b", "update", {"x": 1, "y": 2}))

        expected = ["a", "b", "c"] if echo else ["a", "c"]
        assert sorted(transport.recipients()) == expected
        for _, payload in transport.sent:
            assert payload["data"] == {"x": 1, "y": 2}


class TestFromConfig:
    """Building the core from presets."""

    @pytest.mark.unit
    def test_chat_preset(self, transport):
        core = RelayCore.from_config(RelayConfig.from_preset("chat"), transport)

        assert isinstance(core.policy, BroadcastPolicy)
        assert core.policy.include_sender is True
        assert not core.roster_on_connect

    @pytest.mark.unit
    def test_signal_preset(self, transport):
        core = RelayCore.from_config(RelayConfig.from_preset("signal"), transport)

        assert isinstance(core.policy, TargetedRelayPolicy)
        assert core.roster_on_connect and core.roster_on_disconnect

    @pytest.mark.unit
    def test_position_preset(self, transport):
        core = RelayCore.from_config(RelayConfig.from_preset("position"), transport)

        assert core.attribute_fields == ("x", "y")
        assert not core.roster_on_disconnect
