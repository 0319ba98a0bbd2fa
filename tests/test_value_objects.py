"""Tests for playback value objects and entities."""

import pytest
from pydantic import ValidationError

from discord_node_manager.domain.playback.entities import SearchQuery, SessionOptions, Track
from discord_node_manager.domain.playback.value_objects import (
    GatewayEventType,
    NodeEventType,
    NodeState,
)


class TestNodeState:
    """Tests for node connection state transitions."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (NodeState.DISCONNECTED, NodeState.CONNECTING),
            (NodeState.CONNECTING, NodeState.CONNECTED),
            (NodeState.CONNECTED, NodeState.RECONNECTING),
            (NodeState.RECONNECTING, NodeState.CONNECTED),
            (NodeState.CONNECTED, NodeState.DISCONNECTED),
        ],
    )
    def test_valid_transitions(self, current, target):
        assert current.can_transition_to(target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (NodeState.DISCONNECTED, NodeState.CONNECTED),
            (NodeState.CONNECTED, NodeState.CONNECTING),
        ],
    )
    def test_invalid_transitions(self, current, target):
        assert not current.can_transition_to(target)

    def test_only_connected_is_open(self):
        assert [s for s in NodeState if s.is_open] == [NodeState.CONNECTED]


class TestEventTypes:
    """Tests for frame and gateway type tags."""

    def test_session_scoped_types(self):
        scoped = {t for t in NodeEventType if t.is_session_scoped}

        assert NodeEventType.READY not in scoped
        assert NodeEventType.VOICE_CONNECTION_READY not in scoped
        assert len(scoped) == 6

    @pytest.mark.parametrize("tag", ["VOICE_SERVER_UPDATE", "VOICE_STATE_UPDATE"])
    def test_gateway_voice_tags(self, tag):
        assert GatewayEventType.from_tag(tag).value == tag

    @pytest.mark.parametrize("tag", ["GUILD_CREATE", None, 4, "voice_state_update"])
    def test_other_gateway_tags(self, tag):
        assert GatewayEventType.from_tag(tag) is None


class TestEntities:
    """Tests for entity validation."""

    def test_session_options_defaults(self):
        options = SessionOptions(guild_id=123)

        assert options.guild_id == "123"
        assert options.self_deaf is True
        assert options.self_mute is False
        assert options.voice_channel_id is None

    @pytest.mark.parametrize("guild_id", ["", "abc", "12a"])
    def test_session_options_rejects_bad_guild_id(self, guild_id):
        with pytest.raises(ValidationError):
            SessionOptions(guild_id=guild_id)

    def test_search_query_default_identifier(self):
        assert SearchQuery(query="lofi").identifier == "ytsearch"

    def test_search_query_rejects_empty(self):
        with pytest.raises(ValidationError):
            SearchQuery(query="")

    def test_track_from_node(self, node_track, requester):
        track = Track.from_node(node_track, requester)

        assert track.url == node_track["url"]
        assert track.title == node_track["title"]
        assert track.requested_by is requester
