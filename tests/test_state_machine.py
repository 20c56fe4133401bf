"""
Unit tests for the pure session transitions.
"""

from ircflow.irc import CapabilitySet, ConnectionState
from ircflow.irc.state_machine import (
    Collaborators,
    NickChanged,
    SessionInfoUpdated,
    SessionState,
    SocketError,
    StateChanged,
    begin_connect,
    handle_message,
    on_disconnected,
    on_socket_connected,
    on_socket_error,
    request_nick,
)
from tests.fixtures.irc_fixtures import make_message


def _registering_state(**changes):  # type: ignore[no-untyped-def]
    state = SessionState(
        host="irc.example.org",
        user_name="user",
        nick_name="myself",
        real_name="Real Name",
        connection=ConnectionState.REGISTERING,
    )
    return state.replace(**changes)


def _handle(state, line, collaborators=None):  # type: ignore[no-untyped-def]
    return handle_message(state, make_message(line), collaborators)


class TestSocketTransitions:
    """Socket level events."""

    def test_begin_connect(self):
        t = begin_connect(SessionState())
        assert t.state.connection is ConnectionState.CONNECTING
        assert t.state.active
        assert t.events == (StateChanged(ConnectionState.CONNECTING),)

    def test_registration_lines_without_password(self):
        state = _registering_state(connection=ConnectionState.CONNECTING)
        t = on_socket_connected(state, None)
        assert t.state.connection is ConnectionState.REGISTERING
        assert t.commands == (
            "CAP LS",
            "NICK myself",
            "USER user 0 * :Real Name",
        )
        assert t.events == (StateChanged(ConnectionState.REGISTERING),)

    def test_registration_lines_with_password(self):
        state = _registering_state(connection=ConnectionState.CONNECTING)
        t = on_socket_connected(state, "secret")
        assert t.commands[0] == "PASS secret"
        assert len(t.commands) == 4

    def test_registration_clears_capabilities(self):
        state = _registering_state(
            connection=ConnectionState.CONNECTING,
            active_caps=CapabilitySet.of(["sasl"]),
            available_caps=CapabilitySet.of(["sasl"]),
        )
        t = on_socket_connected(state, None)
        assert len(t.state.active_caps) == 0
        assert len(t.state.available_caps) == 0

    def test_disconnect_clears_connected(self):
        state = _registering_state(connection=ConnectionState.CONNECTED, connected=True)
        t = on_disconnected(state)
        assert t.state.connection is ConnectionState.DISCONNECTED
        assert not t.state.connected
        assert not t.state.active
        assert t.events == (StateChanged(ConnectionState.DISCONNECTED),)

    def test_disconnect_when_already_disconnected_emits_nothing(self):
        t = on_disconnected(SessionState())
        assert t.events == ()

    def test_socket_error_reports_state_then_error(self):
        state = _registering_state(connection=ConnectionState.CONNECTING)
        t = on_socket_error(state, "connection_refused")
        assert t.state.connection is ConnectionState.DISCONNECTED
        assert t.events == (
            StateChanged(ConnectionState.DISCONNECTED),
            SocketError("connection_refused"),
        )


class TestRegistration:
    def test_welcome_connects_and_adopts_nick(self):
        t = _handle(_registering_state(), ":srv 001 myself2 :Welcome to the network")
        assert t.state.connection is ConnectionState.CONNECTED
        assert t.state.connected
        assert t.state.nick_name == "myself2"
        assert NickChanged("myself2") in t.events
        assert StateChanged(ConnectionState.CONNECTED) in t.events
        assert t.commands == ()

    def test_welcome_with_same_nick(self):
        t = _handle(_registering_state(), ":srv 001 myself :Welcome")
        assert t.state.nick_name == "myself"
        assert t.events == (StateChanged(ConnectionState.CONNECTED),)

    def test_isupport_updates_info(self):
        state = _registering_state()
        t = _handle(
            state,
            ":srv 005 myself NETWORK=ExampleNet NICKLEN=30 :are supported by this server",
        )
        assert t.state.info.network == "ExampleNet"
        assert t.state.info.limit("NICKLEN") == 30
        assert len(t.events) == 1
        assert isinstance(t.events[0], SessionInfoUpdated)

    def test_isupport_accumulates(self):
        t1 = _handle(_registering_state(), ":srv 005 myself NETWORK=A :are supported")
        t2 = _handle(t1.state, ":srv 005 myself CHANTYPES=# -NETWORK :are supported")
        assert dict(t2.state.info) == {"CHANTYPES": "#"}

    def test_other_numeric_is_ignored(self):
        state = _registering_state()
        t = _handle(state, ":srv 372 myself :- message of the day")
        assert t.state == state
        assert t.commands == ()
        assert t.events == ()


class TestCapabilityNegotiation:
    def test_ls_with_supplier_requests(self):
        collab = Collaborators(request_capabilities=lambda available: ["sasl"])
        t = _handle(_registering_state(), ":srv CAP * LS :sasl multi-prefix", collab)
        assert t.commands == ("CAP REQ :sasl",)
        assert t.state.available_caps.to_list() == ["multi-prefix", "sasl"]

    def test_supplier_receives_available_capabilities(self):
        seen: list[list[str]] = []

        def supplier(available):  # type: ignore[no-untyped-def]
            seen.append(list(available))
            return []

        _handle(
            _registering_state(),
            ":srv CAP * LS :sasl multi-prefix",
            Collaborators(request_capabilities=supplier),
        )
        assert seen == [["multi-prefix", "sasl"]]

    def test_ls_without_supplier_ends(self):
        t = _handle(_registering_state(), ":srv CAP * LS :sasl")
        assert t.commands == ("CAP END",)

    def test_ls_with_empty_request_ends(self):
        collab = Collaborators(request_capabilities=lambda available: [])
        t = _handle(_registering_state(), ":srv CAP * LS :sasl", collab)
        assert t.commands == ("CAP END",)

    def test_multiline_ls_waits_for_last_line(self):
        collab = Collaborators(request_capabilities=lambda available: ["sasl"])
        t1 = _handle(_registering_state(), ":srv CAP * LS * :sasl", collab)
        assert t1.commands == ()
        t2 = _handle(t1.state, ":srv CAP * LS :multi-prefix", collab)
        assert t2.commands == ("CAP REQ :sasl",)
        assert t2.state.available_caps.to_list() == ["multi-prefix", "sasl"]

    def test_ls_with_trailing_star_is_continuation(self):
        t = _handle(_registering_state(), ":srv CAP * LS sasl *")
        assert t.commands == ()

    def test_ls_after_registration_only_updates(self):
        state = _registering_state(connection=ConnectionState.CONNECTED, connected=True)
        t = _handle(state, ":srv CAP myself LS :away-notify")
        assert t.commands == ()
        assert "away-notify" in t.state.available_caps

    def test_ack_merges_and_ends(self):
        t = _handle(_registering_state(), ":srv CAP * ACK :sasl")
        assert t.state.active_caps.to_list() == ["sasl"]
        assert t.commands == ("CAP END",)

    def test_ack_with_removal(self):
        state = _registering_state(
            connection=ConnectionState.CONNECTED,
            connected=True,
            active_caps=CapabilitySet.of(["sasl", "multi-prefix"]),
        )
        t = _handle(state, ":srv CAP myself ACK :-multi-prefix")
        assert t.state.active_caps.to_list() == ["sasl"]
        assert t.commands == ()

    def test_nak_ends_without_changes(self):
        state = _registering_state()
        t = _handle(state, ":srv CAP * NAK :sasl")
        assert t.commands == ("CAP END",)
        assert len(t.state.active_caps) == 0

    def test_nak_after_registration_is_silent(self):
        state = _registering_state(connection=ConnectionState.CONNECTED, connected=True)
        assert _handle(state, ":srv CAP myself NAK :sasl").commands == ()

    def test_lowercase_sub_command(self):
        t = _handle(_registering_state(), ":srv CAP * ack :sasl")
        assert "sasl" in t.state.active_caps


class TestMessageReactions:
    def test_ping_gets_pong(self):
        t = _handle(_registering_state(), "PING :irc.example.org")
        assert t.commands == ("PONG :irc.example.org",)

    def test_own_nick_change(self):
        t = _handle(_registering_state(), ":myself!u@h NICK :newnick")
        assert t.state.nick_name == "newnick"
        assert t.events == (NickChanged("newnick"),)

    def test_foreign_nick_change_is_ignored(self):
        state = _registering_state()
        t = _handle(state, ":other!u@h NICK :newnick")
        assert t.state.nick_name == "myself"
        assert t.events == ()

    def test_ctcp_request_gets_reply(self):
        collab = Collaborators(ctcp_reply=lambda message: "VERSION test")
        t = _handle(_registering_state(), ":n!u@h PRIVMSG myself :\x01VERSION\x01", collab)
        assert t.commands == ("NOTICE n :\x01VERSION test\x01",)

    def test_default_ctcp_ping_reply(self):
        t = _handle(_registering_state(), ":n!u@h PRIVMSG myself :\x01PING 42\x01")
        assert t.commands == ("NOTICE n :\x01PING 42\x01",)

    def test_silent_ctcp_responder(self):
        collab = Collaborators(ctcp_reply=lambda message: None)
        t = _handle(_registering_state(), ":n!u@h PRIVMSG myself :\x01VERSION\x01", collab)
        assert t.commands == ()

    def test_action_is_not_answered(self):
        t = _handle(_registering_state(), ":n!u@h PRIVMSG #c :\x01ACTION waves\x01")
        assert t.commands == ()

    def test_plain_messages_do_nothing(self):
        state = _registering_state()
        for line in (
            ":n!u@h PRIVMSG #c :hello",
            ":n!u@h JOIN #c",
            ":n!u@h NOTICE myself :\x01VERSION x\x01",
            ":srv ERROR :Closing link",
            ":srv WALLOPS :hi",
        ):
            t = _handle(state, line)
            assert t.state == state
            assert t.commands == ()
            assert t.events == ()


class TestRequestNick:
    def test_inactive_changes_locally(self):
        t = request_nick(SessionState(nick_name="old"), "new")
        assert t.state.nick_name == "new"
        assert t.commands == ()
        assert t.events == (NickChanged("new"),)

    def test_active_asks_the_server(self):
        state = _registering_state(connection=ConnectionState.CONNECTED, connected=True)
        t = request_nick(state, "new")
        assert t.state.nick_name == "myself"
        assert t.commands == ("NICK new",)

    def test_keeps_first_word_only(self):
        t = request_nick(SessionState(nick_name="old"), "  new nick  ")
        assert t.state.nick_name == "new"

    def test_same_or_empty_nick_is_noop(self):
        state = SessionState(nick_name="same")
        assert request_nick(state, "same").events == ()
        assert request_nick(state, "   ").state == state
