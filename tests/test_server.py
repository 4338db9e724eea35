import asyncio
import json
import random
from http import HTTPStatus

from websockets.exceptions import ConnectionClosedOK

from engine.dispatch import NewHand
from engine.models import TableConfig
from engine.payloads import turn_token
from table.server import HumanClient, TableSession, _process_request, handle_connection

from .helpers import with_stacks

FAST_CONFIG = TableConfig(seats=2, bot_delay_ms=(0, 0))


# Fake sockets so the async session can run without a real connection.
class DummyWebSocket:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send(self, message: str) -> None:
        self.sent.append(json.loads(message))

    async def recv(self) -> str:
        raise ConnectionClosedOK(None, None)


class AutoPilotSocket(DummyWebSocket):
    """Answers every prompt passively, then hangs up after ``hands`` hands."""

    def __init__(self, hello: dict, hands: int) -> None:
        super().__init__()
        self._hello = hello
        self.hands = hands

    async def recv(self) -> str:
        if self._hello is not None:
            hello, self._hello = self._hello, None
            return json.dumps(hello)
        last = self.sent[-1]
        if last["type"] == "act":
            legal = [entry["action"] for entry in last["legal"]]
            action = next(choice for choice in ("check", "call", "all-in", "fold") if choice in legal)
            return json.dumps({"type": "action", "v": 1, "turn": last["turn"], "action": action})
        if last["type"] == "end_hand" and self.hands > 1:
            self.hands -= 1
            return json.dumps({"type": "next_hand", "v": 1})
        raise ConnectionClosedOK(None, None)


def setup_session(config: TableConfig = FAST_CONFIG) -> tuple[TableSession, DummyWebSocket]:
    websocket = DummyWebSocket()
    session = TableSession(config, HumanClient("Hero", websocket), rng=random.Random(3))
    return session, websocket


def start_session_hand(config: TableConfig = FAST_CONFIG) -> tuple[TableSession, DummyWebSocket]:
    session, websocket = setup_session(config)
    session.apply(NewHand())
    return session, websocket


def last_error(websocket: DummyWebSocket) -> str:
    payload = websocket.sent[-1]
    assert payload["type"] == "error"
    assert payload["v"] == 1
    return payload["code"]


def test_handle_action_rejects_out_of_turn():
    session, websocket = start_session_hand(TableConfig(bot_delay_ms=(0, 0)))
    # Seat 4 is a bot and is first to act on hand one.
    accepted = asyncio.run(
        session.handle_message({"type": "action", "turn": turn_token(session.state), "action": "call"})
    )
    assert accepted is None
    assert last_error(websocket) == "OUT_OF_TURN"


def test_handle_action_rejects_stale_turn_token():
    session, websocket = start_session_hand()
    asyncio.run(session.handle_message({"type": "action", "turn": "0:0", "action": "call"}))
    assert last_error(websocket) == "ACTION_TOO_LATE"


def test_handle_action_validates_schema():
    session, websocket = start_session_hand()
    turn = turn_token(session.state)

    asyncio.run(session.handle_message({"type": "action", "turn": turn, "action": "jump"}))
    assert last_error(websocket) == "INVALID_ACTION"

    asyncio.run(session.handle_message({"type": "action", "turn": turn, "action": "raise"}))
    assert last_error(websocket) == "BAD_SCHEMA"

    asyncio.run(session.handle_message({"type": "action", "turn": turn, "action": "raise", "amount": "60"}))
    assert last_error(websocket) == "BAD_SCHEMA"

    asyncio.run(session.handle_message({"type": "action", "turn": turn, "action": "raise", "amount": True}))
    assert last_error(websocket) == "BAD_SCHEMA"


def test_illegal_action_reports_invalid_action():
    session, websocket = start_session_hand()
    before = session.state
    asyncio.run(session.handle_message({"type": "action", "turn": turn_token(before), "action": "check"}))
    assert last_error(websocket) == "INVALID_ACTION"
    assert session.state is before
    assert len(session.history) == 2


def test_valid_action_advances_state_and_history():
    session, websocket = start_session_hand()
    accepted = asyncio.run(
        session.handle_message({"type": "action", "turn": turn_token(session.state), "action": "call"})
    )
    assert accepted == "action"
    assert websocket.sent == []
    assert session.state.action_history[-1].player_id == "user"
    assert session.history[-1] is session.state
    assert len(session.history) == 3


def test_next_hand_rejected_mid_hand():
    session, websocket = start_session_hand()
    assert asyncio.run(session.handle_message({"type": "next_hand"})) is None
    assert last_error(websocket) == "HAND_IN_PROGRESS"


def test_unknown_message_type():
    session, websocket = start_session_hand()
    asyncio.run(session.handle_message({}))
    assert last_error(websocket) == "UNKNOWN_TYPE"


def test_coach_request_returns_context():
    session, websocket = start_session_hand()
    accepted = asyncio.run(session.handle_message({"type": "coach"}))
    assert accepted == "coach"
    payload = websocket.sent[-1]
    assert payload["type"] == "coach"
    assert payload["context"].startswith("## Current Game Situation")
    assert "CURRENT GAME STATE" in payload["prompt"]


def test_bot_delay_respects_config():
    session, _ = setup_session()
    assert session._bot_delay() == 0.0

    session, _ = setup_session(TableConfig(bot_delay_ms=(1_000, 1_000)))
    assert session._bot_delay() == 1.0


def test_run_sends_match_end_when_one_seat_funded():
    session, websocket = setup_session()
    session.state = with_stacks(session.state, [2000, 0])
    asyncio.run(session.run())

    assert [payload["type"] for payload in websocket.sent] == ["welcome", "match_end"]
    result = websocket.sent[-1]
    assert result["winner"] == {"seat": 0, "name": "Hero"}
    assert result["human_busted"] is False
    assert result["hands_played"] == 0


def test_match_result_reports_busted_human():
    session, _ = setup_session()
    session.state = with_stacks(session.state, [0, 2000])
    result = session.match_result_payload()
    assert result["winner"] == {"seat": 1, "name": "Tight Tim"}
    assert result["human_busted"] is True
    assert result["final_stacks"] == [
        {"seat": 0, "name": "Hero", "stack": 0},
        {"seat": 1, "name": "Tight Tim", "stack": 2000},
    ]


def test_connection_plays_hands_until_client_leaves():
    websocket = AutoPilotSocket({"type": "hello", "v": 1, "name": "  Ana "}, hands=3)
    asyncio.run(handle_connection(websocket, TableConfig(seats=3, bot_delay_ms=(0, 0))))

    sent = websocket.sent
    assert sent[0]["type"] == "welcome"
    assert sent[0]["seat"] == 0
    assert sent[0]["config"]["seats"] == 3
    assert all(payload["v"] == 1 for payload in sent)
    assert not [payload for payload in sent if payload["type"] == "error"]

    states = [payload["state"] for payload in sent if payload["type"] == "state"]
    assert states[0]["players"][0]["name"] == "Ana"
    for state in states:
        if state["street"] != "showdown":
            for player in state["players"][1:]:
                assert all(card == "??" for card in player["hole"])

    finished = [payload for payload in sent if payload["type"] == "end_hand"]
    assert 1 <= len(finished) <= 3
    assert [payload["hand_number"] for payload in finished] == list(range(1, len(finished) + 1))
    for payload in finished:
        assert payload["winners"]
        assert payload["state"]["pot"] == 0
        assert sum(player["stack"] for player in payload["state"]["players"]) == 3_000


def test_bad_hello_is_rejected():
    websocket = AutoPilotSocket({"type": "action"}, hands=1)
    asyncio.run(handle_connection(websocket, FAST_CONFIG))
    assert websocket.sent == [{"v": 1, "type": "error", "code": "BAD_HELLO", "msg": "Expected hello"}]


class FakeRequest:
    def __init__(self, path: str, headers: dict) -> None:
        self.path = path
        self.headers = headers


class FakeConnection:
    def respond(self, status, text):
        return status, text


def test_process_request_answers_health_checks():
    connection = FakeConnection()
    assert _process_request(connection, FakeRequest("/healthz", {})) == (HTTPStatus.OK, "holdem table running\n")
    assert _process_request(connection, FakeRequest("/missing", {}))[0] == HTTPStatus.NOT_FOUND
    assert _process_request(connection, FakeRequest("/", {"Upgrade": "websocket"})) is None
