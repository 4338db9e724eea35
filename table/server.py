from __future__ import annotations

import asyncio
import json
import logging
import random
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Dict, List, Optional

import websockets
from websockets.asyncio.server import ServerConnection, serve

from coach.context import coach_prompt, format_game_context
from engine.dispatch import BotTurn, Command, NewHand, StartSession, SubmitAction, dispatch
from engine.game import get_user_player, is_session_over, is_user_turn
from engine.models import ActionType, TableConfig, TableState
from engine.payloads import act_payload, table_payload, turn_token, winners_payload

LOGGER = logging.getLogger("holdem_table")

HUMAN_SEAT = 0
_AMOUNT_ACTIONS = (ActionType.BET, ActionType.RAISE)

# The engine never waits on anything; pacing bot turns and gating the human's
# input both happen here.


class TableServerError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


def _config_payload(config: TableConfig) -> Dict[str, Any]:
    return {
        "seats": config.seats,
        "starting_stack": config.starting_stack,
        "sb": config.sb,
        "bb": config.bb,
        "bot_delay_ms": list(config.bot_delay_ms),
    }


def _decode(raw: Any) -> Dict[str, Any]:
    try:
        message = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return {}
    return message if isinstance(message, dict) else {}


@dataclass
class HumanClient:
    name: str
    websocket: Any
    seat_idx: int = HUMAN_SEAT

    async def send_json(self, payload: Dict[str, Any]) -> None:
        await self.websocket.send(json.dumps({"v": 1, **payload}))


class TableSession:
    """One human seat against the house bots, hand after hand."""

    def __init__(
        self,
        config: TableConfig,
        client: HumanClient,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.client = client
        self.rng = rng or random.Random()
        self._delay_rng = random.Random()
        self._sleep = sleep
        self.state: TableState = dispatch(None, StartSession(client.name, config))
        # Snapshots are immutable, so keeping every one is enough for history.
        self.history: List[TableState] = [self.state]

    async def run(self) -> None:
        await self.client.send_json({"type": "welcome", "seat": HUMAN_SEAT, "config": _config_payload(self.config)})
        while True:
            self.apply(NewHand())
            if is_session_over(self.state):
                break
            LOGGER.info("Hand %s started for %s", self.state.hand_number, self.client.name)
            await self._play_hand()
            await self._finish_hand()
            await self._wait_for("next_hand")

        await self.client.send_json({"type": "match_end", **self.match_result_payload()})

    def apply(self, command: Command) -> bool:
        updated = dispatch(self.state, command, self.rng)
        if updated is self.state:
            return False
        self.state = updated
        self.history.append(updated)
        return True

    async def _play_hand(self) -> None:
        await self._send_state()
        while not self.state.is_complete:
            if is_user_turn(self.state):
                await self.client.send_json({"type": "act", **act_payload(self.state)})
                await self._wait_for("action")
            else:
                await self._sleep(self._bot_delay())
                if not self.apply(BotTurn()):
                    raise RuntimeError(f"Bot turn made no progress at seat {self.state.active_index}")
            await self._send_state()

    async def _finish_hand(self) -> None:
        LOGGER.info(
            "Hand %s finished; winners=%s",
            self.state.hand_number,
            [(winner.player_name, winner.amount, winner.hand) for winner in self.state.winners or ()],
        )
        await self.client.send_json(
            {
                "type": "end_hand",
                "hand_number": self.state.hand_number,
                "winners": winners_payload(self.state.winners),
                "state": table_payload(self.state, HUMAN_SEAT),
            }
        )

    async def _wait_for(self, accepted: str) -> None:
        while True:
            raw = await self.client.websocket.recv()
            if await self.handle_message(_decode(raw)) == accepted:
                return

    async def handle_message(self, message: Dict[str, Any]) -> Optional[str]:
        """Handle one client message; returns its type when it was accepted."""
        msg_type = message.get("type")
        try:
            if msg_type == "action":
                self._apply_human_action(message)
            elif msg_type == "next_hand":
                if not self.state.is_complete:
                    raise TableServerError("HAND_IN_PROGRESS", "Finish the current hand first")
            elif msg_type == "coach":
                await self.client.send_json(
                    {
                        "type": "coach",
                        "context": format_game_context(self.state, HUMAN_SEAT),
                        "prompt": coach_prompt(self.state, HUMAN_SEAT),
                    }
                )
            else:
                raise TableServerError("UNKNOWN_TYPE", "Unsupported message type")
        except TableServerError as exc:
            await self._send_error(exc.code, exc.msg)
            return None
        return msg_type

    def _apply_human_action(self, message: Dict[str, Any]) -> None:
        if not is_user_turn(self.state):
            raise TableServerError("OUT_OF_TURN", "Not your turn")
        if message.get("turn") != turn_token(self.state):
            raise TableServerError("ACTION_TOO_LATE", "Action is for an earlier decision")
        try:
            action = ActionType(message.get("action"))
        except ValueError:
            raise TableServerError("INVALID_ACTION", "Unknown action") from None

        amount = message.get("amount")
        if amount is not None and (isinstance(amount, bool) or not isinstance(amount, int)):
            raise TableServerError("BAD_SCHEMA", "amount must be an integer")
        if action in _AMOUNT_ACTIONS and amount is None:
            raise TableServerError("BAD_SCHEMA", "amount required for bet or raise")

        if not self.apply(SubmitAction(action, amount)):
            LOGGER.warning("Rejected action from %s: action=%s amount=%s", self.client.name, action.value, amount)
            raise TableServerError("INVALID_ACTION", f"{action.value} is not legal now")
        LOGGER.debug("Applied action hand=%s action=%s amount=%s", self.state.hand_number, action.value, amount)

    def _bot_delay(self) -> float:
        low, high = self.config.bot_delay_ms
        if high <= 0:
            return 0.0
        return self._delay_rng.uniform(low, high) / 1000

    async def _send_state(self) -> None:
        await self.client.send_json({"type": "state", "state": table_payload(self.state, HUMAN_SEAT)})

    async def _send_error(self, code: str, msg: str) -> None:
        await self.client.send_json({"type": "error", "code": code, "msg": msg})

    def match_result_payload(self) -> Dict[str, Any]:
        funded = [player for player in self.state.players if player.stack > 0]
        winner = funded[0] if len(funded) == 1 else None
        human = get_user_player(self.state)
        return {
            "winner": {"seat": winner.seat_index, "name": winner.name} if winner else None,
            "human_busted": bool(human and human.stack == 0),
            "hands_played": self.state.hand_number,
            "final_stacks": [
                {"seat": player.seat_index, "name": player.name, "stack": player.stack}
                for player in self.state.players
            ],
        }


async def handle_connection(websocket: ServerConnection, config: TableConfig) -> None:
    # The client introduces itself before any cards are dealt.
    hello = _decode(await websocket.recv())
    if hello.get("type") != "hello":
        await websocket.send(json.dumps({"v": 1, "type": "error", "code": "BAD_HELLO", "msg": "Expected hello"}))
        return

    name_raw = hello.get("name")
    name = name_raw.strip() if isinstance(name_raw, str) else ""
    client = HumanClient(name=name or "You", websocket=websocket)
    session = TableSession(config, client)
    LOGGER.info("%s sat down", client.name)
    try:
        await session.run()
    except websockets.ConnectionClosed:
        LOGGER.info("%s left after %s hand(s)", client.name, session.state.hand_number)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Table session crashed for %s: %s", client.name, exc)


def _process_request(connection: ServerConnection, request):
    """Answer plain HTTP health checks; let WebSocket upgrades through."""
    if request.headers.get("Upgrade", "").lower() == "websocket":
        return None
    if request.path in {"/", "/health", "/healthz"}:
        return connection.respond(HTTPStatus.OK, "holdem table running\n")
    return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")


async def run_server(host: str, port: int, config: TableConfig) -> None:
    async def _handler(websocket: ServerConnection) -> None:
        await handle_connection(websocket, config)

    async with serve(_handler, host, port, process_request=_process_request):
        LOGGER.info("Table server listening on %s:%s", host, port)
        await asyncio.Future()
