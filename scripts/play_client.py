#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from websockets.asyncio.client import ClientConnection, connect

logging.basicConfig(level=logging.INFO)

# PlayClient sits in the human seat and prompts on the terminal.

SHORTCUTS = {
    "F": "fold",
    "X": "check",
    "C": "call",
    "B": "bet",
    "R": "raise",
    "A": "all-in",
}


@dataclass
class ActContext:
    turn: str
    to_call: int
    legal: Dict[str, Dict[str, Optional[int]]]


def parse_act(msg: Dict[str, Any]) -> ActContext:
    legal = {
        entry["action"]: {"min": entry.get("min_amount"), "max": entry.get("max_amount")}
        for entry in msg.get("legal", [])
    }
    return ActContext(turn=msg["turn"], to_call=msg.get("to_call", 0), legal=legal)


def build_action(ctx: ActContext, choice: str, amount: Optional[int] = None) -> Optional[Dict[str, Any]]:
    """Turn a typed choice into an action message, or None when it is not legal."""
    action = SHORTCUTS.get(choice.strip().upper(), choice.strip().lower())
    if action not in ctx.legal:
        return None
    payload: Dict[str, Any] = {"type": "action", "v": 1, "turn": ctx.turn, "action": action}
    if action in ("bet", "raise"):
        bounds = ctx.legal[action]
        if amount is None or bounds["min"] is None or bounds["max"] is None:
            return None
        if not bounds["min"] <= amount <= bounds["max"]:
            return None
        payload["amount"] = amount
    return payload


def render_table(state: Dict[str, Any]) -> List[str]:
    board = " ".join(state.get("community", [])) or "--"
    lines = [
        f"Hand {state['hand_number']} | {state['street']} | Board {board} | Pot={state['pot']} | Bet={state['current_bet']}"
    ]
    for player in state.get("players", []):
        marker = "→" if player["seat"] == state.get("active") else " "
        tags = []
        if player["is_dealer"]:
            tags.append("BTN")
        if player["folded"]:
            tags.append("FOLD")
        if player["all_in"]:
            tags.append("ALL-IN")
        label = f" [{','.join(tags)}]" if tags else ""
        lines.append(
            f"  {marker}{player['name']:<11} stack={player['stack']:>5} bet={player['current_bet']:>4} "
            f"{' '.join(player['hole'])}{label}"
        )
    return lines


class PlayClient:
    def __init__(self, name: str, url: str) -> None:
        self.name = name
        self.url = url
        self.websocket: Optional[ClientConnection] = None

    async def run(self) -> None:
        async with connect(self.url) as ws:
            self.websocket = ws
            await self._send({"type": "hello", "v": 1, "name": self.name})
            await self._loop()

    async def _loop(self) -> None:
        assert self.websocket is not None
        while True:
            msg = json.loads(await self.websocket.recv())
            msg_type = msg.get("type")
            if msg_type == "state":
                print("\n".join(render_table(msg["state"])))
            elif msg_type == "act":
                await self._handle_act(parse_act(msg))
            elif msg_type == "end_hand":
                for winner in msg.get("winners", []):
                    print(f"*** {winner['name']} wins {winner['amount']} with {winner['hand']}")
                input("Press Enter for the next hand...")
                await self._send({"type": "next_hand", "v": 1})
            elif msg_type == "coach":
                print(msg.get("context"))
            elif msg_type == "error":
                print(f"Error {msg.get('code')}: {msg.get('msg')}")
            elif msg_type == "match_end":
                print(f"Match over. Final stacks: {msg.get('final_stacks')}")
                break
            elif msg_type == "welcome":
                print(f"Seated at {msg['seat']} with config {json.dumps(msg['config'])}")

    async def _handle_act(self, ctx: ActContext) -> None:
        options = "/".join(ctx.legal)
        while True:
            choice = input(f"Action [{options}] (to call {ctx.to_call}, ? = coach): ").strip()
            if choice == "?":
                await self._send({"type": "coach", "v": 1})
                print(json.loads(await self.websocket.recv()).get("context"))
                continue
            amount: Optional[int] = None
            action = SHORTCUTS.get(choice.upper(), choice.lower())
            if action in ("bet", "raise") and action in ctx.legal:
                bounds = ctx.legal[action]
                raw = input(f"Amount [{bounds['min']}-{bounds['max']}]: ").strip()
                try:
                    amount = int(raw)
                except ValueError:
                    print("Enter a whole number")
                    continue
            payload = build_action(ctx, choice, amount)
            if payload is None:
                print("Illegal selection. Try again.")
                continue
            await self._send(payload)
            return

    async def _send(self, payload: Dict[str, Any]) -> None:
        assert self.websocket is not None
        await self.websocket.send(json.dumps(payload))


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminal client for the hold'em table")
    parser.add_argument("--url", default="ws://127.0.0.1:8765")
    parser.add_argument("--name", default="You")
    return parser.parse_args(argv)


def main(argv: list[str]) -> None:
    args = parse_args(argv)
    client = PlayClient(name=args.name, url=args.url)
    try:
        asyncio.run(client.run())
    except KeyboardInterrupt:
        print("\nSession closed")


if __name__ == "__main__":
    main(sys.argv[1:])
