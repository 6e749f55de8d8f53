"""Minimal console front-end for the rule-first chat dispatcher."""

from pathlib import Path

from cue_chat.agents.dispatcher import ResponseDispatcher
from cue_chat.infrastructure.storage.rule_file import FileRuleSource
from cue_chat.providers import create_client


class ConsoleRenderer:
    def render_message(self, text: str, role: str) -> None:
        if role == "bot":
            print(f"Bot: {text}")


if __name__ == "__main__":
    dispatcher = ResponseDispatcher(
        client=create_client(),
        rule_source=FileRuleSource(Path(__file__).with_name("rules.txt")),
        renderer=ConsoleRenderer(),
    )
    dispatcher.on_start()
    while True:
        try:
            line = input("User: ")
        except (EOFError, KeyboardInterrupt):
            break
        dispatcher.on_submit(line)
