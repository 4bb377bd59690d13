# main.py
# Console version of the careers bot.
# LUIS and QnA Maker are optional: without them the bot falls back to the
# card menus and answers every question with the "help not found" message.
import argparse

from db_store import MemoryStore
from dialogs.runner import CareersBot, run_console


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the careers bot in the terminal.")
    parser.add_argument("--name", default="", help="display name used in the greeting")
    args = parser.parse_args()

    bot = CareersBot.from_settings(MemoryStore())
    run_console(bot, user_name=args.name)


if __name__ == "__main__":
    main()
