import asyncio
import os
import sys
from pathlib import Path
import logging

from config.loader import load_settings, missing_settings


def main() -> int:
    project_root = Path(__file__).parent
    logging.basicConfig(
        level=os.getenv("SEERRBOT_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings(project_root)
    missing = missing_settings(settings)
    if missing:
        print("Configuration incomplete. Set these in .env:")
        for name in missing:
            print(f"- {name}")
        print("\nSee config/config.example.yaml for optional runtime settings.")
        return 1

    from bot.discord_bot import run_bot

    print("Configuration looks good. Starting SeerrBot...")
    asyncio.run(run_bot())
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(1)
