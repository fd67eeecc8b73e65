#!/usr/bin/env python3
"""Walk a live backend through the session lifecycle.

Restores the persisted session if there is one, otherwise prints the
provider login URL and asks for the callback URL, then prints the
profile, the active-session registry and the daily store.

Usage
-----
::

    export VSTORE_API_BASE_URL="http://localhost:3000/api"
    export VSTORE_TOKEN_FILE="$HOME/.config/vstore/token.json"
    python scripts/session_probe.py

Options::

    --callback URL       Use this callback URL instead of prompting
    --switch ACCOUNT_ID  Switch to this account after login
    --logout             Log out at the end (clears the persisted token)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyvstore import ApiGateway, SessionController, SessionInvalidated, VStoreConfig  # noqa: E402


def _on_invalidated(event: SessionInvalidated) -> None:
    print(f"!! session invalidated by {event.endpoint}; go to {event.login_path}")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Exercise login, switch and logout against a backend.")
    parser.add_argument("--callback", help="Provider callback URL (prompted when omitted)")
    parser.add_argument("--switch", dest="switch_to", help="Account id to switch to after login")
    parser.add_argument("--logout", action="store_true", help="Log out before exiting")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = VStoreConfig.from_env(api_trace_enabled=args.verbose)

    async with ApiGateway(config, on_session_invalidated=_on_invalidated) as gateway:
        controller = SessionController(gateway)

        if await controller.initialize():
            print("Restored persisted session")
        else:
            callback = args.callback
            if not callback:
                url = await gateway.generate_auth_url()
                if not url.success or url.data is None:
                    print(f"Could not get login URL: {url.describe()}")
                    return
                print(f"Open this URL and log in:\n  {url.data.auth_url}")
                callback = input("Paste the final redirect URL: ").strip()
            if not await controller.login(callback):
                print(f"Login failed: {controller.last_error}")
                return

        if args.switch_to and not await controller.switch_account(args.switch_to):
            print(f"Switch failed: {controller.last_error}")

        user = controller.user
        if user is not None:
            print(f"Logged in as {user.riot_id} ({user.id}) region={user.region}")
            if user.balance is not None:
                print(f"  VP={user.balance.valorant_points} RP={user.balance.radianite_points}")
            if user.account_xp is not None:
                print(f"  level={user.account_xp.level} xp={user.account_xp.xp}")

        registry = await controller.refresh_sessions()
        if registry is not None:
            print(f"Active sessions: {registry.count}")
            for account_id, descriptor in registry.sessions.items():
                marker = "*" if user is not None and account_id == user.id else " "
                print(f" {marker} {account_id}  {descriptor.riot_id}  last={descriptor.last_activity}")

        store = await gateway.get_daily_store()
        if store.success and store.data is not None:
            print(f"Daily store ({store.data.format_time_left()} left):")
            for skin in store.data.skins:
                print(f"  {skin.display_name}  {skin.cost}")

        if args.logout:
            await controller.logout()
            print("Logged out")


if __name__ == "__main__":
    asyncio.run(main())
