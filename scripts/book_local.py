from __future__ import annotations

#!/usr/bin/env python3
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

"""
Interactive local booking form (no browser).

Usage:
  python3 scripts/book_local.py            # issues a mock hold and opens the form with it
  python3 scripts/book_local.py --no-hold  # open booking without a hold
  python3 scripts/book_local.py --url "/book?t=TOKEN"   # against BOOKING_API_BASE_URL

Commands:
  set <field> <value>   name, phone, email, service, stylist, notes
  date <YYYY-MM-DD>     pick a date and load times
  time <n>              pick the n-th listed time
  submit                submit the booking
  show                  print the form, timer and time options
  quit
"""

import argparse
import asyncio

from app.core.config import settings
from app.core.logging_setup import configure_logging
from app.domain.entities.hold import Prefill
from app.infrastructure.view.recording_view import RecordingFormView
from app.wiring.dependencies import get_booking_form_session, get_mock_backend, uses_mock_backend


class ConsoleFormView(RecordingFormView):
    def show_error(self, message: str) -> None:
        super().show_error(message)
        print(f"  ! {message}")

    def set_status(self, message: str) -> None:
        super().set_status(message)
        if message:
            print(f"  · {message}")

    def alert(self, message: str) -> None:
        super().alert(message)
        print(f"  [alert] {message}")

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        answer = input(f"  [confirm] {message} (y/N) ").strip().lower()
        return answer in {"y", "yes"}

    def navigate(self, url: str) -> None:
        super().navigate(url)
        print(f"  → navigating to {url}")


def _print_form(view: ConsoleFormView) -> None:
    values = view.read_values()
    print(f"  timer:   {view.timer_text or '-'}")
    for name in ("name", "phone", "email", "service", "stylist", "date", "time", "notes"):
        print(f"  {name:<8} {getattr(values, name)!r}")
    print("  times:")
    for i, option in enumerate(view.time_options):
        print(f"    {i}. {option.label} ({option.value or 'no selection'})")


async def run(url: str) -> None:
    view = ConsoleFormView(url=url)
    session = get_booking_form_session(view=view)
    try:
        await _loop(session, view, url)
    finally:
        await session.aclose()


async def _loop(session, view: ConsoleFormView, url: str) -> None:
    await session.start(url)
    _print_form(view)

    while view.navigated_to is None:
        line = (await asyncio.to_thread(input, "> ")).strip()
        if not line:
            continue
        cmd, _, rest = line.partition(" ")
        if cmd in {"quit", "exit"}:
            break
        if cmd == "show":
            _print_form(view)
        elif cmd == "set":
            field, _, value = rest.partition(" ")
            try:
                view.set_field(field, value)
            except ValueError as e:
                print(f"  {e}")
                continue
            if field == "service":
                await session.on_service_changed()
            session.on_field_input()
        elif cmd == "date":
            await session.on_date_changed(rest.strip())
            _print_form(view)
        elif cmd == "time":
            try:
                option = view.time_options[int(rest)]
            except (ValueError, IndexError):
                print("  no such time")
                continue
            view.set_field("time", option.value)
            session.on_field_input()
        elif cmd == "submit":
            outcome = await session.submit()
            print(f"  outcome: {outcome.value}")
        else:
            print("  unknown command")


def main() -> None:
    parser = argparse.ArgumentParser(description="Local booking form harness")
    parser.add_argument("--url", help="page URL, e.g. /book?t=TOKEN")
    parser.add_argument("--no-hold", action="store_true", help="open booking without a hold token")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)

    url = args.url
    if url is None:
        url = "/book"
        if not args.no_hold and uses_mock_backend():
            hold = get_mock_backend().issue_hold(prefill=Prefill(name="Local Tester", service="haircut"))
            url = f"/book?t={hold.token}"
    print(f"Opening {url}")
    asyncio.run(run(url))


if __name__ == "__main__":
    main()
