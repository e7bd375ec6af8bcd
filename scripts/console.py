# scripts/console.py
"""
Interactive operator menu, driving the parking engine in-process.
Loads the previous snapshot on launch and saves on option 0.
Usage: python scripts/console.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.config import settings
from app.services.allocation_engine import Parked
from app.services.exceptions import ParkingError
from app.services.parking_context import ParkingContext, build_context
from app.utils.lot_renderer import render_lot, render_lot_detailed, render_queue

MENU = """
==== Car Parking Management System ====
1. Car Entry
2. Car Exit
3. Display Parking Layout
4. Display Parking Layout (detailed)
5. Display Waiting Queue
6. Show Recent Records
7. Search Vehicle
8. Save State
9. Load State
0. Exit
Choose: """

RECENT_RECORDS = 10


def car_entry(ctx: ParkingContext, read=input):
    result = ctx.engine.enter(read("Enter vehicle registration number: ").strip())
    if isinstance(result, Parked):
        print(f"Allocated slot: [{result.row},{result.col}] to {result.vehicle_id}")
    else:
        print(f"Parking is full. {result.vehicle_id} added to waiting queue (position {result.position}).")


def car_exit(ctx: ParkingContext, read=input):
    result = ctx.engine.exit(read("Enter vehicle registration number to exit: ").strip())
    visit = result.visit
    print(f"Vehicle {visit.vehicle_id} leaving slot [{result.row},{result.col}]")
    print(f"Entry: {visit.entry_time:%Y-%m-%d %H:%M:%S}\nExit : {visit.exit_time:%Y-%m-%d %H:%M:%S}")
    print(f"Duration(seconds): {result.duration_seconds}\nHours(billed): {result.billed_hours}\nFee: {visit.fee:.2f}")
    if result.promoted:
        p = result.promoted
        print(f"Assigned queued vehicle {p.vehicle_id} to slot [{p.row},{p.col}]")


def show_recent_records(ctx: ParkingContext, n: int = RECENT_RECORDS):
    records = ctx.visit_log.recent(n)
    if not records:
        print("No records yet.")
        return
    print(f"Last {len(records)} records:")
    for r in records:
        print(f"{r.vehicle_id}, {r.entry_time:%Y-%m-%d %H:%M:%S}, {r.exit_time:%Y-%m-%d %H:%M:%S}, {r.fee:.2f}")


def search_vehicle(ctx: ParkingContext, read=input):
    result = ctx.engine.search(read("Enter registration to search: ").strip())
    if isinstance(result, Parked):
        print(f"Found in slot [{result.row},{result.col}] - entry time: {result.entry_time:%Y-%m-%d %H:%M:%S}")
    else:
        print(f"Found in waiting queue position {result.position}")


def load_state(ctx: ParkingContext):
    print("State loaded." if ctx.load() else "No saved state found.")


def save_state(ctx: ParkingContext):
    ctx.save()
    print("State saved.")


def handle_choice(ctx: ParkingContext, choice: str, read=input) -> bool:
    """Runs one menu command. Returns False when the operator chose to exit."""
    actions = {
        "1": lambda: car_entry(ctx, read),
        "2": lambda: car_exit(ctx, read),
        "3": lambda: print(render_lot(ctx.lot)),
        "4": lambda: print(render_lot_detailed(ctx.lot)),
        "5": lambda: print(render_queue(ctx.queue)),
        "6": lambda: show_recent_records(ctx),
        "7": lambda: search_vehicle(ctx, read),
        "8": lambda: save_state(ctx),
        "9": lambda: load_state(ctx),
    }
    if choice == "0":
        saved = ctx.shutdown(save_state=True)
        print("Exiting. State saved. Bye!" if saved else "Exiting. State could NOT be saved.")
        return False
    action = actions.get(choice)
    if action is None:
        print("Invalid option.")
        return True
    try:
        action()
    except ParkingError as e:
        print(e)
    return True


def main():
    ctx = build_context()
    ctx.startup(load_state=settings.LOAD_STATE_ON_STARTUP)
    print("Welcome to Car Parking Management System")
    print(f"Rate per hour: {ctx.engine.rate_per_hour:.2f}")
    try:
        while handle_choice(ctx, input(MENU).strip()):
            pass
    except (EOFError, KeyboardInterrupt):
        print()
        ctx.shutdown(save_state=settings.SAVE_STATE_ON_SHUTDOWN)


if __name__ == "__main__":
    main()
