import argparse
import logging
import time

from object_plane.base import ObjectStore
from object_plane.builder import StoreBuilder
from object_plane.outcome import Outcome

DELAY = 0.0


def run_step(step_num: int, title: str):
    print(f"\n=== Step {step_num}: {title} ===")
    time.sleep(DELAY)


def print_info(msg: str):
    print(f"[INFO] {msg}")


def report(outcome: Outcome) -> Outcome:
    status = "ok" if outcome.success else "failed"
    for line in outcome.message.splitlines() or [""]:
        print(f"  [{status}] {line}")
    return outcome


def check(condition: bool, msg: str) -> None:
    if not condition:
        raise RuntimeError(f"Scenario check failed: {msg}")
    print_info(msg)


def run_scenario(store: ObjectStore) -> None:
    # 1. Stage and commit on master
    run_step(1, "Stage and commit on master")
    report(store.add("feature_x_enabled", False))
    report(store.add("theme", "light"))
    first = report(store.commit("initial config"))
    check(store.get("theme").payload == "light", "Theme is 'light' on master")

    # 2. Staged objects stay invisible until committed
    run_step(2, "Staged changes are not visible")
    report(store.add("theme", "dark"))
    check(store.get("theme").payload == "light", "Theme is still 'light'")
    report(store.commit("dark theme"))
    check(store.get("theme").payload == "dark", "Theme is 'dark' after commit")

    # 3. Branch off and diverge
    run_step(3, "Create 'dev' and diverge")
    report(store.branch().create("dev"))
    report(store.branch().checkout("dev"))
    report(store.add("feature_x_enabled", True))
    report(store.remove("theme"))
    report(store.commit("enable feature x, drop theme"))
    check(store.get("theme").error, "Theme is gone on 'dev'")

    # 4. Master is untouched
    run_step(4, "Verify isolation")
    report(store.branch().checkout("master"))
    check(store.get("feature_x_enabled").payload is False, "Feature X still off")
    check(store.get("theme").payload == "dark", "Theme still 'dark' on master")
    report(store.branch().list())

    # 5. Roll master back
    run_step(5, "Check out the initial commit on master")
    report(store.log())
    report(store.checkout(first.payload.id))
    check(store.get("theme").payload == "light", "Theme restored to 'light'")
    report(store.log())

    # 6. Clean up
    run_step(6, "Remove 'dev'")
    report(store.branch().remove("master"))
    report(store.branch().remove("dev"))
    report(store.branch().list())


def main(argv: list[str] | None = None):
    global DELAY

    parser = argparse.ArgumentParser(description="Demo Scenario")
    parser.add_argument(
        "--delay",
        type=float,
        default=0.5,
        help="Pause between steps in seconds (default: 0.5)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    args = parser.parse_args(argv)

    DELAY = args.delay
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print_info("Creating in-memory object store")
    store = StoreBuilder().build()
    run_scenario(store)
    print_info("Demo Complete.")


if __name__ == "__main__":
    main()
