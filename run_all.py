"""
run_all.py
----------
Cleans the raw Boston extract, derives density, trains and ranks the
models, and writes the hotspot summary by calling processing/01 to 04
as subprocesses. Run from the project root, where data/raw/ lives:

    python run_all.py                 # 01 to 04
    python run_all.py --from 03       # retrain and rewrite the summary only
    python run_all.py --only 01 02    # rebuild the cleaned and density tables
    python run_all.py --seed 7        # jitter, split, folds and tree seeded with 7

The first script that exits non-zero stops the run; later scripts read
its outputs and would fail on stale or missing files.
"""

import os
import subprocess
import sys
import time
import argparse

from hotspots.constants import RANDOM_STATE

SCRIPTS = [
    ("01", "processing/01_clean_incidents.py"),
    ("02", "processing/02_density_features.py"),
    ("03", "processing/03_train_models.py"),
    ("04", "processing/04_write_summary.py"),
]

# Scripts that accept --seed
SEEDED = {"01", "03"}

SUMMARY_PATH = os.path.join("data", "processed", "analysis_summary.txt")


def script_command(number: str, path: str, seed: int = RANDOM_STATE) -> list[str]:
    command = [sys.executable, path]
    if number in SEEDED:
        command += ["--seed", str(seed)]
    return command


def select_scripts(from_script=None, only_scripts=None) -> list[tuple[str, str]]:
    """
    Scripts to run, in pipeline order. --only wins over --from.

    An unknown --from number is an error. Unknown --only numbers are
    reported and ignored.
    """
    numbers = [n for n, _ in SCRIPTS]
    if only_scripts:
        unknown = set(only_scripts) - set(numbers)
        if unknown:
            print(f"Warning: no script numbered {', '.join(sorted(unknown))}")
        return [(n, p) for n, p in SCRIPTS if n in only_scripts]
    if from_script:
        if from_script not in numbers:
            raise ValueError(
                f"No script numbered '{from_script}'. Valid numbers: {', '.join(numbers)}"
            )
        return SCRIPTS[numbers.index(from_script):]
    return list(SCRIPTS)


def run_script(number: str, path: str, seed: int = RANDOM_STATE) -> bool:
    """Run one numbered script with its output streaming to the terminal."""
    print(f"\n{'='*60}")
    print(f"  [{number}] {path}")
    print(f"{'='*60}")
    start = time.time()

    # Scripts import the hotspots package from the project root
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [os.getcwd(), env.get("PYTHONPATH")]))

    result = subprocess.run(script_command(number, path, seed), env=env)
    elapsed = round(time.time() - start, 1)

    if result.returncode == 0:
        print(f"\n  ✓ {number} done in {elapsed}s")
        return True
    print(f"\n  ✗ {number} exited with code {result.returncode} after {elapsed}s")
    return False


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the Boston assault density pipeline")
    parser.add_argument(
        "--from", dest="from_script", metavar="N",
        help="Start at script N and run the rest, e.g. --from 03"
    )
    parser.add_argument(
        "--only", dest="only_scripts", metavar="N", nargs="+",
        help="Run just these script numbers, e.g. --only 02 04"
    )
    parser.add_argument(
        "--seed", type=int, default=RANDOM_STATE,
        help=f"Seed passed to 01 and 03 (default {RANDOM_STATE})"
    )
    args = parser.parse_args(argv)

    try:
        scripts_to_run = select_scripts(args.from_script, args.only_scripts)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    if not scripts_to_run:
        print("Nothing selected.")
        sys.exit(0)

    overall_start = time.time()
    results = {}

    for number, path in scripts_to_run:
        results[number] = run_script(number, path, args.seed)
        if not results[number]:
            print(f"\nStopped at {number}; outputs from later scripts were not refreshed.")
            print(f"Resume with:  python run_all.py --from {number}")
            break

    total = round(time.time() - overall_start, 1)
    passed = sum(results.values())
    failed = len(results) - passed

    print(f"\n{'='*60}")
    print(f"  Run finished in {total}s (seed {args.seed})")
    print(f"{'='*60}")
    for number, path in scripts_to_run:
        if number in results:
            icon = "✓" if results[number] else "✗"
            print(f"  {icon} [{number}] {path}")
        else:
            print(f"  - [{number}] {path}  (not run)")

    print()
    if failed:
        print(f"  {passed} succeeded, {failed} failed.")
        sys.exit(1)
    print(f"  {passed} of {len(SCRIPTS)} scripts ran.")
    if os.path.exists(SUMMARY_PATH):
        print(f"\n  Summary: {SUMMARY_PATH}")


if __name__ == "__main__":
    main()
