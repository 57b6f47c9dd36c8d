"""
Огляд валоризації CEE проєкту з YAML-знімка.

    python -m primecee.cli.inspect_project --snapshot snapshots/project.yml
    python -m primecee.cli.inspect_project --line ENR-1 -v
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from primecee.config import load_snapshot, load_snapshot_config, load_valorisation_config
from primecee.domain.models import LineValorisation, ProjectValorisation
from primecee.services import build_line_display, format_currency, format_decimal, project_total_text, valorise_project


# ---------------------------
#  pretty-print
# ---------------------------

def print_line(idx: int, entry: LineValorisation):
    display = build_line_display(entry)

    print("=" * 80)
    print(f"[{idx}] {entry.product_name or '—'} ({entry.product_code or 'sans code'})")
    print("-" * 80)
    print(f"  Ligne        : {entry.project_product_id}")
    print(f"  Catégorie    : {entry.product_category or '—'}")
    if entry.multiplier_value is not None:
        print(f"  Multiplicat. : {format_decimal(entry.multiplier_value)} ({entry.multiplier_label or '—'})")
    else:
        print(f"  Multiplicat. : — ({entry.multiplier_label or '—'})")

    if display.warning:
        print(f"  ⚠️ {display.warning}")

    print(f"  {display.label}")
    print(f"  {display.valorisation}")
    if display.lighting_calculation:
        print(f"  {display.lighting_calculation}")
    print(f"  {display.details}")
    print(f"  {display.prime}")


def print_totals(valorisation: ProjectValorisation):
    totals = valorisation.totals
    print("=" * 80)
    print(f"Valorisation totale : {project_total_text(valorisation)}")
    print(f"Prime totale        : {format_currency(totals.total_prime)}")


# ---------------------------
#  main
# ---------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Розрахунок валоризації CEE по проєкту з YAML-знімка.\n"
            "Знімок: каталог продуктів + проєкт + делегат + налаштування організації."
        )
    )
    parser.add_argument(
        "--snapshot",
        help="шлях до YAML-знімка (за замовчуванням CEE_SNAPSHOT_YAML з .env)",
    )
    parser.add_argument(
        "--line",
        help="показати тільки один рядок проєкту (id рядка або product_id)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="DEBUG-логи розрахунку",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    path = Path(args.snapshot) if args.snapshot else load_snapshot_config().path
    snapshot = load_snapshot(path)
    if snapshot is None:
        print(f"Знімок порожній або не знайдений ({path})")
        return 1

    valorisation = valorise_project(
        snapshot.project,
        snapshot.organization,
        load_valorisation_config(),
    )

    entries = list(valorisation.entries)
    if args.line:
        entries = [e for e in entries if e.project_product_id == args.line]
        if not entries:
            print(f"У проєкті немає рядка {args.line}")
            return 1

    if not entries:
        print("У проєкті немає продуктів для валоризації")
        return 1

    for idx, entry in enumerate(entries, start=1):
        print_line(idx, entry)

    print_totals(valorisation)
    return 0


if __name__ == "__main__":
    sys.exit(main())
