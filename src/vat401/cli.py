from __future__ import annotations

import argparse
import logging
import sys
from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from vat401.services.exceptions import Vat401Error

if TYPE_CHECKING:
    from vat401.services.filing import PreparedFiling


def _init_config() -> None:
    """Copy bundled config templates to the user's config/data directories."""
    from vat401.config import get_config_dir, get_data_dir

    config_dir = get_config_dir()
    data_dir = get_data_dir()
    templates = files("vat401") / "templates"

    config_dir.mkdir(parents=True, exist_ok=True)
    data_dir.mkdir(parents=True, exist_ok=True)

    copied = 0
    for rel in ["company.yaml.example", "tax_codes.yaml", "invoices.yaml.example"]:
        dest = config_dir / rel
        if dest.exists():
            print(f"  already exists: {dest}")
            continue
        src = templates / rel
        with src.open("rb") as f:
            dest.write_bytes(f.read())
        print(f"  created: {dest}")
        copied += 1

    print()
    print(f"Config: {config_dir}")
    print(f"Data:   {data_dir}")
    print()
    if copied:
        print("Next steps:")
        print(f"  1. cp {config_dir / 'company.yaml.example'} {config_dir / 'company.yaml'}")
        print("  2. Edit company.yaml with your tax id and company name")
        print("  3. Run: vat401 generate invoices.yaml --year 2024 --bi-month 1")
    else:
        print("No new files created (all already existed).")


def _preflight() -> bool:
    """Verify the company profile exists before generating a filing."""
    from vat401.config import get_config_dir

    config_dir = get_config_dir()
    if not config_dir.is_dir():
        print(f"Error: config directory not found: {config_dir}")
        print("Run 'vat401 init' to create the example files.")
        return False
    if not (config_dir / "company.yaml").is_file():
        print(f"Error: company.yaml not found in {config_dir}")
        print("Run 'vat401 init' and configure the filing company.")
        return False
    return True


def _print_summary(filing: PreparedFiling) -> None:
    from vat401.utils.formatters import format_roc_date, format_twd

    f401 = filing.form401
    period = filing.period
    print(f"Form 401  {filing.company.name} ({filing.company.tax_id})")
    print(
        f"Period    {period.year} bi-month {period.bi_month} "
        f"({format_roc_date(period.start_date)} .. {format_roc_date(period.end_date)}, "
        f"code {period.roc_year_month})"
    )
    print()
    print("Sales")
    for label, bucket in [
        ("taxable", f401.sales.taxable),
        ("zero-rated", f401.sales.zero_rated),
        ("exempt", f401.sales.exempt),
    ]:
        print(
            f"  {label:<16}{bucket.count:>6}  {format_twd(bucket.untaxed_amount):>18}"
            f"  {format_twd(bucket.tax_amount):>14}"
        )
    print("Purchases")
    for label, bucket in [
        ("deductible", f401.purchases.deductible),
        ("non-deductible", f401.purchases.non_deductible),
    ]:
        print(
            f"  {label:<16}{bucket.count:>6}  {format_twd(bucket.untaxed_amount):>18}"
            f"  {format_twd(bucket.tax_amount):>14}"
        )
    print()
    print(f"Output tax   {format_twd(f401.tax.output_tax)}")
    print(f"Input tax    {format_twd(f401.tax.input_tax)}")
    label = "Refundable" if f401.tax.is_refund else "Payable"
    print(f"{label:<13}{format_twd(abs(f401.tax.net_tax))}")
    print(f"Records      {filing.media.record_count}")


def _cmd_period(args: argparse.Namespace) -> int:
    from vat401.utils.period import calculate_tax_period

    period = calculate_tax_period(args.year, args.bi_month)
    print(f"{period.start_date} .. {period.end_date}  ({period.roc_year_month})")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    from vat401.services.filing import load_invoice_rows, prepare_filing, save_media_file

    if not _preflight():
        return 1
    rows = load_invoice_rows(args.invoices)
    filing = prepare_filing(
        rows, args.year, args.bi_month, skip_out_of_period=args.skip_out_of_period
    )
    _print_summary(filing)
    if args.dry_run:
        return 0
    path = save_media_file(filing, args.output)
    print(f"Saved to {path}")
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    from vat401.services.media_file import validate_media_file

    result = validate_media_file(Path(args.file).read_bytes(), strict=args.strict)
    print(f"Records: {result.record_count}")
    for error in result.errors:
        print(f"  {error}")
    print("OK" if result.valid else "INVALID")
    return 0 if result.valid else 1


def _build_parser() -> argparse.ArgumentParser:
    from vat401.utils.validators import validate_bi_month, validate_year

    parser = argparse.ArgumentParser(prog="vat401", description="Taiwan VAT 401 filing")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="copy example config files")

    p = sub.add_parser("period", help="show the dates of a filing period")
    p.add_argument("year", type=validate_year)
    p.add_argument("bi_month", type=validate_bi_month)
    p.set_defaults(func=_cmd_period)

    g = sub.add_parser("generate", help="build the Form 401 summary and media file")
    g.add_argument("invoices", type=Path, help="YAML/JSON file of invoice rows")
    g.add_argument("--year", type=validate_year, required=True)
    g.add_argument("--bi-month", type=validate_bi_month, required=True)
    g.add_argument("--output", type=Path, default=None, help="output directory")
    g.add_argument("--dry-run", action="store_true", help="print the summary only")
    g.add_argument("--skip-out-of-period", action="store_true")
    g.set_defaults(func=_cmd_generate)

    v = sub.add_parser("validate", help="check a media file's structure")
    v.add_argument("file", type=Path)
    v.add_argument("--strict", action="store_true", help="also check format codes and sequence")
    v.set_defaults(func=_cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the vat401 CLI."""
    from vat401.config import get_log_level

    logging.basicConfig(level=get_log_level(), format="%(levelname)s %(name)s: %(message)s")
    args = _build_parser().parse_args(argv)

    if args.command == "init":
        _init_config()
        return

    try:
        code = args.func(args)
    except (Vat401Error, ValueError, KeyError, OSError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        code = 1
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
