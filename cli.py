#!/usr/bin/env python3
"""
Ata Report CLI - Command Line Interface
=======================================

Commands:
  ata-report units <file>                     List the units in a report
  ata-report preview <file> [--unit U]        Show the first filtered items
  ata-report export <file> [--unit U] [-o F]  Write the formatted workbook
  ata-report serve                            Start the API server
"""

import sys
import os
import argparse
import time

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from ata_report import (
    ALL_UNITS,
    AtaReportError,
    EmptyResultError,
    export_to_excel,
    extract,
    list_units,
)

PREVIEW_SIZE = 5

console = Console()


def print_output(message, style=None):
    """Print output with optional styling"""
    if style:
        console.print(message, style=style)
    else:
        console.print(message)


def fail(message):
    print_output(f"Error: {message}", "red")
    sys.exit(1)


def cmd_units(args):
    """List the units found in a report"""
    try:
        units = list_units(args.file)
    except AtaReportError as e:
        fail(str(e))

    if not units:
        print_output("No units found.", "yellow")
        return

    table = Table(title=os.path.basename(args.file), box=box.ROUNDED)
    table.add_column("#", style="dim")
    table.add_column("Unidade", style="cyan")
    for i, unit in enumerate(units, 1):
        table.add_row(str(i), unit)
    console.print(table)


def cmd_preview(args):
    """Show contract metadata and the first filtered items"""
    try:
        result = extract(args.file, args.unit)
    except AtaReportError as e:
        fail(str(e))

    info = result.metadata
    console.print(Panel(
        "\n".join([
            f"[bold]Número da Ata:[/bold] {info.numero_ata or '-'}",
            f"[bold]Objeto:[/bold] {info.objeto or '-'}",
            f"[bold]Negociação:[/bold] {info.negociacao or '-'}",
            f"[bold]Vigência:[/bold] {info.inicio_vigencia or '-'} a {info.final_vigencia or '-'}",
        ]),
        title=args.unit,
        box=box.ROUNDED,
    ))

    if not result.records:
        print_output("No records found for this unit.", "yellow")
        return

    table = Table(box=box.ROUNDED)
    for column in result.columns:
        table.add_column(column, overflow="fold")
    for record in result.preview(PREVIEW_SIZE):
        table.add_row(*[str(record.get(c, "")) for c in result.columns])
    console.print(table)
    print_output(f"{len(result.records)} records total", "dim")


def cmd_export(args):
    """Write the formatted workbook for a unit"""
    output_path = args.output or f"filtrado_{int(time.time() * 1000)}.xlsx"

    try:
        result = extract(args.file, args.unit)
        export_to_excel(result, output_path, args.unit)
    except EmptyResultError:
        fail(f"No records found for unit '{args.unit}'")
    except AtaReportError as e:
        fail(str(e))

    print_output(f"✓ Exported {len(result.records)} records to: {output_path}", "green")


def cmd_serve(args):
    """Start the API server"""
    import uvicorn
    from api.main import app

    print_output(f"Starting Ata Report API server on {args.host}:{args.port}...", "cyan")
    uvicorn.run(app, host=args.host, port=args.port)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Ata Report - filter framework-agreement reports by unit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ata-report units ./relatorio.xlsx
  ata-report preview ./relatorio.xlsx --unit "SESC - Unidade A"
  ata-report export ./relatorio.xlsx --unit Todas -o todas.xlsx
  ata-report serve
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    units_parser = subparsers.add_parser("units", help="List units in a report")
    units_parser.add_argument("file", help="Path to the .xlsx report")

    preview_parser = subparsers.add_parser("preview", help="Preview filtered items")
    preview_parser.add_argument("file", help="Path to the .xlsx report")
    preview_parser.add_argument("--unit", "-u", default=ALL_UNITS, help="Unit label (default: Todas)")

    export_parser = subparsers.add_parser("export", help="Export formatted workbook")
    export_parser.add_argument("file", help="Path to the .xlsx report")
    export_parser.add_argument("--unit", "-u", default=ALL_UNITS, help="Unit label (default: Todas)")
    export_parser.add_argument("--output", "-o", help="Output file path")

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind")
    serve_parser.add_argument("--port", "-p", type=int, default=3000, help="Port to bind")

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "units": cmd_units,
        "preview": cmd_preview,
        "export": cmd_export,
        "serve": cmd_serve,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
