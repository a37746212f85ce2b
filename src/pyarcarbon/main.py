"""
Command line interface for pyarcarbon.

Examples:
    pyarcarbon run project.yaml
    pyarcarbon run project.yaml --species eucalyptus_fast --export out/schedule --format excel
    pyarcarbon run project.yaml --species-mix mix.csv --plot out/mix.png
    pyarcarbon species
    pyarcarbon template species_template.csv
"""
import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config_loader import load_project_file
from .engine import calculate_sequestration
from .exceptions import ARCarbonError
from .inputs import ProjectInputs
from .logging_config import setup_logging
from .results import EXPORT_FORMATS, ResultBundle
from .species import available_species
from .species_io import load_species_mix, write_species_template
from .species_mix import calculate_species_mix

console = Console()


def print_schedule(bundle: ResultBundle, title: str = "Sequestration Schedule") -> None:
    """Print the yearly schedule as a table."""
    table = Table(title=title, show_header=True)
    table.add_column("Year", style="cyan", justify="right")
    table.add_column("Stems/ha", justify="right")
    table.add_column("AGB t/ha", justify="right")
    table.add_column("BGB t/ha", justify="right")
    table.add_column("Carbon tC/ha", justify="right")
    table.add_column("Incremental tCO2e", justify="right")
    table.add_column("Cumulative tCO2e", style="green", justify="right")
    table.add_column("Green cover %", justify="right")

    for row in bundle.schedule:
        table.add_row(
            str(row.age),
            f"{row.surviving_stems_per_ha:,.0f}",
            f"{row.above_ground_biomass_per_ha:,.2f}",
            f"{row.below_ground_biomass_per_ha:,.2f}",
            f"{row.carbon_stock_per_ha:,.2f}",
            f"{row.incremental_co2e:,.2f}",
            f"{row.cumulative_co2e:,.2f}",
            f"{row.green_cover_percentage:.1f}",
        )
    console.print(table)


def print_summary(bundle: ResultBundle) -> None:
    """Print totals, green cover, credit and cost panels."""
    credits = bundle.credits
    green_cover = bundle.green_cover
    console.print(Panel.fit(
        f"[bold]Total sequestration:[/bold] {bundle.totals.final_cumulative_co2e:,.2f} tCO2e\n"
        f"[bold]Mean annual:[/bold] {bundle.totals.mean_annual_sequestration:,.2f} tCO2e/yr",
        title="Totals", border_style="green"
    ))
    console.print(Panel.fit(
        f"Initial: {green_cover.initial:.2f}%  Final: {green_cover.final:.2f}%  "
        f"Increase: {green_cover.absolute_increase:.2f} points\n"
        f"Surviving planted area: {green_cover.area_added_hectares:,.2f} ha",
        title="Green Cover", border_style="green"
    ))
    console.print(Panel.fit(
        f"Total VERs: {credits.total_vers:,.2f}\n"
        f"Buffer ({credits.buffer_fraction:.0%}): -{credits.buffer_deducted:,.2f}\n"
        f"Non-additionality ({credits.non_additionality_fraction:.0%}): "
        f"-{credits.non_additionality_deducted:,.2f}\n"
        f"[bold]Issuable VERs:[/bold] {credits.issuable_vers:,.2f}\n"
        f"[bold]Estimated revenue:[/bold] {credits.estimated_revenue:,.2f} "
        f"(at {credits.carbon_price:,.2f} per VER)",
        title="Carbon Credits", border_style="blue"
    ))
    if bundle.cost_analysis is not None:
        cost = bundle.cost_analysis
        per_tonne = f"{cost.cost_per_tonne:,.2f}" if cost.cost_per_tonne is not None else "N/A"
        breakdown = ", ".join(f"{phase} {amount:,.0f}" for phase, amount in cost.breakdown.items())
        console.print(Panel.fit(
            f"Cost per tCO2e: {per_tonne}\n"
            f"Cost per hectare: {cost.cost_per_hectare:,.2f}\n"
            f"Breakdown: {breakdown}",
            title="Cost Analysis", border_style="yellow"
        ))


def print_species_table() -> None:
    """Print the species table."""
    table = Table(title="Species", show_header=True)
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    table.add_column("MAI m3/ha/yr", justify="right")
    table.add_column("Maturity", justify="right")
    table.add_column("Curve")
    table.add_column("Wood density", justify="right")
    table.add_column("BEF", justify="right")
    table.add_column("RSR", justify="right")
    for record in available_species():
        table.add_row(
            record.code.value,
            record.name,
            f"{record.mean_annual_increment:g}",
            str(record.maturity_year),
            record.growth_curve.shape.value,
            f"{record.wood_density:g}",
            f"{record.bef:g}",
            f"{record.rsr:g}",
        )
    console.print(table)


def print_error(error: ARCarbonError) -> None:
    report = error.to_report()
    lines = [f"[bold]{report.kind}[/bold]"]
    if report.form_field:
        lines.append(f"field: {report.form_field}")
    lines.append(f"reason: {report.reason}")
    if report.value is not None:
        lines.append(f"value: {report.value!r}")
    console.print(Panel.fit("\n".join(lines), title="Error", border_style="red"))


def run_project(args: argparse.Namespace) -> int:
    form = load_project_file(args.project)
    if args.species:
        form['species'] = args.species
    if args.species_mix:
        form.setdefault('species', 'native_mixed_slow')
    inputs = ProjectInputs.from_form(form)

    if args.plot:
        # matplotlib is only imported when a chart is requested
        from .growth_plots import plot_sequestration, plot_species_comparison

    if args.species_mix:
        mix = calculate_species_mix(inputs, load_species_mix(args.species_mix))
        for share in mix.species_results:
            print_schedule(share.result, title=f"{share.species.value} ({share.area:,.2f} ha)")
        bundle = mix.total
        print_schedule(bundle, title="All Species")
        if args.plot:
            plot_species_comparison(mix, save_path=args.plot)
    else:
        bundle = calculate_sequestration(inputs)
        print_schedule(bundle)
        if args.plot:
            plot_sequestration(bundle, save_path=args.plot)

    print_summary(bundle)

    if args.export:
        path = bundle.export(args.export, format=args.format)
        console.print(f"[green]Results saved to {path}[/green]")
    if args.plot:
        console.print(f"[green]Chart saved to {args.plot}[/green]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyarcarbon",
        description="A/R carbon sequestration estimates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Compute the schedule of a project file")
    run.add_argument("project", help="Project file (.yaml, .toml or .json) with form fields")
    run.add_argument("--species", help="Override the species of the project file")
    run.add_argument("--species-mix", help="Species mix file (.csv or .json)")
    run.add_argument("--export", help="Export path for the results")
    run.add_argument(
        "--format",
        choices=sorted(EXPORT_FORMATS),
        default="csv",
        help="Export format (default: csv)"
    )
    run.add_argument("--plot", help="Save a chart of the schedule to this path")

    subparsers.add_parser("species", help="List the species table")

    template = subparsers.add_parser("template", help="Write the species mix CSV template")
    template.add_argument("path", help="Output CSV path")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line interface."""
    args = build_parser().parse_args(argv)
    setup_logging(
        logging.DEBUG if args.verbose else logging.WARNING,
        handler=RichHandler(console=console, show_path=False),
    )

    try:
        if args.command == "run":
            return run_project(args)
        if args.command == "species":
            print_species_table()
        elif args.command == "template":
            path = write_species_template(args.path)
            console.print(f"[green]Template saved to {path}[/green]")
        return 0
    except ARCarbonError as e:
        print_error(e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
