"""Command-line interface for marketplace listing analysis."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from listing_analyzer.errors import NoListingsFoundError
from listing_analyzer.progress import ProgressEvent
from listing_analyzer.runner import AnalysisRunner


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI.

    Args:
        verbose: Whether to enable verbose (DEBUG) logging.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_progress(event: ProgressEvent) -> None:
    if event.action == "progress":
        print(f"[{event.percentage:3.0f}%] {event.message}")


def run_analysis(args: argparse.Namespace) -> int:
    """Execute analysis command.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    if not args.url.startswith(("http://", "https://")):
        print(f"Error: URL must start with http(s)://: {args.url}", file=sys.stderr)
        return 1

    if args.max_items is not None and args.max_items < 1:
        print("Error: --max-items must be a positive integer", file=sys.stderr)
        return 1

    try:
        runner = AnalysisRunner(config_path, progress_callback=print_progress)
        result, report_path = asyncio.run(
            runner.run(
                args.url,
                max_items=args.max_items,
                category=args.category,
                headless=not args.headed,
            )
        )

        summary = result.summary
        print("\n" + "=" * 50)
        print("Analysis Complete!")
        print("=" * 50)
        print(f"Items found:      {summary.total_items}")
        print(f"Items with price: {summary.items_with_prices}")
        print(f"Total revenue:    ${summary.total_revenue:,.2f}")
        print(f"Average price:    ${summary.average_price:.2f}")

        if summary.top_items:
            print("\nTop items:")
            for item in summary.top_items[:5]:
                print(f"  ${item.price:>10,.2f}  {item.title[:60]}")

        print(f"\nReport saved to: {report_path}")
        return 0

    except NoListingsFoundError as e:
        context = e.context
        print(f"Error: {e}", file=sys.stderr)
        print(f"  Page title: {context.title or 'N/A'}", file=sys.stderr)
        print(f"  Strategies tried: {context.strategy_counts}", file=sys.stderr)
        return 1
    except Exception as e:
        logging.exception("Error during analysis")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def show_report(args: argparse.Namespace) -> int:
    """Show report command.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code.
    """
    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        runner = AnalysisRunner(config_path)
        report_path = runner.report_writer.latest_report(args.date)

        if report_path is None:
            print("No report files found", file=sys.stderr)
            return 1

        print(report_path.read_text(encoding="utf-8-sig"))
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> int:
    """Main entry point for CLI.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        description="Listing Analyzer - Extract and summarize marketplace listings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  listing-analyzer run https://www.trademe.co.nz/a/marketplace/search?search_string=lego
  listing-analyzer run URL --max-items 50 --config config.yaml
  listing-analyzer report --date 2026-10-18
        """,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to config file (default: config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Analyze listings on a marketplace results page",
    )
    run_parser.add_argument(
        "url",
        help="Marketplace results page URL",
    )
    run_parser.add_argument(
        "--max-items",
        type=int,
        help="Maximum number of items to extract (default: from config)",
    )
    run_parser.add_argument(
        "--category",
        help="Category hint recorded with the run (default: from config)",
    )
    run_parser.add_argument(
        "--headed",
        action="store_true",
        help="Run browser in headed mode (visible)",
    )
    run_parser.set_defaults(func=run_analysis)

    # Report command
    report_parser = subparsers.add_parser(
        "report",
        help="Show a stored analysis report",
    )
    report_parser.add_argument(
        "--date",
        help="Date to show report for (YYYY-MM-DD format)",
    )
    report_parser.set_defaults(func=show_report)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
