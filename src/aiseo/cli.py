"""Command-line interface for the website analyzer."""

import json
import sys

from aiseo.analyzer import AnalysisOptions, WebsiteAnalyzer
from aiseo.config import AnalysisThresholds, Config, settings
from aiseo.constants import DEFAULT_DISCOVERY_MAX_PAGES
from aiseo.crawler import FetchError
from aiseo.discovery import ensure_scheme
from aiseo.logging_config import setup_logging


PRIORITY_ICONS = {"high": "🔴", "medium": "🟡", "low": "🟢"}


def _write_output(output: str, output_file=None):
    if output_file:
        with open(output_file, "w") as f:
            f.write(output)
        print(f"Results written to {output_file}")
    else:
        print(output)


def _print_categories(heading: str, categories: dict):
    print(f"\n{heading}")
    for name, block in categories.items():
        label = name.replace("_", " ").capitalize()
        print(f"  • {label}: {block.score}/100")
        for issue in block.issues:
            print(f"      - {issue}")


def print_report(report):
    """Print an AnalysisReport in a formatted way."""
    result = report.result

    print(f"\n{'=' * 60}")
    print(f"Analysis for: {result.url}")
    print(f"{'=' * 60}")
    print(f"\n📊 SEO Score: {result.overall_seo_score}/100")
    print(f"🤖 LLM Readiness: {result.overall_llm_score}/100")

    _print_categories("SEO:", result.seo.categories())
    _print_categories("LLM Readiness:", result.llm_readiness.categories())

    if report.suggestions:
        print(f"\n💡 Suggestions:")
        for suggestion in report.suggestions:
            icon = PRIORITY_ICONS[suggestion.priority.value]
            print(f"  {icon} [{suggestion.category.value}] {suggestion.title}")
            print(f"      {suggestion.description}")
            if suggestion.current_value:
                print(f"      Current: {suggestion.current_value}")
            if suggestion.suggested_value:
                print(f"      Suggested: {suggestion.suggested_value}")

    if report.pages:
        print(f"\n📄 Pages ({report.discovery.source.value if report.discovery else 'single'}):")
        for page in report.pages:
            if page.success:
                print(
                    f"  ✅ {page.url}  SEO {page.result.overall_seo_score} / "
                    f"LLM {page.result.overall_llm_score}"
                )
            else:
                print(f"  ❌ {page.url}  {page.error}")
        print(f"\n  Average SEO: {report.average_seo_score}/100")
        print(f"  Average LLM Readiness: {report.average_llm_score}/100")

    print(f"\n{'=' * 60}\n")


def _build_analyzer(args) -> WebsiteAnalyzer:
    thresholds = (
        AnalysisThresholds.from_file(args.thresholds)
        if getattr(args, "thresholds", None)
        else AnalysisThresholds.from_env()
    )
    if getattr(args, "generative", False):
        if settings.LLM_PROVIDER in ("openai", "anthropic") and not settings.LLM_API_KEY:
            print(
                "⚠️  LLM_API_KEY is not set, falling back to template suggestions",
                file=sys.stderr,
            )
    return WebsiteAnalyzer(config=Config.from_env(), thresholds=thresholds)


def analyze_command(args):
    """Analyze a URL for SEO and LLM readiness."""
    analyzer = _build_analyzer(args)
    options = AnalysisOptions(
        max_pages=args.max_pages,
        enable_generative_suggestions=args.generative,
        check_broken_links=args.check_links,
    )

    url = ensure_scheme(args.url)
    try:
        report = analyzer.analyze(url, options)
    except FetchError as e:
        print(f"\n❌ Failed to analyze {url}: {e.message}", file=sys.stderr)
        sys.exit(1)

    if args.output == "json":
        _write_output(json.dumps(report.to_dict(), indent=2, ensure_ascii=False), args.output_file)
    else:
        print_report(report)


def discover_command(args):
    """Discover pages on a site."""
    analyzer = _build_analyzer(args)
    result = analyzer.discover(args.url, max_pages=args.max)

    if args.output == "json":
        _write_output(json.dumps(result.to_dict(), indent=2), args.output_file)
        return

    print(f"\nFound {len(result.pages)} pages via {result.source.value}:")
    for page in result.pages:
        print(f"  • {page}")
    if result.error:
        print(f"\n⚠️  {result.error}")


def main():
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="AI SEO Analyzer - Score websites for SEO and LLM readiness"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )
    parser.add_argument(
        "--thresholds",
        help="JSON file with rubric thresholds (default: AISEO_THRESHOLD_* env vars)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze a URL for SEO and LLM readiness."
    )
    analyze_parser.add_argument("url", help="URL to analyze")
    analyze_parser.add_argument(
        "--max-pages",
        type=int,
        default=1,
        help="Analyze up to this many discovered pages (default: 1)",
    )
    analyze_parser.add_argument(
        "--generative",
        action="store_true",
        help="Reword suggestions with the configured LLM provider",
    )
    analyze_parser.add_argument(
        "--check-links",
        action="store_true",
        help="Check internal links for errors",
    )
    analyze_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    analyze_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    analyze_parser.set_defaults(func=analyze_command)

    discover_parser = subparsers.add_parser(
        "discover", help="List pages found on a site."
    )
    discover_parser.add_argument("url", help="Site URL or hostname")
    discover_parser.add_argument(
        "--max",
        type=int,
        default=DEFAULT_DISCOVERY_MAX_PAGES,
        help=f"Maximum pages to return (default: {DEFAULT_DISCOVERY_MAX_PAGES})",
    )
    discover_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    discover_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    discover_parser.set_defaults(func=discover_command)

    args = parser.parse_args()

    setup_logging(
        level=args.log_level,
        log_file=getattr(args, "log_file", None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
