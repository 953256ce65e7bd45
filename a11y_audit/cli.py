"""CLI entry point - command definitions using Click.

Commands:
    init       Generate a template config file
    check      Audit crawl records stored in a JSON file
    crawl      Crawl a site through the crawling service and audit it
    convert    Re-export a JSON audit report in another format
    stats      Summary statistics for crawl records, as JSON
"""

import functools
import json
import sys

import click

from a11y_audit import __version__
from a11y_audit.reports.export import FORMATS
from a11y_audit.reports.summary import SEVERITY_FILTERS, SORT_DIRECTIONS, SORT_KEYS


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _verbose(ctx: click.Context, message: str) -> None:
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {message}", err=True)


def _load_config(ctx: click.Context):
    """Load the config file. Exits on error."""
    from a11y_audit.config import ConfigError, load

    try:
        return load(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


def _read_json(path: str):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _audit(ctx: click.Context, records) -> list:
    """Evaluate crawl records, reporting skipped ones in verbose mode."""
    from a11y_audit.reports.summary import average_score
    from a11y_audit.rules import audit_records

    if not isinstance(records, list):
        raise ValueError("Expected a JSON array of {url, content} records.")

    audits = audit_records(records)
    skipped = len(records) - len(audits)
    if skipped:
        _verbose(ctx, f"Skipped {skipped} record(s) without url or content")
    _verbose(ctx, f"Audited {len(audits)} page(s), average score {average_score(audits)}/100")
    return audits


def _emit_audits(ctx: click.Context, audits: list, fmt: str | None) -> None:
    """Apply the view options, export in *fmt* and write the result."""
    from a11y_audit.reports.export import export
    from a11y_audit.reports.summary import ViewState, filter_pages, sort_pages

    obj = ctx.obj
    state = ViewState(
        severity=obj["severity"],
        sort_key=obj["sort_key"],
        sort_dir=obj["sort_dir"],
        export_format=fmt or obj["format"] or "json",
    )
    pages = sort_pages(filter_pages(audits, state.severity), state.sort_key, state.sort_dir)
    if state.severity != "all":
        _verbose(ctx, f"{len(pages)} of {len(audits)} page(s) have {state.severity} issues")

    result = export(pages, state.export_format)
    _emit(ctx, result.content, result.filename)


def _emit(ctx: click.Context, text: str, filename: str | None = None) -> None:
    """Write *text* to stdout, to --output, or to *filename* with --save."""
    obj = ctx.obj
    output_path: str | None = obj["output_path"]
    if obj["save"] and filename and not output_path:
        output_path = filename

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _handle_errors(func):
    """Decorator that catches client, config and input errors and exits cleanly."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from a11y_audit.client import (
            AuthenticationError,
            CrawlClientError,
            NetworkError,
            NotFoundError,
        )
        from a11y_audit.config import SiteNotFoundError

        try:
            return func(*args, **kwargs)
        except SiteNotFoundError as exc:
            click.echo(f"Site error: {exc}", err=True)
            sys.exit(1)
        except AuthenticationError as exc:
            click.echo(f"Authentication error: {exc}", err=True)
            sys.exit(1)
        except NotFoundError as exc:
            click.echo(f"Not found: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except CrawlClientError as exc:
            click.echo(f"Crawler error: {exc}", err=True)
            sys.exit(1)
        except ValueError as exc:
            click.echo(f"Input error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="a11y-config.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--output", "output_path", default=None,
              help="Write the report to a file instead of stdout.")
@click.option("--save", is_flag=True, default=False,
              help="Write the report to a dated file (a11y-audit-YYYY-MM-DD.<ext>).")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None,
              help="Report format (default: config value, else json).")
@click.option("--severity", type=click.Choice(SEVERITY_FILTERS), default="all", show_default=True,
              help="Only report pages with at least one issue of this severity.")
@click.option("--sort", "sort_key", type=click.Choice(SORT_KEYS), default="score", show_default=True,
              help="Sort pages by this key.")
@click.option("--direction", "sort_dir", type=click.Choice(SORT_DIRECTIONS), default="asc",
              show_default=True, help="Sort direction.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="a11y-audit")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None, save: bool,
        fmt: str | None, severity: str, sort_key: str, sort_dir: str, verbose: bool) -> None:
    """Accessibility audit tool - score crawled pages, export as JSON, CSV or Markdown."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["output_path"] = output_path
    ctx.obj["save"] = save
    ctx.obj["format"] = fmt
    ctx.obj["severity"] = severity
    ctx.obj["sort_key"] = sort_key
    ctx.obj["sort_dir"] = sort_dir
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="a11y-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template a11y-config.yaml file."""
    from a11y_audit.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your crawler URL, token and site aliases.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

@cli.command("check")
@click.argument("records_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@_handle_errors
def check_command(ctx: click.Context, records_file: str) -> None:
    """Audit the crawl records (a JSON array of {url, content}) in RECORDS_FILE."""
    _verbose(ctx, f"Reading crawl records from '{records_file}'")
    audits = _audit(ctx, _read_json(records_file))
    _emit_audits(ctx, audits, ctx.obj["format"])


# ---------------------------------------------------------------------------
# crawl
# ---------------------------------------------------------------------------

@cli.command("crawl")
@click.argument("site")
@click.option("--limit", type=click.IntRange(min=1), default=None,
              help="Max pages to crawl (overrides config default).")
@click.pass_context
@_handle_errors
def crawl_command(ctx: click.Context, site: str, limit: int | None) -> None:
    """Crawl SITE (alias or URL) and audit every page returned."""
    from a11y_audit.client import CrawlClient

    config = _load_config(ctx)
    target = config.resolve_site(site)
    limit = limit or config.limit

    _verbose(ctx, f"Crawling {target} (limit {limit}) via {config.url}")
    records = CrawlClient(url=config.url, token=config.token).crawl(target, limit=limit)

    audits = _audit(ctx, records)
    _emit_audits(ctx, audits, ctx.obj["format"] or config.format)


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------

@cli.command("convert")
@click.argument("report_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@_handle_errors
def convert_command(ctx: click.Context, report_file: str) -> None:
    """Re-export a JSON audit report (REPORT_FILE) in the chosen --format."""
    from a11y_audit.reports.export import load_json_export

    with open(report_file, encoding="utf-8") as f:
        audits = load_json_export(f.read())

    _verbose(ctx, f"Loaded {len(audits)} page audit(s) from '{report_file}'")
    _emit_audits(ctx, audits, ctx.obj["format"])


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------

@cli.command("stats")
@click.argument("records_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@_handle_errors
def stats_command(ctx: click.Context, records_file: str) -> None:
    """Summary statistics (average, severity counts, score buckets) for RECORDS_FILE."""
    from a11y_audit.reports.summary import build_summary

    audits = _audit(ctx, _read_json(records_file))
    _emit(ctx, json.dumps(build_summary(audits), indent=2, ensure_ascii=False))
