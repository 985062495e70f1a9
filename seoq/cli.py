#!/usr/bin/env python3
"""
Точка входа seoq: SEO-анализ сайтов из командной строки.

Команды:
  analyze      Показать URL из sitemap.xml (с учётом sitemap index)
  issues       Обойти sitemap и найти SEO-проблемы на каждой странице
  page         Найти SEO-проблемы на одной странице
  keywords     Извлечь ключевые слова страницы
  competitors  Найти до 5 конкурентов сайта
  compare      Сравнить сайт с конкурентом и получить рекомендации
  config       Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: ./seoq.yaml, если есть)
  --fetch-mode MODE   Загрузка страниц: browser (playwright) или http (aiohttp)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию seoq

Пример:
  seoq issues https://example.com --limit 10 --concurrency 3 --json issues.json
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Coroutine, List, Optional

import click
from dotenv import load_dotenv
from pydantic import HttpUrl, TypeAdapter, ValidationError

from seoq import __version__
from seoq.analysis.analyzer import analyze_pages
from seoq.analysis.compare import compare_sites, parse_keywords
from seoq.analysis.competitors import analyze_competitors
from seoq.analysis.extractor import OpenAIExtractor
from seoq.analysis.keywords import analyze_keywords
from seoq.analysis.models import PageAnalysisResult
from seoq.config import (
    LIMIT_MAX,
    LIMIT_MIN,
    MAX_ISSUES_MAX,
    MAX_ISSUES_MIN,
    SeoqConfig,
    load_config,
)
from seoq.crawler.fetcher import open_fetcher
from seoq.crawler.sitemap import analyze_sitemap
from seoq.errors import SeoqError
from seoq.logger import DEFAULT_FORMAT, configure, logger
from seoq.report import console
from seoq.report.html_report import render_html
from seoq.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])

_URL_ADAPTER = TypeAdapter(HttpUrl)


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _format_validation_error(exc: ValidationError, field: str) -> str:
    messages = []
    for err in exc.errors():
        path = ".".join(str(p) for p in err["loc"]) or field
        messages.append(f"{path}: {err['msg']}")
    return ", ".join(messages)


def validate_url(url: str, field: str = "url") -> str:
    try:
        _URL_ADAPTER.validate_python(url)
    except ValidationError as exc:
        print_error(f"Validation Error: {_format_validation_error(exc, field)}")
    return url


def check_range(name: str, value: int, low: int, high: Optional[int] = None) -> int:
    if value < low or (high is not None and value > high):
        bounds = f"between {low} and {high}" if high is not None else f">= {low}"
        print_error(f"Validation Error: {name}: must be {bounds}, got {value}")
    return value


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Запускает корутину; ошибки печатаются красным и дают код выхода 1."""
    try:
        return asyncio.run(coro)
    except SeoqError as e:
        logger.error("%s: %s", type(e).__name__, e)
        print_error(f'Error: {e}')
    except ValidationError as e:
        print_error(f'Validation Error: {_format_validation_error(e, "value")}')
    except Exception as e:
        logger.exception("Unexpected error")
        print_error(f'Error: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='seoq, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--fetch-mode', 'fetch_mode',
    default=None,
    type=click.Choice(['browser', 'http']),
    help='Способ загрузки страниц (override fetch_mode)'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, fetch_mode, log_level, log_file, log_format):
    """seoq: SEO-анализ сайтов с помощью языковой модели."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    load_dotenv()
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    if fetch_mode is not None:
        cfg = cfg.model_copy(update={'fetch_mode': fetch_mode})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


# --------------------------------------------------------------------------- #
# Sitemap                                                                     #
# --------------------------------------------------------------------------- #


@cli.command('analyze', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--sitemap', '-s', 'sitemap_path', default=None,
              help='Путь к sitemap (по умолчанию /sitemap.xml)')
@click.option('--limit', '-l', 'limit', type=int, default=None,
              help=f'Макс. число URL ({LIMIT_MIN}-{LIMIT_MAX}, по умолчанию из конфига: 25)')
@click.pass_context
def analyze(ctx, url, sitemap_path, limit):
    """Показать URL из sitemap.xml сайта."""
    cfg: SeoqConfig = ctx.obj['config']
    validate_url(url)
    limit = check_range('limit', cfg.sitemap_limit if limit is None else limit, LIMIT_MIN, LIMIT_MAX)

    entries = run_async(analyze_sitemap(url, sitemap_path, limit, config=cfg))
    if entries:
        click.echo(console.format_sitemap_entries(entries))
    else:
        click.secho('No URLs found in sitemap.', fg='yellow')


# --------------------------------------------------------------------------- #
# Issues                                                                      #
# --------------------------------------------------------------------------- #


def _progress(current: int, total: int, url: str) -> None:
    click.echo(f'[{current}/{total}] Analyzing {url}...', err=True)


def _complete(url: str, issue_count: int) -> None:
    click.echo(
        click.style('✔ ', fg='green') + f'{url}: {issue_count} issue{"s" if issue_count != 1 else ""}',
        err=True,
    )


async def _crawl_and_analyze(
    cfg: SeoqConfig,
    url: str,
    sitemap_path: Optional[str],
    limit: int,
    concurrency: int,
    max_issues: int,
) -> List[PageAnalysisResult]:
    entries = await analyze_sitemap(url, sitemap_path, limit, config=cfg)
    if not entries:
        return []
    return await analyze_pages(
        [entry.url for entry in entries],
        concurrency=concurrency,
        max_issues=max_issues,
        on_progress=_progress,
        on_complete=_complete,
        config=cfg,
    )


def _emit_results(results: List[PageAnalysisResult], json_output: Optional[Path], html_output: Optional[Path]) -> None:
    for result in results:
        click.echo()
        click.echo(console.format_page_result(result))
    click.echo()

    if json_output:
        try:
            click.echo(f'JSON report: {render_json(results, json_output)}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
    if html_output:
        try:
            click.echo(f'HTML report: {render_html(results, html_output)}')
        except OSError as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


_json_option = click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
_html_option = click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
_max_issues_option = click.option(
    '--max-issues', '-m', 'max_issues', type=int, default=None,
    help=f'Макс. число issues на страницу ({MAX_ISSUES_MIN}-{MAX_ISSUES_MAX}, по умолчанию 3)'
)


@cli.command('issues', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--sitemap', '-s', 'sitemap_path', default=None,
              help='Путь к sitemap (по умолчанию /sitemap.xml)')
@click.option('--limit', '-l', 'limit', type=int, default=None,
              help=f'Макс. число страниц ({LIMIT_MIN}-{LIMIT_MAX})')
@click.option('--concurrency', '-n', 'concurrency', type=int, default=None,
              help='Число страниц, анализируемых одновременно (по умолчанию 1)')
@_max_issues_option
@_json_option
@_html_option
@click.pass_context
def issues(ctx, url, sitemap_path, limit, concurrency, max_issues, json_output, html_output):
    """Обойти sitemap и найти SEO-проблемы на каждой странице."""
    cfg: SeoqConfig = ctx.obj['config']
    validate_url(url)
    limit = check_range('limit', cfg.sitemap_limit if limit is None else limit, LIMIT_MIN, LIMIT_MAX)
    concurrency = check_range('concurrency', cfg.concurrency if concurrency is None else concurrency, 1)
    max_issues = check_range(
        'max-issues', cfg.max_issues if max_issues is None else max_issues, MAX_ISSUES_MIN, MAX_ISSUES_MAX
    )

    results = run_async(_crawl_and_analyze(cfg, url, sitemap_path, limit, concurrency, max_issues))
    if not results:
        click.secho('No URLs found in sitemap.', fg='yellow')
        return
    total = sum(len(r.issues) for r in results)
    click.secho(f'Analysis complete. Found {total} issue{"s" if total != 1 else ""} '
                f'on {len(results)} page{"s" if len(results) != 1 else ""}.', fg='green')
    _emit_results(results, json_output, html_output)


@cli.command('page', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@_max_issues_option
@_json_option
@_html_option
@click.pass_context
def page(ctx, url, max_issues, json_output, html_output):
    """Найти SEO-проблемы на одной странице."""
    cfg: SeoqConfig = ctx.obj['config']
    validate_url(url)
    max_issues = check_range(
        'max-issues', cfg.max_issues if max_issues is None else max_issues, MAX_ISSUES_MIN, MAX_ISSUES_MAX
    )
    results = run_async(analyze_pages([url], max_issues=max_issues, on_progress=_progress, config=cfg))
    _emit_results(results, json_output, html_output)


# --------------------------------------------------------------------------- #
# Keywords, competitors, compare                                              #
# --------------------------------------------------------------------------- #


async def _with_fetcher(cfg: SeoqConfig, func, *args):
    async with open_fetcher(cfg) as fetcher:
        return await func(*args, fetcher=fetcher, extractor=OpenAIExtractor(cfg))


@cli.command('keywords', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.pass_context
def keywords(ctx, url):
    """Извлечь до 10 ключевых слов страницы."""
    cfg: SeoqConfig = ctx.obj['config']
    validate_url(url)
    click.echo(f'Extracting keywords from {click.style(url, bold=True)}...', err=True)
    result = run_async(_with_fetcher(cfg, analyze_keywords, url))
    click.secho(f'Keyword extraction complete for {url}.', fg='green')
    click.echo()
    click.echo(console.format_keywords(result))


@cli.command('competitors', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.pass_context
def competitors(ctx, url):
    """Найти до 5 наиболее релевантных конкурентов сайта."""
    cfg: SeoqConfig = ctx.obj['config']
    validate_url(url)
    click.echo(f'Finding competitors for {click.style(url, bold=True)}...', err=True)
    result = run_async(_with_fetcher(cfg, analyze_competitors, url))
    click.secho(f'Competitor analysis complete for {url}.', fg='green')
    click.echo()
    click.echo(console.format_competitors(result))


@cli.command('compare', context_settings=CONTEXT_SETTINGS)
@click.argument('main_site')
@click.argument('secondary_site')
@click.option('--keywords', '-k', 'keywords_raw', default=None,
              help='Ключевые слова через запятую, на которых сфокусировать анализ')
@click.pass_context
def compare(ctx, main_site, secondary_site, keywords_raw):
    """Сравнить сайт (MAIN_SITE) с конкурентом (SECONDARY_SITE)."""
    cfg: SeoqConfig = ctx.obj['config']
    validate_url(main_site, 'mainUrl')
    validate_url(secondary_site, 'secondaryUrl')
    click.echo(f'Comparing {click.style(main_site, bold=True)} with {click.style(secondary_site, bold=True)}...',
               err=True)
    result = run_async(_with_fetcher(cfg, compare_sites, main_site, secondary_site, parse_keywords(keywords_raw)))
    count = len(result.insights)
    click.secho(f'Comparison complete. Found {count} insight{"s" if count != 1 else ""}.', fg='green')
    click.echo()
    click.echo(console.format_insights(result))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON (ключ API скрыт)."""
    cfg: SeoqConfig = ctx.obj['config']
    click.echo(json.dumps(cfg.masked(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
