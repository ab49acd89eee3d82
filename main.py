#!/usr/bin/env python3
"""
Stanford Alumni Directory Crawler - Main CLI Interface

Logs into the alumni directory (or reuses a saved session), walks the
search listings and appends every new profile to the output CSV.

Commands:
    crawl           Run the crawler
    test-login      Check that a session or login works, then exit
    setup           Print setup instructions
    save-session    Log in by hand and save the browser session
    check-session   Inspect the saved session file
    clean-csv       Drop invalid and duplicate names from the output CSV
    stats           Print field coverage for the output CSV
    export-excel    Convert the output CSV to a formatted workbook
"""

import argparse
import sys
from typing import List, Optional

from loguru import logger

from config.settings import CrawlerConfig, DELAY_POLICY, OUTPUT_CSV, validate_config
from alumni_crawler.browser import BrowserSession
from alumni_crawler.crawler import AlumniCrawler
from alumni_crawler.csv_cleaner import clean_csv
from alumni_crawler.delay_policy import STEALTH, get_delay_policy
from alumni_crawler.excel_output import export_to_excel
from alumni_crawler.search_strategies import build_custom_strategies, build_search_strategies
from alumni_crawler.session import (
    SessionError,
    check_session,
    save_session_interactively,
    session_exists,
)
from alumni_crawler.statistics import log_summary, summarize_output
from alumni_crawler.utils import setup_logger


SETUP_INSTRUCTIONS = """\
Setup Instructions:

1. Install dependencies:
     pip install -e .
     playwright install chromium

2. Create a .env file (see .env.example) with your credentials:
     STANFORD_USERNAME=your_username
     STANFORD_PASSWORD=your_password

   Or skip credentials and save a browser session instead:
     python main.py save-session

3. Check that authentication works:
     python main.py test-login

4. Start crawling:
     python main.py crawl
     python main.py crawl --name "John Smith" --year 2020
     python main.py crawl --stealth --target 50
     python main.py crawl --resume

5. Inspect the results:
     python main.py stats
     python main.py export-excel
"""


def print_banner():
    """Print application banner."""
    print("=" * 70)
    print(" " * 17 + "STANFORD ALUMNI DIRECTORY CRAWLER")
    print(" " * 16 + "Search + Profile Extraction + CSV Output")
    print("=" * 70)
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='alumni-crawler',
        description='Stanford Alumni Directory Crawler',
    )
    subparsers = parser.add_subparsers(dest='command')

    crawl = subparsers.add_parser('crawl', help='Start crawling alumni data')
    crawl.add_argument('-n', '--name', help='Search by name')
    crawl.add_argument('-y', '--year', help='Filter by graduation year')
    crawl.add_argument('-d', '--degree', help='Filter by degree')
    crawl.add_argument('--headless', action='store_true', default=None, help='Run in headless mode')
    crawl.add_argument('--slow-mo', type=int, help='Slow down operations by N milliseconds')
    crawl.add_argument('--stealth', action='store_true', help='Use slow, capped stealth pacing')
    crawl.add_argument('--target', type=int, help='Stop after N new profiles')
    crawl.add_argument('--resume', action='store_true', help='Skip strategies completed by an interrupted run')
    crawl.add_argument('--no-wait', action='store_true', help='Close the browser without waiting for Enter')

    subparsers.add_parser('test-login', help='Test login or saved session')
    subparsers.add_parser('setup', help='Show setup instructions')
    subparsers.add_parser('save-session', help='Log in manually and save the browser session')
    subparsers.add_parser('check-session', help='Inspect the saved session file')

    clean = subparsers.add_parser('clean-csv', help='Remove invalid and duplicate names from the output CSV')
    clean.add_argument('csv', nargs='?', default=str(OUTPUT_CSV), help='CSV file to clean')

    stats = subparsers.add_parser('stats', help='Show field coverage of the output CSV')
    stats.add_argument('csv', nargs='?', default=str(OUTPUT_CSV), help='CSV file to summarize')

    export = subparsers.add_parser('export-excel', help='Export the output CSV to Excel')
    export.add_argument('csv', nargs='?', default=str(OUTPUT_CSV), help='CSV file to export')
    export.add_argument('-o', '--output', help='Workbook path (default: CSV path with .xlsx)')

    return parser


# =============================================================================
# Commands
# =============================================================================

def cmd_crawl(args) -> None:
    config = CrawlerConfig().with_overrides(
        headless=args.headless,
        slow_mo=args.slow_mo,
        target_profiles=args.target,
    )
    policy = STEALTH if args.stealth else get_delay_policy(DELAY_POLICY)

    strategies = build_custom_strategies(args.name, args.year, args.degree) or build_search_strategies()
    logger.info(f"Search strategies: {', '.join(s.label for s in strategies)}")

    if policy.max_profiles_per_session is not None:
        logger.info(f"{policy.name.capitalize()} mode: at most {policy.max_profiles_per_session} profiles this session")

    crawler = AlumniCrawler(
        config,
        policy=policy,
        resume=args.resume,
        wait_before_close=not args.no_wait,
    )
    crawler.run(strategies)


def cmd_test_login(args) -> None:
    crawler = AlumniCrawler(CrawlerConfig(), wait_before_close=False)
    try:
        crawler.initialize()
        crawler.ensure_session()
        logger.success("Login test successful!")
    finally:
        crawler.close()


def cmd_setup(args) -> None:
    print(SETUP_INSTRUCTIONS)


def cmd_save_session(args) -> None:
    config = CrawlerConfig().with_overrides(headless=False)
    if session_exists(config.session_file):
        logger.info(f"Existing session at {config.session_file} is kept until the new one is saved")

    # Fresh context so the login page is shown
    with BrowserSession(config, load_session=False) as browser:
        path = save_session_interactively(browser, config)
    print(f"\nSession saved to {path}")
    print("You can now run: python main.py crawl")


def cmd_check_session(args) -> None:
    config = CrawlerConfig()
    if not session_exists(config.session_file):
        logger.warning(f"No saved session at {config.session_file}; run 'save-session' first")
        return

    report = check_session(config.session_file, config.directory_domain)

    print(f"Session file: {report.path}")
    print(f"Cookies: {report.cookie_count}")
    print("Cookie domains:")
    for domain in report.domains:
        print(f"  - {domain}")
    print()

    if report.has_target_domain:
        logger.success(f"Session has cookies for {config.directory_domain} and is likely valid")
    else:
        logger.warning(f"Session has no cookies for {config.directory_domain}; run 'save-session'")


def cmd_clean_csv(args) -> None:
    kept, removed = clean_csv(args.csv)
    print(f"Kept {kept} rows, removed {removed}")


def cmd_stats(args) -> None:
    log_summary(summarize_output(args.csv))


def cmd_export_excel(args) -> None:
    path = export_to_excel(args.csv, args.output)
    print(f"Workbook saved to {path}")


COMMANDS = {
    'crawl': cmd_crawl,
    'test-login': cmd_test_login,
    'setup': cmd_setup,
    'save-session': cmd_save_session,
    'check-session': cmd_check_session,
    'clean-csv': cmd_clean_csv,
    'stats': cmd_stats,
    'export-excel': cmd_export_excel,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logger("main")

    if args.command in ('crawl', 'test-login'):
        print_banner()
        validate_config()
        print()

    try:
        COMMANDS[args.command](args)
        return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user")
        logger.info("Operation cancelled by user (KeyboardInterrupt)")
        return 1
    except SessionError as e:
        logger.error(f"Authentication failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        print(f"\nERROR: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
