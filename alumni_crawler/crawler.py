"""
Alumni Directory Crawler

Drives the whole run: browser and session setup, then for each search
strategy {search, list, visit profile, extract, dedup, write row} until the
listing runs out or a profile cap is reached.

Pacing comes from a DelayPolicy value, so standard and stealth crawls are
the same class with different policies.

Usage:
    crawler = AlumniCrawler(config, policy=STEALTH)
    crawler.run(build_search_strategies())
"""

import time
from typing import Callable, List, Optional

from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeoutError

from config.settings import CrawlerConfig
from alumni_crawler.browser import BrowserSession
from alumni_crawler.card_reader import ProfileVisitor, read_card, read_card_name
from alumni_crawler.deduplication import is_valid_alumni_name
from alumni_crawler.delay_policy import DelayPolicy, STANDARD
from alumni_crawler.diagnostics import log_page_state
from alumni_crawler.models import AlumniRecord
from alumni_crawler.paginator import (
    MORE_CARDS,
    find_card_selector,
    get_cards,
    go_to_next_page,
    scroll_to_load_content,
)
from alumni_crawler.profile_extractor import extract_profile
from alumni_crawler.search_strategies import SearchStrategy, perform_search
from alumni_crawler.session import (
    SESSION_INSTRUCTIONS,
    SessionError,
    SessionExpiredError,
    is_auth_redirect,
    login,
)
from alumni_crawler.statistics import log_summary, summarize_output
from alumni_crawler.streaming_writer import StreamingAlumniWriter
from alumni_crawler.utils import wait_for_enter


class AlumniCrawler:
    """
    Sequential crawler for the alumni directory.

    One listing tab, one profile tab, one output file. Every accepted
    record is written before the next profile is opened.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        policy: DelayPolicy = STANDARD,
        writer: Optional[StreamingAlumniWriter] = None,
        browser: Optional[BrowserSession] = None,
        input_fn: Callable[[str], str] = input,
        resume: bool = False,
        wait_before_close: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            config: Crawler configuration
            policy: Pacing policy (STANDARD or STEALTH)
            writer: Output writer (default: one for config.output_csv)
            browser: Browser session (default: a new BrowserSession)
            input_fn: Operator prompt function
            resume: Skip strategies completed by an interrupted earlier run
            wait_before_close: Hold the browser open until Enter at the end
            sleep: Sleep function used for policy delays
        """
        self.config = config
        self.policy = policy
        self.writer = writer or StreamingAlumniWriter(config.output_csv, config.resume_state_file)
        self.browser = browser or BrowserSession(config)
        self.input_fn = input_fn
        self.resume = resume
        self.wait_before_close = wait_before_close
        self.sleep = sleep

        self.page: Optional[Page] = None
        self.visitor: Optional[ProfileVisitor] = None
        self.seen = self.writer.load_seen_names()

        self.saved_this_run = 0
        self.profiles_visited = 0
        self.skipped_duplicates = 0
        self.skipped_invalid = 0
        self.failed_profiles = 0

    # =========================================================================
    # Setup / teardown
    # =========================================================================

    def initialize(self) -> None:
        """Start the browser and open the listing tab."""
        if self.page is not None:
            return
        self.browser.start()
        self.page = self.browser.new_page()
        self.visitor = ProfileVisitor(self.browser, timeout=self.config.timeout)

    def ensure_session(self) -> None:
        """
        Make sure the listing tab is authenticated.

        With a saved session the directory is opened and checked for an
        auth redirect; otherwise the credential login runs and the new
        session is saved.

        Raises:
            SessionExpiredError: Saved session rejected by the site
            LoginError: Credential login failed
        """
        if self.browser.loaded_session:
            logger.info("Using saved session...")
            self.page.goto(self.config.directory_url, wait_until='networkidle', timeout=self.config.timeout)

            if is_auth_redirect(self.page.url):
                raise SessionExpiredError(
                    "Session expired or invalid - redirected to login page.\n" + SESSION_INSTRUCTIONS
                )
            logger.success("Saved session is valid")
            return

        login(self.page, self.config, typing_delay_ms=self.policy.typing_delay_ms)
        self.browser.save_storage_state(self.config.session_file)

    def close(self) -> None:
        if self.visitor is not None:
            self.visitor.close()
            self.visitor = None
        self.browser.close()
        self.page = None

    # =========================================================================
    # Per-record pipeline
    # =========================================================================

    def accept_record(self, record: AlumniRecord) -> bool:
        """
        Filter, dedup and write one record.

        Returns:
            True if the record was written
        """
        if not is_valid_alumni_name(record.name):
            logger.debug(f"Skipping invalid name: {record.name!r}")
            self.skipped_invalid += 1
            return False

        if record.name in self.seen:
            logger.info(f"Skipping duplicate: {record.name}")
            self.skipped_duplicates += 1
            return False

        self.writer.write_record(record)
        self.seen.add(record.name)
        self.saved_this_run += 1
        return True

    def process_card(self, page: Page, selector: str, index: int) -> Optional[AlumniRecord]:
        """
        Read the index-th card on the listing and extract its profile.

        Cards are re-queried first since earlier profile visits may have
        re-rendered the listing.

        Returns:
            Extracted record, or None when the card was skipped or failed
        """
        try:
            cards = get_cards(page, selector)
            if index >= len(cards):
                logger.debug(f"Card {index + 1} no longer on the page")
                return None
            card = cards[index]

            name = read_card_name(card)
            if name and name in self.seen:
                logger.debug(f"Already saved {name}, not opening profile")
                self.skipped_duplicates += 1
                return None

            summary = read_card(card, page, self.config.directory_url)
            self.profiles_visited += 1
            html = self.visitor.fetch_html(summary, page, card)
            return extract_profile(html, card=summary, source_url=summary.profile_url)

        except Exception as e:
            logger.warning(f"Failed to extract card {index + 1}: {e}")
            self.failed_profiles += 1
            return None

    # =========================================================================
    # Strategy loop
    # =========================================================================

    def stop_reason(self) -> Optional[str]:
        """Why the whole run should stop now, or None to keep going."""
        if self.saved_this_run >= self.config.target_profiles:
            return f"reached target of {self.config.target_profiles} profiles"
        if self.policy.session_cap_reached(self.saved_this_run):
            return f"reached {self.policy.name} session cap of {self.policy.max_profiles_per_session} profiles"
        return None

    def locate_cards(self, page: Page) -> Optional[str]:
        """Card selector for the current listing, trying up to max_retries passes."""
        for attempt in range(1, self.config.max_retries + 1):
            selector = find_card_selector(page, timeout=self.config.selector_timeout)
            if selector:
                return selector
            logger.warning(f"No card selector matched (pass {attempt}/{self.config.max_retries})")
            if attempt < self.config.max_retries:
                page.wait_for_timeout(2000)
        return None

    def crawl_strategy(self, strategy: SearchStrategy) -> int:
        """
        Run one search strategy to exhaustion or to a cap.

        The strategy is recorded as completed when its listing ran out or
        it hit the per-strategy limit; a global stop leaves it open for
        --resume.

        Returns:
            Number of new records written for this strategy
        """
        page = self.page
        if not perform_search(page, strategy, self.config, self.policy.typing_delay_ms):
            return 0

        selector = self.locate_cards(page)
        if selector is None:
            logger.error(f"No alumni cards found for {strategy.label}")
            log_page_state(page)
            return 0

        saved = 0
        page_number = 1
        first_index = 0
        while True:
            logger.info(f"Processing page {page_number} of {strategy.label}...")
            scroll_to_load_content(page, gentle=self.policy.gentle_scroll)

            cards = get_cards(page, selector)
            logger.info(f"Found {len(cards)} alumni cards on page {page_number}")

            for index in range(first_index, len(cards)):
                if self.stop_reason() or saved >= self.config.per_strategy_limit:
                    break

                visited_before = self.profiles_visited
                record = self.process_card(page, selector, index)
                if record is not None and self.accept_record(record):
                    saved += 1
                    logger.success(f"Extracted {self.saved_this_run}/{self.config.target_profiles}: {record.name}")

                if self.profiles_visited > visited_before:
                    self.policy.pause(self.policy.profile_delay, 'between profiles', sleep=self.sleep)

            reason = self.stop_reason()
            if reason:
                logger.info(f"Stopping {strategy.label}: {reason}")
                return saved

            if saved >= self.config.per_strategy_limit:
                logger.info(f"Reached per-strategy limit of {self.config.per_strategy_limit} for {strategy.label}")
                break

            self.policy.pause(self.policy.page_delay, 'before next page', sleep=self.sleep)
            advanced = go_to_next_page(page)
            if not advanced:
                logger.info(f"No more pages for {strategy.label}")
                break
            # Scrolling appends below the cards already handled
            first_index = len(cards) if advanced == MORE_CARDS else 0

            try:
                page.wait_for_selector(selector, timeout=self.config.selector_timeout)
            except PlaywrightTimeoutError:
                logger.info(f"Timed out waiting for page {page_number + 1} of {strategy.label}")
                break
            page_number += 1

        self.writer.mark_strategy_completed(strategy.label)
        return saved

    def crawl(self, strategies: List[SearchStrategy]) -> int:
        """
        Run strategies in order until they run out or the run hits a cap.

        Returns:
            Number of records written this run
        """
        if self.resume:
            logger.info(f"Resuming: {len(self.writer.strategies_completed)} strategies already completed")
        else:
            self.writer.reset_resume_state()

        logger.info(f"Target: {self.config.target_profiles} profiles across {len(strategies)} strategies "
                    f"({self.policy.name} pacing, {len(self.seen)} names already saved)")

        finished_all = True
        ran_any = False
        for strategy in strategies:
            reason = self.stop_reason()
            if reason:
                logger.info(f"Stopping crawl: {reason}")
                finished_all = False
                break

            if self.resume and self.writer.is_strategy_completed(strategy.label):
                logger.info(f"Skipping completed strategy: {strategy.label}")
                continue

            if ran_any:
                self.policy.pause(self.policy.strategy_delay, 'between strategies', sleep=self.sleep)
            ran_any = True

            saved = self.crawl_strategy(strategy)
            logger.info(f"Strategy {strategy.label} added {saved} profiles (run total: {self.saved_this_run})")

        if finished_all and self.stop_reason() is None:
            self.writer.finalize()

        self.log_summary()
        return self.saved_this_run

    def log_summary(self) -> None:
        logger.info("=" * 60)
        logger.info(f"Final results: {self.saved_this_run} new profiles saved to {self.writer.output_file}")
        logger.info(f"Profiles visited: {self.profiles_visited}, duplicates skipped: {self.skipped_duplicates}, "
                    f"invalid names skipped: {self.skipped_invalid}, failures: {self.failed_profiles}")
        writer_stats = self.writer.get_stats()
        logger.info(f"Output file: {writer_stats['output_file']} ({writer_stats['output_size_kb']:.1f} KB), "
                    f"strategies completed: {writer_stats['strategies_completed']}")
        log_summary(summarize_output(self.writer.output_file))
        logger.info("=" * 60)

    # =========================================================================
    # Top level
    # =========================================================================

    def run(self, strategies: List[SearchStrategy]) -> int:
        """
        Full crawl with setup, error handling and teardown.

        Returns:
            Number of records written this run

        Raises:
            SessionError: Authentication failed (fatal)
            Exception: Any other failure, after diagnostics and the error pause
        """
        try:
            self.initialize()
            self.ensure_session()
            return self.crawl(strategies)

        except SessionError as e:
            logger.error(str(e))
            if not isinstance(e, SessionExpiredError):
                logger.info(SESSION_INSTRUCTIONS)
            raise

        except KeyboardInterrupt:
            logger.warning(f"Interrupted, {self.saved_this_run} profiles saved this run")
            self.wait_before_close = False
            raise

        except Exception as e:
            logger.exception(f"Crawl failed: {e}")
            log_page_state(self.page)
            self.policy.pause(self.policy.error_pause, 'browser stays open for inspection', sleep=self.sleep)
            raise

        finally:
            try:
                if self.wait_before_close:
                    wait_for_enter("\nBrowser will stay open for inspection. Press Enter to close...",
                                   input_fn=self.input_fn)
            finally:
                self.close()
