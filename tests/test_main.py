"""
Tests for the command-line interface.
"""

import pandas as pd
import pytest

import main as cli
from alumni_crawler.models import AlumniRecord
from alumni_crawler.session import SessionError


class RecordingCrawler:
    """Stands in for AlumniCrawler and remembers how it was built and run."""
    instances = []

    def __init__(self, config, policy=None, resume=False, wait_before_close=True, **kwargs):
        self.config = config
        self.policy = policy
        self.resume = resume
        self.wait_before_close = wait_before_close
        self.strategies = None
        RecordingCrawler.instances.append(self)

    def run(self, strategies):
        self.strategies = strategies


@pytest.fixture(autouse=True)
def console_only_logging(monkeypatch):
    """Keep CLI runs from adding a file sink under the real logs directory."""
    monkeypatch.setattr(cli, 'setup_logger', lambda name: None)


@pytest.fixture
def isolated_config(monkeypatch, crawler_config):
    """Commands that build CrawlerConfig() get the temp-dir config instead."""
    monkeypatch.setattr(cli, 'CrawlerConfig', lambda: crawler_config)
    return crawler_config


@pytest.fixture
def recording_crawler(monkeypatch):
    RecordingCrawler.instances = []
    monkeypatch.setattr(cli, 'AlumniCrawler', RecordingCrawler)
    return RecordingCrawler


@pytest.fixture
def output_csv(tmp_path):
    path = tmp_path / 'alumni.csv'
    pd.DataFrame([AlumniRecord(name=name).to_row()
                  for name in ['Jane Doe', 'jane doe', 'Privacy Policy']]).to_csv(path, index=False)
    return path


class TestParser:
    """Test argument parsing."""

    def test_crawl_flags(self):
        args = cli.build_parser().parse_args(
            ['crawl', '-n', 'John Smith', '-y', '2020', '--stealth', '--target', '25', '--resume', '--no-wait'])

        assert args.command == 'crawl'
        assert args.name == 'John Smith'
        assert args.year == '2020'
        assert args.stealth and args.resume and args.no_wait
        assert args.target == 25
        assert args.headless is None

    def test_csv_defaults_to_output(self):
        args = cli.build_parser().parse_args(['stats'])
        assert args.csv == str(cli.OUTPUT_CSV)


class TestMain:
    """Test command dispatch and exit codes."""

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert 'crawl' in capsys.readouterr().out

    def test_setup(self, capsys):
        assert cli.main(['setup']) == 0
        assert 'save-session' in capsys.readouterr().out

    def test_clean_csv(self, output_csv, capsys):
        assert cli.main(['clean-csv', str(output_csv)]) == 0
        assert 'Kept 1 rows, removed 2' in capsys.readouterr().out

    def test_clean_missing_csv_fails(self, tmp_path):
        assert cli.main(['clean-csv', str(tmp_path / 'missing.csv')]) == 1

    def test_stats(self, output_csv):
        assert cli.main(['stats', str(output_csv)]) == 0

    def test_export_excel(self, output_csv, tmp_path):
        target = tmp_path / 'out.xlsx'
        assert cli.main(['export-excel', str(output_csv), '-o', str(target)]) == 0
        assert target.exists()

    def test_session_error_exit_code(self, monkeypatch):
        def expired(args):
            raise SessionError('Session expired')

        monkeypatch.setitem(cli.COMMANDS, 'check-session', expired)
        assert cli.main(['check-session']) == 1

    def test_interrupt_exit_code(self, monkeypatch):
        def interrupted(args):
            raise KeyboardInterrupt

        monkeypatch.setitem(cli.COMMANDS, 'stats', interrupted)
        assert cli.main(['stats']) == 1


class TestCrawlCommand:
    """Test how crawl flags reach the crawler."""

    def test_defaults(self, recording_crawler):
        assert cli.main(['crawl']) == 0

        crawler = recording_crawler.instances[0]
        assert len(crawler.strategies) > 1
        assert crawler.wait_before_close
        assert not crawler.resume

    def test_custom_search_and_stealth(self, recording_crawler):
        assert cli.main(['crawl', '-n', 'John Smith', '-y', '2020', '--stealth',
                         '--target', '25', '--headless', '--no-wait', '--resume']) == 0

        crawler = recording_crawler.instances[0]
        assert [s.term for s in crawler.strategies] == ['John Smith 2020']
        assert crawler.policy.name == 'stealth'
        assert crawler.config.target_profiles == 25
        assert crawler.config.headless is True
        assert not crawler.wait_before_close
        assert crawler.resume


class FakeBrowserSession:
    """BrowserSession stand-in that records how it was opened."""
    opened_with = []

    def __init__(self, config, load_session=True):
        FakeBrowserSession.opened_with.append(load_session)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


class TestSessionCommands:
    """Test save-session and check-session."""

    def test_aborted_save_session_keeps_old_file(self, isolated_config, monkeypatch):
        session_file = isolated_config.session_file
        session_file.write_text('{"cookies": [], "origins": []}')
        FakeBrowserSession.opened_with = []

        def aborted(browser, config):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, 'BrowserSession', FakeBrowserSession)
        monkeypatch.setattr(cli, 'save_session_interactively', aborted)

        assert cli.main(['save-session']) == 1
        assert session_file.exists()
        assert FakeBrowserSession.opened_with == [False]

    def test_check_session_without_file(self, isolated_config, capsys):
        assert cli.main(['check-session']) == 0
        assert 'Cookies' not in capsys.readouterr().out

    def test_check_session_report(self, isolated_config, capsys):
        isolated_config.session_file.write_text(
            '{"cookies": [{"name": "sid", "value": "1", "domain": ".alumnidirectory.stanford.edu"}], "origins": []}')

        assert cli.main(['check-session']) == 0
        assert '.alumnidirectory.stanford.edu' in capsys.readouterr().out
