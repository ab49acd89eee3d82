"""
Configuration settings for the Alumni Directory Crawler.

Loads environment variables and provides configuration constants
with sensible defaults and validation.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_FILE = BASE_DIR / '.env'

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
    logger.info(f"Loaded configuration from {ENV_FILE}")
else:
    logger.warning(f".env file not found at {ENV_FILE}. Using defaults.")

# =============================================================================
# Typed environment readers
# =============================================================================

def _get_float(key: str, default: float) -> float:
    """Get float value from environment variable."""
    try:
        return float(os.getenv(key, default))
    except ValueError:
        logger.warning(f"Invalid value for {key}, using default: {default}")
        return default

def _get_int(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    try:
        return int(os.getenv(key, default))
    except ValueError:
        logger.warning(f"Invalid value for {key}, using default: {default}")
        return default

def _get_bool(key: str, default: bool) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on')

def _get_path(key: str, default: Path) -> Path:
    """Get path from environment variable, relative paths resolve against BASE_DIR."""
    raw = os.getenv(key, '').strip()
    if not raw:
        return default
    path = Path(raw).expanduser()
    return path if path.is_absolute() else BASE_DIR / path

# =============================================================================
# Target Directory & Credentials
# =============================================================================

DIRECTORY_URL = os.getenv('DIRECTORY_URL', 'https://alumnidirectory.stanford.edu/').strip()
DIRECTORY_DOMAIN = 'alumnidirectory.stanford.edu'

STANFORD_USERNAME = os.getenv('STANFORD_USERNAME', '').strip() or None
STANFORD_PASSWORD = os.getenv('STANFORD_PASSWORD', '').strip() or None

CREDENTIALS_AVAILABLE = STANFORD_USERNAME is not None and STANFORD_PASSWORD is not None

# URL fragments that mean we were bounced to the identity provider
AUTH_URL_MARKERS = ['/auth', '/login', '/signin', 'pass.stanford.edu']

# =============================================================================
# Directory Paths
# =============================================================================

OUTPUT_DIR = _get_path('OUTPUT_DIR', BASE_DIR / 'output')
LOGS_DIR = _get_path('LOGS_DIR', BASE_DIR / 'logs')

CSV_FILENAME = os.getenv('CSV_FILENAME', 'stanford_alumni_data.csv').strip()
OUTPUT_CSV = OUTPUT_DIR / CSV_FILENAME
RESUME_STATE_FILE = OUTPUT_DIR / 'resume_state.json'
SESSION_FILE = _get_path('SESSION_FILE', BASE_DIR / 'auth-session.json')

# Create directories if they don't exist
for directory in [OUTPUT_DIR, LOGS_DIR]:
    directory.mkdir(parents=True, exist_ok=True)

# =============================================================================
# Browser Configuration
# =============================================================================

HEADLESS = _get_bool('HEADLESS', False)
SLOW_MO = _get_int('SLOW_MO', 1000)  # milliseconds
TIMEOUT = _get_int('TIMEOUT', 90000)  # milliseconds
SELECTOR_TIMEOUT = _get_int('SELECTOR_TIMEOUT', 5000)  # milliseconds
MAX_RETRIES = _get_int('MAX_RETRIES', 3)

USE_RANDOM_USER_AGENT = _get_bool('USE_RANDOM_USER_AGENT', False)
DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)
VIEWPORT = {'width': 1920, 'height': 1080}

# =============================================================================
# Crawl Limits
# =============================================================================

TARGET_PROFILES = _get_int('TARGET_PROFILES', 1000)
PER_STRATEGY_LIMIT = _get_int('PER_STRATEGY_LIMIT', 1000)
DELAY_POLICY = os.getenv('DELAY_POLICY', 'standard').strip().lower()

# =============================================================================
# Logging Configuration
# =============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_MAX_SIZE = _get_int('LOG_MAX_SIZE', 10) * 1024 * 1024  # Convert MB to bytes
LOG_BACKUP_COUNT = _get_int('LOG_BACKUP_COUNT', 5)


# =============================================================================
# Runtime snapshot
# =============================================================================

@dataclass(frozen=True)
class CrawlerConfig:
    """
    Snapshot of the settings a crawl needs.

    CLI flags override fields with ``with_overrides`` instead of mutating
    the process environment.
    """
    directory_url: str = DIRECTORY_URL
    directory_domain: str = DIRECTORY_DOMAIN
    username: Optional[str] = STANFORD_USERNAME
    password: Optional[str] = STANFORD_PASSWORD
    headless: bool = HEADLESS
    slow_mo: int = SLOW_MO
    timeout: int = TIMEOUT
    selector_timeout: int = SELECTOR_TIMEOUT
    max_retries: int = MAX_RETRIES
    output_csv: Path = OUTPUT_CSV
    resume_state_file: Path = RESUME_STATE_FILE
    session_file: Path = SESSION_FILE
    target_profiles: int = TARGET_PROFILES
    per_strategy_limit: int = PER_STRATEGY_LIMIT
    use_random_user_agent: bool = USE_RANDOM_USER_AGENT

    def with_overrides(self, **overrides) -> 'CrawlerConfig':
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


# =============================================================================
# Validation & Reporting
# =============================================================================

def validate_config():
    """Validate configuration and log status."""
    logger.info("=" * 70)
    logger.info("Alumni Directory Crawler - Configuration Status")
    logger.info("=" * 70)

    logger.info(f"Directory:           {DIRECTORY_URL}")
    logger.info(f"Credentials:         {'✓ Configured' if CREDENTIALS_AVAILABLE else '✗ Missing (saved session required)'}")
    logger.info(f"Saved session:       {'✓ ' + str(SESSION_FILE) if SESSION_FILE.exists() else '✗ None'}")

    # Browser settings
    logger.info(f"\nBrowser Settings:")
    logger.info(f"  Headless:          {HEADLESS}")
    logger.info(f"  Slow Motion:       {SLOW_MO}ms")
    logger.info(f"  Timeout:           {TIMEOUT}ms")
    logger.info(f"  Max Retries:       {MAX_RETRIES}")

    # Crawl settings
    logger.info(f"\nCrawl Settings:")
    logger.info(f"  Target Profiles:   {TARGET_PROFILES}")
    logger.info(f"  Per Strategy:      {PER_STRATEGY_LIMIT}")
    logger.info(f"  Delay Policy:      {DELAY_POLICY}")

    # Directories
    logger.info(f"\nDirectories:")
    logger.info(f"  Output: {OUTPUT_CSV}")
    logger.info(f"  Logs:   {LOGS_DIR}")

    logger.info("=" * 70)

    if not CREDENTIALS_AVAILABLE and not SESSION_FILE.exists():
        logger.warning("No credentials and no saved session. Run 'save-session' or set "
                       "STANFORD_USERNAME and STANFORD_PASSWORD in .env")

    return True

# =============================================================================
# Export configuration
# =============================================================================

__all__ = [
    'BASE_DIR',
    'DIRECTORY_URL',
    'DIRECTORY_DOMAIN',
    'STANFORD_USERNAME',
    'STANFORD_PASSWORD',
    'CREDENTIALS_AVAILABLE',
    'AUTH_URL_MARKERS',
    'OUTPUT_DIR',
    'LOGS_DIR',
    'CSV_FILENAME',
    'OUTPUT_CSV',
    'RESUME_STATE_FILE',
    'SESSION_FILE',
    'HEADLESS',
    'SLOW_MO',
    'TIMEOUT',
    'SELECTOR_TIMEOUT',
    'MAX_RETRIES',
    'USE_RANDOM_USER_AGENT',
    'DEFAULT_USER_AGENT',
    'VIEWPORT',
    'TARGET_PROFILES',
    'PER_STRATEGY_LIMIT',
    'DELAY_POLICY',
    'LOG_LEVEL',
    'LOG_MAX_SIZE',
    'LOG_BACKUP_COUNT',
    'CrawlerConfig',
    'validate_config',
]
