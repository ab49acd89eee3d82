"""
Delay policies for pacing the crawl.

A single crawler is parameterized by one of these values instead of being
subclassed per pacing mode. ``STEALTH`` is much slower and caps how many
profiles one session may collect.
"""

import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from loguru import logger


@dataclass(frozen=True)
class DelayPolicy:
    """
    Pacing parameters for one crawl session.

    Attributes:
        name: Policy name (for logging / CLI)
        profile_delay: Seconds between profiles
        page_delay: Seconds before moving to the next listing page
        strategy_delay: Seconds between search strategies
        random_variance: Upper bound of uniform jitter added to each delay
        max_profiles_per_session: Hard cap on profiles saved per run (None = unlimited)
        typing_delay_ms: Per-keystroke delay when typing into forms
        gentle_scroll: Scroll listings in small steps instead of jumping
        error_pause: Seconds to keep the browser open after an unexpected error
    """
    name: str
    profile_delay: float
    page_delay: float
    strategy_delay: float
    random_variance: float = 0.0
    max_profiles_per_session: Optional[int] = None
    typing_delay_ms: int = 150
    gentle_scroll: bool = False
    error_pause: float = 60.0

    def jittered(self, base: float) -> float:
        """Base delay plus uniform jitter in [0, random_variance]."""
        if self.random_variance <= 0:
            return max(0.0, base)
        return max(0.0, base + random.uniform(0, self.random_variance))

    def pause(self, base: float, label: str = '', sleep: Callable[[float], None] = time.sleep) -> float:
        """
        Sleep for a jittered delay.

        Returns:
            Seconds slept
        """
        delay = self.jittered(base)
        if delay <= 0:
            return 0.0
        if delay >= 5:
            logger.info(f"Waiting {delay:.0f}s ({self.name} mode){': ' + label if label else ''}")
        else:
            logger.debug(f"Waiting {delay:.1f}s{': ' + label if label else ''}")
        sleep(delay)
        return delay

    def session_cap_reached(self, profiles_this_session: int) -> bool:
        return (self.max_profiles_per_session is not None
                and profiles_this_session >= self.max_profiles_per_session)


STANDARD = DelayPolicy(
    name='standard',
    profile_delay=0.5,
    page_delay=2.0,
    strategy_delay=0.0,
)

STEALTH = DelayPolicy(
    name='stealth',
    profile_delay=10.0,
    page_delay=30.0,
    strategy_delay=60.0,
    random_variance=5.0,
    max_profiles_per_session=50,
    typing_delay_ms=200,
    gentle_scroll=True,
)

POLICIES: Dict[str, DelayPolicy] = {
    STANDARD.name: STANDARD,
    STEALTH.name: STEALTH,
}


def get_delay_policy(name: str) -> DelayPolicy:
    """
    Look up a policy by name.

    Raises:
        ValueError: Unknown policy name
    """
    key = (name or '').strip().lower()
    if key not in POLICIES:
        raise ValueError(f"Unknown delay policy '{name}'. Choose from: {', '.join(POLICIES)}")
    return POLICIES[key]
