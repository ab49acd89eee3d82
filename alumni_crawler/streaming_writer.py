"""
Incremental Result Streaming

Appends each accepted alumni record to the output CSV the moment it is
extracted, so a crash or Ctrl+C loses at most the profile in flight.
Tracks completed search strategies in a small JSON file for --resume.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd
from loguru import logger

from alumni_crawler.deduplication import SeenNames
from alumni_crawler.models import AlumniRecord, CSV_HEADERS


class StreamingAlumniWriter:
    """
    Writes alumni records to disk one row at a time.

    Benefits:
    - Low memory footprint (records are discarded after the write)
    - Graceful resume (tracks completed strategies)
    - Fault tolerance (partial results preserved on crash)
    """

    def __init__(self, output_file: Union[str, Path], resume_file: Optional[Union[str, Path]] = None):
        """
        Initialize streaming writer.

        Args:
            output_file: Path to CSV file for records (can be string or Path)
            resume_file: Path to JSON file tracking completed strategies (can be string or Path)
        """
        self.output_file = Path(output_file)
        if resume_file:
            self.resume_file = Path(resume_file)
        else:
            self.resume_file = self.output_file.parent / "resume_state.json"

        self.records_written = 0
        self.strategies_completed: List[str] = []

        self.output_file.parent.mkdir(parents=True, exist_ok=True)

        # Load resume state if exists
        self.load_resume_state()

    def load_resume_state(self):
        """Load resume state from disk."""
        if self.resume_file.exists():
            try:
                with open(self.resume_file, 'r') as f:
                    state = json.load(f)
                self.strategies_completed = state.get('strategies_completed', [])
                logger.info(f"Loaded resume state: {len(self.strategies_completed)} strategies completed")
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load resume state: {e}")

    def save_resume_state(self):
        """Save resume state to disk."""
        try:
            state = {
                'strategies_completed': self.strategies_completed,
                'records_written': self.records_written,
                'last_updated': datetime.now().isoformat(),
            }
            with open(self.resume_file, 'w') as f:
                json.dump(state, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save resume state: {e}")

    def load_seen_names(self) -> SeenNames:
        """Seed the dedup set from whatever the output file already holds."""
        return SeenNames.from_csv(self.output_file)

    def _needs_header(self) -> bool:
        return not self.output_file.exists() or self.output_file.stat().st_size == 0

    def write_record(self, record: AlumniRecord):
        """
        Append one record to the CSV immediately.

        The header row is written only when the file is new or empty.

        Args:
            record: Record to persist
        """
        try:
            df = pd.DataFrame([record.to_row()], columns=CSV_HEADERS)
            df.to_csv(
                self.output_file,
                mode='a',
                header=self._needs_header(),
                index=False,
            )
            self.records_written += 1
            logger.debug(f"Wrote {record.name} to {self.output_file} (run total: {self.records_written})")

        except Exception as e:
            logger.error(f"Failed to write record for {record.name}: {e}")
            raise

    def reset_resume_state(self):
        """Forget strategies recorded by an earlier run (fresh, non-resumed crawl)."""
        if self.strategies_completed:
            logger.info(f"Ignoring resume state from an earlier run ({len(self.strategies_completed)} strategies)")
        self.strategies_completed = []

    def is_strategy_completed(self, label: str) -> bool:
        """
        Check if a search strategy was already exhausted in an earlier run.

        Args:
            label: Strategy label
        """
        return label in self.strategies_completed

    def mark_strategy_completed(self, label: str):
        """
        Mark a search strategy as completed.

        Args:
            label: Strategy label
        """
        if label not in self.strategies_completed:
            self.strategies_completed.append(label)
            self.save_resume_state()
            logger.debug(f"Marked strategy {label} as completed")

    def get_stats(self) -> dict:
        """
        Get writer statistics.

        Returns:
            Dictionary with stats
        """
        return {
            'records_written': self.records_written,
            'strategies_completed': len(self.strategies_completed),
            'output_file': str(self.output_file),
            'output_size_kb': self.output_file.stat().st_size / 1024 if self.output_file.exists() else 0,
        }

    def finalize(self):
        """
        Finalize writing and clean up resume state.
        """
        logger.info(f"Finalizing: {self.records_written} records written this run, "
                    f"{len(self.strategies_completed)} strategies completed")

        if self.resume_file.exists():
            try:
                self.resume_file.unlink()
                logger.debug("Removed resume state file")
            except OSError as e:
                logger.warning(f"Failed to remove resume file: {e}")
