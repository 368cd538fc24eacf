"""
Persistence Controller

Chooses where the ledger is loaded from at startup and writes both file
formats at shutdown. JSON is preferred on load, CSV is the fallback, and an
empty ledger is used when neither can be read. File errors are logged and
reported, never raised to the session.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import LedgerConfig, get_config
from .codec import LedgerCodec
from .csv_codec import CsvCodec
from .json_codec import JsonCodec
from .ledger import Ledger
from .logging_config import get_logger, log_action


@dataclass
class SaveReport:
    """Outcome of writing the ledger to every format"""
    written: List[Path] = field(default_factory=list)
    failed: Dict[Path, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class PersistenceController:
    """Loads and saves the ledger through the JSON and CSV codecs"""

    def __init__(self, config: Optional[LedgerConfig] = None,
                 clock: Optional[Callable[[], int]] = None):
        self.config = config or get_config()
        self.max_history = self.config.max_history
        self.clock = clock
        self.csv_path = self.config.csv_path
        self.json_path = self.config.json_path
        self.csv_codec = CsvCodec(max_history=self.max_history, clock=clock)
        self.json_codec = JsonCodec(max_history=self.max_history, clock=clock)
        self.loaded_from: Optional[Path] = None
        self.logger = get_logger("atm_ledger.persistence")

    def load(self) -> Ledger:
        """
        Load the ledger, preferring JSON over CSV

        Returns:
            The ledger from the first file that exists and can be read, or an
            empty ledger
        """
        self.loaded_from = None
        for codec, path in ((self.json_codec, self.json_path), (self.csv_codec, self.csv_path)):
            ledger = self._try_read(codec, path)
            if ledger is None:
                continue

            self.loaded_from = path
            if not ledger.is_consistent():
                log_action(
                    self.logger, "warning", f"Balance chain in {path} is inconsistent",
                    action="load", resource=str(path),
                )
            log_action(
                self.logger, "info", f"Loaded history from {path}",
                action="load", resource=str(path),
                extra={
                    "transactions": len(ledger),
                    "balance_cents": ledger.balance.cents,
                    "skipped": codec.skipped_records,
                }
            )
            return ledger

        log_action(self.logger, "info", "No saved history found, starting empty", action="load")
        return Ledger(max_history=self.max_history, clock=self.clock)

    def save(self, ledger: Ledger) -> SaveReport:
        """
        Write the ledger to both CSV and JSON

        A failure writing one format is logged and recorded in the report and
        does not stop the other from being written.
        """
        report = SaveReport()
        for codec, path in ((self.csv_codec, self.csv_path), (self.json_codec, self.json_path)):
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                codec.write(ledger, path)
            except OSError as e:
                report.failed[path] = str(e)
                log_action(
                    self.logger, "warning", f"Failed to write {path}: {e}",
                    action="save", resource=str(path),
                )
                continue
            report.written.append(path)

        log_action(
            self.logger, "info", f"Saved {len(ledger)} transactions",
            action="save",
            extra={
                "written": [str(p) for p in report.written],
                "failed": [str(p) for p in report.failed],
            }
        )
        return report

    def _try_read(self, codec: LedgerCodec, path: Path) -> Optional[Ledger]:
        if not path.exists():
            return None
        try:
            return codec.read(path)
        except OSError as e:
            log_action(
                self.logger, "warning", f"Failed to read {path}: {e}",
                action="load", resource=str(path),
            )
            return None
