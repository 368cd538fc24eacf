"""
Test suite for the persistence controller

Tests the JSON-then-CSV load preference, dual-format saving and isolation of
file failures.
"""

import itertools

import pytest

from atm_ledger.config import LedgerConfig
from atm_ledger.ledger import Ledger
from atm_ledger.money import Money, parse_decimal
from atm_ledger.persistence import PersistenceController


@pytest.fixture
def config(tmp_path):
    return LedgerConfig(data_dir=tmp_path)


@pytest.fixture
def controller(config):
    return PersistenceController(config, clock=itertools.count(1_700_000_000).__next__)


def scenario_ledger():
    ledger = Ledger(clock=itertools.count(1_700_000_000).__next__)
    ledger.apply_deposit(parse_decimal("100.00"))
    try:
        ledger.apply_withdraw(parse_decimal("150.00"))
    except ValueError:
        pass
    ledger.apply_withdraw(parse_decimal("40.50"))
    return ledger


def tuples(ledger):
    return [tx.as_tuple() for tx in ledger.history()]


class TestLoad:
    """Test choosing the load source"""

    def test_no_files(self, controller):
        """Test that an empty ledger is returned when nothing is saved"""
        ledger = controller.load()
        assert len(ledger) == 0
        assert ledger.balance == Money.zero()
        assert controller.loaded_from is None

    def test_restart_from_json_then_csv(self, controller):
        """Test reloading the same ledger from each format on its own"""
        original = scenario_ledger()

        controller.save(original)
        controller.csv_path.unlink()
        from_json = controller.load()
        assert controller.loaded_from == controller.json_path
        assert from_json.balance == Money(5950)
        assert len(from_json) == 2
        assert tuples(from_json) == tuples(original)

        controller.save(original)
        controller.json_path.unlink()
        from_csv = controller.load()
        assert controller.loaded_from == controller.csv_path
        assert from_csv.balance == Money(5950)
        assert len(from_csv) == 2
        assert tuples(from_csv) == tuples(original)

    def test_json_preferred(self, controller):
        """Test that JSON wins when both files exist"""
        controller.json_path.write_text(
            '{"balance_cents": 100, "transactions": ['
            '{"type": 1, "amount": 100, "balance_after": 100, "timestamp": 1}]}',
            encoding="utf-8",
        )
        controller.csv_path.write_text("1,999,999,1\n", encoding="utf-8")

        ledger = controller.load()
        assert controller.loaded_from == controller.json_path
        assert ledger.balance == Money(100)

    def test_invalid_utf8_json_still_used(self, controller):
        """Test that bytes that are not UTF-8 cost only the records they touch"""
        original = scenario_ledger()
        controller.save(original)
        document = controller.json_path.read_bytes()
        controller.json_path.write_bytes(document.replace(b"},\n", b"},\xff\xfe\x80\n", 1))

        ledger = controller.load()
        assert controller.loaded_from == controller.json_path
        assert tuples(ledger) == tuples(original)
        assert ledger.balance == Money(5950)
        assert controller.json_codec.skipped_records == 0

        # A history saved after such a load keeps every record
        controller.save(ledger)
        assert tuples(controller.load()) == tuples(original)

    def test_oversized_field_skipped_on_load(self, controller):
        """Test that a field of thousands of digits does not abort the load"""
        controller.json_path.write_text(
            '{"balance_cents": 60, "transactions": [\n'
            '{"type": 1, "amount": 100, "balance_after": 100, "timestamp": 1},\n'
            '{"type": 1, "amount": ' + "9" * 5000 + ', "balance_after": 1, "timestamp": 2},\n'
            '{"type": 2, "amount": 40, "balance_after": 60, "timestamp": 3}\n'
            ']}\n',
            encoding="utf-8",
        )

        ledger = controller.load()
        assert controller.loaded_from == controller.json_path
        assert tuples(ledger) == [(1, 100, 100, 1), (2, 40, 60, 3)]
        assert controller.json_codec.skipped_records == 1

        controller.json_path.unlink()
        controller.csv_path.write_text(
            "1,100,100,1\n1," + "9" * 5000 + ",1,2\n", encoding="utf-8"
        )
        ledger = controller.load()
        assert controller.loaded_from == controller.csv_path
        assert tuples(ledger) == [(1, 100, 100, 1)]

    def test_json_path_is_directory(self, controller):
        """Test that an I/O error on JSON falls back to CSV"""
        controller.json_path.mkdir()
        controller.csv_path.write_text("1,999,999,1\n", encoding="utf-8")

        ledger = controller.load()
        assert controller.loaded_from == controller.csv_path
        assert len(ledger) == 1

    def test_both_unreadable(self, controller):
        """Test that an empty ledger is used when neither file reads"""
        controller.json_path.mkdir()
        controller.csv_path.mkdir()

        ledger = controller.load()
        assert controller.loaded_from is None
        assert len(ledger) == 0

    def test_damaged_json_still_used(self, controller):
        """Test that a readable JSON file with bad records is not abandoned"""
        controller.json_path.write_text("garbage", encoding="utf-8")
        controller.csv_path.write_text("1,999,999,1\n", encoding="utf-8")

        ledger = controller.load()
        assert controller.loaded_from == controller.json_path
        assert len(ledger) == 0

    def test_history_bound_from_config(self, tmp_path):
        """Test that max_history applies to loaded files"""
        controller = PersistenceController(LedgerConfig(data_dir=tmp_path, max_history=2))
        controller.csv_path.write_text(
            "".join(f"1,100,{100 * (i + 1)},{i}\n" for i in range(5)), encoding="utf-8"
        )

        ledger = controller.load()
        assert len(ledger) == 2
        assert ledger.max_history == 2
        assert ledger.balance == Money(500)

    def test_empty_ledger_uses_bound(self, tmp_path):
        """Test that a fresh ledger also gets the configured bound"""
        controller = PersistenceController(LedgerConfig(data_dir=tmp_path, max_history=3))
        assert controller.load().max_history == 3


class TestSave:
    """Test writing both formats"""

    def test_writes_both_formats(self, controller):
        """Test that CSV and JSON are both written"""
        report = controller.save(scenario_ledger())

        assert report.ok
        assert report.written == [controller.csv_path, controller.json_path]
        assert controller.csv_path.read_text(encoding="utf-8").startswith("type,amount_cents")
        assert '"balance_cents": 5950' in controller.json_path.read_text(encoding="utf-8")

    def test_save_empty_ledger(self, controller):
        """Test saving with no history"""
        report = controller.save(Ledger())
        assert report.ok
        assert controller.load().balance == Money.zero()

    def test_csv_failure_does_not_block_json(self, controller):
        """Test that a failed CSV write is reported and JSON still written"""
        controller.csv_path.mkdir()

        report = controller.save(scenario_ledger())

        assert not report.ok
        assert list(report.failed) == [controller.csv_path]
        assert report.written == [controller.json_path]
        assert controller.json_path.is_file()

    def test_json_failure_reported(self, controller):
        """Test that a failed JSON write is reported after CSV succeeds"""
        controller.json_path.mkdir()

        report = controller.save(scenario_ledger())

        assert list(report.failed) == [controller.json_path]
        assert report.written == [controller.csv_path]

    def test_creates_data_dir(self, tmp_path):
        """Test that a missing data directory is created"""
        config = LedgerConfig(data_dir=tmp_path / "nested" / "data")
        report = PersistenceController(config).save(scenario_ledger())

        assert report.ok
        assert config.csv_path.is_file()
        assert config.json_path.is_file()
