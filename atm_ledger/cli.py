"""
ATM Menu

Interactive console front end for the ledger. Loads saved history on start,
runs the deposit/withdraw/view menu, and saves both file formats on exit.
All console I/O for the project lives here.
"""

import sys
from datetime import datetime
from typing import IO, Callable, Optional

from .config import LedgerConfig, get_config
from .exceptions import InsufficientFundsError, LedgerError, ParseError, ValidationError
from .ledger import Ledger, TransactionKind
from .logging_config import setup_logging
from .money import Money, parse_decimal
from .persistence import PersistenceController

MENU = """
==============================
          ATM MENU
==============================
1) Deposit
2) Withdraw
3) View transactions
4) View balance
0) Exit
Select an option: """

KIND_LABELS = {
    TransactionKind.DEPOSIT: "DEPOSIT ",
    TransactionKind.WITHDRAW: "WITHDRAW",
}


def format_timestamp(timestamp: int) -> str:
    """Local time as YYYY-MM-DD HH:MM:SS"""
    try:
        return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return "(time unavailable)"


class AtmMenu:
    """Menu loop over one ledger"""

    def __init__(self, ledger: Ledger, stdin: IO[str], stdout: IO[str],
                 currency_code: str = "USD"):
        self.ledger = ledger
        self.stdin = stdin
        self.stdout = stdout
        self.currency_code = currency_code

    def _money(self, amount: Money) -> str:
        return amount.to_string(self.currency_code)

    def _print(self, text: str = "", end: str = "\n") -> None:
        self.stdout.write(text + end)
        self.stdout.flush()

    def _read_line(self) -> Optional[str]:
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def run(self) -> None:
        """Run until the user exits or input ends"""
        actions = {
            1: self.deposit,
            2: self.withdraw,
            3: self.view_transactions,
            4: self.view_balance,
        }
        while True:
            self._print(MENU, end="")
            line = self._read_line()
            if line is None:
                break
            try:
                choice = int(line.strip())
            except ValueError:
                self._print("Invalid input. Please enter a number from the menu.")
                continue

            if choice == 0:
                break
            action = actions.get(choice)
            if action is None:
                self._print("Unknown option. Please choose from the menu.")
                continue
            action()

    def deposit(self) -> None:
        self._transact("Enter amount to deposit (e.g., 100 or 100.50): ",
                       self.ledger.apply_deposit, "Deposited")

    def withdraw(self) -> None:
        self._transact("Enter amount to withdraw (e.g., 50 or 50.00): ",
                       self.ledger.apply_withdraw, "Withdrew")

    def _transact(self, prompt: str, operation: Callable, verb: str) -> None:
        self._print(prompt, end="")
        line = self._read_line()
        if line is None:
            return
        try:
            amount = parse_decimal(line)
            transaction = operation(amount)
        except InsufficientFundsError:
            self._print("Insufficient funds. Current balance is lower than requested amount.")
            return
        except (ParseError, ValidationError):
            self._print("Invalid amount. Please try again.")
            return
        except LedgerError as e:
            self._print(f"Transaction rejected: {e.message}")
            return
        self._print(f"{verb} {self._money(transaction.amount)}. "
                    f"New balance: {self._money(self.ledger.balance)}")

    def view_transactions(self) -> None:
        if not len(self.ledger):
            self._print("No transactions yet.")
            return
        self._print("\n--- Transaction History (most recent last) ---")
        for number, transaction in enumerate(self.ledger.history(), start=1):
            self._print(
                f"[{number:3d}] {format_timestamp(transaction.timestamp)}"
                f"  |  {KIND_LABELS[transaction.kind]}  {self._money(transaction.amount)}"
                f"  |  Balance: {self._money(transaction.balance_after)}"
            )
        self._print("---------------------------------------------\n")

    def view_balance(self) -> None:
        self._print(f"Current balance: {self._money(self.ledger.balance)}")


def main(stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None,
         stderr: Optional[IO[str]] = None, config: Optional[LedgerConfig] = None,
         clock: Optional[Callable[[], int]] = None) -> int:
    """
    Load, run the menu, save. Returns the process exit code.

    Ctrl-C ends the menu like Exit does, so the history is still saved.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    config = config or get_config()

    setup_logging(config.log_level, log_format=config.log_format, stream=stderr)

    persistence = PersistenceController(config, clock=clock)
    ledger = persistence.load()
    if persistence.loaded_from is not None:
        stdout.write(f"Loaded history from {persistence.loaded_from}.\n")

    exit_code = 0
    try:
        AtmMenu(ledger, stdin, stdout, currency_code=config.currency_code).run()
    except KeyboardInterrupt:
        stdout.write("\nInterrupted.\n")
        exit_code = 130

    report = persistence.save(ledger)
    for path in report.failed:
        stderr.write(f"Warning: failed to write {path}\n")
    stdout.write(f"Goodbye! Data saved to {persistence.csv_path} and {persistence.json_path}.\n")
    stdout.flush()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
