"""Interactive terminal shell for Job Tracker."""
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .tracking import (
    ApplicationRecord,
    ApplicationStorage,
    ClearFilters,
    CreateRecord,
    DeleteRecord,
    Export,
    FileStore,
    RecordStore,
    Reset,
    SetSearch,
    SetStatus,
    SetStatusFilter,
    ToggleSort,
    TrackerController,
)
from .tracking.models import STATUS_ORDER
from .utils.config import config
from .utils.logging import setup_logging

# ANSI color codes
CYAN = '\033[1;36m'
GREEN = '\033[1;32m'
YELLOW = '\033[1;33m'
RED = '\033[1;31m'
GRAY = '\033[90m'
RESET = '\033[0m'
BOLD = '\033[1m'

HELP = [
    ("list", "Show applications (current filters and sort)"),
    ("add <title> @ <company>", "Add an application"),
    ("status <row> <status>", "Change status (number or label)"),
    ("delete <row>", "Delete an application"),
    ("search <text>", "Filter by title/company text"),
    ("filter <status|all>", "Filter by status"),
    ("sort <title|company|status>", "Sort by column (repeat to reverse)"),
    ("clear", "Clear search and status filter"),
    ("kpi", "Show totals per status"),
    ("export json [path]", "Export applications as JSON"),
    ("export report [path]", "Export printable HTML report"),
    ("reset", "Erase ALL data"),
    ("exit / quit", "Stop the shell"),
]


class TrackerService:
    """Terminal front end over the tracker controller."""

    def __init__(self, storage_path: Optional[Path] = None, debug: Optional[bool] = None):
        """Initialize the service.

        Args:
            storage_path: Key-value store file (defaults to config)
            debug: Force debug logging (defaults to service.debug in config)
        """
        if debug is None:
            debug = config.get('service.debug', False)
        log_level = 'DEBUG' if debug else config.get('logging.level', 'INFO')
        log_file = config.get('logging.file')
        self.logger = setup_logging(
            log_level=log_level,
            use_systemd=config.get('logging.use_systemd', False),
            log_file=Path(log_file) if log_file else None
        )

        self.logger.debug("Initializing Job Tracker shell")

        storage = ApplicationStorage(FileStore(storage_path))
        self.store = RecordStore(storage, notify=self.show_message)
        self.controller = TrackerController(self.store)

        # Rows from the last render, used to map row numbers to records
        self._rows: List[Tuple[int, ApplicationRecord]] = []

    def show_message(self, message: str, is_error: bool = False):
        """Notification sink: print a short colored notice."""
        color = RED if is_error else GREEN
        mark = '✗' if is_error else '✓'
        print(f"{color}{mark} {message}{RESET}")

    def confirm(self, question: str) -> bool:
        answer = input(f"{YELLOW}{question} [y/N]{RESET} ").strip().lower()
        return answer in ('y', 'yes')

    def run(self):
        """Load stored data and run the interactive loop."""
        self.store.load()
        try:
            self.run_cli_mode()
        finally:
            self.shutdown()

    def run_cli_mode(self):
        print(f"\n{CYAN}{'=' * 60}{RESET}")
        print(f"{BOLD}{CYAN}Job Tracker{RESET}")
        print(f"{CYAN}{'=' * 60}{RESET}")
        self._print_help()
        self._render()

        while True:
            try:
                line = input(f"\n{CYAN}❯{RESET} ").strip()
                if not line:
                    continue
                if line.lower() in ['exit', 'quit', 'q']:
                    break
                self.handle(line)

            except KeyboardInterrupt:
                print("\n\nInterrupted. Type 'exit' to quit.")
                continue

            except EOFError:
                print()
                break

            except Exception as e:
                self.logger.error(f"CLI error: {e}")
                print(f"\nError: {e}")

    def handle(self, line: str):
        """Parse and execute one shell command."""
        command, _, rest = line.partition(' ')
        command = command.lower()
        rest = rest.strip()

        if command in ['help', '?']:
            self._print_help()
        elif command in ['list', 'ls']:
            self._render()
        elif command == 'add':
            title, sep, company = rest.partition('@')
            if not sep:
                print("Invalid command. Use: add <title> @ <company>")
                return
            if self.controller.dispatch(CreateRecord(title, company)):
                self._render()
        elif command == 'status':
            row, _, value = rest.partition(' ')
            index = self._master_index(row)
            if index is not None:
                self.controller.dispatch(SetStatus(index, self._parse_status(value.strip())))
                self._render()
        elif command in ['delete', 'del', 'rm']:
            self._delete(rest)
        elif command == 'search':
            self.controller.dispatch(SetSearch(rest))
            self.controller.search_debouncer.flush()
            self._render()
        elif command == 'filter':
            value = '' if rest.lower() in ['', 'all'] else self._parse_status(rest)
            if self.controller.dispatch(SetStatusFilter(value)):
                self._render()
        elif command == 'sort':
            if self.controller.dispatch(ToggleSort(rest.lower())):
                self._render()
        elif command == 'clear':
            self.controller.dispatch(ClearFilters())
            self._render()
        elif command == 'kpi':
            self._render_kpis()
        elif command == 'export':
            self._export(rest)
        elif command == 'reset':
            if self.confirm("Erase ALL stored data?") and self.confirm("Confirm again?"):
                self.controller.dispatch(Reset())
                self._render()
        else:
            print(f"Unknown command: {command}. Type 'help' for commands.")

    def _parse_status(self, value: str) -> str:
        """Accept a 1-based status number as well as the status label."""
        if value.isdigit() and 1 <= int(value) <= len(STATUS_ORDER):
            return STATUS_ORDER[int(value) - 1].value
        for status in STATUS_ORDER:
            if status.value.lower() == value.lower():
                return status.value
        return value

    def _master_index(self, row: str) -> Optional[int]:
        """Translate a displayed row number to the record's current master index."""
        try:
            number = int(row)
            if number < 1:
                raise IndexError(row)
            _, record = self._rows[number - 1]
        except (ValueError, IndexError):
            print(f"Invalid row: {row or '?'}. Use 'list' to see row numbers.")
            return None
        # Look up by identity, positions shift after every mutation
        index = self.store.index_of(record.title, record.company)
        if index is None:
            print("That application no longer exists. Use 'list' to refresh.")
        return index

    def _delete(self, row: str):
        index = self._master_index(row)
        if index is None:
            return
        record = self.store.records[index]
        if self.confirm(f'Delete "{record.title}" at "{record.company}"?'):
            self.controller.dispatch(DeleteRecord(index))
            self._render()

    def _export(self, rest: str):
        kind, _, path = rest.partition(' ')
        kind = kind.lower() or 'json'
        if kind not in ['json', 'report']:
            print("Invalid command. Use: export json|report [path]")
            return
        if not path.strip():
            filename = config.get(f'tracker.export.{kind}_filename')
            out = config.export_dir / filename
        else:
            out = Path(path.strip()).expanduser()
        self.controller.dispatch(Export(kind, out))

    def _print_help(self):
        print(f"\n{GREEN}Commands:{RESET}")
        width = max(len(usage) for usage, _ in HELP)
        for usage, description in HELP:
            print(f"  {YELLOW}{usage.ljust(width)}{RESET}  - {description}")

    def _render(self):
        self._render_kpis()
        self._render_table()

    def _render_kpis(self):
        kpis = self.controller.kpis()
        parts = [f"{BOLD}Total:{RESET} {kpis.total}"]
        for status in STATUS_ORDER:
            parts.append(f"{BOLD}{status.value}:{RESET} {kpis.counts[status]} ({kpis.percentages[status]}%)")
        print("\n" + "  |  ".join(parts))

    def _render_table(self):
        self._rows = self.controller.view()
        sort = self.store.sort
        arrow = '▲' if sort.ascending else '▼'
        filt = self.store.filter

        print(f"\n{CYAN}{'=' * 60}{RESET}")
        headers = {'title': 'Title', 'company': 'Company', 'status': 'Status'}
        headers[sort.field] += f" {arrow}"
        print(f"{BOLD}{'#':>3}  {headers['title']:<24} {headers['company']:<20} {headers['status']}{RESET}")

        if not self._rows:
            if self.store.records and filt.active:
                print(f"{YELLOW}No applications match the current filters.{RESET}")
            else:
                print(f"{YELLOW}No applications yet. Use 'add <title> @ <company>'.{RESET}")
        for number, (_, record) in enumerate(self._rows, 1):
            print(f"{number:>3}  {record.title:<24} {record.company:<20} {record.status.value}")

        if filt.active:
            status = filt.status.value if filt.status else 'all'
            print(f"{GRAY}Filters: search={filt.search!r} status={status}{RESET}")
        print(f"{CYAN}{'=' * 60}{RESET}")

    def shutdown(self):
        """Drop any pending search and say goodbye."""
        self.controller.search_debouncer.cancel()
        print(f"\n{BOLD}{GREEN}👋 Bye!{RESET}\n")
        self.logger.debug("Job Tracker shell stopped")


def main(storage_path: Optional[Path] = None, debug: Optional[bool] = None):
    """Main entry point."""
    service = TrackerService(storage_path=storage_path, debug=debug)

    try:
        service.run()
    except Exception as e:
        service.logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
