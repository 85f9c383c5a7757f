"""
Page Object Model for the time clock Punch History page.
Extracts the monthly summary and the punch table from the server-rendered HTML.
"""
import re
from typing import List, Optional, Tuple

from bs4 import Tag
import logging

from timeclock.errors import PageStructureError, UnexpectedFormatError
from timeclock.play.pages.base_page import BasePage
from timeclock.timeclock_models import PunchEntry, PunchHistorySummary, TimeclockResponse

logger = logging.getLogger(__name__)

# Non-whitespace characters trimmed from label/value text nodes
TRIM_CHARS = "\0:"

TIME_WORKED_PATTERN = re.compile(r"^\d+\s*d\s+\d+\s*h\s+\d+\s*m$", re.IGNORECASE)
WORK_DAYS_PATTERN = re.compile(r"^\d+$")
YEAR_PATTERN = re.compile(r"^\d{4}$")
MONTH_PATTERN = re.compile(r"^\d{1,2}$")


def _trim(text: str) -> str:
    """Strip whitespace (NBSP included), NUL and colons from both ends of a text node."""
    previous = None
    while text != previous:
        previous = text
        text = text.strip().strip(TRIM_CHARS)
    return text


class PunchHistoryPage(BasePage):
    """Represents a month-long punch clock history page."""

    PUNCH_TABLE_SELECTOR = ".punch_history"

    TIME_WORKED_LABEL = "Time Worked"
    WORK_DAYS_LABEL = "Work Days"

    # Positions of the values in the flattened text nodes of the current layout.
    # Only used when the labels above cannot be found.
    TIME_WORKED_TEXT_INDEX = 29
    WORK_DAYS_TEXT_INDEX = 32

    @classmethod
    def from_response(cls, response: TimeclockResponse) -> "PunchHistoryPage":
        """Create the page from a fetched response."""
        return cls(response.body, url=response.url, status=response.status)

    def _input_value(self, name: str) -> str:
        field = self.select_required(f'input[name="{name}"]', f"'{name}' form input")
        value = field.get("value")
        if value is None:
            logger.error(f"'{name}' form input has no value attribute")
            raise PageStructureError(f"'{name}' form input has no value attribute")
        return value.strip()

    @property
    def year(self) -> int:
        """Full numeric representation of the year this data is from."""
        value = self._input_value("year")
        if not YEAR_PATTERN.match(value):
            raise UnexpectedFormatError(f"Year is not a four-digit number: {value!r}")
        return int(value)

    @property
    def month(self) -> str:
        """Month this data is from, as a two-digit string with leading zero."""
        value = self._input_value("month")
        if not MONTH_PATTERN.match(value) or not 1 <= int(value) <= 12:
            raise UnexpectedFormatError(f"Month is not between 01 and 12: {value!r}")
        return value.zfill(2)

    def _labelled_value(self, label: str) -> Optional[str]:
        """
        Find the value rendered after a label such as 'Time Worked:'.

        The value is either the rest of the label's own text node or the next
        non-blank text node. Returns None when the label is not on the page.
        """
        nodes = self.text_nodes()
        wanted = label.lower()
        for idx, node in enumerate(nodes):
            text = _trim(node)
            if not text.lower().startswith(wanted):
                continue
            rest = _trim(text[len(wanted):])
            if rest:
                return rest
            for following in nodes[idx + 1:]:
                value = _trim(following)
                if value:
                    return value
            return None
        return None

    def _summary_value(self, label: str, index: int) -> str:
        value = self._labelled_value(label)
        if value is not None:
            return value
        logger.debug(f"'{label}' label not found, falling back to text node #{index}")
        return _trim(self.text_node_at(index, label))

    @property
    def time_worked(self) -> str:
        """Time worked as number of days, hours and minutes (e.g. '5d 3h 20m')."""
        value = self._summary_value(self.TIME_WORKED_LABEL, self.TIME_WORKED_TEXT_INDEX)
        if not TIME_WORKED_PATTERN.match(value):
            logger.error(f"Unexpected time worked value: {value!r}")
            raise UnexpectedFormatError(f"Time worked is not in 'Nd Nh Nm' format: {value!r}")
        return value

    @property
    def work_days(self) -> int:
        """Work days for the selected month and year, excluding holidays."""
        value = self._summary_value(self.WORK_DAYS_LABEL, self.WORK_DAYS_TEXT_INDEX)
        if not WORK_DAYS_PATTERN.match(value):
            logger.error(f"Unexpected work days value: {value!r}")
            raise UnexpectedFormatError(f"Work days is not a whole number: {value!r}")
        return int(value)

    @staticmethod
    def _row_cells(row: Tag) -> List[Tag]:
        return row.find_all(["td", "th"], recursive=False)

    @staticmethod
    def _is_header_row(cells: List[Tag]) -> bool:
        # A header either uses th cells only or repeats the column labels
        if cells and all(cell.name == "th" for cell in cells):
            return True
        texts = tuple(cell.get_text(strip=True).lower() for cell in cells[:len(PunchEntry.COLUMNS)])
        return texts == tuple(column.lower() for column in PunchEntry.COLUMNS)

    def _data_rows(self) -> List[Tuple[int, List[Tag]]]:
        table = self.select_required(self.PUNCH_TABLE_SELECTOR, "Punch history table")
        rows = []
        for position, row in enumerate(table.find_all("tr")):
            cells = self._row_cells(row)
            if self._is_header_row(cells):
                logger.debug(f"Skipping header row #{position}")
                continue
            rows.append((position, cells))
        return rows

    @property
    def punch_history(self) -> List[PunchEntry]:
        """
        Every punch of the month, in document order.

        A punch consists of Punch In (datetime), Punch Out (datetime),
        Time Logged (time) and Client (string), all kept as trimmed strings.

        Raises:
            PageStructureError: If the punch table is missing or a row has fewer
                than four columns
        """
        entries = []
        for position, cells in self._data_rows():
            if len(cells) < len(PunchEntry.COLUMNS):
                logger.error(f"Punch history row #{position} has {len(cells)} columns")
                raise PageStructureError(
                    f"Punch history row #{position} has {len(cells)} columns, "
                    f"expected {len(PunchEntry.COLUMNS)}"
                )
            punch_in, punch_out, time_logged, client = (
                cell.get_text().strip() for cell in cells[:len(PunchEntry.COLUMNS)]
            )
            entries.append(PunchEntry(
                punch_in=punch_in,
                punch_out=punch_out,
                time_logged=time_logged,
                client=client
            ))
        return entries

    def summary(self) -> PunchHistorySummary:
        """Extract the whole page. Fails if any part of it cannot be found."""
        summary = PunchHistorySummary(
            year=self.year,
            month=self.month,
            time_worked=self.time_worked,
            work_days=self.work_days,
            entries=self.punch_history,
            source_url=self.url
        )
        logger.info(
            f"Extracted punch history for {summary.year}-{summary.month}: "
            f"{len(summary.entries)} punches, {summary.time_worked} worked"
        )
        return summary
