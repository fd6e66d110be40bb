import csv
import logging
from pathlib import Path

from ..errors import ReportWriteError
from .statistics import StatisticsReport

logger = logging.getLogger(__name__)

FILE_REPORT_NAME = 'file_report.csv'
GROUP_REPORT_NAME = 'group_report.csv'

FILE_REPORT_COLUMNS = ['File', 'isDuplicate', 'Size']
GROUP_REPORT_COLUMNS = ['Occurrences', 'TotalSize', 'PotentialSave', 'Digest']


def write_report(report: StatisticsReport, directory: Path | None = None) -> tuple[Path, Path]:
    """Write the by-file and by-group tables as two CSV files, replacing existing ones.

    Args:
        report: Tables produced by collect_statistics()
        directory: Destination directory, the current working directory by default

    Returns:
        Paths of the file report and the group report

    Raises:
        ReportWriteError: A report file could not be created or written
    """
    if directory is None:
        directory = Path.cwd()

    file_report = Path(directory) / FILE_REPORT_NAME
    group_report = Path(directory) / GROUP_REPORT_NAME

    _write_table(file_report, FILE_REPORT_COLUMNS, (
        [str(row.path), 'true' if row.is_duplicate else 'false', row.size]
        for row in report.files
    ))
    _write_table(group_report, GROUP_REPORT_COLUMNS, (
        [row.occurrences, row.total_size, row.potential_save, row.digest.hex()]
        for row in report.groups
    ))

    return file_report, group_report


def _write_table(path: Path, columns: list[str], rows) -> None:
    try:
        # undecodable file name bytes arrive as lone surrogates; write them back as the original bytes
        with open(path, 'w', newline='', encoding='utf-8', errors='surrogateescape') as f:
            writer = csv.writer(f)
            writer.writerow(columns)
            writer.writerows(rows)
    except OSError as e:
        raise ReportWriteError(path, e.strerror or str(e)) from e
    except UnicodeError as e:
        raise ReportWriteError(path, str(e)) from e

    logger.info(f"Wrote report: {path}")
