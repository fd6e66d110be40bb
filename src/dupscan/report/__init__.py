"""Statistics tables over scan results and their CSV serialization."""
from .statistics import FileStatRow, GroupStatRow, StatisticsReport, collect_statistics
from .writer import write_report
