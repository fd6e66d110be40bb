from .errors import DupscanError, TraversalError, FileAccessError, ReportWriteError
from .scanner import Scanner, ScanResult
from .settings import ScanSettings
from .index.digest_index import DigestIndex, DuplicateGroup, find_duplicates
from .report.statistics import FileStatRow, GroupStatRow, StatisticsReport, collect_statistics
from .utils.processor import Processor
