"""Tests for dupscan.

Test Files and Coverage:
========================

| Test File                      | Test Classes                 | Tested Constructs                       | Tested Functionalities                      |
|--------------------------------|------------------------------|-----------------------------------------|---------------------------------------------|
| utils/test_processor.py        | ProcessorTest                | Processor, HASH_FUNCTIONS               | Digests per algorithm, errors               |
| utils/test_throttler.py        | ThrottlerTest                | Throttler                               | Concurrency bound, permit release           |
| utils/test_walker.py           | WalkFilesTest, FilterTest    | walk_files(), filter_paths()            | Traversal, symlinks, errors, substring      |
| utils/test_progress.py         | TqdmProgressTest, NotifyTest | TqdmProgress, notify()                  | Bar updates, observer isolation             |
| index/test_digest_index.py     | DigestIndexTest              | DigestIndex, find_duplicates()          | Buckets, thread safety, singletons          |
| commands/test_digest.py        | DigestPipelineTest           | DigestPipeline, do_digest()             | Grouping, failures, fail-fast, progress     |
| report/test_statistics.py      | CollectStatisticsTest        | collect_statistics()                    | Sizes, savings arithmetic, vanished files   |
| report/test_writer.py          | WriteReportTest              | write_report()                          | CSV layout, overwrite, write errors         |
| test_scanner.py                | ScannerTest                  | Scanner                                 | End-to-end scenarios, determinism           |
| test_edge_cases.py             | EdgeCaseTest                 | Scanner                                 | Collisions, empty files, many files         |
| test_settings.py               | ScanSettingsTest             | ScanSettings                            | Dotted keys, lookup order                   |
| test_cli.py                    | CliTest                      | dupscan_main()                          | Output, exit status, settings, reports      |
"""
