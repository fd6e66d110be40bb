"""End-to-end tests for Scanner: traversal, parallel hashing, grouping and statistics."""
import tempfile
import unittest
from pathlib import Path

from dupscan import Scanner, Processor, FileAccessError, TraversalError

from .test_utils import make_tree, group_sets, RecordingObserver


class ScannerTest(unittest.TestCase):
    def test_one_duplicate_pair(self):
        """a.txt and b.txt share content, c.txt does not."""
        with tempfile.TemporaryDirectory() as tmpdir:
            files = make_tree(Path(tmpdir), {'a.txt': b'hello', 'b.txt': b'hello', 'c.txt': b'world'})

            with Processor(2) as processor:
                result = Scanner(processor).run(tmpdir)

            self.assertEqual(3, len(result.files))
            self.assertEqual({frozenset([files['a.txt'], files['b.txt']])}, group_sets(result.duplicates))
            flags = {row.path: row.is_duplicate for row in result.report.files}
            self.assertEqual({files['a.txt']: True, files['b.txt']: True, files['c.txt']: False}, flags)
            self.assertEqual([(2, 10, 5)], [(row.occurrences, row.total_size, row.potential_save)
                                            for row in result.report.groups])
            self.assertEqual([], result.failures)

    def test_empty_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            observer = RecordingObserver()

            with Processor(2) as processor:
                result = Scanner(processor).run(tmpdir, observer=observer)

            self.assertEqual([], result.files)
            self.assertEqual([], result.duplicates)
            self.assertEqual([], result.report.files)
            self.assertEqual([], result.report.groups)
            self.assertEqual([], result.failures)
            self.assertEqual([], observer.events)

    def test_zero_byte_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            make_tree(Path(tmpdir), {'empty1': b'', 'empty2': b''})

            with Processor(2) as processor:
                result = Scanner(processor).run(tmpdir)

            self.assertEqual(1, len(result.duplicates))
            row = result.report.groups[0]
            self.assertEqual((2, 0, 0), (row.occurrences, row.total_size, row.potential_save))

    def test_file_deleted_before_hashing_resilient(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            files = make_tree(Path(tmpdir), {'a': b'dup', 'b': b'dup', 'c': b'dup', 'd': b'solo'})

            with Processor(2) as processor:
                scanner = Scanner(processor)
                paths = scanner.collect(tmpdir)
                files['c'].unlink()
                result = scanner.scan(paths)

            self.assertEqual([files['c']], [failure.path for failure in result.failures])
            self.assertEqual('hash', result.failures[0].operation)
            self.assertEqual({frozenset([files['a'], files['b']])}, group_sets(result.duplicates))
            self.assertEqual({files['a'], files['b'], files['d']}, {row.path for row in result.report.files})

    def test_file_deleted_before_hashing_fail_fast(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            files = make_tree(Path(tmpdir), {'a': b'dup', 'b': b'dup', 'c': b'dup'})

            with Processor(2) as processor:
                scanner = Scanner(processor, fail_fast=True)
                paths = scanner.collect(tmpdir)
                files['b'].unlink()

                with self.assertRaises(FileAccessError) as cm:
                    scanner.scan(paths)

            self.assertEqual(files['b'], cm.exception.path)

    def test_grouping_matches_content(self):
        contents = {f'dir{i % 3}/file{i:02d}': f'payload-{i % 4}'.encode() * (i % 4 + 1) for i in range(24)}
        with tempfile.TemporaryDirectory() as tmpdir:
            files = make_tree(Path(tmpdir), contents)

            with Processor(4) as processor:
                result = Scanner(processor, 'mmh3').run(tmpdir)

            expected = {}
            for name, path in files.items():
                expected.setdefault(contents[name], set()).add(path)
            self.assertEqual({frozenset(paths) for paths in expected.values() if len(paths) > 1},
                             group_sets(result.duplicates))
            for group in result.duplicates:
                self.assertEqual(1, len({path.read_bytes() for path in group.paths}))

    def test_repeated_scans_agree(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            make_tree(Path(tmpdir), {f'f{i:02d}': str(i % 6).encode() for i in range(30)})

            with Processor(8) as processor:
                scanner = Scanner(processor)
                first = scanner.run(tmpdir)
                second = scanner.run(tmpdir)

            self.assertEqual(group_sets(first.duplicates), group_sets(second.duplicates))
            self.assertEqual(6, len(first.duplicates))

    def test_pattern_filters_before_hashing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            files = make_tree(Path(tmpdir), {'a.jpg': b'x', 'b.jpg': b'x', 'c.txt': b'x'})

            with Processor(2) as processor:
                result = Scanner(processor).run(tmpdir, '.jpg')

            self.assertEqual([files['a.jpg'], files['b.jpg']], result.files)
            self.assertEqual({frozenset([files['a.jpg'], files['b.jpg']])}, group_sets(result.duplicates))

    def test_missing_root(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with Processor(1) as processor:
                with self.assertRaises(TraversalError):
                    Scanner(processor).run(Path(tmpdir) / 'missing')

    def test_unknown_algorithm(self):
        with Processor(1) as processor:
            with self.assertRaises(ValueError):
                Scanner(processor, 'crc32')

    def test_hash_algorithm(self):
        with Processor(1) as processor:
            self.assertEqual('sha256', Scanner(processor).hash_algorithm)
            self.assertEqual('md5', Scanner(processor, 'md5').hash_algorithm)


if __name__ == '__main__':
    unittest.main()
