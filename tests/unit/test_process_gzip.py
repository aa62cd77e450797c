# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.


import gzip
import unittest
from pathlib import Path

from brudi.process.gzip import check_and_gunzip_file, gzip_file, is_gzipped, strip_gzip_suffix
from tests.test_support import temp_directory


class TestGzipHelpers(unittest.TestCase):
    def test_gzip_file_writes_sibling(self) -> None:
        with temp_directory() as tmp:
            source = tmp / "dump.sql"
            source.write_bytes(b"CREATE TABLE t (id int);\n")
            target = gzip_file(source)
            self.assertEqual(target, str(tmp / "dump.sql.gz"))
            with gzip.open(target, "rb") as handle:
                self.assertEqual(handle.read(), b"CREATE TABLE t (id int);\n")
            self.assertTrue(is_gzipped(target))
            self.assertFalse(is_gzipped(source))

    def test_plain_file_is_returned_unchanged(self) -> None:
        with temp_directory() as tmp:
            source = tmp / "dump.sql"
            source.write_bytes(b"select 1;")
            self.assertEqual(check_and_gunzip_file(source), str(source))

    def test_gz_suffix_is_stripped(self) -> None:
        with temp_directory() as tmp:
            source = tmp / "dump.sql.gz"
            with gzip.open(source, "wb") as handle:
                handle.write(b"select 1;")
            extracted = check_and_gunzip_file(source)
            self.assertEqual(extracted, str(tmp / "dump.sql"))
            self.assertEqual(Path(extracted).read_bytes(), b"select 1;")

    def test_gzip_data_without_suffix(self) -> None:
        with temp_directory() as tmp:
            source = tmp / "dump.rdb"
            with gzip.open(source, "wb") as handle:
                handle.write(b"REDIS0009")
            extracted = check_and_gunzip_file(source)
            self.assertEqual(extracted, str(tmp / "dump.rdb.raw"))
            self.assertEqual(Path(extracted).read_bytes(), b"REDIS0009")

    def test_strip_gzip_suffix(self) -> None:
        self.assertEqual(strip_gzip_suffix("a.tar.gz"), "a.tar")
        self.assertEqual(strip_gzip_suffix("a.tar"), "a.tar")


if __name__ == "__main__":
    unittest.main()
