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
import os
import unittest
from pathlib import Path
from unittest import mock

from brudi.errors import ConfigError
from brudi.source.common import split_gzip_target
from brudi.source.directory import DirectoryBackend, FsBackupBackend
from brudi.source.mongo import MongoDumpBackend, MongoRestoreBackend
from brudi.source.mysql import MysqlDumpBackend, MysqlRestoreBackend
from brudi.source.postgres import PgDumpBackend, PgRestoreBackend, PsqlBackend
from brudi.source.redis import RedisDumpBackend, RedisRestoreBackend
from brudi.source.tar import TarBackend, TarRestoreBackend
from brudi.source.types import (
    BackupBackend,
    RestoreBackend,
    StreamBackupBackend,
    StreamRestoreBackend,
)
from brudi.source.xfs import XfsDumpBackend, XfsRestoreBackend
from tests.test_support import make_tree, temp_directory, temp_env


def _arg_value(line: list[str], prefix: str) -> str:
    for item in line:
        if item.startswith(prefix):
            return item[len(prefix) :]
    raise AssertionError(f"{prefix} not in {line}")


class _BackendTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.enterContext(temp_env({"PGPASSWORD": ""}))
        patcher = mock.patch("brudi.source.common.run_with_timeout", return_value=b"")
        self.run_mock = patcher.start()
        self.addCleanup(patcher.stop)

    def command_lines(self) -> list[list[str]]:
        return [call.args[1].command_line() for call in self.run_mock.call_args_list]


class TestMysqlBackends(_BackendTestCase):
    def test_dump_gzip_target(self) -> None:
        def _write_dump(_ctx, cmd, _timeout):
            Path(_arg_value(cmd.command_line(), "--result-file=")).write_bytes(b"-- dump\n")
            return b""

        self.run_mock.side_effect = _write_dump
        with temp_directory() as tmp:
            target = tmp / "dump.sql.gz"
            tree = make_tree(
                {
                    "mysqldump": {
                        "options": {
                            "flags": {"host": "db", "user": "root", "resultFile": str(target)},
                            "additionalArgs": ["--all-databases"],
                        }
                    }
                }
            )
            backend = MysqlDumpBackend.from_tree(tree)
            backend.create_backup(None)
            self.assertEqual(backend.backup_path, str(target))
            self.assertFalse((tmp / "dump.sql").exists())
            with gzip.open(target, "rb") as handle:
                self.assertEqual(handle.read(), b"-- dump\n")
            backend.clean_up()
            self.assertFalse(target.exists())
        line = self.command_lines()[0]
        self.assertEqual(line[0], "mysqldump")
        self.assertEqual(line[-1], "--all-databases")
        self.assertIn("--host=db", line)
        self.assertEqual(backend.hostname, "db")

    def test_dump_requires_host_and_result_file(self) -> None:
        with self.assertRaisesRegex(ConfigError, "mysqldump.options.flags.host"):
            MysqlDumpBackend.from_tree(make_tree({"mysqldump": {"options": {"flags": {"resultFile": "/x"}}}}))
        with self.assertRaisesRegex(ConfigError, "resultFile is required"):
            MysqlDumpBackend.from_tree(make_tree({"mysqldump": {"options": {"flags": {"host": "db"}}}}))

    def test_dump_stream_command(self) -> None:
        tree = make_tree({"mysqldump": {"options": {"flags": {"host": "db", "resultFile": "/x.sql"}}}})
        backend = MysqlDumpBackend.from_tree(tree, stdin=True)
        self.assertIsInstance(backend, StreamBackupBackend)
        self.assertEqual(backend.backup_command().command_line(), ["mysqldump", "--host=db"])

    def test_restore_sources_file(self) -> None:
        with temp_directory() as tmp:
            source = tmp / "dump.sql"
            source.write_text("select 1;", encoding="utf-8")
            tree = make_tree(
                {
                    "mysqlrestore": {
                        "options": {
                            "flags": {"host": "db", "database": "app", "user": "root"},
                            "sourceFile": str(source),
                        }
                    }
                }
            )
            backend = MysqlRestoreBackend.from_tree(tree)
            backend.restore_backup(None)
        line = self.command_lines()[0]
        self.assertEqual(line[0], "mysql")
        self.assertEqual(line[-1], f"--execute=source {source}")
        self.assertIn("--database=app", line)
        self.assertIsInstance(backend, StreamRestoreBackend)

    def test_restore_configured_command(self) -> None:
        tree = make_tree(
            {
                "mysqlrestore": {
                    "options": {"flags": {"host": "db", "database": "app"}, "command": "DROP DATABASE app"}
                }
            }
        )
        MysqlRestoreBackend.from_tree(tree).restore_backup(None)
        self.assertEqual(self.command_lines()[0][-1], "--execute=DROP DATABASE app")


class TestPostgresBackends(_BackendTestCase):
    def test_dump_password_travels_in_environment(self) -> None:
        tree = make_tree(
            {
                "pgdump": {
                    "options": {
                        "flags": {
                            "host": "pg",
                            "username": "postgres",
                            "password": "hunter2",
                            "dbname": "app",
                            "file": "/var/backups/app.dump",
                            "format": "custom",
                        }
                    }
                }
            }
        )
        backend = PgDumpBackend.from_tree(tree)
        backend.create_backup(None)
        line = self.command_lines()[0]
        self.assertEqual(os.environ["PGPASSWORD"], "hunter2")
        self.assertNotIn("hunter2", " ".join(line))
        self.assertEqual(line[0], "pg_dump")
        self.assertIn("--file=/var/backups/app.dump", line)
        self.assertEqual(backend.hostname, "pg")

    def test_dump_directory_format_cannot_stream(self) -> None:
        tree = make_tree({"pgdump": {"options": {"flags": {"format": "d", "file": "/x"}}}})
        with self.assertRaisesRegex(ConfigError, "doStdinBackup"):
            PgDumpBackend.from_tree(tree, stdin=True)

    def test_dump_stream_drops_file(self) -> None:
        tree = make_tree({"pgdump": {"options": {"flags": {"format": "c", "file": "/x", "host": "pg"}}}})
        backend = PgDumpBackend.from_tree(tree, stdin=True)
        self.assertEqual(backend.backup_command().command_line(), ["pg_dump", "--format=c", "--host=pg"])

    def test_dump_directory_cleanup(self) -> None:
        with temp_directory() as tmp:
            out = tmp / "app"
            out.mkdir()
            (out / "toc.dat").write_bytes(b"x")
            tree = make_tree({"pgdump": {"options": {"flags": {"format": "directory", "file": str(out)}}}})
            PgDumpBackend.from_tree(tree).clean_up()
            self.assertFalse(out.exists())

    def test_pg_restore_appends_source(self) -> None:
        with temp_directory() as tmp:
            source = tmp / "app.dump"
            source.write_bytes(b"PGDMP")
            tree = make_tree(
                {
                    "pgrestore": {
                        "options": {
                            "flags": {"dbname": "app", "clean": True},
                            "additionalArgs": ["--if-exists"],
                            "sourceFile": str(source),
                        }
                    }
                }
            )
            PgRestoreBackend.from_tree(tree).restore_backup(None)
        self.assertEqual(
            self.command_lines()[0],
            ["pg_restore", "--clean", "--dbname=app", "--if-exists", str(source)],
        )

    def test_pg_restore_requires_source(self) -> None:
        with self.assertRaisesRegex(ConfigError, "sourceFile is required"):
            PgRestoreBackend.from_tree(make_tree({"pgrestore": {}}))
        PgRestoreBackend.from_tree(make_tree({"pgrestore": {}}), stdin=True)

    def test_psql_includes_source_file(self) -> None:
        with temp_directory() as tmp:
            source = tmp / "app.sql"
            source.write_text("select 1;", encoding="utf-8")
            tree = make_tree(
                {"psql": {"options": {"flags": {"host": "pg", "dbname": "app"}, "sourceFile": str(source)}}}
            )
            PsqlBackend.from_tree(tree).restore_backup(None)
        line = self.command_lines()[0]
        self.assertEqual(line[:2], ["psql", f"--command=\\i {source}"])

    def test_psql_requires_host(self) -> None:
        with self.assertRaisesRegex(ConfigError, "psql.options.flags.host"):
            PsqlBackend.from_tree(make_tree({"psql": {"options": {"sourceFile": "/x.sql"}}}))


class TestMongoBackends(_BackendTestCase):
    def test_dump_requires_out_or_archive(self) -> None:
        with self.assertRaisesRegex(ConfigError, "either out or archive"):
            MongoDumpBackend.from_tree(make_tree({"mongodump": {"options": {"flags": {"host": "mongo"}}}}))

    def test_dump_to_directory_and_cleanup(self) -> None:
        with temp_directory() as tmp:
            out = tmp / "dump"
            tree = make_tree({"mongodump": {"options": {"flags": {"host": "mongo", "out": str(out)}}}})
            backend = MongoDumpBackend.from_tree(tree)
            backend.create_backup(None)
            self.assertEqual(
                self.command_lines()[0],
                ["mongodump", "--host=mongo", f"--out={out}"],
            )
            (out / "app").mkdir(parents=True)
            (out / "app" / "orders.bson").write_bytes(b"x")
            (out / "app" / "orders.metadata.json").write_bytes(b"x")
            backend.clean_up()
            self.assertFalse(out.exists())

    def test_dump_stream_uses_bare_archive(self) -> None:
        tree = make_tree(
            {"mongodump": {"options": {"flags": {"host": "mongo", "archive": "/x.archive", "gzip": True}}}}
        )
        backend = MongoDumpBackend.from_tree(tree, stdin=True)
        self.assertEqual(
            backend.backup_command().command_line(),
            ["mongodump", "--host=mongo", "--gzip", "--archive"],
        )

    def test_restore_requires_dir_or_archive(self) -> None:
        with self.assertRaisesRegex(ConfigError, "either dir or archive"):
            MongoRestoreBackend.from_tree(make_tree({"mongorestore": {"options": {"flags": {"host": "m"}}}}))

    def test_restore_archive(self) -> None:
        tree = make_tree(
            {"mongorestore": {"options": {"flags": {"host": "m", "archive": "/x.archive", "drop": True}}}}
        )
        backend = MongoRestoreBackend.from_tree(tree)
        backend.restore_backup(None)
        self.assertEqual(
            self.command_lines()[0],
            ["mongorestore", "--host=m", "--archive=/x.archive", "--drop"],
        )
        self.assertEqual(backend.backup_path, "/x.archive")
        self.assertNotIsInstance(backend, StreamRestoreBackend)


class TestRedisBackends(_BackendTestCase):
    def test_dump_command(self) -> None:
        tree = make_tree({"redisdump": {"options": {"flags": {"host": "cache", "rdb": "/x/dump.rdb"}}}})
        backend = RedisDumpBackend.from_tree(tree)
        backend.create_backup(None)
        self.assertEqual(self.command_lines()[0], ["redis-cli", "-h", "cache", "--rdb", "/x/dump.rdb"])

    def test_dump_rejects_streaming(self) -> None:
        tree = make_tree({"redisdump": {"options": {"flags": {"host": "cache", "rdb": "/x/dump.rdb"}}}})
        with self.assertRaisesRegex(ConfigError, "doStdinBackup"):
            RedisDumpBackend.from_tree(tree, stdin=True)

    def test_restore_replaces_rdb(self) -> None:
        with temp_directory() as tmp:
            saved = tmp / "saved.rdb.gz"
            with gzip.open(saved, "wb") as handle:
                handle.write(b"REDIS0009")
            data_dir = tmp / "data"
            data_dir.mkdir()
            tree = make_tree(
                {
                    "redisrestore": {
                        "options": {
                            "flags": {"host": "cache", "password": "pw"},
                            "rdb": str(saved),
                            "dataDir": str(data_dir),
                        }
                    }
                }
            )
            RedisRestoreBackend.from_tree(tree).restore_backup(None)
            self.assertEqual((data_dir / "dump.rdb").read_bytes(), b"REDIS0009")
        self.assertEqual(
            self.command_lines(),
            [
                ["redis-cli", "-h", "cache", "-a", "pw", "CONFIG", "SET", "appendonly", "no"],
                ["redis-cli", "-h", "cache", "-a", "pw", "SHUTDOWN", "NOSAVE"],
            ],
        )

    def test_restore_requires_paths(self) -> None:
        with self.assertRaisesRegex(ConfigError, "redisrestore.options.rdb"):
            RedisRestoreBackend.from_tree(make_tree({"redisrestore": {"options": {"dataDir": "/var/lib/redis"}}}))


class TestTarBackends(_BackendTestCase):
    def test_create_is_forced(self) -> None:
        tree = make_tree(
            {"tar": {"options": {"flags": {"gzip": True, "file": "/x/www.tar.gz"}, "paths": ["/srv/www"]}}}
        )
        backend = TarBackend.from_tree(tree)
        backend.create_backup(None)
        self.assertEqual(
            self.command_lines()[0],
            ["tar", "-c", "-z", "-f", "/x/www.tar.gz", "/srv/www"],
        )
        self.assertEqual(backend.backup_path, "/x/www.tar.gz")

    def test_stream_writes_to_stdout(self) -> None:
        tree = make_tree({"tar": {"options": {"paths": ["/srv/www"]}}})
        backend = TarBackend.from_tree(tree, stdin=True)
        self.assertEqual(backend.backup_command().args, ("-c", "-f", "-", "/srv/www"))

    def test_file_required_without_stream(self) -> None:
        with self.assertRaisesRegex(ConfigError, "tar.options.flags.file"):
            TarBackend.from_tree(make_tree({"tar": {"options": {"paths": ["/srv/www"]}}}))

    def test_restore_extracts(self) -> None:
        tree = make_tree(
            {"tarrestore": {"options": {"flags": {"file": "/x/www.tar", "target": "/"}}, "hostName": "web"}}
        )
        backend = TarRestoreBackend.from_tree(tree)
        backend.restore_backup(None)
        self.assertEqual(self.command_lines()[0], ["tar", "-x", "-C", "/", "-f", "/x/www.tar"])
        self.assertEqual(backend.hostname, "web")


class TestDirectoryBackends(_BackendTestCase):
    def test_directory_hostname_defaults_to_machine(self) -> None:
        tree = make_tree({"directory": {"options": {"path": "/srv/www"}}})
        with mock.patch("brudi.source.directory.system_hostname", return_value="web01"):
            backend = DirectoryBackend.from_tree(tree)
            self.assertEqual(backend.hostname, "web01")
        backend.create_backup(None)
        backend.clean_up()
        self.assertEqual(backend.backup_path, "/srv/www")
        self.assertIsInstance(backend, BackupBackend)
        self.run_mock.assert_not_called()

    def test_fsbackup_checks_directory(self) -> None:
        with temp_directory() as tmp:
            file_path = tmp / "file"
            file_path.write_bytes(b"x")
            FsBackupBackend.from_tree(make_tree({"fsbackup": {"options": {"path": str(tmp)}}})).create_backup(None)
            with self.assertRaisesRegex(ConfigError, "is not a directory"):
                FsBackupBackend.from_tree(
                    make_tree({"fsbackup": {"options": {"path": str(file_path)}}})
                ).create_backup(None)
            with self.assertRaisesRegex(ConfigError, "does not exist"):
                FsBackupBackend.from_tree(
                    make_tree({"fsbackup": {"options": {"path": str(tmp / "missing")}}})
                ).create_backup(None)

    def test_path_required(self) -> None:
        with self.assertRaisesRegex(ConfigError, "directory.options.path"):
            DirectoryBackend.from_tree(make_tree())


class TestXfsBackends(_BackendTestCase):
    def test_dump_command(self) -> None:
        tree = make_tree(
            {"xfsdump": {"options": {"flags": {"destination": "/x/data.xfsdump", "level": 1}, "targetFs": "/mnt"}}}
        )
        XfsDumpBackend.from_tree(tree).create_backup(None)
        self.assertEqual(self.command_lines()[0], ["xfsdump", "-l", "1", "-f", "/x/data.xfsdump", "/mnt"])

    def test_dump_stream_destination(self) -> None:
        tree = make_tree({"xfsdump": {"options": {"targetFs": "/mnt"}}})
        backend = XfsDumpBackend.from_tree(tree, stdin=True)
        self.assertEqual(backend.backup_command().args, ("-f", "-", "/mnt"))

    def test_restore_requires_source_and_destination(self) -> None:
        with self.assertRaisesRegex(ConfigError, "xfsrestore.options.flags.source"):
            XfsRestoreBackend.from_tree(make_tree({"xfsrestore": {"options": {"destFs": "/mnt"}}}))
        tree = make_tree({"xfsrestore": {"options": {"flags": {"source": "/x/data.xfsdump"}, "destFs": "/mnt"}}})
        backend = XfsRestoreBackend.from_tree(tree)
        backend.restore_backup(None)
        self.assertEqual(self.command_lines()[0], ["xfsrestore", "-f", "/x/data.xfsdump", "/mnt"])
        self.assertIsInstance(backend, RestoreBackend)


class TestGzipTargets(unittest.TestCase):
    def test_split_gzip_target(self) -> None:
        cases = (
            ("/var/backups/db.sql.gz", ("/var/backups/db.sql", True)),
            ("/var/backups/db.sql", ("/var/backups/db.sql", False)),
            ("/var/backups/gz", ("/var/backups/gz", False)),
        )
        for path, expected in cases:
            with self.subTest(path=path):
                self.assertEqual(split_gzip_target(path), expected)


if __name__ == "__main__":
    unittest.main()
