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


import os
import unittest
from unittest import mock

from brudi.errors import CommandError, RepoAlreadyInitializedError
from brudi.process.command import CommandSpec
from brudi.restic import commands
from brudi.restic.client import ResticClient
from brudi.restic.config import ResticConfig
from brudi.restic.types import BackupResult
from tests.test_support import SNAPSHOT_ID, make_tree, restic_section, temp_env


def _client(**kwargs) -> ResticClient:
    config = ResticConfig(repository="/srv/restic-repo", password="hunter2")
    return ResticClient(config, **kwargs)


class TestResticClientSetup(unittest.TestCase):
    def test_backup_host_and_paths(self) -> None:
        client = _client(hostname="db01", backup_paths=["/var/backups/dump.sql"])
        self.assertEqual(client.config.backup.flags.host, "db01")
        self.assertEqual(client.config.backup.paths, ["/var/backups/dump.sql"])
        self.assertEqual(client.config.restore.flags.path, "/var/backups/dump.sql")

    def test_configured_host_wins(self) -> None:
        config = ResticConfig()
        config.backup.flags.host = "configured"
        client = ResticClient(config, hostname="db01")
        self.assertEqual(client.config.backup.flags.host, "configured")

    def test_from_tree(self) -> None:
        env: dict[str, str] = {}
        tree = make_tree({"restic": restic_section(backup={"flags": {"tags": ["nightly"]}})})
        client = ResticClient.from_tree(tree, hostname="db01", backup_paths=["/data"], environ=env)
        self.assertEqual(client.config.backup.flags.tags, ["nightly"])
        self.assertEqual(client.config.backup.paths, ["/data"])
        self.assertEqual(env["RESTIC_PASSWORD"], "hunter2")


class TestResticClientOperations(unittest.TestCase):
    def test_init_already_initialized_is_logged(self) -> None:
        client = _client()
        with mock.patch.object(commands, "init_backup", side_effect=RepoAlreadyInitializedError()):
            with self.assertLogs("brudi.restic.client", level="INFO") as logs:
                client.init_repository(None)
        self.assertIn("restic repo is already initialized", "\n".join(logs.output))

    def test_init_failure_propagates(self) -> None:
        client = _client()
        with mock.patch.object(commands, "init_backup", side_effect=CommandError(["restic", "init"], 1)):
            with self.assertLogs("brudi.restic.client", level="ERROR"):
                with self.assertRaises(CommandError):
                    client.init_repository(None)

    def test_do_backup(self) -> None:
        client = _client(hostname="db01", backup_paths=["/data"])
        result = BackupResult(snapshot_id=SNAPSHOT_ID)
        with mock.patch.object(commands, "init_backup", return_value=b""), mock.patch.object(
            commands, "create_backup", return_value=result
        ) as create_backup:
            self.assertEqual(client.do_backup(None), result)
        args = create_backup.call_args
        self.assertIs(args.args[2], client.config.backup)
        self.assertTrue(args.kwargs["unlock_first"])

    def test_do_stdin_backup(self) -> None:
        client = _client(hostname="db01")
        source = CommandSpec(binary="pg_dump")
        result = BackupResult(snapshot_id=SNAPSHOT_ID)
        with mock.patch.object(commands, "init_backup", return_value=b""), mock.patch.object(
            commands, "unlock", return_value=b""
        ) as unlock, mock.patch.object(commands, "create_stdin_backup", return_value=result) as create:
            self.assertEqual(client.do_stdin_backup(None, source, "pgdump"), result)
        unlock.assert_called_once()
        self.assertIs(create.call_args.args[3], source)
        self.assertEqual(create.call_args.args[4], "pgdump")
        self.assertEqual(create.call_args.kwargs["nice"], commands.STREAM_NICE)

    def test_do_stdin_restore_dumps_restore_id(self) -> None:
        client = _client()
        client.config.restore.id = "abc123"
        sink = CommandSpec(binary="psql")
        with mock.patch.object(commands, "unlock", return_value=b""), mock.patch.object(
            commands, "dump_to", return_value=b""
        ) as dump_to:
            client.do_stdin_restore(None, sink, "psql")
        dump_opts = dump_to.call_args.args[2]
        self.assertEqual((dump_opts.id, dump_opts.file), ("abc123", "psql"))
        self.assertIs(dump_to.call_args.args[3], sink)

    def test_do_forget_returns_removed(self) -> None:
        client = _client()
        with mock.patch.object(commands, "forget", return_value=(["gone1"], b"[]")):
            self.assertEqual(client.do_forget(None), ["gone1"])

    def test_unlock_remove_all(self) -> None:
        client = _client()
        with mock.patch.object(commands, "unlock", return_value=b"") as unlock:
            client.unlock(None, remove_all=True)
        self.assertTrue(unlock.call_args.args[2].flags.remove_all)

    def test_maintenance_passthrough(self) -> None:
        client = _client()
        for name, method in (
            ("prune", client.do_prune),
            ("rebuild_index", client.rebuild_index),
            ("check", client.check),
            ("tag", client.tag),
        ):
            with self.subTest(command=name):
                with mock.patch.object(commands, name, return_value=b"ok") as patched:
                    self.assertEqual(method(None), b"ok")
                patched.assert_called_once()


class TestResticClientEnvironment(unittest.TestCase):
    def test_from_tree_exports_to_process_environment(self) -> None:
        tree = make_tree({"restic": restic_section()})
        with temp_env({"RESTIC_REPOSITORY": "", "RESTIC_PASSWORD": ""}):
            ResticClient.from_tree(tree, hostname="db01")
            self.assertEqual(os.environ["RESTIC_REPOSITORY"], "/srv/restic-repo")


if __name__ == "__main__":
    unittest.main()
