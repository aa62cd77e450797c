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


import unittest
from unittest import mock

from brudi.errors import CommandError, ConfigError, UnsupportedKindError
from brudi.process.command import CommandSpec
from brudi.source import restore as restore_module
from brudi.source.restore import do_restore_for_kind, restore_backend_for_kind
from tests.test_support import make_tree


class _FakeRestore:
    kind = "fakerestore"
    instances: list["_FakeRestore"] = []

    def __init__(self, *, stdin: bool = False) -> None:
        self.stdin = stdin
        self.calls: list[str] = []

    @classmethod
    def from_tree(cls, tree, *, stdin: bool = False):
        backend = cls(stdin=stdin)
        cls.instances.append(backend)
        return backend

    def restore_backup(self, ctx) -> None:
        self.calls.append("restore_backup")

    @property
    def backup_path(self) -> str:
        return "/var/backups/fake.dump"

    @property
    def hostname(self) -> str:
        return "db01"

    def clean_up(self) -> None:
        self.calls.append("clean_up")


class _FakeStreamRestore(_FakeRestore):
    def restore_command(self) -> CommandSpec:
        return CommandSpec(binary="fakerestore", args=("--stdin",))


class _RestoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        _FakeRestore.instances = []
        self.enterContext(
            mock.patch.dict(
                restore_module.RESTORE_BACKENDS,
                {
                    "fakerestore": _FakeRestore,
                    "mysqlrestore": _FakeStreamRestore,
                    "fsrestore": _FakeRestore,
                },
            )
        )
        self.client = mock.MagicMock()
        self.client.config.backup.flags.stdin_filename = ""
        self.from_tree = self.enterContext(mock.patch.object(restore_module.ResticClient, "from_tree"))
        self.from_tree.return_value = self.client


class TestDoRestoreForKind(_RestoreTestCase):
    def test_unknown_kind(self) -> None:
        with self.assertRaises(UnsupportedKindError):
            restore_backend_for_kind("nosuchkind", make_tree())

    def test_without_restic(self) -> None:
        do_restore_for_kind(None, "fakerestore", make_tree())
        self.assertEqual(_FakeRestore.instances[0].calls, ["restore_backup"])
        self.from_tree.assert_not_called()

    def test_restic_restore_runs_first(self) -> None:
        order: list[str] = []
        self.client.do_restore.side_effect = lambda ctx: order.append("restic")
        with mock.patch.object(_FakeRestore, "restore_backup", side_effect=lambda ctx: order.append("backend")):
            do_restore_for_kind(None, "fakerestore", make_tree(), use_restic=True, cleanup=True)
        self.assertEqual(order, ["restic", "backend"])
        self.assertEqual(self.from_tree.call_args.kwargs["backup_paths"], ["/var/backups/fake.dump"])
        self.assertEqual(_FakeRestore.instances[0].calls, ["clean_up"])

    def test_cleanup_skipped_after_failure(self) -> None:
        self.client.do_restore.side_effect = CommandError(["restic", "restore"], 1)
        with self.assertRaises(CommandError):
            do_restore_for_kind(None, "fakerestore", make_tree(), use_restic=True, cleanup=True)
        self.assertEqual(_FakeRestore.instances[0].calls, [])


class TestStreamingRestore(_RestoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.tree = make_tree({"doStdinBackup": True})

    def test_requires_restic(self) -> None:
        with self.assertRaisesRegex(ConfigError, "restic is disabled"):
            do_restore_for_kind(None, "mysqlrestore", self.tree)

    def test_non_stream_kind_rejected(self) -> None:
        with self.assertRaisesRegex(ConfigError, "can't restore fakerestore from STDIN"):
            do_restore_for_kind(None, "fakerestore", self.tree, use_restic=True)

    def test_dump_piped_into_restore_command(self) -> None:
        do_restore_for_kind(None, "mysqlrestore", self.tree, use_restic=True, cleanup=True)
        backend = _FakeRestore.instances[0]
        self.assertTrue(backend.stdin)
        self.assertEqual(backend.calls, [])
        _, sink, filename = self.client.do_stdin_restore.call_args.args
        self.assertEqual(sink.args, ("--stdin",))
        self.assertEqual(filename, "mysqlrestore")
        self.client.do_restore.assert_not_called()

    def test_directory_kinds_extract_with_tar(self) -> None:
        do_restore_for_kind(None, "fsrestore", self.tree, use_restic=True)
        self.client.do_tar_restore.assert_called_once_with(None, "fsrestore")
        self.assertEqual(self.from_tree.call_args.kwargs["backup_paths"], ["/var/backups/fake.dump"])


if __name__ == "__main__":
    unittest.main()
