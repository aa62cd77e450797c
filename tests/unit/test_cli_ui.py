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


import io
import unittest

from rich.console import Console

from brudi.cli.ui import THEME, UIContext, build_kv_table, build_table, configure_ui


def _render(table) -> str:
    console = Console(file=io.StringIO(), width=120, theme=THEME)
    console.print(table)
    return console.file.getvalue()


class TestCliUi(unittest.TestCase):
    def test_build_table_keeps_brackets(self) -> None:
        table = build_table(("Path", "Size"), [("/data/[old]/a.txt", 10)], title="Matches")
        output = _render(table)
        self.assertIn("/data/[old]/a.txt", output)
        self.assertIn("10", output)
        self.assertEqual(table.row_count, 1)

    def test_build_kv_table(self) -> None:
        table = build_kv_table([("Total size", "2048")], title="Stats")
        output = _render(table)
        self.assertIn("Total size", output)
        self.assertIn("2048", output)

    def test_configure_ui_no_color(self) -> None:
        context = UIContext(
            theme=THEME,
            console=Console(file=io.StringIO()),
            console_err=Console(file=io.StringIO(), stderr=True),
        )
        configure_ui(no_color=True, context=context)
        self.assertTrue(context.console.no_color)
        self.assertTrue(context.console_err.no_color)


if __name__ == "__main__":
    unittest.main()
