import os
import stat
import tempfile
import unittest
from pathlib import Path

from dockshift.core.errors import ToolUnavailable
from dockshift.dock.locator import WHICH_PATH, DockToolLocator
from dockshift.testing import FakeDockRunner


def _make_executable(path: Path) -> str:
    path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


class TestDockToolLocator(unittest.TestCase):
    def test_candidate_path_wins_without_subprocess(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            tool = _make_executable(Path(td) / "dockutil")
            runner = FakeDockRunner(which_result="/somewhere/else/dockutil")
            locator = DockToolLocator(runner, candidates=[str(Path(td) / "missing"), tool])
            self.assertEqual(locator.locate(), tool)
            self.assertEqual(runner.calls, [])

    def test_non_executable_candidate_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            plain = Path(td) / "dockutil"
            plain.write_text("", encoding="utf-8")
            os.chmod(plain, 0o644)
            runner = FakeDockRunner(which_result=None)
            locator = DockToolLocator(runner, candidates=[str(plain)])
            self.assertIsNone(locator.locate())

    def test_falls_back_to_which(self) -> None:
        runner = FakeDockRunner(which_result="/opt/tools/dockutil")
        locator = DockToolLocator(runner, candidates=())
        self.assertEqual(locator.locate(), "/opt/tools/dockutil")
        self.assertEqual(runner.calls, [(WHICH_PATH, ["dockutil"])])

    def test_result_is_cached_until_invalidated(self) -> None:
        runner = FakeDockRunner(which_result="/opt/tools/dockutil")
        locator = DockToolLocator(runner, candidates=())
        locator.locate()
        locator.locate()
        self.assertEqual(len(runner.calls), 1)

        locator.invalidate()
        self.assertIsNone(locator.cached_path)
        locator.locate()
        self.assertEqual(len(runner.calls), 2)

    def test_miss_is_not_cached(self) -> None:
        runner = FakeDockRunner(which_result=None)
        locator = DockToolLocator(runner, candidates=())
        self.assertIsNone(locator.locate())
        runner.which_result = "/opt/tools/dockutil"
        self.assertEqual(locator.locate(), "/opt/tools/dockutil")

    def test_require_raises_tool_unavailable(self) -> None:
        locator = DockToolLocator(FakeDockRunner(which_result=None), candidates=())
        with self.assertRaises(ToolUnavailable) as ctx:
            locator.require()
        self.assertEqual(ctx.exception.code, "dock.tool_unavailable")
        self.assertIn("PATH", ctx.exception.data["searched"])

    def test_override_is_checked_first(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            override = _make_executable(Path(td) / "my-dockutil")
            other = _make_executable(Path(td) / "dockutil")
            locator = DockToolLocator(FakeDockRunner(), candidates=[other], override=override)
            self.assertEqual(locator.locate(), override)


if __name__ == "__main__":
    unittest.main()
