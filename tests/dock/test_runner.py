import sys
import tempfile
import unittest
from pathlib import Path

from dockshift.core.errors import CommandFailed, ExecutableNotFound
from dockshift.dock.runner import CommandRunner


class TestCommandRunner(unittest.TestCase):
    def test_captures_stdout_and_exit_code(self) -> None:
        out = CommandRunner().run(sys.executable, ["-c", "import sys; print('hello'); sys.stderr.write('warn')"])
        self.assertEqual(out.stdout.strip(), "hello")
        self.assertEqual(out.stderr, "warn")
        self.assertEqual(out.exit_code, 0)

    def test_arguments_are_not_shell_interpreted(self) -> None:
        arg = "a b; echo $HOME 'quoted'"
        out = CommandRunner().run(sys.executable, ["-c", "import sys; print(sys.argv[1])", arg])
        self.assertEqual(out.stdout.rstrip("\n"), arg)

    def test_nonzero_exit_raises_command_failed_with_stderr(self) -> None:
        with self.assertRaises(CommandFailed) as ctx:
            CommandRunner().run(sys.executable, ["-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"])
        self.assertEqual(ctx.exception.code, "command.failed")
        self.assertEqual(ctx.exception.stderr, "boom")
        self.assertEqual(ctx.exception.data["exit_code"], 3)

    def test_nonzero_exit_without_check_returns_result(self) -> None:
        out = CommandRunner().run(sys.executable, ["-c", "import sys; sys.exit(2)"], check=False)
        self.assertEqual(out.exit_code, 2)

    def test_missing_executable_fails_before_spawn(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            missing = str(Path(td) / "nope")
            with self.assertRaises(ExecutableNotFound) as ctx:
                CommandRunner().run(missing, ["--list"])
            self.assertEqual(ctx.exception.code, "command.not_found")

    def test_timeout_is_reported_as_command_failed(self) -> None:
        runner = CommandRunner(timeout_s=0.2)
        with self.assertRaises(CommandFailed) as ctx:
            runner.run(sys.executable, ["-c", "import time; time.sleep(5)"])
        self.assertEqual(ctx.exception.code, "command.timeout")


if __name__ == "__main__":
    unittest.main()
