#!/usr/bin/env python3
"""
Unit tests for the Upgrader state machine and callback gating.

Git is replaced by a scripted runner so individual steps can be made to fail.
"""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from gitupgrade.config import RepositoryConfig
from gitupgrade.errors import (
    CommandFailedError,
    ConfigurationError,
    ErrorCategory,
    FatalOutputError,
    UpgradeError,
    WorkingDirectoryError,
)
from gitupgrade.upgrade import (
    CommandResult,
    ProcessRunner,
    UpgradeContext,
    UpgradeMode,
    UpgradeStatus,
    Upgrader,
    upgrade,
)


class ScriptedRunner(ProcessRunner):
    """Runner that records git calls and answers from a script."""

    def __init__(self, responses=None):
        super().__init__("git")
        # subcommand -> (output, returncode)
        self.responses = responses or {}
        self.calls = []

    def git(self, cwd, *args):
        self.calls.append(list(args))
        output, returncode = self.responses.get(args[0], ("", 0))
        return CommandResult(
            command=["git", *args],
            output=output,
            returncode=returncode,
            error=None if returncode == 0 else f"exit status {returncode}",
        )

    @property
    def subcommands(self):
        return [call[0] for call in self.calls]


class TestUpgrader(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.target_dir = self.temp_dir / "app"
        self.config = RepositoryConfig(dir=self.target_dir, remote_url="https://example.com/app.git")
        self.callback = MagicMock()

    def tearDown(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def make_upgrader(self, runner, config=None, mode=None):
        return Upgrader(UpgradeContext(config or self.config, mode=mode), runner=runner)

    def test_hard_mode_step_sequence(self):
        runner = ScriptedRunner()

        result = self.make_upgrader(runner).hard().do(self.callback)

        self.assertEqual(runner.calls, [
            ["init"],
            ["remote", "add", "origin", "https://example.com/app.git"],
            ["fetch", "origin"],
            ["reset", "--hard", "origin/master"],
            ["branch", "--set-upstream-to=origin/master", "master"],
        ])
        self.assertTrue(result.success)
        self.assertEqual(result.mode, UpgradeMode.HARD)
        self.assertEqual(len(result.steps), 5)
        self.callback.assert_called_once_with()

    def test_hard_mode_non_default_branch_checks_out_tracking_branch(self):
        runner = ScriptedRunner()
        config = RepositoryConfig(dir=self.target_dir, remote_url="https://example.com/app.git",
                                  remote_name="upstream", branch="release")

        self.make_upgrader(runner, config).hard().do()

        self.assertEqual(runner.calls[-1], ["checkout", "-f", "-B", "release", "--track", "upstream/release"])

    def test_auto_mode_uses_hard_for_absent_directory(self):
        runner = ScriptedRunner()
        upgrader = self.make_upgrader(runner)

        result = upgrader.do()

        self.assertEqual(result.mode, UpgradeMode.HARD)
        self.assertTrue(self.target_dir.is_dir())
        self.assertEqual(upgrader.status, UpgradeStatus.DONE)

    def test_forced_default_falls_back_without_metadata(self):
        runner = ScriptedRunner()

        result = self.make_upgrader(runner).default().do(self.callback)

        self.assertTrue(result.fell_back)
        self.assertEqual(runner.subcommands[0], "init")
        self.callback.assert_called_once_with()

    def test_missing_remote_url_runs_nothing(self):
        runner = ScriptedRunner()
        config = RepositoryConfig(dir=self.target_dir, remote_url="")
        upgrader = self.make_upgrader(runner, config)

        with self.assertRaises(ConfigurationError) as ctx:
            upgrader.do(self.callback)

        self.assertEqual(ctx.exception.error_code, "NO_REMOTE_URL")
        self.assertEqual(ctx.exception.category, ErrorCategory.CONFIGURATION)
        self.assertEqual(runner.calls, [])
        self.assertFalse(self.target_dir.exists())
        self.callback.assert_not_called()
        self.assertEqual(upgrader.status, UpgradeStatus.FAILED)

    def test_fatal_marker_on_fetch_aborts(self):
        runner = ScriptedRunner({"fetch": ("fatal: couldn't find remote ref master\n", 0)})
        upgrader = self.make_upgrader(runner)

        with self.assertRaises(FatalOutputError) as ctx:
            upgrader.do(self.callback)

        self.assertEqual(ctx.exception.step, "fetch")
        self.assertEqual(ctx.exception.category, ErrorCategory.SEMANTIC_TOOL)
        self.assertIn("couldn't find remote ref", ctx.exception.output)
        self.assertNotIn("reset", runner.subcommands)
        self.callback.assert_not_called()
        self.assertEqual(upgrader.status, UpgradeStatus.FAILED)

    def test_fatal_marker_on_reset_aborts(self):
        runner = ScriptedRunner({"reset": ("fatal: ambiguous argument 'origin/master'\n", 0)})

        with self.assertRaises(FatalOutputError):
            self.make_upgrader(runner).do(self.callback)

        self.callback.assert_not_called()

    def test_callback_gated_on_every_step(self):
        for failing in ["init", "remote", "fetch", "reset", "branch"]:
            with self.subTest(step=failing):
                runner = ScriptedRunner({failing: (f"error: {failing} broke\n", 1)})
                callback = MagicMock()
                upgrader = self.make_upgrader(runner, mode=UpgradeMode.HARD)

                with self.assertRaises(CommandFailedError):
                    upgrader.do(callback)

                callback.assert_not_called()
                self.assertEqual(runner.subcommands[-1], failing)
                self.assertEqual(upgrader.status, UpgradeStatus.FAILED)

    def test_launch_failure_is_tool_invocation_error(self):
        runner = ProcessRunner("definitely-not-a-git-binary")

        with self.assertRaises(CommandFailedError) as ctx:
            self.make_upgrader(runner).do(self.callback)

        self.assertEqual(ctx.exception.step, "init")
        self.assertEqual(ctx.exception.category, ErrorCategory.TOOL_INVOCATION)
        self.callback.assert_not_called()

    def test_uncreatable_directory(self):
        blocker = self.temp_dir / "blocker"
        blocker.write_text("a file, not a directory")
        config = RepositoryConfig(dir=blocker / "app", remote_url="https://example.com/app.git")
        runner = ScriptedRunner()

        with self.assertRaises(WorkingDirectoryError):
            self.make_upgrader(runner, config).do(self.callback)

        self.assertEqual(runner.calls, [])
        self.callback.assert_not_called()

    def test_target_is_a_file(self):
        self.target_dir.write_text("not a directory")

        with self.assertRaises(WorkingDirectoryError) as ctx:
            self.make_upgrader(ScriptedRunner()).do()

        self.assertEqual(ctx.exception.error_code, "NOT_A_DIRECTORY")

    def test_last_mode_call_wins(self):
        upgrader = self.make_upgrader(ScriptedRunner())

        self.assertIs(upgrader.hard().default(), upgrader)
        self.assertEqual(upgrader.context.mode, UpgradeMode.DEFAULT)

        upgrader.hard()
        self.assertEqual(upgrader.context.mode, UpgradeMode.HARD)

    def test_context_is_not_mutated_by_builder(self):
        context = UpgradeContext(self.config)
        upgrader = Upgrader(context, runner=ScriptedRunner())

        upgrader.hard()

        self.assertIsNone(context.mode)
        self.assertEqual(context.with_mode(UpgradeMode.HARD).mode, UpgradeMode.HARD)

    def test_mode_locked_after_execution(self):
        upgrader = self.make_upgrader(ScriptedRunner())
        upgrader.do()

        with self.assertRaises(UpgradeError) as ctx:
            upgrader.hard()
        self.assertEqual(ctx.exception.error_code, "MODE_LOCKED")

    def test_do_runs_once(self):
        upgrader = self.make_upgrader(ScriptedRunner())
        upgrader.do()

        with self.assertRaises(UpgradeError) as ctx:
            upgrader.do()
        self.assertEqual(ctx.exception.error_code, "ALREADY_STARTED")

    def test_callback_exception_marks_failed(self):
        upgrader = self.make_upgrader(ScriptedRunner())
        callback = MagicMock(side_effect=RuntimeError("restart failed"))

        with self.assertRaises(RuntimeError):
            upgrader.do(callback)

        self.assertEqual(upgrader.status, UpgradeStatus.FAILED)

    def test_status_reaches_callback_run(self):
        upgrader = self.make_upgrader(ScriptedRunner())
        seen = []

        upgrader.do(lambda: seen.append(upgrader.status))

        self.assertEqual(seen, [UpgradeStatus.CALLBACK_RUN])
        self.assertEqual(upgrader.status, UpgradeStatus.DONE)

    def test_upgrade_function_with_missing_remote(self):
        with self.assertRaises(ConfigurationError):
            upgrade(RepositoryConfig(dir=self.target_dir), callback=self.callback)

        self.callback.assert_not_called()

    def test_error_to_dict(self):
        runner = ScriptedRunner({"fetch": ("fatal: unable to access\n", 128)})

        with self.assertRaises(CommandFailedError) as ctx:
            self.make_upgrader(runner).do()

        data = ctx.exception.to_dict()
        self.assertEqual(data["error_code"], "FETCH_FAILED")
        self.assertEqual(data["category"], "tool_invocation")
        self.assertEqual(data["step"], "fetch")
        self.assertIn("unable to access", data["output"])


if __name__ == "__main__":
    unittest.main()
