"""Unit tests for the delete command.

Runs the real engine against temporary trees; only direct removal is
patched where a stubborn entry is needed.
"""

import json
import threading
from pathlib import Path
from unittest.mock import patch

from forcedel.cli.commands import delete as delete_cmd
from forcedel.cli.main import app
from forcedel.core.paths import get_audit_log_path
from forcedel.core.state import StateManager
from forcedel.engine import engine as engine_module
from forcedel.engine.engine import DeletionEngine
from forcedel.engine.errors import DeletionFailure
from forcedel.models.entry import Entry
from typer.testing import CliRunner

runner = CliRunner()


def _refuse(path: Path):
    real = engine_module._remove_direct

    def _remove(entry: Entry) -> None:
        if entry.path == str(path):
            raise DeletionFailure("Permission denied", path=entry.path)
        real(entry)

    return _remove


class TestDeleteCommand:
    """Tests for forcedel delete."""

    def test_help(self) -> None:
        """delete shows its options."""
        result = runner.invoke(app, ["delete", "--help"])

        assert result.exit_code == 0
        for option in ("--yes", "--dry-run", "--no-force", "--details", "--json"):
            assert option in result.output

    def test_deletes_tree_with_yes(self, sample_tree: Path) -> None:
        """--yes skips the prompt and removes everything."""
        result = runner.invoke(app, ["delete", str(sample_tree), "--yes"])

        assert result.exit_code == 0, result.output
        assert not sample_tree.exists()
        assert "Deleted 7 entries (16 B)." in result.output

    def test_confirmation_declined(self, sample_tree: Path) -> None:
        """Answering no leaves the tree alone."""
        result = runner.invoke(app, ["delete", str(sample_tree)], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.output
        assert sample_tree.exists()

    def test_confirmation_accepted(self, sample_tree: Path) -> None:
        """Answering yes deletes the tree."""
        result = runner.invoke(app, ["delete", str(sample_tree)], input="y\n")

        assert result.exit_code == 0
        assert not sample_tree.exists()

    def test_missing_path_exit_code(self, tmp_path: Path) -> None:
        """A missing path exits with code 2."""
        result = runner.invoke(app, ["delete", str(tmp_path / "missing"), "--yes"])

        assert result.exit_code == 2
        assert "does not exist" in result.output

    def test_dry_run_keeps_tree_and_history(self, sample_tree: Path) -> None:
        """A dry run needs no confirmation and records nothing."""
        result = runner.invoke(app, ["delete", str(sample_tree), "--dry-run"])

        assert result.exit_code == 0
        assert sample_tree.exists()
        assert "would be deleted" in result.output
        assert StateManager().get_history() == []
        assert not get_audit_log_path().exists()

    def test_records_history_and_audit(self, sample_tree: Path) -> None:
        """A real run is appended to history and the audit log."""
        runner.invoke(app, ["delete", str(sample_tree), "--yes"])

        history = StateManager().get_history()
        assert len(history) == 1
        assert history[0].root == str(sample_tree)
        assert history[0].deleted == 7
        assert history[0].metadata == {"command": "forcedel delete"}
        assert "COMPLETE | root=" in get_audit_log_path().read_text()

    def test_history_disabled_by_config(self, sample_tree: Path) -> None:
        """record_history = false skips the history file."""
        from forcedel.core.paths import get_config_path

        config_path = get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text("record_history = false\naudit_log = false\n")

        result = runner.invoke(app, ["delete", str(sample_tree), "--yes"])

        assert result.exit_code == 0
        assert StateManager().get_history() == []
        assert not get_audit_log_path().exists()

    def test_invalid_config_exits(self, sample_tree: Path) -> None:
        """A broken config file aborts before touching anything."""
        from forcedel.core.paths import get_config_path

        config_path = get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text("normalize = [")

        result = runner.invoke(app, ["delete", str(sample_tree), "--yes"])

        assert result.exit_code == 1
        assert sample_tree.exists()

    def test_failure_exit_code(self, sample_tree: Path) -> None:
        """Entries left behind exit with code 1 and are listed."""
        stuck = sample_tree / "z.txt"

        with patch("forcedel.engine.engine._remove_direct", side_effect=_refuse(stuck)):
            result = runner.invoke(app, ["delete", str(sample_tree), "--yes", "--no-force"])

        assert result.exit_code == 1
        assert stuck.exists()
        assert "Failures" in result.output
        assert "2 failed" in result.output

    def test_json_output(self, sample_tree: Path) -> None:
        """--json prints the run result."""
        result = runner.invoke(app, ["delete", str(sample_tree), "--yes", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == 7
        assert data["bytes_freed"] == 16
        assert data["cancelled"] is False
        assert len(data["succeeded"]) == 7

    def test_details_report(self, sample_tree: Path) -> None:
        """--details lists removed entries."""
        result = runner.invoke(app, ["delete", str(sample_tree), "--yes", "--details"])

        assert result.exit_code == 0
        assert "Deleted Entries" in result.output
        assert "c.txt" in result.output

    def test_verbose_prints_each_entry(self, sample_tree: Path) -> None:
        """-v prints a line per removed entry."""
        result = runner.invoke(app, ["-v", "delete", str(sample_tree), "--yes"])

        assert result.exit_code == 0
        assert result.output.count("Deleted: ") == 7

    def test_interrupt_cancels_run(self, make_tree) -> None:
        """Ctrl+C cancels the run and exits with code 130."""
        root = make_tree({f"f{i}.txt": "x" for i in range(5)})
        gate = threading.Event()
        real_process = DeletionEngine._process
        real_drain = delete_cmd._drain
        interrupted: list[bool] = []

        def gated_process(self: DeletionEngine, entry: Entry, root: str) -> object:
            gate.wait(5)
            return real_process(self, entry, root)

        def interrupting_drain(handle, progress, task, verbose) -> None:
            if not interrupted:
                interrupted.append(True)
                handle.cancel()
                gate.set()
                raise KeyboardInterrupt
            real_drain(handle, progress, task, verbose)

        with (
            patch.object(DeletionEngine, "_process", gated_process),
            patch.object(delete_cmd, "_drain", interrupting_drain),
        ):
            result = runner.invoke(app, ["delete", str(root), "--yes"])

        assert result.exit_code == 130
        assert "Cancelled" in result.output
        assert root.exists()
        history = StateManager().get_history()
        assert history[0].cancelled is True
