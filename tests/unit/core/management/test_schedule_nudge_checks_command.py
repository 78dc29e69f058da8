"""Tests for the schedule_nudge_checks management command."""

from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import SimpleTestCase


class TestScheduleNudgeChecksCommand(SimpleTestCase):
    """Test suite for schedule_nudge_checks."""

    @patch(
        "core.management.commands.schedule_nudge_checks.restart_nudge_checks",
        return_value=2,
    )
    def test_restarts_chain_by_default(self, mock_restart):
        """Test the default mode replaces existing runs."""
        out = StringIO()

        call_command("schedule_nudge_checks", "--delay", "30", stdout=out)

        mock_restart.assert_called_once_with(30)
        self.assertIn("replaced 2 existing", out.getvalue())

    @patch(
        "core.management.commands.schedule_nudge_checks.ensure_nudge_check_scheduled",
        return_value=True,
    )
    @patch("core.management.commands.schedule_nudge_checks.restart_nudge_checks")
    def test_ensure_only_rearms(self, mock_restart, mock_ensure):
        """Test --ensure never replaces a live chain."""
        out = StringIO()

        call_command("schedule_nudge_checks", "--ensure", stdout=out)

        mock_ensure.assert_called_once_with()
        mock_restart.assert_not_called()
        self.assertIn("re-armed", out.getvalue())
