"""Tests for progress tracking and the console observer."""

import io

from gitdag.progress import (
    ConsoleProgress,
    PercentTracker,
    ProgressObserver,
    ProgressUpdate,
    format_duration,
)


class TestPercentTracker:
    """Tests for PercentTracker."""

    def test_reports_only_when_percent_rises(self):
        tracker = PercentTracker(total=300, clock=lambda: 0.0)

        updates = [tracker.record(0.5) for _ in range(300)]
        reported = [u for u in updates if u is not None]

        assert [u.percent for u in reported] == list(range(1, 101))
        assert reported[0].completed == 3

    def test_small_totals_skip_percentages(self):
        tracker = PercentTracker(total=3, clock=lambda: 0.0)

        percents = [u.percent for u in (tracker.record(1.0) for _ in range(3)) if u]

        assert percents == [33, 66, 100]

    def test_average_and_interval(self):
        times = iter([10.0, 12.5])
        tracker = PercentTracker(total=1, clock=lambda: next(times))

        update = tracker.record(2.0)

        assert update == ProgressUpdate(
            percent=100,
            completed=1,
            total=1,
            average_task_seconds=2.0,
            seconds_since_last=2.5,
        )

    def test_zero_total(self):
        assert PercentTracker(total=0).record(1.0) is None


class TestProgressFormat:
    """Tests for progress line formatting."""

    def test_format_duration(self):
        assert format_duration(0.0005) == "500.00µs"
        assert format_duration(0.0125) == "12.50ms"
        assert format_duration(3.2) == "3.20s"

    def test_update_line(self):
        update = ProgressUpdate(
            percent=42, completed=420, total=1000,
            average_task_seconds=0.0125, seconds_since_last=1.5,
        )
        assert update.format() == "Progress: 42% (420 of 1000), Avg: 12.50ms/task, in 1.50s"


class TestProgressObserver:
    """The default observer forwards to logging."""

    def test_diagnostic_is_a_warning(self, caplog):
        with caplog.at_level('WARNING', logger='gitdag.progress'):
            ProgressObserver().on_diagnostic("Unable to find tag abc")

        assert caplog.records[0].levelname == 'WARNING'
        assert caplog.records[0].getMessage() == "Unable to find tag abc"


class TestConsoleProgress:
    """Tests for the command line observer."""

    UPDATE = ProgressUpdate(percent=50, completed=1, total=2,
                            average_task_seconds=0.5, seconds_since_last=0.5)

    def test_disabled_for_non_terminal(self):
        stream = io.StringIO()
        progress = ConsoleProgress(stream=stream)

        progress.on_status("Processing objects...")
        progress.on_progress(self.UPDATE)
        progress.success("done")

        assert stream.getvalue() == ""

    def test_enabled_without_colors(self):
        stream = io.StringIO()
        progress = ConsoleProgress(enabled=True, use_colors=False, stream=stream)

        progress.on_status("Processing tags...")
        progress.on_progress(self.UPDATE)
        progress.success("done")

        assert stream.getvalue().splitlines() == [
            "Processing tags...",
            "Progress: 50% (1 of 2), Avg: 500.00ms/task, in 500.00ms",
            "✓ done",
        ]

    def test_errors_always_printed(self):
        stream = io.StringIO()
        ConsoleProgress(enabled=False, stream=stream).error("listing failed")
        assert stream.getvalue() == "ERROR: listing failed\n"

    def test_colored(self):
        stream = io.StringIO()
        progress = ConsoleProgress(enabled=True, use_colors=True, stream=stream)

        progress.on_status("Processing objects...")
        progress.success("done")
        progress.on_progress(self.UPDATE)

        assert stream.getvalue().splitlines() == [
            "Processing objects...",
            "\033[32m✓ done\033[0m",
            "\033[36mProgress: 50% (1 of 2), Avg: 500.00ms/task, in 500.00ms\033[0m",
        ]
