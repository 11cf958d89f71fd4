"""Tests for the upload progress reporter."""

from CFWatcher.models import AssetProgress
from CFWatcher.reporters import AssetReporter
from tests.helpers import output_of


def test_non_interactive_logs_once_per_file(tty, console):
    reporter = AssetReporter(tty)

    reporter.on_progress(AssetProgress('template.json', written_bytes=0, total_bytes=2000))
    reporter.on_progress(AssetProgress('template.json', written_bytes=1000, total_bytes=2000))
    reporter.on_progress(AssetProgress('lambda.zip', written_bytes=0))
    reporter.on_progress(AssetProgress('template.json', written_bytes=2000, total_bytes=2000))

    assert output_of(console).splitlines() == [
        'ℹ template.json 0 bytes of 2.0 kB',
        'ℹ lambda.zip 0 bytes of ?',
    ]
    reporter.close()


def test_complete_prints_final_size(tty, console):
    reporter = AssetReporter(tty)

    reporter.on_progress(AssetProgress('template.json', written_bytes=0, total_bytes=2000))
    reporter.on_progress(AssetProgress('template.json', written_bytes=2000, total_bytes=2000, complete=True))

    assert output_of(console).splitlines()[-1] == '✔ template.json (2.0 kB)'
    assert reporter.assets == {}
    reporter.close()


def test_complete_without_total_uses_written_bytes(tty, console):
    reporter = AssetReporter(tty)

    reporter.on_progress(AssetProgress('notes.txt', written_bytes=1, complete=True))

    assert output_of(console) == '✔ notes.txt (1 byte)\n'
    reporter.close()


def test_live_region_lists_pending_files(live_tty):
    reporter = AssetReporter(live_tty)

    reporter.on_progress(AssetProgress('a.zip', written_bytes=500, total_bytes=1500))
    assert reporter.spinner.is_enabled

    reporter.on_progress(AssetProgress('b.zip', written_bytes=0))
    assert live_tty.displays[reporter].plain.splitlines() == [
        '- a.zip 500 bytes of 1.5 kB',
        '- b.zip 0 bytes of ?',
    ]

    reporter.on_progress(AssetProgress('a.zip', written_bytes=1500, total_bytes=1500, complete=True))
    assert reporter.spinner.is_enabled

    reporter.on_progress(AssetProgress('b.zip', written_bytes=10, complete=True))
    assert not reporter.spinner.is_enabled
    assert reporter not in live_tty.displays

    reporter.close()


def test_spinner_stays_off_when_not_interactive(tty):
    reporter = AssetReporter(tty)

    reporter.on_progress(AssetProgress('a.zip', written_bytes=0, total_bytes=10))

    assert not reporter.spinner.is_enabled
    reporter.close()
