"""Tests for page-quality reports."""

import os
import subprocess
from unittest.mock import patch

from sitepipe.report import DEFAULT_FLAGS, ReportRunner, report_name


class TestReportName:
    """Test cases for report file names."""

    def test_slug(self):
        assert report_name('https://example.com/about/', 'html') == 'example-com-about.html'

    def test_empty_slug(self):
        assert report_name('https://', 'json') == 'report.json'


class TestReportRunner:
    """Test cases for ReportRunner."""

    def test_command(self, temp_dir):
        runner = ReportRunner(['https://example.com'], temp_dir, output='json')
        command = runner.command_for('https://example.com', '/tmp/out.json')
        assert command[:4] == ['lighthouse', 'https://example.com', '--output=json', '--output-path=/tmp/out.json']
        assert command[4:] == DEFAULT_FLAGS

    def test_custom_flags(self, temp_dir):
        runner = ReportRunner([], temp_dir, flags=['--preset=desktop'])
        assert runner.command_for('https://example.com', 'out.html')[-1] == '--preset=desktop'

    @patch('sitepipe.report.subprocess.run')
    def test_audits_every_url(self, mock_run, temp_dir):
        report_dir = os.path.join(temp_dir, 'reports')
        runner = ReportRunner(['https://example.com', 'https://example.org'], report_dir)

        result = runner.run()

        assert mock_run.call_count == 2
        assert result.ok
        assert result.written == [
            os.path.join(report_dir, 'example-com.html'),
            os.path.join(report_dir, 'example-org.html'),
        ]
        assert os.path.isdir(report_dir)

    @patch('sitepipe.report.subprocess.run')
    def test_failure_moves_on_to_next_url(self, mock_run, temp_dir):
        mock_run.side_effect = [
            subprocess.CalledProcessError(1, ['lighthouse'], stderr="Runtime error\nUnable to connect"),
            None,
        ]
        runner = ReportRunner(['https://down.example.com', 'https://example.org'], temp_dir)

        result = runner.run()

        assert result.failed == {'https://down.example.com': 'Unable to connect'}
        assert len(result.written) == 1
        assert not result.ok

    @patch('sitepipe.report.subprocess.run')
    def test_missing_tool_and_timeout(self, mock_run, temp_dir):
        mock_run.side_effect = [
            FileNotFoundError(),
            subprocess.TimeoutExpired(['lighthouse'], 300),
        ]
        runner = ReportRunner(['https://a.example.com', 'https://b.example.com'], temp_dir)

        result = runner.run()

        assert result.failed == {
            'https://a.example.com': 'lighthouse not found',
            'https://b.example.com': 'timed out',
        }

    @patch('sitepipe.report.subprocess.run')
    def test_no_urls(self, mock_run, temp_dir):
        result = ReportRunner(None, temp_dir).run()
        assert result.ok
        mock_run.assert_not_called()
