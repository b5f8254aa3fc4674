"""
Page-quality reports.

Each configured URL is audited by the ``lighthouse`` command line tool and
the report is written to the report directory. A failing URL is logged and
the loop moves on to the next one.
"""

import logging
import os
import re
import subprocess

from .pipeline import BuildResult

logger = logging.getLogger(__name__)

DEFAULT_FLAGS = ['--quiet', '--chrome-flags=--headless']


def report_name(url, output):
    slug = re.sub(r'[^a-z0-9]+', '-', url.lower().split('://', 1)[-1]).strip('-')
    return f"{slug or 'report'}.{output}"


class ReportRunner:
    def __init__(self, urls, report_dir, output='html', flags=None, command='lighthouse', timeout=300):
        self.urls = list(urls or [])
        self.report_dir = report_dir
        self.output = output
        self.flags = list(flags) if flags else list(DEFAULT_FLAGS)
        self.command = command
        self.timeout = timeout

    def command_for(self, url, output_path):
        return [self.command, url, f'--output={self.output}', f'--output-path={output_path}'] + self.flags

    def audit(self, url):
        """Audit one URL and return the report path."""
        output_path = os.path.join(self.report_dir, report_name(url, self.output))
        logger.info(f"Auditing {url}")
        subprocess.run(self.command_for(url, output_path), check=True,
                       capture_output=True, text=True, timeout=self.timeout)
        return output_path

    def run(self):
        result = BuildResult()
        if not self.urls:
            logger.warning("No report URLs configured.")
            return result

        os.makedirs(self.report_dir, exist_ok=True)
        for url in self.urls:
            try:
                result.written.append(self.audit(url))
            except FileNotFoundError:
                logger.error(f"Report tool '{self.command}' not found, cannot audit {url}")
                result.failed[url] = f"{self.command} not found"
            except subprocess.CalledProcessError as e:
                detail = (e.stderr or '').strip().splitlines()
                message = detail[-1] if detail else f"exit status {e.returncode}"
                logger.error(f"Audit of {url} failed: {message}")
                result.failed[url] = message
            except subprocess.TimeoutExpired:
                logger.error(f"Audit of {url} timed out after {self.timeout} seconds")
                result.failed[url] = 'timed out'

        logger.info(f"Reports written: {len(result.written)}, failed: {len(result.failed)}")
        return result
