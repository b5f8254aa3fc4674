"""
File watching and the development server.

A :class:`WatchOrchestrator` maps changed paths to the tasks that rebuild
them. Each matching rule's tasks run one after another on a worker thread,
so a stylesheet change never waits for, or triggers, a page rebuild.
"""

import fnmatch
import logging
import os
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from typing import List

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

BRACE_RE = re.compile(r'\{([^{}]*)\}')


def expand_braces(pattern: str) -> List[str]:
    """Expand ``*.{png,jpg}`` into ``['*.png', '*.jpg']``."""
    match = BRACE_RE.search(pattern)
    if match is None:
        return [pattern]
    expanded = []
    for option in match.group(1).split(','):
        expanded.extend(expand_braces(pattern[:match.start()] + option + pattern[match.end():]))
    return expanded


@dataclass
class WatchRule:
    root: str
    patterns: List[str]
    tasks: List[str]
    _globs: List[str] = field(init=False, repr=False)

    def __post_init__(self):
        self.root = os.path.abspath(self.root)
        self._globs = [glob for pattern in self.patterns for glob in expand_braces(pattern)]

    def matches(self, path: str) -> bool:
        path = os.path.abspath(path)
        if not path.startswith(self.root + os.sep):
            return False
        name = os.path.basename(path)
        return any(fnmatch.fnmatch(name, glob) for glob in self._globs)


class WatchOrchestrator:
    def __init__(self, run_tasks, rules=None, max_workers=None):
        """
        Args:
            run_tasks: callable taking a list of task names and running them in order
            rules: initial WatchRule list
        """
        self.run_tasks = run_tasks
        self.rules = list(rules or [])
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.observer = None

    def add(self, root: str, patterns, tasks) -> WatchRule:
        rule = WatchRule(root, list(patterns), list(tasks))
        self.rules.append(rule)
        return rule

    def tasks_for(self, path: str) -> List[List[str]]:
        """Task lists of every rule matching path."""
        return [rule.tasks for rule in self.rules if rule.matches(path)]

    def dispatch(self, path: str):
        """Schedule the reruns for one changed path and return their futures."""
        futures = []
        for tasks in self.tasks_for(path):
            logger.info(f"Change in {os.path.relpath(path)}, running {', '.join(tasks)}")
            futures.append(self.executor.submit(self._rerun, tasks))
        return futures

    def _rerun(self, tasks):
        try:
            return self.run_tasks(tasks)
        except Exception as e:
            logger.error(f"Rebuild after change failed: {e}")
            return False

    def start(self):
        """Start watching every rule root with watchdog."""
        handler = ChangeHandler(self)
        self.observer = Observer()
        for root in sorted({rule.root for rule in self.rules}):
            if os.path.isdir(root):
                self.observer.schedule(handler, root, recursive=True)
                logger.info(f"Watching {os.path.relpath(root)}/ for changes...")
        self.observer.start()
        return self.observer

    def stop(self):
        if self.observer is not None:
            self.observer.stop()
            self.observer.join()
            self.observer = None
        self.executor.shutdown(wait=True)


class ChangeHandler(FileSystemEventHandler):
    def __init__(self, orchestrator):
        self.orchestrator = orchestrator

    def on_any_event(self, event):
        if event.is_directory or event.event_type not in ('created', 'modified', 'moved', 'deleted'):
            return
        path = getattr(event, 'dest_path', None) if event.event_type == 'moved' else None
        self.orchestrator.dispatch(path or event.src_path)


class QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format, *args):
        logger.debug("%s - %s" % (self.address_string(), format % args))


def make_server(directory, host='localhost', port=3000):
    handler = partial(QuietHandler, directory=directory)
    return ThreadingHTTPServer((host, port), handler)


def serve(directory, host='localhost', port=3000, background=False):
    """Serve directory over HTTP; blocks unless background is set."""
    httpd = make_server(directory, host, port)
    logger.info(f"Serving {directory} at http://{host}:{httpd.server_address[1]}/")
    if background:
        thread = threading.Thread(target=httpd.serve_forever, daemon=True)
        thread.start()
        return httpd
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down server...")
    finally:
        httpd.server_close()
    return httpd
