"""
Interactive edit → validate → submit loop.

The current document is written to a temporary file and opened in the
operator's editor. The saved text is cleaned of comment lines, parsed and
submitted. On a parse error or a server rejection the editor is reopened on
the operator's last text with the error prepended as comment lines, so no
edit is ever lost. The loop ends when the server accepts the document, or
when the operator saves an empty file.

Example:
    session = EditSession(pretty_json(dashboard), submit=lambda doc: api.save_dashboard(...))
    result = session.run()   # None if the operator aborted
"""

import json
import logging
import os
import shlex
import subprocess
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"
COMMENT_MARKERS = ("//", "#")


class State(Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ABORTED = "aborted"


TERMINAL_STATES = (State.SUCCESS, State.ABORTED)


def launch_editor(path: Path) -> None:
    """
    Open path in $EDITOR (default vi) and wait for it to exit.

    The editor inherits this process's stdin/stdout/stderr.

    Raises:
        RuntimeError: If the editor cannot be started or exits non-zero
    """
    editor = os.environ.get("EDITOR") or DEFAULT_EDITOR
    command = shlex.split(editor) + [str(path)]
    try:
        subprocess.run(command, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise RuntimeError(f"editor failed: {e}") from e


def strip_comments(text: str) -> str:
    """Drop lines whose stripped form starts with // or #."""
    lines = [line for line in text.split("\n") if not line.strip().startswith(COMMENT_MARKERS)]
    return "\n".join(lines)


def error_header(error: str) -> str:
    """Comment lines prepended to the content after a failed attempt."""
    one_line = " ".join(error.split())
    return (
        f"// ERROR: {one_line}\n"
        "// Fix the error below and save to retry.\n\n"
    )


class EditSession:
    """
    Edit/validate/submit retry state machine.

    Args:
        content: Initial text shown in the editor
        submit: Called with the parsed document; raises requests.HTTPError on rejection
        editor: Called with the temp file path; blocks until editing is done
    """

    def __init__(
        self,
        content: str,
        submit: Callable[[dict], Any],
        editor: Optional[Callable[[Path], None]] = None,
    ):
        self.content = content
        self.submit = submit
        self.editor = editor or launch_editor
        self.last_error = ""
        self.state = State.EDITING
        self.rounds = 0
        self.result = None

        self._edited = ""
        self._document = None

    def run(self) -> Optional[Any]:
        """
        Drive the session to a terminal state.

        Returns:
            The server response on success, None if the operator aborted
        """
        steps = {
            State.EDITING: self._edit,
            State.VALIDATING: self._validate,
            State.SUBMITTING: self._submit,
        }
        while self.state not in TERMINAL_STATES:
            self.state = steps[self.state]()
        return self.result

    def _edit(self) -> State:
        self.rounds += 1
        fd, name = tempfile.mkstemp(prefix="gcli-", suffix=".json")
        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                if self.last_error:
                    f.write(error_header(self.last_error))
                f.write(self.content)

            self.editor(path)
            self._edited = path.read_text(encoding="utf-8")
        finally:
            path.unlink(missing_ok=True)
        return State.VALIDATING

    def _retry(self, error: str, text: str) -> State:
        logger.debug(f"Round {self.rounds} failed: {error}")
        self.last_error = error
        self.content = text
        return State.EDITING

    def _validate(self) -> State:
        cleaned = strip_comments(self._edited)
        if not cleaned.strip():
            print("No content, skipping update.")
            return State.ABORTED

        try:
            document = json.loads(cleaned)
        except json.JSONDecodeError as e:
            return self._retry(str(e), cleaned)
        if not isinstance(document, dict):
            return self._retry("document must be a JSON object", cleaned)

        self._document = document
        self.content = cleaned
        return State.SUBMITTING

    def _submit(self) -> State:
        try:
            self.result = self.submit(self._document)
        except requests.HTTPError as e:
            return self._retry(str(e), self.content)

        self.last_error = ""
        return State.SUCCESS
