"""Subprocess gateway for the sfdx CLI.

Action calls inherit the console so the CLI's own progress output reaches the
user; query calls append ``--json``, capture stdout and unwrap the
``{status, result}`` envelope.
"""
from __future__ import annotations

import json
import logging
import shutil
import subprocess
from typing import Any, Dict, List, Optional, Sequence, Tuple

from constants import Constants
from errors import SubprocessFailure, ToolNotFound
from common.logging_utils import extra_context, is_debug_enabled, Timer
from validation import (
    ENVELOPE_SCHEMA,
    ORG_LIST_RESULT_SCHEMA,
    QUERY_RESULT_SCHEMA,
    RECORD_LIST_SCHEMA,
    SchemaError,
    validate,
)

from .base import EnvironmentGateway
from .models import InstalledPackage, Org, PackageVersion, QueryResult, ScratchOrg

logger = logging.getLogger(__name__)


class SfdxGateway(EnvironmentGateway):
    """EnvironmentGateway backed by the sfdx executable."""

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable or Constants.CLI_NAME
        self._resolved: Optional[str] = None

    def check_tool(self) -> None:
        if self._resolved:
            return
        found = shutil.which(self.executable)
        if not found:
            raise ToolNotFound(self.executable)
        self._resolved = found

    # ---------- raw calls ----------

    def run(self, subcommand: str, *args: str) -> None:
        """Run an action, streaming its stdout to the console."""
        self.check_tool()
        cmd = [self._resolved or self.executable, subcommand, *args]
        self._log_call(cmd)
        with Timer() as t:
            try:
                proc = subprocess.run(cmd, check=False)
            except OSError as exc:
                raise SubprocessFailure(cmd, stderr=str(exc)) from exc
        self._log_exit(cmd, proc.returncode, t.duration_ms())
        if proc.returncode != 0:
            raise SubprocessFailure(cmd, proc.returncode)

    def run_json(self, subcommand: str, *args: str) -> Any:
        """Run a query and return the ``result`` member of its JSON envelope."""
        self.check_tool()
        cmd = [self._resolved or self.executable, subcommand, *args, "--json"]
        self._log_call(cmd)
        with Timer() as t:
            try:
                proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
            except OSError as exc:
                raise SubprocessFailure(cmd, stderr=str(exc)) from exc
        self._log_exit(cmd, proc.returncode, t.duration_ms())

        if proc.returncode != 0:
            raise SubprocessFailure(
                cmd, proc.returncode, proc.stderr, self._error_message(proc.stdout)
            )
        envelope = self._parse_envelope(cmd, proc.stdout)
        if envelope is None:
            raise SubprocessFailure(cmd, proc.returncode, proc.stderr, "empty JSON response")
        try:
            validate(ENVELOPE_SCHEMA, envelope, label="response")
        except SchemaError as exc:
            raise SubprocessFailure(cmd, proc.returncode, message=str(exc)) from exc
        if envelope["status"] != 0:
            raise SubprocessFailure(
                cmd, envelope["status"], proc.stderr, envelope.get("message", "")
            )
        return envelope.get("result")

    @staticmethod
    def _parse_envelope(cmd: Sequence[str], stdout: str) -> Optional[Dict[str, Any]]:
        if not stdout or not stdout.strip():
            return None
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise SubprocessFailure(cmd, message=f"invalid JSON output: {exc.msg}") from exc

    @staticmethod
    def _error_message(stdout: str) -> str:
        """Return the envelope message of a failed call, or "" when stdout is not an envelope."""
        try:
            envelope = json.loads(stdout) if stdout and stdout.strip() else None
        except json.JSONDecodeError:
            return ""
        if isinstance(envelope, dict):
            return str(envelope.get("message") or "")
        return ""

    @staticmethod
    def _checked(cmd: Sequence[str], schema: Dict[str, Any], payload: Any) -> Any:
        try:
            validate(schema, payload, label="result")
        except SchemaError as exc:
            raise SubprocessFailure(cmd, message=str(exc)) from exc
        return payload

    def _log_call(self, cmd: List[str]) -> None:
        if is_debug_enabled(logger):
            logger.debug(
                "CLI call",
                extra=extra_context(
                    event="subprocess_start",
                    component="gateway",
                    action=cmd[1],
                    target=" ".join(cmd[2:]),
                ),
            )

    def _log_exit(self, cmd: List[str], returncode: int, duration_ms: int) -> None:
        if is_debug_enabled(logger):
            logger.debug(
                "CLI exit",
                extra=extra_context(
                    event="subprocess_exit",
                    component="gateway",
                    action=cmd[1],
                    outcome="success" if returncode == 0 else "failure",
                    returncode=returncode,
                    duration_ms=duration_ms,
                ),
            )

    # ---------- typed queries ----------

    def list_orgs(self) -> Tuple[List[Org], List[ScratchOrg]]:
        cmd = ["force:org:list"]
        result = self._checked(cmd, ORG_LIST_RESULT_SCHEMA, self.run_json(*cmd) or {})
        orgs = [Org.from_json(o) for o in result.get("nonScratchOrgs") or []]
        scratch = [ScratchOrg.from_json(o) for o in result.get("scratchOrgs") or []]
        return orgs, scratch

    def list_package_versions(self) -> List[PackageVersion]:
        cmd = ["force:package:version:list"]
        result = self._checked(cmd, RECORD_LIST_SCHEMA, self.run_json(*cmd) or [])
        return [PackageVersion.from_json(v) for v in result]

    def list_installed_packages(self, username: str) -> List[InstalledPackage]:
        cmd = ["force:package:installed:list", "-u", username]
        result = self._checked(cmd, RECORD_LIST_SCHEMA, self.run_json(*cmd) or [])
        return [InstalledPackage.from_json(p) for p in result]

    def query(self, username: str, soql: str, tooling: bool = True) -> QueryResult:
        cmd = ["force:data:soql:query", "-u", username]
        if tooling:
            cmd.append("-t")
        cmd += ["-q", soql]
        result = self._checked(cmd, QUERY_RESULT_SCHEMA, self.run_json(*cmd))
        return QueryResult.from_json(result)

    def install_package(self, username: str, version_id: str, wait: int) -> None:
        self.run("force:package:install", "--package", version_id, "-u", username, "-w", str(wait))

    def uninstall_package(self, username: str, version_id: str) -> None:
        self.run("force:package:uninstall", "--package", version_id, "-u", username)

    def create_scratch_org(self, definition_file: str, alias: str) -> None:
        self.run("force:org:create", "-f", definition_file, "-a", alias)
