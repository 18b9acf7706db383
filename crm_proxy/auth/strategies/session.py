"""Pre-provisioned session token strategies.

Two ways of reusing a session that already exists outside this process:
a token handed over through ``SF_SESSION_TOKEN`` (typically copied from
``sf org display``), or asking the Salesforce CLI for its current session.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import List

from ..credentials import Credential, CredentialSource
from ..errors import StrategyFailure
from .base import CredentialStrategy

logger = logging.getLogger(__name__)


class SessionTokenStrategy(CredentialStrategy):
    """Use the session token provided in the environment. No network I/O."""

    name = "session_token"
    source = CredentialSource.CLI_FLOW
    required_fields = ("session_token",)

    def _attempt(self) -> Credential:
        logger.info("Using Salesforce CLI session token from environment")
        return Credential.issue(self.config.session_token, self.source)


class CliStrategy(CredentialStrategy):
    """Shell out to ``sf org display --json`` and read the org's access token."""

    name = "cli"
    source = CredentialSource.CLI_FLOW

    def missing_fields(self) -> List[str]:
        if not self.config.cli_enabled:
            return ["cli_enabled"]
        if not self.config.cli_command:
            return ["cli_command"]
        return []

    def command(self) -> List[str]:
        cmd = [self.config.cli_command, "org", "display", "--json"]
        if self.config.cli_target_org:
            cmd.extend(["--target-org", self.config.cli_target_org])
        return cmd

    def _attempt(self) -> Credential:
        cmd = self.command()
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.cli_timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise StrategyFailure(self.name, f"{cmd[0]} is not installed") from exc
        except subprocess.TimeoutExpired as exc:
            raise StrategyFailure(
                self.name, f"{cmd[0]} did not answer within {self.config.cli_timeout}s"
            ) from exc
        except OSError as exc:
            raise StrategyFailure(self.name, f"could not run {cmd[0]}: {exc}") from exc

        try:
            output = json.loads(completed.stdout or "")
        except json.JSONDecodeError as exc:
            if completed.returncode != 0:
                raise StrategyFailure(
                    self.name, f"{cmd[0]} exited with {completed.returncode}"
                ) from exc
            raise StrategyFailure(self.name, "CLI output was not valid JSON") from exc

        if completed.returncode != 0:
            message = output.get("message") if isinstance(output, dict) else None
            raise StrategyFailure(
                self.name,
                f"{cmd[0]} exited with {completed.returncode}: {message or 'no message'}",
            )

        result = output.get("result") if isinstance(output, dict) else None
        if not isinstance(result, dict) or not result.get("accessToken"):
            raise StrategyFailure(self.name, "CLI output has no accessToken field")

        logger.info("Obtained Salesforce session from %s", cmd[0])
        return Credential.issue(
            result["accessToken"],
            self.source,
            instance_url=result.get("instanceUrl") or None,
        )
