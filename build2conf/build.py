"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import enum
import os
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Mapping

from .environment import ArgumentError


@enum.unique
class BuildResult(enum.Enum):
    "Outcome of a CI build."

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"

    @classmethod
    def parse(cls, value: str) -> "BuildResult":
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ArgumentError(f"unrecognized build result: {value}") from None


@dataclass
class BuildContext:
    """
    Information about the build that triggers publishing.

    :param result: Build outcome.
    :param workspace: Build workspace directory, or `None` if unavailable (e.g. the agent went offline).
    :param artifacts_dir: Directory holding the archived artifacts of the build.
    :param env: Build environment variables, used to expand `$VAR` and `${VAR}` references.
    """

    result: BuildResult
    workspace: Path | None = None
    artifacts_dir: Path | None = None
    env: dict[str, str] = field(default_factory=dict)

    @property
    def number(self) -> str | None:
        return self.env.get("BUILD_NUMBER")

    @property
    def url(self) -> str | None:
        return self.env.get("BUILD_URL")

    def expand(self, text: str) -> str:
        "Substitutes environment variable references; unknown variables are left as-is."

        return Template(text).safe_substitute(self.env)

    @classmethod
    def from_environment(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        result: BuildResult | None = None,
        workspace: Path | None = None,
        artifacts_dir: Path | None = None,
    ) -> "BuildContext":
        """
        Creates a build context from CI environment variables.

        Explicit arguments take precedence over `BUILD_RESULT`, `WORKSPACE` and `ARTIFACTS_DIR`.
        """

        env = dict(os.environ if environ is None else environ)

        if result is None:
            result = BuildResult.parse(env.get("BUILD_RESULT", BuildResult.SUCCESS.value))
        if workspace is None and env.get("WORKSPACE"):
            workspace = Path(env["WORKSPACE"])
        if artifacts_dir is None and env.get("ARTIFACTS_DIR"):
            artifacts_dir = Path(env["ARTIFACTS_DIR"])

        return cls(result=result, workspace=workspace, artifacts_dir=artifacts_dir, env=env)
