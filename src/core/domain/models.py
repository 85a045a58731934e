"""Domain models (Pydantic v2).

These describe *what* gets generated and published: the chart inputs, the
rendered files, and the outcome of the git and lint steps. They know nothing
about Jinja2, subprocesses or the terminal.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict

_DNS_LABEL_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"
_ENV_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ChartMetadata(_StrictModel):
    """Contents of `Chart.yaml`."""

    api_version: str = Field(default="v2", description="Helm chart API version.")
    name: str = Field(
        default="keycloak-custom",
        min_length=1,
        max_length=63,
        description="Chart name as published in Chart.yaml.",
    )
    description: str = Field(
        default="Keycloak with official quay.io image + Official Postgres",
        description="One-line chart description.",
    )
    type: str = Field(default="application", description="Chart type (application/library).")
    version: str = Field(default="0.2.0", min_length=1, description="Chart SemVer version.")
    app_version: str = Field(default="26.0.0", min_length=1, description="Version of the packaged app.")


class ImageSpec(_StrictModel):
    repository: str = Field(default="quay.io/keycloak/keycloak", min_length=1)
    pull_policy: str = Field(default="IfNotPresent", description="Kubernetes imagePullPolicy.")
    tag: str = Field(default="26.0.0", min_length=1)


class ServiceSpec(_StrictModel):
    type: str = Field(default="ClusterIP", description="Kubernetes Service type.")
    port: int = Field(default=8080, ge=1, le=65535)


class ResourceQuantities(_StrictModel):
    cpu: str = Field(..., min_length=1)
    memory: str = Field(..., min_length=1)


class ResourceSpec(_StrictModel):
    limits: ResourceQuantities = Field(
        default_factory=lambda: ResourceQuantities(cpu="1000m", memory="1024Mi"),
    )
    requests: ResourceQuantities = Field(
        default_factory=lambda: ResourceQuantities(cpu="500m", memory="512Mi"),
    )


class PostgresSpec(_StrictModel):
    """In-chart Postgres used as the Keycloak database."""

    image: str = Field(default="postgres:16", min_length=1)
    db_name: str = Field(default="keycloak", min_length=1)
    user: str = Field(default="keycloak", min_length=1)
    password: str = Field(default="password", description="Plain-text password written to values.yaml.")
    service_name: str = Field(default="postgres-db", pattern=_DNS_LABEL_PATTERN)
    port: int = Field(default=5432, ge=1, le=65535)

    @property
    def jdbc_url(self) -> str:
        return f"jdbc:postgresql://{self.service_name}:{self.port}/{self.db_name}"


class WorkflowSpec(_StrictModel):
    """GitHub Actions workflow that lints and deploys the chart."""

    name: str = Field(default="Deploy Keycloak", min_length=1)
    branch: str = Field(default="main", min_length=1, description="Branch whose pushes trigger a deploy.")
    runs_on: str = Field(default="ubuntu-latest", min_length=1)
    helm_version: str = Field(default="v3.11.1", pattern=r"^v?\d+\.\d+\.\d+$")
    release_name: str = Field(default="keycloak", pattern=_DNS_LABEL_PATTERN)
    namespace: str = Field(default="auth", pattern=_DNS_LABEL_PATTERN)
    timeout: str = Field(
        default="10m0s",
        pattern=r"^(\d+(\.\d+)?(ns|us|ms|s|m|h))+$",
        description="`helm --timeout` duration.",
    )
    kube_config_secret: str = Field(
        default="KUBE_CONFIG",
        pattern=_ENV_NAME_PATTERN,
        description="Repository secret holding the kubeconfig.",
    )


def default_keycloak_env(postgres: PostgresSpec) -> dict[str, str]:
    """Keycloak environment wired to the in-chart Postgres service."""

    return {
        "KEYCLOAK_ADMIN": "admin",
        "KEYCLOAK_ADMIN_PASSWORD": "admin",
        "KC_COMMAND": "start-dev",
        "KC_DB": "postgres",
        "KC_DB_URL": postgres.jdbc_url,
        "KC_DB_USERNAME": postgres.user,
        "KC_DB_PASSWORD": postgres.password,
        "KC_PROXY": "edge",
        "KC_HOSTNAME_STRICT": "false",
        "KC_HTTP_ENABLED": "true",
    }


class ChartSpec(_StrictModel):
    """Every input needed to render the chart and its deploy workflow.

    Defaults reproduce the Keycloak + Postgres chart exactly; a chart profile
    only needs to list the values it changes.
    """

    directory: str = Field(
        default="keycloak",
        pattern=_DNS_LABEL_PATTERN,
        description="Chart directory name under `charts/`.",
    )
    helper_prefix: str = Field(
        default="keycloak",
        pattern=_DNS_LABEL_PATTERN,
        description="Prefix of the named templates defined in _helpers.tpl.",
    )
    metadata: ChartMetadata = Field(default_factory=ChartMetadata)
    replica_count: int = Field(default=1, ge=0)
    image: ImageSpec = Field(default_factory=ImageSpec)
    service: ServiceSpec = Field(default_factory=ServiceSpec)
    container_port: int = Field(default=8080, ge=1, le=65535)
    health_path: str = Field(default="/realms/master", pattern=r"^/")
    probe_initial_delay_seconds: int = Field(default=120, ge=0)
    resources: ResourceSpec = Field(default_factory=ResourceSpec)
    postgres: PostgresSpec = Field(default_factory=PostgresSpec)
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Extra/overriding Keycloak env vars, merged over the defaults.",
    )
    workflow: WorkflowSpec = Field(default_factory=WorkflowSpec)

    @field_validator("env", mode="before")
    @classmethod
    def _stringify_env(cls, value: object) -> object:
        # YAML profiles yield bools/ints for values like `true` or `8080`.
        if isinstance(value, dict):
            return {
                str(k): (str(v).lower() if isinstance(v, bool) else str(v))
                for k, v in value.items()
            }
        return value

    @field_validator("env")
    @classmethod
    def _check_env_names(cls, value: dict[str, str]) -> dict[str, str]:
        bad = [k for k in value if not re.fullmatch(_ENV_NAME_PATTERN, k)]
        if bad:
            raise ValueError(f"invalid env variable name(s): {', '.join(bad)}")
        return value

    @model_validator(mode="after")
    def _merge_default_env(self) -> "ChartSpec":
        merged = default_keycloak_env(self.postgres)
        merged.update(self.env)
        if not merged.get("KC_COMMAND"):
            raise ValueError("env.KC_COMMAND must not be empty")
        self.env = merged
        return self

    @property
    def chart_root(self) -> str:
        return f"charts/{self.directory}"


class GeneratedFile(BaseModel):
    """A file produced by the scaffold, as exact text."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="POSIX path relative to the workspace root.")
    content: str = Field(..., description="Exact file contents.")

    @field_validator("path")
    @classmethod
    def _relative_path(cls, value: str) -> str:
        p = PurePosixPath(value)
        if p.is_absolute() or ".." in p.parts:
            raise ValueError(f"path must be relative to the workspace: {value!r}")
        return p.as_posix()

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name


class ScaffoldPlan(BaseModel):
    """Ordered set of files to write."""

    chart_root: str = Field(..., description="Chart directory relative to the workspace root.")
    files: list[GeneratedFile] = Field(default_factory=list)

    def get(self, name: str) -> GeneratedFile | None:
        """Look a file up by its relative path, falling back to its basename."""

        for f in self.files:
            if f.path == name:
                return f
        matches = [f for f in self.files if f.name == name]
        return matches[0] if len(matches) == 1 else None


class PublishRequest(BaseModel):
    remote_url: str = Field(..., min_length=1)
    remote_name: str = Field(default="origin", min_length=1)
    branch: str = Field(default="main", min_length=1)
    commit_message: str = Field(
        default="Fresh Start: Keycloak + Postgres (Official Images)",
        min_length=1,
    )
    force: bool = Field(default=True, description="Overwrite the remote branch history.")


class PublishResult(BaseModel):
    remote_url: str
    branch: str
    commit_sha: str | None = None
    commands: list[list[str]] = Field(
        default_factory=list,
        description="Commands executed, in order.",
    )


class LintReport(BaseModel):
    chart_dir: str
    issues: list[str] = Field(default_factory=list)
    helm_output: str | None = Field(
        default=None,
        description="Output of `helm lint` when it was run.",
    )

    @property
    def ok(self) -> bool:
        return not self.issues
