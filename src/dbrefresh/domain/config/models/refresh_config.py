"""
Refresh configuration domain model.

Top-level settings for one refresh run: where the source pod lives, how to
obtain cluster credentials, and the remote/local databases.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .db_config import DbConfig

DEFAULT_POD_WORKDIR = "/www/yield-engine"
DEFAULT_IDENTITY_CHECK_CMD = "aws sts get-caller-identity"


class RefreshConfig(BaseModel):
    """
    Domain model for the refresh workflow configuration.

    Mirrors the keys of config.yaml; optional keys carry the defaults the
    workflow has always used.
    """

    model_config = ConfigDict(extra="ignore")

    namespace: str = Field(..., description="Kubernetes namespace of the source pod")
    pod_prefix: str = Field(..., description="Substring selecting the source pod")
    credential_cmd: str = Field(..., description="Command printing AWS session credentials as JSON")
    local_db: DbConfig = Field(..., description="Local database to replace")
    remote_db: DbConfig = Field(..., description="Remote database to dump")
    pod_workdir: str = Field(DEFAULT_POD_WORKDIR, description="Working directory of the pod shell")
    local_dump_dir: str = Field("~", description="Local directory receiving the dump")
    pg_client_version: str = Field("12", description="postgresql-client major version for the pod")
    keep_previous: bool = Field(False, description="Keep the renamed previous local database")
    identity_check_cmd: str = Field(
        DEFAULT_IDENTITY_CHECK_CMD, description="Command verifying the AWS login"
    )

    @field_validator("namespace", "pod_prefix", "credential_cmd")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank required settings."""
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    @field_validator("pod_workdir", "local_dump_dir")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined with '/', so drop a trailing one."""
        v = v.strip()
        if len(v) > 1:
            v = v.rstrip("/")
        return v

    @field_validator("pg_client_version", mode="before")
    @classmethod
    def normalise_version(cls, v) -> str:
        """YAML reads 12 as an int."""
        text = str(v).strip()
        if not text:
            raise ValueError("pg_client_version cannot be empty")
        return text

    def summary(self) -> dict:
        """
        Get a secret-free summary of the configuration.

        Returns:
            Flat dictionary suitable for logging and display
        """
        return {
            "namespace": self.namespace,
            "pod_prefix": self.pod_prefix,
            "pod_workdir": self.pod_workdir,
            "local_dump_dir": self.local_dump_dir,
            "pg_client_version": self.pg_client_version,
            "keep_previous": self.keep_previous,
            "remote_db": "{username}@{host}:{port}/{database}".format(**self.remote_db.summary()),
            "local_db": "{username}@{host}:{port}/{database}".format(**self.local_db.summary()),
        }
