"""
kubectl wrapper.

Runs kubectl through the shell runner with the AWS session credentials
prepended as environment assignments.
"""

from __future__ import annotations

import logging

from dbrefresh.infrastructure.commands import build_kubectl_cmd, build_pod_exec_cmd
from dbrefresh.infrastructure.shell import ShellRunner

logger = logging.getLogger(__name__)


class PodNotFoundError(RuntimeError):
    """No running pod matched the configured prefix."""


class KubectlClient:
    """
    kubectl access scoped to one namespace.

    Usage:
        kube = KubectlClient(runner, creds.env_prefix(), "prod")
        pod = kube.find_running_pod("api-")
        kube.exec(pod, "ls")
    """

    def __init__(self, runner: ShellRunner, access: str, namespace: str):
        """
        Args:
            runner: Shell runner executing the command lines
            access: Environment assignments prepended to kubectl (may be empty)
            namespace: Namespace passed with -n
        """
        self.runner = runner
        self.access = access
        self.namespace = namespace

    def run(self, args: str, mutating: bool = True) -> str:
        """Run `kubectl -n <namespace> <args>` and return stdout."""
        return self.runner.run(build_kubectl_cmd(self.access, self.namespace, args), mutating=mutating)

    def find_running_pod(self, prefix: str) -> str:
        """
        Find a Running pod whose listing line contains `prefix`.

        Args:
            prefix: Substring matched against `kubectl get pods` output

        Returns:
            Pod name

        Raises:
            PodNotFoundError: If no running pod matches
        """
        # The pipeline status is awk's, so no match means empty output
        output = self.run(
            f"get pods | grep {prefix} | grep Running | awk '{{ print $1 }}'",
            mutating=False,
        )
        names = output.split()
        if not names:
            raise PodNotFoundError(
                f"No Running pod matching '{prefix}' in namespace '{self.namespace}'"
            )
        if len(names) > 1:
            logger.warning("Several pods match '%s' (%s); using %s", prefix, ", ".join(names), names[0])
        logger.info("Using pod %s", names[0])
        return names[0]

    def exec(self, pod: str, command: str) -> str:
        """Run `command` through bash inside `pod` and return stdout."""
        return self.runner.run(build_pod_exec_cmd(self.access, pod, self.namespace, command))

    def copy_from_pod(self, pod: str, remote_path: str, local_path: str) -> str:
        """Copy `remote_path` out of `pod` to `local_path`."""
        return self.run(f"cp {pod}:{remote_path} {local_path}")
