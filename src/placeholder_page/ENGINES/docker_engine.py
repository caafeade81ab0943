# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Container engine backed by the docker CLI and its buildx plugin.
"""
import subprocess
from typing import Dict, List, Optional

from ..MODELS.container_status import ContainerStatus
from .container_engine import (
    BuildExtensionMissingError,
    CommandFailedError,
    ContainerEngine,
    EngineUnavailableError,
)


class DockerEngine(ContainerEngine):
    """
    Runs every operation as a `docker` subprocess.
    """

    def __init__(self, executable: str = "docker"):
        """
        :param executable: Name or path of the docker binary.
        """
        self.executable = executable

    def _run(
        self,
        args: List[str],
        capture: bool = True,
        stdin_text: Optional[str] = None,
    ) -> str:
        """
        Runs one docker command.

        :param args: Arguments after the executable.
        :param capture: Capture stdout/stderr instead of streaming them to the terminal.
        :param stdin_text: Text fed to the command's stdin.
        :return: Captured stdout, or an empty string when streaming.
        :raises CommandFailedError: If the command exits non-zero.
        """
        command = [self.executable] + args
        try:
            result = subprocess.run(
                command,
                input=stdin_text,
                capture_output=capture,
                text=True,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except FileNotFoundError as e:
            raise EngineUnavailableError(
                f"'{self.executable}' executable not found", command=command
            ) from e

        if result.returncode != 0:
            output = ""
            if capture:
                output = (result.stderr or result.stdout or "").strip()
            raise CommandFailedError(
                f"Command failed with exit code {result.returncode}: {' '.join(command)}",
                command=command,
                output=output,
            )
        return result.stdout if capture else ""

    def check_daemon(self) -> None:
        try:
            self._run(["info"])
        except CommandFailedError as e:
            raise EngineUnavailableError(
                "Docker is not running. Please start Docker and try again.",
                command=e.command,
                output=e.output,
            ) from e

    def check_buildx(self) -> None:
        try:
            self._run(["buildx", "version"])
        except CommandFailedError as e:
            raise BuildExtensionMissingError(
                "Docker buildx is not available. Please update Docker to a newer version.",
                command=e.command,
                output=e.output,
            ) from e

    def builder_exists(self, name: str) -> bool:
        try:
            self._run(["buildx", "inspect", name])
        except CommandFailedError:
            return False
        return True

    def create_builder(self, name: str) -> None:
        self._run(["buildx", "create", "--name", name, "--use"])

    def use_builder(self, name: str) -> None:
        self._run(["buildx", "use", name])

    def bootstrap_builder(self, name: str) -> None:
        self._run(["buildx", "inspect", "--bootstrap", name], capture=False)

    def build(
        self,
        context_dir: str,
        dockerfile: str,
        platforms: List[str],
        tags: List[str],
        push: bool,
    ) -> None:
        args = ["buildx", "build", "--platform", ",".join(platforms), "--file", "-"]
        for tag in tags:
            args.extend(["--tag", tag])
        if push:
            args.append("--push")
        args.append(context_dir)
        self._run(args, capture=False, stdin_text=dockerfile)

    def pull(self, image_ref: str) -> None:
        self._run(["pull", image_ref], capture=False)

    def run(self, image_ref: str, ports: Dict[int, int], env: Dict[str, str]) -> str:
        args = ["run", "--detach"]
        for host_port, container_port in ports.items():
            args.extend(["--publish", f"{host_port}:{container_port}"])
        for key, value in env.items():
            args.extend(["--env", f"{key}={value}"])
        args.append(image_ref)
        return self._run(args).strip()

    def inspect_status(self, container_id: str) -> ContainerStatus:
        output = self._run(["inspect", "--format", "{{.State.Status}}", container_id])
        return ContainerStatus.from_engine(output)

    def logs(self, container_id: str) -> str:
        # Containers log to both streams; keep them together.
        command = [self.executable, "logs", container_id]
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            shell=False,
        )
        if result.returncode != 0:
            raise CommandFailedError(
                f"Command failed with exit code {result.returncode}: {' '.join(command)}",
                command=command,
                output=(result.stdout or "").strip(),
            )
        return result.stdout

    def stop(self, container_id: str) -> None:
        self._run(["stop", container_id])

    def remove(self, container_id: str) -> None:
        self._run(["rm", "--force", container_id])

    def remove_builder(self, name: str) -> None:
        self._run(["buildx", "rm", name])
