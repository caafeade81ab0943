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
The container engine capability the build pipeline drives.

Every image, container and builder mutation goes through this interface, so
the pipeline can run against the real Docker CLI or an in-memory fake.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from ..MODELS.container_status import ContainerStatus


class EngineError(RuntimeError):
    """
    Raised when the container engine cannot do what was asked.

    Args:
        message: Human readable summary.
        command: The command line that failed, if any.
        output: Captured stderr/stdout of the failed command.
    """

    def __init__(self, message: str, command: Optional[Sequence[str]] = None, output: str = ""):
        super().__init__(message)
        self.command = list(command) if command else []
        self.output = output

    def __str__(self) -> str:
        text = super().__str__()
        if self.output:
            return f"{text}\n{self.output}"
        return text


class EngineUnavailableError(EngineError):
    """The engine daemon is not reachable."""


class BuildExtensionMissingError(EngineError):
    """The multi-architecture build extension is not installed."""


class CommandFailedError(EngineError):
    """An engine command exited with a non-zero status."""


class ContainerEngine(ABC):
    """
    Narrow interface over a container engine.
    """

    @abstractmethod
    def check_daemon(self) -> None:
        """Raise EngineUnavailableError if the daemon cannot be reached."""

    @abstractmethod
    def check_buildx(self) -> None:
        """Raise BuildExtensionMissingError if multi-arch builds are unsupported."""

    @abstractmethod
    def builder_exists(self, name: str) -> bool:
        """True if a builder with this name exists."""

    @abstractmethod
    def create_builder(self, name: str) -> None:
        """Create the named builder and make it the active one."""

    @abstractmethod
    def use_builder(self, name: str) -> None:
        """Select the named builder."""

    @abstractmethod
    def bootstrap_builder(self, name: str) -> None:
        """Start the builder so the first build does not pay for it."""

    @abstractmethod
    def build(
        self,
        context_dir: str,
        dockerfile: str,
        platforms: List[str],
        tags: List[str],
        push: bool,
    ) -> None:
        """
        Build one image for all platforms.

        :param context_dir: Build context directory.
        :param dockerfile: Contents of the Dockerfile.
        :param platforms: Target platform identifiers, e.g. 'linux/arm64'.
        :param tags: References to tag the result with.
        :param push: Publish the result to the registry instead of keeping it local.
        """

    @abstractmethod
    def pull(self, image_ref: str) -> None:
        """Pull an image from its registry."""

    @abstractmethod
    def run(self, image_ref: str, ports: Dict[int, int], env: Dict[str, str]) -> str:
        """
        Start a detached container.

        :param ports: Mapping of host port to container port.
        :param env: Environment variables for the container.
        :return: The container id.
        """

    @abstractmethod
    def inspect_status(self, container_id: str) -> ContainerStatus:
        """Current state of a container."""

    @abstractmethod
    def logs(self, container_id: str) -> str:
        """Everything the container wrote to stdout and stderr."""

    @abstractmethod
    def stop(self, container_id: str) -> None:
        """Stop a running container."""

    @abstractmethod
    def remove(self, container_id: str) -> None:
        """Remove a container."""

    @abstractmethod
    def remove_builder(self, name: str) -> None:
        """Remove the named builder."""
