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
In-memory container engine used by the test suite.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..MODELS.container_status import ContainerStatus
from .container_engine import (
    BuildExtensionMissingError,
    CommandFailedError,
    ContainerEngine,
    EngineUnavailableError,
)


@dataclass
class FakeContainer:
    """A container started by the fake engine."""

    id: str
    image_ref: str
    ports: Dict[int, int]
    env: Dict[str, str]
    logs: str = ""
    running: bool = True


class FakeEngine(ContainerEngine):
    """
    Records calls and simulates engine state without touching a real engine.

    :param daemon_up: Whether check_daemon succeeds.
    :param has_buildx: Whether check_buildx succeeds.
    :param builders: Builders that already exist.
    :param statuses: Statuses returned by successive inspect_status calls;
        the last one repeats once the list is exhausted.
    :param container_logs: Text returned by logs().
    :param fail_on: Operation names that raise CommandFailedError.
    """

    def __init__(
        self,
        daemon_up: bool = True,
        has_buildx: bool = True,
        builders: Optional[Set[str]] = None,
        statuses: Optional[List[ContainerStatus]] = None,
        container_logs: str = "",
        fail_on: Optional[Set[str]] = None,
    ):
        self.daemon_up = daemon_up
        self.has_buildx = has_buildx
        self.builders: Set[str] = set(builders or ())
        self.active_builder: Optional[str] = None
        self.bootstrapped: Set[str] = set()
        self.statuses = list(statuses or [ContainerStatus.RUNNING])
        self.container_logs = container_logs
        self.fail_on: Set[str] = set(fail_on or ())

        self.calls: List[Tuple[str, tuple]] = []
        self.built: List[dict] = []
        self.pushed: List[str] = []
        self.pulled: List[str] = []
        self.containers: Dict[str, FakeContainer] = {}
        self._next_id = 1
        self._status_index = 0

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise CommandFailedError(f"{name} failed", command=[name], output="simulated failure")

    @property
    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def check_daemon(self) -> None:
        self._record("check_daemon")
        if not self.daemon_up:
            raise EngineUnavailableError("Docker is not running. Please start Docker and try again.")

    def check_buildx(self) -> None:
        self._record("check_buildx")
        if not self.has_buildx:
            raise BuildExtensionMissingError(
                "Docker buildx is not available. Please update Docker to a newer version."
            )

    def builder_exists(self, name: str) -> bool:
        self._record("builder_exists", name)
        return name in self.builders

    def create_builder(self, name: str) -> None:
        self._record("create_builder", name)
        self.builders.add(name)
        self.active_builder = name

    def use_builder(self, name: str) -> None:
        self._record("use_builder", name)
        if name not in self.builders:
            raise CommandFailedError(f"no builder {name!r} found")
        self.active_builder = name

    def bootstrap_builder(self, name: str) -> None:
        self._record("bootstrap_builder", name)
        self.bootstrapped.add(name)

    def build(self, context_dir, dockerfile, platforms, tags, push) -> None:
        self._record("build", context_dir, tuple(platforms), tuple(tags), push)
        self.built.append(
            {
                "context_dir": context_dir,
                "dockerfile": dockerfile,
                "platforms": list(platforms),
                "tags": list(tags),
                "push": push,
                "builder": self.active_builder,
            }
        )
        if push:
            self.pushed.extend(tags)

    def pull(self, image_ref: str) -> None:
        self._record("pull", image_ref)
        if image_ref not in self.pushed:
            raise CommandFailedError(f"manifest for {image_ref} not found")
        self.pulled.append(image_ref)

    def run(self, image_ref, ports, env) -> str:
        self._record("run", image_ref, dict(ports), dict(env))
        container_id = f"fake{self._next_id:04d}"
        self._next_id += 1
        self.containers[container_id] = FakeContainer(
            id=container_id,
            image_ref=image_ref,
            ports=dict(ports),
            env=dict(env),
            logs=self.container_logs,
        )
        return container_id

    def inspect_status(self, container_id: str) -> ContainerStatus:
        self._record("inspect_status", container_id)
        if container_id not in self.containers:
            raise CommandFailedError(f"No such container: {container_id}")
        index = min(self._status_index, len(self.statuses) - 1)
        self._status_index += 1
        return self.statuses[index]

    def logs(self, container_id: str) -> str:
        self._record("logs", container_id)
        return self.containers[container_id].logs

    def stop(self, container_id: str) -> None:
        self._record("stop", container_id)
        self.containers[container_id].running = False

    def remove(self, container_id: str) -> None:
        self._record("remove", container_id)
        self.containers.pop(container_id, None)

    def remove_builder(self, name: str) -> None:
        self._record("remove_builder", name)
        self.builders.discard(name)
        if self.active_builder == name:
            self.active_builder = None
