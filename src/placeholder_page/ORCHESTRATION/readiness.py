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
Waiting for a freshly started container to report itself running.
"""
import time
from typing import Callable

from tenacity import (
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from ..ENGINES.container_engine import ContainerEngine
from ..MODELS.container_status import ContainerStatus


def _still_starting(status: ContainerStatus) -> bool:
    return status != ContainerStatus.RUNNING and not status.is_terminal


def wait_until_running(
    engine: ContainerEngine,
    container_id: str,
    timeout: float = 10.0,
    initial_wait: float = 0.25,
    max_wait: float = 2.0,
    max_attempts: int = 50,
    sleep: Callable[[float], None] = time.sleep,
) -> ContainerStatus:
    """
    Polls the container status with exponential backoff.

    Stops as soon as the container is running or has exited, or when the
    timeout elapses.

    :param engine: Engine that started the container.
    :param container_id: Container to watch.
    :param timeout: Seconds before giving up.
    :param initial_wait: First delay between polls.
    :param max_wait: Upper bound for the delay between polls.
    :param max_attempts: Upper bound for the number of polls.
    :param sleep: Sleep function, replaceable in tests.
    :return: The last status observed.
    """
    retrying = Retrying(
        stop=stop_after_delay(timeout) | stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_wait, min=initial_wait, max=max_wait),
        retry=retry_if_result(_still_starting),
        sleep=sleep,
    )
    try:
        return retrying(engine.inspect_status, container_id)
    except RetryError as e:
        return e.last_attempt.result()
