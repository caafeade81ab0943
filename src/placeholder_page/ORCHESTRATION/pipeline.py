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
The build, push and smoke-test procedure for the placeholder page image.

Stages run strictly in order:
check prerequisites -> set up builder -> build (and push) -> [test] -> [remove builder].
The first failing stage raises and nothing after it runs.
"""
import time
from typing import Callable

from ..CONVERTERS.to_dockerfile import DockerfileConverter
from ..ENGINES.container_engine import ContainerEngine, EngineError
from ..MODELS.build_config import BuildConfig, CONTAINER_PORT
from ..MODELS.container_status import ContainerStatus
from ..UTILS.console import Console
from ..UTILS.port_finder import is_port_free
from .readiness import wait_until_running

BANNER_TITLE = "Placeholder Page - Multi-Platform Build"


class PipelineError(RuntimeError):
    """
    Raised when a stage cannot complete for a reason other than an engine command failing.
    """


class BuildContextError(PipelineError):
    """The build context is missing files the image needs."""


class SmokeTestError(PipelineError):
    """The test container did not reach the running state."""


def check_prerequisites(config: BuildConfig, engine: ContainerEngine, console: Console):
    """
    Verifies the engine daemon answers, buildx is installed and the build
    context holds every file the recipe copies.

    Runs before any builder is touched.
    """
    console.status("Checking Docker status...")
    engine.check_daemon()
    console.success("Docker is running")

    console.status("Checking Docker buildx availability...")
    engine.check_buildx()
    console.success("Docker buildx is available")

    _check_build_context(DockerfileConverter(config), config)
    console.success(f"Build context '{config.context_dir}' is complete")


def _check_build_context(converter: DockerfileConverter, config: BuildConfig):
    missing = converter.missing_inputs()
    if missing:
        raise BuildContextError(
            f"Build context '{config.context_dir}' is missing: {', '.join(missing)}"
        )


def setup_builder(config: BuildConfig, engine: ContainerEngine, console: Console):
    """
    Creates the multi-platform builder unless it exists, selects it and bootstraps it.
    """
    name = config.builder_name
    console.status("Setting up multi-platform builder...")

    if engine.builder_exists(name):
        console.warning(f"Builder '{name}' already exists, using existing builder")
    else:
        console.status(f"Creating new builder '{name}'...")
        engine.create_builder(name)
        console.success(f"Created builder '{name}'")

    engine.use_builder(name)
    console.success(f"Using builder '{name}'")

    console.status("Bootstrapping builder (this may take a moment)...")
    engine.bootstrap_builder(name)
    console.success("Builder ready")


def _build(config: BuildConfig, engine: ContainerEngine, push: bool):
    converter = DockerfileConverter(config)
    _check_build_context(converter, config)
    engine.build(
        context_dir=config.context_dir,
        dockerfile=converter.render(),
        platforms=list(config.platforms),
        tags=[config.image_ref],
        push=push,
    )


def build_and_push(config: BuildConfig, engine: ContainerEngine, console: Console):
    """
    Builds the image for every platform and pushes it to the registry.
    """
    console.status("Building and pushing multi-platform image...")
    console.status(f"Image: {config.image}")
    console.status(f"Platforms: {config.platform_list}")
    _build(config, engine, push=True)
    console.success("Multi-platform image built and pushed successfully!")


def build_local(config: BuildConfig, engine: ContainerEngine, console: Console):
    """
    Builds the image for every platform without pushing it anywhere.
    """
    console.status("Building for local use only (no push)...")
    _build(config, engine, push=False)
    console.success("Local build completed successfully!")


def _discard_container(engine: ContainerEngine, console: Console, container_id: str, stop: bool):
    try:
        if stop:
            engine.stop(container_id)
        engine.remove(container_id)
    except EngineError as e:
        console.warning(f"Could not remove test container {container_id}: {e}")
        return False
    return True


def smoke_test(
    config: BuildConfig,
    engine: ContainerEngine,
    console: Console,
    sleep: Callable[[float], None] = time.sleep,
    port_is_free: Callable[[int], bool] = is_port_free,
):
    """
    Pulls the pushed image, runs it and checks that it comes up.

    The container is removed afterwards whether or not it started.

    :raises SmokeTestError: If the container never reports running.
    """
    console.status("Testing the pushed image...")

    if not port_is_free(config.test_port):
        raise SmokeTestError(f"Test port {config.test_port} is already in use on this host")

    engine.pull(config.image_ref)
    console.success("Image pulled successfully")

    console.status("Running test container...")
    container_id = engine.run(
        config.image_ref,
        ports={config.test_port: CONTAINER_PORT},
        env={"PORT": str(config.test_port)},
    )

    try:
        status = wait_until_running(
            engine, container_id, timeout=config.readiness_timeout, sleep=sleep
        )
    except EngineError as e:
        console.warning(f"Could not read test container status: {e}")
        status = ContainerStatus.UNKNOWN

    if status == ContainerStatus.RUNNING:
        console.success("Test container is running successfully!")
        console.status(f"Test URL: {config.test_url}")

        console.status("Cleaning up test container...")
        if _discard_container(engine, console, container_id, stop=True):
            console.success("Test container cleaned up")
        return

    console.error(f"Test container failed to start (status: {status.value})")
    try:
        console.plain(engine.logs(container_id))
    except EngineError as e:
        console.warning(f"Could not fetch test container logs: {e}")
    _discard_container(engine, console, container_id, stop=False)
    raise SmokeTestError(f"Test container {container_id} did not start")


def cleanup_builder(config: BuildConfig, engine: ContainerEngine, console: Console):
    """
    Removes the multi-platform builder.
    """
    console.status("Cleaning up builder...")
    engine.remove_builder(config.builder_name)
    console.success("Builder cleaned up")


def run_pipeline(
    config: BuildConfig,
    engine: ContainerEngine,
    console: Console,
    sleep: Callable[[float], None] = time.sleep,
    port_is_free: Callable[[int], bool] = is_port_free,
):
    """
    Runs every stage the configuration asks for.

    :raises EngineError: If an engine command fails.
    :raises PipelineError: If the build context is incomplete or the smoke test fails.
    """
    console.banner(BANNER_TITLE)

    check_prerequisites(config, engine, console)
    setup_builder(config, engine, console)

    if config.push:
        build_and_push(config, engine, console)
        if config.run_test:
            smoke_test(config, engine, console, sleep=sleep, port_is_free=port_is_free)

        console.success("Build and push completed successfully!")
        console.status(f"Image is available at: {config.registry_ref}")
        console.status(f"Supports platforms: {config.platform_list}")
    else:
        build_local(config, engine, console)

    if config.cleanup_builder:
        cleanup_builder(config, engine, console)

    console.plain()
    console.rule()
    console.success("All operations completed successfully!")
    console.rule()
