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
Command Line Interface for the placeholder page build.
"""
import click
from pydantic import ValidationError
from ..CONVERTERS.to_dockerfile import DockerfileConverter
from ..ENGINES.container_engine import EngineError
from ..ENGINES.docker_engine import DockerEngine
from ..ORCHESTRATION.pipeline import PipelineError, run_pipeline
from ..PARSERS.config_parser import ConfigError, ConfigParser
from ..UTILS.console import Console

EPILOG = """\b
Examples:
  placeholder-page              # Build and push
  placeholder-page --test       # Build, push, and test
  placeholder-page --no-push    # Build only (local)
"""


def _validation_message(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        message = item["msg"]
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


@click.command(context_settings={'help_option_names': ['-h', '--help']}, epilog=EPILOG)
@click.option('--test', '-t', 'run_test', is_flag=True, help='Run test after build and push')
@click.option('--no-push', is_flag=True, help="Build only, don't push to the registry")
@click.option('--cleanup', is_flag=True, help='Remove builder after build')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='YAML file overriding image, tag, builder and platforms')
@click.option('--context', 'context_dir', type=click.Path(file_okay=False),
              help='Build context directory (default: current directory)')
@click.option('--print-dockerfile', is_flag=True, help='Print the generated Dockerfile and exit')
@click.pass_context
def cli(ctx, run_test, no_push, cleanup, config_path, context_dir, print_dockerfile):
    """
    Placeholder Page - Cross Platform Build.

    Builds the placeholder page image for linux/amd64 and linux/arm64 and
    pushes it to the registry.
    """
    ctx.ensure_object(dict)
    console = ctx.obj.get('console') or Console()

    try:
        config = ConfigParser().load(
            config_path,
            context_dir=context_dir,
            push=not no_push,
            run_test=run_test,
            cleanup_builder=cleanup,
        )
    except ConfigError as e:
        raise click.UsageError(str(e), ctx=ctx)
    except ValidationError as e:
        raise click.UsageError(_validation_message(e), ctx=ctx)

    if print_dockerfile:
        click.echo(DockerfileConverter(config).render())
        return

    engine = ctx.obj.get('engine') or DockerEngine()
    options = {k: ctx.obj[k] for k in ('sleep', 'port_is_free') if k in ctx.obj}
    try:
        run_pipeline(config, engine, console, **options)
    except (EngineError, PipelineError) as e:
        console.error(str(e))
        ctx.exit(1)


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
