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
Coloured status output for the build pipeline.
"""
import click

RULE = "=" * 40


class Console:
    """
    Prints tagged status lines: [INFO], [SUCCESS], [WARNING] and [ERROR].
    """

    def status(self, message: str):
        click.echo(f"{click.style('[INFO]', fg='blue')} {message}")

    def success(self, message: str):
        click.echo(f"{click.style('[SUCCESS]', fg='green')} {message}")

    def warning(self, message: str):
        click.echo(f"{click.style('[WARNING]', fg='yellow', bold=True)} {message}")

    def error(self, message: str):
        click.echo(f"{click.style('[ERROR]', fg='red')} {message}", err=True)

    def plain(self, message: str = ""):
        click.echo(message)

    def rule(self):
        click.echo(RULE)

    def banner(self, title: str):
        """Prints a title between two rules."""
        self.rule()
        click.echo(title)
        self.rule()
        click.echo()
