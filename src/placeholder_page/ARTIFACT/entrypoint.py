#!/usr/bin/env python3
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
Container entry process for the placeholder page image.

Fills the port into the page template and hands the process over to nginx.

The image itself carries no interpreter: its CMD is the POSIX shell line from
shell_command(), which performs the same substitution with sed. main() is the
reference behaviour that line is checked against, and can be run directly
wherever python3 is available.
"""
import os
import re
import shlex
import sys
from typing import Mapping, Optional, Sequence

PLACEHOLDER_TOKEN = "[PORT_PLACEHOLDER]"
DEFAULT_PORT = "80"
TEMPLATE_PATH = "/tmp/index.html"
OUTPUT_PATH = "/usr/share/nginx/html/index.html"
SERVER_COMMAND = ["nginx", "-g", "daemon off;"]


def resolve_port(environ: Mapping[str, str]) -> str:
    """
    Port value to show on the page: $PORT, or 80 when unset or empty.
    """
    return environ.get("PORT") or DEFAULT_PORT


def render_page(template: str, port: str, token: str = PLACEHOLDER_TOKEN) -> str:
    """
    Replaces every occurrence of the token with the port, literally.
    """
    return template.replace(token, str(port))


def write_page(template_path: str, output_path: str, port: str) -> str:
    """
    Renders the template file into the web root.

    :return: The rendered page.
    """
    with open(template_path, "r", encoding="utf-8") as f:
        page = render_page(f.read(), port)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(page)
    return page


def shell_command(
    token: str = PLACEHOLDER_TOKEN,
    default_port: str = DEFAULT_PORT,
    template_path: str = TEMPLATE_PATH,
    output_path: str = OUTPUT_PATH,
    server_command: Sequence[str] = SERVER_COMMAND,
) -> str:
    """
    The substitution and server start as a single ``sh -c`` script.

    The token is escaped so sed matches it literally; ``$PORT`` is expanded by
    the shell at container start, falling back to the default when unset or
    empty.
    """
    pattern = re.sub(r"([][\\/.*^$])", r"\\\1", token)
    sed_expression = f'"s/{pattern}/${{PORT:-{default_port}}}/g"'
    server = " ".join(shlex.quote(part) for part in server_command)
    return (
        f"sed {sed_expression} {shlex.quote(template_path)}"
        f" > {shlex.quote(output_path)} && exec {server}"
    )


def main(
    environ: Optional[Mapping[str, str]] = None,
    template_path: str = TEMPLATE_PATH,
    output_path: str = OUTPUT_PATH,
    exec_server: bool = True,
) -> None:
    """
    Renders the page, then replaces this process with nginx in the foreground.
    """
    env = os.environ if environ is None else environ
    port = resolve_port(env)
    write_page(template_path, output_path, port)
    print(f"Rendered {output_path} for port {port}", file=sys.stderr, flush=True)

    if exec_server:
        os.execvp(SERVER_COMMAND[0], SERVER_COMMAND)


if __name__ == "__main__":
    main()
