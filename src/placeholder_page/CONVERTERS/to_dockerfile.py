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
Renders the Dockerfile for the placeholder page image.

The recipe has no RUN step, so every target platform builds without
emulating its CPU.
"""
import json
import os
from jinja2 import Template
from ..MODELS.build_config import BuildConfig, CONTAINER_PORT
from ..ARTIFACT import entrypoint

BASE_IMAGE = "nginx:alpine"
PAGE_TEMPLATE = "index.html"

DOCKERFILE_TEMPLATE = """\
FROM {{ base_image }}

COPY {{ page_template }} {{ template_path }}

EXPOSE {{ container_port }}

CMD {{ command }}
"""


class DockerfileConverter:
    """
    Produces the image recipe from a build configuration.
    """

    def __init__(self, config: BuildConfig, base_image: str = BASE_IMAGE):
        """
        :param config: The build configuration.
        :param base_image: Image providing the nginx web server.
        """
        self.config = config
        self.base_image = base_image
        self.template = Template(DOCKERFILE_TEMPLATE)

    @staticmethod
    def command():
        """
        Exec-form CMD running the page substitution before nginx.
        """
        return ["sh", "-c", entrypoint.shell_command()]

    def render(self) -> str:
        """
        :return: Dockerfile contents.
        """
        return self.template.render(
            base_image=self.base_image,
            page_template=PAGE_TEMPLATE,
            template_path=entrypoint.TEMPLATE_PATH,
            container_port=CONTAINER_PORT,
            command=json.dumps(self.command()),
        )

    def missing_inputs(self):
        """
        Files the recipe copies that are absent from the build context.
        """
        context = self.config.context_dir
        return [
            path
            for path in (PAGE_TEMPLATE,)
            if not os.path.isfile(os.path.join(context, path))
        ]
