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
Models for the build run configuration.
"""
import re
from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..REGISTRY.image_reference import ImageReference

DEFAULT_IMAGE = "hazelgallery/place-holder-page"
DEFAULT_TAG = "latest"
DEFAULT_BUILDER = "multiplatform"
DEFAULT_PLATFORMS = ("linux/amd64", "linux/arm64")
# Registry tag grammar.
TAG_PATTERN = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}")
# Port nginx listens on inside the image.
CONTAINER_PORT = 80

# Fields a configuration file may not set; these come from the command line.
RUN_MODE_FIELDS = ("push", "run_test", "cleanup_builder")


class BuildConfig(BaseModel):
    """
    Everything one build run needs, fixed before the first engine call.

    The model is frozen: stages receive it explicitly and cannot change it.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    image: str = DEFAULT_IMAGE
    tag: str = DEFAULT_TAG
    builder_name: str = DEFAULT_BUILDER
    platforms: Tuple[str, ...] = DEFAULT_PLATFORMS
    context_dir: str = "."

    test_port: int = Field(default=8510, ge=1, le=65535)
    readiness_timeout: float = Field(default=10.0, gt=0)

    # Run mode
    push: bool = True
    run_test: bool = False
    cleanup_builder: bool = False

    @field_validator("image")
    @classmethod
    def check_image(cls, value: str) -> str:
        ImageReference.parse(value)
        if "@" in value or ":" in value.rsplit("/", 1)[-1]:
            raise ValueError("image must be a bare repository name; set the tag separately")
        return value

    @field_validator("tag")
    @classmethod
    def check_tag(cls, value: str) -> str:
        if not TAG_PATTERN.fullmatch(value):
            raise ValueError(
                "tag must be 1-128 letters, digits, underscores, periods or dashes"
                " and must not start with a period or dash"
            )
        return value

    @field_validator("builder_name")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("platforms")
    @classmethod
    def check_platforms(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        cleaned = tuple(p.strip() for p in value if p.strip())
        if not cleaned:
            raise ValueError("at least one target platform is required")
        return cleaned

    @model_validator(mode="after")
    def check_run_mode(self) -> "BuildConfig":
        # The smoke test pulls the image back from the registry.
        if self.run_test and not self.push:
            raise ValueError("the smoke test needs a pushed image; drop --no-push or --test")
        return self

    @property
    def image_ref(self) -> str:
        """Image name and tag as passed to the engine."""
        return f"{self.image}:{self.tag}"

    @property
    def registry_ref(self) -> str:
        """Fully-qualified location of the pushed image."""
        return ImageReference.parse(self.image).with_tag(self.tag).full_name

    @property
    def platform_list(self) -> str:
        """Comma-separated platform identifiers."""
        return ",".join(self.platforms)

    @property
    def test_url(self) -> str:
        return f"http://localhost:{self.test_port}"
