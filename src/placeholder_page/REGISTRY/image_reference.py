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
Image reference parsing.
Turns 'hazelgallery/place-holder-page:latest' into registry, repository and tag.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """
    Parsed image reference.

    Examples:
        - place-holder-page -> docker.io/library/place-holder-page:latest
        - hazelgallery/place-holder-page -> docker.io/hazelgallery/place-holder-page:latest
        - ghcr.io/acme/page:v2 -> ghcr.io/acme/page:v2
    """

    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    DEFAULT_REGISTRY = "docker.io"
    DEFAULT_TAG = "latest"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse an image reference string.

        Args:
            reference: Image reference string (e.g., 'user/image', 'registry:5000/image:v1')

        Returns:
            Parsed ImageReference object.
        """
        if not reference or not reference.strip():
            raise ValueError("Empty image reference")
        if any(ch.isspace() for ch in reference):
            raise ValueError(f"Image reference must not contain whitespace: {reference!r}")

        digest = None
        if "@" in reference:
            reference, digest = reference.rsplit("@", 1)

        tag = None
        last_colon = reference.rfind(":")
        if last_colon != -1:
            after_colon = reference[last_colon + 1 :]
            # 'localhost:5000/image' has a port, not a tag
            if "/" not in after_colon:
                tag = after_colon
                reference = reference[:last_colon]

        parts = reference.split("/")
        if any(not part for part in parts):
            raise ValueError(f"Malformed image reference: {reference!r}")

        first = parts[0]
        if len(parts) > 1 and ("." in first or ":" in first or first == "localhost"):
            registry = first
            repository = "/".join(parts[1:])
        else:
            registry = cls.DEFAULT_REGISTRY
            repository = reference if len(parts) > 1 else f"library/{reference}"

        if not tag and not digest:
            tag = cls.DEFAULT_TAG

        return cls(registry=registry, repository=repository, tag=tag, digest=digest)

    def with_tag(self, tag: str) -> "ImageReference":
        """Return the same repository pointing at another tag."""
        return ImageReference(registry=self.registry, repository=self.repository, tag=tag)

    @property
    def full_name(self) -> str:
        """Registry-qualified reference."""
        name = f"{self.registry}/{self.repository}"
        if self.digest:
            return f"{name}@{self.digest}"
        return f"{name}:{self.tag}"

    @property
    def short_name(self) -> str:
        """Reference without the default registry or the 'library/' prefix."""
        if self.registry != self.DEFAULT_REGISTRY:
            return self.full_name
        repo = self.repository
        if repo.startswith("library/"):
            repo = repo[len("library/") :]
        if self.digest:
            return f"{repo}@{self.digest}"
        return f"{repo}:{self.tag}"

    def __str__(self) -> str:
        return self.short_name
