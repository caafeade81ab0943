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
Unit tests for image reference parsing.
"""
import pytest
from placeholder_page.REGISTRY.image_reference import ImageReference


class TestImageReference:
    """Tests for ImageReference parsing."""

    def test_parse_user_image(self):
        """Test the default image name."""
        ref = ImageReference.parse("hazelgallery/place-holder-page")
        assert ref.registry == "docker.io"
        assert ref.repository == "hazelgallery/place-holder-page"
        assert ref.tag == "latest"

    def test_parse_official_image(self):
        """Test a single-component name gets the library prefix."""
        ref = ImageReference.parse("nginx:alpine")
        assert ref.repository == "library/nginx"
        assert ref.tag == "alpine"
        assert ref.short_name == "nginx:alpine"

    def test_parse_registry_with_port(self):
        """Test that a registry port is not mistaken for a tag."""
        ref = ImageReference.parse("localhost:5000/page")
        assert ref.registry == "localhost:5000"
        assert ref.repository == "page"
        assert ref.tag == "latest"

    def test_parse_full_reference(self):
        """Test a reference on a non-default registry."""
        ref = ImageReference.parse("ghcr.io/acme/page:v2")
        assert ref.registry == "ghcr.io"
        assert ref.repository == "acme/page"
        assert ref.full_name == "ghcr.io/acme/page:v2"
        assert str(ref) == "ghcr.io/acme/page:v2"

    def test_parse_with_digest(self):
        """Test parsing image with digest."""
        ref = ImageReference.parse("acme/page@sha256:abc123")
        assert ref.digest == "sha256:abc123"
        assert ref.tag is None
        assert ref.full_name == "docker.io/acme/page@sha256:abc123"

    def test_with_tag(self):
        """Test switching the tag keeps the repository."""
        ref = ImageReference.parse("acme/page").with_tag("v3")
        assert ref.full_name == "docker.io/acme/page:v3"

    @pytest.mark.parametrize("reference", ["", "   ", "acme//page", "acme page"])
    def test_invalid_reference_raises(self, reference):
        """Test that malformed references raise."""
        with pytest.raises(ValueError):
            ImageReference.parse(reference)
