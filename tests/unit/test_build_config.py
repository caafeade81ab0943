"""
Unit tests for the build configuration model.
"""
import pytest
from pydantic import ValidationError
from placeholder_page.MODELS.build_config import BuildConfig


class TestBuildConfig:
    """Tests for BuildConfig."""

    def test_defaults(self):
        config = BuildConfig()
        assert config.image_ref == "hazelgallery/place-holder-page:latest"
        assert config.platform_list == "linux/amd64,linux/arm64"
        assert config.registry_ref == "docker.io/hazelgallery/place-holder-page:latest"
        assert config.test_url == "http://localhost:8510"
        assert config.push is True
        assert config.run_test is False
        assert config.cleanup_builder is False

    def test_frozen(self):
        config = BuildConfig()
        with pytest.raises(ValidationError):
            config.push = False

    def test_platforms_from_list(self):
        config = BuildConfig(platforms=["linux/arm64", " linux/amd64 "])
        assert config.platforms == ("linux/arm64", "linux/amd64")

    def test_no_platforms_rejected(self):
        with pytest.raises(ValidationError):
            BuildConfig(platforms=[])

    def test_test_without_push_rejected(self):
        with pytest.raises(ValidationError, match="smoke test needs a pushed image"):
            BuildConfig(push=False, run_test=True)

    def test_local_build_without_test_allowed(self):
        config = BuildConfig(push=False)
        assert config.push is False

    @pytest.mark.parametrize("image", ["acme/page:v1", "acme/page@sha256:abc", ""])
    def test_image_must_be_bare_name(self, image):
        with pytest.raises(ValidationError):
            BuildConfig(image=image)

    def test_registry_with_port_allowed(self):
        config = BuildConfig(image="localhost:5000/page", tag="dev")
        assert config.image_ref == "localhost:5000/page:dev"
        assert config.registry_ref == "localhost:5000/page:dev"

    @pytest.mark.parametrize("port", [0, 70000])
    def test_test_port_range(self, port):
        with pytest.raises(ValidationError):
            BuildConfig(test_port=port)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            BuildConfig(registry="docker.io")

    @pytest.mark.parametrize("tag", ["v1.2", "2024-10_rc", "_build", "x" * 128])
    def test_valid_tags(self, tag):
        assert BuildConfig(tag=tag).tag == tag

    @pytest.mark.parametrize(
        "tag", ["", " ", "v1:2", "v1@sha", "has space", ".hidden", "-dash", "x" * 129]
    )
    def test_invalid_tags(self, tag):
        with pytest.raises(ValidationError, match="tag must be"):
            BuildConfig(tag=tag)
