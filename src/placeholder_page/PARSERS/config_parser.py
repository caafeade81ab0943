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
Parser for the optional YAML build configuration file.
"""
import yaml
from typing import Any, Dict, Optional
from ..MODELS.build_config import BuildConfig, RUN_MODE_FIELDS


class ConfigError(ValueError):
    """
    Raised when a configuration file cannot be used.
    """


class ConfigParser:
    """
    Reads build settings such as image, tag, builder name and platforms.

    Example file::

        image: hazelgallery/place-holder-page
        tag: latest
        builder_name: multiplatform
        platforms: [linux/amd64, linux/arm64]
        test_port: 8510
    """

    def parse(self, config_path: str) -> Dict[str, Any]:
        """
        Parses a configuration file from a path.

        :param config_path: Path to the YAML file.
        :return: Settings to apply on top of the defaults.
        """
        try:
            with open(config_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> Dict[str, Any]:
        """
        Parses configuration from a YAML string.

        :param content: YAML content.
        :return: Settings to apply on top of the defaults.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}") from e
        if not data:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping of settings")

        known = set(BuildConfig.model_fields) - set(RUN_MODE_FIELDS)
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        settings = dict(data)
        platforms = settings.get('platforms')
        if isinstance(platforms, str):
            settings['platforms'] = [p for p in platforms.split(',')]
        return settings

    def load(self, config_path: Optional[str] = None, **overrides: Any) -> BuildConfig:
        """
        Builds the run configuration from defaults, an optional file and overrides.

        :param config_path: YAML file to read, if any.
        :param overrides: Values that win over the file, e.g. run-mode flags.
        """
        settings = self.parse(config_path) if config_path else {}
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return BuildConfig(**settings)
