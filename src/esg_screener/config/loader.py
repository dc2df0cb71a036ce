"""
Configuration Loader - YAML Loading with Validation.

A screening setup is one base YAML file plus optional profiles. Profiles
sit in a ``profiles/`` directory beside the base file
(``config/default.yaml`` -> ``config/profiles/<name>.yaml``) and are
deep-merged over it in the order given, so
``load("config/default.yaml", profile=["fail_open", "strict_dates"])``
lets the last profile win. The merged mapping is validated with the
Pydantic models in ``esg_screener.config.models``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from esg_screener.config.models import ScreeningConfig

logger = logging.getLogger(__name__)

PROFILE_DIR = "profiles"

ProfileSpec = Union[str, Sequence[str], None]


class ConfigLoader:
    """Reads screening configuration files and their profiles."""

    def __init__(self, base_path: Optional[Path] = None) -> None:
        """
        Args:
            base_path: Directory that relative config paths start from
        """
        self._base_path = base_path or Path(".")

    def load(
        self,
        config_path: Union[str, Path],
        profile: ProfileSpec = None,
    ) -> ScreeningConfig:
        """
        Build the effective configuration for a screening setup.

        Args:
            config_path: Base YAML file
            profile: One profile name or several, applied left to right

        Returns:
            Validated ScreeningConfig

        Raises:
            FileNotFoundError: Base file or a named profile is missing
            ValueError: A file does not hold a mapping at top level
            pydantic.ValidationError: Merged values are out of range
        """
        path = self._resolve(config_path)
        merged = _read_mapping(path)

        for name in _profile_names(profile):
            merged = merge_configs(merged, _read_mapping(self._profile_path(path, name)))
            logger.debug(f"Applied config profile '{name}' over {path.name}")

        config = self.load_from_dict(merged)
        logger.info(
            f"Loaded {path.name}: missing_data_policy="
            f"{config.evaluation.missing_data_policy.value}, "
            f"max_workers={config.global_settings.max_workers}"
        )
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> ScreeningConfig:
        """Validate an already merged mapping."""
        for section in sorted(set(config_dict) - _known_sections()):
            logger.warning(f"Ignoring unknown config section '{section}'")
        return ScreeningConfig.model_validate(config_dict)

    def list_profiles(self, config_path: Union[str, Path]) -> List[str]:
        """Names of the profiles available for ``config_path``, sorted."""
        profile_dir = self._resolve(config_path).parent / PROFILE_DIR
        if not profile_dir.is_dir():
            return []
        return sorted(p.stem for p in profile_dir.glob("*.yaml"))

    def _resolve(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self._base_path / p

    @staticmethod
    def _profile_path(config_file: Path, name: str) -> Path:
        profile_path = config_file.parent / PROFILE_DIR / f"{name}.yaml"
        if not profile_path.exists():
            raise FileNotFoundError(f"Profile not found: {name}")
        return profile_path


def _profile_names(profile: ProfileSpec) -> List[str]:
    if profile is None:
        return []
    if isinstance(profile, str):
        return [profile]
    return list(profile)


def _known_sections() -> set:
    names = set()
    for field_name, field in ScreeningConfig.model_fields.items():
        names.add(field.alias or field_name)
        names.add(field_name)
    return names


def _read_mapping(path: Path) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at top level")
    return data


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge ``overlay`` into a copy of ``base``.

    Nested sections merge key by key; any other value in ``overlay``
    replaces the one in ``base``. Neither input is modified.
    """
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_path: Union[str, Path],
    profile: ProfileSpec = None,
    base_path: Optional[Path] = None,
) -> ScreeningConfig:
    """Shortcut for ``ConfigLoader(base_path).load(config_path, profile)``."""
    return ConfigLoader(base_path=base_path).load(config_path, profile)
