"""
Settings controlling how documents are read from and written to files.
"""
import os
from typing import Mapping, Optional
import yaml
from dotenv import dotenv_values
from pydantic import BaseModel

ENV_PREFIX = "DFSYNTH_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class DocumentSettings(BaseModel):
    """
    Reading and writing options for instruction documents.
    """
    encoding: str = "utf-8"
    skip_undecodable: bool = True

    @classmethod
    def from_yaml(cls, path: str) -> "DocumentSettings":
        """
        Loads settings from a YAML mapping.

        :param path: Path to the YAML file.
        :return: The loaded settings; an empty file yields the defaults.
        """
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))

    @classmethod
    def from_env(cls, env_file: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None) -> "DocumentSettings":
        """
        Builds settings from ``DFSYNTH_*`` variables.

        Values from ``env_file`` are overridden by the process environment
        (or by ``environ`` when given).

        :param env_file: Optional dotenv file to read first.
        :param environ: Mapping used in place of ``os.environ``.
        :return: The resulting settings.
        """
        values = {}
        if env_file:
            values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        values.update(os.environ if environ is None else environ)

        fields = {}
        encoding = values.get(f"{ENV_PREFIX}ENCODING")
        if encoding:
            fields["encoding"] = encoding
        skip = values.get(f"{ENV_PREFIX}SKIP_UNDECODABLE")
        if skip is not None:
            fields["skip_undecodable"] = _to_bool(skip)
        return cls(**fields)


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")
