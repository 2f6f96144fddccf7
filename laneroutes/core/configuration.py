# Copyright (C) 2021. Huawei Technologies Co., Ltd. All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NON-INFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.

import ast
import configparser
import functools
import logging
import os
import pathlib
from typing import Any, Callable, Dict, Optional, Tuple, Union

_UNSET = object()

logger = logging.getLogger(__name__)


def _passthrough_cast(val):
    return val


def _convert_truthy(t: str) -> bool:
    """Convert value to a boolean. This should only allow ([Tt]rue)|([Ff]alse)|[\\d].

    This is necessary because bool("false") == True.
    Args:
        t (str): The value to convert.

    Returns:
        bool: The truth value.
    """
    # ast literal_eval will parse python literals int, str, e.t.c.
    out = ast.literal_eval(t.strip().title())
    assert isinstance(out, (bool, int))
    return bool(out)


_config_defaults: Dict[Tuple[str, str], Any] = {
    ("core", "debug"): False,
    ("routes", "step_distance"): 2.0,
    ("routes", "trigger_height"): 1.0,
    ("routes", "end_margin"): 0.1,
    ("routes", "trigger_extent"): "0.7,0.7,0.5",
}


class Config:
    """A configuration utility that handles configuration from file and environment variable.

    Args:
        config_file (Union[str, pathlib.Path, None]): The path to the configuration file.
            If `None`, only environment variables and built-in defaults are consulted.
        environment_prefix (str, optional): The prefix given to the environment variables. Defaults to "".

    Raises:
        FileNotFoundError: If the configuration file cannot be found at the given file location.
    """

    def __init__(
        self,
        config_file: Optional[Union[str, pathlib.Path]],
        environment_prefix: str = "",
    ) -> None:
        self._config = configparser.ConfigParser(
            interpolation=configparser.ExtendedInterpolation()
        )
        self._environment_prefix = environment_prefix.upper()
        self._environment_variable_format_string = (
            self._environment_prefix + "_{}_{}" if self._environment_prefix else "{}_{}"
        )

        if config_file is None:
            logger.info(msg="No engine configuration file, using defaults")
            return

        if isinstance(config_file, str):
            config_file = pathlib.Path(config_file)
        config_file = config_file.resolve()
        if not config_file.is_file():
            raise FileNotFoundError(f"Configuration file not found at {config_file}")

        self._config.read(str(config_file.absolute()))
        logger.info(msg=f"Using engine configuration from: {config_file.absolute()}")

    @property
    def environment_prefix(self):
        """The prefix that environment variables configuration is provided with."""
        return self._environment_prefix

    @functools.lru_cache(maxsize=100)
    def get_setting(
        self,
        section: str,
        option: str,
        default: Any = _UNSET,
        cast: Callable[[Any], Any] = _passthrough_cast,
    ) -> Optional[Any]:
        """Finds the given configuration checking the following in order: environment variable,
        configuration file, and default.

        Args:
            section (str): The grouping that the configuration option is under.
            option (str): The specific configuration option.
            default (Any, optional): The default if the requested configuration option is not found. Defaults to _UNSET.
            cast (Callable, optional): A function that takes a string and returns the desired type. Defaults to passthrough.

        Returns:
            Optional[str]: The value of the configuration.

        Raises:
            KeyError: If the configuration option is not found anywhere and no default is provided.
        """
        env_variable = self._environment_variable_format_string.format(
            section.upper(), option.upper()
        )
        setting = os.getenv(env_variable)
        if cast is bool:
            # This is necessary because bool("false") == True.
            cast = _convert_truthy
        if setting is not None:
            return cast(setting)
        try:
            value = self._config[section][option]
        except KeyError as exc:
            if default is not _UNSET:
                return default
            value = _config_defaults.get((section, option), _UNSET)
            if value is _UNSET:
                raise KeyError(
                    f"Setting `${env_variable}` cannot be found in environment or configuration."
                ) from exc
            if isinstance(value, str):
                return cast(value)
            return value
        return cast(value)

    def __call__(
        self,
        section: str,
        option: str,
        /,
        default: Any = _UNSET,
        cast: Callable[[str], Any] = str,
    ) -> Optional[Any]:
        return self.get_setting(section, option, default, cast)

    def __repr__(self) -> str:
        return f"Config(config_file={ {k: dict(v.items()) for k, v in self._config.items(raw=True)} }, environment_prefix={self._environment_prefix})"
