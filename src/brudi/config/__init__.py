# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from .loader import load_config, merge_configs, render_config, resolve_config_paths
from .locations import CONFIG_HOME_ENV, default_config_path, user_config_home
from .populate import config_key, ensure_env, populate, validate
from .tree import DO_STDIN_BACKUP_KEY, ConfigTree, normalize_key

__all__ = [
    "CONFIG_HOME_ENV",
    "DO_STDIN_BACKUP_KEY",
    "ConfigTree",
    "config_key",
    "default_config_path",
    "ensure_env",
    "load_config",
    "merge_configs",
    "normalize_key",
    "populate",
    "render_config",
    "resolve_config_paths",
    "user_config_home",
    "validate",
]
