import functools
import inspect
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from fastmcp import FastMCP
from loguru import logger

from copysift.core.errors import TableFormatError
from copysift.core.models import Table
from copysift.io.loader import from_records, load_table, parse_table

PARAMETERS_ENV = "COPYSIFT_PARAMETERS"


class SiftServer(FastMCP):
    """
    Base class for copysift MCP servers.
    Extends FastMCP to support parameter loading and standardized tool registration.
    """

    def __init__(
        self,
        name: str,
        parameter_file: Optional[str] = None,
        **kwargs
    ):
        super().__init__(name=name, **kwargs)
        self.parameter_file = parameter_file
        self.parameters: Dict[str, Any] = {}

        # 1. Load from file or auto-detect in server directory
        if parameter_file:
            self.load_parameters(parameter_file)
        else:
            caller_file = inspect.stack()[1].filename
            auto_path = Path(caller_file).parent / "parameters.yml"
            if auto_path.exists():
                self.load_parameters(str(auto_path))

        # 2. Override with env params
        env_params_str = os.environ.get(PARAMETERS_ENV)
        if env_params_str:
            try:
                env_params = yaml.safe_load(env_params_str)
            except yaml.YAMLError as e:
                logger.error(f"Error loading {PARAMETERS_ENV}: {e}")
            else:
                if isinstance(env_params, dict):
                    self._merge_parameters(env_params)

    def load_parameters(self, file_path: str) -> Dict[str, Any]:
        """Load parameters from YAML file and merge them."""
        path = Path(file_path)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                file_params = yaml.safe_load(f) or {}
                self._merge_parameters(file_params)
            return self.parameters
        return {}

    def _merge_parameters(self, new_params: Dict[str, Any]):
        """Deep merge and dot-notation expansion for parameters."""
        for key, value in new_params.items():
            if "." in key:
                # "tool.param" -> {"tool": {"param": value}}
                parts = key.split(".")
                d = self.parameters
                for part in parts[:-1]:
                    if part not in d or not isinstance(d[part], dict):
                        d[part] = {}
                    d = d[part]

                last_part = parts[-1]
                if isinstance(value, dict) and isinstance(d.get(last_part), dict):
                    self._deep_update(d[last_part], value)
                else:
                    d[last_part] = value
            elif isinstance(value, dict) and isinstance(self.parameters.get(key), dict):
                self._deep_update(self.parameters[key], value)
            else:
                self.parameters[key] = value

    def _deep_update(self, target: Dict[str, Any], source: Dict[str, Any]):
        for k, v in source.items():
            if isinstance(v, dict) and isinstance(target.get(k), dict):
                self._deep_update(target[k], v)
            else:
                target[k] = v

    def tool_parameters(self, tool_name: str) -> Dict[str, Any]:
        params = self.parameters.get(tool_name, {})
        return params if isinstance(params, dict) else {}

    def tool(self, name: Optional[str] = None, description: Optional[str] = None):
        """
        Custom tool decorator that fills missing arguments from self.parameters.
        """
        def decorator(func: Callable):
            sig = inspect.signature(func)
            tn = name or func.__name__

            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                tool_params = self.tool_parameters(tn)
                bound_args = sig.bind_partial(*args, **kwargs)

                for p_name in sig.parameters:
                    if bound_args.arguments.get(p_name) is None and p_name in tool_params:
                        kwargs[p_name] = tool_params[p_name]

                if inspect.iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                return func(*args, **kwargs)

            # FastMCP builds the tool schema from the original signature
            wrapper.__signature__ = sig
            return FastMCP.tool(self, name=name, description=description)(wrapper)

        return decorator

    def get_table(self, data: Any, text_column: Optional[str] = None) -> Table:
        """
        Standardized way to get a Table from tool input.

        Accepts a list of records, a ``{"path": ...}`` reference, a file path,
        or raw pasted TSV/CSV text.
        """
        logger.debug(f"Server {self.name}.get_table input type: {type(data)}")

        if isinstance(data, Table):
            return data

        if isinstance(data, list):
            if data and not isinstance(data[0], dict):
                return from_records([{text_column or "text": item} for item in data])
            return from_records(data)

        if isinstance(data, dict):
            if "path" in data:
                return load_table(data["path"])
            return from_records([data])

        if isinstance(data, str):
            if os.path.exists(data):
                return load_table(data)
            return parse_table(data)

        raise TableFormatError(f"Server {self.name}: unrecognized data type {type(data).__name__}")

    def run(self, transport: str = "stdio"):
        """Run the server."""
        super().run(transport=transport, show_banner=False)
