#!/usr/bin/env python3
"""
Dynamic Function Loader for MapReduce User Functions
Loads a user job file containing map_function, reduce_function and an
optional combiner_function
"""

import importlib.util
import sys
import os


class FunctionLoader:
    """Dynamically loads user-provided map/reduce functions from Python files"""

    def __init__(self, map_reduce_file: str):
        """
        Initialize the function loader

        Args:
            map_reduce_file: Path to user's Python file containing map/reduce functions
        """
        self.map_reduce_file = map_reduce_file
        self.module = None

    def load_module(self):
        """
        Load the user module, once

        Returns:
            The loaded module object

        Raises:
            FileNotFoundError: If the map/reduce file doesn't exist
            ImportError: If the file cannot be loaded as a Python module
        """
        if self.module is not None:
            return self.module

        if not os.path.exists(self.map_reduce_file):
            raise FileNotFoundError(f"Map/Reduce file not found: {self.map_reduce_file}")

        module_name = "user_job_" + os.path.splitext(os.path.basename(self.map_reduce_file))[0]
        spec = importlib.util.spec_from_file_location(module_name, self.map_reduce_file)
        if spec is None or spec.loader is None:
            raise ImportError(f"Failed to load job file: {self.map_reduce_file}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        self.module = module
        return module

    def _get_callable(self, name: str):
        module = self.load_module()
        func = getattr(module, name, None)
        if func is None:
            raise AttributeError(f"Module must define '{name}'")
        if not callable(func):
            raise AttributeError(f"'{name}' in {self.map_reduce_file} is not callable")
        return func

    def get_map_function(self):
        """
        Get map function from loaded module

        Returns:
            map_function(filename, contents) -> iterable of (key, value)

        Raises:
            AttributeError: If module doesn't define 'map_function'
        """
        return self._get_callable('map_function')

    def get_reduce_function(self):
        """
        Get reduce function from loaded module

        Returns:
            reduce_function(key, values) -> str

        Raises:
            AttributeError: If module doesn't define 'reduce_function'
        """
        return self._get_callable('reduce_function')

    def get_combiner_function(self):
        """
        Get combiner function from loaded module

        Returns:
            The combiner_function callable, or reduce_function as default, or None
        """
        module = self.load_module()

        if hasattr(module, 'combiner_function'):
            return self._get_callable('combiner_function')
        # Default combiner is reduce function
        elif hasattr(module, 'reduce_function'):
            return self._get_callable('reduce_function')
        return None
