"""Loading of implementation classes from import strings."""

import importlib

from ..exceptions import ConfigurationError


class BackendLoader:
    """Loads backend classes from module paths."""

    @staticmethod
    def load_class(import_string: str, expected_type: type | None = None) -> type:
        """
        Load a class from a module path like 'module.path:ClassName'.

        Args:
            import_string: Module path in format 'module.path:ClassName'
            expected_type: Base class the loaded class must derive from

        Returns:
            The loaded class

        Raises:
            ConfigurationError: If the module or class cannot be loaded or
                has the wrong type
        """
        if ":" not in import_string:
            raise ConfigurationError(
                f"Invalid module path format: {import_string}. Expected 'module:class'"
            )

        module_name, class_name = import_string.rsplit(":", 1)
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigurationError(f"Could not import module '{module_name}': {e}") from e

        try:
            cls = getattr(module, class_name)
        except AttributeError as e:
            raise ConfigurationError(
                f"Class '{class_name}' not found in module '{module_name}'"
            ) from e

        if expected_type is not None and not (
            isinstance(cls, type) and issubclass(cls, expected_type)
        ):
            raise ConfigurationError(
                f"Class '{class_name}' is not a valid {expected_type.__name__} implementation"
            )

        return cls
