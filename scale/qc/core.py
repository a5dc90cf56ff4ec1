"""
The scale.qc.core module contains helper classes that could be used by any
component of scale.qc. Here are some principles for the core.

- The core should only contain classes.
- Each class should have doctests demonstrating the happy path, i.e. not errors
  or edge cases.
- The unit tests for a core class are at `testing/core_ClassName_test.py` and should
  address edge cases and other behavior.

.. code::

   import scale.qc.core

"""
from pathlib import Path
import os
import jinja2

__all__ = ["TemplateManager"]


class TemplateManager:
    """Manage jinja templates.

    Finds all jinja templates in provided paths, the SCALE_QC_TEMPLATES_PATH
    environment variable and the local "templates" directory inside scale.qc.

    Paths are searched in order starting with those provided to init, then
    SCALE_QC_TEMPLATES_PATH then the local one, so a user template shadows a
    shipped template of the same name.

    Templates MUST have a double extension like repro.jt.py with *.jt.* to be
    recognized.

    Args:
        paths list[str]: additional user paths to search
        include_env: whether to search the environment and local paths

    Attributes:
        paths list[pathlib.Path]: list of paths that are searched

    Examples:

    The shipped templates are always available.

    >>> tm = TemplateManager()
    >>> 'repro.jt.py' in tm.names()
    True

    Text can be expanded directly.

    >>> TemplateManager.expand_text("Hello {{noun}}.", {"noun": "world"})
    'Hello world.'

    """

    def __init__(self, paths=[], include_env=True):
        self.paths = [Path(p).resolve() for p in paths]
        if include_env:
            for p in os.environ.get("SCALE_QC_TEMPLATES_PATH", "").split(os.pathsep):
                if p:
                    self.paths.append(Path(p).resolve())
            self.paths.append((Path(__file__).parent / "templates").resolve())

        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader([str(p) for p in self.paths]),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
        )

    def names(self):
        """Return the sorted names of all the templates.

        Returns:
            list[str]: names of templates relative to their search path

        """
        return sorted(
            set(self._env.list_templates(filter_func=lambda n: ".jt." in Path(n).name))
        )

    def path(self, name: str):
        """Return the file backing a template.

        Args:
            name: template name

        Returns:
            pathlib.Path: full path to the first template found with that name
        """
        for p in self.paths:
            if (p / name).exists():
                return p / name
        raise ValueError(f"Template {name} not found in any of {self.paths}")

    def expand(self, name: str, data: dict):
        """Expand a template by name using provided data.

        Args:
            name: template name
            data: dictionary with all the data

        Raises:
            ValueError: if the template does not exist or uses undefined data

        Returns:
            str: text from the expanded template and data
        """
        try:
            template = self._env.get_template(name)
        except jinja2.TemplateNotFound:
            raise ValueError(f"Template {name} not found in any of {self.paths}")
        return TemplateManager._render(template, data)

    @staticmethod
    def _render(template, data):
        try:
            return template.render(data)
        except jinja2.exceptions.UndefinedError as ve:
            raise ValueError(
                "Undefined variable reported (most likely template has a variable that is undefined in the data). Error from template expansion: "
                + str(ve)
            )

    @staticmethod
    def expand_text(text: str, data: dict):
        """Returns the expanded text with data.

        Args:
            text: text containing jinja directives
            data: dictionary containing data

        Raises:
            ValueError: if jinja raises an undefined variable error

        Returns:
            str: expanded text
        """
        j2t = jinja2.Template(
            text, undefined=jinja2.StrictUndefined, keep_trailing_newline=True
        )
        return TemplateManager._render(j2t, data)
