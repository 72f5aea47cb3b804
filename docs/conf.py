# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------
import re
from pathlib import Path

PROJECT_ROOT_DIR = Path(__file__).parent.parent.resolve()
VERSION_FILE_PATH = PROJECT_ROOT_DIR / "travelbook" / "__init__.py"


def get_version():
    with VERSION_FILE_PATH.open() as version_file:
        pattern = re.compile(r'__version__\s*=\s*[\'"]([^\'"]+)[\'"]')
        for line in version_file:
            match = pattern.match(line)
            if match:
                return match.group(1)
    raise RuntimeError("Unable to find version string.")


version = get_version()

project = "travelbook"
copyright = "2026, travelbook contributors"
author = "travelbook contributors"
release = version

# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",
    "autoapi.extension",
]
autoapi_dirs = ["../travelbook/"]
autoapi_generate_api_docs = True
templates_path = ["_templates"]
autoapi_ignore = ["*conf.py"]

autoapi_options = [
    "members",
    "undoc-members",
    "show-inheritance",
    "special-members=False",
    "private-members=False",
]

autodoc_default_options = {
    "members": True,
    "undoc-members": False,
    "private-members": False,
    "special-members": False,
    "exclude-members": "",
}

exclude_patterns = []

# -- Options for HTML output -------------------------------------------------

html_theme = "furo"
html_static_path = ["_static"]

nitpicky = True
