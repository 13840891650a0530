"""Sphinx configuration for litestar-workflow-forms documentation."""

from __future__ import annotations

from datetime import datetime

from litestar_workflow_forms import __version__

# -- Project information -----------------------------------------------------
project = "litestar-workflow-forms"
copyright = f"{datetime.now().year}, litestar-workflow-forms contributors"
author = "litestar-workflow-forms contributors"
release = __version__
version = __version__

# -- General configuration ---------------------------------------------------
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.intersphinx",
    "sphinx.ext.viewcode",
    "sphinx.ext.napoleon",
    "sphinx_copybutton",
    "sphinx_design",
    "sphinx_autodoc_typehints",
    "myst_parser",
]

exclude_patterns = ["_build"]
source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}
master_doc = "index"
language = "en"

# -- Extension configuration -------------------------------------------------

# Google-style docstrings only
napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_include_init_with_doc = True
napoleon_attr_annotations = True

autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "show-inheritance": True,
}
autodoc_typehints = "description"
autodoc_typehints_description_target = "documented"

typehints_fully_qualified = False

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "litestar": ("https://docs.litestar.dev/latest/", None),
}

myst_enable_extensions = ["colon_fence", "deflist"]

copybutton_prompt_text = r">>> |\.\.\. |\$ "
copybutton_prompt_is_regexp = True

# -- HTML output -------------------------------------------------------------
html_theme = "shibuya"
html_title = "litestar-workflow-forms"
html_theme_options = {
    "accent_color": "violet",
    "nav_links": [
        {"title": "Litestar", "url": "https://litestar.dev/"},
        {"title": "PyPI", "url": "https://pypi.org/project/litestar-workflow-forms/"},
    ],
}
