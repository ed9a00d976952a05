import os
import sys
from datetime import datetime

sys.path.insert(0, os.path.abspath("../../src"))

project = "PySATL Sampling"
copyright = f"{datetime.now().year}, Leonid Elkin, Mikhail Mikhailov"
author = "Leonid Elkin, Mikhail Mikhailov"
release = "0.0.1a0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx.ext.intersphinx",
    "sphinx.ext.mathjax",
    "sphinx_rtd_theme",
    "sphinx_autodoc_typehints",
]
templates_path = ["_templates"]
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

# -- Napoleon (NumPy style docstrings) --
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_include_init_with_doc = True
napoleon_include_private_with_doc = False
napoleon_use_param = True
napoleon_use_rtype = True
napoleon_preprocess_types = True

# -- Autodocumentation settings --
autodoc_default_options = {
    "member-order": "bysource",
    "undoc-members": True,
    "exclude-members": "__weakref__",
    "show-inheritance": True,
}

autodoc_typehints = "description"
autodoc_typehints_format = "short"

# -- Intersphinx --
intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable/", None),
    "scipy": ("https://docs.scipy.org/doc/scipy/", None),
}

# -- HTML --
html_theme = "sphinx_rtd_theme"
html_theme_options = {
    "collapse_navigation": False,
    "navigation_depth": 3,
}

# forward references used in annotations
autodoc_type_aliases = {
    "Kind": "pysatl_sampling.types.Kind",
    "NumericArray": "pysatl_sampling.types.NumericArray",
    "BoolArray": "pysatl_sampling.types.BoolArray",
    "VariableName": "pysatl_sampling.types.VariableName",
    "Parameter": "pysatl_sampling.density.parameter.Parameter",
    "DensityFunction": "pysatl_sampling.density.function.DensityFunction",
    "IntegrationRequest": "pysatl_sampling.integration.IntegrationRequest",
    "SamplerConfig": "pysatl_sampling.sampling.config.SamplerConfig",
    "SampleBuffer": "pysatl_sampling.sampling.sample.SampleBuffer",
    "DensitySampler": "pysatl_sampling.sampling.api.DensitySampler",
}

nitpicky = False
