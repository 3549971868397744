"""Teamtwin — setup wizard for simulated software-development teams."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("teamtwin")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from teamtwin.composition import TeamComposition
from teamtwin.templates import WorkflowTemplateSet
from teamtwin.wizard import WizardController

__all__ = ["TeamComposition", "WizardController", "WorkflowTemplateSet", "__version__"]
