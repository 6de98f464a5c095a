"""
PHPCBF Runner -- run PHP_CodeSniffer's phpcbf fixer on in-memory buffers.

A buffer is staged to a temp file, phpcbf rewrites it in place, the exit
code is classified and the fixed text is returned.  The nearest
``phpcs.xml`` / ``ruleset.xml`` above the source file can be used as the
standard.
"""

__version__ = "1.0.0"
__author__ = "PHPCBF Runner Team"

from phpcbf_runner.config_search import ConfigResolver
from phpcbf_runner.errors import ErrorKind, FormatError
from phpcbf_runner.options import FormatOptions, load_settings
from phpcbf_runner.orchestrator import FormatOrchestrator
from phpcbf_runner.results import InvocationResult, Outcome
from phpcbf_runner.service import PhpcbfFormatter

__all__ = [
    "ConfigResolver",
    "ErrorKind",
    "FormatError",
    "FormatOptions",
    "FormatOrchestrator",
    "InvocationResult",
    "Outcome",
    "PhpcbfFormatter",
    "load_settings",
]
