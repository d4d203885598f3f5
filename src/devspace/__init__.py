"""devspace - local multi-repository workspace tooling.

Bootstraps a library-plus-applications .NET workspace from git and runs
uniform git operations across every repository in a folder.
"""

__version__ = "0.1.0"
