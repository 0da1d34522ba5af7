"""wingetctl - queue-driven package management on top of winget.

Resolves installed and available package versions from winget's text
output and serializes install, uninstall and upgrade operations.
"""

__version__ = "0.1.0"
