"""
Vaulty - secrets templating and drift audit.

Renders template files with secrets read from a Vault server and audits the
project for missing, stale or leaked outputs.
"""

__version__ = "0.1.0"
