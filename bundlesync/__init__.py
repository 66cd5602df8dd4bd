"""bundlesync — install remotely-stored bundles that changed since the last run."""

__version__ = "0.1.0"
