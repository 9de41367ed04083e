"""relpub: rewrite the manifest version to the release tag and publish."""

__version__ = "0.1.0"
