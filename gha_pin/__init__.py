"""Pin GitHub Actions in workflow files to immutable commit SHAs."""

__version__ = "0.1.0"
