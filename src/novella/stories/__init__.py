"""Example stories shipped with the package."""
