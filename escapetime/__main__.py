"""
Allow running the package directly: python -m escapetime
"""
from .app import run

run()
