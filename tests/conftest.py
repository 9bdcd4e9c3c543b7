"""
Pytest configuration for local imports.
"""

# Standard Library
import os
import sys

#============================================


def _ensure_paths() -> None:
	"""
	Ensure the repository root and the tests directory are on sys.path.
	"""
	tests_dir = os.path.abspath(os.path.dirname(__file__))
	repo_root = os.path.abspath(os.path.join(tests_dir, ".."))
	for path in (repo_root, tests_dir):
		if path not in sys.path:
			sys.path.insert(0, path)


_ensure_paths()
