"""Git operations used while releasing.

Usage:
    from shipcrate.git import Repository

    repo = Repository(Path("."))
    repo.checkout("master")
"""

from shipcrate.git.repository import GitError, Repository

__all__ = ["GitError", "Repository"]
