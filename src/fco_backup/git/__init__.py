from .repository import FETCHED_AT_PREFIX, GitRepository, run_git

__all__ = ["FETCHED_AT_PREFIX", "GitRepository", "run_git"]
