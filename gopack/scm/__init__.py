"""SCM fetchers used to retrieve dependency sources."""

from gopack.scm.base import BaseFetcher
from gopack.scm.git import GitFetcher
from gopack.scm.hg import HgFetcher

FETCHERS = {
    GitFetcher.NAME: GitFetcher,
    HgFetcher.NAME: HgFetcher,
}

__all__ = ["FETCHERS", "BaseFetcher", "GitFetcher", "HgFetcher"]
