"""Generation of response headers."""

from __future__ import annotations

import threading

from xline.rpc import ResponseHeader


class HeaderGenerator:
    """Builds response headers from the node identity, term and revision."""

    def __init__(self, cluster_id: int, member_id: int) -> None:
        self.cluster_id = cluster_id
        self.member_id = member_id
        self._lock = threading.Lock()
        self._term = 0
        self._revision = 1

    def gen_header(self) -> ResponseHeader:
        """Return a header carrying the current term and revision."""
        with self._lock:
            term, revision = self._term, self._revision
        return ResponseHeader(
            cluster_id=self.cluster_id,
            member_id=self.member_id,
            raft_term=term,
            revision=revision,
        )

    def gen_header_without_revision(self) -> ResponseHeader:
        """Return a header whose revision is unknown (-1), used by the fast path."""
        with self._lock:
            term = self._term
        return ResponseHeader(
            cluster_id=self.cluster_id,
            member_id=self.member_id,
            raft_term=term,
            revision=-1,
        )

    def set_term(self, term: int) -> None:
        """Record the current consensus term."""
        with self._lock:
            self._term = term

    def set_revision(self, revision: int) -> None:
        """Record the current store revision."""
        with self._lock:
            self._revision = revision

    def revision(self) -> int:
        """Return the current store revision."""
        with self._lock:
            return self._revision