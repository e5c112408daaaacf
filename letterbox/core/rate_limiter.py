"""
Signup Rate Limiter
===================

In-memory sliding-window counter keyed by client. State lives in this process
only and is lost on restart; a multi-instance deployment needs a shared backend
behind the same check()/retry_after() interface.
"""

import hashlib
import logging
import math
import threading
import time

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 2        # max attempts per key
DEFAULT_WINDOW = 900     # per 15 minutes (seconds)


class RateLimiter:
    """Sliding-window attempt counter, safe to share between request threads."""

    def __init__(self, limit=DEFAULT_LIMIT, window=DEFAULT_WINDOW, clock=time.monotonic):
        if limit < 1:
            raise ValueError('limit must be at least 1')
        if window <= 0:
            raise ValueError('window must be positive')
        self.limit = limit
        self.window = window
        self._clock = clock
        self._attempts = {}  # {key_hash: [timestamp, ...]}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    @property
    def tracked_keys(self):
        """Number of keys currently held in memory"""
        with self._lock:
            return len(self._attempts)

    @staticmethod
    def _hash_key(key):
        return hashlib.sha256((key or '').encode()).hexdigest()[:16]

    def _prune(self, key_hash, now):
        recent = [t for t in self._attempts.get(key_hash, []) if now - t < self.window]
        if recent:
            self._attempts[key_hash] = recent
        else:
            self._attempts.pop(key_hash, None)
        return recent

    def _sweep(self, now):
        """Drop keys whose attempts have all left the window (once per window)"""
        if now - self._last_sweep < self.window:
            return
        self._last_sweep = now
        stale = [k for k, times in self._attempts.items() if now - times[-1] >= self.window]
        for key_hash in stale:
            del self._attempts[key_hash]
        if stale:
            logger.debug(f"Swept {len(stale)} idle rate limit keys")

    def check(self, key):
        """Record an attempt for key. Returns False if the key is over its quota."""
        key_hash = self._hash_key(key)
        with self._lock:
            now = self._clock()
            self._sweep(now)
            recent = self._prune(key_hash, now)
            if len(recent) >= self.limit:
                logger.debug(f"Rate limit reached for key {key_hash} ({len(recent)}/{self.limit})")
                return False
            self._attempts.setdefault(key_hash, []).append(now)
            return True

    def retry_after(self, key):
        """Seconds until key may attempt again (0 if it already can)."""
        key_hash = self._hash_key(key)
        with self._lock:
            now = self._clock()
            recent = self._prune(key_hash, now)
            if len(recent) < self.limit:
                return 0
            return max(math.ceil(self.window - (now - recent[0])), 1)

    def reset(self):
        """Forget every recorded attempt."""
        with self._lock:
            self._attempts.clear()
