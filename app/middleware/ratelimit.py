import time
import asyncio
from collections import deque
from typing import Callable, Mapping
from fastapi import Request
from fastapi.responses import JSONResponse
from jose import jwt, JWTError

KeyFunc = Callable[[Request], str]

class RateLimitMiddleware:
    """Sliding-window limiter.

    ``rules`` maps an exact path to the function that picks its bucket key, so
    anonymous endpoints can be keyed by client address and authenticated ones
    by user.
    """

    def __init__(
        self,
        app,
        *,
        window_seconds: int,
        max_calls: int,
        rules: Mapping[str, KeyFunc],
    ):
        self.app = app
        self.window = window_seconds
        self.max_calls = max_calls
        self.rules = {path.rstrip("/"): key_func for path, key_func in rules.items()}

        self._buckets: dict[str, deque[float]] = {}
        self._lock = asyncio.Lock()
        self._last_sweep = 0.0

    def _sweep(self, cutoff: float):
        # buckets whose newest call is outside the window are empty
        for key in [k for k, q in self._buckets.items() if not q or q[-1] < cutoff]:
            del self._buckets[key]

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path", "").rstrip("/")
        key_func = self.rules.get(path)
        if key_func is None:
            return await self.app(scope, receive, send)

        key = f"{path}|{key_func(Request(scope, receive=receive))}"

        now = time.time()
        cutoff = now - self.window
        async with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(cutoff)
                self._last_sweep = now

            q = self._buckets.setdefault(key, deque())
            while q and q[0] < cutoff:
                q.popleft()

            if len(q) >= self.max_calls:
                retry_after = max(1, int(q[0] + self.window - now))
                resp = JSONResponse(
                    status_code=429,
                    content={
                        "detail": "请求过于频繁，请稍后再试",
                        "window_seconds": self.window,
                        "max_calls": self.max_calls,
                        "try_again_in": retry_after,
                    },
                    headers={"Retry-After": str(retry_after)},
                )
                return await resp(scope, receive, send)

            q.append(now)

        return await self.app(scope, receive, send)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)


def client_ip_key(req: Request) -> str:
    return f"ip:{req.client.host if req.client else 'unknown'}"


def make_user_key(secret_key: str, cookie_name: str) -> KeyFunc:
    """Key by the user id inside the session token, falling back to the client
    address. The user id survives re-login, the session id does not."""
    def _key(req: Request) -> str:
        auth = req.headers.get("authorization", "")
        if auth.lower().startswith("bearer "):
            token = auth.split(" ", 1)[1].strip()
        else:
            token = req.cookies.get(cookie_name)
        if token:
            try:
                sub = jwt.decode(token, secret_key, algorithms=["HS256"]).get("sub")
            except JWTError:
                sub = None
            if sub:
                return f"user:{sub}"
        return client_ip_key(req)
    return _key
