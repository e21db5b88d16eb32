"""API authentication and rate limiting"""

import time
import secrets
from typing import Dict
from fastapi import HTTPException, Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from collections import defaultdict, deque


class TokenAuth:
    """Bearer token shared with the local front end"""

    def __init__(self, token: str):
        self.token = token if token else secrets.token_urlsafe(32)

    def verify_token(self, credentials: HTTPAuthorizationCredentials) -> bool:
        return secrets.compare_digest(credentials.credentials, self.token)


class RateLimiter:
    """Sliding-window request counter per client"""

    def __init__(self, max_requests: int = 60, window_seconds: int = 1):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clients: Dict[str, deque] = defaultdict(deque)

    def is_allowed(self, client_ip: str) -> bool:
        now = time.time()
        client_requests = self.clients[client_ip]

        while client_requests and client_requests[0] < now - self.window_seconds:
            client_requests.popleft()

        if len(client_requests) >= self.max_requests:
            return False

        client_requests.append(now)
        return True


def create_auth_dependency(token_auth: TokenAuth):
    """Create authentication dependency"""
    security = HTTPBearer()

    async def verify_auth(credentials: HTTPAuthorizationCredentials = Depends(security)):
        if not token_auth.verify_token(credentials):
            raise HTTPException(
                status_code=401,
                detail="Invalid authentication token",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return credentials

    return verify_auth


def create_rate_limit_dependency(rate_limiter: RateLimiter):
    """Create rate limiting dependency"""

    async def check_rate_limit(request: Request):
        client_ip = request.client.host if request.client else "unknown"

        # Always allow localhost
        if client_ip in ('127.0.0.1', '::1', 'localhost'):
            return

        if not rate_limiter.is_allowed(client_ip):
            raise HTTPException(
                status_code=429,
                detail="Rate limit exceeded",
                headers={"Retry-After": str(rate_limiter.window_seconds)},
            )

    return check_rate_limit
