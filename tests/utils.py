"""Token helpers shared by the test modules."""
import time

import jwt

TEST_KEY = "virtualcv-test-signing-key-0123456789abcdef"
TEST_ISSUER = "https://accounts.google.com"
TEST_AUDIENCE = "test-client-id"
ALLOWED_EMAIL = "allowed@example.com"


def mint_token(key=TEST_KEY, **claims):
    """Sign a token with sensible defaults for issuer, audience and expiry."""
    payload = {
        "iss": TEST_ISSUER,
        "aud": TEST_AUDIENCE,
        "exp": int(time.time()) + 300,
    }
    payload.update(claims)
    return jwt.encode(payload, key, algorithm="HS256")


def bearer(token):
    return {"HTTP_AUTHORIZATION": f"Bearer {token}"}
