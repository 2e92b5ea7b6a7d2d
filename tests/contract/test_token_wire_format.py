"""Contract tests for the compact token wire format.

Any party holding the shared secret must be able to read tokens with a plain
JWS/JWT library, and tokens built by such a library must verify here. These
tests pin:

- Three base64url segments joined by ``.`` with no padding
- Header: ``{"alg": "HS256", "typ": "JWT"}``
- Claims: item_code, price, amount, exp (integer NumericDate), jti
- Signature: HMAC-SHA256 over ``header.claims``
"""

import hashlib
import hmac
import json

from jose import jwt

from tests.helpers.clock import ISSUED_AT
from tests.helpers.token_factory import b64url_decode, b64url_encode, create_token

_EXP_2024 = 1704070800  # 2024-01-01T01:00:00Z


class TestSegments:
    def test_three_unpadded_base64url_segments(self, issuer, payload):
        token = issuer.issue(payload).token
        segments = token.split(".")
        assert len(segments) == 3
        for segment in segments:
            assert "=" not in segment
            assert "+" not in segment and "/" not in segment

    def test_header(self, issuer, payload):
        header = json.loads(b64url_decode(issuer.issue(payload).token.split(".")[0]))
        assert header == {"alg": "HS256", "typ": "JWT"}

    def test_claims(self, issuer, payload):
        claims = json.loads(b64url_decode(issuer.issue(payload).token.split(".")[1]))
        assert claims["item_code"] == "SKU-1"
        assert claims["price"] == 500
        assert claims["amount"] == 2
        assert claims["exp"] == _EXP_2024
        assert isinstance(claims["jti"], str)

    def test_signature_is_hmac_sha256(self, issuer, payload, secret):
        header, body, signature = issuer.issue(payload).token.split(".")
        expected = hmac.new(secret.encode(), f"{header}.{body}".encode(), hashlib.sha256).digest()
        assert b64url_encode(expected) == signature


class TestInterop:
    def test_library_decodes_issued_token(self, issuer, payload, secret):
        issued = issuer.issue(payload)
        decoded = jwt.decode(
            issued.token, secret, algorithms=["HS256"], options={"verify_exp": False}
        )
        assert decoded == issued.claims.to_jwt_claims()

    def test_library_token_verifies(self, verifier):
        token = create_token(exp=_EXP_2024, jti="external-1")
        claims = verifier.verify(token)
        assert claims.standard.jti == "external-1"
        assert claims.standard.exp.timestamp() == _EXP_2024

    def test_hand_assembled_token_verifies(self, verifier, secret):
        header = b64url_encode(b'{"alg":"HS256"}')
        body = b64url_encode(
            json.dumps(
                {"item_code": "SKU-9", "price": 1, "amount": 1, "exp": int(ISSUED_AT.timestamp()) + 60}
            ).encode()
        )
        sig = hmac.new(secret.encode(), f"{header}.{body}".encode(), hashlib.sha256).digest()
        claims = verifier.verify(f"{header}.{body}.{b64url_encode(sig)}")
        assert claims.item.item_code == "SKU-9"
