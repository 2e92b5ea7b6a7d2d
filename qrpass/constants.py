"""Shared constants used across the application."""

# Application claim names carried in every issued token
CLAIM_ITEM_CODE = "item_code"
CLAIM_PRICE = "price"
CLAIM_AMOUNT = "amount"
APPLICATION_CLAIMS = (CLAIM_ITEM_CODE, CLAIM_PRICE, CLAIM_AMOUNT)

# Registered JWT claim names (RFC 7519 section 4.1)
CLAIM_EXPIRATION = "exp"
CLAIM_JWT_ID = "jti"

# Payload domain bounds
MAX_ITEM_CODE_LENGTH = 128
MAX_PRICE = 1_000_000_000
MAX_AMOUNT = 10_000

BEARER_PREFIX = "Bearer "
