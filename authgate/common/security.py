# authgate/common/security.py
import hmac, hashlib, re, secrets

SIG_HEX_LEN = 32
NONCE_BYTES = 16

HEX32_RE = re.compile(r"^[0-9a-f]{32}$")
DIGITS_RE = re.compile(r"^[0-9]+$")

def sign(data: str, secret: str) -> str:
    """
    HMAC-SHA256 over data, truncated to 128 bits, lowercase hex.
    """
    digest = hmac.new(secret.encode(), data.encode(), hashlib.sha256).hexdigest()
    return digest[:SIG_HEX_LEN]

def new_nonce() -> str:
    return secrets.token_hex(NONCE_BYTES)

def constant_time_equal(a: bytes, b: bytes) -> bool:
    return hmac.compare_digest(a, b)

def fixed_digest(value: str) -> bytes:
    # 32 bytes whatever the input length; raises UnicodeEncodeError on lone surrogates
    return hashlib.sha256(value.encode("utf-8")).digest()

def is_hex32(s: str) -> bool:
    return HEX32_RE.fullmatch(s) is not None

def is_digits(s: str) -> bool:
    return DIGITS_RE.fullmatch(s) is not None
