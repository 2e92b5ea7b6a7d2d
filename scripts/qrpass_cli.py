"""Issue or verify QR pass tokens from the command line.

Uses the same settings (environment / ``.env``) as the HTTP service::

    python scripts/qrpass_cli.py issue --item-code SKU-1 --price 500 --amount 2
    python scripts/qrpass_cli.py issue --item-code SKU-1 --price 500 --amount 2 --qr pass.png
    python scripts/qrpass_cli.py verify <token>
"""
import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from qrpass.auth.exceptions import PayloadValidationError, TokenSigningError, TokenVerificationError
from qrpass.config import get_settings
from qrpass.dependencies import TokenComponents
from qrpass.schemas.token import ItemPayload
from qrpass.services.qr_service import QRCodeEncodingError


def cmd_issue(args: argparse.Namespace, components: TokenComponents) -> int:
    try:
        payload = ItemPayload(item_code=args.item_code, price=args.price, amount=args.amount)
        issued = components.issuer.issue(payload)
    except ValidationError as exc:
        print(f"Failed to bind payload: {exc}", file=sys.stderr)
        return 2
    except PayloadValidationError as exc:
        print(f"Invalid payload: {json.dumps(exc.errors)}", file=sys.stderr)
        return 2
    except TokenSigningError as exc:
        print(f"Signing failed: {exc}", file=sys.stderr)
        return 1

    if args.qr:
        try:
            png = components.encoder.encode(issued.token)
        except QRCodeEncodingError as exc:
            print(f"QR rendering failed: {exc}", file=sys.stderr)
            return 1
        Path(args.qr).write_bytes(png)
        print(f"Wrote {len(png)} bytes to {args.qr} (jti={issued.jti})")
    else:
        print(issued.token)
    return 0


def cmd_verify(args: argparse.Namespace, components: TokenComponents) -> int:
    try:
        claims = components.verifier.verify(args.token)
    except TokenVerificationError as exc:
        print(f"Rejected ({exc.reason.value}): {exc.message}", file=sys.stderr)
        return 1

    print(json.dumps(claims.model_dump(mode="json"), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue or verify QR pass tokens")
    sub = parser.add_subparsers(dest="command", required=True)

    issue = sub.add_parser("issue", help="Sign an item payload")
    issue.add_argument("--item-code", required=True)
    issue.add_argument("--price", type=int, required=True)
    issue.add_argument("--amount", type=int, required=True)
    issue.add_argument("--qr", metavar="PATH", help="Write a PNG QR code instead of printing the token")
    issue.set_defaults(handler=cmd_issue)

    verify = sub.add_parser("verify", help="Verify a token and print its claims")
    verify.add_argument("token")
    verify.set_defaults(handler=cmd_verify)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    components = TokenComponents.from_settings(get_settings())
    return args.handler(args, components)


if __name__ == "__main__":
    sys.exit(main())
