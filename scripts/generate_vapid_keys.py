"""Utility script to generate the VAPID key pair used to sign push requests."""

from __future__ import annotations

import argparse

from backinstock.infrastructure.push import generate_key_pair


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for key generation."""

    parser = argparse.ArgumentParser(
        description="Generate VAPID keys for back-in-stock push notifications.",
    )
    parser.add_argument(
        "--subject",
        default="mailto:admin@example.com",
        help="Contact URI sent with every push request (default: mailto:admin@example.com)",
    )
    return parser.parse_args()


def main() -> None:
    """Print a fresh key pair as environment variable assignments."""

    args = parse_args()
    if not args.subject.startswith(("mailto:", "https:")):
        raise SystemExit("The subject must be a mailto: or https: URI.")

    public_key, private_key = generate_key_pair()
    print("Add these to your .env file or environment variables:\n")
    print(f"VAPID_PUBLIC_KEY={public_key}")
    print(f"VAPID_PRIVATE_KEY={private_key}")
    print(f"VAPID_SUBJECT={args.subject}")
    print("\nExpose VAPID_PUBLIC_KEY to the storefront; keep VAPID_PRIVATE_KEY on the server.")


if __name__ == "__main__":
    main()
