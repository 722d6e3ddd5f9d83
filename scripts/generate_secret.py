#!/usr/bin/env python3
"""
Script: generate_secret.py
Description: Generate a shared webhook signing secret.

Prints a random secret in the 'whsec_<base64>' format accepted by both
the sender and the receiver. Set it as WEBHOOK_SECRET on both sides.

Usage:
    python scripts/generate_secret.py [--bytes 32]

Security Note:
    The secret is printed once and not stored anywhere. Keep it out of logs.
"""

import argparse
import base64
import secrets


def generate_secret(num_bytes: int = 32) -> str:
    """
    Generate a random signing secret.

    Args:
        num_bytes: Key length in bytes (minimum 24)

    Returns:
        Secret in format: whsec_{base64_encoded_random_bytes}
    """
    if num_bytes < 24:
        raise ValueError("num_bytes must be at least 24")
    return "whsec_" + base64.b64encode(secrets.token_bytes(num_bytes)).decode("ascii")


def main():
    parser = argparse.ArgumentParser(description="Generate a webhook signing secret")
    parser.add_argument("--bytes", type=int, default=32, help="Key length in bytes (default: 32)")
    args = parser.parse_args()

    print(generate_secret(args.bytes))


if __name__ == "__main__":
    main()
