#!/usr/bin/env python3
"""
Script: send_webhook.py
Description: Send one signed webhook from the command line.

Reads WEBHOOK_SECRET / WEBHOOK_TARGET_URL and the retry settings from the
environment (or .env) unless overridden by flags.

Usage:
    python scripts/send_webhook.py order.created --data '{"order_id": "12345", "amount": 99.99}'
    python scripts/send_webhook.py ping --url http://localhost:4000/webhook --deadline 5

Exit status is 0 when the receiver accepted the webhook, 1 otherwise.
"""

import argparse
import json
import sys

from hookrelay.config.settings import get_settings
from hookrelay.delivery.client import DeliveryClient
from hookrelay.models.payload import DeliveryConfig


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Send a signed webhook")
    parser.add_argument("event", help="Event name, e.g. order.created")
    parser.add_argument("--data", default="{}", help="JSON event data (default: {})")
    parser.add_argument("--url", default=None, help="Receiver URL (default: WEBHOOK_TARGET_URL)")
    parser.add_argument("--deadline", type=float, default=None, help="Give up after this many seconds")
    args = parser.parse_args(argv)

    try:
        data = json.loads(args.data)
    except ValueError:
        parser.error("--data must be valid JSON")

    settings = get_settings()
    if args.url:
        settings = settings.model_copy(update={"webhook_target_url": args.url})

    client = DeliveryClient(DeliveryConfig.from_settings(settings))
    result = client.send_sync(args.event, data, deadline=args.deadline)

    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
