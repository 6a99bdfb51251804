#!/usr/bin/env python3
"""Point the Twilio number's SMS webhook at the current ngrok tunnel URL. Run after: ngrok http 8010"""
import os
import sys
from pathlib import Path

import httpx
from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parent.parent
NGROK_API = "http://127.0.0.1:4040/api/tunnels"
TWILIO_NUMBER_URL = (
    "https://api.twilio.com/2010-04-01/Accounts/{account_sid}"
    "/IncomingPhoneNumbers/{number_sid}.json"
)


def _ngrok_https_url() -> str | None:
    response = httpx.get(NGROK_API, timeout=2)
    response.raise_for_status()
    for tunnel in response.json().get("tunnels", []):
        if tunnel.get("proto") == "https" and tunnel.get("public_url"):
            return tunnel["public_url"].rstrip("/")
    return None


def _set_sms_url(account_sid: str, auth_token: str, number_sid: str, url: str) -> dict:
    response = httpx.post(
        TWILIO_NUMBER_URL.format(account_sid=account_sid, number_sid=number_sid),
        data={"SmsUrl": url, "SmsMethod": "POST"},
        auth=(account_sid, auth_token),
        timeout=10,
    )
    response.raise_for_status()
    return response.json()


def main() -> int:
    load_dotenv(REPO_ROOT / ".env")
    account_sid = os.environ.get("TWILIO_ACCOUNT_SID", "").strip()
    auth_token = os.environ.get("TWILIO_AUTH_TOKEN", "").strip()
    number_sid = os.environ.get("TWILIO_PHONE_NUMBER_SID", "").strip()
    if not (account_sid and auth_token and number_sid):
        print(
            "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER_SID must be set in .env",
            file=sys.stderr,
        )
        return 1

    try:
        public_url = _ngrok_https_url()
    except httpx.HTTPError as e:
        print(f"Ngrok not running or API unreachable: {e}", file=sys.stderr)
        print("Start ngrok first: ngrok http 8010", file=sys.stderr)
        return 1
    if not public_url:
        print("No HTTPS tunnel found in ngrok", file=sys.stderr)
        return 1

    webhook_url = f"{public_url}/sms"
    try:
        number = _set_sms_url(account_sid, auth_token, number_sid, webhook_url)
    except httpx.HTTPError as e:
        print(f"Failed to set webhook: {e}", file=sys.stderr)
        return 1
    if number.get("sms_url") != webhook_url:
        print(f"Twilio error: {number}", file=sys.stderr)
        return 1
    print(f"Webhook set to {webhook_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
