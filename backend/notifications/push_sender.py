"""
Web Push delivery for cycle notifications.

Sends the JSON payload envelope to one browser push subscription, signed with
the VAPID key pair from the environment.
"""

from typing import Any

from pywebpush import WebPushException, webpush

from models import PushPayload, Subscriber

PUSH_TIMEOUT_SECONDS = 10
PUSH_TTL_SECONDS = 24 * 60 * 60


def send_push(
    subscriber: Subscriber,
    payload: PushPayload,
    vapid_private_key: str,
    vapid_subject: str,
    timeout: float = PUSH_TIMEOUT_SECONDS,
) -> dict[str, Any]:
    """
    Deliver one push message.

    Args:
        subscriber: Destination subscription (endpoint + keys)
        payload: Envelope with title, body, id, type, sentAt, url
        vapid_private_key: VAPID private key
        vapid_subject: VAPID "sub" claim (mailto: or https: URL)
        timeout: Request timeout in seconds

    Returns:
        Dictionary with 'success' (bool), 'status_code' (int | None) and
        'error' (str if failed)
    """
    try:
        response = webpush(
            subscription_info=subscriber.subscription_info(),
            data=payload.to_json(),
            vapid_private_key=vapid_private_key,
            vapid_claims={"sub": vapid_subject},
            content_encoding="aes128gcm",
            ttl=PUSH_TTL_SECONDS,
            timeout=timeout,
        )
        return {
            "success": True,
            "status_code": getattr(response, "status_code", None),
        }

    except WebPushException as e:
        status_code = e.response.status_code if e.response is not None else None
        response_body = e.response.text if e.response is not None else None
        return {
            "success": False,
            "status_code": status_code,
            "error": f"{e.message}{f' ({response_body})' if response_body else ''}",
        }

    except Exception as e:
        return {
            "success": False,
            "status_code": None,
            "error": str(e),
        }
