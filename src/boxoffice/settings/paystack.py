from decouple import config

from .base import FRONTEND_BASE_URL

PAYSTACK_BASE_URL = config("PAYSTACK_BASE_URL", default="https://api.paystack.co")
PAYSTACK_SECRET_KEY = config("PAYSTACK_SECRET_KEY", default="sk_test_change_me")
PAYSTACK_CALLBACK_URL = config("PAYSTACK_CALLBACK_URL", default=f"{FRONTEND_BASE_URL}/payment-success")

TICKET_CHECK_IN_URL = config("TICKET_CHECK_IN_URL", default=f"{FRONTEND_BASE_URL}/ticket")
TICKET_CODE_MAX_ATTEMPTS = config("TICKET_CODE_MAX_ATTEMPTS", default=10, cast=int)
PAYSTACK_TIMEOUT_SECONDS = config("PAYSTACK_TIMEOUT_SECONDS", default=30.0, cast=float)
