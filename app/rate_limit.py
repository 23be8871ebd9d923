"""
Rate limiting configuration using slowapi.

Three tiers:
  • strict  – 5/min  (send-otp – prevents SMS spam from one client)
  • auth    – 10/min (verify-otp – prevents brute-force)
  • default – 60/min (everything else)

The limiter keys on client IP. The per-phone cooldown and attempt ceiling
live in the OTP service; these limits sit in front of them.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["60/minute"])

# Named rate strings for use in @limiter.limit() decorators
STRICT = "5/minute"     # OTP request (SMS sending)
AUTH = "10/minute"       # OTP verification
DEFAULT = "60/minute"    # general API
