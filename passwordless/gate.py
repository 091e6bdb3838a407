"""Sign-in callback: the single point where deployers can veto a sign-in."""

from typing import Any, Callable

from passwordless.types import SignInContext, SignInDecision

SignInCallback = Callable[[SignInContext], Any]


def allow_all(context: SignInContext) -> bool:
    """Default callback when none is configured."""
    return True


def authorize(callback: SignInCallback, context: SignInContext) -> SignInDecision:
    """Run the sign-in callback and interpret its return value.

    - True: allowed
    - str or a dict with a "redirect" key: not allowed, send the user to
      that URL
    - anything else: allowed when truthy, so {"ok": True} or 1 allow and
      None, 0 or {} deny

    Exceptions raised by the callback are not caught here; the calling flow
    treats them as a failure of the whole request, not as a veto.
    """
    result = callback(context)

    if result is True:
        return SignInDecision(allowed=True)

    if isinstance(result, str):
        return SignInDecision(allowed=False, redirect=result or None)

    if isinstance(result, dict) and "redirect" in result:
        redirect = result.get("redirect")
        return SignInDecision(allowed=False, redirect=str(redirect) if redirect else None)

    return SignInDecision(allowed=bool(result))
